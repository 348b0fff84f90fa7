"""Booking model.

A booking reserves a court (optionally with a coach and rented equipment)
for a user over a half-open [start_time, end_time) interval. Bookings are
never deleted: cancellation is a status flip.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from arena.models.base import Base, JSONType, TimestampMixin, UTCDateTime

if TYPE_CHECKING:
    from arena.models.catalog import Coach, Court
    from arena.models.member import User


class BookingStatus(enum.StrEnum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    court_id: Mapped[int] = mapped_column(ForeignKey("courts.id"), nullable=False)
    coach_id: Mapped[int | None] = mapped_column(ForeignKey("coaches.id"))

    # When
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    # Status
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, name="booking_status", values_callable=lambda e: [x.value for x in e]),
        default=BookingStatus.CONFIRMED,
        nullable=False,
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(UTCDateTime)

    # What was rented: [{"equipment_id": 1, "quantity": 2}]
    equipment_lines: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    # Price snapshot taken at creation, never recomputed
    pricing_breakdown: Mapped[dict] = mapped_column(JSONType, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    notes: Mapped[str | None] = mapped_column(Text)

    # Relationships
    court: Mapped["Court"] = relationship(lazy="raise")
    coach: Mapped["Coach | None"] = relationship(lazy="raise")
    user: Mapped["User"] = relationship(lazy="raise")

    __table_args__ = (
        Index("ix_bookings_court_interval", "court_id", "start_time", "end_time"),
        Index("ix_bookings_coach_interval", "coach_id", "start_time", "end_time"),
        Index("ix_bookings_user", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.start_time}-{self.end_time} court={self.court_id} {self.status}>"
