"""Waitlist model.

A waitlist entry records a user's interest in an exact (court, start, end)
slot. Entries are promoted first-come-first-served when the confirmed
booking for that slot is cancelled.
"""

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from arena.models.base import Base, JSONType, TimestampMixin, UTCDateTime

if TYPE_CHECKING:
    from arena.models.catalog import Court
    from arena.models.member import User


class WaitlistStatus(enum.StrEnum):
    WAITING = "waiting"
    NOTIFIED = "notified"
    EXPIRED = "expired"


class WaitlistEntry(TimestampMixin, Base):
    __tablename__ = "waitlist_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    court_id: Mapped[int] = mapped_column(ForeignKey("courts.id"), nullable=False)
    start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    status: Mapped[WaitlistStatus] = mapped_column(
        Enum(WaitlistStatus, name="waitlist_status", values_callable=lambda e: [x.value for x in e]),
        default=WaitlistStatus.WAITING,
        nullable=False,
    )
    # {"coach_id": 3, "equipment_lines": [...]}, stored as requested
    requested_resources: Mapped[dict | None] = mapped_column(JSONType, default=dict)
    notified_at: Mapped[datetime | None] = mapped_column(UTCDateTime)

    # Relationships
    user: Mapped["User"] = relationship(lazy="raise")
    court: Mapped["Court"] = relationship(lazy="raise")

    __table_args__ = (Index("ix_waitlist_slot_status", "court_id", "start_time", "end_time", "status"),)

    def __repr__(self) -> str:
        return f"<WaitlistEntry user={self.user_id} court={self.court_id} {self.start_time} {self.status}>"
