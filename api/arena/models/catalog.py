"""Resource catalog models.

Court = a bookable playing court, priced per hour.
Coach = a coach who can be attached to a booking, with a weekly schedule.
Equipment = a pool of identical rentable units (rackets, shoes, shuttles).
"""

import enum
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Enum, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from arena.models.base import Base, JSONType, TimestampMixin


class CourtType(enum.StrEnum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"


class EquipmentType(enum.StrEnum):
    RACKET = "racket"
    SHOES = "shoes"
    OTHER = "other"


class Court(TimestampMixin, Base):
    __tablename__ = "courts"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[CourtType] = mapped_column(
        Enum(CourtType, name="court_type", values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("10.00"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Court {self.name} ({self.type})>"


class Coach(TimestampMixin, Base):
    __tablename__ = "coaches"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254))
    phone: Mapped[str | None] = mapped_column(String(20))
    specialization: Mapped[str | None] = mapped_column(String(100))
    price_per_hour: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("20.00"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    bio: Mapped[str | None] = mapped_column(Text)

    # {"monday": [{"start": "09:00", "end": "17:00"}], ...}; a missing day means unavailable
    weekly_availability: Mapped[dict | None] = mapped_column(JSONType, default=dict)

    def __repr__(self) -> str:
        return f"<Coach {self.name}>"


class Equipment(TimestampMixin, Base):
    __tablename__ = "equipment"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[EquipmentType] = mapped_column(
        Enum(EquipmentType, name="equipment_type", values_callable=lambda e: [x.value for x in e]),
        default=EquipmentType.OTHER,
        nullable=False,
    )
    total_quantity: Mapped[int] = mapped_column(default=0, nullable=False)
    price_per_unit: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (CheckConstraint("total_quantity >= 0", name="ck_equipment_quantity_non_negative"),)

    def __repr__(self) -> str:
        return f"<Equipment {self.name} x{self.total_quantity}>"
