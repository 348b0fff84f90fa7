"""Pricing rule model.

A rule adjusts the running price of a booking when its predicate matches.
Each rule either multiplies the running price or adds a fixed amount, never
both. Rules are applied in descending priority.
"""

import enum
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Enum, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from arena.models.base import Base, JSONType, TimestampMixin


class RuleType(enum.StrEnum):
    PEAK_HOUR = "peak_hour"
    WEEKEND = "weekend"
    INDOOR_PREMIUM = "indoor_premium"
    HOLIDAY = "holiday"
    CUSTOM = "custom"


class PricingRule(TimestampMixin, Base):
    __tablename__ = "pricing_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    rule_type: Mapped[RuleType] = mapped_column(
        Enum(RuleType, name="rule_type", values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    multiplier: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))  # 1.5 = +50%
    fixed_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    # e.g. {"startTime": "18:00", "endTime": "21:00", "days": [0, 6]}
    conditions: Mapped[dict | None] = mapped_column(JSONType)
    priority: Mapped[int] = mapped_column(default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint(
            "(multiplier IS NULL) <> (fixed_amount IS NULL)",
            name="ck_pricing_rules_one_adjustment",
        ),
        Index("ix_pricing_rules_active_priority", "is_active", "priority"),
    )

    def __repr__(self) -> str:
        return f"<PricingRule {self.name} {self.rule_type} priority={self.priority}>"
