"""All models imported here so Base.metadata sees every table."""

from arena.models.base import Base
from arena.models.booking import Booking, BookingStatus
from arena.models.catalog import Coach, Court, CourtType, Equipment, EquipmentType
from arena.models.member import User, UserRole
from arena.models.pricing_rule import PricingRule, RuleType
from arena.models.waitlist import WaitlistEntry, WaitlistStatus

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Court",
    "CourtType",
    "Coach",
    "Equipment",
    "EquipmentType",
    "PricingRule",
    "RuleType",
    "Booking",
    "BookingStatus",
    "WaitlistEntry",
    "WaitlistStatus",
]
