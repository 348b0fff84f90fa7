"""Pydantic schemas for API serialisation."""

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator, model_validator

from arena.models.booking import BookingStatus
from arena.models.catalog import CourtType, EquipmentType
from arena.models.pricing_rule import RuleType
from arena.models.waitlist import WaitlistStatus


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# --- Auth ---


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    name: str
    phone: str | None = None


class RefreshRequest(BaseModel):
    refresh_token: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    phone: str | None
    role: str


class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


# --- Catalog ---


class CourtIn(BaseModel):
    name: str
    type: CourtType
    base_price: Decimal = Field(default=Decimal("10.00"), ge=0)
    description: str | None = None


class CourtUpdate(BaseModel):
    name: str | None = None
    type: CourtType | None = None
    base_price: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None
    description: str | None = None


class CourtOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: CourtType
    base_price: Decimal
    is_active: bool
    description: str | None


HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class TimeWindow(BaseModel):
    start: str = Field(pattern=HHMM)  # "HH:MM"
    end: str = Field(pattern=HHMM)


class CoachIn(BaseModel):
    name: str
    email: EmailStr | None = None
    phone: str | None = None
    specialization: str | None = None
    price_per_hour: Decimal = Field(default=Decimal("20.00"), ge=0)
    weekly_availability: dict[Weekday, list[TimeWindow]] = Field(default_factory=dict)
    bio: str | None = None


class CoachUpdate(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    specialization: str | None = None
    price_per_hour: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None
    weekly_availability: dict[Weekday, list[TimeWindow]] | None = None
    bio: str | None = None


class CoachOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str | None
    phone: str | None
    specialization: str | None
    price_per_hour: Decimal
    is_active: bool
    weekly_availability: dict[str, list[TimeWindow]] | None
    bio: str | None


class EquipmentIn(BaseModel):
    name: str
    type: EquipmentType = EquipmentType.OTHER
    total_quantity: int = Field(default=0, ge=0)
    price_per_unit: Decimal = Field(default=Decimal("0.00"), ge=0)
    description: str | None = None


class EquipmentUpdate(BaseModel):
    name: str | None = None
    type: EquipmentType | None = None
    total_quantity: int | None = Field(default=None, ge=0)
    price_per_unit: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None
    description: str | None = None


class EquipmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: EquipmentType
    total_quantity: int
    price_per_unit: Decimal
    is_active: bool
    description: str | None


# --- Pricing rules ---


class RuleConditions(BaseModel):
    """Stored shape of a rule's `conditions` object; keys keep their camelCase names."""

    model_config = ConfigDict(extra="forbid")

    start_time: str | None = Field(default=None, alias="startTime", pattern=HHMM)
    end_time: str | None = Field(default=None, alias="endTime", pattern=HHMM)
    days: list[Annotated[int, Field(ge=0, le=6)]] | None = None  # 0=Sunday
    holidays: list[date] | None = None
    court_type: CourtType | None = Field(default=None, alias="courtType")

    @model_validator(mode="after")
    def _window_pair(self):
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("startTime and endTime must be given together")
        return self


def _check_conditions(value: dict[str, Any] | None) -> dict[str, Any] | None:
    if value is None:
        return None
    try:
        parsed = RuleConditions.model_validate(value)
    except ValidationError as exc:
        problems = "; ".join(f"{'.'.join(map(str, e['loc'])) or 'conditions'}: {e['msg']}" for e in exc.errors())
        raise ValueError(f"Invalid conditions: {problems}") from None
    return parsed.model_dump(mode="json", by_alias=True, exclude_none=True)


class PricingRuleIn(BaseModel):
    name: str
    rule_type: RuleType
    multiplier: Decimal | None = None
    fixed_amount: Decimal | None = None
    conditions: dict[str, Any] | None = None
    priority: int = 0
    description: str | None = None

    @field_validator("conditions")
    @classmethod
    def _conditions_shape(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        return _check_conditions(v)

    @model_validator(mode="after")
    def _one_adjustment(self):
        if (self.multiplier is None) == (self.fixed_amount is None):
            raise ValueError("Provide exactly one of multiplier or fixed_amount")
        return self


class PricingRuleUpdate(BaseModel):
    name: str | None = None
    rule_type: RuleType | None = None
    multiplier: Decimal | None = None
    fixed_amount: Decimal | None = None
    conditions: dict[str, Any] | None = None
    priority: int | None = None
    is_active: bool | None = None
    description: str | None = None

    @field_validator("conditions")
    @classmethod
    def _conditions_shape(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        return _check_conditions(v)


class PricingRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    rule_type: RuleType
    multiplier: Decimal | None
    fixed_amount: Decimal | None
    conditions: dict[str, Any] | None
    priority: int
    is_active: bool
    description: str | None


# --- Pricing / availability requests ---


class EquipmentLine(BaseModel):
    equipment_id: int
    quantity: int = Field(ge=1)


class PriceRequest(BaseModel):
    court_id: int
    start_time: datetime
    end_time: datetime
    coach_id: int | None = None
    equipment_lines: list[EquipmentLine] = Field(default_factory=list)

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalise(cls, v: datetime) -> datetime:
        return _to_utc(v)

    @field_validator("equipment_lines")
    @classmethod
    def _merge_lines(cls, v: list[EquipmentLine]) -> list[EquipmentLine]:
        """One line per equipment id, so capacity is checked against the combined quantity."""
        merged: dict[int, int] = {}
        for line in v:
            merged[line.equipment_id] = merged.get(line.equipment_id, 0) + line.quantity
        return [EquipmentLine(equipment_id=eid, quantity=qty) for eid, qty in merged.items()]


class AppliedRule(BaseModel):
    name: str
    type: RuleType
    amount: Decimal


class PriceBreakdown(BaseModel):
    base_price: Decimal
    applied_rules: list[AppliedRule]
    equipment_fee: Decimal
    coach_fee: Decimal
    total_price: Decimal


class AvailabilityOut(BaseModel):
    available: bool
    conflicts: list[dict[str, Any]]
    message: str


# --- Booking ---


class BookingCreate(PriceRequest):
    notes: str | None = None


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    court_id: int
    coach_id: int | None
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    equipment_lines: list[EquipmentLine]
    pricing_breakdown: PriceBreakdown
    total_price: Decimal
    notes: str | None
    cancelled_at: datetime | None
    created_at: datetime


class BookingDetailOut(BookingOut):
    court: CourtOut
    coach: CoachOut | None
    user: UserBrief


class CancellationOut(BaseModel):
    booking: BookingOut
    waitlist_notified: bool


# --- Waitlist ---


class WaitlistCreate(PriceRequest):
    """Same shape as a booking request; the requested coach and equipment are kept verbatim."""


class WaitlistOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    court_id: int
    start_time: datetime
    end_time: datetime
    status: WaitlistStatus
    requested_resources: dict[str, Any] | None
    notified_at: datetime | None
    created_at: datetime


# --- Slot grid ---


class SlotOut(BaseModel):
    start_time: datetime
    end_time: datetime
    available: bool


class SlotGridOut(BaseModel):
    court_id: int
    court_name: str
    date: date
    slots: list[SlotOut]
