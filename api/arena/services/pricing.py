"""Pricing engine for booking fee calculation.

The court's hourly base price is scaled by duration, then every active
pricing rule whose predicate matches adjusts the running price, highest
priority first (ties broken by rule id). Coach and equipment fees are added
on top. All arithmetic is Decimal.

Rounding placement matters for cent-level agreement with stored breakdowns:
per-rule amounts are rounded for display only (the running price stays
unrounded), the coach fee and the equipment fee are each rounded before
being added, and the total is rounded once at the end.
"""

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.models.catalog import Coach, Court, CourtType, Equipment
from arena.models.pricing_rule import PricingRule, RuleType
from arena.schemas import AppliedRule, PriceBreakdown, PriceRequest
from arena.services.catalog import get_coach, get_equipment, require
from arena.services.clock import as_utc, duration_hours, minutes_of_day, parse_hhmm, sunday_first_weekday
from arena.services.errors import InvalidInput

TWO_PLACES = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Rule predicates, one per rule type
# ---------------------------------------------------------------------------


def _in_time_window(start: datetime, conditions: dict) -> bool:
    """Start's wall-clock time within [startTime, endTime)."""
    if not conditions.get("startTime") or not conditions.get("endTime"):
        return False
    minute = minutes_of_day(start)
    return parse_hhmm(conditions["startTime"]) <= minute < parse_hhmm(conditions["endTime"])


def _peak_hour(conditions: dict, start: datetime, end: datetime, court: Court) -> bool:
    return _in_time_window(start, conditions)


def _weekend(conditions: dict, start: datetime, end: datetime, court: Court) -> bool:
    return sunday_first_weekday(start) in (0, 6)


def _indoor_premium(conditions: dict, start: datetime, end: datetime, court: Court) -> bool:
    return court.type == CourtType.INDOOR


def _holiday(conditions: dict, start: datetime, end: datetime, court: Court) -> bool:
    holidays = conditions.get("holidays") or []
    return as_utc(start).date().isoformat() in holidays


def _custom(conditions: dict, start: datetime, end: datetime, court: Court) -> bool:
    """All conditions present must hold: courtType, days (0=Sun..6=Sat), time window."""
    if conditions.get("courtType") and court.type != conditions["courtType"]:
        return False
    if conditions.get("days") is not None and sunday_first_weekday(start) not in conditions["days"]:
        return False
    if conditions.get("startTime") and conditions.get("endTime") and not _in_time_window(start, conditions):
        return False
    return True


Evaluator = Callable[[dict, datetime, datetime, Court], bool]

EVALUATORS: dict[RuleType, Evaluator] = {
    RuleType.PEAK_HOUR: _peak_hour,
    RuleType.WEEKEND: _weekend,
    RuleType.INDOOR_PREMIUM: _indoor_premium,
    RuleType.HOLIDAY: _holiday,
    RuleType.CUSTOM: _custom,
}


def rule_applies(rule: PricingRule, start: datetime, end: datetime, court: Court) -> bool:
    if rule.rule_type == RuleType.CUSTOM and rule.conditions is None:
        return False
    return EVALUATORS[RuleType(rule.rule_type)](rule.conditions or {}, start, end, court)


def order_rules(rules: Iterable[PricingRule]) -> list[PricingRule]:
    """Highest priority first; equal priorities by ascending id."""
    return sorted(rules, key=lambda r: (-r.priority, r.id))


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def compose_price(
    court: Court,
    rules: Iterable[PricingRule],
    start: datetime,
    end: datetime,
    coach: Coach | None = None,
    equipment: Sequence[tuple[Equipment, int]] = (),
) -> PriceBreakdown:
    """Build the price breakdown from already-loaded catalog records.

    `equipment` pairs each found equipment record with its requested quantity.
    """
    hours = duration_hours(start, end)
    base_price = Decimal(court.base_price) * hours

    current_price = base_price
    applied: list[AppliedRule] = []
    for rule in order_rules(rules):
        if not rule_applies(rule, start, end, court):
            continue
        if rule.multiplier is not None:
            multiplier = Decimal(rule.multiplier)
            amount = current_price * (multiplier - 1)
            current_price = current_price * multiplier
        else:
            amount = Decimal(rule.fixed_amount)
            current_price += amount
        applied.append(AppliedRule(name=rule.name, type=RuleType(rule.rule_type), amount=round2(amount)))

    total = current_price

    coach_fee = Decimal("0.00")
    if coach is not None:
        coach_fee = round2(Decimal(coach.price_per_hour) * hours)
        total += coach_fee

    equipment_fee = Decimal("0")
    for item, quantity in equipment:
        equipment_fee += Decimal(item.price_per_unit) * quantity * hours
    equipment_fee = round2(equipment_fee)
    total += equipment_fee

    return PriceBreakdown(
        base_price=round2(base_price),
        applied_rules=applied,
        equipment_fee=equipment_fee,
        coach_fee=coach_fee,
        total_price=round2(total),
    )


async def get_active_rules(db: AsyncSession) -> list[PricingRule]:
    result = await db.execute(
        select(PricingRule)
        .where(PricingRule.is_active.is_(True))
        .order_by(PricingRule.priority.desc(), PricingRule.id)
    )
    return list(result.scalars().all())


async def calculate_price(db: AsyncSession, request: PriceRequest) -> PriceBreakdown:
    """Quote a booking against the current catalog and rule set.

    Raises InvalidInput when end precedes start and NotFound for an unknown
    court. Unknown coach or equipment ids are left out of the fees
    (availability reports them).
    """
    if request.end_time < request.start_time:
        raise InvalidInput("End time must not be before start time")

    court = await require(db, Court, request.court_id)
    rules = await get_active_rules(db)

    coach = await get_coach(db, request.coach_id) if request.coach_id else None

    equipment: list[tuple[Equipment, int]] = []
    for line in request.equipment_lines:
        item = await get_equipment(db, line.equipment_id)
        if item is not None:
            equipment.append((item, line.quantity))

    return compose_price(court, rules, request.start_time, request.end_time, coach, equipment)
