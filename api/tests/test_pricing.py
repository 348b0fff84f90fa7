"""Pricing engine tests: rule predicates, composition and rounding, quotes."""

from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from arena.models.catalog import CourtType
from arena.models.pricing_rule import PricingRule, RuleType
from arena.schemas import EquipmentLine, PriceRequest
from arena.services.errors import InvalidInput, NotFound
from arena.services.pricing import calculate_price, compose_price, order_rules, round2, rule_applies
from conftest import MONDAY, SATURDAY, at


def _court(court_type=CourtType.OUTDOOR, base_price="10.00"):
    return SimpleNamespace(id=1, type=court_type, base_price=Decimal(base_price))


def _rule(rule_id, rule_type, priority=0, multiplier=None, fixed_amount=None, conditions=None, name=None):
    return SimpleNamespace(
        id=rule_id,
        name=name or f"rule-{rule_id}",
        rule_type=rule_type,
        priority=priority,
        multiplier=Decimal(multiplier) if multiplier is not None else None,
        fixed_amount=Decimal(fixed_amount) if fixed_amount is not None else None,
        conditions=conditions,
    )


WEEKEND = _rule(1, RuleType.WEEKEND, priority=2, fixed_amount="5.00", name="Weekend Surcharge")
PEAK = _rule(
    2,
    RuleType.PEAK_HOUR,
    priority=1,
    multiplier="1.5",
    conditions={"startTime": "18:00", "endTime": "21:00"},
    name="Peak Hour Premium",
)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


class TestRuleApplies:
    def test_peak_hour_window_is_half_open(self):
        court = _court()
        assert rule_applies(PEAK, at(MONDAY, 18), at(MONDAY, 19), court)
        assert rule_applies(PEAK, at(MONDAY, 20, 59), at(MONDAY, 21, 30), court)
        assert not rule_applies(PEAK, at(MONDAY, 21), at(MONDAY, 22), court)
        assert not rule_applies(PEAK, at(MONDAY, 17, 59), at(MONDAY, 19), court)

    def test_peak_hour_without_window_never_applies(self):
        rule = _rule(3, RuleType.PEAK_HOUR, multiplier="2", conditions={})
        assert not rule_applies(rule, at(MONDAY, 18), at(MONDAY, 19), _court())

    def test_weekend(self):
        court = _court()
        assert rule_applies(WEEKEND, at(SATURDAY, 10), at(SATURDAY, 11), court)
        sunday = SATURDAY + timedelta(days=1)
        assert rule_applies(WEEKEND, at(sunday, 10), at(sunday, 11), court)
        assert not rule_applies(WEEKEND, at(MONDAY, 10), at(MONDAY, 11), court)

    def test_indoor_premium(self):
        rule = _rule(4, RuleType.INDOOR_PREMIUM, multiplier="1.2")
        assert rule_applies(rule, at(MONDAY, 10), at(MONDAY, 11), _court(CourtType.INDOOR))
        assert not rule_applies(rule, at(MONDAY, 10), at(MONDAY, 11), _court(CourtType.OUTDOOR))

    def test_holiday_matches_calendar_date(self):
        rule = _rule(5, RuleType.HOLIDAY, fixed_amount="8.00", conditions={"holidays": ["2030-06-17"]})
        assert rule_applies(rule, at(MONDAY, 10), at(MONDAY, 11), _court())
        assert not rule_applies(rule, at(SATURDAY, 10), at(SATURDAY, 11), _court())

    def test_holiday_with_no_dates(self):
        rule = _rule(6, RuleType.HOLIDAY, fixed_amount="8.00", conditions=None)
        assert not rule_applies(rule, at(MONDAY, 10), at(MONDAY, 11), _court())

    def test_custom_all_conditions_must_hold(self):
        # Weekday mornings, 0=Sunday numbering
        rule = _rule(
            7,
            RuleType.CUSTOM,
            multiplier="0.8",
            conditions={"startTime": "06:00", "endTime": "10:00", "days": [1, 2, 3, 4, 5]},
        )
        court = _court()
        assert rule_applies(rule, at(MONDAY, 8), at(MONDAY, 9), court)
        assert not rule_applies(rule, at(MONDAY, 10), at(MONDAY, 11), court)
        assert not rule_applies(rule, at(SATURDAY, 8), at(SATURDAY, 9), court)

    def test_custom_court_type(self):
        rule = _rule(8, RuleType.CUSTOM, fixed_amount="2.00", conditions={"courtType": "indoor"})
        assert rule_applies(rule, at(MONDAY, 8), at(MONDAY, 9), _court(CourtType.INDOOR))
        assert not rule_applies(rule, at(MONDAY, 8), at(MONDAY, 9), _court(CourtType.OUTDOOR))

    def test_custom_null_conditions_do_not_apply(self):
        rule = _rule(9, RuleType.CUSTOM, fixed_amount="2.00", conditions=None)
        assert not rule_applies(rule, at(MONDAY, 8), at(MONDAY, 9), _court())

    def test_custom_empty_conditions_apply(self):
        rule = _rule(10, RuleType.CUSTOM, fixed_amount="2.00", conditions={})
        assert rule_applies(rule, at(MONDAY, 8), at(MONDAY, 9), _court())


class TestOrderRules:
    def test_priority_descending_then_id(self):
        a = _rule(3, RuleType.WEEKEND, priority=1, fixed_amount="1")
        b = _rule(1, RuleType.WEEKEND, priority=5, fixed_amount="1")
        c = _rule(2, RuleType.WEEKEND, priority=1, fixed_amount="1")
        assert [r.id for r in order_rules([a, b, c])] == [1, 2, 3]


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


class TestComposePrice:
    def test_saturday_evening_weekend_then_peak(self):
        breakdown = compose_price(_court(), [PEAK, WEEKEND], at(SATURDAY, 18), at(SATURDAY, 19))
        assert breakdown.base_price == Decimal("10.00")
        assert [(r.name, r.amount) for r in breakdown.applied_rules] == [
            ("Weekend Surcharge", Decimal("5.00")),
            ("Peak Hour Premium", Decimal("7.50")),
        ]
        assert breakdown.total_price == Decimal("22.50")
        assert breakdown.coach_fee == Decimal("0.00")
        assert breakdown.equipment_fee == Decimal("0.00")

    def test_rule_order_changes_the_result(self):
        peak_first = _rule(2, RuleType.PEAK_HOUR, priority=3, multiplier="1.5", conditions=PEAK.conditions)
        breakdown = compose_price(_court(), [peak_first, WEEKEND], at(SATURDAY, 18), at(SATURDAY, 19))
        assert breakdown.total_price == Decimal("20.00")

    def test_fractional_hours(self):
        breakdown = compose_price(_court(), [], at(MONDAY, 10), at(MONDAY, 11, 30))
        assert breakdown.base_price == Decimal("15.00")
        assert breakdown.total_price == Decimal("15.00")

    def test_zero_length_interval_costs_nothing(self):
        breakdown = compose_price(_court(), [], at(MONDAY, 10), at(MONDAY, 10))
        assert breakdown.total_price == Decimal("0.00")

    def test_coach_and_equipment_fees(self):
        coach = SimpleNamespace(price_per_hour=Decimal("20.00"))
        rackets = SimpleNamespace(price_per_unit=Decimal("3.00"))
        shoes = SimpleNamespace(price_per_unit=Decimal("4.00"))
        breakdown = compose_price(
            _court(), [], at(MONDAY, 10), at(MONDAY, 12), coach=coach, equipment=[(rackets, 2), (shoes, 1)]
        )
        assert breakdown.coach_fee == Decimal("40.00")
        assert breakdown.equipment_fee == Decimal("20.00")
        assert breakdown.total_price == Decimal("80.00")

    def test_rule_amounts_rounded_but_running_price_is_not(self):
        first = _rule(11, RuleType.CUSTOM, priority=2, multiplier="1.005", conditions={})
        second = _rule(12, RuleType.CUSTOM, priority=1, multiplier="1.005", conditions={})
        breakdown = compose_price(_court(base_price="1.00"), [first, second], at(MONDAY, 10), at(MONDAY, 11))
        # 1.00 -> 1.005 -> 1.010025; rounding between steps would give 1.02
        assert [r.amount for r in breakdown.applied_rules] == [Decimal("0.01"), Decimal("0.01")]
        assert breakdown.total_price == Decimal("1.01")

    def test_round_half_up(self):
        assert round2(Decimal("2.345")) == Decimal("2.35")
        assert round2(Decimal("2.344")) == Decimal("2.34")

    def test_deterministic(self):
        first = compose_price(_court(), [PEAK, WEEKEND], at(SATURDAY, 18), at(SATURDAY, 19, 45))
        second = compose_price(_court(), [WEEKEND, PEAK], at(SATURDAY, 18), at(SATURDAY, 19, 45))
        assert first == second


# ---------------------------------------------------------------------------
# Quotes against the database
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_calculate_price_from_catalog(db, facility, weekend_and_peak_rules):
    request = PriceRequest(
        court_id=facility["outdoor"].id,
        start_time=at(SATURDAY, 18),
        end_time=at(SATURDAY, 19),
        coach_id=facility["coach"].id,
        equipment_lines=[EquipmentLine(equipment_id=facility["rackets"].id, quantity=2)],
    )
    breakdown = await calculate_price(db, request)
    assert breakdown.coach_fee == Decimal("20.00")
    assert breakdown.equipment_fee == Decimal("6.00")
    assert breakdown.total_price == Decimal("48.50")


@pytest.mark.asyncio
async def test_calculate_price_ignores_inactive_rules(db, facility, weekend_and_peak_rules):
    rule = await db.get(PricingRule, weekend_and_peak_rules[0].id)
    rule.is_active = False
    await db.commit()

    request = PriceRequest(court_id=facility["outdoor"].id, start_time=at(SATURDAY, 18), end_time=at(SATURDAY, 19))
    breakdown = await calculate_price(db, request)
    assert breakdown.total_price == Decimal("15.00")


@pytest.mark.asyncio
async def test_calculate_price_unknown_court(db, facility):
    request = PriceRequest(court_id=9999, start_time=at(MONDAY, 10), end_time=at(MONDAY, 11))
    with pytest.raises(NotFound):
        await calculate_price(db, request)


@pytest.mark.asyncio
async def test_calculate_price_inverted_interval(db, facility):
    request = PriceRequest(court_id=facility["outdoor"].id, start_time=at(MONDAY, 11), end_time=at(MONDAY, 10))
    with pytest.raises(InvalidInput):
        await calculate_price(db, request)
