"""Availability checks and the slot grid."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from arena.models import Booking, BookingStatus, Coach
from arena.schemas import EquipmentLine
from arena.services.availability import (
    booked_quantity,
    check_availability,
    coach_schedule_allows,
    find_available_coaches,
)
from arena.services.errors import NotFound
from arena.services.slots import generate_slots, list_available_slots
from conftest import MONDAY, SATURDAY, at


async def _book(db, facility, start, end, court="outdoor", coach=False, equipment_lines=(), status=None):
    booking = Booking(
        user_id=facility["alice"].id,
        court_id=facility[court].id,
        coach_id=facility["coach"].id if coach else None,
        start_time=start,
        end_time=end,
        status=status or BookingStatus.CONFIRMED,
        equipment_lines=list(equipment_lines),
        pricing_breakdown={},
        total_price=Decimal("10.00"),
    )
    db.add(booking)
    await db.commit()
    return booking


class TestCoachSchedule:
    coach = SimpleNamespace(
        weekly_availability={"saturday": [{"start": "10:00", "end": "16:00"}]},
    )

    def test_start_inside_window(self):
        assert coach_schedule_allows(self.coach, at(SATURDAY, 10))

    def test_only_start_instant_is_checked(self):
        # Runs past the 16:00 window end but is still accepted
        assert coach_schedule_allows(self.coach, at(SATURDAY, 15, 30))

    def test_window_end_is_exclusive(self):
        assert not coach_schedule_allows(self.coach, at(SATURDAY, 16))

    def test_missing_day_means_unavailable(self):
        assert not coach_schedule_allows(self.coach, at(MONDAY, 10))

    def test_no_schedule_at_all(self):
        assert not coach_schedule_allows(SimpleNamespace(weekly_availability=None), at(MONDAY, 10))


def test_booked_quantity_sums_matching_lines():
    booked = [
        [{"equipment_id": 1, "quantity": 2}, {"equipment_id": 2, "quantity": 5}],
        [{"equipment_id": 1, "quantity": 1}],
        [],
    ]
    assert booked_quantity(booked, 1) == 3
    assert booked_quantity(booked, 2) == 5
    assert booked_quantity(booked, 3) == 0


@pytest.mark.asyncio
async def test_everything_free(db, facility):
    result = await check_availability(
        db,
        facility["outdoor"].id,
        at(MONDAY, 10),
        at(MONDAY, 11),
        facility["coach"].id,
        [EquipmentLine(equipment_id=facility["rackets"].id, quantity=3)],
    )
    assert result.available
    assert result.conflicts == []
    assert result.message == "All resources are available"


@pytest.mark.asyncio
async def test_court_overlap_conflicts_but_touching_does_not(db, facility):
    await _book(db, facility, at(MONDAY, 10), at(MONDAY, 11))

    overlapping = await check_availability(db, facility["outdoor"].id, at(MONDAY, 10, 30), at(MONDAY, 11, 30))
    assert not overlapping.available
    assert overlapping.conflicts == [
        {
            "resource": "court",
            "resource_id": facility["outdoor"].id,
            "message": "Court is already booked for this time slot",
        }
    ]

    touching = await check_availability(db, facility["outdoor"].id, at(MONDAY, 11), at(MONDAY, 12))
    assert touching.available


@pytest.mark.asyncio
async def test_cancelled_bookings_do_not_block(db, facility):
    await _book(db, facility, at(MONDAY, 10), at(MONDAY, 11), status=BookingStatus.CANCELLED)
    result = await check_availability(db, facility["outdoor"].id, at(MONDAY, 10), at(MONDAY, 11))
    assert result.available


@pytest.mark.asyncio
async def test_coach_busy_on_another_court(db, facility):
    await _book(db, facility, at(MONDAY, 10), at(MONDAY, 11), court="indoor", coach=True)
    result = await check_availability(
        db, facility["outdoor"].id, at(MONDAY, 10), at(MONDAY, 11), facility["coach"].id
    )
    assert not result.available
    assert result.conflicts[0]["resource"] == "coach"
    assert result.conflicts[0]["message"] == "Coach is already booked for this time slot"


@pytest.mark.asyncio
async def test_inactive_coach(db, facility):
    coach = await db.get(Coach, facility["coach"].id)
    coach.is_active = False
    await db.commit()

    result = await check_availability(
        db, facility["outdoor"].id, at(MONDAY, 10), at(MONDAY, 11), facility["coach"].id
    )
    assert result.conflicts[0]["message"] == "Coach is not available or inactive"


@pytest.mark.asyncio
async def test_coach_outside_schedule(db, facility):
    result = await check_availability(
        db, facility["outdoor"].id, at(MONDAY, 18), at(MONDAY, 19), facility["coach"].id
    )
    assert not result.available
    assert result.conflicts[0]["message"] == "Coach is not available at this time according to their schedule"


@pytest.mark.asyncio
async def test_equipment_over_capacity(db, facility):
    rackets = facility["rackets"]
    result = await check_availability(
        db,
        facility["outdoor"].id,
        at(MONDAY, 10),
        at(MONDAY, 11),
        equipment_lines=[EquipmentLine(equipment_id=rackets.id, quantity=5)],
    )
    assert not result.available
    conflict = result.conflicts[0]
    assert conflict["resource"] == "equipment"
    assert conflict["resource_id"] == rackets.id
    assert conflict["available_quantity"] == 3
    assert conflict["requested_quantity"] == 5


@pytest.mark.asyncio
async def test_equipment_counts_overlapping_rentals_on_other_courts(db, facility):
    rackets = facility["rackets"]
    await _book(
        db,
        facility,
        at(MONDAY, 10),
        at(MONDAY, 12),
        court="indoor",
        equipment_lines=[{"equipment_id": rackets.id, "quantity": 2}],
    )

    two_more = await check_availability(
        db,
        facility["outdoor"].id,
        at(MONDAY, 11),
        at(MONDAY, 12),
        equipment_lines=[EquipmentLine(equipment_id=rackets.id, quantity=2)],
    )
    assert not two_more.available
    assert two_more.conflicts[0]["available_quantity"] == 1

    after = await check_availability(
        db,
        facility["outdoor"].id,
        at(MONDAY, 12),
        at(MONDAY, 13),
        equipment_lines=[EquipmentLine(equipment_id=rackets.id, quantity=3)],
    )
    assert after.available


@pytest.mark.asyncio
async def test_collects_every_conflict(db, facility):
    await _book(db, facility, at(MONDAY, 10), at(MONDAY, 11), coach=True)
    result = await check_availability(
        db,
        facility["outdoor"].id,
        at(MONDAY, 10),
        at(MONDAY, 11),
        facility["coach"].id,
        [EquipmentLine(equipment_id=facility["rackets"].id, quantity=4), EquipmentLine(equipment_id=999, quantity=1)],
    )
    assert [c["resource"] for c in result.conflicts] == ["court", "coach", "equipment", "equipment"]
    assert result.conflicts[3]["message"] == "Equipment not found or inactive"
    assert result.message == "Some resources are not available"


@pytest.mark.asyncio
async def test_find_available_coaches(db, facility):
    assert [c.id for c in await find_available_coaches(db, at(MONDAY, 10), at(MONDAY, 11))] == [facility["coach"].id]

    await _book(db, facility, at(MONDAY, 10), at(MONDAY, 11), coach=True)
    assert await find_available_coaches(db, at(MONDAY, 10, 30), at(MONDAY, 11, 30)) == []


# ---------------------------------------------------------------------------
# Slot grid
# ---------------------------------------------------------------------------


class TestGenerateSlots:
    def test_twelve_hourly_slots(self):
        slots = generate_slots(date(2030, 6, 17), [])
        assert len(slots) == 12
        assert slots[0].start_time == at(MONDAY, 9)
        assert slots[-1].end_time == at(MONDAY, 21)
        assert all(s.available for s in slots)

    def test_booking_spanning_two_slots(self):
        slots = generate_slots(date(2030, 6, 17), [(at(MONDAY, 9, 30), at(MONDAY, 10, 30))])
        taken = {s.start_time.hour: s.available for s in slots}
        assert taken[9] is False
        assert taken[10] is False
        assert taken[11] is True


@pytest.mark.asyncio
async def test_list_available_slots(db, facility):
    await _book(db, facility, at(MONDAY, 14), at(MONDAY, 16))
    grid = await list_available_slots(db, facility["outdoor"].id, date(2030, 6, 17))
    assert grid.court_name == "Outdoor Court 1"
    free = {s.start_time.hour: s.available for s in grid.slots}
    assert free[13] is True
    assert free[14] is False
    assert free[15] is False
    assert free[16] is True


@pytest.mark.asyncio
async def test_list_available_slots_unknown_court(db, facility):
    with pytest.raises(NotFound):
        await list_available_slots(db, 9999, date(2030, 6, 17))
