"""Resource availability checks.

Answers "is this court / coach / equipment free for [start, end)?" as a
point-in-time read. Each check returns a conflict dict or None; the main
check_availability() runs them all and collects every conflict. No locking
happens here: booking creation takes the row locks before calling in.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.models.booking import Booking, BookingStatus
from arena.models.catalog import Coach
from arena.services.catalog import get_coach, get_equipment
from arena.services.clock import minutes_of_day, parse_hhmm, weekday_name

MESSAGE_AVAILABLE = "All resources are available"
MESSAGE_UNAVAILABLE = "Some resources are not available"


class EquipmentRequest(Protocol):
    equipment_id: int
    quantity: int


@dataclass
class AvailabilityResult:
    available: bool = True
    conflicts: list[dict[str, Any]] = field(default_factory=list)
    message: str = MESSAGE_AVAILABLE


def _confirmed_overlapping(start: datetime, end: datetime):
    """Base query: confirmed bookings whose interval overlaps [start, end)."""
    return select(Booking).where(
        Booking.status == BookingStatus.CONFIRMED,
        Booking.start_time < end,
        Booking.end_time > start,
    )


async def check_availability(
    db: AsyncSession,
    court_id: int,
    start: datetime,
    end: datetime,
    coach_id: int | None = None,
    equipment_lines: Sequence[EquipmentRequest] = (),
) -> AvailabilityResult:
    """Run all resource checks and collect conflicts (empty = available)."""
    result = AvailabilityResult()

    conflict = await check_court(db, court_id, start, end)
    if conflict:
        result.conflicts.append(conflict)

    if coach_id:
        conflict = await check_coach(db, coach_id, start, end)
        if conflict:
            result.conflicts.append(conflict)

    if equipment_lines:
        booked_lines = await _overlapping_equipment_lines(db, start, end)
        for line in equipment_lines:
            conflict = await check_equipment(db, line.equipment_id, line.quantity, booked_lines)
            if conflict:
                result.conflicts.append(conflict)

    if result.conflicts:
        result.available = False
        result.message = MESSAGE_UNAVAILABLE
    return result


async def check_court(db: AsyncSession, court_id: int, start: datetime, end: datetime) -> dict | None:
    """No two confirmed bookings can overlap on the same court."""
    result = await db.execute(
        _confirmed_overlapping(start, end).with_only_columns(Booking.id).where(Booking.court_id == court_id).limit(1)
    )
    if result.scalar_one_or_none() is not None:
        return {
            "resource": "court",
            "resource_id": court_id,
            "message": "Court is already booked for this time slot",
        }
    return None


def coach_schedule_allows(coach: Coach, start: datetime) -> bool:
    """True if the booking's start falls inside one of the coach's windows for that weekday.

    Only the start instant is tested: a booking that starts inside a window
    but runs past its end is still accepted.
    """
    windows = (coach.weekly_availability or {}).get(weekday_name(start)) or []
    minute = minutes_of_day(start)
    return any(parse_hhmm(w["start"]) <= minute < parse_hhmm(w["end"]) for w in windows)


async def check_coach(db: AsyncSession, coach_id: int, start: datetime, end: datetime) -> dict | None:
    """Coach must be active, scheduled at the start instant, and not already booked."""
    coach = await get_coach(db, coach_id)
    if coach is None or not coach.is_active:
        return {
            "resource": "coach",
            "resource_id": coach_id,
            "message": "Coach is not available or inactive",
        }

    if not coach_schedule_allows(coach, start):
        return {
            "resource": "coach",
            "resource_id": coach_id,
            "message": "Coach is not available at this time according to their schedule",
        }

    result = await db.execute(
        _confirmed_overlapping(start, end).with_only_columns(Booking.id).where(Booking.coach_id == coach_id).limit(1)
    )
    if result.scalar_one_or_none() is not None:
        return {
            "resource": "coach",
            "resource_id": coach_id,
            "message": "Coach is already booked for this time slot",
        }
    return None


async def _overlapping_equipment_lines(db: AsyncSession, start: datetime, end: datetime) -> list[list[dict]]:
    result = await db.execute(_confirmed_overlapping(start, end).with_only_columns(Booking.equipment_lines))
    return [lines or [] for lines in result.scalars().all()]


def booked_quantity(booked_lines: Iterable[list[dict]], equipment_id: int) -> int:
    """Sum the quantity of `equipment_id` across overlapping bookings' equipment lines."""
    return sum(
        line["quantity"]
        for lines in booked_lines
        for line in lines
        if line.get("equipment_id") == equipment_id
    )


async def check_equipment(
    db: AsyncSession,
    equipment_id: int,
    requested_quantity: int,
    booked_lines: list[list[dict]],
) -> dict | None:
    """Units still free over the interval must cover the requested quantity."""
    equipment = await get_equipment(db, equipment_id)
    if equipment is None or not equipment.is_active:
        return {
            "resource": "equipment",
            "resource_id": equipment_id,
            "message": "Equipment not found or inactive",
        }

    available_quantity = equipment.total_quantity - booked_quantity(booked_lines, equipment_id)
    if available_quantity < requested_quantity:
        return {
            "resource": "equipment",
            "resource_id": equipment_id,
            "message": f"Only {available_quantity} units available, but {requested_quantity} requested",
            "available_quantity": available_quantity,
            "requested_quantity": requested_quantity,
        }
    return None


async def find_available_coaches(db: AsyncSession, start: datetime, end: datetime) -> list[Coach]:
    """Active coaches with no confirmed booking overlapping [start, end)."""
    booked = await db.execute(
        _confirmed_overlapping(start, end).with_only_columns(Booking.coach_id).where(Booking.coach_id.is_not(None))
    )
    booked_ids = set(booked.scalars().all())

    result = await db.execute(select(Coach).where(Coach.is_active.is_(True)).order_by(Coach.id))
    return [c for c in result.scalars().all() if c.id not in booked_ids]
