"""Hourly slot grid for a court on a given day.

generate_slots() is a pure calculation with no database access; the async
wrapper fetches the day's confirmed bookings and hands their intervals in.
Slots are a display aid only: bookings may start and end on any minute.
"""

from datetime import date, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.config import settings
from arena.models.booking import Booking, BookingStatus
from arena.models.catalog import Court
from arena.schemas import SlotGridOut, SlotOut
from arena.services.catalog import require
from arena.services.clock import local_instant, overlaps

SLOT_LENGTH = timedelta(hours=1)


def generate_slots(day: date, booked_intervals: list[tuple[datetime, datetime]]) -> list[SlotOut]:
    """One-hour slots from opening to closing time on `day` (facility time).

    A slot is unavailable when it overlaps any booked interval, using the same
    half-open rule as the booking checks.
    """
    slots: list[SlotOut] = []
    for hour in range(settings.slot_open_hour, settings.slot_close_hour):
        slot_start = local_instant(day, hour)
        slot_end = slot_start + SLOT_LENGTH
        taken = any(overlaps(slot_start, slot_end, b_start, b_end) for b_start, b_end in booked_intervals)
        slots.append(SlotOut(start_time=slot_start, end_time=slot_end, available=not taken))
    return slots


async def list_available_slots(db: AsyncSession, court_id: int, day: date) -> SlotGridOut:
    court = await require(db, Court, court_id)

    grid_start = local_instant(day, settings.slot_open_hour)
    grid_end = local_instant(day, settings.slot_close_hour)
    result = await db.execute(
        select(Booking.start_time, Booking.end_time).where(
            Booking.court_id == court_id,
            Booking.status == BookingStatus.CONFIRMED,
            Booking.start_time < grid_end,
            Booking.end_time > grid_start,
        )
    )
    booked = [(row.start_time, row.end_time) for row in result.all()]

    return SlotGridOut(court_id=court.id, court_name=court.name, date=day, slots=generate_slots(day, booked))
