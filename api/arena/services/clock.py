"""Time helpers shared by the availability, pricing and slot modules.

Pure calculation module. Instants are timezone-aware UTC; wall-clock rules
(coach schedules, peak hours, weekends, the slot grid) are evaluated in the
facility timezone from settings.
"""

from datetime import UTC, date, datetime, time
from decimal import Decimal
from zoneinfo import ZoneInfo

from arena.core.config import settings

# Lowercase names keyed by date.weekday() (0=Mon..6=Sun)
WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

SECONDS_PER_HOUR = Decimal(3600)


def facility_tz() -> ZoneInfo:
    return ZoneInfo(settings.facility_timezone)


def as_utc(value: datetime) -> datetime:
    """Normalise an instant to aware UTC. Naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def local(value: datetime) -> datetime:
    """The instant on the facility's wall clock."""
    return as_utc(value).astimezone(facility_tz())


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap: touching edges do not overlap."""
    return a_start < b_end and b_start < a_end


def parse_hhmm(value: str) -> int:
    """'18:30' -> 1110 (minutes since midnight)."""
    h, m = map(int, value.split(":"))
    return h * 60 + m


def minutes_of_day(value: datetime) -> int:
    wall = local(value)
    return wall.hour * 60 + wall.minute


def weekday_name(value: datetime) -> str:
    return WEEKDAY_NAMES[local(value).weekday()]


def sunday_first_weekday(value: datetime) -> int:
    """0=Sunday..6=Saturday, the day numbering used in stored rule conditions."""
    return (local(value).weekday() + 1) % 7


def duration_hours(start: datetime, end: datetime) -> Decimal:
    seconds = Decimal(int((as_utc(end) - as_utc(start)).total_seconds()))
    return seconds / SECONDS_PER_HOUR


def local_instant(day: date, hour: int) -> datetime:
    """The UTC instant of `hour`:00 on `day` in the facility timezone."""
    return datetime.combine(day, time(hour, 0), tzinfo=facility_tz()).astimezone(UTC)
