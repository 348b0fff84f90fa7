"""Waitlist service.

Entries are created on request without re-checking availability. The only
promotion path is cancellation of the confirmed booking for the exact same
(court, start, end); the oldest waiting entry wins.
"""

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from arena.models.base import utcnow
from arena.models.catalog import Court
from arena.models.waitlist import WaitlistEntry, WaitlistStatus
from arena.schemas import WaitlistCreate
from arena.services.catalog import require
from arena.services.errors import AlreadyWaiting, InvalidInput, NotFound

logger = logging.getLogger(__name__)


async def join_waitlist(db: AsyncSession, user_id: int, request: WaitlistCreate) -> WaitlistEntry:
    if request.start_time >= request.end_time:
        raise InvalidInput("End time must be after start time")

    await require(db, Court, request.court_id)

    existing = await db.execute(
        select(WaitlistEntry.id).where(
            WaitlistEntry.user_id == user_id,
            WaitlistEntry.court_id == request.court_id,
            WaitlistEntry.start_time == request.start_time,
            WaitlistEntry.end_time == request.end_time,
            WaitlistEntry.status == WaitlistStatus.WAITING,
        )
    )
    if existing.first() is not None:
        raise AlreadyWaiting("You are already in the waitlist for this slot")

    entry = WaitlistEntry(
        user_id=user_id,
        court_id=request.court_id,
        start_time=request.start_time,
        end_time=request.end_time,
        status=WaitlistStatus.WAITING,
        requested_resources={
            "coach_id": request.coach_id,
            "equipment_lines": [line.model_dump() for line in request.equipment_lines],
        },
    )
    db.add(entry)
    await db.flush()
    logger.info("User %s joined waitlist for court %s at %s", user_id, request.court_id, request.start_time)
    return entry


async def promote_next(
    db: AsyncSession, court_id: int, start: datetime, end: datetime
) -> WaitlistEntry | None:
    """Flip the oldest waiting entry for the exact slot to notified.

    Runs inside the caller's transaction; the row is locked so two
    cancellations can't both promote the same entry.
    """
    result = await db.execute(
        select(WaitlistEntry)
        .where(
            WaitlistEntry.court_id == court_id,
            WaitlistEntry.start_time == start,
            WaitlistEntry.end_time == end,
            WaitlistEntry.status == WaitlistStatus.WAITING,
        )
        .order_by(WaitlistEntry.created_at, WaitlistEntry.id)
        .limit(1)
        .with_for_update()
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        return None

    entry.status = WaitlistStatus.NOTIFIED
    entry.notified_at = utcnow()
    await db.flush()
    return entry


async def leave_waitlist(db: AsyncSession, entry_id: int, user_id: int) -> WaitlistEntry:
    """Withdraw a waiting entry. Other users' entries look like missing ones."""
    entry = await db.get(WaitlistEntry, entry_id)
    if entry is None or entry.user_id != user_id:
        raise NotFound("Waitlist entry not found", {"id": entry_id})
    if entry.status != WaitlistStatus.WAITING:
        raise InvalidInput(f"Waitlist entry is already {entry.status.value}")

    entry.status = WaitlistStatus.EXPIRED
    await db.flush()
    return entry


async def list_user_waitlist(db: AsyncSession, user_id: int) -> list[WaitlistEntry]:
    result = await db.execute(
        select(WaitlistEntry)
        .where(WaitlistEntry.user_id == user_id)
        .order_by(WaitlistEntry.start_time.desc(), WaitlistEntry.id.desc())
        .limit(50)
    )
    return list(result.scalars().all())


async def expire_stale_entries(db: AsyncSession, now: datetime | None = None) -> int:
    """Mark waiting entries whose slot has already started as expired. Returns the count."""
    now = now or utcnow()
    result = await db.execute(
        update(WaitlistEntry)
        .where(WaitlistEntry.status == WaitlistStatus.WAITING, WaitlistEntry.start_time <= now)
        .values(status=WaitlistStatus.EXPIRED, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
