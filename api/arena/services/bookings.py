"""Booking lifecycle: create and cancel, each as one atomic unit.

Concurrency: pessimistic row locking. Creation locks every resource row it
touches (court, then coach, then equipment in ascending id) with
SELECT ... FOR UPDATE before running the availability check, and holds the
locks until commit. A second request for any shared resource blocks until the
first transaction ends and then re-checks against its committed booking.
Cancellation locks the booking row and the waitlist row it promotes.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from arena.models.base import utcnow
from arena.models.booking import Booking, BookingStatus
from arena.models.catalog import Coach, Court, Equipment
from arena.models.member import User
from arena.models.waitlist import WaitlistEntry
from arena.schemas import BookingCreate
from arena.services.availability import check_availability
from arena.services.clock import local_instant
from arena.services.errors import AlreadyCancelled, Forbidden, InvalidInput, NotFound, ResourceConflict
from arena.services.notifications import notify_slot_available
from arena.services.pricing import calculate_price
from arena.services.waitlist import promote_next

logger = logging.getLogger(__name__)

Notifier = Callable[[User, WaitlistEntry], Awaitable[None]]


async def _lock_resources(
    db: AsyncSession, court_id: int, coach_id: int | None, equipment_ids: list[int]
) -> Court:
    """Take row locks on every resource the booking touches, in a fixed order."""
    result = await db.execute(select(Court).where(Court.id == court_id).with_for_update())
    court = result.scalar_one_or_none()
    if court is None or not court.is_active:
        raise NotFound("Court not found or not bookable", {"court_id": court_id})

    if coach_id:
        await db.execute(select(Coach.id).where(Coach.id == coach_id).with_for_update())

    if equipment_ids:
        await db.execute(
            select(Equipment.id)
            .where(Equipment.id.in_(sorted(set(equipment_ids))))
            .order_by(Equipment.id)
            .with_for_update()
        )

    return court


def _with_details(query):
    return query.options(
        selectinload(Booking.court),
        selectinload(Booking.coach),
        selectinload(Booking.user),
    ).execution_options(populate_existing=True)


async def get_booking_detail(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(_with_details(select(Booking).where(Booking.id == booking_id)))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found", {"id": booking_id})
    return booking


async def create_booking(db: AsyncSession, user_id: int, request: BookingCreate) -> Booking:
    """Check availability, price, and persist a confirmed booking atomically.

    Raises InvalidInput before touching storage when the interval is empty or
    inverted, NotFound for an unknown or inactive court, and ResourceConflict
    (carrying every conflict) when anything requested is taken. Nothing is
    written unless all steps succeed; commit failures propagate.
    """
    if request.start_time >= request.end_time:
        raise InvalidInput("End time must be after start time")

    try:
        await _lock_resources(
            db,
            request.court_id,
            request.coach_id,
            [line.equipment_id for line in request.equipment_lines],
        )

        availability = await check_availability(
            db,
            request.court_id,
            request.start_time,
            request.end_time,
            request.coach_id,
            request.equipment_lines,
        )
        if not availability.available:
            raise ResourceConflict(availability.conflicts)

        breakdown = await calculate_price(db, request)

        booking = Booking(
            user_id=user_id,
            court_id=request.court_id,
            coach_id=request.coach_id or None,
            start_time=request.start_time,
            end_time=request.end_time,
            status=BookingStatus.CONFIRMED,
            equipment_lines=[line.model_dump() for line in request.equipment_lines],
            pricing_breakdown=breakdown.model_dump(mode="json"),
            total_price=breakdown.total_price,
            notes=request.notes,
        )
        db.add(booking)
        await db.flush()
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Booking %s confirmed: court %s %s-%s user %s total %s",
        booking.id,
        booking.court_id,
        booking.start_time,
        booking.end_time,
        user_id,
        booking.total_price,
    )
    return await get_booking_detail(db, booking.id)


async def cancel_booking(
    db: AsyncSession,
    booking_id: int,
    requester_id: int,
    requester_is_admin: bool,
    notifier: Notifier = notify_slot_available,
) -> tuple[Booking, WaitlistEntry | None]:
    """Cancel a booking and promote the oldest waiting entry for the same slot.

    The status flip and the promotion commit together. The notifier runs after
    commit and its failures are logged, never raised: the slot is already
    released and the entry already marked notified.
    """
    try:
        result = await db.execute(select(Booking).where(Booking.id == booking_id).with_for_update())
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFound("Booking not found", {"id": booking_id})

        if not requester_is_admin and booking.user_id != requester_id:
            raise Forbidden("Not authorized to cancel this booking")

        if booking.status == BookingStatus.CANCELLED:
            raise AlreadyCancelled("Booking is already cancelled")
        if booking.status != BookingStatus.CONFIRMED:
            raise InvalidInput(f"A {booking.status.value} booking cannot be cancelled")

        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = utcnow()

        entry = await promote_next(db, booking.court_id, booking.start_time, booking.end_time)
        await db.flush()
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Booking %s cancelled by user %s", booking_id, requester_id)

    if entry is not None:
        logger.info("Waitlist entry %s notified for booking %s", entry.id, booking_id)
        user = await db.get(User, entry.user_id)
        try:
            await notifier(user, entry)
        except Exception:
            logger.exception("Failed to send waitlist notification for entry %s", entry.id)

    return booking, entry


async def list_user_bookings(
    db: AsyncSession, user_id: int, status: BookingStatus | None = None
) -> list[Booking]:
    query = select(Booking).where(Booking.user_id == user_id)
    if status is not None:
        query = query.where(Booking.status == status)
    result = await db.execute(_with_details(query.order_by(Booking.start_time.desc()).limit(50)))
    return list(result.scalars().all())


async def list_bookings(
    db: AsyncSession,
    status: BookingStatus | None = None,
    court_id: int | None = None,
    on_date: date | None = None,
) -> list[Booking]:
    """All bookings, newest first, for the admin view."""
    query = select(Booking)
    if status is not None:
        query = query.where(Booking.status == status)
    if court_id is not None:
        query = query.where(Booking.court_id == court_id)
    if on_date is not None:
        day_start = local_instant(on_date, 0)
        day_end = local_instant(on_date + timedelta(days=1), 0)
        query = query.where(Booking.start_time >= day_start, Booking.start_time < day_end)
    result = await db.execute(_with_details(query.order_by(Booking.start_time.desc())))
    return list(result.scalars().all())
