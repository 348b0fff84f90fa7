"""Booking routes: quotes, availability, create, list, cancel, and the waitlist.

Quotes, availability checks and the slot grid are public and advisory;
booking and waitlist operations need a signed-in user.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.database import get_db
from arena.core.dependencies import get_current_user, is_admin, require_admin
from arena.models.booking import BookingStatus
from arena.models.member import User
from arena.schemas import (
    AvailabilityOut,
    BookingCreate,
    BookingDetailOut,
    BookingOut,
    CancellationOut,
    PriceBreakdown,
    PriceRequest,
    SlotGridOut,
    WaitlistCreate,
    WaitlistOut,
)
from arena.services import bookings as booking_service
from arena.services import waitlist as waitlist_service
from arena.services.availability import check_availability
from arena.services.errors import InvalidInput
from arena.services.pricing import calculate_price
from arena.services.slots import list_available_slots

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/check-availability", response_model=AvailabilityOut)
async def check_booking_availability(body: PriceRequest, db: AsyncSession = Depends(get_db)):
    if body.start_time >= body.end_time:
        raise InvalidInput("End time must be after start time")

    result = await check_availability(
        db, body.court_id, body.start_time, body.end_time, body.coach_id, body.equipment_lines
    )
    return AvailabilityOut(available=result.available, conflicts=result.conflicts, message=result.message)


@router.post("/calculate-price", response_model=PriceBreakdown)
async def calculate_booking_price(body: PriceRequest, db: AsyncSession = Depends(get_db)):
    return await calculate_price(db, body)


@router.get("/available-slots", response_model=SlotGridOut)
async def available_slots(
    court_id: int = Query(...),
    query_date: date = Query(..., alias="date", description="Date in YYYY-MM-DD format"),
    db: AsyncSession = Depends(get_db),
):
    return await list_available_slots(db, court_id, query_date)


@router.post("", response_model=BookingDetailOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.create_booking(db, user.id, body)


@router.get("", response_model=list[BookingDetailOut])
async def list_my_bookings(
    booking_status: BookingStatus | None = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.list_user_bookings(db, user.id, booking_status)


@router.get("/all", response_model=list[BookingDetailOut])
async def list_all_bookings(
    booking_status: BookingStatus | None = Query(None, alias="status"),
    court_id: int | None = None,
    on_date: date | None = Query(None, alias="date"),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.list_bookings(db, booking_status, court_id, on_date)


# ---------------------------------------------------------------------------
# Waitlist
# ---------------------------------------------------------------------------


@router.post("/waitlist", response_model=WaitlistOut, status_code=status.HTTP_201_CREATED)
async def join_waitlist(
    body: WaitlistCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await waitlist_service.join_waitlist(db, user.id, body)


@router.get("/waitlist", response_model=list[WaitlistOut])
async def list_my_waitlist(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await waitlist_service.list_user_waitlist(db, user.id)


@router.delete("/waitlist/{entry_id}", response_model=WaitlistOut)
async def leave_waitlist(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await waitlist_service.leave_waitlist(db, entry_id, user.id)


@router.delete("/{booking_id}", response_model=CancellationOut)
async def cancel_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    booking, entry = await booking_service.cancel_booking(db, booking_id, user.id, is_admin(user))
    return CancellationOut(booking=BookingOut.model_validate(booking), waitlist_notified=entry is not None)
