"""Court, coach, and equipment routes.

Reads are public. Writes need an admin; DELETE is a soft delete that marks the
resource inactive so existing bookings keep pointing at it.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.database import get_db
from arena.core.dependencies import require_admin
from arena.models.catalog import Coach, Court, CourtType, Equipment
from arena.models.member import User
from arena.schemas import (
    CoachIn,
    CoachOut,
    CoachUpdate,
    CourtIn,
    CourtOut,
    CourtUpdate,
    EquipmentIn,
    EquipmentOut,
    EquipmentUpdate,
)
from arena.services import catalog
from arena.services.availability import find_available_coaches
from arena.services.clock import as_utc
from arena.services.errors import InvalidInput

courts_router = APIRouter(prefix="/courts", tags=["courts"])
coaches_router = APIRouter(prefix="/coaches", tags=["coaches"])
equipment_router = APIRouter(prefix="/equipment", tags=["equipment"])


# ---------------------------------------------------------------------------
# Courts
# ---------------------------------------------------------------------------


@courts_router.get("", response_model=list[CourtOut])
async def list_courts(
    court_type: CourtType | None = Query(None, alias="type"),
    is_active: bool | None = None,
    db: AsyncSession = Depends(get_db),
):
    return await catalog.list_courts(db, court_type, is_active)


@courts_router.get("/{court_id}", response_model=CourtOut)
async def get_court(court_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.require(db, Court, court_id)


@courts_router.post("", response_model=CourtOut, status_code=201)
async def create_court(body: CourtIn, _admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return await catalog.create(db, Court, body.model_dump())


@courts_router.put("/{court_id}", response_model=CourtOut)
async def update_court(
    court_id: int,
    body: CourtUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.update(db, Court, court_id, body.model_dump(exclude_unset=True))


@courts_router.delete("/{court_id}", response_model=CourtOut)
async def delete_court(court_id: int, _admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return await catalog.deactivate(db, Court, court_id)


# ---------------------------------------------------------------------------
# Coaches
# ---------------------------------------------------------------------------


@coaches_router.get("", response_model=list[CoachOut])
async def list_coaches(is_active: bool | None = None, db: AsyncSession = Depends(get_db)):
    return await catalog.list_coaches(db, is_active)


@coaches_router.get("/available", response_model=list[CoachOut])
async def list_available_coaches(
    start_time: datetime = Query(...),
    end_time: datetime = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Active coaches with no confirmed booking overlapping the interval."""
    start, end = as_utc(start_time), as_utc(end_time)
    if start >= end:
        raise InvalidInput("End time must be after start time")
    return await find_available_coaches(db, start, end)


@coaches_router.get("/{coach_id}", response_model=CoachOut)
async def get_coach(coach_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.require(db, Coach, coach_id)


@coaches_router.post("", response_model=CoachOut, status_code=201)
async def create_coach(body: CoachIn, _admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return await catalog.create(db, Coach, body.model_dump())


@coaches_router.put("/{coach_id}", response_model=CoachOut)
async def update_coach(
    coach_id: int,
    body: CoachUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.update(db, Coach, coach_id, body.model_dump(exclude_unset=True))


@coaches_router.delete("/{coach_id}", response_model=CoachOut)
async def delete_coach(coach_id: int, _admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return await catalog.deactivate(db, Coach, coach_id)


# ---------------------------------------------------------------------------
# Equipment
# ---------------------------------------------------------------------------


@equipment_router.get("", response_model=list[EquipmentOut])
async def list_equipment(is_active: bool | None = None, db: AsyncSession = Depends(get_db)):
    return await catalog.list_equipment(db, is_active)


@equipment_router.get("/{equipment_id}", response_model=EquipmentOut)
async def get_equipment(equipment_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.require(db, Equipment, equipment_id)


@equipment_router.post("", response_model=EquipmentOut, status_code=201)
async def create_equipment(
    body: EquipmentIn, _admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    return await catalog.create(db, Equipment, body.model_dump())


@equipment_router.put("/{equipment_id}", response_model=EquipmentOut)
async def update_equipment(
    equipment_id: int,
    body: EquipmentUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.update(db, Equipment, equipment_id, body.model_dump(exclude_unset=True))


@equipment_router.delete("/{equipment_id}", response_model=EquipmentOut)
async def delete_equipment(
    equipment_id: int, _admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    return await catalog.deactivate(db, Equipment, equipment_id)
