"""Resource catalog lookups and admin maintenance.

Reads return None for unknown ids; the require_* variants raise NotFound.
Deletion is always a soft delete (is_active = False) so historic bookings
keep their references.
"""

import logging
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.models.catalog import Coach, Court, CourtType, Equipment
from arena.models.pricing_rule import PricingRule, RuleType
from arena.services.errors import InvalidInput, NotFound

logger = logging.getLogger(__name__)

CatalogModel = TypeVar("CatalogModel", Court, Coach, Equipment, PricingRule)

_LABELS = {Court: "Court", Coach: "Coach", Equipment: "Equipment", PricingRule: "Pricing rule"}


async def get_court(db: AsyncSession, court_id: int) -> Court | None:
    return await db.get(Court, court_id)


async def get_coach(db: AsyncSession, coach_id: int) -> Coach | None:
    return await db.get(Coach, coach_id)


async def get_equipment(db: AsyncSession, equipment_id: int) -> Equipment | None:
    return await db.get(Equipment, equipment_id)


async def require(db: AsyncSession, model: type[CatalogModel], obj_id: int) -> CatalogModel:
    obj = await db.get(model, obj_id)
    if obj is None:
        label = _LABELS[model]
        raise NotFound(f"{label} not found", {"id": obj_id})
    return obj


async def list_courts(
    db: AsyncSession, court_type: CourtType | None = None, is_active: bool | None = None
) -> list[Court]:
    query = select(Court).order_by(Court.id)
    if court_type is not None:
        query = query.where(Court.type == court_type)
    if is_active is not None:
        query = query.where(Court.is_active.is_(is_active))
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_coaches(db: AsyncSession, is_active: bool | None = None) -> list[Coach]:
    query = select(Coach).order_by(Coach.id)
    if is_active is not None:
        query = query.where(Coach.is_active.is_(is_active))
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_equipment(db: AsyncSession, is_active: bool | None = None) -> list[Equipment]:
    query = select(Equipment).order_by(Equipment.id)
    if is_active is not None:
        query = query.where(Equipment.is_active.is_(is_active))
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_pricing_rules(
    db: AsyncSession, is_active: bool | None = None, rule_type: RuleType | None = None
) -> list[PricingRule]:
    query = select(PricingRule).order_by(PricingRule.priority.desc(), PricingRule.id)
    if is_active is not None:
        query = query.where(PricingRule.is_active.is_(is_active))
    if rule_type is not None:
        query = query.where(PricingRule.rule_type == rule_type)
    result = await db.execute(query)
    return list(result.scalars().all())


async def create(db: AsyncSession, model: type[CatalogModel], fields: dict[str, Any]) -> CatalogModel:
    obj = model(**fields)
    db.add(obj)
    await db.flush()
    logger.info("Created %s #%s", _LABELS[model].lower(), obj.id)
    return obj


async def update(
    db: AsyncSession, model: type[CatalogModel], obj_id: int, changes: dict[str, Any]
) -> CatalogModel:
    """Apply a partial update: only keys present in `changes` are written."""
    obj = await require(db, model, obj_id)
    for field, value in changes.items():
        setattr(obj, field, value)
    if isinstance(obj, PricingRule) and (obj.multiplier is None) == (obj.fixed_amount is None):
        raise InvalidInput("A pricing rule needs exactly one of multiplier or fixed_amount")
    await db.flush()
    return obj


async def deactivate(db: AsyncSession, model: type[CatalogModel], obj_id: int) -> CatalogModel:
    obj = await require(db, model, obj_id)
    obj.is_active = False
    await db.flush()
    logger.info("Deactivated %s #%s", _LABELS[model].lower(), obj_id)
    return obj
