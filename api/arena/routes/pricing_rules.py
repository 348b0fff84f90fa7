"""Pricing rule routes. Reads are public, writes need an admin."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from arena.core.database import get_db
from arena.core.dependencies import require_admin
from arena.models.member import User
from arena.models.pricing_rule import PricingRule, RuleType
from arena.schemas import PricingRuleIn, PricingRuleOut, PricingRuleUpdate
from arena.services import catalog

router = APIRouter(prefix="/pricing-rules", tags=["pricing-rules"])


@router.get("", response_model=list[PricingRuleOut])
async def list_pricing_rules(
    is_active: bool | None = None,
    rule_type: RuleType | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.list_pricing_rules(db, is_active, rule_type)


@router.get("/{rule_id}", response_model=PricingRuleOut)
async def get_pricing_rule(rule_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog.require(db, PricingRule, rule_id)


@router.post("", response_model=PricingRuleOut, status_code=201)
async def create_pricing_rule(
    body: PricingRuleIn, _admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    return await catalog.create(db, PricingRule, body.model_dump())


@router.put("/{rule_id}", response_model=PricingRuleOut)
async def update_pricing_rule(
    rule_id: int,
    body: PricingRuleUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await catalog.update(db, PricingRule, rule_id, body.model_dump(exclude_unset=True))


@router.delete("/{rule_id}", response_model=PricingRuleOut)
async def delete_pricing_rule(
    rule_id: int, _admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    return await catalog.deactivate(db, PricingRule, rule_id)
