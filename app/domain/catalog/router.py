"""Catalog router - FastAPI endpoints for services, addons, zones, pricing rules and coupons"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import (
    AddonCreate,
    AddonResponse,
    CouponCreate,
    CouponResponse,
    PricingRuleResponse,
    PricingRuleUpsert,
    ServiceCreate,
    ServiceResponse,
    ZoneCreate,
    ZoneResponse,
)
from .service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


# ============================================================================
# SERVICES & ADDONS
# ============================================================================


@router.get("/services", response_model=list[ServiceResponse])
async def get_services(
    visible_only: bool = Query(False),
    service: CatalogService = Depends(get_catalog_service),
):
    """List services in display order"""
    services = await asyncio.to_thread(service.get_services, visible_only)
    return [ServiceResponse.model_validate(s) for s in services]


@router.post("/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    data: ServiceCreate,
    service: CatalogService = Depends(get_catalog_service),
):
    """Create a service (409 on duplicate slug)"""
    created = await asyncio.to_thread(service.create_service, data)
    return ServiceResponse.model_validate(created)


@router.get("/addons", response_model=list[AddonResponse])
async def get_addons(
    visible_only: bool = Query(True),
    service: CatalogService = Depends(get_catalog_service),
):
    """List addons; hidden ones only when visible_only=false"""
    addons = await asyncio.to_thread(service.get_addons, visible_only)
    return [AddonResponse.model_validate(a) for a in addons]


@router.post("/addons", response_model=AddonResponse, status_code=status.HTTP_201_CREATED)
async def create_addon(
    data: AddonCreate,
    service: CatalogService = Depends(get_catalog_service),
):
    created = await asyncio.to_thread(service.create_addon, data)
    return AddonResponse.model_validate(created)


# ============================================================================
# ZONES
# ============================================================================


@router.get("/zones", response_model=list[ZoneResponse])
async def get_zones(service: CatalogService = Depends(get_catalog_service)):
    zones = await asyncio.to_thread(service.get_zones)
    return [ZoneResponse.model_validate(z) for z in zones]


@router.post("/zones", response_model=ZoneResponse, status_code=status.HTTP_201_CREATED)
async def create_zone(
    data: ZoneCreate,
    service: CatalogService = Depends(get_catalog_service),
):
    """Create a zone from a GeoJSON Point or Polygon"""
    created = await asyncio.to_thread(service.create_zone, data)
    return ZoneResponse.model_validate(created)


# ============================================================================
# PRICING RULES & COUPONS
# ============================================================================


@router.get("/pricing-rules", response_model=list[PricingRuleResponse])
async def get_pricing_rules(
    enabled_only: bool = Query(False),
    keys: Optional[list[str]] = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """List pricing rules ordered by key"""
    rules = await asyncio.to_thread(service.get_pricing_rules, enabled_only, keys)
    return [PricingRuleResponse.from_model(r) for r in rules]


@router.put("/pricing-rules/{key}", response_model=PricingRuleResponse)
async def upsert_pricing_rule(
    key: str,
    data: PricingRuleUpsert,
    service: CatalogService = Depends(get_catalog_service),
):
    """Create or replace a pricing rule"""
    rule = await asyncio.to_thread(service.upsert_pricing_rule, key, data)
    return PricingRuleResponse.from_model(rule)


@router.post("/coupons", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    data: CouponCreate,
    service: CatalogService = Depends(get_catalog_service),
):
    """Create a coupon (409 on duplicate code)"""
    coupon = await asyncio.to_thread(service.create_coupon, data)
    return CouponResponse.model_validate(coupon)
