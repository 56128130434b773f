"""Fleet lead router - FastAPI endpoints for B2B fleet leads"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import PUBLIC_RATE_LIMIT, PUBLIC_RATE_WINDOW_SECONDS
from ...database import get_db
from ...models import FleetLeadStatus
from ...rate_limiter import create_rate_limiter
from .schemas import FleetLeadCreate, FleetLeadResponse, FleetLeadUpdate
from .service import FleetLeadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/fleet-leads", tags=["Fleet Leads"])

lead_rate_limit = create_rate_limiter(
    limit=PUBLIC_RATE_LIMIT, window_seconds=PUBLIC_RATE_WINDOW_SECONDS, key_prefix="fleet_leads"
)


def get_fleet_lead_service(db: Session = Depends(get_db)) -> FleetLeadService:
    """Dependency injection for FleetLeadService"""
    return FleetLeadService(db)


@router.post("", response_model=FleetLeadResponse, status_code=201)
async def create_fleet_lead(
    data: FleetLeadCreate,
    service: FleetLeadService = Depends(get_fleet_lead_service),
    _: None = Depends(lead_rate_limit),
):
    """Capture a lead from the business page"""
    lead = await asyncio.to_thread(service.create_lead, data)
    return FleetLeadResponse.model_validate(lead)


@router.get("", response_model=list[FleetLeadResponse])
async def get_fleet_leads(
    status: Optional[FleetLeadStatus] = Query(None),
    service: FleetLeadService = Depends(get_fleet_lead_service),
):
    leads = await asyncio.to_thread(service.get_leads, status)
    return [FleetLeadResponse.model_validate(lead) for lead in leads]


@router.patch("/{lead_id}", response_model=FleetLeadResponse)
async def update_fleet_lead(
    lead_id: int,
    data: FleetLeadUpdate,
    service: FleetLeadService = Depends(get_fleet_lead_service),
):
    """Update a lead's status or notes"""
    lead = await asyncio.to_thread(service.update_lead, lead_id, data)
    return FleetLeadResponse.model_validate(lead)
