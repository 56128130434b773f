"""Pricing router - Public price quote endpoint"""

import asyncio
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...config import PUBLIC_RATE_LIMIT, PUBLIC_RATE_WINDOW_SECONDS
from ...database import get_db
from ...rate_limiter import create_rate_limiter
from .engine import FULL_PRICING, PricingEngine
from .schemas import CalculatePricingRequest, CalculatePricingResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["Pricing"])

quote_rate_limit = create_rate_limiter(
    limit=PUBLIC_RATE_LIMIT, window_seconds=PUBLIC_RATE_WINDOW_SECONDS, key_prefix="pricing_quote"
)


def get_pricing_engine(db: Session = Depends(get_db)) -> PricingEngine:
    """Dependency injection for PricingEngine"""
    return PricingEngine(db)


@router.post("/calculate", response_model=CalculatePricingResponse)
async def calculate_pricing(
    data: CalculatePricingRequest,
    engine: PricingEngine = Depends(get_pricing_engine),
    _: None = Depends(quote_rate_limit),
):
    """Quote a booking with every pricing rule, the distance fee and any coupon applied"""
    breakdown = await asyncio.to_thread(engine.compute_price, data.to_selection(), FULL_PRICING)
    return CalculatePricingResponse.from_breakdown(breakdown)
