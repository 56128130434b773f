"""Pricing domain schemas - Pydantic models for price quotes"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from ...models import CarType
from .engine import PriceBreakdown, PriceSelection


class GeoPoint(BaseModel):
    """Customer location as sent by the booking wizard"""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class CalculatePricingRequest(BaseModel):
    """Schema for a price quote"""

    service_id: int
    addon_ids: list[int] = Field(
        default_factory=list, validation_alias=AliasChoices("addon_ids", "addons")
    )
    car_type: CarType
    is_solo: bool = False
    zone_id: int
    geo_point: GeoPoint
    coupon_code: Optional[str] = None

    def to_selection(self) -> PriceSelection:
        return PriceSelection(
            service_id=self.service_id,
            zone_id=self.zone_id,
            car_type=self.car_type,
            is_solo=self.is_solo,
            addon_ids=list(self.addon_ids),
            geo_point=self.geo_point.model_dump(),
            coupon_code=self.coupon_code.strip() if self.coupon_code else None,
        )


class CalculatePricingResponse(BaseModel):
    base_price: float
    addons_price: float
    distance_fee: float
    discount: float
    total_price: float
    estimated_duration_minutes: int

    @classmethod
    def from_breakdown(cls, breakdown: PriceBreakdown) -> "CalculatePricingResponse":
        return cls(
            base_price=float(breakdown.base_price),
            addons_price=float(breakdown.addons_price),
            distance_fee=float(breakdown.distance_fee),
            discount=float(breakdown.discount),
            total_price=float(breakdown.total_price),
            estimated_duration_minutes=breakdown.estimated_duration_minutes,
        )
