"""Catalog domain schemas - Pydantic models for services, addons, zones, rules and coupons"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...models import DiscountType
from ...shared.geo import parse_zone_geometry
from ...shared.validators import to_naive_utc


class ServiceCreate(BaseModel):
    """Schema for creating a catalog service"""

    slug: str = Field(..., min_length=1, max_length=120)
    name_ar: str
    name_en: str
    desc_ar: Optional[str] = None
    desc_en: Optional[str] = None
    base_price_team: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    base_price_solo: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    est_minutes: int = Field(..., ge=0)
    order: int = 0
    visible: bool = True


class ServiceResponse(BaseModel):
    id: int
    slug: str
    name_ar: str
    name_en: str
    desc_ar: Optional[str] = None
    desc_en: Optional[str] = None
    base_price_team: float
    base_price_solo: float
    est_minutes: int
    order: int
    visible: bool

    class Config:
        from_attributes = True


class AddonCreate(BaseModel):
    """Schema for creating an addon"""

    slug: str = Field(..., min_length=1, max_length=120)
    name_ar: str
    name_en: str
    desc_ar: Optional[str] = None
    desc_en: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    est_minutes: int = Field(..., ge=0)
    order: int = 0
    visible: bool = True


class AddonResponse(BaseModel):
    id: int
    slug: str
    name_ar: str
    name_en: str
    desc_ar: Optional[str] = None
    desc_en: Optional[str] = None
    price: float
    est_minutes: int
    order: int
    visible: bool

    class Config:
        from_attributes = True


class ZoneCreate(BaseModel):
    """Schema for creating a service zone"""

    name_ar: str
    name_en: str
    polygon_or_center: str
    notes: Optional[str] = None

    @field_validator("polygon_or_center")
    @classmethod
    def validate_geometry(cls, v):
        parse_zone_geometry(v)
        return v


class ZoneResponse(BaseModel):
    id: int
    name_ar: str
    name_en: str
    polygon_or_center: str
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class PricingRuleUpsert(BaseModel):
    """Schema for creating or replacing a pricing rule by key"""

    value: dict[str, Any]
    enabled: bool = True


class PricingRuleResponse(BaseModel):
    id: int
    key: str
    value: Any
    enabled: bool

    @classmethod
    def from_model(cls, rule) -> "PricingRuleResponse":
        try:
            value = json.loads(rule.value_json)
        except ValueError:
            # Surface the raw text so admins can see and fix it
            value = rule.value_json
        return cls(id=rule.id, key=rule.key, value=value, enabled=rule.enabled)


class CouponCreate(BaseModel):
    """Schema for creating a coupon"""

    code: str = Field(..., min_length=1, max_length=50)
    discount_type: DiscountType
    value: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, ge=0)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v):
        return v.strip()

    @field_validator("start_at", "end_at")
    @classmethod
    def store_as_utc(cls, v):
        if v is not None:
            return to_naive_utc(v)
        return v

    @model_validator(mode="after")
    def validate_coupon(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage coupons cannot exceed 100")
        if self.start_at and self.end_at and self.start_at > self.end_at:
            raise ValueError("start_at must not be after end_at")
        return self


class CouponResponse(BaseModel):
    id: int
    code: str
    discount_type: DiscountType
    value: float
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    usage_limit: Optional[int] = None

    class Config:
        from_attributes = True
