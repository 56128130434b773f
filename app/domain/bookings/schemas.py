"""Booking domain schemas - Pydantic models for booking intake, updates and listing"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from ...models import Booking, BookingStatus, CarType
from ...shared.validators import to_naive_utc
from ..customers.schemas import CustomerInput
from ..pricing.schemas import GeoPoint


class ScheduledWindow(BaseModel):
    """Arrival window; timestamps are stored as naive UTC"""

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def store_as_utc(cls, v):
        return to_naive_utc(v)


class ScheduledWindowPatch(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @field_validator("start", "end")
    @classmethod
    def store_as_utc(cls, v):
        if v is not None:
            return to_naive_utc(v)
        return v


class CreateBookingRequest(BaseModel):
    """Schema for a booking wizard submission"""

    customer: CustomerInput
    service_id: int
    addon_ids: list[int] = Field(
        default_factory=list, validation_alias=AliasChoices("addon_ids", "addons")
    )
    car_type: CarType
    zone_id: int
    address_text: str = Field(..., min_length=1)
    geo_point: GeoPoint
    scheduled_window: ScheduledWindow
    is_solo: bool = False
    # Only honoured when full pricing applies to bookings
    coupon_code: Optional[str] = None

    @model_validator(mode="after")
    def validate_window(self):
        if self.scheduled_window.start >= self.scheduled_window.end:
            raise ValueError("scheduled_window.start must be before scheduled_window.end")
        return self


class CreateBookingResponse(BaseModel):
    booking_id: str
    price_total: float
    notification_id: Optional[str] = None


class UpdateBookingRequest(BaseModel):
    """Partial update; omitted fields are left untouched"""

    status: Optional[BookingStatus] = None
    scheduled_window: Optional[ScheduledWindowPatch] = None
    address_text: Optional[str] = Field(None, min_length=1)
    geo_point: Optional[GeoPoint] = None


class BookingResponse(BaseModel):
    """Schema for booking response"""

    id: int
    booking_id: str
    customer_id: int
    service_id: int
    addons: list[int]
    car_type: CarType
    zone_id: int
    address_text: str
    geo_point: str
    scheduled_window_start: datetime
    scheduled_window_end: datetime
    status: BookingStatus
    price_total: float
    estimated_duration_minutes: Optional[int] = None
    is_solo: bool
    distance_fee: Optional[float] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            booking_id=booking.reference,
            customer_id=booking.customer_id,
            service_id=booking.service_id,
            addons=list(booking.addons or []),
            car_type=booking.car_type,
            zone_id=booking.zone_id,
            address_text=booking.address_text,
            geo_point=booking.geo_point,
            scheduled_window_start=booking.scheduled_window_start,
            scheduled_window_end=booking.scheduled_window_end,
            status=booking.status,
            price_total=float(booking.price_total),
            estimated_duration_minutes=booking.estimated_duration_minutes,
            is_solo=booking.is_solo,
            distance_fee=float(booking.distance_fee) if booking.distance_fee is not None else None,
            created_at=booking.created_at,
        )


class BookingFilters(BaseModel):
    status: Optional[BookingStatus] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    zone_id: Optional[int] = None
    customer_id: Optional[int] = None

    @field_validator("date_from", "date_to")
    @classmethod
    def store_as_utc(cls, v):
        if v is not None:
            return to_naive_utc(v)
        return v


class AdminOverviewResponse(BaseModel):
    today_bookings: int
    pending_bookings: int
    completed_bookings: int
    revenue_today: float
    avg_service_time: int
    on_time_percentage: int
