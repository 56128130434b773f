"""Booking router - FastAPI endpoints for booking intake and lifecycle"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...config import PUBLIC_RATE_LIMIT, PUBLIC_RATE_WINDOW_SECONDS
from ...database import get_db
from ...models import BookingStatus
from ...rate_limiter import create_rate_limiter
from .lifecycle import BookingLifecycleManager, parse_booking_id
from .schemas import (
    AdminOverviewResponse,
    BookingFilters,
    BookingResponse,
    CreateBookingRequest,
    CreateBookingResponse,
    UpdateBookingRequest,
)
from .service import BookingIntake, BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])

booking_rate_limit = create_rate_limiter(
    limit=PUBLIC_RATE_LIMIT, window_seconds=PUBLIC_RATE_WINDOW_SECONDS, key_prefix="bookings"
)


def get_booking_intake(db: Session = Depends(get_db)) -> BookingIntake:
    """Dependency injection for BookingIntake"""
    return BookingIntake(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def get_lifecycle_manager(db: Session = Depends(get_db)) -> BookingLifecycleManager:
    """Dependency injection for BookingLifecycleManager"""
    return BookingLifecycleManager(db)


@router.post("", response_model=CreateBookingResponse, status_code=201)
async def create_booking(
    data: CreateBookingRequest,
    intake: BookingIntake = Depends(get_booking_intake),
    _: None = Depends(booking_rate_limit),
):
    """Create a booking from the public booking wizard"""
    confirmation = await intake.create_booking(data)
    return CreateBookingResponse(
        booking_id=confirmation.booking.reference,
        price_total=float(confirmation.booking.price_total),
        notification_id=confirmation.notification_id,
    )


@router.get("", response_model=list[BookingResponse])
async def get_bookings(
    status: Optional[BookingStatus] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    zone_id: Optional[int] = Query(None),
    customer_id: Optional[int] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    """List bookings, newest first (date filters apply to creation time)"""
    filters = BookingFilters(
        status=status,
        date_from=date_from,
        date_to=date_to,
        zone_id=zone_id,
        customer_id=customer_id,
    )
    bookings = await asyncio.to_thread(service.list_bookings, filters)
    return [BookingResponse.from_model(b) for b in bookings]


@router.get("/overview", response_model=AdminOverviewResponse)
async def get_admin_overview(service: BookingService = Depends(get_booking_service)):
    """Dashboard metrics for today and the last 30 days"""
    return await asyncio.to_thread(service.get_overview)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
):
    """Get a booking by reference (BK000042) or numeric id"""
    booking = await asyncio.to_thread(service.get_booking, parse_booking_id(booking_id))
    return BookingResponse.from_model(booking)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: str,
    data: UpdateBookingRequest,
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    """Partially update a booking's status, schedule, address or location"""
    booking = await manager.update_booking(parse_booking_id(booking_id), data)
    return BookingResponse.from_model(booking)
