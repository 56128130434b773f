"""Booking service - Booking intake, listing and admin overview"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from ...config import APPLY_FULL_PRICING_ON_BOOKING
from ...models import Booking, BookingStatus
from ...services.notification_service import notify_booking_confirmed
from ...services.whatsapp_service import WhatsAppReceipt
from ...shared.exceptions import NotFoundError
from ...shared.geo import encode_geo_point
from ...shared.validators import utc_now
from ..customers.service import CustomerDirectory
from ..pricing.engine import BASE_AND_ADDONS, FULL_PRICING, PricingEngine, PriceSelection
from .repository import BookingRepository
from .schemas import AdminOverviewResponse, BookingFilters, CreateBookingRequest

logger = logging.getLogger(__name__)


@dataclass
class BookingConfirmation:
    booking: Booking
    receipt: Optional[WhatsAppReceipt] = None

    @property
    def notification_id(self) -> Optional[str]:
        return self.receipt.message_id if self.receipt else None


class BookingIntake:
    """Turns a wizard submission into a priced, persisted booking"""

    def __init__(
        self,
        db: Session,
        pricing_engine: Optional[PricingEngine] = None,
        customers: Optional[CustomerDirectory] = None,
        apply_full_pricing: bool = APPLY_FULL_PRICING_ON_BOOKING,
        notification_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.repo = BookingRepository()
        self.pricing_engine = pricing_engine or PricingEngine(db)
        self.customers = customers or CustomerDirectory(db)
        self.apply_full_pricing = apply_full_pricing
        self.notification_transport = notification_transport

    def register_booking(self, data: CreateBookingRequest) -> Booking:
        """
        Resolve the customer, price the selection and insert the booking.

        A customer created here stays even if pricing then fails.

        Raises:
            NotFoundError: Unknown service, addon or zone
        """
        customer = self.customers.resolve(data.customer.name, data.customer.phone)

        policy = FULL_PRICING if self.apply_full_pricing else BASE_AND_ADDONS
        selection = PriceSelection(
            service_id=data.service_id,
            zone_id=data.zone_id,
            car_type=data.car_type,
            is_solo=data.is_solo,
            addon_ids=list(data.addon_ids),
            geo_point=data.geo_point.model_dump(),
            coupon_code=data.coupon_code.strip() if data.coupon_code else None,
        )
        breakdown = self.pricing_engine.compute_price(selection, policy)

        booking = self.repo.create_booking(
            self.db,
            customer_id=customer.id,
            service_id=data.service_id,
            addons=list(data.addon_ids),
            car_type=data.car_type.value,
            zone_id=data.zone_id,
            address_text=data.address_text,
            geo_point=encode_geo_point(data.geo_point.lat, data.geo_point.lng),
            scheduled_window_start=data.scheduled_window.start,
            scheduled_window_end=data.scheduled_window.end,
            status=BookingStatus.CONFIRMED.value,
            price_total=breakdown.total_price,
            estimated_duration_minutes=breakdown.estimated_duration_minutes,
            is_solo=data.is_solo,
            distance_fee=breakdown.distance_fee if breakdown.distance_fee > 0 else None,
        )
        logger.info(
            f"📥 Booking {booking.reference} created: customer={customer.id}, "
            f"service={data.service_id}, total={booking.price_total}"
        )
        return booking

    async def create_booking(self, data: CreateBookingRequest) -> BookingConfirmation:
        """Register the booking off the event loop, then send the confirmation message"""
        booking = await asyncio.to_thread(self.register_booking, data)
        receipt = await notify_booking_confirmed(
            self.db, booking, transport=self.notification_transport
        )
        return BookingConfirmation(booking=booking, receipt=receipt)


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class BookingService:
    """Read side of bookings: single lookups, filtered listing, dashboard metrics"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError("booking", booking_id)
        return booking

    def list_bookings(self, filters: BookingFilters) -> list[Booking]:
        return self.repo.get_bookings(
            self.db,
            status=filters.status.value if filters.status else None,
            date_from=filters.date_from,
            date_to=filters.date_to,
            zone_id=filters.zone_id,
            customer_id=filters.customer_id,
        )

    def get_overview(self, now: Optional[datetime] = None) -> AdminOverviewResponse:
        """Today's counts and revenue plus 30-day service metrics (UTC days)"""
        now = now or utc_now()
        today = datetime(now.year, now.month, now.day)
        tomorrow = today + timedelta(days=1)
        thirty_days_ago = now - timedelta(days=30)

        finished = BookingStatus.FINISHED.value
        minutes = self.repo.finished_service_minutes_since(self.db, thirty_days_ago)
        avg_service_time = _round_half_up(Decimal(sum(minutes)) / len(minutes)) if minutes else 0

        recent_total = self.repo.count_created_since(self.db, thirty_days_ago)
        recent_finished = self.repo.count_created_since(self.db, thirty_days_ago, finished)
        on_time_percentage = (
            _round_half_up(Decimal(recent_finished) * 100 / recent_total) if recent_total else 0
        )

        return AdminOverviewResponse(
            today_bookings=self.repo.count_created_between(self.db, today, tomorrow),
            pending_bookings=self.repo.count_pending(self.db),
            completed_bookings=self.repo.count_created_between(self.db, today, tomorrow, finished),
            revenue_today=float(self.repo.revenue_between(self.db, today, tomorrow)),
            avg_service_time=avg_service_time,
            on_time_percentage=on_time_percentage,
        )
