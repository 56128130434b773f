"""
Booking Notification Service
Maps booking events to WhatsApp templates; delivery is best-effort and never fails the caller
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..config import WHATSAPP_DEFAULT_LANGUAGE
from ..models import Booking, BookingStatus
from .whatsapp_service import TemplateKey, WhatsAppReceipt, send_whatsapp_message

logger = logging.getLogger(__name__)

# Status changes the customer hears about
STATUS_TEMPLATES = {
    BookingStatus.ON_THE_WAY: TemplateKey.ON_THE_WAY,
    BookingStatus.FINISHED: TemplateKey.REVIEW,
}


def booking_variables(booking: Booking, language: str = WHATSAPP_DEFAULT_LANGUAGE) -> dict:
    """Template variables for a booking message"""
    service = booking.service
    service_name = ""
    if service is not None:
        service_name = service.name_ar if language == "ar" else service.name_en

    return {
        "name": booking.customer.name,
        "booking_id": booking.reference,
        "service_name": service_name,
        "date": booking.scheduled_window_start.strftime("%Y-%m-%d %H:%M"),
        "price_total": f"{booking.price_total:.2f}",
    }


async def send_booking_notification(
    db: Session, booking: Booking, template_key: TemplateKey, **send_kwargs
) -> Optional[WhatsAppReceipt]:
    """
    Send a booking message to the booking's customer

    Returns:
        The delivery receipt, or None if sending raised
    """
    try:
        receipt = await send_whatsapp_message(
            db,
            phone=booking.customer.phone,
            template_key=template_key,
            variables=booking_variables(booking),
            entity_type="booking",
            entity_id=booking.id,
            **send_kwargs,
        )
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to send {template_key.value} notification for {booking.reference}: {e}")
        return None

    if receipt.status == "failed":
        logger.warning(f"⚠️ {template_key.value} notification for {booking.reference} failed: {receipt.error}")
    return receipt


async def notify_booking_confirmed(db: Session, booking: Booking, **send_kwargs) -> Optional[WhatsAppReceipt]:
    return await send_booking_notification(db, booking, TemplateKey.CONFIRM, **send_kwargs)


async def notify_status_change(
    db: Session, booking: Booking, new_status: BookingStatus, **send_kwargs
) -> Optional[WhatsAppReceipt]:
    """Notify for user-facing transitions only; other statuses return None"""
    template_key = STATUS_TEMPLATES.get(BookingStatus(new_status))
    if template_key is None:
        return None
    return await send_booking_notification(db, booking, template_key, **send_kwargs)
