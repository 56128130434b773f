"""
Booking lifecycle
Applies partial updates (status, schedule, address, location) to existing bookings
"""

import asyncio
import logging
import re
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from ...config import BOOKING_REF_PREFIX, ENFORCE_STATUS_TRANSITIONS
from ...models import Booking, BookingStatus
from ...services.notification_service import notify_status_change
from ...shared.exceptions import InvalidError, NotFoundError
from ...shared.geo import encode_geo_point
from .repository import BookingRepository
from .schemas import UpdateBookingRequest

logger = logging.getLogger(__name__)

# confirmed → on_the_way → started → finished, with postpone/cancel side exits
VALID_TRANSITIONS = {
    BookingStatus.CONFIRMED: {BookingStatus.ON_THE_WAY, BookingStatus.POSTPONED, BookingStatus.CANCELED},
    BookingStatus.ON_THE_WAY: {BookingStatus.STARTED, BookingStatus.POSTPONED, BookingStatus.CANCELED},
    BookingStatus.STARTED: {BookingStatus.FINISHED, BookingStatus.CANCELED},
    BookingStatus.POSTPONED: {BookingStatus.CONFIRMED, BookingStatus.CANCELED},
    BookingStatus.FINISHED: set(),  # Terminal state
    BookingStatus.CANCELED: set(),  # Terminal state
}


def validate_status_transition(current_status: BookingStatus, new_status: BookingStatus) -> bool:
    """True if the move is allowed; setting the same status is always allowed"""
    current_status = BookingStatus(current_status)
    new_status = BookingStatus(new_status)
    if current_status == new_status:
        return True
    return new_status in VALID_TRANSITIONS[current_status]


def parse_booking_id(value: str) -> int:
    """
    Accept a booking reference (BK000042) or a raw numeric id (42).

    Raises:
        InvalidError: If the value is neither
    """
    raw = str(value).strip()
    if raw[: len(BOOKING_REF_PREFIX)].upper() == BOOKING_REF_PREFIX.upper():
        raw = raw[len(BOOKING_REF_PREFIX):]
    if not re.fullmatch(r"[0-9]+", raw) or int(raw) < 1:
        raise InvalidError("booking_id", f"expected {BOOKING_REF_PREFIX}<digits> or a numeric id, got {value!r}")
    return int(raw)


class BookingLifecycleManager:
    """Service layer for booking updates"""

    def __init__(
        self,
        db: Session,
        enforce_transitions: bool = ENFORCE_STATUS_TRANSITIONS,
        notification_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.repo = BookingRepository()
        self.enforce_transitions = enforce_transitions
        self.notification_transport = notification_transport

    def apply_update(self, booking_id: int, patch: UpdateBookingRequest) -> tuple[Booking, bool]:
        """
        Apply the supplied fields and leave the rest untouched.

        Start and end of the window are applied independently and are not
        checked against each other.

        Returns:
            Tuple of (updated booking, whether the status changed)

        Raises:
            NotFoundError: If the booking does not exist
            InvalidError: For a forbidden transition when transitions are enforced
        """
        booking = self.repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError("booking", booking_id)

        updates = {}
        status_changed = False

        if patch.status is not None:
            current = BookingStatus(booking.status)
            if self.enforce_transitions and not validate_status_transition(current, patch.status):
                logger.warning(
                    f"⚠️ Rejected transition for {booking.reference}: {current.value} → {patch.status.value}"
                )
                raise InvalidError("status", f"cannot move from {current.value} to {patch.status.value}")
            updates["status"] = patch.status.value
            status_changed = current != patch.status

        if patch.scheduled_window is not None:
            if patch.scheduled_window.start is not None:
                updates["scheduled_window_start"] = patch.scheduled_window.start
            if patch.scheduled_window.end is not None:
                updates["scheduled_window_end"] = patch.scheduled_window.end

        if patch.address_text is not None:
            updates["address_text"] = patch.address_text

        if patch.geo_point is not None:
            updates["geo_point"] = encode_geo_point(patch.geo_point.lat, patch.geo_point.lng)

        if not updates:
            return booking, False

        previous_status = booking.status
        booking = self.repo.update_booking(self.db, booking, **updates)
        if status_changed:
            logger.info(f"🔄 Booking {booking.reference} transitioned: {previous_status} → {booking.status}")
        else:
            logger.info(f"✏️ Booking {booking.reference} updated: {', '.join(sorted(updates))}")
        return booking, status_changed

    async def update_booking(self, booking_id: int, patch: UpdateBookingRequest) -> Booking:
        """Update off the event loop, then notify the customer for user-facing transitions"""
        booking, status_changed = await asyncio.to_thread(self.apply_update, booking_id, patch)
        if status_changed:
            await notify_status_change(
                self.db, booking, BookingStatus(booking.status), transport=self.notification_transport
            )
        return booking
