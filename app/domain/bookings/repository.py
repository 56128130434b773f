"""Booking repository - Database operations for bookings"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, BookingStatus, Service

PENDING_STATUSES = (
    BookingStatus.CONFIRMED.value,
    BookingStatus.ON_THE_WAY.value,
    BookingStatus.STARTED.value,
)


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def create_booking(db: Session, **booking_data) -> Booking:
        """Insert a booking in a single commit"""
        booking = Booking(**booking_data)
        db.add(booking)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(booking)
        return booking

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        """Apply the given column updates"""
        for key, value in updates.items():
            setattr(booking, key, value)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(booking)
        return booking

    @staticmethod
    def get_bookings(
        db: Session,
        status: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        zone_id: Optional[int] = None,
        customer_id: Optional[int] = None,
    ) -> list[Booking]:
        """Get bookings, newest first, with optional filters (dates apply to created_at)"""
        query = db.query(Booking)

        if status:
            query = query.filter(Booking.status == status)
        if date_from:
            query = query.filter(Booking.created_at >= date_from)
        if date_to:
            query = query.filter(Booking.created_at <= date_to)
        if zone_id:
            query = query.filter(Booking.zone_id == zone_id)
        if customer_id:
            query = query.filter(Booking.customer_id == customer_id)

        return query.order_by(
            Booking.created_at.desc(), Booking.scheduled_window_start.desc(), Booking.id.desc()
        ).all()

    # Overview Methods
    @staticmethod
    def count_created_between(
        db: Session, start: datetime, end: datetime, status: Optional[str] = None
    ) -> int:
        query = db.query(func.count(Booking.id)).filter(
            Booking.created_at >= start, Booking.created_at < end
        )
        if status:
            query = query.filter(Booking.status == status)
        return query.scalar() or 0

    @staticmethod
    def count_pending(db: Session) -> int:
        return (
            db.query(func.count(Booking.id))
            .filter(Booking.status.in_(PENDING_STATUSES))
            .scalar()
            or 0
        )

    @staticmethod
    def revenue_between(db: Session, start: datetime, end: datetime) -> Decimal:
        """Sum of price_total for finished bookings created in [start, end)"""
        total = (
            db.query(func.sum(Booking.price_total))
            .filter(
                Booking.status == BookingStatus.FINISHED.value,
                Booking.created_at >= start,
                Booking.created_at < end,
            )
            .scalar()
        )
        return Decimal(total) if total is not None else Decimal("0")

    @staticmethod
    def finished_service_minutes_since(db: Session, since: datetime) -> list[int]:
        """Catalog duration of each finished booking created since the given time"""
        rows = (
            db.query(Service.est_minutes)
            .join(Booking, Booking.service_id == Service.id)
            .filter(Booking.status == BookingStatus.FINISHED.value, Booking.created_at >= since)
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def count_created_since(db: Session, since: datetime, status: Optional[str] = None) -> int:
        query = db.query(func.count(Booking.id)).filter(Booking.created_at >= since)
        if status:
            query = query.filter(Booking.status == status)
        return query.scalar() or 0
