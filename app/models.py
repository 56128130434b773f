from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .config import BOOKING_REF_PREFIX, BOOKING_REF_WIDTH
from .database import Base


class CarType(str, Enum):
    SEDAN = "sedan"
    SUV = "suv"
    PICKUP = "pickup"


class BookingStatus(str, Enum):
    """Operational lifecycle of a booking"""

    CONFIRMED = "confirmed"
    ON_THE_WAY = "on_the_way"
    STARTED = "started"
    FINISHED = "finished"
    POSTPONED = "postponed"
    CANCELED = "canceled"


class DiscountType(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class FleetLeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    TRIAL = "trial"
    CONVERTED = "converted"
    REJECTED = "rejected"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), unique=True, index=True, nullable=False)  # E.164, natural key
    whatsapp_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    bookings = relationship("Booking", back_populates="customer")


class Zone(Base):
    __tablename__ = "zones"

    id = Column(Integer, primary_key=True, index=True)
    name_ar = Column(String(255), nullable=False)
    name_en = Column(String(255), nullable=False)
    polygon_or_center = Column(Text, nullable=False)  # GeoJSON Point or Polygon as string
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    bookings = relationship("Booking", back_populates="zone")


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(120), unique=True, index=True, nullable=False)
    name_ar = Column(String(255), nullable=False)
    name_en = Column(String(255), nullable=False)
    desc_ar = Column(Text, nullable=True)
    desc_en = Column(Text, nullable=True)
    base_price_team = Column(Numeric(10, 2), nullable=False)
    base_price_solo = Column(Numeric(10, 2), nullable=False)
    est_minutes = Column(Integer, nullable=False)
    order = Column(Integer, default=0, nullable=False)
    visible = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class Addon(Base):
    __tablename__ = "addons"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(120), unique=True, index=True, nullable=False)
    name_ar = Column(String(255), nullable=False)
    name_en = Column(String(255), nullable=False)
    desc_ar = Column(Text, nullable=True)
    desc_en = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    est_minutes = Column(Integer, nullable=False)
    order = Column(Integer, default=0, nullable=False)
    visible = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class PricingRule(Base):
    """Keyed pricing configuration; value_json is parsed into a typed rule on read"""

    __tablename__ = "pricing_rules"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, index=True, nullable=False)
    value_json = Column(Text, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, index=True, nullable=False)
    discount_type = Column(String(20), nullable=False)  # fixed, percentage
    value = Column(Numeric(10, 2), nullable=False)
    start_at = Column(DateTime, nullable=True)  # null = no lower bound
    end_at = Column(DateTime, nullable=True)  # null = no upper bound
    usage_limit = Column(Integer, nullable=True)  # tracked outside the booking core
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    addons = Column(JSON, default=list, nullable=False)  # addon ids, duplicates kept
    car_type = Column(String(20), nullable=False)
    zone_id = Column(Integer, ForeignKey("zones.id"), nullable=False, index=True)
    address_text = Column(Text, nullable=False)
    geo_point = Column(Text, nullable=False)  # {"type":"Point","coordinates":[lng,lat]}
    scheduled_window_start = Column(DateTime, nullable=False)
    scheduled_window_end = Column(DateTime, nullable=False)
    status = Column(String(20), default=BookingStatus.CONFIRMED.value, nullable=False, index=True)
    # Price and duration are snapshots taken at creation time
    price_total = Column(Numeric(10, 2), nullable=False)
    estimated_duration_minutes = Column(Integer, nullable=True)
    is_solo = Column(Boolean, default=False, nullable=False)
    distance_fee = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)

    customer = relationship("Customer", back_populates="bookings")
    service = relationship("Service")
    zone = relationship("Zone", back_populates="bookings")

    @property
    def reference(self) -> str:
        """Human-facing booking id, e.g. BK000042"""
        return f"{BOOKING_REF_PREFIX}{str(self.id).zfill(BOOKING_REF_WIDTH)}"


class FleetLead(Base):
    __tablename__ = "fleet_leads"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    status = Column(String(20), default=FleetLeadStatus.NEW.value, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
