"""Shared test fixtures and helpers."""

import os

# Deterministic settings before the app reads its environment
os.environ.pop("REDIS_URL", None)
os.environ["WHATSAPP_ENABLED"] = "false"
os.environ["ENFORCE_STATUS_TRANSITIONS"] = "false"
os.environ["APPLY_FULL_PRICING_ON_BOOKING"] = "false"
os.environ["PUBLIC_RATE_LIMIT"] = "1000"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import json  # noqa: E402
from datetime import datetime, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import models_whatsapp  # noqa: E402,F401
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Addon, Coupon, PricingRule, Service, Zone  # noqa: E402
from app.rate_limiter import reset_rate_limits  # noqa: E402
from app.shared.validators import utc_now  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    reset_rate_limits()
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Catalog helpers
# ---------------------------------------------------------------------------


def make_service(db, **overrides) -> Service:
    """Wash service priced 15000 team / 12000 solo, 45 minutes."""
    data = {
        "slug": "exterior-wash",
        "name_ar": "غسيل خارجي",
        "name_en": "Exterior Wash",
        "base_price_team": Decimal("15000"),
        "base_price_solo": Decimal("12000"),
        "est_minutes": 45,
        "order": 1,
        "visible": True,
    }
    data.update(overrides)
    service = Service(**data)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def make_addon(db, **overrides) -> Addon:
    """Addon priced 3000, 20 minutes."""
    data = {
        "slug": "tire-shine",
        "name_ar": "تلميع الإطارات",
        "name_en": "Tire Shine",
        "price": Decimal("3000"),
        "est_minutes": 20,
        "order": 1,
        "visible": True,
    }
    data.update(overrides)
    addon = Addon(**data)
    db.add(addon)
    db.commit()
    db.refresh(addon)
    return addon


def make_zone(db, **overrides) -> Zone:
    data = {
        "name_ar": "حدة",
        "name_en": "Hadda",
        "polygon_or_center": '{"type":"Point","coordinates":[44.19,15.32]}',
    }
    data.update(overrides)
    zone = Zone(**data)
    db.add(zone)
    db.commit()
    db.refresh(zone)
    return zone


def make_coupon(
    db,
    code: str = "SAVE10",
    discount_type: str = "percentage",
    value: str = "10",
    start_at: Optional[datetime] = None,
    end_at: Optional[datetime] = None,
) -> Coupon:
    coupon = Coupon(
        code=code,
        discount_type=discount_type,
        value=Decimal(value),
        start_at=start_at if start_at is not None else utc_now() - timedelta(days=1),
        end_at=end_at if end_at is not None else utc_now() + timedelta(days=30),
    )
    db.add(coupon)
    db.commit()
    db.refresh(coupon)
    return coupon


def make_rule(db, key: str, value: dict, enabled: bool = True) -> PricingRule:
    rule = PricingRule(key=key, value_json=json.dumps(value), enabled=enabled)
    db.add(rule)
    db.commit()
    db.refresh(rule)
    return rule


def booking_payload(service_id: int, zone_id: int, addon_ids=None, **overrides) -> dict:
    """JSON body for POST /bookings."""
    start = datetime(2030, 1, 15, 9, 0)
    payload = {
        "customer": {"name": "Ahmed Ali", "phone": "+967771234567"},
        "service_id": service_id,
        "addon_ids": addon_ids or [],
        "car_type": "sedan",
        "zone_id": zone_id,
        "address_text": "Hadda Street, Sana'a",
        "geo_point": {"lat": 15.3229, "lng": 44.1910},
        "scheduled_window": {
            "start": start.isoformat(),
            "end": (start + timedelta(hours=2)).isoformat(),
        },
        "is_solo": False,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def catalog(db):
    """One service, one addon and one zone."""
    return {
        "service": make_service(db),
        "addon": make_addon(db),
        "zone": make_zone(db),
    }
