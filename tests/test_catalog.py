"""Tests for the catalog store and its admin endpoints."""

import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.domain.catalog import service as catalog_service_module
from app.domain.catalog.schemas import (
    CouponCreate,
    PricingRuleResponse,
    PricingRuleUpsert,
    ServiceCreate,
    ZoneCreate,
)
from app.domain.catalog.service import CatalogService
from app.models import PricingRule
from app.shared.exceptions import ConflictError, InvalidError
from conftest import make_addon, make_rule, make_service


def service_data(**overrides) -> dict:
    data = {
        "slug": "full-detail",
        "name_ar": "تنظيف شامل",
        "name_en": "Full Detail",
        "base_price_team": "25000",
        "base_price_solo": "20000",
        "est_minutes": 90,
    }
    data.update(overrides)
    return data


class TestServices:
    def test_ordered_by_display_order_then_id(self, db):
        make_service(db, slug="b", order=2)
        make_service(db, slug="a", order=1)
        make_service(db, slug="c", order=1)
        slugs = [s.slug for s in CatalogService(db).get_services()]
        assert slugs == ["a", "c", "b"]

    def test_visible_only(self, db):
        make_service(db, slug="shown")
        make_service(db, slug="hidden", visible=False)
        assert [s.slug for s in CatalogService(db).get_services(visible_only=True)] == ["shown"]
        assert len(CatalogService(db).get_services()) == 2

    def test_duplicate_slug_conflicts(self, db):
        catalog = CatalogService(db)
        catalog.create_service(ServiceCreate(**service_data()))
        with pytest.raises(ConflictError) as exc:
            catalog.create_service(ServiceCreate(**service_data(name_en="Other")))
        assert exc.value.field == "slug"

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            ServiceCreate(**service_data(base_price_team="-1"))


class TestAddons:
    def test_hidden_addons_excluded_by_default(self, db):
        make_addon(db, slug="wax")
        make_addon(db, slug="secret", visible=False)
        assert [a.slug for a in CatalogService(db).get_addons()] == ["wax"]
        assert len(CatalogService(db).get_addons(visible_only=False)) == 2


class TestZones:
    def test_polygon_zone_created(self, db):
        ring = [[44.1, 15.3], [44.2, 15.3], [44.2, 15.4], [44.1, 15.3]]
        zone = CatalogService(db).create_zone(
            ZoneCreate(
                name_ar="حدة",
                name_en="Hadda",
                polygon_or_center=json.dumps({"type": "Polygon", "coordinates": [ring]}),
            )
        )
        assert zone.id is not None

    def test_malformed_geometry_rejected(self):
        with pytest.raises(ValidationError):
            ZoneCreate(name_ar="x", name_en="x", polygon_or_center='{"type":"Point"}')


class TestPricingRules:
    def test_upsert_creates_then_replaces(self, db):
        catalog = CatalogService(db)
        catalog.upsert_pricing_rule("distance_fee", PricingRuleUpsert(value={"base_fee": 500}))
        rule = catalog.upsert_pricing_rule(
            "distance_fee", PricingRuleUpsert(value={"base_fee": 700}, enabled=False)
        )
        assert json.loads(rule.value_json) == {"base_fee": 700}
        assert rule.enabled is False
        assert db.query(PricingRule).count() == 1

    def test_upsert_validates_known_keys(self, db):
        with pytest.raises(InvalidError) as exc:
            CatalogService(db).upsert_pricing_rule(
                "distance_fee", PricingRuleUpsert(value={"base_fee": -5})
            )
        assert exc.value.field == "pricing_rules.distance_fee"
        assert db.query(PricingRule).count() == 0

    def test_unknown_keys_stored_as_is(self, db):
        rule = CatalogService(db).upsert_pricing_rule(
            "surge_window", PricingRuleUpsert(value={"from": "18:00"})
        )
        assert json.loads(rule.value_json) == {"from": "18:00"}

    def test_upsert_invalidates_cache(self, db, monkeypatch):
        calls = []
        monkeypatch.setattr(
            catalog_service_module, "invalidate_pricing_rules_cache", lambda: calls.append(True)
        )
        CatalogService(db).upsert_pricing_rule("distance_fee", PricingRuleUpsert(value={"base_fee": 1}))
        assert calls == [True]

    def test_listing_ordered_by_key_and_filtered(self, db):
        make_rule(db, "surge_window", {"from": "18:00"})
        make_rule(db, "car_type_multiplier", {"suv": 1.5})
        make_rule(db, "distance_fee", {"base_fee": 500}, enabled=False)
        catalog = CatalogService(db)
        assert [r.key for r in catalog.get_pricing_rules()] == [
            "car_type_multiplier",
            "distance_fee",
            "surge_window",
        ]
        assert [r.key for r in catalog.get_pricing_rules(enabled_only=True)] == [
            "car_type_multiplier",
            "surge_window",
        ]
        assert [r.key for r in catalog.get_pricing_rules(keys=["distance_fee"])] == ["distance_fee"]

    def test_response_surfaces_unparseable_value(self, db):
        rule = PricingRule(key="broken", value_json="{not json", enabled=True)
        db.add(rule)
        db.commit()
        assert PricingRuleResponse.from_model(rule).value == "{not json"


class TestCoupons:
    def test_code_kept_case_sensitive(self, db):
        coupon = CatalogService(db).create_coupon(
            CouponCreate(code=" Save10 ", discount_type="percentage", value="10")
        )
        assert coupon.code == "Save10"
        assert coupon.value == Decimal("10.00")

    def test_duplicate_code_conflicts(self, db):
        catalog = CatalogService(db)
        catalog.create_coupon(CouponCreate(code="SAVE10", discount_type="percentage", value="10"))
        with pytest.raises(ConflictError):
            catalog.create_coupon(CouponCreate(code="SAVE10", discount_type="fixed", value="500"))

    def test_percentage_over_hundred_rejected(self):
        with pytest.raises(ValidationError):
            CouponCreate(code="HUGE", discount_type="percentage", value="150")

    def test_fixed_over_hundred_allowed(self):
        assert CouponCreate(code="BIG", discount_type="fixed", value="5000").value == Decimal("5000")

    def test_inverted_validity_window_rejected(self):
        with pytest.raises(ValidationError):
            CouponCreate(
                code="LATE",
                discount_type="fixed",
                value="100",
                start_at="2030-02-01T00:00:00",
                end_at="2030-01-01T00:00:00",
            )


class TestCatalogEndpoints:
    def test_create_and_list_services(self, client):
        response = client.post("/services", json=service_data())
        assert response.status_code == 201
        body = response.json()
        assert body["base_price_team"] == 25000.0
        assert [s["slug"] for s in client.get("/services").json()] == ["full-detail"]

    def test_duplicate_service_is_409(self, client):
        client.post("/services", json=service_data())
        response = client.post("/services", json=service_data())
        assert response.status_code == 409
        assert response.json()["field"] == "slug"

    def test_bad_zone_geometry_is_422(self, client):
        response = client.post(
            "/zones", json={"name_ar": "x", "name_en": "x", "polygon_or_center": "nowhere"}
        )
        assert response.status_code == 422

    def test_put_pricing_rule(self, client):
        response = client.put("/pricing-rules/distance_fee", json={"value": {"base_fee": 500}})
        assert response.status_code == 200
        assert response.json()["value"] == {"base_fee": 500}
        listed = client.get("/pricing-rules", params={"enabled_only": True}).json()
        assert [r["key"] for r in listed] == ["distance_fee"]

    def test_invalid_pricing_rule_is_422(self, client):
        response = client.put("/pricing-rules/car_type_multiplier", json={"value": {"suv": "big"}})
        assert response.status_code == 422
        assert response.json()["field"] == "pricing_rules.car_type_multiplier"

    def test_create_coupon(self, client):
        response = client.post(
            "/coupons", json={"code": "SAVE10", "discount_type": "percentage", "value": 10}
        )
        assert response.status_code == 201
        assert response.json()["value"] == 10.0
