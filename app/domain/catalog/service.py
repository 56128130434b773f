"""Catalog service - Business logic for the catalog store"""

import json
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...cache import invalidate_pricing_rules_cache
from ...models import Addon, Coupon, PricingRule, Service, Zone
from ...shared.exceptions import ConflictError
from ..pricing.rules import parse_rule_value
from .repository import CatalogRepository
from .schemas import AddonCreate, CouponCreate, PricingRuleUpsert, ServiceCreate, ZoneCreate

logger = logging.getLogger(__name__)


class CatalogService:
    """Service layer for catalog reads and admin writes"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()

    def get_services(self, visible_only: bool = False) -> list[Service]:
        return self.repo.get_services(self.db, visible_only)

    def create_service(self, data: ServiceCreate) -> Service:
        """Create a service, rejecting duplicate slugs"""
        try:
            service = self.repo.create_service(self.db, **data.model_dump())
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"⚠️ Service slug already exists: {data.slug}")
            raise ConflictError("service", "slug", data.slug) from None
        logger.info(f"✅ Service created: {service.slug} (id={service.id})")
        return service

    def get_addons(self, visible_only: bool = True) -> list[Addon]:
        return self.repo.get_addons(self.db, visible_only)

    def create_addon(self, data: AddonCreate) -> Addon:
        """Create an addon, rejecting duplicate slugs"""
        try:
            addon = self.repo.create_addon(self.db, **data.model_dump())
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"⚠️ Addon slug already exists: {data.slug}")
            raise ConflictError("addon", "slug", data.slug) from None
        logger.info(f"✅ Addon created: {addon.slug} (id={addon.id})")
        return addon

    def get_zones(self) -> list[Zone]:
        return self.repo.get_zones(self.db)

    def create_zone(self, data: ZoneCreate) -> Zone:
        zone = self.repo.create_zone(self.db, **data.model_dump())
        logger.info(f"✅ Zone created: {zone.name_en} (id={zone.id})")
        return zone

    def get_pricing_rules(
        self, enabled_only: bool = False, keys: Optional[list[str]] = None
    ) -> list[PricingRule]:
        return self.repo.get_pricing_rules(self.db, enabled_only, keys)

    def upsert_pricing_rule(self, key: str, data: PricingRuleUpsert) -> PricingRule:
        """Create or replace a pricing rule and drop the cached rule set"""
        # Known keys must fit their typed model; the admin's JSON is stored as sent
        parse_rule_value(key, data.value)
        value_json = json.dumps(data.value)

        try:
            rule = self.repo.upsert_pricing_rule(self.db, key, value_json, data.enabled)
        except IntegrityError:
            # Lost a race with a concurrent insert of the same key
            self.db.rollback()
            raise ConflictError("pricing rule", "key", key) from None

        invalidate_pricing_rules_cache()
        logger.info(f"✅ Pricing rule {key} saved (enabled={rule.enabled}), cache invalidated")
        return rule

    def create_coupon(self, data: CouponCreate) -> Coupon:
        """Create a coupon, rejecting duplicate codes"""
        coupon_data = data.model_dump()
        coupon_data["discount_type"] = data.discount_type.value
        try:
            coupon = self.repo.create_coupon(self.db, **coupon_data)
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"⚠️ Coupon code already exists: {data.code}")
            raise ConflictError("coupon", "code", data.code) from None
        logger.info(f"✅ Coupon created: {coupon.code} ({coupon.discount_type} {coupon.value})")
        return coupon
