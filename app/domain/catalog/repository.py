"""Catalog repository - Database operations for services, addons, zones, rules and coupons"""

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import Addon, Coupon, PricingRule, Service, Zone


class CatalogRepository:
    """Repository for catalog database operations"""

    # Services
    @staticmethod
    def get_services(db: Session, visible_only: bool = False) -> list[Service]:
        """Get services in display order"""
        query = db.query(Service)
        if visible_only:
            query = query.filter(Service.visible.is_(True))
        return query.order_by(Service.order.asc(), Service.id.asc()).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    # Addons
    @staticmethod
    def get_addons(db: Session, visible_only: bool = True) -> list[Addon]:
        """Get addons in display order, visible ones only unless told otherwise"""
        query = db.query(Addon)
        if visible_only:
            query = query.filter(Addon.visible.is_(True))
        return query.order_by(Addon.order.asc(), Addon.id.asc()).all()

    @staticmethod
    def get_addons_by_ids(db: Session, addon_ids: Iterable[int]) -> list[Addon]:
        """Get the distinct addons matching the given ids (missing ids are simply absent)"""
        unique_ids = set(addon_ids)
        if not unique_ids:
            return []
        return db.query(Addon).filter(Addon.id.in_(unique_ids)).all()

    @staticmethod
    def create_addon(db: Session, **addon_data) -> Addon:
        addon = Addon(**addon_data)
        db.add(addon)
        db.commit()
        db.refresh(addon)
        return addon

    # Zones
    @staticmethod
    def get_zones(db: Session) -> list[Zone]:
        return db.query(Zone).order_by(Zone.id.asc()).all()

    @staticmethod
    def get_zone_by_id(db: Session, zone_id: int) -> Optional[Zone]:
        return db.query(Zone).filter(Zone.id == zone_id).first()

    @staticmethod
    def create_zone(db: Session, **zone_data) -> Zone:
        zone = Zone(**zone_data)
        db.add(zone)
        db.commit()
        db.refresh(zone)
        return zone

    # Pricing rules
    @staticmethod
    def get_pricing_rules(
        db: Session, enabled_only: bool = False, keys: Optional[list[str]] = None
    ) -> list[PricingRule]:
        """Get pricing rules ordered by key"""
        query = db.query(PricingRule)
        if enabled_only:
            query = query.filter(PricingRule.enabled.is_(True))
        if keys:
            query = query.filter(PricingRule.key.in_(keys))
        return query.order_by(PricingRule.key.asc()).all()

    @staticmethod
    def get_pricing_rule_by_key(db: Session, key: str) -> Optional[PricingRule]:
        return db.query(PricingRule).filter(PricingRule.key == key).first()

    @staticmethod
    def upsert_pricing_rule(db: Session, key: str, value_json: str, enabled: bool) -> PricingRule:
        """Create the rule or replace its value and enabled flag"""
        rule = CatalogRepository.get_pricing_rule_by_key(db, key)
        if rule is None:
            rule = PricingRule(key=key, value_json=value_json, enabled=enabled)
            db.add(rule)
        else:
            rule.value_json = value_json
            rule.enabled = enabled
        db.commit()
        db.refresh(rule)
        return rule

    # Coupons
    @staticmethod
    def get_coupon_by_code(db: Session, code: str) -> Optional[Coupon]:
        return db.query(Coupon).filter(Coupon.code == code).first()

    @staticmethod
    def create_coupon(db: Session, **coupon_data) -> Coupon:
        coupon = Coupon(**coupon_data)
        db.add(coupon)
        db.commit()
        db.refresh(coupon)
        return coupon
