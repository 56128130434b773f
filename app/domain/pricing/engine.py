"""
Pricing Engine
Turns a service/addon/zone selection into a deterministic price breakdown and duration
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ...models import CarType, Coupon, DiscountType, Zone
from ...shared.exceptions import NotFoundError
from ...shared.money import ZERO, to_money
from ...shared.validators import utc_now
from ..catalog.repository import CatalogRepository
from .rules import DistanceFeeRule, PricingRuleBook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingPolicy:
    """Which adjustments run on top of base + addons"""

    apply_distance_fee: bool = True
    apply_car_type_multiplier: bool = True
    apply_coupon: bool = True


FULL_PRICING = PricingPolicy()
BASE_AND_ADDONS = PricingPolicy(
    apply_distance_fee=False, apply_car_type_multiplier=False, apply_coupon=False
)


@dataclass
class PriceSelection:
    """What the customer picked in the booking wizard"""

    service_id: int
    zone_id: int
    car_type: CarType
    is_solo: bool = False
    addon_ids: list[int] = field(default_factory=list)
    geo_point: Optional[dict] = None  # {"lat", "lng"}
    coupon_code: Optional[str] = None


@dataclass
class PriceBreakdown:
    base_price: Decimal
    addons_price: Decimal
    distance_fee: Decimal
    discount: Decimal
    total_price: Decimal
    estimated_duration_minutes: int


class DistanceFeeCalculator(ABC):
    """Computes the travel surcharge for a zone and location"""

    @abstractmethod
    def calculate(
        self, zone: Zone, geo_point: Optional[dict], rule: Optional[DistanceFeeRule]
    ) -> Decimal:
        ...


class FlatDistanceFee(DistanceFeeCalculator):
    """Charges the configured base fee regardless of where the car is"""

    def calculate(
        self, zone: Zone, geo_point: Optional[dict], rule: Optional[DistanceFeeRule]
    ) -> Decimal:
        if rule is None:
            return ZERO
        return to_money(rule.base_fee)


def is_coupon_active(coupon: Coupon, now: datetime) -> bool:
    """Null bounds are open; both bounds are inclusive"""
    if coupon.start_at is not None and coupon.start_at > now:
        return False
    if coupon.end_at is not None and coupon.end_at < now:
        return False
    return True


def compute_discount(coupon: Coupon, subtotal: Decimal) -> Decimal:
    """Coupon discount capped at the subtotal and never negative"""
    value = Decimal(coupon.value)
    if coupon.discount_type == DiscountType.PERCENTAGE.value:
        discount = to_money(subtotal * value / 100)
    else:
        discount = to_money(value)
    return max(ZERO, min(discount, subtotal))


class PricingEngine:
    """Computes price breakdowns from catalog data and pricing rules"""

    def __init__(
        self,
        db: Session,
        distance_fee_calculator: Optional[DistanceFeeCalculator] = None,
        rulebook: Optional[PricingRuleBook] = None,
    ):
        self.db = db
        self.repo = CatalogRepository()
        self.distance_fee_calculator = distance_fee_calculator or FlatDistanceFee()
        self._rulebook = rulebook

    @property
    def rulebook(self) -> PricingRuleBook:
        if self._rulebook is None:
            self._rulebook = PricingRuleBook.load(self.db)
        return self._rulebook

    def compute_price(
        self,
        selection: PriceSelection,
        policy: PricingPolicy = FULL_PRICING,
        now: Optional[datetime] = None,
    ) -> PriceBreakdown:
        """
        Price a selection.

        Raises:
            NotFoundError: For an unknown service, zone, or any unknown addon id
        """
        service = self.repo.get_service_by_id(self.db, selection.service_id)
        if not service:
            raise NotFoundError("service", selection.service_id)

        base_price = to_money(service.base_price_solo if selection.is_solo else service.base_price_team)
        duration = service.est_minutes

        # Duplicated addon ids are charged once per occurrence
        addons_by_id = {a.id: a for a in self.repo.get_addons_by_ids(self.db, selection.addon_ids)}
        missing = [i for i in dict.fromkeys(selection.addon_ids) if i not in addons_by_id]
        if missing:
            raise NotFoundError("addon", missing)

        addons_price = ZERO
        for addon_id in selection.addon_ids:
            addon = addons_by_id[addon_id]
            addons_price += to_money(addon.price)
            duration += addon.est_minutes

        zone = self.repo.get_zone_by_id(self.db, selection.zone_id)
        if not zone:
            raise NotFoundError("zone", selection.zone_id)

        distance_fee = ZERO
        if policy.apply_distance_fee:
            distance_fee = to_money(
                self.distance_fee_calculator.calculate(
                    zone, selection.geo_point, self.rulebook.distance_fee
                )
            )

        if policy.apply_car_type_multiplier and self.rulebook.car_type_multiplier is not None:
            multiplier = self.rulebook.car_type_multiplier.multiplier_for(selection.car_type)
            base_price = to_money(base_price * multiplier)

        subtotal = base_price + addons_price + distance_fee

        discount = ZERO
        if policy.apply_coupon and selection.coupon_code:
            discount = self._coupon_discount(selection.coupon_code, subtotal, now or utc_now())

        return PriceBreakdown(
            base_price=base_price,
            addons_price=addons_price,
            distance_fee=distance_fee,
            discount=discount,
            total_price=max(ZERO, subtotal - discount),
            estimated_duration_minutes=duration,
        )

    def _coupon_discount(self, code: str, subtotal: Decimal, now: datetime) -> Decimal:
        """Unknown or inactive codes give no discount rather than an error"""
        coupon = self.repo.get_coupon_by_code(self.db, code)
        if coupon is None:
            logger.info(f"🎟️ Coupon {code!r} not found, no discount applied")
            return ZERO
        if not is_coupon_active(coupon, now):
            logger.info(f"🎟️ Coupon {code!r} is outside its validity window, no discount applied")
            return ZERO
        return compute_discount(coupon, subtotal)
