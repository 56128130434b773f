"""Typed pricing rule configuration

Pricing rules are stored as keyed JSON rows. Each known key has a pydantic
model; the rest of the code reads rules through PricingRuleBook instead of
parsing JSON at the call site.
"""

import json
import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.orm import Session

from ...cache import get_pricing_rules_cached, set_pricing_rules_cached
from ...config import PRICING_RULES_CACHE_TTL
from ...models import CarType
from ...shared.exceptions import InvalidError
from ..catalog.repository import CatalogRepository

logger = logging.getLogger(__name__)


class PricingRuleKey(str, Enum):
    DISTANCE_FEE = "distance_fee"
    CAR_TYPE_MULTIPLIER = "car_type_multiplier"


class DistanceFeeRule(BaseModel):
    """Flat surcharge added to every quote while enabled"""

    base_fee: Decimal = Field(default=Decimal("0"), ge=0)


class CarTypeMultiplierRule(BaseModel):
    """Per car type multiplier for the service base price (absent means 1)"""

    sedan: Decimal = Field(default=Decimal("1"), ge=0)
    suv: Decimal = Field(default=Decimal("1"), ge=0)
    pickup: Decimal = Field(default=Decimal("1"), ge=0)

    def multiplier_for(self, car_type: CarType) -> Decimal:
        return getattr(self, CarType(car_type).value)


RULE_MODELS: dict[PricingRuleKey, type[BaseModel]] = {
    PricingRuleKey.DISTANCE_FEE: DistanceFeeRule,
    PricingRuleKey.CAR_TYPE_MULTIPLIER: CarTypeMultiplierRule,
}


def parse_rule_value(key: str, value: Any) -> Optional[BaseModel]:
    """
    Validate a rule value against the model registered for its key.

    Args:
        key: Pricing rule key
        value: Decoded JSON value

    Returns:
        The typed rule, or None for keys the engine does not consume

    Raises:
        InvalidError: If the value does not fit the rule model
    """
    try:
        rule_key = PricingRuleKey(key)
    except ValueError:
        return None

    try:
        return RULE_MODELS[rule_key].model_validate(value)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}" for err in e.errors()
        )
        raise InvalidError(f"pricing_rules.{key}", errors) from None


def decode_rule_json(key: str, value_json: str) -> Any:
    """Decode stored rule JSON, keeping fractional numbers exact"""
    try:
        return json.loads(value_json, parse_float=Decimal)
    except (TypeError, ValueError) as e:
        raise InvalidError(f"pricing_rules.{key}", f"stored value is not valid JSON ({e})") from None


class PricingRuleBook:
    """Enabled pricing rules for one request, keyed by PricingRuleKey"""

    def __init__(self, rules: Optional[dict[PricingRuleKey, BaseModel]] = None):
        self._rules = rules or {}

    @classmethod
    def load(cls, db: Session) -> "PricingRuleBook":
        """Load enabled rules, from Redis when cached, otherwise from the database"""
        rows = get_pricing_rules_cached()
        if rows is None:
            rules = CatalogRepository.get_pricing_rules(
                db, enabled_only=True, keys=[k.value for k in PricingRuleKey]
            )
            rows = [{"key": r.key, "value_json": r.value_json} for r in rules]
            set_pricing_rules_cached(rows, PRICING_RULES_CACHE_TTL)

        parsed: dict[PricingRuleKey, BaseModel] = {}
        for row in rows:
            rule = parse_rule_value(row["key"], decode_rule_json(row["key"], row["value_json"]))
            if rule is not None:
                parsed[PricingRuleKey(row["key"])] = rule
        return cls(parsed)

    def get(self, key: PricingRuleKey) -> Optional[BaseModel]:
        return self._rules.get(key)

    @property
    def distance_fee(self) -> Optional[DistanceFeeRule]:
        return self.get(PricingRuleKey.DISTANCE_FEE)

    @property
    def car_type_multiplier(self) -> Optional[CarTypeMultiplierRule]:
        return self.get(PricingRuleKey.CAR_TYPE_MULTIPLIER)
