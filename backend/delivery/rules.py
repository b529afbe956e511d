"""
Typed delivery rules and the read-only configuration snapshot.

Restaurants store their rule sets as JSON (see RestaurantDeliveryConfig).
Everything downstream works on the frozen dataclasses defined here, built once
per request by DeliveryConfig.from_model(), so a configuration edit saved
mid-request is only seen by later requests.

JSON shapes:
    postcode_rules:         [{"postcode_pattern": "YO10", "fee": 3.00}]
    distance_rules:         [{"max_distance": 2, "fee": 2.50}]
    order_value_discounts:  [{"min_order_value": 20, "type": "fixed_reduction", "value": 1.00}]
    minimum_order_rules:    [{"applies_to": "postcode", "postcode_pattern": "YO1", "minimum_amount": 15.00},
                             {"applies_to": "all", "minimum_amount": 12.00}]
"""
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple, Union

from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.utils.money import quantize, to_decimal
from .exceptions import DeliveryConfigError


class PricingMode(models.TextChoices):
    POSTCODE = "postcode", _("Postcode zones")
    DISTANCE = "distance", _("Distance tiers")


class DiscountKind(models.TextChoices):
    PERCENTAGE = "percentage", _("Percentage off")
    FIXED_REDUCTION = "fixed_reduction", _("Fixed reduction")
    FREE_DELIVERY = "free_delivery", _("Free delivery")


def normalize_postcode(postcode: Optional[str]) -> str:
    """Uppercase and remove every whitespace character ("yo10 3bp" -> "YO103BP")."""
    return re.sub(r"\s+", "", postcode or "").upper()


@dataclass(frozen=True)
class ZoneRule:
    pattern: str
    fee: Decimal

    @property
    def normalized_pattern(self) -> str:
        return normalize_postcode(self.pattern)


@dataclass(frozen=True)
class TierRule:
    max_distance_km: Decimal
    fee: Decimal


@dataclass(frozen=True)
class DiscountRule:
    min_order_value: Decimal
    kind: str
    amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class AllScope:
    """Minimum order applies to every delivery."""


@dataclass(frozen=True)
class PostcodeScope:
    pattern: str

    def matches(self, postcode: str) -> bool:
        return normalize_postcode(postcode).startswith(normalize_postcode(self.pattern))


@dataclass(frozen=True)
class MinimumOrderRule:
    scope: Union[AllScope, PostcodeScope]
    minimum_amount: Decimal


@dataclass(frozen=True)
class DeliveryConfig:
    """Immutable snapshot of one restaurant's delivery pricing."""

    pricing_mode: str
    restaurant_address: str = ""
    zone_rules: Tuple[ZoneRule, ...] = ()
    tier_rules: Tuple[TierRule, ...] = ()
    discount_rules: Tuple[DiscountRule, ...] = ()
    minimum_order_rules: Tuple[MinimumOrderRule, ...] = ()
    default_fee: Optional[Decimal] = None
    preparation_time_minutes: int = 30
    max_delivery_distance_km: Optional[Decimal] = None
    is_active: bool = True
    delivery_enabled: bool = True
    restaurant_name: str = field(default="", compare=False)

    @classmethod
    def from_model(cls, config) -> "DeliveryConfig":
        """Build a snapshot from a RestaurantDeliveryConfig row."""
        return cls.from_dict(
            {
                "pricing_mode": config.pricing_mode,
                "restaurant_address": config.restaurant_address,
                "postcode_rules": config.postcode_rules,
                "distance_rules": config.distance_rules,
                "order_value_discounts": config.order_value_discounts,
                "minimum_order_rules": config.minimum_order_rules,
                "default_delivery_fee": config.default_delivery_fee,
                "preparation_time_minutes": config.preparation_time_minutes,
                "max_delivery_distance_km": config.max_delivery_distance_km,
                "is_active": config.is_active,
                "delivery_enabled": config.delivery_enabled,
                "restaurant_name": config.restaurant_name,
            }
        )

    @classmethod
    def from_dict(cls, data: dict) -> "DeliveryConfig":
        """
        Parse the JSON-ish configuration into typed rules.

        Raises:
            DeliveryConfigError: if any rule is missing a field or carries a bad value
        """
        pricing_mode = data.get("pricing_mode") or PricingMode.POSTCODE
        if pricing_mode not in PricingMode.values:
            raise DeliveryConfigError(f"Unknown pricing mode '{pricing_mode}'")

        default_fee = data.get("default_delivery_fee")
        max_distance = data.get("max_delivery_distance_km")

        return cls(
            pricing_mode=pricing_mode,
            restaurant_address=data.get("restaurant_address") or "",
            zone_rules=tuple(parse_zone_rules(data.get("postcode_rules") or [])),
            tier_rules=tuple(parse_tier_rules(data.get("distance_rules") or [])),
            discount_rules=tuple(parse_discount_rules(data.get("order_value_discounts") or [])),
            minimum_order_rules=tuple(parse_minimum_order_rules(data.get("minimum_order_rules") or [])),
            default_fee=_money(default_fee, "default_delivery_fee") if default_fee not in (None, "") else None,
            preparation_time_minutes=int(data.get("preparation_time_minutes") or 30),
            max_delivery_distance_km=_number(max_distance, "max_delivery_distance_km") if max_distance not in (None, "") else None,
            is_active=bool(data.get("is_active", True)),
            delivery_enabled=bool(data.get("delivery_enabled", True)),
            restaurant_name=data.get("restaurant_name") or "",
        )


def _number(value, label) -> Decimal:
    try:
        number = to_decimal(value)
    except (TypeError, ValueError):
        raise DeliveryConfigError(f"{label} must be a number, got {value!r}")
    if number < 0:
        raise DeliveryConfigError(f"{label} cannot be negative")
    return number


def _money(value, label) -> Decimal:
    return quantize(_number(value, label))


def _require(rule, key, label):
    if not isinstance(rule, dict) or key not in rule:
        raise DeliveryConfigError(f"{label} is missing '{key}'")
    return rule[key]


def parse_zone_rules(raw_rules):
    rules = []
    for index, raw in enumerate(raw_rules):
        label = f"postcode_rules[{index}]"
        pattern = str(_require(raw, "postcode_pattern", label)).strip()
        if not normalize_postcode(pattern):
            raise DeliveryConfigError(f"{label} has an empty postcode pattern")
        rules.append(ZoneRule(pattern=pattern, fee=_money(_require(raw, "fee", label), f"{label}.fee")))
    return rules


def parse_tier_rules(raw_rules):
    rules = []
    for index, raw in enumerate(raw_rules):
        label = f"distance_rules[{index}]"
        rules.append(
            TierRule(
                max_distance_km=_number(_require(raw, "max_distance", label), f"{label}.max_distance"),
                fee=_money(_require(raw, "fee", label), f"{label}.fee"),
            )
        )
    return rules


def parse_discount_rules(raw_rules):
    rules = []
    for index, raw in enumerate(raw_rules):
        label = f"order_value_discounts[{index}]"
        kind = _require(raw, "type", label)
        if kind not in DiscountKind.values:
            raise DeliveryConfigError(f"{label} has unknown discount type '{kind}'")
        amount = _number(raw.get("value", 0), f"{label}.value")
        if kind == DiscountKind.PERCENTAGE and amount > 100:
            raise DeliveryConfigError(f"{label} percentage cannot exceed 100")
        rules.append(
            DiscountRule(
                min_order_value=_money(_require(raw, "min_order_value", label), f"{label}.min_order_value"),
                kind=kind,
                amount=amount,
            )
        )
    return rules


def parse_minimum_order_rules(raw_rules):
    rules = []
    for index, raw in enumerate(raw_rules):
        label = f"minimum_order_rules[{index}]"
        applies_to = _require(raw, "applies_to", label)
        if applies_to == "all":
            scope = AllScope()
        elif applies_to == "postcode":
            scope = PostcodeScope(pattern=str(_require(raw, "postcode_pattern", label)))
        else:
            raise DeliveryConfigError(f"{label} has unknown scope '{applies_to}'")
        rules.append(
            MinimumOrderRule(
                scope=scope,
                minimum_amount=_money(_require(raw, "minimum_amount", label), f"{label}.minimum_amount"),
            )
        )
    return rules
