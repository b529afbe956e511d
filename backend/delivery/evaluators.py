"""
Value-based rules evaluated against an order subtotal: delivery fee
discounts and minimum order requirements. Pure functions, safe to call
any number of times with the same inputs.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from core_backend.utils.money import ZERO, quantize
from .exceptions import DeliveryConfigError
from .rules import AllScope, DiscountRule, MinimumOrderRule, PostcodeScope
from .strategies import DeliveryDiscountStrategyFactory


@dataclass(frozen=True)
class MinimumOrderStatus:
    required: Decimal
    current: Decimal
    met: bool
    shortfall: Decimal

    def as_dict(self):
        return {
            "required": self.required,
            "current": self.current,
            "met": self.met,
            "shortfall": self.shortfall,
        }


def select_discount_rule(order_subtotal: Decimal, rules: Iterable[DiscountRule]) -> Optional[DiscountRule]:
    """The highest-threshold rule the subtotal reaches, or None."""
    for rule in sorted(rules, key=lambda r: r.min_order_value, reverse=True):
        if order_subtotal >= rule.min_order_value:
            return rule
    return None


def apply_value_discount(base_fee: Decimal, order_subtotal: Decimal, rules: Iterable[DiscountRule]) -> Decimal:
    """
    Discount the delivery fee using exactly one rule.

    Rules are tried from the highest min_order_value down; the first one the
    subtotal reaches is applied and the rest are ignored. Rules never stack.
    """
    rule = select_discount_rule(order_subtotal, rules)
    if rule is None:
        return quantize(base_fee)

    strategy = DeliveryDiscountStrategyFactory.get_strategy(rule)
    return strategy.apply(base_fee, rule)


def check_minimum_order(
    order_subtotal: Decimal,
    rules: Iterable[MinimumOrderRule],
    postcode: Optional[str],
) -> MinimumOrderStatus:
    """
    Report the minimum order that applies to a postcode.

    The first rule in declaration order whose scope matches decides the
    requirement. No matching rule means no minimum.
    """
    current = quantize(order_subtotal)

    for rule in rules:
        if _scope_matches(rule.scope, postcode):
            required = rule.minimum_amount
            return MinimumOrderStatus(
                required=required,
                current=current,
                met=current >= required,
                shortfall=max(ZERO, required - current),
            )

    return MinimumOrderStatus(required=ZERO, current=current, met=True, shortfall=ZERO)


def _scope_matches(scope, postcode: Optional[str]) -> bool:
    if isinstance(scope, AllScope):
        return True
    if isinstance(scope, PostcodeScope):
        return scope.matches(postcode or "")
    raise DeliveryConfigError(f"Unsupported minimum order scope {scope!r}")
