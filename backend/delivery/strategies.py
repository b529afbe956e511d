from abc import ABC, abstractmethod
from decimal import Decimal
import logging

from core_backend.utils.money import ZERO, quantize
from .exceptions import DeliveryConfigError
from .rules import DiscountKind, DiscountRule

logger = logging.getLogger(__name__)


class DeliveryDiscountStrategy(ABC):
    """The interface for a value-based delivery fee discount."""

    @abstractmethod
    def apply(self, base_fee: Decimal, rule: DiscountRule) -> Decimal:
        """Return the discounted fee."""


class PercentageOffStrategy(DeliveryDiscountStrategy):
    """Takes a percentage off the delivery fee."""

    def apply(self, base_fee: Decimal, rule: DiscountRule) -> Decimal:
        return quantize(base_fee * (Decimal("1") - rule.amount / Decimal("100")))


class FixedReductionStrategy(DeliveryDiscountStrategy):
    """Takes a fixed amount off the delivery fee, never below zero."""

    def apply(self, base_fee: Decimal, rule: DiscountRule) -> Decimal:
        return quantize(max(ZERO, base_fee - rule.amount))


class FreeDeliveryStrategy(DeliveryDiscountStrategy):
    """Waives the delivery fee."""

    def apply(self, base_fee: Decimal, rule: DiscountRule) -> Decimal:
        return ZERO


class DeliveryDiscountStrategyFactory:
    """
    Factory for selecting the strategy that implements a discount rule's kind.
    """

    _strategies = {
        DiscountKind.PERCENTAGE: PercentageOffStrategy,
        DiscountKind.FIXED_REDUCTION: FixedReductionStrategy,
        DiscountKind.FREE_DELIVERY: FreeDeliveryStrategy,
    }

    @staticmethod
    def get_strategy(rule: DiscountRule) -> DeliveryDiscountStrategy:
        strategy_class = DeliveryDiscountStrategyFactory._strategies.get(rule.kind)

        if strategy_class:
            return strategy_class()

        logger.error(f"No delivery discount strategy registered for kind '{rule.kind}'")
        raise DeliveryConfigError(f"Unsupported delivery discount type '{rule.kind}'")
