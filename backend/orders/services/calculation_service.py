from decimal import Decimal
import logging

from core_backend.utils.money import ZERO, money_sum, quantize, to_decimal

logger = logging.getLogger(__name__)


class OrderCalculationService:
    """
    Totals for an incoming order, computed from validated request data.

    Items are dicts shaped like OrderItemInputSerializer output:
    {"name", "price", "quantity", "selected_options": [{"name", "price"}], "is_free_item"}.
    """

    @staticmethod
    def line_total(item: dict) -> Decimal:
        """(unit price + option surcharges) x quantity; free items contribute nothing."""
        if item.get("is_free_item"):
            return ZERO

        options_total = sum(
            (to_decimal(option.get("price", 0)) for option in item.get("selected_options") or []),
            Decimal("0"),
        )
        return quantize((to_decimal(item["price"]) + options_total) * item["quantity"])

    @staticmethod
    def calculate_subtotal(items) -> Decimal:
        return money_sum(OrderCalculationService.line_total(item) for item in items)

    @staticmethod
    def calculate_promotion_discount(promotions, subtotal: Decimal) -> Decimal:
        """
        Sum of promotion discounts, capped at the subtotal so a total can never
        go below the delivery fee.
        """
        discount = money_sum(promo.get("discount", 0) for promo in promotions or [])
        if discount > subtotal:
            logger.info(f"Promotion discount {discount} capped at subtotal {subtotal}")
            return quantize(subtotal)
        return discount

    @staticmethod
    def calculate_total(subtotal: Decimal, delivery_fee: Decimal, discount: Decimal) -> Decimal:
        return quantize(subtotal + delivery_fee - discount)
