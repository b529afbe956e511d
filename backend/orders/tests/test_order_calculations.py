"""
Order total calculation tests (no database).
"""
import pytest
from decimal import Decimal

from orders.services import OrderCalculationService


class TestLineTotals:

    def test_options_are_added_to_unit_price(self):
        item = {
            "name": "Sweet and Sour Chicken",
            "price": Decimal("6.00"),
            "quantity": 2,
            "selected_options": [
                {"name": "Egg Fried Rice", "price": Decimal("1.00")},
                {"name": "Extra Sauce", "price": Decimal("0.50")},
            ],
        }

        assert OrderCalculationService.line_total(item) == Decimal("15.00")

    def test_free_item_costs_nothing(self):
        item = {"name": "Prawn Crackers", "price": Decimal("2.50"), "quantity": 1, "is_free_item": True}

        assert OrderCalculationService.line_total(item) == Decimal("0.00")

    def test_subtotal_of_no_items_is_zero(self):
        assert OrderCalculationService.calculate_subtotal([]) == Decimal("0.00")

    def test_float_prices_do_not_drift(self):
        items = [{"name": "Scraps", "price": 0.1, "quantity": 1}] * 3

        assert OrderCalculationService.calculate_subtotal(items) == Decimal("0.30")


class TestPromotionsAndTotals:

    def test_promotions_are_summed(self):
        promotions = [{"code": "WELCOME", "discount": Decimal("2.00")}, {"discount": Decimal("1.50")}]

        discount = OrderCalculationService.calculate_promotion_discount(promotions, Decimal("20.00"))

        assert discount == Decimal("3.50")

    def test_promotions_are_capped_at_subtotal(self):
        discount = OrderCalculationService.calculate_promotion_discount(
            [{"discount": Decimal("50.00")}], Decimal("12.00")
        )

        assert discount == Decimal("12.00")

    @pytest.mark.parametrize("subtotal,fee,discount,expected", [
        ("24.00", "2.00", "0.00", "26.00"),
        ("24.00", "0.00", "4.00", "20.00"),
        ("12.00", "3.50", "12.00", "3.50"),
    ])
    def test_total(self, subtotal, fee, discount, expected):
        total = OrderCalculationService.calculate_total(Decimal(subtotal), Decimal(fee), Decimal(discount))

        assert total == Decimal(expected)
