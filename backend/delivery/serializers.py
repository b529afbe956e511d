import re
from decimal import Decimal

from rest_framework import serializers

from .models import RestaurantDeliveryConfig

UK_POSTCODE_RE = re.compile(r"^[A-Z]{1,2}\d[A-Z\d]?\s?\d[A-Z]{2}$", re.IGNORECASE)


def validate_uk_postcode(value):
    """Upper-cased postcode, or ValidationError when it is not a UK postcode."""
    postcode = value.strip().upper()
    if not postcode:
        raise serializers.ValidationError("Postcode is required.")
    if not UK_POSTCODE_RE.match(postcode):
        raise serializers.ValidationError("Enter a valid UK postcode.")
    return postcode


class FeeRequestSerializer(serializers.Serializer):
    """Input for a delivery fee quote."""

    postcode = serializers.CharField(max_length=10, trim_whitespace=True)
    address = serializers.CharField(required=False, allow_blank=True, default="")
    order_subtotal = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), required=False, default=Decimal("0")
    )
    distance_km = serializers.DecimalField(
        max_digits=6, decimal_places=3, min_value=Decimal("0"), required=False, allow_null=True, default=None
    )

    def validate_postcode(self, value):
        return validate_uk_postcode(value)


class PostcodeCheckSerializer(serializers.Serializer):
    postcode = serializers.CharField(max_length=10, trim_whitespace=True)
    address = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_postcode(self, value):
        return validate_uk_postcode(value)


class MinimumOrderStatusSerializer(serializers.Serializer):
    required = serializers.DecimalField(max_digits=10, decimal_places=2)
    current = serializers.DecimalField(max_digits=10, decimal_places=2)
    met = serializers.BooleanField()
    shortfall = serializers.DecimalField(max_digits=10, decimal_places=2)


class FeeQuoteSerializer(serializers.Serializer):
    """Read-only rendering of a FeeQuote or DeliveryUnavailable (via as_dict())."""

    available = serializers.BooleanField()
    fee = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    original_fee = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    label = serializers.CharField(required=False)
    method = serializers.CharField(required=False)
    distance_km = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    estimated_minutes = serializers.IntegerField(required=False)
    minimum_order = MinimumOrderStatusSerializer(required=False)
    reason = serializers.CharField(required=False)


class RestaurantDeliveryConfigSerializer(serializers.ModelSerializer):
    """Public view of a restaurant's delivery configuration (no internal ids)."""

    class Meta:
        model = RestaurantDeliveryConfig
        fields = [
            "restaurant_name",
            "pricing_mode",
            "postcode_rules",
            "distance_rules",
            "order_value_discounts",
            "minimum_order_rules",
            "default_delivery_fee",
            "preparation_time_minutes",
            "max_delivery_distance_km",
            "is_active",
            "delivery_enabled",
            "updated_at",
        ]
        read_only_fields = fields
