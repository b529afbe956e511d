import re
from decimal import Decimal

from rest_framework import serializers

from delivery.serializers import UK_POSTCODE_RE
from .models import Order, OrderItem, OrderStatusHistory

UK_PHONE_RE = re.compile(r"^(\+44|0)[1-9]\d{8,10}$")


# --- Input serializers (order creation) ---

class CustomerInputSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=50)
    last_name = serializers.CharField(max_length=50)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20)

    def validate_phone(self, value):
        compact = re.sub(r"[\s\-()]", "", value)
        if not UK_PHONE_RE.match(compact):
            raise serializers.ValidationError("Enter a valid UK phone number.")
        return compact


class SelectedOptionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    price = serializers.DecimalField(
        max_digits=8, decimal_places=2, min_value=Decimal("0"), required=False, default=Decimal("0")
    )


class OrderItemInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    quantity = serializers.IntegerField(min_value=1, max_value=99)
    selected_options = SelectedOptionSerializer(many=True, required=False, default=list)
    is_free_item = serializers.BooleanField(required=False, default=False)


class DeliveryInputSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=Order.DeliveryType.choices)
    address = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    postcode = serializers.CharField(max_length=10, required=False, allow_blank=True, default="")
    instructions = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["method"] != Order.DeliveryType.DELIVERY:
            return attrs

        errors = {}
        if len(attrs.get("address", "").strip()) < 5:
            errors["address"] = ["A delivery address is required."]

        postcode = attrs.get("postcode", "").strip().upper()
        if not UK_POSTCODE_RE.match(postcode):
            errors["postcode"] = ["Enter a valid UK postcode."]

        if errors:
            raise serializers.ValidationError(errors)

        attrs["postcode"] = postcode
        return attrs


class PromotionInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    description = serializers.CharField(max_length=200, required=False, allow_blank=True)
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))


class OrderCreateSerializer(serializers.Serializer):
    """
    Shape of an order placed from the ordering site. Totals are not accepted
    from the client; OrderService computes them.
    """

    customer = CustomerInputSerializer()
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    delivery = DeliveryInputSerializer()
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices)
    promotions = PromotionInputSerializer(many=True, required=False, default=list)
    special_instructions = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    estimated_minutes = serializers.IntegerField(min_value=1, required=False)


class PaymentStatusUpdateSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Order.PaymentStatus.choices)


# --- Output serializers ---

class OrderItemSerializer(serializers.ModelSerializer):
    total_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ["name", "unit_price", "quantity", "selected_options", "is_free_item", "total_price"]


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    changed_by = serializers.StringRelatedField()

    class Meta:
        model = OrderStatusHistory
        fields = ["status", "notes", "changed_by", "created_at"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "customer_name",
            "customer_email",
            "customer_phone",
            "delivery_type",
            "delivery_address",
            "delivery_city",
            "delivery_postcode",
            "delivery_instructions",
            "special_instructions",
            "items",
            "subtotal",
            "delivery_fee",
            "original_delivery_fee",
            "discount",
            "total",
            "payment_method",
            "payment_status",
            "estimated_minutes",
            "confirmation_sent",
            "status_history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
