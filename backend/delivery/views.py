import logging

from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.exceptions import OrderValidationError
from .serializers import (
    FeeQuoteSerializer,
    FeeRequestSerializer,
    PostcodeCheckSerializer,
    RestaurantDeliveryConfigSerializer,
)
from .services import DeliveryFeeService

logger = logging.getLogger(__name__)


def _validated(serializer_class, data):
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise OrderValidationError(details=serializer.errors)
    return serializer.validated_data


class CalculateDeliveryFeeView(APIView):
    """Quote the delivery fee for a postcode and order subtotal."""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        data = _validated(FeeRequestSerializer, request.data)

        quote = DeliveryFeeService().quote_for_restaurant(
            request.tenant,
            data["postcode"],
            distance_km=data.get("distance_km"),
            order_subtotal=data["order_subtotal"],
            customer_address=data.get("address") or None,
        )
        return Response({"success": True, "data": FeeQuoteSerializer(quote.as_dict()).data})


class ValidatePostcodeView(APIView):
    """
    Tell the ordering site whether the restaurant delivers to a postcode.

    Prices with a zero subtotal, so no value discount applies.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        data = _validated(PostcodeCheckSerializer, request.data)

        quote = DeliveryFeeService().quote_for_restaurant(
            request.tenant,
            data["postcode"],
            customer_address=data.get("address") or None,
        )
        body = {"postcode": data["postcode"], "available": quote.available}
        if quote.available:
            body["fee"] = FeeQuoteSerializer(quote.as_dict()).data["fee"]
            body["estimated_minutes"] = quote.estimated_minutes
        else:
            body["reason"] = quote.reason
        return Response({"success": True, "data": body})


class DeliveryConfigView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        config = DeliveryFeeService.get_config(request.tenant)
        return Response({"success": True, "data": RestaurantDeliveryConfigSerializer(config).data})
