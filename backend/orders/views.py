import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.exceptions import OrderValidationError
from .exceptions import OrderNotFoundError
from .permissions import IsOrderCustomerOrStaff
from .serializers import OrderSerializer, OrderStatusUpdateSerializer, PaymentStatusUpdateSerializer
from .services import OrderNumberGenerator, OrderService

logger = logging.getLogger(__name__)


class OrderCreateView(APIView):
    """
    Place an order from the ordering site.

    Errors come back through core_backend.exceptions.api_exception_handler:
    400 invalid request, 422 business rejection, 503 retryable failure.
    """
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        result = OrderService().create_order(request.tenant, request.data)
        order = result.order

        return Response(
            {
                "success": True,
                "data": {
                    "order_number": order.order_number,
                    "order_id": str(order.id),
                    "status": order.status,
                    "estimated_minutes": order.estimated_minutes,
                    "subtotal": str(order.subtotal),
                    "delivery_fee": str(order.delivery_fee),
                    "original_delivery_fee": str(order.original_delivery_fee),
                    "discount": str(order.discount),
                    "total": str(order.total),
                    "notification_sent": result.notification_sent,
                },
                "message": "Order created successfully",
            },
            status=status.HTTP_201_CREATED,
        )


class OrderDetailView(APIView):
    permission_classes = [permissions.AllowAny]
    object_permission = IsOrderCustomerOrStaff()

    def get(self, request, order_number):
        if not OrderNumberGenerator().is_valid_format(order_number):
            raise OrderNotFoundError(f"Order {order_number} not found.")

        order = OrderService.get_order_by_number(request.tenant, order_number)

        # Answer exactly as for a missing order so numbers cannot be probed
        if not self.object_permission.has_object_permission(request, self, order):
            raise OrderNotFoundError(f"Order {order_number} not found.")

        return Response({"success": True, "data": OrderSerializer(order).data})


class OrderStatusUpdateView(APIView):
    """Staff move an order through received -> preparing -> ready -> completed (or cancel it)."""
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, order_number):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            raise OrderValidationError(details=serializer.errors)
        data = serializer.validated_data

        order = OrderService.get_order_by_number(request.tenant, order_number)
        order = OrderService.update_order_status(
            order,
            data["status"],
            notes=data.get("notes", ""),
            changed_by=request.user,
            estimated_minutes=data.get("estimated_minutes"),
        )

        return Response({"success": True, "data": OrderSerializer(order).data})


class OrderPaymentStatusView(APIView):
    """Staff mark an order paid, or record a failed payment."""
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, order_number):
        serializer = PaymentStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            raise OrderValidationError(details=serializer.errors)

        order = OrderService.get_order_by_number(request.tenant, order_number)
        order = OrderService.update_payment_status(order, serializer.validated_data["payment_status"])

        return Response({"success": True, "data": OrderSerializer(order).data})

class OrderStatsView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        stats = OrderService().get_order_stats(request.tenant)
        stats["today"]["revenue"] = str(stats["today"]["revenue"])
        return Response({"success": True, "data": stats})
