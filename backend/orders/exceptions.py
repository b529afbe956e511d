"""
Custom exceptions for order creation and order lifecycle.
"""
from rest_framework import status

from core_backend.exceptions import (
    BusinessRejection,
    InfrastructureError,
    OrderPipelineError,
)

# Re-exported so order code imports every rejection it raises from one place
from delivery.exceptions import DeliveryUnavailableError, DistanceLookupError  # noqa: F401


class MinimumOrderNotMetError(BusinessRejection):
    """Raised when a delivery order's subtotal is below the restaurant's minimum."""

    code = "minimum_order_not_met"

    def __init__(self, required, current, shortfall, message=None):
        self.required = required
        self.current = current
        self.shortfall = shortfall
        super().__init__(
            message or f"Minimum order for delivery is £{required}. Please add £{shortfall} more to your order.",
            details={
                "required": str(required),
                "current": str(current),
                "shortfall": str(shortfall),
            },
        )


class InvalidStatusTransition(BusinessRejection):
    """Raised when an order status change is not allowed from the current status."""

    code = "invalid_status_transition"

    def __init__(self, current_status, new_status):
        self.current_status = current_status
        self.new_status = new_status
        super().__init__(
            f"Cannot change order status from {current_status} to {new_status}.",
            details={"current_status": current_status, "requested_status": new_status},
        )


class OrderNotFoundError(OrderPipelineError):
    code = "order_not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Order not found."


class OrderPersistenceError(InfrastructureError):
    """Raised when the order transaction fails; nothing was written."""

    code = "order_persistence_failed"
    default_message = "We could not save your order. Please try again."


class CounterStoreError(InfrastructureError):
    """Raised by a counter store that cannot increment. Triggers degraded order numbering."""

    code = "counter_store_unavailable"
