"""
Custom exceptions for delivery pricing.
"""
from rest_framework import status

from core_backend.exceptions import (
    OrderPipelineError,
    OrderValidationError,
    BusinessRejection,
    InfrastructureError,
)


class DeliveryConfigError(OrderPipelineError):
    """Raised when a restaurant's delivery configuration is malformed."""

    code = "delivery_config_error"
    default_message = "Delivery configuration is invalid."


class DeliveryConfigNotFound(DeliveryConfigError):
    """Raised when a restaurant has no delivery configuration."""

    code = "delivery_config_not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Restaurant delivery configuration not found."


class DeliveryRequestError(OrderValidationError):
    """Raised when a fee request lacks what the pricing mode needs."""

    code = "delivery_request_invalid"


class DeliveryUnavailableError(BusinessRejection):
    """Raised when an order asks for delivery to a place the restaurant does not serve."""

    code = "delivery_unavailable"
    default_message = "Sorry, we do not deliver to this area. You can place an order for collection."

    def __init__(self, reason=None, message=None):
        self.reason = reason
        details = {"reason": reason} if reason else None
        super().__init__(message, details)


class DistanceLookupError(InfrastructureError):
    """Raised when the distance lookup service cannot produce a distance."""

    code = "distance_lookup_failed"
    default_message = "Unable to calculate delivery distance. Please try again."


class DistanceLookupTimeout(DistanceLookupError):
    """Raised when the distance lookup does not answer within the configured timeout."""

    code = "distance_lookup_timeout"
