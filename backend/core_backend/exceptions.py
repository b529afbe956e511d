"""
Shared exception hierarchy for the order pipeline, and the DRF exception
handler that turns it into HTTP responses.

Every error the pipeline raises falls into one of three families:

- OrderValidationError: malformed input, rejected before any side effect.
- BusinessRejection: a valid outcome the customer has to see (outside the
  delivery area, minimum order not met, illegal status change).
- InfrastructureError: a collaborator failed (distance lookup, database,
  counter store). Retryable; never leaves partial state behind.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class OrderPipelineError(Exception):
    """Base class for errors raised by the order pipeline."""

    code = "order_error"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "The order could not be processed."

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class OrderValidationError(OrderPipelineError):
    code = "validation_error"
    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed."


class BusinessRejection(OrderPipelineError):
    code = "business_rejection"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "The order cannot be accepted."


class InfrastructureError(OrderPipelineError):
    code = "service_unavailable"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "A required service is temporarily unavailable. Please try again."


def api_exception_handler(exc, context):
    """
    Render pipeline errors as {"success": false, "error", "message", ...}.

    Anything else goes through DRF's default handler, with the same envelope
    added on top so clients see one response shape.
    """
    if isinstance(exc, OrderPipelineError):
        request = context.get("request")
        path = request.path if request is not None else ""
        if isinstance(exc, InfrastructureError):
            logger.error(f"Infrastructure error on {path}: {exc.__class__.__name__}: {exc.message}")
        else:
            logger.info(f"Order pipeline rejected request on {path}: {exc.code}")

        body = {"success": False, "error": exc.code, "message": exc.message}
        if exc.details:
            body["details"] = exc.details
        return Response(body, status=exc.http_status)

    response = exception_handler(exc, context)
    if response is not None and isinstance(response.data, dict) and "success" not in response.data:
        response.data = {
            "success": False,
            "error": getattr(exc, "default_code", "error"),
            "message": "Validation failed" if response.status_code == 400 else str(getattr(exc, "detail", exc)),
            "details": response.data,
        }
    return response
