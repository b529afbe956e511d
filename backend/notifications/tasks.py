from celery import shared_task
import logging

from tenant.managers import tenant_context
from .services import STATUS_MESSAGES, EmailService

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_order_status_email(self, order_id, status, notes=None):
    """
    Async task to email the customer after a status change.

    Queued by OrderService.update_order_status once the change is committed.

    Args:
        order_id: UUID of the order
        status: The status the order moved to when the task was queued
        notes: Optional staff note included in the email

    Returns:
        dict: Status and details of the send
    """
    from orders.models import Order

    try:
        order = Order.all_objects.select_related("tenant").get(id=order_id)
    except Order.DoesNotExist:
        logger.error(f"Order {order_id} not found for status email")
        return {
            "status": "failed",
            "error": "Order not found",
            "order_id": str(order_id)
        }

    with tenant_context(order.tenant):
        sent = EmailService().send_order_status_update_email(order, status=status, notes=notes)

    if not sent and order.customer_email:
        logger.warning(
            f"Status email for order {order.order_number} not sent "
            f"(attempt {self.request.retries + 1} of {self.max_retries + 1})"
        )
        if self.request.retries < self.max_retries and status in STATUS_MESSAGES:
            raise self.retry()

    return {
        "status": "sent" if sent else "not_sent",
        "order_id": str(order_id),
        "order_number": order.order_number,
        "order_status": status,
    }
