from dataclasses import dataclass
from decimal import Decimal
from django.conf import settings
from django.db import DatabaseError, connection, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone
import logging

from core_backend.exceptions import OrderValidationError
from core_backend.utils.money import ZERO, quantize
from core_backend.utils.pii import PIIProtection
from delivery.services import DeliveryFeeService, DeliveryUnavailable
from notifications.services import STATUS_MESSAGES, EmailService
from notifications.tasks import send_order_status_email
from orders.exceptions import (
    DeliveryUnavailableError,
    InvalidStatusTransition,
    MinimumOrderNotMetError,
    OrderNotFoundError,
    OrderPersistenceError,
)
from orders.models import Order, OrderItem, OrderStatusHistory
from orders.serializers import OrderCreateSerializer
from .calculation_service import OrderCalculationService
from .order_number_service import OrderNumberGenerator

logger = logging.getLogger(__name__)

INITIAL_STATUS_NOTE = "Order received and confirmed"


@dataclass
class OrderCreationResult:
    order: Order
    notification_sent: bool


class OrderService:
    """
    Order intake and lifecycle.

    create_order() runs the whole intake: validate, price, mint a number,
    persist in one transaction, then email the customer. update_order_status()
    is the only code that changes an order's status.
    """

    # Valid status transitions for order state machine
    VALID_STATUS_TRANSITIONS = {
        Order.OrderStatus.RECEIVED: [
            Order.OrderStatus.PREPARING,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.PREPARING: [
            Order.OrderStatus.READY,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.READY: [
            Order.OrderStatus.COMPLETED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.COMPLETED: [],
        Order.OrderStatus.CANCELLED: [],
    }

    def __init__(self, fee_service=None, number_generator=None, email_service=None):
        self.fee_service = fee_service or DeliveryFeeService()
        self.number_generator = number_generator or OrderNumberGenerator()
        self.email_service = email_service or EmailService()

    def create_order(self, tenant, data) -> OrderCreationResult:
        """
        Creates an order from ordering-site request data.

        Args:
            tenant: Restaurant taking the order
            data: Raw request data, validated here with OrderCreateSerializer

        Raises:
            OrderValidationError: malformed request; nothing was done
            DeliveryUnavailableError: the restaurant does not deliver to the address
            MinimumOrderNotMetError: delivery subtotal below the restaurant's minimum
            DistanceLookupError: distance pricing could not reach the distance service
            OrderPersistenceError: the order transaction failed and was rolled back
        """
        serializer = OrderCreateSerializer(data=data)
        if not serializer.is_valid():
            raise OrderValidationError(details=serializer.errors)
        payload = serializer.validated_data

        customer = payload["customer"]
        delivery = payload["delivery"]
        items = payload["items"]

        subtotal = OrderCalculationService.calculate_subtotal(items)
        discount = OrderCalculationService.calculate_promotion_discount(payload["promotions"], subtotal)

        if delivery["method"] == Order.DeliveryType.DELIVERY:
            delivery_fee, original_delivery_fee, estimated_minutes = self._price_delivery(
                tenant, delivery, subtotal
            )
        else:
            delivery_fee = original_delivery_fee = ZERO
            estimated_minutes = settings.ORDERS.get("PREP_TIME_COLLECTION", 20)

        total = OrderCalculationService.calculate_total(subtotal, delivery_fee, discount)

        order_number = self.number_generator.generate()

        try:
            order = self._persist_order(
                tenant=tenant,
                order_number=order_number,
                customer=customer,
                delivery=delivery,
                items=items,
                payment_method=payload["payment_method"],
                special_instructions=payload["special_instructions"],
                subtotal=subtotal,
                delivery_fee=delivery_fee,
                original_delivery_fee=original_delivery_fee,
                discount=discount,
                total=total,
                estimated_minutes=estimated_minutes,
            )
        except DatabaseError as e:
            logger.error(f"Order {order_number} rolled back, number discarded: {e}")
            raise OrderPersistenceError() from e

        logger.info(
            f"Order {order.order_number} created for {PIIProtection.mask_email(order.customer_email)}: "
            f"{order.delivery_type}, {len(items)} items, total {order.total}"
        )

        notification_sent = self._send_confirmation(order)
        return OrderCreationResult(order=order, notification_sent=notification_sent)

    def _price_delivery(self, tenant, delivery, subtotal):
        full_address = ", ".join(
            part for part in (delivery.get("address"), delivery.get("city"), delivery.get("postcode")) if part
        )
        quote = self.fee_service.quote_for_restaurant(
            tenant,
            delivery["postcode"],
            order_subtotal=subtotal,
            customer_address=full_address,
        )

        if isinstance(quote, DeliveryUnavailable):
            logger.info(
                f"Order rejected: delivery unavailable to {PIIProtection.mask_postcode(delivery['postcode'])} "
                f"({quote.reason})"
            )
            raise DeliveryUnavailableError(reason=quote.reason)

        minimum = quote.minimum_order
        if not minimum.met and settings.ORDERS.get("ENFORCE_MINIMUM_ORDER", True):
            logger.info(f"Order rejected: subtotal {minimum.current} below minimum {minimum.required}")
            raise MinimumOrderNotMetError(
                required=minimum.required,
                current=minimum.current,
                shortfall=minimum.shortfall,
            )

        return quote.final_fee, quote.original_fee, quote.estimated_minutes

    def _persist_order(self, tenant, order_number, customer, delivery, items, **fields) -> Order:
        is_delivery = delivery["method"] == Order.DeliveryType.DELIVERY

        # durable: the confirmation email must only go out after a real commit
        with transaction.atomic(durable=True):
            self._apply_statement_timeout()

            order = Order.all_objects.create(
                tenant=tenant,
                order_number=order_number,
                customer_name=f"{customer['first_name']} {customer['last_name']}",
                customer_email=customer["email"],
                customer_phone=customer["phone"],
                delivery_type=delivery["method"],
                delivery_address=delivery.get("address", "") if is_delivery else "",
                delivery_city=delivery.get("city", "") if is_delivery else "",
                delivery_postcode=delivery.get("postcode", "") if is_delivery else "",
                delivery_instructions=delivery.get("instructions", "") if is_delivery else "",
                **fields,
            )

            OrderItem.all_objects.bulk_create([
                OrderItem(
                    tenant=tenant,
                    order=order,
                    name=item["name"],
                    unit_price=quantize(item["price"]),
                    quantity=item["quantity"],
                    selected_options=[
                        {"name": option["name"], "price": str(quantize(option.get("price", ZERO)))}
                        for option in item.get("selected_options") or []
                    ],
                    is_free_item=item.get("is_free_item", False),
                )
                for item in items
            ])

            OrderStatusHistory.all_objects.create(
                tenant=tenant,
                order=order,
                status=Order.OrderStatus.RECEIVED,
                notes=INITIAL_STATUS_NOTE,
            )

        return order

    @staticmethod
    def _apply_statement_timeout():
        timeout_ms = settings.ORDERS.get("TRANSACTION_TIMEOUT_MS")
        if timeout_ms and connection.vendor == "postgresql":
            with connection.cursor() as cursor:
                cursor.execute("SET LOCAL statement_timeout = %s", [int(timeout_ms)])

    def _send_confirmation(self, order) -> bool:
        try:
            sent = self.email_service.send_order_confirmation_email(order)
        except Exception as e:
            logger.warning(f"Confirmation email for order {order.order_number} failed: {e}")
            return False

        if not sent:
            logger.warning(f"Confirmation email for order {order.order_number} was not sent")
            return False

        try:
            Order.all_objects.filter(pk=order.pk).update(confirmation_sent=True)
        except DatabaseError as e:
            logger.warning(f"Could not record confirmation for order {order.order_number}: {e}")
            return True
        order.confirmation_sent = True
        return True

    @staticmethod
    def update_order_status(order: Order, new_status: str, notes: str = "", changed_by=None,
                            estimated_minutes: int = None) -> Order:
        """
        Moves an order to a new status and records it in the status history.

        The row is locked for the duration so two staff members cannot both
        move the same order from the same status. After commit, the customer
        is emailed (via Celery) for preparing, ready, completed and cancelled.

        Raises:
            OrderValidationError: unknown status
            InvalidStatusTransition: the change is not allowed from the current status
        """
        if new_status not in Order.OrderStatus.values:
            raise OrderValidationError(f"'{new_status}' is not a valid order status.")

        with transaction.atomic():
            locked = Order.all_objects.select_for_update().get(pk=order.pk)

            if new_status not in OrderService.VALID_STATUS_TRANSITIONS.get(locked.status, []):
                raise InvalidStatusTransition(locked.status, new_status)

            previous_status = locked.status
            locked.status = new_status
            update_fields = ["status", "updated_at"]
            if estimated_minutes:
                locked.estimated_minutes = estimated_minutes
                update_fields.append("estimated_minutes")
            locked.save(update_fields=update_fields)

            OrderStatusHistory.all_objects.create(
                tenant=locked.tenant,
                order=locked,
                status=new_status,
                notes=notes or "",
                changed_by=changed_by,
            )

            if new_status in STATUS_MESSAGES:
                order_id = str(locked.pk)
                transaction.on_commit(lambda: send_order_status_email.delay(order_id, new_status, notes or None))

        logger.info(f"Order {locked.order_number} moved from {previous_status} to {new_status}")
        return locked

    @staticmethod
    def update_payment_status(order: Order, payment_status: str) -> Order:
        """
        Records whether the order has been paid. Any payment status may
        follow any other; card refunds and retries are settled outside the system.

        Raises:
            OrderValidationError: unknown payment status
        """
        if payment_status not in Order.PaymentStatus.values:
            raise OrderValidationError(f"'{payment_status}' is not a valid payment status.")

        with transaction.atomic():
            locked = Order.all_objects.select_for_update().get(pk=order.pk)
            previous_status = locked.payment_status
            locked.payment_status = payment_status
            locked.save(update_fields=["payment_status", "updated_at"])

        logger.info(
            f"Order {locked.order_number} payment status changed from {previous_status} to {payment_status}"
        )
        return locked

    @staticmethod
    def get_order_by_number(tenant, order_number: str) -> Order:
        try:
            return (
                Order.all_objects.filter(tenant=tenant)
                .prefetch_related("items", "status_history__changed_by")
                .get(order_number=order_number)
            )
        except Order.DoesNotExist:
            raise OrderNotFoundError(f"Order {order_number} not found.")

    def get_order_stats(self, tenant) -> dict:
        """Dashboard numbers for today in the restaurant's time zone."""
        today_orders = Order.all_objects.filter(tenant=tenant, created_at__date=timezone.localdate())

        totals = today_orders.exclude(status=Order.OrderStatus.CANCELLED).aggregate(
            count=Count("id"),
            revenue=Sum("total"),
        )
        by_status = today_orders.aggregate(
            received=Count("id", filter=Q(status=Order.OrderStatus.RECEIVED)),
            preparing=Count("id", filter=Q(status=Order.OrderStatus.PREPARING)),
            ready=Count("id", filter=Q(status=Order.OrderStatus.READY)),
        )

        return {
            "today": {
                "count": totals["count"],
                "revenue": quantize(totals["revenue"] or Decimal("0")),
            },
            "received": by_status["received"],
            "preparing": by_status["preparing"],
            "ready": by_status["ready"],
            "order_numbers": self.number_generator.get_daily_stats(),
        }
