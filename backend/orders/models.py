import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.utils.money import ZERO, quantize, to_decimal
from tenant.managers import TenantManager


class Order(models.Model):
    # --- Status Fields ---
    class OrderStatus(models.TextChoices):
        RECEIVED = "received", _("Received")
        PREPARING = "preparing", _("Preparing")
        READY = "ready", _("Ready")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    class DeliveryType(models.TextChoices):
        DELIVERY = "delivery", _("Delivery")
        COLLECTION = "collection", _("Collection")

    class PaymentMethod(models.TextChoices):
        CARD = "card", _("Card")
        CASH = "cash", _("Cash")
        PAYPAL = "paypal", _("PayPal")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        FAILED = "failed", _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='orders'
    )
    order_number = models.CharField(
        max_length=30,
        unique=True,
        help_text=_("Customer-facing reference, e.g. GF251018-007. Never reused.")
    )
    status = models.CharField(
        max_length=10, choices=OrderStatus.choices, default=OrderStatus.RECEIVED
    )

    # --- Customer ---
    customer_name = models.CharField(max_length=101)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=20)

    # --- Fulfilment ---
    delivery_type = models.CharField(max_length=10, choices=DeliveryType.choices)
    delivery_address = models.TextField(blank=True)
    delivery_city = models.CharField(max_length=100, blank=True)
    delivery_postcode = models.CharField(max_length=10, blank=True)
    delivery_instructions = models.TextField(blank=True)
    special_instructions = models.TextField(blank=True)
    estimated_minutes = models.PositiveIntegerField(
        help_text=_("Minutes until the order is expected to be ready or delivered")
    )

    # --- Money ---
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    delivery_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=ZERO,
        help_text=_("Delivery fee charged, after any order value discount")
    )
    original_delivery_fee = models.DecimalField(
        max_digits=10, decimal_places=2, default=ZERO,
        help_text=_("Delivery fee before the order value discount")
    )
    discount = models.DecimalField(
        max_digits=10, decimal_places=2, default=ZERO,
        help_text=_("Promotion discounts applied to the order")
    )
    total = models.DecimalField(max_digits=10, decimal_places=2)

    # --- Payment ---
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices)
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )

    confirmation_sent = models.BooleanField(
        default=False,
        help_text=_("Whether the confirmation email reached the mail server")
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at", "order_number"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=['tenant', 'status'], name='order_tenant_stat_idx'),
            models.Index(fields=['tenant', 'created_at'], name='order_tenant_created_idx'),
            models.Index(fields=['tenant', 'status', 'created_at'], name='order_ten_stat_dt_idx'),
            models.Index(fields=['customer_email'], name='order_cust_email_idx'),
        ]

    def __str__(self):
        return f"Order {self.order_number} ({self.delivery_type}) - {self.status}"

    @property
    def is_delivery(self):
        return self.delivery_type == self.DeliveryType.DELIVERY


class OrderItem(models.Model):
    """
    Snapshot of one line as the customer ordered it. Items are not linked to a
    menu table; the name and prices are copied so later menu edits do not
    rewrite past orders.
    """

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='order_items'
    )
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    name = models.CharField(max_length=200)
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Price of one unit at the time of the order, before options"),
    )
    quantity = models.PositiveIntegerField(default=1)
    selected_options = models.JSONField(
        default=list,
        blank=True,
        help_text=_('Chosen options with their surcharges, e.g. [{"name": "Large", "price": "1.00"}]')
    )
    is_free_item = models.BooleanField(
        default=False,
        help_text=_("Promotional item; contributes nothing to the subtotal")
    )

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        ordering = ['id']
        # Reverse relations (order.items) follow the parent order, not the thread-local tenant
        default_manager_name = "all_objects"
        indexes = [
            models.Index(fields=['tenant', 'order'], name='item_tenant_order_idx'),
        ]

    def __str__(self):
        return f"{self.quantity} of {self.name} in Order {self.order.order_number}"

    @property
    def options_total(self):
        return sum((to_decimal(option.get("price", 0)) for option in self.selected_options or []), Decimal("0"))

    @property
    def total_price(self):
        if self.is_free_item:
            return ZERO
        return quantize((self.unit_price + self.options_total) * self.quantity)


class OrderStatusHistory(models.Model):
    """
    Append-only log of status changes. Rows are written by OrderService and
    never updated or deleted.
    """

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='order_status_history'
    )
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_history")
    status = models.CharField(max_length=10, choices=Order.OrderStatus.choices)
    notes = models.TextField(blank=True)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_status_changes',
        help_text=_("Staff member who made the change. Null for changes made by the system.")
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Order Status History")
        verbose_name_plural = _("Order Status History")
        ordering = ['created_at', 'id']
        default_manager_name = "all_objects"
        indexes = [
            models.Index(fields=['tenant', 'order'], name='status_hist_order_idx'),
        ]

    def __str__(self):
        return f"{self.order.order_number}: {self.status}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Order status history entries cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Order status history entries cannot be deleted")
