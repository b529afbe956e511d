from django.contrib import admin

from .models import Order, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("name", "quantity", "unit_price", "selected_options", "is_free_item", "get_line_item_total")
    readonly_fields = fields
    can_delete = False

    def get_line_item_total(self, obj):
        return f"£{obj.total_price:,.2f}"

    get_line_item_total.short_description = "Line Item Total"

    def has_add_permission(self, request, obj=None):
        return False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    fields = ("status", "notes", "changed_by", "created_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Orders are read-only here. Status changes go through the status endpoint
    so every change lands in the status history and emails the customer.
    """

    list_display = (
        "order_number",
        "tenant",
        "customer_name",
        "delivery_type",
        "status",
        "payment_status",
        "total",
        "confirmation_sent",
        "created_at",
    )
    list_display_links = ("order_number",)
    list_filter = ("tenant", "status", "delivery_type", "payment_status", "created_at")
    search_fields = ("order_number", "customer_name", "customer_email", "delivery_postcode")
    ordering = ("-created_at",)
    inlines = [OrderItemInline, OrderStatusHistoryInline]
    readonly_fields = [field.name for field in Order._meta.fields]

    def get_queryset(self, request):
        return Order.all_objects.select_related("tenant")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
