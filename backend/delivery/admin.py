from django.contrib import admin

from .models import RestaurantDeliveryConfig


@admin.register(RestaurantDeliveryConfig)
class RestaurantDeliveryConfigAdmin(admin.ModelAdmin):
    list_display = [
        'tenant', 'restaurant_name', 'pricing_mode', 'default_delivery_fee',
        'max_delivery_distance_km', 'is_active', 'delivery_enabled', 'updated_at',
    ]
    list_filter = ['pricing_mode', 'is_active', 'delivery_enabled']
    search_fields = ['restaurant_name', 'tenant__name', 'tenant__slug']
    readonly_fields = ['created_at', 'updated_at']
    fieldsets = (
        (None, {
            'fields': ('tenant', 'restaurant_name', 'restaurant_address', 'is_active', 'delivery_enabled')
        }),
        ('Pricing', {
            'fields': ('pricing_mode', 'postcode_rules', 'distance_rules', 'default_delivery_fee',
                       'max_delivery_distance_km')
        }),
        ('Order value', {
            'fields': ('order_value_discounts', 'minimum_order_rules')
        }),
        ('Timing', {
            'fields': ('preparation_time_minutes', 'created_at', 'updated_at')
        }),
    )

    def get_queryset(self, request):
        return RestaurantDeliveryConfig.all_objects.select_related('tenant')
