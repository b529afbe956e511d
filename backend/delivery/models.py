from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from tenant.managers import TenantManager
from .exceptions import DeliveryConfigError
from .rules import DeliveryConfig, PricingMode


def default_postcode_rules():
    return [
        {"postcode_pattern": "YO10 3BP", "fee": 2.50},
        {"postcode_pattern": "YO10 3B", "fee": 2.75},
        {"postcode_pattern": "YO10", "fee": 3.00},
        {"postcode_pattern": "YO1", "fee": 3.50},
        {"postcode_pattern": "YO", "fee": 4.00},
    ]


def default_distance_rules():
    return [
        {"max_distance": 1, "fee": 1.50},
        {"max_distance": 2, "fee": 2.50},
        {"max_distance": 3, "fee": 3.50},
        {"max_distance": 5, "fee": 5.00},
    ]


def default_order_value_discounts():
    return [
        {"min_order_value": 25, "type": "free_delivery", "value": 0},
        {"min_order_value": 20, "type": "fixed_reduction", "value": 1.00},
        {"min_order_value": 15, "type": "percentage", "value": 50},
    ]


def default_minimum_order_rules():
    return [
        # First matching rule wins, so narrower scopes go first
        {"applies_to": "postcode", "postcode_pattern": "YO1", "minimum_amount": 15.00},
        {"applies_to": "all", "minimum_amount": 12.00},
    ]


class RestaurantDeliveryConfig(models.Model):
    """
    Delivery pricing for one restaurant.

    Rule sets are stored as JSON so restaurants can be configured without
    migrations; clean() parses them with the same code the fee calculator uses,
    so a config that saves through the admin is a config that prices.
    """

    tenant = models.OneToOneField(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='delivery_config'
    )
    restaurant_name = models.CharField(max_length=200, blank=True)
    restaurant_address = models.TextField(
        blank=True,
        help_text=_("Origin address for distance lookups")
    )

    pricing_mode = models.CharField(
        max_length=20,
        choices=PricingMode.choices,
        default=PricingMode.POSTCODE,
    )

    postcode_rules = models.JSONField(
        default=default_postcode_rules,
        blank=True,
        help_text=_('Zone pricing, e.g. [{"postcode_pattern": "YO10", "fee": 3.00}]')
    )
    distance_rules = models.JSONField(
        default=default_distance_rules,
        blank=True,
        help_text=_('Distance tiers in km, e.g. [{"max_distance": 2, "fee": 2.50}]')
    )
    order_value_discounts = models.JSONField(
        default=default_order_value_discounts,
        blank=True,
        help_text=_('e.g. [{"min_order_value": 25, "type": "free_delivery", "value": 0}]')
    )
    minimum_order_rules = models.JSONField(
        default=default_minimum_order_rules,
        blank=True,
        help_text=_('e.g. [{"applies_to": "all", "minimum_amount": 12.00}]')
    )

    default_delivery_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        default=Decimal("3.50"),
        help_text=_("Fee for postcodes no zone matches. Leave empty to refuse them.")
    )
    preparation_time_minutes = models.PositiveIntegerField(default=35)
    max_delivery_distance_km = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        default=Decimal("5.00"),
    )

    is_active = models.BooleanField(default=True)
    delivery_enabled = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = _("Restaurant Delivery Configuration")
        verbose_name_plural = _("Restaurant Delivery Configurations")
        indexes = [
            models.Index(fields=['is_active'], name='delivery_cfg_active_idx'),
        ]

    def __str__(self):
        return f"{self.restaurant_name or self.tenant} ({self.get_pricing_mode_display()})"

    def clean(self):
        try:
            snapshot = self.to_snapshot()
        except DeliveryConfigError as e:
            raise ValidationError(e.message)

        if snapshot.pricing_mode == PricingMode.DISTANCE:
            errors = {}
            if not snapshot.tier_rules:
                errors['distance_rules'] = _('Distance pricing needs at least one distance tier')
            if not snapshot.restaurant_address:
                errors['restaurant_address'] = _('Distance pricing needs the restaurant address')
            if errors:
                raise ValidationError(errors)

    def to_snapshot(self) -> DeliveryConfig:
        return DeliveryConfig.from_model(self)
