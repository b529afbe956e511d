"""
Management command to create a restaurant's delivery configuration with the
standard rule sets (York postcode zones, 1-5km tiers, order value discounts
and minimum orders).

Usage:
    python manage.py seed_delivery_config
    python manage.py seed_delivery_config --tenant golden-fish --address "1 High St, York YO1 7HH"
    python manage.py seed_delivery_config --mode distance --reset
"""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from delivery.models import (
    RestaurantDeliveryConfig,
    default_distance_rules,
    default_minimum_order_rules,
    default_order_value_discounts,
    default_postcode_rules,
)
from delivery.rules import PricingMode
from tenant.models import Tenant


class Command(BaseCommand):
    help = 'Create or reset the delivery configuration for a restaurant'

    def add_arguments(self, parser):
        parser.add_argument(
            '--tenant',
            default=getattr(settings, 'DEFAULT_TENANT_SLUG', None),
            help='Restaurant slug (defaults to DEFAULT_TENANT_SLUG)',
        )
        parser.add_argument('--address', default='', help='Restaurant address used as the distance origin')
        parser.add_argument(
            '--mode',
            choices=PricingMode.values,
            default=PricingMode.POSTCODE,
            help='Pricing mode',
        )
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Overwrite an existing configuration with the defaults',
        )

    def handle(self, *args, **options):
        slug = options['tenant']
        if not slug:
            raise CommandError('No restaurant given and DEFAULT_TENANT_SLUG is not set')

        try:
            tenant = Tenant.objects.get(slug=slug)
        except Tenant.DoesNotExist:
            raise CommandError(
                f"Restaurant '{slug}' not found. "
                f"Available: {', '.join(Tenant.objects.values_list('slug', flat=True)) or 'none'}"
            )

        existing = RestaurantDeliveryConfig.all_objects.filter(tenant=tenant).first()
        if existing and not options['reset']:
            self.stdout.write(self.style.WARNING(
                f"{tenant.name} already has a delivery configuration. Use --reset to overwrite it."
            ))
            return

        config = existing or RestaurantDeliveryConfig(tenant=tenant)
        config.restaurant_name = tenant.name
        config.restaurant_address = options['address'] or config.restaurant_address
        config.pricing_mode = options['mode']
        config.postcode_rules = default_postcode_rules()
        config.distance_rules = default_distance_rules()
        config.order_value_discounts = default_order_value_discounts()
        config.minimum_order_rules = default_minimum_order_rules()
        config.default_delivery_fee = RestaurantDeliveryConfig._meta.get_field('default_delivery_fee').default
        config.preparation_time_minutes = 35
        config.max_delivery_distance_km = RestaurantDeliveryConfig._meta.get_field('max_delivery_distance_km').default
        config.is_active = True
        config.delivery_enabled = True

        try:
            config.full_clean()
        except ValidationError as e:
            raise CommandError(f"Default configuration is not valid for this restaurant: {e}")

        with transaction.atomic():
            config.save()

        action = 'Reset' if existing else 'Created'
        self.stdout.write(self.style.SUCCESS(
            f"{action} {config.get_pricing_mode_display().lower()} delivery configuration for {tenant.name}"
        ))
