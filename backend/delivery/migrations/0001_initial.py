from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models

import delivery.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenant", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="RestaurantDeliveryConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("restaurant_name", models.CharField(blank=True, max_length=200)),
                ("restaurant_address", models.TextField(blank=True, help_text="Origin address for distance lookups")),
                ("pricing_mode", models.CharField(choices=[("postcode", "Postcode zones"), ("distance", "Distance tiers")], default="postcode", max_length=20)),
                ("postcode_rules", models.JSONField(blank=True, default=delivery.models.default_postcode_rules, help_text='Zone pricing, e.g. [{"postcode_pattern": "YO10", "fee": 3.00}]')),
                ("distance_rules", models.JSONField(blank=True, default=delivery.models.default_distance_rules, help_text='Distance tiers in km, e.g. [{"max_distance": 2, "fee": 2.50}]')),
                ("order_value_discounts", models.JSONField(blank=True, default=delivery.models.default_order_value_discounts, help_text='e.g. [{"min_order_value": 25, "type": "free_delivery", "value": 0}]')),
                ("minimum_order_rules", models.JSONField(blank=True, default=delivery.models.default_minimum_order_rules, help_text='e.g. [{"applies_to": "all", "minimum_amount": 12.00}]')),
                ("default_delivery_fee", models.DecimalField(blank=True, decimal_places=2, default=Decimal("3.50"), help_text="Fee for postcodes no zone matches. Leave empty to refuse them.", max_digits=10, null=True)),
                ("preparation_time_minutes", models.PositiveIntegerField(default=35)),
                ("max_delivery_distance_km", models.DecimalField(blank=True, decimal_places=2, default=Decimal("5.00"), max_digits=5, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("delivery_enabled", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tenant", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="delivery_config", to="tenant.tenant")),
            ],
            options={
                "verbose_name": "Restaurant Delivery Configuration",
                "verbose_name_plural": "Restaurant Delivery Configurations",
                "indexes": [models.Index(fields=["is_active"], name="delivery_cfg_active_idx")],
            },
        ),
    ]
