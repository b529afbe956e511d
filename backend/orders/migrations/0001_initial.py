import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("tenant", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_number", models.CharField(help_text="Customer-facing reference, e.g. GF251018-007. Never reused.", max_length=30, unique=True)),
                ("status", models.CharField(choices=[("received", "Received"), ("preparing", "Preparing"), ("ready", "Ready"), ("completed", "Completed"), ("cancelled", "Cancelled")], default="received", max_length=10)),
                ("customer_name", models.CharField(max_length=101)),
                ("customer_email", models.EmailField(max_length=254)),
                ("customer_phone", models.CharField(max_length=20)),
                ("delivery_type", models.CharField(choices=[("delivery", "Delivery"), ("collection", "Collection")], max_length=10)),
                ("delivery_address", models.TextField(blank=True)),
                ("delivery_city", models.CharField(blank=True, max_length=100)),
                ("delivery_postcode", models.CharField(blank=True, max_length=10)),
                ("delivery_instructions", models.TextField(blank=True)),
                ("special_instructions", models.TextField(blank=True)),
                ("estimated_minutes", models.PositiveIntegerField(help_text="Minutes until the order is expected to be ready or delivered")),
                ("subtotal", models.DecimalField(decimal_places=2, max_digits=10)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Delivery fee charged, after any order value discount", max_digits=10)),
                ("original_delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Delivery fee before the order value discount", max_digits=10)),
                ("discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Promotion discounts applied to the order", max_digits=10)),
                ("total", models.DecimalField(decimal_places=2, max_digits=10)),
                ("payment_method", models.CharField(choices=[("card", "Card"), ("cash", "Cash"), ("paypal", "PayPal")], max_length=10)),
                ("payment_status", models.CharField(choices=[("pending", "Pending"), ("paid", "Paid"), ("failed", "Failed")], default="pending", max_length=10)),
                ("confirmation_sent", models.BooleanField(default=False, help_text="Whether the confirmation email reached the mail server")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="orders", to="tenant.tenant")),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "ordering": ["-created_at", "order_number"],
                "indexes": [
                    models.Index(fields=["tenant", "status"], name="order_tenant_stat_idx"),
                    models.Index(fields=["tenant", "created_at"], name="order_tenant_created_idx"),
                    models.Index(fields=["tenant", "status", "created_at"], name="order_ten_stat_dt_idx"),
                    models.Index(fields=["customer_email"], name="order_cust_email_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("unit_price", models.DecimalField(decimal_places=2, help_text="Price of one unit at the time of the order, before options", max_digits=10)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("selected_options", models.JSONField(blank=True, default=list, help_text='Chosen options with their surcharges, e.g. [{"name": "Large", "price": "1.00"}]')),
                ("is_free_item", models.BooleanField(default=False, help_text="Promotional item; contributes nothing to the subtotal")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order")),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="order_items", to="tenant.tenant")),
            ],
            options={
                "verbose_name": "Order Item",
                "verbose_name_plural": "Order Items",
                "ordering": ["id"],
                "default_manager_name": "all_objects",
                "indexes": [models.Index(fields=["tenant", "order"], name="item_tenant_order_idx")],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("received", "Received"), ("preparing", "Preparing"), ("ready", "Ready"), ("completed", "Completed"), ("cancelled", "Cancelled")], max_length=10)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("changed_by", models.ForeignKey(blank=True, help_text="Staff member who made the change. Null for changes made by the system.", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="order_status_changes", to=settings.AUTH_USER_MODEL)),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_history", to="orders.order")),
                ("tenant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="order_status_history", to="tenant.tenant")),
            ],
            options={
                "verbose_name": "Order Status History",
                "verbose_name_plural": "Order Status History",
                "ordering": ["created_at", "id"],
                "default_manager_name": "all_objects",
                "indexes": [models.Index(fields=["tenant", "order"], name="status_hist_order_idx")],
            },
        ),
    ]
