import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Tenant",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(help_text="Display name for the restaurant (e.g., Golden Fish)", max_length=255)),
                ("slug", models.SlugField(help_text="URL-safe identifier sent by ordering sites in the X-Tenant header", unique=True)),
                ("contact_email", models.EmailField(blank=True, max_length=254)),
                ("contact_phone", models.CharField(blank=True, max_length=50)),
                ("is_active", models.BooleanField(default=True, help_text="Inactive restaurants cannot take orders")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "tenants",
                "ordering": ["name"],
                "indexes": [models.Index(fields=["is_active"], name="tenant_active_idx")],
            },
        ),
    ]
