import uuid
from django.db import models


class Tenant(models.Model):
    """
    Root entity for multi-restaurant support.
    Each restaurant taking orders through the platform is a tenant; its
    delivery configuration, orders and order numbers are scoped to it.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=255,
        help_text="Display name for the restaurant (e.g., Golden Fish)"
    )
    slug = models.SlugField(
        unique=True,
        help_text="URL-safe identifier sent by ordering sites in the X-Tenant header"
    )

    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)

    is_active = models.BooleanField(
        default=True,
        help_text="Inactive restaurants cannot take orders"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tenants'
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active'], name='tenant_active_idx'),
        ]

    def __str__(self):
        return self.name
