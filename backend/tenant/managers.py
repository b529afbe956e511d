from django.db import models
from contextlib import contextmanager
from threading import local

# Thread-local storage for current tenant
_thread_locals = local()


def set_current_tenant(tenant):
    """
    Set the current tenant for this thread.

    Args:
        tenant: Tenant instance or None to clear

    Called by TenantMiddleware and by Celery tasks to establish the
    restaurant context for the current request/task.
    """
    _thread_locals.tenant = tenant


def get_current_tenant():
    """
    Get the current tenant for this thread.

    Returns:
        Tenant instance or None if no tenant context is set
    """
    return getattr(_thread_locals, 'tenant', None)


class TenantManager(models.Manager):
    """
    Automatically filters querysets by current tenant.

    FAILS CLOSED: Returns empty queryset if no tenant context is set.

    Usage:
        class Order(models.Model):
            tenant = models.ForeignKey('tenant.Tenant', on_delete=models.CASCADE)

            objects = TenantManager()  # Default manager (tenant-filtered)
            all_objects = models.Manager()  # Bypass filter for admin/tasks
    """

    def get_queryset(self):
        tenant = get_current_tenant()

        if tenant:
            return super().get_queryset().filter(tenant=tenant)

        return super().get_queryset().none()


@contextmanager
def tenant_context(tenant):
    """
    Run a block with the given restaurant as the current tenant, restoring
    the previous context afterwards.

    Usage:
        with tenant_context(order.tenant):
            RestaurantDeliveryConfig.objects.first()
    """
    previous = get_current_tenant()
    set_current_tenant(tenant)
    try:
        yield tenant
    finally:
        set_current_tenant(previous)
