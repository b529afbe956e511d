import logging

from django.conf import settings
from django.http import JsonResponse

from .models import Tenant
from .managers import set_current_tenant

logger = logging.getLogger(__name__)

TENANT_EXEMPT_PATHS = ('/admin/', '/api/health/')


class TenantNotFoundError(Exception):
    """Raised when tenant cannot be resolved from request."""
    pass


class TenantMiddleware:
    """
    Resolves the restaurant for a request and attaches it to request.tenant.

    Resolution precedence:
    1. X-Tenant header - ordering sites calling the shared API
    2. DEFAULT_TENANT_SLUG - single-restaurant deployments and local development
    3. Fail with 400
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Django admin and the health check operate without tenant context
        if request.path.startswith(TENANT_EXEMPT_PATHS):
            request.tenant = None
            set_current_tenant(None)
            return self.get_response(request)

        try:
            tenant = self.get_tenant_from_request(request)
            request.tenant = tenant
            set_current_tenant(tenant)

            if not tenant.is_active:
                return JsonResponse({
                    'success': False,
                    'error': 'TENANT_INACTIVE',
                    'message': 'This restaurant is not currently accepting orders',
                }, status=403)

            return self.get_response(request)

        except TenantNotFoundError as e:
            return JsonResponse({
                'success': False,
                'error': 'TENANT_NOT_FOUND',
                'message': str(e),
            }, status=400)

        finally:
            # Always clean up so the context cannot leak into the next request
            set_current_tenant(None)

    def get_tenant_from_request(self, request):
        tenant_slug = request.META.get('HTTP_X_TENANT')
        if tenant_slug:
            try:
                return Tenant.objects.get(slug=tenant_slug)
            except Tenant.DoesNotExist:
                logger.warning(f"X-Tenant header names unknown restaurant '{tenant_slug}'")
                raise TenantNotFoundError(
                    f"Restaurant '{tenant_slug}' not found. Check X-Tenant header value."
                )

        default_slug = getattr(settings, 'DEFAULT_TENANT_SLUG', None)
        if default_slug:
            try:
                return Tenant.objects.get(slug=default_slug)
            except Tenant.DoesNotExist:
                raise TenantNotFoundError(
                    f"Default restaurant '{default_slug}' not found."
                )

        raise TenantNotFoundError("Unable to determine restaurant for this request.")
