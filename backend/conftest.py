"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.test import override_settings
from django.core.cache import caches
from tenant.managers import set_current_tenant


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(scope='session', autouse=True)
def default_tenant(django_db_setup, django_db_blocker):
    """
    Create default tenant for development/test fallback.

    The TenantMiddleware uses DEFAULT_TENANT_SLUG when no X-Tenant header is sent.
    This fixture ensures that tenant exists for all tests.
    """
    with django_db_blocker.unblock():
        from tenant.models import Tenant
        from django.conf import settings

        default_slug = getattr(settings, 'DEFAULT_TENANT_SLUG', 'golden-fish')

        tenant, _ = Tenant.objects.get_or_create(
            slug=default_slug,
            defaults={
                'name': 'Golden Fish',
                'is_active': True
            }
        )
        return tenant


@pytest.fixture(autouse=True)
def reset_tenant_context():
    """
    Reset tenant context after each test.

    CRITICAL: This prevents tenant context from leaking between tests.
    If tenant context leaks, tests may pass when they should fail.
    """
    yield  # Run the test

    # After test: ALWAYS reset to None
    set_current_tenant(None)


@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear every cache (including the order counter cache) after each test so
    order number sequences start from 001 in every test.
    """
    yield  # Run the test
    for cache in caches.all():
        cache.clear()


@pytest.fixture(autouse=True)
def test_settings(settings):
    """Local-memory email and a Maps key for every test. Celery runs eagerly (no REDIS_URL)."""
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    settings.GOOGLE_MAPS_API_KEY = 'test-maps-key'


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/delivery/config/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


# ============================================================================
# CACHE FIXTURES
# ============================================================================

@pytest.fixture
def broken_counter_cache():
    """
    Point the order counter at a cache that cannot increment.

    DummyCache accepts add() and then raises ValueError from incr(), the same
    failure a vanished Redis key produces.
    """
    from django.conf import settings

    with override_settings(
        CACHES={
            **settings.CACHES,
            'order_counters': {
                'BACKEND': 'django.core.cache.backends.dummy.DummyCache',
            },
        }
    ):
        yield


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *
