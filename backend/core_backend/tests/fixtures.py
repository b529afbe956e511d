"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like restaurants, delivery configurations, staff users and orders.
"""
import pytest
from decimal import Decimal

from django.contrib.auth import get_user_model

from tenant.models import Tenant
from delivery.models import RestaurantDeliveryConfig
from orders.models import Order, OrderItem, OrderStatusHistory

User = get_user_model()


# ============================================================================
# TENANT FIXTURES
# ============================================================================

@pytest.fixture
def tenant_a(db):
    """Create test tenant A (Golden Fish York)"""
    return Tenant.objects.create(
        name='Golden Fish York',
        slug='golden-fish-york',
        contact_email='york@goldenfish.co.uk',
        contact_phone='01904 123456',
        is_active=True
    )


@pytest.fixture
def tenant_b(db):
    """Create test tenant B (Harbour Chippy)"""
    return Tenant.objects.create(
        name='Harbour Chippy',
        slug='harbour-chippy',
        is_active=True
    )


@pytest.fixture
def inactive_tenant(db):
    """Create inactive test tenant"""
    return Tenant.objects.create(
        name='Closed Restaurant',
        slug='closed-restaurant',
        is_active=False
    )


# ============================================================================
# DELIVERY CONFIGURATION FIXTURES
# ============================================================================

@pytest.fixture
def postcode_config_tenant_a(tenant_a):
    """
    Postcode pricing for tenant A with the standard York rule sets:
    zones YO10 3BP 2.50 / YO10 3B 2.75 / YO10 3.00 / YO1 3.50 / YO 4.00,
    discounts at 25 (free) / 20 (1.00 off) / 15 (50%), minimum 12.00 (15.00 in YO1).
    """
    return RestaurantDeliveryConfig.all_objects.create(
        tenant=tenant_a,
        restaurant_name='Golden Fish York',
        restaurant_address='12 Walmgate, York YO1 9TX',
        pricing_mode='postcode',
        default_delivery_fee=None,
        preparation_time_minutes=30,
    )


@pytest.fixture
def distance_config_tenant_b(tenant_b):
    """Distance pricing for tenant B: tiers 1km 1.50 / 2km 2.50 / 3km 3.50, 5km limit, no discounts."""
    return RestaurantDeliveryConfig.all_objects.create(
        tenant=tenant_b,
        restaurant_name='Harbour Chippy',
        restaurant_address='1 Harbour Street, Whitby YO21 3PU',
        pricing_mode='distance',
        distance_rules=[
            {"max_distance": 1, "fee": 1.50},
            {"max_distance": 2, "fee": 2.50},
            {"max_distance": 3, "fee": 3.50},
        ],
        order_value_discounts=[],
        minimum_order_rules=[{"applies_to": "all", "minimum_amount": 10.00}],
        preparation_time_minutes=25,
        max_delivery_distance_km=Decimal("5.00"),
    )


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def staff_user(db):
    """Create a restaurant staff user"""
    return User.objects.create_user(
        username='kitchen',
        email='kitchen@goldenfish.co.uk',
        password='password123',
        is_staff=True
    )


@pytest.fixture
def customer_user(db):
    """Create a non-staff user"""
    return User.objects.create_user(
        username='customer',
        email='customer@example.com',
        password='password123'
    )


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def order_payload():
    """
    Factory for order creation request bodies.

    Usage:
        def test_collection(order_payload):
            data = order_payload(method='collection')
    """
    def _make(method='delivery', postcode='YO10 5DD', items=None, **overrides):
        payload = {
            'customer': {
                'first_name': 'Jane',
                'last_name': 'Smith',
                'email': 'jane.smith@example.com',
                'phone': '07700900123',
            },
            'items': items if items is not None else [
                {'name': 'Cod and Chips', 'price': '8.50', 'quantity': 2},
                {
                    'name': 'Sweet and Sour Chicken',
                    'price': '6.00',
                    'quantity': 1,
                    'selected_options': [{'name': 'Egg Fried Rice', 'price': '1.00'}],
                },
            ],
            'delivery': {
                'method': method,
                'address': '5 Heslington Lane' if method == 'delivery' else '',
                'city': 'York' if method == 'delivery' else '',
                'postcode': postcode if method == 'delivery' else '',
            },
            'payment_method': 'card',
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def order_tenant_a(tenant_a):
    """A received delivery order for tenant A with one item and its first history entry"""
    order = Order.all_objects.create(
        tenant=tenant_a,
        order_number='GF251018-001',
        customer_name='Jane Smith',
        customer_email='jane.smith@example.com',
        customer_phone='07700900123',
        delivery_type=Order.DeliveryType.DELIVERY,
        delivery_address='5 Heslington Lane',
        delivery_postcode='YO10 5DD',
        subtotal=Decimal('17.00'),
        delivery_fee=Decimal('1.50'),
        original_delivery_fee=Decimal('3.00'),
        total=Decimal('18.50'),
        payment_method=Order.PaymentMethod.CARD,
        estimated_minutes=45,
    )
    OrderItem.all_objects.create(
        tenant=tenant_a,
        order=order,
        name='Cod and Chips',
        unit_price=Decimal('8.50'),
        quantity=2,
    )
    OrderStatusHistory.all_objects.create(
        tenant=tenant_a,
        order=order,
        status=Order.OrderStatus.RECEIVED,
        notes='Order received and confirmed',
    )
    return order


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def tenant_client(api_client):
    """
    Factory for API clients that address a given restaurant via X-Tenant.

    Usage:
        def test_quote(tenant_client, tenant_a):
            client = tenant_client(tenant_a)
            response = client.post('/api/delivery/calculate-fee/', {...}, format='json')
    """
    def _create_client(tenant, user=None):
        api_client.credentials(HTTP_X_TENANT=tenant.slug)
        if user is not None:
            api_client.force_authenticate(user=user)
        return api_client

    return _create_client


@pytest.fixture
def staff_client_tenant_a(tenant_client, tenant_a, staff_user):
    """API client for tenant A authenticated as staff"""
    return tenant_client(tenant_a, user=staff_user)
