"""
Orders services package.

- OrderService: order intake (create_order) and lifecycle (update_order_status)
- OrderCalculationService: subtotal, promotion discount and total
- OrderNumberGenerator: customer-facing order numbers from an atomic counter
"""

from .order_service import OrderService, OrderCreationResult
from .calculation_service import OrderCalculationService
from .order_number_service import CacheCounterStore, CounterStore, OrderNumberGenerator

__all__ = [
    'OrderService',
    'OrderCreationResult',
    'OrderCalculationService',
    'OrderNumberGenerator',
    'CounterStore',
    'CacheCounterStore',
]
