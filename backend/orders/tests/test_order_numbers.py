"""
Order Number Generation Tests

Sequential numbers come from an atomic daily counter; when the counter store
fails the generator falls back to random numbers so orders can still be taken.

Test Categories:
1. Sequential format and daily sequence
2. Concurrency (no duplicate numbers)
3. Degraded numbering when the counter store fails
4. Format validation and daily stats

Run with: pytest backend/orders/tests/test_order_numbers.py -v
"""
import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from orders.exceptions import CounterStoreError
from orders.services import CacheCounterStore, CounterStore, OrderNumberGenerator

SEQUENTIAL_RE = re.compile(r"^GF\d{6}-\d{3,}$")
RANDOM_RE = re.compile(r"^GF-[A-Z0-9]{12}$")


class UnavailableStore(CounterStore):
    """A counter store whose backend is down."""

    def increment(self, key, ttl):
        raise CounterStoreError("connection refused")

    def peek(self, key):
        raise CounterStoreError("connection refused")


# ============================================================================
# SEQUENTIAL NUMBERING
# ============================================================================

class TestSequentialNumbers:

    def test_first_number_of_the_day(self):
        generator = OrderNumberGenerator()

        order_number = generator.generate()

        assert SEQUENTIAL_RE.match(order_number)
        assert order_number == f"GF{generator.date_key()}-001"

    def test_numbers_increase_by_one(self):
        generator = OrderNumberGenerator()

        numbers = [generator.generate() for _ in range(3)]

        assert [n.rsplit("-", 1)[1] for n in numbers] == ["001", "002", "003"]

    def test_counter_is_shared_between_generators(self):
        # One counter per deployment: every restaurant draws from the same sequence
        first = OrderNumberGenerator().generate()
        second = OrderNumberGenerator().generate()

        assert first != second
        assert second.endswith("-002")

    def test_sequence_grows_past_padding(self):
        generator = OrderNumberGenerator()
        store = generator.store
        key = generator.counter_key(generator.date_key())
        store.cache.set(key, 999)

        assert generator.generate().endswith("-1000")

    def test_date_key_format(self):
        assert OrderNumberGenerator.date_key(date(2025, 10, 18)) == "251018"
        assert OrderNumberGenerator.counter_key("251018") == "order_counter:251018"

    def test_custom_prefix(self):
        assert OrderNumberGenerator(prefix="HC").generate().startswith("HC")

    def test_sequential_path_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="orders.services.order_number_service"):
            OrderNumberGenerator().generate()

        assert "Generated sequential order number" in caplog.text


# ============================================================================
# CONCURRENCY
# ============================================================================

class TestConcurrentNumbering:

    def test_parallel_generation_never_duplicates(self):
        """
        CRITICAL: 50 simultaneous orders must get 50 different numbers.
        """
        generator = OrderNumberGenerator()
        barrier = threading.Barrier(10)

        def place_order(_):
            barrier.wait(timeout=5)
            return [generator.generate() for _ in range(5)]

        with ThreadPoolExecutor(max_workers=10) as executor:
            batches = list(executor.map(place_order, range(10)))

        numbers = [number for batch in batches for number in batch]

        assert len(set(numbers)) == 50
        sequences = sorted(int(n.rsplit("-", 1)[1]) for n in numbers)
        assert sequences == list(range(1, 51))


# ============================================================================
# DEGRADED NUMBERING
# ============================================================================

class TestDegradedNumbering:

    def test_store_failure_falls_back_to_random(self, caplog):
        generator = OrderNumberGenerator(store=UnavailableStore())

        with caplog.at_level(logging.WARNING, logger="orders.services.order_number_service"):
            order_number = generator.generate()

        assert RANDOM_RE.match(order_number)
        assert "degraded" in caplog.text

    def test_cache_that_cannot_increment(self, broken_counter_cache, caplog):
        with caplog.at_level(logging.WARNING, logger="orders.services.order_number_service"):
            order_number = OrderNumberGenerator().generate()

        assert RANDOM_RE.match(order_number)
        assert "degraded" in caplog.text

    def test_cache_store_wraps_backend_errors(self, broken_counter_cache):
        with pytest.raises(CounterStoreError):
            CacheCounterStore().increment("order_counter:251018", 60)

    def test_random_numbers_are_distinct(self):
        generator = OrderNumberGenerator(store=UnavailableStore())

        numbers = {generator.generate() for _ in range(100)}

        assert len(numbers) == 100


# ============================================================================
# VALIDATION AND STATS
# ============================================================================

class TestFormatAndStats:

    @pytest.mark.parametrize("order_number", [
        "GF251018-001",
        "GF251018-1000",
        "GF-7K2M9QX4B1ZA",
        "GF1729260000",
    ])
    def test_issued_formats_are_valid(self, order_number):
        assert OrderNumberGenerator().is_valid_format(order_number)

    @pytest.mark.parametrize("order_number", [
        "",
        None,
        "GF251018-01",
        "HC251018-001",
        "GF-7k2m9qx4b1za",
        "GF-SHORT",
        "GF1234567",
    ])
    def test_other_strings_are_invalid(self, order_number):
        assert not OrderNumberGenerator().is_valid_format(order_number)

    def test_daily_stats(self):
        generator = OrderNumberGenerator()
        generator.generate()
        generator.generate()

        stats = generator.get_daily_stats()

        assert stats["date_key"] == generator.date_key()
        assert stats["count"] == 2
        assert stats["latest_number"] == f"GF{generator.date_key()}-002"

    def test_daily_stats_for_a_quiet_day(self):
        stats = OrderNumberGenerator().get_daily_stats("200101")

        assert stats == {"date_key": "200101", "count": 0, "latest_number": None}

    def test_daily_stats_survive_store_failure(self):
        stats = OrderNumberGenerator(store=UnavailableStore()).get_daily_stats("251018")

        assert stats["count"] == 0
