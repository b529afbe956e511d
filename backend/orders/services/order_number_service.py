import logging
import re
import secrets
import string
from abc import ABC, abstractmethod
from typing import Optional

from django.conf import settings
from django.core.cache import caches
from django.utils import timezone

from orders.exceptions import CounterStoreError

logger = logging.getLogger(__name__)

RANDOM_ALPHABET = string.ascii_uppercase + string.digits


class CounterStore(ABC):
    """Anything that can atomically increment a named counter and return the new value."""

    @abstractmethod
    def increment(self, key: str, ttl: int) -> int:
        """
        Increment the counter at key and return the new value, creating it
        with the given TTL (seconds) when absent.

        Raises:
            CounterStoreError: if the store cannot increment
        """

    @abstractmethod
    def peek(self, key: str) -> Optional[int]:
        """Current value without changing it, or None when the key does not exist."""


class CacheCounterStore(CounterStore):
    """
    Counter store on a Django cache alias.

    With the Redis backend add() is SET NX EX and incr() is INCR, so two
    workers can never read the same value. The local-memory backend gives the
    same guarantee inside one process.
    """

    def __init__(self, alias: str = None):
        self.alias = alias or settings.ORDERS.get("COUNTER_CACHE_ALIAS", "default")

    @property
    def cache(self):
        return caches[self.alias]

    def increment(self, key: str, ttl: int) -> int:
        try:
            self.cache.add(key, 0, ttl)
            return int(self.cache.incr(key))
        except Exception as e:
            # ValueError if the key expired between add() and incr(); anything
            # else is the backend (connection refused, timeout, ...)
            raise CounterStoreError(f"Counter increment failed for {key}: {e}") from e

    def peek(self, key: str) -> Optional[int]:
        try:
            value = self.cache.get(key)
        except Exception as e:
            raise CounterStoreError(f"Counter read failed for {key}: {e}") from e
        return int(value) if value is not None else None


class OrderNumberGenerator:
    """
    Mints customer-facing order numbers.

    Primary format is PREFIX + YYMMDD + "-" + daily sequence, e.g. GF251018-007,
    with the sequence taken from an atomic counter. When the counter store is
    unavailable the generator degrades to PREFIX + "-" + 12 random characters
    so orders can still be taken; both paths are logged.
    """

    def __init__(self, store: CounterStore = None, prefix: str = None):
        order_settings = settings.ORDERS
        self.store = store or CacheCounterStore()
        self.prefix = prefix if prefix is not None else order_settings.get("NUMBER_PREFIX", "GF")
        self.ttl = order_settings.get("COUNTER_TTL_SECONDS", 48 * 60 * 60)
        self.padding = order_settings.get("SEQUENCE_PADDING", 3)
        self.random_length = order_settings.get("RANDOM_SUFFIX_LENGTH", 12)

    @staticmethod
    def date_key(day=None) -> str:
        """YYMMDD for the given date, or for today in the configured time zone."""
        return (day or timezone.localdate()).strftime("%y%m%d")

    @staticmethod
    def counter_key(date_key: str) -> str:
        return f"order_counter:{date_key}"

    def generate(self) -> str:
        date_key = self.date_key()
        key = self.counter_key(date_key)

        try:
            sequence = self.store.increment(key, self.ttl)
        except CounterStoreError as e:
            order_number = self.generate_random()
            logger.warning(f"Order numbering degraded to random format ({order_number}): {e}")
            return order_number

        order_number = f"{self.prefix}{date_key}-{sequence:0{self.padding}d}"
        logger.info(f"Generated sequential order number {order_number}")
        return order_number

    def generate_random(self) -> str:
        suffix = "".join(secrets.choice(RANDOM_ALPHABET) for _ in range(self.random_length))
        return f"{self.prefix}-{suffix}"

    def is_valid_format(self, order_number: str) -> bool:
        """
        Accepts the three formats this system has issued:
        sequential (GF251018-007), random (GF-7K2M9QX4B1ZA) and the legacy
        timestamp form (GF + 8 or more digits).
        """
        if not order_number:
            return False

        prefix = re.escape(self.prefix)
        patterns = (
            rf"^{prefix}\d{{6}}-\d{{{self.padding},}}$",
            rf"^{prefix}-[A-Z0-9]{{{self.random_length}}}$",
            rf"^{prefix}\d{{8,}}$",
        )
        return any(re.match(pattern, order_number) for pattern in patterns)

    def get_daily_stats(self, date_key: str = None) -> dict:
        """How many sequential numbers were issued on a day, and the latest one."""
        date_key = date_key or self.date_key()

        try:
            count = self.store.peek(self.counter_key(date_key)) or 0
        except CounterStoreError as e:
            logger.error(f"Could not read order counter for {date_key}: {e}")
            count = 0

        return {
            "date_key": date_key,
            "count": count,
            "latest_number": f"{self.prefix}{date_key}-{count:0{self.padding}d}" if count else None,
        }
