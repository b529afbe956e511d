"""
Matching a customer location against a restaurant's zones or distance tiers.

Both matchers are pure and return tagged results. "No zone" and "too far"
are ordinary business outcomes, so they come back as ZoneNotFound and
ExceedsRange rather than exceptions.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Union

from .rules import TierRule, ZoneRule, normalize_postcode

DEFAULT_ZONE_LABEL = "default"


@dataclass(frozen=True)
class ZoneMatch:
    label: str
    fee: Decimal
    exact: bool = False


@dataclass(frozen=True)
class ZoneNotFound:
    postcode: str


@dataclass(frozen=True)
class TierMatch:
    max_distance_km: Decimal
    fee: Decimal

    @property
    def label(self) -> str:
        return f"≤{self.max_distance_km.normalize():f}km"


@dataclass(frozen=True)
class ExceedsRange:
    distance_km: Decimal
    max_distance_km: Optional[Decimal]


def match_zone(
    postcode: str,
    rules: Iterable[ZoneRule],
    default_fee: Optional[Decimal] = None,
) -> Union[ZoneMatch, ZoneNotFound]:
    """
    Find the delivery zone for a postcode.

    1. Exact match on the normalised postcode.
    2. Otherwise the longest rule pattern that prefixes the postcode, so
       "YO10 3BP" beats "YO10" beats "YO".
    3. Otherwise the restaurant's default fee, if it has one.
    """
    normalized = normalize_postcode(postcode)
    rules = list(rules)

    for rule in rules:
        if rule.normalized_pattern == normalized:
            return ZoneMatch(label=rule.pattern, fee=rule.fee, exact=True)

    prefix_matches = [rule for rule in rules if normalized.startswith(rule.normalized_pattern)]
    if prefix_matches:
        # max() keeps the first of equal-length patterns, i.e. declaration order
        best = max(prefix_matches, key=lambda rule: len(rule.normalized_pattern))
        return ZoneMatch(label=best.pattern, fee=best.fee)

    if default_fee is not None:
        return ZoneMatch(label=DEFAULT_ZONE_LABEL, fee=default_fee)

    return ZoneNotFound(postcode=normalized)


def match_tier(
    distance_km: Decimal,
    rules: Iterable[TierRule],
) -> Union[TierMatch, ExceedsRange]:
    """Return the first tier, by ascending bound, whose bound covers the distance."""
    tiers = sorted(rules, key=lambda rule: rule.max_distance_km)

    for tier in tiers:
        if distance_km <= tier.max_distance_km:
            return TierMatch(max_distance_km=tier.max_distance_km, fee=tier.fee)

    return ExceedsRange(
        distance_km=distance_km,
        max_distance_km=tiers[-1].max_distance_km if tiers else None,
    )
