import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from django.conf import settings

from core_backend.utils.money import ZERO, quantize, to_decimal
from core_backend.utils.pii import PIIProtection
from .distance import DistanceMatrixService
from .evaluators import MinimumOrderStatus, apply_value_discount, check_minimum_order
from .exceptions import DeliveryConfigNotFound, DeliveryRequestError
from .matchers import ExceedsRange, ZoneNotFound, match_tier, match_zone
from .models import RestaurantDeliveryConfig
from .rules import DeliveryConfig, PricingMode

logger = logging.getLogger(__name__)

UNAVAILABLE_INACTIVE = "Delivery is not currently available"
UNAVAILABLE_OUTSIDE_AREA = "Outside delivery area"
UNAVAILABLE_TOO_FAR = "Outside delivery range"


@dataclass(frozen=True)
class FeeQuote:
    final_fee: Decimal
    original_fee: Decimal
    label: str
    method: str
    estimated_minutes: int
    minimum_order: MinimumOrderStatus
    distance_km: Optional[Decimal] = None

    @property
    def available(self) -> bool:
        return True

    @property
    def discount_amount(self) -> Decimal:
        return quantize(self.original_fee - self.final_fee)

    def as_dict(self):
        return {
            "available": True,
            "fee": self.final_fee,
            "original_fee": self.original_fee,
            "discount_amount": self.discount_amount,
            "label": self.label,
            "method": self.method,
            "distance_km": self.distance_km,
            "estimated_minutes": self.estimated_minutes,
            "minimum_order": self.minimum_order.as_dict(),
        }


@dataclass(frozen=True)
class DeliveryUnavailable:
    reason: str
    distance_km: Optional[Decimal] = None

    @property
    def available(self) -> bool:
        return False

    def as_dict(self):
        data = {"available": False, "reason": self.reason}
        if self.distance_km is not None:
            data["distance_km"] = self.distance_km
        return data


class DeliveryFeeService:
    """
    Prices delivery for one restaurant.

    calculate_fee() is the whole calculation and works on a DeliveryConfig
    snapshot; quote_for_restaurant() loads that snapshot for a tenant first.
    Out-of-area and out-of-range come back as DeliveryUnavailable. Only bad
    input (DeliveryRequestError) and a failed distance lookup
    (DistanceLookupError) are raised.
    """

    def __init__(self, distance_service: DistanceMatrixService = None):
        self.distance_service = distance_service or DistanceMatrixService()

    @staticmethod
    def get_config(tenant) -> RestaurantDeliveryConfig:
        try:
            return RestaurantDeliveryConfig.all_objects.get(tenant=tenant)
        except RestaurantDeliveryConfig.DoesNotExist:
            logger.error(f"No delivery configuration for restaurant '{getattr(tenant, 'slug', tenant)}'")
            raise DeliveryConfigNotFound()

    def quote_for_restaurant(
        self,
        tenant,
        postcode: str,
        distance_km=None,
        order_subtotal=ZERO,
        customer_address: str = None,
    ) -> Union[FeeQuote, DeliveryUnavailable]:
        snapshot = DeliveryConfig.from_model(self.get_config(tenant))
        return self.calculate_fee(
            snapshot,
            postcode,
            distance_km=distance_km,
            order_subtotal=order_subtotal,
            customer_address=customer_address,
        )

    def calculate_fee(
        self,
        config: DeliveryConfig,
        postcode: str,
        distance_km=None,
        order_subtotal=ZERO,
        customer_address: str = None,
    ) -> Union[FeeQuote, DeliveryUnavailable]:
        """
        Calculate the delivery fee for a postcode (and address, in distance mode).

        Args:
            config: snapshot of the restaurant's delivery configuration
            postcode: customer postcode
            distance_km: precomputed distance; skips the distance lookup
            order_subtotal: items subtotal, used for value discounts and minimum order.
                Zero is a valid fee preview.
            customer_address: full address, needed in distance mode when no distance is given

        Returns:
            FeeQuote when the restaurant delivers there, DeliveryUnavailable otherwise
        """
        subtotal = quantize(to_decimal(order_subtotal))

        if not config.is_active or not config.delivery_enabled:
            return DeliveryUnavailable(reason=UNAVAILABLE_INACTIVE)

        travel_minutes = None

        if config.pricing_mode == PricingMode.DISTANCE:
            if distance_km is None:
                if not customer_address:
                    raise DeliveryRequestError(
                        "A delivery address is required to calculate the delivery fee.",
                        details={"customer_address": ["This field is required for distance-based delivery."]},
                    )
                # One lookup per request; the same result prices the order and estimates travel time
                lookup = self.distance_service.lookup(config.restaurant_address, customer_address)
                distance = lookup.distance_km
                travel_minutes = lookup.travel_minutes
            else:
                try:
                    distance = to_decimal(distance_km)
                except ValueError:
                    raise DeliveryRequestError("distance_km must be a number.")
                if distance < 0:
                    raise DeliveryRequestError("distance_km cannot be negative.")

            if config.max_delivery_distance_km is not None and distance > config.max_delivery_distance_km:
                logger.info(
                    f"Delivery refused: {distance}km is beyond the {config.max_delivery_distance_km}km limit"
                )
                return DeliveryUnavailable(reason=UNAVAILABLE_TOO_FAR, distance_km=distance)

            tier = match_tier(distance, config.tier_rules)
            if isinstance(tier, ExceedsRange):
                logger.info(f"Delivery refused: {distance}km exceeds every distance tier")
                return DeliveryUnavailable(reason=UNAVAILABLE_TOO_FAR, distance_km=distance)

            base_fee, label, quoted_distance = tier.fee, tier.label, distance

        else:
            zone = match_zone(postcode, config.zone_rules, default_fee=config.default_fee)
            if isinstance(zone, ZoneNotFound):
                logger.info(f"Delivery refused: no zone for postcode {PIIProtection.mask_postcode(postcode)}")
                return DeliveryUnavailable(reason=UNAVAILABLE_OUTSIDE_AREA)

            base_fee, label, quoted_distance = zone.fee, zone.label, None

        final_fee = apply_value_discount(base_fee, subtotal, config.discount_rules)
        minimum_order = check_minimum_order(subtotal, config.minimum_order_rules, postcode)

        return FeeQuote(
            final_fee=final_fee,
            original_fee=quantize(base_fee),
            label=label,
            method=config.pricing_mode,
            distance_km=quoted_distance,
            estimated_minutes=self.estimate_minutes(config, travel_minutes),
            minimum_order=minimum_order,
        )

    @staticmethod
    def estimate_minutes(config: DeliveryConfig, travel_minutes: Optional[int] = None) -> int:
        delivery_settings = getattr(settings, "DELIVERY", {})
        if travel_minutes is not None:
            return config.preparation_time_minutes + travel_minutes + delivery_settings.get(
                "DISTANCE_TRAVEL_BUFFER_MINUTES", 5
            )
        return config.preparation_time_minutes + delivery_settings.get("DEFAULT_DELIVERY_BUFFER_MINUTES", 15)
