import logging
from dataclasses import dataclass
from decimal import Decimal

import requests
from django.conf import settings

from .exceptions import DistanceLookupError, DistanceLookupTimeout

# Set up a logger for this service
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistanceResult:
    distance_meters: int
    duration_seconds: int

    @property
    def distance_km(self) -> Decimal:
        return Decimal(self.distance_meters) / Decimal(1000)

    @property
    def travel_minutes(self) -> int:
        return int(round(self.duration_seconds / 60))


class DistanceMatrixService:
    """
    A service to interact with the Google Distance Matrix API for driving
    distance between the restaurant and a customer address.

    Every call is bounded by DELIVERY["DISTANCE_LOOKUP_TIMEOUT"]. Failures are
    raised as DistanceLookupError and are never turned into a default fee:
    a guessed delivery fee is a money bug.
    """

    def __init__(self, api_key=None, timeout=None, base_url=None, session=None):
        delivery_settings = getattr(settings, "DELIVERY", {})
        self.api_key = api_key if api_key is not None else getattr(settings, "GOOGLE_MAPS_API_KEY", "")
        self.timeout = timeout if timeout is not None else delivery_settings.get("DISTANCE_LOOKUP_TIMEOUT", 5)
        self.base_url = base_url or delivery_settings.get(
            "DISTANCE_MATRIX_URL", "https://maps.googleapis.com/maps/api/distancematrix/json"
        )
        self.session = session or requests

    def lookup(self, origin: str, destination: str) -> DistanceResult:
        """
        Driving distance and duration from origin to destination.

        Returns:
            DistanceResult with distance in meters and duration in seconds

        Raises:
            DistanceLookupTimeout: the API did not answer in time
            DistanceLookupError: any other failure (no key, HTTP error, non-OK status)
        """
        if not self.api_key:
            logger.warning("Google Maps API key is not configured in settings.")
            raise DistanceLookupError("Distance lookup is not configured.")

        if not origin or not destination:
            raise DistanceLookupError("Both restaurant and customer addresses are required for a distance lookup.")

        params = {
            "origins": origin,
            "destinations": destination,
            "units": "metric",
            "mode": "driving",
            "key": self.api_key,
        }

        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            logger.error(f"Distance Matrix API timed out after {self.timeout}s: {e}")
            raise DistanceLookupTimeout()
        except requests.exceptions.RequestException as e:
            logger.error(f"HTTP request to Distance Matrix API failed: {e}")
            raise DistanceLookupError()
        except ValueError as e:
            logger.error(f"Distance Matrix API returned a non-JSON body: {e}")
            raise DistanceLookupError()

        if data.get("status") != "OK":
            error_message = data.get("error_message", f"status {data.get('status')}")
            logger.error(f"Google Distance Matrix API error: {error_message}")
            raise DistanceLookupError()

        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            logger.error("Distance Matrix API response has no result element")
            raise DistanceLookupError()

        if element.get("status") != "OK":
            # NOT_FOUND / ZERO_RESULTS: the address could not be routed
            logger.warning(f"Distance calculation failed with element status {element.get('status')}")
            raise DistanceLookupError("We could not find a route to this address. Please check it and try again.")

        result = DistanceResult(
            distance_meters=int(element["distance"]["value"]),
            duration_seconds=int(element["duration"]["value"]),
        )
        logger.info(f"Distance lookup: {result.distance_km}km, {result.travel_minutes} min")
        return result
