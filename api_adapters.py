# Contains the adapter classes for fetching traffic samples from external routing APIs.

import logging
import random
import requests
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from api_structures import DepartureSample, SampleStatus, format_time_label, round_half_up
from config import (
    GOOGLE_MAPS_API_KEY,
    HAWAII_UTC_OFFSET,
    MAX_DEPARTURE_SLOTS,
    PLACEHOLDER_API_KEYS,
    REQUEST_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class TrafficAdapter(ABC):
    """
    Abstract Base Class (blueprint) for all traffic providers.
    Every adapter answers one departure timestamp with one DepartureSample,
    reporting failures through the sample's status instead of raising.
    """
    name = "base"

    @abstractmethod
    def get_sample(self, origin: str, destination: str, departure_time: int) -> DepartureSample:
        pass


class GoogleDistanceMatrixAdapter(TrafficAdapter):
    """The adapter for the Google Distance Matrix API."""
    name = "google"
    DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"

    def __init__(self, api_key: str | None = None, traffic_model: str = "pessimistic",
                 timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.api_key = api_key if api_key is not None else GOOGLE_MAPS_API_KEY
        if self.api_key in PLACEHOLDER_API_KEYS:
            raise ValueError(
                "FATAL ERROR: The GOOGLE_MAPS_API_KEY environment variable is not set.")
        self.traffic_model = traffic_model
        self.timeout = timeout

    def get_sample(self, origin: str, destination: str, departure_time: int) -> DepartureSample:
        # Google requires departure_time as a Unix timestamp in the future.
        params = {
            'origins': origin,
            'destinations': destination,
            'departure_time': departure_time,
            'traffic_model': self.traffic_model,
            'key': self.api_key,
        }
        departure_str = format_time_label(departure_time)
        try:
            response = requests.get(self.DISTANCE_MATRIX_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            if data.get('status') != 'OK':
                logger.warning(f"[Google] Request failed for {departure_str}. Status: {data.get('status')}")
                return DepartureSample.failed(departure_time, SampleStatus.PROVIDER_ERROR)

            element = data['rows'][0]['elements'][0]
            if element.get('status') != 'OK' or 'duration' not in element or 'duration_in_traffic' not in element:
                logger.warning(f"[Google] No route data for {departure_str}. Status: {element.get('status')}")
                return DepartureSample.failed(departure_time, SampleStatus.NO_DATA)

            free_flow_seconds = element['duration']['value']
            traffic_seconds = element['duration_in_traffic']['value']
            logger.debug(
                f"[Google] {departure_str} | free={round_half_up(free_flow_seconds / 60)}min "
                f"| traffic={round_half_up(traffic_seconds / 60)}min")
            # *** NORMALIZATION to our standard DepartureSample object ***
            return DepartureSample(
                departure_time=departure_time,
                free_flow_seconds=int(free_flow_seconds),
                traffic_seconds=int(traffic_seconds),
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"[Google] A network error occurred for departure at {departure_str}: {e}")
            return DepartureSample.failed(departure_time, SampleStatus.PROVIDER_ERROR)
        except (KeyError, IndexError, TypeError, ValueError):
            logger.warning(f"[Google] Could not parse the response for departure at {departure_str}.")
            return DepartureSample.failed(departure_time, SampleStatus.PROVIDER_ERROR)


class MockTrafficAdapter(TrafficAdapter):
    """
    Simulates an H-1 commute when no API key is configured.
    Traffic builds towards 7:30-8:30 AM and again around 5 PM (Hawaii time).
    """
    name = "mock"
    # Hawaii hour -> multiplier over free-flow
    TRAFFIC_PATTERN = {
        5: 1.05, 6: 1.15, 7: 1.45, 8: 1.65, 9: 1.35, 10: 1.15, 11: 1.1, 12: 1.2,
        13: 1.2, 14: 1.15, 15: 1.3, 16: 1.55, 17: 1.7, 18: 1.5, 19: 1.2, 20: 1.1,
    }
    DEFAULT_MULTIPLIER = 1.1

    def __init__(self, base_duration_seconds: int = 1800, variance: float = 0.05, seed: int | None = None):
        self.base_duration_seconds = base_duration_seconds
        self.variance = variance
        self.seed = seed
        self._rng = random.Random()

    def multiplier(self, departure_time: int) -> float:
        local = datetime.fromtimestamp(departure_time, HAWAII_UTC_OFFSET)
        fractional_hour = local.hour + local.minute / 60
        # Interpolate between hours for a smoother curve
        lower_hour = int(fractional_hour)
        fraction = fractional_hour - lower_hour
        lower = self.TRAFFIC_PATTERN.get(lower_hour, self.DEFAULT_MULTIPLIER)
        upper = self.TRAFFIC_PATTERN.get(lower_hour + 1 if fraction else lower_hour, self.DEFAULT_MULTIPLIER)
        return lower + (upper - lower) * fraction

    def get_sample(self, origin: str, destination: str, departure_time: int) -> DepartureSample:
        # Seeded noise depends only on the slot, whatever order the threads run in
        rng = self._rng if self.seed is None else random.Random(f"{self.seed}:{departure_time}")
        noise = (rng.random() - 0.5) * self.variance
        factor = max(1.0, self.multiplier(departure_time) + noise)
        return DepartureSample(
            departure_time=departure_time,
            free_flow_seconds=self.base_duration_seconds,
            traffic_seconds=round_half_up(self.base_duration_seconds * factor),
        )


def create_adapter(api_key: str | None = None, seed: int | None = None) -> TrafficAdapter:
    """Picks the Google adapter when a real key is configured, otherwise the mock."""
    key = api_key if api_key is not None else GOOGLE_MAPS_API_KEY
    if key in PLACEHOLDER_API_KEYS:
        logger.warning("No Google Maps API key configured; using simulated traffic data.")
        return MockTrafficAdapter(seed=seed)
    return GoogleDistanceMatrixAdapter(api_key=key)


def fetch_samples(
    adapter: TrafficAdapter,
    origin: str,
    destination: str,
    departure_times: list[int],
) -> list[DepartureSample]:
    """Queries every departure time in parallel. Results keep departure order."""
    if not departure_times:
        return []
    logger.info(f"Fetching {len(departure_times)} departure samples via {adapter.name}")
    with ThreadPoolExecutor(max_workers=min(len(departure_times), MAX_DEPARTURE_SLOTS)) as executor:
        return list(executor.map(
            lambda departure_time: adapter.get_sample(origin, destination, departure_time),
            departure_times,
        ))
