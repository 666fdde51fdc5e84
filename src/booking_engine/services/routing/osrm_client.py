"""OSRM-backed distance oracle."""

from __future__ import annotations

import logging
import time

import httpx

from ...config import settings
from ...errors import OracleRateLimitedError, OracleUnavailableError
from ...models.domain import Coordinates
from .models import TravelEstimate
from .oracle import DistanceOracle

logger = logging.getLogger(__name__)


class OSRMClient(DistanceOracle):
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.osrm_base_url
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.oracle_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        """Create a client per call; the optimizer queries pairs from several threads."""
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            limits=httpx.Limits(max_connections=1, max_keepalive_connections=0),
            transport=self._transport,
        )

    def get_travel_time(self, origin: Coordinates, destination: Coordinates) -> TravelEstimate:
        # OSRM expects "lon,lat;lon,lat"
        coordinate_str = (
            f"{origin.longitude},{origin.latitude};{destination.longitude},{destination.latitude}"
        )
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        params = {"overview": "false", "steps": "false"}

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    if response.status_code == 429:
                        raise OracleRateLimitedError(f"OSRM rate limited the request for {coordinate_str}.")
                    response.raise_for_status()
                    return _parse_route_response(response.json())
                except OracleRateLimitedError:
                    raise
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise OracleUnavailableError(f"OSRM request timed out: {e}") from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.HTTPError, ValueError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise OracleUnavailableError(
                            f"OSRM request to {self.base_url} failed: {e}"
                        ) from e
                    time.sleep(self.backoff_seconds * attempt)
        finally:
            client.close()

    def is_available(self) -> bool:
        return check_health(self.base_url, transport=self._transport)


def _parse_route_response(data: dict) -> TravelEstimate:
    if data.get("code") != "Ok":
        error_msg = data.get("message", "Unknown OSRM route error")
        raise ValueError(f"OSRM route request failed: {error_msg}")
    routes = data.get("routes") or []
    if not routes:
        raise ValueError("OSRM response contained no routes.")
    try:
        return TravelEstimate(
            distance_meters=float(routes[0]["distance"]),
            duration_seconds=float(routes[0]["duration"]),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed OSRM route: {e}") from e


def check_health(base_url: str | None = None, transport: httpx.BaseTransport | None = None) -> bool:
    """Check OSRM service health with a minimal two-point route request."""

    base = base_url or settings.osrm_base_url
    if not base:
        return False
    test_coords = "13.388860,52.517037;13.385983,52.496891"
    url = f"{base.rstrip('/')}/route/v1/{settings.osrm_profile}/{test_coords}"
    try:
        with httpx.Client(timeout=5.0, transport=transport) as client:
            response = client.get(url, params={"overview": "false"})
            response.raise_for_status()
            return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
