"""Client for the external driving-directions provider.

Speaks the Google Directions JSON shape: ``status`` plus ``routes[0].legs``
with ``distance.value`` in metres and ``duration.value`` in seconds.
"""
import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Optional

import httpx

from app.core.config import settings
from app.core.exceptions import RoutingUnavailableError
from app.core.metrics import track_routing

logger = logging.getLogger(__name__)

MILES_PER_METRE = 0.000621371


@dataclass(frozen=True)
class RouteResult:
    distance_miles: float
    driving_minutes: int


class RoutingClient:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout: float = 3.0,
        retries: int = 2,
        backoff: float = 0.25,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.retries = max(1, retries)
        self.backoff = backoff

    @classmethod
    def from_settings(cls) -> "RoutingClient":
        return cls(
            api_key=settings.ROUTING_API_KEY,
            base_url=settings.ROUTING_URL,
            timeout=settings.ROUTING_TIMEOUT,
            retries=settings.ROUTING_RETRIES,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @track_routing
    async def get_route(self, origin: str, destination: str) -> RouteResult:
        """Driving distance and time between two addresses.

        Raises RoutingUnavailableError once every attempt has failed.
        """
        if not self.configured:
            raise RoutingUnavailableError("Routing API key is not set")

        params = {
            "origin": origin,
            "destination": destination,
            "mode": "driving",
            "region": "uk",
            "alternatives": "false",
            "key": self.api_key,
        }
        backoff = self.backoff
        last_error: Optional[str] = None

        for attempt in range(1, self.retries + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.base_url, params=params)

                if 200 <= response.status_code < 300:
                    return self._parse(response.json())

                last_error = f"Status {response.status_code}"
                logger.warning(
                    f"Routing lookup failed (attempt {attempt}/{self.retries}): {last_error}"
                )
            except httpx.TimeoutException:
                last_error = f"Timed out after {self.timeout}s"
                logger.warning(f"Routing timeout (attempt {attempt}/{self.retries})")
            except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError, RoutingUnavailableError) as e:
                last_error = str(e)
                logger.warning(f"Routing lookup error (attempt {attempt}/{self.retries}): {e}")

            if attempt < self.retries:
                await asyncio.sleep(backoff)
                backoff *= 2.0

        raise RoutingUnavailableError(
            f"Routing lookup failed after {self.retries} attempts",
            details={"origin": origin, "destination": destination, "error": last_error},
        )

    @staticmethod
    def _parse(data: dict) -> RouteResult:
        status = data.get("status")
        if status != "OK":
            raise RoutingUnavailableError(f"Routing provider returned {status}")

        routes = data.get("routes") or []
        if not routes:
            raise RoutingUnavailableError("No routes found")

        metres = 0.0
        seconds = 0.0
        for leg in routes[0]["legs"]:
            metres += float(leg["distance"]["value"])
            seconds += float(leg["duration"]["value"])

        return RouteResult(
            distance_miles=metres * MILES_PER_METRE,
            driving_minutes=math.ceil(seconds / 60),
        )
