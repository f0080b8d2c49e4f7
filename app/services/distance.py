"""Distance and travel-time estimation.

The estimator walks an ordered list of strategies and keeps the first one
that produces an answer:

1. external routing (only when an API key is configured)
2. the verified city-pair table
3. postcode / city centroid geodesic approximation
4. a fixed, conservative fallback

It never raises for bad input: a price must always be produced.
"""
import logging
import math
from datetime import datetime
from typing import Callable, Optional

from app.core.config import settings
from app.core.enums import DistanceSource
from app.core.exceptions import RoutingUnavailableError
from app.core.geo_tables import DEFAULT_TABLES, GeoTables
from app.core.metrics import distance_estimates
from app.schemas.distance import DistanceEstimate
from app.services import geo
from app.services.routing import RoutingClient

logger = logging.getLogger(__name__)

Strategy = Callable[[str, str], Optional[DistanceEstimate]]


def _band(bands: tuple, miles: float):
    for upper, value in bands:
        if miles < upper:
            return value
    return bands[-1][1]


def round_distance(miles: float, tables: GeoTables = DEFAULT_TABLES) -> float:
    """One decimal mile, never below the minimum distance."""
    return max(round(max(miles, 0.0), 1), tables.min_distance_miles)


def _override_minutes(from_address: str, to_address: str, tables: GeoTables) -> Optional[int]:
    overrides = tables.journey_time_overrides

    from_pc = geo.extract_postcode(from_address)
    to_pc = geo.extract_postcode(to_address)
    if from_pc and to_pc:
        key = frozenset((from_pc.replace(" ", ""), to_pc.replace(" ", "")))
        if key in overrides:
            return overrides[key]

    from_city = geo.canonical_city(from_address, tables)
    to_city = geo.canonical_city(to_address, tables)
    if from_city and to_city and from_city != to_city:
        return overrides.get(frozenset((from_city, to_city)))
    return None


def _congestion_minutes(from_address: str, to_address: str, tables: GeoTables) -> int:
    minutes = 0
    for area, extra in tables.congested_areas.items():
        if any(
            area in (address or "").lower() or geo.detect_region(address) == area
            for address in (from_address, to_address)
        ):
            minutes += extra
    return minutes


def _is_rush_hour(departure: Optional[datetime], tables: GeoTables) -> bool:
    if departure is None or departure.weekday() >= 5:
        return False
    return any(start <= departure.hour < end for start, end in tables.rush_hours)


def estimate_travel_minutes(
    distance_miles: float,
    from_address: str,
    to_address: str,
    departure: Optional[datetime] = None,
    driving_minutes: Optional[int] = None,
    tables: GeoTables = DEFAULT_TABLES,
) -> int:
    """Door-to-door job time in minutes for a single van run.

    A verified journey time for the address pair wins outright. Otherwise:
    driving time (from a provider, or distance over a banded average speed),
    plus congestion add-ons, statutory rest breaks on long runs and a
    loading allowance that grows with distance.
    """
    override = _override_minutes(from_address, to_address, tables)
    if override is not None:
        return override

    miles = max(distance_miles, 0.0)
    if driving_minutes is None:
        speed = _band(tables.speed_bands, miles)
        driving = miles / speed * 60
    else:
        driving = float(driving_minutes)

    congestion = _congestion_minutes(from_address, to_address, tables)
    if miles > tables.long_journey_miles:
        congestion += tables.long_journey_delay_minutes
    if _is_rush_hour(departure, tables):
        congestion += tables.rush_hour_minutes

    breaks = 0
    if miles > tables.long_journey_miles:
        breaks = math.floor(driving / tables.break_every_minutes) * tables.break_minutes

    loading = _band(tables.loading_bands, miles)

    return math.ceil(driving + congestion + breaks + loading)


class DistanceEstimator:
    def __init__(
        self,
        tables: GeoTables = DEFAULT_TABLES,
        routing: Optional[RoutingClient] = None,
        min_address_length: Optional[int] = None,
        fallback_miles: Optional[float] = None,
        fallback_minutes: Optional[int] = None,
    ):
        self.tables = tables
        self.routing = routing
        self.min_address_length = (
            settings.MIN_ADDRESS_LENGTH if min_address_length is None else min_address_length
        )
        self.fallback_miles = (
            settings.FALLBACK_DISTANCE_MILES if fallback_miles is None else fallback_miles
        )
        self.fallback_minutes = (
            settings.FALLBACK_MINUTES if fallback_minutes is None else fallback_minutes
        )
        self.strategies: list[Strategy] = [self.from_exact_table, self.from_geodesic]

    async def estimate(
        self,
        from_address: str,
        to_address: str,
        departure: Optional[datetime] = None,
    ) -> DistanceEstimate:
        from_address = geo.normalize_address(from_address)
        to_address = geo.normalize_address(to_address)

        if self._usable(from_address, to_address) and self.routing is not None and self.routing.configured:
            result = await self.from_routing(from_address, to_address, departure)
            if result is not None:
                return self._record(result)

        return self.estimate_offline(from_address, to_address, departure)

    def estimate_offline(
        self,
        from_address: str,
        to_address: str,
        departure: Optional[datetime] = None,
    ) -> DistanceEstimate:
        """Run the local strategies only; no network."""
        from_address = geo.normalize_address(from_address)
        to_address = geo.normalize_address(to_address)

        if not self._usable(from_address, to_address):
            logger.info("Address too short to estimate, using fallback distance")
            return self._record(self.fallback())

        for strategy in self.strategies:
            try:
                result = strategy(from_address, to_address)
            except Exception:
                logger.exception(f"Distance strategy {strategy.__name__} failed")
                continue
            if result is not None:
                if departure is not None:
                    result = self._with_departure(result, from_address, to_address, departure)
                return self._record(result)

        return self._record(self.fallback())

    async def from_routing(
        self,
        from_address: str,
        to_address: str,
        departure: Optional[datetime] = None,
    ) -> Optional[DistanceEstimate]:
        try:
            route = await self.routing.get_route(from_address, to_address)
        except RoutingUnavailableError as e:
            logger.warning(f"Routing unavailable, falling back to local estimate: {e}")
            return None

        miles = round_distance(route.distance_miles, self.tables)
        minutes = estimate_travel_minutes(
            miles, from_address, to_address,
            departure=departure,
            driving_minutes=route.driving_minutes,
            tables=self.tables,
        )
        return DistanceEstimate(
            distance_miles=miles,
            estimated_minutes=minutes,
            exact=True,
            source=DistanceSource.EXTERNAL_ROUTING,
        )

    def from_exact_table(self, from_address: str, to_address: str) -> Optional[DistanceEstimate]:
        for from_city in geo.extract_cities(from_address, self.tables):
            for to_city in geo.extract_cities(to_address, self.tables):
                miles = self.tables.city_distances.get(frozenset((from_city, to_city)))
                if miles is not None:
                    return DistanceEstimate(
                        distance_miles=round_distance(miles, self.tables),
                        estimated_minutes=estimate_travel_minutes(
                            miles, from_address, to_address, tables=self.tables
                        ),
                        exact=True,
                        source=DistanceSource.EXACT_TABLE,
                    )
        return None

    def from_geodesic(self, from_address: str, to_address: str) -> Optional[DistanceEstimate]:
        origin = geo.resolve_coordinates(from_address, self.tables)
        destination = geo.resolve_coordinates(to_address, self.tables)
        if origin is None and destination is None:
            logger.info("No recognisable postcode or city in either address, using central UK point")

        straight = geo.haversine_miles(
            origin or self.tables.central_point,
            destination or self.tables.central_point,
        )
        factor = geo.winding_factor(from_address, to_address, straight, self.tables)
        miles = round_distance(straight * factor, self.tables)

        return DistanceEstimate(
            distance_miles=miles,
            estimated_minutes=estimate_travel_minutes(
                miles, from_address, to_address, tables=self.tables
            ),
            exact=False,
            source=DistanceSource.GEODESIC_APPROX,
        )

    def fallback(self) -> DistanceEstimate:
        return DistanceEstimate(
            distance_miles=self.fallback_miles,
            estimated_minutes=self.fallback_minutes,
            exact=False,
            source=DistanceSource.FALLBACK,
        )

    def _usable(self, from_address: str, to_address: str) -> bool:
        return min(len(from_address), len(to_address)) >= self.min_address_length

    def _with_departure(
        self,
        result: DistanceEstimate,
        from_address: str,
        to_address: str,
        departure: datetime,
    ) -> DistanceEstimate:
        minutes = estimate_travel_minutes(
            result.distance_miles, from_address, to_address,
            departure=departure, tables=self.tables,
        )
        return result.model_copy(update={"estimated_minutes": minutes})

    @staticmethod
    def _record(result: DistanceEstimate) -> DistanceEstimate:
        distance_estimates.labels(source=result.source.value).inc()
        return result


def get_estimator() -> DistanceEstimator:
    return DistanceEstimator(routing=RoutingClient.from_settings())
