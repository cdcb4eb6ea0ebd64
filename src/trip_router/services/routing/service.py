"""Route optimization orchestration service."""

from __future__ import annotations

import logging
import math
import numbers
import time
from collections import Counter
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Sequence

from ...config import settings
from ...models.domain import Stop, Trip
from ...persistence.trips import TripStore, get_trip_store
from .ai_client import ReasoningClient, build_reasoning_client
from .ai_orderer import order_with_ai
from .cache import InMemoryCacheStore, OptimizationCache
from .exceptions import InvalidStopDataError
from .fingerprint import stop_set_fingerprint
from .models import (
    Accepted,
    OptimizationMethod,
    OptimizationReport,
    OptimizationResult,
    Rejected,
    Unavailable,
)
from .nearest_neighbor import nearest_neighbor_order

logger = logging.getLogger(__name__)


def _is_coordinate(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def ensure_routable(trip: Trip, stops: Sequence[Stop]) -> None:
    """Reject trips whose origin or stops cannot be ordered meaningfully."""
    if not (_is_coordinate(trip.start_lat) and _is_coordinate(trip.start_lng)):
        raise InvalidStopDataError(
            f"Trip {trip.id} has an invalid origin ({trip.start_lat!r}, {trip.start_lng!r})."
        )
    for stop in stops:
        if not (_is_coordinate(stop.lat) and _is_coordinate(stop.lng)):
            raise InvalidStopDataError(
                f"Stop {stop.id} of trip {trip.id} has invalid coordinates ({stop.lat!r}, {stop.lng!r})."
            )
    duplicates = [stop_id for stop_id, count in Counter(stop.id for stop in stops).items() if count > 1]
    if duplicates:
        raise InvalidStopDataError(f"Trip {trip.id} has duplicate stop IDs: {sorted(duplicates)}.")


class RouteOptimizer:
    """Orders a trip's stops: AI first when available, nearest-neighbour otherwise."""

    def __init__(
        self,
        store: TripStore,
        cache: OptimizationCache,
        ai_client: ReasoningClient | None = None,
        *,
        ai_max_tokens: int = 100,
        ai_temperature: float = 0.2,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.ai_client = ai_client
        self.ai_max_tokens = ai_max_tokens
        self.ai_temperature = ai_temperature
        self._now = now or (lambda: datetime.now(timezone.utc))

    def _compute(self, trip: Trip, stops: Sequence[Stop]) -> OptimizationResult:
        if stops and self.ai_client is not None:
            outcome = order_with_ai(
                self.ai_client,
                trip,
                stops,
                max_tokens=self.ai_max_tokens,
                temperature=self.ai_temperature,
            )
            match outcome:
                case Accepted(order=order):
                    return OptimizationResult(order=order, method=OptimizationMethod.AI)
                case Rejected(reason=reason) | Unavailable(reason=reason):
                    logger.info(f"Trip {trip.id}: falling back to nearest-neighbour ({reason})")

        order = nearest_neighbor_order(trip.start_lat, trip.start_lng, stops)
        return OptimizationResult(order=order, method=OptimizationMethod.HEURISTIC)

    def optimize_report(self, trip: Trip) -> OptimizationReport:
        started = time.perf_counter()
        stops = self.store.get_stops_for_trip(trip.id)
        ensure_routable(trip, stops)

        fingerprint = stop_set_fingerprint(stops)
        result, cached = self.cache.get_or_compute(trip.id, fingerprint, lambda: self._compute(trip, stops))
        if cached and Counter(result.order) != Counter(stop.id for stop in stops):
            logger.warning(f"Cached order for trip {trip.id} does not match its stops, recomputing")
            result, cached = self._compute(trip, stops), False

        report = OptimizationReport(
            trip_id=trip.id,
            order=list(result.order),
            method=result.method,
            time_ms=round((time.perf_counter() - started) * 1000, 3),
            locations_count=len(stops),
            fingerprint=fingerprint,
            cached=cached,
            optimized_at=self._now(),
        )
        self.store.merge_trip_meta(trip.id, report.to_meta())
        logger.info(
            f"Optimised trip {trip.id}: {report.locations_count} stops via {report.method.value} "
            f"in {report.time_ms:.1f} ms{' (cached)' if cached else ''}"
        )
        return report

    def optimize(self, trip: Trip) -> list[int]:
        """Return the trip's stop IDs in visiting order."""
        return self.optimize_report(trip).order


@lru_cache()
def get_route_optimizer() -> RouteOptimizer:
    cache = OptimizationCache(InMemoryCacheStore(), ttl_seconds=settings.optimization_cache_ttl_seconds)
    return RouteOptimizer(
        store=get_trip_store(),
        cache=cache,
        ai_client=build_reasoning_client(settings),
        ai_max_tokens=settings.ai_max_tokens,
        ai_temperature=settings.ai_temperature,
    )


def optimize_trip(trip_id: int) -> OptimizationReport:
    optimizer = get_route_optimizer()
    trip = optimizer.store.get_trip(trip_id)
    return optimizer.optimize_report(trip)
