"""Greedy nearest-neighbour tour construction."""

from __future__ import annotations

import logging
from typing import Sequence

from ...models.domain import Stop
from ..geospatial import haversine_km

logger = logging.getLogger(__name__)


def nearest_neighbor_order(origin_lat: float, origin_lng: float, stops: Sequence[Stop]) -> list[int]:
    """Order stops by repeatedly visiting the closest unvisited one.

    Starts from the origin; equidistant candidates are resolved by the
    lowest stop ID so the result is reproducible. Runs in O(n^2) distance
    evaluations and returns an empty list for an empty stop set.
    """
    remaining = {stop.id: stop for stop in stops}
    order: list[int] = []
    current_lat, current_lng = origin_lat, origin_lng

    while remaining:
        nearest = min(
            remaining.values(),
            key=lambda stop: (haversine_km(current_lat, current_lng, stop.lat, stop.lng), stop.id),
        )
        order.append(nearest.id)
        current_lat, current_lng = nearest.lat, nearest.lng
        del remaining[nearest.id]

    logger.debug(f"Nearest-neighbour ordered {len(order)} stops: {order}")
    return order
