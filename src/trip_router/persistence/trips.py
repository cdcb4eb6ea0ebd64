"""Trip and stop persistence adapters."""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Protocol, Sequence

from ..db.supabase import get_supabase_client
from ..models.domain import Stop, Trip
from ..services.routing.exceptions import InvalidStopDataError, TripNotFoundError

logger = logging.getLogger(__name__)


class TripStore(Protocol):
    def get_trip(self, trip_id: int) -> Trip:
        ...

    def get_stops_for_trip(self, trip_id: int) -> list[Stop]:
        ...

    def get_trip_meta(self, trip_id: int) -> dict:
        ...

    def merge_trip_meta(self, trip_id: int, meta: dict) -> None:
        ...

    def create_trip(
        self,
        *,
        start_lat: float,
        start_lng: float,
        start_address: str,
        locations: Sequence[dict],
        name: str | None = None,
        scheduled_at: datetime | None = None,
    ) -> Trip:
        ...

    def list_trips(self) -> list[Trip]:
        ...


class InMemoryTripStore:
    """Thread-safe process-local store. Reads return copies."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._trips: dict[int, Trip] = {}
        self._stops: dict[int, list[Stop]] = {}
        self._trip_ids = itertools.count(1)
        self._stop_ids = itertools.count(1)

    def add_trip(self, trip: Trip, stops: Sequence[Stop] = ()) -> Trip:
        """Register an already-built trip, used by tests and fixtures."""
        with self._lock:
            self._trips[trip.id] = copy.deepcopy(trip)
            self._stops[trip.id] = list(stops)
        return trip

    def replace_stops(self, trip_id: int, stops: Sequence[Stop]) -> None:
        with self._lock:
            if trip_id not in self._trips:
                raise TripNotFoundError(trip_id)
            self._stops[trip_id] = list(stops)

    def create_trip(
        self,
        *,
        start_lat: float,
        start_lng: float,
        start_address: str,
        locations: Sequence[dict],
        name: str | None = None,
        scheduled_at: datetime | None = None,
    ) -> Trip:
        now = datetime.now(timezone.utc)
        with self._lock:
            trip = Trip(
                id=next(self._trip_ids),
                start_lat=start_lat,
                start_lng=start_lng,
                start_address=start_address,
                name=name,
                scheduled_at=scheduled_at,
            )
            self._trips[trip.id] = trip
            self._stops[trip.id] = [
                Stop(
                    id=next(self._stop_ids),
                    lat=location["lat"],
                    lng=location["lng"],
                    updated_at=now,
                    address=location.get("address"),
                    sequence=index,
                )
                for index, location in enumerate(locations)
            ]
            return copy.deepcopy(trip)

    def list_trips(self) -> list[Trip]:
        with self._lock:
            return [copy.deepcopy(trip) for trip in sorted(self._trips.values(), key=lambda t: t.id, reverse=True)]

    def get_trip(self, trip_id: int) -> Trip:
        with self._lock:
            trip = self._trips.get(trip_id)
            if trip is None:
                raise TripNotFoundError(trip_id)
            return copy.deepcopy(trip)

    def get_stops_for_trip(self, trip_id: int) -> list[Stop]:
        with self._lock:
            if trip_id not in self._trips:
                raise TripNotFoundError(trip_id)
            return list(self._stops.get(trip_id, []))

    def get_trip_meta(self, trip_id: int) -> dict:
        return self.get_trip(trip_id).meta

    def merge_trip_meta(self, trip_id: int, meta: dict) -> None:
        with self._lock:
            trip = self._trips.get(trip_id)
            if trip is None:
                raise TripNotFoundError(trip_id)
            trip.meta = {**trip.meta, **copy.deepcopy(meta)}


def _to_float(value: Any, label: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidStopDataError(f"{label} has non-numeric coordinate {value!r}") from exc


def _to_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _trip_from_row(row: dict) -> Trip:
    return Trip(
        id=row["id"],
        start_lat=_to_float(row.get("start_lat"), f"Trip {row['id']} origin"),
        start_lng=_to_float(row.get("start_lng"), f"Trip {row['id']} origin"),
        start_address=row.get("start_address"),
        name=row.get("name"),
        status=row.get("status") or "planned",
        scheduled_at=_to_datetime(row.get("scheduled_at")),
        meta=row.get("meta") or {},
    )


def _stop_from_row(row: dict) -> Stop:
    label = f"Stop {row['id']}"
    return Stop(
        id=row["id"],
        lat=_to_float(row.get("lat"), label),
        lng=_to_float(row.get("lng"), label),
        updated_at=_to_datetime(row.get("updated_at")),
        address=row.get("address"),
        sequence=row.get("sequence") or 0,
        status=row.get("status") or "pending",
    )


class SupabaseTripStore:
    """Store backed by the ``trips`` and ``trip_locations`` tables.

    Metadata merges go through the ``merge_trip_meta`` SQL function (see
    ``sql/trips.sql``) so concurrent writers never drop each other's keys.
    """

    def __init__(self, client=None) -> None:
        self.client = client or get_supabase_client()
        if self.client is None:
            raise ValueError("Supabase is not configured.")

    def get_trip(self, trip_id: int) -> Trip:
        response = self.client.table("trips").select("*").eq("id", trip_id).limit(1).execute()
        rows = response.data or []
        if not rows:
            raise TripNotFoundError(trip_id)
        return _trip_from_row(rows[0])

    def list_trips(self) -> list[Trip]:
        response = self.client.table("trips").select("*").order("id", desc=True).limit(20).execute()
        return [_trip_from_row(row) for row in response.data or []]

    def get_stops_for_trip(self, trip_id: int) -> list[Stop]:
        response = (
            self.client.table("trip_locations")
            .select("id, lat, lng, updated_at, address, sequence, status")
            .eq("trip_id", trip_id)
            .order("id")
            .execute()
        )
        return [_stop_from_row(row) for row in response.data or []]

    def get_trip_meta(self, trip_id: int) -> dict:
        response = self.client.table("trips").select("meta").eq("id", trip_id).limit(1).execute()
        rows = response.data or []
        if not rows:
            raise TripNotFoundError(trip_id)
        return rows[0].get("meta") or {}

    def merge_trip_meta(self, trip_id: int, meta: dict) -> None:
        self.client.rpc("merge_trip_meta", {"p_trip_id": trip_id, "p_meta": meta}).execute()

    def create_trip(
        self,
        *,
        start_lat: float,
        start_lng: float,
        start_address: str,
        locations: Sequence[dict],
        name: str | None = None,
        scheduled_at: datetime | None = None,
    ) -> Trip:
        trip_row = {
            "name": name,
            "start_address": start_address,
            "start_lat": start_lat,
            "start_lng": start_lng,
            "scheduled_at": scheduled_at.isoformat() if scheduled_at else None,
        }
        response = self.client.table("trips").insert(trip_row).execute()
        trip = _trip_from_row(response.data[0])

        location_rows = [
            {
                "trip_id": trip.id,
                "address": location.get("address"),
                "lat": location["lat"],
                "lng": location["lng"],
                "sequence": index,
            }
            for index, location in enumerate(locations)
        ]
        if location_rows:
            self.client.table("trip_locations").insert(location_rows).execute()
        logger.info(f"Created trip {trip.id} with {len(location_rows)} locations")
        return trip


@lru_cache()
def get_trip_store() -> TripStore:
    """Supabase-backed store when configured, otherwise a process-wide in-memory one."""
    client = get_supabase_client()
    if client is not None:
        return SupabaseTripStore(client)
    return InMemoryTripStore()
