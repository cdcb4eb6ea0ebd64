from decimal import Decimal

import pytest

from trip_router.persistence.trips import InMemoryTripStore, SupabaseTripStore
from trip_router.services.routing.exceptions import InvalidStopDataError, TripNotFoundError


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.filters = {}

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def order(self, *args, **kwargs):
        return self

    def limit(self, *args):
        return self

    def execute(self):
        rows = self.client.rows.get(self.table, [])
        return FakeResponse([row for row in rows if all(row.get(k) == v for k, v in self.filters.items())])


class FakeRpc:
    def __init__(self, client, name, params):
        self.client = client
        self.name = name
        self.params = params

    def execute(self):
        self.client.rpc_calls.append((self.name, self.params))
        return FakeResponse(None)


class FakeSupabase:
    def __init__(self, rows):
        self.rows = rows
        self.rpc_calls = []

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)


def _create(store: InMemoryTripStore):
    return store.create_trip(
        start_lat=-6.7924,
        start_lng=39.2083,
        start_address="Kariakoo Market",
        name="Morning run",
        locations=[
            {"address": "Msasani", "lat": -6.75, "lng": 39.27},
            {"address": "Sinza", "lat": -6.78, "lng": 39.22},
        ],
    )


def test_create_trip_assigns_ids_and_sequence():
    store = InMemoryTripStore()
    trip = _create(store)

    stops = store.get_stops_for_trip(trip.id)

    assert trip.id == 1
    assert [stop.sequence for stop in stops] == [0, 1]
    assert [stop.address for stop in stops] == ["Msasani", "Sinza"]
    assert all(stop.updated_at is not None for stop in stops)


def test_merge_trip_meta_preserves_other_keys():
    store = InMemoryTripStore()
    trip = _create(store)

    store.merge_trip_meta(trip.id, {"load_kg": 80})
    store.merge_trip_meta(trip.id, {"method": "heuristic", "time_ms": 1.5})

    assert store.get_trip_meta(trip.id) == {"load_kg": 80, "method": "heuristic", "time_ms": 1.5}


def test_reads_return_copies():
    store = InMemoryTripStore()
    trip = _create(store)

    store.get_trip(trip.id).meta["leak"] = True

    assert "leak" not in store.get_trip_meta(trip.id)


def test_unknown_trip_raises():
    store = InMemoryTripStore()

    with pytest.raises(TripNotFoundError):
        store.get_trip(99)
    with pytest.raises(TripNotFoundError):
        store.merge_trip_meta(99, {"method": "ai"})


def test_supabase_store_converts_rows():
    client = FakeSupabase(
        {
            "trips": [{"id": 3, "start_lat": "-6.7924000", "start_lng": Decimal("39.2083000"), "meta": None}],
            "trip_locations": [
                {"id": 10, "trip_id": 3, "lat": "-6.75", "lng": 39.27, "updated_at": "2025-05-13T08:30:00+00:00"},
            ],
        }
    )
    store = SupabaseTripStore(client)

    trip = store.get_trip(3)
    stops = store.get_stops_for_trip(3)

    assert trip.start_lat == pytest.approx(-6.7924)
    assert trip.meta == {}
    assert stops[0].lat == pytest.approx(-6.75)
    assert stops[0].updated_at.year == 2025


def test_supabase_store_rejects_bad_coordinates():
    client = FakeSupabase({"trip_locations": [{"id": 10, "trip_id": 3, "lat": None, "lng": 39.27}]})

    with pytest.raises(InvalidStopDataError):
        SupabaseTripStore(client).get_stops_for_trip(3)


def test_supabase_store_merges_meta_atomically():
    client = FakeSupabase({})

    SupabaseTripStore(client).merge_trip_meta(3, {"method": "ai"})

    assert client.rpc_calls == [("merge_trip_meta", {"p_trip_id": 3, "p_meta": {"method": "ai"}})]


def test_supabase_store_missing_trip():
    with pytest.raises(TripNotFoundError):
        SupabaseTripStore(FakeSupabase({"trips": []})).get_trip(1)
