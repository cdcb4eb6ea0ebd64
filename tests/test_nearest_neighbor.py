from trip_router.models.domain import Stop
from trip_router.services.routing.nearest_neighbor import nearest_neighbor_order


def test_orders_stops_greedily_from_origin():
    stops = [Stop(id=1, lat=0.0, lng=1.0), Stop(id=2, lat=0.0, lng=3.0), Stop(id=3, lat=0.0, lng=2.0)]

    assert nearest_neighbor_order(0.0, 0.0, stops) == [1, 3, 2]


def test_empty_stop_set_yields_empty_order():
    assert nearest_neighbor_order(0.0, 0.0, []) == []


def test_equidistant_stops_prefer_lowest_id():
    stops = [Stop(id=5, lat=0.0, lng=1.0), Stop(id=2, lat=0.0, lng=-1.0)]

    assert nearest_neighbor_order(0.0, 0.0, stops) == [2, 5]
    assert nearest_neighbor_order(0.0, 0.0, list(reversed(stops))) == [2, 5]


def test_result_is_a_stable_permutation():
    stops = [
        Stop(id=10, lat=-6.8161, lng=39.2803),
        Stop(id=11, lat=-6.7730, lng=39.2230),
        Stop(id=12, lat=-6.8000, lng=39.2500),
        Stop(id=13, lat=-6.7600, lng=39.2400),
        Stop(id=14, lat=-6.8300, lng=39.2100),
    ]

    first = nearest_neighbor_order(-6.7924, 39.2083, stops)
    second = nearest_neighbor_order(-6.7924, 39.2083, stops)

    assert first == second
    assert sorted(first) == [10, 11, 12, 13, 14]
    assert len(set(first)) == len(first)
