import math

import pytest

from trip_router.services.geospatial import EARTH_RADIUS_KM, haversine_km


def test_haversine_same_point_is_zero():
    assert haversine_km(-6.7924, 39.2083, -6.7924, 39.2083) == 0.0


def test_haversine_one_degree_along_equator():
    expected = EARTH_RADIUS_KM * math.pi / 180
    assert haversine_km(0.0, 0.0, 0.0, 1.0) == pytest.approx(expected)
    assert haversine_km(0.0, 0.0, 0.0, 1.0) == pytest.approx(111.19, abs=0.01)


def test_haversine_is_symmetric():
    forward = haversine_km(21.5, 39.2, 21.55, 39.25)
    backward = haversine_km(21.55, 39.25, 21.5, 39.2)
    assert forward == pytest.approx(backward)
    assert forward > 0
