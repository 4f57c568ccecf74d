import math

import pytest

from geo_engine.distance import EARTH_RADIUS_KM, haversine_distance_km
from geo_engine.models import GeoPoint


def test_haversine_distance_is_zero_for_same_point() -> None:
    point = GeoPoint(lat=12.9716, lng=77.5946)
    assert haversine_distance_km(point, point) == pytest.approx(0.0, abs=1e-9)


def test_quarter_great_circle_along_equator() -> None:
    distance = haversine_distance_km(GeoPoint(lat=0, lng=0), GeoPoint(lat=0, lng=90))
    assert distance == pytest.approx(math.pi / 2 * EARTH_RADIUS_KM, abs=1e-6)
    assert distance == pytest.approx(10007.54, abs=0.01)


@pytest.mark.parametrize(
    ("start", "end"),
    [
        (GeoPoint(lat=12.9716, lng=77.5946), GeoPoint(lat=28.6139, lng=77.2090)),
        (GeoPoint(lat=-33.8688, lng=151.2093), GeoPoint(lat=51.5074, lng=-0.1278)),
        (GeoPoint(lat=90, lng=0), GeoPoint(lat=-90, lng=180)),
    ],
)
def test_haversine_distance_is_symmetric(start: GeoPoint, end: GeoPoint) -> None:
    assert haversine_distance_km(start, end) == pytest.approx(haversine_distance_km(end, start), rel=1e-12)


def test_antipodal_points_do_not_raise() -> None:
    distance = haversine_distance_km(GeoPoint(lat=12.9716, lng=77.5946), GeoPoint(lat=-12.9716, lng=-102.4054))
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-6)


def test_bangalore_to_delhi_is_roughly_1740_km() -> None:
    distance = haversine_distance_km(GeoPoint(lat=12.9716, lng=77.5946), GeoPoint(lat=28.6139, lng=77.2090))
    assert 1700 < distance < 1780
