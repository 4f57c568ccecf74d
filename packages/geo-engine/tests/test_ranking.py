from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from geo_engine.models import GeoPoint
from geo_engine.ranking import locate_point, rank_by_distance


@dataclass(frozen=True)
class Place:
    place_id: int
    lat: object
    lng: object


def _locate(place: Place) -> GeoPoint | None:
    return locate_point(place.lat, place.lng)


def test_empty_input_yields_empty_ranking() -> None:
    result = rank_by_distance(GeoPoint(lat=0, lng=0), [], _locate)
    assert result.items == []
    assert result.skipped == []


def test_ranking_is_sorted_and_keeps_every_record() -> None:
    rng = random.Random(7)
    places = [Place(i, rng.uniform(-90, 90), rng.uniform(-180, 180)) for i in range(200)]

    result = rank_by_distance(GeoPoint(lat=12.9716, lng=77.5946), places, _locate)

    distances = [entry.distance_km for entry in result.items]
    assert distances == sorted(distances)
    assert sorted(entry.item.place_id for entry in result.items) == list(range(200))
    assert all(distance >= 0 for distance in distances)


def test_equal_distances_keep_input_order() -> None:
    places = [Place(3, 10.0, 10.0), Place(1, 10.0, 10.0), Place(2, 0.0, 0.0), Place(4, 10.0, 10.0)]

    result = rank_by_distance(GeoPoint(lat=0, lng=0), places, _locate)

    assert [entry.item.place_id for entry in result.items] == [2, 3, 1, 4]


def test_repeated_ranking_is_deterministic() -> None:
    places = [Place(i, 1.0, float(i % 3)) for i in range(12)]
    origin = GeoPoint(lat=1.0, lng=1.0)

    first = [entry.item.place_id for entry in rank_by_distance(origin, places, _locate).items]
    second = [entry.item.place_id for entry in rank_by_distance(origin, places, _locate).items]

    assert first == second


def test_invalid_coordinates_are_skipped_with_warning(caplog) -> None:
    places = [Place(1, None, 10.0), Place(2, "abc", 1.0), Place(3, float("nan"), 0.0), Place(4, 1.0, 1.0)]

    with caplog.at_level(logging.WARNING, logger="geo_engine.ranking"):
        result = rank_by_distance(GeoPoint(lat=0, lng=0), places, _locate)

    assert [entry.item.place_id for entry in result.items] == [4]
    assert [place.place_id for place in result.skipped] == [1, 2, 3]
    assert sum(record.message == "ranking_record_skipped" for record in caplog.records) == 3


def test_out_of_range_stored_values_are_not_clamped() -> None:
    places = [Place(1, 95.0, 0.0)]
    result = rank_by_distance(GeoPoint(lat=0, lng=0), places, _locate)
    assert len(result.items) == 1
    assert result.items[0].distance_km > 0
