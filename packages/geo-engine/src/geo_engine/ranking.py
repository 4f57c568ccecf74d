"""Proximity ranking of located records.

``rank_by_distance`` orders any sequence of records by great-circle distance
from an origin. Ties on distance keep the order in which records were given,
so callers that feed records in a stable order (for example by primary key)
get the same ranking for the same query every time.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Generic, TypeVar

from geo_engine.distance import haversine_distance_km
from geo_engine.models import GeoPoint

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedItem(Generic[T]):
    item: T
    distance_km: float
    position: int


@dataclass(frozen=True)
class RankingResult(Generic[T]):
    items: list[RankedItem[T]] = field(default_factory=list)
    skipped: list[T] = field(default_factory=list)


def _as_coordinate(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    coordinate = float(value)
    return coordinate if math.isfinite(coordinate) else None


def locate_point(lat: object, lng: object) -> GeoPoint | None:
    """Build a point from raw stored values, or None when either is unusable."""
    point_lat = _as_coordinate(lat)
    point_lng = _as_coordinate(lng)
    if point_lat is None or point_lng is None:
        return None
    return GeoPoint(lat=point_lat, lng=point_lng)


def rank_by_distance(
    origin: GeoPoint,
    records: Iterable[T],
    locate: Callable[[T], GeoPoint | None],
) -> RankingResult[T]:
    ranked: list[RankedItem[T]] = []
    skipped: list[T] = []
    for position, record in enumerate(records):
        point = locate(record)
        if point is None:
            skipped.append(record)
            logger.warning(
                "ranking_record_skipped",
                extra={"component": "geo_engine", "position": position, "reason": "invalid_coordinates"},
            )
            continue
        ranked.append(RankedItem(item=record, distance_km=haversine_distance_km(origin, point), position=position))

    ranked.sort(key=lambda entry: (entry.distance_km, entry.position))
    return RankingResult(items=ranked, skipped=skipped)
