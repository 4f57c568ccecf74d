"""Geo engine core package."""

from geo_engine.distance import EARTH_RADIUS_KM, haversine_distance_km
from geo_engine.models import GeoPoint
from geo_engine.ranking import RankedItem, RankingResult, locate_point, rank_by_distance

__all__ = [
    "EARTH_RADIUS_KM",
    "GeoPoint",
    "RankedItem",
    "RankingResult",
    "haversine_distance_km",
    "locate_point",
    "rank_by_distance",
]
