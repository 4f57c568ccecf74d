from __future__ import annotations

import logging

from geo_engine import GeoPoint, locate_point, rank_by_distance

from school_service.observability import PrometheusApiMetricsCollector
from school_service.schemas import RankedSchool, SchoolCreateRequest, SchoolCreated, SchoolList
from school_service.store import School, SchoolStore

logger = logging.getLogger(__name__)


def _locate_school(school: School) -> GeoPoint | None:
    return locate_point(school.latitude, school.longitude)


class SchoolService:
    def __init__(self, store: SchoolStore, metrics: PrometheusApiMetricsCollector | None = None) -> None:
        self._store = store
        self._metrics = metrics

    async def add_school(self, body: SchoolCreateRequest) -> SchoolCreated:
        school_id = await self._store.insert(
            name=body.name,
            address=body.address,
            latitude=body.latitude,
            longitude=body.longitude,
        )
        logger.info("school_added", extra={"component": "school_service", "school_id": school_id})
        return SchoolCreated(schoolId=school_id)

    async def list_by_proximity(self, latitude: float, longitude: float) -> SchoolList:
        schools = await self._store.list_all()
        result = rank_by_distance(GeoPoint(lat=latitude, lng=longitude), schools, _locate_school)
        if self._metrics:
            self._metrics.observe_ranking(ranked=len(result.items), skipped=len(result.skipped))
        logger.info(
            "schools_ranked",
            extra={"component": "school_service", "count": len(result.items), "skipped": len(result.skipped)},
        )
        return SchoolList(
            schools=[RankedSchool(**entry.item.to_dict(), distance=entry.distance_km) for entry in result.items]
        )
