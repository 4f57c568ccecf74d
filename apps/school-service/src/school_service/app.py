from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from devkit.config import ServiceSettings, load_settings
from devkit.observability import configure_access_log_filter, configure_logging, configure_otel
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from geo_engine.models import MAX_LATITUDE, MAX_LONGITUDE, MIN_LATITUDE, MIN_LONGITUDE
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_service.dependencies import get_school_service
from school_service.errors import ApiError
from school_service.middleware import ObservabilityMiddleware, RateLimitMiddleware, UnhandledErrorMiddleware
from school_service.observability import PrometheusApiMetricsCollector
from school_service.rate_limit import FixedWindowRateLimiter, create_rate_limit_store
from school_service.response import failure_response, success_response
from school_service.schemas import SchoolCreateRequest, SchoolCreated, SchoolList
from school_service.service import SchoolService
from school_service.store import SchoolStore, StorageError
from school_service.validation import field_errors

logger = logging.getLogger(__name__)

AVAILABLE_ROUTES = ["/", "/addSchool", "/listSchools"]


def _service_description(settings: ServiceSettings) -> dict[str, object]:
    return {
        "message": "Welcome to School Management API",
        "version": "1.0.0",
        "endpoints": {
            "addSchool": {
                "url": "/addSchool",
                "method": "POST",
                "description": "Add a new school",
                "body": {
                    "name": "string (required)",
                    "address": "string (required)",
                    "latitude": "number (required, -90 to 90)",
                    "longitude": "number (required, -180 to 180)",
                },
                "example": {
                    "name": "Green Valley School",
                    "address": "123 Main St",
                    "latitude": 12.9716,
                    "longitude": 77.5946,
                },
            },
            "listSchools": {
                "url": "/listSchools",
                "method": "GET",
                "description": "List schools sorted by proximity",
                "query": {
                    "latitude": "number (required, -90 to 90)",
                    "longitude": "number (required, -180 to 180)",
                },
                "example": "/listSchools?latitude=12.97&longitude=77.59",
            },
        },
        "rateLimit": {
            "windowSeconds": settings.RATE_LIMIT_WINDOW_SECONDS,
            "max": f"{settings.RATE_LIMIT_MAX_REQUESTS} requests per IP",
        },
    }


def create_app(
    settings: ServiceSettings | None = None,
    store: SchoolStore | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
) -> FastAPI:
    settings = settings or load_settings("school-service")
    store = store or SchoolStore(database_url=settings.database_url())
    rate_limiter = rate_limiter or FixedWindowRateLimiter(
        create_rate_limit_store(settings.REDIS_URL),
        limit=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        logger.info(
            "school_service_started",
            extra={"store_backend": store.backend, "port": settings.PORT, "env": settings.APP_ENV},
        )
        try:
            yield
        finally:
            await store.close()
            await rate_limiter.close()

    app = FastAPI(title="School Management API", version="1.0.0", lifespan=lifespan)
    configure_logging(settings.LOG_LEVEL)
    configure_otel(service_name=settings.SERVICE_NAME)
    configure_access_log_filter()

    app.state.settings = settings
    app.state.school_store = store
    app.state.metrics = PrometheusApiMetricsCollector()
    app.state.school_service = SchoolService(store, metrics=app.state.metrics)

    # Last added runs first: CORS, observability, the 500 envelope, then the rate limit.
    app.add_middleware(RateLimitMiddleware, limiter=rate_limiter)
    app.add_middleware(UnhandledErrorMiddleware, expose_detail=settings.is_development)
    app.add_middleware(ObservabilityMiddleware, collector=app.state.metrics)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    def _error_field(code: str, detail: str | None) -> str:
        return detail if settings.is_development and detail else code

    @app.get("/")
    async def index() -> dict:
        return _service_description(settings)

    @app.get("/healthz")
    async def healthz() -> dict:
        return success_response(status="ok")

    @app.get("/readyz")
    async def readyz() -> dict:
        return success_response(status="ready", store=store.backend)

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = app.state.metrics.render()
        return Response(content=payload, media_type="text/plain; version=0.0.4")

    @app.post("/addSchool", status_code=201)
    async def add_school(
        body: SchoolCreateRequest,
        service: SchoolService = Depends(get_school_service),
    ) -> SchoolCreated:
        try:
            return await service.add_school(body)
        except StorageError as exc:
            raise ApiError("STORAGE_ERROR", "Error adding school", 500, detail=str(exc)) from exc

    @app.get("/listSchools")
    async def list_schools(
        latitude: float = Query(..., ge=MIN_LATITUDE, le=MAX_LATITUDE, allow_inf_nan=False),
        longitude: float = Query(..., ge=MIN_LONGITUDE, le=MAX_LONGITUDE, allow_inf_nan=False),
        service: SchoolService = Depends(get_school_service),
    ) -> SchoolList:
        try:
            return await service.list_by_proximity(latitude, longitude)
        except StorageError as exc:
            raise ApiError("STORAGE_ERROR", "Error listing schools", 500, detail=str(exc)) from exc

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=failure_response(exc.message, error=_error_field(exc.code, exc.detail)),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = field_errors(exc.errors())
        logger.info("request_validation_failed", extra={"path": request.url.path, "fields": [e["path"] for e in errors]})
        return JSONResponse(status_code=400, content={"errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (404, 405):
            logger.info("route_not_found", extra={"method": request.method, "path": request.url.path})
            return JSONResponse(
                status_code=404,
                content=failure_response("Route not found", availableRoutes=AVAILABLE_ROUTES),
            )
        return JSONResponse(status_code=exc.status_code, content=failure_response(str(exc.detail)))

    return app


app = create_app()
