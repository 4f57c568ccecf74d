from __future__ import annotations

import logging
import time
from time import perf_counter
from uuid import uuid4

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from school_service.observability import ApiMetricCollector, ApiRequestMetric, get_trace_id, set_trace_id
from school_service.rate_limit import FixedWindowRateLimiter
from school_service.response import failure_response

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
UNLIMITED_PATHS = frozenset({"/healthz", "/readyz", "/metrics"})


def resolve_client_key(request: Request) -> str:
    if request.client:
        return request.client.host
    return "anonymous"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, collector: ApiMetricCollector) -> None:
        super().__init__(app)
        self._collector = collector
        self._tracer = trace.get_tracer("school-service")

    async def dispatch(self, request: Request, call_next) -> Response:
        trace_id = request.headers.get("x-trace-id") or str(uuid4())
        set_trace_id(trace_id)
        logger.info(
            "request_received",
            extra={"method": request.method, "path": request.url.path, "trace_id": trace_id},
        )
        started = perf_counter()
        with self._tracer.start_as_current_span("http.request") as span:
            span.set_attribute("http.method", request.method)
            span.set_attribute("http.route", request.url.path)
            span.set_attribute("trace.id", trace_id)
            try:
                response = await call_next(request)
            except Exception:
                self._record(request, 500, started, trace_id)
                span.set_attribute("http.status_code", 500)
                raise
            span.set_attribute("http.status_code", response.status_code)

        response.headers["x-trace-id"] = trace_id
        self._record(request, response.status_code, started, trace_id)
        return response

    def _record(self, request: Request, status_code: int, started: float, trace_id: str) -> None:
        duration_ms = (perf_counter() - started) * 1000.0
        self._collector.observe(
            ApiRequestMetric(
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=duration_ms,
                trace_id=trace_id,
            )
        )
        logger.info(
            "request_completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "trace_id": trace_id,
            },
        )


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: FixedWindowRateLimiter) -> None:
        super().__init__(app)
        self._limiter = limiter

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)
        client_key = resolve_client_key(request)
        decision = await self._limiter.check(client_key, now_seconds=time.time())
        headers = {
            "RateLimit-Limit": str(decision.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": str(decision.reset_after_seconds),
        }
        if not decision.allowed:
            logger.warning("rate_limit_exceeded", extra={"client": client_key, "path": request.url.path})
            headers["Retry-After"] = str(decision.reset_after_seconds)
            return JSONResponse(status_code=429, content=failure_response(RATE_LIMIT_MESSAGE), headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turns uncaught exceptions into the 500 envelope before outer middleware sees them."""

    def __init__(self, app, expose_detail: bool = False) -> None:
        super().__init__(app)
        self._expose_detail = expose_detail

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "unhandled_error",
                exc_info=exc,
                extra={"method": request.method, "path": request.url.path, "trace_id": get_trace_id()},
            )
            error = str(exc) if self._expose_detail and str(exc) else "INTERNAL_ERROR"
            return JSONResponse(status_code=500, content=failure_response("Internal server error", error=error))
