from __future__ import annotations

import logging
from collections.abc import Iterable

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

_configured = False
_logging_configured = False
_access_filter_configured = False

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
QUIET_ACCESS_PATHS = ("/healthz", "/readyz", "/metrics")


class QuietPathsAccessFilter(logging.Filter):
    """Drop successful uvicorn access lines for health checks and metric scrapes.

    uvicorn logs each request with args ``(client, method, path, http_version, status)``.
    Any other record passes through untouched.
    """

    def __init__(self, quiet_paths: Iterable[str] = QUIET_ACCESS_PATHS) -> None:
        super().__init__()
        self._quiet_paths = frozenset(quiet_paths)

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        if not isinstance(args, tuple) or len(args) != 5:
            return True
        _, _, full_path, _, status = args
        path = str(full_path).split("?", 1)[0].rstrip("/") or "/"
        return not (status == 200 and path in self._quiet_paths)


def configure_logging(level: str = "INFO") -> None:
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    _logging_configured = True


def configure_otel(service_name: str) -> None:
    global _configured
    if _configured:
        return
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    trace.set_tracer_provider(provider)
    _configured = True


def configure_access_log_filter(quiet_paths: Iterable[str] = QUIET_ACCESS_PATHS) -> None:
    global _access_filter_configured
    if _access_filter_configured:
        return
    logging.getLogger("uvicorn.access").addFilter(QuietPathsAccessFilter(quiet_paths))
    _access_filter_configured = True
