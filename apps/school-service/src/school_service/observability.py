from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass
from typing import Protocol

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

_trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")


def set_trace_id(trace_id: str) -> None:
    _trace_id_ctx.set(trace_id)


def get_trace_id() -> str:
    return _trace_id_ctx.get()


@dataclass(frozen=True)
class ApiRequestMetric:
    method: str
    path: str
    status_code: int
    duration_ms: float
    trace_id: str


class ApiMetricCollector(Protocol):
    def observe(self, metric: ApiRequestMetric) -> None: ...


class PrometheusApiMetricsCollector(ApiMetricCollector):
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._request_counter = Counter(
            "school_http_requests_total",
            "Total school service HTTP requests",
            labelnames=("method", "path", "status_code"),
            registry=self._registry,
        )
        self._latency_histogram = Histogram(
            "school_http_request_duration_ms",
            "School service HTTP request latency in milliseconds",
            labelnames=("method", "path"),
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 3000),
            registry=self._registry,
        )
        self._ranked_counter = Counter(
            "school_ranked_records_total",
            "Records returned by proximity ranking",
            registry=self._registry,
        )
        self._skipped_counter = Counter(
            "school_ranking_skipped_records_total",
            "Records excluded from ranking because of unusable coordinates",
            registry=self._registry,
        )

    def observe(self, metric: ApiRequestMetric) -> None:
        self._request_counter.labels(metric.method, metric.path, str(metric.status_code)).inc()
        self._latency_histogram.labels(metric.method, metric.path).observe(metric.duration_ms)

    def observe_ranking(self, ranked: int, skipped: int) -> None:
        self._ranked_counter.inc(ranked)
        self._skipped_counter.inc(skipped)

    def render(self) -> str:
        return generate_latest(self._registry).decode("utf-8")
