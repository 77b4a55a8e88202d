from __future__ import annotations

from collections.abc import Mapping

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

HTTP_LABELS = ("method", "route", "status")


class HttpMetrics:
    """Prometheus series for HTTP traffic, bound to a private registry.

    One instance is created per application and handed to both the request
    middleware and the `/metrics` handler. prometheus_client guards every
    value with a lock, so concurrent requests never lose increments.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None, runtime_collectors: bool = True) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        if runtime_collectors:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        self.http_requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            HTTP_LABELS,
            registry=self.registry,
        )
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            HTTP_LABELS,
            registry=self.registry,
        )
        self.active_connections = Gauge(
            "active_connections",
            "Number of active connections",
            registry=self.registry,
        )

    def observe_http_request(self, method: str, route: str, status: int | str, elapsed_seconds: float) -> None:
        labels = {"method": method, "route": route, "status": str(status)}
        self.http_requests_total.labels(**labels).inc()
        self.http_request_duration_seconds.labels(**labels).observe(max(0.0, elapsed_seconds))

    def connection_opened(self) -> None:
        self.active_connections.inc()

    def connection_closed(self) -> None:
        self.active_connections.dec()

    def sample_value(self, name: str, labels: Mapping[str, str] | None = None) -> float | None:
        return self.registry.get_sample_value(name, dict(labels or {}))

    def render(self) -> bytes:
        return generate_latest(self.registry)
