from __future__ import annotations

import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders

from pipeline_app.observability.metrics import HttpMetrics


def route_label(scope: dict[str, Any]) -> str:
    """Matched route pattern, or the raw path when nothing matched.

    Unmatched paths are labeled verbatim, so 404 traffic can grow the label
    set without bound.
    """

    route = scope.get("route")
    route_path = getattr(route, "path", None)
    if isinstance(route_path, str) and route_path:
        return route_path
    return str(scope.get("path") or "")


class RequestContextMiddleware:
    """Adds request_id context, access logs, and HTTP metrics."""

    def __init__(self, app: Callable[..., Any], metrics: HttpMetrics) -> None:
        self.app = app
        self.metrics = metrics

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())
        path = scope.get("path")
        method = scope.get("method")

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=method,
        )

        start = perf_counter()
        status_code: int = 500

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code

            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id

            await send(message)

        self._track_connection(opened=True)
        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed = perf_counter() - start
            self._track_connection(opened=False)

            # Update metrics first so they update even if logging misbehaves.
            try:
                self.metrics.observe_http_request(
                    method=str(method),
                    route=route_label(scope),
                    status=status_code,
                    elapsed_seconds=elapsed,
                )
            except Exception:  # noqa: BLE001
                structlog.get_logger("metrics").exception("metrics_record_failed")

            structlog.get_logger("access").info(
                "http_request",
                status_code=status_code,
                response_time_ms=round(elapsed * 1000.0, 2),
            )

            structlog.contextvars.clear_contextvars()

    def _track_connection(self, opened: bool) -> None:
        try:
            if opened:
                self.metrics.connection_opened()
            else:
                self.metrics.connection_closed()
        except Exception:  # noqa: BLE001
            structlog.get_logger("metrics").exception("active_connections_update_failed")
