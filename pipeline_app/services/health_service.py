from __future__ import annotations

from datetime import datetime, timezone
from time import monotonic

from pipeline_app.config import Settings
from pipeline_app.models.schemas import AppInfo, HealthStatus

# Captured at import time, which happens once per process before serving.
_PROCESS_STARTED_AT = monotonic()


def process_uptime() -> float:
    return max(0.0, monotonic() - _PROCESS_STARTED_AT)


def build_health_status(settings: Settings) -> HealthStatus:
    return HealthStatus(
        uptime=process_uptime(),
        timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        version=settings.app_version,
        environment=settings.environment,
    )


def build_app_info(settings: Settings) -> AppInfo:
    return AppInfo(
        name=settings.app_name,
        version=settings.app_version,
        description=settings.app_description,
        author=settings.app_author,
        build_number=settings.build_number,
        git_commit=settings.git_commit,
    )
