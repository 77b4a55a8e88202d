from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from pipeline_app.config import Settings
from pipeline_app.models.schemas import AppInfo, HealthStatus
from pipeline_app.services.dependencies import get_app_info, get_app_settings
from pipeline_app.services.health_service import build_health_status

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthStatus)
async def health(settings: Settings = Depends(get_app_settings)) -> HealthStatus:
    status = build_health_status(settings)
    structlog.get_logger("health").info("health_check_requested", uptime=round(status.uptime, 3))
    return status


@router.get("/info", response_model=AppInfo)
async def info(app_info: AppInfo = Depends(get_app_info)) -> AppInfo:
    return app_info
