from __future__ import annotations

from collections.abc import Mapping

from fastapi import Request

from pipeline_app.config import Settings
from pipeline_app.models.schemas import AppInfo
from pipeline_app.observability.metrics import HttpMetrics
from pipeline_app.services.auth_service import Credential


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_app_info(request: Request) -> AppInfo:
    return request.app.state.app_info


def get_credentials(request: Request) -> Mapping[str, Credential]:
    return request.app.state.credentials


def get_http_metrics(request: Request) -> HttpMetrics:
    return request.app.state.metrics
