from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from pipeline_app.config import Settings, get_settings
from pipeline_app.main import create_application
from pipeline_app.observability.metrics import HttpMetrics


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "HOST",
        "PORT",
        "APP_ENV",
        "NODE_ENV",
        "APP_VERSION",
        "BUILD_NUMBER",
        "GIT_COMMIT",
        "CORS_ALLOW_ORIGINS",
        "SHUTDOWN_TIMEOUT_SECONDS",
        "LOG_LEVEL",
        "SERVICE_NAME",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, environment="development", build_number="42", git_commit="abc1234")


@pytest.fixture
def http_metrics() -> HttpMetrics:
    return HttpMetrics()


@pytest.fixture
def application(settings: Settings, http_metrics: HttpMetrics) -> FastAPI:
    return create_application(settings=settings, metrics=http_metrics)


@pytest.fixture
async def api_client(application: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
