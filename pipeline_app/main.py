from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from pipeline_app.api.auth import router as auth_router
from pipeline_app.api.errors import UnhandledErrorMiddleware, register_exception_handlers
from pipeline_app.api.health import router as health_router
from pipeline_app.api.metrics import router as metrics_router
from pipeline_app.api.pages import router as pages_router
from pipeline_app.api.users import router as users_router
from pipeline_app.config import Settings, get_settings
from pipeline_app.observability.metrics import HttpMetrics
from pipeline_app.observability.middleware import RequestContextMiddleware
from pipeline_app.security import SecurityHeadersMiddleware
from pipeline_app.services.auth_service import DEFAULT_CREDENTIALS, Credential
from pipeline_app.services.health_service import build_app_info


def create_application(
    settings: Settings | None = None,
    metrics: HttpMetrics | None = None,
    credentials: Mapping[str, Credential] | None = None,
) -> FastAPI:
    """Build the ASGI application.

    The metrics registry and the credential table are injected so tests can
    use isolated instances; both default to fresh production values.
    """

    if settings is None:
        settings = get_settings()
    if metrics is None:
        metrics = HttpMetrics()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger = structlog.get_logger("lifecycle")
        logger.info("application_startup", environment=settings.environment, version=settings.app_version)
        yield
        logger.info("application_shutdown")

    application = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    application.state.settings = settings
    application.state.app_info = build_app_info(settings)
    application.state.metrics = metrics
    application.state.credentials = dict(DEFAULT_CREDENTIALS if credentials is None else credentials)

    application.include_router(health_router)
    application.include_router(auth_router)
    application.include_router(users_router)
    application.include_router(metrics_router)
    application.include_router(pages_router)
    application.mount("/static", StaticFiles(directory=str(Path(__file__).parent / "static")), name="static")

    register_exception_handlers(application)

    # Last added runs first: security headers wrap CORS, which wraps request tracking,
    # which wraps the JSON 500 conversion.
    application.add_middleware(UnhandledErrorMiddleware, expose_error_details=settings.is_development)
    application.add_middleware(RequestContextMiddleware, metrics=metrics)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(SecurityHeadersMiddleware)

    return application


app = create_application()
