from __future__ import annotations

from http import HTTPStatus
from typing import Any, Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pipeline_app.models.schemas import ErrorResponse

_NOT_FOUND_STATUSES = {404, 405}


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


class UnhandledErrorMiddleware:
    """Turns exceptions escaping the routes into a JSON 500.

    Installed innermost so the outer middlewares (security headers, CORS,
    request tracking) still decorate the error response. `expose_error_details`
    decides whether the body carries the exception message (development) or a
    generic text.
    """

    def __init__(self, app: Callable[..., Any], expose_error_details: bool) -> None:
        self.app = app
        self.expose_error_details = expose_error_details

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal response_started
            if message.get("type") == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            structlog.get_logger("errors").error("unhandled_error", error=str(exc), exc_info=exc)
            # Headers are already on the wire; the server closes the connection.
            if response_started:
                raise
            message = str(exc) if self.expose_error_details else "Something went wrong"
            response = _error_response(500, "Internal Server Error", message)
            await response(scope, receive, send)


def register_exception_handlers(application: FastAPI) -> None:
    """Install JSON handlers for HTTP and request validation errors."""

    @application.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Routes are method+path pairs, so a wrong method is just another unmatched route.
        if exc.status_code in _NOT_FOUND_STATUSES:
            return _error_response(404, "Not Found", f"Route {request.url.path} not found")

        try:
            reason = HTTPStatus(exc.status_code).phrase
        except ValueError:
            reason = "Error"
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=reason, message=str(exc.detail)).model_dump(),
            headers=getattr(exc, "headers", None),
        )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        structlog.get_logger("errors").info("request_validation_failed", errors=len(errors))
        return _error_response(400, "Bad Request", message)
