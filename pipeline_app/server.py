"""Process lifecycle: bind, serve, and bounded graceful shutdown."""

from __future__ import annotations

import asyncio
import errno
import signal
import socket
from types import FrameType

import structlog
import uvicorn

from pipeline_app.config import Settings, get_settings
from pipeline_app.main import create_application
from pipeline_app.observability.logging import configure_logging


class StartupError(RuntimeError):
    """Raised when the listening socket cannot be bound."""


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind and listen on host:port, failing fast without retries."""

    logger = structlog.get_logger("lifecycle")
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    try:
        return socket.create_server((host, port), family=family, backlog=2048)
    except OSError as exc:
        logger.error("server_failed_to_start", host=host, port=port, error=str(exc))
        if exc.errno == errno.EADDRINUSE:
            logger.error("port_already_in_use", port=port)
        raise StartupError(f"Cannot bind {host}:{port}: {exc}") from exc


class ManagedServer(uvicorn.Server):
    """Uvicorn server whose shutdown drain is bounded by `drain_timeout` seconds.

    A drain that overruns the timeout is abandoned and reported through
    `exit_code` (1). A clean run exits with 0.
    """

    def __init__(self, config: uvicorn.Config, drain_timeout: float = 10.0) -> None:
        super().__init__(config)
        self.drain_timeout = drain_timeout
        self.forced_shutdown = False

    @property
    def exit_code(self) -> int:
        if self.forced_shutdown or not self.started:
            return 1
        return 0

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        # Signals are not re-raised after serve() returns; the exit code carries the outcome.
        structlog.get_logger("lifecycle").info("shutdown_signal_received", signal=signal.Signals(sig).name)
        if self.should_exit and sig == signal.SIGINT:
            self.force_exit = True
        else:
            self.should_exit = True

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        await super().startup(sockets=sockets)
        if self.started:
            for sock in sockets or []:
                host, port = sock.getsockname()[:2]
                structlog.get_logger("lifecycle").info(
                    "server_running", host=host, port=port, health_endpoint=f"http://{host}:{port}/api/health"
                )

    async def shutdown(self, sockets: list[socket.socket] | None = None) -> None:
        logger = structlog.get_logger("lifecycle")
        logger.info("graceful_shutdown_started", timeout_seconds=self.drain_timeout)
        try:
            await asyncio.wait_for(super().shutdown(sockets=sockets), timeout=self.drain_timeout)
        except asyncio.TimeoutError:
            self.forced_shutdown = True
            self.force_exit = True
            logger.error("forced_shutdown_after_timeout", timeout_seconds=self.drain_timeout)
            # The abandoned drain never reaches the lifespan shutdown, so report it here.
            logger.info("application_shutdown", forced=True)
            return
        logger.info("process_terminated")


def run(settings: Settings | None = None, host: str | None = None, port: int | None = None) -> int:
    """Serve until a termination signal arrives and return the process exit code."""

    if settings is None:
        settings = get_settings()
    configure_logging(settings)
    logger = structlog.get_logger("lifecycle")
    host = host or settings.host
    port = port or settings.port

    logger.info("server_starting", host=host, port=port, environment=settings.environment)
    try:
        sock = bind_socket(host, port)
    except StartupError:
        return 1

    config = uvicorn.Config(
        create_application(settings),
        log_config=None,
        access_log=False,
        lifespan="on",
    )
    server = ManagedServer(config, drain_timeout=settings.shutdown_timeout_seconds)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
    return server.exit_code
