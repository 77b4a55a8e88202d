from __future__ import annotations

import argparse

import structlog

from pipeline_app.config import SettingsLoadError, get_settings
from pipeline_app.observability.logging import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Pipeline demo web service")
    parser.add_argument("--host", default=None, help="Interface to bind (defaults to HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (defaults to PORT or 3000)")
    args = parser.parse_args()

    try:
        settings = get_settings()
    except SettingsLoadError as exc:
        configure_logging()
        structlog.get_logger("lifecycle").error("settings_invalid", error=str(exc))
        raise SystemExit(1) from exc

    # Imported late so a bad configuration is reported before the app module builds its default instance.
    from pipeline_app.server import run

    raise SystemExit(run(settings, host=args.host, port=args.port))


if __name__ == "__main__":
    main()
