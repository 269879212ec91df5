from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from nicegui import app, ui

from mcdmplan.logging_conf import configure_logging
from mcdmplan.settings import Settings
from mcdmplan.ui.pages import register_pages

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MCDM production-planning dashboard")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--title", type=str, default="MCDM Production Planning")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--log-file", type=Path, default=None)
    parser.add_argument(
        "--delay",
        type=float,
        default=0.5,
        help="Artificial processing delay in seconds before results are shown",
    )
    return parser


def settings_from_args(argv: list[str] | None = None) -> Settings:
    args = build_arg_parser().parse_args(argv)
    return Settings(
        host=args.host,
        port=args.port,
        title=args.title,
        log_level=args.log_level,
        log_file=args.log_file,
        processing_delay_seconds=max(0.0, args.delay),
    )


def main() -> None:
    settings = settings_from_args()
    configure_logging(settings.log_level, settings.log_file)
    logger.info("Starting %s on %s:%d", settings.title, settings.host, settings.port)

    register_pages(settings)

    if sys.platform == "win32":
        @app.on_startup
        async def _silence_windows_connection_reset() -> None:
            # Windows clients dropping websockets raise ConnectionResetError 10054.
            loop = asyncio.get_running_loop()

            def _handler(loop: asyncio.AbstractEventLoop, context: dict) -> None:
                exc = context.get("exception")
                if isinstance(exc, ConnectionResetError) and getattr(exc, "winerror", None) == 10054:
                    return
                loop.default_exception_handler(context)

            loop.set_exception_handler(_handler)

    ui.run(host=settings.host, port=settings.port, title=settings.title, reload=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
