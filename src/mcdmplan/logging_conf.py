from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure the root logger: stdout always, plus ``log_file`` when given."""
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        print(f"Invalid log level: {level}, defaulting to INFO")
        numeric_level = logging.INFO

    # 2025-10-27 10:00:00 [INFO] mcdmplan.planning.orchestrator: Strategy cost done: ...
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Reloads would otherwise stack handlers
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for noisy in ("uvicorn.access", "watchfiles", "nicegui"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
