from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Union

import logfire

from infra.paths import LOG_DIR

# Centralized logging setup shared by the engine, the runtime and the API.
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
JSON_FORMAT = (
    '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","line":%(lineno)d,"msg":"%(message)s"}'
)

# Third-party loggers that drown out match activity at DEBUG.
NOISY_LOGGERS = ("asyncio", "httpx", "urllib3")


def configure_logging(
    level: Union[str, int] = "INFO",
    *,
    json: bool = False,
    logfile: str | Path | None = LOG_DIR / "arena.log",
    to_logfire: bool = False,
) -> None:
    """
    Configure the root logger with stdout + optional file handler.

    Args:
        level: Logging level name or int (e.g., "DEBUG", logging.INFO).
        json: Emit JSON lines when True; otherwise a human-friendly format.
        logfile: File path to append logs; set to None to disable file output.
        to_logfire: Also forward records to logfire (configure_logfire() first).
    """
    formatter = logging.Formatter(JSON_FORMAT if json else DEFAULT_FORMAT)

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    handlers.append(console)

    if logfile is not None:
        log_path = Path(logfile)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if to_logfire:
        handlers.append(logfire.LogfireLoggingHandler())

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)


def configure_from_settings(settings, *, to_logfire: bool = False) -> None:
    """Apply the level/format switches carried by an ``infra.settings.Settings``."""
    configure_logging(
        settings.log_level,
        json=settings.log_json,
        logfile=settings.log_file,
        to_logfire=to_logfire,
    )


def get_logger(name: str) -> logging.Logger:
    """Return a namespaced logger; configure_logging() should be called once on startup."""
    return logging.getLogger(name)
