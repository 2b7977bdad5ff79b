"""Root logging setup for pipeline runs.

Records go to stdout and, when a log file is configured, are mirrored to it
with the same format. Reconfiguring replaces the handlers of the previous
call, so repeated CLI invocations in one process do not duplicate output.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# libraries that log routine details at INFO
QUIET_LOGGERS = ("fsspec", "numexpr")


def resolve_level(level: int | str) -> int:
    """Return the numeric level for `level` ("debug", "INFO", 20, ...).

    Raises:
        ValueError: if `level` names no logging level.
    """
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level {level!r}")
    return numeric


def build_handlers(log_path: Path | None = None) -> list[logging.Handler]:
    """Stdout handler plus an optional UTF-8 file handler, both formatted."""
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(log_path: Path | None = None, level: int | str = logging.INFO) -> None:
    """Install fresh root handlers at `level`.

    Args:
        log_path: Optional file that mirrors console output.
        level: Level name or number for the root logger. Loggers listed in
            `QUIET_LOGGERS` never go below WARNING.
    """
    numeric = resolve_level(level)
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    root.setLevel(numeric)
    for handler in build_handlers(log_path):
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))
