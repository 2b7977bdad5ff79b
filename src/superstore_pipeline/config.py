"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads optional environment variables (input path, output directory, ranking
size, the explicit null/date error policies and the log level) and checks
their values.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

NULL_POLICIES = ("zero", "propagate", "raise")
DATE_ERROR_MODES = ("raise", "drop")


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        input_csv: Path to the Superstore CSV export.
        visuals_dir: Directory receiving rendered charts.
        log_path: File that mirrors console logging.
        top_n: Number of rows kept for "top N" charts.
        null_sales_policy: How null sales are aggregated (zero/propagate/raise).
        date_errors: What to do with unparseable order dates (raise/drop).
        log_level: Root logging level name (DEBUG, INFO, WARNING, ...).
    """
    input_csv: Path
    visuals_dir: Path
    log_path: Path
    top_n: int
    null_sales_policy: str
    date_errors: str
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `TOP_N`, `NULL_SALES_POLICY`, `DATE_ERRORS` or
            `LOG_LEVEL` hold an invalid value.
    """
    input_csv = Path(os.getenv("SUPERSTORE_CSV", "data/superstore.csv"))
    visuals_dir = Path(os.getenv("VISUALS_DIR", "visuals"))
    log_path = Path(os.getenv("LOG_PATH", "logs/pipeline.log"))
    raw_top_n = os.getenv("TOP_N", "10").strip()
    null_sales_policy = os.getenv("NULL_SALES_POLICY", "zero").strip().lower()
    date_errors = os.getenv("DATE_ERRORS", "raise").strip().lower()
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    try:
        top_n = int(raw_top_n)
    except ValueError:
        raise RuntimeError(f"TOP_N must be an integer, got {raw_top_n!r}.") from None
    if top_n <= 0:
        raise RuntimeError(f"TOP_N must be positive, got {top_n}.")

    if null_sales_policy not in NULL_POLICIES:
        raise RuntimeError(
            f"NULL_SALES_POLICY must be one of {', '.join(NULL_POLICIES)} "
            f"(got {null_sales_policy!r})."
        )
    if date_errors not in DATE_ERROR_MODES:
        raise RuntimeError(
            f"DATE_ERRORS must be one of {', '.join(DATE_ERROR_MODES)} "
            f"(got {date_errors!r})."
        )

    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(f"LOG_LEVEL must be a logging level name, got {log_level!r}.")

    return Settings(
        input_csv=input_csv,
        visuals_dir=visuals_dir,
        log_path=log_path,
        top_n=top_n,
        null_sales_policy=null_sales_policy,
        date_errors=date_errors,
        log_level=log_level,
    )
