"""Date parsing and calendar attributes.

Dates in the export are written month-first but some sources write them
day-first. `parse_dates` resolves this deterministically: the candidate
formats are tried in a fixed priority order and the first one that fits the
whole column is used for every value, so "02/05/2023" is 5 February 2023
under the default order while a day-first export stays day-first throughout.
Values that match no format are reported per row instead of being coerced
to NaT.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
import pandas as pd

from superstore_pipeline.aggregate.season_lookup import MONTHS, seasons_for
from superstore_pipeline.errors import DateParseError
from superstore_pipeline.aggregate.primitives import require_columns

log = logging.getLogger(__name__)

# month-day-year first, then day-month-year, then ISO
DEFAULT_DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%m-%d-%Y",
    "%d-%m-%Y",
    "%Y-%m-%d",
)

# Sunday-first, fixed English labels (not locale dependent)
WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True)
class DateParseIssue:
    """A value that matched none of the candidate formats.

    Attributes:
        row: Index label of the offending row.
        column: Column the value came from.
        value: The raw value as read.
    """
    row: Any
    column: str
    value: Any


def parse_dates(
    values: pd.Series,
    formats: Sequence[str] = DEFAULT_DATE_FORMATS,
) -> tuple[pd.Series, list[DateParseIssue]]:
    """Parse `values` with the first format that fits the whole column.

    Formats are tried in priority order and the first one that parses every
    non-blank value is applied to all of them, so a column never mixes
    month-first and day-first readings. When no single format covers the
    column, each value falls back to its own first matching format and a
    warning names the formats that were mixed.

    Args:
        values: Raw date strings (already-parsed datetimes pass through).
        formats: Candidate `strptime` formats in priority order.

    Returns:
        A tuple `(parsed, issues)`: `parsed` is a datetime64 Series aligned
        with `values` (NaT where nothing matched) and `issues` lists every
        value that no format could parse, blanks included.
    """
    if not formats:
        raise ValueError("at least one date format is required")

    column = str(values.name) if values.name is not None else "date"

    if pd.api.types.is_datetime64_any_dtype(values):
        parsed = values.copy()
    else:
        text = values.astype("string").str.strip().fillna("")
        present = (text != "").astype(bool)
        parsed = pd.Series(pd.NaT, index=values.index, dtype="datetime64[ns]")
        if present.any():
            chosen = _column_format(text[present], formats)
            if chosen is not None:
                parsed.loc[present] = pd.to_datetime(text[present], format=chosen, errors="coerce")
            else:
                used = _parse_per_value(text, present, parsed, formats)
                log.warning(
                    "No single date format fits every value of '%s'; parsed per value with %s",
                    column,
                    ", ".join(used) or "no matching format",
                )

    failed = parsed.isna()
    issues = [
        DateParseIssue(row=idx, column=column, value=raw)
        for idx, raw in zip(values.index[failed], values[failed])
    ]
    return parsed.rename(values.name), issues


def _column_format(text: pd.Series, formats: Sequence[str]) -> str | None:
    for fmt in formats:
        if pd.to_datetime(text, format=fmt, errors="coerce").notna().all():
            return fmt
    return None


def _parse_per_value(
    text: pd.Series, present: pd.Series, parsed: pd.Series, formats: Sequence[str]
) -> list[str]:
    """Fill `parsed` in place value by value; return the formats that matched."""
    used: list[str] = []
    for fmt in formats:
        pending = parsed.isna() & present
        if not pending.any():
            break
        attempt = pd.to_datetime(text[pending], format=fmt, errors="coerce")
        if attempt.notna().any():
            used.append(fmt)
        parsed.loc[pending] = attempt
    return used


def _calendar_labels(positions: pd.Series, labels: Sequence[str]) -> pd.Categorical:
    return pd.Categorical.from_codes(
        positions.to_numpy(dtype=np.int64), categories=list(labels), ordered=True
    )


def derive_calendar_fields(
    table: pd.DataFrame,
    date_column: str = "order_date",
    formats: Sequence[str] = DEFAULT_DATE_FORMATS,
    on_error: str = "raise",
    prefix: str = "order",
) -> pd.DataFrame:
    """Parse `date_column` and add month, year, weekday and season columns.

    Adds `<prefix>_month` (ordered Jan..Dec), `<prefix>_year` (int),
    `<prefix>_weekday` (ordered Sun..Sat) and `season` (ordered
    Winter, Spring, Summer, Fall).

    Args:
        table: Source rows; not modified.
        date_column: Column holding the dates.
        formats: Candidate formats in priority order.
        on_error: "raise" to fail on any unparseable value, "drop" to log each
            one and exclude those rows.
        prefix: Prefix of the derived column names.

    Raises:
        DateParseError: when values cannot be parsed and `on_error="raise"`.
    """
    if on_error not in ("raise", "drop"):
        raise ValueError(f"on_error must be 'raise' or 'drop', got {on_error!r}")
    require_columns(table, [date_column])

    parsed, issues = parse_dates(table[date_column], formats)
    out = table.copy()
    out[date_column] = parsed

    if issues:
        if on_error == "raise":
            raise DateParseError(issues, date_column)
        for issue in issues:
            log.warning(
                "Dropping row %s: unparseable %s %r", issue.row, issue.column, issue.value
            )
        out = out.loc[parsed.notna()].copy()

    dates = out[date_column]
    out[f"{prefix}_month"] = _calendar_labels(dates.dt.month - 1, MONTHS)
    out[f"{prefix}_year"] = dates.dt.year.astype(int)
    out[f"{prefix}_weekday"] = _calendar_labels((dates.dt.dayofweek + 1) % 7, WEEKDAYS)
    out["season"] = seasons_for(out[f"{prefix}_month"])

    log.info(
        "Derived calendar fields from '%s' for %d rows (%d unparseable)",
        date_column,
        len(out),
        len(issues),
    )
    return out
