"""Static month → season mapping used for seasonal aggregation.

Months are keyed by their three-letter English abbreviation. Lookups accept
month numbers, abbreviations or full names and never fall back to a missing
category: unrecognized values raise `UnknownMonthError`.
"""

from __future__ import annotations

import numbers
from typing import Any

import pandas as pd

from superstore_pipeline.errors import UnknownMonthError

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
SEASONS = ("Winter", "Spring", "Summer", "Fall")

SEASON_BY_MONTH = {
    "Dec": "Winter", "Jan": "Winter", "Feb": "Winter",
    "Mar": "Spring", "Apr": "Spring", "May": "Spring",
    "Jun": "Summer", "Jul": "Summer", "Aug": "Summer",
    "Sep": "Fall", "Oct": "Fall", "Nov": "Fall",
}

_FULL_NAMES = {
    "january": "Jan", "february": "Feb", "march": "Mar", "april": "Apr",
    "may": "May", "june": "Jun", "july": "Jul", "august": "Aug",
    "september": "Sep", "october": "Oct", "november": "Nov", "december": "Dec",
}


def _month_abbr(month: Any) -> str | None:
    """Return the canonical abbreviation for `month`, or None if unknown."""
    if isinstance(month, bool):
        return None
    if isinstance(month, numbers.Integral) or (isinstance(month, float) and month.is_integer()):
        n = int(month)
        return MONTHS[n - 1] if 1 <= n <= 12 else None
    if isinstance(month, str):
        key = month.strip().lower()
        if key in _FULL_NAMES:
            return _FULL_NAMES[key]
        for abbr in MONTHS:
            if key == abbr.lower():
                return abbr
    return None


def assign_season(month: Any) -> str:
    """Return the season for a month.

    Args:
        month: Month number (1-12), abbreviation ("Jan") or full name
            ("January"); case-insensitive.

    Returns:
        One of "Winter", "Spring", "Summer", "Fall".

    Raises:
        UnknownMonthError: when `month` is not a recognizable month.
    """
    abbr = _month_abbr(month)
    if abbr is None:
        raise UnknownMonthError(f"Unknown month: {month!r}")
    return SEASON_BY_MONTH[abbr]


def seasons_for(months: pd.Series) -> pd.Series:
    """Vectorized `assign_season` returning an ordered categorical Series.

    Raises:
        UnknownMonthError: listing every distinct unrecognized value.
    """
    lookup: dict[Any, str] = {}
    unknown: list[Any] = []
    for value in pd.unique(months.astype(object)):
        abbr = None if pd.isna(value) else _month_abbr(value)
        if abbr is None:
            unknown.append(value)
        else:
            lookup[value] = SEASON_BY_MONTH[abbr]

    if unknown:
        raise UnknownMonthError(f"Unknown month value(s): {unknown!r}")

    return pd.Series(
        pd.Categorical(months.astype(object).map(lookup), categories=SEASONS, ordered=True),
        index=months.index,
        name="season",
    )
