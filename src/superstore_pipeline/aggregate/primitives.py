"""Grouping and ranking primitives shared by every summary.

All functions take and return pandas DataFrames and never mutate their input.
Grouping is a complete partition of the rows: null keys form their own group
(`dropna=False`) and only key combinations present in the data are returned
(`observed=True`). Groups come back sorted by key, which for ordered
categoricals (month, weekday, season) is calendar order.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

import numpy as np
import pandas as pd

from superstore_pipeline.errors import (
    MissingColumnsError,
    NullMeasureError,
    ZeroDenominatorError,
)

log = logging.getLogger(__name__)

# Value used for ratios whose denominator is zero or missing.
RATIO_UNDEFINED = 0.0

_POS = "__pos"


class NullPolicy(str, Enum):
    """How null measure values are aggregated."""
    ZERO = "zero"
    PROPAGATE = "propagate"
    RAISE = "raise"


def _as_list(key_columns: str | Iterable[str]) -> list[str]:
    if isinstance(key_columns, str):
        return [key_columns]
    return list(key_columns)


def require_columns(table: pd.DataFrame, columns: Iterable[str], where: str = "table") -> None:
    """Raise `MissingColumnsError` if any of `columns` is absent from `table`."""
    missing = [c for c in columns if c not in table.columns]
    if missing:
        raise MissingColumnsError(missing, where)


def _groupby(frame: pd.DataFrame, keys: list[str]):
    return frame.groupby(keys, sort=True, dropna=False, observed=True)


def group_and_sum(
    table: pd.DataFrame,
    key_columns: str | Iterable[str],
    value_column: str,
    out_column: str = "total",
    null_policy: NullPolicy | str = NullPolicy.ZERO,
) -> pd.DataFrame:
    """Sum `value_column` per distinct combination of `key_columns`.

    Args:
        table: Source rows.
        key_columns: One column name or a list of names.
        value_column: Numeric measure to sum.
        out_column: Name of the resulting measure column.
        null_policy: `zero` counts null measures as 0, `propagate` makes the
            total of any group containing a null null, `raise` rejects nulls.

    Returns:
        DataFrame with the key columns followed by `out_column`.

    Raises:
        MissingColumnsError: if a key or the value column is absent.
        NullMeasureError: on null measures under the `raise` policy.
    """
    keys = _as_list(key_columns)
    policy = NullPolicy(null_policy)
    require_columns(table, [*keys, value_column])

    values = pd.to_numeric(table[value_column], errors="raise").astype(float)
    nulls = values.isna()

    if nulls.any():
        if policy is NullPolicy.RAISE:
            raise NullMeasureError(
                f"{int(nulls.sum())} null value(s) in '{value_column}' "
                f"at rows {list(table.index[nulls][:10])}"
            )
        log.warning(
            "%d null value(s) in '%s' aggregated with policy=%s",
            int(nulls.sum()),
            value_column,
            policy.value,
        )

    frame = table[keys].copy()
    frame["__value"] = values.fillna(0.0) if policy is NullPolicy.ZERO else values
    frame["__null"] = nulls

    grouped = _groupby(frame, keys).agg(
        **{out_column: ("__value", "sum"), "__null": ("__null", "any")}
    )
    if policy is NullPolicy.PROPAGATE:
        grouped.loc[grouped["__null"], out_column] = np.nan

    return grouped.drop(columns="__null").reset_index()


def group_and_count(
    table: pd.DataFrame,
    key_columns: str | Iterable[str],
    out_column: str = "count",
) -> pd.DataFrame:
    """Count rows per distinct combination of `key_columns`."""
    keys = _as_list(key_columns)
    require_columns(table, keys)
    return _groupby(table[keys], keys).size().reset_index(name=out_column)


def derive_ratio(
    summary: pd.DataFrame,
    numerator_col: str,
    denominator_col: str,
    out_column: str,
    zero_value: float = RATIO_UNDEFINED,
    strict: bool = False,
) -> pd.DataFrame:
    """Add `out_column = numerator_col / denominator_col`.

    Rows whose denominator is zero or null get `zero_value` instead of
    inf/NaN (a warning names how many), or raise when `strict` is set.

    Raises:
        ZeroDenominatorError: when `strict` and a denominator is zero/null.
    """
    require_columns(summary, [numerator_col, denominator_col], "summary")

    num = summary[numerator_col].astype(float)
    den = summary[denominator_col].astype(float)
    undefined = den.isna() | (den == 0)

    if undefined.any():
        if strict:
            raise ZeroDenominatorError(
                f"'{denominator_col}' is zero or missing for {int(undefined.sum())} row(s)"
            )
        log.warning(
            "%d row(s) with zero '%s'; '%s' set to %s",
            int(undefined.sum()),
            denominator_col,
            out_column,
            zero_value,
        )

    ratio = num / den.where(~undefined, 1.0)
    out = summary.copy()
    out[out_column] = ratio.where(~undefined, zero_value)
    return out


def top_n(
    summary: pd.DataFrame,
    n: int,
    sort_key: str,
    descending: bool = True,
) -> pd.DataFrame:
    """Return the first `n` rows after a stable sort on `sort_key`.

    Rows with equal keys keep their original relative order; null keys sort
    last. The returned index is reset.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    require_columns(summary, [sort_key], "summary")

    ranked = summary.reset_index(drop=True)
    ranked[_POS] = np.arange(len(ranked))
    ranked = ranked.sort_values(
        [sort_key, _POS],
        ascending=[not descending, True],
        kind="mergesort",
        na_position="last",
    )
    return ranked.drop(columns=_POS).head(n).reset_index(drop=True)


def share_of_total(
    summary: pd.DataFrame,
    value_column: str,
    out_column: str = "percentage",
    decimals: int = 1,
) -> pd.DataFrame:
    """Add each row's percentage of the column total, rounded to `decimals`.

    A null in `value_column` leaves the total unknown, so every row's
    percentage is null rather than a share of a partial total.
    """
    require_columns(summary, [value_column], "summary")
    out = summary.copy()
    nulls = out[value_column].isna()
    if nulls.any():
        log.warning(
            "%d null value(s) in '%s'; '%s' left null for all %d row(s)",
            int(nulls.sum()),
            value_column,
            out_column,
            len(out),
        )
        out[out_column] = np.nan
        return out

    out["__total"] = float(out[value_column].sum())
    out = derive_ratio(out, value_column, "__total", out_column)
    out[out_column] = (out[out_column] * 100.0).round(decimals)
    return out.drop(columns="__total")
