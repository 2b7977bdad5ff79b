"""Validation utilities for prepared transactions.

Every row is checked against the Pydantic `Transaction` model. Validation is
report-only: rows are never dropped here so that aggregates stay a complete
partition of the loaded data.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pandas as pd
from pydantic import ValidationError

from superstore_pipeline.models import Transaction


@dataclass(frozen=True)
class RowIssue:
    """A row that failed validation.

    Attributes:
        row: Index label of the row.
        errors: Short `field: message` descriptions.
    """
    row: Any
    errors: tuple[str, ...]


def _to_native(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.date()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def validate_transactions(pdf: pd.DataFrame) -> tuple[int, list[RowIssue]]:
    """Validate each row of `pdf` with `Transaction.model_validate`.

    Timestamps are converted to dates and NaN/NaT to None before validation.

    Args:
        pdf: Prepared pandas DataFrame.

    Returns:
        A tuple of (valid_row_count, issues).
    """
    good = 0
    issues: list[RowIssue] = []

    for idx, rec in zip(pdf.index, pdf.to_dict(orient="records")):
        rec = {k: _to_native(v) for k, v in rec.items()}
        try:
            Transaction.model_validate(rec)
            good += 1
        except ValidationError as e:
            errors = tuple(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            issues.append(RowIssue(row=idx, errors=errors))

    return good, issues
