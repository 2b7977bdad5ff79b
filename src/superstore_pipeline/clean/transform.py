"""Cleaning and normalization utilities.

`clean_raw_ddf` is applied partition-wise using Dask; `prepare_transactions`
materializes the cleaned table to pandas (the dataset is small once loaded)
and adds parsed dates and calendar attributes.
"""
from __future__ import annotations

import logging
from typing import Any, Sequence

import pandas as pd

from superstore_pipeline.clean.dates import (
    DEFAULT_DATE_FORMATS,
    derive_calendar_fields,
    parse_dates,
)

log = logging.getLogger(__name__)

TEXT_COLUMNS = (
    "order_id",
    "customer_id",
    "customer_name",
    "segment",
    "city",
    "state",
    "region",
    "category",
    "sub_category",
)


def _clean_partition(pdf: pd.DataFrame) -> pd.DataFrame:
    """Partition-level cleaning function applied via map_partitions.

    Args:
        pdf: Pandas DataFrame for the partition.

    Returns:
        Cleaned Pandas DataFrame.
    """
    pdf = pdf.copy()

    # -----------------------------
    # Normalize text dimensions
    # -----------------------------
    for col in TEXT_COLUMNS:
        if col in pdf.columns:
            pdf[col] = (
                pdf[col]
                .astype(object)
                .where(pdf[col].notna(), "")
                .astype(str)
                .str.strip()
                .str.replace(r"\s+", " ", regex=True)
                .replace({"": None})
            )

    # -----------------------------
    # Dates stay as trimmed text here; parsing happens once in pandas
    # -----------------------------
    for col in ("order_date", "ship_date"):
        if col in pdf.columns:
            pdf[col] = pdf[col].astype(object).where(pdf[col].notna(), "").astype(str).str.strip()

    # -----------------------------
    # Sales: thousands separators and currency signs removed
    # -----------------------------
    if "sales" in pdf.columns:
        raw = pdf["sales"].astype(object).where(pdf["sales"].notna(), "").astype(str)
        raw = raw.str.replace(r"[,$\s]", "", regex=True)
        pdf["sales"] = pd.to_numeric(raw, errors="coerce").astype("float64")

    return pdf


def clean_raw_ddf(ddf: Any) -> Any:
    """Clean raw Superstore rows.

    Trims and collapses whitespace in text dimensions (blank → null) and
    coerces `sales` to float; values that are not numbers become null and
    are later handled by the configured null policy.

    Returns:
        Transformed Dask DataFrame with a stable schema for downstream steps.
    """
    log.info("Starting clean_raw_ddf transformation")
    meta = _clean_partition(ddf._meta)
    return ddf.map_partitions(_clean_partition, meta=meta)


def prepare_transactions(
    ddf: Any,
    formats: Sequence[str] = DEFAULT_DATE_FORMATS,
    on_error: str = "raise",
) -> pd.DataFrame:
    """Materialize cleaned rows and derive calendar attributes.

    `ship_date` is parsed with the same format priority; values that cannot
    be parsed are logged and left null since no summary depends on them.
    `order_date` problems follow `on_error` (see `derive_calendar_fields`).

    Returns:
        pandas DataFrame with a fresh RangeIndex.
    """
    pdf = clean_raw_ddf(ddf).compute().reset_index(drop=True)
    log.info("Materialized %d cleaned rows", len(pdf))

    if "ship_date" in pdf.columns:
        parsed, issues = parse_dates(pdf["ship_date"], formats)
        for issue in issues:
            log.warning("Unparseable ship_date at row %s: %r", issue.row, issue.value)
        pdf["ship_date"] = parsed

    return derive_calendar_fields(pdf, "order_date", formats=formats, on_error=on_error)
