"""CSV loading and column-name normalization.

The export is read with Dask (all columns as strings so that nothing is
coerced before cleaning), column names are normalized to snake_case
identifiers and the columns the pipeline relies on are checked up front.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable

import dask.dataframe as dd

from superstore_pipeline.errors import InputFileError, MissingColumnsError

log = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    "order_id",
    "order_date",
    "ship_date",
    "customer_id",
    "customer_name",
    "segment",
    "city",
    "state",
    "region",
    "category",
    "sub_category",
    "sales",
)

_NON_IDENT = re.compile(r"[^0-9a-zA-Z]+")


def normalize_column_name(name: str) -> str:
    """Return `name` as a lowercase snake_case identifier.

    "Order Date" → "order_date", "Sub-Category" → "sub_category",
    "Row ID" → "row_id".
    """
    ident = _NON_IDENT.sub("_", str(name).strip()).strip("_").lower()
    if not ident:
        raise ValueError(f"Column name {name!r} has no identifier characters")
    if ident[0].isdigit():
        ident = f"col_{ident}"
    return ident


def normalize_columns(columns: Iterable[str]) -> dict[str, str]:
    """Map original column names to normalized ones.

    Raises:
        MissingColumnsError: if two columns normalize to the same name.
    """
    mapping = {c: normalize_column_name(c) for c in columns}
    seen: dict[str, str] = {}
    clashes: list[str] = []
    for original, new in mapping.items():
        if new in seen:
            clashes.append(f"{seen[new]!r}/{original!r}->{new}")
        seen[new] = original
    if clashes:
        raise MissingColumnsError(clashes, "column normalization (ambiguous names)")
    return mapping


def load_transactions_ddf(path: Path, blocksize: Any = "default") -> Any:
    """Read the Superstore CSV into a Dask DataFrame with normalized columns.

    Args:
        path: Path to the CSV export.
        blocksize: Passed to `dask.dataframe.read_csv`.

    Returns:
        Dask DataFrame with string columns named as in `REQUIRED_COLUMNS`
        (plus any extra columns of the export).

    Raises:
        InputFileError: if the file does not exist or is empty.
        MissingColumnsError: if required columns are absent.
    """
    path = Path(path)
    if not path.is_file():
        raise InputFileError(f"Input file not found: {path}")
    if path.stat().st_size == 0:
        raise InputFileError(f"Input file is empty: {path}")

    log.info("Reading %s", path)
    try:
        ddf = dd.read_csv(
            str(path),
            dtype=str,
            blocksize=blocksize,
            encoding="utf-8",
            encoding_errors="replace",
            keep_default_na=False,
        )
    except (OSError, UnicodeError, ValueError) as e:
        raise InputFileError(f"Cannot read {path}: {e}") from e

    ddf = ddf.rename(columns=normalize_columns(ddf.columns))

    missing = [c for c in REQUIRED_COLUMNS if c not in ddf.columns]
    if missing:
        raise MissingColumnsError(missing, str(path))

    log.info("Loaded %s with %d columns in %d partitions", path.name, len(ddf.columns), ddf.npartitions)
    return ddf
