from __future__ import annotations

import math

import pandas as pd
import dask.dataframe as dd
import pytest

from superstore_pipeline.clean.transform import clean_raw_ddf, prepare_transactions
from superstore_pipeline.errors import InputFileError, MissingColumnsError
from superstore_pipeline.ingest.load_csv import (
    REQUIRED_COLUMNS,
    load_transactions_ddf,
    normalize_column_name,
    normalize_columns,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Order Date", "order_date"),
        ("Sub-Category", "sub_category"),
        ("  Customer Name ", "customer_name"),
        ("Row ID", "row_id"),
        ("Sales", "sales"),
        ("2nd Col", "col_2nd_col"),
    ],
)
def test_normalize_column_name(raw: str, expected: str) -> None:
    assert normalize_column_name(raw) == expected


def test_normalize_columns_rejects_clashes() -> None:
    with pytest.raises(MissingColumnsError):
        normalize_columns(["Order Date", "order_date"])


def test_cleaning_trims_text_and_coerces_sales() -> None:
    pdf = pd.DataFrame([{
        "order_id": " CA-1 ",
        "order_date": " 01/15/2023 ",
        "ship_date": "01/18/2023",
        "customer_id": "C1",
        "customer_name": "  Alice   Smith  ",
        "segment": "Consumer",
        "city": "Los  Angeles",
        "state": "CA",
        "region": "West",
        "category": "Furniture",
        "sub_category": "Chairs",
        "sales": "1,234.50",
    }, {
        "order_id": "CA-2",
        "order_date": "02/05/2023",
        "ship_date": "",
        "customer_id": "C2",
        "customer_name": "",
        "segment": "Corporate",
        "city": "San Diego",
        "state": "CA",
        "region": "West",
        "category": "Technology",
        "sub_category": "Phones",
        "sales": "n/a",
    }])
    ddf = dd.from_pandas(pdf, npartitions=1)
    out = clean_raw_ddf(ddf).compute()
    assert out.loc[0, "order_id"] == "CA-1"
    assert out.loc[0, "customer_name"] == "Alice Smith"
    assert out.loc[0, "city"] == "Los Angeles"
    assert out.loc[0, "order_date"] == "01/15/2023"
    assert out.loc[0, "sales"] == pytest.approx(1234.5)
    assert pd.isna(out.loc[1, "customer_name"])
    assert math.isnan(out.loc[1, "sales"])


def test_load_transactions_normalizes_columns(superstore_csv) -> None:
    ddf = load_transactions_ddf(superstore_csv)
    for col in REQUIRED_COLUMNS:
        assert col in ddf.columns
    assert "postal_code" in ddf.columns
    assert len(ddf.compute()) == 6


def test_missing_file_is_fatal(tmp_path) -> None:
    with pytest.raises(InputFileError):
        load_transactions_ddf(tmp_path / "nope.csv")


def test_empty_file_is_fatal(tmp_path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    with pytest.raises(InputFileError):
        load_transactions_ddf(path)


def test_missing_required_columns(tmp_path) -> None:
    path = tmp_path / "partial.csv"
    path.write_text("Order ID,Sales\nA,1.0\n", encoding="utf-8")
    with pytest.raises(MissingColumnsError) as exc:
        load_transactions_ddf(path)
    assert "order_date" in exc.value.missing


def test_prepare_transactions_end_to_end(superstore_csv) -> None:
    pdf = prepare_transactions(load_transactions_ddf(superstore_csv))
    assert len(pdf) == 6
    assert pdf["sales"].sum() == pytest.approx(410.0)
    assert pdf.loc[1, "order_date"] == pd.Timestamp(2023, 2, 5)
    assert pdf.loc[1, "ship_date"] == pd.Timestamp(2023, 2, 9)
    assert {"order_month", "order_year", "order_weekday", "season"} <= set(pdf.columns)
