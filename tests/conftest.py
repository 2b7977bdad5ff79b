from __future__ import annotations

import pandas as pd
import pytest

from superstore_pipeline.clean.dates import derive_calendar_fields, parse_dates

COLUMNS = [
    "order_id", "order_date", "ship_date", "customer_id", "customer_name",
    "segment", "city", "state", "region", "category", "sub_category", "sales",
]

ROWS = [
    ("CA-1", "01/15/2023", "01/18/2023", "C1", "Alice", "Consumer", "Los Angeles", "CA", "West", "Furniture", "Chairs", 100.0),
    ("CA-2", "02/05/2023", "02/09/2023", "C2", "Bob", "Corporate", "San Diego", "CA", "West", "Technology", "Phones", 50.0),
    ("NY-1", "06/20/2023", "06/22/2023", "C1", "Alice", "Consumer", "New York City", "NY", "East", "Office Supplies", "Paper", 30.0),
    ("NY-2", "09/10/2024", "09/15/2024", "C3", "Carol", "Home Office", "New York City", "NY", "East", "Technology", "Phones", 20.0),
    ("TX-1", "12/01/2024", "12/04/2024", "C2", "Bob", "Consumer", "Houston", "TX", "Central", "Furniture", "Tables", 200.0),
    ("TX-2", "04/03/2024", "04/08/2024", "C4", "Dan", "Consumer", "Houston", "TX", "Central", "Office Supplies", "Paper", 10.0),
]


@pytest.fixture
def raw_transactions() -> pd.DataFrame:
    """Cleaned-but-unparsed rows, as produced by the clean step."""
    return pd.DataFrame(ROWS, columns=COLUMNS)


@pytest.fixture
def transactions(raw_transactions: pd.DataFrame) -> pd.DataFrame:
    """Rows with parsed dates and calendar attributes."""
    pdf = raw_transactions.copy()
    pdf["ship_date"], _ = parse_dates(pdf["ship_date"])
    return derive_calendar_fields(pdf, "order_date")


@pytest.fixture
def superstore_csv(tmp_path):
    """A small CSV laid out like the original Superstore export."""
    header = (
        "Row ID,Order ID,Order Date,Ship Date,Ship Mode,Customer ID,Customer Name,"
        "Segment,Country,City,State,Postal Code,Region,Product ID,Category,"
        "Sub-Category,Product Name,Sales"
    )
    lines = [header]
    for i, r in enumerate(ROWS, start=1):
        (order_id, od, sd, cid, cname, seg, city, state, region, cat, sub, sales) = r
        lines.append(
            f"{i},{order_id},{od},{sd},Standard Class,{cid},{cname},{seg},United States,"
            f"{city},{state},90001,{region},P-{i},{cat},{sub},Item {i},{sales}"
        )
    path = tmp_path / "superstore.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
