from __future__ import annotations

from datetime import date

import pandas as pd
import pytest
from pydantic import ValidationError

from superstore_pipeline.clean.validate import validate_transactions
from superstore_pipeline.models import RepeatCustomerStats, Transaction


def _record(**overrides: object) -> dict[str, object]:
    rec: dict[str, object] = {
        "order_id": "CA-2017-152156",
        "order_date": date(2017, 11, 8),
        "ship_date": date(2017, 11, 11),
        "customer_id": "CG-12520",
        "customer_name": "Claire Gute",
        "region": "South",
        "state": "Kentucky",
        "city": "Henderson",
        "segment": "Consumer",
        "category": "Furniture",
        "sub_category": "Bookcases",
        "sales": 261.96,
        "postal_code": "42420",
    }
    rec.update(overrides)
    return rec


def test_transaction_validates_and_ignores_extra_columns() -> None:
    t = Transaction.model_validate(_record())
    assert t.sales == pytest.approx(261.96)
    assert not hasattr(t, "postal_code")


def test_transaction_rejects_negative_sales() -> None:
    with pytest.raises(ValidationError):
        Transaction.model_validate(_record(sales=-1.0))


def test_validate_transactions_reports_without_dropping(transactions: pd.DataFrame) -> None:
    bad = transactions.copy()
    bad.loc[3, "sales"] = -5.0
    bad.loc[4, "customer_id"] = None

    good, issues = validate_transactions(bad)
    assert good == len(bad) - 2
    assert [i.row for i in issues] == [3, 4]
    assert any(e.startswith("sales") for e in issues[0].errors)
    assert len(bad) == len(transactions)


def test_repeat_customer_stats_bounds() -> None:
    RepeatCustomerStats(total_customers=4, repeat_customers=2, repeat_rate_pct=50.0)
    with pytest.raises(ValidationError):
        RepeatCustomerStats(total_customers=4, repeat_customers=2, repeat_rate_pct=150.0)
