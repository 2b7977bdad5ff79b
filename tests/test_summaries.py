from __future__ import annotations

import pandas as pd
import pytest

from superstore_pipeline.aggregate.build_summaries import (
    SUMMARIES,
    build_all_summaries,
    customer_avg_value,
    customer_frequency,
    region_year_sales,
    repeat_customers,
    repeat_rate,
    sales_by_month,
    sales_by_season,
    sales_by_state,
    sales_by_weekday,
    segment_by_region,
    transactions_by_city,
)


def test_repeat_rate_example() -> None:
    assert repeat_rate([3, 1, 2, 1]) == pytest.approx(50.0)


def test_repeat_rate_empty_is_sentinel() -> None:
    assert repeat_rate([]) == 0.0


def test_sales_by_state_highest_first(transactions: pd.DataFrame) -> None:
    out = sales_by_state(transactions)
    assert out["state"].tolist() == ["TX", "CA", "NY"]
    assert out["total_sales"].tolist() == [210.0, 150.0, 50.0]


def test_transactions_by_city_ties_keep_key_order(transactions: pd.DataFrame) -> None:
    out = transactions_by_city(transactions)
    assert out["city"].tolist() == ["Houston", "New York City", "Los Angeles", "San Diego"]
    assert out["transaction_count"].tolist() == [2, 2, 1, 1]


def test_segment_by_region_shares(transactions: pd.DataFrame) -> None:
    out = segment_by_region(transactions)
    assert out["region"].tolist() == ["Central", "East", "East", "West", "West"]
    central = out[out["region"] == "Central"].iloc[0]
    assert central["segment"] == "Consumer"
    assert central["share_pct"] == 100.0
    assert out[out["region"] == "East"]["share_pct"].tolist() == [50.0, 50.0]
    assert out["transaction_count"].sum() == len(transactions)


def test_customer_frequency_and_repeat_customers(transactions: pd.DataFrame) -> None:
    freq = customer_frequency(transactions)
    assert freq["num_transactions"].tolist() == [2, 2, 1, 1]
    assert freq["customer_id"].tolist()[:2] == ["C1", "C2"]

    stats = repeat_customers(transactions).iloc[0]
    assert stats["total_customers"] == 4
    assert stats["repeat_customers"] == 2
    assert stats["repeat_rate_pct"] == pytest.approx(50.0)


def test_customer_avg_value(transactions: pd.DataFrame) -> None:
    out = customer_avg_value(transactions)
    top = out.iloc[0]
    assert (top["customer_id"], top["customer_name"]) == ("C2", "Bob")
    assert top["total_sales"] == 250.0
    assert top["num_transactions"] == 2
    assert top["avg_transaction_value"] == pytest.approx(125.0)
    assert out["avg_transaction_value"].tolist() == [125.0, 65.0, 20.0, 10.0]


def test_calendar_summaries_follow_calendar_order(transactions: pd.DataFrame) -> None:
    weekdays = sales_by_weekday(transactions)
    assert weekdays["order_weekday"].astype(str).tolist() == ["Sun", "Tue", "Wed", "Sat"]
    assert weekdays["total_sales"].tolist() == [150.0, 50.0, 10.0, 200.0]

    months = sales_by_month(transactions)
    assert months["order_month"].astype(str).tolist() == ["Jan", "Feb", "Apr", "Jun", "Sep", "Dec"]


def test_sales_by_season_percentages(transactions: pd.DataFrame) -> None:
    out = sales_by_season(transactions)
    assert out["season"].astype(str).tolist() == ["Winter", "Spring", "Summer", "Fall"]
    assert out["total_sales"].tolist() == [350.0, 10.0, 30.0, 20.0]
    assert out["percentage"].tolist() == [85.4, 2.4, 7.3, 4.9]


def test_region_year_sales(transactions: pd.DataFrame) -> None:
    out = region_year_sales(transactions)
    got = {(int(r["order_year"]), r["region"]): r["total_sales"] for _, r in out.iterrows()}
    assert got == {
        (2023, "East"): 30.0,
        (2023, "West"): 150.0,
        (2024, "Central"): 210.0,
        (2024, "East"): 20.0,
    }


def test_build_all_summaries_runs_the_catalogue(transactions: pd.DataFrame) -> None:
    run = build_all_summaries(transactions)
    assert run.ok
    assert list(run.results) == list(SUMMARIES)


def test_one_failing_summary_does_not_stop_the_others(transactions: pd.DataFrame) -> None:
    broken = transactions.drop(columns=["city"])
    run = build_all_summaries(broken)
    assert set(run.failures) == {"transactions_by_city"}
    assert "MissingColumnsError" in run.failures["transactions_by_city"]
    assert len(run.results) == len(SUMMARIES) - 1


def test_null_policy_is_passed_to_sales_summaries(transactions: pd.DataFrame) -> None:
    with_null = transactions.copy()
    with_null.loc[0, "sales"] = float("nan")
    run = build_all_summaries(with_null, null_policy="raise")
    assert "sales_by_state" in run.failures
    assert "transactions_by_city" in run.results
