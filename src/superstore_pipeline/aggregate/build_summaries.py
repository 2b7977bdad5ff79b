"""Summary aggregation functions.

Functions in this module build one summary table per analysis question from
the prepared transaction table. Each summary is computed independently from
the same input; `build_all_summaries` runs the whole catalogue and isolates
failures so that one broken summary does not prevent the others.

Expectations:
- Input: a pandas DataFrame with normalized columns such as `state`, `city`,
  `segment`, `region`, `customer_id`, `sales` and the calendar attributes
  `order_month`, `order_year`, `order_weekday`, `season`.
- Outputs: DataFrames with the key columns first, documented on each function.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

import pandas as pd

from superstore_pipeline.aggregate.primitives import (
    RATIO_UNDEFINED,
    NullPolicy,
    derive_ratio,
    group_and_count,
    group_and_sum,
    share_of_total,
    top_n,
)
from superstore_pipeline.models import RepeatCustomerStats

log = logging.getLogger(__name__)

CUSTOMER_KEYS = ["customer_id", "customer_name"]


# =========================================================
# BRANCH ANALYSIS
# =========================================================

def sales_by_state(pdf: pd.DataFrame, null_policy: NullPolicy | str = NullPolicy.ZERO) -> pd.DataFrame:
    """Return total sales per state, highest first.

    Returns:
        DataFrame with columns: `state`, `total_sales`.
    """
    out = group_and_sum(pdf, "state", "sales", "total_sales", null_policy)
    return top_n(out, len(out), "total_sales")


def transactions_by_city(pdf: pd.DataFrame) -> pd.DataFrame:
    """Return the number of transactions per city, busiest first.

    Returns:
        DataFrame with columns: `city`, `transaction_count`.
    """
    out = group_and_count(pdf, "city", "transaction_count")
    return top_n(out, len(out), "transaction_count")


# =========================================================
# PRODUCT LINES
# =========================================================

def sales_by_category(pdf: pd.DataFrame, null_policy: NullPolicy | str = NullPolicy.ZERO) -> pd.DataFrame:
    """Return total sales per category: `category`, `total_sales`."""
    out = group_and_sum(pdf, "category", "sales", "total_sales", null_policy)
    return top_n(out, len(out), "total_sales")


def sales_by_sub_category(pdf: pd.DataFrame, null_policy: NullPolicy | str = NullPolicy.ZERO) -> pd.DataFrame:
    """Return total sales per sub-category: `sub_category`, `total_sales`."""
    out = group_and_sum(pdf, "sub_category", "sales", "total_sales", null_policy)
    return top_n(out, len(out), "total_sales")


# =========================================================
# CUSTOMER SEGMENTS
# =========================================================

def segment_by_region(pdf: pd.DataFrame) -> pd.DataFrame:
    """Return the segment mix of transactions within each region.

    Returns:
        DataFrame with columns: `region`, `segment`, `transaction_count`,
        `share_pct` (percentage of the region's transactions). Rows are
        ordered by region, then by descending count.
    """
    counts = group_and_count(pdf, ["region", "segment"], "transaction_count")
    totals = counts.groupby("region", dropna=False, observed=True)["transaction_count"].transform("sum")
    counts = counts.assign(region_total=totals)
    counts = derive_ratio(counts, "transaction_count", "region_total", "share_pct")
    counts["share_pct"] = (counts["share_pct"] * 100.0).round(1)

    parts = [
        top_n(group, len(group), "transaction_count")
        for _, group in counts.groupby("region", sort=True, dropna=False, observed=True)
    ]
    if not parts:
        return counts.drop(columns="region_total")
    return pd.concat(parts, ignore_index=True).drop(columns="region_total")


def sales_by_segment(pdf: pd.DataFrame, null_policy: NullPolicy | str = NullPolicy.ZERO) -> pd.DataFrame:
    """Return total sales per segment: `segment`, `total_sales`."""
    out = group_and_sum(pdf, "segment", "sales", "total_sales", null_policy)
    return top_n(out, len(out), "total_sales")


def transactions_by_segment(pdf: pd.DataFrame) -> pd.DataFrame:
    """Return transaction counts per segment: `segment`, `transaction_count`."""
    out = group_and_count(pdf, "segment", "transaction_count")
    return top_n(out, len(out), "transaction_count")


# =========================================================
# CUSTOMER BEHAVIOUR
# =========================================================

def customer_frequency(pdf: pd.DataFrame) -> pd.DataFrame:
    """Return how many transactions each customer made, most frequent first.

    Returns:
        DataFrame with columns: `customer_id`, `customer_name`,
        `num_transactions`.
    """
    out = group_and_count(pdf, CUSTOMER_KEYS, "num_transactions")
    return top_n(out, len(out), "num_transactions")


def repeat_rate(counts: Iterable[int]) -> float:
    """Return the percentage of customers with more than one transaction.

    `[3, 1, 2, 1]` → 50.0. An empty input yields `RATIO_UNDEFINED`.
    """
    values = [int(c) for c in counts]
    if not values:
        return RATIO_UNDEFINED
    return sum(1 for c in values if c > 1) / len(values) * 100.0


def repeat_customers(pdf: pd.DataFrame) -> pd.DataFrame:
    """Return a one-row table with repeat customer statistics.

    Returns:
        DataFrame with columns: `total_customers`, `repeat_customers`,
        `repeat_rate_pct`.
    """
    freq = customer_frequency(pdf)
    counts = freq["num_transactions"].tolist()
    stats = RepeatCustomerStats(
        total_customers=len(counts),
        repeat_customers=sum(1 for c in counts if c > 1),
        repeat_rate_pct=repeat_rate(counts),
    )
    return pd.DataFrame([stats.model_dump()])


def customer_avg_value(pdf: pd.DataFrame, null_policy: NullPolicy | str = NullPolicy.ZERO) -> pd.DataFrame:
    """Return each customer's average transaction value, highest first.

    Returns:
        DataFrame with columns: `customer_id`, `customer_name`, `total_sales`,
        `num_transactions`, `avg_transaction_value`.
    """
    sales = group_and_sum(pdf, CUSTOMER_KEYS, "sales", "total_sales", null_policy)
    counts = group_and_count(pdf, CUSTOMER_KEYS, "num_transactions")
    out = sales.merge(counts, on=CUSTOMER_KEYS, how="left", validate="one_to_one")
    out = derive_ratio(out, "total_sales", "num_transactions", "avg_transaction_value")
    return top_n(out, len(out), "avg_transaction_value")


# =========================================================
# TIME-BASED
# =========================================================

def sales_by_weekday(pdf: pd.DataFrame, null_policy: NullPolicy | str = NullPolicy.ZERO) -> pd.DataFrame:
    """Return total sales per weekday in Sun..Sat order: `order_weekday`, `total_sales`."""
    return group_and_sum(pdf, "order_weekday", "sales", "total_sales", null_policy)


def sales_by_month(pdf: pd.DataFrame, null_policy: NullPolicy | str = NullPolicy.ZERO) -> pd.DataFrame:
    """Return total sales per calendar month in Jan..Dec order: `order_month`, `total_sales`."""
    return group_and_sum(pdf, "order_month", "sales", "total_sales", null_policy)


def sales_by_season(pdf: pd.DataFrame, null_policy: NullPolicy | str = NullPolicy.ZERO) -> pd.DataFrame:
    """Return total sales per season with each season's share of the total.

    Returns:
        DataFrame with columns: `season`, `total_sales`, `percentage`
        (rounded to one decimal).
    """
    out = group_and_sum(pdf, "season", "sales", "total_sales", null_policy)
    return share_of_total(out, "total_sales", "percentage", decimals=1)


def region_year_sales(pdf: pd.DataFrame, null_policy: NullPolicy | str = NullPolicy.ZERO) -> pd.DataFrame:
    """Return total sales per year and region: `order_year`, `region`, `total_sales`."""
    return group_and_sum(pdf, ["order_year", "region"], "sales", "total_sales", null_policy)


# =========================================================
# CATALOGUE
# =========================================================

SUMMARIES: dict[str, Callable[..., pd.DataFrame]] = {
    "sales_by_state": sales_by_state,
    "transactions_by_city": transactions_by_city,
    "sales_by_category": sales_by_category,
    "sales_by_sub_category": sales_by_sub_category,
    "segment_by_region": segment_by_region,
    "sales_by_segment": sales_by_segment,
    "transactions_by_segment": transactions_by_segment,
    "customer_frequency": customer_frequency,
    "repeat_customers": repeat_customers,
    "customer_avg_value": customer_avg_value,
    "sales_by_weekday": sales_by_weekday,
    "sales_by_month": sales_by_month,
    "sales_by_season": sales_by_season,
    "region_year_sales": region_year_sales,
}

# summaries whose measure is a sum of sales and therefore take a null policy
_SALES_SUMMARIES = {
    "sales_by_state",
    "sales_by_category",
    "sales_by_sub_category",
    "sales_by_segment",
    "customer_avg_value",
    "sales_by_weekday",
    "sales_by_month",
    "sales_by_season",
    "region_year_sales",
}


@dataclass
class SummaryRun:
    """Outcome of `build_all_summaries`.

    Attributes:
        results: Summary tables keyed by catalogue name.
        failures: Error message per catalogue name that raised.
    """
    results: dict[str, pd.DataFrame] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def build_all_summaries(
    pdf: pd.DataFrame,
    null_policy: NullPolicy | str = NullPolicy.ZERO,
    names: Iterable[str] | None = None,
) -> SummaryRun:
    """Compute every summary of the catalogue, each in isolation.

    Args:
        pdf: Prepared transaction table.
        null_policy: Null policy applied to sales sums.
        names: Optional subset of catalogue names (default: all, in order).

    Returns:
        `SummaryRun` with the tables that succeeded and the failures.
    """
    run = SummaryRun()
    for name in names or SUMMARIES:
        builder = SUMMARIES[name]
        try:
            if name in _SALES_SUMMARIES:
                run.results[name] = builder(pdf, null_policy=null_policy)
            else:
                run.results[name] = builder(pdf)
            log.info("Summary %s: %d rows", name, len(run.results[name]))
        except Exception as e:
            log.exception("Summary %s failed", name)
            run.failures[name] = f"{type(e).__name__}: {e}"
    return run
