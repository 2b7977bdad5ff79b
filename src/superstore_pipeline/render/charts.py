"""Altair chart builders and PNG export.

Each `build_*_chart` function turns one summary table into an `alt.Chart`
without touching the filesystem. `render_all` maps summaries to their chart
and file name, saves them under the output directory and, like
`build_all_summaries`, isolates failures per chart.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import altair as alt
import pandas as pd

from superstore_pipeline.aggregate.primitives import require_columns, top_n
from superstore_pipeline.aggregate.season_lookup import MONTHS, SEASONS
from superstore_pipeline.clean.dates import WEEKDAYS

log = logging.getLogger(__name__)

WIDTH = 640
HEIGHT = 420

SEASON_COLORS = {
    "Fall": "orange",
    "Winter": "maroon",
    "Spring": "darkgreen",
    "Summer": "steelblue",
}


def _plain(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with categoricals as plain strings for serialization."""
    out = df.copy()
    for col in out.columns:
        if isinstance(out[col].dtype, pd.CategoricalDtype):
            out[col] = out[col].astype(str)
    return out


def _top_bar(summary: pd.DataFrame, key: str, measure: str, n: int, title: str,
             x_title: str, y_title: str, color: str) -> alt.Chart:
    require_columns(summary, [key, measure], "summary")
    data = _plain(top_n(summary, n, measure))
    return (
        alt.Chart(data, title=title)
        .mark_bar(color=color)
        .encode(
            y=alt.Y(f"{key}:N", sort="-x", title=x_title),
            x=alt.X(f"{measure}:Q", title=y_title),
            tooltip=[f"{key}:N", alt.Tooltip(f"{measure}:Q", format=",.2f")],
        )
        .properties(width=WIDTH, height=HEIGHT)
    )


def build_state_sales_chart(summary: pd.DataFrame, n: int = 10) -> alt.Chart:
    """Top N states by total sales (horizontal bars)."""
    return _top_bar(summary, "state", "total_sales", n, f"Top {n} States by Total Sales",
                    "State", "Sales", "steelblue")


def build_city_transactions_chart(summary: pd.DataFrame, n: int = 10) -> alt.Chart:
    """Top N cities by transaction count (horizontal bars)."""
    return _top_bar(summary, "city", "transaction_count", n,
                    f"Top {n} Cities by Transaction Count",
                    "City", "Number of Transactions", "darkgreen")


def build_segment_region_chart(summary: pd.DataFrame) -> alt.Chart:
    """Percentage-stacked bars of the segment mix per region."""
    require_columns(summary, ["region", "segment", "transaction_count"], "summary")
    return (
        alt.Chart(_plain(summary), title="Customer Segment Distribution by Region")
        .mark_bar()
        .encode(
            x=alt.X("region:N", title="Region"),
            y=alt.Y(
                "transaction_count:Q",
                stack="normalize",
                axis=alt.Axis(format="%"),
                title="Percentage of Transactions",
            ),
            color=alt.Color("segment:N", title="Customer Segment"),
            tooltip=["region:N", "segment:N", "transaction_count:Q"],
        )
        .properties(width=WIDTH, height=HEIGHT)
    )


def _calendar_line(summary: pd.DataFrame, key: str, order: tuple[str, ...],
                   title: str, x_title: str, color: str) -> alt.Chart:
    require_columns(summary, [key, "total_sales"], "summary")
    return (
        alt.Chart(_plain(summary), title=title)
        .mark_line(color=color, point=alt.OverlayMarkDef(color=color, size=40))
        .encode(
            x=alt.X(f"{key}:O", sort=list(order), title=x_title),
            y=alt.Y("total_sales:Q", title="Total Sales", axis=alt.Axis(format=",.0f")),
            tooltip=[f"{key}:O", alt.Tooltip("total_sales:Q", format=",.2f")],
        )
        .properties(width=WIDTH, height=HEIGHT)
    )


def build_weekday_sales_chart(summary: pd.DataFrame) -> alt.Chart:
    """Total sales by weekday (line with points, Sun..Sat)."""
    return _calendar_line(summary, "order_weekday", WEEKDAYS, "Daily/Weekly Patterns",
                          "Day of the Week", "#1f77b4")


def build_month_sales_chart(summary: pd.DataFrame) -> alt.Chart:
    """Total sales by month (line with points, Jan..Dec)."""
    return _calendar_line(summary, "order_month", MONTHS, "Sales Trend by Month",
                          "Month", "#2ca02c")


def _pie_label(season: str, percentage: float) -> str:
    share = "n/a" if pd.isna(percentage) else f"{percentage:.1f}%"
    return f"{season}\n{share}"


def build_season_pie_chart(summary: pd.DataFrame) -> alt.Chart:
    """Pie of sales by season labelled with the season and its percentage.

    Seasons without a known percentage are labelled "n/a".
    """
    require_columns(summary, ["season", "total_sales", "percentage"], "summary")
    data = _plain(summary)
    data["label"] = [_pie_label(s, p) for s, p in zip(data["season"], data["percentage"])]

    base = alt.Chart(data, title="Sales Distribution by Season").encode(
        theta=alt.Theta("total_sales:Q", stack=True),
        color=alt.Color(
            "season:N",
            scale=alt.Scale(domain=list(SEASONS), range=[SEASON_COLORS[s] for s in SEASONS]),
            legend=None,
        ),
        order=alt.Order("season:N"),
    )
    pie = base.mark_arc(outerRadius=170)
    labels = base.mark_text(radius=110, color="white", fontSize=13, lineBreak="\n").encode(
        text="label:N"
    )
    return (pie + labels).properties(width=HEIGHT, height=HEIGHT)


def build_region_year_chart(summary: pd.DataFrame) -> alt.Chart:
    """Total sales per year, one line per region."""
    require_columns(summary, ["order_year", "region", "total_sales"], "summary")
    return (
        alt.Chart(_plain(summary), title="Sales Trends Across Regions Over the Years")
        .mark_line(point=True, strokeWidth=2.5)
        .encode(
            x=alt.X("order_year:O", title="Year"),
            y=alt.Y("total_sales:Q", title="Total Sales", axis=alt.Axis(format=",.0f")),
            color=alt.Color("region:N", title="Region"),
            tooltip=["order_year:O", "region:N", alt.Tooltip("total_sales:Q", format=",.2f")],
        )
        .properties(width=WIDTH, height=HEIGHT)
    )


# summary name -> (chart builder, file name, takes top_n)
CHARTS: dict[str, tuple[Callable[..., Any], str, bool]] = {
    "sales_by_state": (build_state_sales_chart, "sales_by_state.png", True),
    "transactions_by_city": (build_city_transactions_chart, "sales_by_city.png", True),
    "segment_by_region": (build_segment_region_chart, "segment_distribution_by_region.png", False),
    "sales_by_weekday": (build_weekday_sales_chart, "sales_by_weekday.png", False),
    "sales_by_month": (build_month_sales_chart, "sales_by_month.png", False),
    "sales_by_season": (build_season_pie_chart, "sales_by_season_pie.png", False),
    "region_year_sales": (build_region_year_chart, "region_year_sales.png", False),
}


def save_chart(chart: Any, path: Path, scale_factor: float = 2.0) -> Path:
    """Write `chart` to `path`; the format follows the file suffix.

    PNG export goes through `vl-convert-python`.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".png":
        chart.save(str(path), scale_factor=scale_factor)
    else:
        chart.save(str(path))
    log.info("Saved chart: %s", path)
    return path


@dataclass
class RenderRun:
    """Outcome of `render_all`.

    Attributes:
        written: Output path per summary name.
        failures: Error message per summary name whose chart failed.
    """
    written: dict[str, Path] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def render_all(results: dict[str, pd.DataFrame], out_dir: Path, top_n_rows: int = 10) -> RenderRun:
    """Render and save one chart per available summary.

    Summaries missing from `results` (e.g. because they failed) are skipped
    with a warning.
    """
    run = RenderRun()
    for name, (builder, filename, ranked) in CHARTS.items():
        summary = results.get(name)
        if summary is None:
            log.warning("No summary %s available; skipping %s", name, filename)
            continue
        try:
            chart = builder(summary, top_n_rows) if ranked else builder(summary)
            run.written[name] = save_chart(chart, Path(out_dir) / filename)
        except Exception as e:
            log.exception("Chart %s failed", filename)
            run.failures[name] = f"{type(e).__name__}: {e}"
    return run
