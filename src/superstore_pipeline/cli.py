"""Command-line interface for orchestrating the pipeline.

Provides subcommands: `clean`, `summaries`, `charts`, and `all`. Each command
is implemented as a `cmd_*` function that accepts an argparse namespace.
Every command starts from the CSV: there is no persisted intermediate state.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from superstore_pipeline.config import Settings, get_settings
from superstore_pipeline.logging_config import configure_logging

# INGEST / CLEAN
from superstore_pipeline.ingest.load_csv import load_transactions_ddf
from superstore_pipeline.clean.transform import prepare_transactions
from superstore_pipeline.clean.validate import validate_transactions

# SUMMARIES / CHARTS
from superstore_pipeline.aggregate.build_summaries import SummaryRun, build_all_summaries
from superstore_pipeline.render.charts import render_all

log = logging.getLogger(__name__)

# summaries logged in full rather than truncated to top N
_SHOW_ALL = {
    "sales_by_category",
    "segment_by_region",
    "sales_by_segment",
    "transactions_by_segment",
    "repeat_customers",
    "sales_by_weekday",
    "sales_by_month",
    "sales_by_season",
    "region_year_sales",
}


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _positive_int(value: str) -> int:
    """argparse type for `--top-n`: a strictly positive integer."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def _resolve(args: argparse.Namespace) -> tuple[Settings, Path, Path, int]:
    """Merge CLI overrides over environment settings."""
    s = get_settings()
    input_csv = args.input if args.input is not None else s.input_csv
    out_dir = getattr(args, "out_dir", None)
    top_n = getattr(args, "top_n", None)
    return (
        s,
        Path(input_csv),
        Path(out_dir if out_dir is not None else s.visuals_dir),
        top_n if top_n is not None else s.top_n,
    )


def _prepare(args: argparse.Namespace) -> pd.DataFrame:
    """Load, clean and validate the input; return the prepared table."""
    s, input_csv, _, _ = _resolve(args)

    ddf = load_transactions_ddf(input_csv)
    pdf = prepare_transactions(ddf, on_error=s.date_errors)

    good, issues = validate_transactions(pdf)
    for issue in issues[:20]:
        log.warning("Row %s failed validation: %s", issue.row, "; ".join(issue.errors))
    if len(issues) > 20:
        log.warning("... %d more rows failed validation", len(issues) - 20)

    log.info("Prepared %d transactions (valid=%d invalid=%d)", len(pdf), good, len(issues))
    return pdf


def _log_summaries(run: SummaryRun, top_n: int) -> None:
    for name, table in run.results.items():
        shown = table if name in _SHOW_ALL else table.head(top_n)
        log.info("%s (%d rows)\n%s", name, len(table), shown.to_string(index=False))


def _summaries(args: argparse.Namespace, pdf: pd.DataFrame) -> SummaryRun:
    s, _, _, top_n = _resolve(args)
    run = build_all_summaries(pdf, null_policy=s.null_sales_policy)
    _log_summaries(run, top_n)
    return run


# --------------------------------------------------
# COMMANDS
# --------------------------------------------------
def cmd_clean(args: argparse.Namespace) -> int:
    """Load and clean the input, reporting parse and validation problems."""
    _prepare(args)
    return 0


def cmd_summaries(args: argparse.Namespace) -> int:
    """Compute and log every summary table.

    Returns:
        Exit status: 1 if any summary failed.
    """
    run = _summaries(args, _prepare(args))
    for name, err in run.failures.items():
        log.error("Summary %s failed: %s", name, err)
    return 0 if run.ok else 1


def cmd_charts(args: argparse.Namespace) -> int:
    """Compute summaries and render their charts into the output directory.

    Returns:
        Exit status: 1 if any summary or chart failed.
    """
    _, _, out_dir, top_n = _resolve(args)
    run = _summaries(args, _prepare(args))
    rendered = render_all(run.results, out_dir, top_n)

    for name, err in {**run.failures, **rendered.failures}.items():
        log.error("%s failed: %s", name, err)
    log.info("Wrote %d chart(s) to %s", len(rendered.written), out_dir)
    return 0 if run.ok and rendered.ok else 1


def cmd_all(args: argparse.Namespace) -> int:
    """Convenience: clean → summaries → charts in one pass."""
    return cmd_charts(args)


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    The returned parser has subcommands `clean`, `summaries`, `charts` and
    `all`. Options left unset fall back to the environment settings.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="superstore_pipeline")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_clean = sub.add_parser("clean")
    p_clean.add_argument("--input", type=Path, default=None)

    p_sum = sub.add_parser("summaries")
    p_sum.add_argument("--input", type=Path, default=None)
    p_sum.add_argument("--top-n", type=_positive_int, default=None)

    for name in ("charts", "all"):
        p_run = sub.add_parser(name)
        p_run.add_argument("--input", type=Path, default=None)
        p_run.add_argument("--out-dir", type=Path, default=None)
        p_run.add_argument("--top-n", type=_positive_int, default=None)

    return p


COMMANDS = {
    "clean": cmd_clean,
    "summaries": cmd_summaries,
    "charts": cmd_charts,
    "all": cmd_all,
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_path, settings.log_level)

    command = COMMANDS.get(args.cmd)
    if command is None:
        raise SystemExit(2)
    raise SystemExit(command(args))


if __name__ == "__main__":
    main()
