"""Exception taxonomy for the pipeline.

Input errors (`InputFileError`, `MissingColumnsError`) are fatal for a run.
The rest are raised by individual steps and, for summaries and charts, are
caught and reported per step so that independent outputs still complete.
"""

from __future__ import annotations

from typing import Any, Iterable


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class InputFileError(PipelineError, OSError):
    """The input CSV is missing or cannot be read."""


class MissingColumnsError(PipelineError, KeyError):
    """A table lacks columns required by an operation."""

    def __init__(self, missing: Iterable[str], where: str = "table") -> None:
        self.missing = sorted(set(missing))
        self.where = where
        super().__init__(f"{where} is missing required columns: {', '.join(self.missing)}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class DateParseError(PipelineError, ValueError):
    """One or more values matched none of the candidate date formats.

    Attributes:
        issues: per-row `DateParseIssue` records.
    """

    def __init__(self, issues: list[Any], column: str) -> None:
        self.issues = issues
        self.column = column
        preview = ", ".join(f"row {i.row}: {i.value!r}" for i in issues[:5])
        more = f" (+{len(issues) - 5} more)" if len(issues) > 5 else ""
        super().__init__(
            f"{len(issues)} unparseable value(s) in '{column}': {preview}{more}"
        )


class UnknownMonthError(PipelineError, ValueError):
    """A month value is not part of the season lookup."""


class ZeroDenominatorError(PipelineError, ZeroDivisionError):
    """A ratio was requested over a zero or missing denominator."""


class NullMeasureError(PipelineError, ValueError):
    """A measure column contains nulls under the `raise` null policy."""
