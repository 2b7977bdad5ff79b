from __future__ import annotations

from pathlib import Path

import pytest

from superstore_pipeline import cli
from superstore_pipeline.render import charts


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LOG_PATH", str(tmp_path / "logs" / "pipeline.log"))
    monkeypatch.setenv("VISUALS_DIR", str(tmp_path / "visuals"))
    for name in ("SUPERSTORE_CSV", "TOP_N", "NULL_SALES_POLICY", "DATE_ERRORS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_summaries_command_succeeds(superstore_csv) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["summaries", "--input", str(superstore_csv)])
    assert exc.value.code == 0


def test_charts_command_renders_into_out_dir(superstore_csv, tmp_path, monkeypatch) -> None:
    written: list[Path] = []
    monkeypatch.setattr(
        charts, "save_chart", lambda chart, path, scale_factor=2.0: written.append(Path(path)) or Path(path)
    )
    out_dir = tmp_path / "out"
    with pytest.raises(SystemExit) as exc:
        cli.main(["charts", "--input", str(superstore_csv), "--out-dir", str(out_dir), "--top-n", "3"])
    assert exc.value.code == 0
    assert {p.parent for p in written} == {out_dir}
    assert len(written) == len(charts.CHARTS)


def test_missing_input_is_fatal(tmp_path) -> None:
    from superstore_pipeline.errors import InputFileError

    with pytest.raises(InputFileError):
        cli.main(["clean", "--input", str(tmp_path / "missing.csv")])


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


@pytest.mark.parametrize("value", ["0", "-1", "ten"])
def test_top_n_must_be_a_positive_integer(value: str) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.build_parser().parse_args(["charts", "--top-n", value])
    assert exc.value.code == 2


def test_top_n_override_and_fallback(monkeypatch) -> None:
    monkeypatch.setenv("TOP_N", "7")
    parser = cli.build_parser()

    _, _, _, top_n = cli._resolve(parser.parse_args(["charts", "--top-n", "1"]))
    assert top_n == 1

    _, _, _, top_n = cli._resolve(parser.parse_args(["charts"]))
    assert top_n == 7

    _, _, _, top_n = cli._resolve(parser.parse_args(["clean"]))
    assert top_n == 7
