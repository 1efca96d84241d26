"""Unit tests for CLI command handling."""

from __future__ import annotations

from cli.main import main
from tests.fixture_paths import fixture_uri

_ECDC_SOURCE = fixture_uri("ecdc/case_distribution.json")


def test_cli_summary_lists_regions(capsys) -> None:
    """CLI summary should print one row per region in first-seen order."""
    exit_code = main(["summary", _ECDC_SOURCE])
    captured = capsys.readouterr()

    rows = captured.out.strip().splitlines()
    assert exit_code == 0
    assert rows[0] == "Aland_Islands\tAland Islands\t3\t29789\t15"
    assert rows[1] == "Spain\tSpain\t2\t46723749\t1"
    assert rows[2].endswith("\t1\t-\t1")
    assert "skipped_rows=1" in captured.err


def test_cli_metric_prints_cumulative_values(capsys) -> None:
    """CLI metric should print position and value per point."""
    exit_code = main(
        ["metric", _ECDC_SOURCE, "--region", "Aland Islands", "--kind", "cumulative"]
    )
    output = capsys.readouterr().out.strip().splitlines()

    assert exit_code == 0
    assert output == ["1\t5.0000", "2\t13.0000", "3\t15.0000"]


def test_cli_metric_reports_missing_population(capsys) -> None:
    """Per-capita metrics for regions without a population exit non-zero."""
    exit_code = main(
        [
            "metric",
            _ECDC_SOURCE,
            "--region",
            "Cases_on_an_international_conveyance_Japan",
            "--kind",
            "cumulative",
            "--per-capita",
        ]
    )

    assert exit_code == 1
    assert "population unavailable" in capsys.readouterr().err


def test_cli_metric_unknown_region_fails(capsys) -> None:
    """Unknown regions are reported on stderr."""
    exit_code = main(["metric", _ECDC_SOURCE, "--region", "Narnia", "--kind", "cumulative"])

    assert exit_code == 1
    assert "Narnia" in capsys.readouterr().err


def test_cli_render_writes_chart_to_output_dir(tmp_path, capsys) -> None:
    """CLI render should write the default chart file name under output dir."""
    output_dir = tmp_path / "charts"

    exit_code = main(
        [
            "--output-dir",
            str(output_dir),
            "render",
            _ECDC_SOURCE,
            "--region",
            "Spain",
            "--average-days",
            "2",
        ]
    )
    output = capsys.readouterr().out.strip()

    assert exit_code == 0
    assert output == str(output_dir.resolve() / "total.png")
    assert (output_dir / "total.png").exists()


def test_cli_missing_source_reports_error(tmp_path, capsys) -> None:
    """Ingest failures surface as a one-line error with exit code 1."""
    exit_code = main(["summary", str(tmp_path / "missing.json")])

    assert exit_code == 1
    assert "error: " in capsys.readouterr().err


def test_cli_summary_reports_latest_running_total(capsys) -> None:
    """Daily-report totals print the newest running total."""
    exit_code = main(["summary", fixture_uri("daily_reports/03-22-2020.csv")])

    rows = capsys.readouterr().out.strip().splitlines()
    assert exit_code == 0
    assert "Spain\tSpain\t2\t-\t1772" in rows


def test_cli_render_average_days_updates_spec_titles(monkeypatch, tmp_path, capsys) -> None:
    """Overriding the window also updates templated panel titles."""
    rendered: dict[str, list] = {}

    def _fake_render_chart(panels, output_path):
        rendered["panels"] = list(panels)
        return output_path

    monkeypatch.setattr("charts.epi_sdk.render_chart", _fake_render_chart)

    exit_code = main(
        [
            "render",
            _ECDC_SOURCE,
            "--spec",
            fixture_uri("chart_spec/valid_spec.yaml"),
            "--average-days",
            "5",
            "--output",
            str(tmp_path / "out.png"),
        ]
    )

    assert exit_code == 0
    assert rendered["panels"][1].title == "Daily Deaths per 100K, Averaged over 5 days"
