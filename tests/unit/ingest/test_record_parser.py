"""Unit tests for raw record parsing."""

from __future__ import annotations

from datetime import datetime

import pytest

from core.errors import EpiIngestError
from core.types import RowDiagnostic
from ingest.record_parser import (
    day_offset,
    detect_row_shape,
    parse_day_month_year_rows,
    parse_population,
    parse_timestamp,
    parse_timestamp_rows,
    region_display_name,
)


def _ecdc_row(**overrides: str) -> dict[str, str]:
    row = {
        "day": "1",
        "month": "1",
        "year": "2020",
        "cases": "3",
        "deaths": "1",
        "countriesAndTerritories": "United_Kingdom",
        "popData2018": "66488991",
    }
    row.update(overrides)
    return row


_DAILY_HEADER = ["Province/State", "Country/Region", "Last Update", "Confirmed", "Deaths", "Recovered"]


def test_day_offset_uses_month_table() -> None:
    """Day offset should add the cumulative days before the month."""
    assert [day_offset(1, 1), day_offset(1, 3), day_offset(31, 12)] == [1, 61, 367]


def test_day_offset_rejects_out_of_range_month() -> None:
    """Months outside 1..12 are row failures."""
    with pytest.raises(ValueError):
        day_offset(1, 13)


def test_parse_day_month_year_rows_filters_target_year() -> None:
    """Only rows from the configured year should be emitted."""
    diagnostics: list[RowDiagnostic] = []
    rows = [_ecdc_row(), _ecdc_row(year="2019"), _ecdc_row(day="2", year="2021")]

    records = list(parse_day_month_year_rows(rows, 2020, diagnostics))

    assert [record.position for record in records] == [1] and diagnostics == []


def test_parse_day_month_year_rows_keeps_raw_region_key() -> None:
    """Region key stays unnormalized while display name uses spaces."""
    records = list(parse_day_month_year_rows([_ecdc_row()], 2020, []))

    assert records[0].region_key == "United_Kingdom"
    assert region_display_name(records[0].region_key) == "United Kingdom"


def test_parse_day_month_year_rows_skips_bad_numbers_with_diagnostic() -> None:
    """Unparseable counts skip only that row and emit a diagnostic."""
    diagnostics: list[RowDiagnostic] = []
    rows = [_ecdc_row(deaths="x"), _ecdc_row(day="2"), _ecdc_row(month="13")]

    records = list(parse_day_month_year_rows(rows, 2020, diagnostics, source="ecdc"))

    assert [record.position for record in records] == [2]
    assert [(item.source, item.row_number) for item in diagnostics] == [("ecdc", 1), ("ecdc", 3)]


def test_parse_day_month_year_rows_population_fails_soft() -> None:
    """Bad population text becomes unknown instead of skipping the row."""
    records = list(parse_day_month_year_rows([_ecdc_row(popData2018="")], 2020, []))

    assert len(records) == 1 and records[0].population is None


def test_parse_day_month_year_rows_skips_missing_fields() -> None:
    """Rows lacking a required field are reported, not fatal."""
    row = _ecdc_row()
    del row["cases"]
    diagnostics: list[RowDiagnostic] = []

    records = list(parse_day_month_year_rows([row], 2020, diagnostics))

    assert records == [] and "cases" in diagnostics[0].reason


def test_parse_population_rejects_non_positive_values() -> None:
    """Zero and negative populations are unknown."""
    assert [parse_population("0"), parse_population("-5"), parse_population("12")] == [None, None, 12]


def test_parse_timestamp_accepts_supported_layouts() -> None:
    """ISO and US slash layouts should parse to the same instant."""
    expected = datetime(2020, 3, 22, 23, 45)

    parsed = [
        parse_timestamp("2020-03-22T23:45:00"),
        parse_timestamp("2020-03-22 23:45:00"),
        parse_timestamp("3/22/2020 23:45"),
        parse_timestamp("3/22/20 23:45"),
    ]

    assert parsed == [expected] * 4


def test_parse_timestamp_rows_skips_wrong_field_count() -> None:
    """Rows whose width differs from the header are skipped."""
    diagnostics: list[RowDiagnostic] = []
    rows = [
        _DAILY_HEADER,
        ["", "Italy", "2020-03-22T23:45:00", "59138", "5476", "7024"],
        ["", "Atlantis", "2020-03-22T23:45:00", "1"],
    ]

    records = list(parse_timestamp_rows(rows, diagnostics))

    assert [record.region_key for record in records] == ["Italy"]
    assert diagnostics[0].row_number == 3


def test_parse_timestamp_rows_reads_subregion_and_blank_counts() -> None:
    """Province becomes the subregion and blank counts read as zero."""
    rows = [_DAILY_HEADER, ["Hubei", "China", "2020-03-22T09:43:06", "67800", "3144", ""]]

    record = next(parse_timestamp_rows(rows, []))

    assert (record.subregion, record.recovered, record.deaths) == ("Hubei", 0, 3144)


def test_parse_timestamp_rows_skips_bad_timestamp() -> None:
    """An unparseable timestamp is a row-level failure."""
    diagnostics: list[RowDiagnostic] = []
    rows = [_DAILY_HEADER, ["", "Italy", "yesterday", "1", "1", "1"]]

    records = list(parse_timestamp_rows(rows, diagnostics))

    assert records == [] and "timestamp" in diagnostics[0].reason


def test_parse_timestamp_rows_rejects_header_without_required_columns() -> None:
    """Missing required columns make the whole payload unparseable."""
    rows = [["Country/Region", "Last Update"], ["Italy", "2020-03-22"]]

    with pytest.raises(EpiIngestError):
        list(parse_timestamp_rows(rows, []))


def test_parse_timestamp_rows_marks_running_totals() -> None:
    """Daily-report counts are flagged as running totals."""
    rows = [_DAILY_HEADER, ["", "Spain", "2020-03-22 23:45:00", "28768", "1772", "2575"]]

    record = next(parse_timestamp_rows(rows, []))

    assert record.running_totals
    assert not next(parse_day_month_year_rows([_ecdc_row()], 2020, [])).running_totals


def test_parse_day_month_year_rows_skips_non_object_rows() -> None:
    """JSON rows that are not objects are skipped with a diagnostic."""
    diagnostics: list[RowDiagnostic] = []
    rows = [_ecdc_row(), ["garbage"], "x"]

    records = list(parse_day_month_year_rows(rows, 2020, diagnostics))

    assert len(records) == 1
    assert [diagnostic.row_number for diagnostic in diagnostics] == [2, 3]
    assert diagnostics[0].reason == "expected a JSON object, got list"


def test_parse_timestamp_rows_unresolved_column_raises_ingest_error(monkeypatch) -> None:
    """An unresolved required column is reported as an ingest error."""

    def _resolve_without_timestamp(header, source):
        return {
            "country": 1,
            "province": 0,
            "timestamp": None,
            "confirmed": 3,
            "deaths": 4,
            "recovered": 5,
        }

    monkeypatch.setattr(
        "ingest.record_parser._resolve_timestamp_columns", _resolve_without_timestamp
    )
    rows = [_DAILY_HEADER, ["", "Italy", "2020-03-22", "1", "1", "1"]]

    with pytest.raises(EpiIngestError):
        list(parse_timestamp_rows(rows, []))


def test_detect_row_shape_selects_layout() -> None:
    """Shape detection should match either supported layout."""
    assert detect_row_shape(_ecdc_row().keys()) == "day_month_year"
    assert detect_row_shape(["Country_Region", "Last_Update"]) == "timestamp"


def test_detect_row_shape_rejects_unknown_layout() -> None:
    """Unknown layouts are systemic failures."""
    with pytest.raises(EpiIngestError):
        detect_row_shape(["date", "value"])
