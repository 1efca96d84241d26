"""Raw record parsing for epidemiological report rows.

This module turns decoded payload rows into lazy ``RawRecord`` streams.
Two layouts are supported: day/month/year report rows filtered to one
target year, and daily-report CSV rows carrying a combined timestamp.
Malformed rows are skipped with a diagnostic instead of aborting.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Iterator, Literal, Mapping, Sequence

from core.constants import (
    CASES_FIELD,
    CONFIRMED_FIELD,
    COUNTRY_FIELDS,
    DAY_FIELD,
    DEATHS_FIELD,
    DEATHS_REPORT_FIELD,
    FIRST_DAY_OF_MONTH,
    MONTH_FIELD,
    POPULATION_FIELD,
    PROVINCE_FIELDS,
    RECOVERED_FIELD,
    REGION_FIELD,
    TIMESTAMP_FIELDS,
    TIMESTAMP_FORMATS,
    YEAR_FIELD,
)
from core.errors import EpiIngestError
from core.logging_config import get_logger
from core.types import RawRecord, RowDiagnostic

_LOGGER = get_logger(__name__)

RowShape = Literal["day_month_year", "timestamp"]


def detect_row_shape(field_names: Iterable[str]) -> RowShape:
    """Choose the parser layout for a set of field names.

    Args:
        field_names: JSON keys or CSV header cells.

    Returns:
        ``day_month_year`` or ``timestamp``.

    Raises:
        EpiIngestError: If neither layout matches.
    """
    names = {name.strip() for name in field_names}
    if {DAY_FIELD, MONTH_FIELD, YEAR_FIELD} <= names:
        return "day_month_year"
    if names.intersection(TIMESTAMP_FIELDS):
        return "timestamp"
    raise EpiIngestError(
        f"Unrecognized report layout with fields {sorted(names)}. "
        f"Expected '{DAY_FIELD}/{MONTH_FIELD}/{YEAR_FIELD}' columns "
        f"or one of {list(TIMESTAMP_FIELDS)}."
    )


def region_display_name(region_key: str) -> str:
    """Return the display form of a raw region key."""
    return region_key.replace("_", " ")


def day_offset(day: int, month: int) -> int:
    """Resolve a day/month pair to a day offset from January 1st.

    Uses the fixed month table regardless of year.

    Raises:
        ValueError: If month is outside 1..12.
    """
    if not 1 <= month <= len(FIRST_DAY_OF_MONTH):
        raise ValueError(f"month {month} is outside 1..12")
    return day + FIRST_DAY_OF_MONTH[month - 1]


def parse_day_month_year_rows(
    rows: Iterable[object],
    target_year: int,
    diagnostics: list[RowDiagnostic],
    source: str = "payload",
) -> Iterator[RawRecord]:
    """Parse day/month/year report rows for one target year.

    Args:
        rows: Decoded JSON rows; rows that are not objects are skipped.
        target_year: Only rows with this year are retained.
        diagnostics: Receives one entry per skipped row.
        source: Source label for diagnostics.

    Yields:
        Parsed raw records in input order.
    """
    wanted_year = str(target_year)
    for row_number, row in enumerate(rows, 1):
        if not isinstance(row, Mapping):
            record_row_skip(diagnostics, source, row_number, non_object_reason(row))
            continue
        if str(row.get(YEAR_FIELD, "")).strip() != wanted_year:
            continue
        try:
            record = _parse_day_month_year_row(row)
        except ValueError as error:
            record_row_skip(diagnostics, source, row_number, str(error))
            continue
        yield record


def parse_timestamp_rows(
    rows: Iterable[Sequence[str]],
    diagnostics: list[RowDiagnostic],
    source: str = "payload",
) -> Iterator[RawRecord]:
    """Parse daily-report CSV rows with a combined timestamp column.

    Args:
        rows: Raw CSV rows; the first row is the header.
        diagnostics: Receives one entry per skipped row.
        source: Source label for diagnostics.

    Yields:
        Parsed raw records in input order.

    Raises:
        EpiIngestError: If the header lacks required columns.
    """
    row_iterator = iter(rows)
    header = next(row_iterator, None)
    if header is None:
        return
    columns = _resolve_timestamp_columns(header, source)
    for row_number, row in enumerate(row_iterator, 2):
        if len(row) != len(header):
            record_row_skip(
                diagnostics,
                source,
                row_number,
                f"expected {len(header)} fields, got {len(row)}",
            )
            continue
        try:
            record = _parse_timestamp_row(row, columns)
        except ValueError as error:
            record_row_skip(diagnostics, source, row_number, str(error))
            continue
        yield record


def parse_timestamp(raw_value: str) -> datetime:
    """Parse a daily-report timestamp in any supported layout.

    Raises:
        ValueError: If no supported layout matches.
    """
    text = raw_value.strip()
    for timestamp_format in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, timestamp_format)
        except ValueError:
            continue
    raise ValueError(f"unparseable timestamp '{raw_value}'")


def parse_population(raw_value: object) -> int | None:
    """Parse population text, failing soft to None for unknown values."""
    try:
        population = int(str(raw_value).strip())
    except ValueError:
        return None
    return population if population > 0 else None


def _parse_day_month_year_row(row: Mapping[str, Any]) -> RawRecord:
    region_key = _required_text(row, REGION_FIELD)
    day = _parse_int(_required_text(row, DAY_FIELD), DAY_FIELD)
    month = _parse_int(_required_text(row, MONTH_FIELD), MONTH_FIELD)
    return RawRecord(
        region_key=region_key,
        subregion=None,
        position=day_offset(day, month),
        confirmed=_parse_int(_required_text(row, CASES_FIELD), CASES_FIELD),
        deaths=_parse_int(_required_text(row, DEATHS_FIELD), DEATHS_FIELD),
        recovered=0,
        population=parse_population(row.get(POPULATION_FIELD, "")),
    )


def _parse_timestamp_row(row: Sequence[str], columns: Mapping[str, int | None]) -> RawRecord:
    region_key = row[_column(columns, "country")]
    if not region_key.strip():
        raise ValueError("empty region name")
    province_index = columns["province"]
    subregion = row[province_index].strip() if province_index is not None else ""
    recovered_index = columns["recovered"]
    return RawRecord(
        region_key=region_key,
        subregion=subregion or None,
        position=parse_timestamp(row[_column(columns, "timestamp")]),
        confirmed=_parse_count_cell(row[_column(columns, "confirmed")], CONFIRMED_FIELD),
        deaths=_parse_count_cell(row[_column(columns, "deaths")], DEATHS_REPORT_FIELD),
        recovered=(
            _parse_count_cell(row[recovered_index], RECOVERED_FIELD)
            if recovered_index is not None
            else 0
        ),
        running_totals=True,
    )


def _resolve_timestamp_columns(header: Sequence[str], source: str) -> dict[str, int | None]:
    """Map logical column names to header indexes."""
    positions = {name.strip(): index for index, name in enumerate(header)}
    columns = {
        "country": _first_index(positions, COUNTRY_FIELDS),
        "province": _first_index(positions, PROVINCE_FIELDS),
        "timestamp": _first_index(positions, TIMESTAMP_FIELDS),
        "confirmed": positions.get(CONFIRMED_FIELD),
        "deaths": positions.get(DEATHS_REPORT_FIELD),
        "recovered": positions.get(RECOVERED_FIELD),
    }
    missing = [
        name for name in ("country", "timestamp", "confirmed", "deaths") if columns[name] is None
    ]
    if missing:
        raise EpiIngestError(
            f"Daily report header in {source} is missing columns: {', '.join(missing)}. "
            "Check that the file is a daily-report CSV."
        )
    return columns


def _first_index(positions: Mapping[str, int], aliases: Sequence[str]) -> int | None:
    for alias in aliases:
        if alias in positions:
            return positions[alias]
    return None


def _column(columns: Mapping[str, int | None], name: str) -> int:
    index = columns[name]
    if index is None:
        raise EpiIngestError(f"Daily report column '{name}' was not resolved from the header.")
    return index


def _required_text(row: Mapping[str, Any], field_name: str) -> str:
    value = row.get(field_name)
    if value is None:
        raise ValueError(f"missing field '{field_name}'")
    return str(value)


def _parse_int(raw_value: str, field_name: str) -> int:
    try:
        return int(raw_value.strip())
    except ValueError as error:
        raise ValueError(f"invalid {field_name} value '{raw_value}'") from error


def _parse_count_cell(raw_value: str, field_name: str) -> int:
    """Parse a daily-report count cell; blank cells mean zero."""
    if not raw_value.strip():
        return 0
    return _parse_int(raw_value, field_name)


def non_object_reason(row: object) -> str:
    """Describe a decoded JSON row that is not an object."""
    return f"expected a JSON object, got {type(row).__name__}"


def record_row_skip(
    diagnostics: list[RowDiagnostic],
    source: str,
    row_number: int,
    reason: str,
) -> None:
    """Record one skipped row as a diagnostic and a ``row_skipped`` warning."""
    diagnostics.append(RowDiagnostic(source=source, row_number=row_number, reason=reason))
    _LOGGER.warning("row_skipped", source=source, row_number=row_number, reason=reason)
