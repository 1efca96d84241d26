"""Ingest orchestration from source payload to region series.

This module coordinates payload retrieval, decoding, row parsing, and
region aggregation for one ingest run.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Sequence

from core.config import EpiConfig
from core.errors import EpiIngestError
from core.logging_config import get_logger
from core.types import IngestOptions, IngestResult, RawRecord, RowDiagnostic
from ingest.payload_reader import (
    decode_csv_rows,
    decode_json_records,
    decode_zip_csv_rows,
    infer_payload_format,
    read_payload,
)
from ingest.record_parser import (
    RowShape,
    detect_row_shape,
    non_object_reason,
    parse_day_month_year_rows,
    parse_timestamp_rows,
    record_row_skip,
)
from ingest.region_aggregator import aggregate_records

_LOGGER = get_logger(__name__)


class IngestRun:
    """Single ingest run over one source payload."""

    def __init__(self, options: IngestOptions, config: EpiConfig) -> None:
        self._options = options
        self._config = config
        self._diagnostics: list[RowDiagnostic] = []
        self._row_count = 0
        self._row_shape: RowShape | None = None

    def run(self) -> IngestResult:
        """Execute the ingest run and return aggregated series."""
        payload = read_payload(self._options.source_uri, self._config)
        records = self.parse_payload(payload)
        series_map = aggregate_records(records, self._options.split_subregions)
        if self._row_count == 0:
            raise EpiIngestError(
                f"Source {self._options.source_uri} contains no data rows. "
                "Check that the payload is a case report."
            )
        _log_ingest_completion(
            self._options, self._row_count, len(self._diagnostics), len(series_map)
        )
        return IngestResult(
            series=series_map,
            diagnostics=tuple(self._diagnostics),
            row_count=self._row_count,
        )

    def parse_payload(self, payload: bytes) -> Iterator[RawRecord]:
        """Decode payload bytes and yield parsed records.

        Raises:
            EpiIngestError: If the payload cannot be decoded.
        """
        payload_format = self._resolve_format()
        source = self._options.source_uri
        if payload_format == "json":
            yield from self._parse_json_rows(decode_json_records(payload, source), source)
            return
        if payload_format == "csv":
            yield from self._parse_csv_rows(decode_csv_rows(payload, source), source)
            return
        for member_name, rows in decode_zip_csv_rows(payload, source):
            yield from self._parse_csv_rows(rows, f"{source}!{member_name}")

    def _resolve_format(self) -> str:
        if self._options.payload_format == "auto":
            return infer_payload_format(self._options.source_uri)
        return self._options.payload_format

    def _parse_json_rows(self, rows: list[object], source: str) -> Iterator[RawRecord]:
        if not rows:
            return
        self._row_count += len(rows)
        first_object = next((row for row in rows if isinstance(row, Mapping)), None)
        if (
            first_object is None
            or self._claim_row_shape(first_object.keys(), source) == "day_month_year"
        ):
            yield from parse_day_month_year_rows(
                rows, self._options.target_year, self._diagnostics, source
            )
            return
        header = list(first_object.keys())
        table: list[list[str]] = [header]
        for row_number, row in enumerate(rows, 1):
            if not isinstance(row, Mapping):
                record_row_skip(self._diagnostics, source, row_number, non_object_reason(row))
                continue
            table.append([str(row.get(name, "")) for name in header])
        yield from parse_timestamp_rows(table, self._diagnostics, source)

    def _parse_csv_rows(self, rows: list[list[str]], source: str) -> Iterator[RawRecord]:
        header = rows[0]
        self._row_count += len(rows) - 1
        if self._claim_row_shape(header, source) == "timestamp":
            yield from parse_timestamp_rows(rows, self._diagnostics, source)
            return
        mappings = _csv_mappings(rows, self._diagnostics, source)
        yield from parse_day_month_year_rows(
            mappings, self._options.target_year, self._diagnostics, source
        )

    def _claim_row_shape(self, field_names: Iterable[str], source: str) -> RowShape:
        """Detect a row layout and require every part of the payload to share it.

        Raises:
            EpiIngestError: If a later part uses a different layout.
        """
        row_shape = detect_row_shape(field_names)
        if self._row_shape is None:
            self._row_shape = row_shape
        elif row_shape != self._row_shape:
            raise EpiIngestError(
                f"Source {source} uses the {row_shape} layout but earlier rows of "
                f"{self._options.source_uri} use the {self._row_shape} layout. "
                "Ingest each report layout from a separate source."
            )
        return row_shape


def load_region_series(options: IngestOptions, config: EpiConfig) -> IngestResult:
    """Run ingest for one source and return time-ordered region series.

    Args:
        options: Ingest request options.
        config: Runtime configuration.

    Returns:
        Aggregated series, row diagnostics, and decoded row count.

    Raises:
        EpiIngestError: If the source cannot be read, decoded, or is empty.
    """
    return IngestRun(options, config).run()


def _csv_mappings(
    rows: Sequence[Sequence[str]],
    diagnostics: list[RowDiagnostic],
    source: str,
) -> Iterator[dict[str, str]]:
    """Yield header-keyed rows, skipping rows of the wrong width."""
    header = [name.strip() for name in rows[0]]
    for row_number, row in enumerate(rows[1:], 2):
        if len(row) != len(header):
            record_row_skip(
                diagnostics, source, row_number, f"expected {len(header)} fields, got {len(row)}"
            )
            continue
        yield dict(zip(header, row))


def _log_ingest_completion(
    options: IngestOptions,
    row_count: int,
    skipped_count: int,
    region_count: int,
) -> None:
    """Log ingest completion with contextual metadata."""
    _LOGGER.info(
        "ingest_completed",
        source_uri=options.source_uri,
        payload_format=options.payload_format,
        target_year=options.target_year,
        row_count=row_count,
        skipped_count=skipped_count,
        region_count=region_count,
    )
