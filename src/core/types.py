"""Shared typed models.

This module defines immutable data models passed between the parser,
aggregator, metric engine, and chart assembly stages.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Union

from core.constants import DEFAULT_AVERAGE_DAYS, DEFAULT_TARGET_YEAR

Position = Union[int, datetime]
CountField = Literal["confirmed", "deaths", "recovered"]
MetricKind = Literal[
    "cumulative",
    "cumulative_from_end",
    "daily_delta",
    "rolling_average",
    "rolling_daily_delta",
]
PayloadFormat = Literal["auto", "json", "csv", "zip"]
SUPPORTED_METRIC_KINDS: tuple[MetricKind, ...] = (
    "cumulative",
    "cumulative_from_end",
    "daily_delta",
    "rolling_average",
    "rolling_daily_delta",
)


@dataclass(frozen=True)
class RawRecord:
    """One parsed observation before grouping.

    Attributes:
        region_key: Raw region identifier used for grouping.
        subregion: Optional province/state label.
        position: Day offset from January 1st or an absolute timestamp.
        confirmed: Confirmed case count.
        deaths: Death count.
        recovered: Recovered count.
        population: Population reported by the row, None when unknown.
        running_totals: Counts are running totals rather than per-period counts.
    """

    region_key: str
    subregion: str | None
    position: Position
    confirmed: int
    deaths: int
    recovered: int
    population: int | None = None
    running_totals: bool = False


@dataclass(frozen=True)
class ObservationPoint:
    """One observation inside a region series."""

    position: Position
    confirmed: int
    deaths: int
    recovered: int


@dataclass(frozen=True)
class RegionSeries:
    """Time-ordered observations for one region.

    Attributes:
        region_key: Raw grouping key.
        display_name: Key with underscores replaced by spaces.
        subregion: First-seen subregion label, if any.
        points: Observations sorted ascending by position.
        population: First-seen population bound at ingestion time.
        running_totals: Counts are running totals, as in daily reports.
    """

    region_key: str
    display_name: str
    subregion: str | None
    points: tuple[ObservationPoint, ...]
    population: int | None = None
    running_totals: bool = False

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class DerivedPoint:
    """One ``(position, value)`` pair of a derived metric."""

    position: Position
    value: float


@dataclass(frozen=True)
class DerivedSeries:
    """Metric output for one region.

    Attributes:
        region_key: Raw grouping key of the source series.
        display_name: Region display name.
        metric: Metric label, e.g. ``rolling_average:deaths:7``.
        points: Ordered derived values.
        unavailable_reason: Why the metric was not computed, if excluded.
    """

    region_key: str
    display_name: str
    metric: str
    points: tuple[DerivedPoint, ...]
    unavailable_reason: str | None = None

    @property
    def is_available(self) -> bool:
        """Return whether the metric was computed for this region."""
        return self.unavailable_reason is None


@dataclass(frozen=True)
class MetricRequest:
    """Selector describing which derived series to compute.

    Attributes:
        kind: Metric composition to compute.
        field: Count field the metric reads.
        window: Rolling window size in observed points.
        per_capita: Divide by population in units of 100,000 people.
    """

    kind: MetricKind
    field: CountField = "deaths"
    window: int = DEFAULT_AVERAGE_DAYS
    per_capita: bool = False

    @property
    def label(self) -> str:
        """Return a stable label for logs and derived series."""
        parts = [self.kind, self.field]
        if self.kind.startswith("rolling"):
            parts.append(str(self.window))
        if self.per_capita:
            parts.append("per_capita")
        return ":".join(parts)


@dataclass(frozen=True)
class RowDiagnostic:
    """Advisory record of one skipped input row."""

    source: str
    row_number: int
    reason: str


@dataclass(frozen=True)
class IngestOptions:
    """Ingest request options.

    Attributes:
        source_uri: Local path or http(s) URL of the payload.
        payload_format: Payload layout, or ``auto`` to infer from suffix.
        target_year: Year retained for day/month/year sources.
        split_subregions: Group by region and subregion instead of region.
    """

    source_uri: str
    payload_format: PayloadFormat = "auto"
    target_year: int = DEFAULT_TARGET_YEAR
    split_subregions: bool = False


@dataclass(frozen=True)
class IngestResult:
    """Output of one ingest run."""

    series: dict[str, RegionSeries]
    diagnostics: tuple[RowDiagnostic, ...]
    row_count: int
