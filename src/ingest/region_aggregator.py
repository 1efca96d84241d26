"""Region grouping for parsed raw records.

This module folds raw records into per-region builder state and finalizes
each region into an immutable, time-ordered series once input is drained.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable

from core.logging_config import get_logger
from core.types import ObservationPoint, RawRecord, RegionSeries
from ingest.record_parser import region_display_name

_LOGGER = get_logger(__name__)


@dataclass
class _RegionBuilder:
    """Mutable accumulation state for one region key."""

    region_key: str
    subregion: str | None
    population: int | None
    running_totals: bool
    points: list[ObservationPoint] = field(default_factory=list)

    def finalize(self) -> RegionSeries:
        # Stable sort keeps parse order for equal positions.
        ordered_points = sorted(self.points, key=lambda point: point.position)
        return RegionSeries(
            region_key=self.region_key,
            display_name=region_display_name(self.region_key),
            subregion=self.subregion,
            points=tuple(ordered_points),
            population=self.population,
            running_totals=self.running_totals,
        )


def aggregate_records(
    records: Iterable[RawRecord],
    split_subregions: bool = False,
) -> dict[str, RegionSeries]:
    """Group raw records into time-ordered region series.

    Args:
        records: Parsed records in any order.
        split_subregions: Key by ``region/subregion`` instead of region.

    Returns:
        Mapping from region key to series, in first-seen key order.
    """
    builders: dict[str, _RegionBuilder] = {}
    for record in records:
        key = grouping_key(record, split_subregions)
        builder = builders.get(key)
        if builder is None:
            builder = _RegionBuilder(
                region_key=key,
                subregion=record.subregion,
                population=record.population,
                running_totals=record.running_totals,
            )
            builders[key] = builder
        builder.points.append(_to_point(record))
    series_map = {key: builder.finalize() for key, builder in builders.items()}
    _LOGGER.info(
        "regions_aggregated",
        region_count=len(series_map),
        point_count=sum(len(series) for series in series_map.values()),
    )
    return series_map


def grouping_key(record: RawRecord, split_subregions: bool = False) -> str:
    """Return the exact, case-sensitive grouping key of a record."""
    if split_subregions and record.subregion:
        return f"{record.region_key}/{record.subregion}"
    return record.region_key


def merge_duplicate_positions(series: RegionSeries) -> RegionSeries:
    """Sum counts of points that share a position.

    Only for sources that guarantee one record per period, where repeated
    ingestion produced duplicates. Not applied by ``aggregate_records``.
    """
    merged: list[ObservationPoint] = []
    for point in series.points:
        if merged and merged[-1].position == point.position:
            previous = merged[-1]
            merged[-1] = ObservationPoint(
                position=point.position,
                confirmed=previous.confirmed + point.confirmed,
                deaths=previous.deaths + point.deaths,
                recovered=previous.recovered + point.recovered,
            )
            continue
        merged.append(point)
    return replace(series, points=tuple(merged))


def _to_point(record: RawRecord) -> ObservationPoint:
    return ObservationPoint(
        position=record.position,
        confirmed=record.confirmed,
        deaths=record.deaths,
        recovered=record.recovered,
    )
