"""Derived metric computation over region series.

This module provides pure functions that turn an ordered region series
into cumulative totals, daily deltas, rolling averages, and per-capita
variants. Inputs are never mutated and every call returns a new series.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.constants import PER_CAPITA_UNIT, POPULATION_UNAVAILABLE_REASON, SUPPORTED_COUNT_FIELDS
from core.errors import EpiMetricError
from core.logging_config import get_logger
from core.types import (
    SUPPORTED_METRIC_KINDS,
    CountField,
    DerivedPoint,
    DerivedSeries,
    MetricRequest,
    RegionSeries,
)
from metrics.population_registry import PopulationRegistry

_LOGGER = get_logger(__name__)


def metric_values(series: RegionSeries, field: CountField = "deaths") -> list[DerivedPoint]:
    """Return the raw count field of every observation.

    Raises:
        EpiMetricError: If field is not a count field.
    """
    if field not in SUPPORTED_COUNT_FIELDS:
        supported = ", ".join(SUPPORTED_COUNT_FIELDS)
        raise EpiMetricError(f"Unsupported count field '{field}'. Choose one of: {supported}.")
    return [
        DerivedPoint(position=point.position, value=float(getattr(point, field)))
        for point in series.points
    ]


def cumulative_totals(points: Sequence[DerivedPoint]) -> list[DerivedPoint]:
    """Return the running sum from the oldest point forward."""
    running_sum = 0.0
    totals: list[DerivedPoint] = []
    for point in points:
        running_sum += point.value
        totals.append(DerivedPoint(position=point.position, value=running_sum))
    return totals


def cumulative_from_end(points: Sequence[DerivedPoint]) -> list[DerivedPoint]:
    """Return, for each point, the sum from that point through the newest.

    For values ``[5, 3, 2]`` (oldest to newest) this yields ``[10, 5, 2]``.
    Output keeps the input's oldest-to-newest order.
    """
    running_sum = 0.0
    totals: list[DerivedPoint] = []
    for point in reversed(points):
        running_sum += point.value
        totals.append(DerivedPoint(position=point.position, value=running_sum))
    totals.reverse()
    return totals


def daily_deltas(points: Sequence[DerivedPoint]) -> list[DerivedPoint]:
    """Return differences between consecutive observed points.

    No value is produced for the first point, and elapsed time between
    points is ignored.
    """
    return [
        DerivedPoint(position=current.position, value=current.value - previous.value)
        for previous, current in zip(points, points[1:])
    ]


def rolling_average(points: Sequence[DerivedPoint], window: int) -> list[DerivedPoint]:
    """Return the mean over each full window of ``window`` points.

    The value at index i averages points ``i - window + 1`` through i.
    Indexes without a full window are left out, so a series shorter than
    the window yields an empty result.

    Raises:
        EpiMetricError: If window is smaller than one.
    """
    _validate_window(window)
    averages: list[DerivedPoint] = []
    window_sum = 0.0
    for index, point in enumerate(points):
        window_sum += point.value
        if index >= window:
            window_sum -= points[index - window].value
        if index >= window - 1:
            averages.append(DerivedPoint(position=point.position, value=window_sum / window))
    return averages


def per_capita(points: Sequence[DerivedPoint], population: int) -> list[DerivedPoint]:
    """Scale values to units per 100,000 people.

    Raises:
        EpiMetricError: If population is not positive.
    """
    if population <= 0:
        raise EpiMetricError(
            f"Per-capita scaling needs a positive population, got {population}."
        )
    divisor = population / PER_CAPITA_UNIT
    return [DerivedPoint(position=point.position, value=point.value / divisor) for point in points]


def derive_metric(
    series: RegionSeries,
    request: MetricRequest,
    registry: PopulationRegistry | None = None,
) -> DerivedSeries:
    """Compute one requested metric for one region.

    Args:
        series: Time-ordered region series.
        request: Metric selector.
        registry: Population table for per-capita requests.

    Returns:
        Derived series. Per-capita requests for a region without a known
        population return no points and a ``population unavailable`` reason.

    Raises:
        EpiMetricError: If the request is invalid.
    """
    _validate_request(request)
    population = None
    if request.per_capita:
        population = lookup_population(series, registry)
        if population is None:
            _LOGGER.info(
                "region_excluded",
                region_key=series.region_key,
                metric=request.label,
                reason=POPULATION_UNAVAILABLE_REASON,
            )
            return _build_derived(series, request, [], POPULATION_UNAVAILABLE_REASON)
    points = _compose(metric_values(series, request.field), request, series.running_totals)
    if population is not None:
        points = per_capita(points, population)
    return _build_derived(series, request, points, None)


def derive_for_regions(
    series_map: Mapping[str, RegionSeries],
    request: MetricRequest,
    registry: PopulationRegistry | None = None,
) -> dict[str, DerivedSeries]:
    """Compute one metric independently for every region."""
    return {
        region_key: derive_metric(series, request, registry)
        for region_key, series in series_map.items()
    }


def lookup_population(
    series: RegionSeries,
    registry: PopulationRegistry | None,
) -> int | None:
    """Resolve a region's population by display name, then raw key."""
    if registry is None:
        return None
    population = registry.lookup(series.display_name)
    if population is None:
        population = registry.lookup(series.region_key)
    return population


def latest_total(series: RegionSeries, field: CountField = "deaths") -> int:
    """Return the latest cumulative value of a count field, or 0 when empty."""
    values = metric_values(series, field)
    if not values:
        return 0
    if series.running_totals:
        return int(values[-1].value)
    return int(cumulative_totals(values)[-1].value)


def _compose(
    values: list[DerivedPoint],
    request: MetricRequest,
    running_totals: bool,
) -> list[DerivedPoint]:
    if request.kind == "cumulative":
        # Running-total sources are already cumulative.
        return values if running_totals else cumulative_totals(values)
    if request.kind == "cumulative_from_end":
        return cumulative_from_end(values)
    if request.kind == "daily_delta":
        return daily_deltas(values)
    if request.kind == "rolling_average":
        return rolling_average(values, request.window)
    return rolling_average(daily_deltas(values), request.window)


def _validate_request(request: MetricRequest) -> None:
    if request.kind not in SUPPORTED_METRIC_KINDS:
        supported = ", ".join(SUPPORTED_METRIC_KINDS)
        raise EpiMetricError(
            f"Unsupported metric kind '{request.kind}'. Choose one of: {supported}."
        )
    if request.kind.startswith("rolling"):
        _validate_window(request.window)


def _validate_window(window: int) -> None:
    if window < 1:
        raise EpiMetricError(
            f"Invalid rolling window {window}: window must be at least one point."
        )


def _build_derived(
    series: RegionSeries,
    request: MetricRequest,
    points: list[DerivedPoint],
    unavailable_reason: str | None,
) -> DerivedSeries:
    return DerivedSeries(
        region_key=series.region_key,
        display_name=series.display_name,
        metric=request.label,
        points=tuple(points),
        unavailable_reason=unavailable_reason,
    )
