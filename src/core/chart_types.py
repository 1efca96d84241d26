"""Typed models for chart assembly and chart spec files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from core.constants import DEFAULT_AVERAGE_DAYS, DEFAULT_REGIONS, DEFAULT_TARGET_YEAR
from core.types import MetricRequest


@dataclass(frozen=True)
class PanelSpec:
    """One chart panel request.

    Attributes:
        title: Panel caption; ``{average_days}`` is replaced with the rolling window.
        request: Metric computed for every selected region.
        y_max: Optional fixed upper bound of the value axis.
        x_range: Optional fixed ``(min, max)`` day range of the x axis.
        legend_totals: Annotate legend labels with the region's latest total.
    """

    title: str
    request: MetricRequest
    y_max: float | None = None
    x_range: tuple[float, float] | None = None
    legend_totals: bool = False


@dataclass(frozen=True)
class ChartLine:
    """Points for one region in one panel.

    Attributes:
        label: Legend text.
        color_index: Stable per-region index used for colour assignment.
        points: ``(x, y)`` pairs in ascending x order.
    """

    label: str
    color_index: int
    points: tuple[tuple[float, float], ...]


@dataclass(frozen=True)
class ChartPanel:
    """Assembled lines for one panel."""

    title: str
    lines: tuple[ChartLine, ...]
    y_max: float | None = None
    x_range: tuple[float, float] | None = None


@dataclass(frozen=True)
class ChartSpec:
    """Validated chart configuration.

    Attributes:
        target_year: Year retained for day/month/year sources.
        average_days: Rolling window used by default panels.
        regions: Display names of regions to plot, in legend order.
        populations: Population overrides keyed by display name.
        output: Optional output image path.
        panels: Explicit panels; empty means the default four panels.
    """

    target_year: int = DEFAULT_TARGET_YEAR
    average_days: int = DEFAULT_AVERAGE_DAYS
    regions: tuple[str, ...] = DEFAULT_REGIONS
    populations: Mapping[str, int] = field(default_factory=dict)
    output: str | None = None
    panels: tuple[PanelSpec, ...] = ()
