"""Chart panel assembly from region series.

This module selects configured regions, derives one metric per panel,
and emits ``(x, y)`` lines with legend labels and stable colour indexes.
Regions excluded from a metric are left out of that panel only.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from core.chart_types import ChartLine, ChartPanel, PanelSpec
from core.constants import DAY_OFFSET_EPOCH, GRAPH_PALETTE
from core.logging_config import get_logger
from core.types import DerivedSeries, MetricRequest, Position, RegionSeries
from metrics.metric_engine import derive_metric, latest_total
from metrics.population_registry import PopulationRegistry

_LOGGER = get_logger(__name__)


def default_panel_specs(average_days: int) -> tuple[PanelSpec, ...]:
    """Return the standard four-panel deaths comparison layout."""
    return (
        PanelSpec(
            title="Total Deaths",
            request=MetricRequest(kind="cumulative"),
            y_max=100_000.0,
            legend_totals=True,
        ),
        PanelSpec(
            title="Total daily Deaths Averaged over {average_days} days",
            request=MetricRequest(kind="rolling_average", window=average_days),
            y_max=3_000.0,
        ),
        PanelSpec(
            title="Deaths per 100K",
            request=MetricRequest(kind="cumulative", per_capita=True),
            y_max=90.0,
        ),
        PanelSpec(
            title="Daily Deaths per 100K, Averaged over {average_days} days",
            request=MetricRequest(kind="rolling_average", window=average_days, per_capita=True),
            y_max=4.0,
        ),
    )


def select_regions(
    series_map: Mapping[str, RegionSeries],
    region_names: Sequence[str],
) -> list[RegionSeries]:
    """Return series whose display name is configured, in series order.

    The list index of each series is its colour index on every panel.
    """
    wanted = set(region_names)
    return [series for series in series_map.values() if series.display_name in wanted]


def assemble_panels(
    series_map: Mapping[str, RegionSeries],
    panel_specs: Sequence[PanelSpec],
    region_names: Sequence[str],
    registry: PopulationRegistry | None = None,
) -> list[ChartPanel]:
    """Build chart panels for the selected regions.

    Args:
        series_map: Aggregated region series.
        panel_specs: Panels to build, in layout order.
        region_names: Display names of regions to include.
        registry: Population table for per-capita panels.

    Returns:
        One panel per spec.
    """
    selected = select_regions(series_map, region_names)
    missing = sorted(set(region_names) - {series.display_name for series in selected})
    if missing:
        _LOGGER.warning("regions_not_found", regions=missing)
    return [_assemble_panel(spec, selected, registry) for spec in panel_specs]


def position_to_x(position: Position) -> float:
    """Convert a day offset or timestamp into a numeric x coordinate."""
    if isinstance(position, int):
        return float(position)
    return (position - DAY_OFFSET_EPOCH).total_seconds() / 86_400


def panel_title(spec: PanelSpec) -> str:
    """Return the panel caption with ``{average_days}`` set to the request window."""
    return spec.title.replace("{average_days}", str(spec.request.window))


def palette_color(color_index: int) -> tuple[float, float, float]:
    """Return the palette colour for an index as RGB floats in [0, 1]."""
    red, green, blue = GRAPH_PALETTE[color_index % len(GRAPH_PALETTE)]
    return (red / 255, green / 255, blue / 255)


def _assemble_panel(
    spec: PanelSpec,
    selected: Sequence[RegionSeries],
    registry: PopulationRegistry | None,
) -> ChartPanel:
    lines: list[ChartLine] = []
    for color_index, series in enumerate(selected):
        derived = derive_metric(series, spec.request, registry)
        if not derived.is_available:
            _LOGGER.info(
                "panel_region_omitted",
                panel=panel_title(spec),
                region_key=series.region_key,
                reason=derived.unavailable_reason,
            )
            continue
        lines.append(
            ChartLine(
                label=_build_label(spec, series),
                color_index=color_index,
                points=_to_xy(derived),
            )
        )
    return ChartPanel(
        title=panel_title(spec),
        lines=tuple(lines),
        y_max=spec.y_max,
        x_range=spec.x_range,
    )


def _build_label(spec: PanelSpec, series: RegionSeries) -> str:
    if not spec.legend_totals:
        return series.display_name
    total = latest_total(series, spec.request.field)
    return f"{series.display_name} - Current {spec.request.field}: {total}"


def _to_xy(derived: DerivedSeries) -> tuple[tuple[float, float], ...]:
    return tuple((position_to_x(point.position), point.value) for point in derived.points)
