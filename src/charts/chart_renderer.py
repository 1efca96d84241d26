"""Static PNG rendering of assembled chart panels.

This module lays panels out on a two-column matplotlib grid and writes
a single image file.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Sequence

from core.chart_types import ChartPanel
from core.constants import (
    CHART_DPI,
    CHART_HEIGHT_PIXELS,
    CHART_LEGEND_LOCATION,
    CHART_WIDTH_PIXELS,
)
from core.errors import EpiDependencyError, EpiRenderError
from core.logging_config import get_logger
from charts.chart_assembly import palette_color

_LOGGER = get_logger(__name__)


def render_chart(panels: Sequence[ChartPanel], output_path: Path) -> Path:
    """Render panels into one PNG image.

    Args:
        panels: Assembled panels in layout order.
        output_path: Destination image path.

    Returns:
        Written image path.

    Raises:
        EpiDependencyError: If matplotlib is missing.
        EpiRenderError: If there is nothing to draw or the file cannot be written.
    """
    if not panels:
        raise EpiRenderError("No chart panels to render. Configure at least one panel.")
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plot
    except ImportError as error:
        raise EpiDependencyError(
            "Chart rendering requires matplotlib. Install matplotlib to produce chart images."
        ) from error
    figure = _build_figure(plot, panels)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        figure.tight_layout()
        figure.savefig(output_path, dpi=CHART_DPI)
    except OSError as error:
        raise EpiRenderError(
            f"Failed to write chart image to {output_path}: {error}. Check the output directory."
        ) from error
    finally:
        plot.close(figure)
    _LOGGER.info("chart_rendered", output_path=str(output_path), panel_count=len(panels))
    return output_path


def _build_figure(plot: Any, panels: Sequence[ChartPanel]) -> Any:
    """Build a figure with two panels per row."""
    column_count = 1 if len(panels) == 1 else 2
    row_count = math.ceil(len(panels) / column_count)
    figure, axes = plot.subplots(
        row_count,
        column_count,
        figsize=(CHART_WIDTH_PIXELS / CHART_DPI, CHART_HEIGHT_PIXELS / CHART_DPI),
        squeeze=False,
    )
    flat_axes = [axis for row in axes for axis in row]
    for axis, panel in zip(flat_axes, panels):
        _draw_panel(axis, panel)
    for axis in flat_axes[len(panels):]:
        axis.set_visible(False)
    return figure


def _draw_panel(axis: Any, panel: ChartPanel) -> None:
    for line in panel.lines:
        x_values = [x for x, _ in line.points]
        y_values = [y for _, y in line.points]
        axis.plot(
            x_values,
            y_values,
            color=palette_color(line.color_index),
            linewidth=1.8,
            label=line.label,
        )
    axis.set_title(panel.title)
    axis.set_xlabel("Day")
    if panel.y_max is not None:
        axis.set_ylim(0.0, panel.y_max)
    if panel.x_range is not None:
        axis.set_xlim(*panel.x_range)
    if panel.lines:
        axis.legend(loc=CHART_LEGEND_LOCATION, frameon=True, edgecolor="black")
