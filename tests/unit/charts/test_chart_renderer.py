"""Unit tests for chart image rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from charts.chart_renderer import render_chart
from core.chart_types import ChartLine, ChartPanel
from core.errors import EpiRenderError


def _panel(title: str) -> ChartPanel:
    line = ChartLine(label="Spain", color_index=0, points=((1.0, 2.0), (2.0, 3.0)))
    return ChartPanel(title=title, lines=(line,), y_max=10.0)


def test_render_chart_writes_png(tmp_path: Path) -> None:
    """Rendering should write a PNG file to the requested path."""
    output_path = tmp_path / "charts" / "total.png"

    written = render_chart([_panel("Total Deaths"), _panel("Deaths per 100K"), _panel("Odd")], output_path)

    assert written == output_path
    assert output_path.read_bytes().startswith(b"\x89PNG")


def test_render_chart_accepts_panels_without_lines(tmp_path: Path) -> None:
    """Panels whose regions were all excluded still render."""
    output_path = tmp_path / "empty.png"

    render_chart([ChartPanel(title="Deaths per 100K", lines=())], output_path)

    assert output_path.exists()


def test_render_chart_rejects_empty_layout(tmp_path: Path) -> None:
    """There must be at least one panel."""
    with pytest.raises(EpiRenderError):
        render_chart([], tmp_path / "none.png")


def test_render_chart_applies_fixed_day_range(tmp_path: Path) -> None:
    """Panels with an x range render with fixed day bounds."""
    line = ChartLine(label="Spain", color_index=0, points=((95.0, 2.0), (120.0, 3.0)))
    output_path = tmp_path / "ranged.png"

    render_chart([ChartPanel(title="Total Deaths", lines=(line,), x_range=(90.0, 180.0))], output_path)

    assert output_path.exists()
