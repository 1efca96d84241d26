"""Pytest configuration for repository test runs."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

import pytest

from core.types import ObservationPoint, RegionSeries


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep EPICURVE_* settings from the caller's shell out of tests."""
    monkeypatch.delenv("EPICURVE_HTTP_TIMEOUT", raising=False)
    monkeypatch.delenv("EPICURVE_LOG_LEVEL", raising=False)
    monkeypatch.setenv("EPICURVE_OUTPUT_DIR", str(tmp_path))


@pytest.fixture
def make_series() -> Callable[..., RegionSeries]:
    """Build a region series from per-point death counts."""

    def _make(
        deaths: Sequence[int],
        region_key: str = "A",
        population: int | None = None,
        positions: Sequence[int] | None = None,
        running_totals: bool = False,
    ) -> RegionSeries:
        day_positions = positions if positions is not None else range(1, len(deaths) + 1)
        points = tuple(
            ObservationPoint(position=position, confirmed=0, deaths=count, recovered=0)
            for position, count in zip(day_positions, deaths)
        )
        return RegionSeries(
            region_key=region_key,
            display_name=region_key.replace("_", " "),
            subregion=None,
            points=points,
            population=population,
            running_totals=running_totals,
        )

    return _make
