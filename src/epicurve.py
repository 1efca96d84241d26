"""Public SDK surface for Epicurve.

This module provides a stable import path for library users.
It re-exports the primary client, typed models, and metric functions.
"""

from __future__ import annotations

from charts.chart_spec import load_chart_spec
from charts.epi_sdk import EpiClient, build_population_registry
from core.chart_types import ChartLine, ChartPanel, ChartSpec, PanelSpec
from core.config import EpiConfig
from core.types import (
    DerivedPoint,
    DerivedSeries,
    IngestOptions,
    IngestResult,
    MetricRequest,
    ObservationPoint,
    RawRecord,
    RegionSeries,
)
from metrics.metric_engine import (
    cumulative_from_end,
    cumulative_totals,
    daily_deltas,
    derive_metric,
    per_capita,
    rolling_average,
)
from metrics.population_registry import PopulationRegistry

__all__ = [
    "ChartLine",
    "ChartPanel",
    "ChartSpec",
    "DerivedPoint",
    "DerivedSeries",
    "EpiClient",
    "EpiConfig",
    "IngestOptions",
    "IngestResult",
    "MetricRequest",
    "ObservationPoint",
    "PanelSpec",
    "PopulationRegistry",
    "RawRecord",
    "RegionSeries",
    "build_population_registry",
    "cumulative_from_end",
    "cumulative_totals",
    "daily_deltas",
    "derive_metric",
    "load_chart_spec",
    "per_capita",
    "rolling_average",
]
