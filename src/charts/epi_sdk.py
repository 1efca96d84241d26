"""Python SDK for ingest, metric, and chart operations.

This module exposes high-level APIs that wire payload ingest, the metric
engine, chart assembly, and rendering together.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Mapping

from charts.chart_assembly import assemble_panels, default_panel_specs
from charts.chart_renderer import render_chart
from core.chart_types import ChartPanel, ChartSpec
from core.config import EpiConfig
from core.constants import DEFAULT_CHART_FILE_NAME
from core.types import DerivedSeries, IngestOptions, IngestResult, MetricRequest, RegionSeries
from ingest.pipeline import load_region_series
from metrics.metric_engine import derive_for_regions
from metrics.population_registry import PopulationRegistry


class EpiClient:
    """Primary SDK entry point."""

    def __init__(self, config: EpiConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or EpiConfig.from_env()

    def ingest(self, options: IngestOptions) -> IngestResult:
        """Load a source into time-ordered region series.

        Raises:
            EpiIngestError: If the source cannot be read or decoded.
        """
        return load_region_series(options, self._config)

    def derive(
        self,
        series_map: Mapping[str, RegionSeries],
        request: MetricRequest,
        populations: Mapping[str, int] | None = None,
    ) -> dict[str, DerivedSeries]:
        """Compute one metric for every region.

        Args:
            series_map: Aggregated region series.
            request: Metric selector.
            populations: Overrides applied on top of source populations.

        Returns:
            Derived series keyed by region key.
        """
        registry = build_population_registry(series_map, populations)
        return derive_for_regions(series_map, request, registry)

    def assemble(self, series_map: Mapping[str, RegionSeries], spec: ChartSpec) -> list[ChartPanel]:
        """Build chart panels described by a chart spec."""
        registry = build_population_registry(series_map, spec.populations)
        panel_specs = spec.panels or default_panel_specs(spec.average_days)
        return assemble_panels(series_map, panel_specs, spec.regions, registry)

    def render(
        self,
        source_uri: str,
        spec: ChartSpec,
        output_path: str | None = None,
        options: IngestOptions | None = None,
    ) -> Path:
        """Ingest a source and render the comparison chart image.

        Args:
            source_uri: Local path or URL of the payload.
            spec: Chart configuration.
            output_path: Optional image path; overrides ``spec.output``.
            options: Optional ingest options; ``source_uri`` and target year
                are taken from the other arguments.

        Returns:
            Written image path.
        """
        ingest_options = replace(
            options or IngestOptions(source_uri=source_uri),
            source_uri=source_uri,
            target_year=spec.target_year,
        )
        result = self.ingest(ingest_options)
        panels = self.assemble(result.series, spec)
        return render_chart(panels, self._resolve_output_path(output_path or spec.output))

    def _resolve_output_path(self, output_path: str | None) -> Path:
        if output_path is None:
            return self._config.output_dir / DEFAULT_CHART_FILE_NAME
        return Path(output_path).expanduser().resolve()


def build_population_registry(
    series_map: Mapping[str, RegionSeries],
    populations: Mapping[str, int] | None = None,
) -> PopulationRegistry:
    """Combine source-bound populations with configured overrides."""
    registry = PopulationRegistry.from_series(series_map)
    if not populations:
        return registry
    return registry.merged_with(PopulationRegistry.from_mapping(populations))
