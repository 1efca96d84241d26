"""Epicurve CLI entry points.
This module exposes render, summary, and metric commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from charts.chart_spec import load_chart_spec
from charts.epi_sdk import EpiClient
from core.chart_types import ChartSpec
from core.config import EpiConfig
from core.constants import (
    DEFAULT_AVERAGE_DAYS,
    DEFAULT_TARGET_YEAR,
    ECDC_CASE_DISTRIBUTION_URL,
    SUPPORTED_COUNT_FIELDS,
    SUPPORTED_PAYLOAD_FORMATS,
)
from core.errors import EpiError
from core.logging_config import configure_logging
from core.types import SUPPORTED_METRIC_KINDS, IngestOptions, MetricRequest, Position
from metrics.metric_engine import latest_total


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="epicurve", description="Epidemic case/death comparison charts"
    )
    parser.add_argument("--output-dir", help="Override EPICURVE_OUTPUT_DIR for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_render_command(subparsers)
    _add_summary_command(subparsers)
    _add_metric_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Epicurve CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.output_dir)
        if args.command == "render":
            return _run_render_command(client, args)
        if args.command == "summary":
            return _run_summary_command(client, args)
        if args.command == "metric":
            return _run_metric_command(client, args)
    except EpiError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(output_dir: str | None) -> EpiClient:
    """Build SDK client with optional output-dir override."""
    config = EpiConfig.from_env()
    configure_logging(config.log_level)
    if output_dir:
        config = replace(config, output_dir=_resolve_path(output_dir))
    return EpiClient(config)


def _run_render_command(client: EpiClient, args: argparse.Namespace) -> int:
    """Handle render command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    spec = _build_chart_spec(args)
    options = IngestOptions(source_uri=args.source, payload_format=args.format)
    output_path = client.render(args.source, spec, args.output, options)
    print(output_path)
    return 0


def _run_summary_command(client: EpiClient, args: argparse.Namespace) -> int:
    """Handle summary command.

    Prints one tab-separated row per region.
    """
    result = client.ingest(_ingest_options(args))
    for series in result.series.values():
        print(
            f"{series.region_key}\t"
            f"{series.display_name}\t"
            f"{len(series)}\t"
            f"{series.population or '-'}\t"
            f"{latest_total(series, 'deaths')}"
        )
    if result.diagnostics:
        print(f"skipped_rows={len(result.diagnostics)}", file=sys.stderr)
    return 0


def _run_metric_command(client: EpiClient, args: argparse.Namespace) -> int:
    """Handle metric command.

    Prints ``position<TAB>value`` rows for one region, or the reason the
    metric is unavailable with exit code 1.
    """
    result = client.ingest(_ingest_options(args))
    series_map = {
        key: series
        for key, series in result.series.items()
        if args.region in (key, series.display_name)
    }
    if not series_map:
        print(f"error: region '{args.region}' not found in {args.source}", file=sys.stderr)
        return 1
    request = MetricRequest(
        kind=args.kind,
        field=args.field,
        window=args.average_days,
        per_capita=args.per_capita,
    )
    for derived in client.derive(series_map, request).values():
        if not derived.is_available:
            print(f"{derived.display_name}: {derived.unavailable_reason}", file=sys.stderr)
            return 1
        for point in derived.points:
            print(f"{_format_position(point.position)}\t{point.value:.4f}")
    return 0


def _build_chart_spec(args: argparse.Namespace) -> ChartSpec:
    """Load the optional chart spec and apply CLI overrides."""
    spec = load_chart_spec(args.spec) if args.spec else ChartSpec()
    if args.target_year is not None:
        spec = replace(spec, target_year=args.target_year)
    if args.region:
        spec = replace(spec, regions=tuple(args.region))
    if args.average_days is not None:
        panels = tuple(
            replace(panel, request=replace(panel.request, window=args.average_days))
            for panel in spec.panels
        )
        spec = replace(spec, average_days=args.average_days, panels=panels)
    return spec


def _ingest_options(args: argparse.Namespace) -> IngestOptions:
    return IngestOptions(
        source_uri=args.source,
        payload_format=args.format,
        target_year=args.target_year,
        split_subregions=args.split_subregions,
    )


def _format_position(position: Position) -> str:
    if isinstance(position, int):
        return str(position)
    return position.isoformat()


def _resolve_path(raw_path: str) -> Path:
    return Path(raw_path).expanduser().resolve()


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "source",
        nargs="?",
        default=ECDC_CASE_DISTRIBUTION_URL,
        help="Report file path or http(s) URL (default: ECDC case distribution)",
    )
    parser.add_argument(
        "--format",
        default="auto",
        choices=SUPPORTED_PAYLOAD_FORMATS,
        help="Payload layout; auto infers from the file suffix",
    )


def _add_render_command(subparsers: Any) -> None:
    """Register render subcommand."""
    parser = subparsers.add_parser("render", help="Render the comparison chart image")
    _add_source_arguments(parser)
    parser.add_argument("--spec", help="Optional YAML chart spec file")
    parser.add_argument("--output", help="Output PNG path")
    parser.add_argument("--target-year", type=int, help="Year kept for day/month/year sources")
    parser.add_argument("--average-days", type=int, help="Rolling average window in days")
    parser.add_argument(
        "--region",
        action="append",
        help="Region display name to plot; repeat for several regions",
    )


def _add_summary_command(subparsers: Any) -> None:
    """Register summary subcommand."""
    parser = subparsers.add_parser("summary", help="List ingested regions")
    _add_source_arguments(parser)
    _add_grouping_arguments(parser)


def _add_metric_command(subparsers: Any) -> None:
    """Register metric subcommand."""
    parser = subparsers.add_parser("metric", help="Print one derived metric for a region")
    _add_source_arguments(parser)
    _add_grouping_arguments(parser)
    parser.add_argument("--region", required=True, help="Region key or display name")
    parser.add_argument("--kind", required=True, choices=SUPPORTED_METRIC_KINDS, help="Metric kind")
    parser.add_argument(
        "--field",
        default="deaths",
        choices=SUPPORTED_COUNT_FIELDS,
        help="Count field the metric reads",
    )
    parser.add_argument(
        "--average-days",
        type=int,
        default=DEFAULT_AVERAGE_DAYS,
        help="Rolling average window in days",
    )
    parser.add_argument(
        "--per-capita",
        action="store_true",
        help="Scale values per 100,000 people",
    )


def _add_grouping_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--target-year",
        type=int,
        default=DEFAULT_TARGET_YEAR,
        help="Year kept for day/month/year sources",
    )
    parser.add_argument(
        "--split-subregions",
        action="store_true",
        help="Group daily-report rows by region and province",
    )
