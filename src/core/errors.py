"""Epicurve exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Row-level data problems never raise; they are reported as diagnostics.
"""

from __future__ import annotations


class EpiError(Exception):
    """Base exception for all Epicurve failures."""


class EpiConfigError(EpiError):
    """Raised for invalid runtime configuration or population tables."""


class EpiIngestError(EpiError):
    """Raised when a source payload cannot be retrieved or decoded at all."""


class EpiMetricError(EpiError):
    """Raised for invalid metric requests."""


class EpiChartSpecError(EpiError):
    """Raised for invalid or unsupported chart spec files."""


class EpiRenderError(EpiError):
    """Raised when chart images cannot be written."""


class EpiDependencyError(EpiError):
    """Raised when an optional runtime dependency is missing."""
