"""Unit tests for core config parsing."""

from __future__ import annotations

import os

import pytest

from core.config import EpiConfig
from core.errors import EpiConfigError


def test_from_env_reads_output_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve output directory from environment."""
    monkeypatch.setenv("EPICURVE_OUTPUT_DIR", "./.tmp-charts")

    config = EpiConfig.from_env()

    assert config.output_dir.name == ".tmp-charts"


def test_from_env_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unset variables should fall back to documented defaults."""
    monkeypatch.delenv("EPICURVE_HTTP_TIMEOUT", raising=False)
    monkeypatch.delenv("EPICURVE_LOG_LEVEL", raising=False)

    config = EpiConfig.from_env()

    assert (config.http_timeout_seconds, config.log_level) == (60.0, "info")


def test_from_env_raises_for_invalid_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for a non-numeric HTTP timeout."""
    monkeypatch.setenv("EPICURVE_HTTP_TIMEOUT", "soon")

    with pytest.raises(EpiConfigError):
        EpiConfig.from_env()

    assert os.getenv("EPICURVE_HTTP_TIMEOUT") == "soon"


def test_from_env_raises_for_non_positive_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Zero timeouts are rejected."""
    monkeypatch.setenv("EPICURVE_HTTP_TIMEOUT", "0")

    with pytest.raises(EpiConfigError):
        EpiConfig.from_env()


def test_from_env_raises_for_unknown_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Log level must be one of the supported names."""
    monkeypatch.setenv("EPICURVE_LOG_LEVEL", "verbose")

    with pytest.raises(EpiConfigError):
        EpiConfig.from_env()
