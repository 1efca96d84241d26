"""Runtime configuration model for Epicurve.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_LOG_LEVEL, DEFAULT_OUTPUT_DIR
from core.errors import EpiConfigError
from core.logging_config import supported_log_levels


@dataclass(frozen=True)
class EpiConfig:
    """Validated runtime configuration.

    Attributes:
        output_dir: Directory where rendered charts are written.
        http_timeout_seconds: Timeout applied to remote payload downloads.
        log_level: Minimum structured log level.
    """

    output_dir: Path
    http_timeout_seconds: float
    log_level: str

    @classmethod
    def from_env(cls) -> "EpiConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            EpiConfigError: If environment values are invalid.
        """
        output_dir_value = os.getenv("EPICURVE_OUTPUT_DIR", str(DEFAULT_OUTPUT_DIR))
        timeout_value = os.getenv("EPICURVE_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT_SECONDS))
        log_level_value = os.getenv("EPICURVE_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        return cls(
            output_dir=Path(output_dir_value).expanduser().resolve(),
            http_timeout_seconds=_parse_http_timeout(timeout_value),
            log_level=_parse_log_level(log_level_value),
        )


def _parse_http_timeout(raw_value: str) -> float:
    """Parse the HTTP timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive timeout in seconds.

    Raises:
        EpiConfigError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise EpiConfigError(
            "Invalid EPICURVE_HTTP_TIMEOUT value: "
            f"expected number of seconds, got '{raw_value}'. "
            "Set EPICURVE_HTTP_TIMEOUT to a positive number."
        ) from error
    if timeout <= 0:
        raise EpiConfigError(
            f"Invalid EPICURVE_HTTP_TIMEOUT value: {timeout} must be greater than zero."
        )
    return timeout


def _parse_log_level(raw_value: str) -> str:
    normalized = raw_value.lower().strip()
    if normalized not in supported_log_levels():
        supported = ", ".join(supported_log_levels())
        raise EpiConfigError(
            f"Invalid EPICURVE_LOG_LEVEL value '{raw_value}'. Choose one of: {supported}."
        )
    return normalized
