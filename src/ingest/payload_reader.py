"""Source payload retrieval and decoding.

This module loads raw payload bytes from local paths or HTTP URLs and
decodes them into generic rows for the record parser.
"""

from __future__ import annotations

import csv
import io
import json
import zipfile
from pathlib import Path
from typing import Iterator, Mapping

import requests

from core.config import EpiConfig
from core.errors import EpiIngestError


def read_payload(source_uri: str, config: EpiConfig) -> bytes:
    """Load raw payload bytes from a local file or URL.

    Args:
        source_uri: Local file path or ``http(s)://`` URL.
        config: Runtime configuration for download timeouts.

    Returns:
        Complete payload bytes.

    Raises:
        EpiIngestError: If the payload cannot be retrieved.
    """
    if source_uri.startswith(("http://", "https://")):
        return _download_payload(source_uri, config.http_timeout_seconds)
    return _read_local_payload(Path(source_uri).expanduser())


def infer_payload_format(source_uri: str) -> str:
    """Infer payload layout from the source suffix.

    Args:
        source_uri: Local path or URL.

    Returns:
        One of ``json``, ``csv`` or ``zip``; URLs without a suffix are JSON.
    """
    suffix = Path(source_uri.split("?", 1)[0].rstrip("/")).suffix.lower()
    if suffix == ".zip":
        return "zip"
    if suffix == ".csv":
        return "csv"
    return "json"


def decode_json_records(payload: bytes, source: str = "payload") -> list[object]:
    """Decode a JSON payload into its list of rows.

    Accepts either ``{"records": [...]}`` or a bare list. Rows are returned
    as decoded; rows that are not objects are left for the parser to skip.

    Raises:
        EpiIngestError: If payload is not JSON or has no record list.
    """
    try:
        document = json.loads(payload.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise EpiIngestError(
            f"Failed to decode JSON payload from {source}: {error}. "
            "Check the source URL or pass --format csv/zip for other layouts."
        ) from error
    if isinstance(document, Mapping):
        document = document.get("records")
    if not isinstance(document, list):
        raise EpiIngestError(
            f"Invalid JSON payload from {source}: expected a 'records' list or a top-level list."
        )
    return document


def decode_csv_rows(payload: bytes, source: str = "payload") -> list[list[str]]:
    """Decode a CSV payload into raw rows, header first.

    Raises:
        EpiIngestError: If payload is not UTF-8 text or has no header.
    """
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as error:
        raise EpiIngestError(
            f"Failed to decode CSV payload from {source}: {error.reason}. "
            "Provide UTF-8 encoded CSV data."
        ) from error
    rows = [row for row in csv.reader(io.StringIO(text)) if row]
    if not rows:
        raise EpiIngestError(f"CSV payload from {source} is empty. Provide a header row.")
    return rows


def decode_zip_csv_rows(payload: bytes, source: str = "payload") -> Iterator[tuple[str, list[list[str]]]]:
    """Decode every CSV member of a ZIP archive.

    Args:
        payload: Archive bytes.
        source: Source label for error messages.

    Yields:
        ``(member_name, rows)`` pairs in member name order.

    Raises:
        EpiIngestError: If the archive is unreadable or has no CSV members.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(payload))
    except zipfile.BadZipFile as error:
        raise EpiIngestError(
            f"Failed to open ZIP archive from {source}: {error}. Re-download the archive."
        ) from error
    with archive:
        member_names = sorted(
            name for name in archive.namelist() if name.lower().endswith(".csv")
        )
        if not member_names:
            raise EpiIngestError(
                f"ZIP archive from {source} contains no .csv members."
            )
        for member_name in member_names:
            yield member_name, decode_csv_rows(archive.read(member_name), member_name)


def _download_payload(url: str, timeout_seconds: float) -> bytes:
    """Download a remote payload in one synchronous request."""
    try:
        response = requests.get(url, timeout=timeout_seconds)
        response.raise_for_status()
    except requests.RequestException as error:
        raise EpiIngestError(
            f"Failed to download payload from {url}: {error}. "
            "Check network access or use a local copy of the file."
        ) from error
    return response.content


def _read_local_payload(source_path: Path) -> bytes:
    """Read payload bytes from the local file system."""
    if not source_path.is_file():
        raise EpiIngestError(
            f"Failed to read source at {source_path}: file does not exist. "
            "Provide an existing JSON, CSV, or ZIP file."
        )
    try:
        return source_path.read_bytes()
    except OSError as error:
        raise EpiIngestError(
            f"Failed to read source at {source_path}: {error}. Check file permissions."
        ) from error
