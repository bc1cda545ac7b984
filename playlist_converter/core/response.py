"""Conversion endpoint contract: request parsing, response bodies, report files"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from playlist_converter.core.cancel import CancelToken
from playlist_converter.core.errors import ConversionError, ErrorCategory, InvalidPlaylistUrl
from playlist_converter.core.models import ConversionReport
from playlist_converter.core.orchestrator import DEFAULT_PLAYLIST_NAME, ConversionOrchestrator

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ErrorCategory.CLIENT_INPUT: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.REPORTED: 404,
    ErrorCategory.UPSTREAM: 502,
    ErrorCategory.FATAL: 502,
    ErrorCategory.CANCELLED: 408,
}


@dataclass
class ConversionRequest:
    source_playlist_url: str
    destination_playlist_name: str = DEFAULT_PLAYLIST_NAME

    @classmethod
    def from_body(cls, body: dict | None) -> "ConversionRequest":
        body = body or {}
        url = body.get("source_playlist_url")
        if not isinstance(url, str) or not url.strip():
            raise InvalidPlaylistUrl("Missing 'source_playlist_url' in request")
        name = body.get("destination_playlist_name")
        if not isinstance(name, str) or not name.strip():
            name = DEFAULT_PLAYLIST_NAME
        return cls(source_playlist_url=url.strip(), destination_playlist_name=name.strip())


def success_body(report: ConversionReport) -> dict:
    return {"success": True, "data": report.to_dict()}


def error_body(error: ConversionError) -> dict:
    report = error.report or ConversionReport()
    return {"success": False, "error": error.to_dict(), "data": report.to_dict()}


def status_code_for(error: ConversionError) -> int:
    return STATUS_CODES[error.category]


def handle_convert(body: dict | None, orchestrator: ConversionOrchestrator, owner_id: str,
                   cancel: CancelToken | None = None) -> tuple[int, dict]:
    """Run one conversion request and shape the outcome as (status, body)."""
    try:
        request = ConversionRequest.from_body(body)
        report = orchestrator.convert(
            request.source_playlist_url, owner_id,
            request.destination_playlist_name, cancel
        )
    except ConversionError as e:
        status = status_code_for(e)
        logger.error(f"Conversion failed ({status}): {e.message}")
        return status, error_body(e)

    if report.write_errors:
        logger.warning(f"Conversion finished with write errors: {report.write_errors}")
    return 200, success_body(report)


def write_report(path: Path, status_code: int, body: dict) -> bool:
    """Atomically write a response body (plus status) as JSON."""
    data = {"status_code": status_code, **body}
    return _atomic_write(path, data)


def _atomic_write(path: Path, data: dict) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".report_", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(temp_path, path)
            return True
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
    except OSError as e:
        logger.error(f"Report write failed: {e}")
        return False
