"""Inspector export parser.

Reads a saved ``/api/requests`` response (``{"success": true, "data": [...]}``)
or a plain JSON array of request rows.
"""

import json
from pathlib import Path
from typing import Any

from api_inspector.errors import CaptureFormatError

from .base import CapturedExchange, read_capture_text, rows_to_exchanges


def parse_export(file_path: Path) -> list[CapturedExchange]:
    """Parse an inspector export file into a list of CapturedExchange."""
    text = read_capture_text(file_path)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise CaptureFormatError(f"Invalid export file {file_path}: {e}") from e
    return rows_to_exchanges(unwrap_rows(payload))


def unwrap_rows(payload: Any) -> list[dict]:
    """Return the request rows from an API envelope or bare list."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        if payload.get("success") is False:
            raise CaptureFormatError(f"Export reports failure: {payload.get('error', 'unknown error')}")
        return payload["data"]
    raise CaptureFormatError("Expected a list of request rows or an object with a 'data' list")
