"""Auto-detect capture file format."""

import json
from pathlib import Path

from api_inspector.errors import CaptureFormatError

from .base import read_capture_text


def detect_format(file_path: Path) -> str:
    """Detect the format of a capture file.

    Returns: 'har', 'export', or 'jsonl'.
    """
    text = read_capture_text(file_path)

    # Try a single JSON document first
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        data = None
    else:
        if isinstance(data, dict):
            if isinstance(data.get("log"), dict) and "entries" in data["log"]:
                return "har"
            if isinstance(data.get("data"), list):
                return "export"
            # A one-line JSONL log is also a valid JSON object
            if "method" in data and "path" in data:
                return "jsonl"
        if isinstance(data, list):
            return "export"

    # Line-delimited JSON: every non-blank line must be an object
    lines = [line for line in text.splitlines() if line.strip()]
    if lines:
        try:
            if all(isinstance(json.loads(line), dict) for line in lines):
                return "jsonl"
        except (json.JSONDecodeError, ValueError):
            pass

    raise CaptureFormatError(f"Unrecognised capture format: {file_path}")
