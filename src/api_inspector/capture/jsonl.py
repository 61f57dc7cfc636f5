"""Line-delimited request log parser.

Each non-blank line is one logged request row, as written by the inspector's
request logger.
"""

import json
from pathlib import Path

from api_inspector.errors import CaptureFormatError

from .base import CapturedExchange, rows_to_exchanges


def parse_jsonl(file_path: Path) -> list[CapturedExchange]:
    """Parse a JSONL request log into a list of CapturedExchange."""
    rows = []
    with open(file_path, encoding="utf-8") as f:
        try:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    rows.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise CaptureFormatError(f"{file_path}:{lineno}: invalid JSON: {e.msg}") from e
        except UnicodeDecodeError as e:
            raise CaptureFormatError(f"{file_path} is not UTF-8 text") from e
    return rows_to_exchanges(rows)
