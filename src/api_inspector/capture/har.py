"""HAR 1.2 parser.

Parses HTTP Archive files exported by browsers or proxies into
CapturedExchange models.
"""

import base64
import binascii
import json
from datetime import datetime
from pathlib import Path
from urllib.parse import urlsplit

from pydantic import ValidationError

from api_inspector.errors import CaptureFormatError

from .base import CapturedExchange, read_capture_text


def parse_har(file_path: Path, session_id: str = "") -> list[CapturedExchange]:
    """Parse a HAR file into a list of CapturedExchange."""
    text = read_capture_text(file_path)
    try:
        har = json.loads(text)
    except json.JSONDecodeError as e:
        raise CaptureFormatError(f"Invalid HAR file {file_path}: {e}") from e

    log = har.get("log") if isinstance(har, dict) else None
    entries = log.get("entries") if isinstance(log, dict) else None
    if not isinstance(entries, list):
        raise CaptureFormatError(f"HAR file {file_path} has no log.entries list")

    exchanges = []
    for index, entry in enumerate(entries):
        try:
            exchanges.append(_parse_entry(entry, session_id))
        except (AttributeError, KeyError, TypeError, ValidationError) as e:
            raise CaptureFormatError(f"HAR entry {index} is invalid: {e}") from e
    return exchanges


def _parse_entry(entry: dict, session_id: str) -> CapturedExchange:
    req = entry["request"]
    resp = entry.get("response") or {}

    status = resp.get("status") or None  # HAR uses 0 for "no response"
    return CapturedExchange(
        session_id=session_id,
        method=req["method"],
        path=_request_path(req["url"]),
        status_code=status,
        duration_ms=entry.get("time"),
        request_headers=_parse_headers(req.get("headers", [])),
        request_body=(req.get("postData") or {}).get("text"),
        response_headers=_parse_headers(resp.get("headers", [])),
        response_body=_parse_content(resp.get("content")),
        error=resp.get("_error") or None,
        timestamp=_parse_started(entry.get("startedDateTime")),
    )


def _request_path(url: str) -> str:
    parts = urlsplit(url)
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return path


def _parse_headers(headers: list[dict]) -> dict[str, str]:
    result: dict[str, str] = {}
    for h in headers:
        if not isinstance(h, dict):
            continue
        name = str(h.get("name") or "").lower()
        if name:
            # repeated headers are comma-joined
            value = h.get("value", "")
            result[name] = f"{result[name]}, {value}" if name in result else value
    return result


def _parse_content(content: dict | None) -> str | None:
    if not content or content.get("text") is None:
        return None
    text = content["text"]
    if content.get("encoding") == "base64":
        try:
            return base64.b64decode(text).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            return None
    return text


def _parse_started(started: str | None) -> int:
    if not started:
        return 0
    try:
        moment = datetime.fromisoformat(started.replace("Z", "+00:00"))
    except ValueError:
        return 0
    return int(moment.timestamp() * 1000)
