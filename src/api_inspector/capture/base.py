"""Unified model for captured request/response exchanges.

All capture readers (HAR, JSONL log, inspector export) convert their input
into CapturedExchange for grouping and analysis.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from api_inspector.errors import CaptureFormatError


class CapturedExchange(BaseModel):
    """A single proxied request and the backend's response."""

    session_id: str = ""
    method: str  # GET / POST / PUT / DELETE / PATCH
    path: str  # /api/users?page=2
    status_code: int | None = None  # None when the backend was unreachable
    duration_ms: float | None = None
    request_headers: dict[str, Any] = {}
    request_body: str | None = None
    response_headers: dict[str, Any] = {}
    response_body: str | None = None  # raw text as received
    error: str | None = None
    timestamp: int = 0  # epoch ms when the request started

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()

    @field_validator("request_body", "response_body", mode="before")
    @classmethod
    def _body_as_text(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return json.dumps(value)

    @property
    def endpoint(self) -> str:
        return f"{self.method} {self.path}"

    def json_body(self, default: Any = None) -> Any:
        """Decode the response body, or return default if it is empty or not JSON."""
        if not self.response_body:
            return default
        try:
            return json.loads(self.response_body)
        except (json.JSONDecodeError, ValueError, RecursionError):
            return default


def read_capture_text(file_path: Path) -> str:
    """Read a capture file as UTF-8 text."""
    try:
        return file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise CaptureFormatError(f"{file_path} is not UTF-8 text") from e


def _first(row: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return default


def _headers(value: Any) -> dict[str, Any]:
    if isinstance(value, str):
        try:
            value = json.loads(value) if value else {}
        except json.JSONDecodeError:
            return {}
    return value if isinstance(value, dict) else {}


def row_to_exchange(row: dict) -> CapturedExchange:
    """Convert one logged request row into a CapturedExchange.

    Accepts the logger's snake_case column names and the query API's
    camelCase names. Header columns may be JSON-encoded strings.
    """
    return CapturedExchange(
        session_id=str(_first(row, "session_id", "sessionId", default="")),
        method=_first(row, "method", default="GET"),
        path=_first(row, "path", "url", default="/"),
        status_code=_first(row, "status_code", "statusCode"),
        duration_ms=_first(row, "duration_ms", "durationMs"),
        request_headers=_headers(_first(row, "request_headers", "requestHeaders")),
        request_body=_first(row, "request_body", "requestBody"),
        response_headers=_headers(_first(row, "response_headers", "responseHeaders")),
        response_body=_first(row, "response_body", "responseBody"),
        error=_first(row, "error"),
        timestamp=_first(row, "timestamp", default=0),
    )


def rows_to_exchanges(rows: list[dict]) -> list[CapturedExchange]:
    """Convert logged request rows, rejecting rows that do not validate."""
    exchanges = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise CaptureFormatError(f"Request row {index} is not an object")
        try:
            exchanges.append(row_to_exchange(row))
        except ValidationError as e:
            raise CaptureFormatError(f"Request row {index} is invalid: {e}") from e
    return exchanges
