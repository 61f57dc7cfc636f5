"""Fetch captured requests from a running inspector's query API."""

import logging

import requests

from api_inspector.errors import CaptureFormatError, RemoteSourceError

from .base import CapturedExchange, rows_to_exchanges
from .export import unwrap_rows

logger = logging.getLogger(__name__)

REQUESTS_ENDPOINT = "/api/requests"


def fetch_exchanges(
    base_url: str,
    method: str | None = None,
    path: str | None = None,
    status_code: int | None = None,
    session_id: str | None = None,
    timeout: float = 10.0,
) -> list[CapturedExchange]:
    """Query ``GET /api/requests`` and convert the returned rows."""
    params: dict[str, str | int] = {}
    if method:
        params["method"] = method
    if path:
        params["path"] = path
    if status_code is not None:
        params["status"] = status_code
    if session_id:
        params["session"] = session_id

    url = base_url.rstrip("/") + REQUESTS_ENDPOINT
    logger.info("Fetching captured requests from %s", url)
    try:
        response = requests.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as e:
        raise RemoteSourceError(f"Failed to fetch {url}: {e}") from e
    except ValueError as e:
        raise RemoteSourceError(f"{url} did not return JSON") from e

    try:
        rows = unwrap_rows(payload)
    except CaptureFormatError as e:
        raise RemoteSourceError(f"Unexpected response from {url}: {e}") from e
    logger.info("Fetched %d requests", len(rows))
    return rows_to_exchanges(rows)
