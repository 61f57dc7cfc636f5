"""Group captured exchanges per endpoint and answer simple queries over them.

Endpoints are identified by exact (method, path). Newest exchanges come first
everywhere, matching the order the inspector's query API returns them in.
"""

import logging

from api_inspector.analyzer.base import GroupedEndpoint
from api_inspector.analyzer.shape import UNDEFINED, extract_shape
from api_inspector.config import Settings

from .base import CapturedExchange

logger = logging.getLogger(__name__)


def _newest_first(exchanges: list[CapturedExchange]) -> list[CapturedExchange]:
    # stable sort: equal timestamps keep capture order
    return sorted(exchanges, key=lambda ex: ex.timestamp, reverse=True)


def filter_exchanges(
    exchanges: list[CapturedExchange],
    method: str | None = None,
    path: str | None = None,
    status_code: int | None = None,
    session_id: str | None = None,
    limit: int = 100,
) -> list[CapturedExchange]:
    """Filter exchanges; ``path`` is a substring match, ``method`` ignores case."""
    result = []
    for ex in _newest_first(exchanges):
        if method and ex.method != method.upper():
            continue
        if path and path not in ex.path:
            continue
        if status_code is not None and ex.status_code != status_code:
            continue
        if session_id and ex.session_id != session_id:
            continue
        result.append(ex)
    return result[:limit]


def unique_endpoints(exchanges: list[CapturedExchange]) -> list[tuple[str, str, int]]:
    """Return ``(method, path, count)`` per endpoint, most requested first."""
    counts: dict[tuple[str, str], int] = {}
    for ex in exchanges:
        key = (ex.method, ex.path)
        counts[key] = counts.get(key, 0) + 1
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [(method, path, count) for (method, path), count in ordered]


def endpoint_exchanges(
    exchanges: list[CapturedExchange], method: str, path: str, limit: int = 100
) -> list[CapturedExchange]:
    """Return the newest exchanges for one endpoint."""
    method = method.upper()
    matching = [ex for ex in exchanges if ex.method == method and ex.path == path]
    return _newest_first(matching)[:limit]


def group_endpoint(
    method: str, path: str, exchanges: list[CapturedExchange], settings: Settings, request_count: int | None = None
) -> GroupedEndpoint:
    """Build a GroupedEndpoint from one endpoint's exchanges (newest first).

    Only successful responses with a JSON body contribute a shape.
    """
    shapes = []
    for ex in exchanges:
        if not settings.is_success(ex.status_code):
            continue
        body = ex.json_body(default=UNDEFINED)
        if body is UNDEFINED:
            logger.debug("Skipping non-JSON response body for %s", ex.endpoint)
            continue
        shapes.append(extract_shape(body))

    status_codes: list[int] = []
    for ex in exchanges:
        if ex.status_code is not None and ex.status_code not in status_codes:
            status_codes.append(ex.status_code)

    durations = [ex.duration_ms for ex in exchanges if ex.duration_ms is not None]

    return GroupedEndpoint(
        method=method,
        path=path,
        shapes=shapes,
        request_count=len(exchanges) if request_count is None else request_count,
        first_seen=exchanges[-1].timestamp if exchanges else 0,
        last_seen=exchanges[0].timestamp if exchanges else 0,
        status_codes=status_codes,
        avg_duration=sum(durations) / len(durations) if durations else 0.0,
    )


def group_endpoints(exchanges: list[CapturedExchange], settings: Settings | None = None) -> list[GroupedEndpoint]:
    """Group exchanges into one GroupedEndpoint per unique endpoint."""
    settings = settings or Settings()
    groups = []
    for method, path, count in unique_endpoints(exchanges):
        recent = endpoint_exchanges(exchanges, method, path, limit=settings.endpoint_limit)
        groups.append(group_endpoint(method, path, recent, settings, request_count=count))
    logger.info("Grouped %d exchanges into %d endpoints", len(exchanges), len(groups))
    return groups


def latency_stats(exchanges: list[CapturedExchange], limit: int = 1000) -> list[dict]:
    """Per-endpoint latency summary over exchanges with a known duration."""
    stats = []
    for method, path, _ in unique_endpoints(exchanges):
        recent = endpoint_exchanges(exchanges, method, path, limit=limit)
        latencies = [ex.duration_ms for ex in recent if ex.duration_ms is not None]
        if not latencies:
            continue
        stats.append({
            "endpoint": f"{method} {path}",
            "method": method,
            "path": path,
            "avgLatency": sum(latencies) / len(latencies),
            "minLatency": min(latencies),
            "maxLatency": max(latencies),
            "count": len(latencies),
        })
    return stats
