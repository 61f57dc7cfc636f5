"""Report rendering: turns diff analyses into API-style payloads and text.

Works from the analyzer's structured records only; formatted messages are
produced here and never parsed back.
"""

import json
from typing import Any

from api_inspector.analyzer.base import EndpointDiffAnalysis, GroupedEndpoint, Inconsistency
from api_inspector.analyzer.diff import analyze_endpoint_diffs


def analyze_all(endpoints: list[GroupedEndpoint]) -> list[EndpointDiffAnalysis]:
    """Analyze every endpoint with at least two shapes; keep inconsistent ones."""
    analyses = []
    for endpoint in endpoints:
        if len(endpoint.shapes) < 2:
            continue
        analysis = analyze_endpoint_diffs(endpoint)
        if analysis.has_inconsistencies:
            analyses.append(analysis)
    return analyses


def _missing_entry(item: Inconsistency) -> dict[str, Any]:
    return {
        "field": item.path,
        "path": item.path,
        "type": "missing",
        "missingCount": item.missing_count,
    }


def _type_change_entry(item: Inconsistency) -> dict[str, Any]:
    return {
        "field": item.path,
        "path": item.path,
        "type": "type_change",
        "expectedType": item.types[0],
        "actualType": ", ".join(item.types[1:]),
    }


def analysis_to_dict(analysis: EndpointDiffAnalysis) -> dict[str, Any]:
    return {
        "method": analysis.method,
        "path": analysis.path,
        "totalResponses": analysis.total_shapes,
        "inconsistencies": {
            "missingFields": [_missing_entry(i) for i in analysis.missing_fields],
            "typeChanges": [_type_change_entry(i) for i in analysis.type_conflicts],
        },
        "baseShape": analysis.shapes[0] if analysis.shapes else {},
        "variantShapes": analysis.shapes[1:],
    }


def diff_report(endpoints: list[GroupedEndpoint]) -> list[dict[str, Any]]:
    """Build the per-endpoint diff payload for every inconsistent endpoint."""
    return [analysis_to_dict(a) for a in analyze_all(endpoints)]


def render_text(analyses: list[EndpointDiffAnalysis]) -> str:
    if not analyses:
        return "No inconsistencies found."
    blocks = []
    for analysis in analyses:
        lines = [f"## {analysis.endpoint} ({analysis.total_shapes} responses)"]
        lines.extend(f"  - {message}" for message in analysis.messages)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_json(data: list[Any]) -> str:
    """Wrap data in the inspector's response envelope."""
    return json.dumps({"success": True, "count": len(data), "data": data}, indent=2)
