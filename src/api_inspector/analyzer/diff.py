"""Diff analyzer: finds missing fields and type drift across shapes of one endpoint.

All shapes are compared as a population: the field universe is the union of
every field path seen in any shape, and each path is checked for how many
shapes contain it and which types it takes. The first shape is carried through
for display only.
"""

import logging
from collections.abc import Iterator
from typing import Any

from api_inspector.analyzer.base import EndpointDiffAnalysis, GroupedEndpoint, Inconsistency
from api_inspector.analyzer.shape import Shape, TypeTag

logger = logging.getLogger(__name__)


def _node_type(node: Any) -> str:
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return TypeTag.ARRAY.value
    if isinstance(node, dict):
        return TypeTag.OBJECT.value
    return TypeTag.UNKNOWN.value


def field_paths(shape: Shape, prefix: str = "") -> set[str]:
    """Return every addressable field path in a shape.

    Object fields are paths themselves and also contribute the paths of their
    children. Primitive and array fields end the path; array internals are
    never addressable. A root primitive or array has no paths.
    """
    if not isinstance(shape, dict):
        return {prefix} if prefix else set()

    return {path for path, _ in iter_field_types(shape, prefix)}


def type_at_path(shape: Shape, path: str) -> str:
    """Resolve the type tag at a dot-separated path.

    Returns ``"unknown"`` when the walk reaches a node that is not an object
    before the last segment, or when a segment is absent.
    """
    current: Any = shape
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return TypeTag.UNKNOWN.value
        current = current[part]
    return _node_type(current)


def iter_field_types(shape: Shape, prefix: str = "") -> Iterator[tuple[str, str]]:
    """Yield ``(path, type)`` for every field path of a shape in key order.

    Produces exactly the paths of :func:`field_paths`, each paired with what
    :func:`type_at_path` would return, in a single depth-first walk that
    uses an explicit stack instead of recursion.
    """
    if not isinstance(shape, dict):
        return
    stack = [(prefix, iter(shape.items()))]
    while stack:
        base, items = stack[-1]
        for key, child in items:
            child_path = f"{base}.{key}" if base else key
            yield child_path, _node_type(child)
            if isinstance(child, dict):
                stack.append((child_path, iter(child.items())))
            break
        else:
            stack.pop()


def analyze_endpoint_diffs(endpoint: GroupedEndpoint) -> EndpointDiffAnalysis:
    """Compare all shapes observed for an endpoint and report inconsistencies.

    With fewer than two shapes there is nothing to compare and the result
    carries no inconsistencies.
    """
    shapes = endpoint.shapes
    total = len(shapes)

    inconsistencies: list[Inconsistency] = []
    if total >= 2:
        occurrences: dict[str, int] = {}
        # dicts used as insertion-ordered sets
        field_types: dict[str, dict[str, None]] = {}

        for shape in shapes:
            present: dict[str, str] = {}
            for path, tag in iter_field_types(shape):
                present.setdefault(path, tag)
            for path, tag in present.items():
                occurrences[path] = occurrences.get(path, 0) + 1
                field_types.setdefault(path, {})[tag] = None

        for path, count in occurrences.items():
            if count < total:
                inconsistencies.append(
                    Inconsistency(kind="missing", path=path, total=total, missing_count=total - count)
                )
            types = list(field_types[path])
            if len(types) > 1:
                inconsistencies.append(
                    Inconsistency(kind="type_conflict", path=path, total=total, types=types)
                )

    logger.debug(
        "Analyzed %s: %d shapes, %d inconsistencies",
        endpoint.endpoint, total, len(inconsistencies),
    )
    return EndpointDiffAnalysis(
        endpoint=endpoint.endpoint,
        method=endpoint.method,
        path=endpoint.path,
        shapes=shapes,
        total_shapes=total,
        inconsistencies=inconsistencies,
    )


def analyze_shapes(method: str, path: str, shapes: list[Shape]) -> EndpointDiffAnalysis:
    """Shortcut for analyzing a bare list of shapes."""
    endpoint = GroupedEndpoint(method=method, path=path, shapes=shapes, request_count=len(shapes))
    return analyze_endpoint_diffs(endpoint)
