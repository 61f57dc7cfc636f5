"""Shape extraction: reduces decoded JSON to a value-free structural signature.

A shape is plain JSON: a tag string for primitives, a dict of field shapes for
objects, and a one-element list holding the first element's shape for arrays.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Union

Shape = Union[str, dict[str, Any], list[Any]]


class _Undefined:
    """Marker for a value that is absent rather than null."""

    def __repr__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


class TypeTag(str, Enum):
    """Every kind a decoded JSON value (or a shape node) can have."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    UNDEFINED = "undefined"
    UNKNOWN = "unknown"
    OBJECT = "object"
    ARRAY = "array"


def classify(value: Any) -> TypeTag:
    """Return the type tag of a runtime value.

    bool is checked before numbers since it subclasses int. There is a single
    numeric tag for integers and floats alike.
    """
    if value is None:
        return TypeTag.NULL
    if value is UNDEFINED:
        return TypeTag.UNDEFINED
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, (int, float)):
        return TypeTag.NUMBER
    if isinstance(value, str):
        return TypeTag.STRING
    if isinstance(value, (list, tuple)):
        return TypeTag.ARRAY
    if isinstance(value, Mapping):
        return TypeTag.OBJECT
    return TypeTag.UNKNOWN


def extract_shape(value: Any = UNDEFINED) -> Shape:
    """Extract the shape of a decoded JSON value.

    Walks the value with an explicit stack, so nesting depth is not bounded
    by the interpreter's recursion limit.

    >>> extract_shape({"name": "John", "age": 30, "tags": ["a", "b"]})
    {'name': 'string', 'age': 'number', 'tags': ['string']}
    >>> extract_shape({"user": {"id": 1, "profile": {"bio": "text"}}})
    {'user': {'id': 'number', 'profile': {'bio': 'string'}}}
    """
    root: list[Any] = [None]
    # (value, container to fill, key or index within it)
    stack: list[tuple[Any, Any, Any]] = [(value, root, 0)]

    while stack:
        item, parent, slot = stack.pop()
        tag = classify(item)

        if tag is TypeTag.ARRAY:
            if len(item) == 0:
                parent[slot] = [TypeTag.UNKNOWN.value]
                continue
            node: Any = [None]
            parent[slot] = node
            stack.append((item[0], node, 0))
        elif tag is TypeTag.OBJECT:
            node = {}
            parent[slot] = node
            for key, child in item.items():
                key = str(key)
                node[key] = None  # reserves input key order
                stack.append((child, node, key))
        else:
            parent[slot] = tag.value

    return root[0]


def extract_array_shape(items: list | tuple) -> Shape:
    """Extract an array shape from its first element only.

    Elements past index 0 are never inspected, so heterogeneous arrays are
    described by whatever comes first. An empty array yields ``["unknown"]``.
    """
    if len(items) == 0:
        return [TypeTag.UNKNOWN.value]
    return [extract_shape(items[0])]
