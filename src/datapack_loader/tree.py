"""
Data-tree model shared by every codec.

A node is a plain JSON value (None, bool, int, float, str, list, dict). Codecs
read from and write to these values and never mutate a node they were given;
helpers such as :func:`with_field` return new nodes instead.

Untyped values kept inside decoded objects are frozen with :func:`freeze_node`
(read-only mappings and tuples) and thawed back with :func:`copy_node`.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, TypeAlias, Union

import orjson

from .errors import DecodeError

Node: TypeAlias = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]
"""A data-tree node: any value a JSON document can hold."""

ObjectNode: TypeAlias = Dict[str, Any]
ArrayNode: TypeAlias = List[Any]


class NodeKind(Enum):
    """Structural kind of a data-tree node."""

    NULL = "null"
    BOOL = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def kind_of(node: Any) -> NodeKind:
    """Return the kind of ``node``.

    ``bool`` is checked before numbers since it is an ``int`` subclass.

    Raises:
        TypeError: If ``node`` is not a data-tree value.
    """
    if node is None:
        return NodeKind.NULL
    if isinstance(node, bool):
        return NodeKind.BOOL
    if isinstance(node, (int, float)):
        return NodeKind.NUMBER
    if isinstance(node, str):
        return NodeKind.STRING
    if isinstance(node, (list, tuple)):
        return NodeKind.ARRAY
    if isinstance(node, Mapping):
        return NodeKind.OBJECT
    raise TypeError(f"Not a data-tree node: {type(node).__name__}")


def nodes_equal(left: Any, right: Any) -> bool:
    """Structural equality of two nodes.

    Unlike ``==`` this keeps ``True`` and ``1`` apart. Object key order is
    ignored, array order is not.
    """
    left_kind = kind_of(left)
    if left_kind is not kind_of(right):
        return False
    if left_kind is NodeKind.ARRAY:
        return len(left) == len(right) and all(
            nodes_equal(a, b) for a, b in zip(left, right)
        )
    if left_kind is NodeKind.OBJECT:
        if left.keys() != right.keys():
            return False
        return all(nodes_equal(left[key], right[key]) for key in left)
    return left == right


def with_field(obj: ObjectNode, key: str, value: Node, first: bool = False) -> ObjectNode:
    """Return a copy of ``obj`` with ``key`` set to ``value``.

    Args:
        obj: Source object node (left untouched)
        key: Field name
        value: Field value
        first: Place the field before all existing fields when it is new

    Returns:
        New object node
    """
    if first and key not in obj:
        result: ObjectNode = {key: value}
        result.update(obj)
        return result
    result = dict(obj)
    result[key] = value
    return result


def copy_node(node: Node) -> Node:
    """Deep mutable copy of a node, thawing frozen objects and arrays."""
    if isinstance(node, Mapping):
        return {key: copy_node(value) for key, value in node.items()}
    if isinstance(node, (list, tuple)):
        return [copy_node(item) for item in node]
    return node


def freeze_node(node: Node) -> Any:
    """Deep read-only copy of a node.

    Objects become ``MappingProxyType`` views and arrays become tuples, so a
    decoded value cannot be edited through the nodes it holds.
    """
    if isinstance(node, Mapping):
        return MappingProxyType({key: freeze_node(value) for key, value in node.items()})
    if isinstance(node, (list, tuple)):
        return tuple(freeze_node(item) for item in node)
    return node


def parse_document(data: bytes | str) -> Node:
    """Parse a textual document into a node.

    Raises:
        DecodeError: With kind ``MALFORMED_DOCUMENT`` if the text is not JSON.
    """
    from .codecs.results import Failure, FailureKind

    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raw = data if isinstance(data, str) else data[:200].decode("utf-8", "replace")
        raise DecodeError(
            Failure(
                FailureKind.MALFORMED_DOCUMENT,
                f"invalid document: {e}",
                codec="document",
                preview=_truncate(raw, 80),
            )
        ) from e


def dump_document(node: Node, indent: bool = False) -> bytes:
    """Serialize a node to JSON bytes."""
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(copy_node(node), option=option)


def preview(node: Any, limit: int = 80) -> str:
    """Bounded textual preview of a node for diagnostics."""
    try:
        text = orjson.dumps(copy_node(node)).decode("utf-8")
    except TypeError:
        text = repr(node)
    return _truncate(text, limit)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)] + "..."
