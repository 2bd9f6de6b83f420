"""
Bidirectional codec core.

A :class:`Codec` is a value pairing a decode function (node -> Result[T]) with
an encode function (T -> Result[node]). Codecs compose through the combinators
in this module; nothing here is meant to be subclassed.
"""

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
)

from ..errors import DecodeError, EncodeError
from ..tree import (
    Node,
    NodeKind,
    copy_node,
    dump_document,
    freeze_node,
    kind_of,
    parse_document,
    preview,
)
from .results import FailureKind, Result, decode_failure, encode_failure

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Enum)

DecodeFn = Callable[[Node], Result[Any]]
EncodeFn = Callable[[Any], Result[Node]]


class Codec(Generic[T]):
    """Composable pair of pure decode/encode functions."""

    __slots__ = ("name", "_decode", "_encode", "variants")

    def __init__(
        self,
        name: str,
        decode: DecodeFn,
        encode: EncodeFn,
        variants: Optional[Mapping[str, "Codec[Any]"]] = None,
    ):
        self.name = name
        self._decode = decode
        self._encode = encode
        # Tag table when this codec is a discriminated union
        self.variants = variants

    def __repr__(self) -> str:
        return f"Codec({self.name})"

    def decode(self, node: Node) -> Result[T]:
        return self._decode(node)

    def encode(self, value: T) -> Result[Node]:
        return self._encode(value)

    # Document helpers

    def parse(self, data: bytes | str) -> T:
        """Parse a JSON document and decode it, raising ``DecodeError`` on failure."""
        return self.decode(parse_document(data)).unwrap()

    def dump(self, value: T, indent: bool = False) -> bytes:
        """Encode a value and serialize it, raising ``EncodeError`` on failure."""
        return dump_document(self.encode(value).unwrap(), indent=indent)

    # Fluent combinators

    def transform(
        self,
        decode_fn: Callable[[T], U],
        encode_fn: Callable[[U], T],
        name: Optional[str] = None,
    ) -> "Codec[U]":
        return transform(self, decode_fn, encode_fn, name)

    def or_else(self, fallback: "Codec[T]") -> "Codec[T]":
        return or_else(self, fallback)

    def list(self) -> "Codec[Tuple[T, ...]]":
        return list_of(self)

    def validated(self, predicate: Callable[[T], bool], reason: str) -> "Codec[T]":
        return validated(self, predicate, reason)


# =============================================================================
# Scalars
# =============================================================================


def _scalar(
    name: str,
    kind: NodeKind,
    convert: Callable[[Any], Any] = lambda v: v,
    accepts: Callable[[Any], bool] = lambda v: True,
) -> Codec[Any]:
    def decode(node: Node) -> Result[Any]:
        if kind_of(node) is not kind or not accepts(node):
            return decode_failure(
                FailureKind.SHAPE_MISMATCH, f"expected {name}", name, preview(node)
            )
        return Result.success(convert(node))

    def encode(value: Any) -> Result[Node]:
        try:
            value_kind = kind_of(value)
        except TypeError:
            value_kind = None
        if value_kind is not kind or not accepts(value):
            return encode_failure(
                FailureKind.SHAPE_MISMATCH, f"cannot encode as {name}", name, repr(value)
            )
        return Result.success(convert(value))

    return Codec(name, decode, encode)


def _integral(value: Any) -> bool:
    return isinstance(value, int) or float(value).is_integer()


STRING: Codec[str] = _scalar("string", NodeKind.STRING)
INT: Codec[int] = _scalar("integer", NodeKind.NUMBER, int, _integral)
FLOAT: Codec[float] = _scalar("number", NodeKind.NUMBER, float)
BOOL: Codec[bool] = _scalar("boolean", NodeKind.BOOL)
NULL: Codec[None] = _scalar("null", NodeKind.NULL)

PASSTHROUGH: Codec[Node] = Codec(
    "any",
    lambda node: Result.success(freeze_node(node)),
    lambda value: Result.success(copy_node(value)),
)
"""Accepts any node as a read-only copy; used for documents without a typed schema."""


# =============================================================================
# Combinators
# =============================================================================


def transform(
    codec: Codec[T],
    decode_fn: Callable[[T], U],
    encode_fn: Callable[[U], T],
    name: Optional[str] = None,
) -> Codec[U]:
    """Map a ``Codec[A]`` to a ``Codec[B]`` with two pure functions.

    Exceptions raised by ``decode_fn`` become ``MALFORMED_TRANSFORM`` failures,
    except ``DecodeError`` whose failure is reported as-is. ``encode_fn`` may
    raise ``NotImplementedError`` to mark the codec decode-only.
    """
    label = name or f"{codec.name}*"

    def decode(node: Node) -> Result[U]:
        inner = codec.decode(node)
        if not inner.ok:
            return inner  # type: ignore[return-value]
        try:
            return Result.success(decode_fn(inner.value))  # type: ignore[arg-type]
        except DecodeError as e:
            failure = e.failure
            if not failure.preview:
                failure = replace(failure, codec=failure.codec or label, preview=preview(node))
            return Result.error(failure)
        except Exception as e:
            return decode_failure(
                FailureKind.MALFORMED_TRANSFORM,
                f"{type(e).__name__}: {e}",
                label,
                preview(node),
            )

    def encode(value: U) -> Result[Node]:
        try:
            raw = encode_fn(value)
        except NotImplementedError as e:
            return encode_failure(
                FailureKind.UNSUPPORTED_ENCODE, str(e) or f"{label} is decode-only", label
            )
        except EncodeError as e:
            return Result.error(e.failure, encoding=True)
        except Exception as e:
            return encode_failure(
                FailureKind.MALFORMED_TRANSFORM, f"{type(e).__name__}: {e}", label, repr(value)
            )
        return codec.encode(raw)

    return Codec(label, decode, encode)


def or_else(primary: Codec[T], fallback: Codec[T]) -> Codec[T]:
    """Try ``primary``, then ``fallback``. Encoding always uses ``primary``."""

    def decode(node: Node) -> Result[T]:
        first = primary.decode(node)
        if first.ok:
            return first
        second = fallback.decode(node)
        if second.ok:
            return second
        assert first.failure is not None and second.failure is not None
        failure = first.failure
        return Result.error(
            replace(failure, reason=f"{failure.reason}; alternative failed: {second.failure.describe()}")
        )

    return Codec(f"{primary.name}|{fallback.name}", decode, primary.encode)


def list_of(element: Codec[T]) -> Codec[Tuple[T, ...]]:
    """Array of ``element`` values, decoded to a tuple."""
    name = f"list[{element.name}]"

    def decode(node: Node) -> Result[Tuple[T, ...]]:
        if not isinstance(node, list):
            return decode_failure(FailureKind.SHAPE_MISMATCH, "expected array", name, preview(node))
        items = []
        for index, item in enumerate(node):
            result = element.decode(item)
            if not result.ok:
                return result.located(index)  # type: ignore[return-value]
            items.append(result.value)
        return Result.success(tuple(items))

    def encode(values: Sequence[T]) -> Result[Node]:
        if not isinstance(values, (list, tuple)):
            return encode_failure(FailureKind.SHAPE_MISMATCH, "expected a sequence", name, repr(values))
        out = []
        for index, value in enumerate(values):
            result = element.encode(value)
            if not result.ok:
                return result.located(index)
            out.append(result.value)
        return Result.success(out)

    return Codec(name, decode, encode)


def mapping_of(value_codec: Codec[T]) -> Codec[Mapping[str, T]]:
    """Object with arbitrary keys, decoded to a read-only mapping."""
    name = f"map[{value_codec.name}]"

    def decode(node: Node) -> Result[Mapping[str, T]]:
        if not isinstance(node, dict):
            return decode_failure(FailureKind.SHAPE_MISMATCH, "expected object", name, preview(node))
        out: Dict[str, T] = {}
        for key, item in node.items():
            result = value_codec.decode(item)
            if not result.ok:
                return result.located(key)  # type: ignore[return-value]
            out[key] = result.value  # type: ignore[assignment]
        return Result.success(MappingProxyType(out))

    def encode(values: Mapping[str, T]) -> Result[Node]:
        out: Dict[str, Any] = {}
        for key, value in values.items():
            result = value_codec.encode(value)
            if not result.ok:
                return result.located(key)
            out[key] = result.value
        return Result.success(out)

    return Codec(name, decode, encode)


def single_or_list(element: Codec[T]) -> Codec[Tuple[T, ...]]:
    """A bare value or an array of values, decoded to a tuple.

    Encodes a one-element tuple back to the bare value.
    """
    as_list = list_of(element)
    name = f"one_or_many[{element.name}]"

    def decode(node: Node) -> Result[Tuple[T, ...]]:
        if isinstance(node, list):
            return as_list.decode(node)
        return element.decode(node).map(lambda value: (value,))

    def encode(values: Sequence[T]) -> Result[Node]:
        if isinstance(values, (list, tuple)) and len(values) == 1:
            return element.encode(values[0])
        return as_list.encode(values)

    return Codec(name, decode, encode)


def by_kind(
    codecs: Mapping[NodeKind, Codec[T]],
    select: Callable[[T], NodeKind],
    name: str = "by_kind",
) -> Codec[T]:
    """Dispatch on the structural kind of the node.

    Args:
        codecs: Codec to use per node kind
        select: Picks the node kind a value encodes to; if it raises, encoding
            fails with ``MALFORMED_TRANSFORM``
        name: Name used in failures
    """
    expected = ", ".join(kind.value for kind in codecs)

    def decode(node: Node) -> Result[T]:
        codec = codecs.get(kind_of(node))
        if codec is None:
            return decode_failure(
                FailureKind.SHAPE_MISMATCH, f"expected one of: {expected}", name, preview(node)
            )
        return codec.decode(node)

    def encode(value: T) -> Result[Node]:
        try:
            codec = codecs.get(select(value))
        except Exception as e:
            return encode_failure(
                FailureKind.MALFORMED_TRANSFORM, f"{type(e).__name__}: {e}", name, repr(value)
            )
        if codec is None:
            return encode_failure(FailureKind.SHAPE_MISMATCH, "no codec for value", name, repr(value))
        return codec.encode(value)

    return Codec(name, decode, encode)


def validated(codec: Codec[T], predicate: Callable[[T], bool], reason: str) -> Codec[T]:
    """Reject decoded values that fail ``predicate``.

    A predicate that raises rejects the value as well, with the exception as
    the reason.
    """

    def decode(node: Node) -> Result[T]:
        result = codec.decode(node)
        if not result.ok:
            return result
        try:
            accepted = predicate(result.value)  # type: ignore[arg-type]
        except Exception as e:
            return decode_failure(
                FailureKind.MALFORMED_TRANSFORM, f"{type(e).__name__}: {e}", codec.name, preview(node)
            )
        if not accepted:
            return decode_failure(FailureKind.MALFORMED_TRANSFORM, reason, codec.name, preview(node))
        return result

    return Codec(codec.name, decode, codec.encode)


def decode_only(codec: Codec[T], what: Optional[str] = None) -> Codec[T]:
    """Same decoding as ``codec``; encoding fails with ``UNSUPPORTED_ENCODE``."""
    label = what or codec.name

    def encode(value: T) -> Result[Node]:
        return encode_failure(
            FailureKind.UNSUPPORTED_ENCODE, f"encoding {label} is not supported", label
        )

    return Codec(codec.name, codec.decode, encode)


def lazy(factory: Callable[[], Codec[T]], name: str = "lazy") -> Codec[T]:
    """Defer building a codec until first use (recursive schemas)."""
    cell: Dict[str, Codec[T]] = {}

    def resolve() -> Codec[T]:
        if "codec" not in cell:
            cell["codec"] = factory()
        return cell["codec"]

    return Codec(
        name,
        lambda node: resolve().decode(node),
        lambda value: resolve().encode(value),
    )


def enum_of(enum_cls: Type[E]) -> Codec[E]:
    """String codec mapping to members of ``enum_cls`` by value."""
    return transform(STRING, enum_cls, lambda member: member.value, name=enum_cls.__name__)


# =============================================================================
# Struct codec
# =============================================================================

_MISSING = object()


@dataclass(frozen=True)
class Field:
    """A named member of a struct codec.

    Attributes:
        name: Key in the object node
        codec: Codec for the value
        attr: Constructor keyword / attribute holding the value
        required: Whether absence is a failure
        default: Value used when an optional field is absent
    """

    name: str
    codec: Codec[Any]
    attr: str
    required: bool = True
    default: Any = None


def required_field(name: str, codec: Codec[Any], attr: Optional[str] = None) -> Field:
    return Field(name, codec, attr or name)


def optional_field(
    name: str, codec: Codec[Any], default: Any = None, attr: Optional[str] = None
) -> Field:
    """Field whose absence yields ``default``.

    A present field is always decoded by ``codec``, so an explicit null only
    passes when ``codec`` accepts null.
    """
    return Field(name, codec, attr or name, required=False, default=default)


def struct(constructor: Callable[..., T], *fields: Field, name: Optional[str] = None) -> Codec[T]:
    """Record codec assembled from ordered fields.

    Decoding calls ``constructor`` with one keyword per field; encoding reads the
    same attributes back and writes them in declared order. Optional fields
    holding ``None`` are omitted.
    """
    label = name or getattr(constructor, "__name__", "struct")

    def decode(node: Node) -> Result[T]:
        if not isinstance(node, dict):
            return decode_failure(FailureKind.SHAPE_MISMATCH, "expected object", label, preview(node))
        kwargs: Dict[str, Any] = {}
        for member in fields:
            raw = node.get(member.name, _MISSING)
            if raw is _MISSING:
                if member.required:
                    return decode_failure(
                        FailureKind.MISSING_FIELD,
                        f"missing field '{member.name}'",
                        label,
                        preview(node),
                    ).located(member.name)
                kwargs[member.attr] = member.default
                continue
            result = member.codec.decode(raw)
            if not result.ok:
                return result.located(member.name)  # type: ignore[return-value]
            kwargs[member.attr] = result.value
        try:
            return Result.success(constructor(**kwargs))
        except Exception as e:
            return decode_failure(
                FailureKind.MALFORMED_TRANSFORM, f"{type(e).__name__}: {e}", label, preview(node)
            )

    def encode(value: T) -> Result[Node]:
        out: Dict[str, Any] = {}
        for member in fields:
            current = getattr(value, member.attr, _MISSING)
            if current is _MISSING:
                return encode_failure(
                    FailureKind.SHAPE_MISMATCH,
                    f"value has no attribute '{member.attr}'",
                    label,
                    repr(value),
                )
            if current is None and not member.required:
                continue
            result = member.codec.encode(current)
            if not result.ok:
                return result.located(member.name)
            out[member.name] = result.value
        return Result.success(out)

    return Codec(label, decode, encode)


# =============================================================================
# Common shapes
# =============================================================================


@dataclass(frozen=True)
class FloatRange:
    """Closed numeric range; a single number decodes to ``min == max``."""

    min: float
    max: float


def _range_from_pair(pair: Tuple[float, ...]) -> FloatRange:
    if len(pair) != 2:
        raise ValueError(f"range array must have exactly 2 elements, got {len(pair)}")
    return FloatRange(pair[0], pair[1])


FLOAT_RANGE: Codec[FloatRange] = or_else(
    transform(list_of(FLOAT), _range_from_pair, lambda r: (r.min, r.max), name="float_range"),
    transform(FLOAT, lambda f: FloatRange(f, f), lambda r: r.min, name="float_range"),
)

DOUBLE_LIST: Codec[Tuple[float, ...]] = list_of(FLOAT)
