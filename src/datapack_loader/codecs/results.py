"""
Typed decode/encode results.

Every codec returns a :class:`Result` instead of raising. A failed result holds a
:class:`Failure` describing which combinator failed, where, and why.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Generic, Optional, Tuple, TypeVar, Union

from ..errors import DecodeError, EncodeError

T = TypeVar("T")
U = TypeVar("U")

PathSegment = Union[str, int]


class FailureKind(Enum):
    """Taxonomy of codec failures."""

    SHAPE_MISMATCH = "shape_mismatch"
    MISSING_FIELD = "missing_field"
    UNKNOWN_VARIANT = "unknown_variant"
    UNRESOLVED_IDENTIFIER = "unresolved_identifier"
    MALFORMED_TRANSFORM = "malformed_transform"
    UNSUPPORTED_ENCODE = "unsupported_encode"
    MALFORMED_DOCUMENT = "malformed_document"


@dataclass(frozen=True)
class Failure:
    """Description of a single decode or encode failure.

    Attributes:
        kind: Failure category
        reason: Human-readable explanation
        codec: Name of the combinator that failed
        preview: Bounded textual preview of the offending node or value
        path: Location inside the document, outermost segment first
        source: Document the failure came from, when known
    """

    kind: FailureKind
    reason: str
    codec: str = ""
    preview: str = ""
    path: Tuple[PathSegment, ...] = ()
    source: str = ""

    def at(self, segment: PathSegment) -> "Failure":
        """Return this failure located one level deeper, under ``segment``."""
        return replace(self, path=(segment,) + self.path)

    def from_source(self, source: str) -> "Failure":
        """Return this failure tagged with the document it came from."""
        return replace(self, source=source)

    @property
    def location(self) -> str:
        parts = ["$"]
        for segment in self.path:
            if isinstance(segment, int):
                parts.append(f"[{segment}]")
            else:
                parts.append(f".{segment}")
        return "".join(parts)

    def describe(self) -> str:
        text = f"{self.location}: {self.reason}"
        if self.source:
            text = f"{self.source} {text}"
        if self.preview:
            text += f" (got {self.preview})"
        return text


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a decode or encode: either a value or a failure."""

    value: Optional[T] = None
    failure: Optional[Failure] = None
    encoding: bool = field(default=False, compare=False)

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def error(cls, failure: Failure, encoding: bool = False) -> "Result[Any]":
        return cls(failure=failure, encoding=encoding)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        """Return the value or raise the matching codec exception."""
        if self.failure is not None:
            if self.encoding:
                raise EncodeError(self.failure)
            raise DecodeError(self.failure)
        return self.value  # type: ignore[return-value]

    def value_or(self, default: T) -> T:
        return self.value if self.failure is None else default  # type: ignore[return-value]

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        if self.failure is not None:
            return self  # type: ignore[return-value]
        return Result(value=fn(self.value), encoding=self.encoding)  # type: ignore[arg-type]

    def located(self, segment: PathSegment) -> "Result[T]":
        """Prefix the failure path with ``segment`` (no-op on success)."""
        if self.failure is None:
            return self
        return Result(failure=self.failure.at(segment), encoding=self.encoding)


def decode_failure(
    kind: FailureKind, reason: str, codec: str, preview: str = ""
) -> Result[Any]:
    return Result.error(Failure(kind, reason, codec=codec, preview=preview))


def encode_failure(
    kind: FailureKind, reason: str, codec: str, preview: str = ""
) -> Result[Any]:
    return Result.error(Failure(kind, reason, codec=codec, preview=preview), encoding=True)
