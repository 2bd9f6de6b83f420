"""
Number providers used by loot tables and loot functions.

A provider is written either as a bare number (a constant) or as an object
dispatched on ``type``. Both shapes decode to the same sum type.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Union

from ..codecs import (
    FLOAT,
    STRING,
    Codec,
    by_kind,
    lazy,
    normalize_location,
    optional_field,
    required_field,
    struct,
    union,
)
from ..tree import NodeKind


@dataclass(frozen=True)
class ConstantNumber:
    variant_tag: ClassVar[str] = "minecraft:constant"

    value: float


@dataclass(frozen=True)
class UniformNumber:
    variant_tag: ClassVar[str] = "minecraft:uniform"

    min: Any
    max: Any


@dataclass(frozen=True)
class BinomialNumber:
    variant_tag: ClassVar[str] = "minecraft:binomial"

    n: Any
    p: Any


@dataclass(frozen=True)
class ScoreTarget:
    """Entity or fixed name whose score is read."""

    type: str
    name: Optional[str] = None


@dataclass(frozen=True)
class ScoreNumber:
    """Value of a scoreboard score, optionally scaled."""

    variant_tag: ClassVar[str] = "minecraft:score"

    target: Union[str, ScoreTarget]
    score: str
    scale: Optional[float] = None


SCORE_TARGET: Codec[Union[str, ScoreTarget]] = by_kind(
    {
        NodeKind.STRING: STRING,
        NodeKind.OBJECT: struct(
            ScoreTarget, required_field("type", STRING), optional_field("name", STRING)
        ),
    },
    lambda target: NodeKind.STRING if isinstance(target, str) else NodeKind.OBJECT,
    name="score_target",
)

# Providers nest (uniform bounds are providers themselves)
_NESTED = lazy(lambda: NUMBER_PROVIDER, name="number_provider")

TYPED_NUMBER_PROVIDER: Codec[Any] = union(
    "type",
    {
        ConstantNumber.variant_tag: struct(ConstantNumber, required_field("value", FLOAT)),
        UniformNumber.variant_tag: struct(
            UniformNumber, required_field("min", _NESTED), required_field("max", _NESTED)
        ),
        BinomialNumber.variant_tag: struct(
            BinomialNumber, required_field("n", _NESTED), required_field("p", _NESTED)
        ),
        ScoreNumber.variant_tag: struct(
            ScoreNumber,
            required_field("target", SCORE_TARGET),
            required_field("score", STRING),
            optional_field("scale", FLOAT),
        ),
    },
    name="number_provider",
    normalize_tag=normalize_location,
)


def _shape_of(provider: Any) -> NodeKind:
    return NodeKind.NUMBER if isinstance(provider, ConstantNumber) else NodeKind.OBJECT


NUMBER_PROVIDER: Codec[Any] = by_kind(
    {
        NodeKind.NUMBER: FLOAT.transform(ConstantNumber, lambda c: c.value, name="constant"),
        NodeKind.OBJECT: TYPED_NUMBER_PROVIDER,
    },
    _shape_of,
    name="number_provider",
)
"""Bare number or typed object; constants always encode as bare numbers."""
