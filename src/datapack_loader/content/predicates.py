"""
Loot predicates, dispatched on the ``condition`` field.

Conditions without a typed schema are kept as :class:`OpaquePredicate`.
``minecraft:alternative`` is the pre-1.20 name of ``minecraft:any_of``; it
decodes to :class:`AnyOf` and is written back as ``minecraft:any_of``.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Tuple

from ..codecs import (
    BOOL,
    DOUBLE_LIST,
    FLOAT,
    FLOAT_RANGE,
    PASSTHROUGH,
    RESOURCE_LOCATION,
    STRING,
    Codec,
    FloatRange,
    OpaqueVariant,
    ResourceLocation,
    lazy,
    list_of,
    normalize_location,
    opaque_variant,
    optional_field,
    required_field,
    struct,
    union,
)
from ..tree import Node

CONDITION_KEY = "condition"


class OpaquePredicate(OpaqueVariant):
    """Predicate kept as raw fields."""


@dataclass(frozen=True)
class RandomChance:
    variant_tag: ClassVar[str] = "minecraft:random_chance"

    chance: float


@dataclass(frozen=True)
class RandomChanceWithLooting:
    variant_tag: ClassVar[str] = "minecraft:random_chance_with_looting"

    chance: float
    looting_multiplier: float


@dataclass(frozen=True)
class Inverted:
    variant_tag: ClassVar[str] = "minecraft:inverted"

    term: Any


@dataclass(frozen=True)
class AnyOf:
    variant_tag: ClassVar[str] = "minecraft:any_of"

    terms: Tuple[Any, ...]


@dataclass(frozen=True)
class AllOf:
    variant_tag: ClassVar[str] = "minecraft:all_of"

    terms: Tuple[Any, ...]


@dataclass(frozen=True)
class KilledByPlayer:
    variant_tag: ClassVar[str] = "minecraft:killed_by_player"

    inverse: Optional[bool] = None


@dataclass(frozen=True)
class SurvivesExplosion:
    variant_tag: ClassVar[str] = "minecraft:survives_explosion"


@dataclass(frozen=True)
class PredicateReference:
    """Reference to a predicate file by id."""

    variant_tag: ClassVar[str] = "minecraft:reference"

    name: ResourceLocation


@dataclass(frozen=True)
class WeatherCheck:
    variant_tag: ClassVar[str] = "minecraft:weather_check"

    raining: Optional[bool] = None
    thundering: Optional[bool] = None


@dataclass(frozen=True)
class TimeCheck:
    variant_tag: ClassVar[str] = "minecraft:time_check"

    value: FloatRange
    period: Optional[float] = None


@dataclass(frozen=True)
class TableBonus:
    variant_tag: ClassVar[str] = "minecraft:table_bonus"

    enchantment: ResourceLocation
    chances: Tuple[float, ...]


@dataclass(frozen=True)
class MatchTool:
    variant_tag: ClassVar[str] = "minecraft:match_tool"

    predicate: Optional[Node] = None


@dataclass(frozen=True)
class EntityProperties:
    variant_tag: ClassVar[str] = "minecraft:entity_properties"

    entity: str
    predicate: Optional[Node] = None


_TERM = lazy(lambda: PREDICATE, name="predicate")
_TERMS = list_of(_TERM)

_OPAQUE_CONDITIONS = (
    "minecraft:block_state_property",
    "minecraft:damage_source_properties",
    "minecraft:entity_scores",
    "minecraft:location_check",
    "minecraft:value_check",
    "minecraft:enchantment_active_check",
)


def _registry() -> Dict[str, Codec[Any]]:
    registry: Dict[str, Codec[Any]] = {
        RandomChance.variant_tag: struct(RandomChance, required_field("chance", FLOAT)),
        RandomChanceWithLooting.variant_tag: struct(
            RandomChanceWithLooting,
            required_field("chance", FLOAT),
            required_field("looting_multiplier", FLOAT),
        ),
        Inverted.variant_tag: struct(Inverted, required_field("term", _TERM)),
        AnyOf.variant_tag: struct(AnyOf, required_field("terms", _TERMS)),
        AllOf.variant_tag: struct(AllOf, required_field("terms", _TERMS)),
        KilledByPlayer.variant_tag: struct(KilledByPlayer, optional_field("inverse", BOOL)),
        SurvivesExplosion.variant_tag: struct(SurvivesExplosion),
        PredicateReference.variant_tag: struct(
            PredicateReference, required_field("name", RESOURCE_LOCATION)
        ),
        WeatherCheck.variant_tag: struct(
            WeatherCheck, optional_field("raining", BOOL), optional_field("thundering", BOOL)
        ),
        TimeCheck.variant_tag: struct(
            TimeCheck, required_field("value", FLOAT_RANGE), optional_field("period", FLOAT)
        ),
        TableBonus.variant_tag: struct(
            TableBonus,
            required_field("enchantment", RESOURCE_LOCATION),
            required_field("chances", DOUBLE_LIST),
        ),
        MatchTool.variant_tag: struct(MatchTool, optional_field("predicate", PASSTHROUGH)),
        EntityProperties.variant_tag: struct(
            EntityProperties,
            required_field("entity", STRING),
            optional_field("predicate", PASSTHROUGH),
        ),
    }
    for tag in _OPAQUE_CONDITIONS:
        registry[tag] = opaque_variant(tag, CONDITION_KEY, OpaquePredicate)
    return registry


LEGACY_CONDITIONS = {"minecraft:alternative": AnyOf.variant_tag}

PREDICATE: Codec[Any] = union(
    CONDITION_KEY,
    _registry(),
    name="predicate",
    normalize_tag=normalize_location,
    legacy_tags=LEGACY_CONDITIONS,
)

PREDICATES: Codec[Tuple[Any, ...]] = list_of(PREDICATE)
