"""
Loot tables, their pools and entries, and loot functions.

Three unions are involved: entries dispatch on ``type``, loot functions on
``function`` and predicates (see :mod:`.predicates`) on ``condition``. Rolls
and counts are number providers (see :mod:`.numbers`).
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Tuple

from ..codecs import (
    BOOL,
    INT,
    PASSTHROUGH,
    REFERENCE,
    RESOURCE_LOCATION,
    STRING,
    Codec,
    Field,
    ITEM,
    OpaqueVariant,
    ResourceLocation,
    lazy,
    list_of,
    normalize_location,
    opaque_variant,
    optional_field,
    required_field,
    single_or_list,
    struct,
    union,
)
from ..tree import Node
from .numbers import NUMBER_PROVIDER
from .predicates import PREDICATES

FUNCTION_KEY = "function"

# =============================================================================
# Loot functions
# =============================================================================


class OpaqueLootFunction(OpaqueVariant):
    """Loot function kept as raw fields."""


@dataclass(frozen=True)
class SetCount:
    variant_tag: ClassVar[str] = "minecraft:set_count"

    count: Any
    add: Optional[bool] = None
    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class SetDamage:
    variant_tag: ClassVar[str] = "minecraft:set_damage"

    damage: Any
    add: Optional[bool] = None
    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class LimitCount:
    variant_tag: ClassVar[str] = "minecraft:limit_count"

    limit: Node
    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class EnchantWithLevels:
    variant_tag: ClassVar[str] = "minecraft:enchant_with_levels"

    levels: Any
    treasure: Optional[bool] = None
    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class EnchantRandomly:
    variant_tag: ClassVar[str] = "minecraft:enchant_randomly"

    options: Optional[Tuple[Any, ...]] = None
    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class LootingEnchant:
    variant_tag: ClassVar[str] = "minecraft:looting_enchant"

    count: Any
    limit: Optional[int] = None
    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class ExplosionDecay:
    variant_tag: ClassVar[str] = "minecraft:explosion_decay"

    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class FurnaceSmelt:
    variant_tag: ClassVar[str] = "minecraft:furnace_smelt"

    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class SetName:
    variant_tag: ClassVar[str] = "minecraft:set_name"

    name: Node
    target: Optional[str] = None
    conditions: Tuple[Any, ...] = ()


def _conditions() -> Field:
    return optional_field("conditions", PREDICATES, default=())


_OPAQUE_FUNCTIONS = (
    "minecraft:apply_bonus",
    "minecraft:copy_name",
    "minecraft:copy_nbt",
    "minecraft:copy_state",
    "minecraft:exploration_map",
    "minecraft:fill_player_head",
    "minecraft:set_attributes",
    "minecraft:set_banner_pattern",
    "minecraft:set_contents",
    "minecraft:set_enchantments",
    "minecraft:set_instrument",
    "minecraft:set_loot_table",
    "minecraft:set_lore",
    "minecraft:set_nbt",
    "minecraft:set_potion",
    "minecraft:set_stew_effect",
    "minecraft:set_components",
)


def _function_registry() -> Dict[str, Codec[Any]]:
    registry: Dict[str, Codec[Any]] = {
        SetCount.variant_tag: struct(
            SetCount,
            required_field("count", NUMBER_PROVIDER),
            optional_field("add", BOOL),
            _conditions(),
        ),
        SetDamage.variant_tag: struct(
            SetDamage,
            required_field("damage", NUMBER_PROVIDER),
            optional_field("add", BOOL),
            _conditions(),
        ),
        LimitCount.variant_tag: struct(
            LimitCount, required_field("limit", PASSTHROUGH), _conditions()
        ),
        EnchantWithLevels.variant_tag: struct(
            EnchantWithLevels,
            required_field("levels", NUMBER_PROVIDER),
            optional_field("treasure", BOOL),
            _conditions(),
        ),
        EnchantRandomly.variant_tag: struct(
            EnchantRandomly,
            optional_field("options", single_or_list(REFERENCE)),
            _conditions(),
        ),
        LootingEnchant.variant_tag: struct(
            LootingEnchant,
            required_field("count", NUMBER_PROVIDER),
            optional_field("limit", INT),
            _conditions(),
        ),
        ExplosionDecay.variant_tag: struct(ExplosionDecay, _conditions()),
        FurnaceSmelt.variant_tag: struct(FurnaceSmelt, _conditions()),
        SetName.variant_tag: struct(
            SetName,
            required_field("name", PASSTHROUGH),
            optional_field("target", STRING),
            _conditions(),
        ),
    }
    for tag in _OPAQUE_FUNCTIONS:
        registry[tag] = opaque_variant(tag, FUNCTION_KEY, OpaqueLootFunction)
    return registry


LOOT_FUNCTION: Codec[Any] = union(
    FUNCTION_KEY, _function_registry(), name="loot_function", normalize_tag=normalize_location
)

LOOT_FUNCTIONS: Codec[Tuple[Any, ...]] = list_of(LOOT_FUNCTION)

ITEM_MODIFIER: Codec[Tuple[Any, ...]] = single_or_list(LOOT_FUNCTION)
"""An item modifier file holds one loot function or an array of them."""


# =============================================================================
# Entries
# =============================================================================


@dataclass(frozen=True)
class ItemEntry:
    variant_tag: ClassVar[str] = "minecraft:item"

    name: ResourceLocation
    weight: int = 1
    quality: int = 0
    conditions: Tuple[Any, ...] = ()
    functions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class TagEntry:
    variant_tag: ClassVar[str] = "minecraft:tag"

    name: ResourceLocation
    expand: bool = False
    weight: int = 1
    quality: int = 0
    conditions: Tuple[Any, ...] = ()
    functions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class LootTableEntry:
    """Rolls another loot table by id, or an inline table."""

    variant_tag: ClassVar[str] = "minecraft:loot_table"

    value: Node
    weight: int = 1
    quality: int = 0
    conditions: Tuple[Any, ...] = ()
    functions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class DynamicEntry:
    variant_tag: ClassVar[str] = "minecraft:dynamic"

    name: str
    weight: int = 1
    quality: int = 0
    conditions: Tuple[Any, ...] = ()
    functions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class EmptyEntry:
    variant_tag: ClassVar[str] = "minecraft:empty"

    weight: int = 1
    quality: int = 0
    conditions: Tuple[Any, ...] = ()
    functions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class AlternativesEntry:
    """First child whose conditions pass."""

    variant_tag: ClassVar[str] = "minecraft:alternatives"

    children: Tuple[Any, ...]
    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class GroupEntry:
    """All children."""

    variant_tag: ClassVar[str] = "minecraft:group"

    children: Tuple[Any, ...]
    conditions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class SequenceEntry:
    """Children in order until one fails."""

    variant_tag: ClassVar[str] = "minecraft:sequence"

    children: Tuple[Any, ...]
    conditions: Tuple[Any, ...] = ()


def _weighted(constructor: Any, *leading: Field) -> Codec[Any]:
    return struct(
        constructor,
        *leading,
        optional_field("weight", INT, default=1),
        optional_field("quality", INT, default=0),
        _conditions(),
        optional_field("functions", LOOT_FUNCTIONS, default=()),
    )


_CHILDREN = list_of(lazy(lambda: LOOT_ENTRY, name="loot_entry"))


def _composite(constructor: Any) -> Codec[Any]:
    return struct(constructor, required_field("children", _CHILDREN), _conditions())


LOOT_ENTRY: Codec[Any] = union(
    "type",
    {
        ItemEntry.variant_tag: _weighted(ItemEntry, required_field("name", ITEM)),
        TagEntry.variant_tag: _weighted(
            TagEntry,
            required_field("name", RESOURCE_LOCATION),
            optional_field("expand", BOOL, default=False),
        ),
        LootTableEntry.variant_tag: _weighted(LootTableEntry, required_field("value", PASSTHROUGH)),
        DynamicEntry.variant_tag: _weighted(DynamicEntry, required_field("name", STRING)),
        EmptyEntry.variant_tag: _weighted(EmptyEntry),
        AlternativesEntry.variant_tag: _composite(AlternativesEntry),
        GroupEntry.variant_tag: _composite(GroupEntry),
        SequenceEntry.variant_tag: _composite(SequenceEntry),
    },
    name="loot_entry",
    normalize_tag=normalize_location,
)


# =============================================================================
# Pools and tables
# =============================================================================


@dataclass(frozen=True)
class LootPool:
    rolls: Any
    entries: Tuple[Any, ...]
    bonus_rolls: Optional[Any] = None
    conditions: Tuple[Any, ...] = ()
    functions: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class LootTable:
    """A loot table document.

    Attributes:
        type: Loot context type (``minecraft:chest``, ``minecraft:block``...)
        pools: Pools rolled in order
        functions: Functions applied to every generated stack
        random_sequence: Id of the random sequence used for rolls
    """

    type: Optional[ResourceLocation] = None
    pools: Tuple[LootPool, ...] = ()
    functions: Tuple[Any, ...] = ()
    random_sequence: Optional[ResourceLocation] = None


LOOT_POOL: Codec[LootPool] = struct(
    LootPool,
    required_field("rolls", NUMBER_PROVIDER),
    optional_field("bonus_rolls", NUMBER_PROVIDER),
    required_field("entries", list_of(LOOT_ENTRY)),
    _conditions(),
    optional_field("functions", LOOT_FUNCTIONS, default=()),
)

LOOT_TABLE: Codec[LootTable] = struct(
    LootTable,
    optional_field("type", RESOURCE_LOCATION),
    optional_field("pools", list_of(LOOT_POOL), default=()),
    optional_field("functions", LOOT_FUNCTIONS, default=()),
    optional_field("random_sequence", RESOURCE_LOCATION),
)
