"""
Recipe schemas, dispatched on the ``type`` field.

Ingredients accept the current string form (``"minecraft:iron_ore"``,
``"#minecraft:logs"``, or an array of those) and the legacy object form
(``{"item": ...}`` / ``{"tag": ...}``); they always encode to the string form.
Item identifiers go through the item alias table, so renamed items such as
``minecraft:scute`` decode to their current id.
"""

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

from ..codecs import (
    BOOL,
    FLOAT,
    INT,
    ITEM,
    ITEM_REFERENCE,
    RESOURCE_LOCATION,
    STRING,
    Codec,
    Reference,
    ResourceLocation,
    by_kind,
    list_of,
    mapping_of,
    normalize_location,
    optional_field,
    or_else,
    required_field,
    single_or_list,
    struct,
    transform,
    union,
)
from ..context import Deferred, FinishHandle, get_context
from ..errors import DecodeError
from ..tree import NodeKind

logger = logging.getLogger(__name__)

Ingredient = Tuple[Reference, ...]
"""Alternatives accepted in one slot; a tag reference stands for all its items."""


# =============================================================================
# Ingredients and results
# =============================================================================


@dataclass(frozen=True)
class _LegacyItem:
    item: ResourceLocation


@dataclass(frozen=True)
class _LegacyTag:
    tag: ResourceLocation


_LEGACY_INGREDIENT: Codec[Reference] = or_else(
    transform(
        struct(_LegacyItem, required_field("item", ITEM)),
        lambda legacy: Reference(legacy.item, False),
        lambda ref: _LegacyItem(ref.value),
        name="legacy_item",
    ),
    transform(
        struct(_LegacyTag, required_field("tag", RESOURCE_LOCATION)),
        lambda legacy: Reference(legacy.tag, True),
        lambda ref: _LegacyTag(ref.value),
        name="legacy_tag",
    ),
)

INGREDIENT_ENTRY: Codec[Reference] = by_kind(
    {NodeKind.STRING: ITEM_REFERENCE, NodeKind.OBJECT: _LEGACY_INGREDIENT},
    lambda ref: NodeKind.STRING,
    name="ingredient",
)

INGREDIENT: Codec[Ingredient] = single_or_list(INGREDIENT_ENTRY)


@dataclass(frozen=True)
class RecipeResult:
    id: ResourceLocation
    count: int = 1


_RESULT_OBJECT = struct(
    RecipeResult,
    required_field("id", ITEM),
    optional_field("count", INT, default=1),
)

RECIPE_RESULT: Codec[RecipeResult] = by_kind(
    {
        NodeKind.OBJECT: _RESULT_OBJECT,
        NodeKind.STRING: ITEM.transform(RecipeResult, lambda result: result.id, name="item_result"),
    },
    lambda result: NodeKind.OBJECT,
    name="recipe_result",
)
"""``{"id": ..., "count": n}``; older cooking recipes wrote the bare item id."""


# =============================================================================
# Cooking
# =============================================================================


@dataclass(frozen=True)
class CookingRecipe:
    """Shared shape of furnace-like recipes.

    Attributes:
        ingredient: Accepted inputs
        result: Output stack
        experience: Experience awarded per item
        cooking_time: Ticks to cook; ``None`` means the station default
    """

    variant_tag: ClassVar[str] = ""
    default_cooking_time: ClassVar[int] = 200

    ingredient: Ingredient
    result: RecipeResult
    group: Optional[str] = None
    category: Optional[str] = None
    experience: float = 0.0
    cooking_time: Optional[int] = None

    @property
    def ticks(self) -> int:
        return self.default_cooking_time if self.cooking_time is None else self.cooking_time


@dataclass(frozen=True)
class SmeltingRecipe(CookingRecipe):
    variant_tag: ClassVar[str] = "minecraft:smelting"


@dataclass(frozen=True)
class BlastingRecipe(CookingRecipe):
    variant_tag: ClassVar[str] = "minecraft:blasting"
    default_cooking_time: ClassVar[int] = 100


@dataclass(frozen=True)
class SmokingRecipe(CookingRecipe):
    variant_tag: ClassVar[str] = "minecraft:smoking"
    default_cooking_time: ClassVar[int] = 100


@dataclass(frozen=True)
class CampfireCookingRecipe(CookingRecipe):
    variant_tag: ClassVar[str] = "minecraft:campfire_cooking"
    default_cooking_time: ClassVar[int] = 600


def _cooking(constructor: Any) -> Codec[Any]:
    return struct(
        constructor,
        optional_field("group", STRING),
        optional_field("category", STRING),
        required_field("ingredient", INGREDIENT),
        required_field("result", RECIPE_RESULT),
        optional_field("experience", FLOAT, default=0.0),
        optional_field("cookingtime", INT, attr="cooking_time"),
    )


# =============================================================================
# Crafting
# =============================================================================


@dataclass(frozen=True)
class ShapedRecipe:
    """Grid recipe: ``pattern`` rows of symbols, ``key`` maps symbols to ingredients."""

    variant_tag: ClassVar[str] = "minecraft:crafting_shaped"

    pattern: Tuple[str, ...]
    key: Mapping[str, Ingredient]
    result: RecipeResult
    group: Optional[str] = None
    category: Optional[str] = None
    show_notification: Optional[bool] = None

    def __post_init__(self):
        if not self.pattern or len(self.pattern) > 3:
            raise ValueError("pattern must have between 1 and 3 rows")
        width = len(self.pattern[0])
        if width == 0 or width > 3 or any(len(row) != width for row in self.pattern):
            raise ValueError("pattern rows must all have the same width, at most 3")
        for symbol in self.key:
            if len(symbol) != 1 or symbol == " ":
                raise ValueError(f"invalid key symbol '{symbol}'")
        used = {symbol for row in self.pattern for symbol in row if symbol != " "}
        missing = sorted(used - set(self.key))
        if missing:
            raise ValueError(f"pattern uses undefined symbols: {', '.join(missing)}")

    @property
    def width(self) -> int:
        return len(self.pattern[0])

    @property
    def height(self) -> int:
        return len(self.pattern)


@dataclass(frozen=True)
class ShapelessRecipe:
    variant_tag: ClassVar[str] = "minecraft:crafting_shapeless"

    ingredients: Tuple[Ingredient, ...]
    result: RecipeResult
    group: Optional[str] = None
    category: Optional[str] = None

    def __post_init__(self):
        if not self.ingredients or len(self.ingredients) > 9:
            raise ValueError("shapeless recipes take between 1 and 9 ingredients")


@dataclass(frozen=True)
class TransmuteRecipe:
    """Copies the input item's data onto a new item type."""

    variant_tag: ClassVar[str] = "minecraft:crafting_transmute"

    input: Ingredient
    material: Ingredient
    result: RecipeResult
    group: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class SpecialRecipe:
    """Hard-coded crafting recipe; only its tag and grouping are data-driven."""

    kind: str
    group: Optional[str] = None
    category: Optional[str] = None

    @property
    def variant_tag(self) -> str:
        return self.kind


SPECIAL_RECIPES = (
    "minecraft:crafting_special_armordye",
    "minecraft:crafting_special_bannerduplicate",
    "minecraft:crafting_special_bookcloning",
    "minecraft:crafting_special_firework_rocket",
    "minecraft:crafting_special_firework_star",
    "minecraft:crafting_special_firework_star_fade",
    "minecraft:crafting_special_mapcloning",
    "minecraft:crafting_special_mapextending",
    "minecraft:crafting_special_repairitem",
    "minecraft:crafting_special_shielddecoration",
    "minecraft:crafting_special_shulkerboxcoloring",
    "minecraft:crafting_special_tippedarrow",
    "minecraft:crafting_special_suspiciousstew",
    "minecraft:crafting_decorated_pot",
)


def _special(tag: str) -> Codec[SpecialRecipe]:
    return struct(
        functools.partial(SpecialRecipe, tag),
        optional_field("group", STRING),
        optional_field("category", STRING),
        name=tag,
    )


# =============================================================================
# Stonecutting and smithing
# =============================================================================


@dataclass(frozen=True)
class StonecuttingRecipe:
    variant_tag: ClassVar[str] = "minecraft:stonecutting"

    ingredient: Ingredient
    result: RecipeResult
    group: Optional[str] = None


@dataclass(frozen=True)
class SmithingTransformRecipe:
    variant_tag: ClassVar[str] = "minecraft:smithing_transform"

    base: Ingredient
    result: RecipeResult
    template: Optional[Ingredient] = None
    addition: Optional[Ingredient] = None


@dataclass(frozen=True)
class SmithingTrimRecipe:
    """Applies an armor trim.

    ``trim`` is filled in once the whole pack is loaded: it holds the trim
    pattern document named by ``pattern`` when the pack defines it, ``None``
    otherwise. It stays unresolved for recipes decoded outside a pack load.
    """

    variant_tag: ClassVar[str] = "minecraft:smithing_trim"

    base: Ingredient
    template: Optional[Ingredient] = None
    addition: Optional[Ingredient] = None
    pattern: Optional[ResourceLocation] = None
    trim: Deferred[Any] = field(default_factory=Deferred, repr=False, compare=False)


def _resolve_trim(recipe: SmithingTrimRecipe, handle: FinishHandle) -> None:
    try:
        pattern = handle.pack.lookup("trim_pattern", recipe.pattern)
    except DecodeError as e:
        logger.warning(f"Trim pattern {recipe.pattern} is malformed: {e}")
        pattern = None
    if pattern is None:
        logger.debug(f"Trim pattern {recipe.pattern} is not defined by the pack")
    recipe.trim.set(pattern)


def _smithing_trim(**kwargs: Any) -> SmithingTrimRecipe:
    recipe = SmithingTrimRecipe(**kwargs)
    context = get_context()
    if recipe.pattern is not None and not context.is_static:
        context.register_finisher(functools.partial(_resolve_trim, recipe))
    return recipe


# =============================================================================
# Union
# =============================================================================


def _registry() -> Dict[str, Codec[Any]]:
    registry: Dict[str, Codec[Any]] = {
        cls.variant_tag: _cooking(cls)
        for cls in (SmeltingRecipe, BlastingRecipe, SmokingRecipe, CampfireCookingRecipe)
    }
    registry[ShapedRecipe.variant_tag] = struct(
        ShapedRecipe,
        optional_field("group", STRING),
        optional_field("category", STRING),
        required_field("pattern", list_of(STRING)),
        required_field("key", mapping_of(INGREDIENT)),
        required_field("result", RECIPE_RESULT),
        optional_field("show_notification", BOOL),
    )
    registry[ShapelessRecipe.variant_tag] = struct(
        ShapelessRecipe,
        optional_field("group", STRING),
        optional_field("category", STRING),
        required_field("ingredients", list_of(INGREDIENT)),
        required_field("result", RECIPE_RESULT),
    )
    registry[TransmuteRecipe.variant_tag] = struct(
        TransmuteRecipe,
        optional_field("group", STRING),
        optional_field("category", STRING),
        required_field("input", INGREDIENT),
        required_field("material", INGREDIENT),
        required_field("result", RECIPE_RESULT),
    )
    registry[StonecuttingRecipe.variant_tag] = struct(
        StonecuttingRecipe,
        optional_field("group", STRING),
        required_field("ingredient", INGREDIENT),
        required_field("result", RECIPE_RESULT),
    )
    registry[SmithingTransformRecipe.variant_tag] = struct(
        SmithingTransformRecipe,
        optional_field("template", INGREDIENT),
        required_field("base", INGREDIENT),
        optional_field("addition", INGREDIENT),
        required_field("result", RECIPE_RESULT),
    )
    registry[SmithingTrimRecipe.variant_tag] = struct(
        _smithing_trim,
        optional_field("template", INGREDIENT),
        required_field("base", INGREDIENT),
        optional_field("addition", INGREDIENT),
        optional_field("pattern", RESOURCE_LOCATION),
        name="smithing_trim",
    )
    for tag in SPECIAL_RECIPES:
        registry[tag] = _special(tag)
    return registry


RECIPE: Codec[Any] = union("type", _registry(), name="recipe", normalize_tag=normalize_location)
