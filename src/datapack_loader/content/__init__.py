"""
Content schemas of a data pack.

``CODECS`` maps a short name to the codec of each JSON content type, for tools
that decode a single document without loading a whole pack.
"""

from types import MappingProxyType
from typing import Any, Mapping

from ..codecs import (
    DOUBLE_LIST,
    FLOAT_RANGE,
    ITEM,
    PASSTHROUGH,
    REFERENCE,
    RESOURCE_LOCATION,
    Codec,
)
from .functions import McFunction
from .loot import ITEM_MODIFIER, LOOT_ENTRY, LOOT_FUNCTION, LOOT_TABLE
from .numbers import NUMBER_PROVIDER
from .predicates import PREDICATE
from .recipes import INGREDIENT, RECIPE, RECIPE_RESULT
from .registries import CHAT_TYPE, DAMAGE_TYPE, TRIM_MATERIAL, TRIM_PATTERN
from .tags import TAG

CODECS: Mapping[str, Codec[Any]] = MappingProxyType(
    {
        "resource_location": RESOURCE_LOCATION,
        "reference": REFERENCE,
        "item": ITEM,
        "float_range": FLOAT_RANGE,
        "double_list": DOUBLE_LIST,
        "number_provider": NUMBER_PROVIDER,
        "ingredient": INGREDIENT,
        "recipe_result": RECIPE_RESULT,
        "recipe": RECIPE,
        "loot_table": LOOT_TABLE,
        "loot_entry": LOOT_ENTRY,
        "loot_function": LOOT_FUNCTION,
        "item_modifier": ITEM_MODIFIER,
        "predicate": PREDICATE,
        "tag": TAG,
        "damage_type": DAMAGE_TYPE,
        "chat_type": CHAT_TYPE,
        "trim_pattern": TRIM_PATTERN,
        "trim_material": TRIM_MATERIAL,
        "advancement": PASSTHROUGH,
        "dimension": PASSTHROUGH,
        "dimension_type": PASSTHROUGH,
    }
)


def get_codec(name: str) -> Codec[Any]:
    """Return the codec registered under ``name``.

    Raises:
        KeyError: If no codec has that name
    """
    try:
        return CODECS[name]
    except KeyError:
        raise KeyError(f"No codec named '{name}'") from None


__all__ = [
    "CODECS",
    "McFunction",
    "get_codec",
]
