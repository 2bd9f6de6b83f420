"""
Content categories of a namespace.

Each category names the folder it is read from (newer packs use singular
folder names, older ones plural) and how its documents are decoded.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from ..codecs import PASSTHROUGH
from ..collection import Decoder
from ..content.functions import McFunction
from ..content.loot import ITEM_MODIFIER, LOOT_TABLE
from ..content.predicates import PREDICATE
from ..content.recipes import RECIPE
from ..content.registries import CHAT_TYPE, DAMAGE_TYPE, TRIM_MATERIAL, TRIM_PATTERN
from ..content.tags import TAG
from ..files import FileTree


@dataclass(frozen=True)
class Category:
    """One content category.

    Attributes:
        name: Category name, also the attribute on ``NamespacedData``
        folders: Candidate folder names, preferred first
        decoder: Codec or text decoder for its documents
        extension: File extension of its documents
    """

    name: str
    folders: Tuple[str, ...]
    decoder: Decoder[Any]
    extension: str = ".json"

    def folder_in(self, tree: FileTree) -> Optional[str]:
        """First candidate folder present in ``tree``."""
        for folder in self.folders:
            if tree.has_folder(folder):
                return folder
        return None


CATEGORIES: Tuple[Category, ...] = (
    Category("recipe", ("recipe", "recipes"), RECIPE),
    Category("tags", ("tags",), TAG),
    Category("function", ("function", "functions"), McFunction.from_text, ".mcfunction"),
    Category("loot_table", ("loot_table", "loot_tables"), LOOT_TABLE),
    Category("predicate", ("predicate", "predicates"), PREDICATE),
    Category("item_modifier", ("item_modifier", "item_modifiers"), ITEM_MODIFIER),
    Category("damage_type", ("damage_type",), DAMAGE_TYPE),
    Category("chat_type", ("chat_type",), CHAT_TYPE),
    Category("trim_pattern", ("trim_pattern",), TRIM_PATTERN),
    Category("trim_material", ("trim_material",), TRIM_MATERIAL),
    Category("advancement", ("advancement", "advancements"), PASSTHROUGH),
    Category("dimension", ("dimension",), PASSTHROUGH),
    Category("dimension_type", ("dimension_type",), PASSTHROUGH),
)

CATEGORIES_BY_NAME = {category.name: category for category in CATEGORIES}


def get_category(name: str) -> Category:
    """Return the category called ``name``.

    Raises:
        KeyError: If there is no such category
    """
    try:
        return CATEGORIES_BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown content category: {name}") from None
