"""
Pack assembly.

Usage:
    from datapack_loader.pack import load_datapack

    pack = load_datapack("path/to/pack")
    recipe = pack.lookup("recipe", "minecraft:iron_ingot")
"""

from .categories import CATEGORIES, Category, get_category
from .loader import DatapackLoader, load_datapack
from .model import PACK_META, Datapack, NamespacedData, PackInfo, PackMeta

__all__ = [
    "CATEGORIES",
    "Category",
    "get_category",
    "DatapackLoader",
    "load_datapack",
    "PACK_META",
    "Datapack",
    "NamespacedData",
    "PackInfo",
    "PackMeta",
]
