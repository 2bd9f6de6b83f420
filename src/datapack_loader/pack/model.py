"""
The immutable result of a pack load.
"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from ..codecs import (
    INT,
    PASSTHROUGH,
    Codec,
    Failure,
    optional_field,
    struct,
)
from ..codecs.identifiers import LocationLike, as_location
from ..collection import FrozenCollection
from ..tree import Node
from .categories import get_category


@dataclass(frozen=True)
class PackInfo:
    description: Node = ""
    pack_format: Optional[int] = None
    supported_formats: Optional[Node] = None


@dataclass(frozen=True)
class PackMeta:
    """Contents of ``pack.mcmeta``; the default stands in for a missing file."""

    pack: PackInfo = PackInfo()
    features: Optional[Node] = None
    filter: Optional[Node] = None


PACK_INFO: Codec[PackInfo] = struct(
    PackInfo,
    optional_field("description", PASSTHROUGH, default=""),
    optional_field("pack_format", INT),
    optional_field("supported_formats", PASSTHROUGH),
)

PACK_META: Codec[PackMeta] = struct(
    PackMeta,
    optional_field("pack", PACK_INFO, default=PackInfo()),
    optional_field("features", PASSTHROUGH),
    optional_field("filter", PASSTHROUGH),
)


def _empty(name: str) -> Any:
    return field(default_factory=lambda: FrozenCollection.empty(name))


@dataclass(frozen=True)
class NamespacedData:
    """Frozen collections of one namespace, one per content category."""

    recipe: FrozenCollection[Any] = _empty("recipe")
    tags: FrozenCollection[Any] = _empty("tags")
    function: FrozenCollection[Any] = _empty("function")
    loot_table: FrozenCollection[Any] = _empty("loot_table")
    predicate: FrozenCollection[Any] = _empty("predicate")
    item_modifier: FrozenCollection[Any] = _empty("item_modifier")
    damage_type: FrozenCollection[Any] = _empty("damage_type")
    chat_type: FrozenCollection[Any] = _empty("chat_type")
    trim_pattern: FrozenCollection[Any] = _empty("trim_pattern")
    trim_material: FrozenCollection[Any] = _empty("trim_material")
    advancement: FrozenCollection[Any] = _empty("advancement")
    dimension: FrozenCollection[Any] = _empty("dimension")
    dimension_type: FrozenCollection[Any] = _empty("dimension_type")

    def collection(self, category: str) -> FrozenCollection[Any]:
        """Collection of ``category`` by name.

        Raises:
            KeyError: If there is no such category
        """
        get_category(category)
        return getattr(self, category)

    def collections(self) -> Iterator[Tuple[str, FrozenCollection[Any]]]:
        for member in fields(self):
            yield member.name, getattr(self, member.name)


@dataclass(frozen=True)
class Datapack:
    """A loaded pack: metadata, optional icon and per-namespace data.

    Attributes:
        meta: Parsed ``pack.mcmeta``
        namespaces: Namespace name -> its collections (read-only)
        icon: Raw bytes of ``pack.png`` when present
    """

    meta: PackMeta = PackMeta()
    namespaces: Mapping[str, NamespacedData] = field(
        default_factory=lambda: MappingProxyType({})
    )
    icon: Optional[bytes] = field(default=None, repr=False)

    def __getitem__(self, namespace: str) -> NamespacedData:
        return self.namespaces[namespace]

    def lookup(self, category: str, location: LocationLike) -> Optional[Any]:
        """Decoded document of ``category`` named by ``location``.

        ``minecraft:iron_ingot`` in ``recipe`` is the document
        ``recipe/iron_ingot.json`` of namespace ``minecraft``.

        Returns:
            The decoded value, or None when the pack has no such document

        Raises:
            KeyError: If ``category`` is unknown
            DecodeError: If the document exists but failed to decode
        """
        kind = get_category(category)
        loc = as_location(location)
        data = self.namespaces.get(loc.namespace)
        if data is None:
            return None
        collection = data.collection(category)
        path = loc.file_path(kind.extension)
        if path not in collection:
            return None
        return collection.get(path)

    def failures(self) -> Dict[str, Failure]:
        """Every per-document failure, keyed ``namespace:category/path``."""
        found: Dict[str, Failure] = {}
        for namespace, data in self.namespaces.items():
            for category, collection in data.collections():
                for path, failure in collection.failures().items():
                    found[f"{namespace}:{category}/{path}"] = failure
        return found
