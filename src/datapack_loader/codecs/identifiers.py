"""
Namespaced identifiers, legacy aliases and tag references.

Identifiers are written ``namespace:path`` (namespace defaults to
``minecraft``). A leading ``#`` marks a reference to a tag (a named group of
entries) rather than a single entry.
"""

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple, Union

from ..errors import ConfigError, DecodeError
from ..tree import Node
from .core import STRING, Codec
from .results import Failure, FailureKind, Result

DEFAULT_NAMESPACE = "minecraft"
TAG_SIGIL = "#"

_NAMESPACE_PATTERN = re.compile(r"^[a-z0-9_.-]+$")
_PATH_PATTERN = re.compile(r"^[a-z0-9_./-]+$")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class ResourceLocation:
    """A namespaced identifier such as ``minecraft:stone``."""

    namespace: str
    path: str

    @classmethod
    def parse(cls, text: str, default_namespace: str = DEFAULT_NAMESPACE) -> "ResourceLocation":
        """Parse ``namespace:path`` or a bare ``path``.

        Raises:
            ValueError: If either part contains characters outside the allowed set
        """
        namespace, separator, path = text.partition(":")
        if not separator:
            namespace, path = default_namespace, text
        elif not namespace:
            namespace = default_namespace
        if not _NAMESPACE_PATTERN.match(namespace):
            raise ValueError(f"invalid namespace in identifier '{text}'")
        if not _PATH_PATTERN.match(path):
            raise ValueError(f"invalid path in identifier '{text}'")
        return cls(namespace, path)

    def __str__(self) -> str:
        return f"{self.namespace}:{self.path}"

    def file_path(self, extension: str = ".json") -> str:
        """Relative path of the document holding this entry inside a category folder."""
        return f"{self.path}{extension}"


LocationLike = Union[str, ResourceLocation]


def as_location(value: LocationLike) -> ResourceLocation:
    return value if isinstance(value, ResourceLocation) else ResourceLocation.parse(value)


def normalize_location(text: str) -> str:
    """Canonical string form: ``smelting`` -> ``minecraft:smelting``."""
    return str(ResourceLocation.parse(text))


RESOURCE_LOCATION: Codec[ResourceLocation] = STRING.transform(
    ResourceLocation.parse, str, name="resource_location"
)


# =============================================================================
# Tag references
# =============================================================================


@dataclass(frozen=True)
class Reference:
    """An identifier that may point at a tag instead of a single entry.

    Attributes:
        value: The decoded identifier, without the ``#`` sigil
        is_tag: True when the source text carried the ``#`` sigil
    """

    value: Any
    is_tag: bool = False

    def __str__(self) -> str:
        return f"{TAG_SIGIL if self.is_tag else ''}{self.value}"


def reference_codec(inner: Codec[Any] = RESOURCE_LOCATION) -> Codec[Reference]:
    """Wrap a string-based identifier codec with ``#`` tag-reference support."""
    label = f"ref[{inner.name}]"

    def decode(node: Node) -> Result[Reference]:
        if isinstance(node, str) and node.startswith(TAG_SIGIL):
            return inner.decode(node[len(TAG_SIGIL):]).map(lambda v: Reference(v, True))
        return inner.decode(node).map(lambda v: Reference(v, False))

    def encode(reference: Reference) -> Result[Node]:
        result = inner.encode(reference.value)
        if not result.ok or not reference.is_tag:
            return result
        if not isinstance(result.value, str):
            return Result.error(
                Failure(
                    FailureKind.SHAPE_MISMATCH,
                    "tag references must encode to a string",
                    label,
                    repr(reference),
                ),
                encoding=True,
            )
        return Result.success(TAG_SIGIL + result.value)

    return Codec(label, decode, encode)


REFERENCE: Codec[Reference] = reference_codec()


# =============================================================================
# Legacy aliases and identifier registries
# =============================================================================


class AliasTable:
    """Deprecated identifier -> canonical identifier.

    Aliases are applied exactly once. A target that is itself an alias is a
    configuration error.
    """

    def __init__(self, aliases: Optional[Mapping[LocationLike, LocationLike]] = None):
        table = {as_location(old): as_location(new) for old, new in (aliases or {}).items()}
        for old, new in table.items():
            if new in table:
                raise ConfigError(
                    f"Alias chain is not supported: {old} -> {new} -> {table[new]}"
                )
        self._table = MappingProxyType(table)

    def canonical(self, location: ResourceLocation) -> Optional[ResourceLocation]:
        return self._table.get(location)

    def items(self) -> Iterable[Tuple[ResourceLocation, ResourceLocation]]:
        return self._table.items()

    def __contains__(self, location: object) -> bool:
        return location in self._table

    def __iter__(self) -> Iterator[ResourceLocation]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)


class IdentifierRegistry:
    """Set of canonical identifiers of one kind (items, blocks, ...).

    A closed registry knows every canonical identifier. An open registry treats
    any well-formed identifier as canonical except the deprecated ones listed
    in its alias table.
    """

    def __init__(
        self,
        name: str,
        known: Optional[Iterable[LocationLike]] = None,
        aliases: Union[AliasTable, Mapping[LocationLike, LocationLike], None] = None,
    ):
        self.name = name
        self.known = frozenset(as_location(item) for item in known) if known is not None else None
        self.aliases = aliases if isinstance(aliases, AliasTable) else AliasTable(aliases)
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        if self.known is not None:
            for old, new in self.aliases.items():
                if new not in self.known:
                    raise ConfigError(f"{name} alias {old} targets unknown identifier {new}")
        self._codec = RESOURCE_LOCATION.transform(self.resolve, lambda loc: loc, name=name)

    @property
    def closed(self) -> bool:
        return self.known is not None

    def is_canonical(self, location: ResourceLocation) -> bool:
        if self.known is not None:
            return location in self.known
        return location not in self.aliases

    def resolve(self, location: LocationLike) -> ResourceLocation:
        """Return the canonical identifier for ``location``.

        Raises:
            DecodeError: ``UNRESOLVED_IDENTIFIER`` naming the identifier as written
        """
        loc = as_location(location)
        if self.is_canonical(loc):
            return loc
        alias = self.aliases.canonical(loc)
        if alias is not None and self.is_canonical(alias):
            self.logger.debug(f"Resolved legacy {self.name} {loc} -> {alias}")
            return alias
        raise DecodeError(
            Failure(FailureKind.UNRESOLVED_IDENTIFIER, f"unknown {self.name}: {loc}", self.name)
        )

    def codec(self) -> Codec[ResourceLocation]:
        """Identifier codec that applies this registry's aliases."""
        return self._codec


ITEMS = IdentifierRegistry(
    "item",
    aliases={
        "minecraft:scute": "minecraft:turtle_scute",
        "minecraft:grass": "minecraft:short_grass",
    },
)
"""Items: open registry carrying the vanilla item renames."""

ITEM: Codec[ResourceLocation] = ITEMS.codec()
ITEM_REFERENCE: Codec[Reference] = reference_codec(ITEM)
