"""
Tag documents: named groups of entries.

``values`` holds plain identifiers, ``#`` references to other tags, or
``{"id": ..., "required": false}`` objects for entries that may be absent.
"""

from dataclasses import dataclass
from typing import Tuple

from ..codecs import (
    BOOL,
    REFERENCE,
    Codec,
    Reference,
    by_kind,
    list_of,
    optional_field,
    required_field,
    struct,
)
from ..tree import NodeKind


@dataclass(frozen=True)
class TagValue:
    id: Reference
    required: bool = True


_TAG_VALUE_OBJECT = struct(
    TagValue,
    required_field("id", REFERENCE),
    optional_field("required", BOOL, default=True),
)

TAG_VALUE: Codec[TagValue] = by_kind(
    {
        NodeKind.STRING: REFERENCE.transform(TagValue, lambda value: value.id, name="tag_value"),
        NodeKind.OBJECT: _TAG_VALUE_OBJECT,
    },
    lambda value: NodeKind.STRING if value.required else NodeKind.OBJECT,
    name="tag_value",
)
"""Required entries encode as bare strings, optional ones as objects."""


@dataclass(frozen=True)
class Tag:
    """A tag file.

    Attributes:
        values: Entries in declaration order
        replace: Whether this file replaces entries from lower-priority packs
    """

    values: Tuple[TagValue, ...] = ()
    replace: bool = False

    def references(self) -> Tuple[Reference, ...]:
        """Entries that point at other tags."""
        return tuple(value.id for value in self.values if value.id.is_tag)


TAG: Codec[Tag] = struct(
    Tag,
    optional_field("replace", BOOL, default=False),
    required_field("values", list_of(TAG_VALUE)),
)
