"""
Codec framework: composable bidirectional decoders/encoders over the data tree.

Usage:
    from datapack_loader.codecs import INT, STRING, required_field, struct

    POINT = struct(Point, required_field("x", INT), required_field("y", INT))
    point = POINT.decode({"x": 1, "y": 2}).unwrap()
"""

from .results import Failure, FailureKind, Result
from .core import (
    BOOL,
    DOUBLE_LIST,
    FLOAT,
    FLOAT_RANGE,
    INT,
    NULL,
    PASSTHROUGH,
    STRING,
    Codec,
    Field,
    FloatRange,
    by_kind,
    decode_only,
    enum_of,
    lazy,
    list_of,
    mapping_of,
    optional_field,
    or_else,
    required_field,
    single_or_list,
    struct,
    transform,
    validated,
)
from .union import TAG_ATTRIBUTE, OpaqueVariant, opaque_variant, tag_of, union
from .identifiers import (
    DEFAULT_NAMESPACE,
    ITEM,
    ITEM_REFERENCE,
    ITEMS,
    REFERENCE,
    RESOURCE_LOCATION,
    TAG_SIGIL,
    AliasTable,
    IdentifierRegistry,
    Reference,
    ResourceLocation,
    normalize_location,
    reference_codec,
)

__all__ = [
    # Results
    "Failure",
    "FailureKind",
    "Result",
    # Core
    "Codec",
    "Field",
    "FloatRange",
    "BOOL",
    "DOUBLE_LIST",
    "FLOAT",
    "FLOAT_RANGE",
    "INT",
    "NULL",
    "PASSTHROUGH",
    "STRING",
    "by_kind",
    "decode_only",
    "enum_of",
    "lazy",
    "list_of",
    "mapping_of",
    "optional_field",
    "or_else",
    "required_field",
    "single_or_list",
    "struct",
    "transform",
    "validated",
    # Unions
    "TAG_ATTRIBUTE",
    "OpaqueVariant",
    "opaque_variant",
    "tag_of",
    "union",
    # Identifiers
    "DEFAULT_NAMESPACE",
    "TAG_SIGIL",
    "AliasTable",
    "IdentifierRegistry",
    "ITEMS",
    "ITEM",
    "ITEM_REFERENCE",
    "REFERENCE",
    "RESOURCE_LOCATION",
    "Reference",
    "ResourceLocation",
    "normalize_location",
    "reference_codec",
]
