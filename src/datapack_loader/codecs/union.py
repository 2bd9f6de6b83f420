"""
Discriminated-union dispatch.

A union codec reads a discriminator field (``type``, ``condition``, ...) from an
object node and hands the whole object to the codec registered for that tag.
Encoding asks the value for its own tag through ``variant_tag``.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from ..errors import RegistryError
from ..tree import Node, copy_node, freeze_node, preview, with_field
from .core import Codec
from .results import FailureKind, Result, decode_failure, encode_failure

TAG_ATTRIBUTE = "variant_tag"

logger = logging.getLogger(__name__)


def tag_of(value: Any) -> Optional[str]:
    """Return the discriminator a variant value declares for itself."""
    tag = getattr(value, TAG_ATTRIBUTE, None)
    return tag if isinstance(tag, str) else None


def union(
    key: str,
    registry: Mapping[str, Codec[Any]],
    name: Optional[str] = None,
    normalize_tag: Optional[Callable[[str], str]] = None,
    legacy_tags: Optional[Mapping[str, str]] = None,
) -> Codec[Any]:
    """Build a codec dispatching on the string field ``key``.

    Args:
        key: Discriminator field name
        registry: Static table mapping tag -> variant codec
        name: Name used in failures (defaults to ``union[key]``)
        normalize_tag: Canonicalizes tags before lookup, both when decoding
            and when building the table
        legacy_tags: Retired tag -> registered tag, applied once before lookup.
            Values always encode under the registered tag

    Returns:
        Codec over the sum of all registered variants

    Raises:
        RegistryError: If the table is empty or holds a non-codec entry, or
            a legacy tag is registered itself or targets an unregistered tag
    """
    label = name or f"union[{key}]"
    normalize = normalize_tag or (lambda tag: tag)

    if not registry:
        raise RegistryError(f"{label}: variant registry is empty")
    table = {}
    for tag, codec in registry.items():
        if not isinstance(tag, str) or not tag:
            raise RegistryError(f"{label}: invalid variant tag {tag!r}")
        if not isinstance(codec, Codec):
            raise RegistryError(f"{label}: variant '{tag}' is not a codec")
        canonical = normalize(tag)
        if canonical in table:
            raise RegistryError(f"{label}: duplicate variant '{canonical}'")
        table[canonical] = codec
    legacy = {}
    for old, new in (legacy_tags or {}).items():
        retired, target = normalize(old), normalize(new)
        if retired in table:
            raise RegistryError(f"{label}: legacy tag '{retired}' is also a registered variant")
        if target not in table:
            raise RegistryError(f"{label}: legacy tag '{retired}' targets unknown variant '{target}'")
        legacy[retired] = target
    variants = MappingProxyType(table)
    logger.debug(f"Built {label} with {len(variants)} variants")

    def decode(node: Node) -> Result[Any]:
        if not isinstance(node, dict):
            return decode_failure(FailureKind.SHAPE_MISMATCH, "expected object", label, preview(node))
        if key not in node:
            return decode_failure(
                FailureKind.MISSING_FIELD, f"missing discriminator '{key}'", label, preview(node)
            ).located(key)
        raw_tag = node[key]
        if not isinstance(raw_tag, str):
            return decode_failure(
                FailureKind.SHAPE_MISMATCH, "discriminator must be a string", label, preview(raw_tag)
            ).located(key)
        try:
            tag = normalize(raw_tag)
        except ValueError:
            codec = None
        else:
            codec = variants.get(legacy.get(tag, tag))
        if codec is None:
            return decode_failure(
                FailureKind.UNKNOWN_VARIANT, f"unknown variant: {raw_tag}", label, preview(node)
            ).located(key)
        return codec.decode(node)

    def encode(value: Any) -> Result[Node]:
        tag = tag_of(value)
        if tag is None:
            return encode_failure(
                FailureKind.SHAPE_MISMATCH,
                f"value does not declare a '{TAG_ATTRIBUTE}'",
                label,
                repr(value),
            )
        codec = variants.get(normalize(tag))
        if codec is None:
            return encode_failure(FailureKind.UNKNOWN_VARIANT, f"unknown variant: {tag}", label)
        result = codec.encode(value)
        if not result.ok:
            return result
        node = result.value
        if not isinstance(node, dict):
            return encode_failure(
                FailureKind.SHAPE_MISMATCH, f"variant '{tag}' did not encode to an object", label
            )
        if key not in node:
            node = with_field(node, key, tag, first=True)
        return Result.success(node)

    return Codec(label, decode, encode, variants=variants)


@dataclass(frozen=True)
class OpaqueVariant:
    """Variant kept as raw fields, for tags without a typed schema.

    Attributes:
        kind: Normalized discriminator value
        fields: Every other field of the object, frozen
    """

    kind: str
    fields: Mapping[str, Node] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def variant_tag(self) -> str:
        return self.kind


def opaque_variant(
    tag: str, key: str, constructor: Callable[[str, Mapping[str, Node]], Any] = OpaqueVariant
) -> Codec[Any]:
    """Variant codec that keeps every field except ``key`` as-is.

    Args:
        tag: Discriminator value the variant is registered under
        key: Discriminator field name, dropped from the stored fields
        constructor: Builds the value from ``(tag, fields)``
    """
    label = f"opaque[{tag}]"

    def decode(node: Node) -> Result[Any]:
        if not isinstance(node, dict):
            return decode_failure(FailureKind.SHAPE_MISMATCH, "expected object", label, preview(node))
        body = {name: value for name, value in node.items() if name != key}
        return Result.success(constructor(tag, freeze_node(body)))

    def encode(value: Any) -> Result[Node]:
        fields = getattr(value, "fields", None)
        if not isinstance(fields, Mapping):
            return encode_failure(FailureKind.SHAPE_MISMATCH, "expected an opaque variant", label, repr(value))
        return Result.success(copy_node(dict(fields)))

    return Codec(label, decode, encode)
