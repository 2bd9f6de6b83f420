"""Unit tests for discriminated unions and identifiers."""

from dataclasses import dataclass
from typing import ClassVar

import pytest

from datapack_loader.codecs import (
    INT,
    ITEM,
    ITEMS,
    REFERENCE,
    AliasTable,
    FailureKind,
    IdentifierRegistry,
    OpaqueVariant,
    Reference,
    ResourceLocation,
    normalize_location,
    opaque_variant,
    required_field,
    struct,
    union,
    RESOURCE_LOCATION,
)
from datapack_loader.errors import ConfigError, DecodeError, RegistryError


@dataclass(frozen=True)
class Circle:
    variant_tag: ClassVar[str] = "circle"

    radius: int


@dataclass(frozen=True)
class Square:
    variant_tag: ClassVar[str] = "square"

    side: int


SHAPE = union(
    "type",
    {
        "circle": struct(Circle, required_field("radius", INT)),
        "square": struct(Square, required_field("side", INT)),
    },
    name="shape",
)


@dataclass(frozen=True)
class Holder:
    id: Reference


@dataclass(frozen=True)
class ItemHolder:
    id: ResourceLocation


class TestUnionDispatch:
    """Test decoding and encoding through a variant registry."""

    def test_decode_variants(self) -> None:
        """Test the discriminator selects the variant codec."""
        assert SHAPE.decode({"type": "circle", "radius": 2}).unwrap() == Circle(2)
        assert SHAPE.decode({"type": "square", "side": 3}).unwrap() == Square(3)

    def test_unknown_tag(self) -> None:
        """Test an unknown tag fails naming the tag."""
        result = SHAPE.decode({"type": "triangle"})
        assert result.failure.kind is FailureKind.UNKNOWN_VARIANT
        assert "triangle" in result.failure.reason
        assert result.failure.path == ("type",)

    def test_missing_discriminator(self) -> None:
        """Test a missing discriminator is never defaulted."""
        result = SHAPE.decode({"radius": 2})
        assert result.failure.kind is FailureKind.MISSING_FIELD
        assert "type" in result.failure.reason

    def test_non_string_discriminator(self) -> None:
        """Test the discriminator must be a string."""
        assert SHAPE.decode({"type": 3}).failure.kind is FailureKind.SHAPE_MISMATCH

    def test_variant_failure_propagates(self) -> None:
        """Test a failure inside the variant keeps its path."""
        result = SHAPE.decode({"type": "circle", "radius": "big"})
        assert result.failure.path == ("radius",)

    def test_encode_writes_tag_first(self) -> None:
        """Test encoding inserts the discriminator."""
        node = SHAPE.encode(Square(4)).unwrap()
        assert node == {"type": "square", "side": 4}
        assert list(node)[0] == "type"

    def test_encode_requires_variant_tag(self) -> None:
        """Test values without a tag cannot be encoded."""
        assert not SHAPE.encode(Holder(Reference("x"))).ok

    def test_variants_are_exposed(self) -> None:
        """Test the registry is readable from the codec."""
        assert set(SHAPE.variants) == {"circle", "square"}

    def test_tag_normalization(self) -> None:
        """Test short tags resolve to their namespaced form."""
        codec = union(
            "type",
            {"minecraft:circle": struct(Circle, required_field("radius", INT))},
            normalize_tag=normalize_location,
        )
        assert codec.decode({"type": "circle", "radius": 1}).unwrap() == Circle(1)
        assert codec.decode({"type": "Not A Tag"}).failure.kind is FailureKind.UNKNOWN_VARIANT

    def test_legacy_tag(self) -> None:
        """Test a retired tag decodes as its replacement and is written as it."""
        codec = union(
            "type",
            {"circle": struct(Circle, required_field("radius", INT))},
            legacy_tags={"round": "circle"},
        )
        value = codec.decode({"type": "round", "radius": 5}).unwrap()
        assert value == Circle(5)
        assert codec.encode(value).unwrap() == {"type": "circle", "radius": 5}
        assert set(codec.variants) == {"circle"}


class TestUnionRegistry:
    """Test registry misconfiguration is fatal at construction."""

    def test_empty_registry(self) -> None:
        """Test an empty registry is rejected."""
        with pytest.raises(RegistryError):
            union("type", {})

    def test_non_codec_entry(self) -> None:
        """Test every entry must be a codec."""
        with pytest.raises(RegistryError):
            union("type", {"circle": Circle})  # type: ignore[dict-item]

    def test_duplicate_after_normalization(self) -> None:
        """Test two tags naming the same variant are rejected."""
        with pytest.raises(RegistryError):
            union(
                "type",
                {"circle": INT, "minecraft:circle": INT},
                normalize_tag=normalize_location,
            )

    def test_legacy_tag_must_not_be_registered(self) -> None:
        """Test a retired tag cannot also be a variant of its own."""
        with pytest.raises(RegistryError):
            union("type", {"circle": INT, "round": INT}, legacy_tags={"round": "circle"})

    def test_legacy_tag_target_must_exist(self) -> None:
        """Test a retired tag must point at a registered variant."""
        with pytest.raises(RegistryError):
            union("type", {"circle": INT}, legacy_tags={"round": "oval"})


class TestOpaqueVariant:
    """Test variants kept as raw fields."""

    def test_fields_survive_round_trip(self) -> None:
        """Test every non-discriminator field is kept and written back."""
        codec = union("kind", {"blob": opaque_variant("blob", "kind")})
        node = {"kind": "blob", "payload": {"a": [1, 2]}, "flag": True}
        value = codec.decode(node).unwrap()

        assert isinstance(value, OpaqueVariant)
        assert value.kind == "blob"
        assert value.fields["payload"]["a"] == (1, 2)
        assert codec.encode(value).unwrap() == node

    def test_fields_are_read_only(self) -> None:
        """Test nested fields of a decoded variant cannot be edited."""
        codec = union("kind", {"blob": opaque_variant("blob", "kind")})
        node = {"kind": "blob", "payload": {"a": [1, 2]}}
        value = codec.decode(node).unwrap()

        with pytest.raises(TypeError):
            value.fields["payload"]["a"] = [3]  # type: ignore[index]
        with pytest.raises(TypeError):
            value.fields["extra"] = 1  # type: ignore[index]
        assert node["payload"]["a"] == [1, 2]


class TestIdentifiers:
    """Test namespaced identifiers, tag references and aliases."""

    def test_default_namespace(self) -> None:
        """Test a bare path gets the default namespace."""
        assert ResourceLocation.parse("stone") == ResourceLocation("minecraft", "stone")
        assert str(ResourceLocation.parse("demo:ores/iron")) == "demo:ores/iron"

    def test_invalid_identifier(self) -> None:
        """Test characters outside the allowed set fail."""
        with pytest.raises(ValueError):
            ResourceLocation.parse("Stone")
        result = RESOURCE_LOCATION.decode("bad id")
        assert result.failure.kind is FailureKind.MALFORMED_TRANSFORM

    def test_tag_reference(self) -> None:
        """Test the '#' sigil marks a tag reference."""
        codec = struct(Holder, required_field("id", REFERENCE))
        holder = codec.decode({"id": "#minecraft:logs"}).unwrap()
        assert holder.id.is_tag
        assert holder.id.value == ResourceLocation("minecraft", "logs")
        assert codec.encode(holder).unwrap() == {"id": "#minecraft:logs"}

    def test_plain_reference(self) -> None:
        """Test identifiers without the sigil are single entries."""
        reference = REFERENCE.decode("minecraft:oak_log").unwrap()
        assert not reference.is_tag
        assert str(reference) == "minecraft:oak_log"

    def test_item_alias(self) -> None:
        """Test a renamed item decodes to its canonical id."""
        codec = struct(ItemHolder, required_field("id", ITEM))
        holder = codec.decode({"id": "minecraft:scute"}).unwrap()
        assert holder.id == ResourceLocation("minecraft", "turtle_scute")
        assert not ITEMS.is_canonical(ResourceLocation("minecraft", "scute"))

    def test_alias_is_applied_once(self) -> None:
        """Test canonical and legacy spellings decode to the same id."""
        canonical = ITEM.decode("minecraft:turtle_scute").unwrap()
        assert canonical == ITEM.decode("minecraft:scute").unwrap()
        assert canonical == ResourceLocation("minecraft", "turtle_scute")
        assert ITEMS.resolve(canonical) == canonical
        assert ITEM.encode(canonical).unwrap() == "minecraft:turtle_scute"

    def test_alias_chain_is_rejected(self) -> None:
        """Test aliasing to another alias is a configuration error."""
        with pytest.raises(ConfigError):
            AliasTable({"demo:a": "demo:b", "demo:b": "demo:c"})

    def test_closed_registry(self) -> None:
        """Test a closed registry resolves aliases and rejects unknown ids."""
        registry = IdentifierRegistry("block", known=["demo:new"], aliases={"demo:old": "demo:new"})
        assert registry.resolve("demo:old") == ResourceLocation("demo", "new")

        result = registry.codec().decode("demo:missing")
        assert result.failure.kind is FailureKind.UNRESOLVED_IDENTIFIER
        assert "demo:missing" in result.failure.reason
        with pytest.raises(DecodeError):
            registry.resolve("demo:missing")

    def test_alias_to_unknown_target(self) -> None:
        """Test aliases must target a known identifier in a closed registry."""
        with pytest.raises(ConfigError):
            IdentifierRegistry("block", known=["demo:new"], aliases={"demo:old": "demo:gone"})
