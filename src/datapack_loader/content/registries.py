"""
Small registry documents: damage types, chat types and armor trims.

Text components are kept as raw nodes; rendering them is the host's concern.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Tuple

from ..codecs import (
    BOOL,
    FLOAT,
    ITEM,
    PASSTHROUGH,
    RESOURCE_LOCATION,
    STRING,
    Codec,
    ResourceLocation,
    enum_of,
    list_of,
    mapping_of,
    optional_field,
    required_field,
    struct,
)
from ..tree import Node


class DamageScaling(Enum):
    NEVER = "never"
    ALWAYS = "always"
    WHEN_CAUSED_BY_LIVING_NON_PLAYER = "when_caused_by_living_non_player"


class DamageEffects(Enum):
    HURT = "hurt"
    THORNS = "thorns"
    DROWNING = "drowning"
    BURNING = "burning"
    POKING = "poking"
    FREEZING = "freezing"


class DeathMessageType(Enum):
    DEFAULT = "default"
    FALL_VARIANTS = "fall_variants"
    INTENTIONAL_GAME_DESIGN = "intentional_game_design"


@dataclass(frozen=True)
class DamageType:
    message_id: str
    exhaustion: float
    scaling: DamageScaling
    effects: Optional[DamageEffects] = None
    death_message_type: Optional[DeathMessageType] = None


DAMAGE_TYPE: Codec[DamageType] = struct(
    DamageType,
    required_field("message_id", STRING),
    required_field("exhaustion", FLOAT),
    required_field("scaling", enum_of(DamageScaling)),
    optional_field("effects", enum_of(DamageEffects)),
    optional_field("death_message_type", enum_of(DeathMessageType)),
)


@dataclass(frozen=True)
class ChatDecoration:
    translation_key: str
    parameters: Tuple[str, ...]
    style: Optional[Node] = None


@dataclass(frozen=True)
class ChatType:
    chat: ChatDecoration
    narration: ChatDecoration


CHAT_DECORATION: Codec[ChatDecoration] = struct(
    ChatDecoration,
    required_field("translation_key", STRING),
    required_field("parameters", list_of(STRING)),
    optional_field("style", PASSTHROUGH),
)

CHAT_TYPE: Codec[ChatType] = struct(
    ChatType,
    required_field("chat", CHAT_DECORATION),
    required_field("narration", CHAT_DECORATION),
)


@dataclass(frozen=True)
class TrimPattern:
    """Armor trim pattern.

    Attributes:
        asset_id: Texture asset of the pattern
        description: Text component shown in tooltips
        decal: Whether the pattern is drawn as a decal over the armor
        template_item: Smithing template item (older packs only)
    """

    asset_id: ResourceLocation
    description: Node
    decal: bool = False
    template_item: Optional[ResourceLocation] = None


TRIM_PATTERN: Codec[TrimPattern] = struct(
    TrimPattern,
    required_field("asset_id", RESOURCE_LOCATION),
    required_field("description", PASSTHROUGH),
    optional_field("decal", BOOL, default=False),
    optional_field("template_item", ITEM),
)


@dataclass(frozen=True)
class TrimMaterial:
    asset_name: str
    description: Node
    ingredient: Optional[ResourceLocation] = None
    item_model_index: Optional[float] = None
    override_armor_assets: Optional[Mapping[str, str]] = None


TRIM_MATERIAL: Codec[TrimMaterial] = struct(
    TrimMaterial,
    required_field("asset_name", STRING),
    required_field("description", PASSTHROUGH),
    optional_field("ingredient", ITEM),
    optional_field("item_model_index", FLOAT),
    optional_field("override_armor_assets", mapping_of(STRING)),
)
