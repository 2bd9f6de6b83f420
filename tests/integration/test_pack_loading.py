"""End-to-end tests loading whole packs from memory and from disk."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from datapack_loader import DatapackLoader, PackLoadError, load_datapack
from datapack_loader.codecs import FailureKind, ResourceLocation
from datapack_loader.content import McFunction
from datapack_loader.content.recipes import SmeltingRecipe, SmithingTrimRecipe
from datapack_loader.content.registries import TrimPattern
from datapack_loader.content.tags import Tag
from datapack_loader.context import get_context
from datapack_loader.errors import DecodeError
from datapack_loader.pack import Datapack, PackMeta

PACK_META = {"pack": {"pack_format": 48, "description": "Demo pack"}}

SMELT_IRON = {
    "type": "minecraft:smelting",
    "ingredient": {"item": "minecraft:iron_ore"},
    "result": "minecraft:iron_ingot",
    "experience": 0.7,
}

TRIM_RECIPE = {
    "type": "minecraft:smithing_trim",
    "template": "minecraft:coast_armor_trim_smithing_template",
    "base": "#minecraft:trimmable_armor",
    "addition": "#minecraft:trim_materials",
    "pattern": "demo:coast",
}

COAST = {
    "asset_id": "demo:coast",
    "description": {"translate": "trim_pattern.demo.coast"},
}

DEMO_PACK = {
    "pack.mcmeta": PACK_META,
    "pack.png": b"\x89PNG",
    "data/demo/recipe/iron_ingot.json": SMELT_IRON,
    "data/demo/recipe/armor/coast_trim.json": TRIM_RECIPE,
    "data/demo/recipe/bad_type.json": {"type": "demo:alchemy"},
    "data/demo/recipe/not_json.json": "{oops",
    "data/demo/trim_pattern/coast.json": COAST,
    "data/demo/tags/item/ores.json": {"values": ["minecraft:iron_ore", "#minecraft:coal_ores"]},
    "data/demo/function/hello.mcfunction": "# greet\nsay hello\n",
    "data/demo/loot_table/blocks/ore.json": {
        "type": "minecraft:block",
        "pools": [{"rolls": 1, "entries": [{"type": "item", "name": "minecraft:raw_iron"}]}],
    },
    "data/Bad Namespace/recipe/x.json": SMELT_IRON,
}


class TestPackLoading:
    """Test loading a pack with the data/ layout."""

    def test_collections(self, memory_pack) -> None:
        """Test every category lands in its namespace collection."""
        pack = DatapackLoader().load(memory_pack(DEMO_PACK))

        assert isinstance(pack, Datapack)
        assert set(pack.namespaces) == {"demo"}
        demo = pack["demo"]
        assert isinstance(demo.recipe.get("iron_ingot.json"), SmeltingRecipe)
        assert isinstance(demo.tags.get("item/ores.json"), Tag)
        assert demo.function.get("hello.mcfunction").commands == ("say hello",)
        assert isinstance(demo.function.get("hello.mcfunction"), McFunction)
        assert len(demo.loot_table.get("blocks/ore.json").pools) == 1
        assert len(demo.predicate) == 0

    def test_meta_and_icon(self, memory_pack) -> None:
        """Test pack.mcmeta and pack.png are read."""
        pack = DatapackLoader().load(memory_pack(DEMO_PACK))
        assert pack.meta.pack.pack_format == 48
        assert pack.meta.pack.description == "Demo pack"
        assert pack.icon == b"\x89PNG"

    def test_failures_are_recorded(self, memory_pack) -> None:
        """Test malformed documents are reported without aborting the load."""
        pack = DatapackLoader().load(memory_pack(DEMO_PACK))
        failures = pack.failures()

        assert set(failures) == {"demo:recipe/bad_type.json", "demo:recipe/not_json.json"}
        assert failures["demo:recipe/bad_type.json"].kind is FailureKind.UNKNOWN_VARIANT
        assert failures["demo:recipe/not_json.json"].kind is FailureKind.MALFORMED_DOCUMENT
        assert failures["demo:recipe/bad_type.json"].source == "demo:recipe/bad_type.json"
        with pytest.raises(DecodeError):
            pack["demo"].recipe.get("bad_type.json")

    def test_lookup(self, memory_pack) -> None:
        """Test documents are found by namespaced id."""
        pack = DatapackLoader().load(memory_pack(DEMO_PACK))

        assert isinstance(pack.lookup("recipe", "demo:iron_ingot"), SmeltingRecipe)
        assert isinstance(pack.lookup("recipe", "demo:armor/coast_trim"), SmithingTrimRecipe)
        assert pack.lookup("recipe", "demo:missing") is None
        assert pack.lookup("recipe", "other:iron_ingot") is None
        with pytest.raises(KeyError):
            pack.lookup("structure", "demo:house")

    def test_trim_pattern_resolved_after_load(self, memory_pack) -> None:
        """Test the trim recipe sees the pattern defined by the complete pack."""
        pack = DatapackLoader().load(memory_pack(DEMO_PACK))
        recipe = pack.lookup("recipe", "demo:armor/coast_trim")

        assert recipe.trim.resolved
        assert recipe.trim.get() == TrimPattern(
            ResourceLocation("demo", "coast"), {"translate": "trim_pattern.demo.coast"}
        )
        assert recipe.trim.get() is pack.lookup("trim_pattern", "demo:coast")

    def test_missing_trim_pattern(self, memory_pack) -> None:
        """Test a pattern the pack does not define resolves to None."""
        files = {k: v for k, v in DEMO_PACK.items() if "trim_pattern" not in k}
        pack = DatapackLoader().load(memory_pack(files))
        recipe = pack.lookup("recipe", "demo:armor/coast_trim")
        assert recipe.trim.resolved
        assert recipe.trim.get() is None

    def test_untyped_documents_are_read_only(self, memory_pack) -> None:
        """Test documents kept as raw nodes cannot be edited through the pack."""
        pack = DatapackLoader(load_in_memory=False).load(
            memory_pack(
                {
                    "data/demo/advancement/a.json": {"criteria": {"x": 1}, "parent": ["p"]},
                    "data/demo/trim_pattern/coast.json": COAST,
                }
            )
        )
        document = pack["demo"].advancement.get("a.json")

        with pytest.raises(TypeError):
            document["criteria"]["x"] = 999
        with pytest.raises(TypeError):
            document["injected"] = True
        with pytest.raises(AttributeError):
            document["parent"].append("q")

        again = pack["demo"].advancement.get("a.json")
        assert again["criteria"]["x"] == 1
        assert "injected" not in again

        description = pack.lookup("trim_pattern", "demo:coast").description
        with pytest.raises(TypeError):
            description["translate"] = "changed"

    def test_context_closed_after_load(self, memory_pack) -> None:
        """Test no loading context leaks out of a load."""
        DatapackLoader().load(memory_pack(DEMO_PACK))
        assert get_context().is_static

    def test_concurrent_loads(self, memory_pack) -> None:
        """Test loads in parallel threads each get their own context."""
        tree = memory_pack(DEMO_PACK)
        with ThreadPoolExecutor(max_workers=4) as executor:
            packs = list(executor.map(lambda seed: DatapackLoader(seed=seed).load(tree), range(4)))

        for pack in packs:
            recipe = pack.lookup("recipe", "demo:armor/coast_trim")
            assert recipe.trim.get() is pack.lookup("trim_pattern", "demo:coast")


class TestPackLayouts:
    """Test layout variations and top-level files."""

    def test_legacy_plural_folders(self, memory_pack) -> None:
        """Test older plural folder names are recognised."""
        pack = DatapackLoader().load(
            memory_pack(
                {
                    "data/old/recipes/iron.json": SMELT_IRON,
                    "data/old/functions/tick.mcfunction": "say tick\n",
                }
            )
        )
        assert isinstance(pack["old"].recipe.get("iron.json"), SmeltingRecipe)
        assert pack["old"].function.get("tick.mcfunction").commands == ("say tick",)

    def test_namespaces_at_root(self, memory_pack) -> None:
        """Test a tree without data/ is read as the namespace root."""
        pack = DatapackLoader().load(memory_pack({"demo/recipe/iron.json": SMELT_IRON}))
        assert isinstance(pack.lookup("recipe", "demo:iron"), SmeltingRecipe)

    def test_missing_meta_defaults(self, memory_pack) -> None:
        """Test a pack without pack.mcmeta gets the default metadata."""
        pack = DatapackLoader().load(memory_pack({"data/demo/recipe/iron.json": SMELT_IRON}))
        assert pack.meta == PackMeta()
        assert pack.icon is None

    def test_malformed_meta(self, memory_pack) -> None:
        """Test a broken pack.mcmeta fails the whole load."""
        with pytest.raises(PackLoadError):
            DatapackLoader().load(memory_pack({"pack.mcmeta": "{"}))
        with pytest.raises(PackLoadError):
            DatapackLoader().load(memory_pack({"pack.mcmeta": {"pack": {"pack_format": "new"}}}))


class TestDirectoryPacks:
    """Test loading packs from disk."""

    def test_load_directory(self, write_pack) -> None:
        """Test a directory pack loads like an in-memory one."""
        root = write_pack(DEMO_PACK)
        pack = load_datapack(root)

        assert isinstance(pack.lookup("recipe", "demo:iron_ingot"), SmeltingRecipe)
        assert pack.lookup("recipe", "demo:armor/coast_trim").trim.get() is not None
        assert len(pack.failures()) == 2

    def test_load_directory_without_memory_copy(self, write_pack) -> None:
        """Test documents can be decoded straight from disk."""
        root = write_pack(DEMO_PACK)
        pack = DatapackLoader(load_in_memory=False).load(str(root))
        assert pack["demo"].tags.get("item/ores.json").references()

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Test a missing pack directory is reported."""
        with pytest.raises(PackLoadError):
            load_datapack(tmp_path / "nope")
