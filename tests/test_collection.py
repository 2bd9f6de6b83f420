"""Unit tests for file trees and lazily-decoded collections."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List

import pytest

from datapack_loader.codecs import INT, FailureKind
from datapack_loader.collection import Collection, FrozenCollection, as_collection
from datapack_loader.errors import DecodeError
from datapack_loader.files import DirectoryFileTree, MemoryFileTree, in_memory, walk_files


class CountingDecoder:
    """Text decoder that records how often it runs."""

    def __init__(self, delay: float = 0.0):
        self.calls: List[str] = []
        self.delay = delay
        self._lock = threading.Lock()

    def __call__(self, text: str) -> str:
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            self.calls.append(text)
        if text == "boom":
            raise ValueError("cannot decode boom")
        return text.upper()


@pytest.fixture
def tree() -> MemoryFileTree:
    return MemoryFileTree(
        {
            "b.txt": "bee",
            "a.txt": "ay",
            "nested/c.txt": "see",
            "nested/deeper/d.txt": "dee",
            "broken.txt": "boom",
        }
    )


class TestFileTrees:
    """Test the read-only file tree adapters."""

    def test_memory_tree_listing(self, tree: MemoryFileTree) -> None:
        """Test direct children are listed sorted."""
        assert tree.files() == ["a.txt", "b.txt", "broken.txt"]
        assert tree.folders() == ["nested"]
        assert tree.folder("nested").files() == ["c.txt"]
        assert tree.has_folder("nested/deeper")
        assert not tree.has_file("nested")

    def test_memory_tree_missing(self, tree: MemoryFileTree) -> None:
        """Test missing entries raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            tree.file("missing.txt")
        with pytest.raises(FileNotFoundError):
            tree.folder("missing")

    def test_path_escape(self) -> None:
        """Test '..' segments are refused."""
        with pytest.raises(ValueError):
            MemoryFileTree({"../outside.txt": "x"})

    def test_directory_tree(self, tmp_path: Path) -> None:
        """Test the directory adapter mirrors the disk layout."""
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "x.json").write_bytes(b"1")
        (tmp_path / "top.json").write_bytes(b"2")

        tree = DirectoryFileTree(tmp_path)
        assert tree.files() == ["top.json"]
        assert tree.folders() == ["sub"]
        assert tree.folder("sub").file("x.json") == b"1"
        assert list(walk_files(tree)) == ["top.json", "sub/x.json"]

    def test_in_memory_copy(self, tmp_path: Path) -> None:
        """Test a directory is read into an equivalent memory tree."""
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "one.json").write_bytes(b"1")
        (tmp_path / "two.json").write_bytes(b"2")

        copy = in_memory(DirectoryFileTree(tmp_path), max_workers=2)
        assert isinstance(copy, MemoryFileTree)
        assert copy.file("a/one.json") == b"1"
        assert copy.file("two.json") == b"2"


class TestCollection:
    """Test lazy, memoized collections."""

    def test_get_is_memoized(self, tree: MemoryFileTree) -> None:
        """Test a document is decoded once."""
        decoder = CountingDecoder()
        collection = as_collection(tree, decoder, "test")

        assert collection.get("a.txt") == "AY"
        assert collection["a.txt"] == "AY"
        assert decoder.calls == ["ay"]

    def test_nested_paths(self, tree: MemoryFileTree) -> None:
        """Test paths may address nested folders."""
        collection = as_collection(tree, CountingDecoder(), "test")
        assert collection.get("nested/deeper/d.txt") == "DEE"
        assert "nested/c.txt" in collection
        assert "nested/missing.txt" not in collection

    def test_listing_is_stable(self, tree: MemoryFileTree) -> None:
        """Test paths and subfolders mirror the tree."""
        collection = as_collection(tree, CountingDecoder(), "test")
        assert collection.paths() == ("a.txt", "b.txt", "broken.txt")
        assert collection.subfolders() == ("nested",)
        assert len(collection) == 3
        assert sorted(collection.walk()) == [
            "a.txt",
            "b.txt",
            "broken.txt",
            "nested/c.txt",
            "nested/deeper/d.txt",
        ]

    def test_subfolder_is_cached(self, tree: MemoryFileTree) -> None:
        """Test a subfolder collection is created once."""
        collection = as_collection(tree, CountingDecoder(), "test")
        assert collection.subfolder("nested") is collection.subfolder("nested")
        with pytest.raises(KeyError):
            collection.subfolder("missing")

    def test_missing_document(self, tree: MemoryFileTree) -> None:
        """Test unknown paths raise KeyError."""
        collection = as_collection(tree, CountingDecoder(), "test")
        with pytest.raises(KeyError):
            collection.get("zzz.txt")

    def test_failure_propagates_and_is_not_cached(self, tree: MemoryFileTree) -> None:
        """Test a malformed document raises on every access."""
        decoder = CountingDecoder()
        collection = as_collection(tree, decoder, "test")

        for _ in range(2):
            with pytest.raises(DecodeError) as info:
                collection.get("broken.txt")
        assert info.value.failure.kind is FailureKind.MALFORMED_TRANSFORM
        assert info.value.failure.source == "test/broken.txt"
        assert decoder.calls == ["boom", "boom"]

    def test_codec_documents(self) -> None:
        """Test a codec decoder parses JSON documents."""
        tree = MemoryFileTree({"one.json": b"1", "bad.json": b'"one"', "sub/two.json": b"2"})
        collection = as_collection(tree, INT, "numbers")
        assert collection.get("one.json") == 1
        assert collection.get("sub/two.json") == 2
        with pytest.raises(DecodeError) as info:
            collection.get("bad.json")
        assert info.value.failure.kind is FailureKind.SHAPE_MISMATCH
        assert info.value.failure.source == "numbers/bad.json"

    def test_concurrent_first_access(self, tree: MemoryFileTree) -> None:
        """Test concurrent readers of one path share a single decode."""
        decoder = CountingDecoder(delay=0.01)
        collection = as_collection(tree, decoder, "test")

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: collection.get("b.txt"), range(16)))

        assert results == ["BEE"] * 16
        assert decoder.calls == ["bee"]


class TestFrozenCollection:
    """Test read-only snapshots."""

    def test_freeze_records_failures(self, tree: MemoryFileTree) -> None:
        """Test malformed documents do not stop their siblings."""
        frozen = as_collection(tree, CountingDecoder(), "test").freeze()

        assert isinstance(frozen, FrozenCollection)
        assert frozen.get("a.txt") == "AY"
        assert frozen.get("nested/deeper/d.txt") == "DEE"
        assert set(frozen.failures()) == {"broken.txt"}
        with pytest.raises(DecodeError):
            frozen.get("broken.txt")

    def test_skipped_document_is_named_in_log(
        self, tree: MemoryFileTree, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test the warning for a malformed document carries its id."""
        with caplog.at_level(logging.WARNING, logger="datapack_loader.collection"):
            as_collection(tree, CountingDecoder(), "test").freeze()

        documents = [getattr(record, "document", None) for record in caplog.records]
        assert documents == ["test/broken.txt"]

    def test_frozen_never_reads_source(self, tree: MemoryFileTree) -> None:
        """Test lookups after freezing do not decode again."""
        decoder = CountingDecoder()
        frozen = as_collection(tree, decoder, "test").freeze()
        before = len(decoder.calls)

        assert dict(frozen.items())["nested/c.txt"] == "SEE"
        assert frozen["b.txt"] == "BEE"
        assert len(decoder.calls) == before

    def test_items_skip_failures(self, tree: MemoryFileTree) -> None:
        """Test items yields decoded documents only."""
        frozen = as_collection(tree, CountingDecoder(), "test").freeze()
        assert "broken.txt" not in dict(frozen.items())
        assert "broken.txt" in frozen

    def test_empty(self) -> None:
        """Test an empty snapshot."""
        frozen: FrozenCollection[int] = FrozenCollection.empty("none")
        assert len(frozen) == 0
        assert frozen.failures() == {}
        with pytest.raises(KeyError):
            frozen.get("x.json")

    def test_collection_is_generic_view(self, tree: MemoryFileTree) -> None:
        """Test a collection can be built directly from a decode function."""
        collection: Collection[bytes] = Collection(tree, lambda data: data, "raw")
        assert collection.get("a.txt") == b"ay"
