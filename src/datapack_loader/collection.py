"""
Typed, lazily-decoded views over folders of documents.

:class:`Collection` decodes each document on first access and memoizes it.
:meth:`Collection.freeze` materializes the whole subtree into a read-only
:class:`FrozenCollection`, which never touches the source tree again.
"""

import logging
import threading
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    Generic,
    Iterator,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from .codecs.core import Codec
from .codecs.results import Failure, FailureKind
from .errors import DecodeError
from .files import FileTree
from .tree import parse_document
from .utils.logging_config import document_extra

T = TypeVar("T")

Decoder = Union[Codec[T], Callable[[str], T]]
"""Either a codec (documents parsed as JSON) or a plain-text decoder."""


def document_decoder(decoder: Decoder[T]) -> Callable[[bytes], T]:
    """Turn a codec or a text decoder into a ``bytes -> T`` function.

    The returned function raises ``DecodeError`` on any failure.
    """
    if isinstance(decoder, Codec):
        codec = decoder

        def decode_json(data: bytes) -> T:
            return codec.decode(parse_document(data)).unwrap()

        return decode_json

    def decode_text(data: bytes) -> T:
        try:
            return decoder(data.decode("utf-8"))
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(
                Failure(
                    FailureKind.MALFORMED_TRANSFORM,
                    f"{type(e).__name__}: {e}",
                    getattr(decoder, "__qualname__", "text"),
                )
            ) from e

    return decode_text


def _split_head(path: str) -> Tuple[str, Optional[str]]:
    head, separator, rest = path.strip("/").partition("/")
    return (head, rest) if separator else (head, None)


class Collection(Generic[T]):
    """Mutable, memoizing view of one folder of documents.

    Paths are relative to the folder (``"iron_ingot.json"``) and may address
    nested folders (``"smelting/iron_ingot.json"``). The file and folder lists
    are captured at construction and stay stable for the collection's lifetime.
    """

    def __init__(self, tree: FileTree, decode: Callable[[bytes], T], name: str, prefix: str = ""):
        self.name = name
        self.prefix = prefix
        self._tree = tree
        self._decode = decode
        self._paths: Tuple[str, ...] = tuple(tree.files())
        self._subfolders: Tuple[str, ...] = tuple(tree.folders())
        self._cache: Dict[str, T] = {}
        self._children: Dict[str, "Collection[T]"] = {}
        self._lock = threading.Lock()
        self._path_locks: Dict[str, threading.Lock] = {}
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def __repr__(self) -> str:
        return f"Collection({self.source(self.prefix)!r}, {len(self._paths)} files)"

    def source(self, path: str) -> str:
        """Qualified name of ``path`` for diagnostics."""
        return f"{self.name}/{self.prefix}{path}"

    def paths(self) -> Tuple[str, ...]:
        """Document names directly inside this folder."""
        return self._paths

    def subfolders(self) -> Tuple[str, ...]:
        return self._subfolders

    def subfolder(self, name: str) -> "Collection[T]":
        """Nested collection for ``name``, created once and cached.

        Raises:
            KeyError: If there is no such subfolder
        """
        if name not in self._subfolders:
            raise KeyError(f"No folder '{name}' in {self.source('')}")
        with self._lock:
            child = self._children.get(name)
            if child is None:
                child = Collection(
                    self._tree.folder(name), self._decode, self.name, f"{self.prefix}{name}/"
                )
                self._children[name] = child
            return child

    def get(self, path: str) -> T:
        """Decode the document at ``path`` (at most once) and return it.

        Raises:
            KeyError: If there is no document at ``path``
            DecodeError: If the document is malformed; nothing is cached then
        """
        head, rest = _split_head(path)
        if rest is not None:
            return self.subfolder(head).get(rest)
        if head not in self._paths:
            raise KeyError(f"No document '{path}' in {self.source('')}")

        if head in self._cache:
            return self._cache[head]
        with self._lock:
            path_lock = self._path_locks.setdefault(head, threading.Lock())
        with path_lock:
            if head in self._cache:
                return self._cache[head]
            value = self._load(head)
            self._cache[head] = value
            return value

    def _load(self, path: str) -> T:
        source = self.source(path)
        try:
            data = self._tree.file(path)
        except OSError as e:
            raise DecodeError(
                Failure(FailureKind.MALFORMED_DOCUMENT, f"unreadable document: {e}", "file", source=source)
            ) from e
        try:
            value = self._decode(data)
        except DecodeError as e:
            raise DecodeError(e.failure.from_source(source)) from e
        self.logger.debug(f"Decoded {source}")
        return value

    def __getitem__(self, path: str) -> T:
        return self.get(path)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        head, rest = _split_head(path)
        if rest is None:
            return head in self._paths
        return head in self._subfolders and rest in self.subfolder(head)

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def walk(self) -> Iterator[str]:
        """Every document path in this folder and below."""
        yield from self._paths
        for name in self._subfolders:
            for path in self.subfolder(name).walk():
                yield f"{name}/{path}"

    def freeze(self) -> "FrozenCollection[T]":
        """Decode every document of the subtree and return a read-only snapshot.

        A malformed document does not stop its siblings: its failure is logged,
        recorded, and raised again by ``get`` on that path only.
        """
        values: Dict[str, T] = {}
        failures: Dict[str, Failure] = {}
        for path in self._paths:
            try:
                values[path] = self.get(path)
            except DecodeError as e:
                failures[path] = e.failure
                self.logger.warning(
                    f"Skipping malformed document: {e.failure.describe()}",
                    extra=document_extra(e.failure.source or self.source(path)),
                )
        children = {name: self.subfolder(name).freeze() for name in self._subfolders}
        return FrozenCollection(self.name, self.prefix, self._paths, values, failures, children)


class FrozenCollection(Generic[T]):
    """Read-only snapshot of a :class:`Collection`; never reads the source."""

    __slots__ = ("name", "prefix", "_paths", "_values", "_failures", "_children")

    def __init__(
        self,
        name: str,
        prefix: str,
        paths: Tuple[str, ...],
        values: Mapping[str, T],
        failures: Mapping[str, Failure],
        children: Mapping[str, "FrozenCollection[T]"],
    ):
        self.name = name
        self.prefix = prefix
        self._paths = paths
        self._values = MappingProxyType(dict(values))
        self._failures = MappingProxyType(dict(failures))
        self._children = MappingProxyType(dict(children))

    @classmethod
    def empty(cls, name: str) -> "FrozenCollection[T]":
        return cls(name, "", (), {}, {}, {})

    def __repr__(self) -> str:
        return f"FrozenCollection({self.name}/{self.prefix!s}, {len(self._paths)} files)"

    def paths(self) -> Tuple[str, ...]:
        return self._paths

    def subfolders(self) -> Tuple[str, ...]:
        return tuple(self._children)

    def subfolder(self, name: str) -> "FrozenCollection[T]":
        try:
            return self._children[name]
        except KeyError:
            raise KeyError(f"No folder '{name}' in {self.name}/{self.prefix}") from None

    def get(self, path: str) -> T:
        """Return the decoded document at ``path``.

        Raises:
            KeyError: If there is no document at ``path``
            DecodeError: If that document failed to decode when frozen
        """
        head, rest = _split_head(path)
        if rest is not None:
            return self.subfolder(head).get(rest)
        if head in self._values:
            return self._values[head]
        if head in self._failures:
            raise DecodeError(self._failures[head])
        raise KeyError(f"No document '{path}' in {self.name}/{self.prefix}")

    def __getitem__(self, path: str) -> T:
        return self.get(path)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        head, rest = _split_head(path)
        if rest is None:
            return head in self._paths
        return head in self._children and rest in self._children[head]

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def items(self) -> Iterator[Tuple[str, T]]:
        """Successfully decoded ``(path, value)`` pairs in this folder and below."""
        for path in self._paths:
            if path in self._values:
                yield path, self._values[path]
        for name, child in self._children.items():
            for path, value in child.items():
                yield f"{name}/{path}", value

    def walk(self) -> Iterator[str]:
        yield from self._paths
        for name, child in self._children.items():
            for path in child.walk():
                yield f"{name}/{path}"

    def failures(self) -> Dict[str, Failure]:
        """Failures recorded while freezing, keyed by nested path."""
        found = dict(self._failures)
        for name, child in self._children.items():
            for path, failure in child.failures().items():
                found[f"{name}/{path}"] = failure
        return found


def as_collection(tree: FileTree, decoder: Decoder[T], name: str) -> Collection[T]:
    """Wrap a folder of documents as a lazily-decoded collection.

    Args:
        tree: Folder holding the documents
        decoder: Codec for JSON documents, or a ``str -> T`` text decoder
        name: Qualified name used in diagnostics (e.g. ``minecraft:recipe``)
    """
    return Collection(tree, document_decoder(decoder), name)
