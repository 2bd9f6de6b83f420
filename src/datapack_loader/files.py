"""
Read-only virtual file trees.

The loader only needs the small contract in :class:`FileTree`. Two adapters are
provided: :class:`DirectoryFileTree` over a directory on disk and
:class:`MemoryFileTree` over an in-memory mapping of relative paths to bytes.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Protocol, Union

logger = logging.getLogger(__name__)


class FileTree(Protocol):
    """Read/enumerate contract of a source tree.

    Paths are relative and use ``/`` as separator; ``files()`` and ``folders()``
    list the direct children only, sorted by name.
    """

    def has_file(self, path: str) -> bool: ...

    def has_folder(self, path: str) -> bool: ...

    def file(self, path: str) -> bytes: ...

    def folder(self, path: str) -> "FileTree": ...

    def files(self) -> List[str]: ...

    def folders(self) -> List[str]: ...


def _split(path: str) -> List[str]:
    parts = [part for part in path.strip("/").split("/") if part and part != "."]
    if ".." in parts:
        raise ValueError(f"Path escapes the tree: {path}")
    return parts


class DirectoryFileTree:
    """File tree backed by a directory on disk."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"DirectoryFileTree({str(self.root)!r})"

    def _resolve(self, path: str) -> Path:
        return self.root.joinpath(*_split(path))

    def has_file(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def has_folder(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def file(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise FileNotFoundError(f"No file '{path}' in {self.root}")
        return target.read_bytes()

    def folder(self, path: str) -> "DirectoryFileTree":
        target = self._resolve(path)
        if not target.is_dir():
            raise FileNotFoundError(f"No folder '{path}' in {self.root}")
        return DirectoryFileTree(target)

    def files(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_file())

    def folders(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_dir())


class MemoryFileTree:
    """File tree held in memory as ``relative path -> bytes``."""

    def __init__(self, entries: Optional[Mapping[str, Union[bytes, str]]] = None):
        self._entries: Dict[str, bytes] = {}
        for path, content in (entries or {}).items():
            key = "/".join(_split(path))
            self._entries[key] = content.encode("utf-8") if isinstance(content, str) else bytes(content)

    def __repr__(self) -> str:
        return f"MemoryFileTree({len(self._entries)} files)"

    def has_file(self, path: str) -> bool:
        return "/".join(_split(path)) in self._entries

    def has_folder(self, path: str) -> bool:
        prefix = "/".join(_split(path))
        if not prefix:
            return True
        prefix += "/"
        return any(key.startswith(prefix) for key in self._entries)

    def file(self, path: str) -> bytes:
        key = "/".join(_split(path))
        try:
            return self._entries[key]
        except KeyError:
            raise FileNotFoundError(f"No file '{path}' in memory tree") from None

    def folder(self, path: str) -> "MemoryFileTree":
        prefix = "/".join(_split(path))
        if not prefix:
            return self
        if not self.has_folder(prefix):
            raise FileNotFoundError(f"No folder '{path}' in memory tree")
        prefix += "/"
        return MemoryFileTree(
            {key[len(prefix):]: value for key, value in self._entries.items() if key.startswith(prefix)}
        )

    def files(self) -> List[str]:
        return sorted(key for key in self._entries if "/" not in key)

    def folders(self) -> List[str]:
        return sorted({key.split("/", 1)[0] for key in self._entries if "/" in key})


EMPTY_TREE = MemoryFileTree()


def walk_files(tree: FileTree, prefix: str = "") -> Iterator[str]:
    """Yield every file path in ``tree``, depth-first, folders after files."""
    for name in tree.files():
        yield prefix + name
    for name in tree.folders():
        yield from walk_files(tree.folder(name), f"{prefix}{name}/")


def in_memory(tree: FileTree, max_workers: int = 8) -> MemoryFileTree:
    """Read every file of ``tree`` into a :class:`MemoryFileTree`.

    Files are read in parallel with a thread pool; this only touches bytes, no
    decoding happens here.

    Args:
        tree: Source tree
        max_workers: Thread pool size

    Returns:
        Detached in-memory copy of the tree

    Raises:
        OSError: If any file cannot be read
    """
    if isinstance(tree, MemoryFileTree):
        return tree

    paths = list(walk_files(tree))
    logger.debug(f"Reading {len(paths)} files into memory from {tree!r}")
    contents: Dict[str, bytes] = {}

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        future_to_path = {executor.submit(tree.file, path): path for path in paths}
        for future in as_completed(future_to_path):
            contents[future_to_path[future]] = future.result()

    return MemoryFileTree({path: contents[path] for path in paths})
