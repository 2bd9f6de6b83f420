"""
Pack assembly: reads a pack's file tree into a :class:`Datapack`.

A load runs in two phases. First every namespace's categories are decoded
and frozen inside an active loading context. Then the pack object is built
and the context's finishers run against it, so decoders can resolve
references against the complete pack.
"""

import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

from ..collection import FrozenCollection, as_collection
from ..context import active_load
from ..errors import DecodeError, PackLoadError
from ..files import DirectoryFileTree, FileTree, in_memory
from ..settings.loading import DEFAULT_READ_WORKERS, DEFAULT_SEED
from .categories import CATEGORIES
from .model import PACK_META, Datapack, NamespacedData, PackMeta

if TYPE_CHECKING:
    from ..settings import LoaderSettings

PACK_META_FILE = "pack.mcmeta"
PACK_ICON_FILE = "pack.png"
DATA_FOLDER = "data"

_NAMESPACE_PATTERN = re.compile(r"^[a-z0-9_.-]+$")


class DatapackLoader:
    """Loads packs from a file tree or a directory.

    Explicit arguments override the values taken from ``settings``.
    """

    def __init__(
        self,
        settings: Optional["LoaderSettings"] = None,
        seed: Optional[int] = None,
        read_workers: Optional[int] = None,
        load_in_memory: Optional[bool] = None,
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        loading = settings.loading if settings is not None else None

        self.seed = seed if seed is not None else (loading.seed if loading else DEFAULT_SEED)
        self.read_workers = read_workers or (
            loading.read_workers if loading else DEFAULT_READ_WORKERS
        )
        if load_in_memory is not None:
            self.load_in_memory = load_in_memory
        else:
            self.load_in_memory = loading.in_memory if loading else True

        self.logger.debug(
            f"DatapackLoader initialized (seed={self.seed}, read_workers={self.read_workers}, "
            f"in_memory={self.load_in_memory})"
        )

    def load(self, source: Union[FileTree, str, Path]) -> Datapack:
        """Load the pack rooted at ``source``.

        Malformed documents do not abort the load; they are recorded on their
        collections (see :meth:`Datapack.failures`).

        Raises:
            PackLoadError: If ``pack.mcmeta`` is malformed or unreadable
        """
        tree = self._as_tree(source)
        self.logger.info(f"Loading datapack from {tree!r}")

        meta = self._load_meta(tree)
        icon = tree.file(PACK_ICON_FILE) if tree.has_file(PACK_ICON_FILE) else None
        root = tree.folder(DATA_FOLDER) if tree.has_folder(DATA_FOLDER) else tree

        with active_load(self.seed) as context:
            namespaces: Dict[str, NamespacedData] = {}
            for namespace in root.folders():
                if not _NAMESPACE_PATTERN.match(namespace):
                    self.logger.warning(f"Skipping folder with invalid namespace name: {namespace}")
                    continue
                namespaces[namespace] = self._load_namespace(namespace, root.folder(namespace))

            datapack = Datapack(meta, MappingProxyType(namespaces), icon)
            self.logger.debug(f"Running {context.pending} finishers")
            context.finish(datapack)

        failures = datapack.failures()
        self.logger.info(
            f"Datapack loaded: {len(namespaces)} namespaces, {len(failures)} malformed documents"
        )
        return datapack

    def _as_tree(self, source: Union[FileTree, str, Path]) -> FileTree:
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.is_dir():
                raise PackLoadError(f"Pack directory does not exist: {path}")
            return DirectoryFileTree(path)
        return source

    def _load_meta(self, tree: FileTree) -> PackMeta:
        if not tree.has_file(PACK_META_FILE):
            self.logger.debug(f"No {PACK_META_FILE}, using defaults")
            return PackMeta()
        try:
            return PACK_META.parse(tree.file(PACK_META_FILE))
        except DecodeError as e:
            raise PackLoadError(f"Malformed {PACK_META_FILE}: {e}") from e
        except OSError as e:
            raise PackLoadError(f"Cannot read {PACK_META_FILE}: {e}") from e

    def _load_namespace(self, namespace: str, tree: FileTree) -> NamespacedData:
        if self.load_in_memory:
            tree = in_memory(tree, self.read_workers)

        collections: Dict[str, FrozenCollection[Any]] = {}
        for category in CATEGORIES:
            folder = category.folder_in(tree)
            if folder is None:
                continue
            collection = as_collection(
                tree.folder(folder), category.decoder, f"{namespace}:{category.name}"
            )
            collections[category.name] = collection.freeze()
            self.logger.debug(
                f"{namespace}:{category.name}: {len(collections[category.name])} top-level documents"
            )
        return NamespacedData(**collections)


def load_datapack(
    source: Union[FileTree, str, Path], settings: Optional["LoaderSettings"] = None
) -> Datapack:
    """Load a pack with a :class:`DatapackLoader` configured from ``settings``."""
    return DatapackLoader(settings).load(source)
