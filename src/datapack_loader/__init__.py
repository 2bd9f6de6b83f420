"""
datapack-loader: typed decoding of data packs

Decodes a pack's namespaced JSON documents into typed, immutable object graphs
through composable bidirectional codecs, and re-encodes them.
"""

__version__ = "0.1.0"
__author__ = "datapack-loader Contributors"

# Core API
from .errors import (
    CodecError,
    ConfigError,
    ContextError,
    DatapackError,
    DecodeError,
    EncodeError,
    PackLoadError,
    RegistryError,
)
from .files import DirectoryFileTree, FileTree, MemoryFileTree, in_memory
from .collection import Collection, FrozenCollection, as_collection
from .context import Deferred, FinishHandle, LoadingContext, active_load, get_context
from .content import CODECS, get_codec
from .pack import Datapack, DatapackLoader, NamespacedData, PackMeta, load_datapack

__all__ = [
    # Errors
    "CodecError",
    "ConfigError",
    "ContextError",
    "DatapackError",
    "DecodeError",
    "EncodeError",
    "PackLoadError",
    "RegistryError",

    # File trees and collections
    "DirectoryFileTree",
    "FileTree",
    "MemoryFileTree",
    "in_memory",
    "Collection",
    "FrozenCollection",
    "as_collection",

    # Loading context
    "Deferred",
    "FinishHandle",
    "LoadingContext",
    "active_load",
    "get_context",

    # Content and packs
    "CODECS",
    "get_codec",
    "Datapack",
    "DatapackLoader",
    "NamespacedData",
    "PackMeta",
    "load_datapack",
]
