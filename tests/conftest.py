"""Shared fixtures for datapack-loader tests."""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Mapping, Union

import orjson
import pytest

from datapack_loader.files import MemoryFileTree

PackFiles = Mapping[str, Union[bytes, str, Dict[str, Any], list]]


def _encode(content: Any) -> bytes:
    if isinstance(content, bytes):
        return content
    if isinstance(content, str):
        return content.encode("utf-8")
    return orjson.dumps(content)


@pytest.fixture
def memory_pack() -> Callable[[PackFiles], MemoryFileTree]:
    """Build an in-memory pack; dict and list contents are written as JSON."""

    def build(files: PackFiles) -> MemoryFileTree:
        return MemoryFileTree({path: _encode(content) for path, content in files.items()})

    return build


@pytest.fixture
def write_pack(tmp_path: Path) -> Callable[[PackFiles], Path]:
    """Write a pack below ``tmp_path/pack``; dict and list contents are written as JSON."""

    def write(files: PackFiles) -> Path:
        root = tmp_path / "pack"
        root.mkdir(exist_ok=True)
        for relative, content in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(_encode(content))
        return root

    return write


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo the root logger changes made by ``setup_logging``."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
