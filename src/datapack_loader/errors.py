"""
Exception hierarchy for datapack-loader.

Decode and encode failures travel as values (see ``codecs.results``); the
exceptions below are what ``unwrap()`` raises and what startup misconfiguration
raises directly.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .codecs.results import Failure


class DatapackError(Exception):
    """Base class for every error raised by this package."""


class CodecError(DatapackError):
    """Raised when a decode or encode result is unwrapped as a failure."""

    def __init__(self, failure: "Failure"):
        super().__init__(failure.describe())
        self.failure = failure


class DecodeError(CodecError):
    """A node could not be decoded into a value."""


class EncodeError(CodecError):
    """A value could not be encoded into a node."""


class RegistryError(DatapackError):
    """A codec registry was misconfigured at startup."""


class ConfigError(DatapackError):
    """Raised when configuration is invalid or cannot be accessed."""


class ContextError(DatapackError):
    """Raised on misuse of the loading context (e.g. finisher outside a load)."""


class PackLoadError(DatapackError):
    """A required top-level artifact of the pack is malformed or unreadable."""
