"""Plain-text function files (``.mcfunction``)."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class McFunction:
    """A function file: one command per line."""

    lines: Tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> "McFunction":
        return cls(tuple(text.splitlines()))

    @property
    def commands(self) -> Tuple[str, ...]:
        """Non-blank lines that are not comments, with surrounding space removed."""
        stripped = (line.strip() for line in self.lines)
        return tuple(line for line in stripped if line and not line.startswith("#"))

    def to_text(self) -> str:
        return "\n".join(self.lines) + ("\n" if self.lines else "")
