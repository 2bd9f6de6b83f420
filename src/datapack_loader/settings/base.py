"""
Typed access helpers shared by the settings subsystems.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings


class SettingsGroup:
    """Base for a settings subsystem bound to one ``QSettings`` store."""

    def __init__(self, settings: "QSettings"):
        self.settings = settings

    def _get_str(self, key: str, default: str = "") -> str:
        """Type-safe string retrieval from settings."""
        value = self.settings.value(key, default)
        return str(value) if value is not None else default

    def _get_bool(self, key: str, default: bool = False) -> bool:
        """Type-safe boolean retrieval from settings."""
        value = self.settings.value(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes")
        return bool(value) if value is not None else default

    def _get_int(self, key: str, default: int = 0) -> int:
        """Type-safe integer retrieval; unparsable values fall back to ``default``."""
        value = self.settings.value(key, default)
        try:
            return int(str(value)) if value is not None else default
        except (ValueError, TypeError):
            return default
