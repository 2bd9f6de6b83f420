"""
Core settings management for datapack-loader.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from PySide6.QtCore import QSettings

from .types import ConfigVersion, ValidationResult
from .migration import SettingsMigrator
from .validation import SettingsValidator
from .loading import LoadingSettings
from .logging import LoggingSettings

logger = logging.getLogger(__name__)

ORGANIZATION = "datapack-loader"
APPLICATION = "datapack_loader"


class LoaderSettings:
    """
    Configuration management using QSettings.

    Uses the platform's native store by default, or an INI file when
    ``file_path`` is given (handy for tests and scripted runs).
    """

    def __init__(self, profile: str = "default", file_path: Optional[Union[str, Path]] = None):
        """Initialize settings for a profile.

        Args:
            profile: Settings profile name (default: "default")
            file_path: INI file to use instead of the native store
        """
        if file_path is not None:
            self.settings = QSettings(str(file_path), QSettings.Format.IniFormat)
        else:
            self.settings = QSettings(ORGANIZATION, APPLICATION)
        self.profile = profile

        # Profile is a group: datapack-loader/datapack_loader/default/...
        self.settings.beginGroup(profile)

        self._migrator = SettingsMigrator(self.settings)
        self._validator = SettingsValidator(self)
        self._loading = LoadingSettings(self.settings)
        self._logging = LoggingSettings(self.settings)

        self._migrator.ensure_version()

        logger.debug(
            f"Settings initialized for profile '{profile}', stored at: {self.settings.fileName()}"
        )

    # === SUBSYSTEM ACCESS ===

    @property
    def loading(self) -> LoadingSettings:
        """Access pack loading settings subsystem."""
        return self._loading

    @property
    def logging(self) -> LoggingSettings:
        """Access logging settings subsystem."""
        return self._logging

    @property
    def version(self) -> str:
        """Get configuration version."""
        value = self.settings.value("app/version", ConfigVersion.CURRENT.value)
        return str(value) if value is not None else ConfigVersion.CURRENT.value

    # === VALIDATION ===

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        return self._validator.validate()

    def sync(self) -> None:
        """Write pending changes to storage."""
        self.settings.sync()

    def reset_to_defaults(self) -> None:
        """Remove every key of this profile, keeping the version marker."""
        self.settings.remove("")
        self.settings.setValue("app/version", ConfigVersion.CURRENT.value)
        self.settings.sync()
        logger.info(f"Settings reset to defaults for profile '{self.profile}'")
