"""
Settings migration system for datapack-loader.
"""

import logging
from typing import TYPE_CHECKING

from .types import ConfigVersion

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)


class SettingsMigrator:
    """Handles configuration migration between versions."""

    def __init__(self, settings: "QSettings"):
        self.settings = settings

    def ensure_version(self) -> None:
        """Ensure configuration version is set and handle migrations."""
        current_version = str(self.settings.value("app/version", ""))

        if not current_version:
            self.settings.setValue("app/version", ConfigVersion.CURRENT.value)
            self.settings.sync()
            logger.info("No configuration version found, initializing configuration")
        elif current_version != ConfigVersion.CURRENT.value:
            self._migrate_config(current_version, ConfigVersion.CURRENT.value)

    def _migrate_config(self, from_version: str, to_version: str) -> None:
        """Migrate configuration from old version to new version."""
        logger.info(f"Migrating configuration from {from_version} to {to_version}")

        if from_version == ConfigVersion.V1_0.value and to_version == ConfigVersion.V1_1.value:
            self._migrate_1_0_to_1_1()

        self.settings.setValue("app/version", to_version)
        self.settings.setValue("app/migrated_from", from_version)
        self.settings.sync()
        logger.info(f"Migration from {from_version} to {to_version} completed")

    def _migrate_1_0_to_1_1(self) -> None:
        """Migrate from version 1.0 to 1.1 - rename the reader thread setting."""
        logger.debug("Performing migration from 1.0 to 1.1")

        old_threads = self.settings.value("loading/threads", None)
        if old_threads is not None:
            self.settings.setValue("loading/read_workers", old_threads)
            self.settings.remove("loading/threads")
            logger.info(f"Migrated loading/threads -> loading/read_workers: {old_threads}")
