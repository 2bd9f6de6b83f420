"""
Pack loading settings for datapack-loader.
"""

import logging

from .base import SettingsGroup

logger = logging.getLogger(__name__)

DEFAULT_SEED = 0
DEFAULT_READ_WORKERS = 8


class LoadingSettings(SettingsGroup):
    """Manages how packs are read and decoded."""

    @property
    def seed(self) -> int:
        """Seed of the random stream handed to decoders during a load."""
        return self._get_int("loading/seed", DEFAULT_SEED)

    @seed.setter
    def seed(self, value: int) -> None:
        self.settings.setValue("loading/seed", int(value))
        self.settings.sync()

    @property
    def read_workers(self) -> int:
        """Threads used to read a pack's files into memory."""
        return self._get_int("loading/read_workers", DEFAULT_READ_WORKERS)

    @read_workers.setter
    def read_workers(self, value: int) -> None:
        if value > 0:
            self.settings.setValue("loading/read_workers", value)
            self.settings.sync()
        else:
            logger.warning(
                f"Invalid read worker count: {value}, keeping current: {self.read_workers}"
            )

    @property
    def in_memory(self) -> bool:
        """Read every namespace into memory before decoding."""
        return self._get_bool("loading/in_memory", True)

    @in_memory.setter
    def in_memory(self, value: bool) -> None:
        self.settings.setValue("loading/in_memory", value)
        self.settings.sync()
