"""
Settings package for datapack-loader.

Configuration is stored with Qt's QSettings, either in the platform's native
store or in an INI file.

Usage:
    from datapack_loader.settings import LoaderSettings

    settings = LoaderSettings(file_path="loader.ini")
    result = settings.validate()
"""

from .core import LoaderSettings
from .types import ConfigError, ConfigVersion, ValidationResult
from .loading import LoadingSettings
from .logging import LoggingSettings

__all__ = [
    "LoaderSettings",
    "ConfigError",
    "ConfigVersion",
    "ValidationResult",
    "LoadingSettings",
    "LoggingSettings",
]
