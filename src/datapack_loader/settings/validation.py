"""
Settings validation system for datapack-loader.
"""

import logging
from typing import TYPE_CHECKING, List

from .types import VALID_LOG_LEVELS, ValidationResult

if TYPE_CHECKING:
    from .core import LoaderSettings

logger = logging.getLogger(__name__)


class SettingsValidator:
    """Validates configuration settings."""

    def __init__(self, settings: "LoaderSettings"):
        self.settings = settings

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        errors: List[str] = []
        warnings: List[str] = []

        workers = self.settings.loading.read_workers
        if workers < 1:
            errors.append(f"loading/read_workers must be positive, got {workers}")
        elif workers > 64:
            warnings.append(f"loading/read_workers is unusually high: {workers}")

        level = self.settings.logging.console_log_level
        if level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"Unknown console log level: {level}")

        if self.settings.logging.file_logging:
            log_dir = self.settings.logging.log_file_absolute_path.parent
            if log_dir.exists() and not log_dir.is_dir():
                errors.append(f"Log directory is not a directory: {log_dir}")

        return ValidationResult(
            is_valid=len(errors) == 0, errors=errors, warnings=warnings
        )
