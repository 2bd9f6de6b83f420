"""
Configuration type definitions for datapack-loader.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from ..errors import ConfigError


class ConfigVersion(Enum):
    """Configuration version for migration support."""
    V1_0 = "1.0"
    V1_1 = "1.1"
    CURRENT = V1_1


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str]
    warnings: List[str]


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

__all__ = ["ConfigError", "ConfigVersion", "ValidationResult", "VALID_LOG_LEVELS"]
