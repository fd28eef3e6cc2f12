"""Configuration module for directory_link."""

from .loader import load_config, validate_config
from .models import (
    DirectoryConfig,
    SecurityConfig,
    LoggingConfig,
    Config,
)

__all__ = [
    "load_config",
    "validate_config",
    "DirectoryConfig",
    "SecurityConfig",
    "LoggingConfig",
    "Config",
]
