"""
Core module for musicpak.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with console and file outputs

Usage:
    from musicpak.core import (
        Config, load_config,
        setup_logging, get_logger,
        MusicPakError, LoadError, SaveError
    )
"""

from musicpak.core.config import (
    Config,
    EditorConfig,
    LoggingConfig,
    PlaybackConfig,
    load_config,
)
from musicpak.core.exceptions import (
    AssetReadError,
    ConfigError,
    EmptyInputError,
    LoadError,
    MusicPakError,
    NoPackageOpenError,
    SaveError,
)
from musicpak.core.logger import (
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "EditorConfig",
    "PlaybackConfig",
    "LoggingConfig",
    "load_config",
    # Exceptions
    "MusicPakError",
    "ConfigError",
    "EmptyInputError",
    "AssetReadError",
    "NoPackageOpenError",
    "LoadError",
    "SaveError",
    # Logger
    "setup_logging",
    "get_logger",
    "shutdown_logging",
]
