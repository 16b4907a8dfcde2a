"""
Configuration management for musicpak.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

musicpak runs fine without any
configuration: a missing config.yaml yields the defaults below. A file that
exists but is malformed is still a hard error.

Example config.yaml:
    editor:
      default_audio_filename: "audio.mp3"
      window_title: "DMusicPak Creator"

    playback:
      poll_interval_ms: 100
      temp_directory: null   # null = system temp directory

    logging:
      directory: "~/.musicpak/logs"   # null = console only
      level: "INFO"
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from musicpak.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_AUDIO_FILENAME = "audio.mp3"
DEFAULT_WINDOW_TITLE = "DMusicPak Creator"
DEFAULT_POLL_INTERVAL_MS = 100

# File extension of saved packages
PACKAGE_EXTENSION = ".dmpak"


@dataclass(frozen=True)
class EditorConfig:
    """
    Editor behavior configuration.

    Attributes:
        default_audio_filename: Filename given to imported audio that arrives
                                without one. Also used when a loaded package
                                stores audio with no source filename.
        window_title: Base of the window title shown by the editor session.
    """
    default_audio_filename: str = DEFAULT_AUDIO_FILENAME
    window_title: str = DEFAULT_WINDOW_TITLE


@dataclass(frozen=True)
class PlaybackConfig:
    """
    Playback preview configuration.

    Attributes:
        poll_interval_ms: Cadence at which the playback position is polled
                          to update the current lyric line.
        temp_directory: Directory for preview buffers handed to an external
                        player. None means the system temp directory.
    """
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    temp_directory: Path | None = None


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging configuration.

    Attributes:
        directory: Where log files are written. None disables file logging.
        level: Console log level name.
    """
    directory: Path | None = None
    level: str = "INFO"


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable (frozen dataclass).

    Example:
        config = load_config()
        print(f"Polling every {config.playback.poll_interval_ms} ms")
    """
    editor: EditorConfig = field(default_factory=EditorConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.
                If no explicit path was given and the default file does not
                exist, the all-defaults Config is returned.

    Raises:
        ConfigError: If an explicit config file is not found, the file has
                     invalid YAML syntax, or contains invalid values.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        return Config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    # An empty file is a valid "all defaults" configuration
    if raw_config is None:
        return Config()

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return parse_config(raw_config)


def parse_config(raw_config: dict[str, Any]) -> Config:
    """
    Build a Config from an already-parsed dictionary.

    Raises:
        ConfigError: If a section is not a dictionary or a value is invalid.
    """
    for section in ("editor", "playback", "logging"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )

    return Config(
        editor=_parse_editor_config(raw_config.get("editor")),
        playback=_parse_playback_config(raw_config.get("playback")),
        logging=_parse_logging_config(raw_config.get("logging")),
    )


def _parse_editor_config(editor_section: dict[str, Any] | None) -> EditorConfig:
    if not editor_section:
        return EditorConfig()

    default_name = editor_section.get("default_audio_filename", DEFAULT_AUDIO_FILENAME)
    if not isinstance(default_name, str) or not default_name.strip():
        raise ConfigError(
            "'editor.default_audio_filename' must be a non-empty string",
            details={"field": "editor.default_audio_filename"}
        )

    title = editor_section.get("window_title", DEFAULT_WINDOW_TITLE)
    if not isinstance(title, str) or not title.strip():
        raise ConfigError(
            "'editor.window_title' must be a non-empty string",
            details={"field": "editor.window_title"}
        )

    return EditorConfig(
        default_audio_filename=default_name.strip(),
        window_title=title.strip()
    )


def _parse_playback_config(playback_section: dict[str, Any] | None) -> PlaybackConfig:
    """
    Parse and validate the playback configuration section.

    Raises:
        ConfigError: If poll_interval_ms is not a positive integer, or
                     temp_directory is not a string path or null.
    """
    if not playback_section:
        return PlaybackConfig()

    interval = playback_section.get("poll_interval_ms", DEFAULT_POLL_INTERVAL_MS)
    # bool is an int subclass; reject it explicitly
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
        raise ConfigError(
            "'playback.poll_interval_ms' must be a positive integer",
            details={"field": "playback.poll_interval_ms", "value": interval}
        )

    temp_directory = None
    raw_temp = playback_section.get("temp_directory")
    if raw_temp is not None:
        if not isinstance(raw_temp, str) or not raw_temp.strip():
            raise ConfigError(
                "'playback.temp_directory' must be a string path or null",
                details={"field": "playback.temp_directory"}
            )
        temp_directory = Path(raw_temp.strip()).expanduser().resolve()

    return PlaybackConfig(poll_interval_ms=interval, temp_directory=temp_directory)


def _parse_logging_config(logging_section: dict[str, Any] | None) -> LoggingConfig:
    if not logging_section:
        return LoggingConfig()

    directory = None
    raw_dir = logging_section.get("directory")
    if raw_dir is not None:
        if not isinstance(raw_dir, str) or not raw_dir.strip():
            raise ConfigError(
                "'logging.directory' must be a string path or null",
                details={"field": "logging.directory"}
            )
        directory = Path(raw_dir.strip()).expanduser().resolve()

    level = logging_section.get("level", "INFO")
    if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
        raise ConfigError(
            f"'logging.level' must be a logging level name, got {level!r}",
            details={"field": "logging.level", "value": level}
        )

    return LoggingConfig(directory=directory, level=level.upper())
