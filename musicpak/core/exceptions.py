"""
Exception classes for musicpak.

This module defines all custom exceptions used throughout the application.
Each exception is designed to provide clear, actionable error messages
and to distinguish between different failure modes.

Exception Hierarchy:
    MusicPakError (base)
        ConfigError - Configuration file issues
        EmptyInputError - Null or zero-length buffer passed to an import
        AssetReadError - Source file for an import could not be read
        NoPackageOpenError - Mutation or save attempted with no package open
        LoadError - Package container unreadable or corrupt
        SaveError - Package container could not be written

Lyrics parsing never raises: malformed lines are dropped silently.
"""


class MusicPakError(Exception):
    """
    Base exception for all musicpak errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all musicpak errors with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., paths, slots).

    Example:
        try:
            model.save(path)
        except MusicPakError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'path': File path involved in the error
                     - 'slot': Asset slot ('audio', 'cover', 'lyrics')
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(MusicPakError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml has invalid YAML syntax
        - A section is not a dictionary
        - Invalid field values (e.g., non-positive poll interval)
    """
    pass


class EmptyInputError(MusicPakError):
    """
    Raised when an import receives a None or zero-length buffer.

    The package model is left untouched when this is raised.

    Example:
        raise EmptyInputError(
            "Audio data is empty",
            details={'slot': 'audio', 'filename': 'song.mp3'}
        )
    """
    pass


class AssetReadError(MusicPakError):
    """
    Raised when the source file of an import cannot be read.

    Wraps the underlying OSError so the editor session can turn it into a
    status message without leaking platform exceptions.
    """
    pass


class NoPackageOpenError(MusicPakError):
    """
    Raised when a mutation or a save is attempted while no package is open.

    Queries never raise this: getters on an empty model return benign
    defaults instead.
    """
    pass


class LoadError(MusicPakError):
    """
    Raised when a package container cannot be opened or parsed.

    Loading is all-or-nothing: when this is raised the model keeps
    whatever package it had before the attempt.

    Common causes:
        - File does not exist or permission denied
        - File is not a zip archive
        - manifest.yaml missing, invalid YAML, or unsupported version
        - A payload entry referenced by the manifest is missing
    """
    pass


class SaveError(MusicPakError):
    """
    Raised when a package container cannot be written.

    A failed save leaves the model in its prior state (still dirty) and
    never leaves a half-written file at the destination path.

    Common causes:
        - Destination directory does not exist
        - Permission denied
        - Disk full
    """
    pass
