"""
Utility functions for musicpak.

This module provides small helpers shared by the CLI and the playback layer:
    - Filename sanitization (using yt-dlp's sanitize_filename)
    - Package filename generation
    - Path and argument helpers

Usage:
    from musicpak.utils import (
        sanitize_filename,
        generate_package_filename,
        ensure_directory
    )
"""

from pathlib import Path

from yt_dlp.utils import sanitize_filename as yt_dlp_sanitize

from musicpak.core.config import PACKAGE_EXTENSION


def sanitize_filename(name: str, restricted: bool = False) -> str:
    """
    Sanitize a string for use as a filename.

    Args:
        name: The string to sanitize (e.g., an audio filename from a package).
        restricted: If True, use more aggressive sanitization that
                   removes all special characters. Default False.

    Returns:
        Sanitized string safe for use in filenames.

    Examples:
        sanitize_filename("Hello: World.mp3")  # "Hello： World.mp3"
        sanitize_filename("AC/DC.flac")        # "AC⧸DC.flac"
    """
    return yt_dlp_sanitize(name, restricted=restricted)


def generate_package_filename(title: str, artist: str = "") -> str:
    """
    Generate a package filename from track tags.

    Creates a filename in the format: {artist} - {title}.dmpak, or just
    {title}.dmpak when the artist is unknown. An untitled track is named
    "untitled".

    Example:
        generate_package_filename("Bohemian Rhapsody", "Queen")
        # Returns: "Queen - Bohemian Rhapsody.dmpak"
    """
    safe_title = sanitize_filename(title.strip()) or "untitled"
    safe_artist = sanitize_filename(artist.strip())
    if safe_artist:
        return f"{safe_artist} - {safe_title}{PACKAGE_EXTENSION}"
    return f"{safe_title}{PACKAGE_EXTENSION}"


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Returns:
        The same path (for chaining).

    Raises:
        OSError: If directory cannot be created (permissions, etc.)
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def parse_assignment(text: str) -> tuple[str, str]:
    """
    Split a "field=value" argument.

    The value may itself contain "=" and may be empty ("comment=" clears
    a text field).

    Raises:
        ValueError: If there is no "=" or the field name is blank.

    Example:
        parse_assignment("title=Song")  # ("title", "Song")
    """
    name, sep, value = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"Expected field=value, got {text!r}")
    return name, value
