"""
musicpak: Build and edit DMusicPak music packages.

A package bundles one audio track with its metadata, an optional cover image
and optional lyrics. This library provides the editing model behind the
DMusicPak Creator: dirty tracking, file imports with tag probing, synced
lyrics parsing, and current-line tracking during playback.

Architecture:
    core/       - Configuration, logging, exceptions
    lyrics/     - LRC parsing and the current-line cursor
    media/      - Audio/cover assets, format tables, mutagen/Pillow probes
    package/    - Metadata, zip container, PackageModel, EditorSession
    playback/   - Playback clocks, lyrics poller, preview buffers
    utils/      - Filename and argument helpers
    cli.py      - Command-line interface

Usage:
    Command Line:
        musicpak new song.dmpak --audio song.mp3 --lyrics song.lrc
        musicpak info song.dmpak
        musicpak preview song.dmpak

    Python API:
        from musicpak import PackageModel, import_audio

        model = PackageModel()
        model.create_new()
        model.set_audio(import_audio(data, "song.mp3"))
        model.set_field("title", "Song")
        model.save(Path("song.dmpak"))

Configuration:
    Optional config.yaml in the current directory:

        editor:
          default_audio_filename: "audio.mp3"
        playback:
          poll_interval_ms: 100
        logging:
          directory: null
          level: "INFO"
"""

__version__ = "1.0.0"

from musicpak.core import (
    Config,
    EmptyInputError,
    LoadError,
    MusicPakError,
    NoPackageOpenError,
    SaveError,
    load_config,
    setup_logging,
)
from musicpak.lyrics import (
    LyricFormat,
    LyricLine,
    LyricsAsset,
    LyricsCursor,
    create_lyrics,
    find_current_index,
    parse_lyrics,
)
from musicpak.media import (
    AudioAsset,
    CoverAsset,
    CoverFormat,
    MediaAssetStore,
    format_byte_size,
    import_audio,
    import_cover,
)
from musicpak.package import (
    EditorSession,
    Metadata,
    PackageModel,
    PackageState,
    PakContainer,
)

__all__ = [
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "MusicPakError",
    "EmptyInputError",
    "NoPackageOpenError",
    "LoadError",
    "SaveError",
    # Lyrics
    "LyricFormat",
    "LyricLine",
    "LyricsAsset",
    "LyricsCursor",
    "parse_lyrics",
    "create_lyrics",
    "find_current_index",
    # Media
    "AudioAsset",
    "CoverAsset",
    "CoverFormat",
    "MediaAssetStore",
    "format_byte_size",
    "import_audio",
    "import_cover",
    # Package
    "Metadata",
    "PakContainer",
    "PackageModel",
    "PackageState",
    "EditorSession",
]
