"""
On-disk package container for musicpak.

The package model never touches bytes on disk itself; it goes through the
Container protocol below. PakContainer is the bundled implementation: a zip
archive with a YAML manifest and one raw entry per asset.

Archive Layout (.dmpak):
    manifest.yaml          Format marker, version, metadata, slot descriptors
    audio/<filename>       Audio bytes exactly as imported (stored, not deflated)
    cover<.ext>            Cover bytes exactly as imported (stored)
    lyrics.txt             Lyrics text, UTF-8

Example manifest.yaml:
    format: dmusicpak
    version: 1
    metadata:
      title: "Song"
      artist: "Artist"
      duration_ms: 215000
      ...
    audio:
      entry: "audio/song.mp3"
      filename: "song.mp3"
    cover:
      entry: "cover.png"
      format: PNG
      width: 600
      height: 600
    lyrics:
      entry: "lyrics.txt"
      format: LRC_LINE_BY_LINE

Absent slots are simply missing from the manifest. Asset bytes are copied
verbatim, so opening and re-saving a package reproduces every asset
byte-for-byte.

Usage:
    container = PakContainer.open(path)      # raises LoadError
    audio = container.get_audio()            # AudioAsset | None
    container.set_cover(None)
    container.save(path)                     # raises SaveError
"""

import os
import tempfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Any, Protocol

import yaml

from musicpak.core.config import DEFAULT_AUDIO_FILENAME
from musicpak.core.exceptions import LoadError, SaveError
from musicpak.core.logger import get_logger
from musicpak.lyrics.models import LyricFormat, LyricsAsset
from musicpak.media.assets import AudioAsset, CoverAsset, CoverFormat
from musicpak.package.metadata import Metadata

logger = get_logger(__name__)


CONTAINER_FORMAT = "dmusicpak"
CONTAINER_VERSION = 1

MANIFEST_ENTRY = "manifest.yaml"
LYRICS_ENTRY = "lyrics.txt"


class Container(Protocol):
    """
    A package container: four optional slots plus save.

    Getters return None for an absent slot. Setters accept None to clear.
    """

    def get_metadata(self) -> Metadata | None: ...

    def get_audio(self) -> AudioAsset | None: ...

    def get_cover(self) -> CoverAsset | None: ...

    def get_lyrics(self) -> LyricsAsset | None: ...

    def set_metadata(self, metadata: Metadata | None) -> None: ...

    def set_audio(self, audio: AudioAsset | None) -> None: ...

    def set_cover(self, cover: CoverAsset | None) -> None: ...

    def set_lyrics(self, lyrics: LyricsAsset | None) -> None: ...

    def save(self, path: Path) -> None: ...


class ContainerFactory(Protocol):
    """Creates empty containers and opens existing ones."""

    def __call__(self) -> Container: ...

    def open(self, path: Path) -> Container: ...


class PakContainer:
    """
    Zip-backed package container.

    An opened container reads every entry into memory up front, so a
    container that opened successfully can no longer fail on a getter and
    the archive file is not held open.

    Attributes:
        source_path: Path the container was opened from, None for new ones.
    """

    def __init__(self) -> None:
        self.source_path: Path | None = None
        self._metadata: Metadata | None = None
        self._audio: AudioAsset | None = None
        self._cover: CoverAsset | None = None
        self._lyrics: LyricsAsset | None = None

    # =========================================================================
    # Slots
    # =========================================================================

    def get_metadata(self) -> Metadata | None:
        return self._metadata

    def get_audio(self) -> AudioAsset | None:
        return self._audio

    def get_cover(self) -> CoverAsset | None:
        return self._cover

    def get_lyrics(self) -> LyricsAsset | None:
        return self._lyrics

    def set_metadata(self, metadata: Metadata | None) -> None:
        self._metadata = metadata

    def set_audio(self, audio: AudioAsset | None) -> None:
        self._audio = audio

    def set_cover(self, cover: CoverAsset | None) -> None:
        self._cover = cover

    def set_lyrics(self, lyrics: LyricsAsset | None) -> None:
        self._lyrics = lyrics

    # =========================================================================
    # Reading
    # =========================================================================

    @classmethod
    def open(cls, path: Path) -> "PakContainer":
        """
        Open a package file.

        Raises:
            LoadError: If the file cannot be read, is not a zip archive,
                       or its manifest or entries are missing or invalid.
        """
        path = Path(path)
        try:
            with zipfile.ZipFile(path, "r") as archive:
                manifest = cls._read_manifest(archive)
                container = cls()
                container._metadata = Metadata.from_dict(manifest.get("metadata"))
                container._audio = cls._read_audio(archive, manifest.get("audio"))
                container._cover = cls._read_cover(archive, manifest.get("cover"))
                container._lyrics = cls._read_lyrics(archive, manifest.get("lyrics"))
        except LoadError as e:
            e.details.setdefault("path", str(path))
            raise
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            raise LoadError(
                f"Not a package file: {path.name}",
                details={"path": str(path), "original_error": str(e)}
            ) from e
        except OSError as e:
            raise LoadError(
                f"Failed to open package: {e}",
                details={"path": str(path), "original_error": str(e)}
            ) from e
        except (NotImplementedError, RuntimeError, ValueError) as e:
            # Unsupported compression method or encrypted entry
            raise LoadError(
                f"Unreadable package file: {path.name}: {e}",
                details={"path": str(path), "original_error": str(e)}
            ) from e

        container.source_path = path
        logger.debug(f"Opened package container {path}")
        return container

    @staticmethod
    def _read_manifest(archive: zipfile.ZipFile) -> dict[str, Any]:
        try:
            raw = archive.read(MANIFEST_ENTRY)
        except KeyError as e:
            raise LoadError("Package has no manifest") from e

        try:
            manifest = yaml.safe_load(raw.decode("utf-8"))
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise LoadError(
                f"Invalid package manifest: {e}",
                details={"original_error": str(e)}
            ) from e

        if not isinstance(manifest, dict) or manifest.get("format") != CONTAINER_FORMAT:
            raise LoadError("Invalid package manifest: not a dmusicpak manifest")

        version = manifest.get("version")
        if not isinstance(version, int) or version > CONTAINER_VERSION:
            raise LoadError(
                f"Unsupported package version: {version}",
                details={"expected": CONTAINER_VERSION, "actual": version}
            )
        return manifest

    @staticmethod
    def _read_entry(archive: zipfile.ZipFile, section: dict[str, Any], slot: str) -> bytes:
        entry = section.get("entry")
        if not isinstance(entry, str) or not entry:
            raise LoadError(f"Manifest {slot} section has no entry", details={"slot": slot})
        try:
            return archive.read(entry)
        except KeyError as e:
            raise LoadError(
                f"Package is missing its {slot} data ({entry})",
                details={"slot": slot, "entry": entry}
            ) from e

    @classmethod
    def _read_audio(cls, archive: zipfile.ZipFile, section: Any) -> AudioAsset | None:
        if not isinstance(section, dict):
            return None
        data = cls._read_entry(archive, section, "audio")
        if not data:
            return None
        filename = str(section.get("filename") or "") or DEFAULT_AUDIO_FILENAME
        return AudioAsset(data=data, filename=filename)

    @classmethod
    def _read_cover(cls, archive: zipfile.ZipFile, section: Any) -> CoverAsset | None:
        if not isinstance(section, dict):
            return None
        data = cls._read_entry(archive, section, "cover")
        if not data:
            return None
        try:
            cover_format = CoverFormat[str(section.get("format", "JPEG")).upper()]
        except KeyError as e:
            raise LoadError(f"Unknown cover format: {section.get('format')}") from e
        return CoverAsset(
            data=data,
            format=cover_format,
            width=_manifest_int(section.get("width")),
            height=_manifest_int(section.get("height")),
        )

    @classmethod
    def _read_lyrics(cls, archive: zipfile.ZipFile, section: Any) -> LyricsAsset | None:
        if not isinstance(section, dict):
            return None
        data = cls._read_entry(archive, section, "lyrics")
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise LoadError("Lyrics are not valid UTF-8", details={"original_error": str(e)}) from e
        try:
            lyric_format = LyricFormat.from_name(str(section.get("format", "NONE")))
        except ValueError as e:
            raise LoadError(str(e)) from e
        return LyricsAsset(format=lyric_format, text=text)

    # =========================================================================
    # Writing
    # =========================================================================

    def build_manifest(self) -> dict[str, Any]:
        """Describe the current slots as a manifest dictionary."""
        manifest: dict[str, Any] = {
            "format": CONTAINER_FORMAT,
            "version": CONTAINER_VERSION,
            "metadata": (self._metadata or Metadata()).to_dict(),
        }
        if self._audio is not None:
            manifest["audio"] = {
                "entry": str(PurePosixPath("audio") / _entry_name(self._audio.filename)),
                "filename": self._audio.filename,
            }
        if self._cover is not None:
            manifest["cover"] = {
                "entry": f"cover{self._cover.format.extension}",
                "format": self._cover.format.name,
                "width": self._cover.width,
                "height": self._cover.height,
            }
        if self._lyrics is not None:
            manifest["lyrics"] = {
                "entry": LYRICS_ENTRY,
                "format": self._lyrics.format.name,
            }
        return manifest

    def save(self, path: Path) -> None:
        """
        Write all slots to `path`, replacing any existing file.

        The archive is written to a temporary file next to the destination
        and moved into place, so a failed save never leaves a truncated
        package behind.

        Raises:
            SaveError: If the destination cannot be written.
        """
        path = Path(path)
        manifest = self.build_manifest()

        if not path.parent.is_dir():
            raise SaveError(
                f"Destination directory does not exist: {path.parent}",
                details={"path": str(path)}
            )

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                with zipfile.ZipFile(tmp, "w") as archive:
                    self._write_archive(archive, manifest)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise SaveError(
                f"Failed to save package: {e}",
                details={"path": str(path), "original_error": str(e)}
            ) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug(f"Saved package container {path}")

    def _write_archive(self, archive: zipfile.ZipFile, manifest: dict[str, Any]) -> None:
        archive.writestr(
            MANIFEST_ENTRY,
            yaml.safe_dump(manifest, allow_unicode=True, sort_keys=False),
            compress_type=zipfile.ZIP_DEFLATED,
        )
        # Audio and images are already compressed
        if self._audio is not None:
            archive.writestr(manifest["audio"]["entry"], self._audio.data, compress_type=zipfile.ZIP_STORED)
        if self._cover is not None:
            archive.writestr(manifest["cover"]["entry"], self._cover.data, compress_type=zipfile.ZIP_STORED)
        if self._lyrics is not None:
            archive.writestr(LYRICS_ENTRY, self._lyrics.data, compress_type=zipfile.ZIP_DEFLATED)


def _manifest_int(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        return 0
    return raw


def _entry_name(filename: str) -> str:
    # Entry names must not escape the audio/ folder
    name = PurePosixPath(filename.replace("\\", "/")).name
    if name in ("", ".", ".."):
        return DEFAULT_AUDIO_FILENAME
    return name
