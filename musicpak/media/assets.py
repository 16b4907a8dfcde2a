"""
Audio and cover assets for musicpak.

This module holds the byte-buffer assets a package carries and the pure
helpers around them:
    - Content-type inference for audio (extension table)
    - Image format inference for covers (extension table)
    - Human-readable byte sizes (B, KB, MB, GB)
    - import_audio() / import_cover(): validate raw bytes and wrap them

Neither table ever fails: an unknown extension falls back to MP3
(audio/mpeg) or JPEG. Empty buffers are rejected with EmptyInputError.

MediaAssetStore adds the file-reading side (blocking I/O plus property
probing) with at most one import in flight per asset slot.

Usage:
    audio = import_audio(data, "song.flac")
    audio.content_type   # "audio/flac"
    audio.display_size   # "3.52 MB"
"""

import threading
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path, PurePath

from musicpak.core.config import DEFAULT_AUDIO_FILENAME
from musicpak.core.exceptions import AssetReadError, EmptyInputError
from musicpak.core.logger import get_logger
from musicpak.media.probe import AudioProbe, probe_audio, probe_image

logger = get_logger(__name__)


DEFAULT_CONTENT_TYPE = "audio/mpeg"

AUDIO_CONTENT_TYPES = {
    ".mp3": "audio/mpeg",
    ".flac": "audio/flac",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
}

SIZE_UNITS = ("B", "KB", "MB", "GB")


class CoverFormat(IntEnum):
    """Image format of a cover. Member names are stored in package manifests."""

    JPEG = 0
    PNG = 1
    WEBP = 2
    BMP = 3

    @property
    def extension(self) -> str:
        return _FORMAT_EXTENSIONS[self]

    @property
    def mime_type(self) -> str:
        return f"image/{self.name.lower()}"


_FORMAT_EXTENSIONS = {
    CoverFormat.JPEG: ".jpg",
    CoverFormat.PNG: ".png",
    CoverFormat.WEBP: ".webp",
    CoverFormat.BMP: ".bmp",
}

IMAGE_FORMATS = {
    ".jpg": CoverFormat.JPEG,
    ".jpeg": CoverFormat.JPEG,
    ".png": CoverFormat.PNG,
    ".webp": CoverFormat.WEBP,
    ".bmp": CoverFormat.BMP,
}


def _extension(filename: str | None) -> str:
    if not filename:
        return ""
    return PurePath(filename).suffix.lower()


def infer_content_type(filename: str | None) -> str:
    """
    Get the MIME content type for an audio filename.

    Examples:
        infer_content_type("song.FLAC")   # "audio/flac"
        infer_content_type("song.xyz")    # "audio/mpeg"
        infer_content_type("")            # "audio/mpeg"
    """
    return AUDIO_CONTENT_TYPES.get(_extension(filename), DEFAULT_CONTENT_TYPE)


def infer_image_format(filename: str | None) -> CoverFormat:
    """Get the cover format for an image filename, JPEG if unrecognized."""
    return IMAGE_FORMATS.get(_extension(filename), CoverFormat.JPEG)


def scale_byte_size(size_bytes: int) -> tuple[float, str]:
    """
    Scale a byte count onto the B/KB/MB/GB ladder.

    Divides by 1024 while the value is >= 1024 and a larger unit remains.
    The ladder stops at GB, so sizes of a terabyte and more stay in GB.

    Returns:
        (value, unit) tuple. Negative sizes are treated as 0.
    """
    size = float(max(0, size_bytes))
    order = 0
    while size >= 1024 and order < len(SIZE_UNITS) - 1:
        order += 1
        size /= 1024
    return size, SIZE_UNITS[order]


def format_byte_size(size_bytes: int) -> str:
    """
    Format a byte count as a human-readable string.

    At most two fraction digits are shown and trailing zeros are dropped.

    Examples:
        format_byte_size(512)        # "512 B"
        format_byte_size(1024)       # "1 KB"
        format_byte_size(1536)       # "1.5 KB"
        format_byte_size(3_690_000)  # "3.52 MB"
    """
    size, unit = scale_byte_size(size_bytes)
    number = f"{size:.2f}".rstrip("0").rstrip(".")
    return f"{number} {unit}"


@dataclass(frozen=True)
class AudioAsset:
    """
    The audio stream of a package.

    Attributes:
        data: Encoded audio bytes, never empty.
        filename: Source filename, never empty. Used for content-type
                  inference and display.
    """

    data: bytes
    filename: str

    @property
    def content_type(self) -> str:
        return infer_content_type(self.filename)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def display_size(self) -> str:
        return format_byte_size(len(self.data))


@dataclass(frozen=True)
class CoverAsset:
    """
    The cover image of a package.

    Width and height describe the buffer's content and travel with it:
    a CoverAsset is replaced or cleared as a whole, never field by field.

    Attributes:
        data: Encoded image bytes, never empty.
        format: Declared image format.
        width: Pixel width, 0 if unknown.
        height: Pixel height, 0 if unknown.
    """

    data: bytes
    format: CoverFormat = CoverFormat.JPEG
    width: int = 0
    height: int = 0

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def info_text(self) -> str:
        """Display text such as "600×600 • 85.3 KB"."""
        return f"{self.width}×{self.height} • {format_byte_size(len(self.data))}"


def import_audio(
    data: bytes | None,
    filename: str | None,
    default_filename: str = DEFAULT_AUDIO_FILENAME
) -> AudioAsset:
    """
    Wrap raw audio bytes into an AudioAsset.

    Args:
        data: Audio bytes as supplied by a file picker or drop target.
        filename: Source filename. Blank names get `default_filename`.
        default_filename: Fallback name keeping the non-empty-filename rule.

    Raises:
        EmptyInputError: If data is None or empty.
    """
    if not data:
        raise EmptyInputError(
            "Audio data is empty",
            details={"slot": "audio", "filename": filename}
        )

    name = PurePath(filename.strip()).name if filename and filename.strip() else ""
    asset = AudioAsset(data=bytes(data), filename=name or default_filename)
    logger.debug(f"Imported audio {asset.filename} ({asset.display_size})")
    return asset


def import_cover(
    data: bytes | None,
    filename: str | None,
    width: int = 0,
    height: int = 0
) -> CoverAsset:
    """
    Wrap raw image bytes into a CoverAsset.

    The format comes from the filename extension (JPEG if unrecognized);
    dimensions are hints from an image probe, clamped to >= 0.

    Raises:
        EmptyInputError: If data is None or empty.
    """
    if not data:
        raise EmptyInputError(
            "Cover data is empty",
            details={"slot": "cover", "filename": filename}
        )

    asset = CoverAsset(
        data=bytes(data),
        format=infer_image_format(filename),
        width=max(0, int(width or 0)),
        height=max(0, int(height or 0)),
    )
    logger.debug(f"Imported cover {asset.width}×{asset.height}, {asset.format.name}")
    return asset


@dataclass(frozen=True)
class AudioImport:
    """Result of importing an audio file: the asset plus probed properties."""

    asset: AudioAsset
    probe: AudioProbe


class MediaAssetStore:
    """
    File-based imports for the audio, cover and lyrics slots.

    Reading a file is the only blocking step of an edit. Each slot has its
    own lock: a second import into the same slot waits until the first has
    finished, while imports into different slots may overlap.

    Example:
        store = MediaAssetStore()
        result = store.read_audio_file(Path("song.mp3"))
        model.set_audio(result.asset)
        model.apply_probe(result.probe)
    """

    SLOTS = ("audio", "cover", "lyrics")

    def __init__(self, default_audio_filename: str = DEFAULT_AUDIO_FILENAME) -> None:
        self.default_audio_filename = default_audio_filename
        self._slot_locks = {slot: threading.Lock() for slot in self.SLOTS}

    def slot_busy(self, slot: str) -> bool:
        """True while an import into `slot` is in flight."""
        return self._slot_locks[slot].locked()

    def read_audio_file(self, path: Path) -> AudioImport:
        """
        Read an audio file and probe its tags.

        Raises:
            AssetReadError: If the file cannot be read.
            EmptyInputError: If the file is empty.
        """
        with self._slot_locks["audio"]:
            data = self._read_bytes(path, "audio")
            asset = import_audio(data, path.name, self.default_audio_filename)
            return AudioImport(asset=asset, probe=probe_audio(path))

    def read_cover_file(self, path: Path) -> CoverAsset:
        """
        Read an image file and probe its pixel size.

        Raises:
            AssetReadError: If the file cannot be read.
            EmptyInputError: If the file is empty.
        """
        with self._slot_locks["cover"]:
            data = self._read_bytes(path, "cover")
            width, height = probe_image(data)
            return import_cover(data, path.name, width, height)

    def read_lyrics_file(self, path: Path) -> str:
        """
        Read a lyrics file as text.

        UTF-8 with an optional BOM is expected; undecodable bytes are replaced
        rather than failing the whole import.

        Raises:
            AssetReadError: If the file cannot be read.
            EmptyInputError: If the file is empty.
        """
        with self._slot_locks["lyrics"]:
            data = self._read_bytes(path, "lyrics")
            return data.decode("utf-8-sig", errors="replace")

    @staticmethod
    def _read_bytes(path: Path, slot: str) -> bytes:
        try:
            data = path.read_bytes()
        except OSError as e:
            raise AssetReadError(
                f"Failed to read {slot} file: {e}",
                details={"slot": slot, "path": str(path), "original_error": str(e)}
            ) from e

        if not data:
            raise EmptyInputError(
                f"{slot.capitalize()} file is empty: {path.name}",
                details={"slot": slot, "path": str(path)}
            )

        logger.debug(f"Read {len(data)} bytes from {path}")
        return data
