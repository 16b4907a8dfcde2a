"""
Best-effort property probes for imported media.

These adapters stand in for the platform's music/image property readers:
    - probe_audio(): tags and stream info via mutagen
    - probe_image(): pixel dimensions via Pillow

Probing is advisory. Every field may come back empty, and no probe ever
raises: unreadable or unsupported files are logged at WARNING and produce
empty results so an import can still go ahead.

Tag Mapping (mutagen easy tags):
    title   -> title
    artist  -> artist
    album   -> album
    genre   -> genre
    date    -> year (leading four-digit year if present)
    info.length      -> duration_ms
    info.bitrate     -> bitrate_kbps (bps / 1000)
    info.sample_rate -> sample_rate_hz
    info.channels    -> channels
"""

import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

import mutagen
from PIL import Image

from musicpak.core.logger import get_logger

logger = get_logger(__name__)


YEAR_PATTERN = re.compile(r"^(\d{4})")


@dataclass(frozen=True)
class AudioProbe:
    """
    Properties read from an audio file. Empty string / 0 means "not found".
    """

    title: str = ""
    artist: str = ""
    album: str = ""
    genre: str = ""
    year: str = ""
    duration_ms: int = 0
    bitrate_kbps: int = 0
    sample_rate_hz: int = 0
    channels: int = 0


def _first_tag(tags, key: str) -> str:
    if not tags:
        return ""
    values = tags.get(key)
    if not values:
        return ""
    return str(values[0]).strip()


def _normalize_year(date: str) -> str:
    match = YEAR_PATTERN.match(date)
    return match.group(1) if match else date


def probe_audio(source: Path | bytes) -> AudioProbe:
    """
    Read tags and stream properties from an audio file or buffer.

    Args:
        source: Path to the file, or the encoded audio bytes.

    Returns:
        AudioProbe with whatever could be read; an empty AudioProbe when
        the format is unsupported or the file is unreadable.
    """
    try:
        if isinstance(source, (bytes, bytearray)):
            audio = mutagen.File(BytesIO(source), easy=True)
        else:
            audio = mutagen.File(str(source), easy=True)
    except (mutagen.MutagenError, OSError, ValueError) as e:
        logger.warning(f"Could not read audio properties: {e}")
        return AudioProbe()

    if audio is None:
        logger.warning("Could not read audio properties: unsupported format")
        return AudioProbe()

    info = audio.info
    length = getattr(info, "length", 0) or 0
    bitrate = getattr(info, "bitrate", 0) or 0

    probe = AudioProbe(
        title=_first_tag(audio.tags, "title"),
        artist=_first_tag(audio.tags, "artist"),
        album=_first_tag(audio.tags, "album"),
        genre=_first_tag(audio.tags, "genre"),
        year=_normalize_year(_first_tag(audio.tags, "date")),
        duration_ms=max(0, int(length * 1000)),
        bitrate_kbps=max(0, int(bitrate) // 1000),
        sample_rate_hz=max(0, int(getattr(info, "sample_rate", 0) or 0)),
        channels=max(0, int(getattr(info, "channels", 0) or 0)),
    )
    logger.debug(f"Probed audio: {probe.title or '?'} - {probe.artist or '?'}")
    return probe


def probe_image(data: bytes) -> tuple[int, int]:
    """
    Read the pixel size of an encoded image.

    Returns:
        (width, height), or (0, 0) if the image cannot be identified.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        # PIL.UnidentifiedImageError is an OSError
        logger.warning(f"Could not read image size: {e}")
        return 0, 0
    return int(width), int(height)
