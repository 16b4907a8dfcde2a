"""Test configuration and fixtures"""

import io
import tempfile
import wave
import zipfile
from pathlib import Path

import pytest
from PIL import Image

from musicpak.lyrics import LyricFormat, create_lyrics
from musicpak.media import import_audio, import_cover
from musicpak.package import Metadata, PackageModel

SAMPLE_LRC = (
    "[ar:Test Artist]\n"
    "[00:12.00]First line\n"
    "[00:05.50]Intro line\n"
    "not a timed line\n"
    "[01:02.25]Last line\n"
)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def sample_lrc():
    """LRC text with a header, an unsorted pair and an untimed line"""
    return SAMPLE_LRC


@pytest.fixture
def png_bytes():
    """A 4x3 PNG image"""
    buffer = io.BytesIO()
    Image.new("RGB", (4, 3), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def wav_bytes():
    """One second of 8 kHz mono 16-bit silence"""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(8000)
        wav.writeframes(b"\x00\x00" * 8000)
    return buffer.getvalue()


@pytest.fixture
def audio_bytes():
    """Opaque audio payload; not decodable, only carried"""
    return bytes(range(256)) * 8


@pytest.fixture
def unreadable_package(temp_dir):
    """A zip with a valid manifest whose entries use an unsupported compression method"""
    path = temp_dir / "unreadable.dmpak"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("manifest.yaml", "format: dmusicpak\nversion: 1\n")

    data = bytearray(path.read_bytes())
    # Method field of local file headers and central directory records
    for signature, offset in ((b"PK\x03\x04", 8), (b"PK\x01\x02", 10)):
        start = data.find(signature)
        while start != -1:
            data[start + offset:start + offset + 2] = (97).to_bytes(2, "little")
            start = data.find(signature, start + 4)
    path.write_bytes(bytes(data))
    return path


@pytest.fixture
def filled_model(audio_bytes, png_bytes, sample_lrc):
    """A clean-then-filled package model with all four slots set"""
    model = PackageModel()
    model.create_new()
    model.set_metadata(Metadata(title="Song", artist="Artist", duration_ms=65000))
    model.set_audio(import_audio(audio_bytes, "song.mp3"))
    model.set_cover(import_cover(png_bytes, "cover.png", 4, 3))
    model.set_lyrics(create_lyrics(sample_lrc, LyricFormat.LRC_LINE_BY_LINE))
    return model
