"""Test media assets, format tables and probes"""

import threading

import pytest
from PIL import Image

from musicpak.core.exceptions import AssetReadError, EmptyInputError
from musicpak.media import (
    CoverFormat,
    MediaAssetStore,
    format_byte_size,
    import_audio,
    import_cover,
    infer_content_type,
    infer_image_format,
    probe_audio,
    probe_image,
    scale_byte_size,
)


class TestFormatTables:
    """Test extension lookups"""

    @pytest.mark.parametrize("filename, expected", [
        ("song.mp3", "audio/mpeg"),
        ("song.FLAC", "audio/flac"),
        ("song.wav", "audio/wav"),
        ("song.ogg", "audio/ogg"),
        ("song.m4a", "audio/mp4"),
        ("song.aac", "audio/aac"),
        ("song.xyz", "audio/mpeg"),
        ("noext", "audio/mpeg"),
        ("", "audio/mpeg"),
        (None, "audio/mpeg"),
    ])
    def test_infer_content_type(self, filename, expected):
        assert infer_content_type(filename) == expected

    @pytest.mark.parametrize("filename, expected", [
        ("a.jpg", CoverFormat.JPEG),
        ("a.JPEG", CoverFormat.JPEG),
        ("a.png", CoverFormat.PNG),
        ("a.webp", CoverFormat.WEBP),
        ("a.bmp", CoverFormat.BMP),
        ("a.gif", CoverFormat.JPEG),
        ("", CoverFormat.JPEG),
    ])
    def test_infer_image_format(self, filename, expected):
        assert infer_image_format(filename) == expected

    def test_cover_format_properties(self):
        assert CoverFormat.PNG.extension == ".png"
        assert CoverFormat.JPEG.mime_type == "image/jpeg"


class TestByteSize:
    """Test human-readable sizes"""

    def test_examples(self):
        assert format_byte_size(0) == "0 B"
        assert format_byte_size(512) == "512 B"
        assert format_byte_size(1024) == "1 KB"
        assert format_byte_size(1536) == "1.5 KB"
        assert format_byte_size(3_690_000) == "3.52 MB"
        assert format_byte_size(1024 ** 3) == "1 GB"

    def test_never_beyond_gb(self):
        size, unit = scale_byte_size(5 * 1024 ** 4)
        assert unit == "GB"
        assert size == 5 * 1024

    def test_numeric_part_below_1024(self):
        for n in (1023, 1024, 1_000_000, 1024 ** 2 - 1, 1024 ** 3 + 7, 1024 ** 4 - 1):
            size, unit = scale_byte_size(n)
            assert 0 <= size < 1024
            assert unit in ("B", "KB", "MB", "GB")

    def test_negative_is_zero(self):
        assert format_byte_size(-10) == "0 B"


class TestImports:
    """Test building assets from raw bytes"""

    def test_import_audio(self, audio_bytes):
        asset = import_audio(audio_bytes, "dir/song.flac")
        assert asset.filename == "song.flac"
        assert asset.content_type == "audio/flac"
        assert asset.size == len(audio_bytes)
        assert asset.display_size == "2 KB"

    def test_import_audio_default_filename(self, audio_bytes):
        assert import_audio(audio_bytes, "").filename == "audio.mp3"
        assert import_audio(audio_bytes, None, "track.ogg").filename == "track.ogg"

    def test_import_audio_empty(self):
        with pytest.raises(EmptyInputError):
            import_audio(b"", "song.mp3")
        with pytest.raises(EmptyInputError):
            import_audio(None, "song.mp3")

    def test_import_cover(self, png_bytes):
        cover = import_cover(png_bytes, "art.png", 4, 3)
        assert cover.format == CoverFormat.PNG
        assert (cover.width, cover.height) == (4, 3)
        assert cover.info_text.startswith("4×3 • ")

    def test_import_cover_clamps_dimensions(self, png_bytes):
        cover = import_cover(png_bytes, "art.jpg", -1, None)
        assert (cover.width, cover.height) == (0, 0)

    def test_import_cover_empty(self):
        with pytest.raises(EmptyInputError) as exc_info:
            import_cover(b"", "art.png")
        assert exc_info.value.details["slot"] == "cover"


class TestProbes:
    """Test mutagen and Pillow probes"""

    def test_probe_image(self, png_bytes):
        assert probe_image(png_bytes) == (4, 3)

    def test_probe_image_garbage(self):
        assert probe_image(b"not an image") == (0, 0)

    def test_probe_image_decompression_bomb(self, png_bytes, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 5)
        assert probe_image(png_bytes) == (0, 0)

    def test_probe_audio_wav(self, wav_bytes):
        probe = probe_audio(wav_bytes)
        assert probe.sample_rate_hz == 8000
        assert probe.channels == 1
        assert probe.duration_ms == 1000
        assert probe.title == ""

    def test_probe_audio_garbage(self, audio_bytes):
        probe = probe_audio(audio_bytes)
        assert probe.duration_ms == 0
        assert probe.title == ""

    def test_probe_audio_missing_file(self, temp_dir):
        assert probe_audio(temp_dir / "missing.mp3").channels == 0


class TestMediaAssetStore:
    """Test file imports"""

    def test_read_audio_file(self, temp_dir, wav_bytes):
        path = temp_dir / "tone.wav"
        path.write_bytes(wav_bytes)

        result = MediaAssetStore().read_audio_file(path)
        assert result.asset.data == wav_bytes
        assert result.asset.filename == "tone.wav"
        assert result.asset.content_type == "audio/wav"
        assert result.probe.sample_rate_hz == 8000

    def test_read_cover_file(self, temp_dir, png_bytes):
        path = temp_dir / "cover.png"
        path.write_bytes(png_bytes)

        cover = MediaAssetStore().read_cover_file(path)
        assert cover.format == CoverFormat.PNG
        assert (cover.width, cover.height) == (4, 3)

    def test_read_lyrics_file_strips_bom(self, temp_dir):
        path = temp_dir / "song.lrc"
        path.write_bytes(b"\xef\xbb\xbf[00:01.00]hi")
        assert MediaAssetStore().read_lyrics_file(path) == "[00:01.00]hi"

    def test_missing_file(self, temp_dir):
        with pytest.raises(AssetReadError) as exc_info:
            MediaAssetStore().read_audio_file(temp_dir / "missing.mp3")
        assert exc_info.value.details["slot"] == "audio"

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.png"
        path.touch()
        with pytest.raises(EmptyInputError):
            MediaAssetStore().read_cover_file(path)

    def test_slot_lock_is_released(self, temp_dir, png_bytes):
        store = MediaAssetStore()
        path = temp_dir / "cover.png"
        path.write_bytes(png_bytes)
        store.read_cover_file(path)
        assert not store.slot_busy("cover")

    def test_same_slot_imports_are_serialized(self, temp_dir, png_bytes):
        store = MediaAssetStore()
        path = temp_dir / "cover.png"
        path.write_bytes(png_bytes)

        results = []
        store._slot_locks["cover"].acquire()
        worker = threading.Thread(target=lambda: results.append(store.read_cover_file(path)))
        worker.start()
        worker.join(timeout=0.2)
        assert results == []

        store._slot_locks["cover"].release()
        worker.join(timeout=5)
        assert len(results) == 1
