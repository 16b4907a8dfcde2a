"""Test the command-line interface"""

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from musicpak import __version__
from musicpak.cli import cli
from musicpak.lyrics import LyricFormat
from musicpak.package import PackageModel


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def source_files(temp_dir, wav_bytes, png_bytes, sample_lrc):
    """Audio, cover and lyrics files on disk"""
    audio = temp_dir / "tone.wav"
    audio.write_bytes(wav_bytes)
    cover = temp_dir / "cover.png"
    cover.write_bytes(png_bytes)
    lyrics = temp_dir / "song.lrc"
    lyrics.write_text(sample_lrc, encoding="utf-8")
    return audio, cover, lyrics


@pytest.fixture
def package_file(runner, temp_dir, source_files):
    audio, cover, lyrics = source_files
    path = temp_dir / "song.dmpak"
    result = runner.invoke(cli, [
        "new", str(path),
        "--audio", str(audio), "--cover", str(cover), "--lyrics", str(lyrics),
        "--title", "Song", "--artist", "Band",
    ])
    assert result.exit_code == 0, result.output
    return path


def _load(path):
    model = PackageModel()
    model.load(path)
    return model


class TestCliBasics:
    """Test group options"""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_command_shows_help(self, runner):
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "new" in result.output

    def test_missing_explicit_config(self, runner, temp_dir, package_file):
        result = runner.invoke(cli, ["--config", str(temp_dir / "nope.yaml"), "info", str(package_file)])
        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestNewCommand:
    """Test package creation"""

    def test_creates_full_package(self, package_file):
        model = _load(package_file)
        meta = model.get_metadata()
        assert meta.title == "Song"
        assert meta.artist == "Band"
        assert meta.sample_rate_hz == 8000
        assert model.get_audio().filename == "tone.wav"
        assert model.get_cover().width == 4
        assert model.get_lyrics().format == LyricFormat.LRC_LINE_BY_LINE
        assert len(model.get_lyrics().lines) == 3

    def test_output_directory_uses_tags(self, runner, temp_dir, source_files):
        out_dir = temp_dir / "out"
        out_dir.mkdir()
        result = runner.invoke(cli, ["new", str(out_dir), "--audio", str(source_files[0]),
                                     "--title", "Song", "--artist", "Band"])
        assert result.exit_code == 0, result.output
        assert (out_dir / "Band - Song.dmpak").exists()

    def test_refuses_to_overwrite(self, runner, package_file):
        result = runner.invoke(cli, ["new", str(package_file), "--title", "Other"])
        assert result.exit_code != 0
        assert "already exists" in result.output

    def test_force_overwrites(self, runner, package_file):
        result = runner.invoke(cli, ["new", str(package_file), "--title", "Other", "--force"])
        assert result.exit_code == 0, result.output
        assert _load(package_file).get_metadata().title == "Other"

    def test_set_and_lyrics_format(self, runner, temp_dir, source_files):
        path = temp_dir / "x.dmpak"
        result = runner.invoke(cli, ["new", str(path), "--set", "duration_ms=1234",
                                     "--lyrics", str(source_files[2]), "--lyrics-format", "plain-text"])
        assert result.exit_code == 0, result.output
        model = _load(path)
        assert model.get_metadata().duration_ms == 1234
        assert model.get_lyrics().format == LyricFormat.PLAIN_TEXT

    def test_invalid_numeric_value(self, runner, temp_dir):
        result = runner.invoke(cli, ["new", str(temp_dir / "x.dmpak"), "--set", "channels=stereo"])
        assert result.exit_code == 4
        assert "channels" in result.output
        assert not (temp_dir / "x.dmpak").exists()

    def test_unknown_field(self, runner, temp_dir):
        result = runner.invoke(cli, ["new", str(temp_dir / "x.dmpak"), "--set", "mood=happy"])
        assert result.exit_code == 2
        assert "Unknown field" in result.output

    def test_save_failure_exit_code(self, runner, temp_dir):
        result = runner.invoke(cli, ["new", str(temp_dir / "missing" / "x.dmpak"), "--title", "x"])
        assert result.exit_code == 3


class TestInfoCommand:
    """Test package inspection"""

    def test_info(self, runner, package_file):
        result = runner.invoke(cli, ["info", str(package_file)])
        assert result.exit_code == 0, result.output
        assert "Song" in result.output
        assert "tone.wav" in result.output
        assert "audio/wav" in result.output
        assert "4×3" in result.output
        assert "3 timed lines" in result.output

    def test_info_bad_package(self, runner, temp_dir):
        bad = temp_dir / "bad.dmpak"
        bad.write_bytes(b"garbage")
        result = runner.invoke(cli, ["info", str(bad)])
        assert result.exit_code == 2

    def test_info_unreadable_archive(self, runner, unreadable_package):
        result = runner.invoke(cli, ["info", str(unreadable_package)])
        assert result.exit_code == 2
        assert "Unreadable" in result.output


class TestEditCommand:
    """Test package editing"""

    def test_edit_in_place(self, runner, package_file):
        result = runner.invoke(cli, ["edit", str(package_file), "--set", "year=2024", "--set", "title="])
        assert result.exit_code == 0, result.output
        meta = _load(package_file).get_metadata()
        assert meta.year == "2024"
        assert meta.title == ""

    def test_edit_to_other_file(self, runner, temp_dir, package_file):
        out = temp_dir / "nocover.dmpak"
        result = runner.invoke(cli, ["edit", str(package_file), "--remove-cover", "--clear-lyrics", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert _load(out).get_cover() is None
        assert _load(out).get_lyrics() is None
        assert _load(package_file).get_cover() is not None

    def test_nothing_to_change(self, runner, package_file):
        before = package_file.read_bytes()
        result = runner.invoke(cli, ["edit", str(package_file)])
        assert result.exit_code == 0
        assert "Nothing to change" in result.output
        assert package_file.read_bytes() == before

    def test_conflicting_options(self, runner, package_file, source_files):
        result = runner.invoke(cli, ["edit", str(package_file), "--cover", str(source_files[1]), "--remove-cover"])
        assert result.exit_code != 0

    def test_change_lyrics_format(self, runner, package_file):
        result = runner.invoke(cli, ["edit", str(package_file), "--lyrics-format", "srt"])
        assert result.exit_code == 0, result.output
        lyrics = _load(package_file).get_lyrics()
        assert lyrics.format == LyricFormat.SRT
        assert lyrics.lines == ()


class TestExtractCommand:
    """Test asset extraction"""

    def test_extract(self, runner, temp_dir, package_file, wav_bytes, png_bytes, sample_lrc):
        out = temp_dir / "extracted"
        result = runner.invoke(cli, ["extract", str(package_file), str(out)])
        assert result.exit_code == 0, result.output
        assert (out / "tone.wav").read_bytes() == wav_bytes
        assert (out / "cover.png").read_bytes() == png_bytes
        assert (out / "lyrics.lrc").read_text(encoding="utf-8") == sample_lrc
        metadata = yaml.safe_load((out / "metadata.yaml").read_text(encoding="utf-8"))
        assert metadata["title"] == "Song"


class TestLyricsCommands:
    """Test lyrics printing and preview"""

    def test_lyrics(self, runner, package_file):
        result = runner.invoke(cli, ["lyrics", str(package_file)])
        assert result.exit_code == 0, result.output
        assert "[00:05] Intro line" in result.output
        assert "[01:02] Last line" in result.output

    def test_lyrics_marks_current_line(self, runner, package_file):
        result = runner.invoke(cli, ["lyrics", str(package_file), "--at", "13000"])
        assert "> [00:12] First line" in result.output
        assert "> [00:05]" not in result.output

    def test_lyrics_none(self, runner, temp_dir):
        path = temp_dir / "plain.dmpak"
        runner.invoke(cli, ["new", str(path), "--title", "x"])
        result = runner.invoke(cli, ["lyrics", str(path)])
        assert "No lyrics" in result.output

    def test_preview(self, runner, temp_dir, package_file):
        result = runner.invoke(cli, ["preview", str(package_file), "--speed", "1000", "--interval", "5"])
        assert result.exit_code == 0, result.output
        assert "Playback finished" in result.output

        audio_line = next(line for line in result.output.splitlines() if line.startswith("Audio: "))
        preview_path = Path(audio_line[len("Audio: "):].rsplit(" (", 1)[0])
        assert preview_path.name == "tone.wav"
        assert not preview_path.exists()

    def test_preview_without_lyrics(self, runner, temp_dir):
        path = temp_dir / "plain.dmpak"
        runner.invoke(cli, ["new", str(path), "--title", "x"])
        result = runner.invoke(cli, ["preview", str(path)])
        assert result.exit_code == 0
        assert "No timed lyrics" in result.output
