"""Test configuration loading and logging setup"""

import logging

import pytest

from musicpak.core.config import (
    DEFAULT_POLL_INTERVAL_MS,
    Config,
    load_config,
    parse_config,
)
from musicpak.core.exceptions import ConfigError, MusicPakError
from musicpak.core.logger import (
    ErrorOnlyFilter,
    format_status_message,
    setup_logging,
    shutdown_logging,
)


class TestLoadConfig:
    """Test config.yaml loading"""

    def test_missing_default_file_gives_defaults(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        config = load_config()
        assert config == Config()
        assert config.playback.poll_interval_ms == DEFAULT_POLL_INTERVAL_MS
        assert config.editor.default_audio_filename == "audio.mp3"

    def test_missing_explicit_file(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            load_config(temp_dir / "nope.yaml")

    def test_empty_file(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == Config()

    def test_full_file(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text(
            "editor:\n"
            "  default_audio_filename: track.ogg\n"
            "  window_title: My Editor\n"
            "playback:\n"
            "  poll_interval_ms: 50\n"
            f"  temp_directory: {temp_dir}\n"
            "logging:\n"
            f"  directory: {temp_dir / 'logs'}\n"
            "  level: debug\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.editor.default_audio_filename == "track.ogg"
        assert config.editor.window_title == "My Editor"
        assert config.playback.poll_interval_ms == 50
        assert config.playback.temp_directory == temp_dir.resolve()
        assert config.logging.directory == (temp_dir / "logs").resolve()
        assert config.logging.level == "DEBUG"

    def test_default_file_in_cwd(self, temp_dir, monkeypatch):
        (temp_dir / "config.yaml").write_text("playback:\n  poll_interval_ms: 250\n", encoding="utf-8")
        monkeypatch.chdir(temp_dir)
        assert load_config().playback.poll_interval_ms == 250

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text("editor: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_dictionary(self, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)


class TestParseConfig:
    """Test value validation"""

    @pytest.mark.parametrize("interval", [0, -5, "fast", True, 1.5])
    def test_bad_poll_interval(self, interval):
        with pytest.raises(ConfigError) as exc_info:
            parse_config({"playback": {"poll_interval_ms": interval}})
        assert exc_info.value.details["field"] == "playback.poll_interval_ms"

    def test_bad_section_type(self):
        with pytest.raises(ConfigError, match="editor"):
            parse_config({"editor": "oops"})

    def test_blank_default_filename(self):
        with pytest.raises(ConfigError):
            parse_config({"editor": {"default_audio_filename": "  "}})

    def test_bad_log_level(self):
        with pytest.raises(ConfigError):
            parse_config({"logging": {"level": "LOUD"}})

    def test_config_error_is_musicpak_error(self):
        assert issubclass(ConfigError, MusicPakError)


class TestLogging:
    """Test logging setup"""

    def test_console_only(self):
        setup_logging(None, "WARNING")
        try:
            handlers = logging.getLogger().handlers
            assert len(handlers) == 1
            assert handlers[0].level == logging.WARNING
        finally:
            shutdown_logging()
        assert logging.getLogger().handlers == []

    def test_log_files(self, temp_dir):
        log_dir = temp_dir / "logs"
        setup_logging(log_dir)
        try:
            logging.getLogger("musicpak.test").error("broken thing")
            logging.getLogger("musicpak.test").info("fine thing")
        finally:
            shutdown_logging()

        full_log = next(log_dir.glob("log_full_*.log")).read_text(encoding="utf-8")
        error_log = next(log_dir.glob("log_errors_*.log")).read_text(encoding="utf-8")
        assert "broken thing" in full_log and "fine thing" in full_log
        assert "broken thing" in error_log
        assert "fine thing" not in error_log

    def test_error_only_filter(self):
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "msg", None, None)
        assert not ErrorOnlyFilter().filter(record)
        record.levelno = logging.ERROR
        assert ErrorOnlyFilter().filter(record)

    def test_status_message(self):
        assert "Saved" in format_status_message(True, "Saved")
        assert "✘" in format_status_message(False, "Failed")
