"""
Editor session for musicpak.

EditorSession is the boundary a front end (the CLI, or a GUI) talks to. It
owns one PackageModel, a MediaAssetStore for file imports, a LyricsCursor
kept in step with the model's lyrics, and at most one preview buffer.

Every operation returns True on success. Failures from collaborators
(missing files, broken packages, unwritable destinations, edits without an
open package) are caught here, logged, and reported through `status_text`;
they never propagate to the caller and never leave the model half-updated.

Usage:
    session = EditorSession(load_config())
    session.new_package()
    session.import_audio_file(Path("song.mp3"))
    session.edit_field("title", "Song")
    if not session.save_package(Path("song.dmpak")):
        print(session.status_text)
"""

from pathlib import Path
from typing import Any, Callable

from musicpak.core.config import Config
from musicpak.core.exceptions import MusicPakError
from musicpak.core.logger import get_logger
from musicpak.lyrics.cursor import LyricsCursor
from musicpak.lyrics.models import LyricFormat, LyricsAsset
from musicpak.lyrics.parser import format_lyric_time
from musicpak.media.assets import MediaAssetStore
from musicpak.package.container import ContainerFactory, PakContainer
from musicpak.package.model import PackageModel
from musicpak.playback.preview import PreviewBuffer

logger = get_logger(__name__)


READY_STATUS = "Ready"

SYNCED_LYRICS_EXTENSIONS = (".lrc",)


class EditorSession:
    """
    One editing session over one package at a time.

    Attributes:
        config: Application configuration.
        model: The package being edited.
        store: File importer for the audio, cover and lyrics slots.
        cursor: Current-line tracker for the package's lyrics.
        status_text: Outcome of the last operation, for display.
        position_ms: Last playback position reported through on_position().
        last_error: Exception behind the last failed operation, None after
                    a success.
    """

    def __init__(
        self,
        config: Config | None = None,
        container_factory: ContainerFactory = PakContainer
    ) -> None:
        self.config = config or Config()
        self.model = PackageModel(
            container_factory=container_factory,
            window_title=self.config.editor.window_title,
        )
        self.store = MediaAssetStore(self.config.editor.default_audio_filename)
        self.cursor = LyricsCursor()
        self.status_text = READY_STATUS
        self.position_ms = 0
        self.last_error: Exception | None = None
        self._preview: PreviewBuffer | None = None

        self.model.add_lyrics_listener(self._on_lyrics_changed)
        self.model.add_release_hook(self.release_preview)

    # =========================================================================
    # Package lifecycle
    # =========================================================================

    def new_package(self) -> bool:
        def action() -> str:
            self.model.create_new()
            return "New package created"

        return self._run("create package", action)

    def open_package(self, path: Path) -> bool:
        def action() -> str:
            self.model.load(path)
            return f"Opened {Path(path).name}"

        return self._run("open package", action)

    def save_package(self, path: Path | None = None) -> bool:
        """
        Save to `path`, or to the path the package came from when None.

        A package that was never saved needs an explicit path.
        """
        target = path or self.model.current_path
        if target is None and self.model.has_package:
            self.status_text = "Choose where to save the package"
            self.last_error = None
            return False

        def action() -> str:
            self.model.save(target)
            return f"Saved {Path(target).name}"

        return self._run("save package", action)

    def close(self) -> None:
        """Drop the package and any preview buffer."""
        self.model.dispose()
        self.release_preview()
        self.cursor.set_lines(())
        self.position_ms = 0
        self.status_text = READY_STATUS

    # =========================================================================
    # Imports
    # =========================================================================

    def import_audio_file(self, path: Path) -> bool:
        """Import audio and fill empty metadata fields from its tags."""
        def action() -> str:
            self.model.require_open("import audio")
            result = self.store.read_audio_file(Path(path))
            self.model.set_audio(result.asset)
            filled = self.model.apply_probe(result.probe)
            if filled:
                logger.info(f"Metadata filled from {result.asset.filename}: {', '.join(filled)}")
            return f"Audio imported: {result.asset.filename} ({result.asset.display_size})"

        return self._run("import audio", action)

    def import_cover_file(self, path: Path) -> bool:
        def action() -> str:
            self.model.require_open("import cover")
            cover = self.store.read_cover_file(Path(path))
            self.model.set_cover(cover)
            return f"Cover imported: {cover.info_text}"

        return self._run("import cover", action)

    def import_lyrics_file(self, path: Path, lyric_format: LyricFormat | None = None) -> bool:
        """
        Import a lyrics file as the package's lyrics text.

        Without an explicit format, a package that has none yet gets
        LRC_LINE_BY_LINE for .lrc files and PLAIN_TEXT otherwise; an
        existing declared format is kept.
        """
        def action() -> str:
            self.model.require_open("import lyrics")
            text = self.store.read_lyrics_file(Path(path))
            fmt = lyric_format
            if fmt is None and self.model.lyrics_format == LyricFormat.NONE:
                if Path(path).suffix.lower() in SYNCED_LYRICS_EXTENSIONS:
                    fmt = LyricFormat.LRC_LINE_BY_LINE
                else:
                    fmt = LyricFormat.PLAIN_TEXT
            if fmt is not None:
                self.model.set_lyrics_format(fmt)
            self.model.set_lyrics_text(text)
            return f"Lyrics imported: {len(self.cursor.lines)} timed lines"

        return self._run("import lyrics", action)

    # =========================================================================
    # Edits
    # =========================================================================

    def edit_field(self, name: str, value: Any) -> bool:
        """
        Edit one metadata field.

        Unparsable numeric input keeps the previous value and reports it.
        """
        def action() -> str:
            if not self.model.set_field(name, value):
                raise ValueError(f"Invalid value for {name}: {value!r}")
            return f"Updated {name}"

        return self._run("edit metadata", action, catch_value_errors=True)

    def edit_lyrics(self, text: str) -> bool:
        def action() -> str:
            self.model.set_lyrics_text(text)
            return "Lyrics updated"

        return self._run("edit lyrics", action)

    def set_lyrics_format(self, lyric_format: LyricFormat) -> bool:
        def action() -> str:
            self.model.set_lyrics_format(lyric_format)
            return f"Lyrics format: {LyricFormat(lyric_format).name}"

        return self._run("change lyrics format", action)

    def remove_cover(self) -> bool:
        def action() -> str:
            self.model.clear_cover()
            return "Cover removed"

        return self._run("remove cover", action)

    def clear_lyrics(self) -> bool:
        def action() -> str:
            self.model.clear_lyrics()
            return "Lyrics cleared"

        return self._run("clear lyrics", action)

    # =========================================================================
    # Playback
    # =========================================================================

    def on_position(self, position_ms: int) -> bool:
        """
        Feed a polled playback position.

        Returns:
            True if the current lyric line changed.
        """
        self.position_ms = max(0, position_ms)
        return self.cursor.update(position_ms)

    def on_playback_ended(self) -> None:
        self.position_ms = 0
        self.cursor.reset()

    @property
    def playback_time_text(self) -> str:
        """Position and length, e.g. "01:15 / 03:35"."""
        duration_ms = self.model.get_metadata().duration_ms
        return f"{format_lyric_time(self.position_ms)} / {format_lyric_time(duration_ms)}"

    @property
    def current_lyric_text(self) -> str:
        line = self.cursor.current_line
        return line.text if line is not None else ""

    @property
    def window_title(self) -> str:
        return self.model.window_title

    def prepare_preview(self) -> PreviewBuffer | None:
        """
        Write the package audio out for an external player.

        Any earlier preview buffer is released first. Returns None (with a
        status message) when there is no audio to preview.
        """
        self.release_preview()
        audio = self.model.get_audio()
        if audio is None:
            self.status_text = "No audio to preview"
            return None

        try:
            self._preview = PreviewBuffer(audio, self.config.playback.temp_directory)
        except OSError as e:
            self._fail("prepare preview", e)
            return None
        return self._preview

    def release_preview(self) -> None:
        if self._preview is not None:
            self._preview.close()
            self._preview = None

    # =========================================================================
    # Internals
    # =========================================================================

    def _on_lyrics_changed(self, lyrics: LyricsAsset | None) -> None:
        self.cursor.set_lines(lyrics.lines if lyrics is not None else ())
        if self.position_ms:
            self.cursor.update(self.position_ms)

    def _run(
        self,
        description: str,
        action: Callable[[], str],
        catch_value_errors: bool = False
    ) -> bool:
        errors: tuple[type[Exception], ...] = (MusicPakError, OSError)
        if catch_value_errors:
            errors += (ValueError,)

        try:
            message = action()
        except errors as e:
            self._fail(description, e)
            return False

        self.status_text = message
        self.last_error = None
        logger.debug(message)
        return True

    def _fail(self, description: str, error: Exception) -> None:
        self.last_error = error
        message = error.message if isinstance(error, MusicPakError) else str(error)
        self.status_text = f"Failed to {description}: {message}"
        if isinstance(error, MusicPakError) and error.details:
            logger.error(f"{self.status_text} ({error.details})")
        else:
            logger.error(self.status_text)
