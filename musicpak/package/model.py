"""
Editable package model for musicpak.

PackageModel is the unit of edit: it holds the in-memory metadata, audio,
cover and lyrics of one package, tracks whether there are unsaved edits,
and decides when and what goes to or comes from the container.

State Machine:
    EMPTY  --create_new()/load()-->  CLEAN
    CLEAN  --any mutation-->         DIRTY
    DIRTY  --save()-->               CLEAN
    any    --create_new()/load()-->  CLEAN   (previous assets dropped)

Rules:
    - Mutations on EMPTY raise NoPackageOpenError
    - Getters on EMPTY return Metadata() or None, never raise
    - load() is all-or-nothing: a LoadError leaves the model untouched
    - save() writes all four slots at once; a SaveError leaves the model
      dirty and untouched
    - Lyrics are reparsed synchronously on every text or format edit, and
      lyrics listeners get the new asset right away

Usage:
    model = PackageModel()
    model.create_new()
    model.set_audio(import_audio(data, "song.mp3"))
    model.set_field("title", "Song")
    model.save(Path("song.dmpak"))
"""

from enum import Enum
from pathlib import Path
from typing import Any, Callable

from musicpak.core.config import DEFAULT_WINDOW_TITLE
from musicpak.core.exceptions import LoadError, NoPackageOpenError, SaveError
from musicpak.core.logger import get_logger
from musicpak.lyrics.models import LyricFormat, LyricsAsset
from musicpak.lyrics.parser import create_lyrics
from musicpak.media.assets import AudioAsset, CoverAsset
from musicpak.media.probe import AudioProbe
from musicpak.package.container import ContainerFactory, PakContainer
from musicpak.package.metadata import Metadata, coerce_field

logger = get_logger(__name__)


class PackageState(Enum):
    """Lifecycle state of a PackageModel."""

    EMPTY = "empty"
    CLEAN = "clean"
    DIRTY = "dirty"


StateListener = Callable[[PackageState], None]
LyricsListener = Callable[[LyricsAsset | None], None]
ReleaseHook = Callable[[], None]


class PackageModel:
    """
    In-memory package with dirty tracking.

    Attributes:
        current_path: Where the package was last loaded from or saved to.
                      None for a package that was never saved.

    Observers:
        add_state_listener(cb): cb(state) after every state change
        add_lyrics_listener(cb): cb(asset_or_None) after every lyrics edit,
                                 create_new() and load()
        add_release_hook(cb): cb() before the current package is replaced
                              or disposed, to free resources derived from
                              it (e.g. preview buffers)
    """

    def __init__(
        self,
        container_factory: ContainerFactory = PakContainer,
        window_title: str = DEFAULT_WINDOW_TITLE
    ) -> None:
        self._container_factory = container_factory
        self._window_title_base = window_title

        self._is_open = False
        self._modified = False
        self.current_path: Path | None = None

        self._metadata = Metadata()
        self._audio: AudioAsset | None = None
        self._cover: CoverAsset | None = None
        self._lyrics_text = ""
        self._lyrics_format = LyricFormat.NONE
        self._lyrics: LyricsAsset | None = None

        self._state_listeners: list[StateListener] = []
        self._lyrics_listeners: list[LyricsListener] = []
        self._release_hooks: list[ReleaseHook] = []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> PackageState:
        if not self._is_open:
            return PackageState.EMPTY
        return PackageState.DIRTY if self._modified else PackageState.CLEAN

    @property
    def has_package(self) -> bool:
        return self._is_open

    @property
    def is_modified(self) -> bool:
        return self._modified

    @property
    def window_title(self) -> str:
        """
        Title for the editor window.

        Examples:
            "DMusicPak Creator"                    # no package
            "DMusicPak Creator - Untitled"         # new, never saved
            "DMusicPak Creator - song.dmpak *"     # unsaved edits
        """
        title = self._window_title_base
        if self.current_path is not None:
            title += f" - {self.current_path.name}"
        elif self._is_open:
            title += " - Untitled"

        if self._modified:
            title += " *"
        return title

    def add_state_listener(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    def add_lyrics_listener(self, listener: LyricsListener) -> None:
        self._lyrics_listeners.append(listener)

    def add_release_hook(self, hook: ReleaseHook) -> None:
        self._release_hooks.append(hook)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def create_new(self) -> None:
        """Start a new, empty package. Unsaved edits are discarded."""
        logger.info("Creating new package")
        self._replace(
            metadata=Metadata(),
            audio=None,
            cover=None,
            lyrics=None,
            path=None,
        )

    def load(self, path: Path) -> None:
        """
        Replace the current package with the one stored at `path`.

        Raises:
            LoadError: If the container cannot be opened or parsed. The
                       current package is kept as it was.
        """
        path = Path(path)
        logger.info(f"Loading package: {path}")

        try:
            container = self._container_factory.open(path)
            metadata = container.get_metadata() or Metadata()
            audio = container.get_audio()
            cover = container.get_cover()
            lyrics = container.get_lyrics()
        except LoadError:
            raise
        except OSError as e:
            raise LoadError(
                f"Failed to open package: {e}",
                details={"path": str(path), "original_error": str(e)}
            ) from e

        self._replace(metadata=metadata, audio=audio, cover=cover, lyrics=lyrics, path=path)

    def save(self, path: Path) -> None:
        """
        Write the whole package to `path` and mark it clean.

        Raises:
            NoPackageOpenError: If no package is open.
            SaveError: If the container cannot be written. The package stays
                       dirty and current_path is unchanged.
        """
        self.require_open("save")
        path = Path(path)
        logger.info(f"Saving package: {path}")

        container = self._container_factory()
        container.set_metadata(self._metadata)
        container.set_audio(self._audio)
        container.set_cover(self._cover)
        container.set_lyrics(self._lyrics)

        try:
            container.save(path)
        except SaveError:
            raise
        except OSError as e:
            raise SaveError(
                f"Failed to save package: {e}",
                details={"path": str(path), "original_error": str(e)}
            ) from e

        self.current_path = path
        self._set_modified(False, force_notify=True)

    def dispose(self) -> None:
        """Release the package and return to EMPTY."""
        if not self._is_open:
            return
        self._release()
        self._is_open = False
        self._modified = False
        self.current_path = None
        self._metadata = Metadata()
        self._audio = None
        self._cover = None
        self._set_lyrics_fields("", LyricFormat.NONE)
        self._notify_state()

    # =========================================================================
    # Queries
    # =========================================================================

    def get_metadata(self) -> Metadata:
        return self._metadata

    def get_audio(self) -> AudioAsset | None:
        return self._audio

    def get_cover(self) -> CoverAsset | None:
        return self._cover

    def get_lyrics(self) -> LyricsAsset | None:
        return self._lyrics

    @property
    def lyrics_text(self) -> str:
        """Raw lyrics text as being edited (may be blank)."""
        return self._lyrics_text

    @property
    def lyrics_format(self) -> LyricFormat:
        return self._lyrics_format

    # =========================================================================
    # Mutations
    # =========================================================================

    def set_metadata(self, metadata: Metadata) -> None:
        self.require_open("set metadata")
        self._metadata = metadata
        logger.debug(f"Metadata set: {metadata.title!r}")
        self._mark_dirty()

    def set_field(self, name: str, value: Any) -> bool:
        """
        Edit one metadata field from editor input.

        Numeric fields accept text; unparsable input leaves the field at its
        previous value and the package state unchanged.

        Returns:
            True if the field was updated.

        Raises:
            NoPackageOpenError: If no package is open.
            ValueError: If `name` is not a metadata field.
        """
        self.require_open("edit metadata")
        ok, coerced = coerce_field(name, value)
        if not ok:
            logger.debug(f"Ignored invalid value for {name}: {value!r}")
            return False

        self._metadata = self._metadata.with_field(name, coerced)
        self._mark_dirty()
        return True

    def apply_probe(self, probe: AudioProbe) -> list[str]:
        """
        Fill metadata fields from probed audio properties.

        Only fields that are still empty (or 0) are filled, so nothing the
        user already typed is overwritten.

        Returns:
            Names of the fields that were filled.
        """
        self.require_open("apply audio properties")

        filled = []
        metadata = self._metadata
        for name in ("title", "artist", "album", "genre", "year", "duration_ms",
                     "bitrate_kbps", "sample_rate_hz", "channels"):
            probed = getattr(probe, name)
            if probed and not getattr(metadata, name):
                metadata = metadata.with_field(name, probed)
                filled.append(name)

        if filled:
            self._metadata = metadata
            logger.debug(f"Filled from audio properties: {', '.join(filled)}")
            self._mark_dirty()
        return filled

    def set_audio(self, audio: AudioAsset | None) -> None:
        self.require_open("set audio")
        self._audio = audio
        if audio is not None:
            logger.debug(f"Audio set: {audio.filename} ({audio.display_size})")
        self._mark_dirty()

    def set_cover(self, cover: CoverAsset | None) -> None:
        self.require_open("set cover")
        self._cover = cover
        if cover is not None:
            logger.debug(f"Cover set: {cover.width}×{cover.height}")
        self._mark_dirty()

    def clear_cover(self) -> None:
        """Remove the cover: buffer, format and dimensions go together."""
        self.set_cover(None)

    def set_lyrics(self, lyrics: LyricsAsset | None) -> None:
        self.require_open("set lyrics")
        if lyrics is None:
            self._set_lyrics_fields("", LyricFormat.NONE)
        else:
            self._set_lyrics_fields(lyrics.text, lyrics.format)
        self._mark_dirty()

    def set_lyrics_text(self, text: str) -> None:
        """Edit the lyrics text, keeping the declared format."""
        self.require_open("edit lyrics")
        self._set_lyrics_fields(text or "", self._lyrics_format)
        self._mark_dirty()

    def set_lyrics_format(self, lyric_format: LyricFormat) -> None:
        """Change the declared lyrics format, keeping the text."""
        self.require_open("edit lyrics")
        self._set_lyrics_fields(self._lyrics_text, LyricFormat(lyric_format))
        self._mark_dirty()

    def clear_lyrics(self) -> None:
        self.set_lyrics(None)

    # =========================================================================
    # Internals
    # =========================================================================

    def require_open(self, action: str) -> None:
        if not self._is_open:
            raise NoPackageOpenError(
                f"Cannot {action}: no package is open",
                details={"action": action}
            )

    def _replace(
        self,
        metadata: Metadata,
        audio: AudioAsset | None,
        cover: CoverAsset | None,
        lyrics: LyricsAsset | None,
        path: Path | None
    ) -> None:
        if self._is_open:
            self._release()

        self._is_open = True
        self._modified = False
        self.current_path = path
        self._metadata = metadata
        self._audio = audio
        self._cover = cover
        if lyrics is None:
            self._set_lyrics_fields("", LyricFormat.NONE)
        else:
            # Stored lyrics stay present even when their text is blank
            self._set_lyrics_fields(lyrics.text, lyrics.format, stored=lyrics)
        self._notify_state()

    def _release(self) -> None:
        for hook in list(self._release_hooks):
            try:
                hook()
            except Exception as e:
                logger.error(f"Release hook failed: {e}", exc_info=True)

    def _set_lyrics_fields(
        self,
        text: str,
        lyric_format: LyricFormat,
        stored: LyricsAsset | None = None
    ) -> None:
        self._lyrics_text = text
        self._lyrics_format = lyric_format
        if stored is None:
            self.on_lyrics_text_changed()
        else:
            self._lyrics = stored
            self._notify_lyrics()

    def on_lyrics_text_changed(self) -> None:
        """Reparse the lyrics from the current text and notify listeners."""
        self._lyrics = create_lyrics(self._lyrics_text, self._lyrics_format)
        self._notify_lyrics()

    def _notify_lyrics(self) -> None:
        for listener in list(self._lyrics_listeners):
            listener(self._lyrics)

    def _mark_dirty(self) -> None:
        self._set_modified(True)

    def _set_modified(self, modified: bool, force_notify: bool = False) -> None:
        changed = self._modified != modified
        self._modified = modified
        if changed or force_notify:
            self._notify_state()

    def _notify_state(self) -> None:
        state = self.state
        for listener in list(self._state_listeners):
            listener(state)
