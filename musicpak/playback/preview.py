"""
Preview buffers for handing package audio to an external player.

Players want a file on disk with a recognizable extension, not a byte
buffer. PreviewBuffer writes the audio bytes to a temporary file named after
the (sanitized) asset filename and deletes it again when released. A package
model can own its preview buffers through a release hook, so they disappear
when the package is replaced or closed.

Usage:
    with PreviewBuffer(model.get_audio()) as preview:
        player.play(preview.path, preview.content_type)
"""

import shutil
import tempfile
from pathlib import Path

from musicpak.core.logger import get_logger
from musicpak.media.assets import AudioAsset
from musicpak.utils import sanitize_filename

logger = get_logger(__name__)


class PreviewBuffer:
    """
    A temporary file holding one audio asset.

    Args:
        audio: Asset to write out.
        temp_directory: Parent for the temporary folder; the system temp
                        directory when None.

    Attributes:
        path: Location of the written file, None once released.
        content_type: MIME type inferred from the asset filename.
    """

    def __init__(self, audio: AudioAsset, temp_directory: Path | None = None) -> None:
        self.content_type = audio.content_type
        self._folder = Path(tempfile.mkdtemp(prefix="musicpak-preview-", dir=temp_directory))

        filename = sanitize_filename(audio.filename, restricted=True) or "audio"
        self.path: Path | None = self._folder / filename
        try:
            self.path.write_bytes(audio.data)
        except OSError:
            shutil.rmtree(self._folder, ignore_errors=True)
            raise
        logger.debug(f"Preview buffer written: {self.path} ({audio.display_size})")

    @property
    def released(self) -> bool:
        return self.path is None

    def close(self) -> None:
        """Delete the temporary file. Safe to call more than once."""
        if self.path is None:
            return
        shutil.rmtree(self._folder, ignore_errors=True)
        logger.debug(f"Preview buffer released: {self.path}")
        self.path = None

    def __enter__(self) -> "PreviewBuffer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
