"""
Current-line tracking for synced lyrics.

The cursor turns a continuously advancing playback position into the index
of the lyric line that should be highlighted. It is driven by a polling
clock (typically every 100 ms) and only notifies listeners when the index
actually changes, so UI highlight and scroll updates happen once per line.

Resolution rule (last-at-or-before):
    The current line is the last line whose time is <= position. A line
    stays current until the next line's time is reached, and the final line
    stays current after the position has passed it. Before the first line,
    or with no lines at all, there is no current line (-1).

Usage:
    cursor = LyricsCursor(asset.lines)
    cursor.add_listener(lambda old, new: print(f"line {old} -> {new}"))

    cursor.update(position_ms)   # on every clock tick
    cursor.reset()               # on stop / end of track
"""

from typing import Callable, Sequence

from musicpak.core.logger import get_logger
from musicpak.lyrics.models import LyricLine

logger = get_logger(__name__)


NO_LINE = -1

# listener(old_index, new_index)
LineChangedListener = Callable[[int, int], None]


def find_current_index(lines: Sequence[LyricLine], position_ms: int) -> int:
    """
    Find the index of the line that is current at a playback position.

    Args:
        lines: Lines sorted ascending by time_ms.
        position_ms: Playback position in milliseconds (may be negative).

    Returns:
        The greatest i with lines[i].time_ms <= position_ms, or NO_LINE.

    Example:
        lines = [LyricLine(0, "A"), LyricLine(2000, "B")]
        find_current_index(lines, 500)   # 0
        find_current_index(lines, 2500)  # 1
        find_current_index(lines, -1)    # -1
    """
    index = NO_LINE
    for i, line in enumerate(lines):
        if line.time_ms <= position_ms:
            index = i
        else:
            break
    return index


class LyricsCursor:
    """
    Edge-triggered tracker of the current lyric line.

    The cursor only ever reads its line sequence. Reparsing happens when the
    lyrics text is edited, after which the owner hands over the new sequence
    with set_lines(); the polling path (update) never triggers it.

    Attributes:
        lines: The immutable line sequence being tracked.
        index: Last resolved index, NO_LINE if none.
    """

    def __init__(self, lines: Sequence[LyricLine] = ()) -> None:
        self._lines: tuple[LyricLine, ...] = tuple(lines)
        self._index = NO_LINE
        self._listeners: list[LineChangedListener] = []

    @property
    def lines(self) -> tuple[LyricLine, ...]:
        return self._lines

    @property
    def index(self) -> int:
        return self._index

    @property
    def current_line(self) -> LyricLine | None:
        """The current line, or None when no line is current."""
        if self._index == NO_LINE:
            return None
        return self._lines[self._index]

    def add_listener(self, listener: LineChangedListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: LineChangedListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_lines(self, lines: Sequence[LyricLine]) -> None:
        """Replace the tracked sequence (after a reparse) and reset to NO_LINE."""
        self._lines = tuple(lines)
        self.reset()

    def update(self, position_ms: int) -> bool:
        """
        Resolve the current line for a new position.

        Returns:
            True if the index changed and listeners were notified.
        """
        if not self._lines:
            return False
        return self._move_to(find_current_index(self._lines, position_ms))

    def reset(self) -> bool:
        """
        Return to NO_LINE, as on stop or end of playback.

        Returns:
            True if the index changed and listeners were notified.
        """
        return self._move_to(NO_LINE)

    def _move_to(self, new_index: int) -> bool:
        old_index = self._index
        if new_index == old_index:
            return False

        self._index = new_index
        for listener in list(self._listeners):
            try:
                listener(old_index, new_index)
            except Exception as e:
                # A broken listener must not stall the poll loop
                logger.error(f"Lyric line listener failed: {e}", exc_info=True)
        return True
