"""
Playback clocks and the lyrics poller.

The editor never decodes audio itself. Whatever plays the preview only has
to expose a PlaybackClock: the current position and the total duration,
both in milliseconds. The LyricsPoller reads that clock at a fixed interval
and moves a LyricsCursor; it is the only thing that turns playback time
into "current line" changes.

Classes:
    PlaybackClock: Protocol every playback engine satisfies
    ManualClock: Position set explicitly (tests, seeking from the CLI)
    SimulatedClock: Advances with wall time at a given speed
    LyricsPoller: Samples a clock and drives a LyricsCursor
"""

import threading
import time
from typing import Callable, Protocol

from musicpak.core.config import DEFAULT_POLL_INTERVAL_MS
from musicpak.core.logger import get_logger
from musicpak.lyrics.cursor import LyricsCursor

logger = get_logger(__name__)


class PlaybackClock(Protocol):
    """Read-only view of a playback engine."""

    @property
    def position_ms(self) -> int: ...

    @property
    def duration_ms(self) -> int: ...

    @property
    def ended(self) -> bool: ...


class ManualClock:
    """
    Clock whose position only changes when told to.

    Example:
        clock = ManualClock(duration_ms=215000)
        clock.seek(1500)
    """

    def __init__(self, duration_ms: int = 0) -> None:
        self._position_ms = 0
        self._duration_ms = max(0, duration_ms)

    @property
    def position_ms(self) -> int:
        return self._position_ms

    @property
    def duration_ms(self) -> int:
        return self._duration_ms

    @property
    def ended(self) -> bool:
        return self._duration_ms > 0 and self._position_ms >= self._duration_ms

    def seek(self, position_ms: int) -> None:
        """Jump to a position, clamped to [0, duration] when the duration is known."""
        position_ms = max(0, position_ms)
        if self._duration_ms > 0:
            position_ms = min(position_ms, self._duration_ms)
        self._position_ms = position_ms


class SimulatedClock:
    """
    Clock that advances with wall time.

    Stands in for a real player in the CLI preview: it starts at 0 on
    start() and runs at `speed` times real time until the duration is
    reached.

    Args:
        duration_ms: Track length; the clock ends there.
        speed: Playback speed multiplier (> 0).
        time_source: Monotonic seconds source, injectable for tests.
    """

    def __init__(
        self,
        duration_ms: int,
        speed: float = 1.0,
        time_source: Callable[[], float] = time.monotonic
    ) -> None:
        if speed <= 0:
            raise ValueError(f"Playback speed must be positive, got {speed}")
        self._duration_ms = max(0, duration_ms)
        self._speed = speed
        self._time_source = time_source
        self._started_at: float | None = None

    @property
    def duration_ms(self) -> int:
        return self._duration_ms

    @property
    def running(self) -> bool:
        return self._started_at is not None

    @property
    def position_ms(self) -> int:
        if self._started_at is None:
            return 0
        elapsed_ms = int((self._time_source() - self._started_at) * 1000 * self._speed)
        return min(elapsed_ms, self._duration_ms)

    @property
    def ended(self) -> bool:
        return self._started_at is not None and self.position_ms >= self._duration_ms

    def start(self) -> None:
        self._started_at = self._time_source()

    def stop(self) -> None:
        self._started_at = None


class LyricsPoller:
    """
    Samples a PlaybackClock and feeds the position to a LyricsCursor.

    Each tick reads the clock once. When the clock reports that playback has
    ended, the cursor is reset to "no line" and the poller stops.

    Example:
        poller = LyricsPoller(clock, cursor, interval_ms=100)
        poller.run()          # blocks until the track ends or stop()
    """

    def __init__(
        self,
        clock: PlaybackClock,
        cursor: LyricsCursor,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        on_ended: Callable[[], None] | None = None
    ) -> None:
        if interval_ms <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval_ms}")
        self.clock = clock
        self.cursor = cursor
        self.interval_ms = interval_ms
        self._on_ended = on_ended
        self._stop_event = threading.Event()

    def tick(self) -> bool:
        """
        Sample the clock once.

        Returns:
            False once playback has ended, True otherwise.
        """
        if self.clock.ended:
            self.cursor.reset()
            logger.debug("Playback ended, lyrics cursor reset")
            if self._on_ended is not None:
                self._on_ended()
            return False

        self.cursor.update(self.clock.position_ms)
        return True

    def run(self) -> None:
        """Tick every interval until playback ends or stop() is called."""
        self._stop_event.clear()
        interval = self.interval_ms / 1000
        while not self._stop_event.is_set():
            if not self.tick():
                break
            self._stop_event.wait(interval)

    def stop(self) -> None:
        self._stop_event.set()
