"""
Playback boundary: clocks, the lyrics poller and preview buffers.

Only a position in milliseconds and an "ended" flag cross this boundary;
decoding and output belong to whatever player is on the other side.
"""

from .clock import LyricsPoller, ManualClock, PlaybackClock, SimulatedClock
from .preview import PreviewBuffer

__all__ = [
    'PlaybackClock',
    'ManualClock',
    'SimulatedClock',
    'LyricsPoller',
    'PreviewBuffer',
]
