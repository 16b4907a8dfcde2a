"""
Synchronized lyrics engine.

Key components:
- parse_lyrics: LRC text -> time-sorted LyricLine list (never raises)
- find_current_index / LyricsCursor: playback position -> current line,
  with edge-triggered change notification
- LyricsAsset / LyricFormat: the lyrics track held by a package

Usage:
    asset = create_lyrics(text, LyricFormat.LRC_LINE_BY_LINE)
    cursor = LyricsCursor(asset.lines)
    cursor.update(position_ms)
"""

from .models import LyricFormat, LyricLine, LyricsAsset
from .parser import create_lyrics, format_lyric_time, parse_lyrics
from .cursor import NO_LINE, LyricsCursor, find_current_index

__all__ = [
    'LyricFormat',
    'LyricLine',
    'LyricsAsset',
    'parse_lyrics',
    'create_lyrics',
    'format_lyric_time',
    'NO_LINE',
    'LyricsCursor',
    'find_current_index',
]
