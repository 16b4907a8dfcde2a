"""
LRC lyrics parsing for musicpak.

Synced lyrics use the LRC (LyRiCs) format, one timestamp tag per line:

    [00:15.00]First line of the song
    [00:18.50]Second line continues

Parsing is tolerant: lyrics are user-supplied text, so lines that do not
start with a [MM:SS.CC] tag (metadata headers like [ar:Artist], blank lines,
free text) are silently dropped. Nothing in this module raises on bad input.

Usage:
    from musicpak.lyrics.parser import parse_lyrics

    lines = parse_lyrics(text, LyricFormat.LRC_LINE_BY_LINE)
    for line in lines:
        print(line.time_ms, line.text)
"""

import re

from musicpak.core.logger import get_logger
from musicpak.lyrics.models import LyricFormat, LyricLine, LyricsAsset

logger = get_logger(__name__)


# [mm:ss.xx] at the start of a line, rest of the line is the payload
LRC_LINE_PATTERN = re.compile(r"^\[(\d{2}):(\d{2})\.(\d{2})\](.*)$")


def parse_lyrics(raw_text: str | None, declared_format: LyricFormat) -> list[LyricLine]:
    """
    Parse LRC lyrics text into lines sorted by time.

    Args:
        raw_text: Lyrics text. None or empty yields an empty list.
        declared_format: Format the text was declared as. Only synced LRC
                         formats are parsed; any other format yields [].

    Returns:
        Lines sorted ascending by time_ms. The sort is stable, so lines that
        share a timestamp keep the order they had in the text.

    Timestamp Conversion:
        [MM:SS.CC] -> MM*60000 + SS*1000 + CC*10 milliseconds
        (CC is hundredths of a second)

    Payload:
        Only the first tag is stripped. Further bracket groups, as in
        "[00:01.00][00:05.00]Chorus", stay in the text.
    """
    if not raw_text:
        return []

    try:
        lyric_format = LyricFormat(declared_format)
    except ValueError:
        return []
    if not lyric_format.is_synced:
        return []

    lines = []
    for raw_line in raw_text.split("\n"):
        match = LRC_LINE_PATTERN.match(raw_line.strip())
        if match is None:
            continue

        minutes, seconds, centiseconds = (int(g) for g in match.group(1, 2, 3))
        time_ms = minutes * 60_000 + seconds * 1_000 + centiseconds * 10
        lines.append(LyricLine(time_ms=time_ms, text=match.group(4).strip()))

    lines.sort(key=lambda line: line.time_ms)
    logger.debug(f"Parsed {len(lines)} lyric lines")
    return lines


def create_lyrics(text: str | None, lyric_format: LyricFormat) -> LyricsAsset | None:
    """
    Build a LyricsAsset, or None when there is nothing worth storing.

    Blank text (None, empty, whitespace only) never becomes a lyrics track.
    """
    if text is None or not text.strip():
        return None
    return LyricsAsset(format=LyricFormat(lyric_format), text=text)


def format_lyric_time(time_ms: int) -> str:
    """
    Format a playback position for display.

    Examples:
        format_lyric_time(75_000)     # "01:15"
        format_lyric_time(3_725_000)  # "1:02:05"
        format_lyric_time(-5)         # "00:00"
    """
    total_seconds = max(0, int(time_ms)) // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"
