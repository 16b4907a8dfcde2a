"""
Data models for lyrics tracks.

Classes:
    LyricFormat: Declared format of a lyrics track
    LyricLine: A single time-tagged line
    LyricsAsset: A lyrics track (format + raw text) with its parsed lines
"""

from dataclasses import dataclass, field
from enum import IntEnum


class LyricFormat(IntEnum):
    """
    Declared format of a lyrics track.

    Member names are stored in package manifests. Only the contiguous range
    LRC_ES_LYRIC..LRC_LINE_BY_LINE is parseable as timestamped lines;
    everything else is carried as opaque text.
    """

    NONE = 0
    PLAIN_TEXT = 1
    LRC_ES_LYRIC = 2
    LRC_WORD_BY_WORD = 3
    LRC_LINE_BY_LINE = 4
    SRT = 5
    ASS = 6

    @property
    def is_synced(self) -> bool:
        """True if lyrics in this format are parsed into timed lines."""
        return LyricFormat.LRC_ES_LYRIC <= self <= LyricFormat.LRC_LINE_BY_LINE

    @classmethod
    def from_name(cls, name: str) -> "LyricFormat":
        """
        Look up a format by case-insensitive name ('lrc-line-by-line' works too).

        Raises:
            ValueError: If the name matches no format.
        """
        key = name.strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown lyric format: {name!r}") from None


@dataclass(frozen=True)
class LyricLine:
    """
    One line of synchronized lyrics.

    Attributes:
        time_ms: Offset from the start of the track in milliseconds (>= 0).
        text: Lyric text with the leading timestamp tag removed.
    """

    time_ms: int
    text: str


@dataclass(frozen=True)
class LyricsAsset:
    """
    A lyrics track as held by a package.

    `lines` is a pure projection of `text`: it is recomputed on construction
    and never stored in a container. Editing lyrics means building a new
    LyricsAsset, which reparses from scratch.

    Attributes:
        format: Declared lyric format.
        text: Raw lyric text exactly as edited or loaded.
        lines: Parsed lines sorted by time (empty for non-synced formats).

    Raises:
        ValueError: If `format` is not a LyricFormat value.
    """

    format: LyricFormat
    text: str
    lines: tuple[LyricLine, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Imported here to keep models free of a module-level cycle
        from musicpak.lyrics.parser import parse_lyrics

        object.__setattr__(self, "format", LyricFormat(self.format))
        object.__setattr__(self, "lines", tuple(parse_lyrics(self.text, self.format)))

    @property
    def data(self) -> bytes:
        """UTF-8 encoded text, as written into a container."""
        return self.text.encode("utf-8")

    @property
    def is_synced(self) -> bool:
        return self.format.is_synced
