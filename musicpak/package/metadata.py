"""
Metadata record of a music package.

Design Decisions:
    - Metadata is frozen; edits produce a new record via with_field()
    - All fields are independently optional (empty string / 0 = unknown)
    - No cross-field validation: checks like "year looks like a year" are
      advisory and belong to the UI, not to the record
    - Numeric fields accept text input through coerce_field(), which
      rejects unparsable text instead of raising
"""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any


TEXT_FIELDS = ("title", "artist", "album", "genre", "year", "comment")
NUMERIC_FIELDS = ("duration_ms", "bitrate_kbps", "sample_rate_hz", "channels")

# Upper bounds of the unsigned integer widths the container stores
NUMERIC_LIMITS = {
    "duration_ms": 2**32 - 1,
    "bitrate_kbps": 2**32 - 1,
    "sample_rate_hz": 2**32 - 1,
    "channels": 2**16 - 1,
}


@dataclass(frozen=True)
class Metadata:
    """
    Tags and technical properties of a package.

    Attributes:
        title: Track title.
        artist: Artist name.
        album: Album name.
        genre: Genre name.
        year: Release year, free text.
        comment: Free-form comment.
        duration_ms: Track length in milliseconds (0 = unknown).
        bitrate_kbps: Audio bitrate in kbps (0 = unknown).
        sample_rate_hz: Sample rate in Hz (0 = unknown).
        channels: Channel count (0 = unknown).

    Example:
        meta = Metadata(title="Song", artist="Artist")
        meta = meta.with_field("duration_ms", 215000)
    """

    title: str = ""
    artist: str = ""
    album: str = ""
    genre: str = ""
    year: str = ""
    comment: str = ""
    duration_ms: int = 0
    bitrate_kbps: int = 0
    sample_rate_hz: int = 0
    channels: int = 0

    @property
    def is_empty(self) -> bool:
        return self == Metadata()

    def with_field(self, name: str, value: Any) -> "Metadata":
        """Return a copy with one field replaced."""
        if name not in FIELD_NAMES:
            raise ValueError(f"Unknown metadata field: {name!r}")
        return replace(self, **{name: value})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Metadata":
        """
        Build Metadata from a manifest dictionary.

        Unknown keys are ignored. Text fields are converted with str();
        numeric fields that are missing or invalid become 0.
        """
        if not isinstance(data, dict):
            return cls()

        values: dict[str, Any] = {}
        for name in TEXT_FIELDS:
            raw = data.get(name)
            values[name] = "" if raw is None else str(raw)
        for name in NUMERIC_FIELDS:
            parsed = coerce_numeric(name, data.get(name))
            values[name] = 0 if parsed is None else parsed
        return cls(**values)


FIELD_NAMES = tuple(f.name for f in fields(Metadata))


def coerce_numeric(name: str, raw: Any) -> int | None:
    """
    Convert a raw value to an unsigned integer for a numeric field.

    Returns:
        The integer, or None if the value is missing, not a whole number,
        negative, or larger than the field's storage width.

    Example:
        coerce_numeric("duration_ms", " 215000 ")  # 215000
        coerce_numeric("duration_ms", "3:35")      # None
        coerce_numeric("channels", "-1")           # None
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except ValueError:
            return None

    if value < 0 or value > NUMERIC_LIMITS[name]:
        return None
    return value


def coerce_field(name: str, raw: Any) -> tuple[bool, Any]:
    """
    Convert an editor input value for a metadata field.

    Returns:
        (ok, value). Text fields always succeed (None becomes "").
        Numeric fields fail with (False, None) on unparsable input.

    Raises:
        ValueError: If `name` is not a metadata field.
    """
    if name in TEXT_FIELDS:
        return True, "" if raw is None else str(raw)
    if name in NUMERIC_FIELDS:
        value = coerce_numeric(name, raw)
        return value is not None, value
    raise ValueError(f"Unknown metadata field: {name!r}")
