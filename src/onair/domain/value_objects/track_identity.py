"""Track identity: the normalized "artist - title" key.

Hey future me - the track key is THE identity of a song across this whole service!
It is used as:
- the lookup key for track records in the item store (tracks.track_key)
- the dedup key for the play log (no two consecutive plays with the same key)
- the cover cache key

It is a PURE function of (artist, title). "Daft Punk - One More Time" and
"  DAFT   PUNK  - one more time" are the same track. Don't add fuzzy stuff in here
(prefix stripping, mix suffix removal...) - changing the key changes which store rows
match, and old rows would suddenly stop matching!

Examples:
    >>> split_track("Artist - Track - Extended Mix")
    ('Artist', 'Track - Extended Mix')
    >>> norm_key("  DAFT   PUNK  ", "one more time")
    'daft punk - one more time'
"""

import re
import unicodedata
from dataclasses import dataclass, field

SEPARATOR = " - "

# Upstream encoder bug: artist metadata missing -> "undefined - Artist - Title"
UNDEFINED_PREFIX = re.compile(r"^(?:\s*undefined\s+-\s+)+", re.IGNORECASE)

# em dash, en dash, minus sign, horizontal bar used as separators
DASH_SEPARATOR = re.compile(r"\s+[–—−―]\s+")

QUOTE_CHARS = re.compile("[\"'“”‘’«»´`]")

WHITESPACE = re.compile(r"\s+")

NBSP = "\u00a0"


def _collapse(text: str) -> str:
    return WHITESPACE.sub(" ", text.replace(NBSP, " ")).strip()


def clean_now_playing(raw: str | None) -> str:
    """Clean a raw now-playing string from the status feed.

    Args:
        raw: Free text like "Artist - Title" (may be None)

    Returns:
        Cleaned text: "undefined - " artifact removed, dash separators
        normalized to " - ", whitespace collapsed
    """
    text = _collapse(raw or "")
    if not text:
        return ""

    text = DASH_SEPARATOR.sub(SEPARATOR, text)
    text = UNDEFINED_PREFIX.sub("", text)
    return text.strip()


def split_track(raw: str) -> tuple[str, str]:
    """Split "artist - title" on the FIRST separator.

    Everything after the first " - " stays in the title; no separator means
    the whole string is the artist and the title is empty.
    """
    artist, sep, title = (raw or "").partition(SEPARATOR)
    if not sep:
        return artist.strip(), ""
    return artist.strip(), title.strip()


def norm_key(artist: str, title: str) -> str:
    """Build the normalized track key.

    Lowercase, NFKC normalized, NBSP -> space, quotes stripped, whitespace
    collapsed. Idempotent: feeding a key back through split_track + norm_key
    returns the same key.
    """
    combined = f"{_collapse(artist or '')}{SEPARATOR}{_collapse(title or '')}"
    combined = unicodedata.normalize("NFKC", combined).lower()
    combined = QUOTE_CHARS.sub("", combined)
    return _collapse(combined)


@dataclass(frozen=True)
class TrackIdentity:
    """Derived identity of a track, never stored as-is.

    raw keeps the cleaned feed string for the play log; key is always
    norm_key(artist, title).
    """

    artist: str
    title: str
    key: str = field(default="")
    raw: str = ""

    def __post_init__(self) -> None:
        # key is derived - whatever the caller passed, recompute it
        object.__setattr__(self, "key", norm_key(self.artist, self.title))

    @classmethod
    def from_raw(cls, raw: str | None) -> "TrackIdentity":
        """Clean + split a feed string into an identity."""
        cleaned = clean_now_playing(raw)
        artist, title = split_track(cleaned)
        return cls(artist=artist, title=title, raw=cleaned)

    @classmethod
    def from_parts(cls, artist: str, title: str) -> "TrackIdentity":
        """Build an identity from already-split artist/title."""
        artist = _collapse(artist or "")
        title = _collapse(title or "")
        raw = f"{artist}{SEPARATOR}{title}" if title else artist
        return cls(artist=artist, title=title, raw=raw)

    @property
    def is_empty(self) -> bool:
        return not self.artist and not self.title

    @property
    def search_term(self) -> str:
        """Free text query for the artwork search."""
        return f"{self.artist} {self.title}".strip()
