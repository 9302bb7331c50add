"""Value objects for track identity and title formatting."""

from onair.domain.value_objects.track_format import (
    pretty_title,
    strip_title_suffixes,
    title_case_en,
)
from onair.domain.value_objects.track_identity import (
    SEPARATOR,
    TrackIdentity,
    clean_now_playing,
    norm_key,
    split_track,
)

__all__ = [
    "SEPARATOR",
    "TrackIdentity",
    "clean_now_playing",
    "norm_key",
    "pretty_title",
    "split_track",
    "strip_title_suffixes",
    "title_case_en",
]
