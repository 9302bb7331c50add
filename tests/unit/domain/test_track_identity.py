"""Tests for track identity cleaning, splitting and key normalization."""

import pytest

from onair.domain.value_objects import (
    TrackIdentity,
    clean_now_playing,
    norm_key,
    split_track,
)


class TestSplitTrack:
    """Test splitting on the first separator."""

    def test_simple_split(self) -> None:
        assert split_track("A - B") == ("A", "B")

    def test_extra_separators_stay_in_title(self) -> None:
        assert split_track("A - B - C") == ("A", "B - C")
        assert split_track("Artist - Track - Extended Mix") == (
            "Artist",
            "Track - Extended Mix",
        )

    def test_no_separator_is_artist_only(self) -> None:
        assert split_track("NoSeparator") == ("NoSeparator", "")

    def test_hyphen_without_spaces_is_not_a_separator(self) -> None:
        assert split_track("Jay-Z - Empire State of Mind") == (
            "Jay-Z",
            "Empire State of Mind",
        )

    def test_empty_input(self) -> None:
        assert split_track("") == ("", "")


class TestCleanNowPlaying:
    """Test cleanup of raw feed text."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("undefined - Moby - Porcelain", "Moby - Porcelain"),
            ("Undefined - Moby - Porcelain", "Moby - Porcelain"),
            ("undefined - undefined - Moby - Porcelain", "Moby - Porcelain"),
            ("Daft Punk — One More Time", "Daft Punk - One More Time"),
            ("Daft Punk – One More Time", "Daft Punk - One More Time"),
            ("  Daft Punk   -  One More Time ", "Daft Punk - One More Time"),
        ],
    )
    def test_clean(self, raw: str, expected: str) -> None:
        assert clean_now_playing(raw) == expected

    def test_none_and_blank(self) -> None:
        assert clean_now_playing(None) == ""
        assert clean_now_playing("   ") == ""

    def test_undefined_inside_title_is_kept(self) -> None:
        assert clean_now_playing("Moby - undefined - Remix") == "Moby - undefined - Remix"


class TestNormKey:
    """Test the normalized track key."""

    def test_case_and_whitespace_insensitive(self) -> None:
        assert norm_key("Daft Punk", "One More Time") == norm_key(
            "  DAFT   PUNK  ", "one more time"
        )
        assert norm_key("Daft Punk", "One More Time") == "daft punk - one more time"

    def test_idempotent(self) -> None:
        key = norm_key("Daft Punk", "One More Time")
        artist, title = split_track(key)
        assert norm_key(artist, title) == key

    def test_quotes_stripped(self) -> None:
        assert norm_key("Guns N' Roses", "Sweet Child O’ Mine") == (
            "guns n roses - sweet child o mine"
        )

    def test_nbsp_and_unicode_forms(self) -> None:
        assert norm_key("Daft\u00a0Punk", "One  More Time") == "daft punk - one more time"
        # fullwidth letters fold to ASCII under NFKC
        assert norm_key("Ｍｏｂｙ", "Porcelain\u00a0") == "moby - porcelain"


class TestTrackIdentity:
    """Test the TrackIdentity value object."""

    def test_from_raw(self) -> None:
        identity = TrackIdentity.from_raw("undefined - Moby - Porcelain")

        assert identity.artist == "Moby"
        assert identity.title == "Porcelain"
        assert identity.key == "moby - porcelain"
        assert identity.raw == "Moby - Porcelain"

    def test_key_is_always_derived(self) -> None:
        identity = TrackIdentity(artist="Moby", title="Porcelain", key="garbage")
        assert identity.key == "moby - porcelain"

    def test_from_parts_matches_from_raw(self) -> None:
        assert (
            TrackIdentity.from_parts(" Moby ", "Porcelain").key
            == TrackIdentity.from_raw("MOBY - porcelain").key
        )

    def test_empty(self) -> None:
        assert TrackIdentity.from_raw("").is_empty
        assert not TrackIdentity.from_raw("Station ID").is_empty

    def test_search_term(self) -> None:
        identity = TrackIdentity.from_raw("Daft Punk - One More Time")
        assert identity.search_term == "Daft Punk One More Time"
