"""Tests for title display formatting."""

import pytest

from onair.domain.value_objects import pretty_title, strip_title_suffixes, title_case_en
from onair.domain.value_objects.track_format import EMPTY_TITLE


class TestStripTitleSuffixes:
    """Test removal of mix/edit/version suffixes."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("One More Time (Radio Edit)", "One More Time"),
            ("One More Time [Extended Mix]", "One More Time"),
            ("Porcelain (Remastered)", "Porcelain"),
            ("Sweeter Love (Sax Mix)", "Sweeter Love"),
            ("Windowlicker (Original Mix) [Remastered 2011]", "Windowlicker"),
        ],
    )
    def test_strips(self, title: str, expected: str) -> None:
        assert strip_title_suffixes(title) == expected

    def test_keeps_other_brackets(self) -> None:
        assert strip_title_suffixes("Song (Live at Wembley)") == "Song (Live at Wembley)"

    def test_empty(self) -> None:
        assert strip_title_suffixes("") == ""


class TestTitleCase:
    """Test English title case."""

    def test_minor_words(self) -> None:
        assert title_case_en("the sound of the city") == "The Sound of the City"

    def test_last_word_capitalized(self) -> None:
        assert title_case_en("what are you waiting for") == "What Are You Waiting For"

    def test_acronyms_kept(self) -> None:
        assert title_case_en("dance yrself clean LCD") == "Dance Yrself Clean LCD"

    def test_hyphenated(self) -> None:
        assert title_case_en("once-in-a-lifetime") == "Once-in-a-Lifetime"

    def test_empty_placeholder(self) -> None:
        assert title_case_en("") == EMPTY_TITLE


def test_pretty_title() -> None:
    assert pretty_title("one more time (radio edit)") == "One More Time"
