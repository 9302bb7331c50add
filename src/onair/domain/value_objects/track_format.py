"""Display formatting for track titles.

Hey future me - radio automation exports titles in every shape imaginable:
"ONE MORE TIME (Radio Edit)", "one more time [extended mix]", "Porcelain (Remastered)".
These helpers give us two things:

- strip_title_suffixes(): drops the bracketed mix/edit/version noise. Used by the
  artwork search retry (iTunes rarely matches "(Club Mix)" variants) and by pretty_title().
- title_case_en(): English title case that keeps short acronyms ("LCD", "RJD2") intact.

Examples:
    >>> strip_title_suffixes("Sweeter Love (Sax Mix)")
    'Sweeter Love'
    >>> title_case_en("the sound of the city")
    'The Sound of the City'
    >>> pretty_title("one more time (radio edit)")
    'One More Time'
"""

import re

# Optional qualifier word, then the suffix keyword, then anything up to the closing bracket.
TITLE_SUFFIX_PATTERN = re.compile(
    r"\s*[\(\[]\s*"
    r"(?:(?:extended|original|radio|club|album|single|clean|explicit|short|long)\s*)?"
    r"(?:mix|edit|version|remix|re-mix|rework|bootleg|instrumental|acapella|a\s*cappella"
    r"|dub|vip|remaster(?:ed)?|mono|stereo)\b[^)\]]*[\)\]]\s*",
    re.IGNORECASE,
)

# Sax Mix, Dub Mix etc. have a free word BEFORE the keyword - handled by the second pattern
TITLE_FREE_MIX_PATTERN = re.compile(
    r"\s*[\(\[][^)\]]*\b(?:mix|edit|remix|version)\b[^)\]]*[\)\]]\s*",
    re.IGNORECASE,
)

MINOR_WORDS: frozenset[str] = frozenset(
    {
        # articles + conjunctions
        "a", "an", "the", "and", "but", "or", "nor", "for", "so", "yet",
        # short prepositions
        "as", "at", "by", "from", "in", "into", "near", "of", "on", "onto",
        "over", "per", "to", "up", "via", "with", "within", "without",
    }
)

EMPTY_TITLE = "—"

_WORD_CHARS = re.compile(r"[^\w'’]", re.UNICODE)


def strip_title_suffixes(title: str) -> str:
    """Remove bracketed mix/edit/version suffixes from a title.

    Args:
        title: Raw title, may be empty

    Returns:
        Title without the suffixes, whitespace collapsed
    """
    text = (title or "").strip()
    if not text:
        return ""

    text = TITLE_SUFFIX_PATTERN.sub(" ", text)
    text = TITLE_FREE_MIX_PATTERN.sub(" ", text)
    return re.sub(r"\s{2,}", " ", text).strip()


def _is_acronym(chunk: str) -> bool:
    return chunk == chunk.upper() and any(c.isalpha() for c in chunk) and len(chunk) <= 6


def title_case_en(text: str) -> str:
    """English title case.

    Minor words stay lowercase unless first or last; short all-caps chunks
    are kept as acronyms; hyphenated words are cased per part.

    Returns:
        Title-cased string, or an em dash placeholder for empty input
    """
    source = (text or "").strip()
    if not source:
        return EMPTY_TITLE

    parts = re.split(r"(\s+)", source)
    last_index = len(parts) - 1
    out: list[str] = []

    for idx, chunk in enumerate(parts):
        if not chunk or chunk.isspace():
            out.append(chunk)
            continue

        if _is_acronym(chunk):
            out.append(chunk)
            continue

        pieces = chunk.split("-")
        rebuilt: list[str] = []
        for h_idx, piece in enumerate(pieces):
            cleaned = _WORD_CHARS.sub("", piece).replace("_", "")
            if not cleaned:
                rebuilt.append(piece)
                continue

            lower = cleaned.lower()
            is_first = idx == 0 and h_idx == 0
            is_last = idx == last_index and h_idx == len(pieces) - 1
            if not is_first and not is_last and lower in MINOR_WORDS:
                rebuilt.append(piece.replace(cleaned, lower, 1))
            else:
                rebuilt.append(piece.replace(cleaned, lower[:1].upper() + lower[1:], 1))
        out.append("-".join(rebuilt))

    return "".join(out)


def pretty_title(raw_title: str) -> str:
    """Strip mix suffixes, then title-case."""
    return title_case_en(strip_title_suffixes(raw_title or ""))
