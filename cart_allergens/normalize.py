from __future__ import annotations

import re
from functools import lru_cache


# Separators that would otherwise fuse neighbouring terms at a word boundary.
_SEPARATOR_RE = re.compile(r"[,;:()\[\]/]")

_LABEL_RE = re.compile(r"Ingredients[:\s]*", re.IGNORECASE)

_ACCESSIBILITY_LABEL_RE = re.compile(r"Opens in a new tab", re.IGNORECASE)

_WS_RE = re.compile(r"\s+")


def normalize_ingredients(text: str) -> str:
    """Lowercase ingredient text and blank out separator punctuation.

    Applying it twice gives the same result as applying it once.
    """
    return _SEPARATOR_RE.sub(" ", text.lower())


def normalize_term(term: str | None) -> str:
    if not term:
        return ""
    return term.strip().lower()


@lru_cache(maxsize=512)
def word_pattern(term: str) -> re.Pattern[str]:
    """Whole-word, case-insensitive pattern for a literal term."""
    return re.compile(r"\b" + re.escape(term) + r"\b", re.IGNORECASE)


def contains_word(text: str, term: str) -> bool:
    if not term:
        return False
    return word_pattern(term).search(text) is not None


def strip_label(text: str) -> str:
    """Drop the first 'Ingredients:' label from *text* and trim it."""
    return _LABEL_RE.sub("", text, count=1).strip()


def strip_accessibility_label(text: str) -> str:
    return _ACCESSIBILITY_LABEL_RE.sub("", text).strip()


def clean_title(text: str | None) -> str:
    """Collapse whitespace in a link's text and drop screen-reader labels."""
    if not text:
        return ""
    return _WS_RE.sub(" ", strip_accessibility_label(text)).strip()
