"""Identity normalization for words and titles."""

from __future__ import annotations

import re

from wortschatz.exceptions import ValidationError

_WHITESPACE = re.compile(r"\s+")


def canonical_key(s: str) -> str:
    """Return the comparison key for a word or title.

    Two strings name the same entry iff their keys are equal.
    """
    return s.strip().lower()


def normalize_whitespace(s: str) -> str:
    """Collapse runs of whitespace to a single space and trim the ends."""
    return _WHITESPACE.sub(" ", s).strip()


def entry_keys(word: str, title: str) -> set[str]:
    """Return the non-empty canonical keys an entry occupies."""
    return {key for key in (canonical_key(word), canonical_key(title)) if key}


def clean_word(word: str | None, what: str = "Word") -> str:
    """Trim user input, rejecting blank strings with :class:`ValidationError`."""
    cleaned = (word or "").strip()
    if not cleaned:
        raise ValidationError(f"{what} must not be empty")
    return cleaned
