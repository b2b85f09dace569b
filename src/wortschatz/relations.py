"""Rules for related-word edges between entries.

Edges are directed and denormalized: each one copies the target's display
text and link, so listing an entry never needs the target row.  Renaming
the target later does not touch existing edges.

The functions here are pure; the editor loads the current lists, asks these
helpers for the new list, and persists the result in one transaction.
"""

from __future__ import annotations

from collections.abc import Sequence

from wortschatz.exceptions import (
    DuplicateEdgeError,
    SelfReferenceError,
)
from wortschatz.models import EntryModel, RelatedLink
from wortschatz.normalize import canonical_key, clean_word, entry_keys


def clean_candidate(candidate: str) -> str:
    """Trim a related-word candidate, rejecting blank input."""
    return clean_word(candidate, "Related word")


def check_not_self(entry: EntryModel, candidate: str) -> None:
    """Reject a candidate naming the entry itself."""
    if canonical_key(candidate) in entry_keys(entry.word, entry.title):
        raise SelfReferenceError(
            f"Cannot relate {entry.word!r} to itself"
        )


def append_link(
    links: Sequence[RelatedLink], link: RelatedLink
) -> list[RelatedLink]:
    """Return ``links`` with ``link`` appended.

    Raises :class:`DuplicateEdgeError` if an edge with the same text exists.
    """
    if any(existing.text == link.text for existing in links):
        raise DuplicateEdgeError(f"Already linked: {link.text!r}")
    return [*links, link]


def remove_links(
    links: Sequence[RelatedLink], text: str
) -> list[RelatedLink]:
    """Return ``links`` without every edge whose text equals ``text``."""
    return [link for link in links if link.text != text]
