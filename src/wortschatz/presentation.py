"""Shapes handed to the user interface.

Keys follow the JSON the web client consumes (``definitionList``,
``relatedWords``, ``manualRelatedWords``).
"""

from __future__ import annotations

from typing import Any

from wortschatz.exceptions import (
    ConfigurationError,
    DuplicateEntryError,
    ExtractionUnavailableError,
    NotFoundError,
    RelationError,
    ValidationError,
    WortschatzError,
)
from wortschatz.models import EntryModel, LexicalRecord, RelatedLink

_ARTICLE_THEMES = {
    "der": "theme-der",
    "die": "theme-die",
    "das": "theme-das",
}
DEFAULT_THEME = "theme-default"

# Most specific class first.
_ERROR_STATUS: tuple[tuple[type[WortschatzError], int], ...] = (
    (ValidationError, 400),
    (RelationError, 400),
    (ConfigurationError, 400),
    (NotFoundError, 404),
    (DuplicateEntryError, 409),
    (ExtractionUnavailableError, 502),
)


def article_theme(title: str | None) -> str:
    """Colour theme for a noun, picked from its leading article."""
    first, _, rest = (title or "").strip().lower().partition(" ")
    if rest and first in _ARTICLE_THEMES:
        return _ARTICLE_THEMES[first]
    return DEFAULT_THEME


def link_to_dict(link: RelatedLink) -> dict[str, str]:
    return {"text": link.text, "href": link.href}


def entry_to_dict(entry: EntryModel) -> dict[str, Any]:
    return {
        "id": entry.id,
        "word": entry.word,
        "title": entry.title,
        "definitionList": list(entry.definitions),
        "relatedWords": [link_to_dict(link) for link in entry.scraped_related],
        "manualRelatedWords": [
            link_to_dict(link) for link in entry.manual_related
        ],
        "createdAt": entry.created_at,
        "theme": article_theme(entry.title or entry.word),
    }


def record_to_dict(record: LexicalRecord) -> dict[str, Any]:
    """The lookup-preview shape: what the dictionary said about a word."""
    return {
        "word": record.input_word,
        "title": record.canonical_title,
        "relatedWords": [link_to_dict(link) for link in record.related_links],
        "definitionList": list(record.definitions),
    }


def error_status(exc: WortschatzError) -> int:
    for cls, status in _ERROR_STATUS:
        if isinstance(exc, cls):
            return status
    return 500


def error_to_dict(exc: WortschatzError) -> dict[str, Any]:
    """Stable message, error kind and HTTP-style status for an error."""
    return {
        "error": exc.message,
        "kind": type(exc).__name__,
        "status": error_status(exc),
    }


def deletion_to_dict(entry_id: str) -> dict[str, str]:
    return {"deleted": entry_id}
