"""Custom exception hierarchy for wortschatz.

Every error class carries a stable, user-facing ``message`` that the
presentation layer renders; the instance text carries the detail.
"""


class WortschatzError(Exception):
    """Base exception for all wortschatz errors."""

    message = "Unbekannter Fehler."


class ValidationError(WortschatzError):
    """Invalid input (empty word, empty related word)."""

    message = "Bitte ein Wort eingeben."


class DuplicateEntryError(WortschatzError):
    """The word (or its canonical title) already has an entry."""

    message = "word already learned"


class NotFoundError(WortschatzError):
    """Something that was looked up does not exist."""

    message = "Nicht gefunden."


class WordNotFoundError(NotFoundError):
    """The dictionary source was reached but knows no such word."""

    message = "DWDS hat das Wort nicht gefunden oder es existiert nicht."


class EntryNotFoundError(NotFoundError):
    """No entry with the given id."""

    message = "Wort nicht gefunden."


class RelatedWordNotFoundError(NotFoundError):
    """The relation target has no entry of its own."""

    message = "Verknüpftes Wort nicht gefunden."


class ExtractionUnavailableError(WortschatzError):
    """The dictionary source could not be reached or failed in transport."""

    message = "Failed to scrape data."


class RelationError(WortschatzError):
    """Relation constraint violation."""

    message = "Ungültige Verknüpfung."


class SelfReferenceError(RelationError):
    """An entry cannot be related to itself."""

    message = "Ein Wort kann nicht mit sich selbst verknüpft werden."


class DuplicateEdgeError(RelationError):
    """The entry is already linked to that word."""

    message = "Dieses Wort ist bereits verknüpft."


class DatabaseError(WortschatzError):
    """Schema version mismatch, connection failure."""

    message = "Datenbankfehler."


class ConfigurationError(WortschatzError):
    """A setting from the environment or command line is unusable."""

    message = "Ungültige Einstellung."
