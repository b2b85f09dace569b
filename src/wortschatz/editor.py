"""VocabularyEditor, the main entry point for the wortschatz library."""

from __future__ import annotations

import functools
import logging
import sqlite3
import threading
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from wortschatz import db as _db
from wortschatz import history as _hist
from wortschatz import relations as _rel
from wortschatz.config import Settings
from wortschatz.exceptions import (
    DuplicateEntryError,
    EntryNotFoundError,
    RelatedWordNotFoundError,
    WordNotFoundError,
)
from wortschatz.models import (
    EditRecord,
    EntryModel,
    LexicalRecord,
    LinkKind,
    RelatedLink,
    ValidationResult,
)
from wortschatz.normalize import canonical_key, clean_word, entry_keys
from wortschatz.source import (
    DictionarySource,
    DwdsSource,
    fetch_record,
    reference_url,
)

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])


def _modifies_db(method: _F) -> _F:
    """Decorator: runs a mutation in one locked transaction."""

    @functools.wraps(method)
    def wrapper(self: VocabularyEditor, *args: Any, **kwargs: Any) -> Any:
        with self._lock, self._conn:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def _reads_db(method: _F) -> _F:
    """Decorator: holds the connection lock for a read."""

    @functools.wraps(method)
    def wrapper(self: VocabularyEditor, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class VocabularyEditor:
    """Look words up, store them once, and curate links between them.

    ``source`` is anything with a ``lookup(word) -> str`` method; by default
    pages are fetched from DWDS with the timeout from ``settings``.
    """

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        *,
        source: DictionarySource | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._owns_source = source is None
        self._source = source or DwdsSource.from_settings(self.settings)
        self._lock = threading.RLock()
        self._conn = _db.connect(db_path)
        _db.check_schema_version(self._conn)
        _db.init_db(self._conn)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        source: DictionarySource | None = None,
    ) -> VocabularyEditor:
        return cls(settings.db_path, source=source, settings=settings)

    def close(self) -> None:
        """Close the database connection and the owned HTTP session."""
        self._conn.close()
        if self._owns_source and isinstance(self._source, DwdsSource):
            self._source.close()

    def __enter__(self) -> VocabularyEditor:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Lookup and reconciliation
    # ------------------------------------------------------------------

    def preview(self, word: str) -> LexicalRecord:
        """Fetch and extract ``word`` without storing anything."""
        return fetch_record(self._source, word, base_url=self.settings.base_url)

    def create_entry(self, word: str) -> EntryModel:
        """Learn a new word.

        The store is checked for the input spelling before the page is
        fetched, and again for the canonical title the page reveals, since
        two spellings may resolve to the same lemma.
        """
        word = clean_word(word)
        self._check_not_learned(word)

        record = self._fetch(word)

        self._check_not_learned(record.display_word)
        if record.is_empty:
            raise WordNotFoundError(f"No dictionary entry for {word!r}")

        return self._insert_record(record)

    def _fetch(self, word: str) -> LexicalRecord:
        return fetch_record(self._source, word, base_url=self.settings.base_url)

    @_reads_db
    def _check_not_learned(self, word: str) -> None:
        row = _db.find_entry_row_by_key(self._conn, canonical_key(word))
        if row is not None:
            raise DuplicateEntryError(
                f"Already learned: {word!r} (entry {row['id']})"
            )

    @_modifies_db
    def _insert_record(self, record: LexicalRecord) -> EntryModel:
        entry_id = uuid.uuid4().hex
        word = record.display_word
        title = record.canonical_title
        try:
            _db.insert_entry(
                self._conn,
                entry_id,
                word,
                title,
                entry_keys(word, title),
                record.definitions,
                record.related_links,
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateEntryError(f"Already learned: {word!r}") from e

        _hist.entry_learned(self._conn, entry_id, word, title, record.input_word)
        logger.info("Learned %r as entry %s", word, entry_id)
        return self._build_entry_model(entry_id)

    # ------------------------------------------------------------------
    # Entry access
    # ------------------------------------------------------------------

    @_reads_db
    def list_entries(self) -> list[EntryModel]:
        """All entries, newest first."""
        return [
            self._row_to_entry(row) for row in _db.list_entry_rows(self._conn)
        ]

    @_reads_db
    def get_entry(self, entry_id: str) -> EntryModel:
        return self._build_entry_model(entry_id)

    @_reads_db
    def find_entry(self, word: str) -> EntryModel | None:
        """Find the entry whose word or title matches ``word``, ignoring case."""
        row = _db.find_entry_row_by_key(self._conn, canonical_key(word))
        return self._row_to_entry(row) if row is not None else None

    @_reads_db
    def find_entry_by_word(self, word: str) -> EntryModel | None:
        """Find the entry stored under exactly ``word``, as relations resolve targets."""
        row = _db.find_entry_row_by_word(self._conn, word.strip())
        return self._row_to_entry(row) if row is not None else None

    @_modifies_db
    def delete_entry(self, entry_id: str) -> None:
        """Delete an entry. Deleting an unknown id is not an error."""
        row = _db.get_entry_row(self._conn, entry_id)
        if row is None:
            logger.debug("Entry %s already absent", entry_id)
            return
        _hist.entry_forgotten(self._conn, entry_id, row["word"], row["title"])
        _db.delete_entry(self._conn, entry_id)
        logger.info("Deleted entry %s (%r)", entry_id, row["word"])

    def _build_entry_model(self, entry_id: str) -> EntryModel:
        row = _db.get_entry_row(self._conn, entry_id)
        if row is None:
            raise EntryNotFoundError(f"Entry not found: {entry_id!r}")
        return self._row_to_entry(row)

    def _row_to_entry(self, row: sqlite3.Row) -> EntryModel:
        rowid = row["rowid"]
        return EntryModel(
            id=row["id"],
            word=row["word"],
            title=row["title"],
            definitions=tuple(_db.get_definitions(self._conn, rowid)),
            scraped_related=tuple(
                _db.get_links(self._conn, rowid, LinkKind.SCRAPED)
            ),
            manual_related=tuple(
                _db.get_links(self._conn, rowid, LinkKind.MANUAL)
            ),
            created_at=row["created_at"],
        )

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    @_modifies_db
    def add_manual_relation(self, entry_id: str, related_word: str) -> EntryModel:
        """Link an entry to another learned word."""
        return self._add_relation(entry_id, related_word, LinkKind.MANUAL)

    @_modifies_db
    def add_scraped_relation(self, entry_id: str, related_word: str) -> EntryModel:
        """Append a learned word to the entry's dictionary-derived links."""
        return self._add_relation(entry_id, related_word, LinkKind.SCRAPED)

    @_modifies_db
    def remove_manual_relation(self, entry_id: str, text: str) -> EntryModel:
        """Remove every manual link whose text equals ``text``.

        Removing a text that is not linked leaves the entry unchanged.
        """
        entry = self._build_entry_model(entry_id)
        remaining = _rel.remove_links(entry.manual_related, text)
        removed = [link for link in entry.manual_related if link.text == text]
        if not removed:
            return entry

        entry_rowid = _db.get_entry_row(self._conn, entry_id)["rowid"]
        _db.update_relations(
            self._conn, entry_rowid, entry.scraped_related, remaining
        )
        _hist.link_removed(self._conn, entry_id, LinkKind.MANUAL, removed)
        logger.info("Unlinked %r from %r", text, entry.word)
        return self._build_entry_model(entry_id)

    def _add_relation(
        self, entry_id: str, related_word: str, kind: LinkKind
    ) -> EntryModel:
        candidate = _rel.clean_candidate(related_word)
        entry = self._build_entry_model(entry_id)
        _rel.check_not_self(entry, candidate)

        target_row = _db.find_entry_row_by_word(self._conn, candidate)
        if target_row is None:
            raise RelatedWordNotFoundError(
                f"Related word has no entry: {candidate!r}"
            )
        target = self._row_to_entry(target_row)
        link = RelatedLink(
            text=target.display_text,
            href=reference_url(target.word, self.settings.base_url),
        )

        scraped = list(entry.scraped_related)
        manual = list(entry.manual_related)
        if kind is LinkKind.MANUAL:
            manual = _rel.append_link(manual, link)
        else:
            scraped = _rel.append_link(scraped, link)

        entry_rowid = _db.get_entry_row(self._conn, entry_id)["rowid"]
        _db.update_relations(self._conn, entry_rowid, scraped, manual)
        _hist.link_added(self._conn, entry_id, kind, link, target.id)
        logger.info("Linked %r -> %r (%s)", entry.word, link.text, kind.value)
        return self._build_entry_model(entry_id)

    # ------------------------------------------------------------------
    # Change Tracking
    # ------------------------------------------------------------------

    @_reads_db
    def get_history(
        self,
        *,
        entity_type: str | None = None,
        entity_id: str | None = None,
        since: str | None = None,
        operation: str | None = None,
        limit: int | None = None,
    ) -> list[EditRecord]:
        return _hist.query_history(
            self._conn,
            entity_type=entity_type,
            entity_id=entity_id,
            since=since,
            operation=operation,
            limit=limit,
        )

    def get_changes_since(self, timestamp: str) -> list[EditRecord]:
        return self.get_history(since=timestamp)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @_reads_db
    def validate(self) -> list[ValidationResult]:
        from wortschatz.validator import validate_all
        return validate_all(self._conn)

    @_reads_db
    def validate_entry(self, entry_id: str) -> list[ValidationResult]:
        from wortschatz.validator import validate_entry
        return validate_entry(self._conn, entry_id)
