"""Tests for the SQLite layer."""

import sqlite3

import pytest

from wortschatz import VocabularyEditor, db
from wortschatz.exceptions import DatabaseError
from wortschatz.models import LinkKind, RelatedLink


@pytest.fixture
def conn():
    c = db.connect(":memory:")
    db.init_db(c)
    yield c
    c.close()


def _insert(conn, entry_id, word, title="", definitions=(), scraped=()):
    keys = {k for k in (word.lower(), title.lower()) if k}
    return db.insert_entry(conn, entry_id, word, title, keys, definitions, scraped)


class TestSchema:

    def test_tables_created(self, conn):
        names = {
            r["name"] for r in conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            )
        }
        assert {"meta", "entries", "entry_keys", "definitions",
                "related_links", "edit_history"} <= names

    def test_schema_version(self, conn):
        row = conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        ).fetchone()
        assert row["value"] == db.SCHEMA_VERSION

    def test_incompatible_version(self, tmp_path):
        path = tmp_path / "old.db"
        c = db.connect(path)
        db.init_db(c)
        c.execute("UPDATE meta SET value = '0.1' WHERE key = 'schema_version'")
        c.commit()
        c.close()
        with pytest.raises(DatabaseError):
            VocabularyEditor(path)

    def test_reopen_file_database(self, tmp_path, source):
        path = tmp_path / "vocab.db"
        with VocabularyEditor(path, source=source) as ed:
            entry = ed.create_entry("Sonne")
        with VocabularyEditor(path, source=source) as ed:
            assert ed.get_entry(entry.id) == entry


class TestEntryRows:

    def test_insert_and_read_back(self, conn):
        rowid = _insert(
            conn, "e1", "die Sonne", "die Sonne",
            definitions=["Stern", "Licht"],
            scraped=[RelatedLink("Mond", "https://www.dwds.de/wb/Mond")],
        )
        assert db.get_entry_row(conn, "e1")["word"] == "die Sonne"
        assert db.get_definitions(conn, rowid) == ["Stern", "Licht"]
        assert db.get_keys(conn, rowid) == {"die sonne"}
        assert db.get_links(conn, rowid, LinkKind.SCRAPED) == [
            RelatedLink("Mond", "https://www.dwds.de/wb/Mond"),
        ]
        assert db.get_links(conn, rowid, LinkKind.MANUAL) == []

    def test_key_is_unique(self, conn):
        _insert(conn, "e1", "die Sonne", "die Sonne")
        with pytest.raises(sqlite3.IntegrityError):
            _insert(conn, "e2", "Die Sonne")

    def test_find_by_key_and_word(self, conn):
        _insert(conn, "e1", "Sonne", "die Sonne")
        assert db.find_entry_row_by_key(conn, "die sonne")["id"] == "e1"
        assert db.find_entry_row_by_key(conn, "sonne")["id"] == "e1"
        assert db.find_entry_row_by_word(conn, "Sonne")["id"] == "e1"
        assert db.find_entry_row_by_word(conn, "sonne") is None

    def test_delete_cascades(self, conn):
        rowid = _insert(conn, "e1", "Sonne", definitions=["Stern"])
        assert db.delete_entry(conn, "e1") is True
        assert db.delete_entry(conn, "e1") is False
        assert db.get_definitions(conn, rowid) == []
        assert db.get_keys(conn, rowid) == set()


class TestUpdateRelations:

    def test_replaces_both_lists(self, conn):
        rowid = _insert(conn, "e1", "Sonne", scraped=[RelatedLink("a", "x")])
        db.update_relations(
            conn, rowid,
            [RelatedLink("b", "y")],
            [RelatedLink("c", "z"), RelatedLink("a", "x")],
        )
        assert [l.text for l in db.get_links(conn, rowid, LinkKind.SCRAPED)] == ["b"]
        assert [l.text for l in db.get_links(conn, rowid, LinkKind.MANUAL)] == ["c", "a"]
