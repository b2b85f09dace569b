"""Database connection, DDL, and low-level CRUD for wortschatz."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from pathlib import Path

from wortschatz.exceptions import DatabaseError
from wortschatz.models import LinkKind, RelatedLink

SCHEMA_VERSION = "1.0"

# ---------------------------------------------------------------------------
# DDL statements
# ---------------------------------------------------------------------------

_DDL = """
-- Meta table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT NOT NULL,
    value TEXT,
    UNIQUE (key)
);

-- Entry tables
CREATE TABLE IF NOT EXISTS entries (
    rowid INTEGER PRIMARY KEY,
    id TEXT NOT NULL,
    word TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now')),
    UNIQUE (id)
);
CREATE INDEX IF NOT EXISTS entry_id_index ON entries (id);
CREATE INDEX IF NOT EXISTS entry_word_index ON entries (word);
CREATE INDEX IF NOT EXISTS entry_created_index ON entries (created_at);

-- Canonical keys (word and title) each entry occupies
CREATE TABLE IF NOT EXISTS entry_keys (
    entry_rowid INTEGER NOT NULL REFERENCES entries (rowid) ON DELETE CASCADE,
    key TEXT NOT NULL,
    UNIQUE (key)
);
CREATE INDEX IF NOT EXISTS entry_key_entry_index ON entry_keys (entry_rowid);

CREATE TABLE IF NOT EXISTS definitions (
    rowid INTEGER PRIMARY KEY,
    entry_rowid INTEGER NOT NULL REFERENCES entries (rowid) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    definition TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS definition_entry_index ON definitions (entry_rowid);

CREATE TABLE IF NOT EXISTS related_links (
    rowid INTEGER PRIMARY KEY,
    entry_rowid INTEGER NOT NULL REFERENCES entries (rowid) ON DELETE CASCADE,
    kind TEXT NOT NULL CHECK( kind IN ('scraped', 'manual') ),
    position INTEGER NOT NULL,
    text TEXT NOT NULL,
    href TEXT NOT NULL,
    UNIQUE (entry_rowid, kind, text)
);
CREATE INDEX IF NOT EXISTS related_link_entry_index ON related_links (entry_rowid);

-- Edit history
CREATE TABLE IF NOT EXISTS edit_history (
    rowid INTEGER PRIMARY KEY,
    entity_type TEXT NOT NULL CHECK( entity_type IN ('entry', 'relation') ),
    entity_id TEXT NOT NULL,
    field_name TEXT,
    operation TEXT NOT NULL CHECK( operation IN ('CREATE', 'UPDATE', 'DELETE') ),
    old_value TEXT,
    new_value TEXT,
    timestamp TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);
CREATE INDEX IF NOT EXISTS edit_history_entity_index ON edit_history (entity_type, entity_id);
CREATE INDEX IF NOT EXISTS edit_history_timestamp_index ON edit_history (timestamp);
"""


def connect(db_path: str | Path = ":memory:") -> sqlite3.Connection:
    """Open a database connection with editor PRAGMA settings.

    The connection may be shared between threads; callers serialize
    access themselves.
    """
    db_path_str = str(db_path)
    conn = sqlite3.connect(db_path_str, check_same_thread=False)
    conn.execute("PRAGMA foreign_keys = ON")
    if db_path_str != ":memory:":
        conn.execute("PRAGMA journal_mode = WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize all tables if they don't exist. Set schema version."""
    conn.executescript(_DDL)
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) VALUES ('schema_version', ?)",
        (SCHEMA_VERSION,),
    )
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) "
        "VALUES ('created_at', strftime('%Y-%m-%dT%H:%M:%f', 'now'))",
    )
    conn.commit()


def check_schema_version(conn: sqlite3.Connection) -> None:
    """Verify the database schema version is compatible."""
    try:
        row = conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        # meta table doesn't exist - uninitialized DB
        return
    if row is None:
        return
    version = row[0]
    if version != SCHEMA_VERSION:
        raise DatabaseError(
            f"Incompatible schema version: {version} "
            f"(expected {SCHEMA_VERSION})"
        )


# ---------------------------------------------------------------------------
# Entry CRUD helpers
# ---------------------------------------------------------------------------

def insert_entry(
    conn: sqlite3.Connection,
    entry_id: str,
    word: str,
    title: str,
    keys: Iterable[str],
    definitions: Iterable[str],
    scraped: Iterable[RelatedLink],
) -> int:
    """Insert an entry with its keys, definitions and scraped links.

    Raises :class:`sqlite3.IntegrityError` when one of ``keys`` is already
    taken by another entry.
    """
    cur = conn.execute(
        "INSERT INTO entries (id, word, title) VALUES (?, ?, ?)",
        (entry_id, word, title),
    )
    entry_rowid = cur.lastrowid
    conn.executemany(
        "INSERT INTO entry_keys (entry_rowid, key) VALUES (?, ?)",
        [(entry_rowid, key) for key in keys],
    )
    conn.executemany(
        "INSERT INTO definitions (entry_rowid, position, definition) "
        "VALUES (?, ?, ?)",
        [(entry_rowid, pos, text) for pos, text in enumerate(definitions)],
    )
    _insert_links(conn, entry_rowid, LinkKind.SCRAPED, scraped)
    return entry_rowid


def get_entry_row(conn: sqlite3.Connection, entry_id: str) -> sqlite3.Row | None:
    """Get a full entry row by ID."""
    return conn.execute(
        "SELECT rowid, * FROM entries WHERE id = ?",
        (entry_id,),
    ).fetchone()


def find_entry_row_by_key(conn: sqlite3.Connection, key: str) -> sqlite3.Row | None:
    """Find the entry whose word or title has the canonical ``key``."""
    return conn.execute(
        "SELECT e.rowid, e.* FROM entries e "
        "JOIN entry_keys k ON k.entry_rowid = e.rowid WHERE k.key = ?",
        (key,),
    ).fetchone()


def find_entry_row_by_word(conn: sqlite3.Connection, word: str) -> sqlite3.Row | None:
    """Find an entry by exact, case-sensitive ``word``."""
    return conn.execute(
        "SELECT rowid, * FROM entries WHERE word = ? ORDER BY rowid LIMIT 1",
        (word,),
    ).fetchone()


def list_entry_rows(conn: sqlite3.Connection) -> list[sqlite3.Row]:
    """All entry rows, newest first."""
    return conn.execute(
        "SELECT rowid, * FROM entries ORDER BY created_at DESC, rowid DESC"
    ).fetchall()


def delete_entry(conn: sqlite3.Connection, entry_id: str) -> bool:
    """Delete an entry; returns whether a row was removed."""
    cur = conn.execute("DELETE FROM entries WHERE id = ?", (entry_id,))
    return cur.rowcount > 0


def get_definitions(conn: sqlite3.Connection, entry_rowid: int) -> list[str]:
    rows = conn.execute(
        "SELECT definition FROM definitions WHERE entry_rowid = ? "
        "ORDER BY position",
        (entry_rowid,),
    ).fetchall()
    return [r["definition"] for r in rows]


def get_keys(conn: sqlite3.Connection, entry_rowid: int) -> set[str]:
    rows = conn.execute(
        "SELECT key FROM entry_keys WHERE entry_rowid = ?",
        (entry_rowid,),
    ).fetchall()
    return {r["key"] for r in rows}


# ---------------------------------------------------------------------------
# Related link helpers
# ---------------------------------------------------------------------------

def get_links(
    conn: sqlite3.Connection, entry_rowid: int, kind: LinkKind
) -> list[RelatedLink]:
    """Links of one kind for an entry, in insertion order."""
    rows = conn.execute(
        "SELECT text, href FROM related_links "
        "WHERE entry_rowid = ? AND kind = ? ORDER BY position",
        (entry_rowid, kind.value),
    ).fetchall()
    return [RelatedLink(text=r["text"], href=r["href"]) for r in rows]


def update_relations(
    conn: sqlite3.Connection,
    entry_rowid: int,
    scraped: Iterable[RelatedLink],
    manual: Iterable[RelatedLink],
) -> None:
    """Replace both link lists of an entry."""
    conn.execute(
        "DELETE FROM related_links WHERE entry_rowid = ?",
        (entry_rowid,),
    )
    _insert_links(conn, entry_rowid, LinkKind.SCRAPED, scraped)
    _insert_links(conn, entry_rowid, LinkKind.MANUAL, manual)


def _insert_links(
    conn: sqlite3.Connection,
    entry_rowid: int,
    kind: LinkKind,
    links: Iterable[RelatedLink],
) -> None:
    conn.executemany(
        "INSERT INTO related_links (entry_rowid, kind, position, text, href) "
        "VALUES (?, ?, ?, ?, ?)",
        [
            (entry_rowid, kind.value, pos, link.text, link.href)
            for pos, link in enumerate(links)
        ],
    )
