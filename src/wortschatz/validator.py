"""Validation engine for wortschatz."""

from __future__ import annotations

import sqlite3

from wortschatz.db import get_keys
from wortschatz.models import ValidationResult
from wortschatz.normalize import canonical_key, entry_keys


def validate_all(conn: sqlite3.Connection) -> list[ValidationResult]:
    """Run all validation rules."""
    results: list[ValidationResult] = []
    results.extend(_val_ent_001(conn))
    results.extend(_val_rel_001(conn))
    results.extend(_val_rel_002(conn))
    results.extend(_val_ent_002(conn))
    return results


def validate_entry(
    conn: sqlite3.Connection, entry_id: str
) -> list[ValidationResult]:
    """Validate a specific entry."""
    row = conn.execute(
        "SELECT rowid FROM entries WHERE id = ?", (entry_id,)
    ).fetchone()
    if row is None:
        return []
    rowid = row["rowid"]
    results: list[ValidationResult] = []
    results.extend(_val_ent_001(conn, rowid))
    results.extend(_val_rel_001(conn, rowid))
    results.extend(_val_rel_002(conn, rowid))
    results.extend(_val_ent_002(conn, rowid))
    return results


def _entry_filter(entry_rowid: int | None, alias: str = "e") -> tuple[str, tuple]:
    if entry_rowid is None:
        return "", ()
    return f" AND {alias}.rowid = ?", (entry_rowid,)


def _val_ent_001(
    conn: sqlite3.Connection, entry_rowid: int | None = None
) -> list[ValidationResult]:
    """VAL-ENT-001: entry has no definitions."""
    where, params = _entry_filter(entry_rowid)
    rows = conn.execute(
        "SELECT e.id, e.word FROM entries e "
        "WHERE NOT EXISTS (SELECT 1 FROM definitions d "
        "WHERE d.entry_rowid = e.rowid)" + where,
        params,
    ).fetchall()
    return [
        ValidationResult(
            rule_id="VAL-ENT-001",
            severity="WARNING",
            entity_type="entry",
            entity_id=r["id"],
            message=f"Entry {r['word']!r} has no definitions",
            details=None,
        )
        for r in rows
    ]


def _val_rel_001(
    conn: sqlite3.Connection, entry_rowid: int | None = None
) -> list[ValidationResult]:
    """VAL-REL-001: manual link no longer matches a stored entry."""
    where, params = _entry_filter(entry_rowid)
    known = {r["key"] for r in conn.execute("SELECT key FROM entry_keys")}
    rows = conn.execute(
        "SELECT e.id, l.text FROM related_links l "
        "JOIN entries e ON l.entry_rowid = e.rowid "
        "WHERE l.kind = 'manual'" + where + " ORDER BY e.rowid, l.position",
        params,
    ).fetchall()
    return [
        ValidationResult(
            rule_id="VAL-REL-001",
            severity="WARNING",
            entity_type="relation",
            entity_id=r["id"],
            message=f"Linked word {r['text']!r} has no entry",
            details={"text": r["text"]},
        )
        for r in rows
        if canonical_key(r["text"]) not in known
    ]


def _val_rel_002(
    conn: sqlite3.Connection, entry_rowid: int | None = None
) -> list[ValidationResult]:
    """VAL-REL-002: an entry has a manual link to itself."""
    where, params = _entry_filter(entry_rowid)
    rows = conn.execute(
        "SELECT e.id, e.word, e.title, l.kind, l.text FROM related_links l "
        "JOIN entries e ON l.entry_rowid = e.rowid "
        "WHERE l.kind = 'manual'" + where + " ORDER BY e.rowid, l.position",
        params,
    ).fetchall()
    return [
        ValidationResult(
            rule_id="VAL-REL-002",
            severity="ERROR",
            entity_type="relation",
            entity_id=r["id"],
            message=f"Entry {r['word']!r} is linked to itself",
            details={"kind": r["kind"], "text": r["text"]},
        )
        for r in rows
        if canonical_key(r["text"]) in entry_keys(r["word"], r["title"])
    ]


def _val_ent_002(
    conn: sqlite3.Connection, entry_rowid: int | None = None
) -> list[ValidationResult]:
    """VAL-ENT-002: entry word is not registered as a key."""
    where, params = _entry_filter(entry_rowid)
    rows = conn.execute(
        "SELECT e.rowid, e.id, e.word, e.title FROM entries e WHERE 1=1" + where,
        params,
    ).fetchall()
    results: list[ValidationResult] = []
    for r in rows:
        missing = entry_keys(r["word"], r["title"]) - get_keys(conn, r["rowid"])
        if missing:
            results.append(ValidationResult(
                rule_id="VAL-ENT-002",
                severity="ERROR",
                entity_type="entry",
                entity_id=r["id"],
                message=f"Entry {r['word']!r} is missing duplicate-check keys",
                details={"missing": sorted(missing)},
            ))
    return results
