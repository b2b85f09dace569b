"""Edit log for entries and their links.

Each row names the changed thing (``entry`` or ``relation``), the operation
and a JSON snapshot of what was added or removed.  Relation rows are keyed
``<entry id>-><kind>-><link text>`` so the log can be filtered per edge.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from wortschatz.models import EditRecord, LinkKind, RelatedLink

ENTRY = "entry"
RELATION = "relation"


def relation_key(entry_id: str, kind: LinkKind, text: str) -> str:
    return f"{entry_id}->{kind.value}->{text}"


def _log(
    conn: sqlite3.Connection,
    operation: str,
    entity_type: str,
    entity_id: str,
    *,
    old: dict[str, Any] | None = None,
    new: dict[str, Any] | None = None,
) -> None:
    conn.execute(
        "INSERT INTO edit_history "
        "(entity_type, entity_id, operation, old_value, new_value) "
        "VALUES (?, ?, ?, ?, ?)",
        (
            entity_type,
            entity_id,
            operation,
            json.dumps(old, ensure_ascii=False) if old else None,
            json.dumps(new, ensure_ascii=False) if new else None,
        ),
    )


def entry_learned(
    conn: sqlite3.Connection,
    entry_id: str,
    word: str,
    title: str,
    input_word: str,
) -> None:
    _log(conn, "CREATE", ENTRY, entry_id,
         new={"word": word, "title": title, "input": input_word})


def entry_forgotten(
    conn: sqlite3.Connection, entry_id: str, word: str, title: str
) -> None:
    _log(conn, "DELETE", ENTRY, entry_id, old={"word": word, "title": title})


def link_added(
    conn: sqlite3.Connection,
    entry_id: str,
    kind: LinkKind,
    link: RelatedLink,
    target_id: str,
) -> None:
    _log(conn, "CREATE", RELATION, relation_key(entry_id, kind, link.text),
         new={"href": link.href, "target": target_id})


def link_removed(
    conn: sqlite3.Connection,
    entry_id: str,
    kind: LinkKind,
    removed: list[RelatedLink],
) -> None:
    """Log removal of every link in ``removed``; they share one text."""
    _log(conn, "DELETE", RELATION, relation_key(entry_id, kind, removed[0].text),
         old={"hrefs": [link.href for link in removed]})


def query_history(
    conn: sqlite3.Connection,
    *,
    entity_type: str | None = None,
    entity_id: str | None = None,
    since: str | None = None,
    operation: str | None = None,
    limit: int | None = None,
) -> list[EditRecord]:
    """Matching log rows, oldest first.

    With ``limit`` only the most recent ``limit`` rows are returned, still
    oldest first.
    """
    conditions = {
        "entity_type = ?": entity_type,
        "entity_id = ?": entity_id,
        "timestamp > ?": since,
        "operation = ?": operation,
    }
    used = {cond: value for cond, value in conditions.items() if value is not None}
    where = " AND ".join(used) or "1=1"
    params: list[Any] = list(used.values())

    newest_first = (
        f"SELECT * FROM edit_history WHERE {where} "
        "ORDER BY timestamp DESC, rowid DESC"
    )
    if limit is not None:
        newest_first += " LIMIT ?"
        params.append(max(limit, 0))

    rows = conn.execute(
        f"SELECT * FROM ({newest_first}) ORDER BY timestamp ASC, rowid ASC",
        params,
    ).fetchall()
    return [_to_record(row) for row in rows]


def _to_record(row: sqlite3.Row) -> EditRecord:
    return EditRecord(
        id=row["rowid"],
        entity_type=row["entity_type"],
        entity_id=row["entity_id"],
        field_name=row["field_name"],
        operation=row["operation"],
        old_value=row["old_value"],
        new_value=row["new_value"],
        timestamp=row["timestamp"],
    )
