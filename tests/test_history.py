"""Tests for change tracking / edit history."""

import datetime
import json
import time

import pytest

from wortschatz.exceptions import DuplicateEntryError


class TestHistoryCreate:

    def test_create_records_history(self, editor):
        entry = editor.create_entry("Sonne")
        hist = editor.get_history(entity_type="entry", entity_id=entry.id)
        assert [h.operation for h in hist] == ["CREATE"]
        assert json.loads(hist[0].new_value) == {
            "word": "die Sonne", "title": "die Sonne", "input": "Sonne",
        }

    def test_failed_create_records_nothing(self, editor):
        editor.create_entry("Sonne")
        with pytest.raises(DuplicateEntryError):
            editor.create_entry("Sonnen")
        assert len(editor.get_history(entity_type="entry")) == 1


class TestHistoryDelete:

    def test_delete_records_history(self, editor_with_data):
        ed, sonne, *_ = editor_with_data
        ed.delete_entry(sonne.id)
        hist = ed.get_history(entity_type="entry", entity_id=sonne.id)
        assert [h.operation for h in hist] == ["CREATE", "DELETE"]
        assert json.loads(hist[1].old_value)["word"] == "die Sonne"

    def test_deleting_unknown_entry_records_nothing(self, editor):
        editor.delete_entry("missing")
        assert editor.get_history() == []


class TestRelationHistory:

    def test_add_and_remove_recorded(self, editor_with_data):
        ed, sonne, *_ = editor_with_data
        ed.add_manual_relation(sonne.id, "laufen")
        ed.remove_manual_relation(sonne.id, "laufen")
        hist = ed.get_history(entity_type="relation")
        assert [(h.entity_id, h.operation) for h in hist] == [
            (f"{sonne.id}->manual->laufen", "CREATE"),
            (f"{sonne.id}->manual->laufen", "DELETE"),
        ]

    def test_relation_values(self, editor_with_data):
        ed, sonne, mond, laufen = editor_with_data
        ed.add_manual_relation(sonne.id, "laufen")
        ed.remove_manual_relation(sonne.id, "laufen")
        added, removed = ed.get_history(entity_type="relation")
        href = "https://www.dwds.de/wb/laufen"
        assert json.loads(added.new_value) == {"href": href, "target": laufen.id}
        assert json.loads(removed.old_value) == {"hrefs": [href]}

    def test_noop_remove_not_recorded(self, editor_with_data):
        ed, sonne, *_ = editor_with_data
        ed.remove_manual_relation(sonne.id, "laufen")
        assert ed.get_history(entity_type="relation") == []


class TestHistoryQuery:

    def test_filter_by_operation(self, editor_with_data):
        ed, sonne, *_ = editor_with_data
        ed.delete_entry(sonne.id)
        assert len(ed.get_history(operation="DELETE")) == 1
        assert len(ed.get_history(operation="CREATE")) == 3

    def test_limit_keeps_most_recent(self, editor_with_data):
        ed, sonne, mond, laufen = editor_with_data
        hist = ed.get_history(limit=2)
        assert [h.entity_id for h in hist] == [mond.id, laufen.id]

    def test_zero_limit(self, editor_with_data):
        ed, *_ = editor_with_data
        assert ed.get_history(limit=0) == []

    def test_filter_by_timestamp(self, editor):
        editor.create_entry("Sonne")

        # Database uses UTC timestamps with milliseconds
        time.sleep(0.1)
        middle = datetime.datetime.now(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")
        time.sleep(0.1)

        mond = editor.create_entry("Mond")

        changes = editor.get_changes_since(middle)
        assert [c.entity_id for c in changes] == [mond.id]
