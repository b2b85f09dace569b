"""
Tests for batch change request functionality.
"""
import pytest

from wortschatz.batch import (
    load_change_request,
    validate_change_request,
    execute_change_request,
    load_yaml_file,
    ParseError,
    ChangeRequest,
    Change,
    OperationType,
)


class TestParser:
    """Tests for YAML parsing."""

    def test_load_from_file(self, tmp_path):
        """Test loading a change request from a file."""
        yaml_content = """
session:
  name: Woche 3
  description: Himmelskörper
changes:
  - operation: learn
    word: Sonne
"""
        yaml_file = tmp_path / "week3.yaml"
        yaml_file.write_text(yaml_content, encoding="utf-8")

        request = load_change_request(yaml_file)

        assert request.session_name == "Woche 3"
        assert request.session_description == "Himmelskörper"
        assert request.source_file == yaml_file
        assert len(request.changes) == 1
        assert request.changes[0].operation == "learn"
        assert request.changes[0].word == "Sonne"

    def test_load_from_path_string(self, tmp_path):
        yaml_file = tmp_path / "week3.yaml"
        yaml_file.write_text("changes:\n  - operation: forget\n    word: Mond\n")

        request = load_change_request(str(yaml_file))

        assert request.changes[0].operation == "forget"

    def test_load_from_string(self):
        """Test loading a change request from a YAML string."""
        yaml_content = """
changes:
  - operation: relate
    word: die Sonne
    related: der Mond
"""
        request = load_change_request(yaml_content)

        assert request.session_name is None
        assert request.changes[0].related == "der Mond"

    def test_load_from_dict(self):
        """Test loading a change request from a dictionary."""
        data = {
            "changes": [
                {"operation": "unrelate", "word": "die Sonne", "text": "der Mond"},
            ],
        }

        request = load_change_request(data)

        assert request.changes[0].text == "der Mond"
        assert request.changes[0].params == {"word": "die Sonne", "text": "der Mond"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_change_request(tmp_path / "missing.yaml")

    def test_invalid_yaml(self):
        with pytest.raises(ParseError) as exc_info:
            load_change_request("changes:\n  - operation: learn\n   word: [unclosed\n")
        assert "Invalid YAML" in str(exc_info.value)

    def test_empty_yaml_file(self, tmp_path):
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")
        with pytest.raises(ParseError, match="Empty YAML file"):
            load_yaml_file(yaml_file)

    def test_root_must_be_mapping(self):
        with pytest.raises(ParseError, match="must be a mapping"):
            load_change_request("- learn\n- forget\n")

    def test_missing_changes(self):
        with pytest.raises(ParseError, match="Missing required field: 'changes'"):
            load_change_request({"session": {"name": "x"}})

    def test_empty_changes(self):
        with pytest.raises(ParseError, match="cannot be empty"):
            load_change_request({"changes": []})

    def test_change_must_be_mapping(self):
        with pytest.raises(ParseError, match="Change #1 must be a mapping"):
            load_change_request({"changes": ["learn Sonne"]})

    def test_change_needs_operation(self):
        with pytest.raises(ParseError, match="Missing required field 'operation'"):
            load_change_request({"changes": [{"word": "Sonne"}]})

    def test_changes_carry_line_numbers(self):
        request = load_change_request(
            "session:\n"
            "  name: Woche 1\n"
            "changes:\n"
            "  - operation: learn\n"
            "    word: Sonne\n"
            "  - operation: forget\n"
            "    word: Mond\n"
        )
        assert [c.line_number for c in request.changes] == [4, 6]

    def test_dict_changes_have_no_line_numbers(self):
        request = load_change_request({"changes": [{"operation": "learn", "word": "Sonne"}]})
        assert request.changes[0].line_number is None

    def test_parse_error_reports_line(self):
        with pytest.raises(ParseError) as exc_info:
            load_change_request("changes:\n  - operation: learn\n    word: Sonne\n  - learn Mond\n")
        assert exc_info.value.line == 4
        assert "Change #2 must be a mapping" in str(exc_info.value)


class TestValidator:
    """Tests for change request validation."""

    def _request(self, *changes):
        return ChangeRequest(
            changes=[Change(operation=op, params=params) for op, params in changes]
        )

    def test_valid_request(self):
        request = self._request(
            ("learn", {"word": "Sonne"}),
            ("relate", {"word": "die Sonne", "related": "der Mond", "note": "Himmel"}),
        )
        result = validate_change_request(request)
        assert result.is_valid
        assert result.warning_count == 0

    def test_unknown_operation(self):
        result = validate_change_request(self._request(("rename", {"word": "x"})))
        assert not result.is_valid
        assert result.errors[0].field == "operation"
        assert "Unknown operation 'rename'" in result.errors[0].message

    def test_missing_field(self):
        result = validate_change_request(self._request(("relate", {"word": "x"})))
        assert result.error_count == 1
        assert result.errors[0].field == "related"

    def test_blank_and_non_string_fields(self):
        result = validate_change_request(self._request(
            ("learn", {"word": "  "}),
            ("forget", {"word": 42}),
        ))
        assert [e.index for e in result.errors] == [0, 1]
        assert "blank" in result.errors[0].message
        assert "must be a string" in result.errors[1].message

    def test_unknown_field_is_warning(self):
        result = validate_change_request(self._request(
            ("learn", {"word": "Sonne", "pos": "n"}),
        ))
        assert result.is_valid
        assert result.warnings[0].message == "Unknown field 'pos' will be ignored"

    def test_references_checked_against_store(self, editor_with_data):
        ed, *_ = editor_with_data
        result = validate_change_request(self._request(
            ("relate", {"word": "die Sonne", "related": "Mars"}),
            ("unrelate", {"word": "Venus", "text": "x"}),
        ), ed)
        assert [(e.index, e.field) for e in result.errors] == [
            (0, "related"),
            (1, "word"),
        ]

    def test_learned_in_same_request_counts(self, editor):
        result = validate_change_request(self._request(
            ("learn", {"word": "laufen"}),
            ("learn", {"word": "Haus"}),
            ("relate", {"word": "laufen", "related": "haus"}),
        ), editor)
        assert result.is_valid
        assert result.warning_count == 2
        assert all("learned earlier in this request" in w.message for w in result.warnings)

    def test_forgotten_in_same_request(self, editor):
        result = validate_change_request(self._request(
            ("learn", {"word": "laufen"}),
            ("forget", {"word": "laufen"}),
            ("forget", {"word": "laufen"}),
        ), editor)
        assert [e.index for e in result.errors] == [2]

    def test_related_word_must_match_stored_word(self, editor_with_data):
        ed, *_ = editor_with_data
        result = validate_change_request(self._request(
            ("relate", {"word": "DIE SONNE", "related": "der Mond"}),
            ("relate", {"word": "die Sonne", "related": "Der Mond"}),
        ), ed)
        assert result.warning_count == 0
        assert [(e.index, e.field) for e in result.errors] == [(1, "related")]

    def test_lemma_reference_after_learn_is_warning(self, editor):
        request = self._request(
            ("learn", {"word": "Sonne"}),
            ("learn", {"word": "Mond"}),
            ("relate", {"word": "die Sonne", "related": "der Mond"}),
        )

        validation = validate_change_request(request, editor)
        result = execute_change_request(request, editor)

        assert validation.is_valid
        assert [w.index for w in validation.warnings] == [2, 2]
        assert "resolved after lookup" in validation.warnings[0].message
        assert result.success_count == 3

    def test_input_spelling_reference_is_warning(self, editor):
        request = self._request(
            ("learn", {"word": "Sonne"}),
            ("learn", {"word": "Mond"}),
            ("relate", {"word": "Sonne", "related": "Mond"}),
        )

        validation = validate_change_request(request, editor)
        result = execute_change_request(request, editor)

        assert validation.is_valid
        assert validation.warning_count == 2
        assert "'Sonne' is learned earlier in this request" in validation.warnings[0].message
        # "Sonne" is stored as "die Sonne", so the relation cannot resolve
        assert not result.changes[2].success

    def test_warning_carries_line_number(self, editor):
        request = load_change_request(
            "changes:\n"
            "  - operation: learn\n"
            "    word: Sonne\n"
            "  - operation: forget\n"
            "    word: die Sonne\n"
        )
        validation = validate_change_request(request, editor)
        assert validation.warnings[0].line_number == 4


class TestExecutor:
    """Tests for change execution."""

    def test_learn_and_relate(self, editor):
        request = load_change_request({
            "changes": [
                {"operation": "learn", "word": "Sonne"},
                {"operation": "learn", "word": "Mond"},
                {"operation": "relate", "word": "die Sonne", "related": "der Mond"},
            ],
        })

        result = execute_change_request(request, editor)

        assert result.success_count == 3
        assert result.failure_count == 0
        assert result.skipped_count == 0
        sonne = editor.find_entry("die Sonne")
        assert result.changes[0].created_id == sonne.id
        assert [l.text for l in sonne.manual_related] == ["der Mond"]

    def test_failure_does_not_stop_batch(self, editor):
        request = load_change_request({
            "changes": [
                {"operation": "learn", "word": "Sonne"},
                {"operation": "learn", "word": "Sonne"},
                {"operation": "learn", "word": "Zeitgeist"},
                {"operation": "learn", "word": "laufen"},
            ],
        })

        result = execute_change_request(request, editor)

        assert [c.success for c in result.changes] == [True, False, False, True]
        assert result.changes[1].message == "word already learned"
        assert result.changes[2].message == "Failed to scrape data."
        assert len(editor.list_entries()) == 2

    def test_forget_unknown_word_succeeds(self, editor):
        request = load_change_request({
            "changes": [{"operation": "forget", "word": "Mars"}],
        })
        result = execute_change_request(request, editor)
        assert result.changes[0].success
        assert "was not learned" in result.changes[0].message

    def test_forget_and_unrelate(self, editor_with_data):
        ed, sonne, mond, laufen = editor_with_data
        ed.add_manual_relation(sonne.id, "laufen")
        request = load_change_request({
            "changes": [
                {"operation": "unrelate", "word": "die Sonne", "text": "laufen"},
                {"operation": "forget", "word": "der Mond"},
            ],
        })

        result = execute_change_request(request, ed)

        assert result.success_count == 2
        assert ed.get_entry(sonne.id).manual_related == ()
        assert ed.find_entry("der Mond") is None

    def test_relate_unknown_entry_fails(self, editor):
        request = load_change_request({
            "changes": [{"operation": "relate", "word": "Mars", "related": "Venus"}],
        })
        result = execute_change_request(request, editor)
        assert result.failure_count == 1
        assert result.changes[0].message == "Wort nicht gefunden."

    def test_dry_run_changes_nothing(self, editor, source):
        request = load_change_request({
            "changes": [{"operation": OperationType.LEARN.value, "word": "Sonne"}],
        })

        result = execute_change_request(request, editor, dry_run=True)

        assert result.changes[0].message == "Would execute learn"
        assert editor.list_entries() == []
        assert source.calls == []
