"""
Command-line interface for wortschatz.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

from . import __version__
from . import presentation as _view
from .batch import (
    BatchResult,
    ParseError,
    ValidationResult,
    execute_change_request,
    load_change_request,
    validate_change_request,
)
from .config import Settings, parse_timeout
from .editor import VocabularyEditor
from .exceptions import ConfigurationError, WortschatzError
from .models import EntryModel, LexicalRecord
from .source import DwdsSource, fetch_record

logger = logging.getLogger(__name__)


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the wortschatz CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    _configure_logging(args)
    try:
        return args.func(args)
    except WortschatzError as e:
        if args.json:
            _print_json(_view.error_to_dict(e))
        else:
            print(f"\n  [ERROR] {e.message}")
            print(f"          {e}")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="wortschatz",
        description="Learn German words from DWDS and keep a deduplicated vocabulary",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--db", type=Path, help="Vocabulary database file")
    parser.add_argument("--base-url", help="Dictionary site (default: DWDS)")
    parser.add_argument(
        "--timeout",
        type=parse_timeout,
        help="Seconds to wait for a dictionary page",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only log errors")

    subparsers = parser.add_subparsers(title="commands", dest="command")

    lookup_parser = subparsers.add_parser(
        "lookup",
        help="Show what the dictionary says about a word without storing it",
    )
    lookup_parser.add_argument("word")
    lookup_parser.set_defaults(func=cmd_lookup)

    learn_parser = subparsers.add_parser("learn", help="Learn one or more words")
    learn_parser.add_argument("words", nargs="+")
    learn_parser.set_defaults(func=cmd_learn)

    list_parser = subparsers.add_parser("list", help="List learned words, newest first")
    list_parser.set_defaults(func=cmd_list)

    show_parser = subparsers.add_parser("show", help="Show one entry")
    show_parser.add_argument("entry_id")
    show_parser.set_defaults(func=cmd_show)

    forget_parser = subparsers.add_parser("forget", help="Delete an entry")
    forget_parser.add_argument("entry_id")
    forget_parser.set_defaults(func=cmd_forget)

    relate_parser = subparsers.add_parser(
        "relate",
        help="Link an entry to another learned word",
    )
    relate_parser.add_argument("entry_id")
    relate_parser.add_argument("word")
    relate_parser.set_defaults(func=cmd_relate)

    unrelate_parser = subparsers.add_parser(
        "unrelate",
        help="Remove a manual link from an entry",
    )
    unrelate_parser.add_argument("entry_id")
    unrelate_parser.add_argument("text")
    unrelate_parser.set_defaults(func=cmd_unrelate)

    history_parser = subparsers.add_parser("history", help="Show recent edits")
    history_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of edits to show (default: 20)",
    )
    history_parser.set_defaults(func=cmd_history)

    check_parser = subparsers.add_parser("check", help="Check the stored vocabulary")
    check_parser.set_defaults(func=cmd_check)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a change request file",
    )
    validate_parser.add_argument(
        "file",
        type=Path,
        help="YAML file containing change request",
    )
    validate_parser.add_argument(
        "--no-check-refs",
        action="store_true",
        help="Skip checking that referenced entries exist",
    )
    validate_parser.set_defaults(func=cmd_validate)

    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply changes from a request file",
    )
    apply_parser.add_argument(
        "file",
        type=Path,
        help="YAML file containing change request",
    )
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate execution without making changes",
    )
    apply_parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    apply_parser.set_defaults(func=cmd_apply)

    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.WARNING
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_settings(args: argparse.Namespace) -> Settings:
    """Environment settings, overridden by command-line flags."""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    if args.db is not None:
        settings = replace(settings, db_path=args.db)
    if args.base_url:
        settings = replace(settings, base_url=args.base_url.rstrip("/"))
    if args.timeout is not None:
        settings = replace(settings, lookup_timeout=args.timeout)
    return settings


def open_editor(settings: Settings) -> VocabularyEditor:
    logger.debug("Opening %s", settings.db_path)
    return VocabularyEditor.from_settings(settings)


def open_source(settings: Settings) -> DwdsSource:
    return DwdsSource.from_settings(settings)


# =============================================================================
# Commands
# =============================================================================

def cmd_lookup(args: argparse.Namespace) -> int:
    """Handle lookup command."""
    settings = build_settings(args)
    with open_source(settings) as source:
        record = fetch_record(source, args.word, base_url=settings.base_url)

    if args.json:
        _print_json(_view.record_to_dict(record))
    else:
        _print_record(record)
    return 0


def cmd_learn(args: argparse.Namespace) -> int:
    """Handle learn command; keeps going after a word fails."""
    failures = 0
    learned = []
    with open_editor(build_settings(args)) as editor:
        for word in args.words:
            try:
                entry = editor.create_entry(word)
            except WortschatzError as e:
                failures += 1
                if args.json:
                    learned.append({"word": word, **_view.error_to_dict(e)})
                else:
                    print(f"  [FAILED] {word}: {e.message}")
                continue
            if args.json:
                learned.append(_view.entry_to_dict(entry))
            else:
                print(f"  [OK] {word} -> {entry.word} ({entry.id})")

    if args.json:
        _print_json(learned)
    return 1 if failures else 0


def cmd_list(args: argparse.Namespace) -> int:
    """Handle list command."""
    with open_editor(build_settings(args)) as editor:
        entries = editor.list_entries()

    if args.json:
        _print_json([_view.entry_to_dict(e) for e in entries])
        return 0

    if not entries:
        print("No words learned yet.")
        return 0

    print(f"\n{'ID':<34} {'Word':<30} {'Defs':<5} {'Links':<6} {'Learned'}")
    print("-" * 90)
    for entry in entries:
        word = (entry.word[:27] + "...") if len(entry.word) > 30 else entry.word
        links = len(entry.scraped_related) + len(entry.manual_related)
        date = entry.created_at.split("T")[0]
        print(f"{entry.id:<34} {word:<30} {len(entry.definitions):<5} {links:<6} {date}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handle show command."""
    with open_editor(build_settings(args)) as editor:
        entry = editor.get_entry(args.entry_id)
    _print_entry(entry, args.json)
    return 0


def cmd_forget(args: argparse.Namespace) -> int:
    """Handle forget command."""
    with open_editor(build_settings(args)) as editor:
        editor.delete_entry(args.entry_id)

    if args.json:
        _print_json(_view.deletion_to_dict(args.entry_id))
    else:
        print(f"Deleted {args.entry_id}.")
    return 0


def cmd_relate(args: argparse.Namespace) -> int:
    """Handle relate command."""
    with open_editor(build_settings(args)) as editor:
        entry = editor.add_manual_relation(args.entry_id, args.word)
    _print_entry(entry, args.json)
    return 0


def cmd_unrelate(args: argparse.Namespace) -> int:
    """Handle unrelate command."""
    with open_editor(build_settings(args)) as editor:
        entry = editor.remove_manual_relation(args.entry_id, args.text)
    _print_entry(entry, args.json)
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """Handle history command."""
    with open_editor(build_settings(args)) as editor:
        records = editor.get_history(limit=args.limit)

    if args.json:
        _print_json([
            {
                "id": r.id,
                "entityType": r.entity_type,
                "entityId": r.entity_id,
                "operation": r.operation,
                "oldValue": r.old_value,
                "newValue": r.new_value,
                "timestamp": r.timestamp,
            }
            for r in records
        ])
        return 0

    if not records:
        print("No edits recorded.")
        return 0
    for r in records:
        print(f"  {r.timestamp}  {r.operation:<7} {r.entity_type:<9} {r.entity_id}")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command."""
    with open_editor(build_settings(args)) as editor:
        results = editor.validate()

    if args.json:
        _print_json([
            {
                "ruleId": r.rule_id,
                "severity": r.severity,
                "entityId": r.entity_id,
                "message": r.message,
            }
            for r in results
        ])
    else:
        for r in results:
            print(f"  [{r.severity}] {r.rule_id} {r.entity_id}: {r.message}")
        if not results:
            print("No problems found.")

    return 1 if any(r.severity == "ERROR" for r in results) else 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    print(f"\nValidating {args.file}...")

    request = _load_request(args.file)
    if request is None:
        return 1

    print(f"  Changes: {len(request.changes)}")
    if request.session_name:
        print(f"  Session: {request.session_name}")

    if args.no_check_refs:
        result = validate_change_request(request)
    else:
        with open_editor(build_settings(args)) as editor:
            result = validate_change_request(request, editor)

    print("\nValidation Results:")
    _print_validation_result(result)

    if result.is_valid:
        print("\nValidation passed!")
        return 0
    print(f"\nFound {result.error_count} error(s), {result.warning_count} warning(s)")
    return 1


def cmd_apply(args: argparse.Namespace) -> int:
    """Handle apply command."""
    print(f"\nLoading {args.file}...")

    request = _load_request(args.file)
    if request is None:
        return 1

    print(f"  Changes: {len(request.changes)}")
    if request.session_name:
        print(f"  Session: \"{request.session_name}\"")

    with open_editor(build_settings(args)) as editor:
        print("\nValidating...")
        validation = validate_change_request(request, editor)

        if not validation.is_valid:
            print("\nValidation failed:")
            _print_validation_result(validation)
            print(f"\nFound {validation.error_count} error(s). Fix errors before applying.")
            return 1

        if validation.warning_count > 0:
            print("\nWarnings:")
            _print_validation_result(validation, warnings_only=True)

        if args.dry_run:
            print("\n[DRY RUN] Simulating execution...")
        elif not args.yes:
            response = input(f"\nApply {len(request.changes)} changes? [y/N] ")
            if response.lower() not in ("y", "yes"):
                print("Aborted.")
                return 1

        print(f"\n{'Simulating' if args.dry_run else 'Applying'} changes...")
        result = execute_change_request(request, editor, dry_run=args.dry_run)

    _print_batch_result(result)
    return 1 if result.failure_count > 0 else 0


# =============================================================================
# Output helpers
# =============================================================================

def _load_request(path: Path):
    try:
        return load_change_request(path)
    except ParseError as e:
        print(f"\n  [PARSE ERROR] {e}")
        if e.line:
            print(f"               Line: {e.line}")
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
    return None


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _print_record(record: LexicalRecord) -> None:
    print(f"\n{record.canonical_title or record.input_word}")
    if record.is_empty:
        print("  (nothing found)")
        return
    for i, definition in enumerate(record.definitions, start=1):
        print(f"  {i}. {definition}")
    if record.related_links:
        print("  Related: " + ", ".join(link.text for link in record.related_links))


def _print_entry(entry: EntryModel, as_json: bool) -> None:
    if as_json:
        _print_json(_view.entry_to_dict(entry))
        return
    print(f"\n{entry.word}  ({entry.id})")
    print(f"  Learned: {entry.created_at}")
    for i, definition in enumerate(entry.definitions, start=1):
        print(f"  {i}. {definition}")
    if entry.scraped_related:
        print("  Related: " + ", ".join(link.text for link in entry.scraped_related))
    if entry.manual_related:
        print("  Linked:  " + ", ".join(link.text for link in entry.manual_related))


def _print_validation_result(
    result: ValidationResult,
    warnings_only: bool = False,
) -> None:
    """Print validation errors and warnings."""
    if not warnings_only:
        for error in result.errors:
            print(f"  [ERROR] Change #{error.index + 1} ({error.operation}): {error.message}")
            if error.field:
                print(f"          Field: {error.field}")
            if error.line_number:
                print(f"          Line: {error.line_number}")

    for warning in result.warnings:
        print(f"  [WARN]  Change #{warning.index + 1} ({warning.operation}): {warning.message}")
        if warning.line_number:
            print(f"          Line: {warning.line_number}")


def _print_batch_result(result: BatchResult) -> None:
    """Print batch execution result."""
    print()
    for change in result.changes:
        idx = change.index + 1
        status = "OK" if change.success else "FAILED"
        print(f"  [{idx}/{result.total_count}] {change.operation}: {status}")
        if change.message:
            print(f"         {change.message}")

    print("\nResults:")
    print(f"  Total:   {result.total_count}")
    print(f"  Success: {result.success_count}")
    print(f"  Failed:  {result.failure_count}")
    print(f"  Time:    {result.duration_seconds:.2f}s")


if __name__ == "__main__":
    sys.exit(main())
