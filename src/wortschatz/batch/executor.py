"""
Executor for batch change requests.

Applies changes to the vocabulary through a VocabularyEditor.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, List

from ..exceptions import EntryNotFoundError, WortschatzError
from .schema import (
    BatchResult,
    Change,
    ChangeRequest,
    ChangeResult,
    OperationType,
)

if TYPE_CHECKING:
    from ..editor import VocabularyEditor
    from ..models import EntryModel

logger = logging.getLogger(__name__)


def execute_change_request(
    request: ChangeRequest,
    editor: "VocabularyEditor",
    dry_run: bool = False,
) -> BatchResult:
    """Execute a batch change request.

    Each change runs on its own; a failing change does not stop the ones
    after it.

    Args:
        request: The change request to execute
        editor: Editor the changes are applied through
        dry_run: If True, only simulate execution without making changes

    Returns:
        BatchResult with details of each change
    """
    start_time = time.time()
    results: List[ChangeResult] = []

    if request.session_name:
        logger.info("Executing batch %r", request.session_name)

    for i, change in enumerate(request.changes):
        results.append(
            _execute_change(change=change, index=i, editor=editor, dry_run=dry_run)
        )

    success_count = sum(1 for r in results if r.success)
    failure_count = sum(1 for r in results if not r.success)
    duration = time.time() - start_time

    return BatchResult(
        total_count=len(results),
        success_count=success_count,
        failure_count=failure_count,
        changes=results,
        duration_seconds=duration,
    )


def _execute_change(
    change: Change,
    index: int,
    editor: "VocabularyEditor",
    dry_run: bool,
) -> ChangeResult:
    """Execute a single change operation.

    Returns:
        ChangeResult with success/failure status
    """
    op = change.operation

    try:
        if dry_run:
            return _dry_run_change(change, index)

        if op == OperationType.LEARN.value:
            return _exec_learn(change, index, editor)

        elif op == OperationType.FORGET.value:
            return _exec_forget(change, index, editor)

        elif op == OperationType.RELATE.value:
            return _exec_relate(change, index, editor)

        elif op == OperationType.UNRELATE.value:
            return _exec_unrelate(change, index, editor)

        else:
            return ChangeResult(
                index=index,
                operation=op,
                success=False,
                message=f"Unknown operation: {op}",
                error=f"Unknown operation: {op}",
            )

    except WortschatzError as e:
        logger.warning("Change #%d (%s) failed: %s", index + 1, op, e)
        return ChangeResult(
            index=index,
            operation=op,
            success=False,
            message=e.message,
            target=change.word,
            error=str(e),
        )


def _dry_run_change(change: Change, index: int) -> ChangeResult:
    """Simulate a change without actually executing it."""
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Would execute {change.operation}",
        target=change.word,
    )


def _require_entry(change: Change, editor: "VocabularyEditor") -> "EntryModel":
    entry = editor.find_entry(change.word)
    if entry is None:
        raise EntryNotFoundError(f"No entry for {change.word!r}")
    return entry


def _exec_learn(change: Change, index: int, editor: "VocabularyEditor") -> ChangeResult:
    entry = editor.create_entry(change.word)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Learned '{entry.word}'",
        target=entry.word,
        created_id=entry.id,
    )


def _exec_forget(change: Change, index: int, editor: "VocabularyEditor") -> ChangeResult:
    entry = editor.find_entry(change.word)
    if entry is None:
        return ChangeResult(
            index=index,
            operation=change.operation,
            success=True,
            message=f"'{change.word}' was not learned",
            target=change.word,
        )
    editor.delete_entry(entry.id)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Forgot '{entry.word}'",
        target=entry.word,
    )


def _exec_relate(change: Change, index: int, editor: "VocabularyEditor") -> ChangeResult:
    entry = _require_entry(change, editor)
    editor.add_manual_relation(entry.id, change.related)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Linked '{entry.word}' to '{change.related}'",
        target=entry.word,
    )


def _exec_unrelate(change: Change, index: int, editor: "VocabularyEditor") -> ChangeResult:
    entry = _require_entry(change, editor)
    updated = editor.remove_manual_relation(entry.id, change.text)
    removed = len(entry.manual_related) - len(updated.manual_related)
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=f"Removed {removed} link(s) '{change.text}' from '{entry.word}'",
        target=entry.word,
    )
