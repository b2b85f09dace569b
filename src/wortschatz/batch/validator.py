"""
Validation for batch change requests.

Provides both schema validation (operations, required fields, types) and
referential validation (the entries a change names exist, or are learned
earlier in the same request).
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Set, Tuple

from ..normalize import canonical_key
from .schema import (
    Change,
    ChangeRequest,
    OPTIONAL_FIELDS,
    OperationType,
    REQUIRED_FIELDS,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)

if TYPE_CHECKING:
    from ..editor import VocabularyEditor

logger = logging.getLogger(__name__)


def validate_change_request(
    request: ChangeRequest,
    editor: Optional["VocabularyEditor"] = None,
) -> ValidationResult:
    """Validate a change request.

    Args:
        request: The change request to validate
        editor: If given, check that entries named by changes exist

    Returns:
        ValidationResult with errors and warnings
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []
    learned: Set[str] = set()

    for i, change in enumerate(request.changes):
        change_errors, change_warnings = _validate_change(change, i)
        errors.extend(change_errors)
        warnings.extend(change_warnings)

        if editor is not None and not change_errors:
            ref_errors, ref_warnings = _validate_references(change, i, editor, learned)
            errors.extend(ref_errors)
            warnings.extend(ref_warnings)

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_change(
    change: Change,
    index: int,
) -> Tuple[List[ValidationError], List[ValidationWarning]]:
    """Validate a single change operation.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []

    valid_operations = {op.value for op in OperationType}
    if change.operation not in valid_operations:
        errors.append(
            ValidationError(
                index=index,
                operation=change.operation,
                field="operation",
                message=(
                    f"Unknown operation '{change.operation}'. "
                    f"Valid: {', '.join(sorted(valid_operations))}"
                ),
                line_number=change.line_number,
            )
        )
        return errors, warnings

    for field_name in REQUIRED_FIELDS[change.operation]:
        value = change.params.get(field_name)
        if value is None:
            message = f"Missing required field '{field_name}'"
        elif not isinstance(value, str):
            message = f"Field '{field_name}' must be a string"
        elif not value.strip():
            message = f"Field '{field_name}' must not be blank"
        else:
            continue
        errors.append(
            ValidationError(
                index=index,
                operation=change.operation,
                field=field_name,
                message=message,
                line_number=change.line_number,
            )
        )

    known = set(REQUIRED_FIELDS[change.operation]) | set(OPTIONAL_FIELDS[change.operation])
    for field_name in sorted(set(change.params) - known):
        warnings.append(
            ValidationWarning(
                index=index,
                operation=change.operation,
                message=f"Unknown field '{field_name}' will be ignored",
                line_number=change.line_number,
            )
        )

    return errors, warnings


def _validate_references(
    change: Change,
    index: int,
    editor: "VocabularyEditor",
    learned: Set[str],
) -> Tuple[List[ValidationError], List[ValidationWarning]]:
    """Check that the entries a change refers to will exist when it runs.

    ``word`` is resolved like the executor does, by word or title ignoring
    case; ``related`` by exact stored word, like relation targets.  Words
    learned earlier in the request are stored under their dictionary title,
    which is unknown until lookup, so a reference only they could satisfy
    is a warning rather than an error.
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []

    if change.operation == OperationType.LEARN.value:
        learned.add(canonical_key(change.word))
        return errors, warnings

    references = [
        ("word", change.word, editor.find_entry(change.word), f"No entry for '{change.word}'"),
    ]
    if change.operation == OperationType.RELATE.value:
        references.append((
            "related",
            change.related,
            editor.find_entry_by_word(change.related),
            f"No entry for related word '{change.related}'",
        ))

    for field_name, value, entry, missing in references:
        if entry is not None:
            continue
        if canonical_key(value) in learned:
            note = f"'{value}' is learned earlier in this request"
        elif learned:
            note = f"No entry for '{value}' yet"
        else:
            errors.append(
                ValidationError(
                    index=index,
                    operation=change.operation,
                    field=field_name,
                    message=missing,
                    line_number=change.line_number,
                )
            )
            continue
        warnings.append(
            ValidationWarning(
                index=index,
                operation=change.operation,
                message=f"{note}; '{field_name}' is resolved after lookup",
                line_number=change.line_number,
            )
        )

    if change.operation == OperationType.FORGET.value:
        learned.discard(canonical_key(change.word))

    logger.debug("Checked references for change #%d (%s)", index + 1, change.operation)
    return errors, warnings
