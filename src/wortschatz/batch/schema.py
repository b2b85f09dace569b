"""
Data classes and constants for the batch change request system.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


# =============================================================================
# Operation Types
# =============================================================================

class OperationType(str, Enum):
    """Supported batch operations."""
    LEARN = "learn"
    FORGET = "forget"
    RELATE = "relate"
    UNRELATE = "unrelate"


# =============================================================================
# Field Requirements
# =============================================================================

# Required fields for each operation
REQUIRED_FIELDS: Dict[str, List[str]] = {
    OperationType.LEARN.value: ["word"],
    OperationType.FORGET.value: ["word"],
    OperationType.RELATE.value: ["word", "related"],
    OperationType.UNRELATE.value: ["word", "text"],
}

# Optional fields for each operation
OPTIONAL_FIELDS: Dict[str, List[str]] = {
    OperationType.LEARN.value: ["note"],
    OperationType.FORGET.value: ["note"],
    OperationType.RELATE.value: ["note"],
    OperationType.UNRELATE.value: ["note"],
}


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class Change:
    """Single change operation."""
    operation: str
    params: Dict[str, Any]
    line_number: Optional[int] = None

    @property
    def word(self) -> Optional[str]:
        """Word naming the entry the change applies to."""
        return self.params.get("word")

    @property
    def related(self) -> Optional[str]:
        """Word to link to, for relate operations."""
        return self.params.get("related")

    @property
    def text(self) -> Optional[str]:
        """Link text to remove, for unrelate operations."""
        return self.params.get("text")


@dataclass
class ChangeRequest:
    """Parsed change request from YAML."""
    changes: List[Change]
    session_name: Optional[str] = None
    session_description: Optional[str] = None
    source_file: Optional[Path] = None


@dataclass
class ValidationError:
    """Validation error for a specific change."""
    index: int
    operation: str
    field: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ValidationWarning:
    """Validation warning for a specific change."""
    index: int
    operation: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ValidationResult:
    """Result of validating a change request."""
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


@dataclass
class ChangeResult:
    """Result of executing a single change."""
    index: int
    operation: str
    success: bool
    message: str
    target: Optional[str] = None
    created_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BatchResult:
    """Result of executing a batch change request."""
    total_count: int
    success_count: int
    failure_count: int
    changes: List[ChangeResult]
    duration_seconds: float

    @property
    def skipped_count(self) -> int:
        return self.total_count - self.success_count - self.failure_count
