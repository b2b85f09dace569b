"""Learn German words from DWDS and keep them deduplicated."""

__version__ = "0.1.0"

from wortschatz.config import Settings
from wortschatz.editor import VocabularyEditor
from wortschatz.exceptions import (
    ConfigurationError,
    DatabaseError,
    DuplicateEdgeError,
    DuplicateEntryError,
    EntryNotFoundError,
    ExtractionUnavailableError,
    NotFoundError,
    RelatedWordNotFoundError,
    RelationError,
    SelfReferenceError,
    ValidationError,
    WordNotFoundError,
    WortschatzError,
)
from wortschatz.extractor import DEFINITION_STRATEGIES, DefinitionStrategy, extract
from wortschatz.models import (
    EditRecord,
    EntryModel,
    LexicalRecord,
    LinkKind,
    RelatedLink,
    ValidationResult,
)
from wortschatz.normalize import canonical_key
from wortschatz.source import DictionarySource, DwdsSource, reference_url

__all__ = [
    "VocabularyEditor",
    "Settings",
    # Extraction
    "extract",
    "DefinitionStrategy",
    "DEFINITION_STRATEGIES",
    "canonical_key",
    # Dictionary source
    "DictionarySource",
    "DwdsSource",
    "reference_url",
    # Models
    "EditRecord",
    "EntryModel",
    "LexicalRecord",
    "LinkKind",
    "RelatedLink",
    "ValidationResult",
    # Exceptions
    "WortschatzError",
    "ValidationError",
    "DuplicateEntryError",
    "NotFoundError",
    "WordNotFoundError",
    "EntryNotFoundError",
    "RelatedWordNotFoundError",
    "ExtractionUnavailableError",
    "RelationError",
    "SelfReferenceError",
    "DuplicateEdgeError",
    "DatabaseError",
    "ConfigurationError",
]
