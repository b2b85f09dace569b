"""Domain model dataclasses for wortschatz."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class LinkKind(str, Enum):
    """Origin of a related-word link stored on an entry."""

    SCRAPED = "scraped"
    MANUAL = "manual"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RelatedLink:
    """A display text and the absolute URL it points to."""

    text: str
    href: str


@dataclass(frozen=True, slots=True)
class LexicalRecord:
    """The structured result of extracting one dictionary page.

    Not persisted directly; the editor turns it into an entry.
    """

    input_word: str
    canonical_title: str
    definitions: tuple[str, ...] = ()
    related_links: tuple[RelatedLink, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when the page yielded no title, definitions or links."""
        return (
            not self.canonical_title
            and not self.definitions
            and not self.related_links
        )

    @property
    def display_word(self) -> str:
        """The word an entry created from this record is stored under."""
        return self.canonical_title or self.input_word.strip()


@dataclass(frozen=True, slots=True)
class EntryModel:
    """A persisted vocabulary entry."""

    id: str
    word: str
    title: str
    definitions: tuple[str, ...]
    scraped_related: tuple[RelatedLink, ...]
    manual_related: tuple[RelatedLink, ...]
    created_at: str

    @property
    def display_text(self) -> str:
        """Text used when another entry links to this one."""
        return self.title or self.word


@dataclass(frozen=True, slots=True)
class EditRecord:
    """A single edit-history entry recording one change."""

    id: int
    entity_type: str
    entity_id: str
    field_name: str | None
    operation: str
    old_value: str | None
    new_value: str | None
    timestamp: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """A single validation finding (error or warning)."""

    rule_id: str
    severity: str
    entity_type: str
    entity_id: str
    message: str
    details: dict[str, Any] | None
