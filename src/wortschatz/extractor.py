"""Turn a raw DWDS page into a :class:`LexicalRecord`.

The selectors are coupled to DWDS markup.  Definitions are read through an
ordered list of strategies; the first one that yields anything wins, so a
single tier can be replaced when the upstream layout changes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from wortschatz.config import DEFAULT_BASE_URL
from wortschatz.models import LexicalRecord, RelatedLink
from wortschatz.normalize import normalize_whitespace

logger = logging.getLogger(__name__)

TITLE_SELECTOR = "h1.dwdswb-ft-lemmaansatz"
RELATED_SELECTOR = ".more-relations a"


@dataclass(frozen=True, slots=True)
class DefinitionStrategy:
    """One tier of definition extraction: a name and a CSS selector."""

    name: str
    selector: str

    def collect(self, soup: BeautifulSoup) -> list[str]:
        texts = (normalize_whitespace(el.get_text()) for el in soup.select(self.selector))
        return [text for text in texts if text]


DEFINITION_STRATEGIES: tuple[DefinitionStrategy, ...] = (
    DefinitionStrategy("meaning-overview", ".bedeutungsuebersicht > ol > li > a"),
    DefinitionStrategy(
        "reading-definitions",
        ".dwdswb-lesarten .dwdswb-lesart .dwdswb-definition",
    ),
    DefinitionStrategy("any-definition", ".dwdswb-definition"),
)


def extract(
    raw_page: str,
    input_word: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    strategies: Sequence[DefinitionStrategy] = DEFINITION_STRATEGIES,
) -> LexicalRecord:
    """Extract title, definitions and related links from a page.

    Never raises on malformed markup; missing parts come back empty.
    """
    soup = BeautifulSoup(raw_page or "", "html.parser")
    record = LexicalRecord(
        input_word=input_word,
        canonical_title=extract_title(soup),
        definitions=tuple(extract_definitions(soup, strategies)),
        related_links=tuple(extract_related(soup, base_url)),
    )
    logger.debug(
        "Extracted %r: title=%r, %d definitions, %d related",
        input_word, record.canonical_title,
        len(record.definitions), len(record.related_links),
    )
    return record


def format_title(heading: str) -> str:
    """Reorder ``"Sonne, die"`` to ``"die Sonne"``; other headings unchanged."""
    heading = normalize_whitespace(heading)
    if "," not in heading:
        return heading
    parts = [part.strip() for part in heading.split(",")]
    noun, article = parts[0], parts[1]
    return f"{article} {noun}".strip()


def extract_title(soup: BeautifulSoup) -> str:
    heading = soup.select_one(TITLE_SELECTOR)
    if heading is None:
        return ""
    return format_title(heading.get_text())


def extract_related(
    soup: BeautifulSoup, base_url: str = DEFAULT_BASE_URL
) -> list[RelatedLink]:
    """Collect related-word anchors, resolving links against ``base_url``."""
    links: list[RelatedLink] = []
    seen: set[str] = set()
    for anchor in soup.select(RELATED_SELECTOR):
        text = normalize_whitespace(anchor.get_text())
        href = anchor.get("href")
        if not text or not href or text in seen:
            continue
        seen.add(text)
        links.append(RelatedLink(text=text, href=urljoin(base_url + "/", href)))
    return links


def extract_definitions(
    soup: BeautifulSoup,
    strategies: Sequence[DefinitionStrategy] = DEFINITION_STRATEGIES,
) -> list[str]:
    """Return the definitions of the first strategy that finds any."""
    for strategy in strategies:
        found = strategy.collect(soup)
        if found:
            logger.debug("Definitions from %s: %d", strategy.name, len(found))
            return found
    return []
