"""Shared test fixtures for wortschatz."""

from html import escape

import pytest

from wortschatz import VocabularyEditor
from wortschatz.exceptions import ExtractionUnavailableError


def dwds_page(heading=None, overview=(), readings=(), loose=(), related=()):
    """Build a page with the parts of DWDS markup the extractor reads.

    ``overview``, ``readings`` and ``loose`` fill the three definition
    layouts in priority order; ``related`` holds ``(text, href)`` pairs.
    """
    parts = ["<html><body>"]
    if heading is not None:
        parts.append(f'<h1 class="dwdswb-ft-lemmaansatz">{escape(heading)}</h1>')
    if overview:
        items = "".join(f"<li><a href='#d{i}'>{escape(t)}</a></li>"
                        for i, t in enumerate(overview))
        parts.append(f'<div class="bedeutungsuebersicht"><ol>{items}</ol></div>')
    if readings:
        items = "".join(
            f'<div class="dwdswb-lesart"><span class="dwdswb-definition">{escape(t)}</span></div>'
            for t in readings
        )
        parts.append(f'<div class="dwdswb-lesarten">{items}</div>')
    for text in loose:
        parts.append(f'<p class="dwdswb-definition">{escape(text)}</p>')
    if related:
        anchors = "".join(f'<a href="{escape(h)}">{escape(t)}</a>' for t, h in related)
        parts.append(f'<div class="more-relations">{anchors}</div>')
    parts.append("</body></html>")
    return "".join(parts)


NOT_FOUND_PAGE = "<html><body><p>Kein Eintrag zu diesem Suchwort.</p></body></html>"

PAGES = {
    "Sonne": dwds_page(
        "Sonne, die",
        overview=["Stern, der die Erde mit Licht versorgt", "Sonnenlicht"],
        related=[("Sonnenschein", "/wb/Sonnenschein"), ("Mond", "/wb/Mond")],
    ),
    # a second spelling that resolves to the same lemma
    "Sonnen": dwds_page("Sonne, die", overview=["Stern"]),
    "Mond": dwds_page(
        "Mond, der",
        readings=["Himmelskörper, der einen Planeten umkreist"],
    ),
    "laufen": dwds_page("laufen", overview=["sich schnell fortbewegen"]),
    "Haus": dwds_page("Haus, das", loose=["Gebäude zum Wohnen"]),
    "Stern": dwds_page("Stern, der"),
}


class FakeSource:
    """Dictionary source serving canned pages instead of fetching them."""

    def __init__(self, pages=None, unavailable=()):
        self.pages = dict(PAGES if pages is None else pages)
        self.unavailable = set(unavailable)
        self.calls = []
        self.closed = False

    def lookup(self, word):
        self.calls.append(word)
        if word in self.unavailable:
            raise ExtractionUnavailableError(f"Timed out fetching {word!r}")
        return self.pages.get(word, NOT_FOUND_PAGE)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture
def source():
    return FakeSource(unavailable={"Zeitgeist"})


@pytest.fixture
def editor(source):
    """Create an in-memory editor backed by the fake source."""
    with VocabularyEditor(":memory:", source=source) as ed:
        yield ed


@pytest.fixture
def editor_with_data(editor):
    """Editor with three learned words: Sonne, Mond and laufen."""
    sonne = editor.create_entry("Sonne")
    mond = editor.create_entry("Mond")
    laufen = editor.create_entry("laufen")
    return editor, sonne, mond, laufen
