"""Unit tests for heading slugs and per-document table of contents extraction."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from website_text.document import Document
from website_text.generator.toc import extract_document_summary, slugify


def _extract(html: str) -> tuple[BeautifulSoup, list]:
    root = BeautifulSoup(html, "html.parser")
    summary = extract_document_summary(Document(filename="/page.md"), root, "/page")
    return root, list(summary)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Getting Started", "getting-started"),
        ("  What's  new?  ", "whats-new"),
        ("--A -- B--", "a-b"),
        ("Étape 2", "étape-2"),
    ],
)
def test_slugify(text: str, expected: str) -> None:
    """Slugs keep word characters and join words with single dashes."""
    assert slugify(text) == expected


def test_headings_nest_by_level() -> None:
    """Lower-level headings become children of the preceding higher one."""
    root, top = _extract(
        "<h2>Intro</h2><h3>Setup Steps</h3><h4>Deep</h4><h2>Usage</h2>"
    )
    assert [element.title for element in top] == ["Intro", "Usage"]
    intro = top[0]
    setup = intro.get_element_by_title("Setup Steps")
    assert setup is not None, "h3 should nest below the preceding h2"
    assert setup.id == "intro-setup-steps", "ids join ancestor slugs"
    deep = setup.get_element_by_title("Deep")
    assert deep is not None
    assert deep.id == "intro-setup-steps-deep"
    assert root.find("h4")["id"] == "intro-setup-steps-deep", (
        "ids are written back onto the heading tags"
    )


def test_entries_keep_document_order() -> None:
    """Sibling entries follow the document, not the alphabet."""
    _root, top = _extract("<h2>Zulu</h2><h2>Alpha</h2><h2>Mike</h2>")
    assert [element.title for element in top] == ["Zulu", "Alpha", "Mike"]
    assert all(element.visible for element in top)
    assert all(element.url == "/page" for element in top)


def test_duplicate_titles_receive_unique_ids() -> None:
    """Repeated heading texts get numbered ids."""
    root, top = _extract("<h2>Notes</h2><h2>Notes</h2><h2>Notes</h2>")
    assert [element.id for element in top] == ["notes", "notes-1", "notes-2"]
    assert len({tag["id"] for tag in root.find_all("h2")}) == 3


def test_existing_unique_id_is_kept() -> None:
    """Author supplied ids are preserved unless they collide."""
    root, top = _extract(
        '<h2 id="custom">Custom</h2><div id="taken"></div><h2 id="taken">Other</h2>'
    )
    assert top[0].id == "custom"
    assert top[1].id == "other", "a colliding id is replaced by a generated one"
    assert root.find_all("h2")[1]["id"] == "other"


def test_skipped_level_and_blank_heading() -> None:
    """A skipped level still nests; blank headings are ignored."""
    _root, top = _extract("<h2></h2><h2>Top</h2><h5>Leaf</h5>")
    assert [element.title for element in top] == ["Top"]
    assert top[0].get_element_by_title("Leaf") is not None
