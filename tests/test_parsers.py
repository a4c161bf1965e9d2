"""Unit tests for the Markdown and reStructuredText parsers."""

from __future__ import annotations

from textwrap import dedent

import pytest
from bs4 import BeautifulSoup

from website_text.exceptions import LoaderError, ParserError
from website_text.loaders import MemoryLoader
from website_text.parsers import MarkdownParser, RstParser, default_parser


def test_markdown_meta_lines_become_metas() -> None:
    """Meta lines are hidden from the HTML and stored on the document."""
    source = dedent(
        """\
        !meta url /start
        !meta index Guide;Install
        !meta index-visible false
        !meta tag a
        !meta tag b
        # Hello

        Body text.
        """
    )
    document = MarkdownParser().convert(source)

    assert document.metas == {
        "url": "/start",
        "index": "Guide;Install",
        "index-visible": False,
        "tag": ["a", "b"],
    }
    assert "!meta" not in (document.content or ""), "meta lines must not be rendered"
    soup = BeautifulSoup(document.content or "", "html.parser")
    assert soup.find("h1").get_text() == "Hello"


def test_markdown_meta_inside_fenced_code_is_content() -> None:
    """Meta syntax within a fenced block is ordinary code."""
    document = MarkdownParser().convert("```text\n!meta url /x\n```\n")
    assert document.metas == {}, "fenced meta lines must not be collected"
    assert "!meta url /x" in (document.content or "")


def test_markdown_code_blocks_are_highlighted_with_language() -> None:
    """Fenced code labels survive as ``data-language`` on codehilite blocks."""
    document = MarkdownParser().convert(
        "Intro\n\n  ```rust,no_run\n  fn main() {}\n  ```\n"
    )
    soup = BeautifulSoup(document.content or "", "html.parser")
    block = soup.find("div", class_="codehilite")
    assert block is not None, "expected a codehilite block"
    assert block.get("data-language") == "rust"
    assert "fn main" in block.get_text()


def test_markdown_headings_accept_explicit_ids() -> None:
    """``attr_list`` lets authors set heading ids."""
    document = MarkdownParser().convert("## Setup {#install}\n")
    soup = BeautifulSoup(document.content or "", "html.parser")
    assert soup.find("h2")["id"] == "install"


def test_markdown_stylesheet_uses_configured_style() -> None:
    """The parser exposes the CSS matching its Pygments style."""
    css = MarkdownParser("friendly").stylesheet
    assert ".codehilite" in css


def test_parse_reads_files_through_the_loader() -> None:
    """``is_file`` makes the parser fetch the text from its loader."""
    parser = MarkdownParser()
    parser.loader = MemoryLoader({"page.md": "# Page"})
    document = parser.parse("/page.md", is_file=True)
    assert document.raw_content == "# Page"
    assert "<h1>Page</h1>" in (document.content or "")


def test_parse_file_without_loader_fails() -> None:
    """A parser cannot read files without a loader."""
    with pytest.raises(ParserError, match="Unable to find a loader"):
        MarkdownParser().parse("/page.md", is_file=True)


def test_parse_missing_file_propagates_loader_error() -> None:
    """Loader failures are not masked by the parser."""
    parser = MarkdownParser()
    parser.loader = MemoryLoader({})
    with pytest.raises(LoaderError):
        parser.parse("/missing.md", is_file=True)


def test_rst_title_docinfo_and_body() -> None:
    """docutils promotes the title and turns the leading field list into metas."""
    source = dedent(
        """\
        =====
        Title
        =====

        :index: Guide;Rst
        :author: Jane

        Usage
        =====

        Body text.

        Details
        =======

        More text.
        """
    )
    document = RstParser().convert(source)

    assert document.title == "Title"
    assert document.get_meta("index") == "Guide;Rst"
    assert document.get_meta("author") == "Jane"
    soup = BeautifulSoup(document.content or "", "html.parser")
    assert [heading.get_text() for heading in soup.find_all("h2")] == [
        "Usage",
        "Details",
    ], "sections below the title should render as h2 headings"
    assert "Body text." in soup.get_text()


def test_default_parsers() -> None:
    """Known extensions map to fresh parser instances."""
    assert isinstance(default_parser("md"), MarkdownParser)
    assert isinstance(default_parser("rst"), RstParser)
    assert default_parser("txt") is None
    assert default_parser("md") is not default_parser("md")
