"""End-to-end tests for :class:`website_text.generator.Generator`.

A small documentation site is served from a :class:`MemoryLoader` so the
whole pipeline runs: parsing Markdown and reStructuredText, rewriting links
between documents, extracting tables of contents, building the site summary
and persisting state in a cache.

Usage
-----
Run ``pytest tests/test_generator.py -v``.
"""

from __future__ import annotations

import logging
import typing as typ
from textwrap import dedent

import pytest
from bs4 import BeautifulSoup

from website_text.cache import MemoryCache
from website_text.document import Document
from website_text.exceptions import CacheError, GenerationError
from website_text.generator import Generator, Request
from website_text.loaders import MemoryLoader
from website_text.parsers import Parser

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pytest_mock import MockerFixture

SITE_FILES = {
    "index.md": dedent(
        """\
        !meta index Home
        !meta index-order 0
        # Welcome

        See [install](./guide/install.md#steps), the [api](./api.rst)
        and the [notes](./notes.txt).

        ## Overview
        """
    ),
    "guide/index.md": dedent(
        """\
        !meta index Guide
        # Guide

        Read [install](install.md).
        """
    ),
    "guide/install.md": dedent(
        """\
        !meta index Guide;Install
        # Install

        ## Steps

        Back [home](../index.md).
        """
    ),
    "api.rst": dedent(
        """\
        ===
        API
        ===

        :index: Reference;API

        Intro
        =====

        Text.
        """
    ),
    "notes.txt": "plain notes",
}
OPTIONS = {"url.prefix": "/docs"}


class FailingCache(MemoryCache):
    """Cache double whose every operation fails."""

    def get(self, key: str, default: typ.Any = None) -> typ.Any:  # noqa: ANN401
        raise CacheError(key)

    def set(self, key: str, value: typ.Any) -> bool:  # noqa: ANN401
        raise CacheError(key)

    def set_multiple(self, values: cabc.Mapping[str, typ.Any]) -> bool:
        raise CacheError("set_multiple")

    def has(self, key: str) -> bool:
        raise CacheError(key)

    def delete_multiple(self, keys: cabc.Iterable[str]) -> bool:
        raise CacheError("delete_multiple")


class TextParser(Parser):
    """Wrap plain text in a paragraph."""

    def convert(self, text: str) -> Document:
        return Document(content=f"<h1>Notes</h1><p>{text}</p>")


@pytest.fixture
def loader() -> MemoryLoader:
    """Return a loader serving the sample site."""
    return MemoryLoader(SITE_FILES)


@pytest.fixture
def generator(loader: MemoryLoader) -> Generator:
    """Return a generator with a ``/docs`` URL prefix and no cache."""
    return Generator(loader, OPTIONS)


def _soup(document: Document) -> BeautifulSoup:
    return BeautifulSoup(document.rendered_content or "", "html.parser")


def test_handle_serves_a_fully_treated_document(generator: Generator) -> None:
    """The served document has rewritten links, a title and a TOC."""
    document = generator.handle("/docs/guide/install")

    assert document is not None, "expected a document for /docs/guide/install"
    assert document.title == "Install"
    assert document.get_meta("url") == "/docs/guide/install"
    link = _soup(document).find("a")
    assert link["href"] == "/docs/", "links to index pages drop the index segment"
    assert document.summary is not None
    steps = document.summary.find_by_titles(["Steps"])
    assert steps is not None
    assert (steps.url, steps.id) == ("/docs/guide/install", "steps")


def test_links_between_documents(generator: Generator) -> None:
    """Relative links resolve to URLs; unknown or failing targets stay intact."""
    document = generator.handle("/docs/")
    assert document is not None
    hrefs = [link["href"] for link in _soup(document).find_all("a")]
    assert hrefs == ["/docs/guide/install#steps", "/docs/api", "./notes.txt"]

    guide = generator.handle("/docs/guide/")
    assert guide is not None
    assert _soup(guide).find("a")["href"] == "install.md", (
        "bare references are not site-relative and are left untouched"
    )


def test_scan_builds_url_index_and_records_errors(generator: Generator) -> None:
    """Every parsable document gets a URL; failures are collected."""
    generator.scan()

    assert generator.urls == {
        "/docs/": "/index.md",
        "/docs/guide/": "/guide/index.md",
        "/docs/guide/install": "/guide/install.md",
        "/docs/api": "/api.rst",
    }
    assert set(generator.errors) == {"/notes.txt"}
    error = generator.errors["/notes.txt"]
    assert isinstance(error, GenerationError)
    assert error.path == "/notes.txt"
    assert "No parser registered" in str(error)


def test_scan_is_idempotent(
    generator: Generator, loader: MemoryLoader, mocker: MockerFixture
) -> None:
    """A second scan neither reloads sources nor changes the index."""
    spy = mocker.spy(loader, "load")
    generator.scan()
    urls = generator.urls
    calls = spy.call_count
    generator.scan()
    assert generator.urls == urls
    assert spy.call_count == calls, "a populated index must short-circuit the scan"


def test_site_summary_and_selection(generator: Generator) -> None:
    """The summary follows index metas and marks the served document."""
    generator.handle("/docs/guide/install")
    summary = generator.summary

    assert summary is not None
    assert [element.title for element in summary] == ["Home", "Guide", "Reference"]
    guide = summary.find_by_titles(["Guide"])
    install = summary.find_by_titles(["Guide", "Install"])
    home = summary.find_by_titles(["Home"])
    assert guide is not None
    assert install is not None
    assert home is not None
    assert guide.url == "/docs/guide/"
    assert install.selected
    assert guide.selected, "ancestors of the served entry are selected"
    assert not home.selected

    generator.handle("/docs/")
    assert home.selected
    assert not install.selected, "selection is reset between requests"


def test_unknown_path_and_document(generator: Generator) -> None:
    """Unknown request paths and source paths yield ``None``."""
    assert generator.handle("/docs/nope") is None
    assert generator.get_document("/missing.md") is None


def test_parse_sets_filename_and_url(generator: Generator) -> None:
    """Parsing records the filename and the prefixed URL meta."""
    document = generator.parse("/guide/install.md")
    assert document.filename == "/guide/install.md"
    assert document.get_meta("url") == "/docs/guide/install"
    assert generator.documents["/guide/install.md"] is document
    assert not document.is_rendered, "parsing alone does not post-process"


def test_unknown_format_raises(generator: Generator) -> None:
    """Formats without a parser cannot be parsed."""
    with pytest.raises(GenerationError, match='format "txt"'):
        generator.parse("/notes.txt")


def test_custom_parser_registration(loader: MemoryLoader) -> None:
    """Registered parsers extend the supported formats."""
    generator = Generator(loader, OPTIONS, parsers={"txt": TextParser()})
    document = generator.handle("/docs/notes")
    assert document is not None
    assert document.title == "Notes"
    assert generator.errors == {}
    assert generator.get_parser("txt") is not None


def test_self_links_resolve_without_recursion() -> None:
    """A document linking to itself resolves from the in-memory table."""
    generator = Generator(MemoryLoader({"page.md": "# Page\n\n[me](./page.md)"}))
    document = generator.handle("/page")
    assert document is not None
    assert _soup(document).find("a")["href"] == "/page"


def test_documents_linking_to_each_other_are_parsed_once(mocker: MockerFixture) -> None:
    """Mutual links resolve from the in-memory table without re-parsing."""
    generator = Generator(
        MemoryLoader(
            {
                "a.md": "# A\n\n[to b](./b.md)",
                "b.md": "# B\n\n[to a](./a.md#top)",
            }
        )
    )
    parse = mocker.spy(generator, "parse")

    first = generator.handle("/a")
    second = generator.get_document("/b.md")

    assert first is not None
    assert second is not None
    assert _soup(first).find("a")["href"] == "/b"
    assert _soup(second).find("a")["href"] == "/a#top"
    assert sorted(call.args[0] for call in parse.call_args_list) == ["/a.md", "/b.md"], (
        "expected each document to be parsed exactly once"
    )


def test_mounted_request_derives_prefix(loader: MemoryLoader) -> None:
    """A request routed below a mount point uses the mount as URL prefix."""
    generator = Generator(loader)
    document = generator.handle(
        Request(path="/site/guide/install", route_path="/guide/install")
    )
    assert document is not None
    assert generator.options.url_prefix == "/site"
    assert document.get_meta("url") == "/site/guide/install"


def test_invalid_request_type(generator: Generator) -> None:
    """Requests must be strings or expose a string path."""
    with pytest.raises(TypeError, match="request"):
        generator.handle(42)


def test_summary_can_be_disabled(loader: MemoryLoader) -> None:
    """Without the shared summary, documents are still served."""
    generator = Generator(loader, {"summary": False})
    assert generator.handle("/guide/install") is not None
    assert generator.summary is None


def test_cached_state_is_reused(loader: MemoryLoader, mocker: MockerFixture) -> None:
    """A second generator over the same source serves from the cache."""
    cache = MemoryCache()
    first = Generator(loader, OPTIONS, cache=cache)
    served = first.handle("/docs/guide/install")
    assert served is not None
    assert cache.has(first.generator_cache_key())

    second_loader = MemoryLoader(SITE_FILES)
    spy = mocker.spy(second_loader, "load")
    second = Generator(second_loader, OPTIONS, cache=cache)
    document = second.handle("/docs/guide/install")

    assert document is not None
    assert spy.call_count == 0, "documents should come from the cache"
    assert document.rendered_content == served.rendered_content
    install = second.summary.find_by_titles(["Guide", "Install"])
    assert install is not None
    assert install.selected
    assert install.parent.selected


def test_changed_source_uses_new_cache_keys(loader: MemoryLoader) -> None:
    """Cache keys follow the loader identity."""
    cache = MemoryCache()
    first = Generator(loader, OPTIONS, cache=cache)
    first.handle("/docs/")
    changed = dict(SITE_FILES, **{"index.md": "# Changed"})
    second = Generator(MemoryLoader(changed), OPTIONS, cache=cache)
    assert second.generator_cache_key() != first.generator_cache_key()
    document = second.handle("/docs/")
    assert document is not None
    assert document.title == "Changed"


def test_corrupted_cache_degrades_to_scan(
    loader: MemoryLoader, caplog: pytest.LogCaptureFixture
) -> None:
    """Undecodable cached state is ignored with a warning."""
    cache = MemoryCache()
    generator = Generator(loader, OPTIONS, cache=cache)
    cache.set(generator.generator_cache_key(), b"not json")

    with caplog.at_level(logging.WARNING, logger="website_text"):
        document = generator.handle("/docs/guide/install")

    assert document is not None
    assert "not loaded from cache" in caplog.text


def test_failing_cache_is_absorbed(loader: MemoryLoader) -> None:
    """Cache errors never reach the caller."""
    generator = Generator(loader, OPTIONS, cache=FailingCache())
    document = generator.handle("/docs/guide/install")
    assert document is not None
    assert document.title == "Install"
    assert generator.clear_cache() is False


def test_clear_cache_removes_every_entry(loader: MemoryLoader) -> None:
    """Clearing deletes generator state and document entries."""
    cache = MemoryCache()
    generator = Generator(loader, OPTIONS, cache=cache)
    generator.handle("/docs/")
    assert len(cache) == 5, "expected generator state plus four documents"

    assert generator.clear_cache() is True
    assert len(cache) == 0
    assert generator.urls is None, "in-memory state is reset"
    assert generator.handle("/docs/") is not None, "a new request scans again"


def test_clear_cache_without_cache(generator: Generator) -> None:
    """Nothing is cleared when caching is disabled."""
    assert generator.clear_cache() is False
