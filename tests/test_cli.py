"""Tests for the ``website-text`` command functions.

The Cyclopts commands are plain functions, so they are called directly with a
temporary configuration file describing a filesystem source and a file cache.
"""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest
from bs4 import BeautifulSoup

from website_text.cli import build_generator, clear_cache, scan, show
from website_text.config import load_site_config

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Write a small site and a configuration pointing at it."""
    docs = tmp_path / "docs"
    (docs / "guide").mkdir(parents=True)
    (docs / "index.md").write_text(
        "!meta index Home\n# Welcome\n\nGo to [install](./guide/install.md).\n",
        encoding="utf-8",
    )
    (docs / "guide" / "install.md").write_text(
        "!meta index Guide;Install\n# Install\n\n## Steps\n\n```python\nprint(1)\n```\n",
        encoding="utf-8",
    )
    (docs / "broken.txt").write_text("no parser", encoding="utf-8")
    path = tmp_path / "website-text.yaml"
    path.write_text(
        dedent(
            """\
            source:
              type: filesystem
              path: docs
            cache:
              directory: cache
            options:
              url.prefix: /docs
            """
        ),
        encoding="utf-8",
    )
    return path


def test_show_prints_full_page(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """The page template wraps the document with navigation and TOC."""
    show("/docs/guide/install", config=config_path)
    soup = BeautifulSoup(capsys.readouterr().out, "html.parser")

    assert soup.title.get_text() == "Install | Documentation"
    nav = soup.select_one("nav.site-summary")
    assert nav is not None, "expected the site summary navigation"
    selected = [item.find(["a", "span"]).get_text() for item in nav.select("li.selected")]
    assert selected == ["Guide", "Install"], "the served chain is highlighted"
    toc_links = [link["href"] for link in soup.select("nav.document-toc a")]
    assert toc_links == ["/docs/guide/install#steps"]
    assert soup.select_one("article .codehilite") is not None
    assert ".codehilite" in soup.style.get_text(), "Pygments CSS is embedded"


def test_show_body_only_to_file(config_path: Path, tmp_path: Path) -> None:
    """``--body-only`` writes just the post-processed document HTML."""
    output = tmp_path / "out" / "index.html"
    show("/docs/", config=config_path, output=output, body_only=True)
    soup = BeautifulSoup(output.read_text(encoding="utf-8"), "html.parser")
    assert soup.find("a")["href"] == "/docs/guide/install"
    assert soup.find("html") is None, "no page template around the body"


def test_show_unknown_path_exits(config_path: Path) -> None:
    """Requests without a document exit with an error message."""
    with pytest.raises(SystemExit, match="No document found"):
        show("/docs/missing", config=config_path)


def test_scan_reports_urls_summary_and_errors(
    config_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """The scan lists every URL, the summary tree and failed documents."""
    scan(config=config_path)
    lines = capsys.readouterr().out.splitlines()

    assert "/docs/ -> /index.md" in lines
    assert "/docs/guide/install -> /guide/install.md" in lines
    assert "- Home /docs/" in lines
    assert "  - Install /docs/guide/install" in lines
    assert any(line.startswith("error /broken.txt:") for line in lines), (
        f"expected an error line for broken.txt in {lines!r}"
    )


def test_clear_cache_after_scan(config_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Cached state written by a scan can be cleared."""
    scan(config=config_path)
    generator = build_generator(load_site_config(config_path))
    assert generator.cache is not None
    assert generator.cache.has(generator.generator_cache_key())
    capsys.readouterr()

    clear_cache(config=config_path)
    assert capsys.readouterr().out.strip() == "cache cleared"
    assert not generator.cache.has(generator.generator_cache_key())
