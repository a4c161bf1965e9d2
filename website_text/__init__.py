"""Generate linked, summarised HTML documents from a tree of text files.

A :class:`Generator` reads Markdown or reStructuredText sources through a
loader (local directory, GitHub or GitLab repository), rewrites links between
documents into their public URLs, extracts per-document tables of contents
and maintains a site-wide summary for navigation.

Exports
-------
- ``Generator``: orchestrates scanning, caching and request handling.
- ``Document``: the generated page.
- ``app`` / ``main``: the ``website-text`` Cyclopts application.

Examples
--------
>>> from website_text import Generator
>>> from website_text.loaders import MemoryLoader
>>> generator = Generator(MemoryLoader({"index.md": "# Home"}))
>>> generator.handle("/").title
'Home'
"""

from __future__ import annotations

from .cli import app, main
from .document import Document
from .exceptions import (
    CacheError,
    GenerationError,
    LoaderError,
    ParserError,
    WebsiteTextError,
)
from .generator import Generator, Request

__all__ = [
    "CacheError",
    "Document",
    "GenerationError",
    "Generator",
    "LoaderError",
    "ParserError",
    "Request",
    "WebsiteTextError",
    "app",
    "main",
]
