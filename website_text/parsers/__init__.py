"""Source format adapters and the registry of default parsers."""

from __future__ import annotations

import collections.abc as cabc

from .base import Parser
from .markdown import MarkdownParser
from .rst import RstParser

DEFAULT_PARSERS: dict[str, cabc.Callable[[], Parser]] = {
    "md": MarkdownParser,
    "rst": RstParser,
}


def default_parser(file_format: str) -> Parser | None:
    """Return a fresh default parser for ``file_format``, if one is known."""
    factory = DEFAULT_PARSERS.get(file_format)
    return factory() if factory is not None else None


__all__ = [
    "DEFAULT_PARSERS",
    "MarkdownParser",
    "Parser",
    "RstParser",
    "default_parser",
]
