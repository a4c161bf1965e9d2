"""Exception taxonomy shared by loaders, parsers, caches and the generator."""

from __future__ import annotations


class WebsiteTextError(RuntimeError):
    """Base class for every error raised by website_text."""


class LoaderError(WebsiteTextError):
    """Raised when a source cannot be listed or a file cannot be loaded."""


class ParserError(WebsiteTextError):
    """Raised when a parser cannot convert source text into a document."""


class GenerationError(WebsiteTextError):
    """Raised when a document cannot be generated.

    Attributes
    ----------
    path : str | None
        Source path of the offending document, when known.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class CacheError(WebsiteTextError):
    """Raised by cache backends; the generator always treats it as recoverable."""


__all__ = [
    "CacheError",
    "GenerationError",
    "LoaderError",
    "ParserError",
    "WebsiteTextError",
]
