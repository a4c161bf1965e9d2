"""Typed dataclasses describing generator options and site configuration."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ
from pathlib import Path

from website_text._constants import DEFAULT_EXTERNAL_REL, DEFAULT_INDEX_PAGES


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


def _as_tuple(value: object) -> tuple[str, ...]:
    """Normalize a string or list of strings into a tuple of non-empty strings."""
    match value:
        case None:
            return ()
        case str():
            return (value,) if value.strip() else ()
        case list() | tuple():
            return tuple(str(item).strip() for item in value if str(item).strip())
        case _:
            msg = f"Expected a string or a list of strings, got {value!r}"
            raise SiteConfigError(msg)


TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})


def _as_flag(value: object) -> bool:
    """Return ``True`` only for ``True`` or a string spelling of it.

    Examples
    --------
    >>> _as_flag("false"), _as_flag("True"), _as_flag(1)
    (False, True, False)
    """
    match value:
        case bool():
            return value
        case str():
            return value.strip().lower() in TRUE_STRINGS
        case _:
            return False


@dc.dataclass(slots=True)
class GeneratorOptions:
    """Options recognised by :class:`~website_text.generator.Generator`.

    Attributes
    ----------
    hosts : tuple[str, ...]
        Hostnames considered internal (``url.host``). External link handling
        is disabled while this is empty.
    host_external_blank : bool
        Open links to other hosts in a new browsing context.
    host_external_rel : str
        ``rel`` value applied to external links.
    url_prefix : str
        Prefix prepended to every document URL.
    images_path : str
        Base path prepended to resolved image sources; empty disables it.
    remove_h1 : bool
        Promote the first ``h1`` to the document title and remove it.
    parse_summary : bool
        Extract a per-document summary from ``h2``-``h6`` headings.
    summary : bool
        Maintain the shared site-wide summary.
    index_pages : tuple[str, ...]
        Final path segments dropped from URLs (``docs/index`` -> ``docs/``).
    """

    hosts: tuple[str, ...] = ()
    host_external_blank: bool = True
    host_external_rel: str = DEFAULT_EXTERNAL_REL
    url_prefix: str = ""
    images_path: str = ""
    remove_h1: bool = True
    parse_summary: bool = True
    summary: bool = True
    index_pages: tuple[str, ...] = DEFAULT_INDEX_PAGES

    OPTION_NAMES: typ.ClassVar[dict[str, str]] = {
        "url.host": "hosts",
        "url.host_external_blank": "host_external_blank",
        "url.host_external_rel": "host_external_rel",
        "url.prefix": "url_prefix",
        "url.images-path": "images_path",
        "url.index-pages": "index_pages",
        "parsing.remove-h1": "remove_h1",
        "parsing.summary": "parse_summary",
        "summary": "summary",
    }

    @classmethod
    def from_mapping(cls, payload: cabc.Mapping[str, typ.Any] | None) -> GeneratorOptions:
        """Build options from dotted option names, ignoring unknown keys.

        Examples
        --------
        >>> opts = GeneratorOptions.from_mapping({"url.host": "example.com", "x": 1})
        >>> opts.hosts
        ('example.com',)
        """
        options = cls()
        for key, value in (payload or {}).items():
            attribute = cls.OPTION_NAMES.get(key)
            if attribute is None:
                continue
            options.set(attribute, value)
        return options

    def set(self, attribute: str, value: object) -> None:
        """Assign ``value`` to ``attribute`` with type normalization."""
        match attribute:
            case "hosts" | "index_pages":
                setattr(self, attribute, _as_tuple(value))
            case "url_prefix" | "images_path" | "host_external_rel":
                setattr(self, attribute, "" if value is None else str(value))
            case "host_external_blank" | "remove_h1" | "parse_summary" | "summary":
                setattr(self, attribute, _as_flag(value))
            case _:
                msg = f"Unknown generator option '{attribute}'"
                raise SiteConfigError(msg)


@dc.dataclass(slots=True)
class SourceConfig:
    """Where source documents are loaded from."""

    type: str = "filesystem"
    path: Path | None = None
    owner: str | None = None
    repository: str | None = None
    branch: str = "master"
    directory: str = ""
    api: str | None = None
    project: str | None = None
    token: str | None = None
    include: list[str] = dc.field(default_factory=list)
    exclude: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class CacheConfig:
    """Persistent cache location; ``None`` disables caching."""

    directory: Path | None = None


@dc.dataclass(slots=True)
class SiteConfig:
    """A fully resolved site definition sourced from YAML config."""

    source: SourceConfig
    options: GeneratorOptions = dc.field(default_factory=GeneratorOptions)
    cache: CacheConfig = dc.field(default_factory=CacheConfig)
    pygments_style: str = "monokai"


__all__ = [
    "CacheConfig",
    "GeneratorOptions",
    "SiteConfig",
    "SiteConfigError",
    "SourceConfig",
]
