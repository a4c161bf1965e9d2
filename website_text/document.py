"""The document entity produced by parsers and refined by the generator.

A :class:`Document` starts life in a parser with raw text, the parser's HTML
and any metas found in the source. The generator then assigns the source
filename and URL meta, and the HTML post-processor fills
``rendered_content``, the title and the per-document summary.

Example
-------
>>> from website_text.document import Document
>>> Document(filename="docs/index.md").url_path()
'docs/'
>>> Document(filename="/docs/guide.md").url_path()
'/docs/guide'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import datetime as dt
import posixpath
import typing as typ

from website_text._constants import DEFAULT_INDEX_PAGES, META_URL
from website_text.summary import Summary


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


@dc.dataclass(slots=True)
class Document:
    """One page generated from one source file.

    Attributes
    ----------
    raw_content : str | None
        Source text as returned by the loader.
    title : str | None
        Page title, usually promoted from the first heading.
    filename : str | None
        Extension-bearing source path; set before caching or indexing.
    metas : dict[str, Any]
        Document metadata. Repeated names collapse into a list.
    content : str | None
        HTML produced by the parser, before post-processing.
    rendered_content : str | None
        Post-processed HTML; ``None`` until HTML treatment completes.
    datetime : datetime
        Timestamp of the source, defaulting to creation time.
    summary : Summary | None
        Table of contents extracted from the document's headings.
    """

    raw_content: str | None = None
    title: str | None = None
    filename: str | None = None
    metas: dict[str, typ.Any] = dc.field(default_factory=dict)
    content: str | None = None
    rendered_content: str | None = None
    datetime: dt.datetime = dc.field(default_factory=_utcnow)
    summary: Summary | None = None

    index_pages: typ.ClassVar[tuple[str, ...]] = DEFAULT_INDEX_PAGES

    def __str__(self) -> str:
        return self.rendered_content or self.content or self.raw_content or ""

    @property
    def is_rendered(self) -> bool:
        """Return whether HTML post-processing has completed."""
        return self.rendered_content is not None

    def filename_without_extension(self) -> str:
        """Return the filename with its final extension removed."""
        filename = self.filename or ""
        root, _ext = posixpath.splitext(filename)
        return root or filename

    def get_meta(self, name: str, default: typ.Any = None) -> typ.Any:  # noqa: ANN401
        """Return the meta ``name`` or ``default``."""
        return self.metas.get(name, default)

    def set_meta(self, name: str, value: object) -> Document:
        """Set ``name`` to ``value``, replacing any previous value."""
        self.metas[name] = value
        return self

    def add_meta(self, name: str, value: object) -> Document:
        """Record ``value`` for ``name``, collapsing repeats into a list."""
        if name not in self.metas:
            self.metas[name] = value
        elif isinstance(self.metas[name], list):
            self.metas[name].append(value)
        else:
            self.metas[name] = [self.metas[name], value]
        return self

    def url_path(self, index_pages: cabc.Iterable[str] | None = None) -> str:
        """Return the public URL path of the document.

        The ``url`` meta, when present, replaces the filename-derived path.
        A trailing index page segment is dropped so ``docs/index.md`` maps to
        ``docs/``. Absolute paths stay absolute and relative ones relative.

        Parameters
        ----------
        index_pages : Iterable[str], optional
            Segment names treated as directory index pages; defaults to
            :attr:`index_pages`.
        """
        names = tuple(index_pages) if index_pages is not None else self.index_pages
        override = self.get_meta(META_URL)
        path = override if isinstance(override, str) and override else None
        if path is None:
            path = self.filename_without_extension()
        absolute = path.startswith("/")
        path = path.lstrip("/")
        basename = posixpath.basename(path)
        if basename and basename in names:
            path = path[: -len(basename)]
        return f"/{path}" if absolute else path

    def to_payload(self) -> dict[str, typ.Any]:
        """Return a JSON-ready mapping used for caching."""
        return {
            "filename": self.filename,
            "title": self.title,
            "raw_content": self.raw_content,
            "content": self.content,
            "rendered_content": self.rendered_content,
            "metas": dict(self.metas),
            "datetime": self.datetime.isoformat(),
            "summary": self.summary.to_payload() if self.summary is not None else None,
        }

    @classmethod
    def from_payload(cls, payload: cabc.Mapping[str, typ.Any]) -> Document:
        """Rebuild a document from :meth:`to_payload` output."""
        summary_payload = payload.get("summary")
        timestamp = payload.get("datetime")
        return cls(
            raw_content=payload.get("raw_content"),
            title=payload.get("title"),
            filename=payload["filename"],
            metas=dict(payload.get("metas") or {}),
            content=payload.get("content"),
            rendered_content=payload.get("rendered_content"),
            datetime=dt.datetime.fromisoformat(timestamp) if timestamp else _utcnow(),
            summary=(
                Summary.from_payload(summary_payload)
                if summary_payload is not None
                else None
            ),
        )


__all__ = ["Document"]
