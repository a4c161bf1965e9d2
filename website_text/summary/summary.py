"""Root of a summary tree and index-path placement of documents."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from website_text._constants import (
    INDEX_SEPARATOR,
    META_INDEX,
    META_INDEX_ORDER,
    META_INDEX_VISIBLE,
)

from .element import Element, SummaryNode

if typ.TYPE_CHECKING:
    from website_text.document import Document


def _filter_titles(titles: cabc.Iterable[str]) -> list[str]:
    """Trim breadcrumb titles and drop the empty ones."""
    return [title.strip() for title in titles if title and title.strip()]


def _split_index(value: object) -> list[str]:
    """Split an ``index`` meta value into breadcrumb titles."""
    match value:
        case str():
            return _filter_titles(value.split(INDEX_SEPARATOR))
        case list() | tuple():
            # Repeated ``index`` metas collapse into a list; the last one wins.
            return _split_index(value[-1]) if value else []
        case _:
            return []


def _coerce_order(value: object) -> int | None:
    """Return ``value`` as an integer sort key, or ``None``."""
    match value:
        case bool():
            return None
        case int():
            return value
        case str() if value.strip().lstrip("-").isdigit():
            return int(value.strip())
        case _:
            return None


class Summary(SummaryNode):
    """Site-wide or per-document table of contents.

    Documents are placed with their ``index`` meta, a ``;`` separated
    breadcrumb of titles. Existing entries along the breadcrumb are reused by
    title; missing ones are created as invisible grouping entries.

    Examples
    --------
    >>> from website_text.document import Document
    >>> summary = Summary()
    >>> doc = Document(filename="/guide/install.md", metas={"index": "Guide;Install"})
    >>> _ = summary.add_document(doc)
    >>> summary.find_by_titles(["Guide", "Install"]).url
    '/guide/install'
    """

    def add_document(self, document: Document) -> Summary:
        """Insert ``document`` at the position named by its ``index`` meta."""
        titles = _split_index(document.get_meta(META_INDEX))
        if not titles:
            return self

        parent: SummaryNode = self
        element: Element | None = None
        for title in titles:
            element = parent.get_element_by_title(title)
            if element is None:
                element = Element(title)
                parent.add_sub_element(element)
            parent = element

        if element is not None:
            element.url = document.url_path()
            element.order = _coerce_order(document.get_meta(META_INDEX_ORDER))
            if document.get_meta(META_INDEX_VISIBLE, True) is not False:
                element.set_visible(True, recursive=True)
        return self

    def find_by_titles(self, titles: cabc.Iterable[str]) -> Element | None:
        """Follow a breadcrumb of titles from the root."""
        filtered = _filter_titles(titles)
        if not filtered:
            return None
        node: SummaryNode | None = self
        for title in filtered:
            node = node.get_element_by_title(title) if node is not None else None
        return node if isinstance(node, Element) else None

    def find_by_url(self, url: str) -> Element | None:
        """Return the first page entry (no anchor) pointing at ``url``."""
        for element in self.walk():
            if element.url == url and not element.id:
                return element
        return None

    def find_by_document(self, document: Document) -> Element | None:
        """Locate the entry that represents ``document``.

        The ``index`` breadcrumb is authoritative; documents without one are
        matched by URL.
        """
        titles = _split_index(document.get_meta(META_INDEX))
        if titles:
            return self.find_by_titles(titles)
        return self.find_by_url(document.url_path())

    def reset_selected(self) -> None:
        """Clear the selection flag on every entry."""
        for element in self.walk():
            element.selected = False

    def to_payload(self) -> list[dict[str, typ.Any]]:
        """Return the JSON-ready list of top-level entries."""
        return self._children_payload()

    @classmethod
    def from_payload(cls, payload: cabc.Iterable[cabc.Mapping[str, typ.Any]]) -> Summary:
        """Rebuild a summary, restoring parent back-references."""
        summary = cls()
        summary.set_sub_elements(Element.from_payload(item) for item in payload)
        return summary


__all__ = ["Summary"]
