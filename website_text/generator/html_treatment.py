"""Post-process the HTML a parser produced for one document.

The treatment runs once per document and, in order: rewrites intra-site
links to the URL of the linked document, flags links to foreign hosts,
prefixes image sources, promotes the first ``h1`` to the document title and
extracts the per-document summary from the remaining headings.

The HTML is wrapped in a minimal document declaring ``SOURCE_ENCODING``,
the encoding every loader decodes its sources with, before BeautifulSoup
loads it.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import typing as typ

from bs4 import BeautifulSoup
from bs4.exceptions import ParserRejectedMarkup
from soupsieve import SelectorSyntaxError

from website_text._constants import SOURCE_ENCODING
from website_text.exceptions import GenerationError

from .link_rewriter import (
    extract_host,
    is_internal_host,
    resolve_relative_path,
    split_reference,
)
from .toc import extract_document_summary

if typ.TYPE_CHECKING:
    from bs4 import Tag

    from website_text.config import GeneratorOptions
    from website_text.document import Document

logger = logging.getLogger(__name__)

DocumentLookup = cabc.Callable[[str], "Document | None"]
HTML_SHELL = '<html><head><meta charset="{encoding}"></head><body>{body}</body></html>'


class HtmlTreatment:
    """Rewrite a parsed document's HTML in place.

    Parameters
    ----------
    options : GeneratorOptions
        Link, image and heading handling options.
    lookup : Callable[[str], Document | None]
        Returns the document generated from a source path, parsing it on
        demand, or ``None`` when the path is not part of the source set.
    """

    def __init__(self, options: GeneratorOptions, lookup: DocumentLookup) -> None:
        self.options = options
        self._lookup = lookup

    def apply(self, document: Document) -> Document:
        """Run every treatment on ``document`` and store the rendered body.

        Raises
        ------
        GenerationError
            If the HTML cannot be loaded or queried.
        """
        filename = document.filename or ""
        html = document.content or ""
        try:
            soup = BeautifulSoup(
                HTML_SHELL.format(encoding=SOURCE_ENCODING, body=html), "html.parser"
            )
            body = soup.body
            if body is None:
                msg = "document has no body"
                raise ValueError(msg)
            self._rewrite_links(filename, body)
            self._rewrite_images(filename, body)
            if self.options.remove_h1:
                self._promote_title(document, body)
            if self.options.parse_summary:
                document.summary = extract_document_summary(
                    document, body, document.url_path(self.options.index_pages)
                )
            document.rendered_content = body.decode_contents()
        except (ParserRejectedMarkup, SelectorSyntaxError, ValueError) as exc:
            msg = f'Unable to treat document "{filename}", bad html format'
            raise GenerationError(msg, path=filename) from exc

        logger.debug("HTML treatments done on document %r", filename)
        return document

    def _rewrite_links(self, filename: str, body: Tag) -> None:
        for link in body.select("a[href]"):
            href = str(link.get("href", ""))
            path, suffix = split_reference(href)
            resolved = resolve_relative_path(filename, path)
            linked = self._lookup(resolved) if resolved is not None else None
            if linked is not None:
                link["href"] = f"{linked.url_path(self.options.index_pages)}{suffix}"
                continue
            self._flag_external(link, href)

    def _flag_external(self, link: Tag, href: str) -> None:
        if not self.options.hosts or not self.options.host_external_blank:
            return
        host = extract_host(href)
        if host and not is_internal_host(host, self.options.hosts):
            link["target"] = "_blank"
            link["rel"] = self.options.host_external_rel

    def _rewrite_images(self, filename: str, body: Tag) -> None:
        prefix = self.options.images_path
        if not prefix:
            return
        for image in body.select("img[src]"):
            resolved = resolve_relative_path(filename, str(image.get("src", "")))
            if resolved is not None:
                image["src"] = f"{prefix.rstrip('/')}{resolved}"

    @staticmethod
    def _promote_title(document: Document, body: Tag) -> None:
        heading = body.find("h1")
        if heading is None:
            return
        document.title = heading.get_text().strip()
        heading.decompose()


__all__ = ["HtmlTreatment"]
