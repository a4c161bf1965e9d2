"""reStructuredText adapter built on docutils.

The document title is taken from docutils' title promotion, and the field
list at the top of a file (its bibliographic "docinfo") becomes document
metas, so ``:index: Guide;Install`` places the page in the site summary.
"""

from __future__ import annotations

import typing as typ

from docutils import nodes
from docutils.core import publish_doctree, publish_parts
from docutils.utils import SystemMessage

from website_text.document import Document
from website_text.exceptions import ParserError

from .base import Parser

SETTINGS_OVERRIDES: dict[str, typ.Any] = {
    "doctitle_xform": True,
    "file_insertion_enabled": False,
    "raw_enabled": False,
    "report_level": 5,
    "input_encoding": "unicode",
    "_disable_config": True,
}


def _docinfo_metas(doctree: nodes.document) -> dict[str, str]:
    """Return the docinfo fields of ``doctree`` as a name -> text mapping."""
    metas: dict[str, str] = {}
    for docinfo in doctree.findall(nodes.docinfo):
        for child in docinfo.children:
            if isinstance(child, nodes.field):
                name = child[0].astext().strip().lower()
                value = child[1].astext().strip()
            else:
                name = child.tagname
                value = child.astext().strip()
            if name:
                metas[name] = value
    return metas


class RstParser(Parser):
    """Render reStructuredText into an HTML5 fragment."""

    writer_name = "html5"

    def convert(self, text: str) -> Document:
        """Render ``text`` into a document with HTML content, title and metas."""
        try:
            doctree = publish_doctree(text, settings_overrides=SETTINGS_OVERRIDES)
            parts = publish_parts(
                text,
                writer_name=self.writer_name,
                settings_overrides=SETTINGS_OVERRIDES,
            )
        except (SystemMessage, ValueError, TypeError) as exc:
            msg = "An error occurred during parsing of reStructuredText content"
            raise ParserError(msg) from exc

        title = doctree.get("title") or None
        document = Document(content=parts["body"].strip(), title=title)
        for name, value in _docinfo_metas(doctree).items():
            document.set_meta(name, value)
        return document


__all__ = ["RstParser"]
