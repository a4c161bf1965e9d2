r"""Markdown adapter built on Python-Markdown and Pygments.

Besides the usual Markdown Extra syntax, source files may carry meta lines
that are hidden from the output and stored on the document::

    !meta index Guide;Install
    !meta index-order 2

Example
-------
>>> from website_text.parsers.markdown import MarkdownParser
>>> doc = MarkdownParser().convert("!meta url /start\n# Hello\n")
>>> doc.metas
{'url': '/start'}
>>> doc.content
'<h1>Hello</h1>'
"""

from __future__ import annotations

import re
import typing as typ
from html import escape

from markdown import Markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from pygments.formatters.html import HtmlFormatter

from website_text.document import Document
from website_text.exceptions import ParserError

from .base import Parser

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
FENCE_PATTERN = re.compile(r"^\s{0,3}([`~]{3,})")
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
META_PATTERN = re.compile(
    r"^!meta\s+(?P<name>[\w\-]+)\s+(?P<value>.+?)\s*$", re.IGNORECASE
)


def _coerce_meta(value: str) -> str | bool:
    """Map ``true``/``false`` literals to booleans."""
    match value.lower():
        case "true":
            return True
        case "false":
            return False
        case _:
            return value


class MetaExtension(Extension):
    """Collect ``!meta name value`` lines into a metadata mapping."""

    def __init__(self) -> None:
        super().__init__()
        self.metas: dict[str, typ.Any] = {}

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the meta preprocessor ahead of fenced code handling."""
        md.preprocessors.register(MetaPreprocessor(md, self), "website_text_meta", 30)

    def add(self, name: str, value: str | bool) -> None:  # noqa: FBT001
        """Record ``value`` for ``name``, collapsing repeats into a list."""
        if name not in self.metas:
            self.metas[name] = value
        elif isinstance(self.metas[name], list):
            self.metas[name].append(value)
        else:
            self.metas[name] = [self.metas[name], value]


class MetaPreprocessor(Preprocessor):
    """Strip meta lines outside fenced code blocks."""

    def __init__(self, md: Markdown, extension: MetaExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, lines: list[str]) -> list[str]:
        """Return ``lines`` without meta lines, recording them on the extension."""
        kept: list[str] = []
        fence: str | None = None
        for line in lines:
            fence_match = FENCE_PATTERN.match(line)
            if fence_match:
                marker = fence_match.group(1)
                if fence is None:
                    fence = marker
                elif marker.startswith(fence):
                    fence = None
            elif fence is None:
                meta = META_PATTERN.match(line)
                if meta:
                    self.extension.add(
                        meta.group("name").strip(),
                        _coerce_meta(meta.group("value").strip()),
                    )
                    continue
            kept.append(line)
        return kept


class MarkdownParser(Parser):
    """Render Markdown Extra with highlighted code blocks."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize the parser with the Pygments style used for code blocks."""
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def convert(self, text: str) -> Document:
        """Render ``text`` into a document with HTML content and metas."""
        metas = MetaExtension()
        md = Markdown(
            extensions=["extra", "codehilite", "sane_lists", metas],
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        normalized = self._normalize_fenced_blocks(text)
        try:
            html = md.convert(normalized)
        except (ValueError, TypeError, RecursionError) as exc:
            msg = "An error occurred during parsing of markdown content"
            raise ParserError(msg) from exc

        document = Document(content=self._annotate_codehilite(html, normalized))
        for name, value in metas.metas.items():
            document.set_meta(name, value)
        return document

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markdown."""
        languages = [
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(_match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


__all__ = ["MarkdownParser", "MetaExtension", "MetaPreprocessor"]
