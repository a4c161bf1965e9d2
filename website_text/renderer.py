"""Render a handled document into a standalone HTML page.

The page combines the post-processed document body with two navigation
trees: the site-wide summary (visible entries only, with the chain of the
current page flagged as selected) and the document's own table of contents.
Syntax highlighting CSS comes from the same Pygments style the Markdown
parser uses.
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup
from pygments.formatters.html import HtmlFormatter

if typ.TYPE_CHECKING:
    from website_text.document import Document
    from website_text.summary import Summary


class PageRenderer:
    """Render documents through the ``document.jinja`` template."""

    def __init__(
        self,
        pygments_style: str = "monokai",
        *,
        templates_dir: Path | None = None,
        site_title: str = "Documentation",
    ) -> None:
        """Configure the Jinja environment and the highlighting stylesheet.

        Parameters
        ----------
        pygments_style : str, optional
            Pygments style used to build the ``.codehilite`` CSS.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        site_title : str, optional
            Suffix appended to every page title.
        """
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.site_title = site_title
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template("document.jinja")

    @property
    def stylesheet(self) -> str:
        """Return the Pygments CSS for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def render(self, document: Document, summary: Summary | None = None) -> str:
        """Return the complete HTML page for ``document``.

        Parameters
        ----------
        document : Document
            A document returned by :meth:`Generator.handle`.
        summary : Summary, optional
            The shared site summary used for the navigation sidebar.
        """
        toc = document.summary
        fallback_title = document.filename_without_extension().rpartition("/")[2]
        context = {
            "title": document.title or fallback_title,
            "site_title": self.site_title,
            "content": Markup(document.rendered_content or document.content or ""),  # noqa: S704
            "navigation": list(summary) if summary is not None else [],
            "toc": list(toc) if toc is not None else [],
            "url": document.get_meta("url"),
            "updated_at": document.datetime,
            "generated_at": dt.datetime.now(dt.UTC),
            "pygments_css": self.stylesheet,
        }
        return self.template.render(**context)


__all__ = ["PageRenderer"]
