"""Extract a nested table of contents from the headings of one document.

Headings are visited in document order while a stack keeps the currently
open ancestors. Each heading receives a unique ``id`` so the summary entries
can link to it.
"""

from __future__ import annotations

import logging
import re
import typing as typ

from website_text.summary import Element, Summary

if typ.TYPE_CHECKING:
    from bs4 import Tag

    from website_text.document import Document

logger = logging.getLogger(__name__)

HEADING_TAGS = ("h2", "h3", "h4", "h5", "h6")
DEFAULT_SLUG = "section"

_STRIP_PATTERN = re.compile(r"[^\w\s-]")
_SPACE_PATTERN = re.compile(r"\s+")
_DASH_PATTERN = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """Convert heading text into an anchor-safe slug.

    Examples
    --------
    >>> slugify("Getting  Started!")
    'getting-started'
    >>> slugify("--A -- B--")
    'a-b'
    """
    slug = _STRIP_PATTERN.sub("", text)
    slug = _SPACE_PATTERN.sub("-", slug)
    slug = _DASH_PATTERN.sub("-", slug)
    return slug.lower().strip("-")


def _heading_level(tag: Tag) -> int:
    return int(tag.name[1])


def _id_in_use(root: Tag, candidate: str, heading: Tag) -> bool:
    """Return whether another element of ``root`` already carries ``candidate``."""
    return any(tag is not heading for tag in root.find_all(id=candidate))


def _unique_id(root: Tag, base: str, heading: Tag) -> str:
    """Return ``base`` or ``base-N``, whichever is first unused in ``root``."""
    candidate = base
    suffix = 1
    while _id_in_use(root, candidate, heading):
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def _resolve_heading_id(root: Tag, heading: Tag, ancestors: list[Element], title: str) -> str:
    existing = heading.get("id")
    if isinstance(existing, str) and existing and not _id_in_use(root, existing, heading):
        return existing

    slugs = [slugify(element.title) for element in ancestors]
    slugs.append(slugify(title))
    base = "-".join(slug for slug in slugs if slug) or DEFAULT_SLUG
    resolved = _unique_id(root, base, heading)
    heading["id"] = resolved
    return resolved


def extract_document_summary(document: Document, root: Tag, url: str) -> Summary:
    """Build the summary of ``document`` from the headings found in ``root``.

    Parameters
    ----------
    document : Document
        Document owning the headings; used for logging only.
    root : Tag
        Parsed body whose ``h2``-``h6`` headings are visited in order. Heading
        ids are written back onto the tags.
    url : str
        URL path of the document, stored on every entry.

    Returns
    -------
    Summary
        Root holding the top-level headings, nested by heading level. Entries
        carry their document position as ``order`` so siblings keep document
        order.
    """
    summary = Summary()
    stack: list[tuple[int, Element]] = []

    for position, heading in enumerate(root.find_all(HEADING_TAGS)):
        try:
            level = _heading_level(heading)
            while stack and stack[-1][0] >= level:
                stack.pop()

            title = heading.get_text().strip()
            ancestors = [element for _level, element in stack]
            heading_id = _resolve_heading_id(root, heading, ancestors, title)
            element = Element(
                title, url=url, id=heading_id, order=position, visible=True
            )

            parent = stack[-1][1] if stack else summary
            parent.add_sub_element(element)
            stack.append((level, element))
        except (ValueError, TypeError, IndexError) as exc:
            logger.debug(
                "Skipping heading %r of document %r: %s",
                heading.get_text()[:40],
                document.filename,
                exc,
            )

    logger.debug("Summary extracted from document %r", document.filename)
    return summary


__all__ = ["HEADING_TAGS", "extract_document_summary", "slugify"]
