"""Helpers for resolving relative references between source documents.

Only references that start with ``/`` (but not ``//``), ``./`` or ``../`` are
treated as site-relative. Everything else, including absolute URLs,
protocol-relative ``//host`` links and bare fragments, is left to the caller
as an external or opaque reference.

Example
-------
>>> resolve_relative_path("/docs/guide.md", "../images/a.png")
'/images/a.png'
>>> resolve_relative_path("/a.md", "http://x.com") is None
True
"""

from __future__ import annotations

import collections.abc as cabc
import re
from urllib.parse import urlsplit

MULTIPLE_SLASHES = re.compile(r"/{2,}")
CURRENT_SEGMENT = re.compile(r"/\./")
PARENT_SEGMENT = re.compile(r'/(?!\.\.?/)[^/?%*:|"<>\\]+/\.\./')


def is_relative_reference(reference: str) -> bool:
    """Return whether ``reference`` points inside the site."""
    if reference.startswith("/"):
        return not reference.startswith("//")
    return reference.startswith(("./", "../"))


def resolve_relative_path(base_path: str, reference: str) -> str | None:
    """Resolve ``reference`` found in the document at ``base_path``.

    Parameters
    ----------
    base_path : str
        Source path of the document containing the reference.
    reference : str
        The ``href``/``src`` value to resolve.

    Returns
    -------
    str | None
        The normalized source path, or ``None`` when ``reference`` is not a
        site-relative reference or still contains unresolved ``./`` segments
        after normalization.
    """
    reference = reference.strip()
    if not is_relative_reference(reference):
        return None

    reference = reference.replace("\\", "/")
    directory = _dirname(base_path.replace("\\", "/"))
    resolved = f"{directory.rstrip('/')}/{reference.lstrip('/')}"
    resolved = MULTIPLE_SLASHES.sub("/", resolved)
    resolved = _collapse(CURRENT_SEGMENT, resolved)
    resolved = _collapse(PARENT_SEGMENT, resolved)

    if "./" in resolved:
        return None
    return resolved


def split_reference(reference: str) -> tuple[str, str]:
    """Split ``reference`` into its path and a ``?query#fragment`` suffix.

    The suffix starts at whichever marker comes first, so a fragment such as
    ``#what?`` stays whole.

    Examples
    --------
    >>> split_reference("./a.md#what?")
    ('./a.md', '#what?')
    """
    positions = [
        position
        for position in (reference.find("?"), reference.find("#"))
        if position > 0
    ]
    if not positions:
        return reference, ""
    position = min(positions)
    return reference[:position], reference[position:]


def extract_host(reference: str) -> str:
    """Return the literal host of ``reference``, or ``""`` when it has none."""
    netloc = urlsplit(reference.strip()).netloc
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        return host.partition("]")[0] + "]"
    return host.partition(":")[0]


def is_internal_host(host: str, internal_hosts: cabc.Iterable[str]) -> bool:
    """Return whether ``host`` equals, or is a subdomain of, an internal host.

    Comparison is literal, so ``Example.com`` and ``example.com`` differ.
    A leading dot on an internal host (``.example.com``) is accepted.
    """
    for internal in internal_hosts:
        bare = internal.lstrip(".")
        if not bare:
            continue
        if host == bare or host.endswith(f".{bare}"):
            return True
    return False


def _dirname(path: str) -> str:
    """Return the directory part of ``path`` without a trailing separator."""
    head, sep, _tail = path.rpartition("/")
    if not sep:
        return ""
    return head or "/"


def _collapse(pattern: re.Pattern[str], path: str) -> str:
    """Apply ``pattern`` until the path reaches a fixed point."""
    while True:
        path, count = pattern.subn("/", path)
        if not count:
            return path


__all__ = [
    "extract_host",
    "is_internal_host",
    "is_relative_reference",
    "resolve_relative_path",
    "split_reference",
]
