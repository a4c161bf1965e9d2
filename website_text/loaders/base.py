"""Loader capability and the include/exclude filtering shared by backends."""

from __future__ import annotations

import abc
import collections.abc as cabc
import hashlib
import re
import typing as typ

from website_text.exceptions import LoaderError


@typ.runtime_checkable
class Loader(typ.Protocol):
    """Source of raw document text."""

    def scan(self) -> list[str]:
        """Return every available source path."""
        ...

    def load(self, path: str) -> str:
        """Return the text of ``path``."""
        ...

    def unique_id(self) -> str:
        """Return an identity that is stable for a given configuration."""
        ...


def _compile_filters(patterns: cabc.Iterable[str]) -> list[re.Pattern[str]]:
    """Compile case-insensitive filters, failing eagerly on invalid patterns."""
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            msg = f'Invalid filter format: "{pattern}", must be a valid regex'
            raise LoaderError(msg) from exc
    return compiled


def normalize_path(path: str) -> str:
    """Return ``path`` with ``/`` separators and a single leading slash."""
    return "/" + path.replace("\\", "/").lstrip("/")


def hash_identity(*parts: object) -> str:
    """Return the SHA-1 hex digest of ``parts`` joined with ``-``."""
    joined = "-".join("" if part is None else str(part) for part in parts)
    return hashlib.sha1(joined.encode("utf-8")).hexdigest()  # noqa: S324


class AbstractLoader(abc.ABC):
    """Base class handling path filters and listing memoisation.

    Parameters
    ----------
    include : Iterable[str], optional
        Regular expressions; when given, a path must match at least one.
    exclude : Iterable[str], optional
        Regular expressions; a path matching any of them is skipped.

    Raises
    ------
    LoaderError
        If a filter is not a valid regular expression.
    """

    def __init__(
        self,
        *,
        include: cabc.Iterable[str] = (),
        exclude: cabc.Iterable[str] = (),
    ) -> None:
        self.include = list(include)
        self.exclude = list(exclude)
        self._include_patterns = _compile_filters(self.include)
        self._exclude_patterns = _compile_filters(self.exclude)
        self._paths: list[str] | None = None

    def accepts(self, path: str) -> bool:
        """Return whether ``path`` passes the include and exclude filters."""
        if self._include_patterns and not any(
            pattern.search(path) for pattern in self._include_patterns
        ):
            return False
        return not any(pattern.search(path) for pattern in self._exclude_patterns)

    def scan(self) -> list[str]:
        """Return the filtered source paths, listing the source only once."""
        if self._paths is None:
            self._paths = [path for path in self.list_paths() if self.accepts(path)]
        return list(self._paths)

    def refresh(self) -> None:
        """Forget the memoised listing so the next scan lists again."""
        self._paths = None

    @abc.abstractmethod
    def list_paths(self) -> list[str]:
        """Return every path of the source, before filtering."""

    @abc.abstractmethod
    def load(self, path: str) -> str:
        """Return the text of ``path``."""

    @abc.abstractmethod
    def unique_id(self) -> str:
        """Return an identity that is stable for a given configuration."""


__all__ = ["AbstractLoader", "Loader", "hash_identity", "normalize_path"]
