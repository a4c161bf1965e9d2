"""Serve documents from an in-memory mapping of path to text."""

from __future__ import annotations

import collections.abc as cabc

from website_text.exceptions import LoaderError

from .base import AbstractLoader, hash_identity, normalize_path


class MemoryLoader(AbstractLoader):
    """Loader backed by a mapping, handy for embedding and tests.

    Examples
    --------
    >>> loader = MemoryLoader({"index.md": "# Home"})
    >>> loader.scan()
    ['/index.md']
    >>> loader.load("/index.md")
    '# Home'
    """

    def __init__(
        self,
        files: cabc.Mapping[str, str],
        *,
        include: cabc.Iterable[str] = (),
        exclude: cabc.Iterable[str] = (),
    ) -> None:
        super().__init__(include=include, exclude=exclude)
        self.files = {normalize_path(path): text for path, text in files.items()}

    def list_paths(self) -> list[str]:
        return sorted(self.files)

    def load(self, path: str) -> str:
        try:
            return self.files[normalize_path(path)]
        except KeyError as exc:
            msg = f'File "{path}" doesn\'t exist'
            raise LoaderError(msg) from exc

    def unique_id(self) -> str:
        """Return a SHA-1 over the sorted paths and their contents."""
        return hash_identity(
            *(f"{path}:{text}" for path, text in sorted(self.files.items()))
        )


__all__ = ["MemoryLoader"]
