"""Load documents from a directory tree."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from website_text._constants import SOURCE_ENCODING
from website_text.exceptions import LoaderError

from .base import AbstractLoader, hash_identity, normalize_path

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class FileSystemLoader(AbstractLoader):
    """Serve every readable file below ``base_path``.

    Paths are reported relative to ``base_path`` with a leading ``/``
    (``/guide/install.md``). Filters are matched against the full filesystem
    path.
    """

    def __init__(
        self,
        base_path: Path | str,
        *,
        include: cabc.Iterable[str] = (),
        exclude: cabc.Iterable[str] = (),
    ) -> None:
        super().__init__(include=include, exclude=exclude)
        self.base_path = Path(base_path)

    def scan(self) -> list[str]:
        """Return the filtered source paths, in sorted order."""
        if self._paths is None:
            self._paths = self.list_paths()
        return list(self._paths)

    def list_paths(self) -> list[str]:
        """Walk ``base_path`` and return the filtered relative paths.

        Raises
        ------
        LoaderError
            If the base directory does not exist.
        """
        if not self.base_path.is_dir():
            msg = f'Directory "{self.base_path}" does not exist'
            raise LoaderError(msg)
        paths: list[str] = []
        for candidate in sorted(self.base_path.rglob("*")):
            if not candidate.is_file() or not self.accepts(candidate.as_posix()):
                continue
            relative = candidate.relative_to(self.base_path).as_posix()
            paths.append(normalize_path(relative))
        return paths

    def load(self, path: str) -> str:
        """Return the text of ``path`` decoded with ``SOURCE_ENCODING``.

        Raises
        ------
        LoaderError
            If the file is missing, unreadable, or escapes ``base_path``.
        """
        root = self.base_path.resolve()
        full_path = (root / path.replace("\\", "/").lstrip("/")).resolve()
        if not full_path.is_relative_to(root):
            msg = f'Unable to load file "{path}", outside of "{self.base_path}" directory'
            raise LoaderError(msg)
        try:
            return full_path.read_text(encoding=SOURCE_ENCODING)
        except (OSError, UnicodeDecodeError) as exc:
            msg = f'Unable to load file "{path}", in "{self.base_path}" directory'
            raise LoaderError(msg) from exc

    def unique_id(self) -> str:
        """Return a SHA-1 of the base path."""
        return hash_identity(self.base_path.as_posix())


__all__ = ["FileSystemLoader"]
