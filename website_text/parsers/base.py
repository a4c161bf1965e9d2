"""Parser capability shared by every source format adapter."""

from __future__ import annotations

import abc
import typing as typ

from website_text.exceptions import ParserError

if typ.TYPE_CHECKING:
    from website_text.document import Document
    from website_text.loaders import Loader


class Parser(abc.ABC):
    """Convert source text of one format into a :class:`Document`.

    The generator assigns :attr:`loader` before each call so that parsers
    can fetch file content when :meth:`parse` receives a path.
    """

    loader: Loader | None = None

    def parse(self, content: str, *, is_file: bool = False) -> Document:
        """Parse ``content``, or the file it names when ``is_file`` is true.

        Raises
        ------
        ParserError
            If no loader is available for a file, or the source is malformed.
        LoaderError
            If the loader cannot provide the file.
        """
        if is_file:
            if self.loader is None:
                msg = f'Unable to find a loader for "{content}"'
                raise ParserError(msg)
            content = self.loader.load(content)
        document = self.convert(content)
        document.raw_content = content
        return document

    @abc.abstractmethod
    def convert(self, text: str) -> Document:
        """Render ``text`` into a document carrying HTML, title and metas."""


__all__ = ["Parser"]
