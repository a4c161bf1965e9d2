"""High-level orchestration of document generation.

This module coordinates the loader, the per-format parsers, HTML treatment
and the site-wide summary, and keeps everything consistent with the cache.
:class:`Generator` scans the source once, derives the URL of every document,
rewrites links between documents and answers "which document serves this
request path".

Cache layout
------------
Two kinds of entries are written, both ``msgspec.json`` encoded:

* generator state, keyed by the loader identity, holding the summary tree
  and the URL -> filename index;
* one entry per document, keyed by the loader identity and a hash of the
  document filename.

Because the loader identity derives from the source configuration, entries
survive restarts and stop matching as soon as the configuration changes.

Example
-------
>>> from website_text.loaders import MemoryLoader
>>> from website_text.generator import Generator
>>> loader = MemoryLoader({"index.md": "# Title\\n## Sec", "other.md": "[x](./index.md)"})
>>> generator = Generator(loader)
>>> generator.handle("/other").rendered_content
'<p><a href="/">x</a></p>'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import hashlib
import logging
import re
import types
import typing as typ

import msgspec

from website_text._constants import CACHE_KEY_DOCUMENT, CACHE_KEY_GENERATOR, META_URL
from website_text.config.models import GeneratorOptions
from website_text.document import Document
from website_text.exceptions import CacheError, GenerationError, LoaderError
from website_text.parsers import Parser, default_parser
from website_text.summary import Summary

from .html_treatment import HtmlTreatment

if typ.TYPE_CHECKING:
    from website_text.cache import Cache
    from website_text.loaders import Loader

logger = logging.getLogger(__name__)

FORMAT_PATTERN = re.compile(r"^.*\.([a-z0-9]+)$", re.IGNORECASE)
_CACHE_READ_ERRORS = (CacheError, msgspec.DecodeError, KeyError, TypeError, ValueError)


@dc.dataclass(slots=True)
class Request:
    """Request handed over by a web layer.

    Attributes
    ----------
    path : str
        Full URI path of the request.
    route_path : str | None
        Trailing part of ``path`` routed to the generator. When it differs
        from ``path``, the leading remainder becomes the ``url.prefix``.
    """

    path: str
    route_path: str | None = None


def _sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()  # noqa: S324


class Generator:
    """Turn a tree of source files into linked, summarised documents.

    Parameters
    ----------
    loader : Loader
        Source of paths and raw text.
    options : GeneratorOptions | Mapping[str, Any], optional
        Options object or mapping of dotted option names.
    cache : Cache, optional
        Store used to persist state between runs; ``None`` disables caching.
    parsers : Mapping[str, Parser], optional
        Parsers keyed by file extension; they win over the defaults.
    """

    def __init__(
        self,
        loader: Loader,
        options: GeneratorOptions | cabc.Mapping[str, typ.Any] | None = None,
        cache: Cache | None = None,
        parsers: cabc.Mapping[str, Parser] | None = None,
    ) -> None:
        self.loader = loader
        self.options = (
            options
            if isinstance(options, GeneratorOptions)
            else GeneratorOptions.from_mapping(options)
        )
        self.cache = cache
        self.errors: dict[str, GenerationError] = {}
        self._parsers: dict[str, Parser] = dict(parsers or {})
        self._summary: Summary | None = None
        self._documents: dict[str, Document] = {}
        self._urls: dict[str, str] | None = None
        self._source_paths: set[str] | None = None
        self._treatment = HtmlTreatment(self.options, self._linked_document)

    @property
    def summary(self) -> Summary | None:
        """Return the shared summary, or ``None`` when it is disabled."""
        if not self.options.summary:
            return None
        if self._summary is None:
            self._summary = Summary()
        return self._summary

    @property
    def documents(self) -> cabc.Mapping[str, Document]:
        """Return a read-only view of the in-memory documents by filename."""
        return types.MappingProxyType(self._documents)

    @property
    def urls(self) -> dict[str, str] | None:
        """Return a copy of the URL -> filename index, or ``None`` before a scan."""
        return dict(self._urls) if self._urls is not None else None

    def get_parser(self, file_format: str) -> Parser | None:
        """Return the parser registered for ``file_format``."""
        return self._parsers.get(file_format)

    def set_parser(self, file_format: str, parser: Parser) -> Generator:
        """Register ``parser`` for files ending in ``.file_format``."""
        self._parsers[file_format] = parser
        return self

    def generator_cache_key(self) -> str:
        """Return the cache key of the generator state."""
        return CACHE_KEY_GENERATOR.format(key=self.loader.unique_id())

    def document_cache_key(self, filename: str) -> str:
        """Return the cache key of the document generated from ``filename``."""
        return CACHE_KEY_DOCUMENT.format(
            key=_sha1(f"{self.loader.unique_id()}{_sha1(filename)}")
        )

    def parse(self, path: str) -> Document:
        """Parse the source file at ``path`` into a document.

        The document receives its filename and its ``url`` meta and is
        recorded in the in-memory table.

        Raises
        ------
        GenerationError
            If no parser handles the format, or loading/parsing fails.
        """
        parser = self._parser_for(path)
        try:
            parser.loader = self.loader
            document = parser.parse(path, is_file=True)
        except Exception as exc:  # noqa: BLE001
            msg = f'Unable to parse document "{path}"'
            raise GenerationError(msg, path=path) from exc

        document.filename = path
        url = document.url_path(self.options.index_pages)
        document.set_meta(META_URL, f"{self.options.url_prefix}{url}")
        self._documents[path] = document
        logger.debug("Document %r parsed", path)
        return document

    def get_document(self, path: str) -> Document | None:
        """Return the document for ``path``.

        The in-memory table is consulted first, then the per-document cache,
        and finally the source is parsed. Paths that are not part of the
        source set yield ``None``.

        Link rewriting calls this for every link target, but it only ever
        parses. Treatment is never triggered from here, and a parser does not
        call back into the generator, so documents linking to each other
        cannot recurse.

        Raises
        ------
        GenerationError
            If the source exists but cannot be parsed.
        """
        document = self._documents.get(path)
        if document is not None:
            return document

        document = self._load_cached_document(path)
        if document is not None:
            self._documents[path] = document
            return document

        if not self._is_source_path(path):
            return None
        return self.parse(path)

    def scan(self) -> None:
        """Parse and treat every source document, then persist the result.

        Does nothing when the URL index is already populated. Failures of a
        single document are recorded in :attr:`errors` and do not stop the
        scan.

        Raises
        ------
        LoaderError
            If the source cannot be listed.
        """
        if self._urls is not None:
            return

        logger.debug("Scan launched")
        paths = self.loader.scan()
        self._source_paths = set(paths)
        self._summary = None
        self.errors = {}

        for path in paths:
            if path in self._documents:
                continue
            try:
                self.parse(path)
            except GenerationError as exc:
                self._record_error(path, exc)

        urls: dict[str, str] = {}
        summary = self.summary
        for document in list(self._documents.values()):
            filename = document.filename or ""
            urls[document.url_path(self.options.index_pages)] = filename
            try:
                if not document.is_rendered:
                    self._treatment.apply(document)
            except GenerationError as exc:
                self._record_error(filename, exc)
                continue
            if summary is not None:
                summary.add_document(document)

        self._urls = urls
        logger.debug("Scan finished with %d documents", len(urls))
        self._save_to_cache()

    def handle(self, request: str | Request | typ.Any) -> Document | None:  # noqa: ANN401
        """Return the document serving ``request``, or ``None`` when not found.

        Parameters
        ----------
        request : str | Request
            A path, or any object exposing ``path`` and optionally
            ``route_path`` like :class:`Request`.

        Raises
        ------
        TypeError
            If ``request`` is neither a string nor request-like.
        GenerationError
            If the matching document cannot be generated.
        """
        path = self._request_path(request)

        self._load_from_cache()
        self._documents.clear()
        self._source_paths = None
        self.scan()

        filename = (self._urls or {}).get(path)
        if filename is None:
            logger.debug("No document matches %r", path)
            return None

        document = self.get_document(filename)
        if document is None:
            return None
        if not document.is_rendered:
            self._treatment.apply(document)
            self._save_document(document)

        summary = self.summary
        if summary is not None:
            summary.reset_selected()
            element = summary.find_by_document(document)
            if element is not None:
                element.set_selected(True, recursive=True)
        return document

    def clear_cache(self) -> bool:
        """Delete the cached generator state and every cached document.

        In-memory state is reset as well so the next request scans again.
        """
        if self.cache is None:
            return False
        if self._urls is None:
            self._load_from_cache()
        filenames = set((self._urls or {}).values())
        keys = [self.generator_cache_key()]
        keys.extend(self.document_cache_key(filename) for filename in sorted(filenames))
        try:
            cleared = bool(self.cache.delete_multiple(keys))
        except CacheError as exc:
            logger.warning("Unable to clear cache: %s", exc)
            return False

        self._urls = None
        self._summary = None
        self._source_paths = None
        self._documents.clear()
        return cleared

    def _parser_for(self, path: str) -> Parser:
        match = FORMAT_PATTERN.match(path)
        file_format = match.group(1).lower() if match else ""
        parser = self.get_parser(file_format)
        if parser is None:
            parser = default_parser(file_format)
            if parser is None:
                msg = f'No parser registered for format "{file_format}" of "{path}"'
                raise GenerationError(msg, path=path)
            self.set_parser(file_format, parser)
        return parser

    def _is_source_path(self, path: str) -> bool:
        if self._source_paths is None:
            if self._urls is not None:
                self._source_paths = set(self._urls.values())
            else:
                self._source_paths = set(self.loader.scan())
        return path in self._source_paths

    def _linked_document(self, path: str) -> Document | None:
        """Resolve a link target, treating unusable targets as external."""
        try:
            return self.get_document(path)
        except (GenerationError, LoaderError) as exc:
            logger.warning("Link target %r cannot be generated: %s", path, exc)
            return None

    def _record_error(self, path: str, exc: GenerationError) -> None:
        self.errors[path] = exc
        logger.warning("Document %r skipped: %s", path, exc)

    def _request_path(self, request: str | Request | typ.Any) -> str:  # noqa: ANN401
        if isinstance(request, str):
            return request
        full_path = getattr(request, "path", None)
        if not isinstance(full_path, str):
            msg = "Argument 'request' must be a string or expose a string 'path'"
            raise TypeError(msg)

        route_path = getattr(request, "route_path", None)
        if isinstance(route_path, str) and route_path != full_path:
            if full_path.endswith(route_path):
                prefix = full_path[: len(full_path) - len(route_path)]
                self.options.url_prefix = prefix.removesuffix("/")
        return full_path

    def _load_from_cache(self) -> None:
        if self.cache is None:
            return
        self._urls = None
        self._summary = None
        try:
            raw = self.cache.get(self.generator_cache_key())
            if raw is None:
                return
            state = msgspec.json.decode(raw)
            urls = {str(url): str(filename) for url, filename in state["urls"].items()}
            summary_payload = state.get("summary")
            summary = (
                Summary.from_payload(summary_payload)
                if summary_payload is not None
                else None
            )
        except _CACHE_READ_ERRORS as exc:
            logger.warning("Generator state not loaded from cache: %s", exc)
            return

        self._urls = urls
        self._summary = summary
        logger.info("Generator information loaded from cache")

    def _load_cached_document(self, path: str) -> Document | None:
        if self.cache is None:
            return None
        key = self.document_cache_key(path)
        try:
            if not self.cache.has(key):
                return None
            raw = self.cache.get(key)
            if raw is None:
                return None
            document = Document.from_payload(msgspec.json.decode(raw))
        except _CACHE_READ_ERRORS as exc:
            logger.warning("Document %r not loaded from cache: %s", path, exc)
            return None
        logger.info("Document %r loaded from cache", path)
        return document

    def _save_to_cache(self) -> None:
        if self.cache is None:
            return
        summary = self.summary
        state = {
            "summary": summary.to_payload() if summary is not None else None,
            "urls": self._urls or {},
        }
        documents = {
            self.document_cache_key(document.filename): msgspec.json.encode(
                document.to_payload()
            )
            for document in self._documents.values()
            if document.filename and document.is_rendered
        }
        try:
            self.cache.set(self.generator_cache_key(), msgspec.json.encode(state))
            self.cache.set_multiple(documents)
        except CacheError as exc:
            logger.warning("Generator information not saved to cache: %s", exc)
            return
        logger.info("Generator information and documents saved to cache")

    def _save_document(self, document: Document) -> None:
        if self.cache is None or not document.filename:
            return
        try:
            self.cache.set(
                self.document_cache_key(document.filename),
                msgspec.json.encode(document.to_payload()),
            )
        except CacheError as exc:
            logger.warning("Document %r not saved to cache: %s", document.filename, exc)


__all__ = ["Generator", "Request"]
