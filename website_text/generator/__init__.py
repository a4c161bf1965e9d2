"""Turn loaded source documents into linked, summarised HTML documents."""

from .html_treatment import HtmlTreatment
from .link_rewriter import is_internal_host, resolve_relative_path
from .orchestrator import Generator, Request
from .toc import extract_document_summary, slugify

__all__ = [
    "Generator",
    "HtmlTreatment",
    "Request",
    "extract_document_summary",
    "is_internal_host",
    "resolve_relative_path",
    "slugify",
]
