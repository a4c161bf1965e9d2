"""Hierarchical navigation index built from documents and their headings."""

from .element import Element, SummaryNode
from .summary import Summary

__all__ = ["Element", "Summary", "SummaryNode"]
