"""Stylesheet declaration extraction and reference resolution."""

from .indexer import (
    ParsedStylesheet,
    StylesheetIndexer,
    analyze_context,
    find_containing_selector,
    iter_custom_properties,
)
from .resolver import VariableResolver

__all__ = [
    "ParsedStylesheet",
    "StylesheetIndexer",
    "VariableResolver",
    "analyze_context",
    "find_containing_selector",
    "iter_custom_properties",
]
