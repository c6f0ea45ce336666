"""Locating citation text on rendered document pages."""

from citetrail.locate.page_locator import PageLocator
from citetrail.locate.retry import HighlightTask
from citetrail.locate.span_locator import SpanLocator, find_with_prefix_fallback

__all__ = [
    "PageLocator",
    "HighlightTask",
    "SpanLocator",
    "find_with_prefix_fallback",
]
