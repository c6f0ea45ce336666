"""
Page Locator
=============

Finds which page of a document holds a citation's source text.

Only page existence matters here, so no fragment-level position mapping
is built: both sides are normalized and compared as plain strings.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from citetrail.config import CiteTrailConfig
from citetrail.locate.span_locator import leading_prefix
from citetrail.schemas.citation import Citation
from citetrail.text.normalizer import TextNormalizer
from citetrail.utils import preview

logger = logging.getLogger("citetrail.locate.page_locator")


class PageLocator:
    """
    Maps a citation to a 1-based page number.

    Pages are tried in order; a page matches when it holds the whole
    cleaned citation or, failing that, its leading prefix. The first
    matching page wins.

    Usage:
        locator = PageLocator()
        page = locator.locate(citation.source_text, page_texts)   # e.g. 3, or None

    Args:
        prefix_ratio: Share of the cleaned citation retried as a prefix.
        min_prefix_chars: Shortest prefix the fallback may use.
        normalizer: TextNormalizer used for both sides of the comparison.
    """

    def __init__(
        self,
        prefix_ratio: float = 0.6,
        min_prefix_chars: int = 20,
        normalizer: Optional[TextNormalizer] = None,
    ):
        self.prefix_ratio = prefix_ratio
        self.min_prefix_chars = min_prefix_chars
        self.normalizer = normalizer or TextNormalizer()

    @classmethod
    def from_config(cls, config: CiteTrailConfig) -> "PageLocator":
        """Create a PageLocator from CiteTrail config."""
        return cls(
            prefix_ratio=config.matching.prefix_ratio,
            min_prefix_chars=config.matching.min_prefix_chars,
        )

    def clean_pages(self, page_texts: Sequence[str]) -> list[str]:
        """Normalize every page once, for reuse across citations."""
        return [self.normalizer.clean(text) for text in page_texts]

    def locate(self, source_text: str, page_texts: Sequence[str]) -> Optional[int]:
        """
        Find the first page containing `source_text`.

        Args:
            source_text: The citation's source text.
            page_texts: Full text of every page, page 1 first.

        Returns:
            1-based page number, or None.
        """
        return self._locate_cleaned(source_text, self.clean_pages(page_texts))

    def locate_all(
        self,
        citations: Sequence[Citation],
        page_texts: Sequence[str],
    ) -> list[Optional[int]]:
        """One page number (or None) per citation, normalizing pages only once."""
        cleaned_pages = self.clean_pages(page_texts)
        pages = [self._locate_cleaned(c.source_text, cleaned_pages) for c in citations]
        logger.info(
            f"Located {sum(1 for p in pages if p is not None)}/{len(pages)} "
            f"citations across {len(cleaned_pages)} pages"
        )
        return pages

    def _locate_cleaned(self, source_text: str, cleaned_pages: list[str]) -> Optional[int]:
        needle = self.normalizer.clean(source_text)
        if not needle:
            return None

        prefix = leading_prefix(needle, self.prefix_ratio, self.min_prefix_chars)
        for page_number, page in enumerate(cleaned_pages, start=1):
            if needle in page:
                return page_number
            if prefix and prefix in page:
                logger.debug(f"Citation '{preview(needle)}' matched page {page_number} by prefix")
                return page_number

        logger.debug(f"Citation '{preview(needle)}' not found on any page")
        return None
