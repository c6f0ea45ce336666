"""
Span Locator
=============

Finds the contiguous run of rendered text fragments on one page that
contains a citation's source text.

Algorithm:
    1. Lightly clean every fragment (quotes, zero-width chars, trim) and
       join the non-empty ones with exactly one space, recording for each
       character the index of the fragment it came from. The separating
       space belongs to the fragment that follows it.
    2. Fully normalize the joined text and the citation text.
    3. Search for the whole cleaned citation; failing that, for its
       leading `prefix_ratio` share if that prefix is long enough.
    4. Map the first and last matched cleaned characters back through the
       position map to the joined text, then to fragment indices.

A miss returns None. The rendering surface may still be laying the page
out, so callers retry within a bounded budget (see locate.retry).
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from citetrail.config import CiteTrailConfig
from citetrail.schemas.match import SpanMatch, TextFragment
from citetrail.text.normalizer import TextNormalizer
from citetrail.utils import preview

logger = logging.getLogger("citetrail.locate.span_locator")

FragmentLike = Union[TextFragment, str]


def fragment_text(fragment: FragmentLike) -> str:
    """Text content of a fragment given as a TextFragment, any object with `.text`, or a str."""
    if isinstance(fragment, str):
        return fragment
    return getattr(fragment, "text", "") or ""


def leading_prefix(needle: str, prefix_ratio: float = 0.6, min_prefix_chars: int = 20) -> str:
    """
    The fallback search prefix of `needle`.

    The prefix is the first floor(len(needle) * prefix_ratio) characters.
    Returns "" when it is shorter than `min_prefix_chars`, so short
    citation texts cannot produce loose matches.
    """
    prefix = needle[: int(len(needle) * prefix_ratio)]
    return prefix if len(prefix) >= min_prefix_chars else ""


def find_with_prefix_fallback(
    haystack: str,
    needle: str,
    prefix_ratio: float = 0.6,
    min_prefix_chars: int = 20,
) -> tuple[int, int]:
    """
    Find `needle` in `haystack`, falling back to its leading prefix.

    Returns:
        (start, length) of the match in `haystack`, or (-1, 0).
    """
    if not needle:
        return -1, 0

    start = haystack.find(needle)
    if start != -1:
        return start, len(needle)

    prefix = leading_prefix(needle, prefix_ratio, min_prefix_chars)
    if prefix:
        start = haystack.find(prefix)
        if start != -1:
            return start, len(prefix)

    return -1, 0


class SpanLocator:
    """
    Locates a citation inside the rendered text fragments of one page.

    Usage:
        locator = SpanLocator()
        match = locator.locate(citation.source_text, fragments)
        if match:
            for i in match.indices():
                highlight(fragments[i])

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
    def from_config(cls, config: CiteTrailConfig) -> "SpanLocator":
        """Create a SpanLocator from CiteTrail config."""
        return cls(
            prefix_ratio=config.matching.prefix_ratio,
            min_prefix_chars=config.matching.min_prefix_chars,
        )

    def join_fragments(self, fragments: Sequence[FragmentLike]) -> tuple[str, list[int]]:
        """
        Join lightly cleaned fragments with single spaces.

        Returns:
            (joined_text, owner) where owner[i] is the index (into
            `fragments`) of the fragment character i came from.
        """
        pieces: list[str] = []
        owner: list[int] = []

        for index, fragment in enumerate(fragments):
            text = self.normalizer.light_clean(fragment_text(fragment))
            if not text:
                continue
            if pieces:
                pieces.append(" ")
                owner.append(index)
            pieces.append(text)
            owner.extend([index] * len(text))

        return "".join(pieces), owner

    def locate(
        self,
        source_text: str,
        fragments: Sequence[FragmentLike],
    ) -> Optional[SpanMatch]:
        """
        Find the fragments holding `source_text`.

        Args:
            source_text: The citation's source text.
            fragments: The page's leaf text fragments in reading order.

        Returns:
            Inclusive SpanMatch, or None if the text was not found.
        """
        if not source_text or not fragments:
            return None

        needle = self.normalizer.clean(source_text)
        if not needle:
            return None

        joined, owner = self.join_fragments(fragments)
        page = self.normalizer.normalize(joined)

        start, length = find_with_prefix_fallback(
            page.cleaned, needle, self.prefix_ratio, self.min_prefix_chars
        )
        if start == -1:
            logger.debug(f"Citation '{preview(needle)}' not found among {len(fragments)} fragments")
            return None

        raw_start = page.to_raw(start)
        raw_last = page.to_raw(start + length - 1)
        match = SpanMatch(
            start_fragment_index=owner[raw_start],
            end_fragment_index=owner[raw_last],
        )
        logger.debug(
            f"Citation '{preview(needle)}' matched fragments "
            f"{match.start_fragment_index}-{match.end_fragment_index}"
            f"{'' if length == len(needle) else ' (prefix)'}"
        )
        return match
