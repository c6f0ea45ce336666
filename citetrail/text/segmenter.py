"""
Sentence Segmenter
===================

Splits one passage into ordered, offset-tagged sentences.

Splitting is punctuation based: a sentence ends at ".", "!" or "?"
followed by whitespace. Abbreviations ("e.g. ") and similar cases are
split too; this is accepted imprecision, not something to correct here.

Invariant (for well-formed input):
    passage.text[s.start_char:s.end_char] == s.text
    offsets never regress and never overlap across the sequence
"""

from __future__ import annotations

import logging
import re

from citetrail.schemas.passage import Passage, Sentence
from citetrail.utils import preview

logger = logging.getLogger("citetrail.text.segmenter")

SENTENCE_BOUNDARY_REGEX = re.compile(r"(?<=[.!?])\s+")


class SentenceSegmenter:
    """
    Punctuation-based sentence splitter with stable character offsets.

    Each sentence is located with a forward-only search cursor, so a
    phrase repeated earlier in the passage can never pull an offset back.

    Usage:
        segmenter = SentenceSegmenter()
        sentences = segmenter.segment("First point. Second point!")
        sentences[1].start_char   # 13
    """

    def split(self, text: str) -> list[str]:
        """Split text into trimmed, non-empty sentence strings."""
        parts = SENTENCE_BOUNDARY_REGEX.split(text or "")
        return [p.strip() for p in parts if p.strip()]

    def segment(self, text: str) -> list[Sentence]:
        """
        Segment a passage's raw text into Sentences.

        Args:
            text: Raw passage text.

        Returns:
            Sentences with 1-based ids in reading order.
        """
        sentences: list[Sentence] = []
        cursor = 0

        for fragment in self.split(text):
            start = text.find(fragment, cursor)
            if start == -1:
                start = cursor
                logger.debug(
                    f"Sentence '{preview(fragment)}' not found after offset {cursor}; "
                    f"using cursor position"
                )

            end = start + len(fragment)
            sentences.append(Sentence(
                id=len(sentences) + 1,
                text=fragment,
                start_char=start,
                end_char=end,
            ))
            cursor = end

        return sentences

    def segment_passages(self, passages: list[Passage]) -> dict[int, list[Sentence]]:
        """
        Segment every passage, keyed by its position in `passages`.

        The key is the index the model uses as `chunk_id`.
        """
        sentence_map = {i: self.segment(p.text) for i, p in enumerate(passages)}
        logger.debug(
            f"Segmented {len(passages)} passages into "
            f"{sum(len(s) for s in sentence_map.values())} sentences"
        )
        return sentence_map
