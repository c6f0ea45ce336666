"""
Citation Enricher
==================

Resolves each RawCitation against the sentences of the passage it points
at, producing the exact cited source text and its offsets in that passage.

Nothing here raises on malformed model output; every defect degrades to a
documented default:

    - unparsable sentence range     → range (1, 1)
    - chunk_id outside the passages → placeholder document name,
                                      passage_index = chunk_id
    - no sentence inside the range  → empty source text, offsets -1

Passages are addressed by their position in the list given to the model.
Reordering that list between generation and enrichment changes what a
citation points at.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from citetrail.config import CiteTrailConfig
from citetrail.schemas.citation import Citation, RawCitation
from citetrail.schemas.passage import Passage, Sentence

logger = logging.getLogger("citetrail.cite.enricher")

# Bounds longer than nine digits do not parse.
RANGE_REGEX = re.compile(r"^\s*(\d{1,9})\s*[-\u2013]\s*(\d{1,9})\s*$")
DEFAULT_RANGE = (1, 1)


def parse_sentence_range(sentence_range: str) -> tuple[int, int]:
    """
    Parse an "X-Y" sentence range.

    Returns:
        (X, Y) as integers, or (1, 1) when the value is not of that shape.
    """
    match = RANGE_REGEX.match(sentence_range or "")
    if not match:
        logger.warning(f"Unparsable sentence range {sentence_range!r}; using {DEFAULT_RANGE}")
        return DEFAULT_RANGE
    return int(match.group(1)), int(match.group(2))


class CitationEnricher:
    """
    Attaches source sentences and document provenance to raw citations.

    Usage:
        enricher = CitationEnricher()
        citation = enricher.enrich(raw, sentences, passage)
        citation.source_text        # "First sentence. Second sentence."

    Args:
        unknown_document_name: Placeholder used when the chunk id points
            outside the passage list.
    """

    def __init__(self, unknown_document_name: str = "Unknown"):
        self.unknown_document_name = unknown_document_name

    @classmethod
    def from_config(cls, config: CiteTrailConfig) -> "CitationEnricher":
        """Create a CitationEnricher from CiteTrail config."""
        return cls(unknown_document_name=config.citation.unknown_document_name)

    def enrich(
        self,
        raw: RawCitation,
        sentences: list[Sentence],
        passage: Optional[Passage] = None,
    ) -> Citation:
        """
        Resolve one citation.

        Args:
            raw: Citation as parsed from the answer.
            sentences: Ordered sentences of the cited passage (may be empty).
            passage: The cited passage, or None if the chunk id is out of range.

        Returns:
            The enriched Citation.
        """
        first, last = parse_sentence_range(raw.sentence_range)
        selected = [s for s in sorted(sentences, key=lambda s: s.id) if first <= s.id <= last]

        if selected:
            source_text = " ".join(s.text for s in selected)
            start, end = selected[0].start_char, selected[-1].end_char
        else:
            source_text, start, end = "", -1, -1
            logger.debug(
                f"No sentence of chunk {raw.source_index} in range {first}-{last} "
                f"({len(sentences)} sentences)"
            )

        if passage is not None:
            document_name, passage_index = passage.document_name, passage.sequence_index
        else:
            document_name, passage_index = self.unknown_document_name, raw.source_index

        return Citation(
            **raw.model_dump(),
            sentence_bounds=(first, last),
            source_text=source_text,
            source_text_start=start,
            source_text_end=end,
            document_name=document_name,
            passage_index=passage_index,
        )

    def enrich_all(
        self,
        raw_citations: list[RawCitation],
        passages: list[Passage],
        sentence_map: dict[int, list[Sentence]],
    ) -> list[Citation]:
        """
        Resolve citations against the passage list given to the model.

        Args:
            raw_citations: Citations in extraction order.
            passages: Passages in the order they were given to the model.
            sentence_map: Sentences per passage position.

        Returns:
            Enriched citations, same order as `raw_citations`.
        """
        citations: list[Citation] = []
        for raw in raw_citations:
            in_range = 0 <= raw.source_index < len(passages)
            if not in_range:
                logger.warning(
                    f"Citation chunk_id={raw.source_index} outside the "
                    f"{len(passages)} supplied passages"
                )
            citations.append(self.enrich(
                raw,
                sentence_map.get(raw.source_index, []) if in_range else [],
                passages[raw.source_index] if in_range else None,
            ))

        unresolved = sum(1 for c in citations if not c.is_resolved)
        logger.info(f"Enriched {len(citations)} citations ({unresolved} unresolved)")
        return citations
