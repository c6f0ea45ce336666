"""
CiteTrail End-to-End Pipeline
==============================

Orchestrates the citation trail for one question:
    Passages → Segment → Generate → Extract → Enrich → CitationBlock

and, once the document is rendered, the page lookup for each citation.

Extraction and enrichment never fail on malformed model output; only the
model call can fail, and its GenerationError propagates untouched. A
CitationBlock is either produced complete or not at all.

Usage:
    from citetrail.pipeline import CitationPipeline

    pipeline = CitationPipeline(config)
    result = pipeline.answer("What helps models?", passages)
    result.block.answer_text
    pages = pipeline.locate_pages(result.block, page_texts)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

from citetrail.cite.enricher import CitationEnricher
from citetrail.cite.extractor import CitationExtractor
from citetrail.config import CiteTrailConfig, get_config
from citetrail.generate.answerer import CitedAnswerGenerator
from citetrail.locate.page_locator import PageLocator
from citetrail.schemas.citation import CitationBlock
from citetrail.schemas.passage import Passage
from citetrail.text.segmenter import SentenceSegmenter

logger = logging.getLogger("citetrail.pipeline")


@dataclass
class PipelineResult:
    """
    Output of one `CitationPipeline.answer` call.

    Contains the block for the renderer plus what produced it.
    """
    question: str
    block: CitationBlock
    passages: list[Passage]
    raw_answer: str = ""
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def stats(self) -> dict:
        """Summary statistics."""
        return {
            "num_passages": len(self.passages),
            "num_citations": self.block.num_citations,
            "num_unresolved": sum(1 for c in self.block.citations if not c.is_resolved),
        }


class CitationPipeline:
    """
    End-to-end citation trail orchestrator.

    Args:
        config: CiteTrail configuration.
        generator: Optional answer generator (anything with
            `generate(question, passages) -> str`). Built from config when
            omitted.
    """

    def __init__(
        self,
        config: Optional[CiteTrailConfig] = None,
        generator: Optional[CitedAnswerGenerator] = None,
    ):
        self.config = config or get_config()
        self.generator = generator or CitedAnswerGenerator(self.config)
        self.segmenter = SentenceSegmenter()
        self.extractor = CitationExtractor()
        self.enricher = CitationEnricher.from_config(self.config)
        self.page_locator = PageLocator.from_config(self.config)

    @classmethod
    def from_config(cls, config_path: Optional[str] = None) -> "CitationPipeline":
        """Create pipeline from config file or environment."""
        return cls(get_config(config_path))

    def build_block(self, raw_answer: str, passages: list[Passage]) -> CitationBlock:
        """
        Turn a raw tagged answer into a CitationBlock.

        With no passages there is nothing to cite: the answer is returned
        literally with no citations.
        """
        if not passages:
            return CitationBlock(answer_text=raw_answer or "", citations=[])

        sentence_map = self.segmenter.segment_passages(passages)
        answer_text, raw_citations = self.extractor.extract(raw_answer)
        citations = self.enricher.enrich_all(raw_citations, passages, sentence_map)
        return CitationBlock(answer_text=answer_text, citations=citations)

    def answer(self, question: str, passages: list[Passage]) -> PipelineResult:
        """
        Answer a question from retrieved passages with a citation trail.

        Raises:
            GenerationError: If the model call fails.
        """
        timings: dict[str, float] = {}
        total_start = time.time()

        if not passages:
            logger.info("No passages retrieved; skipping model call")
            block = CitationBlock(answer_text=self.config.citation.no_passages_message, citations=[])
            return PipelineResult(question=question, block=block, passages=[], timings=timings)

        # ── Step 1: Generate ───────────────────────────────────────
        t0 = time.time()
        raw_answer = self.generator.generate(question, passages)
        timings["generate_ms"] = (time.time() - t0) * 1000

        # ── Step 2: Extract + Enrich ───────────────────────────────
        t0 = time.time()
        block = self.build_block(raw_answer, passages)
        timings["cite_ms"] = (time.time() - t0) * 1000

        timings["total_ms"] = (time.time() - total_start) * 1000
        result = PipelineResult(
            question=question,
            block=block,
            passages=list(passages),
            raw_answer=raw_answer,
            timings=timings,
        )
        logger.info(f"Answered with {result.stats} in {timings['total_ms']:.0f}ms")
        return result

    def locate_pages(self, block: CitationBlock, page_texts: Sequence[str]) -> list[Optional[int]]:
        """1-based page number (or None) for each citation of `block`, in extraction order."""
        return self.page_locator.locate_all(block.citations, page_texts)
