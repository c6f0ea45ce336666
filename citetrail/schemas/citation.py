"""
Citation Schema
================

The citation contracts produced from a model answer:

1. RawCitation   — one parsed citation tag, positioned in the final answer
2. Citation      — a RawCitation resolved against its source passage
3. CitationBlock — the answer text plus its citations, handed to the renderer

Design Decisions:
    - Snippet offsets index the final answer text (tags stripped), never the
      raw model output, because tags are invisible to the reader
    - The sentence range is kept exactly as received on the wire; the
      enricher parses it and records the parsed bounds on the Citation
    - Unresolved source offsets are -1, not an error

Data Flow:
    Model answer → CitationExtractor → RawCitation → CitationEnricher → Citation
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RawCitation(BaseModel):
    """
    A citation as parsed from the model answer.

    Invariant:
        answer_text[snippet_start:snippet_end] == snippet
    """
    model_config = ConfigDict(frozen=True)

    source_index: int = Field(description="0-based index into the passages given to the model")
    sentence_range: str = Field(description="Sentence range attribute as emitted, e.g. '1-3'")
    snippet: str = Field(description="The model's own answer text covered by the citation")
    snippet_start: int = Field(ge=0, description="Start offset of the snippet in the final answer")
    snippet_end: int = Field(ge=0, description="End offset of the snippet in the final answer (exclusive)")

    @model_validator(mode="after")
    def validate_snippet_offsets(self) -> "RawCitation":
        """Ensure the offsets span exactly the snippet."""
        if self.snippet_end - self.snippet_start != len(self.snippet):
            raise ValueError(
                f"Snippet offsets [{self.snippet_start}, {self.snippet_end}) "
                f"do not match snippet length {len(self.snippet)}"
            )
        return self


class Citation(RawCitation):
    """
    A citation resolved to the exact sentences of its source passage.

    `source_text` is what the rendering layer searches for on the
    document pages; it is empty (and both offsets are -1) when no
    sentence of the passage falls in the cited range.
    """
    sentence_bounds: tuple[int, int] = Field(description="Parsed 1-based inclusive sentence range")
    source_text: str = Field(default="", description="Cited sentences joined with single spaces")
    source_text_start: int = Field(default=-1, ge=-1, description="Start offset in the passage text, or -1")
    source_text_end: int = Field(default=-1, ge=-1, description="End offset in the passage text, or -1")
    document_name: str = Field(description="Name of the cited document")
    passage_index: int = Field(description="Position of the passage within its document")

    @model_validator(mode="after")
    def validate_source_offsets(self) -> "Citation":
        """Offsets are either both unresolved or an ordered pair."""
        unresolved = self.source_text_start == -1, self.source_text_end == -1
        if any(unresolved) and not all(unresolved):
            raise ValueError("source_text_start and source_text_end must both be -1 when unresolved")
        if self.source_text_start > self.source_text_end:
            raise ValueError(
                f"source_text_start ({self.source_text_start}) exceeds "
                f"source_text_end ({self.source_text_end})"
            )
        return self

    @property
    def is_resolved(self) -> bool:
        """True if at least one source sentence was found."""
        return self.source_text_start >= 0


class CitationBlock(BaseModel):
    """
    The unit handed to the rendering layer.

    `citations` keeps extraction order; use `display_citations()` for the
    order in which markers appear in the answer.

    Schema:
        {
          "answer_text": "Intro. models improve with scale. Done.",
          "citations": [{"source_index": 0, "sentence_range": "1-2", ...}]
        }
    """
    model_config = ConfigDict(frozen=True)

    answer_text: str = Field(description="Answer text with all citation tags removed")
    citations: list[Citation] = Field(default_factory=list, description="Citations in extraction order")

    @model_validator(mode="after")
    def validate_snippets_within_answer(self) -> "CitationBlock":
        """Ensure every snippet range lies inside the answer text."""
        for citation in self.citations:
            if citation.snippet_end > len(self.answer_text):
                raise ValueError(
                    f"Snippet end ({citation.snippet_end}) exceeds "
                    f"answer length ({len(self.answer_text)})"
                )
        return self

    @property
    def num_citations(self) -> int:
        return len(self.citations)

    def display_citations(self) -> list[Citation]:
        """Citations ordered by where their snippet starts in the answer."""
        return sorted(self.citations, key=lambda c: c.snippet_start)
