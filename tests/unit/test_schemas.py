"""
Schema Validation Tests
=========================

Tests for the data contracts handed between components and to the
renderer. Offsets are the contract: a snippet or sentence whose offsets
disagree with its text is rejected at construction.

Coverage:
    - Passage field aliases from the retrieval store
    - Sentence / RawCitation offset-length invariants
    - Citation unresolved-offset rules
    - CitationBlock answer bounds and display order
    - SpanMatch ordering
    - JSON round trip of a CitationBlock
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from citetrail.schemas import (
    Citation,
    CitationBlock,
    Passage,
    RawCitation,
    Sentence,
    SpanMatch,
    TextFragment,
)


def make_block_citation(snippet: str, start: int, **overrides) -> Citation:
    fields = dict(
        source_index=0,
        sentence_range="1-1",
        snippet=snippet,
        snippet_start=start,
        snippet_end=start + len(snippet),
        sentence_bounds=(1, 1),
        source_text="Source.",
        source_text_start=0,
        source_text_end=7,
        document_name="paper.pdf",
        passage_index=0,
    )
    fields.update(overrides)
    return Citation(**fields)


class TestPassage:

    def test_store_column_aliases(self):
        p = Passage.model_validate({
            "id": "abc",
            "document_name": "paper.pdf",
            "chunk_index": 3,
            "content": "Some text.",
            "similarity": 0.82,
        })
        assert (p.passage_id, p.sequence_index, p.text, p.relevance_score) == ("abc", 3, "Some text.", 0.82)

    def test_field_names_accepted(self):
        p = Passage(passage_id="x", document_name="d", sequence_index=1, text="t")
        assert p.sequence_index == 1

    def test_negative_sequence_index_rejected(self):
        with pytest.raises(ValidationError):
            Passage(document_name="d", sequence_index=-1, text="t")

    def test_frozen(self):
        p = Passage(document_name="d", text="t")
        with pytest.raises(ValidationError):
            p.text = "changed"


class TestSentence:

    def test_valid(self):
        s = Sentence(id=1, text="Hello.", start_char=4, end_char=10)
        assert s.end_char - s.start_char == len(s.text)

    def test_length_mismatch_rejected(self):
        with pytest.raises(ValidationError):
            Sentence(id=1, text="Hello.", start_char=0, end_char=4)

    def test_ids_are_one_based(self):
        with pytest.raises(ValidationError):
            Sentence(id=0, text="a", start_char=0, end_char=1)


class TestRawCitation:

    def test_offsets_must_span_snippet(self):
        with pytest.raises(ValidationError):
            RawCitation(source_index=0, sentence_range="1-1", snippet="abc", snippet_start=0, snippet_end=5)

    def test_empty_snippet_allowed(self):
        c = RawCitation(source_index=0, sentence_range="1-1", snippet="", snippet_start=3, snippet_end=3)
        assert c.snippet_start == c.snippet_end


class TestCitation:

    def test_unresolved(self):
        c = make_block_citation("a", 0, source_text="", source_text_start=-1, source_text_end=-1)
        assert not c.is_resolved

    def test_half_unresolved_rejected(self):
        with pytest.raises(ValidationError):
            make_block_citation("a", 0, source_text_start=-1, source_text_end=5)

    def test_reversed_offsets_rejected(self):
        with pytest.raises(ValidationError):
            make_block_citation("a", 0, source_text_start=9, source_text_end=2)

    def test_is_raw_citation(self):
        assert isinstance(make_block_citation("a", 0), RawCitation)


class TestCitationBlock:

    def test_snippet_past_answer_rejected(self):
        with pytest.raises(ValidationError):
            CitationBlock(answer_text="short", citations=[make_block_citation("too long", 2)])

    def test_display_order(self):
        answer = "one two three"
        late = make_block_citation("three", 8)
        early = make_block_citation("one", 0)
        block = CitationBlock(answer_text=answer, citations=[late, early])
        assert [c.snippet for c in block.citations] == ["three", "one"]
        assert [c.snippet for c in block.display_citations()] == ["one", "three"]
        assert block.num_citations == 2

    def test_empty_block(self):
        block = CitationBlock(answer_text="Plain.")
        assert block.citations == []

    def test_json_round_trip(self):
        block = CitationBlock(answer_text="one two", citations=[make_block_citation("two", 4)])
        restored = CitationBlock.model_validate_json(block.model_dump_json())
        assert restored == block
        assert restored.citations[0].sentence_bounds == (1, 1)


class TestMatch:

    def test_span_order(self):
        with pytest.raises(ValidationError):
            SpanMatch(start_fragment_index=3, end_fragment_index=1)

    def test_indices_inclusive(self):
        assert list(SpanMatch(start_fragment_index=2, end_fragment_index=4).indices()) == [2, 3, 4]

    def test_fragment_box(self):
        with pytest.raises(ValidationError):
            TextFragment(text="a", width=-1.0)
