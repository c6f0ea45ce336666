"""
Citation Extractor Tests
==========================

Tests for both citation grammars and the answer offset invariant:
    answer_text[snippet_start:snippet_end] == snippet

Coverage:
    - Closed-tag grammar (primary)
    - Unclosed-marker grammar (fallback heuristic, kept as is)
    - Uncited answers
    - Tokenizers in isolation
"""

from __future__ import annotations

import pytest

from citetrail.cite.extractor import (
    CitationExtractor,
    extract_citations,
    tokenize_closed_tags,
    tokenize_markers,
)


@pytest.fixture
def extractor():
    return CitationExtractor()


class TestClosedTags:

    def test_documented_example(self, extractor):
        text, citations = extractor.extract(
            "Intro. <CIT chunk_id='0' sentences='1-2'>models improve with scale</CIT>. Done."
        )
        assert text == "Intro. models improve with scale. Done."
        assert len(citations) == 1
        c = citations[0]
        assert (c.source_index, c.sentence_range, c.snippet) == (0, "1-2", "models improve with scale")
        assert (c.snippet_start, c.snippet_end) == (7, 32)

    def test_multiple_tags_in_order(self, extractor):
        text, citations = extractor.extract(
            "A <CIT chunk_id='1' sentences='1-1'>x</CIT> and "
            "<CIT chunk_id=\"2\" sentences=\"2-3\">yy</CIT>."
        )
        assert text == "A x and yy."
        assert [(c.source_index, c.snippet_start, c.snippet_end) for c in citations] == [
            (1, 2, 3),
            (2, 8, 10),
        ]
        assert citations[1].sentence_range == "2-3"

    @pytest.mark.parametrize("raw", [
        "<CIT chunk_id='0' sentences='1-1'>Start</CIT> of the answer.",
        "End of <CIT chunk_id='3' sentences='2-4'>the answer</CIT>",
        "Two <CIT chunk_id='0' sentences='1-1'>a</CIT><CIT chunk_id='1' sentences='1-1'>b</CIT> adjacent.",
        "Multi\n<CIT chunk_id='0' sentences='1-2'>line\nsnippet</CIT>\ntext.",
        "Same <CIT chunk_id='0' sentences='1-1'>word</CIT> and word and <CIT chunk_id='0' sentences='2-2'>word</CIT>.",
    ])
    def test_no_markup_and_slices_match(self, extractor, raw):
        text, citations = extractor.extract(raw)
        assert "<CIT" not in text
        assert "</CIT>" not in text
        assert citations
        for c in citations:
            assert text[c.snippet_start:c.snippet_end] == c.snippet

    def test_flexible_whitespace_and_quotes(self, extractor):
        text, citations = extractor.extract(
            'See <CIT  chunk_id = "3"  sentences = "1-2" >this</CIT >.'
        )
        assert text == "See this."
        assert citations[0].source_index == 3

    def test_malformed_range_passed_through(self, extractor):
        _, citations = extractor.extract("<CIT chunk_id='0' sentences='first'>x</CIT>")
        assert citations[0].sentence_range == "first"

    def test_closed_grammar_wins_over_markers(self, extractor):
        """An unclosed marker is left alone when closed tags exist."""
        text, citations = extractor.extract(
            "<CIT chunk_id='0' sentences='1-1'>a</CIT> then <CIT chunk_id='1' sentences='1-1'>b"
        )
        assert len(citations) == 1
        assert citations[0].snippet == "a"
        assert text.startswith("a then <CIT")


class TestMarkerFallback:

    def test_snippet_runs_to_sentence_end(self, extractor):
        text, citations = extractor.extract(
            "Scaling helps <CIT chunk_id='0' sentences='1-2'> models improve with scale. Then more text."
        )
        assert text == "Scaling helps models improve with scale. Then more text."
        c = citations[0]
        assert c.snippet == "models improve with scale."
        assert (c.snippet_start, c.snippet_end) == (14, 40)

    def test_snippet_runs_to_next_marker(self, extractor):
        text, citations = extractor.extract(
            "A <CIT chunk_id='0' sentences='1-1'>first <CIT chunk_id='1' sentences='2-2'>second"
        )
        assert [c.snippet for c in citations] == ["first", "second"]
        assert [c.source_index for c in citations] == [0, 1]
        for c in citations:
            assert text[c.snippet_start:c.snippet_end] == c.snippet

    def test_snippet_runs_to_end_of_text(self, extractor):
        text, citations = extractor.extract("Claim <CIT chunk_id='2' sentences='3-3'>no period here")
        assert text == "Claim no period here"
        assert citations[0].snippet == "no period here"

    def test_period_without_space_does_not_end_snippet(self, extractor):
        _, citations = extractor.extract("<CIT chunk_id='0' sentences='1-1'>v2.0 works. Rest")
        assert citations[0].snippet == "v2.0 works."


class TestNoCitations:

    @pytest.mark.parametrize("raw", ["Plain answer.", "", "Mentions <CIT> loosely", "<CIT chunk_id='x' sentences='1-1'>"])
    def test_uncited_answer_returned_verbatim(self, extractor, raw):
        text, citations = extractor.extract(raw)
        assert text == raw
        assert citations == []

    def test_none_answer(self, extractor):
        assert extractor.extract(None) == ("", [])

    @pytest.mark.parametrize("raw", [
        "x <CIT chunk_id='" + "0" * 5000 + "' sentences='1-1'>y</CIT>",
        "x <CIT chunk_id='" + "7" * 10 + "' sentences='1-1'>y",
    ])
    def test_oversized_chunk_id_is_not_a_tag(self, extractor, raw):
        assert extractor.extract(raw) == (raw, [])


class TestTokenizers:

    def test_closed_tokens_cover_raw_tags(self):
        raw = "x <CIT chunk_id='4' sentences='1-1'>y</CIT> z"
        tokens = tokenize_closed_tags(raw)
        assert len(tokens) == 1
        assert raw[tokens[0].start:tokens[0].end] == "<CIT chunk_id='4' sentences='1-1'>y</CIT>"
        assert tokens[0].source_index == 4

    def test_closed_tokens_ignore_markers(self):
        assert tokenize_closed_tags("a <CIT chunk_id='0' sentences='1-1'> b") == []

    def test_marker_tokens(self):
        raw = "a <CIT chunk_id='0' sentences='1-1'> b. c"
        tokens = tokenize_markers(raw)
        assert len(tokens) == 1
        assert tokens[0].snippet == "b."
        assert raw[tokens[0].end:] == " c"

    def test_assemble_directly(self):
        raw = "a <CIT chunk_id='0' sentences='1-1'>b</CIT> c"
        text, citations = CitationExtractor.assemble(raw, tokenize_closed_tags(raw))
        assert text == "a b c"
        assert citations[0].snippet_start == 2

    def test_module_helper(self):
        text, citations = extract_citations("<CIT chunk_id='0' sentences='1-1'>ok</CIT>")
        assert text == "ok"
        assert len(citations) == 1
