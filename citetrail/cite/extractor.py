"""
Citation Extractor
===================

Parses the model's raw answer into the final answer text plus an ordered
list of RawCitations.

Two grammars are recognized, each with its own tokenizer:

    Closed tags (primary):
        <CIT chunk_id='N' sentences='X-Y'>answer text</CIT>

    Unclosed markers (fallback, only when no closed tag was found):
        <CIT chunk_id='N' sentences='X-Y'>
        The cited snippet is the text after the marker up to the next
        marker or just past the next ". ", whichever comes first. This
        can over- or under-capture what the model meant and is kept as is.

Tags never appear in the final answer, so snippet offsets always index
the text the reader sees.

Data Flow:
    raw answer → tokenize (closed | markers) → assemble → answer_text + RawCitations
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from citetrail.schemas.citation import RawCitation

logger = logging.getLogger("citetrail.cite.extractor")


# ── Grammar ────────────────────────────────────────────────────────

# A chunk id longer than nine digits is not a tag.
_OPEN_TAG = (
    r"<CIT\s+chunk_id\s*=\s*['\"](?P<chunk_id>\d{1,9})['\"]"
    r"\s+sentences\s*=\s*['\"](?P<sentences>[^'\"]*)['\"]\s*>"
)

CLOSED_TAG_REGEX = re.compile(_OPEN_TAG + r"(?P<snippet>(?:(?!<CIT\s).)*?)</CIT\s*>", re.DOTALL)
MARKER_REGEX = re.compile(_OPEN_TAG)

SENTENCE_END = ". "


@dataclass(frozen=True)
class CitationToken:
    """
    One citation found in the raw answer.

    `start`/`end` delimit everything the token consumes from the raw text
    (tags included); `snippet` is the answer text it contributes.
    """
    start: int
    end: int
    source_index: int
    sentence_range: str
    snippet: str


# ── Tokenizers ─────────────────────────────────────────────────────

def tokenize_closed_tags(raw_text: str) -> list[CitationToken]:
    """Find every closed <CIT ...>...</CIT> tag, left to right."""
    return [
        CitationToken(
            start=m.start(),
            end=m.end(),
            source_index=int(m.group("chunk_id")),
            sentence_range=m.group("sentences"),
            snippet=m.group("snippet"),
        )
        for m in CLOSED_TAG_REGEX.finditer(raw_text)
    ]


def tokenize_markers(raw_text: str) -> list[CitationToken]:
    """
    Find every unclosed <CIT ...> marker and cut its snippet.

    The snippet runs from the end of the marker to the next marker or to
    just past the next ". ", whichever comes first, and is trimmed.
    """
    markers = list(MARKER_REGEX.finditer(raw_text))
    tokens: list[CitationToken] = []

    for i, marker in enumerate(markers):
        after = marker.end()
        end = markers[i + 1].start() if i + 1 < len(markers) else len(raw_text)
        period = raw_text.find(SENTENCE_END, after)
        if period != -1 and period < end:
            end = period + 1

        tokens.append(CitationToken(
            start=marker.start(),
            end=end,
            source_index=int(marker.group("chunk_id")),
            sentence_range=marker.group("sentences"),
            snippet=raw_text[after:end].strip(),
        ))

    return tokens


# ── Extractor ──────────────────────────────────────────────────────

class CitationExtractor:
    """
    Turns a tagged model answer into answer text + RawCitations.

    Usage:
        extractor = CitationExtractor()
        text, citations = extractor.extract(
            "Intro. <CIT chunk_id='0' sentences='1-2'>models improve with scale</CIT>. Done."
        )
        text                        # "Intro. models improve with scale. Done."
        citations[0].snippet_start  # 7
    """

    def extract(self, raw_text: str) -> tuple[str, list[RawCitation]]:
        """
        Extract citations, trying the closed-tag grammar first.

        Returns:
            (answer_text, citations). With no citation found by either
            grammar the raw text is returned unchanged with no citations.
        """
        raw_text = raw_text or ""

        tokens = tokenize_closed_tags(raw_text)
        grammar = "closed"
        if not tokens:
            tokens = tokenize_markers(raw_text)
            grammar = "marker"

        if not tokens:
            logger.debug("No citation tags found in answer")
            return raw_text, []

        answer_text, citations = self.assemble(raw_text, tokens)
        logger.info(f"Extracted {len(citations)} citations ({grammar} grammar)")
        return answer_text, citations

    @staticmethod
    def assemble(
        raw_text: str, tokens: list[CitationToken]
    ) -> tuple[str, list[RawCitation]]:
        """
        Rebuild the answer from ordered tokens.

        Untagged text between tokens is copied verbatim; each snippet's
        offsets are taken in the answer under construction.
        """
        parts: list[str] = []
        length = 0
        cursor = 0
        citations: list[RawCitation] = []

        for token in tokens:
            before = raw_text[cursor:token.start]
            parts.append(before)
            length += len(before)

            citations.append(RawCitation(
                source_index=token.source_index,
                sentence_range=token.sentence_range,
                snippet=token.snippet,
                snippet_start=length,
                snippet_end=length + len(token.snippet),
            ))
            parts.append(token.snippet)
            length += len(token.snippet)
            cursor = token.end

        parts.append(raw_text[cursor:])
        return "".join(parts), citations


def extract_citations(raw_text: str) -> tuple[str, list[RawCitation]]:
    """Extract citations from a raw model answer."""
    return CitationExtractor().extract(raw_text)
