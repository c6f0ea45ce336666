"""
CiteTrail Data Schemas
=======================

Pydantic v2 models implementing the data contracts of the citation trail:

1. Passage / Sentence          — retrieved source text and its sentences
2. RawCitation / Citation      — parsed and resolved citation tags
3. CitationBlock               — answer text + citations for the renderer
4. TextFragment / SpanMatch    — rendered page fragments and highlight ranges

All schemas are frozen: entities are rebuilt, never patched.
"""

from citetrail.schemas.passage import Passage, Sentence
from citetrail.schemas.citation import Citation, CitationBlock, RawCitation
from citetrail.schemas.match import SpanMatch, TextFragment

__all__ = [
    # Passage
    "Passage",
    "Sentence",
    # Citation
    "RawCitation",
    "Citation",
    "CitationBlock",
    # Match
    "TextFragment",
    "SpanMatch",
]
