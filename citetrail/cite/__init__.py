"""Citation tag extraction and sentence-range enrichment."""

from citetrail.cite.enricher import CitationEnricher, parse_sentence_range
from citetrail.cite.extractor import (
    CitationExtractor,
    CitationToken,
    extract_citations,
    tokenize_closed_tags,
    tokenize_markers,
)

__all__ = [
    "CitationEnricher",
    "parse_sentence_range",
    "CitationExtractor",
    "CitationToken",
    "extract_citations",
    "tokenize_closed_tags",
    "tokenize_markers",
]
