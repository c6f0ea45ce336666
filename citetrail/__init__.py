"""
CiteTrail — Navigable Citation Trails for RAG Answers
======================================================

CiteTrail turns a generative model's free-text answer into a structured
citation trail: every cited phrase is resolved to an exact sentence range
inside the retrieved passage, and that passage text is then located on the
rendered page of the source document so it can be highlighted and paged to.

Architecture Overview:
    Answer → Extract Citations → Enrich (sentence ranges) → Locate (page + span)

Modules:
    - text:      Offset-preserving normalization and sentence segmentation
    - cite:      Citation tag extraction and sentence-range enrichment
    - locate:    Page lookup, fragment span lookup, bounded highlight retries
    - generate:  Model call that produces the tagged answer
    - pipeline:  End-to-end orchestrator
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
