"""Offset-preserving text normalization and sentence segmentation."""

from citetrail.text.normalizer import NormalizedText, TextNormalizer, normalize_text
from citetrail.text.segmenter import SentenceSegmenter

__all__ = [
    "NormalizedText",
    "TextNormalizer",
    "normalize_text",
    "SentenceSegmenter",
]
