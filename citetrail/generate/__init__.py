"""Model call producing the citation-tagged answer."""

from citetrail.generate.answerer import (
    CitedAnswerGenerator,
    GenerationError,
    SYSTEM_PROMPT,
    format_passages,
)

__all__ = [
    "CitedAnswerGenerator",
    "GenerationError",
    "SYSTEM_PROMPT",
    "format_passages",
]
