"""
Passage Schema
===============

Defines the retrieved source passages handed to the model and the
sentence-level spans cut from them:

- Passage:  one retrieved unit of source text with document provenance
- Sentence: one offset-tagged sentence of a passage

Design Decisions:
    - Sentence offsets are character offsets into the passage text so the
      cited range can be highlighted without re-searching
    - Passages are addressed by their position in the list given to the
      model (the `chunk_id` of the citation grammar), not by identity

Data Flow:
    Retrieval → Passage → SentenceSegmenter → Sentence → CitationEnricher
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class Passage(BaseModel):
    """
    A retrieved passage as supplied to the generative model.

    Field aliases accept the column names used by the retrieval store
    (`id`, `content`, `chunk_index`, `similarity`).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    passage_id: str = Field(
        default="",
        validation_alias=AliasChoices("passage_id", "id"),
        description="Stable identity of the passage in the retrieval store",
    )
    document_name: str = Field(description="Name of the document the passage was cut from")
    sequence_index: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("sequence_index", "chunk_index"),
        description="0-based position of the passage within its document",
    )
    text: str = Field(
        validation_alias=AliasChoices("text", "content"),
        description="Raw passage text",
    )
    relevance_score: float = Field(
        default=0.0,
        validation_alias=AliasChoices("relevance_score", "similarity"),
        description="Retrieval similarity score (informational only)",
    )


class Sentence(BaseModel):
    """
    One sentence of a passage.

    Invariant:
        end_char - start_char == len(text)
        (enforced by model_validator)
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1, description="1-based sentence number within the passage")
    text: str = Field(description="Trimmed sentence text")
    start_char: int = Field(ge=0, description="Start offset within the passage text")
    end_char: int = Field(ge=0, description="End offset within the passage text (exclusive)")

    @model_validator(mode="after")
    def validate_offsets(self) -> "Sentence":
        """Ensure the offset range has exactly the sentence length."""
        if self.end_char - self.start_char != len(self.text):
            raise ValueError(
                f"Sentence {self.id} offsets [{self.start_char}, {self.end_char}) "
                f"do not match its length {len(self.text)}"
            )
        return self
