"""
Match Schema
=============

Inputs and outputs of the locators:

- TextFragment: one positioned leaf text unit of a rendered page
- SpanMatch:    inclusive range of fragment indices holding a citation

Absence of a match is expressed as `None`, never as an exception.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TextFragment(BaseModel):
    """
    A positioned text fragment as laid out by the rendering surface.

    Only `text` takes part in matching; the box is carried through so the
    caller can paint the highlight without a second lookup.
    """
    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Text content of the fragment")
    left: float = Field(default=0.0, description="Left edge in page units")
    top: float = Field(default=0.0, description="Top edge in page units")
    width: float = Field(default=0.0, ge=0.0, description="Box width")
    height: float = Field(default=0.0, ge=0.0, description="Box height")


class SpanMatch(BaseModel):
    """Inclusive range of fragment indices containing a citation's text."""
    model_config = ConfigDict(frozen=True)

    start_fragment_index: int = Field(ge=0, description="First fragment of the match")
    end_fragment_index: int = Field(ge=0, description="Last fragment of the match (inclusive)")

    @model_validator(mode="after")
    def validate_order(self) -> "SpanMatch":
        if self.start_fragment_index > self.end_fragment_index:
            raise ValueError(
                f"start_fragment_index ({self.start_fragment_index}) > "
                f"end_fragment_index ({self.end_fragment_index})"
            )
        return self

    def indices(self) -> range:
        """All fragment indices covered by the match."""
        return range(self.start_fragment_index, self.end_fragment_index + 1)
