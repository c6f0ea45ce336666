"""
CiteTrail Schema Validator
===========================

JSON-schema export and validation for the citation trail data contracts.

A CitationBlock that passes `validate_citation_block` is safe to hand to
the renderer: every snippet lies inside the answer and reads exactly as
the answer does at its offsets.

Usage:
    from citetrail.validator import validate_citation_block
    errors = validate_citation_block(block_dict)
    if errors:
        print("Validation failed:", errors)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from citetrail.schemas.citation import CitationBlock
from citetrail.schemas.match import SpanMatch, TextFragment
from citetrail.schemas.passage import Passage

logger = logging.getLogger("citetrail.validator")

SCHEMAS: dict[str, type[BaseModel]] = {
    "passage": Passage,
    "citation_block": CitationBlock,
    "text_fragment": TextFragment,
    "span_match": SpanMatch,
}


def get_json_schema(schema_name: str) -> dict[str, Any]:
    """
    Export the JSON Schema for a CiteTrail data contract.

    Args:
        schema_name: One of "passage", "citation_block", "text_fragment", "span_match".

    Returns:
        JSON Schema dict.
    """
    if schema_name not in SCHEMAS:
        raise ValueError(f"Unknown schema: {schema_name}. Use: {list(SCHEMAS.keys())}")

    return SCHEMAS[schema_name].model_json_schema()


def export_all_schemas(output_dir: str | Path) -> list[Path]:
    """
    Export all JSON Schemas to files, one `<name>_schema.json` per contract.

    Args:
        output_dir: Directory to write schema files.

    Returns:
        Paths of the written files.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for name in SCHEMAS:
        path = output_dir / f"{name}_schema.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(get_json_schema(name), f, indent=2, ensure_ascii=False)
        logger.info(f"Exported schema: {path}")
        written.append(path)
    return written


def validate_passage(data: dict[str, Any]) -> list[str]:
    """Validate a Passage dict against the schema."""
    errors: list[str] = []
    try:
        Passage.model_validate(data)
    except ValidationError as e:
        errors.append(f"Schema validation failed: {e}")
    return errors


def validate_passages(data: list[dict[str, Any]]) -> list[str]:
    """Validate a list of Passage dicts; errors are prefixed with the list position."""
    errors: list[str] = []
    for i, item in enumerate(data):
        errors.extend(f"Passage {i}: {err}" for err in validate_passage(item))
    return errors


def validate_citation_block(data: dict[str, Any]) -> list[str]:
    """
    Validate a CitationBlock dict.

    Checks schema validity plus that each snippet reads exactly as the
    answer text does at its offsets.
    """
    errors: list[str] = []
    try:
        block = CitationBlock.model_validate(data)
    except ValidationError as e:
        errors.append(f"Schema validation failed: {e}")
        return errors

    for i, citation in enumerate(block.citations):
        actual = block.answer_text[citation.snippet_start:citation.snippet_end]
        if actual != citation.snippet:
            errors.append(
                f"Citation {i} snippet does not match answer text at "
                f"[{citation.snippet_start}, {citation.snippet_end}): "
                f"'{citation.snippet[:60]}' != '{actual[:60]}'"
            )

    return errors


def validate_span_match(data: dict[str, Any]) -> list[str]:
    """Validate a SpanMatch dict against the schema."""
    errors: list[str] = []
    try:
        SpanMatch.model_validate(data)
    except ValidationError as e:
        errors.append(f"Schema validation failed: {e}")
    return errors
