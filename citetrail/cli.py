"""
CiteTrail CLI
==============

Command-line interface for the citation trail: extracting citations from
a tagged answer, asking a question against passages, locating citations
on pages and fragments, and schema utilities.

Usage:
    python -m citetrail.cli extract --answer answer.txt --passages passages.json
    python -m citetrail.cli ask "What helps models?" --passages passages.json
    python -m citetrail.cli locate-pages --block block.json --pages pages.json
    python -m citetrail.cli locate-span --text "models improve with scale." --fragments fragments.json
    python -m citetrail.cli validate --input block.json --schema citation_block
    python -m citetrail.cli export-schemas --output-dir schemas
"""

from __future__ import annotations

import argparse
import json
import sys

from citetrail.config import get_config
from citetrail.schemas.citation import CitationBlock
from citetrail.schemas.match import TextFragment
from citetrail.schemas.passage import Passage
from citetrail.utils import generate_run_id, load_json, save_json, setup_logging


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="citetrail",
        description="CiteTrail: sentence-level citation trails for generated answers",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config YAML")
    parser.add_argument("--verbose", "-v", action="store_true")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # ── extract ─────────────────────────────────────────────────
    extract_parser = subparsers.add_parser("extract", help="Build a citation block from a tagged answer")
    extract_parser.add_argument("--answer", required=True, help="File with the raw tagged answer ('-' for stdin)")
    extract_parser.add_argument("--passages", required=True, help="JSON list of passages given to the model")
    extract_parser.add_argument("--output", type=str, default=None, help="Output JSON path")

    # ── ask ─────────────────────────────────────────────────────
    ask_parser = subparsers.add_parser("ask", help="Answer a question with citations")
    ask_parser.add_argument("question", help="Question to answer")
    ask_parser.add_argument("--passages", required=True, help="JSON list of retrieved passages")
    ask_parser.add_argument("--output", type=str, default=None, help="Output JSON path")

    # ── locate-pages ────────────────────────────────────────────
    pages_parser = subparsers.add_parser("locate-pages", help="Find the page of each citation")
    pages_parser.add_argument("--block", required=True, help="Citation block JSON")
    pages_parser.add_argument("--pages", required=True, help="JSON list of page texts, page 1 first")

    # ── locate-span ─────────────────────────────────────────────
    span_parser = subparsers.add_parser("locate-span", help="Find the fragments holding a citation")
    span_parser.add_argument("--text", required=True, help="Citation source text")
    span_parser.add_argument("--fragments", required=True, help="JSON list of fragment strings or objects")

    # ── validate ────────────────────────────────────────────────
    validate_parser = subparsers.add_parser("validate", help="Validate data schemas")
    validate_parser.add_argument("--input", required=True, help="JSON file to validate")
    validate_parser.add_argument(
        "--schema",
        choices=["passages", "citation_block", "span_match"],
        required=True,
    )

    # ── export-schemas ──────────────────────────────────────────
    schema_parser = subparsers.add_parser("export-schemas", help="Export JSON schemas")
    schema_parser.add_argument("--output-dir", default="schemas")

    args = parser.parse_args(argv)

    config = get_config(args.config)
    setup_logging(
        level="DEBUG" if args.verbose else config.log_level,
        format_style=config.log_format,
        run_id=generate_run_id(),
    )

    if args.command == "extract":
        cmd_extract(args, config)
    elif args.command == "ask":
        cmd_ask(args, config)
    elif args.command == "locate-pages":
        cmd_locate_pages(args, config)
    elif args.command == "locate-span":
        cmd_locate_span(args, config)
    elif args.command == "validate":
        cmd_validate(args)
    elif args.command == "export-schemas":
        cmd_export_schemas(args)
    else:
        parser.print_help()
        sys.exit(1)


def _load_passages(path: str) -> list[Passage]:
    return [Passage.model_validate(item) for item in load_json(path)]


def _emit(data: dict, output: str | None) -> None:
    if output:
        path = save_json(data, output)
        print(f"Results saved to {path}")
    else:
        print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_extract(args, config):
    """Extract and enrich citations from an already generated answer."""
    from citetrail.pipeline import CitationPipeline

    if args.answer == "-":
        raw_answer = sys.stdin.read()
    else:
        with open(args.answer, encoding="utf-8") as f:
            raw_answer = f.read()

    pipeline = CitationPipeline(config)
    block = pipeline.build_block(raw_answer, _load_passages(args.passages))
    _emit(block.model_dump(mode="json"), args.output)


def cmd_ask(args, config):
    """Ask the model and print the resulting citation block."""
    from citetrail.generate.answerer import GenerationError
    from citetrail.pipeline import CitationPipeline

    pipeline = CitationPipeline(config)
    try:
        result = pipeline.answer(args.question, _load_passages(args.passages))
    except GenerationError as e:
        print(f"Error: {e.cause}", file=sys.stderr)
        sys.exit(1)

    print(f"\nQuestion: {args.question}")
    print(f"Latency: {result.timings.get('total_ms', 0):.0f}ms\n")
    print(result.block.answer_text)
    for i, citation in enumerate(result.block.display_citations(), start=1):
        print(f"\n  [{i}] {citation.document_name} (chunk {citation.passage_index}, "
              f"sentences {citation.sentence_bounds[0]}-{citation.sentence_bounds[1]})")
        print(f"      \"{citation.source_text}\"")
    print(f"\n  Stats: {result.stats}")

    if args.output:
        output = {
            "question": result.question,
            "raw_answer": result.raw_answer,
            "block": result.block.model_dump(mode="json"),
            "timings": result.timings,
        }
        path = save_json(output, args.output)
        print(f"\n  Results saved to {path}")


def cmd_locate_pages(args, config):
    """Print the 1-based page of each citation in a block."""
    from citetrail.locate.page_locator import PageLocator

    block = CitationBlock.model_validate(load_json(args.block))
    page_texts = load_json(args.pages)

    locator = PageLocator.from_config(config)
    pages = locator.locate_all(block.citations, page_texts)
    for citation, page in zip(block.citations, pages):
        where = f"page {page}" if page is not None else "not found"
        print(f"  {where:<10} {citation.snippet[:60]}")


def cmd_locate_span(args, config):
    """Print the fragment range holding a citation's source text."""
    from citetrail.locate.span_locator import SpanLocator

    fragments = [
        item if isinstance(item, str) else TextFragment.model_validate(item)
        for item in load_json(args.fragments)
    ]
    match = SpanLocator.from_config(config).locate(args.text, fragments)
    if match is None:
        print("Not found")
        sys.exit(1)
    print(json.dumps(match.model_dump(), indent=2))


def cmd_validate(args):
    """Validate a JSON file against CiteTrail schemas."""
    from citetrail.validator import (
        validate_citation_block,
        validate_passages,
        validate_span_match,
    )

    data = load_json(args.input)

    validators = {
        "passages": validate_passages,
        "citation_block": validate_citation_block,
        "span_match": validate_span_match,
    }

    errors = validators[args.schema](data)
    if errors:
        print(f"Validation FAILED: {len(errors)} errors")
        for err in errors:
            print(f"  - {err}")
        sys.exit(1)
    else:
        print("Validation PASSED")


def cmd_export_schemas(args):
    """Export JSON schemas for all data contracts."""
    from citetrail.validator import export_all_schemas

    paths = export_all_schemas(args.output_dir)
    for path in paths:
        print(f"Exported: {path}")

    print(f"\n{len(paths)} schemas exported to {args.output_dir}/")


if __name__ == "__main__":
    main()
