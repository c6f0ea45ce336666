"""
Cited Answer Generator
=======================

Asks a chat model to answer a question from the retrieved passages,
citing them inline with the <CIT> tag grammar that CitationExtractor
parses.

Architecture:
    Question + Passages → prompt → chat completion → raw tagged answer

The chat client is either injected or built from the config at first use;
it is owned by this generator instance, never shared through a module
global. Any failure of the call is raised as GenerationError so the
caller gets one typed failure with a readable cause.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from citetrail.config import CiteTrailConfig, get_config
from citetrail.schemas.passage import Passage

logger = logging.getLogger("citetrail.generate.answerer")


# ── Prompt Templates ───────────────────────────────────────────────

SYSTEM_PROMPT = """You are a helpful research assistant. You have a collection of text chunks from academic papers.

Write a clear, well-structured answer to the user's question based ONLY on the provided chunks.

When you reference or rely on information from a chunk, cite it inline using this exact format:
  <CIT chunk_id='N' sentences='X-Y'>your answer text that uses this source</CIT>

Rules:
- N is the chunk index number (0-based).
- X-Y is the sentence range within that chunk (1-based). Use X-X for a single sentence.
- The text inside <CIT> tags is YOUR answer text (not copied chunk text).
- Only wrap the specific phrases that rely on a source, not entire paragraphs.
- You may have uncited text for transitions, introductions, or your own synthesis.
- Be thorough but concise. Use multiple citations when drawing from multiple chunks.

Example:
According to the research, <CIT chunk_id='2' sentences='1-3'>machine learning models benefit from larger datasets</CIT>, and furthermore <CIT chunk_id='5' sentences='2-2'>transfer learning can reduce training time significantly</CIT>."""


class GenerationError(RuntimeError):
    """The model call failed; `cause` is a human-readable reason."""

    def __init__(self, cause: str):
        super().__init__(cause)
        self.cause = cause


def format_passages(passages: list[Passage]) -> str:
    """Render passages as numbered chunks; the number is the chunk_id the model cites."""
    return "\n\n".join(
        f'[Chunk {i}] (from "{p.document_name}")\n{p.text}'
        for i, p in enumerate(passages)
    )


class CitedAnswerGenerator:
    """
    Produces the model's raw, <CIT>-tagged answer.

    Usage:
        generator = CitedAnswerGenerator(config)
        raw_answer = generator.generate("What helps models?", passages)

    Args:
        config: CiteTrail configuration.
        client: Optional pre-built OpenAI-compatible client (anything with
            `chat.completions.create`). Built from config when omitted.
    """

    def __init__(self, config: Optional[CiteTrailConfig] = None, client: Any = None):
        self.config = config or get_config()
        self._client = client

    def build_messages(self, question: str, passages: list[Passage]) -> list[dict[str, str]]:
        """Build the chat messages for one question."""
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": f"{format_passages(passages)}\n\nQuestion: {question}"},
        ]

    def _get_client(self) -> Any:
        """Build the OpenAI (or Azure OpenAI) client for this generator."""
        if self._client is not None:
            return self._client

        try:
            from openai import AzureOpenAI, OpenAI
        except ImportError:
            raise GenerationError("openai package required. Install with: pip install openai")

        if self.config.uses_azure:
            self._client = AzureOpenAI(
                api_key=self.config.azure_openai_api_key,
                azure_endpoint=self.config.azure_openai_endpoint,
                api_version=self.config.generation.azure_api_version,
            )
        else:
            self._client = OpenAI(api_key=self.config.openai_api_key)
        return self._client

    def generate(self, question: str, passages: list[Passage]) -> str:
        """
        Call the model and return its raw tagged answer.

        Raises:
            GenerationError: If the client cannot be built or the call fails.
        """
        messages = self.build_messages(question, passages)
        gen = self.config.generation

        try:
            response = self._get_client().chat.completions.create(
                model=gen.model,
                messages=messages,
                temperature=gen.temperature,
                max_tokens=gen.max_tokens,
            )
        except GenerationError:
            raise
        except Exception as e:
            logger.error(f"Model call failed: {e}")
            raise GenerationError(f"Model call to '{gen.model}' failed: {e}") from e

        if not response.choices:
            raise GenerationError(f"Model '{gen.model}' returned no choices")

        content = response.choices[0].message.content or ""
        logger.info(f"Model '{gen.model}' answered with {len(content)} chars from {len(passages)} passages")
        return content
