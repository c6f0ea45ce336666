"""
CiteTrail Test Configuration
==============================

Shared fixtures, factories, and helpers for the entire test suite.
"""

from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Any

import pytest

# ── Ensure test mode ────────────────────────────────────────────
os.environ.setdefault("CITETRAIL_OPENAI_API_KEY", "sk-test-key-for-testing")

from citetrail.config import CiteTrailConfig, get_config
from citetrail.schemas.match import TextFragment
from citetrail.schemas.passage import Passage


# ── Markers ─────────────────────────────────────────────────────

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line("markers", "integration: multi-component tests")


# ── Fixtures ────────────────────────────────────────────────────

@pytest.fixture
def config() -> CiteTrailConfig:
    """Default test config."""
    return get_config()


@pytest.fixture
def sample_passages() -> list[Passage]:
    """Three passages from two papers, in the order given to the model."""
    return [
        make_passage(
            text=(
                "Scaling laws describe how loss falls with compute. "
                "Models improve with scale. Data quality matters too!"
            ),
            document_name="scaling.pdf",
            sequence_index=4,
            passage_id="p-scaling-4",
        ),
        make_passage(
            text=(
                "Transfer learning reuses pretrained weights. "
                "It can reduce training time significantly. "
                "Fine-tuning needs far fewer labels?"
            ),
            document_name="transfer.pdf",
            sequence_index=0,
            passage_id="p-transfer-0",
        ),
        make_passage(
            text="Benchmarks saturate quickly. New ones are needed.",
            document_name="scaling.pdf",
            sequence_index=9,
            passage_id="p-scaling-9",
        ),
    ]


@pytest.fixture
def sample_pages() -> list[str]:
    """Page texts of a rendered paper, page 1 first, with layout artifacts."""
    return [
        "Abstract. We study how large models behave [1].",
        (
            "Scaling laws describe how loss falls with com-\n"
            "pute [2, 3]. Models improve with scale. Data quality\n"
            "matters too!"
        ),
        "Transfer learning reuses \u201cpretrained\u201d weights. It can reduce training time significantly.",
    ]


@pytest.fixture
def fake_client():
    """OpenAI-style client returning a fixed tagged answer."""
    return FakeChatClient(
        "Intro. <CIT chunk_id='0' sentences='2-2'>models improve with scale</CIT>. Done."
    )


# ── Factories ───────────────────────────────────────────────────

def make_passage(
    text: str = "Default passage text.",
    document_name: str = "paper.pdf",
    sequence_index: int = 0,
    passage_id: str = "",
    relevance_score: float = 0.5,
) -> Passage:
    """Factory for creating test passages."""
    return Passage(
        passage_id=passage_id or f"{document_name}-{sequence_index}",
        document_name=document_name,
        sequence_index=sequence_index,
        text=text,
        relevance_score=relevance_score,
    )


def make_fragments(*texts: str) -> list[TextFragment]:
    """Factory for a page's fragments laid out top to bottom."""
    return [
        TextFragment(text=text, left=72.0, top=100.0 + 14.0 * i, width=6.0 * len(text), height=12.0)
        for i, text in enumerate(texts)
    ]


# ── Fakes ───────────────────────────────────────────────────────

class FakeChatClient:
    """
    Minimal stand-in for an OpenAI client's `chat.completions.create`.

    Records every call; returns `content` as the single choice, raises
    `error` if set, or returns no choices when `content` is None and
    `empty` is True.
    """

    def __init__(self, content: str | None = "", error: Exception | None = None, empty: bool = False):
        self.content = content
        self.error = error
        self.empty = empty
        self.calls: list[dict[str, Any]] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.empty:
            return SimpleNamespace(choices=[])
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])
