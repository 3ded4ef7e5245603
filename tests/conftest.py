# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides sample papers and full text, canned agent answers, mock LLM and
embedding clients, settings isolated from .env, and a no-op sleep. No
network: all LLM I/O is mocked.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable
from unittest.mock import AsyncMock

import pytest

from papermind.config.settings import Settings
from papermind.llm.models import LLMResponse
from papermind.papers.models import Paper


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_paper() -> Paper:
    """Paper with enough content for analysis."""
    return Paper(
        id="paper_001",
        title="Deep Learning for Protein Structure Prediction",
        authors=["A. Smith", "B. Jones"],
        journal="Nature Machine Intelligence",
        year=2023,
        doi="10.1000/nmi.2023.001",
        tags=["machine learning", "proteins", "deep learning", "biology"],
        notes=(
            "We present a transformer model that predicts protein tertiary structure "
            "from sequence alone, reaching near-experimental accuracy on CASP targets."
        ),
        collections=["Bioinformatics"],
    )


@pytest.fixture
def sample_papers(sample_paper: Paper) -> list[Paper]:
    """Five papers with distinct ids, years and tags."""
    papers = [sample_paper]
    for i, year in enumerate([2019, 2020, 2021, 2022], start=2):
        papers.append(
            sample_paper.model_copy(
                update={
                    "id": f"paper_00{i}",
                    "title": f"Protein Folding Study Number {i}",
                    "year": year,
                    "tags": ["proteins", f"topic-{i}"],
                }
            )
        )
    return papers


@pytest.fixture
def analysis_answer() -> dict[str, Any]:
    """Valid PaperAnalysisOutput payload as a model would return it."""
    return {
        "key_findings": ["Near-experimental accuracy", "Generalizes to orphan proteins"],
        "methodology": "Transformer trained on PDB structures",
        "limitations": ["Compute cost", "Membrane proteins underrepresented"],
        "future_work": ["Protein complexes", "Dynamics"],
        "relevant_citations": ["AlphaFold2"],
        "research_gaps": ["Conformational ensembles"],
        "significance": "Large step for structural biology",
        "reliability": {"score": 8.5, "reasoning": "Peer-reviewed, reproducible"},
        "relevance": {
            "score": 9,
            "reasoning": "Core to collection",
            "connection_points": ["proteins"],
        },
        "tags": ["protein folding", "transformers"],
    }


@pytest.fixture
def full_text() -> str:
    """Full text with one paragraph per typed section."""
    return "\n".join([
        "ABSTRACT",
        "We predict protein structure from sequence with a transformer and reach "
        "near experimental accuracy on hard targets.",
        "1. Introduction",
        "Protein folding has been an open problem for fifty years and matters for "
        "drug design and enzyme engineering alike.",
        "2. Methodology",
        "We trained a transformer on structures from the Protein Data Bank using "
        "masked sequence modelling and distance losses.",
        "3. Results",
        "The model reached a median accuracy of 92 GDT on CASP targets, see Table 2, "
        "and beat every baseline by a wide margin.",
        "4. Discussion",
        "The gains come from attention over residue pairs, yet membrane proteins "
        "remain hard and compute cost is high for large complexes.",
        "5. Conclusion",
        "Sequence alone is enough to recover most folds, and the next step is "
        "modelling complexes and conformational dynamics of proteins.",
        "REFERENCES",
        "Jumper J, et al. Highly accurate protein structure prediction with "
        "AlphaFold. Nature 596, 583-589 (2021).",
    ])


# === FIXTURES: Mock LLM ===


def make_response(content: str | dict[str, Any], model: str = "gpt-4o-mini") -> LLMResponse:
    """LLMResponse with fixed token counts (100 in, 50 out)."""
    if not isinstance(content, str):
        content = json.dumps(content)
    return LLMResponse(
        content=content,
        input_tokens=100,
        output_tokens=50,
        model=model,
        provider="openai",
        latency_ms=500,
    )


@pytest.fixture
def response_factory() -> Callable[..., LLMResponse]:
    return make_response


@pytest.fixture
def mock_llm_response(analysis_answer: dict[str, Any]) -> LLMResponse:
    """Standard mock LLM response carrying a valid paper analysis."""
    return make_response(analysis_answer)


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "openai"
    client.model = "gpt-4o-mini"
    return client


@pytest.fixture
def mock_embedder() -> AsyncMock:
    """Mock BaseEmbedder: every text and query maps to the same unit vector."""
    embedder = AsyncMock()
    embedder.embed_texts = AsyncMock(side_effect=lambda texts: [[1.0, 0.0] for _ in texts])
    embedder.embed_query = AsyncMock(return_value=[1.0, 0.0])
    embedder.provider_name = "openai"
    embedder.model_name = "text-embedding-3-small"
    return embedder


# === FIXTURES: Settings & timing ===


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, openai_api_key="sk-test")


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Awaitable sleep replacement that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def fake_clock() -> Callable[[Iterable[float]], Callable[[], float]]:
    """Build a clock returning the given readings (seconds) in order."""

    def build(readings: Iterable[float]) -> Callable[[], float]:
        it = iter(readings)
        return lambda: next(it)

    return build
