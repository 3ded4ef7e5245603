# tests/unit/agents/test_unit_paper_analyzer.py — v1
"""Tests for agents/paper_analyzer.py: card-by-card full-text analysis."""

from __future__ import annotations

import pytest

from papermind.agents.paper_analyzer import (
    DEFAULT_ANALYSIS_CARDS,
    PaperAnalyzerAgent,
    PaperAnalyzerInput,
    build_card_context,
    check_full_text,
    select_cards,
    select_chunks,
)
from papermind.config.settings import Settings
from papermind.papers.chunking import chunk_paper

CARD_IDS = ["overview", "methodology", "findings", "assessment", "impact", "personal"]


@pytest.fixture
def paper(sample_paper, full_text):
    return sample_paper.model_copy(update={"full_text": full_text})


@pytest.fixture
def agent(mock_llm_client, mock_embedder, settings, no_sleep, response_factory) -> PaperAnalyzerAgent:
    mock_llm_client.complete.return_value = response_factory("- Transformer trained on PDB")
    return PaperAnalyzerAgent(
        llm=mock_llm_client, settings=settings, embedder=mock_embedder, sleep=no_sleep
    )


def _prompt(call) -> str:
    return call.kwargs["messages"][0].content


class TestCards:
    def test_default_cards(self):
        assert [c.id for c in DEFAULT_ANALYSIS_CARDS] == CARD_IDS

    def test_select_all(self):
        assert [c.id for c in select_cards(None)] == CARD_IDS

    def test_select_keeps_card_order(self):
        assert [c.id for c in select_cards(["impact", "overview"])] == ["overview", "impact"]


class TestCheckFullText:
    def test_valid(self, paper):
        assert check_full_text(PaperAnalyzerInput(paper=paper)) == []

    def test_missing_full_text(self, sample_paper):
        errors = check_full_text(PaperAnalyzerInput(paper=sample_paper))
        assert errors == ["paper.full_text: full text content required for analysis"]

    def test_unknown_card(self, paper):
        errors = check_full_text(PaperAnalyzerInput(paper=paper, card_ids=["overview", "vibes"]))
        assert errors == ["card_ids: unknown analysis card 'vibes'"]

    def test_empty_card_list(self, paper):
        errors = check_full_text(PaperAnalyzerInput(paper=paper, card_ids=[]))
        assert errors == ["card_ids: expected non-empty array"]


class TestSelectChunks:
    def test_only_target_sections(self, full_text):
        chunks = chunk_paper(full_text)
        vectors = [[1.0, 0.0]] * len(chunks)

        selected = select_chunks(chunks, vectors, [1.0, 0.0], ["results", "discussion"], 6)

        assert [c.section_type for c in selected] == ["results", "discussion"]

    def test_ranked_by_similarity_and_capped(self, full_text):
        chunks = chunk_paper(full_text)
        vectors = [
            [0.0, 1.0] if c.section_type == "results" else [1.0, 0.0] for c in chunks
        ]

        selected = select_chunks(chunks, vectors, [0.0, 1.0], ["discussion", "results"], 1)

        assert [c.section_type for c in selected] == ["results"]

    def test_falls_back_to_all_chunks(self, full_text):
        chunks = [c for c in chunk_paper(full_text) if c.section_type != "methodology"]
        vectors = [[1.0, 0.0]] * len(chunks)

        selected = select_chunks(chunks, vectors, [1.0, 0.0], ["methodology"], 3)

        assert [c.id for c in selected] == [c.id for c in chunks[:3]]

    def test_no_chunks(self):
        assert select_chunks([], [], [1.0], ["results"], 3) == []

    def test_context_labels_sections(self, full_text):
        chunks = chunk_paper(full_text)[:2]
        context = build_card_context(chunks)
        assert context.startswith("Research Paper Content:")
        assert "--- Section 1 (abstract) ---" in context
        assert "--- Section 2 (introduction) ---" in context


class TestExecute:
    def test_identity(self, agent):
        assert agent.descriptor.key == "paper-analyzer:1.0.0"
        assert agent.max_retries == 2

    @pytest.mark.asyncio
    async def test_all_cards(self, agent, paper, mock_llm_client, mock_embedder):
        result = await agent.execute({"paper": paper})

        assert result.success is True
        assert list(result.data.cards) == CARD_IDS
        assert result.data.cards["overview"] == "- Transformer trained on PDB"
        assert result.data.failed_cards == []
        assert result.data.chunk_count == 7
        assert result.metadata.tokens_used == 6 * 150
        assert mock_llm_client.complete.await_count == 6
        assert mock_embedder.embed_texts.await_count == 1
        assert mock_embedder.embed_query.await_count == 6

        kwargs = mock_llm_client.complete.call_args.kwargs
        assert kwargs["max_tokens"] == 200
        assert kwargs["temperature"] == 0.3
        assert kwargs["timeout_s"] == 60.0

    @pytest.mark.asyncio
    async def test_card_reads_its_target_sections(self, agent, paper, mock_llm_client):
        await agent.execute({"paper": paper, "card_ids": ["methodology"]})

        prompt = _prompt(mock_llm_client.complete.call_args)
        assert "Question: What methods were used?" in prompt
        assert "(methodology)" in prompt
        assert "(results)" not in prompt
        assert "masked sequence modelling" in prompt

    @pytest.mark.asyncio
    async def test_failing_card_is_isolated(self, agent, paper, mock_llm_client, response_factory):
        ok = response_factory("Answer")
        mock_llm_client.complete.side_effect = [
            ok, RuntimeError("rate limit exceeded"), ok, ok, ok, ok,
        ]

        result = await agent.execute({"paper": paper})

        assert result.success is True
        assert result.data.cards["methodology"] == "Analysis failed: rate limit exceeded"
        assert result.data.cards["findings"] == "Answer"
        assert result.data.failed_cards == ["methodology"]
        assert result.metadata.tokens_used == 5 * 150
        assert result.metadata.retry_count == 0

    @pytest.mark.asyncio
    async def test_every_card_failing_fails_the_attempt(self, agent, paper, mock_llm_client, no_sleep):
        mock_llm_client.complete.side_effect = RuntimeError("invalid api key")

        result = await agent.execute({"paper": paper, "card_ids": ["overview", "findings"]})

        assert result.success is False
        assert result.error == "invalid api key"
        assert result.metadata.retry_count == 0
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transient_total_failure_is_retried(
        self, agent, paper, mock_llm_client, mock_embedder, no_sleep, response_factory
    ):
        mock_llm_client.complete.side_effect = [
            RuntimeError("connection reset"), response_factory("Answer"),
        ]

        result = await agent.execute({"paper": paper, "card_ids": ["overview"]})

        assert result.success is True
        assert result.data.cards == {"overview": "Answer"}
        assert result.metadata.retry_count == 1
        no_sleep.assert_awaited_once_with(1.0)
        assert mock_embedder.embed_texts.await_count == 2

    @pytest.mark.asyncio
    async def test_embedding_failure_is_retried(self, agent, paper, mock_embedder, no_sleep):
        mock_embedder.embed_texts.side_effect = RuntimeError("connection reset")

        result = await agent.execute({"paper": paper})

        assert result.success is False
        assert result.metadata.retry_count == 2
        assert mock_embedder.embed_texts.await_count == 3

    @pytest.mark.asyncio
    async def test_missing_full_text_never_calls_models(
        self, agent, sample_paper, mock_llm_client, mock_embedder
    ):
        result = await agent.execute({"paper": sample_paper})

        assert result.success is False
        assert result.error.startswith("Input validation failed:")
        assert "paper.full_text" in result.error
        mock_llm_client.complete.assert_not_awaited()
        mock_embedder.embed_texts.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_embeddings_batched(self, mock_llm_client, mock_embedder, no_sleep, paper):
        settings = Settings(_env_file=None, openai_api_key="sk-test", embedding_batch_size=3)
        agent = PaperAnalyzerAgent(
            llm=mock_llm_client, settings=settings, embedder=mock_embedder, sleep=no_sleep
        )

        await agent.execute({"paper": paper, "card_ids": ["overview"]})

        sizes = [len(call.args[0]) for call in mock_embedder.embed_texts.call_args_list]
        assert sizes == [3, 3, 1]

    @pytest.mark.asyncio
    async def test_analyze_paper(self, agent, paper):
        result = await agent.analyze_paper(paper, ["impact"])
        assert result.success is True
        assert list(result.data.cards) == ["impact"]

    @pytest.mark.asyncio
    async def test_embedder_created_from_settings(
        self, mock_llm_client, mock_embedder, settings, no_sleep, paper, monkeypatch
    ):
        created = []

        def fake_create(s):
            created.append(s)
            return mock_embedder

        monkeypatch.setattr("papermind.llm.embeddings.create_embedder", fake_create)
        agent = PaperAnalyzerAgent(llm=mock_llm_client, settings=settings, sleep=no_sleep)

        result = await agent.execute({"paper": paper, "card_ids": ["overview"]})

        assert result.success is True
        assert created == [settings]
