# tests/unit/agents/test_unit_paper_analysis.py — v1
"""Tests for agents/paper_analysis.py: single-paper analysis agent."""

from __future__ import annotations

import pytest

from papermind.agents.paper_analysis import (
    PaperAnalysisAgent,
    PaperAnalysisInput,
    PaperAnalysisOutput,
    check_paper_content,
    column_text,
    describe_collection_context,
)
from papermind.papers.models import CollectionContext, Paper


@pytest.fixture
def agent(mock_llm_client, settings, no_sleep) -> PaperAnalysisAgent:
    return PaperAnalysisAgent(llm=mock_llm_client, settings=settings, sleep=no_sleep)


class TestIdentity:
    def test_descriptor(self, agent):
        assert agent.descriptor.key == "paper-analysis:1.0.0"
        assert agent.max_retries == 3
        assert agent.config.temperature == 0.2


class TestChecks:
    def test_valid(self, sample_paper):
        assert check_paper_content(PaperAnalysisInput(paper=sample_paper)) == []

    def test_blank_title(self, sample_paper):
        paper = sample_paper.model_copy(update={"title": "   "})
        assert check_paper_content(PaperAnalysisInput(paper=paper)) == [
            "paper.title: expected non-empty string"
        ]

    def test_no_notes_no_url(self):
        errors = check_paper_content(PaperAnalysisInput(paper=Paper(id="p", title="T")))
        assert errors == ["paper.notes: expected notes/abstract content or a url"]

    def test_url_is_enough(self):
        paper = Paper(id="p", title="T", url="https://example.org/p")
        assert check_paper_content(PaperAnalysisInput(paper=paper)) == []

    def test_short_notes(self):
        paper = Paper(id="p", title="T", notes="too short")
        assert check_paper_content(PaperAnalysisInput(paper=paper)) == [
            "paper.notes: expected at least 50 characters for meaningful analysis"
        ]


class TestExecute:
    @pytest.mark.asyncio
    async def test_success(self, agent, sample_paper, mock_llm_client):
        result = await agent.execute({"paper": sample_paper})

        assert result.success is True
        assert isinstance(result.data, PaperAnalysisOutput)
        assert result.data.reliability.score == 8.5
        assert result.metadata.tokens_used == 150
        assert result.metadata.capability_id == "gpt-4o-mini"
        assert result.metadata.agent_name == "paper-analysis"
        mock_llm_client.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_llm_call_settings(self, agent, sample_paper, mock_llm_client):
        await agent.execute({"paper": sample_paper, "analysis_type": "methodology"})

        kwargs = mock_llm_client.complete.call_args.kwargs
        assert kwargs["temperature"] == 0.2
        assert kwargs["timeout_s"] == 45.0
        assert kwargs["max_tokens"] == 2000
        assert kwargs["json_mode"] is True
        assert "expert research analyst" in kwargs["system"]
        prompt = kwargs["messages"][0].content
        assert "Title: Deep Learning for Protein Structure Prediction" in prompt
        assert "Analysis Type: methodology" in prompt
        assert "No collection context provided" in prompt
        assert '"key_findings"' in prompt

    @pytest.mark.asyncio
    async def test_invalid_input_skips_llm(self, agent, mock_llm_client):
        result = await agent.execute({"paper": {"id": "p", "title": "T", "notes": "short"}})

        assert result.success is False
        assert "validation" in result.error.lower()
        assert result.metadata.retry_count == 0
        mock_llm_client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_json_is_retried(
        self, agent, sample_paper, mock_llm_client, mock_llm_response, response_factory, no_sleep
    ):
        mock_llm_client.complete.side_effect = [
            response_factory("not json at all"),
            mock_llm_response,
        ]

        result = await agent.execute({"paper": sample_paper})

        assert result.success is True
        assert result.metadata.retry_count == 1
        assert result.metadata.tokens_used == 150
        no_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_schema_mismatch_exhausts_retries(
        self, agent, sample_paper, mock_llm_client, response_factory
    ):
        mock_llm_client.complete.return_value = response_factory({"key_findings": []})

        result = await agent.execute({"paper": sample_paper})

        assert result.success is False
        assert result.error.startswith("Output validation failed:")
        assert mock_llm_client.complete.call_count == 4
        assert agent.metrics.failed_executions == 1


class TestBatch:
    @pytest.mark.asyncio
    async def test_analyze_batch(self, agent, sample_papers, mock_llm_client):
        progress: list[int] = []

        results = await agent.analyze_batch(
            sample_papers, on_progress=lambda done, total: progress.append(done)
        )

        assert list(results) == [p.id for p in sample_papers]
        assert all(r.success for r in results.values())
        assert progress == [1, 2, 3, 4, 5]
        prompts = [c.kwargs["messages"][0].content for c in mock_llm_client.complete.call_args_list]
        assert any("Focus Areas: machine learning, proteins, deep learning" in p for p in prompts)
        assert agent.metrics.total_executions == 5

    @pytest.mark.asyncio
    async def test_collection_context_in_prompt(self, agent, sample_paper, mock_llm_client):
        ctx = CollectionContext(name="Bio", total_papers=3, common_tags=["proteins"])

        await agent.analyze_batch([sample_paper], collection_context=ctx)

        prompt = mock_llm_client.complete.call_args.kwargs["messages"][0].content
        assert "Collection: Bio" in prompt
        assert "Total Papers: 3" in prompt


class TestColumnInsight:
    @pytest.mark.asyncio
    async def test_limitations(self, agent, sample_paper):
        result = await agent.extract_column_insight(sample_paper, "limitations")

        assert result.success is True
        assert result.data == "Compute cost; Membrane proteins underrepresented"
        assert result.metadata.tokens_used == 150

    @pytest.mark.asyncio
    async def test_failure_passes_through(self, agent, mock_llm_client):
        paper = Paper(id="p", title="T")

        result = await agent.extract_column_insight(paper, "significance")

        assert result.success is False
        assert result.error.startswith("Input validation failed")
        mock_llm_client.complete.assert_not_called()

    def test_column_text(self, analysis_answer):
        analysis = PaperAnalysisOutput.model_validate(analysis_answer)
        assert column_text(analysis, "methodology") == "Transformer trained on PDB structures"
        assert column_text(analysis, "findings") == (
            "Near-experimental accuracy; Generalizes to orphan proteins"
        )
        assert column_text(analysis, "significance") == "Large step for structural biology"


class TestHelpers:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("A new method for parsing", "methodology"),
            ("Main results of the trial", "findings"),
            ("Sampling bias in surveys", "limitations"),
            ("Future directions in NLP", "future_work"),
            ("Protein folding", "comprehensive"),
        ],
    )
    def test_suggest_analysis_type(self, agent, title, expected):
        assert agent.suggest_analysis_type(Paper(id="p", title=title)) == expected

    def test_describe_collection_context(self):
        text = describe_collection_context(CollectionContext(name="X", total_papers=0))
        assert "Description: No description available" in text
        assert "Common Tags: No tags available" in text
        assert "Research Focus: General research" in text
