# tests/unit/agents/test_unit_base_agent.py — v1
"""Tests for agents/base_agent.py: shared agent wiring."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import BaseModel

from papermind.agents.base_agent import BaseAgent
from papermind.config.settings import ConfigurationError, Settings
from papermind.core.models import CapabilityOutput, ExecutionContext
from papermind.llm.adapters.openai_adapter import OpenAIAdapter


class _EchoInput(BaseModel):
    text: str


class _EchoOutput(BaseModel):
    echo: str


class _EchoAgent(BaseAgent):
    @property
    def name(self) -> str:
        return "echo"

    @property
    def version(self) -> str:
        return "0.1.0"

    @property
    def description(self) -> str:
        return "Echoes its input through the model"

    @property
    def agent_type(self) -> str:
        return "smart_column"

    @property
    def input_schema(self) -> type[BaseModel]:
        return _EchoInput

    @property
    def output_schema(self) -> type[BaseModel]:
        return _EchoOutput

    async def run(self, inp: _EchoInput, context: ExecutionContext | None) -> Any:
        return await self.complete_json(inp.text, "system prompt")


class TestWiring:
    def test_descriptor(self, mock_llm_client, settings):
        agent = _EchoAgent(llm=mock_llm_client, settings=settings)
        assert agent.descriptor.key == "echo:0.1.0"
        assert agent.descriptor.description == "Echoes its input through the model"

    def test_override_changes_retry_budget(self, mock_llm_client):
        settings = Settings(
            _env_file=None,
            openai_api_key="sk-test",
            agent_overrides={"smart_column": {"max_retries": 1}},
        )
        agent = _EchoAgent(llm=mock_llm_client, settings=settings)
        assert agent.max_retries == 1

    def test_orchestrator_uses_settings(self, mock_llm_client):
        settings = Settings(_env_file=None, batch_size=5, batch_delay_s=0.5)
        orch = _EchoAgent(llm=mock_llm_client, settings=settings).orchestrator()
        assert orch.batch_size == 5
        assert orch.inter_batch_delay_s == 0.5

    def test_format_instructions_embed_schema(self, mock_llm_client, settings):
        text = _EchoAgent(llm=mock_llm_client, settings=settings).format_instructions()
        assert '"echo"' in text
        assert text.startswith("Respond only with a JSON object")


class TestLazyClient:
    def test_created_from_settings(self):
        settings = Settings(_env_file=None, openai_api_key="sk-test", agent_model="gpt-4o")
        agent = _EchoAgent(settings=settings)
        assert isinstance(agent.llm, OpenAIAdapter)
        assert agent.llm.model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_missing_key_fails_the_call(self, no_sleep):
        agent = _EchoAgent(settings=Settings(_env_file=None, openai_api_key=""), sleep=no_sleep)

        result = await agent.execute({"text": "hi"})

        assert result.success is False
        assert "OPENAI_API_KEY" in result.error
        assert result.metadata.retry_count == 0

    def test_missing_key_raises_on_access(self):
        agent = _EchoAgent(settings=Settings(_env_file=None, openai_api_key=""))
        with pytest.raises(ConfigurationError):
            _ = agent.llm


class TestCompleteJson:
    @pytest.mark.asyncio
    async def test_returns_capability_output(self, mock_llm_client, settings, response_factory):
        mock_llm_client.complete.return_value = response_factory({"echo": "hi"}, model="gpt-4o")
        agent = _EchoAgent(llm=mock_llm_client, settings=settings)

        output = await agent.complete_json("hi", "sys")

        assert isinstance(output, CapabilityOutput)
        assert output.data == {"echo": "hi"}
        assert output.tokens_used == 150
        assert output.model == "gpt-4o"

    @pytest.mark.asyncio
    async def test_metrics_and_reset(self, mock_llm_client, settings, response_factory):
        mock_llm_client.complete.return_value = response_factory({"echo": "hi"})
        agent = _EchoAgent(llm=mock_llm_client, settings=settings)

        await agent.execute({"text": "hi"})
        assert agent.metrics.successful_executions == 1

        agent.reset_metrics()
        assert agent.metrics.total_executions == 0
