# src/agents/base_agent.py — v1
"""Standard interface for paper agents.

A BaseAgent is a named, versioned capability: it declares its input and
output schemas, optional semantic input checks, and implements ``run`` (one
underlying LLM call). Each agent owns one RetryingExecutor, so validation,
retries, output validation and metrics come from the framework.
"""

from __future__ import annotations

import asyncio
import json
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

from papermind.config.agents import AgentTypeConfig, agent_type_config
from papermind.config.settings import Settings
from papermind.core.models import (
    AgentDescriptor,
    AgentMetrics,
    CapabilityOutput,
    ExecutionContext,
    ExecutionResult,
)
from papermind.execution.batch import BatchOrchestrator
from papermind.execution.executor import RetryingExecutor
from papermind.execution.retry import RetryPolicy
from papermind.llm.base_client import BaseLLMClient
from papermind.llm.json_output import parse_json_response
from papermind.llm.models import Message
from papermind.validation.validator import Check


class BaseAgent(ABC):
    """Base class of all paper agents.

    Args:
        llm: LLM client. Created from settings on first use when omitted.
        settings: Application settings. Loaded from .env when omitted.
        sleep: Backoff/inter-batch delay function (injected by tests).
        clock: Monotonic clock in seconds used for latency.
    """

    def __init__(
        self,
        llm: BaseLLMClient | None = None,
        settings: Settings | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or Settings()
        self._llm = llm
        self._sleep = sleep
        self._config = agent_type_config(self.agent_type, self._settings)
        self._executor = RetryingExecutor(
            self.run,
            descriptor=self.descriptor,
            input_schema=self.input_schema,
            output_schema=self.output_schema,
            retry_policy=RetryPolicy(
                max_retries=self._config.max_retries,
                base_delay_s=self._settings.retry_base_delay_s,
                backoff_factor=self._settings.retry_backoff_factor,
            ),
            checks=self.checks(),
            capability_id=llm.model if llm is not None else self._settings.agent_model,
            sleep=sleep,
            clock=clock,
        )

    # --- Identity & schemas ---

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique agent identifier (e.g. 'paper-analysis')."""

    @property
    @abstractmethod
    def version(self) -> str:
        """Agent version (semver)."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this agent does."""

    @property
    @abstractmethod
    def agent_type(self) -> str:
        """Key into AGENT_TYPE_DEFAULTS (retry budget, temperature, timeout)."""

    @property
    @abstractmethod
    def input_schema(self) -> type[BaseModel]:
        """Pydantic model every payload must satisfy."""

    @property
    @abstractmethod
    def output_schema(self) -> type[BaseModel]:
        """Pydantic model the capability output must satisfy."""

    @property
    def descriptor(self) -> AgentDescriptor:
        return AgentDescriptor(name=self.name, version=self.version, description=self.description)

    @property
    def config(self) -> AgentTypeConfig:
        return self._config

    def checks(self) -> list[Check]:
        """Semantic input checks run after the schema passes. Override as needed."""
        return []

    # --- Execution ---

    @abstractmethod
    async def run(self, inp: Any, context: ExecutionContext | None) -> Any:
        """One capability call on a validated input."""

    async def execute(
        self, payload: Any, context: ExecutionContext | None = None
    ) -> ExecutionResult[Any]:
        """Validate, run with retries and record metrics. Never raises."""
        return await self._executor.execute(payload, context)

    @property
    def metrics(self) -> AgentMetrics:
        return self._executor.metrics

    def reset_metrics(self) -> None:
        self._executor.reset_metrics()

    @property
    def max_retries(self) -> int:
        return self._executor.max_retries

    def orchestrator(self) -> BatchOrchestrator:
        """Batch orchestrator over this agent, paced by settings."""
        return BatchOrchestrator(
            self,
            batch_size=self._settings.batch_size,
            inter_batch_delay_s=self._settings.batch_delay_s,
            sleep=self._sleep,
        )

    # --- LLM helpers ---

    @property
    def llm(self) -> BaseLLMClient:
        if self._llm is None:
            from papermind.llm.client_factory import create_llm_client

            self._llm = create_llm_client(
                self._settings.agent_provider,
                self._settings.agent_model,
                settings=self._settings,
            )
        return self._llm

    def format_instructions(self) -> str:
        """JSON schema the model's answer must follow."""
        schema = json.dumps(self.output_schema.model_json_schema(), indent=2)
        return (
            "Respond only with a JSON object that conforms to this JSON schema:\n"
            f"{schema}"
        )

    async def complete_json(self, prompt: str, system: str) -> CapabilityOutput:
        """Ask the model for a JSON object answer, with this agent type's settings."""
        response = await self.llm.complete(
            messages=[Message(role="user", content=prompt)],
            system=system,
            max_tokens=self._settings.agent_max_tokens,
            temperature=self._config.temperature,
            json_mode=True,
            timeout_s=self._config.timeout_s,
        )
        return CapabilityOutput(
            data=parse_json_response(response.content),
            tokens_used=response.total_tokens,
            model=response.model,
        )
