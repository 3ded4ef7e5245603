# src/api/facade.py — v2
"""Public service facade: single entry point for running agents.

Usage:
    from papermind.api.facade import AgentService
    service = AgentService()
    result = await service.run("paper-analysis", {"paper": paper})

The service is the composition root: it owns one AgentRegistry, loads the
built-in agents into it and keeps their instances so metrics can be read
back per agent key.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Hashable, Sequence

from papermind.agents.base_agent import BaseAgent
from papermind.config.agents import BUILTIN_AGENTS
from papermind.config.settings import Settings
from papermind.core.models import AgentMetrics, ExecutionContext, ExecutionResult
from papermind.execution.batch import BatchOrchestrator, ProgressCallback
from papermind.execution.registry import AgentCallable, AgentRegistry
from papermind.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


class AgentService:
    """Registry-backed access to the paper agents.

    Args:
        settings: Application settings. Loaded from .env when omitted.
        llm: LLM client shared by every built-in agent. Created lazily
            from settings when omitted.
        registry: Registry to populate. A fresh one when omitted.
        sleep: Delay function handed to agents and batch orchestrators.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        llm: BaseLLMClient | None = None,
        registry: AgentRegistry | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._settings = settings or Settings()
        self._registry = registry if registry is not None else AgentRegistry()
        self._sleep = sleep
        self._agents: dict[str, BaseAgent] = {}
        for agent in self._registry.load_agents(
            BUILTIN_AGENTS, llm=llm, settings=self._settings, sleep=sleep
        ):
            self._agents[agent.descriptor.key] = agent

    @property
    def registry(self) -> AgentRegistry:
        return self._registry

    @property
    def settings(self) -> Settings:
        return self._settings

    def list_agents(self) -> list[dict[str, str]]:
        return self._registry.list()

    def get_agent(self, name: str, version: str | None = None) -> BaseAgent | None:
        """Built-in agent instance for name (and version), or None."""
        descriptor = self._registry.descriptor(name, version)
        if descriptor is None:
            return None
        return self._agents.get(descriptor.key)

    async def run(
        self,
        name: str,
        payload: Any,
        context: ExecutionContext | None = None,
        version: str | None = None,
    ) -> ExecutionResult[Any]:
        """Execute one payload on a registered agent. Never raises."""
        fn = self._registry.resolve(name, version)
        if fn is None:
            return _not_found(name, version)
        try:
            return await fn(payload, context)
        except Exception as exc:
            logger.error("Agent %s raised outside its executor: %s", name, exc, exc_info=True)
            return ExecutionResult.fail(str(exc) or type(exc).__name__, agent_name=name)

    async def run_batch(
        self,
        name: str,
        items: Sequence[Any],
        *,
        key: Callable[[Any], Hashable],
        build_input: Callable[[Any], Any] | None = None,
        context: ExecutionContext | None = None,
        on_progress: ProgressCallback | None = None,
        version: str | None = None,
    ) -> dict[Hashable, ExecutionResult[Any]]:
        """Batch-execute items on a registered agent, keyed by ``key(item)``.

        When the agent is unknown every item maps to the same not-found
        failure.
        """
        fn = self._registry.resolve(name, version)
        if fn is None:
            return {key(item): _not_found(name, version) for item in items}

        orchestrator = BatchOrchestrator(
            _CallableExecutor(fn),
            batch_size=self._settings.batch_size,
            inter_batch_delay_s=self._settings.batch_delay_s,
            sleep=self._sleep,
        )
        return await orchestrator.execute_batch(
            items,
            key=key,
            build_input=build_input,
            context=context,
            on_progress=on_progress,
        )

    def metrics(self) -> dict[str, AgentMetrics]:
        """Snapshot of every built-in agent's metrics, by 'name:version'."""
        return {k: agent.metrics for k, agent in self._agents.items()}


class _CallableExecutor:
    """Adapts a registered callable to the orchestrator's executor shape."""

    def __init__(self, fn: AgentCallable) -> None:
        self._fn = fn

    async def execute(
        self, payload: Any, context: ExecutionContext | None = None
    ) -> ExecutionResult[Any]:
        return await self._fn(payload, context)


def _not_found(name: str, version: str | None) -> ExecutionResult[Any]:
    wanted = f"{name}:{version}" if version else name
    logger.warning("Agent %s not found in registry", wanted)
    return ExecutionResult.fail(
        f"Agent '{wanted}' not found in registry", agent_name=name
    )


# Checked in order; first match wins.
_FAILURE_MESSAGES: list[tuple[tuple[str, ...], str]] = [
    (
        ("rate limit",),
        "Rate limit reached. Please wait a moment before trying again.",
    ),
    (
        ("api key", "api_key", "insufficient quota"),
        "AI service configuration error. Please check the API key and quota.",
    ),
    (
        ("timeout", "timed out"),
        "Request timed out. Try again with shorter text.",
    ),
    (
        ("validation",),
        "Invalid input data. Please check the paper information.",
    ),
]


def describe_failure(result: ExecutionResult[Any]) -> str:
    """User-facing explanation of a failed result ('' for a success)."""
    if result.success:
        return ""
    error = (result.error or "").lower()
    for needles, message in _FAILURE_MESSAGES:
        if any(n in error for n in needles):
            return message
    return "AI analysis failed. Please try again later."
