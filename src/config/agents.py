# src/config/agents.py — v2
"""Declarative agent configuration.

Per-agent-type behaviour (temperature, retry budget, capability timeout)
and the dotted class paths of the built-in agents loaded by the service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from papermind.config.settings import Settings


class AgentTypeConfig(BaseModel):
    """Behaviour of one agent type."""

    temperature: float = Field(ge=0.0, le=2.0)
    max_retries: int = Field(ge=0)
    timeout_s: float = Field(gt=0.0)


AGENT_TYPE_DEFAULTS: dict[str, AgentTypeConfig] = {
    # Deterministic for analysis
    "paper_analysis": AgentTypeConfig(temperature=0.2, max_retries=3, timeout_s=45.0),
    # Slightly more creative for identifying gaps
    "research_gap": AgentTypeConfig(temperature=0.4, max_retries=3, timeout_s=60.0),
    # Full-text analysis, one call per card
    "paper_analyzer": AgentTypeConfig(temperature=0.3, max_retries=2, timeout_s=60.0),
    # Consistent column values across rows
    "smart_column": AgentTypeConfig(temperature=0.1, max_retries=3, timeout_s=30.0),
}

# Fully qualified class paths for AgentRegistry.load_agents().
BUILTIN_AGENTS: list[str] = [
    "papermind.agents.paper_analysis.PaperAnalysisAgent",
    "papermind.agents.paper_analyzer.PaperAnalyzerAgent",
    "papermind.agents.research_gap.ResearchGapAgent",
    "papermind.agents.smart_column.SmartColumnAgent",
]

_TASK_MODELS: dict[str, str] = {
    "analysis": "gpt-4o-mini",
    "creative": "gpt-4o",
    "reasoning": "gpt-4o",
    "classification": "gpt-4o-mini",
}


def agent_type_config(agent_type: str, settings: Settings | None = None) -> AgentTypeConfig:
    """Resolve the configuration of an agent type, applying settings overrides.

    Raises:
        KeyError: If the agent type is unknown.
    """
    base = AGENT_TYPE_DEFAULTS[agent_type]
    if settings is None:
        return base
    override = settings.agent_overrides.get(agent_type)
    if not override:
        return base
    return AgentTypeConfig.model_validate({**base.model_dump(), **override})


def get_optimal_model(task_type: str) -> str:
    """Pick a model for a kind of task (cheap model unless reasoning matters)."""
    return _TASK_MODELS.get(task_type, "gpt-4o-mini")
