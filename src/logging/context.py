# src/logging/context.py — v2
"""Contextual logging support: attach agent, session and batch item to log records.

The executor sets the agent for the duration of a call and the batch
orchestrator sets the item key; asyncio copies the context into every task
so concurrent items keep their own values.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_agent: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "agent", default=None
)
_session_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "session_id", default=None
)
_item_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "item_key", default=None
)


@dataclass(frozen=True)
class LogContext:
    """Immutable snapshot of current logging context."""

    agent: str | None = None
    session_id: str | None = None
    item_key: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        agent=_agent.get(),
        session_id=_session_id.get(),
        item_key=_item_key.get(),
    )


AgentContextTokens = tuple[contextvars.Token, contextvars.Token | None]


def set_agent_context(agent: str, session_id: str | None = None) -> AgentContextTokens:
    """Set agent-level context. Returns the tokens that restore the previous values."""
    session_token = _session_id.set(session_id) if session_id is not None else None
    return _agent.set(agent), session_token


def reset_agent_context(tokens: AgentContextTokens) -> None:
    agent_token, session_token = tokens
    _agent.reset(agent_token)
    if session_token is not None:
        _session_id.reset(session_token)


def set_item_context(item_key: str) -> None:
    """Set batch item context (called inside the item's own task)."""
    _item_key.set(item_key)


def clear_context() -> None:
    """Reset all context variables."""
    _agent.set(None)
    _session_id.set(None)
    _item_key.set(None)
