# src/core/errors.py — v1
"""Error taxonomy of the agent execution framework.

The executor and batch orchestrator turn these into failed ExecutionResults;
they only escape as exceptions from helpers that say so (resolve_or_raise).
"""

from __future__ import annotations


class AgentError(Exception):
    """Base class for all framework errors."""


class InputValidationError(AgentError):
    """Payload failed its input schema. Never retried."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(f"Input validation failed: {', '.join(self.errors)}")


class CapabilityError(AgentError):
    """The underlying capability call failed."""


class TransientCapabilityError(CapabilityError):
    """Presumed recoverable (timeout, network, server error, malformed output)."""


class PermanentCapabilityError(CapabilityError):
    """Retrying cannot help (credentials, quota, unknown model, rejected input)."""


class BatchItemError(AgentError):
    """An unexpected failure of one batch item, recorded in place of its result."""

    def __init__(self, key: object, cause: BaseException):
        self.key = key
        self.cause = cause
        super().__init__(f"Batch item {key!r} failed: {cause}")


class RegistryError(AgentError):
    """Raised when agent lookup or loading fails."""
