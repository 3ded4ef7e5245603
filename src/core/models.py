# src/core/models.py — v2
"""Shared Pydantic models of the agent execution framework.

AgentDescriptor, ExecutionContext, ExecutionResult and AgentMetrics are the
only shapes callers see; no module redefines them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")


# === IDENTITY & CONTEXT ===


class AgentDescriptor(BaseModel):
    """Identity of a registered capability. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    description: str = ""

    @property
    def key(self) -> str:
        """Registry key 'name:version'."""
        return f"{self.name}:{self.version}"


class ExecutionContext(BaseModel):
    """Cross-cutting call metadata, passed through to the capability untouched."""

    model_config = ConfigDict(frozen=True)

    user_id: str | None = None
    session_id: str | None = None
    preferences: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# === RESULTS ===


class CapabilityOutput(BaseModel):
    """Optional envelope a capability returns to report usage with its data."""

    data: Any
    tokens_used: int = 0
    model: str | None = None


class ExecutionMetadata(BaseModel):
    """Bookkeeping attached to every ExecutionResult."""

    processing_time_ms: int = 0
    retry_count: int = 0
    capability_id: str | None = None
    tokens_used: int = 0
    agent_name: str | None = None


class ExecutionResult(BaseModel, Generic[T]):
    """Tagged outcome of one execution: data on success, error on failure."""

    success: bool
    data: T | None = None
    error: str | None = None
    metadata: ExecutionMetadata = Field(default_factory=ExecutionMetadata)

    @model_validator(mode="after")
    def check_outcome(self) -> ExecutionResult[T]:
        if self.success:
            if self.error is not None:
                raise ValueError("successful result cannot carry an error")
            if self.data is None:
                raise ValueError("successful result requires data")
        else:
            if not self.error:
                raise ValueError("failed result requires an error message")
            if self.data is not None:
                raise ValueError("failed result cannot carry data")
        return self

    @classmethod
    def ok(cls, data: T, **metadata: Any) -> ExecutionResult[T]:
        return cls(success=True, data=data, metadata=ExecutionMetadata(**metadata))

    @classmethod
    def fail(cls, error: str, **metadata: Any) -> ExecutionResult[T]:
        return cls(success=False, error=error, metadata=ExecutionMetadata(**metadata))


class ValidationResult(BaseModel):
    """Outcome of schema validation; errors are dotted-path prefixed."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


# === METRICS ===


class AgentMetrics(BaseModel):
    """Running counters owned by a single executor."""

    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    average_execution_time_ms: float = 0.0
    total_tokens_used: int = 0
    last_executed: datetime | None = None

    @property
    def success_rate(self) -> float:
        if not self.total_executions:
            return 0.0
        return self.successful_executions / self.total_executions

    def record(self, success: bool, latency_ms: float, tokens_used: int = 0) -> None:
        """Fold one finished execution into the counters (incremental mean)."""
        self.total_executions += 1
        if success:
            self.successful_executions += 1
        else:
            self.failed_executions += 1
        n = self.total_executions
        self.average_execution_time_ms = (
            self.average_execution_time_ms * (n - 1) + latency_ms
        ) / n
        self.total_tokens_used += tokens_used
        self.last_executed = datetime.now(timezone.utc)
