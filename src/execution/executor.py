# src/execution/executor.py — v1
"""Retrying executor: validation, bounded retries and metrics around one capability.

Each call walks an explicit state machine::

    VALIDATING --invalid--> FAILED
    VALIDATING ----------> ATTEMPTING(k=0)
    ATTEMPTING(k) -------> SUCCEEDED
    ATTEMPTING(k) -------> BACKING_OFF -> ATTEMPTING(k+1)   transient, k < max_retries
    ATTEMPTING(k) -------> FAILED                           permanent, or k == max_retries

The backoff sleep and the latency clock are injected so the retry logic can
be exercised without real delays. ``execute`` always returns an
ExecutionResult; only programmer errors (illegal transitions) raise.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Sequence

from pydantic import BaseModel

from papermind.core.errors import InputValidationError, TransientCapabilityError
from papermind.core.models import (
    AgentDescriptor,
    AgentMetrics,
    CapabilityOutput,
    ExecutionContext,
    ExecutionResult,
)
from papermind.execution.retry import ErrorKind, RetryPolicy, classify_error, error_message
from papermind.logging.context import reset_agent_context, set_agent_context
from papermind.validation.validator import Check, Validator

logger = logging.getLogger(__name__)

Capability = Callable[[Any, "ExecutionContext | None"], Awaitable[Any]]
SleepFn = Callable[[float], Awaitable[Any]]
ClockFn = Callable[[], float]


class ExecutionState(str, Enum):
    VALIDATING = "validating"
    ATTEMPTING = "attempting"
    BACKING_OFF = "backing_off"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TRANSITIONS: dict[ExecutionState, frozenset[ExecutionState]] = {
    ExecutionState.VALIDATING: frozenset({ExecutionState.ATTEMPTING, ExecutionState.FAILED}),
    ExecutionState.ATTEMPTING: frozenset(
        {ExecutionState.SUCCEEDED, ExecutionState.BACKING_OFF, ExecutionState.FAILED}
    ),
    ExecutionState.BACKING_OFF: frozenset({ExecutionState.ATTEMPTING}),
    ExecutionState.SUCCEEDED: frozenset(),
    ExecutionState.FAILED: frozenset(),
}


def next_state_after_error(attempt: int, max_retries: int, kind: ErrorKind) -> ExecutionState:
    """Where a failed attempt leads: back off and retry, or fail for good."""
    if kind == "permanent" or attempt >= max_retries:
        return ExecutionState.FAILED
    return ExecutionState.BACKING_OFF


class _Call:
    """Mutable state of one execute() call."""

    def __init__(self) -> None:
        self.state = ExecutionState.VALIDATING
        self.attempt = 0
        self.output: Any = None
        self.last_error: BaseException | None = None
        self.tokens_used = 0
        self.model: str | None = None

    def advance(self, target: ExecutionState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal transition {self.state.value} -> {target.value}")
        self.state = target


class RetryingExecutor:
    """Runs one capability with validation, retries and metrics.

    Args:
        capability: ``async (payload, context) -> output``; may return a
            CapabilityOutput to report tokens used and the model.
        descriptor: Identity of the capability (used in logs and metadata).
        input_schema: Pydantic model the payload must satisfy. None skips validation.
        output_schema: Pydantic model the output must satisfy. A mismatch is transient.
        max_retries: Retry budget when no retry_policy is given.
        retry_policy: Full retry/backoff policy.
        checks: Semantic input checks run after the schema passes.
        capability_id: Identifier reported in metadata (defaults to descriptor key).
        sleep: Awaitable delay function used between attempts.
        clock: Monotonic clock in seconds used for latency.
    """

    def __init__(
        self,
        capability: Capability,
        *,
        descriptor: AgentDescriptor,
        input_schema: type[BaseModel] | None = None,
        output_schema: type[BaseModel] | None = None,
        max_retries: int = 3,
        retry_policy: RetryPolicy | None = None,
        checks: Sequence[Check] | None = None,
        capability_id: str | None = None,
        sleep: SleepFn = asyncio.sleep,
        clock: ClockFn = time.monotonic,
    ) -> None:
        self._capability = capability
        self._descriptor = descriptor
        self._input_validator = Validator(input_schema, checks) if input_schema else None
        self._output_validator = Validator(output_schema) if output_schema else None
        self._policy = retry_policy or RetryPolicy(max_retries=max_retries)
        self._capability_id = capability_id or descriptor.key
        self._sleep = sleep
        self._clock = clock
        self._metrics = AgentMetrics()

    @property
    def descriptor(self) -> AgentDescriptor:
        return self._descriptor

    @property
    def max_retries(self) -> int:
        return self._policy.max_retries

    @property
    def metrics(self) -> AgentMetrics:
        """Snapshot of this executor's metrics."""
        return self._metrics.model_copy()

    def reset_metrics(self) -> None:
        self._metrics = AgentMetrics()

    async def execute(
        self, payload: Any, context: ExecutionContext | None = None
    ) -> ExecutionResult[Any]:
        """Validate payload, then run the capability with retries."""
        start = self._clock()
        tokens = set_agent_context(
            self._descriptor.name, context.session_id if context else None
        )
        try:
            call = await self._drive(payload, context)
        finally:
            reset_agent_context(tokens)
        elapsed_ms = round((self._clock() - start) * 1000)

        succeeded = call.state is ExecutionState.SUCCEEDED
        self._metrics.record(succeeded, elapsed_ms, call.tokens_used)

        metadata = {
            "processing_time_ms": elapsed_ms,
            "retry_count": call.attempt,
            "capability_id": call.model or self._capability_id,
            "tokens_used": call.tokens_used,
            "agent_name": self._descriptor.name,
        }
        if succeeded:
            return ExecutionResult.ok(call.output, **metadata)
        if call.last_error is None:
            raise RuntimeError(f"{self._descriptor.key} failed without recording an error")
        return ExecutionResult.fail(error_message(call.last_error), **metadata)

    async def _drive(self, payload: Any, context: ExecutionContext | None) -> _Call:
        call = _Call()
        try:
            parsed = self._input_validator.parse(payload) if self._input_validator else payload
        except InputValidationError as exc:
            call.last_error = exc
            call.advance(ExecutionState.FAILED)
            logger.info("%s rejected input: %s", self._descriptor.key, exc)
            return call

        call.advance(ExecutionState.ATTEMPTING)
        while True:
            try:
                raw = await self._capability(parsed, context)
                call.output = self._accept(raw, call)
            except Exception as exc:
                call.last_error = exc
                kind = classify_error(exc)
                target = next_state_after_error(call.attempt, self._policy.max_retries, kind)
                if target is ExecutionState.FAILED:
                    call.advance(ExecutionState.FAILED)
                    logger.info(
                        "%s failed after %d attempt(s) (%s): %s",
                        self._descriptor.key, call.attempt + 1, kind, exc,
                    )
                    return call

                delay = self._policy.delay_for(call.attempt)
                logger.warning(
                    "%s attempt %d/%d failed (%s), retrying in %.1fs",
                    self._descriptor.key, call.attempt + 1,
                    self._policy.max_retries + 1, exc, delay,
                )
                call.advance(ExecutionState.BACKING_OFF)
                await self._sleep(delay)
                call.attempt += 1
                call.advance(ExecutionState.ATTEMPTING)
                continue

            call.advance(ExecutionState.SUCCEEDED)
            logger.debug("%s succeeded on attempt %d", self._descriptor.key, call.attempt + 1)
            return call

    def _accept(self, raw: Any, call: _Call) -> Any:
        """Unwrap a CapabilityOutput and validate the data against the output schema."""
        data = raw
        if isinstance(raw, CapabilityOutput):
            call.tokens_used += raw.tokens_used
            call.model = raw.model or call.model
            data = raw.data

        if data is None:
            raise TransientCapabilityError("Capability returned no data")

        if self._output_validator is not None:
            try:
                data = self._output_validator.parse(data)
            except InputValidationError as exc:
                raise TransientCapabilityError(
                    f"Output validation failed: {', '.join(exc.errors)}"
                ) from exc
        return data
