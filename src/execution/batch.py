# src/execution/batch.py — v1
"""Batch orchestrator: chunked concurrent fan-out over one executor.

Items are dispatched ``batch_size`` at a time; all items of a chunk run
concurrently and the chunk settles before the next one starts. Between
chunks the orchestrator waits ``inter_batch_delay_s`` to stay under the
capability's rate limits. Every item gets its own ExecutionResult; a failing
item never aborts its siblings or the batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Hashable, Protocol, Sequence, TypeVar

from papermind.core.errors import BatchItemError
from papermind.core.models import ExecutionContext, ExecutionResult
from papermind.logging.context import set_item_context

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
KeyT = TypeVar("KeyT", bound=Hashable)

ProgressCallback = Callable[[int, int], Any]


class SupportsExecute(Protocol):
    def execute(
        self, payload: Any, context: ExecutionContext | None = None
    ) -> Awaitable[ExecutionResult[Any]]: ...


class BatchOrchestrator:
    """Runs many payloads through one executor with a concurrency cap.

    Args:
        executor: Anything with ``async execute(payload, context)`` returning
            an ExecutionResult (a RetryingExecutor or a BaseAgent).
        batch_size: Items dispatched concurrently per chunk.
        inter_batch_delay_s: Pause between chunks (not after the last).
        sleep: Awaitable delay function.
    """

    def __init__(
        self,
        executor: SupportsExecute,
        *,
        batch_size: int = 3,
        inter_batch_delay_s: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if inter_batch_delay_s < 0:
            raise ValueError("inter_batch_delay_s must be >= 0")
        self._executor = executor
        self._batch_size = batch_size
        self._delay = inter_batch_delay_s
        self._sleep = sleep

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def inter_batch_delay_s(self) -> float:
        return self._delay

    async def execute_batch(
        self,
        items: Sequence[ItemT],
        *,
        key: Callable[[ItemT], KeyT],
        build_input: Callable[[ItemT], Any] | None = None,
        context: ExecutionContext | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> dict[KeyT, ExecutionResult[Any]]:
        """Execute every item and map its key to its result.

        Args:
            items: Items to process; keys keep this order in the result.
            key: Identifies an item in the result mapping.
            build_input: Maps an item to the executor payload (identity by default).
            context: Passed to every execution.
            on_progress: Called with (completed, total) after each item; its
                exceptions are logged and ignored.
        """
        if not items:
            return {}

        total = len(items)
        completed = 0
        results: dict[KeyT, ExecutionResult[Any]] = {}

        async def run_one(item: ItemT) -> ExecutionResult[Any]:
            nonlocal completed
            item_key = key(item)
            set_item_context(str(item_key))
            try:
                payload = build_input(item) if build_input is not None else item
                result = await self._executor.execute(payload, context)
            except Exception as exc:
                err = BatchItemError(item_key, exc)
                logger.exception("Unexpected failure for batch item %r", item_key)
                result = ExecutionResult.fail(str(err))
            completed += 1
            self._report(on_progress, completed, total)
            return result

        chunks = [items[i:i + self._batch_size] for i in range(0, total, self._batch_size)]
        for index, chunk in enumerate(chunks):
            chunk_results = await asyncio.gather(*(run_one(item) for item in chunk))
            for item, result in zip(chunk, chunk_results):
                results[key(item)] = result

            if index < len(chunks) - 1 and self._delay > 0:
                await self._sleep(self._delay)

        failed = sum(1 for r in results.values() if not r.success)
        logger.info(
            "Batch complete: %d items in %d chunk(s), %d failed",
            total, len(chunks), failed,
        )
        return results

    @staticmethod
    def _report(on_progress: ProgressCallback | None, completed: int, total: int) -> None:
        if on_progress is None:
            return
        try:
            on_progress(completed, total)
        except Exception:
            logger.warning("Progress callback raised; continuing batch", exc_info=True)
