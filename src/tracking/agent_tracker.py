# src/tracking/agent_tracker.py — v2
"""Aggregation of execution results into ResultStats.

Complements the per-executor AgentMetrics: metrics are the running view of
one agent, this summarizes any collection of results (a batch, a session).
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable

from papermind.core.models import ExecutionResult
from papermind.tracking.models import ResultStats


def error_type(error: str) -> str:
    """Bucket an error message by the text before its first colon."""
    head = error.split(":", 1)[0].strip()
    return head or "Unknown"


def summarize_results(results: Iterable[ExecutionResult[Any]]) -> ResultStats:
    """Aggregate results into success rate, latency, tokens and error buckets."""
    records = list(results)
    total = len(records)
    if not total:
        return ResultStats()

    successful = sum(1 for r in records if r.success)
    errors = Counter(error_type(r.error) for r in records if not r.success and r.error)
    return ResultStats(
        total_executions=total,
        successful_executions=successful,
        failed_executions=total - successful,
        success_rate=successful / total,
        average_processing_time_ms=sum(r.metadata.processing_time_ms for r in records) / total,
        total_tokens_used=sum(r.metadata.tokens_used for r in records),
        total_retries=sum(r.metadata.retry_count for r in records),
        errors_by_type=dict(errors),
    )
