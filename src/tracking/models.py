# src/tracking/models.py — v2
"""Tracking models: aggregated statistics over execution results."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ResultStats(BaseModel):
    """Summary of a set of ExecutionResults (e.g. one batch)."""

    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    success_rate: float = 0.0
    average_processing_time_ms: float = 0.0
    total_tokens_used: int = 0
    total_retries: int = 0
    errors_by_type: dict[str, int] = Field(default_factory=dict)
