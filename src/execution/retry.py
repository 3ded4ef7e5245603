# src/execution/retry.py — v1
"""Retry policy: permanent vs transient classification and exponential backoff.

An error is permanent when retrying cannot help: bad credentials, an
exceeded rate limit, an unknown model, rejected input or an exhausted quota.
Missing configuration is permanent too. Everything else is presumed
transient and retried by the executor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from papermind.config.settings import ConfigurationError
from papermind.core.errors import (
    InputValidationError,
    PermanentCapabilityError,
    TransientCapabilityError,
)

ErrorKind = Literal["permanent", "transient"]

# Matched case-insensitively against the error message.
PERMANENT_ERROR_PATTERNS: tuple[str, ...] = (
    "invalid api key",
    "rate limit exceeded",
    "model not found",
    "input validation",
    "insufficient quota",
)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget and backoff curve of one agent type."""

    max_retries: int = 3
    base_delay_s: float = 1.0
    backoff_factor: float = 2.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay_s < 0:
            raise ValueError("base_delay_s must be >= 0")

    def delay_for(self, attempt: int) -> float:
        """Delay before attempt ``attempt + 1`` (attempt is 0-based)."""
        return self.base_delay_s * (self.backoff_factor ** attempt)


def is_permanent_error(error: BaseException) -> bool:
    if isinstance(error, (PermanentCapabilityError, InputValidationError, ConfigurationError)):
        return True
    if isinstance(error, TransientCapabilityError):
        return False
    msg = str(error).lower()
    return any(pattern in msg for pattern in PERMANENT_ERROR_PATTERNS)


def classify_error(error: BaseException) -> ErrorKind:
    """Classify an exception for the executor's retry decision."""
    return "permanent" if is_permanent_error(error) else "transient"


def error_message(error: BaseException) -> str:
    """Message surfaced in a failed result; never empty."""
    return str(error) or type(error).__name__
