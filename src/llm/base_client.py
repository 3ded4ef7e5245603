# src/llm/base_client.py — v2
"""Abstract LLM client interface.

Clients enforce their own request timeout; a timeout surfaces as an
exception the executor classifies like any other failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from papermind.llm.models import LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.3,
        json_mode: bool = False,
        timeout_s: float | None = None,
    ) -> LLMResponse:
        """Text completion."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (e.g. openai)."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Model used for completions."""
