# src/llm/embeddings.py — v1
"""Abstract embeddings interface and factory.

Used by the full-text analyzer to rank paper chunks against a question.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from papermind.config.settings import ConfigurationError, Settings

logger = logging.getLogger(__name__)


class BaseEmbedder(ABC):
    """Unified interface for embedding providers."""

    @abstractmethod
    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts into vectors, in input order."""

    @abstractmethod
    async def embed_query(self, query: str) -> list[float]:
        """Embed a single query."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier."""


def create_embedder(settings: Settings) -> BaseEmbedder:
    """Embedder for the configured provider.

    Raises:
        ConfigurationError: If the OpenAI key is missing.
    """
    if not settings.openai_api_key:
        raise ConfigurationError("OPENAI_API_KEY is required for agent functionality")

    from papermind.llm.adapters.openai_embedder import OpenAIEmbedder

    logger.debug("Creating embedder: model=%s", settings.embedding_model)
    return OpenAIEmbedder(
        model=settings.embedding_model,
        api_key=settings.openai_api_key,
        timeout_s=settings.agent_timeout_s,
    )
