# src/llm/adapters/openai_embedder.py — v1
"""OpenAI embedding adapter.

Models: text-embedding-3-small (default), text-embedding-3-large. SDK
retries are disabled like the chat adapter's.
"""

from __future__ import annotations

from typing import Any

from papermind.llm.embeddings import BaseEmbedder


class OpenAIEmbedder(BaseEmbedder):
    """Embeddings via the OpenAI API."""

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str = "",
        timeout_s: float = 30.0,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            import openai

            self._client = openai.AsyncOpenAI(
                api_key=self._api_key, timeout=self._timeout_s, max_retries=0,
            )
        return self._client

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        response = await self._get_client().embeddings.create(
            input=texts, model=self._model
        )
        ordered = sorted(response.data, key=lambda item: item.index)
        return [item.embedding for item in ordered]

    async def embed_query(self, query: str) -> list[float]:
        response = await self._get_client().embeddings.create(
            input=[query], model=self._model
        )
        return response.data[0].embedding

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model
