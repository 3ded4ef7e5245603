# src/llm/client_factory.py — v3
"""Factory: instantiate an LLM client from a provider name.

Adapters are registered by dotted class path and imported lazily.
"""

from __future__ import annotations

import importlib
import logging

from papermind.config.settings import ConfigurationError, Settings
from papermind.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

_PROVIDER_REGISTRY: dict[str, str] = {
    "openai": "papermind.llm.adapters.openai_adapter.OpenAIAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the adapter registered for provider.

    Raises:
        UnsupportedProviderError: If provider is not registered.
        ConfigurationError: If the OpenAI key is missing.
    """
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model
    if settings is not None:
        init_kwargs.setdefault("timeout_s", settings.agent_timeout_s)
        if provider == "openai":
            init_kwargs.setdefault("api_key", settings.openai_api_key)

    if provider == "openai" and not init_kwargs.get("api_key"):
        raise ConfigurationError("OPENAI_API_KEY is required for agent functionality")

    adapter_cls = _import_class(_PROVIDER_REGISTRY[provider])
    logger.debug("Creating LLM client: provider=%s, model=%s", provider, model)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter by fully qualified class path."""
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered LLM provider: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
