# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: OpenAI access,
default model parameters, retry backoff, batch pacing and logging.
Per-agent-type behaviour (temperature, retries, timeout) lives in
config/agents.py and can be overridden here through AGENT_OVERRIDES.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent or incomplete."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDER ===
    openai_api_key: str = ""
    agent_provider: str = "openai"
    agent_model: str = "gpt-4o-mini"
    agent_max_tokens: int = 2000
    agent_timeout_s: float = 30.0

    # === Embeddings ===
    embedding_model: str = "text-embedding-3-small"
    embedding_batch_size: int = 100

    # Per-agent-type overrides, e.g.
    # AGENT_OVERRIDES={"research_gap": {"max_retries": 2, "timeout_s": 90}}
    agent_overrides: dict[str, dict[str, Any]] = {}

    # === Retry ===
    retry_base_delay_s: float = 1.0
    retry_backoff_factor: float = 2.0

    # === Batch ===
    batch_size: int = 3
    batch_delay_s: float = 1.0

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("batch_size", "embedding_batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("batch sizes must be >= 1")
        return v

    @field_validator("batch_delay_s", "retry_base_delay_s")
    @classmethod
    def validate_non_negative_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("delays must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Reject overrides that name unknown agent types or fields."""
        from papermind.config.agents import AGENT_TYPE_DEFAULTS, AgentTypeConfig

        errors: list[str] = []
        allowed = set(AgentTypeConfig.model_fields)
        for agent_type, override in self.agent_overrides.items():
            if agent_type not in AGENT_TYPE_DEFAULTS:
                errors.append(f"AGENT_OVERRIDES names unknown agent type {agent_type!r}")
                continue
            unknown = sorted(set(override) - allowed)
            if unknown:
                errors.append(
                    f"AGENT_OVERRIDES[{agent_type!r}] has unknown fields: {', '.join(unknown)}"
                )

        if errors:
            raise ConfigurationError("; ".join(errors))
        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]


def validate_agent_environment(settings: Settings) -> tuple[bool, list[str]]:
    """Check that the LLM credentials look usable before running agents.

    Returns:
        (valid, errors), errors empty when valid.
    """
    errors: list[str] = []
    key = settings.openai_api_key
    if not key:
        errors.append("OPENAI_API_KEY is required for agent functionality")
    elif not key.startswith("sk-"):
        errors.append('OPENAI_API_KEY appears to be invalid (should start with "sk-")')
    return (not errors, errors)
