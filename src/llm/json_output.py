# src/llm/json_output.py — v1
"""Parsing of JSON answers returned by chat models."""

from __future__ import annotations

import json
from typing import Any

from papermind.core.errors import TransientCapabilityError


def strip_fences(content: str) -> str:
    """Drop markdown code fences around a JSON answer."""
    text = content.strip()
    if text.startswith("```"):
        lines = [line for line in text.split("\n") if not line.strip().startswith("```")]
        text = "\n".join(lines)
    return text.strip()


def parse_json_response(content: str) -> dict[str, Any]:
    """Decode a JSON object answer.

    Raises:
        TransientCapabilityError: If the answer is not a JSON object; the
            executor retries, a new sample usually parses.
    """
    try:
        parsed = json.loads(strip_fences(content))
    except json.JSONDecodeError as exc:
        raise TransientCapabilityError(f"Malformed JSON answer: {exc}") from exc
    if not isinstance(parsed, dict):
        raise TransientCapabilityError(
            f"Expected a JSON object, got {type(parsed).__name__}"
        )
    return parsed
