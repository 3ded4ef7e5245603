# src/papers/content.py — v1
"""Text rendering of papers for prompts, plus small display helpers."""

from __future__ import annotations

import math

from papermind.papers.models import Paper


def extract_paper_content(paper: Paper) -> str:
    """Render the non-empty fields of a paper as prompt text.

    The full text, when the library sync attached one, comes last so that
    the metadata survives any truncation by the caller.
    """
    parts: list[str] = []
    if paper.title:
        parts.append(f"Title: {paper.title}")
    if paper.authors:
        parts.append(f"Authors: {', '.join(paper.authors)}")
    if paper.journal:
        parts.append(f"Journal: {paper.journal}")
    if paper.year:
        parts.append(f"Year: {paper.year}")
    if paper.notes:
        parts.append(f"Abstract/Notes: {paper.notes}")
    if paper.tags:
        parts.append(f"Tags: {', '.join(paper.tags)}")
    if paper.full_text:
        parts.append(f"Full Text: {paper.full_text}")
    return "\n\n".join(parts)


def estimate_tokens(text: str) -> int:
    """Rough token estimate: ~4 characters per token for English text."""
    return math.ceil(len(text) / 4)


def format_processing_time(milliseconds: int) -> str:
    """'850ms' below a second, else seconds with one decimal ('1.2s')."""
    if milliseconds < 1000:
        return f"{milliseconds}ms"
    return f"{round(milliseconds / 100) / 10}s"
