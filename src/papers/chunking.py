# src/papers/chunking.py — v1
"""Section-aware word-window chunking of a paper's full text.

The text is split on heading-like lines (numbered ``1.``, roman ``II.`` or
ALL-CAPS titles), each section is typed from its first 200 characters, and
every section is cut into overlapping windows of words. Chunk ids run
across sections: ``chunk_0``, ``chunk_1`` ...
"""

from __future__ import annotations

import logging
import re
from typing import Literal

from pydantic import BaseModel

logger = logging.getLogger(__name__)

SectionType = Literal[
    "abstract", "introduction", "methodology", "results",
    "discussion", "conclusion", "references", "other",
]

CHUNK_SIZE_WORDS = 1000
CHUNK_OVERLAP_WORDS = 200
MIN_SECTION_CHARS = 100
_CLASSIFY_HEAD_CHARS = 200

_SECTION_BREAK = re.compile(
    r"\n(?=\s*(?:\d+\.|\b[IVX]+\.|\b[A-Z][A-Z\s]{1,50}(?:\n|$)))"
)

# Checked in order; first match wins.
_SECTION_PATTERNS: list[tuple[re.Pattern[str], SectionType]] = [
    (re.compile(r"\b(?:abstract|summary)\b", re.I), "abstract"),
    (re.compile(r"\b(?:introduction|background)\b", re.I), "introduction"),
    (
        re.compile(
            r"\b(?:method(?:ology)?|approach|experimental setup|materials and methods)\b", re.I
        ),
        "methodology",
    ),
    (re.compile(r"\b(?:results?|findings|analysis|experiments?)\b", re.I), "results"),
    (re.compile(r"\b(?:discussion|interpretation|implications)\b", re.I), "discussion"),
    (re.compile(r"\b(?:conclusion|summary|future work)\b", re.I), "conclusion"),
    (re.compile(r"\b(?:references?|bibliography|citations?)\b", re.I), "references"),
]

_EQUATION = re.compile(r"\$[^$]+\$|\\\([^)]+\\\)|\\\[[^\]]+\\\]")
_TABLE = re.compile(r"table \d+|tabular|thead|tbody", re.I)
_FIGURE = re.compile(r"figure \d+|fig\. \d+|image|chart", re.I)


class PaperChunk(BaseModel):
    """One window of words from a typed section."""

    id: str
    content: str
    section_type: SectionType
    word_count: int
    has_equations: bool = False
    has_tables: bool = False
    has_figures: bool = False


def classify_section(text: str) -> SectionType:
    head = text[:_CLASSIFY_HEAD_CHARS]
    for pattern, section_type in _SECTION_PATTERNS:
        if pattern.search(head):
            return section_type
    return "other"


def identify_sections(text: str) -> list[tuple[SectionType, str]]:
    """Split full text into typed sections, dropping fragments under 100 chars.

    When nothing is long enough the whole text is one ``other`` section.
    """
    sections: list[tuple[SectionType, str]] = []
    for part in _SECTION_BREAK.split(text):
        part = part.strip()
        if len(part) < MIN_SECTION_CHARS:
            continue
        sections.append((classify_section(part), part))
    if not sections and text.strip():
        sections.append(("other", text.strip()))
    return sections


def chunk_section(
    content: str,
    section_type: SectionType,
    start_id: int = 0,
    chunk_size: int = CHUNK_SIZE_WORDS,
    overlap: int = CHUNK_OVERLAP_WORDS,
) -> list[PaperChunk]:
    """Cut one section into windows of chunk_size words sharing overlap words.

    The last window ends at the last word; no window lies wholly inside
    the previous one.

    Raises:
        ValueError: If overlap is not smaller than chunk_size.
    """
    if not 0 <= overlap < chunk_size:
        raise ValueError(f"overlap must be in [0, {chunk_size}), got {overlap}")

    words = content.split()
    step = chunk_size - overlap
    chunks: list[PaperChunk] = []
    for start in range(0, len(words), step):
        window = words[start:start + chunk_size]
        text = " ".join(window)
        chunks.append(
            PaperChunk(
                id=f"chunk_{start_id + len(chunks)}",
                content=text,
                section_type=section_type,
                word_count=len(window),
                has_equations=bool(_EQUATION.search(text)),
                has_tables=bool(_TABLE.search(text)),
                has_figures=bool(_FIGURE.search(text)),
            )
        )
        if start + chunk_size >= len(words):
            break
    return chunks


def chunk_paper(
    full_text: str,
    chunk_size: int = CHUNK_SIZE_WORDS,
    overlap: int = CHUNK_OVERLAP_WORDS,
) -> list[PaperChunk]:
    """Typed, overlapping chunks of a paper's full text."""
    chunks: list[PaperChunk] = []
    for section_type, content in identify_sections(full_text):
        chunks.extend(
            chunk_section(content, section_type, len(chunks), chunk_size, overlap)
        )
    logger.debug("Chunked full text into %d chunks", len(chunks))
    return chunks
