# src/papers/collection.py — v1
"""Collection context analysis: what a set of papers is about.

Pure heuristics over tags, titles, journals and years; no LLM involved.
The result is handed to the paper analysis agent to judge relevance.
"""

from __future__ import annotations

import re
from collections import Counter
from datetime import datetime
from typing import Sequence

from papermind.papers.models import CollectionContext, Paper

ALL_PAPERS = "All Papers"

_STOP_WORDS = frozenset({
    "the", "and", "for", "with", "from", "into", "by", "on", "at", "to", "in",
    "of", "a", "an", "is", "are", "was", "were", "be", "been", "being", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should",
})
_NON_WORD = re.compile(r"[^\w\s]")


def analyze_collection_context(
    collection_name: str, papers: Sequence[Paper]
) -> CollectionContext:
    """Build the context of one collection from the whole library.

    ``All Papers`` describes the full library; any other name selects the
    papers whose ``collections`` contain it.
    """
    if collection_name == ALL_PAPERS:
        return CollectionContext(
            name=ALL_PAPERS,
            description="Complete research paper collection spanning multiple domains",
            total_papers=len(papers),
            common_tags=top_tags(papers, 10),
            research_focus="Multidisciplinary research across various domains",
        )

    members = [p for p in papers if collection_name in p.collections]
    if not members:
        return CollectionContext(
            name=collection_name,
            description="Empty collection",
            total_papers=0,
            common_tags=[],
            research_focus="No papers available for analysis",
        )

    common_tags = top_tags(members, 8)
    return CollectionContext(
        name=collection_name,
        description=describe_collection(members, collection_name, common_tags),
        total_papers=len(members),
        common_tags=common_tags,
        research_focus=infer_research_focus(members, collection_name),
    )


def top_tags(papers: Sequence[Paper], limit: int = 10) -> list[str]:
    """Most frequent normalized tags (lower-cased, longer than 2 characters)."""
    counts: Counter[str] = Counter()
    for paper in papers:
        for tag in paper.tags:
            normalized = tag.lower().strip()
            if len(normalized) > 2:
                counts[normalized] += 1
    return [tag for tag, _ in counts.most_common(limit)]


def title_keywords(papers: Sequence[Paper], limit: int = 5) -> list[str]:
    """Title words seen in more than one title, most frequent first."""
    counts: Counter[str] = Counter()
    for paper in papers:
        for word in _NON_WORD.sub("", paper.title.lower()).split():
            if len(word) > 3 and word not in _STOP_WORDS:
                counts[word] += 1
    return [w for w, n in counts.most_common() if n > 1][:limit]


def journal_patterns(papers: Sequence[Paper], limit: int = 3) -> list[tuple[str, int]]:
    counts = Counter(p.journal.strip() for p in papers if p.journal.strip())
    return counts.most_common(limit)


def valid_years(papers: Sequence[Paper]) -> list[int]:
    """Publication years that are plausible (after 1900, not in the future)."""
    current = datetime.now().year
    return [p.year for p in papers if p.year and 1900 < p.year <= current]


def year_range(papers: Sequence[Paper]) -> tuple[int, int] | None:
    years = valid_years(papers)
    if not years:
        return None
    return min(years), max(years)


def recent_years(papers: Sequence[Paper], limit: int = 3) -> list[int]:
    """The most frequent publication years, newest first."""
    counts = Counter(sorted(valid_years(papers), reverse=True))
    return sorted((year for year, _ in counts.most_common(limit)), reverse=True)


def infer_research_focus(papers: Sequence[Paper], collection_name: str) -> str:
    elements: list[str] = []
    keywords = title_keywords(papers)
    if keywords:
        elements.append(f"Primary topics: {', '.join(keywords[:3])}")
    journals = journal_patterns(papers)
    if journals:
        name, count = journals[0]
        elements.append(f"Primarily published in {name} ({count} papers)")
    years = recent_years(papers)
    if years:
        elements.append(f"Recent focus years: {', '.join(str(y) for y in years)}")

    if not elements:
        return f"Research collection focused on {collection_name.lower()} domain"
    return ". ".join(elements)


def describe_collection(
    papers: Sequence[Paper], collection_name: str, common_tags: Sequence[str]
) -> str:
    description = f'Research collection "{collection_name}" containing {len(papers)} papers'

    unique_authors = {a for p in papers for a in p.authors}
    if unique_authors:
        description += f" from {len(unique_authors)} unique authors"

    span = year_range(papers)
    if span:
        description += f" spanning {span[0]}-{span[1]}"

    topics = ", ".join(common_tags[:3])
    if topics:
        description += f". Primary research areas include {topics}"
    return description
