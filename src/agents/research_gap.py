# src/agents/research_gap.py — v1
"""Research gap agent.

Reads a collection of papers and identifies research gaps, emerging
opportunities, publication trends and strategic recommendations.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal, Sequence

from pydantic import BaseModel, Field

from papermind.agents.base_agent import BaseAgent
from papermind.core.models import ExecutionContext, ExecutionResult
from papermind.papers.content import extract_paper_content
from papermind.papers.models import Paper

logger = logging.getLogger(__name__)

MAX_PAPERS = 50
MIN_CONTENT_RATIO = 0.7
_SUMMARY_CHARS = 500

Priority = Literal["high", "medium", "low"]

_SYSTEM = (
    "You are an expert research strategist and trend analyst specializing in "
    "identifying research gaps and emerging opportunities across academic domains. "
    "Respond only with valid JSON."
)

_PROMPT = """Analyze the following collection of research papers.

Research Domain: {domain}
Number of Papers: {paper_count}
Timeframe Context: {timeframe}
Focus Areas: {focus_areas}

Paper Collection:
{papers}

{format_instructions}

Analysis Guidelines:
1. identified_gaps: unanswered questions across papers, recurring methodological
   limitations, data constraints, underdeveloped theory, missing cross-disciplinary links.
   Reference related papers by id.
2. emerging_opportunities: novel applications of existing methods, convergence of
   research streams, interdisciplinary potential.
3. trend_analysis: growing, declining and stable areas, and emerging keywords.
4. recommendations: methodological, application, theoretical and interdisciplinary
   directions with priorities and required resources.

Be specific and evidence-based; prioritize by potential impact and feasibility."""

# Checked in order against tags and journals; first match wins.
_DOMAIN_HINTS: list[tuple[str, tuple[str, ...]]] = [
    ("Computer Science & AI", ("computer", "ai", "machine learning")),
    ("Medicine & Healthcare", ("medicine", "health", "medical")),
    ("Engineering & Technology", ("engineering", "technical")),
    ("Social Sciences", ("social", "psychology", "sociology")),
    ("Business & Economics", ("business", "management", "economics")),
]


class Timeframe(BaseModel):
    start_year: int | None = None
    end_year: int | None = None


class ResearchGapInput(BaseModel):
    """Input schema for gap analysis."""

    papers: list[Paper] = Field(min_length=1, max_length=MAX_PAPERS)
    domain: str = ""
    timeframe: Timeframe | None = None
    focus_areas: list[str] | None = None


class IdentifiedGap(BaseModel):
    title: str
    description: str
    importance: Priority
    related_papers: list[str] = Field(default_factory=list)
    suggested_approaches: list[str] = Field(default_factory=list)


class EmergingOpportunity(BaseModel):
    area: str
    description: str
    potential_impact: Literal["transformative", "significant", "incremental"]
    time_to_market: Literal["short", "medium", "long"]


class TrendAnalysis(BaseModel):
    growing_areas: list[str] = Field(default_factory=list)
    declining_areas: list[str] = Field(default_factory=list)
    stable_areas: list[str] = Field(default_factory=list)
    emerging_keywords: list[str] = Field(default_factory=list)


class Recommendation(BaseModel):
    type: Literal["methodology", "application", "theory", "interdisciplinary"]
    title: str
    description: str
    priority: Priority
    required_resources: list[str] = Field(default_factory=list)


class ResearchGapOutput(BaseModel):
    """Output schema for gap analysis."""

    identified_gaps: list[IdentifiedGap]
    emerging_opportunities: list[EmergingOpportunity] = Field(default_factory=list)
    trend_analysis: TrendAnalysis
    recommendations: list[Recommendation] = Field(default_factory=list)


def check_collection_content(inp: ResearchGapInput) -> list[str]:
    with_content = [p for p in inp.papers if p.notes.strip() or len(p.title) > 10]
    if len(with_content) < len(inp.papers) * MIN_CONTENT_RATIO:
        return [
            "papers: at least 70% of papers should have meaningful content "
            "(title and notes/abstract)"
        ]
    return []


def infer_domain(papers: Sequence[Paper]) -> str:
    """Guess a research domain from the most common tags and the journals."""
    tag_counts: dict[str, int] = {}
    for paper in papers:
        for tag in paper.tags:
            tag_counts[tag.lower()] = tag_counts.get(tag.lower(), 0) + 1
    top = sorted(tag_counts, key=lambda t: tag_counts[t], reverse=True)[:5]
    journals = dict.fromkeys(p.journal.lower() for p in papers)
    combined = f"{' '.join(top)} {' '.join(journals)}"

    for domain, hints in _DOMAIN_HINTS:
        if any(h in combined for h in hints):
            return domain
    return "Interdisciplinary Research"


def timeframe_context(inp: ResearchGapInput, current_year: int | None = None) -> str:
    current_year = current_year or datetime.now().year
    years = [p.year for p in inp.papers if p.year]
    if not years:
        context = "Publication years unknown"
    else:
        context = f"Paper collection spans {min(years)}-{max(years)}"

    tf = inp.timeframe
    if tf is not None and (tf.start_year or tf.end_year):
        context += (
            f", focus period: {tf.start_year or 'earliest'} to {tf.end_year or 'latest'}"
        )

    if years:
        newest = max(years)
        if newest >= current_year - 2:
            context += ". Collection includes recent research suitable for current trend analysis."
        else:
            context += (
                f". Collection represents historical research "
                f"(newest: {current_year - newest} years ago)."
            )
    return context


def summarize_papers(papers: Sequence[Paper]) -> str:
    blocks = []
    for index, paper in enumerate(papers, start=1):
        content = extract_paper_content(paper)
        blocks.append("\n".join([
            f"Paper {index} (id: {paper.id}):",
            f"Title: {paper.title}",
            f"Authors: {', '.join(paper.authors)}",
            f"Year: {paper.year or 'unknown'}",
            f"Journal: {paper.journal}",
            f"Tags: {', '.join(paper.tags)}",
            f"Key Content: {content[:_SUMMARY_CHARS]}...",
            f"Collections: {', '.join(paper.collections)}",
        ]))
    return "\n\n---\n\n".join(blocks)


class ResearchGapAgent(BaseAgent):
    """Identifies gaps and opportunities across a paper collection."""

    @property
    def name(self) -> str:
        return "research-gap"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return (
            "Analyzes collections of research papers to identify gaps, emerging "
            "opportunities, and research trends"
        )

    @property
    def agent_type(self) -> str:
        return "research_gap"

    @property
    def input_schema(self) -> type[BaseModel]:
        return ResearchGapInput

    @property
    def output_schema(self) -> type[BaseModel]:
        return ResearchGapOutput

    def checks(self) -> list:
        return [check_collection_content]

    def build_prompt(self, inp: ResearchGapInput) -> str:
        return _PROMPT.format(
            domain=inp.domain.strip() or infer_domain(inp.papers),
            paper_count=len(inp.papers),
            timeframe=timeframe_context(inp),
            focus_areas=", ".join(inp.focus_areas or []) or "General research analysis",
            papers=summarize_papers(inp.papers),
            format_instructions=self.format_instructions(),
        )

    async def run(self, inp: ResearchGapInput, context: ExecutionContext | None) -> Any:
        return await self.complete_json(self.build_prompt(inp), _SYSTEM)

    async def analyze_specific_domain(
        self,
        papers: Sequence[Paper],
        domain: str,
        focus_areas: list[str],
        context: ExecutionContext | None = None,
    ) -> ExecutionResult[Any]:
        """Gap analysis of a domain, over the years the papers cover."""
        years = [p.year for p in papers if p.year]
        timeframe = (
            {"start_year": min(years), "end_year": max(years)} if years else None
        )
        return await self.execute(
            {
                "papers": list(papers),
                "domain": domain,
                "focus_areas": focus_areas,
                "timeframe": timeframe,
            },
            context,
        )

    async def analyze_temporal_gaps(
        self,
        papers: Sequence[Paper],
        start_year: int,
        end_year: int,
        domain: str = "",
        context: ExecutionContext | None = None,
    ) -> ExecutionResult[Any]:
        """Gap analysis restricted to papers published in [start_year, end_year]."""
        selected = [p for p in papers if p.year and start_year <= p.year <= end_year]
        logger.debug(
            "Temporal gap analysis %d-%d: %d/%d papers",
            start_year, end_year, len(selected), len(papers),
        )
        return await self.execute(
            {
                "papers": selected,
                "domain": domain,
                "timeframe": {"start_year": start_year, "end_year": end_year},
            },
            context,
        )
