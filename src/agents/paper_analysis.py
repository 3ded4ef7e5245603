# src/agents/paper_analysis.py — v1
"""Paper analysis agent.

Analyzes one paper for key findings, methodology, limitations, future work
and significance, scoring its reliability and its relevance to the
collection it sits in. Also feeds the per-row "AI columns" of the papers
table through extract_column_insight().
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Sequence

from pydantic import BaseModel, Field

from papermind.agents.base_agent import BaseAgent
from papermind.core.models import ExecutionContext, ExecutionResult
from papermind.execution.batch import ProgressCallback
from papermind.papers.content import extract_paper_content
from papermind.papers.models import CollectionContext, Paper

logger = logging.getLogger(__name__)

AnalysisType = Literal["comprehensive", "methodology", "limitations", "findings", "future_work"]
ColumnType = Literal["methodology", "limitations", "findings", "future_work", "significance"]

MIN_NOTES_LENGTH = 50

_SYSTEM = (
    "You are an expert research analyst specializing in academic paper analysis. "
    "Respond only with valid JSON."
)

_PROMPT = """Analyze the following research paper thoroughly and provide structured insights.

Paper Information:
{content}

Analysis Type: {analysis_type}
Focus Areas: {focus_areas}

Collection Context:
{collection_context}

{format_instructions}

Analysis Guidelines:
1. key_findings: the 3-5 most significant findings or results.
2. methodology: research approach, data collection and analysis techniques.
3. limitations: 2-4 limitations, biases or constraints.
4. future_work: 3-5 concrete future research directions.
5. relevant_citations: key works or frameworks this paper builds upon, if mentioned.
6. research_gaps: gaps in knowledge the paper addresses or reveals.
7. significance: overall contribution to its field.
8. reliability: score 0-10 from methodological rigor, sample size, reproducibility and peer review.
9. relevance: score 0-10 against the collection's research focus, with specific connection points.
10. tags: 5-8 tags for categorization and search.

Be specific, objective and evidence-based."""

_SUGGESTION_KEYWORDS: list[tuple[AnalysisType, tuple[str, ...]]] = [
    ("methodology", ("method", "approach", "technique")),
    ("findings", ("finding", "result", "conclusion")),
    ("limitations", ("limitation", "constraint", "bias")),
    ("future_work", ("future", "direction", "recommendation")),
]


class PaperAnalysisInput(BaseModel):
    """Input schema for paper analysis."""

    paper: Paper
    analysis_type: AnalysisType = "comprehensive"
    focus_areas: list[str] | None = None
    collection_context: CollectionContext | None = None


class ScoredAssessment(BaseModel):
    score: float = Field(ge=0, le=10)
    reasoning: str


class RelevanceAssessment(ScoredAssessment):
    connection_points: list[str] = Field(default_factory=list)


class PaperAnalysisOutput(BaseModel):
    """Output schema for paper analysis."""

    key_findings: list[str]
    methodology: str
    limitations: list[str]
    future_work: list[str]
    relevant_citations: list[str] = Field(default_factory=list)
    research_gaps: list[str] = Field(default_factory=list)
    significance: str
    reliability: ScoredAssessment
    relevance: RelevanceAssessment
    tags: list[str] = Field(default_factory=list)


def check_paper_content(inp: PaperAnalysisInput) -> list[str]:
    """A paper needs a real title and an abstract (or at least a URL)."""
    errors: list[str] = []
    paper = inp.paper
    if not paper.title.strip():
        errors.append("paper.title: expected non-empty string")
    if not paper.notes.strip() and not paper.url:
        errors.append("paper.notes: expected notes/abstract content or a url")
    if paper.notes and len(paper.notes) < MIN_NOTES_LENGTH:
        errors.append(
            f"paper.notes: expected at least {MIN_NOTES_LENGTH} characters for meaningful analysis"
        )
    return errors


def describe_collection_context(ctx: CollectionContext | None) -> str:
    if ctx is None:
        return "No collection context provided - analyze as standalone paper"
    return "\n".join([
        f"Collection: {ctx.name}",
        f"Description: {ctx.description or 'No description available'}",
        f"Total Papers: {ctx.total_papers}",
        f"Common Tags: {', '.join(ctx.common_tags) or 'No tags available'}",
        f"Research Focus: {ctx.research_focus or 'General research'}",
    ])


class PaperAnalysisAgent(BaseAgent):
    """Analyzes individual research papers."""

    @property
    def name(self) -> str:
        return "paper-analysis"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return (
            "Analyzes individual research papers for key findings, methodology, "
            "limitations, and significance"
        )

    @property
    def agent_type(self) -> str:
        return "paper_analysis"

    @property
    def input_schema(self) -> type[BaseModel]:
        return PaperAnalysisInput

    @property
    def output_schema(self) -> type[BaseModel]:
        return PaperAnalysisOutput

    def checks(self) -> list:
        return [check_paper_content]

    def build_prompt(self, inp: PaperAnalysisInput) -> str:
        return _PROMPT.format(
            content=extract_paper_content(inp.paper),
            analysis_type=inp.analysis_type,
            focus_areas=", ".join(inp.focus_areas or []) or "General analysis",
            collection_context=describe_collection_context(inp.collection_context),
            format_instructions=self.format_instructions(),
        )

    async def run(self, inp: PaperAnalysisInput, context: ExecutionContext | None) -> Any:
        return await self.complete_json(self.build_prompt(inp), _SYSTEM)

    async def analyze_batch(
        self,
        papers: Sequence[Paper],
        analysis_type: AnalysisType = "comprehensive",
        context: ExecutionContext | None = None,
        on_progress: ProgressCallback | None = None,
        collection_context: CollectionContext | None = None,
    ) -> dict[str, ExecutionResult[Any]]:
        """Analyze many papers, keyed by paper id.

        Each paper's first three tags become its focus areas.
        """
        return await self.orchestrator().execute_batch(
            papers,
            key=lambda p: p.id,
            build_input=lambda p: {
                "paper": p,
                "analysis_type": analysis_type,
                "focus_areas": p.tags[:3],
                "collection_context": collection_context,
            },
            context=context,
            on_progress=on_progress,
        )

    async def extract_column_insight(
        self,
        paper: Paper,
        column_type: ColumnType,
        context: ExecutionContext | None = None,
    ) -> ExecutionResult[str]:
        """Run an analysis focused on one column and return that column's text."""
        analysis_type: AnalysisType = (
            "comprehensive" if column_type == "significance" else column_type
        )
        result = await self.execute(
            {"paper": paper, "analysis_type": analysis_type, "focus_areas": [column_type]},
            context,
        )
        if not result.success:
            return ExecutionResult.fail(
                result.error or "Analysis failed", **result.metadata.model_dump()
            )
        return ExecutionResult.ok(
            column_text(result.data, column_type), **result.metadata.model_dump()
        )

    def suggest_analysis_type(self, paper: Paper) -> AnalysisType:
        """Keyword heuristic over title and notes."""
        combined = f"{paper.title} {paper.notes}".lower()
        for analysis_type, keywords in _SUGGESTION_KEYWORDS:
            if any(k in combined for k in keywords):
                return analysis_type
        return "comprehensive"


def column_text(analysis: PaperAnalysisOutput, column_type: ColumnType) -> str:
    """Project one field of an analysis into table cell text."""
    if column_type == "methodology":
        return analysis.methodology
    if column_type == "limitations":
        return "; ".join(analysis.limitations)
    if column_type == "findings":
        return "; ".join(analysis.key_findings)
    if column_type == "future_work":
        return "; ".join(analysis.future_work)
    return analysis.significance
