# src/agents/smart_column.py — v1
"""Smart column agent.

Fills one AI column cell of the papers table: a short methodology,
limitations, findings, future work or significance text, or the answer to
a user-written prompt. Instructions adapt to how much of the paper is
actually available (full text, notes only, or bare metadata).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from papermind.agents.base_agent import BaseAgent
from papermind.core.models import CapabilityOutput, ExecutionContext
from papermind.papers.content import extract_paper_content
from papermind.papers.models import Paper

SmartColumnType = Literal[
    "methodology", "limitations", "findings", "future_work", "significance", "custom"
]
OutputFormat = Literal["paragraph", "bullet_points", "keywords", "score"]

_FULL_TEXT_MIN_CHARS = 500
_NOTES_MIN_CHARS = 100

_SYSTEM = "You analyze research papers concisely. Respond only with valid JSON."

_PROMPT = """Analyze this research paper concisely.

Paper: {title} by {authors} ({journal}, {year})
Content: {content}

Request: {request}
Output format: {output_format}, at most {max_length} characters.

{instructions}

{format_instructions}"""

_COLUMN_REQUESTS: dict[str, str] = {
    "methodology": "Describe the research methodology and approach.",
    "limitations": "List the main limitations of the study.",
    "findings": "Summarize the key findings.",
    "future_work": "Suggest future research directions.",
    "significance": "Assess the significance and contribution of the work.",
}


class SmartColumnInput(BaseModel):
    """Input schema for one column cell."""

    paper: Paper
    column_type: SmartColumnType
    custom_prompt: str | None = None
    output_format: OutputFormat = "paragraph"
    max_length: int = Field(default=500, gt=0)


class SmartColumnOutput(BaseModel):
    """Output schema for one column cell."""

    content: str
    confidence: float = Field(ge=0, le=1)
    sources: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


def check_custom_prompt(inp: SmartColumnInput) -> list[str]:
    if inp.column_type == "custom" and not (inp.custom_prompt or "").strip():
        return ["custom_prompt: required when column_type is custom"]
    return []


def content_instructions(paper: Paper, content: str) -> str:
    """Scoring instructions calibrated to the available content."""
    if len(content) > _FULL_TEXT_MIN_CHARS and paper.full_text:
        return (
            "Provide a concise response. For scoring requests, give only: "
            '"Score: X/10. Reason: [brief 1-2 sentence explanation]".'
        )
    if len(paper.notes) > _NOTES_MIN_CHARS:
        return (
            "Provide a concise response. For scoring requests, give only: "
            '"Score: X/10. Reason: [brief 1-2 sentence explanation noting limited content]".'
        )
    return (
        "Provide a concise response. For scoring requests, give only: "
        '"Score: 1-3/10. Reason: [brief explanation that only metadata available]".'
    )


class SmartColumnAgent(BaseAgent):
    """Generates one AI column value for a paper."""

    @property
    def name(self) -> str:
        return "smart-column"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return "Generates AI column values (summaries, scores, custom insights) for a paper"

    @property
    def agent_type(self) -> str:
        return "smart_column"

    @property
    def input_schema(self) -> type[BaseModel]:
        return SmartColumnInput

    @property
    def output_schema(self) -> type[BaseModel]:
        return SmartColumnOutput

    def checks(self) -> list:
        return [check_custom_prompt]

    def build_prompt(self, inp: SmartColumnInput) -> str:
        paper = inp.paper
        content = extract_paper_content(paper)
        if inp.column_type == "custom":
            request = inp.custom_prompt or ""
        else:
            request = _COLUMN_REQUESTS[inp.column_type]
        return _PROMPT.format(
            title=paper.title,
            authors=", ".join(paper.authors) or "No authors",
            journal=paper.journal or "Unknown journal",
            year=paper.year or "Unknown year",
            content=content or "No content available",
            request=request,
            output_format=inp.output_format,
            max_length=inp.max_length,
            instructions=content_instructions(paper, content),
            format_instructions=self.format_instructions(),
        )

    async def run(self, inp: SmartColumnInput, context: ExecutionContext | None) -> Any:
        output = await self.complete_json(self.build_prompt(inp), _SYSTEM)
        text = output.data.get("content")
        if isinstance(text, str) and len(text) > inp.max_length:
            output = CapabilityOutput(
                data={**output.data, "content": text[: inp.max_length].rstrip()},
                tokens_used=output.tokens_used,
                model=output.model,
            )
        return output
