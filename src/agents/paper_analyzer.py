# src/agents/paper_analyzer.py — v1
"""Full-text paper analyzer agent.

Answers a set of analysis cards (overview, methodology, findings ...) about
one paper from its full text. The text is chunked by section, chunks are
embedded once, and every card retrieves its most similar chunks from the
sections it targets before one short LLM call.

A failing card is reported in place ("Analysis failed: ...") and the other
cards still run. Only when every card fails does the attempt fail, so the
executor can retry it.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import numpy as np
from pydantic import BaseModel, Field

from papermind.agents.base_agent import BaseAgent
from papermind.config.settings import Settings
from papermind.core.models import CapabilityOutput, ExecutionContext, ExecutionResult
from papermind.core.similarity import cosine_similarities
from papermind.llm.base_client import BaseLLMClient
from papermind.llm.embeddings import BaseEmbedder
from papermind.llm.models import Message
from papermind.papers.chunking import PaperChunk, SectionType, chunk_paper
from papermind.papers.models import Paper

logger = logging.getLogger(__name__)

CARD_MAX_TOKENS = 200

_PROMPT = """Analyze this research paper content and provide a brief, focused response.

{context}

Question: {question}

Instructions:
- Keep response under 150 words
- Focus only on key insights, don't repeat title/authors
- Be direct and specific
- Use bullet points if helpful
- Skip generic statements

Response:"""


class AnalysisCard(BaseModel):
    """One question asked about a paper, with its retrieval strategy."""

    id: str
    title: str
    prompt: str
    target_sections: list[SectionType] = Field(default_factory=list)
    max_chunks: int = Field(gt=0)


DEFAULT_ANALYSIS_CARDS: list[AnalysisCard] = [
    AnalysisCard(
        id="overview",
        title="Research Overview",
        prompt="What are the main objectives and key contributions? Why is this research significant?",
        target_sections=["abstract", "introduction"],
        max_chunks=5,
    ),
    AnalysisCard(
        id="methodology",
        title="Methodology & Approach",
        prompt="What methods were used? Include study design, sample size, and key procedures.",
        target_sections=["methodology"],
        max_chunks=8,
    ),
    AnalysisCard(
        id="findings",
        title="Key Findings & Results",
        prompt="What are the most important results and discoveries? Include key statistics if relevant.",
        target_sections=["results", "discussion"],
        max_chunks=6,
    ),
    AnalysisCard(
        id="assessment",
        title="Critical Assessment",
        prompt="What are the main strengths and limitations? Rate overall quality (1-10) with brief justification.",
        target_sections=["methodology", "discussion", "conclusion"],
        max_chunks=7,
    ),
    AnalysisCard(
        id="impact",
        title="Impact & Applications",
        prompt="What practical applications and future research directions does this enable?",
        target_sections=["discussion", "conclusion"],
        max_chunks=5,
    ),
    AnalysisCard(
        id="personal",
        title="Research Connections",
        prompt="How does this connect to other research areas? What broader trends does it relate to?",
        target_sections=["introduction", "discussion", "references"],
        max_chunks=4,
    ),
]

_CARDS_BY_ID = {card.id: card for card in DEFAULT_ANALYSIS_CARDS}


class PaperAnalyzerInput(BaseModel):
    """Input schema for full-text analysis. card_ids None runs every card."""

    paper: Paper
    card_ids: list[str] | None = None


class PaperAnalyzerOutput(BaseModel):
    """Answers by card id, in card order."""

    cards: dict[str, str]
    failed_cards: list[str] = Field(default_factory=list)
    chunk_count: int = Field(ge=0)


def check_full_text(inp: PaperAnalyzerInput) -> list[str]:
    errors: list[str] = []
    if not inp.paper.title.strip():
        errors.append("paper.title: expected non-empty string")
    if not (inp.paper.full_text or "").strip():
        errors.append("paper.full_text: full text content required for analysis")
    if inp.card_ids is not None and not inp.card_ids:
        errors.append("card_ids: expected non-empty array")
    for card_id in inp.card_ids or []:
        if card_id not in _CARDS_BY_ID:
            errors.append(f"card_ids: unknown analysis card {card_id!r}")
    return errors


def select_cards(card_ids: Sequence[str] | None) -> list[AnalysisCard]:
    """Cards to run, in DEFAULT_ANALYSIS_CARDS order."""
    if card_ids is None:
        return list(DEFAULT_ANALYSIS_CARDS)
    wanted = set(card_ids)
    return [card for card in DEFAULT_ANALYSIS_CARDS if card.id in wanted]


def select_chunks(
    chunks: Sequence[PaperChunk],
    vectors: Sequence[Sequence[float]],
    query_vector: Sequence[float],
    target_sections: Sequence[str],
    max_chunks: int,
) -> list[PaperChunk]:
    """Most similar chunks among the target sections, best first.

    Falls back to every chunk when none belongs to a target section.
    """
    candidates = [
        i for i, chunk in enumerate(chunks)
        if not target_sections or chunk.section_type in target_sections
    ]
    if not candidates:
        candidates = list(range(len(chunks)))
    if not candidates:
        return []

    scores = cosine_similarities(query_vector, [vectors[i] for i in candidates])
    order = np.argsort(-scores, kind="stable")[:max_chunks]
    return [chunks[candidates[int(j)]] for j in order]


def build_card_context(chunks: Sequence[PaperChunk]) -> str:
    parts = ["Research Paper Content:\n"]
    for index, chunk in enumerate(chunks, start=1):
        parts.append(f"--- Section {index} ({chunk.section_type}) ---\n{chunk.content}\n")
    return "\n".join(parts)


class PaperAnalyzerAgent(BaseAgent):
    """Card-by-card analysis of a paper's full text with embedding retrieval.

    Args:
        embedder: Embedding client. Created from settings on first use when omitted.
    """

    def __init__(
        self,
        llm: BaseLLMClient | None = None,
        settings: Settings | None = None,
        *,
        embedder: BaseEmbedder | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(llm, settings, **kwargs)
        self._embedder = embedder

    @property
    def name(self) -> str:
        return "paper-analyzer"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def description(self) -> str:
        return "Comprehensive paper analysis using embeddings and semantic search"

    @property
    def agent_type(self) -> str:
        return "paper_analyzer"

    @property
    def input_schema(self) -> type[BaseModel]:
        return PaperAnalyzerInput

    @property
    def output_schema(self) -> type[BaseModel]:
        return PaperAnalyzerOutput

    def checks(self) -> list:
        return [check_full_text]

    @property
    def embedder(self) -> BaseEmbedder:
        if self._embedder is None:
            from papermind.llm.embeddings import create_embedder

            self._embedder = create_embedder(self._settings)
        return self._embedder

    async def embed_chunks(self, chunks: Sequence[PaperChunk]) -> list[list[float]]:
        """Embed chunk contents in batches of ``embedding_batch_size``."""
        size = self._settings.embedding_batch_size
        vectors: list[list[float]] = []
        for start in range(0, len(chunks), size):
            batch = [c.content for c in chunks[start:start + size]]
            vectors.extend(await self.embedder.embed_texts(batch))
        if len(vectors) != len(chunks):
            raise ValueError(
                f"Embedder returned {len(vectors)} vectors for {len(chunks)} chunks"
            )
        return vectors

    async def run(self, inp: PaperAnalyzerInput, context: ExecutionContext | None) -> Any:
        cards = select_cards(inp.card_ids)
        chunks = chunk_paper(inp.paper.full_text or "")
        vectors = await self.embed_chunks(chunks)
        logger.info(
            "Analyzing %r: %d chunks, %d cards", inp.paper.title, len(chunks), len(cards)
        )

        answers: dict[str, str] = {}
        failed: list[str] = []
        errors: list[Exception] = []
        tokens = 0
        for card in cards:
            try:
                answer, used = await self.answer_card(card, chunks, vectors)
            except Exception as exc:
                logger.warning("Card %s failed for %r: %s", card.id, inp.paper.title, exc)
                answers[card.id] = f"Analysis failed: {exc}"
                failed.append(card.id)
                errors.append(exc)
                continue
            answers[card.id] = answer
            tokens += used

        if errors and len(errors) == len(cards):
            raise errors[0]

        return CapabilityOutput(
            data={"cards": answers, "failed_cards": failed, "chunk_count": len(chunks)},
            tokens_used=tokens,
            model=self.llm.model,
        )

    async def answer_card(
        self,
        card: AnalysisCard,
        chunks: Sequence[PaperChunk],
        vectors: Sequence[Sequence[float]],
    ) -> tuple[str, int]:
        """One card: retrieve its chunks, ask the model. Returns (answer, tokens)."""
        query_vector = await self.embedder.embed_query(card.prompt)
        selected = select_chunks(
            chunks, vectors, query_vector, card.target_sections, card.max_chunks
        )
        prompt = _PROMPT.format(context=build_card_context(selected), question=card.prompt)
        response = await self.llm.complete(
            messages=[Message(role="user", content=prompt)],
            max_tokens=CARD_MAX_TOKENS,
            temperature=self._config.temperature,
            timeout_s=self._config.timeout_s,
        )
        return response.content.strip(), response.total_tokens

    async def analyze_paper(
        self,
        paper: Paper,
        card_ids: Sequence[str] | None = None,
        context: ExecutionContext | None = None,
    ) -> ExecutionResult[Any]:
        """Run the given cards (all by default) on a paper with full text."""
        return await self.execute(
            {"paper": paper, "card_ids": list(card_ids) if card_ids is not None else None},
            context,
        )
