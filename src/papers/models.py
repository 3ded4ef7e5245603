# src/papers/models.py — v1
"""Paper domain models shared by the paper agents.

Field names are snake_case; the camelCase names used by the library sync
(``dateAdded``, ``zoteroKey``, ``aiColumns`` ...) are accepted as aliases.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PaperStatus = Literal["unread", "reading", "read", "archived"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Paper(_CamelModel):
    """A library item as shown in the papers table."""

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    authors: list[str] = Field(default_factory=list)
    journal: str = ""
    year: int | None = None
    doi: str | None = None
    tags: list[str] = Field(default_factory=list)
    notes: str = ""
    date_added: str | None = None
    collections: list[str] = Field(default_factory=list)
    status: PaperStatus = "unread"
    url: str | None = None
    zotero_key: str | None = None
    zotero_version: int | None = None
    item_type: str | None = None
    ai_columns: dict[str, str] | None = None
    full_text: str | None = None


class CollectionContext(_CamelModel):
    """What a collection is about, given to agents judging relevance."""

    name: str
    description: str | None = None
    total_papers: int = Field(ge=0)
    common_tags: list[str] = Field(default_factory=list)
    research_focus: str | None = None
