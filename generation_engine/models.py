"""Pydantic data models used across the generation engine."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Tuple

from pydantic import BaseModel, Field, field_validator

from fetchers.models import TopicCandidate, TrendSource


class GenerationOptions(BaseModel):
    """Knobs for a single article."""

    word_count: int = Field(1200, gt=0, description="Approximate article length")
    tone: str = Field("informative", description="Writing tone, e.g. 'informative', 'casual'")
    category: str | None = Field(None, description="Overrides the topic's category when set")

    model_config = {
        "frozen": True,
    }


class SeoMetadata(BaseModel):
    """Search/social metadata. Always populated, falling back to the article's own fields."""

    meta_title: str
    meta_description: str
    keywords: List[str] = Field(default_factory=list)
    og_title: str
    og_description: str

    model_config = {
        "frozen": True,
    }


class TopicSnapshot(BaseModel):
    """Provenance copy of the topic an article was written about."""

    keyword: str
    score: float
    source: TrendSource
    fetched_at: datetime

    model_config = {
        "frozen": True,
    }

    @classmethod
    def from_candidate(cls, topic: TopicCandidate) -> "TopicSnapshot":
        return cls(keyword=topic.keyword, score=topic.score, source=topic.source, fetched_at=topic.fetched_at)


class GeneratedContent(BaseModel):
    """A complete, publishable article record."""

    title: str = Field(..., min_length=1)
    slug: str
    excerpt: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    tags: Tuple[str, ...] = Field(default_factory=tuple, description="Lowercased, deduplicated")
    seo: SeoMetadata
    source_topic: TopicSnapshot
    category: str
    is_generated: bool = True
    word_count: int = Field(0, ge=0)
    read_time_minutes: int = Field(0, ge=0)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {
        "frozen": True,
    }

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value):
        seen: dict[str, None] = {}
        for tag in value or ():
            tag = str(tag).strip().lower()
            if tag:
                seen.setdefault(tag, None)
        return tuple(seen)
