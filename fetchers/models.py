"""Pydantic data models for trend candidates."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from trendwise.config import DEFAULT_CATEGORY


class TrendSource(str, Enum):
    """Where a topic candidate came from."""

    SEARCH_TRENDS = "search-trends"
    SOCIAL_TRENDS = "social-trends"
    LINK_AGGREGATOR = "link-aggregator"
    MANUAL = "manual"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RawCandidate(BaseModel):
    """An unscored topic exactly as a source adapter produced it.

    Only the signal field matching ``source`` is used for scoring:
    ``traffic`` for search trends, ``position`` for social trends,
    ``upvotes`` for the link aggregator and ``score`` for manual entries.
    """

    keyword: str
    source: TrendSource
    category: str | None = None
    traffic: str | int | None = None
    position: int | None = Field(None, ge=1)
    upvotes: int | None = None
    score: float | None = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "frozen": True,
    }


class TopicCandidate(BaseModel):
    """A normalized, scored trend signal."""

    keyword: str = Field(..., description="Trending phrase, original casing, trimmed")
    source: TrendSource
    category: str = Field(DEFAULT_CATEGORY, description="Best-effort classification")
    score: float = Field(..., ge=0, description="Source-normalized popularity")
    fetched_at: datetime = Field(default_factory=utcnow)
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Related queries, links, rank")

    model_config = {
        "frozen": True,
    }

    @field_validator("keyword")
    @classmethod
    def _keyword_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("keyword must not be empty")
        return value

    @field_validator("category")
    @classmethod
    def _category_lower(cls, value: str) -> str:
        return value.strip().lower() or DEFAULT_CATEGORY

    @property
    def normalized_keyword(self) -> str:
        """Lowercased keyword used for comparisons only."""
        return self.keyword.lower()
