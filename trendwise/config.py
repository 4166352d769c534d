"""Runtime configuration.

Everything is read from the environment (a local ``.env`` file is honoured via
``python-dotenv``) and validated into pydantic models. The scoring constants are
empirical defaults, so they live here rather than inside the scoring code.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError

DEFAULT_CATEGORY = "general"

# Categories the surrounding site knows how to file articles under.
SITE_CATEGORIES = (
    "technology",
    "business",
    "health",
    "entertainment",
    "sports",
    "politics",
    "science",
    "lifestyle",
    "travel",
    "food",
    "fashion",
    "education",
    "finance",
    "environment",
    "other",
)


class ScoringRules(BaseModel):
    """Per-source popularity scoring constants."""

    # (minimum raw traffic, score), checked top-down
    traffic_buckets: Tuple[Tuple[int, float], ...] = (
        (1_000_000, 100.0),
        (500_000, 90.0),
        (100_000, 80.0),
        (50_000, 70.0),
        (10_000, 60.0),
        (5_000, 50.0),
        (1_000, 40.0),
    )
    traffic_floor: float = 30.0
    missing_traffic_score: float = 10.0

    rank_start: float = 100.0
    rank_step: float = 5.0
    rank_floor: float = 10.0

    upvote_divisor: float = Field(100.0, gt=0)
    upvote_cap: float = 100.0
    min_upvotes: int = 100

    social_top_n: int = Field(20, gt=0)

    model_config = {
        "frozen": True,
    }


class Settings(BaseModel):
    """Application settings, usually built with :meth:`from_env`."""

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-3-5-haiku-latest"
    preferred_backend: str = Field("openai", pattern="^(openai|claude)$")

    apify_token: str | None = None
    social_trends_actor: str = "karamelo/twitter-trends-scraper"
    search_trends_url: str = "https://trends.google.com/trending/rss"
    reddit_subreddit: str = "all"
    reddit_user_agent: str = "TrendWise Bot 1.0"

    region: str = "US"
    source_timeout_seconds: float = Field(30.0, gt=0)
    cache_ttl_minutes: float = Field(30.0, gt=0)
    similarity_threshold: float = Field(0.8, ge=0, le=1)
    scoring: ScoringRules = Field(default_factory=ScoringRules)

    generation_delay_seconds: float = Field(3.0, ge=0)
    max_articles_per_run: int = Field(3, ge=0)
    article_categories: List[str] = Field(default_factory=lambda: ["technology", "business", "health"])
    article_word_count: int = Field(1200, gt=0)
    article_tone: str = "informative"

    data_dir: Path = Path("data")
    log_level: str = "INFO"

    model_config = {
        "frozen": True,
    }

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_minutes * 60

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables.

        Unset variables keep the model defaults. Malformed values raise
        :class:`~trendwise.errors.ConfigurationError`.
        """
        if dotenv:
            load_dotenv()

        env_map = {
            "openai_api_key": "OPENAI_API_KEY",
            "openai_model": "OPENAI_MODEL",
            "anthropic_api_key": "ANTHROPIC_API_KEY",
            "anthropic_model": "ANTHROPIC_MODEL",
            "preferred_backend": "PREFERRED_BACKEND",
            "apify_token": "APIFY_TOKEN",
            "social_trends_actor": "SOCIAL_TRENDS_ACTOR",
            "search_trends_url": "SEARCH_TRENDS_URL",
            "reddit_subreddit": "REDDIT_SUBREDDIT",
            "reddit_user_agent": "REDDIT_USER_AGENT",
            "region": "TRENDS_GEO",
            "source_timeout_seconds": "SOURCE_TIMEOUT_SECONDS",
            "cache_ttl_minutes": "TRENDS_CACHE_TTL_MINUTES",
            "similarity_threshold": "SIMILARITY_THRESHOLD",
            "generation_delay_seconds": "GENERATION_DELAY_SECONDS",
            "max_articles_per_run": "MAX_ARTICLES_PER_RUN",
            "article_word_count": "ARTICLE_WORD_COUNT",
            "article_tone": "ARTICLE_TONE",
            "data_dir": "TRENDWISE_DATA_DIR",
            "log_level": "LOG_LEVEL",
        }
        values: dict = {}
        for field_name, var in env_map.items():
            raw = os.getenv(var)
            if raw is not None and raw.strip() != "":
                values[field_name] = raw.strip()

        categories = os.getenv("ARTICLE_CATEGORIES")
        if categories is not None:
            values["article_categories"] = [c.strip().lower() for c in categories.split(",") if c.strip()]

        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid TrendWise configuration: {exc}") from exc
