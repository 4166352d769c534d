"""Boundaries exposed to the surrounding API layer.

Transport-agnostic: an HTTP or RPC layer calls these coroutines and serializes
the returned pydantic models however it likes. Source and backend failures
never surface here; only invalid input and an unreachable article store do.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from pydantic import BaseModel

from fetchers.aggregator import TrendAggregator
from fetchers.cache import InMemoryTrendCache, JsonFileTrendCache, TrendCache
from fetchers.link_aggregator import LinkAggregatorAdapter
from fetchers.models import TopicCandidate, TrendSource
from fetchers.rule_categorizer import RuleBasedCategorizer
from fetchers.search_trends import SearchTrendsAdapter
from fetchers.social_trends import SocialTrendsAdapter, attempt_timeout_for
from generation_engine.backends import TextBackend, build_backend
from generation_engine.content_generator import ContentGenerator
from generation_engine.models import GeneratedContent, GenerationOptions
from generation_engine.orchestrator import BatchReport, GenerationOrchestrator, filter_by_categories
from generation_engine.storage import ArticleStore, JsonFileArticleStore

from .config import Settings
from .errors import InvalidParameter

logger = logging.getLogger(__name__)


class TrendListing(BaseModel):
    candidates: List[TopicCandidate]
    cached: bool
    cache_age_minutes: int | None = None


class TrendService:
    """Trend listing, manual refresh and batch generation boundaries."""

    def __init__(self, aggregator: TrendAggregator, orchestrator: GenerationOrchestrator, settings: Settings | None = None):
        self.aggregator = aggregator
        self.orchestrator = orchestrator
        self.settings = settings or Settings()

    @property
    def cache(self) -> TrendCache:
        return self.aggregator.cache

    async def list_trends(
        self,
        source: str | TrendSource | None = None,
        category: str | None = None,
        region: str | None = None,
        limit: int = 20,
        fresh: bool = False,
    ) -> TrendListing:
        """Current ranked trends, served from cache while it is fresh."""
        if limit <= 0:
            raise InvalidParameter(f"limit must be positive, got {limit}")
        result = await self.aggregator.get_trends(
            sources=source,
            region=region or self.settings.region,
            category=category,
            limit=limit * 2,
            fresh=fresh,
        )
        age = None
        if result.cached and result.cache_age_seconds is not None:
            age = int(result.cache_age_seconds // 60)
        return TrendListing(candidates=result.candidates[:limit], cached=result.cached, cache_age_minutes=age)

    async def refresh_trends(
        self,
        sources: Iterable[str | TrendSource] | None = None,
        region: str | None = None,
        categories: Sequence[str] | None = None,
        limit: int = 50,
    ) -> List[TopicCandidate]:
        """Privileged: fetch fresh trends, filter by *categories* and replace the cache."""
        result = await self.aggregator.get_trends(
            sources=sources,
            region=region or self.settings.region,
            limit=limit,
            fresh=True,
            store=False,
        )
        candidates = filter_by_categories(result.candidates, categories)
        if result.succeeded:
            self.cache.set(candidates)
        logger.info(f"Manual trend refresh produced {len(candidates)} trends")
        return candidates

    def clear_cache(self) -> None:
        self.aggregator.clear_cache()

    def cache_status(self) -> Dict[str, Any]:
        entry = self.cache.entry()
        if entry is None:
            return {"has_cache": False, "cache_age_minutes": None, "cache_size": 0, "last_updated": None, "fresh": False}
        return {
            "has_cache": True,
            "cache_age_minutes": int(entry.age_seconds(self.cache.now()) // 60),
            "cache_size": len(entry.candidates),
            "last_updated": entry.fetched_at.isoformat(),
            "fresh": self.cache.is_fresh(entry),
        }

    def _options(self, options: GenerationOptions | Dict[str, Any] | None) -> GenerationOptions:
        if isinstance(options, GenerationOptions):
            return options
        defaults = {"word_count": self.settings.article_word_count, "tone": self.settings.article_tone}
        return GenerationOptions(**{**defaults, **(options or {})})

    async def run_generation(
        self,
        max_articles: int | None = None,
        categories: Sequence[str] | None = None,
        use_cache: bool = True,
        options: GenerationOptions | Dict[str, Any] | None = None,
    ) -> BatchReport:
        max_articles = self.settings.max_articles_per_run if max_articles is None else max_articles
        categories = self.settings.article_categories if categories is None else categories
        logger.info(f"Article generation requested: max_articles={max_articles}, categories={','.join(categories)}")
        return await self.orchestrator.run_batch(max_articles, categories, use_cache, self._options(options))

    async def generate_articles(
        self,
        max_articles: int | None = None,
        categories: Sequence[str] | None = None,
        use_cache: bool = True,
        options: GenerationOptions | Dict[str, Any] | None = None,
    ) -> List[GeneratedContent]:
        """Privileged: batch generation. Backend failures only shorten the result."""
        report = await self.run_generation(max_articles, categories, use_cache, options)
        return report.articles

    async def generate_article(
        self, topic: TopicCandidate, options: GenerationOptions | Dict[str, Any] | None = None
    ) -> GeneratedContent:
        """Single topic outside batch context; raises GenerationError on backend failure."""
        return await self.orchestrator.generator.generate(topic, self._options(options))

    async def check_backend(self) -> bool:
        return await self.orchestrator.generator.check_connection()


def build_service(
    settings: Settings,
    store: ArticleStore | None = None,
    cache: TrendCache | None = None,
    backend: TextBackend | None = None,
    persistent_cache: bool = False,
) -> TrendService:
    """Wire the default adapters, backend, cache and store from *settings*."""
    categorizer = RuleBasedCategorizer()
    adapters = [
        SearchTrendsAdapter(settings.search_trends_url, categorizer=categorizer),
        SocialTrendsAdapter(
            settings.apify_token,
            actor_id=settings.social_trends_actor,
            rules=settings.scoring,
            categorizer=categorizer,
            attempt_timeout=attempt_timeout_for(settings.source_timeout_seconds),
        ),
        LinkAggregatorAdapter(
            settings.reddit_subreddit,
            user_agent=settings.reddit_user_agent,
            rules=settings.scoring,
            categorizer=categorizer,
        ),
    ]

    if cache is None:
        if persistent_cache:
            cache = JsonFileTrendCache(Path(settings.data_dir) / "cache" / "trends.json", settings.cache_ttl_seconds)
        else:
            cache = InMemoryTrendCache(settings.cache_ttl_seconds)

    aggregator = TrendAggregator(
        adapters,
        cache=cache,
        rules=settings.scoring,
        similarity_threshold=settings.similarity_threshold,
        source_timeout=settings.source_timeout_seconds,
    )

    if backend is None:
        backend = build_backend(
            openai_api_key=settings.openai_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            preferred=settings.preferred_backend,
            openai_model=settings.openai_model,
            anthropic_model=settings.anthropic_model,
        )
    generator = ContentGenerator(
        backend,
        GenerationOptions(word_count=settings.article_word_count, tone=settings.article_tone),
    )
    orchestrator = GenerationOrchestrator(
        aggregator,
        generator,
        store if store is not None else JsonFileArticleStore(settings.data_dir),
        delay_seconds=settings.generation_delay_seconds,
        region=settings.region,
    )
    return TrendService(aggregator, orchestrator, settings)
