"""Batch article generation from the current trend ranking.

Candidates are processed strictly one after another with a politeness delay
between backend calls. Sequential processing also keeps the
"does this title already exist" check free of races.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Sequence

from fetchers.aggregator import TrendAggregator
from fetchers.models import TopicCandidate
from trendwise.errors import InvalidParameter

from .content_generator import ContentGenerator
from .models import GeneratedContent, GenerationOptions
from .storage import ArticleStore

logger = logging.getLogger(__name__)

HEADROOM_FACTOR = 3


@dataclass
class BatchReport:
    """Everything that happened during one batch run."""

    articles: List[GeneratedContent] = field(default_factory=list)
    selected: List[TopicCandidate] = field(default_factory=list)
    inserted: List[GeneratedContent] = field(default_factory=list)
    duplicates: List[GeneratedContent] = field(default_factory=list)
    failed: List[TopicCandidate] = field(default_factory=list)
    used_cache: bool = False


def filter_by_categories(candidates: Iterable[TopicCandidate], categories: Sequence[str] | None) -> List[TopicCandidate]:
    wanted = {c.strip().lower() for c in categories or () if c and c.strip()}
    if not wanted:
        return list(candidates)
    return [c for c in candidates if c.category in wanted]


class GenerationOrchestrator:
    """Selects top candidates and turns them into stored articles."""

    def __init__(
        self,
        aggregator: TrendAggregator,
        generator: ContentGenerator,
        store: ArticleStore,
        delay_seconds: float = 3.0,
        region: str = "US",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.aggregator = aggregator
        self.generator = generator
        self.store = store
        self.delay_seconds = delay_seconds
        self.region = region
        self._sleep = sleep

    async def generate_batch(
        self,
        max_articles: int,
        categories: Sequence[str] | None = None,
        use_cache: bool = True,
        options: GenerationOptions | None = None,
    ) -> List[GeneratedContent]:
        """Return the articles produced (or found already stored); may be shorter than *max_articles*."""
        report = await self.run_batch(max_articles, categories, use_cache, options)
        return report.articles

    async def run_batch(
        self,
        max_articles: int,
        categories: Sequence[str] | None = None,
        use_cache: bool = True,
        options: GenerationOptions | None = None,
    ) -> BatchReport:
        if max_articles < 0:
            raise InvalidParameter(f"max_articles must not be negative, got {max_articles}")

        report = BatchReport()
        if max_articles == 0:
            return report

        candidates = await self._candidates(max_articles, use_cache, report)
        if not candidates:
            logger.warning("No trends available for article generation")
            return report

        filtered = filter_by_categories(candidates, categories)
        if not filtered:
            logger.warning(f"No trends found for categories: {', '.join(categories or [])}")
            return report

        report.selected = sorted(filtered, key=lambda c: c.score, reverse=True)[:max_articles]
        logger.info(f"Selected {len(report.selected)} trends for article generation")
        for index, topic in enumerate(report.selected, 1):
            logger.info(f"{index}. {topic.keyword} ({topic.source.value}, score: {topic.score:g})")

        total = len(report.selected)
        for index, topic in enumerate(report.selected):
            if index > 0 and self.delay_seconds > 0:
                await self._sleep(self.delay_seconds)

            logger.info(f"Generating article {index + 1}/{total} for: {topic.keyword}")
            try:
                content = await self.generator.generate(topic, options)
            except Exception as e:
                logger.error(f"Failed to generate article for trend: {topic.keyword}: {e}")
                report.failed.append(topic)
                continue

            existing = await self.store.find_by_title(content.title)
            if existing is not None:
                logger.warning(f"Article with similar title already exists: {content.title}")
                report.duplicates.append(existing)
                report.articles.append(existing)
                continue

            await self.store.insert(content)
            report.inserted.append(content)
            report.articles.append(content)

        logger.info(
            f"Generated {len(report.inserted)} new articles from {total} trends "
            f"({len(report.duplicates)} already stored, {len(report.failed)} failed)"
        )
        return report

    async def _candidates(self, max_articles: int, use_cache: bool, report: BatchReport) -> List[TopicCandidate]:
        if use_cache:
            cached, fresh = self.aggregator.cache.get()
            if fresh and cached:
                logger.info("Using cached trends for article generation")
                report.used_cache = True
                return cached

        logger.info("Fetching fresh trends for article generation")
        return await self.aggregator.aggregate(
            region=self.region,
            limit=max_articles * HEADROOM_FACTOR,
            fresh=True,
        )
