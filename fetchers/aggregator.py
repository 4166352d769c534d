"""Fan-out/fan-in over all trend sources.

Adapters run concurrently, each with its own timeout and error boundary. A
failing source contributes nothing; when every source fails the result is
simply empty. Output is normalized, fuzzily deduplicated, ranked by score and
cached for a short TTL.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Sequence, Tuple

from pydantic import ValidationError

from trendwise.config import DEFAULT_CATEGORY, ScoringRules
from trendwise.errors import InvalidParameter

from .base import SourceAdapter
from .cache import InMemoryTrendCache, TrendCache
from .models import RawCandidate, TopicCandidate, TrendSource
from .scoring import score_candidate
from .similarity import deduplicate

logger = logging.getLogger(__name__)

# Query order is the dedup tie-break, so it must not depend on dict or set ordering.
SOURCE_ORDER = (
    TrendSource.SEARCH_TRENDS,
    TrendSource.SOCIAL_TRENDS,
    TrendSource.LINK_AGGREGATOR,
    TrendSource.MANUAL,
)

SOURCE_ALIASES = {
    "google": TrendSource.SEARCH_TRENDS,
    "google-trends": TrendSource.SEARCH_TRENDS,
    "twitter": TrendSource.SOCIAL_TRENDS,
    "x": TrendSource.SOCIAL_TRENDS,
    "reddit": TrendSource.LINK_AGGREGATOR,
}


def parse_sources(values: Iterable[str | TrendSource] | None) -> frozenset[TrendSource] | None:
    """Turn user-supplied source names into :class:`TrendSource` members.

    ``None`` and ``"all"`` mean every configured source.
    """
    if values is None:
        return None
    if isinstance(values, (str, TrendSource)):
        values = [values]

    parsed = set()
    for value in values:
        if isinstance(value, TrendSource):
            parsed.add(value)
            continue
        name = value.strip().lower()
        if name == "all":
            return None
        if name in SOURCE_ALIASES:
            parsed.add(SOURCE_ALIASES[name])
            continue
        try:
            parsed.add(TrendSource(name))
        except ValueError:
            raise InvalidParameter(f"Unknown trend source: {value!r}") from None
    return frozenset(parsed)


@dataclass(frozen=True)
class AggregationResult:
    candidates: List[TopicCandidate]
    cached: bool = False
    cache_age_seconds: float | None = None
    succeeded: Tuple[TrendSource, ...] = ()
    failed: Tuple[TrendSource, ...] = ()


class TrendAggregator:
    """Merges every enabled source adapter into one ranked candidate list."""

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        cache: TrendCache | None = None,
        rules: ScoringRules | None = None,
        similarity_threshold: float = 0.8,
        source_timeout: float = 30.0,
    ) -> None:
        by_source = {adapter.source: adapter for adapter in adapters}
        self.adapters: List[SourceAdapter] = [by_source[s] for s in SOURCE_ORDER if s in by_source]
        self.cache = cache if cache is not None else InMemoryTrendCache()
        self.rules = rules or ScoringRules()
        self.similarity_threshold = similarity_threshold
        self.source_timeout = source_timeout
        self._refresh_lock = asyncio.Lock()

    @property
    def sources(self) -> frozenset[TrendSource]:
        return frozenset(adapter.source for adapter in self.adapters)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def aggregate(
        self,
        sources: Iterable[str | TrendSource] | None = None,
        region: str = "US",
        category: str | None = None,
        limit: int = 50,
        fresh: bool = False,
    ) -> List[TopicCandidate]:
        """Return at most *limit* deduplicated candidates, best first. Never raises on source failure."""
        result = await self.get_trends(sources, region, category, limit, fresh)
        return result.candidates

    async def get_trends(
        self,
        sources: Iterable[str | TrendSource] | None = None,
        region: str = "US",
        category: str | None = None,
        limit: int = 50,
        fresh: bool = False,
        store: bool = True,
    ) -> AggregationResult:
        """Like :meth:`aggregate` but also reports whether the cache answered.

        Concurrent cache misses coalesce onto one in-flight refresh. ``fresh``
        bypasses the cache entirely; ``store=False`` leaves it untouched.
        """
        if limit <= 0:
            raise InvalidParameter(f"limit must be positive, got {limit}")
        selected = parse_sources(sources)

        if fresh:
            return await self._refresh(selected, region, category, limit, store)

        hit = self._from_cache(selected, category, limit)
        if hit is not None:
            return hit

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited.
            hit = self._from_cache(selected, category, limit)
            if hit is not None:
                return hit
            return await self._refresh(selected, region, category, limit, store)

    def clear_cache(self) -> None:
        self.cache.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _from_cache(
        self, selected: frozenset[TrendSource] | None, category: str | None, limit: int
    ) -> AggregationResult | None:
        entry = self.cache.entry()
        if entry is None or not self.cache.is_fresh(entry):
            return None

        candidates = _filter(entry.candidates, selected, category)[:limit]
        age = entry.age_seconds(self.cache.now())
        logger.info(f"Returning {len(candidates)} cached trends (age {age / 60:.0f} min)")
        return AggregationResult(candidates=candidates, cached=True, cache_age_seconds=age)

    async def _refresh(
        self,
        selected: frozenset[TrendSource] | None,
        region: str,
        category: str | None,
        limit: int,
        store: bool,
    ) -> AggregationResult:
        enabled = [a for a in self.adapters if selected is None or a.source in selected]
        if not enabled:
            logger.warning("No enabled trend sources for this request")
            return AggregationResult(candidates=[])

        logger.info(f"Fetching trends from {', '.join(a.source.value for a in enabled)} for {region}")
        outcomes = await asyncio.gather(*(self._run_adapter(a, region, category) for a in enabled))

        fetched_at = datetime.now(timezone.utc)
        merged: List[TopicCandidate] = []
        succeeded, failed = [], []
        for adapter, (raws, ok) in zip(enabled, outcomes):
            (succeeded if ok else failed).append(adapter.source)
            merged.extend(self._normalize(raws, fetched_at))

        merged = _filter(merged, None, category)
        unique = deduplicate(merged, self.similarity_threshold)
        ranked = sorted(unique, key=lambda c: c.score, reverse=True)

        if not succeeded:
            logger.warning("All trend sources failed; returning an empty result")
        elif store and category is None and {a.source for a in enabled} == self.sources:
            # The cache keeps the whole ranked list; later reads apply their own limit.
            self.cache.set(ranked)

        logger.info(f"Aggregated {len(ranked)} unique trends from {len(merged)} candidates")
        return AggregationResult(
            candidates=ranked[:limit],
            succeeded=tuple(succeeded),
            failed=tuple(failed),
        )

    async def _run_adapter(
        self, adapter: SourceAdapter, region: str, category: str | None
    ) -> Tuple[List[RawCandidate], bool]:
        if not adapter.is_available:
            logger.warning(f"Trend source {adapter.source.value} is not configured, skipping")
            return [], False
        try:
            raws = await asyncio.wait_for(adapter.fetch(region, category), timeout=self.source_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Trend source {adapter.source.value} timed out after {self.source_timeout}s")
            return [], False
        except Exception as e:
            logger.warning(f"Trend source {adapter.source.value} failed: {e}")
            return [], False
        logger.info(f"Trend source {adapter.source.value} returned {len(raws)} candidates")
        return list(raws), True

    def _normalize(self, raws: Iterable[RawCandidate], fetched_at: datetime) -> List[TopicCandidate]:
        candidates = []
        for raw in raws:
            try:
                candidates.append(
                    TopicCandidate(
                        keyword=raw.keyword,
                        source=raw.source,
                        category=raw.category or DEFAULT_CATEGORY,
                        score=score_candidate(raw, self.rules),
                        fetched_at=fetched_at,
                        metadata=raw.metadata,
                    )
                )
            except ValidationError:
                logger.debug(f"Dropping invalid candidate {raw.keyword!r} from {raw.source.value}")
        return candidates


def _filter(
    candidates: Iterable[TopicCandidate],
    sources: frozenset[TrendSource] | None,
    category: str | None,
) -> List[TopicCandidate]:
    wanted = category.strip().lower() if category else None
    return [
        c for c in candidates
        if (sources is None or c.source in sources) and (wanted is None or c.category == wanted)
    ]
