import asyncio

import pytest
from conftest import FakeAdapter, manual

from fetchers.aggregator import TrendAggregator, parse_sources
from fetchers.base import StaticAdapter
from fetchers.cache import InMemoryTrendCache
from fetchers.models import RawCandidate, TrendSource
from trendwise.errors import InvalidParameter, SourceUnavailable


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _search(keyword: str, traffic: str) -> RawCandidate:
    return RawCandidate(keyword=keyword, source=TrendSource.SEARCH_TRENDS, traffic=traffic, category="technology")


def _social(keyword: str, position: int) -> RawCandidate:
    return RawCandidate(keyword=keyword, source=TrendSource.SOCIAL_TRENDS, position=position)


def test_near_duplicates_collapse_to_highest_ranked_first_seen() -> None:
    adapter = StaticAdapter([
        manual("Quantum Computing", 90, "technology"),
        manual("quantum computing!!", 85, "technology"),
        manual("Climate Change", 70, "environment"),
    ])
    aggregator = TrendAggregator([adapter])

    result = asyncio.run(aggregator.aggregate(limit=10))

    assert [c.keyword for c in result] == ["Quantum Computing", "Climate Change"]
    assert [c.score for c in result] == [90, 70]


def test_results_sorted_by_score_and_truncated() -> None:
    search = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search("Low", "500+"), _search("High", "2M+")])
    social = FakeAdapter(TrendSource.SOCIAL_TRENDS, [_social("Middle", 5)])
    aggregator = TrendAggregator([social, search])

    result = asyncio.run(aggregator.aggregate(limit=2))

    assert [c.keyword for c in result] == ["High", "Middle"]
    assert [c.score for c in result] == [100, 80]


def test_search_source_wins_dedup_ties() -> None:
    search = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search("World Cup", "50K+")])
    social = FakeAdapter(TrendSource.SOCIAL_TRENDS, [_social("World Cup", 1)])
    # adapter list order must not matter
    aggregator = TrendAggregator([social, search])

    result = asyncio.run(aggregator.aggregate(limit=10))

    assert len(result) == 1
    assert result[0].source is TrendSource.SEARCH_TRENDS


def test_partial_failure_returns_surviving_sources() -> None:
    search = FakeAdapter(TrendSource.SEARCH_TRENDS, error=SourceUnavailable("search-trends", "boom"))
    social = FakeAdapter(TrendSource.SOCIAL_TRENDS, error=RuntimeError("actor crashed"))
    link = FakeAdapter(
        TrendSource.LINK_AGGREGATOR,
        [RawCandidate(keyword="Mars rover finds water", source=TrendSource.LINK_AGGREGATOR, upvotes=4_000)],
    )
    aggregator = TrendAggregator([search, social, link])

    result = asyncio.run(aggregator.get_trends(limit=5))

    assert [c.keyword for c in result.candidates] == ["Mars rover finds water"]
    assert result.succeeded == (TrendSource.LINK_AGGREGATOR,)
    assert set(result.failed) == {TrendSource.SEARCH_TRENDS, TrendSource.SOCIAL_TRENDS}


def test_all_sources_failing_is_an_empty_result() -> None:
    cache = InMemoryTrendCache()
    aggregator = TrendAggregator(
        [FakeAdapter(TrendSource.SEARCH_TRENDS, error=RuntimeError("down"))],
        cache=cache,
    )

    assert asyncio.run(aggregator.aggregate()) == []
    assert cache.entry() is None


def test_slow_source_times_out_without_blocking_others() -> None:
    slow = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search("Never", "1M+")], delay=5)
    fast = FakeAdapter(TrendSource.SOCIAL_TRENDS, [_social("Fast", 1)])
    aggregator = TrendAggregator([slow, fast], source_timeout=0.05)

    result = asyncio.run(aggregator.aggregate())

    assert [c.keyword for c in result] == ["Fast"]


def test_unavailable_source_is_skipped() -> None:
    unconfigured = FakeAdapter(TrendSource.SOCIAL_TRENDS, [_social("Hidden", 1)], available=False)
    search = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search("Shown", "10K+")])
    aggregator = TrendAggregator([unconfigured, search])

    result = asyncio.run(aggregator.aggregate())

    assert [c.keyword for c in result] == ["Shown"]
    assert unconfigured.calls == 0


def test_cache_serves_within_ttl_and_refetches_after() -> None:
    clock = FakeClock()
    adapter = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search("Cached", "10K+")])
    aggregator = TrendAggregator([adapter], cache=InMemoryTrendCache(ttl_seconds=1_800, clock=clock))

    asyncio.run(aggregator.aggregate())
    clock.now += 600
    second = asyncio.run(aggregator.get_trends())
    assert adapter.calls == 1
    assert second.cached
    assert second.cache_age_seconds == 600

    clock.now += 1_300
    asyncio.run(aggregator.aggregate())
    assert adapter.calls == 2


def test_small_limit_refresh_caches_the_full_ranking() -> None:
    adapter = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search(k, "10K+") for k in ("Aurora", "Comet", "Drought", "Iceberg")])
    aggregator = TrendAggregator([adapter])

    first = asyncio.run(aggregator.aggregate(limit=1, fresh=True))
    later = asyncio.run(aggregator.get_trends(limit=10))

    assert len(first) == 1
    assert later.cached and len(later.candidates) == 4
    assert adapter.calls == 1


def test_fresh_bypasses_cache() -> None:
    adapter = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search("Fresh", "10K+")])
    aggregator = TrendAggregator([adapter])

    asyncio.run(aggregator.aggregate())
    asyncio.run(aggregator.aggregate(fresh=True))

    assert adapter.calls == 2


def test_cached_result_honours_source_and_category_filters() -> None:
    search = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search("Chip shortage", "10K+")])
    social = FakeAdapter(TrendSource.SOCIAL_TRENDS, [_social("Derby day", 1)])
    aggregator = TrendAggregator([search, social])
    asyncio.run(aggregator.aggregate())

    only_social = asyncio.run(aggregator.get_trends(sources=["twitter"]))
    only_tech = asyncio.run(aggregator.get_trends(category="Technology"))

    assert only_social.cached and [c.keyword for c in only_social.candidates] == ["Derby day"]
    assert only_tech.cached and [c.keyword for c in only_tech.candidates] == ["Chip shortage"]
    assert search.calls == 1 and social.calls == 1


def test_concurrent_misses_share_one_refresh() -> None:
    adapter = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search("Shared", "10K+")], delay=0.05)
    aggregator = TrendAggregator([adapter])

    async def run():
        return await asyncio.gather(*(aggregator.aggregate() for _ in range(5)))

    results = asyncio.run(run())

    assert adapter.calls == 1
    assert all([c.keyword for c in r] == ["Shared"] for r in results)


def test_cancellation_propagates() -> None:
    adapter = FakeAdapter(TrendSource.SEARCH_TRENDS, [_search("Slow", "10K+")], delay=5)
    aggregator = TrendAggregator([adapter], source_timeout=10)

    async def run():
        task = asyncio.create_task(aggregator.aggregate())
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())
    assert adapter.calls == 1


def test_invalid_limit_and_source_rejected() -> None:
    aggregator = TrendAggregator([StaticAdapter([])])
    with pytest.raises(InvalidParameter):
        asyncio.run(aggregator.aggregate(limit=0))
    with pytest.raises(InvalidParameter):
        parse_sources(["myspace"])


def test_parse_sources_aliases() -> None:
    assert parse_sources(None) is None
    assert parse_sources("all") is None
    assert parse_sources(["google", "reddit"]) == {TrendSource.SEARCH_TRENDS, TrendSource.LINK_AGGREGATOR}
