"""Ranked search-trends adapter (Google Trends daily RSS feed)."""
from __future__ import annotations

import logging
from typing import List

import feedparser
import httpx

from trendwise.errors import SourceUnavailable

from .base import SourceAdapter
from .models import RawCandidate, TrendSource
from .rule_categorizer import RuleBasedCategorizer

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL = "https://trends.google.com/trending/rss"


class SearchTrendsAdapter(SourceAdapter):
    """Daily trending searches with approximate traffic counts."""

    source = TrendSource.SEARCH_TRENDS

    def __init__(
        self,
        feed_url: str = DEFAULT_FEED_URL,
        categorizer: RuleBasedCategorizer | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 20.0,
    ) -> None:
        self.feed_url = feed_url
        self.categorizer = categorizer or RuleBasedCategorizer()
        self._client = client
        self._timeout = timeout

    async def _get(self, params: dict) -> str:
        if self._client is not None:
            response = await self._client.get(self.feed_url, params=params)
        else:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                response = await client.get(self.feed_url, params=params)
        response.raise_for_status()
        return response.text

    async def fetch(self, region: str, category: str | None = None) -> List[RawCandidate]:
        logger.info(f"Fetching search trends for {region}{f' in {category}' if category else ''}")
        try:
            body = await self._get({"geo": region, "hl": "en-US"})
        except httpx.HTTPError as exc:
            raise SourceUnavailable(self.source.value, f"feed request failed: {exc}") from exc

        feed = feedparser.parse(body)
        if feed.bozo and not feed.entries:
            raise SourceUnavailable(self.source.value, f"unparseable feed: {feed.get('bozo_exception')}")

        candidates: List[RawCandidate] = []
        for position, entry in enumerate(feed.entries, 1):
            keyword = (entry.get("title") or "").strip()
            if not keyword:
                continue
            metadata = {"rank": position}
            if entry.get("ht_news_item_title"):
                metadata["articles"] = [{
                    "title": entry.get("ht_news_item_title"),
                    "url": entry.get("ht_news_item_url"),
                    "source": entry.get("ht_news_item_source"),
                }]
            if entry.get("link"):
                metadata["url"] = entry.get("link")

            candidates.append(
                RawCandidate(
                    keyword=keyword,
                    source=self.source,
                    category=self.categorizer.category_for(keyword),
                    traffic=entry.get("ht_approx_traffic"),
                    metadata=metadata,
                )
            )

        logger.info(f"Fetched {len(candidates)} trending searches for {region}")
        return candidates
