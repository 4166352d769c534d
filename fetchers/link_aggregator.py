"""Ranked link-aggregator adapter (Reddit hot listing)."""
from __future__ import annotations

import logging
from typing import List

import httpx

from trendwise.config import ScoringRules
from trendwise.errors import SourceUnavailable

from .base import SourceAdapter
from .models import RawCandidate, TrendSource
from .rule_categorizer import RuleBasedCategorizer

logger = logging.getLogger(__name__)

REDDIT_BASE_URL = "https://www.reddit.com"


class LinkAggregatorAdapter(SourceAdapter):
    """Hot posts of one subreddit, filtered by a minimum upvote count."""

    source = TrendSource.LINK_AGGREGATOR

    def __init__(
        self,
        subreddit: str = "all",
        user_agent: str = "TrendWise Bot 1.0",
        rules: ScoringRules | None = None,
        categorizer: RuleBasedCategorizer | None = None,
        client: httpx.AsyncClient | None = None,
        base_url: str = REDDIT_BASE_URL,
        limit: int = 25,
        timeout: float = 20.0,
    ) -> None:
        self.subreddit = subreddit
        self.user_agent = user_agent
        self.rules = rules or ScoringRules()
        self.categorizer = categorizer or RuleBasedCategorizer()
        self.base_url = base_url.rstrip("/")
        self.limit = limit
        self._client = client
        self._timeout = timeout

    async def _get_json(self) -> dict:
        url = f"{self.base_url}/r/{self.subreddit}/hot.json"
        params = {"limit": self.limit}
        headers = {"User-Agent": self.user_agent}
        if self._client is not None:
            response = await self._client.get(url, params=params, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()

    async def fetch(self, region: str, category: str | None = None) -> List[RawCandidate]:
        logger.info(f"Fetching link-aggregator trends from r/{self.subreddit}")
        try:
            payload = await self._get_json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SourceUnavailable(self.source.value, f"listing request failed: {exc}") from exc

        try:
            posts = payload["data"]["children"]
        except (KeyError, TypeError) as exc:
            raise SourceUnavailable(self.source.value, "unexpected listing shape") from exc

        candidates: List[RawCandidate] = []
        for position, post in enumerate(posts, 1):
            data = post.get("data") or {}
            title = (data.get("title") or "").strip()
            ups = int(data.get("ups") or 0)
            if not title or ups <= self.rules.min_upvotes:
                continue
            subreddit = data.get("subreddit") or self.subreddit
            candidates.append(
                RawCandidate(
                    keyword=title,
                    source=self.source,
                    category=self.categorizer.category_for_subreddit(subreddit, title),
                    upvotes=ups,
                    metadata={
                        "rank": position,
                        "url": f"{REDDIT_BASE_URL}{data.get('permalink', '')}",
                        "subreddit": subreddit,
                    },
                )
            )

        logger.info(f"Fetched {len(candidates)} link-aggregator trends")
        return candidates
