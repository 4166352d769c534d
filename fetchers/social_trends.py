"""Social-network trending topics from the karamelo Apify actor.

Actor runs are retried with exponential backoff. Every attempt gets its own
timeout so that all attempts and their waits fit inside the aggregator's
per-source timeout.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List

from apify_client import ApifyClientAsync

from trendwise.config import ScoringRules
from trendwise.errors import SourceUnavailable

from .base import SourceAdapter
from .models import RawCandidate, TrendSource
from .rule_categorizer import RuleBasedCategorizer

logger = logging.getLogger(__name__)

DEFAULT_ACTOR = "karamelo/twitter-trends-scraper"

# Karamelo actor country codes (from documentation)
KARAMELO_REGION_CODES = {
    "US": "2",   # United States
    "SG": "20",  # Singapore
}

MAX_ATTEMPTS = 3


def attempt_timeout_for(source_timeout: float, backoff_base: float = 1.0) -> float:
    """Per-attempt budget so every retry and backoff fits in *source_timeout*."""
    backoff_total = sum(backoff_base * 2 ** attempt for attempt in range(MAX_ATTEMPTS - 1))
    # 10% slack so the last attempt ends before the outer timeout fires.
    return max(0.9 * (source_timeout - backoff_total) / MAX_ATTEMPTS, 1.0)


def parse_tweet_volume(volume_str: str | None) -> int:
    """Convert tweet volume string (e.g., '35.8k', '94,633Tweets') to integer."""
    if not volume_str:
        return 0

    try:
        # Remove 'Tweets' suffix and commas
        volume_str = str(volume_str).replace("Tweets", "").replace(",", "").strip()

        # Handle k/m suffixes
        volume_str_lower = volume_str.lower()
        if volume_str_lower.endswith("k"):
            return int(float(volume_str_lower[:-1]) * 1000)
        if volume_str_lower.endswith("m"):
            return int(float(volume_str_lower[:-1]) * 1000000)

        return int(float(volume_str))
    except (ValueError, TypeError):
        return 0


class SocialTrendsAdapter(SourceAdapter):
    """Social-network trending topics scraped by an Apify actor.

    The scraper reads third-party markup and breaks whenever that markup
    changes; it sits behind the plain ``fetch`` contract so it can be swapped
    for an API-based source without touching the aggregator.
    """

    source = TrendSource.SOCIAL_TRENDS

    def __init__(
        self,
        token: str | None,
        actor_id: str = DEFAULT_ACTOR,
        rules: ScoringRules | None = None,
        categorizer: RuleBasedCategorizer | None = None,
        client: Any = None,
        attempt_timeout: float = 120.0,
        backoff_base: float = 1.0,
    ) -> None:
        self.token = token
        self.actor_id = actor_id
        self.rules = rules or ScoringRules()
        self.categorizer = categorizer or RuleBasedCategorizer()
        self._client = client
        self.attempt_timeout = attempt_timeout
        self.backoff_base = backoff_base

    @property
    def is_available(self) -> bool:
        return bool(self.token) or self._client is not None

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = ApifyClientAsync(self.token)
        return self._client

    async def _run_actor(self, country_code: str) -> list[dict]:
        client = self._get_client()
        payload = {
            "country": country_code,
            "proxyOptions": {"useApifyProxy": True},
        }
        run = await client.actor(self.actor_id).call(run_input=payload, timeout_secs=max(int(self.attempt_timeout), 1))
        if not run:
            raise SourceUnavailable(self.source.value, "actor run returned nothing")
        page = await client.dataset(run["defaultDatasetId"]).list_items()
        return list(page.items)

    async def fetch(self, region: str, category: str | None = None) -> List[RawCandidate]:
        if not self.is_available:
            raise SourceUnavailable(self.source.value, "APIFY_TOKEN is not configured")

        country_code = KARAMELO_REGION_CODES.get(region.upper(), region)
        items: list[dict] | None = None
        last_error: Exception | None = None

        for attempt in range(MAX_ATTEMPTS):
            try:
                logger.info(f"Requesting social trends for {region} (country code: {country_code}) - attempt {attempt + 1}")
                items = await asyncio.wait_for(self._run_actor(country_code), timeout=self.attempt_timeout)
                break
            except Exception as e:
                if isinstance(e, asyncio.TimeoutError):
                    last_error = TimeoutError(f"actor run exceeded {self.attempt_timeout:.0f}s")
                else:
                    last_error = e
                logger.warning(f"Social trends {region} failed on attempt {attempt + 1}: {last_error}")
                if attempt < MAX_ATTEMPTS - 1:
                    wait_time = self.backoff_base * 2 ** attempt  # 1s, 2s
                    await asyncio.sleep(wait_time)

        if items is None:
            raise SourceUnavailable(self.source.value, f"failed after {MAX_ATTEMPTS} attempts: {last_error}")

        return self._to_candidates(items)

    def _to_candidates(self, items: list[dict]) -> List[RawCandidate]:
        # The actor returns several time windows; the first one is the live board.
        window = items[0].get("timePeriod") if items else None
        candidates: List[RawCandidate] = []
        for row in items:
            if row.get("timePeriod") != window:
                continue
            keyword = (row.get("trend") or "").strip()
            if len(keyword) <= 2:
                continue
            position = len(candidates) + 1
            candidates.append(
                RawCandidate(
                    keyword=keyword,
                    source=self.source,
                    category=self.categorizer.category_for(keyword),
                    position=position,
                    metadata={
                        "rank": position,
                        "window": window or "unknown",
                        "tweet_volume": parse_tweet_volume(row.get("volume")),
                    },
                )
            )
            if len(candidates) >= self.rules.social_top_n:
                break

        logger.info(f"Fetched {len(candidates)} social trends")
        return candidates
