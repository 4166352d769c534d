from __future__ import annotations

import asyncio
from typing import Iterable, List

import pytest

from fetchers.base import SourceAdapter
from fetchers.models import RawCandidate, TopicCandidate, TrendSource
from generation_engine.prompts import SEO_SYSTEM_PROMPT
from trendwise.errors import BackendUnavailable

ARTICLE_RESPONSE = """TITLE: {title}
EXCERPT: A quick look at why {keyword} is trending right now.
TAGS: {keyword}, trends, news
CONTENT:
## Introduction

{keyword} is everywhere this week. Here is what happened and why it matters.

## What comes next

Analysts expect the story to keep developing over the coming days.
"""

SEO_RESPONSE = (
    '{"metaTitle": "Meta title", "metaDescription": "Description", '
    '"keywords": ["one", "two"], "ogTitle": "OG", "ogDescription": "OG description"}'
)


class FakeAdapter(SourceAdapter):
    """Scripted source that counts how often it was queried."""

    def __init__(self, source: TrendSource, candidates: Iterable[RawCandidate] = (), error: Exception | None = None,
                 delay: float = 0.0, available: bool = True):
        self.source = source
        self.candidates = list(candidates)
        self.error = error
        self.delay = delay
        self.available = available
        self.calls = 0

    @property
    def is_available(self) -> bool:
        return self.available

    async def fetch(self, region: str, category: str | None = None) -> List[RawCandidate]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.candidates)


class FakeBackend:
    """Text backend that answers article and SEO prompts from a script.

    ``failures`` is a set of keywords whose article request raises.
    """

    name = "fake"

    def __init__(self, failures: Iterable[str] = (), seo: str | None = SEO_RESPONSE, titles: dict | None = None):
        self.failures = set(failures)
        self.seo = seo
        self.titles = titles or {}
        self.calls: List[tuple] = []

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int, temperature: float) -> str:
        self.calls.append((system_prompt, user_prompt, max_tokens, temperature))
        if system_prompt == SEO_SYSTEM_PROMPT:
            if self.seo is None:
                raise BackendUnavailable("seo down")
            return self.seo
        keyword = _keyword_from_prompt(user_prompt)
        if keyword in self.failures:
            raise BackendUnavailable(f"refused {keyword}")
        title = self.titles.get(keyword, f"Why {keyword} Is Trending Today")
        return ARTICLE_RESPONSE.format(title=title, keyword=keyword)

    @property
    def article_calls(self) -> int:
        return sum(1 for call in self.calls if call[0] != SEO_SYSTEM_PROMPT)


def _keyword_from_prompt(prompt: str) -> str:
    marker = 'trending topic: "'
    start = prompt.index(marker) + len(marker)
    return prompt[start:prompt.index('"', start)]


def make_candidate(keyword: str, score: float = 50.0, category: str = "technology",
                   source: TrendSource = TrendSource.MANUAL, **metadata) -> TopicCandidate:
    return TopicCandidate(keyword=keyword, source=source, category=category, score=score, metadata=metadata)


def manual(keyword: str, score: float, category: str | None = None) -> RawCandidate:
    return RawCandidate(keyword=keyword, source=TrendSource.MANUAL, score=score, category=category)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()
