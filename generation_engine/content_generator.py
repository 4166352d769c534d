"""Turns one topic candidate into a complete article record.

Two backend calls per topic: the article itself (TITLE/EXCERPT/TAGS/CONTENT
sections) and then SEO metadata for it. Only the first one can fail the
generation; metadata always degrades to the article's own title and excerpt.
"""
from __future__ import annotations

import logging
import math

from fetchers.models import TopicCandidate
from trendwise.errors import BackendError, GenerationError

from .backends import TextBackend
from .models import GeneratedContent, GenerationOptions, SeoMetadata, TopicSnapshot
from .parsing import WORDS_PER_MINUTE, ParsedArticle, count_words, parse_article, parse_seo, slugify
from .prompts import ARTICLE_SYSTEM_PROMPT, SEO_SYSTEM_PROMPT, article_prompt, seo_prompt

logger = logging.getLogger(__name__)

MAX_ARTICLE_TOKENS = 4000


class ContentGenerator:
    """Drives a :class:`~generation_engine.backends.TextBackend` through the article protocol."""

    def __init__(
        self,
        backend: TextBackend,
        default_options: GenerationOptions | None = None,
        article_temperature: float = 0.7,
        seo_temperature: float = 0.3,
        seo_max_tokens: int = 500,
    ) -> None:
        self.backend = backend
        self.default_options = default_options or GenerationOptions()
        self.article_temperature = article_temperature
        self.seo_temperature = seo_temperature
        self.seo_max_tokens = seo_max_tokens

    async def generate(self, topic: TopicCandidate, options: GenerationOptions | None = None) -> GeneratedContent:
        """Write an article about *topic*.

        Raises:
            GenerationError: the backend is unreachable, timed out, or its
                response is empty even after fallback parsing.
        """
        options = options or self.default_options
        category = options.category or topic.category
        logger.info(f"Generating article for trend: {topic.keyword}")

        prompt = article_prompt(topic, options.word_count, options.tone, category)
        max_tokens = min(MAX_ARTICLE_TOKENS, math.ceil(options.word_count * 1.5))
        try:
            text = await self.backend.complete(ARTICLE_SYSTEM_PROMPT, prompt, max_tokens, self.article_temperature)
        except BackendError as e:
            raise GenerationError(f"Backend failed for {topic.keyword!r}: {e}") from e

        if not text or not text.strip():
            raise GenerationError(f"Backend returned an empty response for {topic.keyword!r}")

        parsed = parse_article(text, topic.keyword)
        if not parsed.body:
            raise GenerationError(f"No usable article body for {topic.keyword!r}")

        seo = await self.generate_seo(parsed, topic)
        words = count_words(parsed.body)

        content = GeneratedContent(
            title=parsed.title,
            slug=slugify(parsed.title) or slugify(topic.keyword),
            excerpt=parsed.excerpt,
            body=parsed.body,
            tags=parsed.tags,
            seo=seo,
            source_topic=TopicSnapshot.from_candidate(topic),
            category=category,
            word_count=words,
            read_time_minutes=math.ceil(words / WORDS_PER_MINUTE),
        )
        logger.info(f"Successfully generated article: {content.title}")
        return content

    async def generate_seo(self, article: ParsedArticle, topic: TopicCandidate) -> SeoMetadata:
        """Second stage. Never raises; falls back to the article's own fields."""
        try:
            text = await self.backend.complete(
                SEO_SYSTEM_PROMPT,
                seo_prompt(article.title, article.excerpt, topic.keyword),
                self.seo_max_tokens,
                self.seo_temperature,
            )
        except Exception as e:
            logger.error(f"Error generating SEO metadata for {topic.keyword!r}: {e}")
            text = None
        return parse_seo(text, article.title, article.excerpt, topic.keyword)

    async def check_connection(self) -> bool:
        """Send a tiny prompt to see whether the backend answers."""
        try:
            reply = await self.backend.complete("You are a health check.", "Hello", 5, 0.0)
        except BackendError as e:
            logger.error(f"Backend connection test failed: {e}")
            return False
        return bool(reply)
