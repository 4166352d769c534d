"""Prompt templates for the two-stage article protocol."""
from __future__ import annotations

from fetchers.models import TopicCandidate

ARTICLE_SYSTEM_PROMPT = """You are an expert content writer and SEO specialist. You create high-quality, engaging blog articles that:

1. Are well-researched and factually accurate
2. Follow SEO best practices
3. Engage readers with compelling storytelling
4. Provide genuine value and insights
5. Use proper markdown formatting
6. Include relevant keywords naturally
7. Have clear structure with headings and subheadings
8. Are optimized for readability and user engagement

Always write original content that provides real value to readers. Avoid clickbait and ensure all information is accurate."""

SEO_SYSTEM_PROMPT = "You are an SEO expert. Generate optimized metadata that will rank well in search engines. Respond only with valid JSON."


def _context_lines(topic: TopicCandidate) -> str:
    lines = []
    related = topic.metadata.get("related_queries") or []
    if related:
        lines.append(f"Related queries: {', '.join(map(str, related))}")
    articles = topic.metadata.get("articles") or []
    titles = [a.get("title") for a in articles if isinstance(a, dict) and a.get("title")]
    if titles:
        lines.append(f"Reference articles: {', '.join(titles)}")
    return "\n".join(lines) if lines else "None"


def article_prompt(topic: TopicCandidate, word_count: int, tone: str, category: str) -> str:
    """Stage 1: ask for TITLE / EXCERPT / TAGS / CONTENT sections."""
    return f"""Write a comprehensive, engaging, and SEO-optimized blog article about the trending topic: "{topic.keyword}"

Requirements:
- Word count: approximately {word_count} words
- Tone: {tone}
- Category: {category}
- Include relevant subheadings (H2, H3)
- Write in a conversational yet professional style
- Include actionable insights where applicable
- Structure the article with a clear introduction, body, and conclusion

Additional context:
{_context_lines(topic)}

Please format your response exactly as follows:
TITLE: [Article title]
EXCERPT: [Brief excerpt/summary in 2-3 sentences]
TAGS: [5-7 relevant tags separated by commas]
CONTENT: [Full article content with proper markdown formatting]

Make sure the title is catchy and SEO-friendly, the excerpt summarizes the key points, and the content is well-structured with proper headings."""


def seo_prompt(title: str, excerpt: str, keyword: str) -> str:
    """Stage 2: ask for machine-parseable SEO metadata."""
    return f"""Generate SEO metadata for this article:

Title: {title}
Excerpt: {excerpt}
Keyword: {keyword}

Please provide:
1. Meta title (max 60 characters)
2. Meta description (max 160 characters)
3. 5-7 relevant keywords
4. Open Graph title
5. Open Graph description

Format as JSON with keys: metaTitle, metaDescription, keywords, ogTitle, ogDescription"""
