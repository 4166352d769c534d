"""Parsing of generative-backend responses.

Model output rarely follows the requested format exactly, so every parser here
has heuristic fallbacks and none of them raise on malformed input.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .models import SeoMetadata

logger = logging.getLogger(__name__)

EXCERPT_LIMIT = 200
WORDS_PER_MINUTE = 200

# "TITLE: x", "**TITLE:** x", "## CONTENT:" ...
_MARKER_RE = re.compile(r"^(?:#{1,6}\s*)?\*{0,2}\s*(TITLE|EXCERPT|TAGS|CONTENT)\s*\*{0,2}\s*:\s*\*{0,2}\s*(.*)$")
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_NUMBERING_RE = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")


@dataclass
class ParsedArticle:
    title: str = ""
    excerpt: str = ""
    body: str = ""
    tags: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return bool(self.title and self.excerpt and self.body)


def _strip_placeholder(value: str) -> str:
    value = value.strip().strip("*").strip()
    if value.startswith("[") and value.endswith("]"):
        value = value[1:-1].strip()
    return value.strip('"').strip()


def _split_tags(value: str) -> List[str]:
    return [t.strip().lstrip("#").lower() for t in _strip_placeholder(value).split(",") if t.strip().lstrip("#")]


def dedupe(values) -> List[str]:
    return list(dict.fromkeys(v for v in values if v))


def keyword_tags(keyword: str) -> List[str]:
    """Tags derived from the topic keyword: the phrase itself plus its significant words."""
    phrase = keyword.strip().lower()
    words = [w for w in re.findall(r"[\w'-]+", phrase) if len(w) > 3]
    return dedupe([phrase, *words])


def parse_article(text: str, keyword: str) -> ParsedArticle:
    """Parse a TITLE/EXCERPT/TAGS/CONTENT response, falling back to heuristics.

    Missing title, excerpt or body are filled in by :func:`fallback_parse`;
    missing tags are derived from *keyword*.
    """
    parsed = ParsedArticle()
    section = None
    excerpt_lines: List[str] = []
    tag_lines: List[str] = []
    body_lines: List[str] = []

    for line in text.splitlines():
        match = _MARKER_RE.match(line.strip())
        if match:
            section = match.group(1)
            value = match.group(2)
            if section == "TITLE":
                parsed.title = _strip_placeholder(value)
            elif section == "EXCERPT" and value.strip():
                excerpt_lines.append(value)
            elif section == "TAGS" and value.strip():
                tag_lines.append(value)
            elif section == "CONTENT" and value.strip():
                body_lines.append(value)
            continue

        stripped = line.strip()
        if section == "TITLE" and not parsed.title and stripped:
            parsed.title = _strip_placeholder(stripped.lstrip("#"))
        elif section == "EXCERPT" and stripped:
            excerpt_lines.append(stripped)
        elif section == "TAGS" and stripped:
            tag_lines.append(stripped)
        elif section == "CONTENT":
            body_lines.append(line.rstrip())

    parsed.excerpt = _strip_placeholder(" ".join(excerpt_lines))
    parsed.tags = dedupe(tag for line in tag_lines for tag in _split_tags(line))
    parsed.body = "\n".join(body_lines).strip()

    if not parsed.complete:
        logger.info("Structured markers incomplete, using fallback parsing")
        fallback = fallback_parse(text, keyword)
        parsed.title = parsed.title or fallback.title
        parsed.excerpt = parsed.excerpt or fallback.excerpt
        parsed.body = parsed.body or fallback.body

    if not parsed.tags:
        parsed.tags = keyword_tags(keyword)

    parsed.title = parsed.title or f"Understanding {keyword}: A Comprehensive Guide"
    parsed.excerpt = parsed.excerpt or f"Explore the trending topic of {keyword} and discover its impact and significance."
    return parsed


def fallback_parse(text: str, keyword: str) -> ParsedArticle:
    """Heuristic extraction for responses that ignore the section markers."""
    plain_lines = [line for line in text.splitlines() if not _MARKER_RE.match(line.strip())]
    body = "\n".join(plain_lines).strip()

    title = ""
    for line in plain_lines:
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("#") or len(stripped) > 20:
            title = stripped.lstrip("#").strip().strip("*").strip()
            break

    excerpt = ""
    for paragraph in re.split(r"\n\s*\n", body):
        paragraph = paragraph.strip()
        if paragraph and not paragraph.startswith("#"):
            paragraph = " ".join(paragraph.split())
            if len(paragraph) > EXCERPT_LIMIT:
                paragraph = paragraph[:EXCERPT_LIMIT].rstrip() + "..."
            excerpt = paragraph
            break

    return ParsedArticle(
        title=title or f"{keyword}: Latest Trends and Insights",
        excerpt=excerpt or f"Discover the latest insights about {keyword} and its growing significance.",
        body=body,
        tags=keyword_tags(keyword),
    )


def _as_keywords(value: Any) -> List[str]:
    if isinstance(value, str):
        return dedupe(k.strip() for k in value.split(","))
    if isinstance(value, (list, tuple)):
        return dedupe(str(k).strip() for k in value)
    return []


def _load_json_object(text: str) -> Dict[str, Any] | None:
    clean = _FENCE_RE.sub("", text.strip()).strip()
    attempts = [clean]
    match = _JSON_OBJECT_RE.search(clean)
    if match and match.group(0) != clean:
        attempts.append(match.group(0))
    for candidate in attempts:
        try:
            data = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data
    return None


def _scan_labeled_fields(text: str) -> Dict[str, Any]:
    found: Dict[str, Any] = {}
    for raw_line in text.splitlines():
        line = _NUMBERING_RE.sub("", raw_line.strip()).replace("*", "")
        if ":" not in line:
            continue
        label, value = (part.strip() for part in line.split(":", 1))
        label = label.lower()
        if not value:
            continue
        if "open graph title" in label or "og title" in label or label == "ogtitle":
            found["og_title"] = value
        elif "open graph description" in label or "og description" in label or label == "ogdescription":
            found["og_description"] = value
        elif "meta title" in label or label in ("title", "metatitle"):
            found["meta_title"] = value
        elif "meta description" in label or label in ("description", "metadescription"):
            found["meta_description"] = value
        elif "keywords" in label:
            found["keywords"] = _as_keywords(value)
    return found


def parse_seo(text: str | None, title: str, excerpt: str, keyword: str) -> SeoMetadata:
    """Parse SEO metadata: strict JSON first, then labeled lines, then defaults. Never raises."""
    defaults = {
        "meta_title": title,
        "meta_description": excerpt,
        "keywords": [keyword],
        "og_title": title,
        "og_description": excerpt,
    }
    try:
        found: Dict[str, Any] = {}
        if text and text.strip():
            data = _load_json_object(text)
            if data is not None:
                found = {
                    "meta_title": data.get("metaTitle") or data.get("meta_title"),
                    "meta_description": data.get("metaDescription") or data.get("meta_description"),
                    "keywords": _as_keywords(data.get("keywords")),
                    "og_title": data.get("ogTitle") or data.get("og_title"),
                    "og_description": data.get("ogDescription") or data.get("og_description"),
                }
            else:
                logger.info("SEO response is not JSON, scanning labeled lines")
                found = _scan_labeled_fields(text)

        merged = dict(defaults)
        for key, value in found.items():
            if not value:
                continue
            merged[key] = value if key == "keywords" else str(value).strip()
        return SeoMetadata(**merged)
    except Exception as e:
        logger.warning(f"SEO metadata parsing failed, using defaults: {e}")
        return SeoMetadata(**defaults)


def slugify(title: str) -> str:
    """Lowercase, drop anything but letters/digits/spaces/hyphens, hyphenate whitespace."""
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def count_words(text: str) -> int:
    return len(text.split())
