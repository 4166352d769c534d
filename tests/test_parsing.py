from generation_engine.parsing import fallback_parse, keyword_tags, parse_article, parse_seo, slugify


def test_parse_article_with_markers() -> None:
    text = """**TITLE:** The Rise of Solar Roads
EXCERPT: Roads that generate power are
leaving the lab.
TAGS: Solar, Energy, #Infrastructure, solar
CONTENT:
## Why now

Panels are finally tough enough to drive on.
"""
    parsed = parse_article(text, "solar roads")

    assert parsed.title == "The Rise of Solar Roads"
    assert parsed.excerpt == "Roads that generate power are leaving the lab."
    assert parsed.tags == ["solar", "energy", "infrastructure"]
    assert parsed.body.startswith("## Why now")
    assert "Panels are finally tough" in parsed.body


def test_parse_article_falls_back_without_markers() -> None:
    text = "# Everything About Electric Planes\n\n" + ("Electric planes are coming to short routes. " * 8)
    parsed = parse_article(text, "electric planes")

    assert parsed.title == "Everything About Electric Planes"
    assert parsed.excerpt.endswith("...")
    assert len(parsed.excerpt) == 203
    assert parsed.body.startswith("# Everything About Electric Planes")
    assert parsed.tags == ["electric planes", "electric", "planes"]


def test_fallback_parse_uses_keyword_defaults_for_empty_text() -> None:
    parsed = fallback_parse("", "eclipse")
    assert parsed.title == "eclipse: Latest Trends and Insights"
    assert parsed.body == ""


def test_short_excerpt_has_no_ellipsis() -> None:
    parsed = fallback_parse("A reasonably long opening line here\n\nShort paragraph.", "x")
    assert parsed.excerpt == "A reasonably long opening line here"


def test_keyword_tags_drop_short_words() -> None:
    assert keyword_tags("The Art of AI") == ["the art of ai"]


def test_parse_seo_json_in_code_fence() -> None:
    text = '```json\n{"metaTitle": "Solar Roads", "metaDescription": "Roads that make power", "keywords": "solar, roads", "ogTitle": "OG", "ogDescription": "OG desc"}\n```'
    seo = parse_seo(text, "Title", "Excerpt", "solar roads")

    assert seo.meta_title == "Solar Roads"
    assert seo.keywords == ["solar", "roads"]
    assert seo.og_description == "OG desc"


def test_parse_seo_labeled_lines() -> None:
    text = """Here you go:
1. Meta title: Solar Roads Explained
2. Meta description: Everything about roads that generate power
3. Keywords: solar, roads, energy
"""
    seo = parse_seo(text, "Title", "Excerpt", "solar roads")

    assert seo.meta_title == "Solar Roads Explained"
    assert seo.meta_description == "Everything about roads that generate power"
    assert seo.keywords == ["solar", "roads", "energy"]
    assert seo.og_title == "Title"


def test_parse_seo_defaults_on_garbage() -> None:
    seo = parse_seo(None, "Title", "Excerpt", "solar roads")
    assert seo.meta_title == "Title"
    assert seo.og_description == "Excerpt"
    assert seo.keywords == ["solar roads"]


def test_slugify() -> None:
    assert slugify("  Hello, World!  It's 2024 -- Now ") == "hello-world-its-2024-now"
