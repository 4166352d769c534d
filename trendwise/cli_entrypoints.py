#!/usr/bin/env python3
"""Console-script wrappers for TrendWise.

After an editable install (``pip install -e .``) the following commands become
available system-wide:

* ``trendwise-fetch``      – print the current ranked trends (optionally save a CSV)
* ``trendwise-generate``   – generate and store articles from the top trends
* ``trendwise-scheduler``  – periodic trend refresh, see :mod:`trendwise.scheduler`

Both commands share one JSON trend cache under the data directory so a fetch
followed by a generate reuses the same ranking.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import Settings
from .errors import TrendwiseError
from .reports import save_generation_report, save_trends_snapshot
from .service import TrendService, build_service

LOGGER = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format="%(asctime)s | %(levelname)s | %(message)s")


def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _service(settings: Settings) -> TrendService:
    return build_service(settings, persistent_cache=True)


# ---------------------------------------------------------------------------
# Entry-points
# ---------------------------------------------------------------------------

def fetch_trends(argv: Optional[List[str]] = None) -> int:
    """List ranked trends from every source, cache-first."""
    parser = argparse.ArgumentParser(description="Fetch and rank trending topics")
    parser.add_argument("--source", "-s", action="append", help="Limit to a source (google, twitter, reddit, all); repeatable")
    parser.add_argument("--category", "-c", help="Only show trends in this category")
    parser.add_argument("--region", "-r", help="Region code (default: TRENDS_GEO or US)")
    parser.add_argument("--limit", "-n", type=int, default=20, help="Number of trends to show (default: 20)")
    parser.add_argument("--fresh", action="store_true", help="Bypass the trend cache")
    parser.add_argument("--save", action="store_true", help="Also write a CSV snapshot under <data_dir>/reports")
    parser.add_argument("--status", action="store_true", help="Print cache status and exit")
    parser.add_argument("--clear-cache", action="store_true", help="Clear the trend cache and exit")
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        service = _service(settings)

        if args.clear_cache:
            service.clear_cache()
            print("🧹 Trend cache cleared")
            return 0
        if args.status:
            for key, value in service.cache_status().items():
                print(f"{key}: {value}")
            return 0

        listing = asyncio.run(
            service.list_trends(
                source=args.source,
                category=args.category,
                region=args.region,
                limit=args.limit,
                fresh=args.fresh,
            )
        )
    except TrendwiseError as e:
        LOGGER.error(f"Could not fetch trends: {e}")
        return 1

    origin = f"cache, {listing.cache_age_minutes} min old" if listing.cached else "live"
    print(f"\n📈 {len(listing.candidates)} trends ({origin})")
    print("=" * 60)
    for rank, trend in enumerate(listing.candidates, 1):
        print(f"{rank:>3}. {trend.keyword:<40} {trend.source.value:<16} {trend.category:<14} {trend.score:>6.1f}")

    if args.save and listing.candidates:
        path = save_trends_snapshot(listing.candidates, settings.data_dir)
        print(f"\n💾 Snapshot saved to {path}")
    return 0


def generate_articles(argv: Optional[List[str]] = None) -> int:
    """Generate articles for the top trends and store them."""
    parser = argparse.ArgumentParser(description="Generate articles from trending topics")
    parser.add_argument("--max-articles", "-m", type=int, help="Maximum articles to generate (default: MAX_ARTICLES_PER_RUN)")
    parser.add_argument("--categories", "-c", help="Comma-separated categories (default: ARTICLE_CATEGORIES)")
    parser.add_argument("--no-cache", dest="use_cache", action="store_false", help="Always fetch fresh trends")
    parser.add_argument("--word-count", type=int, help="Target article length in words")
    parser.add_argument("--tone", help="Article tone (default: ARTICLE_TONE)")
    parser.add_argument("--no-report", dest="report", action="store_false", help="Skip the JSON run report")
    parser.add_argument("--check", action="store_true", help="Only test the text backend connection")
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        service = _service(settings)

        if args.check:
            ok = asyncio.run(service.check_backend())
            print("✅ Text backend reachable" if ok else "❌ Text backend unreachable")
            return 0 if ok else 1

        options = {}
        if args.word_count is not None:
            options["word_count"] = args.word_count
        if args.tone:
            options["tone"] = args.tone

        report = asyncio.run(
            service.run_generation(
                max_articles=args.max_articles,
                categories=_split_csv(args.categories),
                use_cache=args.use_cache,
                options=options,
            )
        )
    except (TrendwiseError, ValueError) as e:
        LOGGER.error(f"Article generation failed: {e}")
        return 1

    print(f"\n📝 {len(report.inserted)} new articles, {len(report.duplicates)} already stored, {len(report.failed)} failed")
    for article in report.articles:
        print(f"  • {article.title} [{article.category}] ({article.word_count} words)")

    if args.report:
        config = {
            "max_articles": args.max_articles if args.max_articles is not None else settings.max_articles_per_run,
            "categories": _split_csv(args.categories) or settings.article_categories,
            "use_cache": args.use_cache,
            "region": settings.region,
        }
        path = save_generation_report(report, settings.data_dir, config)
        print(f"📊 Report saved to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(generate_articles())
