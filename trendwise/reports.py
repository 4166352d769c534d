"""Run artifacts written under ``<data_dir>/reports``."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from fetchers.models import TopicCandidate
from generation_engine.orchestrator import BatchReport

logger = logging.getLogger(__name__)

SNAPSHOT_COLUMNS = ["rank", "keyword", "source", "category", "score", "fetched_at", "url"]


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d_%H-%M-%S")


def trends_frame(candidates: Iterable[TopicCandidate]) -> pd.DataFrame:
    """Flatten ranked candidates into a DataFrame, one row per trend."""
    rows = []
    for rank, candidate in enumerate(candidates, 1):
        rows.append({
            "rank": rank,
            "keyword": candidate.keyword,
            "source": candidate.source.value,
            "category": candidate.category,
            "score": candidate.score,
            "fetched_at": candidate.fetched_at.isoformat(),
            "url": candidate.metadata.get("url", ""),
        })
    return pd.DataFrame(rows, columns=SNAPSHOT_COLUMNS)


def save_trends_snapshot(candidates: Iterable[TopicCandidate], data_dir: Path) -> Path:
    reports_dir = Path(data_dir) / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = reports_dir / f"trends_{_timestamp()}.csv"
    df = trends_frame(candidates)
    df.to_csv(path, index=False)
    logger.info(f"Saved {len(df)} trends to {path}")
    return path


def generation_summary(report: BatchReport, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build the JSON-ready summary of one generation run."""
    selected = len(report.selected)
    return {
        "timestamp": datetime.now().isoformat(),
        "config": config or {},
        "trends_used": len(report.selected),
        "used_cache": report.used_cache,
        "trends": [
            {"keyword": t.keyword, "source": t.source.value, "category": t.category, "score": t.score}
            for t in report.selected
        ],
        "articles_generated": len(report.inserted),
        "articles_already_stored": len(report.duplicates),
        "failed_trends": [t.keyword for t in report.failed],
        "articles": [
            {"title": a.title, "slug": a.slug, "category": a.category, "tags": list(a.tags), "word_count": a.word_count}
            for a in report.articles
        ],
        "success_rate": round(len(report.articles) / selected * 100, 1) if selected else 0.0,
    }


def save_generation_report(report: BatchReport, data_dir: Path, config: Optional[Dict[str, Any]] = None) -> Path:
    reports_dir = Path(data_dir) / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = reports_dir / f"generation_{_timestamp()}.json"
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(generation_summary(report, config), f, indent=2, default=str)
    logger.info(f"Generation report saved to {path}")
    return path
