"""Source-specific popularity scoring.

Every source reports popularity differently (search traffic, rank on a
trends board, upvotes) so each gets its own rule mapping onto a common
0-100 scale.
"""
from __future__ import annotations

import re

from trendwise.config import ScoringRules

from .models import RawCandidate, TrendSource

_NUMBER_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*([kKmM])?")


def parse_traffic(value: str | int | None) -> int | None:
    """Convert a traffic string (``'200K+'``, ``'2,000+'``, ``'1.5M'``) to an int.

    Returns ``None`` when nothing numeric can be found.
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value

    match = _NUMBER_RE.search(value.replace("searches", ""))
    if not match:
        return None
    try:
        number = float(match.group(1).replace(",", ""))
    except ValueError:
        return None
    suffix = (match.group(2) or "").lower()
    if suffix == "k":
        number *= 1_000
    elif suffix == "m":
        number *= 1_000_000
    return int(number)


def score_traffic(traffic: str | int | None, rules: ScoringRules) -> float:
    count = parse_traffic(traffic)
    if count is None:
        return rules.missing_traffic_score
    for threshold, score in rules.traffic_buckets:
        if count >= threshold:
            return score
    return rules.traffic_floor


def score_rank(position: int | None, rules: ScoringRules) -> float:
    """Pure rank decay; position 1 gets ``rank_start``."""
    if position is None:
        return rules.rank_floor
    return max(rules.rank_start - rules.rank_step * (position - 1), rules.rank_floor)


def score_upvotes(upvotes: int | None, rules: ScoringRules) -> float:
    if not upvotes or upvotes < 0:
        return 0.0
    return min(upvotes / rules.upvote_divisor, rules.upvote_cap)


def score_candidate(raw: RawCandidate, rules: ScoringRules) -> float:
    """Dispatch to the scoring rule for *raw*'s source."""
    if raw.source is TrendSource.SEARCH_TRENDS:
        return score_traffic(raw.traffic, rules)
    if raw.source is TrendSource.SOCIAL_TRENDS:
        return score_rank(raw.position, rules)
    if raw.source is TrendSource.LINK_AGGREGATOR:
        return score_upvotes(raw.upvotes, rules)
    return max(raw.score or 0.0, 0.0)
