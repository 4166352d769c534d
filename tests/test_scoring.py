import pytest

from fetchers.models import RawCandidate, TrendSource
from fetchers.scoring import parse_traffic, score_candidate, score_rank, score_traffic, score_upvotes
from trendwise.config import ScoringRules

RULES = ScoringRules()


@pytest.mark.parametrize(
    "value, expected",
    [
        ("200K+", 200_000),
        ("2,000+", 2_000),
        ("1.5M", 1_500_000),
        (50_000, 50_000),
        ("lots", None),
        (None, None),
    ],
)
def test_parse_traffic(value, expected) -> None:
    assert parse_traffic(value) == expected


def test_traffic_buckets() -> None:
    assert score_traffic("2M+", RULES) == 100
    assert score_traffic("500K+", RULES) == 90
    assert score_traffic("200K+", RULES) == 80
    assert score_traffic("20K+", RULES) == 60
    assert score_traffic("1,000+", RULES) == 40
    assert score_traffic("500+", RULES) == 30
    assert score_traffic(None, RULES) == 10


def test_rank_decay_has_floor() -> None:
    assert score_rank(1, RULES) == 100
    assert score_rank(3, RULES) == 90
    assert score_rank(19, RULES) == 10
    assert score_rank(50, RULES) == 10


def test_upvotes_capped() -> None:
    assert score_upvotes(5_000, RULES) == 50
    assert score_upvotes(50_000, RULES) == 100
    assert score_upvotes(None, RULES) == 0


def test_score_candidate_dispatches_by_source() -> None:
    search = RawCandidate(keyword="a", source=TrendSource.SEARCH_TRENDS, traffic="100K+", position=7)
    social = RawCandidate(keyword="b", source=TrendSource.SOCIAL_TRENDS, position=2, traffic="1M+")
    link = RawCandidate(keyword="c", source=TrendSource.LINK_AGGREGATOR, upvotes=2_500)
    manual = RawCandidate(keyword="d", source=TrendSource.MANUAL, score=42.5)

    assert score_candidate(search, RULES) == 80
    assert score_candidate(social, RULES) == 95
    assert score_candidate(link, RULES) == 25
    assert score_candidate(manual, RULES) == 42.5
