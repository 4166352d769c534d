"""Trend sources and the aggregator that merges them."""

from .aggregator import AggregationResult, TrendAggregator, parse_sources
from .base import SourceAdapter, StaticAdapter
from .cache import InMemoryTrendCache, JsonFileTrendCache, TrendCache
from .models import RawCandidate, TopicCandidate, TrendSource

__all__ = [
    "AggregationResult",
    "InMemoryTrendCache",
    "JsonFileTrendCache",
    "RawCandidate",
    "SourceAdapter",
    "StaticAdapter",
    "TopicCandidate",
    "TrendAggregator",
    "TrendCache",
    "TrendSource",
    "parse_sources",
]
