"""Fuzzy keyword comparison based on Levenshtein edit distance."""
from __future__ import annotations

from typing import Iterable, List

from .models import TopicCandidate


def levenshtein(a: str, b: str) -> int:
    """Return the edit distance between *a* and *b* (insert/delete/substitute cost 1)."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]: ``(max_len - distance) / max_len``."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein(a, b)) / longest


def deduplicate(candidates: Iterable[TopicCandidate], threshold: float = 0.8) -> List[TopicCandidate]:
    """Drop every candidate more than *threshold* similar to one already kept.

    First seen wins, so input order is the tie-break.
    """
    accepted: List[TopicCandidate] = []
    seen: List[str] = []
    for candidate in candidates:
        key = candidate.normalized_keyword
        if any(similarity(key, other) > threshold for other in seen):
            continue
        seen.append(key)
        accepted.append(candidate)
    return accepted
