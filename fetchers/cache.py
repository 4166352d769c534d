"""Short-TTL cache for the most recent aggregation.

Readers get an immutable snapshot; only the aggregator (or an explicit
refresh/clear) replaces it.
"""
from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Tuple

from .models import TopicCandidate

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass(frozen=True)
class CacheEntry:
    candidates: Tuple[TopicCandidate, ...]
    stored_at: float
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def age_seconds(self, now: float) -> float:
        return max(now - self.stored_at, 0.0)


class TrendCache(ABC):
    """Single-slot cache: ``get() -> (candidates, fresh)``, ``set``, ``clear``."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    @abstractmethod
    def entry(self) -> CacheEntry | None:
        """Return the stored entry regardless of age."""

    @abstractmethod
    def _store(self, entry: CacheEntry | None) -> None:
        ...

    def now(self) -> float:
        return self._clock()

    def age_seconds(self) -> float | None:
        entry = self.entry()
        return None if entry is None else entry.age_seconds(self.now())

    def is_fresh(self, entry: CacheEntry | None = None) -> bool:
        entry = entry if entry is not None else self.entry()
        return entry is not None and entry.age_seconds(self.now()) < self.ttl_seconds

    def get(self) -> Tuple[List[TopicCandidate], bool]:
        entry = self.entry()
        if entry is None:
            return [], False
        return list(entry.candidates), self.is_fresh(entry)

    def set(self, candidates: Iterable[TopicCandidate]) -> CacheEntry:
        entry = CacheEntry(candidates=tuple(candidates), stored_at=self.now())
        self._store(entry)
        logger.debug(f"Cached {len(entry.candidates)} trend candidates")
        return entry

    def clear(self) -> None:
        self._store(None)
        logger.info("Trend cache cleared")


class InMemoryTrendCache(TrendCache):
    """Process-local cache."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(ttl_seconds, clock)
        self._entry: CacheEntry | None = None

    def entry(self) -> CacheEntry | None:
        return self._entry

    def _store(self, entry: CacheEntry | None) -> None:
        self._entry = entry


class JsonFileTrendCache(TrendCache):
    """Cache persisted as a JSON snapshot so separate CLI runs can share it.

    Uses wall-clock time because a monotonic clock does not survive the process.
    """

    def __init__(self, path: Path, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time) -> None:
        super().__init__(ttl_seconds, clock)
        self.path = Path(path)

    def entry(self) -> CacheEntry | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return CacheEntry(
                candidates=tuple(TopicCandidate.model_validate(c) for c in data["candidates"]),
                stored_at=float(data["stored_at"]),
                fetched_at=datetime.fromisoformat(data["fetched_at"]),
            )
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable trend cache {self.path}: {e}")
            return None

    def _store(self, entry: CacheEntry | None) -> None:
        if entry is None:
            self.path.unlink(missing_ok=True)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "stored_at": entry.stored_at,
            "fetched_at": entry.fetched_at.isoformat(),
            "candidates": [c.model_dump(mode="json") for c in entry.candidates],
        }
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
