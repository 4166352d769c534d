"""Source adapter contract."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List

from .models import RawCandidate, TrendSource


class SourceAdapter(ABC):
    """One external trend source.

    ``fetch`` may raise anything; the aggregator treats every exception
    (except cancellation) as "this source contributed nothing".
    """

    source: TrendSource

    @abstractmethod
    async def fetch(self, region: str, category: str | None = None) -> List[RawCandidate]:
        """Return raw candidates for *region*, best first."""
        ...

    @property
    def is_available(self) -> bool:
        """Whether the source is configured (credentials etc.)."""
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self.source.value!r})"


class StaticAdapter(SourceAdapter):
    """Serves a fixed candidate list. Used for manual topics and offline runs."""

    def __init__(self, candidates: Iterable[RawCandidate], source: TrendSource = TrendSource.MANUAL) -> None:
        self.source = source
        self._candidates = list(candidates)

    async def fetch(self, region: str, category: str | None = None) -> List[RawCandidate]:
        return list(self._candidates)
