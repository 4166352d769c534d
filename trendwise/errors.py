"""Exception hierarchy shared by the fetchers and the generation engine."""
from __future__ import annotations


class TrendwiseError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(TrendwiseError, ValueError):
    """A setting read from the environment is missing or malformed."""


class InvalidParameter(TrendwiseError, ValueError):
    """A caller passed an argument the boundaries refuse (e.g. negative max_articles)."""


class SourceUnavailable(TrendwiseError):
    """A single trend source could not be reached or returned garbage."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class BackendError(TrendwiseError):
    """The generative backend failed."""


class BackendUnavailable(BackendError):
    """Backend unreachable, misconfigured or answered with an error status."""


class BackendTimeout(BackendError):
    """Backend did not answer in time."""


class GenerationError(TrendwiseError):
    """An article could not be produced for a topic."""


class PersistenceUnavailable(TrendwiseError):
    """The article store could not be reached. Never swallowed."""
