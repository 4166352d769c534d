from pathlib import Path

import pytest

from trendwise.config import Settings
from trendwise.errors import ConfigurationError


def test_from_env_reads_overrides(monkeypatch) -> None:
    monkeypatch.setenv("TRENDS_GEO", "GB")
    monkeypatch.setenv("TRENDS_CACHE_TTL_MINUTES", "15")
    monkeypatch.setenv("ARTICLE_CATEGORIES", "Technology, science,,")
    monkeypatch.setenv("TRENDWISE_DATA_DIR", "/tmp/trendwise-data")
    monkeypatch.setenv("PREFERRED_BACKEND", "claude")

    settings = Settings.from_env(dotenv=False)

    assert settings.region == "GB"
    assert settings.cache_ttl_seconds == 900
    assert settings.article_categories == ["technology", "science"]
    assert settings.data_dir == Path("/tmp/trendwise-data")
    assert settings.preferred_backend == "claude"


def test_defaults_without_environment(monkeypatch) -> None:
    for var in ("TRENDS_GEO", "MAX_ARTICLES_PER_RUN", "ARTICLE_CATEGORIES", "GENERATION_DELAY_SECONDS"):
        monkeypatch.delenv(var, raising=False)

    settings = Settings.from_env(dotenv=False)

    assert settings.region == "US"
    assert settings.max_articles_per_run == 3
    assert settings.article_categories == ["technology", "business", "health"]
    assert settings.generation_delay_seconds == 3.0


def test_malformed_value_is_configuration_error(monkeypatch) -> None:
    monkeypatch.setenv("SIMILARITY_THRESHOLD", "very similar")
    with pytest.raises(ConfigurationError):
        Settings.from_env(dotenv=False)
