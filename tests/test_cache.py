from pathlib import Path

from conftest import make_candidate

from fetchers.cache import InMemoryTrendCache, JsonFileTrendCache


def test_in_memory_cache_freshness() -> None:
    now = [0.0]
    cache = InMemoryTrendCache(ttl_seconds=60, clock=lambda: now[0])
    assert cache.get() == ([], False)

    cache.set([make_candidate("Eclipse")])
    now[0] = 59
    candidates, fresh = cache.get()
    assert [c.keyword for c in candidates] == ["Eclipse"] and fresh

    now[0] = 60
    assert cache.get()[1] is False

    cache.clear()
    assert cache.entry() is None


def test_json_file_cache_survives_new_instance(tmp_path: Path) -> None:
    path = tmp_path / "cache" / "trends.json"
    now = [1_000.0]
    writer = JsonFileTrendCache(path, ttl_seconds=1_800, clock=lambda: now[0])
    writer.set([make_candidate("Eclipse", score=70, url="https://example.com")])

    reader = JsonFileTrendCache(path, ttl_seconds=1_800, clock=lambda: now[0] + 120)
    candidates, fresh = reader.get()

    assert fresh
    assert candidates[0].keyword == "Eclipse"
    assert candidates[0].metadata["url"] == "https://example.com"
    assert reader.age_seconds() == 120

    reader.clear()
    assert not path.exists()


def test_json_file_cache_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "trends.json"
    path.write_text("{not json", encoding="utf-8")

    assert JsonFileTrendCache(path).get() == ([], False)
