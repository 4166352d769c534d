from conftest import make_candidate

from fetchers.similarity import deduplicate, levenshtein, similarity


def test_levenshtein_basic_distances() -> None:
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("same", "same") == 0


def test_similarity_is_normalized() -> None:
    assert similarity("", "") == 1.0
    assert similarity("abc", "xyz") == 0.0
    assert round(similarity("quantum computing", "quantum computing!!"), 3) == 0.895


def test_deduplicate_keeps_first_seen() -> None:
    first = make_candidate("Artificial Intelligence", score=90)
    typo = make_candidate("artificial inteligence", score=95)
    other = make_candidate("Climate Summit", score=40)

    unique = deduplicate([first, typo, other])

    assert [c.keyword for c in unique] == ["Artificial Intelligence", "Climate Summit"]


def test_deduplicate_threshold_is_strict() -> None:
    # "abcde" vs "abcdx": similarity exactly 0.8, so both survive at 0.8
    a = make_candidate("abcde")
    b = make_candidate("abcdx")
    assert len(deduplicate([a, b], threshold=0.8)) == 2
    assert len(deduplicate([a, b], threshold=0.79)) == 1
