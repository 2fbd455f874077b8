import pytest

from cerebro.resolution.player_resolver import (
    PlayerResolver,
    Resolution,
    name_similarity,
    normalize_name,
    pick_best_match,
    tokenize_name,
)


class CountingStore:
    """Wraps a PlayerStore and counts full-record fetches."""

    def __init__(self, inner):
        self.inner = inner
        self.fetched = []

    def search(self, **kwargs):
        return self.inner.search(**kwargs)

    def get(self, player_id):
        self.fetched.append(player_id)
        return self.inner.get(player_id)


def test_normalize_name_strips_punctuation_and_whitespace():
    assert normalize_name("  Marcus   Johnson-Reed!! ") == "marcus johnson reed"
    assert normalize_name(None) == ""
    assert tokenize_name("D'Angelo  Russell") == ["d", "angelo", "russell"]


@pytest.mark.parametrize(
    "a,b",
    [("Jane Doe", "Doe Jane"), ("Marcus Reed", "Marcus Johnson-Reed"), ("John", "John Smith"), ("", "x y")],
)
def test_similarity_is_symmetric(a, b):
    assert name_similarity(a, b) == name_similarity(b, a)


def test_similarity_bounds():
    assert name_similarity("Jane Doe", "doe, jane") == 1.0
    assert name_similarity("Jane Doe", "John Smith") == 0.0
    assert name_similarity("", "") == 0.0
    assert name_similarity("Marcus Reed", "Marcus Johnson-Reed") == pytest.approx(2 / 3)


def test_exact_match_fetches_player(store):
    counting = CountingStore(store)
    result = PlayerResolver(counting).resolve("JANE doe")
    assert result.kind == Resolution.EXACT
    assert result.player["unique_id"] == "p1"
    assert counting.fetched == ["p1"]
    evidence = result.to_evidence()
    assert evidence["resolution"] == "exact"
    assert evidence["resolvedName"] == "Jane Doe"
    assert evidence["player"]["pts_g"] == pytest.approx(18.2)
    assert result.tool_used == "search_players+get_player_by_id"


def test_duplicate_exact_names_never_fetch(store):
    counting = CountingStore(store)
    result = PlayerResolver(counting).resolve("John Smith")
    assert result.kind == Resolution.DUPLICATE_EXACT_NAME
    assert result.is_ambiguous
    assert {c["unique_id"] for c in result.candidates} == {"p2", "p3"}
    assert counting.fetched == []
    assert result.to_evidence()["ambiguity"] == "duplicate_exact_name"
    assert result.tool_used == "search_players"


def test_single_substring_candidate_is_fetched(store):
    result = PlayerResolver(store).resolve("Ava")
    assert result.kind == Resolution.SINGLE_CANDIDATE
    assert result.player["unique_id"] == "p6"
    assert "candidateMatches" not in result.to_evidence()


def test_token_fallback_single_survivor(store):
    result = PlayerResolver(store).resolve("Jane Q. Doe")
    assert result.kind == Resolution.FUZZY_SINGLE
    assert result.player["unique_id"] == "p1"
    assert result.candidates[0]["similarity_score"] == pytest.approx(0.6667, abs=1e-4)


def test_token_fallback_several_survivors_are_ambiguous(store):
    counting = CountingStore(store)
    result = PlayerResolver(counting).resolve("Marcus T Reed")
    assert result.kind == Resolution.SIMILAR_NAME_CANDIDATES
    assert {c["unique_id"] for c in result.candidates} == {"p4", "p5"}
    assert all(c["similarity_score"] >= 0.45 for c in result.candidates)
    assert counting.fetched == []


def test_several_substring_hits_without_exact_match_is_no_match(store):
    result = PlayerResolver(store).resolve("John")
    assert result.kind == Resolution.NO_MATCH
    assert {p["unique_id"] for p in result.to_evidence()} == {"p2", "p3", "p4"}


def test_nothing_similar_is_no_match(store):
    result = PlayerResolver(store).resolve("Zed Quux")
    assert result.kind == Resolution.NO_MATCH
    assert result.to_evidence() == []
    assert result.player is None


def test_candidates_capped_at_five():
    from conftest import make_store

    rows = [
        {"unique_id": f"d{i}", "name_split": "Chris Lee", "team": f"T{i}", "position": "G", "g": 10}
        for i in range(8)
    ]
    result = PlayerResolver(make_store(rows)).resolve("Chris Lee")
    assert result.kind == Resolution.DUPLICATE_EXACT_NAME
    assert len(result.candidates) == 5


def test_pick_best_match_prefers_exact_then_prefix():
    matches = [
        {"unique_id": "a", "name_split": "Big Jane Doe"},
        {"unique_id": "b", "name_split": "Jane Doe Jr"},
        {"unique_id": "c", "name_split": "Jane Doe"},
    ]
    assert pick_best_match("jane doe", matches)["unique_id"] == "c"
    assert pick_best_match("jane", matches)["unique_id"] == "b"
    assert pick_best_match("doe", matches)["unique_id"] == "a"
    assert pick_best_match("zzz", matches)["unique_id"] == "a"
    assert pick_best_match("jane", []) is None
