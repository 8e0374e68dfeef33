"""Tests for the aggregation facade."""

import random

import pytest

from superlatives import AWARD_KEYS, EXPLANATIONS, League, compute_all_superlatives, compute_award, compute_league_report
from superlatives.explanations import get_explanation

_GROUPS = {
    "most_compatible": ("compatibility",),
    "least_compatible": ("compatibility",),
    "most_similar": ("similarity",),
    "least_similar": ("similarity",),
    "early_voter": ("voting_timing",),
    "late_voter": ("voting_timing",),
    "mainstream": ("spotify",),
    "trend_setter": ("spotify",),
    "early_submitter": ("submission_timing",),
    "late_submitter": ("submission_timing",),
}


def _nested(results, key):
    for group in _GROUPS.get(key, ()):
        results = results[group]
    return results[key]


def test_result_layout(season_league):
    results = compute_all_superlatives(season_league)
    assert set(results) == {
        "most_popular", "least_popular", "most_average", "best_performance",
        "longest_comment", "most_comments", "compatibility", "similarity",
        "voting_timing", "spotify", "vote_spreader", "zero_vote_giver",
        "single_vote_giver", "max_vote_giver", "comeback_kid", "doesnt_vote",
        "submission_timing",
    }
    assert set(results["compatibility"]) == {"most_compatible", "least_compatible"}
    assert set(results["similarity"]) == {"most_similar", "least_similar"}
    assert set(results["voting_timing"]) == {"early_voter", "late_voter"}
    assert set(results["spotify"]) == {"mainstream", "trend_setter"}
    assert set(results["submission_timing"]) == {"early_submitter", "late_submitter"}


@pytest.mark.parametrize("key", AWARD_KEYS)
def test_single_award_matches_facade(season_league, key):
    assert compute_award(season_league, key) == _nested(compute_all_superlatives(season_league), key)


def test_award_key_is_normalized(two_player_league):
    assert compute_award(two_player_league, "  Most_Popular ")["points"] == 5


def test_unknown_award(two_player_league):
    with pytest.raises(ValueError, match="Unknown award"):
        compute_award(two_player_league, "best_dancer")


def test_recomputing_gives_the_same_results(season_league):
    assert compute_all_superlatives(season_league) == compute_all_superlatives(season_league)


def test_season_highlights(season_league):
    results = compute_all_superlatives(season_league)

    # Every competitor occupies every submission position once, so points tie.
    popular = results["most_popular"]
    assert popular["is_tied"] is True
    assert popular["tied_winners"] == ["Alice", "Bob", "Carol", "Dan"]
    assert popular["points"] == 30

    comments = results["most_comments"]
    assert comments["competitor"].id == "a"
    assert comments["comment_count"] == 12

    assert results["doesnt_vote"]["competitor"] is None


@pytest.mark.parametrize("key", AWARD_KEYS)
def test_empty_league_has_no_winners(key):
    result = compute_award(League(), key)
    assert result.get("competitor") is None
    assert result.get("competitor1") is None
    assert result["is_tied"] is False
    assert result["rest_of_field"] == []


def test_league_report(season_league):
    report = compute_league_report(season_league, rng=random.Random(11))
    assert report["meta"] == {
        "competitors": 4,
        "rounds": 4,
        "submissions": 16,
        "votes": 48,
        "award_keys": list(AWARD_KEYS),
    }
    assert report["superlatives"] == compute_all_superlatives(season_league)
    assert report["submission_timing"]["overall"]["direction"] == "later-better"


def test_every_award_is_explained():
    for key in AWARD_KEYS:
        assert EXPLANATIONS[key]
    assert get_explanation("submission_timing")
    assert get_explanation("nope") is None
