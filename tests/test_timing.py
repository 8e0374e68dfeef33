"""Tests for the submission timing impact analyzer."""

import random

import pytest

from superlatives.ingest import build_league
from superlatives.timing import (
    analyze_submission_timing,
    build_submission_records,
    calculate_submission_timing_awards,
    impact_score,
    performance_ranks,
    quartile_size,
)


def _analyze(league, seed=7):
    return analyze_submission_timing(
        league.competitors, league.rounds, league.submissions, league.votes, rng=random.Random(seed)
    )


class TestSubmissionRecords:
    def test_order_fraction_and_relative_time(self):
        league = build_league(
            competitors=[{"ID": "a", "Name": "Alice"}, {"ID": "b", "Name": "Bob"}],
            rounds=[{"ID": "r1", "Name": "Round 1"}, {"ID": "r2", "Name": "Round 2"}],
            submissions=[
                {"Spotify URI": "late", "Submitter ID": "a", "Round ID": "r1", "Created": "2024-01-01T12:00:00Z"},
                {"Spotify URI": "early", "Submitter ID": "b", "Round ID": "r1", "Created": "2024-01-01T10:00:00Z"},
                {"Spotify URI": "mid", "Submitter ID": "ghost", "Round ID": "r1", "Created": "2024-01-01T10:30:00Z"},
                {"Spotify URI": "solo", "Submitter ID": "a", "Round ID": "r2", "Created": "2024-01-08T10:00:00Z"},
                {"Spotify URI": "undated", "Submitter ID": "a", "Round ID": "r2", "Created": ""},
                {"Spotify URI": "lost", "Submitter ID": "a", "Round ID": "nope", "Created": "2024-01-08T10:00:00Z"},
            ],
            votes=[
                {"Voter ID": "b", "Spotify URI": "late", "Round ID": "r1", "Points Assigned": "4"},
                {"Voter ID": "a", "Spotify URI": "early", "Round ID": "r1", "Points Assigned": "1"},
            ],
        )
        records = build_submission_records(league.competitors, league.rounds, league.submissions, league.votes)

        assert [r["uri"] for r in records] == ["early", "mid", "late", "solo"]
        assert [r["order"] for r in records] == [1, 2, 3, 1]
        assert [r["order_fraction"] for r in records] == [0.0, 0.5, 1.0, 0.5]
        assert [r["relative_time"] for r in records] == pytest.approx([0.0, 0.25, 1.0, 0.0])
        assert [r["votes"] for r in records] == [1, 0, 4, 0]
        assert records[1]["submitter_name"] == "Unknown Competitor"
        assert records[3]["round_number"] == 2
        assert records[0]["order_total"] == 3
        assert [r["performance_rank"] for r in records] == [0.5, 0.0, 1.0, 0.5]
        assert [r["relative_votes"] for r in records] == [0.25, 0.0, 1.0, 0.5]

    def test_insufficient_data(self, two_player_league):
        result = _analyze(two_player_league)
        assert result["overall"]["direction"] == "insufficient-data"
        assert result["overall"]["p_value"] == 1.0
        assert result["competitor_stats"] == {}
        assert result["best_competitor"] is None
        assert result["ranked_competitors"] == []


class TestTimingImpact:
    def test_later_submissions_score_more(self, season_league):
        result = _analyze(season_league)
        overall = result["overall"]

        assert overall["sample_size"] == 16
        assert overall["iterations"] == 3500
        assert overall["coefficient"] == pytest.approx(1.0)
        assert overall["direction"] == "later-better"
        assert overall["is_significant"] is True
        assert overall["p_value"] < 0.01
        # Quartile of 16 records is 4: first-position songs get 3 points, last get 12.
        assert overall["early_avg_votes"] == pytest.approx(3.0)
        assert overall["late_avg_votes"] == pytest.approx(12.0)
        assert overall["difference"] == pytest.approx(9.0)

    def test_competitor_stats_and_ranking(self, season_league):
        result = _analyze(season_league)
        stats = result["competitor_stats"]

        assert set(stats) == {"a", "b", "c", "d"}
        for stat in stats.values():
            assert stat["sample_size"] == 4
            assert stat["coefficient"] == pytest.approx(1.0)
            # Half split: positions 1-2 average 4.5 points, positions 3-4 average 10.5.
            assert stat["early_avg_votes"] == pytest.approx(4.5)
            assert stat["late_avg_votes"] == pytest.approx(10.5)
            assert stat["impact_score"] == pytest.approx(6.0)

        assert [s["competitor"].id for s in result["ranked_competitors"]] == ["a", "b", "c", "d"]
        assert result["best_competitor"]["competitor"].id == "a"

    def test_unknown_competitors_are_not_ranked(self, season_league):
        people = tuple(c for c in season_league.competitors if c.id != "d")
        result = analyze_submission_timing(
            people, season_league.rounds, season_league.submissions, season_league.votes, rng=random.Random(1)
        )
        assert result["competitor_stats"]["d"]["competitor"] is None
        assert "d" not in [s["competitor"].id for s in result["ranked_competitors"]]

    def test_seeded_runs_are_identical(self, season_league):
        assert _analyze(season_league, seed=3) == _analyze(season_league, seed=3)


@pytest.mark.parametrize("n,expected", [(1, 1), (3, 1), (4, 1), (5, 2), (16, 4), (17, 5)])
def test_quartile_size_rounds_up(n, expected):
    assert quartile_size(n) == expected


class TestImpactScore:
    STAT = {"coefficient": -0.4, "early_avg_votes": 8.0, "late_avg_votes": 5.0, "difference": -3.0}

    def test_earlier_better(self):
        assert impact_score(self.STAT, "earlier-better") == pytest.approx(3.0)

    def test_later_better(self):
        assert impact_score(self.STAT, "later-better") == pytest.approx(-3.0)

    def test_neutral_uses_coefficient_magnitude(self):
        assert impact_score(self.STAT, "neutral") == pytest.approx(0.4)

    def test_missing_averages_fall_back_to_difference(self):
        stat = dict(self.STAT, early_avg_votes=None)
        assert impact_score(stat, "earlier-better") == pytest.approx(3.0)


@pytest.mark.parametrize(
    "totals,expected",
    [([7], [0.5]), ([1, 9], [0.0, 1.0]), ([5, 5, 1], [0.75, 0.75, 0.0]), ([3, 6, 9, 12], [0.0, 1 / 3, 2 / 3, 1.0])],
)
def test_performance_ranks(totals, expected):
    assert performance_ranks(totals) == pytest.approx(expected)


class TestRoundAndBucketSummaries:
    def test_round_summaries(self, season_league):
        summaries = _analyze(season_league)["round_summaries"]
        assert [s["round_id"] for s in summaries] == ["r1", "r2", "r3", "r4"]
        first = summaries[0]
        assert first["submission_count"] == 4
        assert first["span_hours"] == pytest.approx(3.0)
        assert (first["min_votes"], first["max_votes"]) == (3, 12)
        assert first["mean_votes"] == pytest.approx(7.5)
        assert first["std_votes"] == pytest.approx(15 ** 0.5)

    def test_bucket_averages(self, season_league):
        buckets = _analyze(season_league)["bucket_averages"]
        assert len(buckets) == 8
        assert [b["count"] for b in buckets] == [4, 0, 4, 0, 0, 4, 0, 4]
        assert buckets[0]["label"] == "0-13%"
        assert buckets[7]["label"] == "88-100%"
        assert buckets[0]["average_votes"] == pytest.approx(3.0)
        assert buckets[7]["average_votes"] == pytest.approx(12.0)
        assert buckets[7]["average_performance"] == pytest.approx(1.0)
        assert buckets[1]["average_votes"] is None


# Submission order per round and the points each song receives from "x".
_SPLIT_ROUNDS = {
    "r1": [("a", 10), ("b", 5), ("c", 3), ("d", 8)],
    "r2": [("a", 10), ("b", 5), ("c", 3), ("d", 8)],
    "r3": [("c", 1), ("d", 2), ("a", 3), ("b", 5)],
    "r4": [("c", 1), ("d", 2), ("a", 3), ("b", 5)],
}


def _split_league(skip=()):
    submissions = []
    votes = []
    for k, (round_id, entries) in enumerate(_SPLIT_ROUNDS.items(), start=1):
        for position, (pid, points) in enumerate(entries):
            uri = f"{pid}-{round_id}"
            if uri in skip:
                continue
            submissions.append(
                {
                    "Spotify URI": uri,
                    "Submitter ID": pid,
                    "Round ID": round_id,
                    "Created": f"2024-01-0{k}T1{position}:00:00Z",
                }
            )
            votes.append({"Voter ID": "x", "Spotify URI": uri, "Round ID": round_id, "Points Assigned": str(points)})
    return build_league(
        competitors=[{"ID": "a", "Name": "Alice"}, {"ID": "b", "Name": "Bob"}, {"ID": "c", "Name": "Carol"}, {"ID": "d", "Name": "Dan"}],
        rounds=[{"ID": rid, "Name": rid.upper()} for rid in _SPLIT_ROUNDS],
        submissions=submissions,
        votes=votes,
    )


def _timing_awards(league):
    return calculate_submission_timing_awards(league.competitors, league.rounds, league.submissions, league.votes)


class TestSubmissionTimingAwards:
    def test_early_submitter(self):
        early = _timing_awards(_split_league())["early_submitter"]
        # Alice tops both rounds she opens and places second in both she submits late.
        assert early["competitor"].id == "a"
        assert early["leaning"] == "early"
        assert early["performance_delta"] == pytest.approx(1 / 3)
        assert early["vote_delta"] == pytest.approx(7.0)
        assert (early["early_count"], early["late_count"], early["sample_size"]) == (2, 2, 4)
        # Carol finishes last whether early or late, so she leans neither way.
        assert early["rest_of_field"] == []

    def test_late_submitter(self):
        late = _timing_awards(_split_league())["late_submitter"]
        assert late["competitor"].id == "b"
        assert late["performance_delta"] == pytest.approx(-2 / 3)
        assert late["performance_delta_display"] == "-0.67"
        assert late["rest_of_field"] == [{"name": "Dan", "score": "-0.33 standing (2 early / 2 late)"}]

    def test_needs_four_songs_split_across_halves(self):
        awards = _timing_awards(_split_league(skip={"a-r4"}))
        for award in awards.values():
            if award["competitor"] is not None:
                assert award["competitor"].id != "a"
            assert "Alice" not in [row["name"] for row in award["rest_of_field"]]

    def test_uniform_effect_ties_everyone(self, season_league):
        awards = _timing_awards(season_league)
        assert awards["early_submitter"]["competitor"] is None
        late = awards["late_submitter"]
        assert late["is_tied"] is True
        assert late["tied_winners"] == ["Alice", "Bob", "Carol", "Dan"]
        assert late["performance_delta"] == pytest.approx(-2 / 3)
