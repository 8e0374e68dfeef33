"""Tests for raw record ingestion and coercion."""

import datetime as dt
import logging

import pytest

from superlatives.ingest import annotate_popularity, build_league, extract_track_id, normalize_rounds, sanitize_rows
from superlatives.types import Competitor, coerce_points, parse_timestamp


class TestCoercePoints:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("5", 5),
            (" 3 pts", 3),
            ("7.9", 7),
            ("-2", -2),
            ("+4", 4),
            (4.0, 4),
            (6, 6),
            ("abc", 0),
            ("", 0),
            (None, 0),
            (float("nan"), 0),
        ],
    )
    def test_lenient_integer_parse(self, raw, expected):
        assert coerce_points(raw) == expected


class TestParseTimestamp:
    def test_trailing_z_is_utc(self):
        parsed = parse_timestamp("2024-03-01T10:15:00Z")
        assert parsed == dt.datetime(2024, 3, 1, 10, 15, tzinfo=dt.timezone.utc)

    def test_naive_is_treated_as_utc(self):
        parsed = parse_timestamp("2024-03-01 10:15:00")
        assert parsed is not None
        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == dt.timedelta(0)

    def test_offset_is_converted_to_utc(self):
        parsed = parse_timestamp("2024-03-01T12:15:00+02:00")
        assert parsed == dt.datetime(2024, 3, 1, 10, 15, tzinfo=dt.timezone.utc)

    @pytest.mark.parametrize("raw", [None, "", "   ", "not a date", "2024-13-45"])
    def test_unparseable_is_none(self, raw):
        assert parse_timestamp(raw) is None


class TestSanitizeRows:
    def test_drops_blank_non_mapping_and_incomplete_rows(self):
        rows = [
            {"Voter ID": "a", "Spotify URI": "s1", "Round ID": "r1"},
            {"Voter ID": "", "Spotify URI": "", "Round ID": ""},
            "garbage",
            None,
            {"Voter ID": "a", "Spotify URI": "", "Round ID": "r1"},
        ]
        kept = sanitize_rows(rows, ("Voter ID", "Spotify URI", "Round ID"))
        assert kept == [rows[0]]

    def test_none_is_empty(self):
        assert sanitize_rows(None) == []


def test_rounds_keep_position_even_when_blank():
    rounds = normalize_rounds([{"ID": "r1", "Name": "One"}, {"ID": "  "}, "junk", {"ID": "r4", "Name": "Four"}])
    assert [r.sequence_index for r in rounds] == [0, 1, 2, 3]
    assert [r.is_valid for r in rounds] == [True, False, False, True]
    assert rounds[3].id == "r4"


class TestBuildLeague:
    def test_normalizes_records(self, two_player_records):
        league = build_league(**two_player_records)
        assert league.competitors == (Competitor("a", "Alice"), Competitor("b", "Bob"))
        assert [r.id for r in league.rounds] == ["r1", "r2"]
        assert [s.uri for s in league.submissions] == ["s1", "s2"]
        assert [v.points for v in league.votes] == [5, 3]
        assert league.votes[0].comment == ""

    def test_non_numeric_points_become_zero(self, two_player_records):
        two_player_records["votes"][0]["Points Assigned"] = "lots"
        del two_player_records["votes"][1]["Points Assigned"]
        league = build_league(**two_player_records)
        assert [v.points for v in league.votes] == [0, 0]

    def test_dropped_rows_are_logged(self, two_player_records, caplog):
        two_player_records["votes"].append({"Voter ID": "", "Spotify URI": "", "Round ID": ""})
        with caplog.at_level(logging.WARNING, logger="superlatives.ingest"):
            league = build_league(**two_player_records)
        assert len(league.votes) == 2
        assert "dropped" in caplog.text

    def test_empty_input(self):
        league = build_league()
        assert league.competitors == ()
        assert league.rounds == ()
        assert league.submissions == ()
        assert league.votes == ()

    def test_popularity_is_merged(self):
        league = build_league(
            submissions=[
                {"Spotify URI": "spotify:track:abc", "Submitter ID": "a", "Round ID": "r1"},
                {"Spotify URI": "spotify:track:def", "Submitter ID": "a", "Round ID": "r1"},
            ],
            popularity={"abc": {"popularity": 70}},
        )
        assert [s.popularity for s in league.submissions] == [70.0, None]

    def test_competitor_lookup_keeps_first_duplicate(self):
        league = build_league(competitors=[{"ID": "a", "Name": "Alice"}, {"ID": "a", "Name": "Impostor"}])
        assert league.competitor_by_id() == {"a": Competitor("a", "Alice")}


@pytest.mark.parametrize(
    "uri,expected",
    [
        ("spotify:track:4uLU6hMCjMI75M1A2tKUQC", "4uLU6hMCjMI75M1A2tKUQC"),
        ("https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC?si=abc", "4uLU6hMCjMI75M1A2tKUQC"),
        ("local-file-id", "local-file-id"),
        (None, ""),
    ],
)
def test_extract_track_id(uri, expected):
    assert extract_track_id(uri) == expected


def test_annotate_popularity_accepts_bare_numbers_and_does_not_mutate():
    rows = [{"Spotify URI": "spotify:track:x1"}, {"Spotify URI": "spotify:track:x2"}]
    annotated = annotate_popularity(rows, {"x1": 55, "x2": {"popularity": "12"}})
    assert [r["popularity"] for r in annotated] == [55.0, 12.0]
    assert "popularity" not in rows[0]
