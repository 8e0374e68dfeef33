"""Shared fixtures: raw league exports and their normalized leagues."""

import pytest

from superlatives.ingest import build_league


@pytest.fixture
def two_player_records():
    """Alice and Bob swap votes in one round: Alice gets 5, Bob gets 3."""
    return {
        "competitors": [{"ID": "a", "Name": "Alice"}, {"ID": "b", "Name": "Bob"}],
        "rounds": [{"ID": "r1", "Name": "Round 1"}, {"ID": "r2", "Name": "Round 2"}],
        "submissions": [
            {"Spotify URI": "s1", "Submitter ID": "a", "Round ID": "r1"},
            {"Spotify URI": "s2", "Submitter ID": "b", "Round ID": "r1"},
        ],
        "votes": [
            {"Voter ID": "b", "Spotify URI": "s1", "Round ID": "r1", "Points Assigned": "5"},
            {"Voter ID": "a", "Spotify URI": "s2", "Round ID": "r1", "Points Assigned": "3"},
        ],
    }


@pytest.fixture
def two_player_league(two_player_records):
    return build_league(**two_player_records)


def _season_records():
    """Four competitors, four rounds, everyone submits and votes every round.

    Submission order rotates each round and the n-th submission of a round
    receives n points from every other competitor.
    """
    people = [("a", "Alice"), ("b", "Bob"), ("c", "Carol"), ("d", "Dan")]
    competitors = [{"ID": pid, "Name": name} for pid, name in people]
    rounds = [{"ID": f"r{k}", "Name": f"Round {k}"} for k in range(1, 5)]

    submissions = []
    votes = []
    for k in range(1, 5):
        order = [people[(i + k) % 4][0] for i in range(4)]
        for position, pid in enumerate(order):
            uri = f"spotify:track:{pid}{k}"
            submissions.append(
                {
                    "Spotify URI": uri,
                    "Submitter ID": pid,
                    "Round ID": f"r{k}",
                    "Title": f"Song {pid.upper()}{k}",
                    "Artist(s)": "Artist",
                    "Created": f"2024-0{k}-01T1{position}:00:00Z",
                }
            )
            for voter, _ in people:
                if voter == pid:
                    continue
                votes.append(
                    {
                        "Voter ID": voter,
                        "Spotify URI": uri,
                        "Round ID": f"r{k}",
                        "Points Assigned": str(position + 1),
                        "Comment": "nice" if voter == "a" else "",
                        "Created": f"2024-0{k}-05T0{position}:00:00Z",
                    }
                )
    return {"competitors": competitors, "rounds": rounds, "submissions": submissions, "votes": votes}


@pytest.fixture
def season_records():
    return _season_records()


@pytest.fixture
def season_league(season_records):
    return build_league(**season_records)
