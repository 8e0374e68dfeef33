from __future__ import annotations

"""Relational indices over the submission and vote tables.

Award calculators rebuild the index they need on every call; nothing here is
cached. League sizes are tens of competitors and hundreds of rows, so a fresh
pass is cheap and keeps every calculator a pure function of its inputs.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from .types import Submission, Vote


@dataclass(frozen=True)
class LeagueIndex:
    """Read-only lookups derived from submissions and votes.

    Notes:
        - `vote_total_per_submission` includes self-votes.
        - `submission_count_per_competitor` counts submission rows.
    """

    submission_to_submitter: Mapping[str, str] = field(default_factory=dict)
    submission_to_round: Mapping[str, str] = field(default_factory=dict)
    submission_by_uri: Mapping[str, Submission] = field(default_factory=dict)
    vote_total_per_submission: Mapping[str, int] = field(default_factory=dict)
    submission_count_per_competitor: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def build(cls, submissions: Sequence[Submission], votes: Sequence[Vote] = ()) -> "LeagueIndex":
        to_submitter: Dict[str, str] = {}
        to_round: Dict[str, str] = {}
        by_uri: Dict[str, Submission] = {}
        counts: Dict[str, int] = defaultdict(int)
        for s in submissions:
            to_submitter[s.uri] = s.submitter_id
            to_round[s.uri] = s.round_id
            by_uri[s.uri] = s
            counts[s.submitter_id] += 1

        totals: Dict[str, int] = defaultdict(int)
        for v in votes:
            totals[v.uri] += v.points

        return cls(
            submission_to_submitter=to_submitter,
            submission_to_round=to_round,
            submission_by_uri=by_uri,
            vote_total_per_submission=dict(totals),
            submission_count_per_competitor=dict(counts),
        )

    def submitter_of(self, uri: str) -> str | None:
        return self.submission_to_submitter.get(uri)

    def is_self_vote(self, vote: Vote) -> bool:
        return self.submission_to_submitter.get(vote.uri) == vote.voter_id

    def votes_for(self, uri: str) -> int:
        return int(self.vote_total_per_submission.get(uri, 0))

    def points_received_per_competitor(self, votes: Sequence[Vote]) -> Dict[str, int]:
        """Sum of points on each competitor's submissions, self-votes included.

        Competitors appear only once a vote lands on one of their submissions.
        """
        out: Dict[str, int] = {}
        for v in votes:
            submitter = self.submission_to_submitter.get(v.uri)
            if submitter:
                out[submitter] = out.get(submitter, 0) + v.points
        return out


def votes_by_voter(votes: Sequence[Vote]) -> Dict[str, List[Vote]]:
    """Voter ID -> votes cast, in input order. Voters keep first-seen order."""
    out: Dict[str, List[Vote]] = {}
    for v in votes:
        out.setdefault(v.voter_id, []).append(v)
    return out


def point_units_per_voter(votes: Sequence[Vote]) -> Dict[str, int]:
    """Voter ID -> total points handed out (each point is one unit vote)."""
    out: Dict[str, int] = {}
    for v in votes:
        out[v.voter_id] = out.get(v.voter_id, 0) + v.points
    return out
