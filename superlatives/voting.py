from __future__ import annotations

"""Voter-behavior awards.

- Early / late voter: rounds where a competitor was among the first / last
  quarter of voters
- Vote spreader: most even point distribution
- Zero-vote / single-vote giver: 0-point and 1-point allocations
- Max-vote giver ("all-in"): rounds where every point went to one song
- Doesn't vote: rounds with no votes cast

"Point units" are the points a voter handed out, each point counted as one
unit vote. They gate the distribution awards so that a voter with a handful of
votes cannot win on noise.
"""

import datetime as _dt
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from . import config as s_cfg
from .index import point_units_per_voter, votes_by_voter
from .ranking import RankedField, empty_award, finish_award, rank_field
from .types import AwardResult, Competitor, Round, Submission, Vote, competitor_lookup, format_fixed, round_lookup


# ---------------------------------------------------------------------------
# Early / late voter
# ---------------------------------------------------------------------------

EARLY_VOTER_DESCRIPTION = (
    "Awarded to the competitor who most frequently submitted votes within the first 25% of voting periods"
)
LATE_VOTER_DESCRIPTION = (
    "Awarded to the competitor who most frequently submitted votes within the last 25% of voting periods"
)


@dataclass(frozen=True)
class _RoundCount:
    competitor: Competitor
    rounds: int


def voter_timestamps_by_round(votes: Sequence[Vote], *, latest: bool) -> Dict[str, Dict[str, _dt.datetime]]:
    """round -> voter -> earliest (or latest) vote time. Unparseable times are ignored."""
    out: Dict[str, Dict[str, _dt.datetime]] = {}
    for v in votes:
        if v.created is None:
            continue
        per_round = out.setdefault(v.round_id, {})
        current = per_round.get(v.voter_id)
        if current is None or (v.created > current if latest else v.created < current):
            per_round[v.voter_id] = v.created
    return out


def timing_cutoff(voter_count: int) -> int:
    """Number of voters in a round's first (or last) quarter, rounded up."""
    return math.ceil(voter_count * s_cfg.VOTING_TIMING_FRACTION)


def _timing_award(votes: Sequence[Vote], competitors: Sequence[Competitor], *, latest: bool) -> AwardResult:
    lookup = competitor_lookup(competitors)
    counts: Dict[str, int] = {}
    for per_voter in voter_timestamps_by_round(votes, latest=latest).values():
        ordered = sorted(per_voter.items(), key=lambda kv: (kv[1], kv[0]), reverse=latest)
        for voter_id, _ in ordered[: timing_cutoff(len(ordered))]:
            counts[voter_id] = counts.get(voter_id, 0) + 1

    entries = [_RoundCount(competitor=lookup[cid], rounds=n) for cid, n in counts.items() if cid in lookup]
    ranked = rank_field(entries, metric=lambda e: e.rounds, identity=lambda e: e.competitor.id)

    rounds_key = "late_rounds" if latest else "early_rounds"
    description = LATE_VOTER_DESCRIPTION if latest else EARLY_VOTER_DESCRIPTION
    if ranked.winner is None:
        return empty_award(competitor=None, **{rounds_key: None}, description=description)

    return finish_award(
        ranked,
        name_of=lambda e: e.competitor.name,
        score_of=lambda e: f"{e.rounds} rounds",
        fields={"competitor": ranked.winner.competitor, rounds_key: ranked.winner.rounds, "description": description},
    )


def calculate_early_voter(votes: Sequence[Vote], competitors: Sequence[Competitor]) -> AwardResult:
    """Most rounds spent in the earliest `ceil(25%)` of a round's voters."""
    return _timing_award(votes, competitors, latest=False)


def calculate_late_voter(votes: Sequence[Vote], competitors: Sequence[Competitor]) -> AwardResult:
    """Most rounds spent in the latest `ceil(25%)` of a round's voters."""
    return _timing_award(votes, competitors, latest=True)


# ---------------------------------------------------------------------------
# Vote spreader
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Spread:
    competitor: Competitor
    standard_deviation: float
    mean_points: float
    point_units: int

    @property
    def spread_score(self) -> float:
        return 1.0 / (self.standard_deviation + s_cfg.VOTE_SPREAD_EPSILON)


def _population_stats(values: Sequence[int]) -> Tuple[float, float]:
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return mean, math.sqrt(variance)


def calculate_vote_spreader(votes: Sequence[Vote], competitors: Sequence[Competitor]) -> AwardResult:
    """Most even point distribution: `1 / (stddev(points per vote) + 0.1)`.

    The standard deviation is over the raw per-vote point values, not the
    expanded point units.
    """
    lookup = competitor_lookup(competitors)
    units = point_units_per_voter(votes)

    entries: List[_Spread] = []
    for voter_id, cast in votes_by_voter(votes).items():
        if units.get(voter_id, 0) < s_cfg.VOTE_SPREAD_MIN_POINT_UNITS:
            continue
        if len(cast) < s_cfg.VOTE_SPREAD_MIN_VOTE_ROWS or voter_id not in lookup:
            continue
        mean, stddev = _population_stats([v.points for v in cast])
        entries.append(
            _Spread(competitor=lookup[voter_id], standard_deviation=stddev, mean_points=mean, point_units=units[voter_id])
        )

    ranked = rank_field(
        entries,
        metric=lambda e: e.spread_score,
        identity=lambda e: e.competitor.id,
        tolerance=s_cfg.VOTE_SPREAD_TIE_TOLERANCE,
    )
    if ranked.winner is None:
        return empty_award(
            competitor=None, spread_score=None, standard_deviation=None, standard_deviation_display=None,
            mean_points=None, mean_points_display=None, total_votes=None,
        )

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda e: e.competitor.name,
        score_of=lambda e: f"Std Dev: {e.standard_deviation:.2f} ({e.point_units} votes)",
        fields={
            "competitor": w.competitor,
            "spread_score": w.spread_score,
            "standard_deviation": w.standard_deviation,
            "standard_deviation_display": format_fixed(w.standard_deviation),
            "mean_points": w.mean_points,
            "mean_points_display": format_fixed(w.mean_points),
            "total_votes": w.point_units,
        },
    )


# ---------------------------------------------------------------------------
# Zero-vote / single-vote giver
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Allocation:
    competitor: Competitor
    count: int
    point_units: int
    percentage: float


def _count_points(votes: Sequence[Vote], points: int) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for v in votes:
        out.setdefault(v.voter_id, 0)
        if v.points == points:
            out[v.voter_id] += 1
    return out


def calculate_zero_vote_giver(votes: Sequence[Vote], competitors: Sequence[Competitor]) -> AwardResult:
    """Most 0-point votes among voters with at least 30 point units.

    `zero_percentage` is zero votes over (zero votes + point units), since a
    0-point vote adds nothing to the point units.
    """
    lookup = competitor_lookup(competitors)
    units = point_units_per_voter(votes)

    entries: List[_Allocation] = []
    for voter_id, zeros in _count_points(votes, 0).items():
        total = units.get(voter_id, 0)
        if total < s_cfg.VOTE_GIVER_MIN_POINT_UNITS or voter_id not in lookup:
            continue
        entries.append(
            _Allocation(
                competitor=lookup[voter_id], count=zeros, point_units=total, percentage=zeros / (zeros + total) * 100.0
            )
        )

    ranked = rank_field(entries, metric=lambda e: e.count, identity=lambda e: e.competitor.id)
    if ranked.winner is None:
        return empty_award(
            competitor=None, zero_count=None, total_votes=None, total_submissions_voted_on=None,
            zero_percentage=None, zero_percentage_display=None,
        )

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda e: e.competitor.name,
        score_of=lambda e: (
            f"{e.count} zero votes ({e.percentage:.1f}% of {e.count + e.point_units} submissions)"
        ),
        fields={
            "competitor": w.competitor,
            "zero_count": w.count,
            "total_votes": w.point_units,
            "total_submissions_voted_on": w.count + w.point_units,
            "zero_percentage": w.percentage,
            "zero_percentage_display": format_fixed(w.percentage, 1),
        },
    )


def calculate_single_vote_giver(votes: Sequence[Vote], competitors: Sequence[Competitor]) -> AwardResult:
    """Highest share of point units handed out as 1-point votes."""
    lookup = competitor_lookup(competitors)
    units = point_units_per_voter(votes)

    entries: List[_Allocation] = []
    for voter_id, singles in _count_points(votes, 1).items():
        total = units.get(voter_id, 0)
        if total < s_cfg.VOTE_GIVER_MIN_POINT_UNITS or voter_id not in lookup:
            continue
        entries.append(
            _Allocation(competitor=lookup[voter_id], count=singles, point_units=total, percentage=singles / total * 100.0)
        )

    ranked = rank_field(
        entries,
        metric=lambda e: e.percentage,
        identity=lambda e: e.competitor.id,
        tolerance=s_cfg.PERCENTAGE_TIE_TOLERANCE,
    )
    if ranked.winner is None:
        return empty_award(
            competitor=None, single_count=None, total_votes=None, single_percentage=None,
            single_percentage_display=None,
        )

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda e: e.competitor.name,
        score_of=lambda e: f"{e.count} single votes ({e.percentage:.1f}% of {e.point_units} total votes)",
        fields={
            "competitor": w.competitor,
            "single_count": w.count,
            "total_votes": w.point_units,
            "single_percentage": w.percentage,
            "single_percentage_display": format_fixed(w.percentage, 1),
        },
    )


# ---------------------------------------------------------------------------
# Max-vote giver ("all-in")
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _AllIn:
    competitor: Competitor
    all_in_rounds: int
    scored_rounds: int
    rounds_participated: int
    examples: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def percentage(self) -> float:
        if not self.scored_rounds:
            return 0.0
        return self.all_in_rounds / self.scored_rounds * 100.0


def _all_in_target(cast: Sequence[Vote]) -> Optional[Tuple[str, int]]:
    """(URI, points) when every point in the round went to one submission."""
    total = sum(v.points for v in cast)
    if total == 0:
        return None
    per_uri: Dict[str, int] = {}
    for v in cast:
        per_uri[v.uri] = per_uri.get(v.uri, 0) + v.points
    for uri, points in per_uri.items():
        if points == total:
            return uri, total
    return None


def calculate_max_vote_giver(
    votes: Sequence[Vote],
    competitors: Sequence[Competitor],
    submissions: Sequence[Submission],
) -> AwardResult:
    """Share of rounds in which a voter put every point on a single song.

    Rounds where the voter assigned zero points in total are skipped. The
    voter still needs `MAX_VOTE_MIN_ROUNDS` rounds with any vote to qualify.
    """
    lookup = competitor_lookup(competitors)
    songs = {s.uri: s for s in submissions}

    entries: List[_AllIn] = []
    for voter_id, cast in votes_by_voter(votes).items():
        competitor = lookup.get(voter_id)
        if competitor is None:
            continue
        by_round: Dict[str, List[Vote]] = {}
        for v in cast:
            by_round.setdefault(v.round_id, []).append(v)
        if len(by_round) < s_cfg.MAX_VOTE_MIN_ROUNDS:
            continue

        all_in = 0
        scored = 0
        examples: List[Dict[str, Any]] = []
        for round_id, round_votes in by_round.items():
            if sum(v.points for v in round_votes) == 0:
                continue
            scored += 1
            target = _all_in_target(round_votes)
            if target is None:
                continue
            all_in += 1
            uri, points = target
            song = songs.get(uri)
            if song is not None:
                examples.append(
                    {"round_id": round_id, "points": points, "song_title": song.title, "song_artist": song.artist, "uri": uri}
                )

        entries.append(
            _AllIn(
                competitor=competitor,
                all_in_rounds=all_in,
                scored_rounds=scored,
                rounds_participated=len(by_round),
                examples=examples,
            )
        )

    ranked = rank_field(
        entries,
        metric=lambda e: e.percentage,
        identity=lambda e: e.competitor.id,
        tolerance=s_cfg.PERCENTAGE_TIE_TOLERANCE,
        secondary=lambda e: e.all_in_rounds,
    )
    # Inside the tie band more all-in rounds lists first.
    if ranked.is_tied:
        tied = sorted(ranked.tied, key=lambda e: (-e.all_in_rounds, -e.percentage, e.competitor.id))
        ranked = RankedField(ordered=tied + ranked.rest, tied=tied, rest=ranked.rest)

    if ranked.winner is None:
        return empty_award(
            competitor=None, all_in_rounds=None, total_rounds=None, rounds_participated=None,
            all_in_percentage=None, all_in_percentage_display=None, all_in_examples=[], tied_winners_data=None,
        )

    def _row(e: _AllIn) -> Dict[str, Any]:
        return {
            "competitor": e.competitor,
            "all_in_rounds": e.all_in_rounds,
            "total_rounds": e.scored_rounds,
            "all_in_percentage": e.percentage,
        }

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda e: e.competitor.name,
        score_of=lambda e: f"{e.all_in_rounds}/{e.scored_rounds} rounds ({e.percentage:.1f}%)",
        fields={
            "competitor": w.competitor,
            "all_in_rounds": w.all_in_rounds,
            "total_rounds": w.scored_rounds,
            "rounds_participated": w.rounds_participated,
            "all_in_percentage": w.percentage,
            "all_in_percentage_display": format_fixed(w.percentage, 1),
            "all_in_examples": list(w.examples),
            "tied_winners_data": [_row(e) for e in ranked.tied] if ranked.is_tied else None,
        },
    )


# ---------------------------------------------------------------------------
# Doesn't vote
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Missed:
    competitor: Competitor
    missed: int
    participated: int
    total_rounds: int

    @property
    def missed_percentage(self) -> float:
        return self.missed / self.total_rounds * 100.0 if self.total_rounds else 0.0


def calculate_doesnt_vote(
    votes: Sequence[Vote],
    competitors: Sequence[Competitor],
    rounds: Sequence[Round],
) -> AwardResult:
    """Most rounds without a single vote cast.

    Only valid rounds (non-blank ID) count, both for the total and for the
    rounds a competitor voted in.
    """
    valid = round_lookup(rounds)
    total_rounds = len(valid)

    voted_in: Dict[str, set] = {}
    for v in votes:
        if v.round_id in valid:
            voted_in.setdefault(v.voter_id, set()).add(v.round_id)

    entries: List[_Missed] = []
    for competitor in competitor_lookup(competitors).values():
        if not competitor.name.strip():
            continue
        participated = len(voted_in.get(competitor.id, ()))
        missed = total_rounds - participated
        if missed > 0:
            entries.append(
                _Missed(competitor=competitor, missed=missed, participated=participated, total_rounds=total_rounds)
            )

    ranked = rank_field(entries, metric=lambda e: e.missed, identity=lambda e: e.competitor.id)
    if ranked.winner is None:
        return empty_award(
            competitor=None, rounds_missed=None, rounds_participated=None, total_rounds=total_rounds,
            missed_percentage=None, missed_percentage_display=None,
        )

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda e: e.competitor.name,
        score_of=lambda e: f"{e.missed}/{e.total_rounds} rounds missed ({e.missed_percentage:.1f}%)",
        fields={
            "competitor": w.competitor,
            "rounds_missed": w.missed,
            "rounds_participated": w.participated,
            "total_rounds": w.total_rounds,
            "missed_percentage": w.missed_percentage,
            "missed_percentage_display": format_fixed(w.missed_percentage, 1),
        },
    )
