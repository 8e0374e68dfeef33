from __future__ import annotations

"""Points- and popularity-based awards.

Awards in this module:
- Most popular: total points received (self-votes included)
- Consistently popular: highest average points per submission
- Most average: closest average to the league's mean of averages
- Best performance: highest single-submission total in its round
- Mainstream / trend setter: highest / lowest average catalog popularity
- Comeback kid: biggest forward-looking recovery from a low round

All calculators are deterministic and return an empty award (winner None,
empty rest of field) when nobody is eligible.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from . import config as s_cfg
from .index import LeagueIndex
from .ranking import empty_award, finish_award, rank_field
from .types import AwardResult, Competitor, Round, Submission, Vote, competitor_lookup, format_fixed, round_lookup


# ---------------------------------------------------------------------------
# Most popular / consistently popular / most average
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _PointsLine:
    competitor: Competitor
    points: int
    submissions: int

    @property
    def avg_points(self) -> float:
        return self.points / self.submissions if self.submissions else 0.0


def _points_lines(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
    *,
    min_submissions: int = 0,
    only_scored: bool = False,
) -> List[_PointsLine]:
    index = LeagueIndex.build(submissions)
    received = index.points_received_per_competitor(votes)
    lookup = competitor_lookup(competitors)

    ids = received.keys() if only_scored else index.submission_count_per_competitor.keys()
    out: List[_PointsLine] = []
    for cid in ids:
        competitor = lookup.get(cid)
        if competitor is None:
            continue
        count = int(index.submission_count_per_competitor.get(cid, 0))
        if count < min_submissions:
            continue
        out.append(_PointsLine(competitor=competitor, points=int(received.get(cid, 0)), submissions=count))
    return out


def calculate_most_popular(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
) -> AwardResult:
    """Most total points received across every submission."""
    lines = _points_lines(votes, submissions, competitors, only_scored=True)
    ranked = rank_field(lines, metric=lambda ln: ln.points, identity=lambda ln: ln.competitor.id)
    if ranked.winner is None:
        return empty_award(competitor=None, points=None)

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda ln: ln.competitor.name,
        score_of=lambda ln: f"{ln.points} votes",
        fields={"competitor": w.competitor, "points": w.points},
    )


def calculate_least_popular(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
) -> AwardResult:
    """Highest average points per submission ("consistently popular").

    The historical name is kept for the result key; the highest average wins.
    """
    lines = _points_lines(votes, submissions, competitors, min_submissions=s_cfg.MIN_SUBMISSIONS_FOR_AVERAGE)
    ranked = rank_field(lines, metric=lambda ln: ln.avg_points, identity=lambda ln: ln.competitor.id)
    if ranked.winner is None:
        return empty_award(competitor=None, avg_points=None, avg_points_display=None)

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda ln: ln.competitor.name,
        score_of=lambda ln: f"{ln.avg_points:.2f} votes",
        fields={
            "competitor": w.competitor,
            "avg_points": w.avg_points,
            "avg_points_display": format_fixed(w.avg_points),
        },
    )


def calculate_most_average(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
) -> AwardResult:
    """Average points per submission closest to the league average.

    The league average is the mean of the eligible competitors' averages.
    """
    lines = _points_lines(votes, submissions, competitors, min_submissions=s_cfg.MIN_SUBMISSIONS_FOR_AVERAGE)
    if not lines:
        return empty_award(
            competitor=None, avg_points=None, avg_points_display=None, overall_avg=None, overall_avg_display=None,
            difference=None,
        )

    overall_avg = sum(ln.avg_points for ln in lines) / len(lines)
    diffs: Dict[str, float] = {ln.competitor.id: abs(ln.avg_points - overall_avg) for ln in lines}

    ranked = rank_field(
        lines,
        metric=lambda ln: diffs[ln.competitor.id],
        identity=lambda ln: ln.competitor.id,
        descending=False,
    )
    w = ranked.winner
    if w is None:
        return empty_award(
            competitor=None, avg_points=None, avg_points_display=None, overall_avg=None, overall_avg_display=None,
            difference=None,
        )
    return finish_award(
        ranked,
        name_of=lambda ln: ln.competitor.name,
        score_of=lambda ln: f"{ln.avg_points:.2f} votes (diff: {diffs[ln.competitor.id]:.2f})",
        fields={
            "competitor": w.competitor,
            "avg_points": w.avg_points,
            "avg_points_display": format_fixed(w.avg_points),
            "overall_avg": overall_avg,
            "overall_avg_display": format_fixed(overall_avg),
            "difference": diffs[w.competitor.id],
        },
    )


# ---------------------------------------------------------------------------
# Best performance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Performance:
    submission: Submission
    competitor: Optional[Competitor]
    round: Optional[Round]
    score: int

    @property
    def competitor_name(self) -> str:
        return self.competitor.name if self.competitor else ""

    @property
    def round_name(self) -> str:
        return self.round.name if self.round else ""


def calculate_best_performance(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
    rounds: Sequence[Round],
) -> AwardResult:
    """Highest point total for one submission within its own round.

    Votes only count when their round matches the submission's round.
    """
    index = LeagueIndex.build(submissions)
    lookup = competitor_lookup(competitors)
    rounds_by_id = round_lookup(rounds)

    scores: Dict[Tuple[str, str], int] = {}
    for v in votes:
        sub = index.submission_by_uri.get(v.uri)
        if sub is None or sub.round_id != v.round_id:
            continue
        key = (v.uri, v.round_id)
        scores[key] = scores.get(key, 0) + v.points

    performances = [
        _Performance(
            submission=index.submission_by_uri[uri],
            competitor=lookup.get(index.submission_by_uri[uri].submitter_id),
            round=rounds_by_id.get(round_id),
            score=score,
        )
        for (uri, round_id), score in scores.items()
    ]

    ranked = rank_field(performances, metric=lambda p: p.score, identity=lambda p: p.submission.uri)
    if ranked.winner is None:
        return empty_award(
            competitor=None, round=None, score=None, song_title=None, artist=None, tied_performances=None,
        )

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda p: p.competitor_name,
        score_of=lambda p: f'{p.score} votes - "{p.submission.title}" ({p.round_name})',
        tied_name_of=lambda p: f'{p.competitor_name} ("{p.submission.title}")',
        fields={
            "competitor": w.competitor,
            "round": w.round,
            "score": w.score,
            "song_title": w.submission.title,
            "artist": w.submission.artist,
            "tied_performances": (
                [
                    {
                        "competitor": p.competitor,
                        "round": p.round,
                        "score": p.score,
                        "song_title": p.submission.title,
                        "artist": p.submission.artist,
                    }
                    for p in ranked.tied
                ]
                if ranked.is_tied
                else None
            ),
        },
    )


# ---------------------------------------------------------------------------
# Catalog popularity (mainstream / trend setter)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _PopularityLine:
    competitor: Competitor
    avg_popularity: float
    submission_count: int


def _popularity_lines(submissions: Sequence[Submission], competitors: Sequence[Competitor]) -> List[_PopularityLine]:
    lookup = competitor_lookup(competitors)
    by_submitter: Dict[str, List[float]] = {}
    for s in submissions:
        if s.popularity is None:
            continue
        by_submitter.setdefault(s.submitter_id, []).append(s.popularity)

    out: List[_PopularityLine] = []
    for cid, values in by_submitter.items():
        if len(values) < s_cfg.MIN_POPULARITY_SUBMISSIONS:
            continue
        competitor = lookup.get(cid)
        if competitor is None:
            continue
        out.append(
            _PopularityLine(competitor=competitor, avg_popularity=sum(values) / len(values), submission_count=len(values))
        )
    return out


def _popularity_award(submissions: Sequence[Submission], competitors: Sequence[Competitor], *, highest: bool) -> AwardResult:
    ranked = rank_field(
        _popularity_lines(submissions, competitors),
        metric=lambda ln: ln.avg_popularity,
        identity=lambda ln: ln.competitor.id,
        descending=highest,
    )
    if ranked.winner is None:
        return empty_award(competitor=None, avg_popularity=None, avg_popularity_display=None, submission_count=None)

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda ln: ln.competitor.name,
        score_of=lambda ln: f"{ln.avg_popularity:.1f}",
        fields={
            "competitor": w.competitor,
            "avg_popularity": w.avg_popularity,
            "avg_popularity_display": format_fixed(w.avg_popularity, 1),
            "submission_count": w.submission_count,
        },
    )


def calculate_mainstream(submissions: Sequence[Submission], competitors: Sequence[Competitor]) -> AwardResult:
    """Highest average popularity over popularity-annotated submissions."""
    return _popularity_award(submissions, competitors, highest=True)


def calculate_trend_setter(submissions: Sequence[Submission], competitors: Sequence[Competitor]) -> AwardResult:
    """Lowest average popularity (most obscure picks)."""
    return _popularity_award(submissions, competitors, highest=False)


# ---------------------------------------------------------------------------
# Comeback kid
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _RoundScore:
    round_id: str
    sequence_index: int
    submission: Submission
    score: int


@dataclass(frozen=True)
class _Comeback:
    competitor: Competitor
    magnitude: int
    low: _RoundScore
    best: _RoundScore
    rounds_participated: int


def _best_comeback(scores: List[_RoundScore]) -> Optional[Tuple[_RoundScore, _RoundScore, int]]:
    """Scan every low-point candidate and keep the largest later recovery."""
    best: Optional[Tuple[_RoundScore, _RoundScore, int]] = None
    for low_pos, low in enumerate(scores):
        peak = low
        for later in scores[low_pos + 1:]:
            if later.sequence_index > low.sequence_index and later.score > peak.score:
                peak = later
        magnitude = peak.score - low.score
        if magnitude >= s_cfg.COMEBACK_MIN_MAGNITUDE and (best is None or magnitude > best[2]):
            best = (low, peak, magnitude)
    return best


def calculate_comeback_kid(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
    rounds: Sequence[Round],
) -> AwardResult:
    """Largest rise from a low round to a strictly later, better round.

    Chronology is the rounds' `sequence_index`, never vote timestamps.
    Submissions to rounds missing from `rounds` have no place in that order
    and are left out.
    Competitors need submissions in `COMEBACK_MIN_ROUNDS` rounds and a rise of
    at least `COMEBACK_MIN_MAGNITUDE` points.
    """
    index = LeagueIndex.build(submissions, votes)
    lookup = competitor_lookup(competitors)
    rounds_by_id = round_lookup(rounds)

    # One submission per (submitter, round); a later row replaces an earlier one.
    per_competitor: Dict[str, Dict[str, Submission]] = {}
    for s in submissions:
        if s.round_id not in rounds_by_id:
            continue
        per_competitor.setdefault(s.submitter_id, {})[s.round_id] = s

    comebacks: List[_Comeback] = []
    for cid, by_round in per_competitor.items():
        competitor = lookup.get(cid)
        if competitor is None or len(by_round) < s_cfg.COMEBACK_MIN_ROUNDS:
            continue

        scores = sorted(
            (
                _RoundScore(
                    round_id=rid,
                    sequence_index=rounds_by_id[rid].sequence_index,
                    submission=sub,
                    score=index.votes_for(sub.uri),
                )
                for rid, sub in by_round.items()
            ),
            key=lambda rs: (rs.sequence_index, rs.round_id),
        )
        found = _best_comeback(scores)
        if found is None:
            continue
        low, best, magnitude = found
        comebacks.append(
            _Comeback(competitor=competitor, magnitude=magnitude, low=low, best=best, rounds_participated=len(by_round))
        )

    ranked = rank_field(comebacks, metric=lambda c: c.magnitude, identity=lambda c: c.competitor.id)
    if ranked.winner is None:
        return empty_award(
            competitor=None, comeback_magnitude=None, lowest_score=None, best_subsequent_score=None,
            lowest_round=None, best_round=None, lowest_submission=None, best_submission=None, tied_comebacks=None,
        )

    def _fields(c: _Comeback) -> Dict[str, Any]:
        return {
            "competitor": c.competitor,
            "comeback_magnitude": c.magnitude,
            "lowest_score": c.low.score,
            "best_subsequent_score": c.best.score,
            "lowest_round": rounds_by_id.get(c.low.round_id),
            "best_round": rounds_by_id.get(c.best.round_id),
            "lowest_submission": c.low.submission,
            "best_submission": c.best.submission,
            "rounds_participated": c.rounds_participated,
        }

    fields = _fields(ranked.winner)
    fields["tied_comebacks"] = [_fields(c) for c in ranked.tied] if ranked.is_tied else None
    return finish_award(
        ranked,
        name_of=lambda c: c.competitor.name,
        score_of=lambda c: f"+{c.magnitude} points ({c.low.score} -> {c.best.score})",
        fields=fields,
    )
