from __future__ import annotations

"""Submission timing impact.

Does submitting a song early (or late) in a round go with receiving more
points? Each round's submissions are ordered by their `Created` time and given
an `order_fraction` in [0, 1]. The analyzer then correlates order_fraction with
points received, league-wide and per competitor, and checks the league-wide
coefficient with a permutation test.

Outputs:
- `overall`: coefficient, p-value, early/late quartile averages, direction
- `competitor_stats`: the same per competitor (half-split averages)
- `ranked_competitors` / `best_competitor`: who is most affected, by
  `impact_score`
- `submission_records`: the per-submission rows the analysis used
- `round_summaries` / `bucket_averages`: vote spread per round and average
  votes per order_fraction bucket

`calculate_submission_timing_awards` turns the same records into the early
and late submitter awards, which compare each competitor's within-round
standing in the first and second half of their submissions.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from . import config as s_cfg
from .correlation import PermutationResult, classify_direction, is_significant, mean, permutation_test
from .index import LeagueIndex
from .ranking import empty_award, finish_award, rank_field
from .types import (
    AwardResult,
    Competitor,
    CompetitorTiming,
    Round,
    RoundTimingSummary,
    Submission,
    SubmissionTimingRecord,
    TimingBucket,
    TimingImpactResult,
    TimingSummary,
    Vote,
    competitor_lookup,
    parse_timestamp,
    round_lookup,
)

logger = logging.getLogger(__name__)

UNKNOWN_ROUND = "Unknown Round"
UNKNOWN_COMPETITOR = "Unknown Competitor"

_MIN_SPAN_MS = 1.0


def _insufficient_summary() -> TimingSummary:
    return {
        "coefficient": 0.0,
        "p_value": 1.0,
        "iterations": 0,
        "sample_size": 0,
        "is_significant": False,
        "early_avg_votes": None,
        "late_avg_votes": None,
        "difference": None,
        "direction": "insufficient-data",
    }


def performance_ranks(totals: Sequence[int]) -> List[float]:
    """Within-round standing in [0, 1]: 1.0 for the top song, 0.0 for the last.

    Equal totals share their average rank. A one-song round is 0.5.
    """
    n = len(totals)
    if n == 1:
        return [0.5]
    order = sorted(range(n), key=lambda i: (-totals[i], i))
    rank = [0.0] * n
    i = 0
    while i < n:
        j = i
        while j + 1 < n and totals[order[j + 1]] == totals[order[i]]:
            j += 1
        shared = (i + j + 2) / 2.0
        for k in range(i, j + 1):
            rank[order[k]] = shared
        i = j + 1
    return [1.0 - (r - 1.0) / (n - 1) for r in rank]


def build_submission_records(
    competitors: Sequence[Competitor],
    rounds: Sequence[Round],
    submissions: Sequence[Submission],
    votes: Sequence[Vote],
) -> List[SubmissionTimingRecord]:
    """Per-submission timing rows, grouped by round in round order.

    Submissions without a known round or a parseable `Created` time are left
    out. Exact timestamp ties are ordered by URI.
    """
    people = competitor_lookup(competitors)
    rounds_by_id = round_lookup(rounds)
    index = LeagueIndex.build(submissions, votes)

    by_round: Dict[str, List[Submission]] = {}
    for s in submissions:
        if s.round_id not in rounds_by_id or s.created is None or not s.uri:
            continue
        by_round.setdefault(s.round_id, []).append(s)

    records: List[SubmissionTimingRecord] = []
    for round_id in sorted(by_round, key=lambda rid: rounds_by_id[rid].sequence_index):
        rnd = rounds_by_id[round_id]
        entries = sorted(by_round[round_id], key=lambda s: (s.created, s.uri))
        n = len(entries)
        first = entries[0].created
        span_ms = max(_MIN_SPAN_MS, (entries[-1].created - first).total_seconds() * 1000.0)
        totals = [index.votes_for(s.uri) for s in entries]
        ranks = performance_ranks(totals)
        low, high = min(totals), max(totals)

        for position, s in enumerate(entries):
            submitter = people.get(s.submitter_id)
            records.append(
                {
                    "round_id": round_id,
                    "round_name": rnd.name or UNKNOWN_ROUND,
                    "round_number": rnd.sequence_index + 1,
                    "submitter_id": s.submitter_id,
                    "submitter_name": submitter.name if submitter and submitter.name else UNKNOWN_COMPETITOR,
                    "created": s.created.isoformat(),
                    "created_raw": s.created_raw,
                    "order": position + 1,
                    "order_total": n,
                    "order_fraction": position / (n - 1) if n > 1 else 0.5,
                    "relative_time": (s.created - first).total_seconds() * 1000.0 / span_ms,
                    "votes": totals[position],
                    "relative_votes": (totals[position] - low) / (high - low) if high > low else 0.5,
                    "performance_rank": ranks[position],
                    "title": s.title,
                    "uri": s.uri,
                }
            )
    return records


def _summary(
    result: PermutationResult,
    early_avg: Optional[float],
    late_avg: Optional[float],
) -> TimingSummary:
    difference = late_avg - early_avg if early_avg is not None and late_avg is not None else None
    return {
        "coefficient": result.coefficient,
        "p_value": result.p_value,
        "iterations": result.iterations,
        "sample_size": result.sample_size,
        "is_significant": is_significant(result.p_value),
        "early_avg_votes": early_avg,
        "late_avg_votes": late_avg,
        "difference": difference,
        "direction": classify_direction(result.coefficient),  # type: ignore[typeddict-item]
    }


def _split_averages(records: List[SubmissionTimingRecord], size: int) -> Tuple[Optional[float], Optional[float]]:
    ordered = sorted(records, key=lambda r: r["order_fraction"])
    early = mean([r["votes"] for r in ordered[:size]])
    late = mean([r["votes"] for r in ordered[-size:]])
    return early, late


def quartile_size(sample_size: int) -> int:
    return max(1, math.ceil(sample_size / 4))


def impact_score(stat: TimingSummary, league_direction: str) -> float:
    """How strongly a competitor follows the league-wide timing effect."""
    early, late = stat["early_avg_votes"], stat["late_avg_votes"]
    if league_direction == "earlier-better":
        if early is not None and late is not None:
            return early - late
        return -(stat["difference"] or 0.0)
    if league_direction == "later-better":
        if early is not None and late is not None:
            return late - early
        return stat["difference"] or 0.0
    return abs(stat["coefficient"])


def round_summaries(records: Sequence[SubmissionTimingRecord]) -> List[RoundTimingSummary]:
    """Span and vote spread of every round that has timed submissions."""
    by_round: Dict[str, List[SubmissionTimingRecord]] = {}
    for r in records:
        by_round.setdefault(r["round_id"], []).append(r)

    out: List[RoundTimingSummary] = []
    for round_id, rows in by_round.items():
        stamps = [parse_timestamp(r["created"]) for r in rows]
        span = (max(stamps) - min(stamps)).total_seconds() / 3600.0  # type: ignore[type-var,operator]
        totals = [r["votes"] for r in rows]
        avg = sum(totals) / len(totals)
        std = 0.0
        if len(totals) > 1:
            std = math.sqrt(sum((t - avg) ** 2 for t in totals) / (len(totals) - 1))
        out.append(
            {
                "round_id": round_id,
                "round_name": rows[0]["round_name"],
                "submission_count": len(rows),
                "span_hours": span,
                "min_votes": min(totals),
                "max_votes": max(totals),
                "mean_votes": avg,
                "std_votes": std,
            }
        )
    return out


def bucket_averages(records: Sequence[SubmissionTimingRecord]) -> List[TimingBucket]:
    """Average votes and standing per order_fraction bucket (last bucket closed)."""
    count = s_cfg.TIMING_BUCKET_COUNT
    rows: List[List[SubmissionTimingRecord]] = [[] for _ in range(count)]
    for r in records:
        rows[min(int(r["order_fraction"] * count), count - 1)].append(r)

    out: List[TimingBucket] = []
    for i, bucket in enumerate(rows):
        lower = math.floor(i * 100.0 / count + 0.5)
        upper = math.floor((i + 1) * 100.0 / count + 0.5)
        out.append(
            {
                "bucket_index": i,
                "label": f"{lower}-{upper}%",
                "center": (i + 0.5) / count,
                "count": len(bucket),
                "average_votes": mean([float(r["votes"]) for r in bucket]),
                "average_relative_votes": mean([r["relative_votes"] for r in bucket]),
                "average_performance": mean([r["performance_rank"] for r in bucket]),
            }
        )
    return out


# ---------------------------------------------------------------------------
# Early / late submitter awards
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _HalfSplit:
    competitor: Competitor
    sample_size: int
    early_count: int
    late_count: int
    early_avg_performance: float
    late_avg_performance: float
    early_avg_votes: float
    late_avg_votes: float

    @property
    def performance_delta(self) -> float:
        return self.early_avg_performance - self.late_avg_performance

    @property
    def vote_delta(self) -> float:
        return self.early_avg_votes - self.late_avg_votes


def _half_splits(
    records: Sequence[SubmissionTimingRecord], competitors: Sequence[Competitor]
) -> List[_HalfSplit]:
    people = competitor_lookup(competitors)
    buckets: Dict[str, List[SubmissionTimingRecord]] = {}
    for r in records:
        if r["submitter_id"] in people:
            buckets.setdefault(r["submitter_id"], []).append(r)

    out: List[_HalfSplit] = []
    for cid, rows in buckets.items():
        early = [r for r in rows if r["order_fraction"] <= 0.5]
        late = [r for r in rows if r["order_fraction"] > 0.5]
        if (
            len(rows) < s_cfg.TIMING_AWARD_MIN_SUBMISSIONS
            or len(early) < s_cfg.TIMING_AWARD_MIN_PER_HALF
            or len(late) < s_cfg.TIMING_AWARD_MIN_PER_HALF
        ):
            continue
        out.append(
            _HalfSplit(
                competitor=people[cid],
                sample_size=len(rows),
                early_count=len(early),
                late_count=len(late),
                early_avg_performance=sum(r["performance_rank"] for r in early) / len(early),
                late_avg_performance=sum(r["performance_rank"] for r in late) / len(late),
                early_avg_votes=sum(r["votes"] for r in early) / len(early),
                late_avg_votes=sum(r["votes"] for r in late) / len(late),
            )
        )
    return out


def _submitter_award(splits: List[_HalfSplit], *, leaning: str) -> AwardResult:
    sign = 1.0 if leaning == "early" else -1.0
    ranked = rank_field(
        [s for s in splits if sign * s.performance_delta > 0],
        metric=lambda s: sign * s.performance_delta,
        identity=lambda s: s.competitor.id,
        tolerance=s_cfg.TIMING_AWARD_TIE_TOLERANCE,
    )
    w = ranked.winner
    if w is None:
        return empty_award(
            competitor=None, leaning=leaning, performance_delta=None, performance_delta_display=None,
            vote_delta=None, early_avg_votes=None, late_avg_votes=None, early_avg_performance=None,
            late_avg_performance=None, sample_size=None, early_count=None, late_count=None,
        )

    return finish_award(
        ranked,
        name_of=lambda s: s.competitor.name,
        score_of=lambda s: f"{s.performance_delta:+.2f} standing ({s.early_count} early / {s.late_count} late)",
        fields={
            "competitor": w.competitor,
            "leaning": leaning,
            "performance_delta": w.performance_delta,
            "performance_delta_display": f"{w.performance_delta:+.2f}",
            "vote_delta": w.vote_delta,
            "early_avg_votes": w.early_avg_votes,
            "late_avg_votes": w.late_avg_votes,
            "early_avg_performance": w.early_avg_performance,
            "late_avg_performance": w.late_avg_performance,
            "sample_size": w.sample_size,
            "early_count": w.early_count,
            "late_count": w.late_count,
        },
    )


def calculate_submission_timing_awards(
    competitors: Sequence[Competitor],
    rounds: Sequence[Round],
    submissions: Sequence[Submission],
    votes: Sequence[Vote],
) -> Dict[str, AwardResult]:
    """Who gains most from submitting early, and who from submitting late.

    Each competitor's timed songs are split into first-half
    (order_fraction <= 0.5) and second-half submissions. The early submitter
    has the largest positive early-minus-late average performance rank; the
    late submitter the largest negative one.
    """
    records = build_submission_records(competitors, rounds, submissions, votes)
    splits = _half_splits(records, competitors)
    return {
        "early_submitter": _submitter_award(splits, leaning="early"),
        "late_submitter": _submitter_award(splits, leaning="late"),
    }


def calculate_early_submitter(
    competitors: Sequence[Competitor],
    rounds: Sequence[Round],
    submissions: Sequence[Submission],
    votes: Sequence[Vote],
) -> AwardResult:
    return calculate_submission_timing_awards(competitors, rounds, submissions, votes)["early_submitter"]


def calculate_late_submitter(
    competitors: Sequence[Competitor],
    rounds: Sequence[Round],
    submissions: Sequence[Submission],
    votes: Sequence[Vote],
) -> AwardResult:
    return calculate_submission_timing_awards(competitors, rounds, submissions, votes)["late_submitter"]


def analyze_submission_timing(
    competitors: Sequence[Competitor],
    rounds: Sequence[Round],
    submissions: Sequence[Submission],
    votes: Sequence[Vote],
    *,
    rng: Optional[random.Random] = None,
) -> TimingImpactResult:
    """Correlate submission order with points received.

    `rng` drives every permutation test in the pass; pass a seeded
    `random.Random` for reproducible p-values.
    """
    rng = rng or random.Random()
    records = build_submission_records(competitors, rounds, submissions, votes)

    if len(records) < s_cfg.TIMING_MIN_SAMPLE:
        logger.debug("analyze_submission_timing: insufficient data (records=%d)", len(records))
        return {
            "overall": _insufficient_summary(),
            "competitor_stats": {},
            "best_competitor": None,
            "ranked_competitors": [],
            "submission_records": records,
            "round_summaries": round_summaries(records),
            "bucket_averages": bucket_averages(records),
        }

    x = [r["order_fraction"] for r in records]
    y = [float(r["votes"]) for r in records]
    overall_test = permutation_test(x, y, rng=rng)
    early_avg, late_avg = _split_averages(records, quartile_size(len(records)))
    overall = _summary(overall_test, early_avg, late_avg)
    logger.debug(
        "analyze_submission_timing: records=%d iterations=%d r=%.4f p=%.4f",
        len(records),
        overall_test.iterations,
        overall_test.coefficient,
        overall_test.p_value,
    )

    buckets: Dict[str, List[SubmissionTimingRecord]] = {}
    for r in records:
        if r["submitter_id"]:
            buckets.setdefault(r["submitter_id"], []).append(r)

    people = competitor_lookup(competitors)
    competitor_stats: Dict[str, CompetitorTiming] = {}
    for cid, rows in buckets.items():
        if len(rows) < s_cfg.TIMING_MIN_COMPETITOR_SUBMISSIONS:
            continue
        test = permutation_test(
            [r["order_fraction"] for r in rows],
            [float(r["votes"]) for r in rows],
            rng=rng,
        )
        early, late = _split_averages(rows, max(1, len(rows) // 2))
        summary = _summary(test, early, late)
        stat: CompetitorTiming = {  # type: ignore[misc]
            **summary,
            "competitor": people.get(cid),
            "impact_score": impact_score(summary, overall["direction"]),
        }
        competitor_stats[cid] = stat

    ranked = sorted(
        (s for s in competitor_stats.values() if s["competitor"] is not None),
        key=lambda s: (-s["impact_score"], s["competitor"].id),
    )

    return {
        "overall": overall,
        "competitor_stats": competitor_stats,
        "best_competitor": ranked[0] if ranked else None,
        "ranked_competitors": ranked,
        "submission_records": records,
        "round_summaries": round_summaries(records),
        "bucket_averages": bucket_averages(records),
    }
