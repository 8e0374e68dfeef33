from __future__ import annotations

"""Aggregation facade.

One call runs every award calculator over a `League` and returns the combined
result map the presentation layer renders. Individual awards can be computed
on their own with `compute_award`.

Result layout (grouped awards share one computation):

    most_popular, least_popular, most_average, best_performance,
    longest_comment, most_comments,
    compatibility: {most_compatible, least_compatible}
    similarity:    {most_similar, least_similar}
    voting_timing: {early_voter, late_voter}
    spotify:       {mainstream, trend_setter}
    vote_spreader, zero_vote_giver, single_vote_giver, max_vote_giver,
    comeback_kid, doesnt_vote,
    submission_timing: {early_submitter, late_submitter}

The timing impact analyzer is a separate result; `compute_league_report` bundles both.
"""

import logging
import random
from typing import Any, Callable, Dict, Optional, Tuple

from .comments import calculate_longest_comment, calculate_most_comments
from .popularity import (
    calculate_best_performance,
    calculate_comeback_kid,
    calculate_least_popular,
    calculate_mainstream,
    calculate_most_average,
    calculate_most_popular,
    calculate_trend_setter,
)
from .relationships import (
    calculate_compatibility,
    calculate_least_compatible,
    calculate_most_compatible,
    calculate_voting_similarity,
)
from .timing import (
    analyze_submission_timing,
    calculate_early_submitter,
    calculate_late_submitter,
    calculate_submission_timing_awards,
)
from .types import AwardResult, League
from .voting import (
    calculate_doesnt_vote,
    calculate_early_voter,
    calculate_late_voter,
    calculate_max_vote_giver,
    calculate_single_vote_giver,
    calculate_vote_spreader,
    calculate_zero_vote_giver,
)

logger = logging.getLogger(__name__)


AwardCalculator = Callable[[League], AwardResult]

_AWARD_CALCULATORS: Dict[str, AwardCalculator] = {
    "most_popular": lambda lg: calculate_most_popular(lg.votes, lg.submissions, lg.competitors),
    "least_popular": lambda lg: calculate_least_popular(lg.votes, lg.submissions, lg.competitors),
    "most_average": lambda lg: calculate_most_average(lg.votes, lg.submissions, lg.competitors),
    "best_performance": lambda lg: calculate_best_performance(lg.votes, lg.submissions, lg.competitors, lg.rounds),
    "longest_comment": lambda lg: calculate_longest_comment(lg.votes, lg.competitors),
    "most_comments": lambda lg: calculate_most_comments(lg.votes, lg.competitors),
    "most_compatible": lambda lg: calculate_most_compatible(lg.votes, lg.submissions, lg.competitors),
    "least_compatible": lambda lg: calculate_least_compatible(lg.votes, lg.submissions, lg.competitors),
    "most_similar": lambda lg: calculate_voting_similarity(lg.votes, lg.submissions, lg.competitors)["most_similar"],
    "least_similar": lambda lg: calculate_voting_similarity(lg.votes, lg.submissions, lg.competitors)["least_similar"],
    "early_voter": lambda lg: calculate_early_voter(lg.votes, lg.competitors),
    "late_voter": lambda lg: calculate_late_voter(lg.votes, lg.competitors),
    "mainstream": lambda lg: calculate_mainstream(lg.submissions, lg.competitors),
    "trend_setter": lambda lg: calculate_trend_setter(lg.submissions, lg.competitors),
    "vote_spreader": lambda lg: calculate_vote_spreader(lg.votes, lg.competitors),
    "zero_vote_giver": lambda lg: calculate_zero_vote_giver(lg.votes, lg.competitors),
    "single_vote_giver": lambda lg: calculate_single_vote_giver(lg.votes, lg.competitors),
    "max_vote_giver": lambda lg: calculate_max_vote_giver(lg.votes, lg.competitors, lg.submissions),
    "comeback_kid": lambda lg: calculate_comeback_kid(lg.votes, lg.submissions, lg.competitors, lg.rounds),
    "doesnt_vote": lambda lg: calculate_doesnt_vote(lg.votes, lg.competitors, lg.rounds),
    "early_submitter": lambda lg: calculate_early_submitter(lg.competitors, lg.rounds, lg.submissions, lg.votes),
    "late_submitter": lambda lg: calculate_late_submitter(lg.competitors, lg.rounds, lg.submissions, lg.votes),
}

AWARD_KEYS: Tuple[str, ...] = tuple(_AWARD_CALCULATORS)


def compute_award(league: League, award_key: str) -> AwardResult:
    """Compute one award by its flat key (see `AWARD_KEYS`)."""
    key = str(award_key or "").strip().lower()
    calculator = _AWARD_CALCULATORS.get(key)
    if calculator is None:
        raise ValueError(f"Unknown award: {award_key!r}")
    return calculator(league)


def compute_all_superlatives(league: League) -> Dict[str, Any]:
    """Run every award calculator over `league`."""
    logger.debug(
        "compute_all_superlatives: competitors=%d rounds=%d submissions=%d votes=%d",
        len(league.competitors),
        len(league.rounds),
        len(league.submissions),
        len(league.votes),
    )
    votes, submissions, competitors, rounds = league.votes, league.submissions, league.competitors, league.rounds

    return {
        "most_popular": calculate_most_popular(votes, submissions, competitors),
        "least_popular": calculate_least_popular(votes, submissions, competitors),
        "most_average": calculate_most_average(votes, submissions, competitors),
        "best_performance": calculate_best_performance(votes, submissions, competitors, rounds),
        "longest_comment": calculate_longest_comment(votes, competitors),
        "most_comments": calculate_most_comments(votes, competitors),
        "compatibility": calculate_compatibility(votes, submissions, competitors),
        "similarity": calculate_voting_similarity(votes, submissions, competitors),
        "voting_timing": {
            "early_voter": calculate_early_voter(votes, competitors),
            "late_voter": calculate_late_voter(votes, competitors),
        },
        "spotify": {
            "mainstream": calculate_mainstream(submissions, competitors),
            "trend_setter": calculate_trend_setter(submissions, competitors),
        },
        "vote_spreader": calculate_vote_spreader(votes, competitors),
        "zero_vote_giver": calculate_zero_vote_giver(votes, competitors),
        "single_vote_giver": calculate_single_vote_giver(votes, competitors),
        "max_vote_giver": calculate_max_vote_giver(votes, competitors, submissions),
        "comeback_kid": calculate_comeback_kid(votes, submissions, competitors, rounds),
        "doesnt_vote": calculate_doesnt_vote(votes, competitors, rounds),
        "submission_timing": calculate_submission_timing_awards(competitors, rounds, submissions, votes),
    }


def compute_league_report(league: League, *, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """Every award plus the submission timing analysis, with a `meta` block."""
    return {
        "meta": {
            "competitors": len(league.competitors),
            "rounds": sum(1 for r in league.rounds if r.is_valid),
            "submissions": len(league.submissions),
            "votes": len(league.votes),
            "award_keys": list(AWARD_KEYS),
        },
        "superlatives": compute_all_superlatives(league),
        "submission_timing": analyze_submission_timing(
            league.competitors, league.rounds, league.submissions, league.votes, rng=rng
        ),
    }
