from __future__ import annotations

"""Pairwise awards: compatibility and voting similarity.

Both awards rank unordered competitor pairs. A pair is identified by its
sorted ID key ("a|b") and reported with `competitor1` holding the smaller ID,
so the result never depends on which member happened to be seen first.

Compatibility
-------------
How much two competitors like each other's music::

    avg(A->B) = points A gave to B's submissions / B's submission count
    score     = sqrt(avg(A->B) * avg(B->A))

Self-votes are excluded. A submitter's count is the number of their distinct
submissions that received at least one non-self vote. Only pairs with points
flowing in both directions are scored.

Similarity
----------
How alike two competitors vote on the same songs::

    similarity = max(5 - mean(|points_A - points_B|), 0)

over every song both voted on within the same round.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Set, Tuple

from . import config as s_cfg
from .index import LeagueIndex
from .ranking import RankedField, empty_award, finish_award, rank_field
from .types import AwardResult, Competitor, Submission, Vote, competitor_lookup, format_fixed


def pair_key(a: str, b: str) -> str:
    return "|".join(sorted((a, b)))


def _ordered(x: Competitor, y: Competitor) -> Tuple[Competitor, Competitor]:
    return (x, y) if x.id <= y.id else (y, x)


def _pair_name(c1: Competitor, c2: Competitor) -> str:
    return f"{c1.name} & {c2.name}"


# ---------------------------------------------------------------------------
# Compatibility
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompatibilityPair:
    competitor1: Competitor
    competitor2: Competitor
    score: float
    avg_1_to_2: float
    avg_2_to_1: float

    @property
    def key(self) -> str:
        return pair_key(self.competitor1.id, self.competitor2.id)


def _vote_matrix(
    votes: Sequence[Vote], index: LeagueIndex
) -> Tuple[Dict[str, Dict[str, int]], Dict[str, Set[str]]]:
    """voter -> submitter -> points, and submitter -> URIs with non-self votes."""
    matrix: Dict[str, Dict[str, int]] = {}
    voted_uris: Dict[str, Set[str]] = {}
    for v in votes:
        submitter = index.submitter_of(v.uri)
        if not submitter or submitter == v.voter_id:
            continue
        row = matrix.setdefault(v.voter_id, {})
        row[submitter] = row.get(submitter, 0) + v.points
        voted_uris.setdefault(submitter, set()).add(v.uri)
    return matrix, voted_uris


def compatibility_scores(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
) -> List[CompatibilityPair]:
    """Every eligible pair with its compatibility score, in no particular order."""
    index = LeagueIndex.build(submissions)
    lookup = competitor_lookup(competitors)
    matrix, voted_uris = _vote_matrix(votes, index)

    seen: Set[str] = set()
    out: List[CompatibilityPair] = []
    for a, row in matrix.items():
        for b, a_to_b in row.items():
            b_to_a = matrix.get(b, {}).get(a, 0)
            # A zero total in either direction does not count as voting for each other.
            if not a_to_b or not b_to_a:
                continue
            key = pair_key(a, b)
            if key in seen:
                continue
            seen.add(key)

            count_a = len(voted_uris.get(a, ()))
            count_b = len(voted_uris.get(b, ()))
            if count_a < s_cfg.MIN_SUBMISSIONS_FOR_COMPATIBILITY or count_b < s_cfg.MIN_SUBMISSIONS_FOR_COMPATIBILITY:
                continue
            if a not in lookup or b not in lookup:
                continue

            avg_a_to_b = a_to_b / count_b
            avg_b_to_a = b_to_a / count_a
            # Negative point totals can make the product negative.
            score = math.sqrt(max(avg_a_to_b * avg_b_to_a, 0.0))

            c1, c2 = _ordered(lookup[a], lookup[b])
            if c1.id == a:
                avg_12, avg_21 = avg_a_to_b, avg_b_to_a
            else:
                avg_12, avg_21 = avg_b_to_a, avg_a_to_b
            out.append(CompatibilityPair(competitor1=c1, competitor2=c2, score=score, avg_1_to_2=avg_12, avg_2_to_1=avg_21))
    return out


def _compatibility_award(ranked: RankedField[CompatibilityPair]) -> AwardResult:
    if ranked.winner is None:
        return empty_award(
            competitor1=None, competitor2=None, score=None, score_display=None, avg_a_to_b=None, avg_b_to_a=None,
            tied_pairs=None,
        )

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda p: _pair_name(p.competitor1, p.competitor2),
        score_of=lambda p: f"Score: {p.score:.2f}",
        fields={
            "competitor1": w.competitor1,
            "competitor2": w.competitor2,
            "score": w.score,
            "score_display": format_fixed(w.score),
            "avg_a_to_b": w.avg_1_to_2,
            "avg_b_to_a": w.avg_2_to_1,
            "tied_pairs": [_compatibility_row(p) for p in ranked.tied] if ranked.is_tied else None,
        },
    )


def _compatibility_row(p: CompatibilityPair) -> Dict[str, Any]:
    return {
        "competitor1": p.competitor1,
        "competitor2": p.competitor2,
        "score": p.score,
        "avg_a_to_b": p.avg_1_to_2,
        "avg_b_to_a": p.avg_2_to_1,
    }


def calculate_compatibility(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
) -> Dict[str, AwardResult]:
    """Most and least compatible pairs, as `most_compatible` / `least_compatible`."""
    pairs = compatibility_scores(votes, submissions, competitors)
    most = rank_field(pairs, metric=lambda p: p.score, identity=lambda p: p.key)
    least = rank_field(pairs, metric=lambda p: p.score, identity=lambda p: p.key, descending=False)
    return {
        "most_compatible": _compatibility_award(most),
        "least_compatible": _compatibility_award(least),
    }


def calculate_most_compatible(
    votes: Sequence[Vote], submissions: Sequence[Submission], competitors: Sequence[Competitor]
) -> AwardResult:
    return calculate_compatibility(votes, submissions, competitors)["most_compatible"]


def calculate_least_compatible(
    votes: Sequence[Vote], submissions: Sequence[Submission], competitors: Sequence[Competitor]
) -> AwardResult:
    return calculate_compatibility(votes, submissions, competitors)["least_compatible"]


# ---------------------------------------------------------------------------
# Voting similarity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SimilarityPair:
    competitor1: Competitor
    competitor2: Competitor
    similarity: float
    votes_compared: int
    rounds_compared: int
    avg_diff: float
    participation_ratio: float

    @property
    def key(self) -> str:
        return pair_key(self.competitor1.id, self.competitor2.id)


def voting_patterns(votes: Sequence[Vote], submissions: Sequence[Submission]) -> Dict[str, Dict[str, Dict[str, int]]]:
    """voter -> round -> URI -> points.

    The round is the submission's round when the URI is known, else the vote's
    own round. A repeated (voter, URI) row replaces the earlier one.
    """
    index = LeagueIndex.build(submissions)
    out: Dict[str, Dict[str, Dict[str, int]]] = {}
    for v in votes:
        round_id = index.submission_to_round.get(v.uri) or v.round_id
        out.setdefault(v.voter_id, {}).setdefault(round_id, {})[v.uri] = v.points
    return out


def _compare(a: Mapping[str, Mapping[str, int]], b: Mapping[str, Mapping[str, int]]) -> Tuple[float, int, int]:
    """Total absolute difference, songs compared, rounds compared."""
    total_diff = 0.0
    compared = 0
    rounds = 0
    for round_id, a_votes in a.items():
        b_votes = b.get(round_id)
        if not b_votes:
            continue
        rounds += 1
        for uri, points in a_votes.items():
            if uri in b_votes:
                total_diff += abs(points - b_votes[uri])
                compared += 1
    return total_diff, compared, rounds


def similarity_scores(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
) -> List[SimilarityPair]:
    """Every eligible pair with its similarity score.

    Eligibility: both voters took part in `SIMILARITY_MIN_ROUNDS_PARTICIPATED`
    rounds with a participation ratio (fewer / more) of at least
    `SIMILARITY_MIN_PARTICIPATION_RATIO`, and the pair shares
    `SIMILARITY_MIN_COMMON_VOTES` songs across `SIMILARITY_MIN_COMMON_ROUNDS`
    rounds.
    """
    patterns = voting_patterns(votes, submissions)
    people = list(competitor_lookup(competitors).values())

    out: List[SimilarityPair] = []
    for i, a in enumerate(people):
        for b in people[i + 1:]:
            pattern_a = patterns.get(a.id, {})
            pattern_b = patterns.get(b.id, {})
            rounds_a, rounds_b = len(pattern_a), len(pattern_b)
            if min(rounds_a, rounds_b) < s_cfg.SIMILARITY_MIN_ROUNDS_PARTICIPATED:
                continue
            ratio = min(rounds_a, rounds_b) / max(rounds_a, rounds_b)
            if ratio < s_cfg.SIMILARITY_MIN_PARTICIPATION_RATIO:
                continue

            total_diff, compared, rounds = _compare(pattern_a, pattern_b)
            if compared < s_cfg.SIMILARITY_MIN_COMMON_VOTES or rounds < s_cfg.SIMILARITY_MIN_COMMON_ROUNDS:
                continue

            avg_diff = total_diff / compared
            c1, c2 = _ordered(a, b)
            out.append(
                SimilarityPair(
                    competitor1=c1,
                    competitor2=c2,
                    similarity=max(s_cfg.SIMILARITY_MAX_SCORE - avg_diff, 0.0),
                    votes_compared=compared,
                    rounds_compared=rounds,
                    avg_diff=avg_diff,
                    participation_ratio=ratio,
                )
            )
    return out


def _similarity_award(ranked: RankedField[SimilarityPair]) -> AwardResult:
    if ranked.winner is None:
        return empty_award(
            competitor1=None, competitor2=None, score=None, score_display=None, votes_compared=None,
            rounds_compared=None, avg_diff=None, avg_diff_display=None, tied_pairs=None,
        )

    w = ranked.winner
    return finish_award(
        ranked,
        name_of=lambda p: _pair_name(p.competitor1, p.competitor2),
        score_of=lambda p: f"Similarity: {p.similarity:.2f}",
        fields={
            "competitor1": w.competitor1,
            "competitor2": w.competitor2,
            "score": w.similarity,
            "score_display": format_fixed(w.similarity),
            "votes_compared": w.votes_compared,
            "rounds_compared": w.rounds_compared,
            "avg_diff": w.avg_diff,
            "avg_diff_display": format_fixed(w.avg_diff),
            "tied_pairs": (
                [
                    {
                        "competitor1": p.competitor1,
                        "competitor2": p.competitor2,
                        "score": p.similarity,
                        "votes_compared": p.votes_compared,
                    }
                    for p in ranked.tied
                ]
                if ranked.is_tied
                else None
            ),
        },
    )


def calculate_voting_similarity(
    votes: Sequence[Vote],
    submissions: Sequence[Submission],
    competitors: Sequence[Competitor],
) -> Dict[str, AwardResult]:
    """Most and least similar voting pairs, as `most_similar` / `least_similar`."""
    pairs = similarity_scores(votes, submissions, competitors)
    tolerance = s_cfg.SIMILARITY_TIE_TOLERANCE
    most = rank_field(pairs, metric=lambda p: p.similarity, identity=lambda p: p.key, tolerance=tolerance)
    least = rank_field(
        pairs, metric=lambda p: p.similarity, identity=lambda p: p.key, descending=False, tolerance=tolerance
    )
    return {
        "most_similar": _similarity_award(most),
        "least_similar": _similarity_award(least),
    }
