from __future__ import annotations

"""Tuning parameters for the superlatives engine.

This module is the single place to tune award eligibility and tie handling.

Eligibility
-----------
Minimum sample sizes keep tiny samples from producing meaningless awards.
They are per-award policy, not one shared constant: changing any of them
changes who is eligible to win.

Tie tolerances
--------------
Integer metrics compare with exact equality. Floating metrics that live on
different scales (percentages vs. derived spread scores) carry their own
tolerance; do not unify them.

Permutation test
----------------
Iteration count scales inversely with the sample size. Small, noisy samples
get more shuffles; large samples get fewer to bound runtime.
"""

from typing import Tuple

# ---------------------------------------------------------------------------
# Points-based awards
# ---------------------------------------------------------------------------

# Average-based awards (consistently popular, most average).
MIN_SUBMISSIONS_FOR_AVERAGE: int = 3

# Both members of a compatibility pair need this many submissions.
MIN_SUBMISSIONS_FOR_COMPATIBILITY: int = 3

# Comeback: rounds participated and the smallest recovery worth reporting.
COMEBACK_MIN_ROUNDS: int = 3
COMEBACK_MIN_MAGNITUDE: int = 5

# ---------------------------------------------------------------------------
# Similarity
# ---------------------------------------------------------------------------

# similarity = max(SIMILARITY_MAX_SCORE - avg_abs_point_diff, 0)
SIMILARITY_MAX_SCORE: float = 5.0
SIMILARITY_MIN_ROUNDS_PARTICIPATED: int = 3
# min(rounds_a, rounds_b) / max(rounds_a, rounds_b)
SIMILARITY_MIN_PARTICIPATION_RATIO: float = 0.6
SIMILARITY_MIN_COMMON_VOTES: int = 10
SIMILARITY_MIN_COMMON_ROUNDS: int = 3
SIMILARITY_TIE_TOLERANCE: float = 0.01

# ---------------------------------------------------------------------------
# Popularity annotations
# ---------------------------------------------------------------------------

MIN_POPULARITY_SUBMISSIONS: int = 3

# ---------------------------------------------------------------------------
# Voter behavior
# ---------------------------------------------------------------------------

# Share of a round's voters counted as "early" / "late" (ceil-rounded).
VOTING_TIMING_FRACTION: float = 0.25

# Vote spreader: score = 1 / (stddev + VOTE_SPREAD_EPSILON)
VOTE_SPREAD_MIN_POINT_UNITS: int = 30
VOTE_SPREAD_MIN_VOTE_ROWS: int = 10
VOTE_SPREAD_EPSILON: float = 0.1
VOTE_SPREAD_TIE_TOLERANCE: float = 0.01

# Zero / single vote givers.
VOTE_GIVER_MIN_POINT_UNITS: int = 30

# Max-vote ("all-in") giver.
MAX_VOTE_MIN_ROUNDS: int = 3

# Percentage metrics (single-vote share, all-in share), in percentage points.
PERCENTAGE_TIE_TOLERANCE: float = 0.1

# ---------------------------------------------------------------------------
# Correlation / permutation test
# ---------------------------------------------------------------------------

# (min_sample_size, iterations), checked in order.
PERMUTATION_ITERATION_TIERS: Tuple[Tuple[int, int], ...] = (
    (250, 1500),
    (120, 2000),
    (60, 2500),
    (30, 3000),
)
PERMUTATION_DEFAULT_ITERATIONS: int = 3500

# Guards float equality at the |permuted| >= |observed| boundary.
PERMUTATION_EPSILON: float = 1e-12

SIGNIFICANCE_LEVEL: float = 0.05

# |coefficient| at or below this is "neutral".
DIRECTION_THRESHOLD: float = 0.05

# ---------------------------------------------------------------------------
# Submission timing impact
# ---------------------------------------------------------------------------

TIMING_MIN_SAMPLE: int = 3
TIMING_MIN_COMPETITOR_SUBMISSIONS: int = 3

# Early / late submitter awards: songs split at order_fraction 0.5 (first half
# inclusive), compared on within-round performance rank.
TIMING_AWARD_MIN_SUBMISSIONS: int = 4
TIMING_AWARD_MIN_PER_HALF: int = 2
TIMING_AWARD_TIE_TOLERANCE: float = 1e-9

# Order-fraction buckets reported with the timing analysis.
TIMING_BUCKET_COUNT: int = 8
