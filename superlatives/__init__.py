"""Music league superlatives: award calculators and submission timing analysis.

This package is designed to be:
- Deterministic (winners never depend on input order or randomness)
- Defensive to missing/partial data
- Free of I/O; callers hand in already-parsed league tables

Most callers should use `build_league` and then `compute_league_report` or
`compute_all_superlatives`.
"""

from __future__ import annotations

from .correlation import classify_direction, is_significant, pearson, permutation_iterations, permutation_test
from .explanations import EXPLANATIONS, get_explanation
from .ingest import annotate_popularity, build_league, extract_track_id
from .superlatives import AWARD_KEYS, compute_all_superlatives, compute_award, compute_league_report
from .timing import analyze_submission_timing, calculate_submission_timing_awards
from .types import Competitor, League, Round, Submission, Vote

__all__ = [
    "AWARD_KEYS",
    "EXPLANATIONS",
    "Competitor",
    "League",
    "Round",
    "Submission",
    "Vote",
    "analyze_submission_timing",
    "annotate_popularity",
    "build_league",
    "calculate_submission_timing_awards",
    "classify_direction",
    "compute_all_superlatives",
    "compute_award",
    "compute_league_report",
    "extract_track_id",
    "get_explanation",
    "is_significant",
    "pearson",
    "permutation_iterations",
    "permutation_test",
]
