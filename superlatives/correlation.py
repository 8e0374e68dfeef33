from __future__ import annotations

"""Pearson correlation and a two-tailed permutation test.

Design goals
------------
- **Pure functions**: no I/O; the only side effect is drawing from the
  injected random generator.
- **Defensive**: mismatched lengths, tiny samples, non-finite values and zero
  variance produce an invalid result instead of raising.
- **Reproducible on demand**: pass a seeded ``random.Random`` to get the same
  p-value on every run. Winners never depend on the p-value, only on the
  deterministic coefficient.
"""

import math
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from . import config as s_cfg


@dataclass(frozen=True, slots=True)
class CorrelationResult:
    coefficient: float
    valid: bool


@dataclass(frozen=True, slots=True)
class PermutationResult:
    coefficient: float
    p_value: float
    iterations: int
    sample_size: int

    @property
    def is_significant(self) -> bool:
        return is_significant(self.p_value)


_INVALID = CorrelationResult(coefficient=0.0, valid=False)


def mean(values: Sequence[float]) -> Optional[float]:
    """Arithmetic mean of the finite values, or None when there are none."""
    finite = [float(v) for v in values if isinstance(v, (int, float)) and math.isfinite(v)]
    if not finite:
        return None
    return sum(finite) / len(finite)


def pearson(x: Sequence[float], y: Sequence[float]) -> CorrelationResult:
    """Pearson product-moment correlation of two equal-length series."""
    if len(x) != len(y) or len(x) < 2:
        return _INVALID
    try:
        xs = [float(v) for v in x]
        ys = [float(v) for v in y]
    except (TypeError, ValueError):
        return _INVALID
    if not all(math.isfinite(v) for v in xs) or not all(math.isfinite(v) for v in ys):
        return _INVALID

    mean_x = sum(xs) / len(xs)
    mean_y = sum(ys) / len(ys)

    numerator = 0.0
    sum_sq_x = 0.0
    sum_sq_y = 0.0
    for xi, yi in zip(xs, ys):
        dx = xi - mean_x
        dy = yi - mean_y
        numerator += dx * dy
        sum_sq_x += dx * dx
        sum_sq_y += dy * dy

    denominator = math.sqrt(sum_sq_x * sum_sq_y)
    if not denominator:
        return _INVALID

    # Rounding can push |r| a hair past 1.
    coefficient = max(-1.0, min(1.0, numerator / denominator))
    return CorrelationResult(coefficient=coefficient, valid=True)


def permutation_iterations(sample_size: int) -> int:
    """Iteration budget for a sample: more shuffles for smaller samples."""
    for min_size, iterations in s_cfg.PERMUTATION_ITERATION_TIERS:
        if sample_size >= min_size:
            return iterations
    return s_cfg.PERMUTATION_DEFAULT_ITERATIONS


def permutation_test(
    x: Sequence[float],
    y: Sequence[float],
    iterations: Optional[int] = None,
    *,
    rng: Optional[random.Random] = None,
) -> PermutationResult:
    """Two-tailed permutation test of the Pearson coefficient.

    `y` is shuffled `iterations` times; a shuffle is "extreme" when
    ``|r_perm| >= |r_obs| - eps``. The p-value is add-one smoothed:
    ``(extreme + 1) / (iterations + 1)``, so it is always in (0, 1].
    """
    base = pearson(x, y)
    if not base.valid:
        return PermutationResult(coefficient=0.0, p_value=1.0, iterations=0, sample_size=len(x))

    if iterations is None:
        iterations = permutation_iterations(len(x))
    if iterations < 0:
        raise ValueError(f"iterations must be >= 0, got {iterations!r}")

    rng = rng or random.Random()
    threshold = abs(base.coefficient) - s_cfg.PERMUTATION_EPSILON

    shuffled = list(y)
    extreme = 0
    for _ in range(iterations):
        rng.shuffle(shuffled)
        if abs(pearson(x, shuffled).coefficient) >= threshold:
            extreme += 1

    return PermutationResult(
        coefficient=base.coefficient,
        p_value=(extreme + 1) / (iterations + 1),
        iterations=iterations,
        sample_size=len(x),
    )


def is_significant(p_value: float) -> bool:
    return p_value <= s_cfg.SIGNIFICANCE_LEVEL


def classify_direction(coefficient: float) -> str:
    """Map a coefficient to earlier-better / later-better / neutral."""
    if coefficient < -s_cfg.DIRECTION_THRESHOLD:
        return "earlier-better"
    if coefficient > s_cfg.DIRECTION_THRESHOLD:
        return "later-better"
    return "neutral"
