"""Tests for Pearson correlation and the permutation test."""

import math
import random

import pytest

from superlatives.correlation import (
    classify_direction,
    is_significant,
    mean,
    pearson,
    permutation_iterations,
    permutation_test,
)


class TestPearson:
    def test_perfect_positive(self):
        result = pearson([0, 1], [0, 1])
        assert result.valid is True
        assert result.coefficient == pytest.approx(1.0)

    def test_perfect_negative(self):
        result = pearson([1, 2, 3], [3, 2, 1])
        assert result.valid is True
        assert result.coefficient == pytest.approx(-1.0)

    def test_partial_correlation_in_range(self):
        result = pearson([1, 2, 3, 4, 5], [2, 1, 4, 3, 5])
        assert result.valid is True
        assert -1.0 < result.coefficient < 1.0
        assert result.coefficient == pytest.approx(0.8)

    def test_zero_variance_is_invalid(self):
        result = pearson([1, 1, 1], [1, 2, 3])
        assert result.valid is False
        assert result.coefficient == 0.0

    @pytest.mark.parametrize(
        "x,y",
        [
            ([1, 2, 3], [1, 2]),
            ([1], [1]),
            ([], []),
            ([1, float("nan"), 3], [1, 2, 3]),
            ([1, 2, 3], [1, float("inf"), 3]),
        ],
    )
    def test_degenerate_inputs_are_invalid(self, x, y):
        result = pearson(x, y)
        assert result.valid is False
        assert result.coefficient == 0.0


class TestPermutationTest:
    def test_invalid_base_short_circuits(self):
        result = permutation_test([1, 1, 1], [4, 5, 6], rng=random.Random(0))
        assert result.coefficient == 0.0
        assert result.p_value == 1.0
        assert result.iterations == 0
        assert result.sample_size == 3

    def test_two_points_every_shuffle_is_extreme(self):
        # With two points a shuffle is either the identity or the reversal,
        # both perfectly correlated, so every shuffle counts as extreme.
        result = permutation_test([0, 1], [0, 1], iterations=100, rng=random.Random(3))
        assert result.coefficient == pytest.approx(1.0)
        assert result.iterations == 100
        assert result.p_value == 1.0

    def test_strong_signal_hits_the_floor(self):
        values = list(range(20))
        result = permutation_test(values, values, iterations=200, rng=random.Random(11))
        assert result.coefficient == pytest.approx(1.0)
        assert result.p_value == pytest.approx(1 / 201)
        assert result.is_significant is True

    def test_p_value_bounds(self):
        rng = random.Random(5)
        x = [rng.random() for _ in range(15)]
        y = [rng.random() for _ in range(15)]
        result = permutation_test(x, y, iterations=300, rng=random.Random(6))
        assert 0.0 < result.p_value <= 1.0

    def test_seeded_rng_is_reproducible(self):
        x = [1, 4, 2, 8, 5, 7, 3, 6]
        y = [2, 3, 1, 7, 6, 8, 2, 5]
        first = permutation_test(x, y, rng=random.Random(42))
        second = permutation_test(x, y, rng=random.Random(42))
        assert first == second

    def test_default_iterations_follow_sample_size(self):
        x = list(range(10))
        y = [v * 2 + (v % 3) for v in x]
        result = permutation_test(x, y, rng=random.Random(1))
        assert result.iterations == 3500

    def test_negative_iterations_rejected(self):
        with pytest.raises(ValueError):
            permutation_test([1, 2, 3], [1, 3, 2], iterations=-1)

    def test_inputs_are_not_mutated(self):
        y = [3, 1, 2, 5, 4]
        permutation_test([1, 2, 3, 4, 5], y, iterations=50, rng=random.Random(2))
        assert y == [3, 1, 2, 5, 4]


@pytest.mark.parametrize(
    "size,expected",
    [(0, 3500), (29, 3500), (30, 3000), (59, 3000), (60, 2500), (120, 2000), (249, 2000), (250, 1500), (1000, 1500)],
)
def test_permutation_iterations_tiers(size, expected):
    assert permutation_iterations(size) == expected


@pytest.mark.parametrize(
    "coefficient,expected",
    [(-0.2, "earlier-better"), (-0.05, "neutral"), (0.0, "neutral"), (0.05, "neutral"), (0.051, "later-better")],
)
def test_classify_direction(coefficient, expected):
    assert classify_direction(coefficient) == expected


def test_is_significant_threshold_is_inclusive():
    assert is_significant(0.05) is True
    assert is_significant(0.0501) is False


def test_mean_ignores_non_finite():
    assert mean([]) is None
    assert mean([float("nan")]) is None
    assert mean([1, 2, float("nan")]) == 1.5
    assert math.isclose(mean([0.1, 0.2, 0.3]), 0.2)
