"""Unit tests for split scoring and the random split search."""

import logging

import numpy as np
import pytest

from regression_forests.regression_tree import OrthogonalSplit
from regression_forests.split_utils import (
    EmptyPartitionError,
    SplitCandidate,
    eval_split_score,
    find_best_split,
)
from regression_forests.training_set import TrainingSet

TOL = 1e-9


# -------------------------------
# Split scoring
# -------------------------------
def test_perfect_split_scores_one(step_2d_set):
    samples = step_2d_set.all_indices()
    score = eval_split_score(step_2d_set, samples, OrthogonalSplit(0, 0.5), "PWC")
    assert score == pytest.approx(1.0, abs=TOL)


def test_useless_split_scores_zero(step_2d_set):
    samples = step_2d_set.all_indices()
    score = eval_split_score(step_2d_set, samples, OrthogonalSplit(1, 0.5), "PWC")
    assert score == pytest.approx(0.0, abs=TOL)


def test_constant_outputs_score_zero():
    ts = TrainingSet.from_arrays([[0.0], [1.0], [2.0]], [3.0, 3.0, 3.0])
    assert eval_split_score(ts, ts.all_indices(), OrthogonalSplit(0, 1.5), "PWC") == 0.0


def test_score_is_a_fraction(rng):
    ts = TrainingSet.from_arrays(rng.uniform(size=(40, 3)), rng.normal(size=40))
    samples = ts.all_indices()
    for val in (0.2, 0.5, 0.8):
        for dim in range(3):
            score = eval_split_score(ts, samples, OrthogonalSplit(dim, val), "PWC")
            assert -TOL <= score <= 1.0 + TOL


def test_pwl_scores_against_linear_fit():
    # a V shape: one line cannot fit it, two lines fit it exactly
    X = np.linspace(-1.0, 1.0, 21).reshape(-1, 1)
    ts = TrainingSet.from_arrays(X, np.abs(X).ravel())
    score = eval_split_score(ts, ts.all_indices(), OrthogonalSplit(0, 0.05), "PWL")
    assert score == pytest.approx(1.0, abs=1e-6)


def test_empty_side_raises(linear_1d_set):
    samples = linear_1d_set.all_indices()
    with pytest.raises(EmptyPartitionError) as info:
        eval_split_score(linear_1d_set, samples, OrthogonalSplit(0, -1.0), "PWC")
    assert info.value.split == OrthogonalSplit(0, -1.0)
    assert info.value.dim_values.tolist() == [0.0, 2.5, 5.0, 7.5, 10.0]
    assert isinstance(info.value, RuntimeError)


# -------------------------------
# Split search
# -------------------------------
@pytest.mark.parametrize("n_min", [1, 2, 5])
def test_best_split_keeps_n_min_on_each_side(rng, n_min):
    ts = TrainingSet.from_arrays(rng.uniform(size=(60, 3)), rng.normal(size=60))
    samples = ts.all_indices()
    for _ in range(10):
        best = find_best_split(ts, samples, 2, n_min, "PWC", rng)
        assert isinstance(best, SplitCandidate)
        lower, upper = ts.apply_split(best.split, samples)
        assert len(lower) >= n_min
        assert len(upper) >= n_min
        assert len(lower) + len(upper) == len(samples)


def test_best_split_prefers_informative_dimension(step_2d_set, rng):
    samples = step_2d_set.all_indices()
    best = find_best_split(step_2d_set, samples, 2, 1, "PWC", rng)
    # both dimensions are tried, only dimension 0 explains the step
    assert best.split.dim == 0
    assert best.score > 0.0


def test_threshold_within_n_min_range(linear_1d_set, rng):
    samples = linear_1d_set.all_indices()
    for _ in range(20):
        best = find_best_split(linear_1d_set, samples, 1, 2, "PWC", rng)
        assert 2.5 <= best.split.val < 7.5


class LowestThresholdRng:
    """Generator whose uniform draws always return the lower bound."""

    def __init__(self, seed=0):
        self._rng = np.random.default_rng(seed)

    def choice(self, *args, **kwargs):
        return self._rng.choice(*args, **kwargs)

    def uniform(self, low, high, size=None):
        return low


def test_threshold_at_range_minimum_keeps_lower_side():
    ts = TrainingSet.from_arrays([[0.0], [1.0], [2.0], [3.0]], [0.0, 0.0, 1.0, 1.0])
    samples = ts.all_indices()
    best = find_best_split(ts, samples, 1, 1, "PWC", LowestThresholdRng())
    assert best.split.val > 0.0
    lower, upper = ts.apply_split(best.split, samples)
    assert lower.tolist() == [0]
    assert upper.tolist() == [1, 2, 3]


def test_adjacent_float_range_splits_both_samples(rng):
    low = 1.0
    high = float(np.nextafter(low, 2.0))
    ts = TrainingSet.from_arrays([[low], [high]], [0.0, 1.0])
    samples = ts.all_indices()
    for _ in range(20):
        best = find_best_split(ts, samples, 1, 1, "PWC", rng)
        lower, upper = ts.apply_split(best.split, samples)
        assert lower.tolist() == [0]
        assert upper.tolist() == [1]
        assert best.score == pytest.approx(1.0)


def test_identical_inputs_give_no_split(caplog, rng):
    ts = TrainingSet.from_arrays(np.full((4, 1), 0.5), [0.0, 1.0, 2.0, 3.0])
    with caplog.at_level(logging.DEBUG, logger="regression_forests.split_utils"):
        assert find_best_split(ts, ts.all_indices(), 1, 1, "PWC", rng) is None
    assert "No threshold range along dim 0" in caplog.text


def test_too_large_n_min_gives_no_split(linear_1d_set, rng):
    # the 3rd smallest and 3rd largest of 5 values coincide
    assert find_best_split(linear_1d_set, linear_1d_set.all_indices(), 1, 3, "PWC", rng) is None


def test_invalid_n_min_raises(linear_1d_set, rng):
    samples = linear_1d_set.all_indices()
    with pytest.raises(ValueError):
        find_best_split(linear_1d_set, samples, 1, 0, "PWC", rng)
    with pytest.raises(ValueError):
        find_best_split(linear_1d_set, samples, 1, 6, "PWC", rng)


def test_k_larger_than_dimension_raises(linear_1d_set, rng):
    with pytest.raises(ValueError):
        find_best_split(linear_1d_set, linear_1d_set.all_indices(), 2, 1, "PWC", rng)
