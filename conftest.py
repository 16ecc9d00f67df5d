"""Shared fixtures for the regression_forests test-suite."""
import numpy as np
import pytest

from regression_forests.training_set import TrainingSet


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def linear_1d_set():
    """Five samples on [0, 10] with linearly increasing outputs."""
    X = np.array([[0.0], [2.5], [5.0], [7.5], [10.0]])
    y = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
    return TrainingSet.from_arrays(X, y)


@pytest.fixture
def step_2d_set():
    """Noise-free step along dimension 0 on a 2D grid."""
    g = np.linspace(0.0, 1.0, 10)
    X = np.array([[a, b] for a in g for b in g])
    y = np.where(X[:, 0] < 0.5, -1.0, 1.0)
    return TrainingSet.from_arrays(X, y)


@pytest.fixture
def unit_square():
    return np.array([[0.0, 1.0], [0.0, 1.0]])
