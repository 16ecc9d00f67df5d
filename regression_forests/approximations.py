"""
Local models held by the leaves of a regression tree.

Two kinds are supported:

- ``PWC`` (piecewise constant): the leaf predicts the mean output of its samples.
- ``PWL`` (piecewise linear): the leaf predicts with a least-squares linear model
  fitted on its samples.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Union

import numpy as np
from sklearn.linear_model import LinearRegression

from ._types import Subset


class ApproximationType(str, Enum):
    PWC = "PWC"
    PWL = "PWL"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def load(cls, value: Union[str, "ApproximationType"]) -> "ApproximationType":
        """Parse an approximation kind, raising ``ValueError`` on unknown names."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"Unknown approximation type: {value!r} (expected one of "
                f"{[t.value for t in cls]})"
            ) from None


class Approximation(ABC):
    """Local model of a leaf."""

    @abstractmethod
    def eval(self, x: np.ndarray) -> float:
        """Value of the model at a single input."""

    def predict(self, X: np.ndarray) -> np.ndarray:
        X = np.atleast_2d(np.asarray(X, dtype=float))
        return np.array([self.eval(x) for x in X])


class PWCApproximation(Approximation):
    """Constant model, independent of the input."""

    def __init__(self, value: float):
        self.value = float(value)

    def eval(self, x: np.ndarray) -> float:
        return self.value

    def predict(self, X: np.ndarray) -> np.ndarray:
        return np.full(np.atleast_2d(X).shape[0], self.value)

    def __repr__(self) -> str:
        return f"PWCApproximation(value={self.value:.6g})"


class PWLApproximation(Approximation):
    """Linear model ``intercept + coef . x`` fitted by ordinary least squares."""

    def __init__(self, inputs: np.ndarray, outputs: np.ndarray):
        inputs = np.atleast_2d(np.asarray(inputs, dtype=float))
        outputs = np.asarray(outputs, dtype=float).ravel()
        if outputs.size == 0:
            raise ValueError("Cannot fit a linear approximation without samples")
        model = LinearRegression().fit(inputs, outputs)
        self.coef = np.asarray(model.coef_, dtype=float)
        self.intercept = float(model.intercept_)

    def eval(self, x: np.ndarray) -> float:
        return self.intercept + float(np.dot(self.coef, np.asarray(x, dtype=float)))

    def predict(self, X: np.ndarray) -> np.ndarray:
        X = np.atleast_2d(np.asarray(X, dtype=float))
        return self.intercept + X @ self.coef

    def __repr__(self) -> str:
        return f"PWLApproximation(intercept={self.intercept:.6g}, coef={self.coef!r})"


def get_approximation(ts, samples: Subset, appr_type) -> Approximation:
    """Fit an approximation of the requested kind on ``samples``."""
    appr_type = ApproximationType.load(appr_type)
    if len(samples) == 0:
        raise ValueError("Cannot fit an approximation on an empty subset")
    if appr_type is ApproximationType.PWC:
        return PWCApproximation(np.mean(ts.values(samples)))
    return PWLApproximation(ts.inputs(samples), ts.values(samples))


def avg_squared_errors(ts, samples: Subset, appr_type) -> float:
    """
    Mean squared residual of an approximation fitted on ``samples``.

    For ``PWC`` this is the (population) variance of the outputs.
    """
    appr_type = ApproximationType.load(appr_type)
    outputs = ts.values(samples)
    if appr_type is ApproximationType.PWC:
        return float(np.var(outputs))
    inputs = ts.inputs(samples)
    a = PWLApproximation(inputs, outputs)
    errors = a.predict(inputs) - outputs
    return float(np.mean(errors * errors))


def mean_squared_residual(ts, samples: Subset, approximation: Approximation) -> float:
    """Mean squared residual of an already fitted approximation on ``samples``."""
    errors = ts.values(samples) - approximation.predict(ts.inputs(samples))
    return float(np.mean(errors * errors))
