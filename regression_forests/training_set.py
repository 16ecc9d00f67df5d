"""
Sample storage for the growers.

A :class:`TrainingSet` is append-only. Nodes refer to the samples they cover
through a *subset*: an int array of indices into the set, so partitioning a
node never copies inputs or outputs.
"""

from dataclasses import dataclass, field
from typing import Iterator, Tuple

import numpy as np

from ._types import Subset
from .sampling import bootstrap_indices


@dataclass(frozen=True, eq=False)
class Sample:
    """One labeled observation; the input is stored as a read-only copy."""

    input: np.ndarray
    output: float

    def __post_init__(self):
        x = np.array(self.input, dtype=float, copy=True).ravel()
        x.setflags(write=False)
        object.__setattr__(self, "input", x)
        object.__setattr__(self, "output", float(self.output))

    def get_input(self, dim: int) -> float:
        return float(self.input[dim])


@dataclass(eq=False)
class TrainingSet:
    """Append-only collection of samples of a fixed input dimension."""

    input_dim: int
    _inputs: np.ndarray = field(init=False, repr=False)
    _outputs: np.ndarray = field(init=False, repr=False)
    _size: int = field(init=False, default=0)

    def __post_init__(self):
        if self.input_dim < 1:
            raise ValueError("input_dim must be at least 1")
        self._inputs = np.empty((16, self.input_dim), dtype=float)
        self._outputs = np.empty(16, dtype=float)

    @classmethod
    def from_arrays(cls, X, y) -> "TrainingSet":
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float).ravel()
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.ndim != 2 or X.shape[1] == 0:
            raise ValueError("X must be a 2D array with at least one column")
        if X.shape[0] != y.shape[0]:
            raise ValueError("X and y must have the same number of rows")
        ts = cls(X.shape[1])
        ts.extend(X, y)
        return ts

    # ---- storage ----
    def _reserve(self, extra: int):
        needed = self._size + extra
        capacity = self._outputs.shape[0]
        if needed <= capacity:
            return
        while capacity < needed:
            capacity *= 2
        inputs = np.empty((capacity, self.input_dim), dtype=float)
        outputs = np.empty(capacity, dtype=float)
        inputs[: self._size] = self._inputs[: self._size]
        outputs[: self._size] = self._outputs[: self._size]
        self._inputs, self._outputs = inputs, outputs

    def push(self, sample: Sample) -> int:
        """Append a sample and return its index."""
        if sample.input.shape[0] != self.input_dim:
            raise ValueError(
                f"Sample has dimension {sample.input.shape[0]}, expected {self.input_dim}"
            )
        self._reserve(1)
        self._inputs[self._size] = sample.input
        self._outputs[self._size] = sample.output
        self._size += 1
        return self._size - 1

    def extend(self, X, y) -> Subset:
        """Append rows of ``X`` with outputs ``y``; return their indices."""
        X = np.asarray(X, dtype=float).reshape(-1, self.input_dim)
        y = np.asarray(y, dtype=float).ravel()
        if X.shape[0] != y.shape[0]:
            raise ValueError("X and y must have the same number of rows")
        start = self._size
        self._reserve(X.shape[0])
        self._inputs[start : start + X.shape[0]] = X
        self._outputs[start : start + X.shape[0]] = y
        self._size += X.shape[0]
        return np.arange(start, self._size, dtype=np.intp)

    # ---- access ----
    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Sample]:
        for i in range(self._size):
            yield self.sample(i)

    def __getitem__(self, index: int) -> Sample:
        return self.sample(index)

    def _check_index(self, index: int) -> int:
        if not -self._size <= index < self._size:
            raise IndexError(f"Sample index {index} out of range for {self._size} samples")
        return index % self._size

    def sample(self, index: int) -> Sample:
        index = self._check_index(index)
        return Sample(self._inputs[index], self._outputs[index])

    def value(self, index: int) -> float:
        return float(self._outputs[self._check_index(index)])

    def input(self, index: int) -> np.ndarray:
        return self._inputs[self._check_index(index)].copy()

    def input_value(self, index: int, dim: int) -> float:
        return float(self._inputs[self._check_index(int(index)), dim])

    def _check_subset(self, subset) -> Subset:
        subset = np.asarray(subset, dtype=np.intp)
        if subset.size and (subset.min() < 0 or subset.max() >= self._size):
            raise IndexError("Subset references samples outside of the training set")
        return subset

    def values(self, subset=None) -> np.ndarray:
        if subset is None:
            return self._outputs[: self._size].copy()
        return self._outputs[self._check_subset(subset)]

    def inputs(self, subset=None) -> np.ndarray:
        if subset is None:
            return self._inputs[: self._size].copy()
        return self._inputs[self._check_subset(subset)]

    def dim_values(self, subset, dim: int) -> np.ndarray:
        return self._inputs[self._check_subset(subset), dim]

    def all_indices(self) -> Subset:
        return np.arange(self._size, dtype=np.intp)

    # ---- subset operations ----
    def sort_subset(self, subset, dim: int) -> Subset:
        """Return ``subset`` ordered by increasing value along ``dim``."""
        subset = self._check_subset(subset)
        order = np.argsort(self._inputs[subset, dim], kind="stable")
        return subset[order]

    def apply_split(self, split, subset) -> Tuple[Subset, Subset]:
        """Partition ``subset`` into samples below / at-or-above the split value."""
        subset = self._check_subset(subset)
        lower_mask = self._inputs[subset, split.dim] < split.val
        return subset[lower_mask], subset[~lower_mask]

    def copy(self) -> "TrainingSet":
        copied = TrainingSet(self.input_dim)
        copied.extend(self._inputs[: self._size], self._outputs[: self._size])
        return copied

    def bootstrap(self, rng: np.random.Generator) -> "TrainingSet":
        """New training set resampled with replacement, of the same size."""
        idx = bootstrap_indices(self._size, rng)
        resampled = TrainingSet(self.input_dim)
        resampled.extend(self._inputs[idx], self._outputs[idx])
        return resampled
