"""
Configuration objects for the two growers.

Both configs can be exported to, and loaded from, a table of names and string
values (``names()`` / ``values()`` / ``load()``) so that experiment setups can
be stored next to their results.
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from .approximations import ApproximationType
from .space import check_space


def _check_names(given: Sequence[str], expected: Sequence[str], config_name: str):
    if len(given) != len(expected):
        raise ValueError(f"Failed to load {config_name}, mismatch of vector size")
    for given_name, expected_name in zip(given, expected):
        if expected_name not in given_name:
            raise ValueError(f"Given name '{given_name}' does not match '{expected_name}'")


def _parse_bool(value: str) -> bool:
    v = str(value).strip().lower()
    if v in ("1", "true", "yes"):
        return True
    if v in ("0", "false", "no"):
        return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean")


@dataclass
class ExtraTreesConfig:
    """
    Parameters of the randomized grower.

    Parameters
    ----------
    k:
        Number of dimensions tried per split.
    n_min:
        Minimal number of samples per leaf; nodes with at most ``n_min``
        samples are not split.
    nb_trees:
        Number of trees in the forest.
    min_var:
        Nodes whose output variance is at most this value are not split.
    bootstrap:
        Grow each tree on a bootstrap resample of the training set.
    appr_type:
        Kind of approximation held by the leaves.
    """

    k: int = 1
    n_min: int = 1
    nb_trees: int = 1
    min_var: float = 0.0
    bootstrap: bool = False
    appr_type: ApproximationType = ApproximationType.PWC

    def __post_init__(self):
        self.appr_type = ApproximationType.load(self.appr_type)

    def validate(self, input_dim: Optional[int] = None) -> "ExtraTreesConfig":
        if self.k < 1:
            raise ValueError("k must be at least 1")
        if input_dim is not None and self.k > input_dim:
            raise ValueError(f"k={self.k} exceeds the input dimension {input_dim}")
        if self.n_min < 1:
            raise ValueError("n_min must be at least 1")
        if self.nb_trees < 1:
            raise ValueError("nb_trees must be at least 1")
        if self.min_var < 0:
            raise ValueError("min_var must be non-negative")
        return self

    def names(self) -> List[str]:
        return ["k", "nMin", "nbTrees", "minVar", "bootstrap", "apprType"]

    def values(self) -> List[str]:
        return [
            str(self.k),
            str(self.n_min),
            str(self.nb_trees),
            repr(float(self.min_var)),
            str(bool(self.bootstrap)).lower(),
            str(self.appr_type),
        ]

    def load(self, names: Sequence[str], values: Sequence[str]) -> "ExtraTreesConfig":
        _check_names(names, self.names(), "ExtraTreesConfig")
        self.k = int(values[0])
        self.n_min = int(values[1])
        self.nb_trees = int(values[2])
        self.min_var = float(values[3])
        self.bootstrap = _parse_bool(values[4])
        self.appr_type = ApproximationType.load(values[5])
        return self


@dataclass
class BB2TreeConfig:
    """
    Parameters of the active best-first grower.

    Parameters
    ----------
    space:
        ``(D, 2)`` bounding box of the problem (min, max per dimension).
    eval_func:
        Oracle called once per requested sample; may be expensive.
    appr_type:
        Kind of approximation held by the leaves.
    k:
        Number of dimensions tried per split.
    min_pot_gain:
        Leaves whose potential gain is below this value are not split.
    max_leafs:
        Leaf budget of each tree.
    n_min:
        Minimal number of samples on each side of a split; every node holds at
        least ``2 * n_min`` samples.
    min_density:
        Minimal number of samples per unit of volume.
    nb_trees:
        Number of trees in the forest.
    share_samples:
        When True, all trees of a forest draw from and append to one training
        set instead of starting from a fresh copy.
    oracle_n_jobs:
        Number of joblib workers used to evaluate the oracle during one
        sampling step. ``None`` evaluates sequentially.
    """

    space: np.ndarray
    eval_func: Optional[Callable[[np.ndarray], float]] = None
    appr_type: ApproximationType = ApproximationType.PWC
    k: int = 1
    min_pot_gain: float = 0.0
    max_leafs: int = 1
    n_min: int = 1
    min_density: float = 0.0
    nb_trees: int = 1
    share_samples: bool = False
    oracle_n_jobs: Optional[int] = None

    def __post_init__(self):
        self.space = np.asarray(self.space, dtype=float)
        self.appr_type = ApproximationType.load(self.appr_type)

    @property
    def input_dim(self) -> int:
        return int(self.space.shape[0])

    def validate(self) -> "BB2TreeConfig":
        self.space = check_space(self.space)
        if self.eval_func is None or not callable(self.eval_func):
            raise ValueError("eval_func must be a callable oracle")
        if not 1 <= self.k <= self.input_dim:
            raise ValueError(f"k must be in [1, {self.input_dim}], got {self.k}")
        if self.n_min < 1:
            raise ValueError("n_min must be at least 1")
        if self.max_leafs < 1:
            raise ValueError("max_leafs must be at least 1")
        if self.nb_trees < 1:
            raise ValueError("nb_trees must be at least 1")
        if self.min_density < 0 or not math.isfinite(self.min_density):
            raise ValueError("min_density must be a finite non-negative number")
        return self

    def names(self) -> List[str]:
        return ["ApprType", "k", "minPotGain", "maxLeafs", "nMin", "minDensity", "nbTrees"]

    def values(self) -> List[str]:
        return [
            str(self.appr_type),
            str(self.k),
            repr(float(self.min_pot_gain)),
            str(self.max_leafs),
            str(self.n_min),
            repr(float(self.min_density)),
            str(self.nb_trees),
        ]

    def load(self, names: Sequence[str], values: Sequence[str]) -> "BB2TreeConfig":
        _check_names(names, self.names(), "BB2TreeConfig")
        self.appr_type = ApproximationType.load(values[0])
        self.k = int(values[1])
        self.min_pot_gain = float(values[2])
        self.max_leafs = int(values[3])
        self.n_min = int(values[4])
        self.min_density = float(values[5])
        self.nb_trees = int(values[6])
        return self
