"""
Scikit-learn estimators wrapping the two growers.

- :class:`ExtraTreesRegressor` fits a forest of extremely randomized trees on
  a fixed dataset.
- :class:`BlackBoxForestRegressor` grows trees best-first, sampling an oracle
  function on demand inside a bounding space. Data passed to ``fit`` is only
  used to seed the training set.
"""

import threading
import time
from typing import Callable, Optional

import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_array, check_is_fitted, check_X_y

from .approximations import ApproximationType
from .blackbox_tree import bb2_forest
from .config import BB2TreeConfig, ExtraTreesConfig
from .randomized_tree import extra_trees_from_config
from .training_set import TrainingSet


class _CountingOracle:
    """Oracle wrapper counting its calls; safe to share between joblib threads."""

    def __init__(self, eval_func: Callable[[np.ndarray], float]):
        self.eval_func = eval_func
        self.n_calls = 0
        self._lock = threading.Lock()

    def __call__(self, x: np.ndarray) -> float:
        value = self.eval_func(x)
        with self._lock:
            self.n_calls += 1
        return value


class _ForestPredictorMixin:
    def predict(self, X):
        check_is_fitted(self, "forest_")
        X = check_array(X, accept_sparse=False)
        if X.shape[1] != self.n_features_in_:
            raise ValueError(
                f"X has {X.shape[1]} features, but the model was fitted with "
                f"{self.n_features_in_} features"
            )
        return self.forest_.predict(X)

    # convenience
    def count_leaves(self) -> int:
        check_is_fitted(self, "forest_")
        return self.forest_.count_leaves()


class ExtraTreesRegressor(_ForestPredictorMixin, RegressorMixin, BaseEstimator):
    """
    Forest of extremely randomized trees with constant or linear leaves.

    Parameters
    ----------
    n_estimators : int, default=10
        Number of trees.
    k : int or None, default=None
        Number of input dimensions tried per split. ``None`` tries all of them.
    n_min : int, default=1
        Nodes with at most ``n_min`` samples become leaves.
    min_variance : float, default=0.0
        Nodes whose output variance is at most this value become leaves.
    bootstrap : bool, default=False
        Grow each tree on a bootstrap resample of the data.
    approximation : {"PWC", "PWL"}, default="PWC"
        Constant or least-squares linear leaves.
    random_state : int or None, default=None
        Seed for reproducibility.
    n_jobs : int or None, default=None
        Number of joblib threads used to grow trees.

    Attributes
    ----------
    forest_ : RegressionForest
        The fitted trees.
    n_features_in_ : int
        Number of input features seen during fit.
    fit_time_sec_ : float
        Wall-clock fitting time.

    Examples
    --------
    >>> from sklearn.datasets import make_friedman1
    >>> X, y = make_friedman1(n_samples=300, random_state=0)
    >>> model = ExtraTreesRegressor(n_estimators=5, n_min=5, random_state=0).fit(X, y)
    >>> model.predict(X[:3]).shape
    (3,)
    """

    def __init__(
        self,
        n_estimators=10,
        k=None,
        n_min=1,
        min_variance=0.0,
        bootstrap=False,
        approximation="PWC",
        random_state=None,
        n_jobs=None,
    ):
        self.n_estimators = n_estimators
        self.k = k
        self.n_min = n_min
        self.min_variance = min_variance
        self.bootstrap = bootstrap
        self.approximation = approximation
        self.random_state = random_state
        self.n_jobs = n_jobs

    def fit(self, X, y):
        X, y = check_X_y(X, y, accept_sparse=False, y_numeric=True)
        t0 = time.time()
        self.n_features_in_ = X.shape[1]
        config = ExtraTreesConfig(
            k=self.k if self.k is not None else X.shape[1],
            n_min=self.n_min,
            nb_trees=self.n_estimators,
            min_var=self.min_variance,
            bootstrap=self.bootstrap,
            appr_type=ApproximationType.load(self.approximation),
        )
        ts = TrainingSet.from_arrays(X, y)
        self.forest_ = extra_trees_from_config(
            ts, config, random_state=self.random_state, n_jobs=self.n_jobs
        )
        self.fit_time_sec_ = time.time() - t0
        return self


class BlackBoxForestRegressor(_ForestPredictorMixin, RegressorMixin, BaseEstimator):
    """
    Forest grown best-first by actively sampling a black-box function.

    Parameters
    ----------
    eval_func : callable
        Oracle mapping an input vector to a float. Called once per sample.
    space : array-like of shape (n_features, 2)
        Bounding box (min, max) of the input space.
    n_estimators : int, default=1
        Number of trees.
    k : int, default=1
        Number of input dimensions tried per split.
    n_min : int, default=1
        Minimal number of samples on each side of a split.
    min_pot_gain : float, default=0.0
        Leaves whose potential gain (mean squared residual times volume) is
        below this value are not split.
    max_leafs : int, default=64
        Leaf budget of each tree.
    min_density : float, default=0.0
        Minimal number of samples per unit of volume.
    approximation : {"PWC", "PWL"}, default="PWC"
        Constant or least-squares linear leaves.
    share_samples : bool, default=False
        Let all trees reuse and extend one training set.
    random_state : int or None, default=None
        Seed for reproducibility.
    n_jobs : int or None, default=None
        Number of joblib threads used to grow trees (ignored with
        ``share_samples``).
    oracle_n_jobs : int or None, default=None
        Number of joblib threads used to evaluate the oracle in one sampling step.

    Attributes
    ----------
    forest_ : RegressionForest
        The fitted trees.
    training_set_ : TrainingSet or None
        The shared training set when ``share_samples`` is set.
    n_oracle_calls_ : int
        Number of oracle evaluations performed during fit.
    n_features_in_ : int
        Dimension of the input space.
    fit_time_sec_ : float
        Wall-clock fitting time.
    """

    def __init__(
        self,
        eval_func=None,
        space=None,
        n_estimators=1,
        k=1,
        n_min=1,
        min_pot_gain=0.0,
        max_leafs=64,
        min_density=0.0,
        approximation="PWC",
        share_samples=False,
        random_state=None,
        n_jobs=None,
        oracle_n_jobs=None,
    ):
        self.eval_func = eval_func
        self.space = space
        self.n_estimators = n_estimators
        self.k = k
        self.n_min = n_min
        self.min_pot_gain = min_pot_gain
        self.max_leafs = max_leafs
        self.min_density = min_density
        self.approximation = approximation
        self.share_samples = share_samples
        self.random_state = random_state
        self.n_jobs = n_jobs
        self.oracle_n_jobs = oracle_n_jobs

    def fit(self, X=None, y=None):
        """Grow the forest; ``X`` and ``y``, when given, seed the training set."""
        if self.space is None:
            raise ValueError("space must be provided")
        t0 = time.time()
        oracle = _CountingOracle(self.eval_func) if callable(self.eval_func) else None
        config = BB2TreeConfig(
            space=self.space,
            eval_func=oracle,
            appr_type=ApproximationType.load(self.approximation),
            k=self.k,
            min_pot_gain=self.min_pot_gain,
            max_leafs=self.max_leafs,
            n_min=self.n_min,
            min_density=self.min_density,
            nb_trees=self.n_estimators,
            share_samples=self.share_samples,
            oracle_n_jobs=self.oracle_n_jobs,
        ).validate()
        self.n_features_in_ = config.input_dim

        training_set: Optional[TrainingSet] = None
        if X is not None:
            if y is None:
                raise ValueError("y must be provided together with X")
            X, y = check_X_y(X, y, accept_sparse=False, y_numeric=True)
            if X.shape[1] != config.input_dim:
                raise ValueError(
                    f"X has {X.shape[1]} features, but space has {config.input_dim} dimensions"
                )
            training_set = TrainingSet.from_arrays(X, y)
        elif self.share_samples:
            training_set = TrainingSet(config.input_dim)

        self.forest_ = bb2_forest(
            config, training_set, random_state=self.random_state, n_jobs=self.n_jobs
        )
        self.training_set_ = training_set if self.share_samples else None
        self.n_oracle_calls_ = oracle.n_calls
        self.fit_time_sec_ = time.time() - t0
        return self
