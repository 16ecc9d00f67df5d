"""Public package exports for regression_forests."""

from .approximations import (
    Approximation,
    ApproximationType,
    PWCApproximation,
    PWLApproximation,
)
from .blackbox_tree import SplitEntry, bb2_forest, bb2_tree
from .config import BB2TreeConfig, ExtraTreesConfig
from .estimators import BlackBoxForestRegressor, ExtraTreesRegressor
from .evaluation import accuracy, oracle_accuracy, prediction_stability
from .randomized_tree import extra_trees, extra_trees_from_config, learn, learn_from_config
from .regression_forest import RegressionForest
from .regression_tree import OrthogonalSplit, RegressionNode, RegressionTree
from .split_utils import EmptyPartitionError, SplitCandidate, eval_split_score, find_best_split
from .training_set import Sample, TrainingSet

__all__ = [
    # Estimators
    "ExtraTreesRegressor",
    "BlackBoxForestRegressor",
    # Growers
    "learn",
    "learn_from_config",
    "extra_trees",
    "extra_trees_from_config",
    "bb2_tree",
    "bb2_forest",
    "ExtraTreesConfig",
    "BB2TreeConfig",
    # Data model
    "Sample",
    "TrainingSet",
    "OrthogonalSplit",
    "RegressionNode",
    "RegressionTree",
    "RegressionForest",
    "Approximation",
    "ApproximationType",
    "PWCApproximation",
    "PWLApproximation",
    # Split search
    "SplitCandidate",
    "SplitEntry",
    "EmptyPartitionError",
    "eval_split_score",
    "find_best_split",
    # Evaluation utilities
    "accuracy",
    "oracle_accuracy",
    "prediction_stability",
]

__version__ = "0.1.0"
