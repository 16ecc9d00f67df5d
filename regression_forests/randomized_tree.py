"""
randomized_tree.py
------------------
Extremely randomized trees (Geurts et al., 2006) with constant or linear leaves.

Each node tries ``k`` random dimensions, draws one random threshold per
dimension and keeps the split explaining the largest share of the error.
Growth is depth-first and stops on small or (nearly) constant nodes.
"""

import logging
from typing import Optional

import numpy as np
from joblib import Parallel, delayed

from ._types import Space, Subset
from .approximations import ApproximationType, get_approximation
from .config import ExtraTreesConfig
from .regression_forest import RegressionForest
from .regression_tree import RegressionNode, RegressionTree
from .sampling import RandomStateLike, spawn_rngs
from .space import bounding_space, split_space
from .split_utils import EmptyPartitionError, find_best_split
from .training_set import TrainingSet

logger = logging.getLogger(__name__)


class _RandomizedGrower:
    def __init__(self, ts: TrainingSet, config: ExtraTreesConfig, rng: np.random.Generator):
        self.ts = ts
        self.config = config
        self.rng = rng
        self.tree = RegressionTree()

    def _make_leaf(self, node: RegressionNode, samples: Subset):
        node.make_leaf(get_approximation(self.ts, samples, self.config.appr_type), samples)

    def _grow(self, node: RegressionNode, samples: Subset, space: Space):
        """Split ``node`` or make it a leaf; return the children to grow next."""
        c = self.config
        if len(samples) <= c.n_min or np.var(self.ts.values(samples)) <= c.min_var:
            self._make_leaf(node, samples)
            return []

        try:
            best = find_best_split(self.ts, samples, c.k, c.n_min, c.appr_type, self.rng)
            if best is None:
                logger.debug("No available split for node %d (%d samples)", node.node_id, len(samples))
                self._make_leaf(node, samples)
                return []
            lower_samples, upper_samples = self.ts.apply_split(best.split, samples)
            if len(lower_samples) == 0 or len(upper_samples) == 0:
                raise EmptyPartitionError(best.split, self.ts.dim_values(samples, best.split.dim))
        except EmptyPartitionError as exc:
            logger.error(
                "Error while splitting node %d, keeping it as a leaf: %s\n\tSpace:\n%s",
                node.node_id,
                exc,
                space,
            )
            self._make_leaf(node, samples)
            return []

        lower, upper = self.tree.split_node(node, best.split)
        lower_space, upper_space = split_space(space, best.split.dim, best.split.val)
        return [(lower, lower_samples, lower_space), (upper, upper_samples, upper_space)]

    def grow(self) -> RegressionTree:
        samples = self.ts.all_indices()
        # depth-first, lower child first; no recursion so depth is not bounded
        stack = [(self.tree.root, samples, bounding_space(self.ts.inputs(samples)))]
        while stack:
            children = self._grow(*stack.pop())
            stack.extend(reversed(children))
        return self.tree


def learn_from_config(
    ts: TrainingSet, config: ExtraTreesConfig, rng: RandomStateLike = None
) -> RegressionTree:
    """Grow one tree on the whole training set."""
    if len(ts) == 0:
        raise ValueError("Training set must contain at least one sample.")
    config.validate(ts.input_dim)
    return _RandomizedGrower(ts, config, np.random.default_rng(rng)).grow()


def learn(
    ts: TrainingSet,
    k: int,
    n_min: int,
    min_variance: float = 0.0,
    appr_type=ApproximationType.PWC,
    rng: RandomStateLike = None,
) -> RegressionTree:
    """
    Grow one extremely randomized tree.

    Parameters
    ----------
    ts : TrainingSet
        Samples to fit.
    k : int
        Number of dimensions tried per split.
    n_min : int
        Nodes with at most ``n_min`` samples become leaves.
    min_variance : float, default=0.0
        Nodes whose output variance is at most this value become leaves.
    appr_type : ApproximationType or str, default=PWC
        Kind of approximation held by the leaves.
    rng : int, numpy Generator or None
        Source of randomness.
    """
    config = ExtraTreesConfig(k=k, n_min=n_min, min_var=min_variance, appr_type=appr_type)
    return learn_from_config(ts, config, rng)


def _build_tree(ts: TrainingSet, config: ExtraTreesConfig, rng: np.random.Generator):
    source = ts.bootstrap(rng) if config.bootstrap else ts
    return learn_from_config(source, config, rng)


def extra_trees_from_config(
    ts: TrainingSet,
    config: ExtraTreesConfig,
    random_state: RandomStateLike = None,
    n_jobs: Optional[int] = None,
) -> RegressionForest:
    """Grow ``config.nb_trees`` independent trees; the training set is only read."""
    if len(ts) == 0:
        raise ValueError("Training set must contain at least one sample.")
    config.validate(ts.input_dim)
    rngs = spawn_rngs(random_state, config.nb_trees)
    trees = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(_build_tree)(ts, config, rng) for rng in rngs
    )
    forest = RegressionForest(trees)
    logger.info("Built %d extra trees with %d leaves in total", len(forest), forest.count_leaves())
    return forest


def extra_trees(
    ts: TrainingSet,
    k: int,
    n_min: int,
    nb_trees: int,
    min_variance: float = 0.0,
    bootstrap: bool = False,
    appr_type=ApproximationType.PWC,
    random_state: RandomStateLike = None,
    n_jobs: Optional[int] = None,
) -> RegressionForest:
    """Forest of ``nb_trees`` extremely randomized trees, see :func:`learn`."""
    config = ExtraTreesConfig(
        k=k,
        n_min=n_min,
        nb_trees=nb_trees,
        min_var=min_variance,
        bootstrap=bootstrap,
        appr_type=appr_type,
    )
    return extra_trees_from_config(ts, config, random_state=random_state, n_jobs=n_jobs)
