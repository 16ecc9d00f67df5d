"""
blackbox_tree.py
----------------
Best-first tree growth with active sampling.

Instead of consuming a fixed dataset, the grower asks an oracle for new
samples whenever a region holds too few of them. Candidate splits of every
leaf are kept in one priority queue ordered by their expected gain
(``split score * region volume``); the most promising one is committed first,
until the queue is empty or the leaf budget is spent.
"""

import heapq
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import numpy as np
from joblib import Parallel, delayed

from ._types import Space, Subset
from .approximations import Approximation, get_approximation, mean_squared_residual
from .config import BB2TreeConfig
from .regression_forest import RegressionForest
from .regression_tree import OrthogonalSplit, RegressionNode, RegressionTree
from .sampling import RandomStateLike, get_uniform_samples, spawn_rngs
from .space import space_volume, split_space
from .split_utils import EmptyPartitionError, find_best_split
from .training_set import TrainingSet

logger = logging.getLogger(__name__)


@dataclass(order=True)
class SplitEntry:
    """
    Pending split of a leaf.

    Entries sort by decreasing gain, then by increasing node id, so that
    ``heapq`` pops the most promising split first and ties resolve the same
    way on every run.
    """

    sort_key: Tuple[float, int] = field(init=False, repr=False)
    node: RegressionNode = field(compare=False)
    gain: float = field(compare=False)
    split: OrthogonalSplit = field(compare=False)
    samples: Subset = field(compare=False, repr=False)
    space: Space = field(compare=False, repr=False)

    def __post_init__(self):
        self.sort_key = (-self.gain, self.node.node_id)


def populate(
    ts: TrainingSet,
    samples: Subset,
    space: Space,
    min_size: int,
    min_density: float,
    eval_func: Callable[[np.ndarray], float],
    rng: np.random.Generator,
    n_jobs: Optional[int] = None,
) -> Subset:
    """
    Top up ``samples`` with oracle evaluations of uniform points in ``space``.

    The node is brought to ``max(min_size, ceil(min_density * volume))``
    samples; new samples are appended to ``ts``. Returns the extended subset.
    """
    min_samples_by_density = math.ceil(min_density * space_volume(space))
    wished = max(min_size, min_samples_by_density) - len(samples)
    if wished <= 0:
        return samples
    inputs = get_uniform_samples(space, wished, rng)
    if n_jobs is None or n_jobs == 1:
        outputs = [eval_func(x) for x in inputs]
    else:
        outputs = Parallel(n_jobs=n_jobs, prefer="threads")(delayed(eval_func)(x) for x in inputs)
    outputs = np.asarray(outputs, dtype=float).ravel()
    if outputs.shape[0] != wished or not np.all(np.isfinite(outputs)):
        raise ValueError("The evaluation function must return one finite value per input")
    new_samples = ts.extend(inputs, outputs)
    return np.concatenate([np.asarray(samples, dtype=np.intp), new_samples])


def potential_gain(
    ts: TrainingSet, samples: Subset, approximation: Approximation, space: Space
) -> float:
    """Upper bound of the squared error a refinement of ``space`` can remove."""
    return mean_squared_residual(ts, samples, approximation) * space_volume(space)


class _ActiveGrower:
    def __init__(self, config: BB2TreeConfig, ts: TrainingSet, rng: np.random.Generator):
        self.config = config
        self.ts = ts
        self.rng = rng
        self.tree = RegressionTree()
        self.pending: List[SplitEntry] = []
        self.nb_leafs = 1

    def _treat(self, node: RegressionNode, samples: Subset, space: Space):
        c = self.config
        samples = populate(
            self.ts,
            samples,
            space,
            2 * c.n_min,
            c.min_density,
            c.eval_func,
            self.rng,
            c.oracle_n_jobs,
        )
        approximation = get_approximation(self.ts, samples, c.appr_type)
        node.make_leaf(approximation, samples)
        pot_gain = potential_gain(self.ts, samples, approximation, space)
        if pot_gain < c.min_pot_gain:
            return
        best = find_best_split(self.ts, samples, c.k, c.n_min, c.appr_type, self.rng)
        if best is None:
            logger.debug("No available splits for node %d", node.node_id)
            return
        gain = best.score * space_volume(space)
        heapq.heappush(self.pending, SplitEntry(node, gain, best.split, samples, space))

    def _report(self, entry: SplitEntry, lower_space: Space, upper_space: Space, exc: Exception):
        logger.error(
            "Error while treating one of the children of node %d: %s\n"
            "\tFatherSpace:\n%s\n\tLowerSpace:\n%s\n\tUpperSpace:\n%s\n"
            "\tSplitCandidate.gain: %g",
            entry.node.node_id,
            exc,
            entry.space,
            lower_space,
            upper_space,
            entry.gain,
        )

    def grow(self, samples: Subset) -> RegressionTree:
        c = self.config
        try:
            self._treat(self.tree.root, samples, c.space)
        except EmptyPartitionError as exc:
            logger.error("Error while treating the root, keeping a single leaf: %s", exc)

        while self.pending and self.nb_leafs < c.max_leafs:
            entry = heapq.heappop(self.pending)
            lower_samples, upper_samples = self.ts.apply_split(entry.split, entry.samples)
            lower_space, upper_space = split_space(entry.space, entry.split.dim, entry.split.val)
            if len(lower_samples) == 0 or len(upper_samples) == 0:
                exc = EmptyPartitionError(
                    entry.split, self.ts.dim_values(entry.samples, entry.split.dim)
                )
                self._report(entry, lower_space, upper_space, exc)
                continue

            lower, upper = self.tree.split_node(entry.node, entry.split)
            self.nb_leafs += 1
            for child, child_samples, child_space in (
                (lower, lower_samples, lower_space),
                (upper, upper_samples, upper_space),
            ):
                try:
                    self._treat(child, child_samples, child_space)
                except EmptyPartitionError as exc:
                    self._report(entry, lower_space, upper_space, exc)

        self.pending.clear()
        logger.info("NbLeafs: %d/%d", self.nb_leafs, c.max_leafs)
        return self.tree


def bb2_tree(
    config: BB2TreeConfig,
    training_set: Optional[TrainingSet] = None,
    rng: RandomStateLike = None,
) -> RegressionTree:
    """
    Grow one tree by best-first expansion with active sampling.

    Parameters
    ----------
    config : BB2TreeConfig
        Grower parameters, including the bounding space and the oracle.
    training_set : TrainingSet, optional
        Samples available before any oracle call. Every sample seeds the root
        and new oracle samples are appended to this set in place. A fresh set
        is used when omitted.
    rng : int, numpy Generator or None
        Source of randomness.
    """
    config.validate()
    if training_set is None:
        training_set = TrainingSet(config.input_dim)
    elif training_set.input_dim != config.input_dim:
        raise ValueError(
            f"Training set has dimension {training_set.input_dim}, "
            f"space has dimension {config.input_dim}"
        )
    grower = _ActiveGrower(config, training_set, np.random.default_rng(rng))
    return grower.grow(training_set.all_indices())


def bb2_forest(
    config: BB2TreeConfig,
    training_set: Optional[TrainingSet] = None,
    random_state: RandomStateLike = None,
    n_jobs: Optional[int] = None,
) -> RegressionForest:
    """
    Grow ``config.nb_trees`` trees with :func:`bb2_tree`.

    With ``config.share_samples`` all trees extend one training set (the
    given one, or a new one) and are grown one after the other. Otherwise
    each tree starts from its own copy of ``training_set`` and trees may be
    grown in parallel with ``n_jobs`` joblib threads.
    """
    config.validate()
    rngs = spawn_rngs(random_state, config.nb_trees)
    if config.share_samples:
        shared = training_set if training_set is not None else TrainingSet(config.input_dim)
        trees = [bb2_tree(config, shared, rng) for rng in rngs]
    else:
        trees = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(bb2_tree)(
                config, training_set.copy() if training_set is not None else None, rng
            )
            for rng in rngs
        )
    return RegressionForest(trees)
