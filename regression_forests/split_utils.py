"""
Split scoring and candidate search shared by both growers.

A split is scored by the fraction of the approximation error it removes
(variance reduction for constant leaves). The search tries ``k`` random
dimensions and draws one random threshold per dimension, inside the range that
keeps at least ``n_min`` samples on each side.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ._types import Subset
from .approximations import avg_squared_errors
from .regression_tree import OrthogonalSplit
from .sampling import get_k_distinct_from_n

logger = logging.getLogger(__name__)


class EmptyPartitionError(RuntimeError):
    """A split left one side without samples. Only possible if an invariant broke."""

    def __init__(self, split: OrthogonalSplit, dim_values: np.ndarray):
        self.split = split
        self.dim_values = np.sort(np.asarray(dim_values, dtype=float))
        super().__init__(
            f"One of the sample sets is empty for split ({split.dim}, {split.val!r}); "
            f"values along dim {split.dim}: {self.dim_values.tolist()}"
        )


@dataclass
class SplitCandidate:
    """Best split found for a node together with its score."""

    split: OrthogonalSplit
    score: float


def eval_split_score(ts, samples: Subset, split: OrthogonalSplit, appr_type) -> float:
    """
    Fraction of the approximation error explained by ``split``.

    Returns 0 when the subset has no error to remove. Raises
    :class:`EmptyPartitionError` when a side of the split is empty.
    """
    samples_lower, samples_upper = ts.apply_split(split, samples)
    if len(samples_lower) == 0 or len(samples_upper) == 0:
        raise EmptyPartitionError(split, ts.dim_values(samples, split.dim))

    var_all = avg_squared_errors(ts, samples, appr_type)
    if var_all == 0:
        return 0.0
    var_lower = avg_squared_errors(ts, samples_lower, appr_type)
    var_upper = avg_squared_errors(ts, samples_upper, appr_type)
    weighted_new_var = (
        var_lower * len(samples_lower) + var_upper * len(samples_upper)
    ) / len(samples)
    return (var_all - weighted_new_var) / var_all


def find_best_split(
    ts,
    samples: Subset,
    k: int,
    n_min: int,
    appr_type,
    rng: np.random.Generator,
) -> Optional[SplitCandidate]:
    """
    Try ``k`` distinct random dimensions and keep the best scoring split.

    Returns None when every tried dimension is degenerate (the ``n_min``-th
    smallest and largest values coincide).
    """
    if n_min < 1:
        raise ValueError("n_min must be at least 1")
    if len(samples) < n_min:
        raise ValueError(f"Cannot split {len(samples)} samples with n_min={n_min}")

    best: Optional[SplitCandidate] = None
    for dim in get_k_distinct_from_n(k, ts.input_dim, rng):
        dim = int(dim)
        sorted_samples = ts.sort_subset(samples, dim)
        s_val_min = ts.input_value(sorted_samples[n_min - 1], dim)
        s_val_max = ts.input_value(sorted_samples[len(sorted_samples) - n_min], dim)
        if s_val_min >= s_val_max:
            logger.debug(
                "No threshold range along dim %d: n_min-th smallest %g, n_min-th largest %g",
                dim,
                s_val_min,
                s_val_max,
            )
            continue
        val = float(rng.uniform(s_val_min, s_val_max))
        if val <= s_val_min:
            # samples at s_val_min must stay on the lower side
            val = float(np.nextafter(s_val_min, s_val_max))
        split = OrthogonalSplit(dim, val)
        score = eval_split_score(ts, samples, split, appr_type)
        if best is None or score > best.score:
            best = SplitCandidate(split, score)
    return best
