"""Random sampling helpers shared by the growers."""

from typing import List, Optional, Union

import numpy as np

from ._types import Space
from .space import check_space

RandomStateLike = Union[None, int, np.random.Generator]


def get_uniform_samples(space: Space, count: int, rng: np.random.Generator) -> np.ndarray:
    """Draw ``count`` independent points uniformly inside ``space``."""
    space = check_space(space)
    if count < 0:
        raise ValueError("count must be non-negative")
    low, high = space[:, 0], space[:, 1]
    return rng.uniform(low, high, size=(count, space.shape[0]))


def get_k_distinct_from_n(k: int, n: int, rng: np.random.Generator) -> np.ndarray:
    """Draw ``k`` distinct indices in ``[0, n)`` without replacement."""
    if not 0 < k <= n:
        raise ValueError(f"Cannot draw {k} distinct elements out of {n}")
    return rng.choice(n, size=k, replace=False)


def bootstrap_indices(n: int, rng: np.random.Generator) -> np.ndarray:
    """Indices of a bootstrap resample (with replacement) of size ``n``."""
    return rng.integers(0, n, size=n)


def spawn_rngs(random_state: RandomStateLike, n: int) -> List[np.random.Generator]:
    """
    Independent generators for ``n`` trees.

    The streams only depend on ``random_state``, so a forest is reproducible
    whatever the number of jobs used to build it.
    """
    if isinstance(random_state, np.random.Generator):
        seed: Optional[int] = int(random_state.integers(np.iinfo(np.int64).max))
    else:
        seed = random_state
    return [np.random.default_rng(s) for s in np.random.SeedSequence(seed).spawn(n)]
