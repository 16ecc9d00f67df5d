"""
Axis-aligned hyper-rectangles.

A space is a ``(D, 2)`` float array: column 0 holds the per-dimension minimum,
column 1 the maximum.
"""

from typing import Tuple

import numpy as np

from ._types import Space


def check_space(space) -> Space:
    """Validate a space and return it as a float array."""
    space = np.asarray(space, dtype=float)
    if space.ndim != 2 or space.shape[1] != 2:
        raise ValueError(f"Expecting a (D, 2) space, got shape {space.shape}")
    if space.shape[0] == 0:
        raise ValueError("Space must have at least one dimension")
    if np.any(space[:, 1] < space[:, 0]):
        bad = np.where(space[:, 1] < space[:, 0])[0].tolist()
        raise ValueError(f"Space has a max inferior to min in dimensions {bad}")
    return space


def space_volume(space) -> float:
    """Product of the per-dimension extents; zero-width dimensions give 0."""
    space = check_space(space)
    return float(np.prod(space[:, 1] - space[:, 0]))


def split_space(space: Space, dim: int, val: float) -> Tuple[Space, Space]:
    """Cut ``space`` at ``val`` along ``dim`` into (lower, upper) copies."""
    lower = np.array(space, dtype=float, copy=True)
    upper = np.array(space, dtype=float, copy=True)
    lower[dim, 1] = val
    upper[dim, 0] = val
    return lower, upper


def bounding_space(X: np.ndarray) -> Space:
    """Smallest space containing every row of ``X``."""
    X = np.asarray(X, dtype=float)
    if X.ndim != 2 or X.shape[0] == 0:
        raise ValueError("X must be a non-empty 2D array")
    return np.column_stack([X.min(axis=0), X.max(axis=0)])


def contains(space: Space, x: np.ndarray) -> bool:
    x = np.asarray(x, dtype=float)
    return bool(np.all(x >= space[:, 0]) and np.all(x <= space[:, 1]))
