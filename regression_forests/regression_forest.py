"""Ensembles of regression trees."""

from typing import Iterator, List, Optional

import numpy as np

from .regression_tree import RegressionTree


class RegressionForest:
    """
    Ordered collection of independently owned trees.

    ``eval`` and ``predict`` average the member predictions; callers wanting a
    different aggregation can use :meth:`predict_members`.
    """

    def __init__(self, trees: Optional[List[RegressionTree]] = None):
        self.trees: List[RegressionTree] = list(trees) if trees is not None else []

    def push(self, tree: RegressionTree):
        self.trees.append(tree)

    def __len__(self) -> int:
        return len(self.trees)

    def __iter__(self) -> Iterator[RegressionTree]:
        return iter(self.trees)

    def __getitem__(self, index: int) -> RegressionTree:
        return self.trees[index]

    def _check_not_empty(self):
        if not self.trees:
            raise ValueError("Cannot evaluate an empty forest")

    def eval(self, x) -> float:
        self._check_not_empty()
        return float(np.mean([t.eval(x) for t in self.trees]))

    def predict_members(self, X) -> np.ndarray:
        """Predictions of every tree, shape ``(n_trees, n_rows)``."""
        self._check_not_empty()
        return np.vstack([t.predict(X) for t in self.trees])

    def predict(self, X) -> np.ndarray:
        return self.predict_members(X).mean(axis=0)

    def count_leaves(self) -> int:
        return sum(t.count_leaves() for t in self.trees)

    def __repr__(self) -> str:
        return f"RegressionForest(n_trees={len(self.trees)}, leaves={self.count_leaves()})"
