"""Regression trees with orthogonal splits and local approximations in the leaves."""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

from ._types import Subset
from .approximations import Approximation


@dataclass(frozen=True)
class OrthogonalSplit:
    """Hyperplane ``x[dim] == val``; samples with ``x[dim] < val`` go to the lower child."""

    dim: int
    val: float

    def is_lower(self, x: np.ndarray) -> bool:
        return bool(x[self.dim] < self.val)


class RegressionNode:
    """
    A leaf (holding an approximation) or an internal node (holding a split and
    two children). The leaf -> internal transition happens once, in
    :meth:`split_on`.
    """

    def __init__(self, node_id: int, approximation: Optional[Approximation] = None):
        self.node_id = node_id
        self.approximation = approximation
        self.split: Optional[OrthogonalSplit] = None
        self.lower_child: Optional["RegressionNode"] = None
        self.upper_child: Optional["RegressionNode"] = None
        # indices of the samples a leaf was fitted on, kept for diagnostics
        self.samples: Optional[Subset] = None

    @property
    def is_leaf(self) -> bool:
        return self.split is None

    def make_leaf(self, approximation: Approximation, samples: Optional[Subset] = None):
        if not self.is_leaf:
            raise RuntimeError(f"Node {self.node_id} has already been split")
        self.approximation = approximation
        self.samples = samples

    def split_on(
        self, split: OrthogonalSplit, lower: "RegressionNode", upper: "RegressionNode"
    ) -> Tuple["RegressionNode", "RegressionNode"]:
        if not self.is_leaf:
            raise RuntimeError(f"Node {self.node_id} has already been split")
        self.approximation = None
        self.samples = None
        self.split = split
        self.lower_child = lower
        self.upper_child = upper
        return lower, upper

    def eval(self, x: np.ndarray) -> float:
        node = self
        while not node.is_leaf:
            node = node.lower_child if node.split.is_lower(x) else node.upper_child
        if node.approximation is None:
            raise RuntimeError(f"Leaf {node.node_id} has no approximation")
        return node.approximation.eval(x)

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"RegressionNode(id={self.node_id}, leaf={self.approximation!r})"
        return f"RegressionNode(id={self.node_id}, split=({self.split.dim}, {self.split.val:.6g}))"


class RegressionTree:
    """Owns a root node and allocates stable node ids in creation order."""

    def __init__(self):
        self._next_id = 0
        self.root = self.new_node()

    def new_node(self) -> RegressionNode:
        node = RegressionNode(self._next_id)
        self._next_id += 1
        return node

    def split_node(self, node: RegressionNode, split: OrthogonalSplit):
        """Turn leaf ``node`` into an internal node with two fresh leaf children."""
        return node.split_on(split, self.new_node(), self.new_node())

    def eval(self, x) -> float:
        return self.root.eval(np.asarray(x, dtype=float))

    def predict(self, X) -> np.ndarray:
        X = np.atleast_2d(np.asarray(X, dtype=float))
        return np.array([self.root.eval(x) for x in X])

    # convenience
    def leaves(self) -> Iterator[RegressionNode]:
        stack = [self.root]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node
            else:
                stack.append(node.upper_child)
                stack.append(node.lower_child)

    def count_leaves(self) -> int:
        return sum(1 for _ in self.leaves())

    def count_splits(self) -> int:
        """Number of internal nodes."""
        count = 0
        stack = [self.root]
        while stack:
            node = stack.pop()
            if not node.is_leaf:
                count += 1
                stack.append(node.lower_child)
                stack.append(node.upper_child)
        return count

    def depth(self) -> int:
        deepest = 0
        stack = [(self.root, 0)]
        while stack:
            node, d = stack.pop()
            if node.is_leaf:
                deepest = max(deepest, d)
            else:
                stack.append((node.lower_child, d + 1))
                stack.append((node.upper_child, d + 1))
        return deepest

    def __repr__(self) -> str:
        return f"RegressionTree(leaves={self.count_leaves()}, depth={self.depth()})"
