"""Entropy-guided binary decision tree classifier."""

from __future__ import annotations

import numpy as np
from loguru import logger

from forestkit.exceptions import CorruptedTreeError, NotFittedError
from forestkit.rng import MersenneTwister
from forestkit.sampling import subsample_features
from forestkit.tree.criteria import entropy, majority_class
from forestkit.tree.node import Node
from forestkit.tree.splitting import find_best_split
from forestkit.validation import FeatureMatrixLike, LabelVectorLike, as_feature_matrix, as_training_data


class DecisionTree:
    """Binary classification tree grown by exhaustive entropy minimization.

    Growth is pre-order from the root: a node is split when the depth bound
    allows it, its labels are impure, and some threshold leaves both children
    non-empty. Nodes are visited with an explicit stack (left subtree before
    right), so deep trees do not hit the interpreter's recursion limit.

    Args:
        max_depth (int | None): Maximum depth; None grows until every leaf is
            pure or unsplittable.
        feature_fraction (float): Fraction of features considered at each
            split, in `(0, 1]`. The default considers every feature.
        generator (MersenneTwister | None): Generator for feature subsampling.
            A fresh default-seeded generator is used when omitted.

    Examples:
        >>> tree = DecisionTree().fit([[0.0], [0.0], [1.0], [1.0]], [0, 0, 1, 1])
        >>> tree.predict([[0.0], [1.0]]).tolist()
        [0, 1]
    """

    def __init__(
        self,
        max_depth: int | None = None,
        *,
        feature_fraction: float = 1.0,
        generator: MersenneTwister | None = None,
    ) -> None:
        if max_depth is not None and max_depth < 1:
            raise ValueError(f"max_depth must be a positive integer or None, got {max_depth}")
        if not 0.0 < feature_fraction <= 1.0:
            raise ValueError(f"feature_fraction must be in (0, 1], got {feature_fraction}")
        self.max_depth = max_depth
        self.feature_fraction = feature_fraction
        self._generator = generator if generator is not None else MersenneTwister()
        self._root: Node | None = None
        self._data: np.ndarray | None = None
        self._targets: np.ndarray | None = None

    @property
    def root(self) -> Node:
        if self._root is None:
            raise NotFittedError("DecisionTree has not been fitted")
        return self._root

    @property
    def is_fitted(self) -> bool:
        return self._root is not None

    @property
    def n_features(self) -> int:
        if self._data is None:
            raise NotFittedError("DecisionTree has not been fitted")
        return int(self._data.shape[1])

    def fit(self, data: FeatureMatrixLike, targets: LabelVectorLike) -> DecisionTree:
        """Grow the tree on a training set.

        Args:
            data (FeatureMatrixLike): Training matrix, shape `(n_samples, n_features)`.
            targets (LabelVectorLike): Non-negative integer labels, one per row.

        Returns:
            DecisionTree: This tree, fitted.
        """
        matrix, labels = as_training_data(data, targets)
        all_indices = np.arange(matrix.shape[0], dtype=np.int64)
        root = Node.leaf(all_indices, majority_class(labels))
        self._grow(root, matrix, labels)
        self._root, self._data, self._targets = root, matrix, labels
        logger.debug("Tree fitted", depth=self.depth(), leaves=self.leaf_count(), samples=all_indices.size)
        return self

    def _grow(self, root: Node, data: np.ndarray, targets: np.ndarray) -> None:
        n_features = data.shape[1]

        stack: list[tuple[Node, int]] = [(root, 0)]
        while stack:
            node, depth = stack.pop()

            criterion = entropy(targets[node.indices])
            if not Node.can_split(depth, self.max_depth, criterion):
                continue

            features = subsample_features(n_features, self._generator, self.feature_fraction)
            candidate = find_best_split(data, targets, node.indices, features)
            if candidate is None:
                continue

            left = Node.leaf(candidate.left_indices, majority_class(targets[candidate.left_indices]))
            right = Node.leaf(candidate.right_indices, majority_class(targets[candidate.right_indices]))
            node.split(candidate.feature, candidate.threshold, left, right)

            stack.append((right, depth + 1))
            stack.append((left, depth + 1))

    def predict(self, data: FeatureMatrixLike) -> np.ndarray:
        """Predict a class for each row by walking from the root to a leaf.

        Args:
            data (FeatureMatrixLike): Matrix with the training column count.

        Returns:
            np.ndarray: 1-D int64 array of predicted classes.

        Raises:
            NotFittedError: If the tree has not been fitted.
            FeatureCountMismatchError: If the column count differs from training.
            CorruptedTreeError: If an internal node has no feature, threshold or child.
        """
        root = self.root
        matrix = as_feature_matrix(data, n_features=self.n_features)
        predictions = np.empty(matrix.shape[0], dtype=np.int64)
        for row_index, row in enumerate(matrix):
            predictions[row_index] = self._predict_row(root, row)
        return predictions

    @staticmethod
    def _predict_row(root: Node, row: np.ndarray) -> int:
        node = root
        depth = 0
        while not node.is_leaf:
            if node.split_feature is None or node.split_threshold is None or node.left is None or node.right is None:
                raise CorruptedTreeError(
                    "Split feature index or split value is not set for a non-leaf node",
                    node_depth=depth,
                )
            node = node.left if row[node.split_feature] <= node.split_threshold else node.right
            depth += 1
        return node.predicted_class

    def _walk(self) -> list[tuple[Node, int]]:
        """Return `(node, depth)` pairs in pre-order."""
        visited: list[tuple[Node, int]] = []
        stack: list[tuple[Node, int]] = [(self.root, 0)]
        while stack:
            node, depth = stack.pop()
            visited.append((node, depth))
            if not node.is_leaf:
                if node.right is not None:
                    stack.append((node.right, depth + 1))
                if node.left is not None:
                    stack.append((node.left, depth + 1))
        return visited

    def depth(self) -> int:
        """Return the depth of the deepest node (a single leaf has depth 0)."""
        return max(depth for _, depth in self._walk())

    def leaf_count(self) -> int:
        """Return the number of leaves."""
        return sum(1 for node, _ in self._walk() if node.is_leaf)

    def render(self) -> str:
        """Render the tree as indented text, one node per line.

        Returns:
            str: A pre-order dump, e.g.::

                [depth 0] feature 0 <= 0.5
                  [depth 1] leaf: class 0 (2 samples)
                  [depth 1] leaf: class 1 (2 samples)
        """
        lines = []
        for node, depth in self._walk():
            indent = "  " * depth
            if node.is_leaf:
                lines.append(f"{indent}[depth {depth}] leaf: class {node.predicted_class} ({node.indices.size} samples)")
            else:
                lines.append(f"{indent}[depth {depth}] feature {node.split_feature} <= {node.split_threshold:g}")
        return "\n".join(lines)
