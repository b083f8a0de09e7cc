"""Binary decision tree node."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

import numpy as np

from forestkit.exceptions import NodeAlreadySplitError

NO_CLASS: Final[int] = -1  # predicted_class of an internal node


@dataclass(eq=False)
class Node:
    """A decision tree node: a leaf or an internal split.

    A leaf holds the training indices it was built from and a predicted class.
    An internal node holds a feature index, a threshold and two owned children;
    its `predicted_class` is `NO_CLASS`. Rows with `value <= split_threshold`
    go left, the rest go right.

    Attributes:
        indices (np.ndarray): Training row indices that reached this node.
        predicted_class (int): Majority class for leaves, `NO_CLASS` otherwise.
        is_leaf (bool): True until `split` is called.
        split_feature (int | None): Feature index of the split.
        split_threshold (float | None): Split threshold.
        left (Node | None): Child for `value <= split_threshold`.
        right (Node | None): Child for `value > split_threshold`.
    """

    indices: np.ndarray = field(repr=False)
    predicted_class: int
    is_leaf: bool = True
    split_feature: int | None = None
    split_threshold: float | None = None
    left: Node | None = field(default=None, repr=False)
    right: Node | None = field(default=None, repr=False)

    @classmethod
    def leaf(cls, indices: np.ndarray | list[int], predicted_class: int) -> Node:
        """Create a leaf node.

        Args:
            indices (np.ndarray | list[int]): Training row indices (may be empty).
            predicted_class (int): Class predicted for rows reaching this leaf.

        Returns:
            Node: A new leaf.
        """
        return cls(indices=np.asarray(indices, dtype=np.int64), predicted_class=predicted_class)

    def split(self, feature: int, threshold: float, left: Node, right: Node) -> None:
        """Turn this leaf into an internal node.

        Args:
            feature (int): Index of the feature to split on.
            threshold (float): Rows with `value <= threshold` go left.
            left (Node): Left child.
            right (Node): Right child.

        Raises:
            NodeAlreadySplitError: If the node is already internal.
        """
        if not self.is_leaf:
            raise NodeAlreadySplitError(
                f"Node is already split on feature {self.split_feature} at {self.split_threshold}"
            )
        self.is_leaf = False
        self.split_feature = feature
        self.split_threshold = threshold
        self.left = left
        self.right = right
        self.predicted_class = NO_CLASS

    @staticmethod
    def can_split(depth: int, max_depth: int | None, criterion: float) -> bool:
        """Return whether a node at `depth` with impurity `criterion` may be split.

        Args:
            depth (int): Depth of the node (root is 0).
            max_depth (int | None): Depth bound; None means unbounded.
            criterion (float): Node impurity; 0 means the node is pure.

        Returns:
            bool: True if the depth bound allows it and the node is impure.
        """
        return (max_depth is None or depth < max_depth) and criterion != 0
