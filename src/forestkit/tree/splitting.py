"""Exhaustive best-split search over midpoint thresholds."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from forestkit.tree.criteria import entropy_from_counts


@dataclass(frozen=True)
class SplitCandidate:
    """The winning split for a node.

    Attributes:
        feature (int): Feature index to split on.
        threshold (float): Rows with `value <= threshold` go left.
        left_indices (np.ndarray): Row indices for the left child, in parent order.
        right_indices (np.ndarray): Row indices for the right child, in parent order.
        criterion (float): `entropy(left) + entropy(right)` for this split.
    """

    feature: int
    threshold: float
    left_indices: np.ndarray = field(repr=False)
    right_indices: np.ndarray = field(repr=False)
    criterion: float


def find_best_split(
    data: np.ndarray,
    targets: np.ndarray,
    indices: np.ndarray,
    candidate_features: np.ndarray,
) -> SplitCandidate | None:
    """Find the split of `indices` that minimizes the summed child entropy.

    Features are scanned in the order given (ascending in practice) and, for
    each, thresholds are the midpoints between consecutive distinct values in
    ascending order. A candidate replaces the current best only if it is
    strictly better, so the first one found wins ties. Partitions with an empty
    side are skipped.

    Args:
        data (np.ndarray): Training matrix, shape `(n_samples, n_features)`.
        targets (np.ndarray): Training labels, shape `(n_samples,)`.
        indices (np.ndarray): Row indices belonging to the node.
        candidate_features (np.ndarray): Feature indices to consider.

    Returns:
        SplitCandidate | None: The best split, or None if no partition leaves
            both sides non-empty.
    """
    n_rows = indices.size
    if n_rows < 2:
        return None

    node_labels = targets[indices]
    one_hot = np.zeros((n_rows, int(node_labels.max()) + 1), dtype=np.float64)
    one_hot[np.arange(n_rows), node_labels] = 1.0
    node_counts = one_hot.sum(axis=0)

    best_criterion = np.inf
    best_feature: int | None = None
    best_threshold: float | None = None

    for feature in candidate_features:
        column = data[indices, feature]
        order = np.argsort(column, kind="stable")
        sorted_values = column[order]
        distinct = np.unique(sorted_values)
        if distinct.size < 2:
            continue

        thresholds = (distinct[:-1] + distinct[1:]) / 2.0
        # Left size per threshold, defined exactly as `value <= threshold`.
        left_sizes = np.searchsorted(sorted_values, thresholds, side="right")
        valid = (left_sizes > 0) & (left_sizes < n_rows)
        if not valid.any():
            continue

        cumulative = np.cumsum(one_hot[order], axis=0)
        left_counts = cumulative[np.maximum(left_sizes - 1, 0)]
        right_counts = node_counts - left_counts
        scores = entropy_from_counts(left_counts) + entropy_from_counts(right_counts)
        scores = np.where(valid, scores, np.inf)

        position = int(np.argmin(scores))
        if scores[position] < best_criterion:
            best_criterion = float(scores[position])
            best_feature = int(feature)
            best_threshold = float(thresholds[position])

    if best_feature is None or best_threshold is None:
        return None

    goes_left = data[indices, best_feature] <= best_threshold
    return SplitCandidate(
        feature=best_feature,
        threshold=best_threshold,
        left_indices=indices[goes_left],
        right_indices=indices[~goes_left],
        criterion=best_criterion,
    )
