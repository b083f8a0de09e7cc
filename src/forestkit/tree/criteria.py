"""Impurity and majority computations over integer class labels.

Entropy here is the count-weighted form `sum_c -count_c * ln(count_c / total)`:
zero for a pure node, strictly positive otherwise. It is only ever compared,
never interpreted as a probability.

Majority ties are broken by first-encountered order: among the most frequent
classes, the one whose first occurrence comes earliest wins. This is not the
same as picking the smallest label.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def entropy_from_counts(counts: np.ndarray) -> np.ndarray | float:
    """Compute entropy from per-class counts.

    Args:
        counts (np.ndarray): Class counts along the last axis. Any leading axes
            are treated as a batch (one entropy per row).

    Returns:
        np.ndarray | float: Entropy per row, or a float for 1-D input.
    """
    counts = np.asarray(counts, dtype=np.float64)
    totals = counts.sum(axis=-1, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        terms = np.where(counts > 0, -counts * np.log(counts / totals), 0.0)
    # Summed strictly left to right in class order, never pairwise.
    result = np.cumsum(terms, axis=-1)[..., -1]
    if result.ndim == 0:
        return float(result)
    return result


def entropy(labels: np.ndarray | Sequence[int]) -> float:
    """Compute the count-weighted entropy of a label array.

    Args:
        labels (np.ndarray | Sequence[int]): Non-negative integer labels.

    Returns:
        float: 0.0 for empty or single-class input, positive otherwise.

    Examples:
        >>> entropy([1, 1, 1])
        0.0
        >>> round(entropy([0, 1]), 6)
        1.386294
    """
    labels = np.asarray(labels, dtype=np.int64)
    if labels.size == 0:
        return 0.0
    return float(entropy_from_counts(np.bincount(labels)))


def majority_class(labels: np.ndarray | Sequence[int]) -> int:
    """Return the most frequent label, breaking ties by first occurrence.

    Args:
        labels (np.ndarray | Sequence[int]): Non-empty integer labels.

    Returns:
        int: The majority label.

    Raises:
        ValueError: If `labels` is empty.

    Examples:
        >>> majority_class([2, 1, 1, 2])
        2
    """
    labels = np.asarray(labels, dtype=np.int64)
    if labels.size == 0:
        raise ValueError("Cannot take the majority of an empty label array")
    values, first_seen, counts = np.unique(labels, return_index=True, return_counts=True)
    encounter_order = np.argsort(first_seen)
    winner = encounter_order[np.argmax(counts[encounter_order])]
    return int(values[winner])


def majority_vote(votes: Sequence[int] | np.ndarray) -> int:
    """Aggregate per-tree votes for one sample.

    Args:
        votes (Sequence[int] | np.ndarray): Predicted classes in tree order.

    Returns:
        int: The winning class (first-encountered on ties).
    """
    return majority_class(votes)
