"""Scoring helpers for predicted class labels."""

from __future__ import annotations

import numpy as np
from sklearn.metrics import accuracy_score

from forestkit.exceptions import LengthMismatchError
from forestkit.validation import LabelVectorLike


def accuracy(true_labels: LabelVectorLike, predicted_labels: LabelVectorLike) -> float:
    """Return the fraction of predictions that match the true labels.

    Args:
        true_labels (LabelVectorLike): Ground-truth class labels.
        predicted_labels (LabelVectorLike): Predicted class labels.

    Returns:
        float: Accuracy in `[0, 1]`.

    Raises:
        LengthMismatchError: If the two vectors differ in length.
    """
    true_array = np.asarray(true_labels)
    predicted_array = np.asarray(predicted_labels)
    if true_array.shape[0] != predicted_array.shape[0]:
        raise LengthMismatchError("predicted labels", expected=true_array.shape[0], actual=predicted_array.shape[0])
    return float(accuracy_score(true_array, predicted_array))
