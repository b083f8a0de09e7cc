"""Conversion and validation of feature matrices and label vectors."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from forestkit.exceptions import (
    FeatureCountMismatchError,
    InvalidFeatureMatrixError,
    InvalidLabelVectorError,
    LengthMismatchError,
)

type FeatureMatrixLike = np.ndarray | Sequence[Sequence[float]]
type LabelVectorLike = np.ndarray | Sequence[int]


def as_feature_matrix(data: FeatureMatrixLike, *, n_features: int | None = None) -> np.ndarray:
    """Convert `data` to a validated float64 matrix.

    Args:
        data (FeatureMatrixLike): Rectangular matrix of finite reals.
        n_features (int | None): Required column count, if known (e.g. at
            prediction time).

    Returns:
        np.ndarray: Array with shape `(n_samples, n_features)` and dtype float64.

    Raises:
        InvalidFeatureMatrixError: If the input is ragged, not 2-D, empty, or
            contains non-finite values.
        FeatureCountMismatchError: If `n_features` is given and does not match.
    """
    try:
        matrix = np.asarray(data, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidFeatureMatrixError(f"Feature matrix must be a rectangular array of reals: {exc}") from exc

    if matrix.ndim != 2:
        raise InvalidFeatureMatrixError(
            f"Feature matrix must be 2-D, got {matrix.ndim} dimension(s)", shape=matrix.shape
        )
    if matrix.shape[0] == 0 or matrix.shape[1] == 0:
        raise InvalidFeatureMatrixError("Feature matrix must have at least one row and one column", shape=matrix.shape)
    if not np.all(np.isfinite(matrix)):
        raise InvalidFeatureMatrixError("Feature matrix must contain only finite values", shape=matrix.shape)
    if n_features is not None and matrix.shape[1] != n_features:
        raise FeatureCountMismatchError(expected=n_features, actual=matrix.shape[1])
    return matrix


def as_label_vector(targets: LabelVectorLike, *, n_samples: int | None = None) -> np.ndarray:
    """Convert `targets` to a validated int64 label vector.

    Float inputs are accepted when every value is integral.

    Args:
        targets (LabelVectorLike): Non-negative integer class labels.
        n_samples (int | None): Required length, if known.

    Returns:
        np.ndarray: 1-D int64 array.

    Raises:
        InvalidLabelVectorError: If labels are not 1-D, empty, non-integral or negative.
        LengthMismatchError: If `n_samples` is given and does not match.
    """
    try:
        raw = np.asarray(targets)
    except (TypeError, ValueError) as exc:
        raise InvalidLabelVectorError(f"Labels must be a 1-D array of integers: {exc}") from exc

    if raw.ndim != 1:
        raise InvalidLabelVectorError(f"Labels must be 1-D, got {raw.ndim} dimension(s)")
    if raw.size == 0:
        raise InvalidLabelVectorError("Labels must not be empty")
    if raw.dtype.kind == "f":
        if not np.all(np.isfinite(raw)) or not np.all(raw == np.round(raw)):
            raise InvalidLabelVectorError("Labels must be integral")
    elif raw.dtype.kind not in "iub":
        raise InvalidLabelVectorError(f"Labels must be integers, got dtype {raw.dtype}")

    labels = raw.astype(np.int64)
    if np.any(labels < 0):
        raise InvalidLabelVectorError("Labels must be non-negative")
    if n_samples is not None and labels.shape[0] != n_samples:
        raise LengthMismatchError("labels", expected=n_samples, actual=labels.shape[0])
    return labels


def as_training_data(data: FeatureMatrixLike, targets: LabelVectorLike) -> tuple[np.ndarray, np.ndarray]:
    """Validate a feature matrix and its aligned label vector.

    Args:
        data (FeatureMatrixLike): Training feature matrix.
        targets (LabelVectorLike): One label per row of `data`.

    Returns:
        tuple[np.ndarray, np.ndarray]: `(matrix, labels)`.
    """
    matrix = as_feature_matrix(data)
    labels = as_label_vector(targets, n_samples=matrix.shape[0])
    return matrix, labels
