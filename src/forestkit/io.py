"""CSV readers for feature matrices and target vectors."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import polars as pl

from forestkit.validation import as_feature_matrix, as_label_vector


def read_feature_csv(path: str | Path) -> np.ndarray:
    """Read a headered CSV of numeric features.

    Every column is cast to Float64; the header row is ignored beyond naming.

    Args:
        path (str | Path): Path to the CSV file.

    Returns:
        np.ndarray: Validated float64 matrix, one row per record.

    Raises:
        InvalidFeatureMatrixError: If the file is empty or has non-finite values.
    """
    df = pl.read_csv(path)
    matrix = df.select(pl.all().cast(pl.Float64)).to_numpy()
    return as_feature_matrix(matrix)


def read_target_csv(path: str | Path) -> np.ndarray:
    """Read a headered CSV of integer class labels from its first column.

    Args:
        path (str | Path): Path to the CSV file.

    Returns:
        np.ndarray: Validated int64 label vector.

    Raises:
        InvalidLabelVectorError: If the file is empty or labels are invalid.
    """
    df = pl.read_csv(path)
    return as_label_vector(df.to_series(0).to_numpy())
