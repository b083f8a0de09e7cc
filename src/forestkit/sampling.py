"""Bootstrap resampling and feature subsampling driven by a MersenneTwister."""

from __future__ import annotations

import numpy as np

from forestkit.rng import MersenneTwister


def bootstrap_indices(n_samples: int, generator: MersenneTwister) -> np.ndarray:
    """Draw a bootstrap sample of row indices (with replacement).

    Args:
        n_samples (int): Size of the dataset and of the returned sample.
        generator (MersenneTwister): Source of randomness; advanced `n_samples` times.

    Returns:
        np.ndarray: 1-D int64 array of `n_samples` indices in `[0, n_samples)`.
    """
    return np.fromiter(
        (generator.next_bounded(n_samples) for _ in range(n_samples)),
        dtype=np.int64,
        count=n_samples,
    )


def subsample_features(
    n_features: int,
    generator: MersenneTwister,
    fraction: float = 1.0,
) -> np.ndarray:
    """Choose a random subset of feature indices without replacement.

    Every feature is given a random key and the features are ordered by key
    (stable on ties); the first `max(1, int(fraction * n_features))` are kept and
    returned in ascending order. A key is drawn for every feature even when
    `fraction` is 1.0, so the generator advances identically either way.

    Args:
        n_features (int): Total number of features.
        generator (MersenneTwister): Source of randomness.
        fraction (float): Fraction of features to keep, in `(0, 1]`.

    Returns:
        np.ndarray: Sorted 1-D int64 array of selected feature indices.

    Raises:
        ValueError: If `fraction` is outside `(0, 1]`.
    """
    if not 0.0 < fraction <= 1.0:
        raise ValueError(f"fraction must be in (0, 1], got {fraction}")

    keys = np.fromiter(
        (generator.next_u32() for _ in range(n_features)),
        dtype=np.uint64,
        count=n_features,
    )
    sample_size = max(1, int(fraction * n_features))
    chosen = np.argsort(keys, kind="stable")[:sample_size]
    return np.sort(chosen).astype(np.int64)
