"""Forest configuration loaded from the environment or a `.env` file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from forestkit.rng import DEFAULT_SEED


class ForestSettings(
    BaseSettings,
    env_prefix="FORESTKIT_",
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
):
    """Hyperparameters and runtime options for a random forest.

    Values can be supplied as keyword arguments or via `FORESTKIT_*`
    environment variables (e.g. `FORESTKIT_TREE_COUNT=50`).

    Attributes:
        tree_count (int): Number of trees in the forest.
        bagging (bool): Train each tree on a bootstrap resample of the data.
        max_depth (int | None): Depth bound for every tree; None is unbounded.
        seed (int): Master seed for bootstrap and feature subsampling generators.
        feature_fraction (float): Fraction of features considered per split.
        num_workers (int | None): Worker threads; None uses all available cores.
    """

    tree_count: int = Field(default=3, gt=0, description="Number of trees in the forest.")
    bagging: bool = Field(default=False, description="Train each tree on a bootstrap resample.")
    max_depth: int | None = Field(default=3, gt=0, description="Depth bound per tree; None is unbounded.")
    seed: int = Field(default=DEFAULT_SEED, ge=0, le=0xFFFFFFFF, description="Master 32-bit seed.")
    feature_fraction: float = Field(default=1.0, gt=0.0, le=1.0, description="Fraction of features per split.")
    num_workers: int | None = Field(default=None, gt=0, description="Worker threads; None uses all cores.")
