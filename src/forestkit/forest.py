"""Random forest classifier: bagged decision trees with majority voting."""

from __future__ import annotations

import contextlib
import functools
from collections.abc import Iterator, Sequence
from typing import Final

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from forestkit.exceptions import NotFittedError, TreeTrainingError
from forestkit.logging import FOREST_LEVEL
from forestkit.pool import TaskResult, WorkerPool
from forestkit.rng import DEFAULT_SEED, MersenneTwister, derive_seeds
from forestkit.sampling import bootstrap_indices
from forestkit.settings import ForestSettings
from forestkit.tree.criteria import majority_vote
from forestkit.tree.tree import DecisionTree
from forestkit.validation import FeatureMatrixLike, LabelVectorLike, as_feature_matrix, as_training_data

DEFAULT_CLASS: Final[int] = 0  # prediction for samples that received no votes
_SUBSAMPLING_SEED_MIX: Final[int] = 0x9E3779B9


class TreeFailure(BaseModel):
    """A tree whose prediction task failed and was excluded from voting.

    Attributes:
        tree_index (int): Position of the tree in the forest.
        error_type (str): Class name of the raised exception.
        message (str): The exception message.
    """

    tree_index: int = Field(ge=0, description="Position of the tree in the forest.")
    error_type: str = Field(min_length=1, description="Class name of the raised exception.")
    message: str = Field(description="The exception message.")


class ForestPrediction(BaseModel):
    """Predictions together with a report of trees that failed to vote.

    Attributes:
        predictions (np.ndarray): One predicted class per input row.
        failed_trees (list[TreeFailure]): Trees excluded from voting, in tree order.
        zero_vote_samples (list[int]): Rows that received no votes and were
            assigned the default class 0.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    predictions: np.ndarray
    failed_trees: list[TreeFailure] = Field(default_factory=list)
    zero_vote_samples: list[int] = Field(default_factory=list)

    @property
    def failed_tree_count(self) -> int:
        return len(self.failed_trees)


class RandomForestClassifier:
    """Ensemble of entropy-split decision trees combined by majority vote.

    Each tree slot gets its own seed derived sequentially from `seed`. Its
    bootstrap resample (when `bagging` is on) and its feature subsampling
    are drawn from generators built from that seed inside the training task,
    so no generator is shared between threads and a fixed seed always
    yields the same forest.

    Per-tree work runs on a `WorkerPool`. If `pool` is given it is reused
    across calls and owned by the caller; otherwise a short-lived pool of
    `num_workers` threads is created for each fit and predict call.

    Args:
        tree_count (int): Number of trees.
        bagging (bool): Train each tree on a bootstrap resample.
        max_depth (int | None): Depth bound for every tree; None is unbounded.
        seed (int): Master seed.
        feature_fraction (float): Fraction of features considered per split.
        num_workers (int | None): Threads for short-lived pools.
        pool (WorkerPool | None): Caller-owned pool to reuse.

    Examples:
        >>> forest = RandomForestClassifier(tree_count=5, bagging=True, max_depth=3)  # doctest: +SKIP
        >>> forest.fit(features, labels).predict(features)  # doctest: +SKIP
    """

    def __init__(
        self,
        tree_count: int,
        bagging: bool,
        max_depth: int | None = None,
        *,
        seed: int = DEFAULT_SEED,
        feature_fraction: float = 1.0,
        num_workers: int | None = None,
        pool: WorkerPool | None = None,
    ) -> None:
        if tree_count < 1:
            raise ValueError(f"tree_count must be a positive integer, got {tree_count}")
        if max_depth is not None and max_depth < 1:
            raise ValueError(f"max_depth must be a positive integer or None, got {max_depth}")
        if not 0.0 < feature_fraction <= 1.0:
            raise ValueError(f"feature_fraction must be in (0, 1], got {feature_fraction}")
        if num_workers is not None and num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")

        self.tree_count = tree_count
        self.bagging = bagging
        self.max_depth = max_depth
        self.seed = seed
        self.feature_fraction = feature_fraction
        self.num_workers = num_workers
        self._pool = pool
        self._trees: list[DecisionTree] = []
        self._n_features: int | None = None

    @classmethod
    def from_settings(cls, settings: ForestSettings, *, pool: WorkerPool | None = None) -> RandomForestClassifier:
        """Build a forest from `ForestSettings`.

        Args:
            settings (ForestSettings): Hyperparameters and runtime options.
            pool (WorkerPool | None): Caller-owned pool to reuse.

        Returns:
            RandomForestClassifier: An unfitted forest.
        """
        return cls(
            tree_count=settings.tree_count,
            bagging=settings.bagging,
            max_depth=settings.max_depth,
            seed=settings.seed,
            feature_fraction=settings.feature_fraction,
            num_workers=settings.num_workers,
            pool=pool,
        )

    @property
    def trees(self) -> Sequence[DecisionTree]:
        """Fitted trees in slot order (read-only)."""
        return tuple(self._trees)

    @property
    def is_fitted(self) -> bool:
        return bool(self._trees)

    @contextlib.contextmanager
    def _worker_pool(self) -> Iterator[WorkerPool]:
        if self._pool is not None:
            yield self._pool
            return
        with WorkerPool(self.num_workers) as pool:
            yield pool

    def fit(self, data: FeatureMatrixLike, targets: LabelVectorLike) -> RandomForestClassifier:
        """Train `tree_count` trees in parallel.

        Args:
            data (FeatureMatrixLike): Training matrix, shape `(n_samples, n_features)`.
            targets (LabelVectorLike): Non-negative integer labels, one per row.

        Returns:
            RandomForestClassifier: This forest, fitted.

        Raises:
            TreeTrainingError: If any tree's training task fails. The forest
                keeps its previous state in that case.
        """
        matrix, labels = as_training_data(data, targets)
        logger.log(
            FOREST_LEVEL,
            "Fitting forest",
            tree_count=self.tree_count,
            bagging=self.bagging,
            max_depth=self.max_depth,
            samples=matrix.shape[0],
            features=matrix.shape[1],
        )

        slot_seeds = derive_seeds(self.seed, self.tree_count)
        with self._worker_pool() as pool:
            results = pool.run_batch(
                [functools.partial(self._train_tree, matrix, labels, slot_seed) for slot_seed in slot_seeds]
            )

        failed_slots = [slot for slot, result in enumerate(results) if not result.ok]
        if failed_slots:
            errors: list[BaseException] = [result.error for result in results if result.error is not None]
            raise TreeTrainingError(failed_slots, errors)

        self._trees = [result.value for result in results]
        self._n_features = matrix.shape[1]
        logger.log(FOREST_LEVEL, "Forest fitted", tree_count=len(self._trees))
        return self

    def _train_tree(self, data: np.ndarray, targets: np.ndarray, slot_seed: int) -> DecisionTree:
        if self.bagging:
            rows = bootstrap_indices(data.shape[0], MersenneTwister(slot_seed))
            data, targets = data[rows], targets[rows]
        tree = DecisionTree(
            self.max_depth,
            feature_fraction=self.feature_fraction,
            generator=MersenneTwister(slot_seed ^ _SUBSAMPLING_SEED_MIX),
        )
        return tree.fit(data, targets)

    def predict(self, data: FeatureMatrixLike) -> np.ndarray:
        """Predict a class for each row by majority vote across trees.

        Args:
            data (FeatureMatrixLike): Matrix with the training column count.

        Returns:
            np.ndarray: 1-D int64 array of predicted classes.
        """
        report = self.predict_with_report(data)
        if report.failed_tree_count:
            logger.warning(
                "Some trees failed to predict and were excluded from voting",
                failed_tree_count=report.failed_tree_count,
                tree_count=len(self._trees),
            )
        return report.predictions

    def predict_with_report(self, data: FeatureMatrixLike) -> ForestPrediction:
        """Predict by majority vote and report trees that failed.

        A tree whose prediction task raises is excluded from voting for every
        row. Failed tasks are never retried. Rows with no votes at all get
        class 0.

        Args:
            data (FeatureMatrixLike): Matrix with the training column count.

        Returns:
            ForestPrediction: Predictions plus per-tree failure details.

        Raises:
            NotFittedError: If the forest has not been fitted.
            FeatureCountMismatchError: If the column count differs from training.
        """
        if not self._trees or self._n_features is None:
            raise NotFittedError("RandomForestClassifier has not been fitted")
        matrix = as_feature_matrix(data, n_features=self._n_features)
        logger.log(FOREST_LEVEL, "Predicting with forest", samples=matrix.shape[0], tree_count=len(self._trees))

        with self._worker_pool() as pool:
            results = pool.run_batch([functools.partial(tree.predict, matrix) for tree in self._trees])

        return aggregate_votes(results, n_samples=matrix.shape[0])


def aggregate_votes(results: Sequence[TaskResult], *, n_samples: int) -> ForestPrediction:
    """Combine per-tree prediction results into one prediction per sample.

    Args:
        results (Sequence[TaskResult]): One result per tree, in tree order.
            Successful results hold a prediction vector of length `n_samples`.
        n_samples (int): Number of rows being predicted.

    Returns:
        ForestPrediction: Majority-vote predictions and the failure report.
    """
    failures: list[TreeFailure] = []
    vote_rows: list[np.ndarray] = []
    for tree_index, result in enumerate(results):
        if result.ok:
            vote_rows.append(np.asarray(result.value, dtype=np.int64))
            continue
        error = result.error
        logger.error("Tree prediction failed", tree_index=tree_index, error=repr(error))
        failures.append(
            TreeFailure(tree_index=tree_index, error_type=type(error).__name__, message=str(error)),
        )

    predictions = np.full(n_samples, DEFAULT_CLASS, dtype=np.int64)
    zero_vote_samples: list[int] = []
    if not vote_rows:
        for sample_index in range(n_samples):
            logger.warning("No predictions available; defaulting to class 0", sample_index=sample_index)
        zero_vote_samples = list(range(n_samples))
    else:
        votes = np.stack(vote_rows, axis=1)  # (n_samples, n_voting_trees)
        for sample_index in range(n_samples):
            predictions[sample_index] = majority_vote(votes[sample_index])

    return ForestPrediction(
        predictions=predictions,
        failed_trees=failures,
        zero_vote_samples=zero_vote_samples,
    )
