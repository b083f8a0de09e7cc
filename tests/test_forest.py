"""Tests for `RandomForestClassifier` and vote aggregation."""

from __future__ import annotations

import numpy as np
import pytest
from pytest_check import check

from forestkit.exceptions import FeatureCountMismatchError, NotFittedError, TreeTrainingError
from forestkit.forest import DEFAULT_CLASS, ForestPrediction, RandomForestClassifier, aggregate_votes
from forestkit.metrics import accuracy
from forestkit.pool import TaskResult, WorkerPool
from forestkit.settings import ForestSettings
from forestkit.tree import DecisionTree


class TestConstruction:
    """Tests for forest parameter validation and settings."""

    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"tree_count": 0, "bagging": False}, "tree_count"),
            ({"tree_count": 2, "bagging": False, "max_depth": 0}, "max_depth"),
            ({"tree_count": 2, "bagging": False, "feature_fraction": 1.5}, "feature_fraction"),
            ({"tree_count": 2, "bagging": False, "num_workers": 0}, "num_workers"),
        ],
    )
    def test_rejects_invalid_parameters(self, kwargs: dict[str, object], match: str) -> None:
        with pytest.raises(ValueError, match=match):
            RandomForestClassifier(**kwargs)  # type: ignore[arg-type]

    def test_from_settings(self) -> None:
        """Settings values should be carried onto the forest."""
        # Arrange
        settings = ForestSettings(tree_count=7, bagging=True, max_depth=None, seed=9, num_workers=2)

        # Act
        forest = RandomForestClassifier.from_settings(settings)

        # Assert
        with check:
            assert forest.tree_count == 7
        with check:
            assert forest.bagging is True
        with check:
            assert forest.max_depth is None
        with check:
            assert forest.seed == 9
        with check:
            assert forest.num_workers == 2


class TestFit:
    """Tests for `RandomForestClassifier.fit`."""

    def test_single_tree_without_bagging_matches_decision_tree(self) -> None:
        """One unbagged tree should be the same tree a standalone DecisionTree grows."""
        # Arrange
        data, targets = _make_blob_data()
        reference = DecisionTree(3).fit(data, targets)

        # Act
        forest = RandomForestClassifier(tree_count=1, bagging=False, max_depth=3).fit(data, targets)

        # Assert
        with check:
            assert forest.trees[0].render() == reference.render()
        with check:
            np.testing.assert_array_equal(forest.predict(data), reference.predict(data))

    def test_fits_requested_number_of_trees(self) -> None:
        data, targets = _make_blob_data()
        forest = RandomForestClassifier(tree_count=5, bagging=True, max_depth=2, num_workers=2).fit(data, targets)
        with check:
            assert len(forest.trees) == 5
        with check:
            assert forest.is_fitted

    def test_same_seed_is_deterministic_across_worker_counts(self) -> None:
        """A fixed seed should give the same trees regardless of thread count or scheduling."""
        # Arrange
        data, targets = _make_blob_data()

        # Act
        serial = RandomForestClassifier(6, True, 3, seed=123, num_workers=1).fit(data, targets)
        parallel = RandomForestClassifier(6, True, 3, seed=123, num_workers=4).fit(data, targets)

        # Assert
        assert [tree.render() for tree in serial.trees] == [tree.render() for tree in parallel.trees]

    def test_bagging_varies_trees(self) -> None:
        """Different slots should see different bootstrap samples."""
        # Arrange
        data, targets = _make_blob_data()

        # Act
        forest = RandomForestClassifier(4, True, None, seed=5).fit(data, targets)

        # Assert
        assert len({tree.render() for tree in forest.trees}) > 1

    def test_training_failure_raises_and_keeps_state(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A failing training task should raise TreeTrainingError naming every failed slot."""
        # Arrange
        data, targets = _make_blob_data()
        forest = RandomForestClassifier(3, False, 2)

        def explode(self: DecisionTree, data: object, targets: object) -> DecisionTree:
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(DecisionTree, "fit", explode)

        # Act & Assert
        with pytest.raises(TreeTrainingError, match="disk on fire") as exc_info:
            forest.fit(data, targets)
        with check:
            assert exc_info.value.failed_slots == [0, 1, 2]
        with check:
            assert all(isinstance(error, RuntimeError) for error in exc_info.value.errors)
        with check:
            assert not forest.is_fitted

    def test_accuracy_on_separable_blobs(self) -> None:
        data, targets = _make_blob_data()
        forest = RandomForestClassifier(7, True, 3, seed=44).fit(data, targets)
        assert accuracy(targets, forest.predict(data)) >= 0.85


class TestPredict:
    """Tests for `RandomForestClassifier.predict` and `predict_with_report`."""

    def test_predict_before_fit_raises(self) -> None:
        with pytest.raises(NotFittedError):
            RandomForestClassifier(2, False).predict([[0.0]])

    def test_wrong_feature_count_raises(self) -> None:
        forest = RandomForestClassifier(2, False).fit([[0.0, 1.0], [1.0, 0.0]], [0, 1])
        with pytest.raises(FeatureCountMismatchError):
            forest.predict([[0.0]])

    def test_report_without_failures(self) -> None:
        # Arrange
        forest = RandomForestClassifier(3, False).fit([[0.0], [0.0], [1.0], [1.0]], [0, 0, 1, 1])

        # Act
        report = forest.predict_with_report([[0.0], [1.0]])

        # Assert
        with check:
            assert isinstance(report, ForestPrediction)
        with check:
            assert report.predictions.tolist() == [0, 1]
        with check:
            assert report.failed_tree_count == 0
        with check:
            assert report.zero_vote_samples == []

    def test_failed_tree_is_excluded_and_reported(self) -> None:
        """A tree that raises during prediction should be left out of the vote and reported."""
        # Arrange
        forest = RandomForestClassifier(3, False).fit([[0.0], [0.0], [1.0], [1.0]], [0, 0, 1, 1])
        forest.trees[1].root.split_feature = None

        # Act
        report = forest.predict_with_report([[0.0], [1.0]])

        # Assert
        with check:
            assert report.predictions.tolist() == [0, 1]
        with check:
            assert report.failed_tree_count == 1
        with check:
            assert report.failed_trees[0].tree_index == 1
        with check:
            assert report.failed_trees[0].error_type == "CorruptedTreeError"

    def test_all_trees_failing_defaults_to_class_zero(self) -> None:
        # Arrange
        forest = RandomForestClassifier(2, False).fit([[0.0], [1.0]], [1, 2])
        for tree in forest.trees:
            tree.root.split_threshold = None

        # Act
        report = forest.predict_with_report([[0.0], [1.0], [2.0]])

        # Assert
        with check:
            assert report.predictions.tolist() == [DEFAULT_CLASS] * 3
        with check:
            assert report.zero_vote_samples == [0, 1, 2]
        with check:
            assert report.failed_tree_count == 2

    def test_reused_pool_survives_calls(self) -> None:
        """A caller-owned pool should serve fit and predict and stay open afterwards."""
        # Arrange
        data, targets = _make_blob_data()

        with WorkerPool(num_workers=2) as pool:
            forest = RandomForestClassifier(4, True, 3, pool=pool)

            # Act
            forest.fit(data, targets)
            first = forest.predict(data)
            second = forest.predict(data)

            # Assert
            with check:
                assert not pool.closed
        with check:
            np.testing.assert_array_equal(first, second)


class TestAggregateVotes:
    """Tests for `aggregate_votes`: majority vote over per-tree results."""

    def test_majority_per_sample(self) -> None:
        # Arrange
        results = [
            TaskResult.success(np.array([0, 2])),
            TaskResult.success(np.array([1, 2])),
            TaskResult.success(np.array([1, 0])),
        ]

        # Act
        report = aggregate_votes(results, n_samples=2)

        # Assert
        assert report.predictions.tolist() == [1, 2]

    def test_failed_results_do_not_vote(self) -> None:
        """With one tree failed, the remaining tie is broken by tree order."""
        # Arrange
        results = [
            TaskResult.success(np.array([1, 0])),
            TaskResult.failure(RuntimeError("lost")),
            TaskResult.success(np.array([1, 1])),
        ]

        # Act
        report = aggregate_votes(results, n_samples=2)

        # Assert
        with check:
            assert report.predictions.tolist() == [1, 0]
        with check:
            assert [failure.tree_index for failure in report.failed_trees] == [1]
        with check:
            assert report.failed_trees[0].message == "lost"

    def test_no_results_default_every_sample(self) -> None:
        report = aggregate_votes([TaskResult.failure(ValueError("x"))], n_samples=2)
        with check:
            assert report.predictions.tolist() == [0, 0]
        with check:
            assert report.zero_vote_samples == [0, 1]


# ---------------------------------------------------------------------------
# Private test helpers
# ---------------------------------------------------------------------------


def _make_blob_data(n_rows: int = 60) -> tuple[np.ndarray, np.ndarray]:
    """Build three Gaussian blobs in four dimensions.

    Args:
        n_rows (int): Number of rows; must be divisible by 3. Defaults to 60.

    Returns:
        tuple[np.ndarray, np.ndarray]: `(feature_matrix, target_array)` with labels 0, 1 and 2.
    """
    rng = np.random.default_rng(0)
    per_class = n_rows // 3
    centers = np.array([[0.0, 0.0, 0.0, 0.0], [3.0, 3.0, 0.0, 0.0], [0.0, 3.0, 3.0, 0.0]])
    feature_matrix = np.vstack([rng.normal(center, 1.0, size=(per_class, 4)) for center in centers])
    target_array = np.repeat(np.arange(3), per_class)
    return feature_matrix, target_array
