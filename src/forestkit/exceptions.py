"""Custom exceptions for forestkit.

Input validation exceptions (subclass ValueError):
- InvalidFeatureMatrixError: Feature matrix is not a non-empty, finite 2-D array.
- InvalidLabelVectorError: Label vector is not a 1-D array of non-negative integers.
- LengthMismatchError: Two sequences that must align have different lengths.
- FeatureCountMismatchError: Prediction input has a different column count than training data.

State exceptions (subclass RuntimeError):
- NotFittedError: A model was used for prediction before being fitted.
- NodeAlreadySplitError: A tree node was split a second time.
- CorruptedTreeError: Prediction reached an internal node without a usable split.
- TreeTrainingError: One or more forest training tasks failed.

Worker pool exceptions (subclass RuntimeError):
- PoolClosedError: Work was submitted to a pool that has been shut down.
- TaskCancelledError: A submitted task was cancelled before it started.

All of the above also subclass ForestkitError, so callers can catch every
forestkit-specific failure with a single except clause.
"""

from __future__ import annotations


class ForestkitError(Exception):
    """Base class for all forestkit-specific errors."""


class InvalidFeatureMatrixError(ForestkitError, ValueError):
    """Raised when a feature matrix is not a non-empty, finite 2-D array.

    Attributes:
        shape (tuple[int, ...] | None): Shape of the offending array, when it
            could be converted to one.
    """

    shape: tuple[int, ...] | None

    def __init__(self, message: str, *, shape: tuple[int, ...] | None = None) -> None:
        """Initialize InvalidFeatureMatrixError.

        Args:
            message (str): Description of the problem.
            shape (tuple[int, ...] | None): Shape of the offending array.
        """
        super().__init__(message)
        self.shape = shape


class InvalidLabelVectorError(ForestkitError, ValueError):
    """Raised when labels are not a 1-D array of non-negative integers."""


class LengthMismatchError(ForestkitError, ValueError):
    """Raised when two sequences that must be aligned differ in length.

    Attributes:
        expected (int): The length required by the first sequence.
        actual (int): The length found in the second sequence.

    Examples:
        >>> err = LengthMismatchError("labels", expected=4, actual=3)
        >>> str(err)
        'labels: expected length 4, got 3'
    """

    expected: int
    actual: int

    def __init__(self, what: str, *, expected: int, actual: int) -> None:
        """Initialize LengthMismatchError.

        Args:
            what (str): Name of the sequence being checked.
            expected (int): The required length.
            actual (int): The observed length.
        """
        super().__init__(f"{what}: expected length {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class FeatureCountMismatchError(ForestkitError, ValueError):
    """Raised when prediction data has a different number of features than training data.

    Attributes:
        expected (int): Number of features seen during fit.
        actual (int): Number of features in the prediction input.
    """

    expected: int
    actual: int

    def __init__(self, *, expected: int, actual: int) -> None:
        """Initialize FeatureCountMismatchError.

        Args:
            expected (int): Number of features seen during fit.
            actual (int): Number of features in the prediction input.
        """
        super().__init__(f"Model was fitted with {expected} features, got {actual}")
        self.expected = expected
        self.actual = actual


class NotFittedError(ForestkitError, RuntimeError):
    """Raised when predict is called on a model that has not been fitted."""


class NodeAlreadySplitError(ForestkitError, RuntimeError):
    """Raised when split() is called on a node that is already internal."""


class CorruptedTreeError(ForestkitError, RuntimeError):
    """Raised when traversal reaches an internal node with no usable split.

    This signals a bug in tree induction; it is never recovered from.

    Attributes:
        node_depth (int): Depth at which the corrupted node was found.
    """

    node_depth: int

    def __init__(self, message: str, *, node_depth: int) -> None:
        """Initialize CorruptedTreeError.

        Args:
            message (str): Description of the corruption.
            node_depth (int): Depth of the offending node (root is 0).
        """
        super().__init__(message)
        self.node_depth = node_depth

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={str(self)!r}, node_depth={self.node_depth!r})"


class TreeTrainingError(ForestkitError, RuntimeError):
    """Raised when one or more per-tree training tasks fail.

    Attributes:
        failed_slots (list[int]): Tree slot indices whose training task failed.
        errors (list[BaseException]): The exceptions, parallel to `failed_slots`.
    """

    failed_slots: list[int]
    errors: list[BaseException]

    def __init__(self, failed_slots: list[int], errors: list[BaseException]) -> None:
        """Initialize TreeTrainingError.

        Args:
            failed_slots (list[int]): Slot indices of the failed tasks.
            errors (list[BaseException]): Exceptions raised by those tasks.
        """
        first = f" (first error: {errors[0]!r})" if errors else ""
        super().__init__(f"Training failed for {len(failed_slots)} tree(s): {failed_slots}{first}")
        self.failed_slots = failed_slots
        self.errors = errors


class PoolClosedError(ForestkitError, RuntimeError):
    """Raised when a task is submitted to a worker pool that has been shut down."""


class TaskCancelledError(ForestkitError, RuntimeError):
    """Stored as the error of a task that was cancelled before it started."""
