"""forestkit: a multithreaded random forest classifier for dense numeric data."""

from loguru import logger

from forestkit.forest import ForestPrediction, RandomForestClassifier, TreeFailure
from forestkit.logging import PACKAGE_NAME, enable_logging
from forestkit.pool import WorkerPool
from forestkit.settings import ForestSettings
from forestkit.tree import DecisionTree

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the forestkit module by default

__all__ = [
    "DecisionTree",
    "ForestPrediction",
    "ForestSettings",
    "RandomForestClassifier",
    "TreeFailure",
    "WorkerPool",
    "enable_logging",
]
