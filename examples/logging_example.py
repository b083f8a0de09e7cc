"""Demonstrates how to enable and configure logging in forestkit.

forestkit logging is disabled by default. Users opt in by calling ``enable_logging()``,
which returns a ``LoggingHandle``. The handle can be used as a context manager
(``with enable_logging(): ...``) or disabled manually via ``handle.disable()``.

Key concepts shown here:

- ``level``: the custom ``FOREST`` level (numeric value 25, between INFO and
  WARNING) surfaces fit and predict calls and is the default. ``"DEBUG"`` adds
  per-tree summaries and worker pool start/stop events.
- A caller-owned ``WorkerPool`` is reused across fit and predict.
- ``predict_with_report`` returns the failure report alongside predictions;
  failed trees are also logged at ERROR level.
"""

import numpy as np

from forestkit import RandomForestClassifier, WorkerPool, enable_logging
from forestkit.metrics import accuracy

rng = np.random.default_rng(0)
features = np.vstack([rng.normal(0.0, 1.0, size=(50, 3)), rng.normal(2.5, 1.0, size=(50, 3))])
labels = np.repeat([0, 1], 50)

with enable_logging(level="DEBUG", log_format="full"), WorkerPool(num_workers=4) as pool:
    forest = RandomForestClassifier(tree_count=8, bagging=True, max_depth=4, seed=44, pool=pool)
    forest.fit(features, labels)

    report = forest.predict_with_report(features)
    print(f"\nTraining accuracy: {accuracy(labels, report.predictions):.2%}")
    print(f"Failed trees: {report.failed_tree_count}\n")

    print(forest.trees[0].render())

# Logging automatically disabled here
