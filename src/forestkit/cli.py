"""Command-line entry point: train a forest on CSV files and report accuracy."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from loguru import logger

from forestkit.forest import RandomForestClassifier
from forestkit.io import read_feature_csv, read_target_csv
from forestkit.logging import enable_logging
from forestkit.metrics import accuracy
from forestkit.settings import ForestSettings


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the `forestkit` command.

    Returns:
        argparse.ArgumentParser: The configured parser.
    """
    parser = argparse.ArgumentParser(
        prog="forestkit",
        description="Train a random forest on CSV data and print train/test accuracy.",
    )
    parser.add_argument("train_data", help="CSV of training features (with header).")
    parser.add_argument("train_target", help="CSV of training labels (with header).")
    parser.add_argument("test_data", help="CSV of test features (with header).")
    parser.add_argument("test_target", help="CSV of test labels (with header).")
    parser.add_argument("--trees", type=int, default=None, help="Number of trees.")
    parser.add_argument(
        "--bagging",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Train each tree on a bootstrap resample.",
    )
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum tree depth.")
    parser.add_argument("--unbounded", action="store_true", help="Grow trees without a depth bound.")
    parser.add_argument("--seed", type=int, default=None, help="Master random seed.")
    parser.add_argument("--workers", type=int, default=None, help="Number of worker threads.")
    parser.add_argument("--log-level", default=None, help="Enable forestkit logging at this level (e.g. DEBUG).")
    return parser


def _resolve_settings(args: argparse.Namespace) -> ForestSettings:
    overrides: dict[str, object] = {}
    if args.trees is not None:
        overrides["tree_count"] = args.trees
    if args.bagging is not None:
        overrides["bagging"] = args.bagging
    if args.unbounded:
        overrides["max_depth"] = None
    elif args.max_depth is not None:
        overrides["max_depth"] = args.max_depth
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.workers is not None:
        overrides["num_workers"] = args.workers
    return ForestSettings(**overrides)


def _run(args: argparse.Namespace) -> None:
    settings = _resolve_settings(args)

    train_data = read_feature_csv(args.train_data)
    train_target = read_target_csv(args.train_target)
    test_data = read_feature_csv(args.test_data)
    test_target = read_target_csv(args.test_target)

    forest = RandomForestClassifier.from_settings(settings)
    forest.fit(train_data, train_target)
    for index, tree in enumerate(forest.trees):
        logger.debug("Tree {index}:\n{dump}", index=index, dump=tree.render())

    train_accuracy = accuracy(train_target, forest.predict(train_data))
    test_accuracy = accuracy(test_target, forest.predict(test_data))

    print(f"Training Accuracy: {train_accuracy * 100:.2f}%")
    print(f"Testing Accuracy: {test_accuracy * 100:.2f}%")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (Sequence[str] | None): Arguments excluding the program name;
            defaults to `sys.argv[1:]`.

    Returns:
        int: Process exit code.
    """
    args = build_parser().parse_args(argv)
    if args.log_level is None:
        _run(args)
    else:
        with enable_logging(level=args.log_level.upper(), log_format="full"):
            _run(args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
