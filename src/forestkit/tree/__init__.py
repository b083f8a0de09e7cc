"""Decision tree sub-package: nodes, impurity criteria, split search and the tree itself."""

from __future__ import annotations

from forestkit.tree.criteria import entropy, majority_class, majority_vote
from forestkit.tree.node import NO_CLASS, Node
from forestkit.tree.splitting import SplitCandidate, find_best_split
from forestkit.tree.tree import DecisionTree

__all__ = [
    "NO_CLASS",
    "DecisionTree",
    "Node",
    "SplitCandidate",
    "entropy",
    "find_best_split",
    "majority_class",
    "majority_vote",
]
