"""A Gini-impurity decision tree over integer-coded column data."""

from __future__ import annotations

import argparse
from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from .csv_data import concat_dataframe, convert_samples, read_csv, remove_column, write_csv

DataFrame = list[list[int]]


@dataclass(frozen=True)
class BestSplit:
    """The split found for a node and the weighted impurity it leaves."""

    result_gini: float
    feature: int
    category: int


def gini_impurity(outcomes: Sequence[int]) -> float:
    """Gini impurity summed over the classes below the largest outcome."""
    values = list(outcomes)
    if not values:
        return 0.0
    if min(values) < 0:
        raise ValueError("outcomes must not be negative")
    counts = Counter(values)
    n = len(values)
    return sum((counts[i] / n) * (1 - counts[i] / n) for i in range(max(values)))


def split_targets(data: DataFrame, feature: int, category: int) -> list[list[int]]:
    """Outcomes of the rows whose feature equals category, and of the others."""
    matching: list[int] = []
    other: list[int] = []
    for value, outcome in zip(data[feature], data[-1]):
        (matching if value == category else other).append(outcome)
    return [matching, other]


def best_split(data: DataFrame) -> BestSplit:
    """The feature and category whose split lowers the impurity the most."""
    labels = data[-1]
    if not labels:
        raise ValueError("cannot split an empty data frame")
    n = len(labels)
    best = BestSplit(gini_impurity(labels), 0, 0)
    for feature, column in enumerate(data[:-1]):
        for category in range(max(column) + 1):
            matching, other = split_targets(data, feature, category)
            if not matching or not other:
                continue
            weighted = (gini_impurity(matching) * len(matching) / n
                        + gini_impurity(other) * len(other) / n)
            if weighted < best.result_gini:
                best = BestSplit(weighted, feature, category)
    return best


def split_data(data: DataFrame, feature: int, category: int) -> tuple[DataFrame, DataFrame]:
    """Split the rows into those whose feature equals category and the rest."""
    present = [i for i, value in enumerate(data[feature]) if value == category]
    absent = [i for i, value in enumerate(data[feature]) if value != category]
    return (
        [[column[i] for i in present] for column in data],
        [[column[i] for i in absent] for column in data],
    )


class Node:
    """A tree node holding its training rows and their best split."""

    def __init__(self, data: DataFrame) -> None:
        self.left: Node | None = None
        self.right: Node | None = None
        self.training_data = data
        self.best_split = best_split(data)

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def leaf_class(self) -> int:
        return self.training_data[-1][0]


class DecisionTree:
    """Grows nodes while a split lowers the impurity; leaves predict their first label.

    Rows whose feature matches a node's category go to the right child.
    """

    def __init__(self, training_data: DataFrame) -> None:
        self.root = Node(training_data)
        stack = [self.root]
        while stack:
            node = stack.pop()
            split = node.best_split
            if split.result_gini < gini_impurity(node.training_data[-1]):
                present, absent = split_data(node.training_data, split.feature, split.category)
                if present[0]:
                    node.right = Node(present)
                    stack.append(node.right)
                if absent[0]:
                    node.left = Node(absent)
                    stack.append(node.left)

    def _predict_one(self, observation: Sequence[int]) -> int:
        node = self.root
        while not node.is_leaf:
            split = node.best_split
            child = node.right if observation[split.feature] == split.category else node.left
            if child is None:
                break
            node = child
        return node.leaf_class

    def predict(self, test_data: DataFrame) -> list[int]:
        """Predict a class for each row of column-major test data."""
        return [self._predict_one(row) for row in zip(*test_data)]


def main(argv: Sequence[str] | None = None) -> int:
    """Fit a decision tree to a CSV file and write its predictions."""
    parser = argparse.ArgumentParser(
        prog="learnkit-tree",
        description="Fit a decision tree to a CSV file and write the predictions.",
    )
    parser.add_argument("--input", default="../Dataset/Mall_data.csv")
    parser.add_argument("--output", default="../Dataset/Results.csv")
    parser.add_argument("--y-index", type=int, default=0,
                        help="label column after the first column is removed")
    parser.add_argument("--categorical", type=int, nargs="*", default=[],
                        help="indexes of categorical columns")
    args = parser.parse_args(argv)

    rows = read_csv(args.input)
    remove_column(rows, 0)
    class_map: dict[str, int] = {}
    samples = convert_samples(rows, args.categorical, args.y_index, class_map)
    frame = concat_dataframe(samples)
    tree = DecisionTree(frame)
    predictions = tree.predict(frame)
    write_csv(rows, predictions, args.output)
    return 0