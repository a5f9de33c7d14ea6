"""Reading, converting and writing comma-separated sample files."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import MutableMapping, Sequence

__all__ = [
    "Sample",
    "split_line",
    "slice_floats",
    "read_csv",
    "remove_column",
    "convert_samples",
    "concat_dataframe",
    "write_csv",
]


@dataclass
class Sample:
    """Numeric features of one row with its class label (-1 when unknown)."""

    features: list[float] = field(default_factory=list)
    label: int = -1


def split_line(line: str, delimiter: str) -> list[str]:
    """Split line on delimiter.

    Splitting stops when the delimiter is found at the very start of what
    remains; the remainder is then kept whole as the last value.
    """
    values: list[str] = []
    while True:
        pos = line.find(delimiter)
        if pos <= 0:
            break
        values.append(line[:pos])
        line = line[pos + len(delimiter):]
    values.append(line)
    return values


def slice_floats(values: Sequence[str], start: int, stop: int) -> list[float]:
    """Parse values[start:stop] as floats."""
    if not 0 <= start <= stop <= len(values):
        raise IndexError(f"slice {start}:{stop} out of range for {len(values)} values")
    return [float(v) for v in values[start:stop]]


def read_csv(path) -> list[list[str]]:
    """Read the rows of a CSV file, skipping its header line."""
    with open(path, encoding="utf-8") as stream:
        lines = [line.rstrip("\r\n") for line in stream]
    return [split_line(line, ",") for line in lines[1:]]


def remove_column(rows: list[list[str]], index: int) -> None:
    """Delete column index from every row, in place."""
    for row in rows:
        del row[index]


def convert_samples(
    rows: Sequence[Sequence[str]],
    categorical_cols: Sequence[int],
    y_index: int,
    class_map: MutableMapping[str, int] | None = None,
) -> list[Sample]:
    """Turn text rows into samples.

    Columns from 1 on become features: categorical columns are numbered in
    order of first appearance, the others are parsed as floats. The label
    is column y_index, numbered through class_map, which is filled in order
    of first appearance.
    """
    if class_map is None:
        class_map = {}
    if not rows:
        return []
    width = len(rows[0])
    categorical = set(categorical_cols)
    feature_maps: list[dict[str, int]] = [{} for _ in categorical_cols]

    samples: list[Sample] = []
    for row in rows:
        features: list[float] = []
        cat_index = 0
        for c in range(1, width):
            value = row[c]
            if c in categorical:
                mapping = feature_maps[cat_index]
                features.append(float(mapping.setdefault(value, len(mapping))))
                cat_index += 1
            else:
                features.append(float(value))
        samples.append(Sample(features))

    for row in rows:
        class_map.setdefault(row[y_index], len(class_map))
    for sample, row in zip(samples, rows):
        sample.label = class_map[row[y_index]]
    return samples


def concat_dataframe(samples: Sequence[Sample]) -> list[list[int]]:
    """Columns of integer features followed by a column of labels."""
    if not samples:
        raise ValueError("no samples")
    columns = [
        [int(sample.features[i]) for sample in samples]
        for i in range(len(samples[0].features))
    ]
    columns.append([int(sample.label) for sample in samples])
    return columns


def write_csv(rows: Sequence[Sequence[str]], predictions: Sequence[int], path) -> None:
    """Write rows with a predicted class appended, under a Feat_1..y_hat header."""
    if not rows:
        raise ValueError("no rows to write")
    if len(predictions) < len(rows):
        raise ValueError(f"{len(rows)} rows but {len(predictions)} predictions")
    num_features = len(rows[0])
    header = "".join(f"Feat_{k + 1}," for k in range(num_features)) + "y_hat"
    with open(path, "w", encoding="utf-8", newline="") as stream:
        stream.write(header + "\n")
        for row, prediction in zip(rows, predictions):
            line = "".join(f"{row[k]}," for k in range(num_features)) + str(prediction)
            stream.write(line + "\n")