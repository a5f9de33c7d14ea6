"""Two-dimensional matrices of floats and the Shape record."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable

_RANDOM_SEED = 1


@dataclass(frozen=True)
class Shape:
    """Number of rows and columns of a matrix or window."""

    rows: int
    columns: int


class Matrix:
    """A rows x columns matrix of floats indexed as matrix[row, column].

    A randomized matrix is filled from a uniform distribution on [-1, 1]
    whose generator is reseeded for every matrix, so matrices of the same
    shape always start with the same values.
    """

    __slots__ = ("_rows", "_columns", "_data")

    def __init__(self, rows: int, columns: int, randomize: bool = False) -> None:
        if rows < 0 or columns < 0:
            raise ValueError(f"matrix dimensions must not be negative: {rows}x{columns}")
        self._rows = rows
        self._columns = columns
        if randomize:
            rng = random.Random(_RANDOM_SEED)
            self._data = [[rng.uniform(-1.0, 1.0) for _ in range(columns)] for _ in range(rows)]
        else:
            self._data = [[0.0] * columns for _ in range(rows)]

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[float]]) -> Matrix:
        """Build a matrix from a non-empty sequence of equally long rows."""
        data = [[float(v) for v in row] for row in rows]
        if not data:
            raise ValueError("a matrix needs at least one row")
        columns = len(data[0])
        if any(len(row) != columns for row in data):
            raise ValueError("all rows must have the same length")
        return cls._wrap(data, columns)

    @classmethod
    def _wrap(cls, data: list[list[float]], columns: int) -> Matrix:
        matrix = cls.__new__(cls)
        matrix._rows = len(data)
        matrix._columns = columns
        matrix._data = data
        return matrix

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def shape(self) -> Shape:
        return Shape(self._rows, self._columns)

    def tolist(self) -> list[list[float]]:
        """Return a copy of the elements as a list of rows."""
        return [list(row) for row in self._data]

    def _check(self, index) -> tuple[int, int]:
        try:
            row, column = index
        except (TypeError, ValueError):
            raise IndexError("a matrix is indexed by (row, column)") from None
        if not (0 <= row < self._rows and 0 <= column < self._columns):
            raise IndexError(
                f"index ({row}, {column}) out of range for {self._rows}x{self._columns}"
            )
        return row, column

    def __getitem__(self, index) -> float:
        row, column = self._check(index)
        return self._data[row][column]

    def __setitem__(self, index, value: float) -> None:
        row, column = self._check(index)
        self._data[row][column] = value

    def format(self) -> str:
        """Render each row as space-separated values on its own line."""
        return "".join(
            "".join(f"{v:g} " for v in row) + "\n" for row in self._data
        )

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"Matrix.from_rows({self._data!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and self._data == other._data

    __hash__ = None