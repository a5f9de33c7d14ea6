"""Linear-algebra helpers over Matrix objects and lists of floats."""

from __future__ import annotations

import math
from typing import Callable, Sequence

from .matrix import Matrix, Shape


def _require_same_shape(matrix1: Matrix, matrix2: Matrix, operation: str) -> None:
    if matrix1.shape != matrix2.shape:
        raise ValueError(
            f"{operation} needs equal shapes, got {matrix1.shape} and {matrix2.shape}"
        )


def _require_same_length(vec1: Sequence[float], vec2: Sequence[float], operation: str) -> None:
    if len(vec1) != len(vec2):
        raise ValueError(f"{operation} needs equal lengths, got {len(vec1)} and {len(vec2)}")


def _zip_matrices(matrix1: Matrix, matrix2: Matrix, op: Callable[[float, float], float]) -> Matrix:
    data = [
        [op(a, b) for a, b in zip(row1, row2)]
        for row1, row2 in zip(matrix1.tolist(), matrix2.tolist())
    ]
    return Matrix._wrap(data, matrix1.columns)


def _clean(value: float) -> float:
    return 0.0 if math.isnan(value) else value


def scale(matrix: Matrix, value: float) -> Matrix:
    """Multiply every element by value."""
    return Matrix._wrap([[v * value for v in row] for row in matrix.tolist()], matrix.columns)


def hadamard(vec1: Sequence[float], vec2: Sequence[float]) -> list[float]:
    """Element-wise product of two vectors."""
    _require_same_length(vec1, vec2, "hadamard product")
    return [a * b for a, b in zip(vec1, vec2)]


def elementwise(matrix1: Matrix, matrix2: Matrix) -> Matrix:
    """Element-wise product of two matrices."""
    _require_same_shape(matrix1, matrix2, "element-wise product")
    return _zip_matrices(matrix1, matrix2, lambda a, b: a * b)


def correlate(kernel: Matrix, matrix: Matrix, x_offset: int, y_offset: int) -> float:
    """Sum of kernel times the window of matrix whose top-left corner is at the offsets."""
    if kernel.rows > matrix.rows or kernel.columns > matrix.columns:
        raise ValueError(f"kernel {kernel.shape} is larger than matrix {matrix.shape}")
    return sum(
        value * matrix[i + x_offset, j + y_offset]
        for i, row in enumerate(kernel.tolist())
        for j, value in enumerate(row)
    )


def matmul(matrix1: Matrix, matrix2: Matrix, drop: int = 0) -> Matrix:
    """Matrix product, leaving out the last drop columns of the result."""
    if matrix1.columns != matrix2.rows:
        raise ValueError(f"cannot multiply {matrix1.shape} by {matrix2.shape}")
    columns = matrix2.columns - drop
    if columns < 0:
        raise ValueError(f"cannot drop {drop} of {matrix2.columns} columns")
    other = matrix2.tolist()
    other_columns = [[row[j] for row in other] for j in range(columns)]
    data = [
        [sum(a * b for a, b in zip(row, column)) for column in other_columns]
        for row in matrix1.tolist()
    ]
    return Matrix._wrap(data, columns)


def matvec(matrix: Matrix, vec: Sequence[float], drop: int = 0) -> list[float]:
    """Product of a matrix and a vector whose last drop elements are left out."""
    values = list(vec)
    if drop < 0 or matrix.columns != len(values) - drop:
        raise ValueError(
            f"cannot multiply {matrix.shape} by a vector of {len(values)} dropping {drop}"
        )
    used = values[:len(values) - drop]
    return [sum(a * b for a, b in zip(row, used)) for row in matrix.tolist()]


def outer(vec1: Sequence[float], vec2: Sequence[float], drop: int = 0) -> Matrix:
    """Outer product, leaving out the last drop elements of vec2."""
    values = list(vec2)
    if not 0 <= drop <= len(values):
        raise ValueError(f"cannot drop {drop} of {len(values)} elements")
    used = values[:len(values) - drop]
    return Matrix._wrap([[a * b for b in used] for a in vec1], len(used))


def add(matrix1: Matrix, matrix2: Matrix) -> Matrix:
    _require_same_shape(matrix1, matrix2, "addition")
    return _zip_matrices(matrix1, matrix2, lambda a, b: a + b)


def subtract_vectors(vec1: Sequence[float], vec2: Sequence[float]) -> list[float]:
    _require_same_length(vec1, vec2, "subtraction")
    return [a - b for a, b in zip(vec1, vec2)]


def subtract(matrix1: Matrix, matrix2: Matrix) -> Matrix:
    _require_same_shape(matrix1, matrix2, "subtraction")
    return _zip_matrices(matrix1, matrix2, lambda a, b: a - b)


def transpose(matrix: Matrix) -> Matrix:
    data = matrix.tolist()
    return Matrix._wrap([[row[j] for row in data] for j in range(matrix.columns)], matrix.rows)


def apply_vector(vec: Sequence[float], function: Callable[[float], float]) -> list[float]:
    """Apply function to every element; NaN results become 0."""
    return [_clean(function(v)) for v in vec]


def apply(matrix: Matrix, function: Callable[[float], float]) -> Matrix:
    """Apply function to every element; NaN results become 0."""
    return Matrix._wrap(
        [[_clean(function(v)) for v in row] for row in matrix.tolist()], matrix.columns
    )


def concatenate_column(matrix: Matrix, vec: Sequence[float]) -> Matrix:
    """Append vec as a new last column."""
    if matrix.rows != len(vec):
        raise ValueError(f"matrix has {matrix.rows} rows, vector has {len(vec)} elements")
    data = [row + [v] for row, v in zip(matrix.tolist(), vec)]
    return Matrix._wrap(data, matrix.columns + 1)


def concatenate(matrix1: Matrix, matrix2: Matrix) -> Matrix:
    """Place matrix2 to the right of matrix1."""
    if matrix1.rows != matrix2.rows:
        raise ValueError(f"cannot join {matrix1.shape} and {matrix2.shape} side by side")
    data = [a + b for a, b in zip(matrix1.tolist(), matrix2.tolist())]
    return Matrix._wrap(data, matrix1.columns + matrix2.columns)


def normalize_vector(vec: Sequence[float]) -> list[float]:
    """Divide each element by the sum so that the elements sum to 1."""
    total = sum(vec)
    if total == 0:
        raise ValueError("cannot normalize a vector that sums to zero")
    return [v / total for v in vec]


def normalize_rows(matrix: Matrix) -> Matrix:
    """Divide each row by its sum so that every row sums to 1."""
    return Matrix._wrap([normalize_vector(row) for row in matrix.tolist()], matrix.columns)


def vector_sum(vec: Sequence[float]) -> float:
    return sum(vec)


def matrix_sum(matrix: Matrix) -> float:
    return sum(v for row in matrix.tolist() for v in row)


def flatten(matrix: Matrix) -> list[float]:
    """Elements in row-major order."""
    return [v for row in matrix.tolist() for v in row]


def maximum(matrix: Matrix, x_start: int, y_start: int, window: Shape) -> tuple[float, tuple[int, int]]:
    """Largest value in a window and its (row, column); the first wins on ties."""
    if window.rows < 1 or window.columns < 1:
        raise ValueError(f"window must not be empty, got {window}")
    if (x_start < 0 or y_start < 0
            or x_start + window.rows > matrix.rows
            or y_start + window.columns > matrix.columns):
        raise ValueError(f"window {window} at ({x_start}, {y_start}) exceeds {matrix.shape}")
    best = -math.inf
    position = (x_start, y_start)
    for i in range(x_start, x_start + window.rows):
        for j in range(y_start, y_start + window.columns):
            value = matrix[i, j]
            if value > best:
                best = value
                position = (i, j)
    return best, position


def reshape(vec: Sequence[float], shape: Shape) -> Matrix:
    """Lay the vector out row by row into a matrix of the given shape."""
    values = list(vec)
    if shape.rows * shape.columns != len(values):
        raise ValueError(f"cannot reshape {len(values)} values into {shape}")
    cols = shape.columns
    return Matrix._wrap([values[i * cols:(i + 1) * cols] for i in range(shape.rows)], cols)