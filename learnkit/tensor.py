"""Dense tensors of one to four dimensions stored in row-major order."""

from __future__ import annotations

import math
import random
from numbers import Real
from typing import Iterable, Sequence

MAX_DIMS = 4


def _check_dims(dims: Iterable[int]) -> tuple[int, ...]:
    shape = tuple(int(d) for d in dims)
    if not 0 < len(shape) <= MAX_DIMS:
        raise ValueError(f"a tensor has 1 to {MAX_DIMS} dimensions, got {len(shape)}")
    if any(d < 0 for d in shape):
        raise ValueError(f"dimensions must not be negative: {shape}")
    return shape


def _nest(flat: Sequence, dims: tuple[int, ...]) -> list:
    if len(dims) == 1:
        return list(flat)
    step = math.prod(dims[1:])
    return [_nest(flat[i * step:(i + 1) * step], dims[1:]) for i in range(dims[0])]


class Tensor:
    """A tensor of 1 to 4 dimensions backed by a flat list of numbers."""

    __slots__ = ("_dims", "data")

    def __init__(self, dims: Iterable[int], data: Iterable[float] | None = None) -> None:
        shape = _check_dims(dims)
        size = math.prod(shape)
        if data is None:
            values = [0.0] * size
        else:
            values = list(data)
            if len(values) != size:
                raise ValueError(
                    f"shape {shape} holds {size} values, got {len(values)}"
                )
        self._dims = shape
        self.data = values

    @property
    def dims(self) -> tuple[int, ...]:
        return self._dims

    @property
    def ndim(self) -> int:
        return len(self._dims)

    @property
    def size(self) -> int:
        return len(self.data)

    def copy(self) -> Tensor:
        """Return an independent copy."""
        return Tensor(self._dims, self.data)

    def zero(self) -> None:
        """Set every element to zero."""
        self.data[:] = [0.0] * len(self.data)

    def tolist(self) -> list:
        """Return the elements as nested lists following the shape."""
        return _nest(self.data, self._dims)

    def _offset(self, index) -> int:
        if not isinstance(index, tuple):
            index = (index,)
        if len(index) != len(self._dims):
            raise IndexError(
                f"tensor has {len(self._dims)} dimensions, got {len(index)} indices"
            )
        offset = 0
        for position, extent in zip(index, self._dims):
            if not 0 <= position < extent:
                raise IndexError(f"index {index} out of range for shape {self._dims}")
            offset = offset * extent + position
        return offset

    def __getitem__(self, index):
        return self.data[self._offset(index)]

    def __setitem__(self, index, value) -> None:
        self.data[self._offset(index)] = value

    def add_at(self, index, value) -> None:
        """Add value to the element at index."""
        self.data[self._offset(index)] += value

    def view(self, dims: Iterable[int]) -> None:
        """Reinterpret the data with a new shape of the same size."""
        shape = _check_dims(dims)
        if math.prod(shape) != len(self.data):
            raise ValueError(f"cannot view {len(self.data)} values as {shape}")
        self._dims = shape

    def matmul(self, other: Tensor) -> Tensor:
        """Matrix product of two 2D tensors."""
        if self.ndim != 2 or other.ndim != 2:
            raise ValueError("matmul needs two 2D tensors")
        rows, inner = self._dims
        other_inner, cols = other._dims
        if inner != other_inner:
            raise ValueError(f"cannot multiply {self._dims} by {other._dims}")
        columns = [other.data[j::cols] for j in range(cols)]
        row_values = [self.data[i * inner:(i + 1) * inner] for i in range(rows)]
        data = [
            sum(a * b for a, b in zip(row, column))
            for row in row_values
            for column in columns
        ]
        return Tensor((rows, cols), data)

    __matmul__ = matmul

    def transpose(self) -> Tensor:
        """Return the transpose of a 2D tensor."""
        if self.ndim != 2:
            raise ValueError("transpose needs a 2D tensor")
        rows, cols = self._dims
        data = [v for j in range(cols) for v in self.data[j::cols]] if rows else []
        return Tensor((cols, rows), data)

    def sum(self):
        """Sum of every element."""
        return sum(self.data)

    def __add__(self, other: Tensor) -> Tensor:
        if not isinstance(other, Tensor):
            return NotImplemented
        if other.ndim == 1 and self.ndim == 2 and other.size == self._dims[1]:
            cols = self._dims[1]
            data = [v + other.data[i % cols] for i, v in enumerate(self.data)]
        elif other.ndim == self.ndim and other.size == self.size:
            data = [a + b for a, b in zip(self.data, other.data)]
        else:
            raise ValueError(f"undefined sum of shapes {self._dims} and {other._dims}")
        return Tensor(self._dims, data)

    def __mul__(self, other) -> Tensor:
        if isinstance(other, Tensor):
            if other.size != self.size:
                raise ValueError(
                    f"element-wise product needs equal sizes, got {self.size} and {other.size}"
                )
            return Tensor(self._dims, [a * b for a, b in zip(self.data, other.data)])
        if isinstance(other, Real):
            return Tensor(self._dims, [v * other for v in self.data])
        return NotImplemented

    def __rmul__(self, other) -> Tensor:
        if isinstance(other, Real):
            return self * other
        return NotImplemented

    def __truediv__(self, divisor) -> Tensor:
        if not isinstance(divisor, Real):
            return NotImplemented
        return Tensor(self._dims, [v / divisor for v in self.data])

    def __isub__(self, other: Tensor) -> Tensor:
        if not isinstance(other, Tensor):
            return NotImplemented
        if other.size != self.size:
            raise ValueError(
                f"subtraction needs equal sizes, got {self.size} and {other.size}"
            )
        self.data[:] = [a - b for a, b in zip(self.data, other.data)]
        return self

    def column_wise_sum(self) -> Tensor:
        """Sum each column of a 2D tensor into a 1D tensor."""
        if self.ndim != 2:
            raise ValueError("column_wise_sum needs a 2D tensor")
        cols = self._dims[1]
        return Tensor((cols,), [sum(self.data[j::cols]) for j in range(cols)])

    def randn(self, rng: random.Random, multiplier: float) -> None:
        """Fill with standard normal samples scaled by multiplier."""
        self.data[:] = [rng.gauss(0.0, 1.0) * multiplier for _ in self.data]

    def format(self) -> str:
        """Render the tensor as printable text."""
        if self.ndim == 2:
            rows, cols = self._dims
            lines = []
            for i in range(rows):
                values = " ".join(f"{v:.18f}" for v in self.data[i * cols:(i + 1) * cols])
                prefix = " " if i else ""
                closing = "]]" if i == rows - 1 else "]"
                lines.append(f"{prefix}[{values}{closing}\n")
            return f"Tensor2D ({rows}, {cols})\n[" + "".join(lines)
        shape = ",".join(str(d) for d in self._dims)
        values = "".join(f"{v:f} " for v in self.data)
        return f"Tensor{self.ndim}d ({shape})\n[{values}]\n"

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"Tensor(dims={self._dims!r}, data={self.data!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tensor):
            return NotImplemented
        return self._dims == other._dims and self.data == other.data

    __hash__ = None