"""Max pooling layer over square windows."""

from __future__ import annotations

from .module import Module
from .tensor import Tensor


class MaxPool(Module):
    """Takes the maximum of each size x size window, moving by stride."""

    layer_name = "MaxPool"

    def __init__(self, size: int, stride: int) -> None:
        super().__init__()
        if size < 1 or stride < 1:
            raise ValueError("size and stride must be positive")
        self.size = size
        self.stride = stride
        self._indexes: list[int] = []

    def _output_size(self, extent: int) -> int:
        span = extent - self.size
        if span < 0:
            raise ValueError(f"window of {self.size} does not fit an input of {extent}")
        return span // self.stride + 1

    def _output_dims(self, input_tensor: Tensor) -> tuple[int, int, int, int]:
        if input_tensor.ndim != 4:
            raise ValueError(f"MaxPool needs a 4D input, got shape {input_tensor.dims}")
        batch, channels, height, width = input_tensor.dims
        return batch, channels, self._output_size(height), self._output_size(width)

    def compile(self, input_tensor: Tensor) -> None:
        self.input_dims = list(input_tensor.dims)
        self.output_dims = list(self._output_dims(input_tensor))

    def forward(self, input_tensor: Tensor) -> Tensor:
        dims = self._output_dims(input_tensor)
        batch, channels, out_h, out_w = dims
        height, width = input_tensor.dims[2], input_tensor.dims[3]
        x = input_tensor.data

        values: list[float] = []
        indexes: list[int] = []
        for plane in range(batch * channels):
            plane_base = plane * height * width
            for k in range(out_h):
                for l in range(out_w):
                    best = float("-inf")
                    best_index = 0
                    for m in range(self.size):
                        row_base = plane_base + (k * self.stride + m) * width + l * self.stride
                        for n in range(self.size):
                            value = x[row_base + n]
                            if value > best:
                                best = value
                                best_index = m * self.size + n
                    values.append(best)
                    indexes.append(best_index)

        self._input = input_tensor
        self._output = Tensor(dims, values)
        self._indexes = indexes
        return self._output.copy()

    def backward(self, chain_gradient: Tensor, learning_rate: float) -> Tensor:
        if self._input is None or self._output is None:
            raise RuntimeError("forward must run before backward")
        batch, channels, height, width = self._input.dims
        out_h, out_w = self._output.dims[2], self._output.dims[3]
        gradient = [0.0] * self._input.size
        g = chain_gradient.data

        position = 0
        for plane in range(batch * channels):
            plane_base = plane * height * width
            for k in range(out_h):
                for l in range(out_w):
                    m, n = divmod(self._indexes[position], self.size)
                    row = k * self.stride + m
                    col = l * self.stride + n
                    gradient[plane_base + row * width + col] = g[position]
                    position += 1
        return Tensor(self._input.dims, gradient)