"""Two-dimensional convolution layer."""

from __future__ import annotations

import math
import random
from typing import TextIO

from .module import Module
from .tensor import Tensor


def _pair(value) -> tuple[int, int]:
    if isinstance(value, int):
        return value, value
    rows, cols = value
    return int(rows), int(cols)


class Conv2D(Module):
    """Convolution over batches shaped (batch, channels, height, width)."""

    layer_name = "Conv2D"

    def __init__(
        self,
        in_channels: int,
        out_channels: int,
        kernel_size,
        stride: int = 1,
        padding: int = 0,
        seed: int = 0,
    ) -> None:
        super().__init__()
        rows, cols = _pair(kernel_size)
        if stride < 1:
            raise ValueError(f"stride must be positive, got {stride}")
        if padding < 0:
            raise ValueError(f"padding must not be negative, got {padding}")
        rng = random.Random(seed)
        self.kernels = Tensor((out_channels, in_channels, rows, cols))
        self.kernels.randn(rng, math.sqrt(2.0 / (rows * cols * out_channels)))
        self.bias = Tensor((out_channels,))
        self.bias.randn(rng, 0.0)
        self.stride = stride
        self.padding = padding

    def _output_size(self, extent: int, kernel: int) -> int:
        span = extent + 2 * self.padding - kernel
        if span < 0:
            raise ValueError(f"kernel of {kernel} does not fit an input of {extent}")
        return span // self.stride + 1

    def _check_input(self, input_tensor: Tensor) -> None:
        if input_tensor.ndim != 4:
            raise ValueError(f"Conv2D needs a 4D input, got shape {input_tensor.dims}")
        if input_tensor.dims[1] != self.kernels.dims[1]:
            raise ValueError(
                f"input has {input_tensor.dims[1]} channels, kernels expect {self.kernels.dims[1]}"
            )

    def compile(self, input_tensor: Tensor) -> None:
        self._check_input(input_tensor)
        batch, _, height, width = input_tensor.dims
        filters, _, k_rows, k_cols = self.kernels.dims
        self.input_dims = list(input_tensor.dims)
        self.output_dims = [
            batch,
            filters,
            self._output_size(height, k_rows),
            self._output_size(width, k_cols),
        ]

    def forward(self, input_tensor: Tensor) -> Tensor:
        self._check_input(input_tensor)
        batch, channels, height, width = input_tensor.dims
        filters, _, k_rows, k_cols = self.kernels.dims
        out_h = self._output_size(height, k_rows)
        out_w = self._output_size(width, k_cols)
        x, k, b = input_tensor.data, self.kernels.data, self.bias.data

        out = []
        for i in range(batch):
            for f in range(filters):
                for r in range(out_h):
                    top = r * self.stride - self.padding
                    for c in range(out_w):
                        left = c * self.stride - self.padding
                        total = 0.0
                        for ch in range(channels):
                            for n in range(k_rows):
                                y = top + n
                                if not 0 <= y < height:
                                    continue
                                in_base = ((i * channels + ch) * height + y) * width
                                k_base = ((f * channels + ch) * k_rows + n) * k_cols
                                for o in range(k_cols):
                                    xx = left + o
                                    if 0 <= xx < width:
                                        total += x[in_base + xx] * k[k_base + o]
                        out.append(total + b[f])

        self._input = input_tensor
        self._output = Tensor((batch, filters, out_h, out_w), out)
        return self._output.copy()

    def backward(self, chain_gradient: Tensor, learning_rate: float) -> Tensor:
        if self._input is None:
            raise RuntimeError("forward must run before backward")
        batch, channels, height, width = self._input.dims
        filters, _, k_rows, k_cols = self.kernels.dims
        g_rows, g_cols = chain_gradient.dims[2], chain_gradient.dims[3]
        x, k, g = self._input.data, self.kernels.data, chain_gradient.data

        input_grad = [0.0] * len(x)
        kernel_grad = [0.0] * len(k)
        bias_grad = [0.0] * filters

        for i in range(batch):
            for f in range(filters):
                for cr in range(g_rows):
                    top = cr * self.stride - self.padding
                    for cc in range(g_cols):
                        left = cc * self.stride - self.padding
                        grad = g[((i * filters + f) * g_rows + cr) * g_cols + cc]
                        for n in range(k_rows):
                            y = top + n
                            if not 0 <= y < height:
                                continue
                            for o in range(k_cols):
                                xx = left + o
                                if not 0 <= xx < width:
                                    continue
                                for ch in range(channels):
                                    in_idx = ((i * channels + ch) * height + y) * width + xx
                                    k_idx = ((f * channels + ch) * k_rows + n) * k_cols + o
                                    kernel_grad[k_idx] += x[in_idx] * grad
                                    input_grad[in_idx] += k[k_idx] * grad
                        bias_grad[f] += grad

        self.kernels -= Tensor(self.kernels.dims, kernel_grad) * learning_rate
        self.bias -= Tensor(self.bias.dims, bias_grad) * learning_rate
        return Tensor(self._input.dims, input_grad)

    def load(self, stream: TextIO) -> None:
        self.kernels.data[:] = self._read_values(stream, self.kernels.size)
        self.bias.data[:] = self._read_values(stream, self.bias.size)

    def save(self, stream: TextIO) -> None:
        self._write_values(stream, self.kernels.data)
        self._write_values(stream, self.bias.data)