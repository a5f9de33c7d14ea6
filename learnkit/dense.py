"""Fully connected layer computing x @ W + b."""

from __future__ import annotations

import math
import random
from typing import TextIO

from .module import Module
from .tensor import Tensor


class Dense(Module):
    """Fully connected layer; inputs of more than two dimensions are flattened."""

    layer_name = "Dense"

    def __init__(self, input_size: int, output_size: int, seed: int = 0) -> None:
        super().__init__()
        rng = random.Random(seed)
        self.weights = Tensor((input_size, output_size))
        self.weights.randn(rng, math.sqrt(2.0 / input_size))
        self.bias = Tensor((output_size,))
        self.bias.randn(rng, 0.0)
        self._input_shape: tuple[int, ...] = ()

    def compile(self, input_tensor: Tensor) -> None:
        self.input_dims = list(input_tensor.dims)
        self.output_dims = [input_tensor.dims[0], self.weights.dims[1]]

    def forward(self, input_tensor: Tensor) -> Tensor:
        x = input_tensor.copy()
        self._input_shape = x.dims
        if x.ndim != 2:
            x.view((x.dims[0], math.prod(x.dims[1:])))
        self._input = x
        self._output = x.matmul(self.weights) + self.bias
        return self._output.copy()

    def backward(self, chain_gradient: Tensor, learning_rate: float) -> Tensor:
        if self._input is None:
            raise RuntimeError("forward must run before backward")
        weight_grad = self._input.transpose().matmul(chain_gradient)
        bias_grad = chain_gradient.column_wise_sum()
        gradient = chain_gradient.matmul(self.weights.transpose())
        gradient.view(self._input_shape)

        self.weights -= weight_grad * learning_rate
        self.bias -= bias_grad * learning_rate
        return gradient

    def load(self, stream: TextIO) -> None:
        self.weights.data[:] = self._read_values(stream, self.weights.size)
        self.bias.data[:] = self._read_values(stream, self.bias.size)

    def save(self, stream: TextIO) -> None:
        self._write_values(stream, self.weights.data)
        self._write_values(stream, self.bias.data)