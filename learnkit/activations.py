"""Element-wise activation layers."""

from __future__ import annotations

import math
from typing import Callable

from .module import Module
from .tensor import Tensor


def _relu(x: float) -> float:
    return x if x > 0 else 0.0


def _relu_gradient(x: float) -> float:
    return 1.0 if x > 0 else 0.0


def _sigmoid(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def _sigmoid_gradient(x: float) -> float:
    s = _sigmoid(x)
    return s * (1.0 - s)


def _tanh_gradient(x: float) -> float:
    return 1.0 - math.tanh(x) ** 2


class Activation(Module):
    """A layer that applies a function to every element and keeps the shape."""

    layer_name = "Activation"

    def compile(self, input_tensor: Tensor) -> None:
        self.input_dims = list(input_tensor.dims)
        self.output_dims = list(input_tensor.dims)

    def _apply(self, input_tensor: Tensor, function: Callable[[float], float]) -> Tensor:
        self._input = input_tensor.copy()
        self._output = Tensor(input_tensor.dims, [function(v) for v in input_tensor.data])
        return self._output.copy()

    def _chain(self, chain_gradient: Tensor, derivative: Callable[[float], float]) -> Tensor:
        if self._input is None:
            raise RuntimeError("forward must run before backward")
        local = Tensor(self._input.dims, [derivative(v) for v in self._input.data])
        return chain_gradient * local


class Relu(Activation):
    """Rectified linear unit: max(x, 0)."""

    layer_name = "Relu"

    def __init__(self) -> None:
        super().__init__()

    def forward(self, input_tensor: Tensor) -> Tensor:
        return self._apply(input_tensor, _relu)

    def backward(self, chain_gradient: Tensor, learning_rate: float) -> Tensor:
        return self._chain(chain_gradient, _relu_gradient)


class Sigmoid(Activation):
    """Logistic function 1 / (1 + exp(-x))."""

    layer_name = "Sigmoid"

    def __init__(self) -> None:
        super().__init__()

    def forward(self, input_tensor: Tensor) -> Tensor:
        return self._apply(input_tensor, _sigmoid)

    def backward(self, chain_gradient: Tensor, learning_rate: float) -> Tensor:
        return self._chain(chain_gradient, _sigmoid_gradient)


class Tanh(Activation):
    """Hyperbolic tangent."""

    layer_name = "Tanh"

    def __init__(self) -> None:
        super().__init__()

    def forward(self, input_tensor: Tensor) -> Tensor:
        return self._apply(input_tensor, math.tanh)

    def backward(self, chain_gradient: Tensor, learning_rate: float) -> Tensor:
        return self._chain(chain_gradient, _tanh_gradient)


class LeakyRelu(Activation):
    """x for positive inputs, negative_slope * x otherwise."""

    layer_name = "LeakyRelu"

    def __init__(self, negative_slope: float = 1e-2) -> None:
        super().__init__()
        self.negative_slope = negative_slope

    def forward(self, input_tensor: Tensor) -> Tensor:
        slope = self.negative_slope
        return self._apply(input_tensor, lambda x: x if x > 0 else slope * x)

    def backward(self, chain_gradient: Tensor, learning_rate: float) -> Tensor:
        slope = self.negative_slope
        return self._chain(chain_gradient, lambda x: 1.0 if x > 0 else slope)