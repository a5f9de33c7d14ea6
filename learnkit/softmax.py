"""Output layers: softmax probabilities with a cross-entropy cost."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from .tensor import Tensor


def softmax_probabilities(input_tensor: Tensor) -> Tensor:
    """Row-wise softmax of a 2D tensor, shifted by each row's maximum."""
    if input_tensor.ndim != 2:
        raise ValueError(f"softmax needs a 2D tensor, got shape {input_tensor.dims}")
    cols = input_tensor.dims[1]
    if cols == 0:
        return input_tensor.copy()
    data: list[float] = []
    values = input_tensor.data
    for start in range(0, len(values), cols):
        row = values[start:start + cols]
        peak = max(row)
        exps = [math.exp(v - peak) for v in row]
        total = sum(exps)
        data.extend(e / total for e in exps)
    return Tensor(input_tensor.dims, data)


def cross_entropy(y_hat: Tensor, y_true: Sequence[int], epsilon: float = 1e-10) -> float:
    """Mean negative log probability of the true classes, floored at epsilon."""
    labels = list(y_true)
    if not labels:
        raise ValueError("cross entropy needs at least one label")
    total = sum(-math.log(max(y_hat[i, label], epsilon)) for i, label in enumerate(labels))
    return total / len(labels)


def cross_entropy_prime(y_hat: Tensor, y_true: Sequence[int]) -> Tensor:
    """Gradient of the mean cross entropy with respect to the softmax logits."""
    prime = y_hat.copy()
    for i, label in enumerate(y_true):
        prime[i, label] = y_hat[i, label] - 1
    return prime / y_hat.dims[0]


class OutputLayer(ABC):
    """Final layer that turns scores into predictions and a cost gradient."""

    cost_function_name = "OutputLayer"

    def __init__(self) -> None:
        self.output_dims: list[int] = []
        self._output: Tensor | None = None

    @abstractmethod
    def predict(self, input_tensor: Tensor) -> Tensor:
        """Compute the predictions for a batch."""

    @abstractmethod
    def backward(self, y_true: Iterable[int]) -> tuple[float, Tensor]:
        """Return the loss and its gradient for the last predictions."""

    @abstractmethod
    def compile(self, input_tensor: Tensor) -> None:
        """Record the output shape."""

    def cost_function_info(self) -> str:
        """Describe the cost function and its compiled output shape."""
        if not self.output_dims:
            raise RuntimeError("output layer has not been compiled")
        shape = "x".join(str(d) for d in self.output_dims)
        return f"{self.cost_function_name} with output shape : {shape}"


class Softmax(OutputLayer):
    """Softmax probabilities with cross entropy as the loss."""

    cost_function_name = "Softmax"

    def __init__(self) -> None:
        super().__init__()
        self.epsilon = 1e-10

    def compile(self, input_tensor: Tensor) -> None:
        if input_tensor.ndim < 2:
            raise ValueError(f"Softmax needs a 2D input, got shape {input_tensor.dims}")
        self.output_dims = list(input_tensor.dims[:2])

    def predict(self, input_tensor: Tensor) -> Tensor:
        self._output = softmax_probabilities(input_tensor)
        return self._output.copy()

    def backward(self, y_true: Iterable[int]) -> tuple[float, Tensor]:
        if self._output is None:
            raise RuntimeError("predict must run before backward")
        labels = list(y_true)
        loss = cross_entropy(self._output, labels, self.epsilon)
        return loss, cross_entropy_prime(self._output, labels)