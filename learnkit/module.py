"""Base class for the layers of a network."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, TextIO

from .tensor import Tensor


def _read_number(stream: TextIO) -> float:
    ch = stream.read(1)
    while ch and ch.isspace():
        ch = stream.read(1)
    chars = []
    while ch and not ch.isspace():
        chars.append(ch)
        ch = stream.read(1)
    if not chars:
        raise ValueError("invalid model file: not enough values")
    try:
        return float("".join(chars))
    except ValueError:
        raise ValueError(f"invalid model file: bad value {''.join(chars)!r}") from None


class Module(ABC):
    """A layer that can be compiled, run forward and trained backward."""

    layer_name = "Module"

    def __init__(self) -> None:
        self.input_dims: list[int] = []
        self.output_dims: list[int] = []
        self._input: Tensor | None = None
        self._output: Tensor | None = None
        self.is_eval = False

    @abstractmethod
    def compile(self, input_tensor: Tensor) -> None:
        """Record the input shape and work out the output shape."""

    @abstractmethod
    def forward(self, input_tensor: Tensor) -> Tensor:
        """Compute the layer's output for a batch."""

    @abstractmethod
    def backward(self, chain_gradient: Tensor, learning_rate: float) -> Tensor:
        """Update parameters and return the gradient with respect to the input."""

    def load(self, stream: TextIO) -> None:
        """Read the layer's parameters; layers without parameters read nothing."""

    def save(self, stream: TextIO) -> None:
        """Write the layer's parameters; layers without parameters write nothing."""

    def layer_info(self, output: Tensor) -> str:
        """Describe the layer with its compiled input shape and the given output shape."""
        if not self.input_dims:
            raise RuntimeError("layer has not been compiled")
        input_shape = "x".join(str(d) for d in self.input_dims)
        output_shape = "x".join(str(d) for d in output.dims)
        return f"{self.layer_name} with input shape : {input_shape} and output shape : {output_shape}"

    def train(self) -> None:
        """Switch the layer to training mode."""
        self.is_eval = False

    def eval(self) -> None:
        """Switch the layer to evaluation mode."""
        self.is_eval = True

    @staticmethod
    def _read_values(stream: TextIO, count: int) -> list[float]:
        return [_read_number(stream) for _ in range(count)]

    @staticmethod
    def _write_values(stream: TextIO, values: Iterable[float]) -> None:
        stream.write("".join(f"{v:18f}" for v in values))