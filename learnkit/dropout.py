"""Dropout layer with a seeded keep mask."""

from __future__ import annotations

import random

from .module import Module
from .tensor import Tensor


class Dropout(Module):
    """Keeps each element with probability p and scales kept ones by 1/p.

    The generator is reseeded on every forward pass, so the mask depends only
    on the seed and the input shape.
    """

    layer_name = "Dropout"

    def __init__(self, p: float = 0.5, seed: int = 0) -> None:
        super().__init__()
        if not 0 < p <= 1:
            raise ValueError(f"p must be in (0, 1], got {p}")
        self.p = p
        self.seed = seed
        self._mask: Tensor | None = None

    def compile(self, input_tensor: Tensor) -> None:
        self.input_dims = list(input_tensor.dims)
        self.output_dims = list(input_tensor.dims)

    def _make_mask(self, dims: tuple[int, ...], size: int) -> Tensor:
        rng = random.Random(self.seed)
        scale = 1.0 / self.p
        return Tensor(dims, [scale if rng.random() < self.p else 0.0 for _ in range(size)])

    def forward(self, input_tensor: Tensor) -> Tensor:
        self._mask = self._make_mask(input_tensor.dims, input_tensor.size)
        self._input = input_tensor.copy()
        self._output = input_tensor * self._mask
        return self._output.copy()

    def backward(self, chain_gradient: Tensor, learning_rate: float) -> Tensor:
        if self._mask is None:
            raise RuntimeError("forward must run before backward")
        return chain_gradient * self._mask