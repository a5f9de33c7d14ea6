"""A single-convolution network with one pooling layer and one hidden layer."""

from __future__ import annotations

import argparse
import math
from typing import Callable, Sequence

from .functions import load_mnist_images, relu, relu_gradient, softmax
from .linalg import (
    apply,
    apply_vector,
    correlate,
    hadamard,
    matvec,
    maximum,
    normalize_vector,
    outer,
    scale,
    subtract,
    subtract_vectors,
    transpose,
)
from .matrix import Matrix, Shape


def _log(x: float) -> float:
    if x > 0:
        return math.log(x)
    if x == 0:
        return -math.inf
    return math.nan


def cross_entropy(y_hat: Sequence[float], y_true: Sequence[float]) -> float:
    """Negative sum of y_true times the log of y_hat."""
    if len(y_hat) != len(y_true):
        raise ValueError(
            f"cross entropy needs equal lengths, got {len(y_hat)} and {len(y_true)}"
        )
    logs = apply_vector(y_hat, _log)
    return -sum(hadamard(logs, y_true))


class SimpleCNN:
    """Convolution, ReLU, max pooling, one ReLU hidden layer and a softmax output.

    The network has a single kernel and two weight matrices: one from the
    flattened pooling output (plus a bias input) to the hidden layer, and one
    from the hidden layer (plus a bias input) to the outputs.
    """

    def __init__(
        self,
        input_dim: Shape,
        kernel_size: Shape,
        pool_size: Shape,
        hidden_nodes: int,
        output_dim: int,
    ) -> None:
        if not (input_dim.rows > kernel_size.rows and input_dim.columns > kernel_size.columns):
            raise ValueError(f"kernel {kernel_size} must be smaller than input {input_dim}")
        conv_rows = input_dim.rows - kernel_size.rows + 1
        conv_cols = input_dim.columns - kernel_size.columns + 1
        if pool_size.rows < 1 or pool_size.columns < 1:
            raise ValueError(f"pool window must not be empty, got {pool_size}")
        if not (conv_rows > pool_size.rows and conv_cols > pool_size.columns):
            raise ValueError(
                f"pool window {pool_size} must be smaller than the convolution output "
                f"{Shape(conv_rows, conv_cols)}"
            )
        self.input_dim = input_dim
        self.pool_window = pool_size
        self.kernel = Matrix(kernel_size.rows, kernel_size.columns, True)
        pooled = (conv_rows // pool_size.rows) * (conv_cols // pool_size.columns)
        self.weights = [
            Matrix(pooled + 1, hidden_nodes, True),
            Matrix(hidden_nodes + 1, output_dim, True),
        ]

    def max_pooling(self, conv: Matrix) -> tuple[list[float], Matrix]:
        """Pool conv window by window.

        Returns the window maxima followed by a bias input of 1, and a mask of
        conv's shape holding 1 where each maximum was found.
        """
        window = self.pool_window
        mask = Matrix(conv.rows, conv.columns)
        pooled: list[float] = []
        for i in range(conv.rows // window.rows):
            for j in range(conv.columns // window.columns):
                value, (r, c) = maximum(conv, i * window.rows, j * window.columns, window)
                pooled.append(value)
                mask[r, c] = 1.0
        pooled.append(1.0)
        return pooled, mask

    def forward(self, image: Matrix) -> tuple[Matrix, list[list[float]]]:
        """Run an image through the network.

        Returns the pooling mask and the activations: the pooled inputs with
        bias, the hidden layer with bias, and the output probabilities.
        """
        k_rows, k_cols = self.kernel.rows, self.kernel.columns
        rows = image.rows - k_rows + 1
        cols = image.columns - k_cols + 1
        if rows < 1 or cols < 1:
            raise ValueError(f"image {image.shape} is smaller than kernel {self.kernel.shape}")
        conv = Matrix.from_rows(
            [correlate(self.kernel, image, i, j) for j in range(cols)] for i in range(rows)
        )
        conv = apply(conv, relu)
        pooled, mask = self.max_pooling(conv)

        hidden = apply_vector(matvec(transpose(self.weights[0]), pooled), relu)
        hidden.append(1.0)

        scores = apply_vector(matvec(transpose(self.weights[1]), hidden), softmax)
        output = normalize_vector(scores)
        return mask, [pooled, hidden, output]

    def backward(
        self,
        delta_l: Sequence[float],
        pool_mask: Matrix,
        activations: Sequence[Sequence[float]],
        image: Matrix,
        derivative: Callable[[float], float],
        learning_rate: float,
    ) -> None:
        """Back-propagate the output delta and update the weights and kernel."""
        delta_h = matvec(self.weights[1], delta_l)
        delta_h = hadamard(delta_h, apply_vector(activations[1], derivative))

        delta_x = matvec(self.weights[0], delta_h, 1)
        delta_x = hadamard(delta_x, apply_vector(activations[0], derivative))

        delta_conv = Matrix(pool_mask.rows, pool_mask.columns)
        positions = [
            (r, c)
            for r in range(pool_mask.rows)
            for c in range(pool_mask.columns)
            if pool_mask[r, c] == 1.0
        ]
        for (r, c), delta in zip(positions, delta_x):
            delta_conv[r, c] = delta

        d_w0 = scale(outer(activations[0], delta_h, 1), learning_rate)
        d_w1 = scale(outer(activations[1], delta_l), learning_rate)
        self.weights[0] = subtract(self.weights[0], d_w0)
        self.weights[1] = subtract(self.weights[1], d_w1)

        k_rows, k_cols = self.kernel.rows, self.kernel.columns
        self.kernel = Matrix.from_rows(
            [correlate(delta_conv, image, i, j) for j in range(k_cols)] for i in range(k_rows)
        )

    def train(
        self,
        x_train: Sequence[Matrix],
        y_train: Sequence[Sequence[float]],
        learning_rate: float,
        epochs: int,
    ) -> list[float]:
        """Train sample by sample; returns the mean error of each epoch."""
        if len(x_train) != len(y_train):
            raise ValueError(f"{len(x_train)} inputs but {len(y_train)} targets")
        if not x_train:
            raise ValueError("no training samples")
        errors: list[float] = []
        for epoch in range(1, epochs + 1):
            error = 0.0
            for image, target in zip(x_train, y_train):
                mask, activations = self.forward(image)
                error += cross_entropy(activations[-1], target)
                delta_l = subtract_vectors(activations[-1], target)
                self.backward(delta_l, mask, activations, image, relu_gradient, learning_rate)
            mean = error / len(x_train)
            print(f"Epoch: {epoch} Error: {mean:g}")
            errors.append(mean)
        return errors

    def validate(self, x_val: Sequence[Matrix], y_val: Sequence[Sequence[float]]) -> float:
        """Mean cross entropy over a validation set, without updating anything."""
        if len(x_val) != len(y_val):
            raise ValueError(f"{len(x_val)} inputs but {len(y_val)} targets")
        if not x_val:
            raise ValueError("no validation samples")
        error = sum(
            cross_entropy(self.forward(image)[1][-1], target)
            for image, target in zip(x_val, y_val)
        )
        mean = error / len(x_val)
        print(f"Error: {mean:g}")
        return mean

    def info(self) -> str:
        """Describe the kernel and weight shapes."""
        lines = [f"Kernel size: ({self.kernel.rows}, {self.kernel.columns})"]
        lines.extend(
            f"Weight{i} size: ({w.rows}, {w.columns})" for i, w in enumerate(self.weights)
        )
        return "\n".join(lines) + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    """Train the single-convolution network on MNIST digit images."""
    parser = argparse.ArgumentParser(
        prog="learnkit-simple-cnn",
        description="Train a single-convolution network on MNIST digit images.",
    )
    parser.add_argument("--data", default="../Dataset/mnist_png/training/",
                        help="directory holding sub-directories 0 to 9 of images")
    parser.add_argument("--images", type=int, default=100)
    parser.add_argument("--epochs", type=int, default=30)
    parser.add_argument("--learning-rate", type=float, default=0.01)
    args = parser.parse_args(argv)

    cnn = SimpleCNN(Shape(28, 28), Shape(6, 6), Shape(4, 4), 30, 10)
    x_train, y_train = load_mnist_images(args.data, args.images)
    cnn.train(x_train, y_train, args.learning_rate, args.epochs)
    return 0