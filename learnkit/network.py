"""A sequential network of layers ending in an output layer, and its command."""

from __future__ import annotations

import argparse
from typing import Sequence

from .activations import Relu
from .conv2d import Conv2D
from .dense import Dense
from .dropout import Dropout
from .lr_scheduler import LinearLRScheduler, LRScheduler
from .maxpool import MaxPool
from .mnist import MNISTDataLoader
from .module import Module
from .softmax import OutputLayer, Softmax
from .tensor import Tensor

_BAR_WIDTH = 50


def format_progress(progress: float, iteration: int, num_batches: int, loss: float) -> str:
    """Render a progress bar line for one training iteration."""
    pos = int(_BAR_WIDTH * progress)
    bar = "".join(
        "=" if i < pos else ">" if i == pos else " " for i in range(_BAR_WIDTH)
    )
    return (
        f"[{bar}] {int(progress * 100.0)} Iteration {iteration}/{num_batches}"
        f" - Batch loss: {loss:g}\r"
    )


class NetworkModel:
    """Runs batches through a list of layers and trains them together."""

    def __init__(
        self,
        modules: Sequence[Module],
        output_layer: OutputLayer,
        scheduler: LRScheduler,
    ) -> None:
        self.modules = list(modules)
        self.output_layer = output_layer
        self.scheduler = scheduler
        self.iteration = 0

    def compile(self, x: Tensor, verbose: bool = True) -> None:
        """Work out every layer's shapes from an input of the given shape."""
        current = x
        for number, module in enumerate(self.modules, start=1):
            module.compile(current)
            current = Tensor(module.output_dims)
            if verbose:
                print(f"Layer Number {number} : {module.layer_info(current)}")
        self.output_layer.compile(current)
        if verbose:
            print(f"Cost Function : {self.output_layer.cost_function_info()}")

    def forward(self, x: Tensor) -> Tensor:
        """Run a batch through every layer and the output layer."""
        for module in self.modules:
            x = module.forward(x)
        return self.output_layer.predict(x)

    def backward(self, y: Sequence[int]) -> float:
        """Back-propagate the loss for labels y and return the loss."""
        loss, gradient = self.output_layer.backward(y)
        for module in reversed(self.modules):
            gradient = module.backward(gradient, self.scheduler.learning_rate)
        return loss

    def train_step(self, x: Tensor, y: Sequence[int]) -> float:
        """One forward and backward pass; returns the batch loss."""
        self.forward(x)
        cost = self.backward(y)
        self.iteration += 1
        self.scheduler.on_iteration_end(self.iteration)
        return cost

    def train(self, epochs: int, loader: MNISTDataLoader, verbose: bool = True) -> float | None:
        """Train over every batch of the loader for a number of epochs.

        Returns the loss of the last batch, or None when nothing was trained.
        """
        print(f"Training for {epochs} epochs(s).")
        num_batches = loader.num_batches()
        step = 1.0 / num_batches if num_batches else 0.0
        last_loss = None
        for epoch in range(epochs):
            progress = step
            print(f"Epochs {epoch + 1} ")
            for j in range(num_batches):
                x, y = loader.next_batch()
                last_loss = self.train_step(x, y)
                if verbose:
                    print(format_progress(progress, j + 1, num_batches, last_loss),
                          end="", flush=True)
                    progress += step
            print()
        return last_loss

    def predict(self, x: Tensor) -> list[int]:
        """Return the index of the highest output for each sample."""
        output = self.forward(x)
        rows, cols = output.dims
        predictions = []
        for i in range(rows):
            best_index, best = -1, -1.0
            for j, value in enumerate(output.data[i * cols:(i + 1) * cols]):
                if value > best:
                    best, best_index = value, j
            predictions.append(best_index)
        return predictions

    def eval(self) -> None:
        """Switch every layer to evaluation mode."""
        for module in self.modules:
            module.eval()

    def save(self, path) -> None:
        """Write every layer's parameters to a text file."""
        with open(path, "w", encoding="utf-8") as stream:
            for module in self.modules:
                module.save(stream)

    def load(self, path) -> None:
        """Read every layer's parameters from a text file written by save."""
        with open(path, encoding="utf-8") as stream:
            for module in self.modules:
                module.load(stream)


def calculate_accuracy(model: NetworkModel, loader: MNISTDataLoader) -> float:
    """Predict every batch of the loader once and return the accuracy in percent."""
    print("Testing...")
    num_batches = loader.num_batches()
    if num_batches == 0:
        raise ValueError("no test samples loaded")
    hits = total = 0
    for i in range(num_batches):
        if (i + 1) % 10 == 0 or i == num_batches - 1:
            print(f"\rIteration {i + 1}/{num_batches}", end="", flush=True)
        x, y = loader.next_batch()
        predictions = model.predict(x)
        hits += sum(p == t for p, t in zip(predictions, y))
        total += len(y)
    print()
    accuracy = hits * 100.0 / total
    print(f"Accuracy: {accuracy:.2f}% ({hits}/{total})")
    return accuracy


def main(argv: Sequence[str] | None = None) -> int:
    """Train a small convolutional network on MNIST images and report accuracy."""
    parser = argparse.ArgumentParser(
        prog="learnkit-cnn",
        description="Train and evaluate a convolutional network on MNIST digit images.",
    )
    parser.add_argument("--data", default="../Dataset/mnist_png/training/",
                        help="directory holding sub-directories 0 to 9 of images")
    parser.add_argument("--images", type=int, default=100,
                        help="number of images to load")
    parser.add_argument("--batch-size", type=int, default=32)
    parser.add_argument("--epochs", type=int, default=10)
    parser.add_argument("--model", default="network.txt",
                        help="file the trained parameters are saved to")
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args(argv)

    rows = cols = 28
    print("Loading training set ...")
    train_loader = MNISTDataLoader(args.batch_size, rows, cols)
    train_loader.load_image_dir(args.data, args.images)
    print("DatasetLoaded")

    seed = args.seed
    modules = [
        Conv2D(1, 8, (3, 3), 1, 0, seed),
        Conv2D(8, 4, (3, 3), 1, 1, seed),
        Conv2D(4, 2, (3, 3), 1, 0, seed),
        MaxPool(2, 2),
        Relu(),
        Dropout(),
        Dense(288, 128, seed),
        Relu(),
        Dense(128, 10, seed),
    ]
    model = NetworkModel(modules, Softmax(), LinearLRScheduler(0.2, -0.000005))
    model.compile(train_loader.input_shape(), True)
    model.train(args.epochs, train_loader)
    model.eval()

    model.save(args.model)
    model.load(args.model)

    print("Loading testing set... ", end="", flush=True)
    test_loader = MNISTDataLoader(args.batch_size, rows, cols)
    test_loader.load_image_dir(args.data, args.images)
    print("DatasetLoaded")

    calculate_accuracy(model, test_loader)
    return 0