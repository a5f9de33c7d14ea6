"""Activation functions and helpers for reading digit datasets."""

from __future__ import annotations

import math
from pathlib import Path

from PIL import Image

from .matrix import Matrix

NUM_LABELS = 10
IMAGE_WIDTH = 28
IMAGE_HEIGHT = 28


def relu(x: float) -> float:
    return x if x > 0 else 0.0


def sigmoid(x: float) -> float:
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def tanh(x: float) -> float:
    return math.tanh(x)


def relu_gradient(x: float) -> float:
    """1 for positive inputs, 0.2 otherwise."""
    return 1.0 if x > 0 else 0.2


def sigmoid_gradient(x: float) -> float:
    """Derivative of the sigmoid given its output x."""
    return x * (1 - x)


def tanh_gradient(x: float) -> float:
    """Derivative of tanh given its output x."""
    return 1 - x * x


def softmax(x: float) -> float:
    """Unnormalised softmax term exp(x); NaN maps to 0."""
    if math.isnan(x):
        return 0.0
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def list_directory(path) -> list[str]:
    """Paths of every entry in a directory, sorted."""
    return sorted(str(entry) for entry in Path(path).iterdir())


def split_line(line: str, delimiter: str) -> list[str]:
    """Split line at each delimiter.

    Splitting stops at the first delimiter found at the start of what is
    left, so an empty field ends the split and the remainder becomes the
    last value.
    """
    values = []
    while True:
        pos = line.find(delimiter)
        if pos <= 0:
            break
        values.append(line[:pos])
        line = line[pos + len(delimiter):]
    values.append(line)
    return values


def _one_hot(label: int) -> list[float]:
    if not 0 <= label < NUM_LABELS:
        raise ValueError(f"label {label} is not in 0..{NUM_LABELS - 1}")
    vector = [0.0] * NUM_LABELS
    vector[label] = 1.0
    return vector


def load_mnist_images(path, n_images: int = 100) -> tuple[list[Matrix], list[list[float]]]:
    """Load digit images from sub-directories 0 to 9 under path.

    Takes the first n_images // 10 files of each label; unreadable files are
    skipped. Returns 28x28 matrices of grey levels scaled to 0-1 and one-hot
    label vectors.
    """
    root = Path(path)
    xs: list[Matrix] = []
    ys: list[list[float]] = []
    for label in range(NUM_LABELS):
        files = list_directory(root / str(label))
        for file in files[:n_images // NUM_LABELS]:
            try:
                with Image.open(file) as img:
                    gray = img.convert("L")
            except OSError:
                continue
            width, height = gray.size
            if width < IMAGE_WIDTH or height < IMAGE_HEIGHT:
                raise ValueError(f"image {file} is smaller than {IMAGE_WIDTH}x{IMAGE_HEIGHT}")
            pixels = gray.tobytes()
            xs.append(Matrix.from_rows(
                [pixels[h * width + w] / 255.0 for w in range(IMAGE_WIDTH)]
                for h in range(IMAGE_HEIGHT)
            ))
            ys.append(_one_hot(label))
    return xs, ys


def load_mnist_csv(path) -> tuple[list[list[float]], list[list[float]]]:
    """Read lines of label,pixel,... into pixel vectors scaled to 0-1 and one-hot labels."""
    xs: list[list[float]] = []
    ys: list[list[float]] = []
    with open(path, encoding="utf-8") as stream:
        for line in stream:
            fields = split_line(line.rstrip("\r\n"), ",")
            ys.append(_one_hot(int(fields[0])))
            xs.append([float(v) / 255 for v in fields[1:]])
    return xs, ys


def read_image(path) -> list[int]:
    """Raw bytes of a colour image, row by row, in blue-green-red order."""
    with Image.open(path) as img:
        rgb = img.convert("RGB")
    raw = rgb.tobytes()
    values: list[int] = []
    for i in range(0, len(raw), 3):
        values.extend((raw[i + 2], raw[i + 1], raw[i]))
    return values