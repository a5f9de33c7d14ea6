"""Loading MNIST digits from image folders, CSV files and IDX files."""

from __future__ import annotations

import struct
from pathlib import Path

from PIL import Image

from .tensor import Tensor

NUM_LABELS = 10
_IMAGES_HEADER = struct.Struct(">4I")
_LABELS_HEADER = struct.Struct(">2I")


def _read_gray(path, rows: int, cols: int) -> list[list[float]]:
    """Read the top-left rows x cols grey levels (0-255) of an image file."""
    with Image.open(path) as img:
        gray = img.convert("L")
    width, height = gray.size
    if width < cols or height < rows:
        raise ValueError(
            f"image {path} is {width}x{height}, smaller than {cols}x{rows}"
        )
    pixels = gray.tobytes()
    return [
        [float(pixels[h * width + w]) for w in range(cols)]
        for h in range(rows)
    ]


class MNISTDataLoader:
    """Holds digit images with their labels and serves them in batches.

    Images are kept as rows x cols grey levels in 0-255; batches are scaled
    to 0-1. Batches are served cyclically, so the loader can be used
    indefinitely; the last batch of a pass may be smaller than the others.
    """

    def __init__(self, batch_size: int = 1, rows: int = 28, cols: int = 28) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.batch_size = batch_size
        self.rows = rows
        self.cols = cols
        self.x_samples: list[list[list[float]]] = []
        self.y_samples: list[int] = []
        self._batch_index = 0

    @property
    def num_images(self) -> int:
        return len(self.y_samples)

    def num_batches(self) -> int:
        """Number of batches needed to cover the whole dataset once."""
        return -(-self.num_images // self.batch_size)

    def next_batch(self) -> tuple[Tensor, list[int]]:
        """Return the next batch as a (size, 1, rows, cols) tensor and its labels."""
        total = self.num_images
        if total == 0:
            raise RuntimeError("no samples loaded")
        start = self._batch_index
        size = min(self.batch_size, total - start)
        images = self.x_samples[start:start + size]
        data = [value / 255.0 for image in images for row in image for value in row]
        labels = self.y_samples[start:start + size]
        self._batch_index = (start + size) % total
        return Tensor((size, 1, self.rows, self.cols), data), labels

    def input_shape(self) -> Tensor:
        """A zero tensor with the shape of a full batch."""
        return Tensor((self.batch_size, 1, self.rows, self.cols))

    def load_image_dir(self, path, n_images: int | None = None) -> None:
        """Load images from sub-directories named 0 to 9 under path.

        With n_images given, at most n_images // 10 files are taken from each
        label directory; files that cannot be read as images are skipped.
        """
        root = Path(path)
        for label in range(NUM_LABELS):
            files = sorted((root / str(label)).iterdir())
            count = len(files) if n_images is None else n_images // NUM_LABELS
            for file in files[:count]:
                try:
                    image = _read_gray(file, self.rows, self.cols)
                except OSError:
                    continue
                self.x_samples.append(image)
                self.y_samples.append(label)

    def load_csv(self, path) -> None:
        """Load lines of the form label,pixel,pixel,... with rows*cols pixels."""
        expected = self.rows * self.cols
        with open(path, encoding="utf-8") as stream:
            for line_number, line in enumerate(stream, start=1):
                line = line.rstrip("\r\n")
                if not line:
                    continue
                label_text, *pixel_texts = line.split(",")
                label = int(label_text)
                values = [float(v) for v in pixel_texts]
                if len(values) != expected:
                    raise ValueError(
                        f"line {line_number} has {len(values)} pixels, expected {expected}"
                    )
                image = [
                    values[r * self.cols:(r + 1) * self.cols] for r in range(self.rows)
                ]
                self.x_samples.append(image)
                self.y_samples.append(label)

    def load_idx(self, images_path, labels_path) -> None:
        """Replace the samples with those of an IDX image file and label file."""
        images = Path(images_path).read_bytes()
        labels = Path(labels_path).read_bytes()
        if len(images) < _IMAGES_HEADER.size:
            raise ValueError("images file is too short for its header")
        _, count, rows, cols = _IMAGES_HEADER.unpack_from(images)
        pixel_count = count * rows * cols
        pixels = images[_IMAGES_HEADER.size:_IMAGES_HEADER.size + pixel_count]
        if len(pixels) < pixel_count:
            raise ValueError("images file is truncated")

        if len(labels) < _LABELS_HEADER.size:
            raise ValueError("labels file is too short for its header")
        _, label_count = _LABELS_HEADER.unpack_from(labels)
        label_bytes = labels[_LABELS_HEADER.size:_LABELS_HEADER.size + label_count]
        if len(label_bytes) < label_count:
            raise ValueError("labels file is truncated")
        if label_count != count:
            raise ValueError(f"{count} images but {label_count} labels")

        area = rows * cols
        self.rows = rows
        self.cols = cols
        self.x_samples = [
            [
                [float(b) for b in pixels[i * area + r * cols:i * area + (r + 1) * cols]]
                for r in range(rows)
            ]
            for i in range(count)
        ]
        self.y_samples = list(label_bytes)
        self._batch_index = 0

    def read_image(self, path) -> list[list[float]]:
        """Read one image as rows x cols values scaled to 0-1."""
        return [[v / 255.0 for v in row] for row in _read_gray(path, self.rows, self.cols)]