# learnkit

Small machine-learning building blocks in plain Python, meant to be read
and experimented with:

- a layered convolutional network toolkit: `Tensor`, `Conv2D`, `MaxPool`,
  `Dense`, `Dropout`, the activation layers `Relu`, `Sigmoid`, `Tanh` and
  `LeakyRelu`, a `Softmax` cross-entropy output layer, a
  `LinearLRScheduler` and a `NetworkModel` that trains, predicts, saves and
  loads;
- `MNISTDataLoader`, which reads digit images from folders, CSV files or
  the IDX byte format and serves them in batches;
- `SimpleCNN`, a single-kernel network with one hidden layer, built on a
  small `Matrix` class and the helpers in `learnkit.linalg` and
  `learnkit.functions`;
- a Gini-impurity `DecisionTree` for integer-coded data, with CSV helpers.

Images are read with Pillow; everything else uses the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Layered CNN

```python
from learnkit.conv2d import Conv2D
from learnkit.maxpool import MaxPool
from learnkit.activations import Relu
from learnkit.dropout import Dropout
from learnkit.dense import Dense
from learnkit.softmax import Softmax
from learnkit.lr_scheduler import LinearLRScheduler
from learnkit.mnist import MNISTDataLoader
from learnkit.network import NetworkModel, calculate_accuracy

loader = MNISTDataLoader(32, 28, 28)
loader.load_image_dir("data/mnist_png/training/", 100)

modules = [
    Conv2D(1, 8, (3, 3), 1, 0, 0),
    Conv2D(8, 4, (3, 3), 1, 1, 0),
    Conv2D(4, 2, (3, 3), 1, 0, 0),
    MaxPool(2, 2),
    Relu(),
    Dropout(0.5, 0),
    Dense(288, 128, 0),
    Relu(),
    Dense(128, 10, 0),
]
model = NetworkModel(modules, Softmax(), LinearLRScheduler(0.2, -0.000005))
model.compile(loader.input_shape(), True)   # prints each layer's shapes
last_loss = model.train(10, loader, True)
model.eval()

model.save("network.txt")
model.load("network.txt")
accuracy = calculate_accuracy(model, loader)  # percent
```

Batches are tensors shaped `(batch, channels, height, width)`. `Dense`
flattens inputs of more than two dimensions. Each layer keeps what it
needs from its last `forward` for `backward`; `NetworkModel.train_step`
runs both and advances the learning-rate scheduler, and `train` returns
the loss of the last batch. `predict` returns the index of the highest
output for each sample.

`save` writes every layer's parameters as numbers to a text file and
`load` reads them back in the same order; layers without parameters write
and read nothing.

`Dropout` reseeds its generator on every forward pass, so its mask depends
only on the seed and the input shape. It stays active after `eval()`:
evaluation mode is recorded on each layer but no layer behaves
differently in it.

### Loading MNIST

- `load_image_dir(path, n_images)` reads sub-directories named `0` to `9`,
  taking at most `n_images // 10` files of each (all of them when
  `n_images` is `None`) in sorted order and skipping files that cannot be
  read as images.
- `load_csv(path)` reads lines of `label,pixel,pixel,...` with
  `rows * cols` pixels each.
- `load_idx(images_path, labels_path)` replaces the samples with those of
  the MNIST image and label byte files.

Samples are kept as grey levels 0-255 and scaled to 0-1 in `next_batch`,
which serves batches cyclically; the last batch of a pass may be smaller.
`num_batches()` gives the number of batches in one pass.

## Single-kernel CNN

`learnkit.simple_cnn.SimpleCNN` is one convolution kernel with ReLU, max
pooling, one ReLU hidden layer and a softmax output, trained sample by
sample with cross-entropy loss:

```python
from learnkit.matrix import Shape
from learnkit.functions import load_mnist_images
from learnkit.simple_cnn import SimpleCNN

cnn = SimpleCNN(Shape(28, 28), Shape(6, 6), Shape(4, 4), 30, 10)
x_train, y_train = load_mnist_images("data/mnist_png/training/", 100)
errors = cnn.train(x_train, y_train, 0.01, 30)   # mean error per epoch
print(cnn.info())
```

`validate(x_val, y_val)` returns the mean cross entropy without updating
anything. Randomised matrices are filled from a uniform distribution on
[-1, 1] with a fixed seed, so matrices of the same shape start equal.

## Decision tree

```python
from learnkit.csv_data import (
    read_csv, remove_column, convert_samples, concat_dataframe, write_csv,
)
from learnkit.tree import DecisionTree

rows = read_csv("data/mall.csv")      # header line skipped
remove_column(rows, 0)

class_map = {}
samples = convert_samples(rows, [], 0, class_map)
frame = concat_dataframe(samples)

tree = DecisionTree(frame)
predictions = tree.predict(frame)
write_csv(rows, predictions, "results.csv")
```

A data frame is a list of columns: every feature column first, the label
column last. `convert_samples` takes features from column 1 on, numbering
categorical columns and labels in order of first appearance. Splits are
"feature equals category" tests chosen by the lowest weighted Gini
impurity; the tree grows while a split lowers the impurity, and a leaf
predicts the first label among its training rows.

## Commands

- `learnkit-cnn` trains the layered CNN on an image folder
  (`--data`, `--images`, `--batch-size`, `--epochs`, `--seed`), saves the
  parameters to `--model` (default `network.txt`), loads them back and
  reports accuracy, measured on images loaded again from the same folder.
- `learnkit-simple-cnn` trains `SimpleCNN` on an image folder
  (`--data`, `--images`, `--epochs`, `--learning-rate`) and prints the
  error of each epoch.
- `learnkit-tree` fits a decision tree to `--input`, after dropping its
  first column, and writes the rows with their predictions to `--output`;
  `--y-index` picks the label column and `--categorical` lists categorical
  column indexes.

## What it does not do

The package has no separate test-set evaluation for the commands, no
early stopping or validation during `NetworkModel.train`, and no
inference-only mode for `Dropout`. Everything runs in pure Python on one
CPU thread, so it suits small experiments rather than full datasets.