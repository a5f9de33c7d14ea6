import math

import pytest
from PIL import Image

from learnkit.activations import Relu
from learnkit.dense import Dense
from learnkit.lr_scheduler import LinearLRScheduler
from learnkit.mnist import MNISTDataLoader
from learnkit.network import NetworkModel, calculate_accuracy, format_progress, main
from learnkit.softmax import Softmax
from learnkit.tensor import Tensor

X = Tensor((2, 4), [1.0, 0.0, 0.5, -0.5, 0.0, 1.0, -1.0, 0.25])


def _model(seed=0, lr=0.1, step=0.0, modules=None):
    if modules is None:
        modules = [Dense(4, 3, seed=seed)]
    return NetworkModel(modules, Softmax(), LinearLRScheduler(lr, step))


def test_forward_rows_are_probabilities():
    probs = _model().forward(X)
    assert probs.dims == (2, 3)
    for row in probs.tolist():
        assert sum(row) == pytest.approx(1.0)
        assert all(v >= 0 for v in row)


def test_predict_picks_largest_output():
    model = _model()
    predictions = model.predict(X)
    probs = model.forward(X).tolist()
    assert len(predictions) == 2
    for row, choice in zip(probs, predictions):
        assert row[choice] == max(row)


def test_training_reduces_loss():
    model = _model(lr=0.5)
    first = model.train_step(X, [0, 2])
    last = first
    for _ in range(100):
        last = model.train_step(X, [0, 2])
    assert last < first
    assert model.predict(X) == [0, 2]


def test_scheduler_advances_each_step():
    model = _model(lr=0.5, step=-0.1)
    model.train_step(X, [0, 1])
    model.train_step(X, [0, 1])
    assert model.iteration == 2
    assert model.scheduler.learning_rate == pytest.approx(0.3)


def test_backward_before_forward():
    with pytest.raises(RuntimeError):
        _model().backward([0])


def test_compile_verbose_output(capsys):
    model = _model(modules=[Dense(4, 3), Relu()])
    model.compile(Tensor((2, 4)), True)
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "Layer Number 1 : Dense with input shape : 2x4 and output shape : 2x3",
        "Layer Number 2 : Relu with input shape : 2x3 and output shape : 2x3",
        "Cost Function : Softmax with output shape : 2x3",
    ]


def test_compile_quiet(capsys):
    model = _model()
    model.compile(Tensor((2, 4)), False)
    assert capsys.readouterr().out == ""
    assert model.modules[0].output_dims == [2, 3]


def test_save_load_round_trip(tmp_path):
    path = tmp_path / "model.txt"
    source = _model(seed=1)
    source.save(path)
    target = _model(seed=2)
    target.load(path)
    assert target.forward(X).data == pytest.approx(source.forward(X).data, abs=1e-4)


def test_load_short_file(tmp_path):
    path = tmp_path / "short.txt"
    path.write_text("1.0 2.0")
    with pytest.raises(ValueError):
        _model().load(path)


def test_eval_switches_modules():
    model = _model(modules=[Dense(4, 3), Relu()])
    model.eval()
    assert all(module.is_eval for module in model.modules)


def test_format_progress_half():
    line = format_progress(0.5, 3, 10, 0.25)
    assert line == "[" + "=" * 25 + ">" + " " * 24 + "] 50 Iteration 3/10 - Batch loss: 0.25\r"


def test_format_progress_full_bar():
    line = format_progress(1.0, 10, 10, 1.5)
    assert line.startswith("[" + "=" * 50 + "] 100 Iteration 10/10")
    assert line.endswith("\r")


def _csv_loader(tmp_path):
    path = tmp_path / "digits.csv"
    path.write_text("3,255,0,0,0\n7,0,0,0,255\n")
    loader = MNISTDataLoader(2, 2, 2)
    loader.load_csv(path)
    return loader


def test_train_with_loader(tmp_path, capsys):
    loader = _csv_loader(tmp_path)
    model = NetworkModel([Dense(4, 10)], Softmax(), LinearLRScheduler(0.5, 0.0))
    loss = model.train(3, loader, verbose=False)
    assert math.isfinite(loss)
    assert model.iteration == 3 * loader.num_batches()
    assert "Training for 3 epochs(s)." in capsys.readouterr().out


def test_calculate_accuracy_after_training(tmp_path):
    loader = _csv_loader(tmp_path)
    model = NetworkModel([Dense(4, 10)], Softmax(), LinearLRScheduler(0.5, 0.0))
    model.train(200, loader, verbose=False)
    assert calculate_accuracy(model, loader) == 100.0


def test_calculate_accuracy_empty_loader():
    with pytest.raises(ValueError):
        calculate_accuracy(_model(), MNISTDataLoader())


def test_main_runs_end_to_end(tmp_path, capsys):
    data = tmp_path / "data"
    for label in range(10):
        folder = data / str(label)
        folder.mkdir(parents=True)
        Image.new("L", (28, 28), color=label * 20).save(folder / "digit.png")
    model_path = tmp_path / "net.txt"
    code = main([
        "--data", str(data), "--images", "10", "--batch-size", "10",
        "--epochs", "1", "--model", str(model_path),
    ])
    assert code == 0
    assert model_path.read_text().strip()
    assert "Accuracy:" in capsys.readouterr().out