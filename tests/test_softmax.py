import math

import pytest

from learnkit.softmax import (
    Softmax,
    cross_entropy,
    cross_entropy_prime,
    softmax_probabilities,
)
from learnkit.tensor import Tensor

LOGITS = [0.3, -1.2, 2.0, 0.5, 0.1, -0.4]


def _rows(t):
    cols = t.dims[1]
    return [t.data[i:i + cols] for i in range(0, t.size, cols)]


def test_rows_sum_to_one_and_positive():
    probs = softmax_probabilities(Tensor((2, 3), LOGITS))
    for row in _rows(probs):
        assert sum(row) == pytest.approx(1.0)
        assert all(p > 0 for p in row)


def test_argmax_is_preserved():
    probs = softmax_probabilities(Tensor((2, 3), LOGITS))
    first, second = _rows(probs)
    assert first.index(max(first)) == 2
    assert second.index(max(second)) == 0


def test_shift_invariance():
    base = softmax_probabilities(Tensor((2, 3), LOGITS))
    shifted = softmax_probabilities(Tensor((2, 3), [v + 100.0 for v in LOGITS]))
    assert shifted.data == pytest.approx(base.data)


def test_uniform_scores_give_uniform_probabilities():
    probs = softmax_probabilities(Tensor((1, 4), [3.0] * 4))
    assert probs.data == pytest.approx([1 / 4] * 4)


def test_non_2d_input_raises():
    with pytest.raises(ValueError):
        softmax_probabilities(Tensor((6,), LOGITS))


def test_cross_entropy_perfect_prediction_is_zero():
    y_hat = Tensor((2, 2), [1.0, 0.0, 0.0, 1.0])
    assert cross_entropy(y_hat, [0, 1]) == pytest.approx(0.0)


def test_cross_entropy_floors_zero_probability_at_epsilon():
    y_hat = Tensor((1, 2), [1.0, 0.0])
    eps = 1e-10
    assert cross_entropy(y_hat, [1], eps) == pytest.approx(-math.log(eps))


def test_cross_entropy_empty_labels_raises():
    with pytest.raises(ValueError):
        cross_entropy(Tensor((1, 2), [0.5, 0.5]), [])


def test_prime_rows_sum_to_zero():
    probs = softmax_probabilities(Tensor((2, 3), LOGITS))
    prime = cross_entropy_prime(probs, [2, 0])
    for row in _rows(prime):
        assert sum(row) == pytest.approx(0.0, abs=1e-12)


def test_prime_matches_finite_difference_of_loss():
    labels = [2, 0]
    h = 1e-6
    probs = softmax_probabilities(Tensor((2, 3), LOGITS))
    analytic = cross_entropy_prime(probs, labels).data
    for k in range(len(LOGITS)):
        plus = list(LOGITS)
        minus = list(LOGITS)
        plus[k] += h
        minus[k] -= h
        loss_plus = cross_entropy(softmax_probabilities(Tensor((2, 3), plus)), labels)
        loss_minus = cross_entropy(softmax_probabilities(Tensor((2, 3), minus)), labels)
        numeric = (loss_plus - loss_minus) / (2 * h)
        assert analytic[k] == pytest.approx(numeric, rel=1e-4, abs=1e-7)


def test_softmax_layer_predict_and_backward():
    layer = Softmax()
    x = Tensor((2, 3), LOGITS)
    probs = layer.predict(x)
    assert probs == softmax_probabilities(x)
    loss, grad = layer.backward([2, 0])
    assert loss == pytest.approx(cross_entropy(probs, [2, 0]))
    assert grad == cross_entropy_prime(probs, [2, 0])


def test_backward_before_predict_raises():
    with pytest.raises(RuntimeError):
        Softmax().backward([0])


def test_compile_and_cost_function_info():
    layer = Softmax()
    layer.compile(Tensor((2, 3)))
    assert layer.output_dims == [2, 3]
    assert layer.cost_function_info() == "Softmax with output shape : 2x3"


def test_cost_function_info_before_compile_raises():
    with pytest.raises(RuntimeError):
        Softmax().cost_function_info()