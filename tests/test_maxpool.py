import pytest

from learnkit.maxpool import MaxPool
from learnkit.tensor import Tensor


def planted_input():
    x = Tensor((1, 1, 4, 4))
    x[0, 0, 1, 1] = 9.0
    x[0, 0, 0, 3] = 4.0
    x[0, 0, 2, 0] = 7.0
    x[0, 0, 3, 3] = 2.5
    return x


def test_forward_picks_window_maxima():
    pool = MaxPool(2, 2)
    out = pool.forward(planted_input())
    assert out.tolist() == [[[[9.0, 4.0], [7.0, 2.5]]]]


def test_compile_matches_forward():
    pool = MaxPool(2, 1)
    x = Tensor((2, 3, 3, 5))
    pool.compile(x)
    assert pool.input_dims == [2, 3, 3, 5]
    assert list(pool.forward(x).dims) == pool.output_dims


def test_negative_values_still_pooled():
    pool = MaxPool(2, 2)
    x = Tensor((1, 1, 2, 2), [-5.0, -5.0, -1.0, -5.0])
    assert pool.forward(x).data == [-1.0]


def test_backward_routes_to_maxima():
    pool = MaxPool(2, 2)
    x = planted_input()
    pool.forward(x)
    chain = Tensor((1, 1, 2, 2), [1.0, 2.0, 3.0, 4.0])
    grad = pool.backward(chain, 0.1)
    assert grad.dims == x.dims
    assert grad[0, 0, 1, 1] == 1.0
    assert grad[0, 0, 0, 3] == 2.0
    assert grad[0, 0, 2, 0] == 3.0
    assert grad[0, 0, 3, 3] == 4.0
    assert sum(1 for v in grad.data if v != 0.0) == 4


def test_ties_go_to_first_position():
    pool = MaxPool(2, 2)
    x = Tensor((1, 1, 2, 2), [1.0] * 4)
    pool.forward(x)
    grad = pool.backward(Tensor((1, 1, 1, 1), [0.5]), 0.0)
    assert grad.data == [0.5, 0.0, 0.0, 0.0]


def test_overlapping_windows_keep_last_gradient():
    pool = MaxPool(2, 1)
    x = Tensor((1, 1, 3, 3))
    x[0, 0, 1, 1] = 1.0
    pool.forward(x)
    grad = pool.backward(Tensor((1, 1, 2, 2), [1.0, 2.0, 3.0, 4.0]), 0.0)
    assert grad[0, 0, 1, 1] == 4.0
    assert grad.sum() == 4.0


def test_multiple_channels_pooled_independently():
    pool = MaxPool(2, 2)
    x = Tensor((1, 2, 2, 2), [1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 3.0])
    assert pool.forward(x).data == [1.0, 3.0]


def test_window_too_large_raises():
    with pytest.raises(ValueError):
        MaxPool(3, 1).forward(Tensor((1, 1, 2, 2)))


def test_non_4d_input_raises():
    with pytest.raises(ValueError):
        MaxPool(2, 2).compile(Tensor((4, 4)))


def test_invalid_size_raises():
    with pytest.raises(ValueError):
        MaxPool(0, 1)


def test_backward_before_forward_raises():
    with pytest.raises(RuntimeError):
        MaxPool(2, 2).backward(Tensor((1, 1, 1, 1)), 0.0)