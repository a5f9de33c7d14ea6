import math

import pytest

from learnkit import linalg
from learnkit.matrix import Matrix, Shape


@pytest.fixture
def square():
    return Matrix.from_rows([[1.0, 2.0], [3.0, 4.0]])


@pytest.fixture
def wide():
    return Matrix.from_rows([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])


def test_scale_matches_addition(square):
    assert linalg.scale(square, 2.0) == linalg.add(square, square)


def test_hadamard_and_length_check():
    assert linalg.hadamard([1.0, 2.0], [3.0, 4.0]) == [3.0, 8.0]
    with pytest.raises(ValueError):
        linalg.hadamard([1.0], [1.0, 2.0])


def test_elementwise_with_ones_is_identity(wide):
    ones = Matrix.from_rows([[1.0] * 3] * 2)
    assert linalg.elementwise(wide, ones) == wide
    with pytest.raises(ValueError):
        linalg.elementwise(wide, linalg.transpose(wide))


def test_correlate_full_window_equals_sum_of_product(square):
    assert linalg.correlate(square, square, 0, 0) == linalg.matrix_sum(
        linalg.elementwise(square, square)
    )


def test_correlate_offset_picks_element(wide):
    kernel = Matrix.from_rows([[1.0]])
    assert linalg.correlate(kernel, wide, 1, 2) == wide[1, 2]
    with pytest.raises(ValueError):
        linalg.correlate(wide, kernel, 0, 0)


def test_matmul_identity(wide):
    identity = Matrix.from_rows([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    assert linalg.matmul(wide, identity) == wide


def test_matmul_drop_removes_last_columns(wide):
    identity = Matrix.from_rows([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    result = linalg.matmul(wide, identity, 1)
    assert result.tolist() == [row[:2] for row in wide.tolist()]


def test_matmul_shape_mismatch(wide):
    with pytest.raises(ValueError):
        linalg.matmul(wide, wide)


def test_matvec_drop_ignores_trailing_elements(square):
    plain = linalg.matvec(square, [1.0, 1.0])
    assert linalg.matvec(square, [1.0, 1.0, 99.0], 1) == plain
    assert plain == [square[0, 0] + square[0, 1], square[1, 0] + square[1, 1]]
    with pytest.raises(ValueError):
        linalg.matvec(square, [1.0, 2.0, 3.0])


def test_outer_shape_and_drop():
    result = linalg.outer([1.0, 2.0], [3.0, 4.0, 5.0], 1)
    assert result.shape == Shape(2, 2)
    assert result.tolist() == [[3.0, 4.0], [6.0, 8.0]]


def test_add_subtract_round_trip(square, wide):
    other = linalg.scale(square, 0.5)
    assert linalg.subtract(linalg.add(square, other), other) == square
    with pytest.raises(ValueError):
        linalg.add(square, wide)


def test_subtract_vectors():
    assert linalg.subtract_vectors([5.0, 3.0], [5.0, 3.0]) == [0.0, 0.0]
    with pytest.raises(ValueError):
        linalg.subtract_vectors([1.0], [])


def test_transpose_twice_is_identity(wide):
    t = linalg.transpose(wide)
    assert t.shape == Shape(3, 2)
    assert t[2, 1] == wide[1, 2]
    assert linalg.transpose(t) == wide


def test_apply_replaces_nan():
    nan_for_negative = lambda x: float("nan") if x < 0 else x * 2
    assert linalg.apply_vector([-1.0, 3.0], nan_for_negative) == [0.0, 6.0]
    m = linalg.apply(Matrix.from_rows([[-1.0, 2.0]]), nan_for_negative)
    assert m.tolist() == [[0.0, 4.0]]


def test_concatenate_column(square):
    result = linalg.concatenate_column(square, [7.0, 8.0])
    assert result.tolist() == [[1.0, 2.0, 7.0], [3.0, 4.0, 8.0]]
    with pytest.raises(ValueError):
        linalg.concatenate_column(square, [1.0])


def test_concatenate(square, wide):
    result = linalg.concatenate(square, wide)
    assert result.shape == Shape(2, 5)
    assert result.tolist()[1] == square.tolist()[1] + wide.tolist()[1]
    with pytest.raises(ValueError):
        linalg.concatenate(square, Matrix.from_rows([[1.0]]))


def test_normalize_vector_sums_to_one():
    assert math.isclose(sum(linalg.normalize_vector([1.0, 2.0, 5.0])), 1.0)
    with pytest.raises(ValueError):
        linalg.normalize_vector([1.0, -1.0])


def test_normalize_rows(wide):
    result = linalg.normalize_rows(wide)
    for row in result.tolist():
        assert math.isclose(sum(row), 1.0)


def test_sums(wide):
    assert linalg.matrix_sum(wide) == linalg.vector_sum(linalg.flatten(wide))


def test_flatten_reshape_round_trip(wide):
    flat = linalg.flatten(wide)
    assert flat == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    assert linalg.reshape(flat, Shape(2, 3)) == wide
    with pytest.raises(ValueError):
        linalg.reshape(flat, Shape(4, 2))


def test_maximum_position():
    m = Matrix.from_rows([[1.0, 5.0, 0.0], [7.0, 2.0, 9.0]])
    assert linalg.maximum(m, 0, 0, Shape(2, 2)) == (7.0, (1, 0))
    assert linalg.maximum(m, 0, 1, Shape(2, 2)) == (9.0, (1, 2))


def test_maximum_first_wins_on_ties():
    m = Matrix.from_rows([[3.0, 3.0], [3.0, 3.0]])
    assert linalg.maximum(m, 0, 0, Shape(2, 2)) == (3.0, (0, 0))


def test_maximum_window_out_of_range(square):
    with pytest.raises(ValueError):
        linalg.maximum(square, 1, 0, Shape(2, 2))
    with pytest.raises(ValueError):
        linalg.maximum(square, 0, 0, Shape(0, 1))