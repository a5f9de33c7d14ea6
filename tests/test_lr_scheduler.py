import pytest

from learnkit.lr_scheduler import LinearLRScheduler, LRScheduler


def test_initial_learning_rate():
    scheduler = LinearLRScheduler(0.2, -0.000005)
    assert scheduler.learning_rate == 0.2
    assert scheduler.step == -0.000005


def test_one_step():
    scheduler = LinearLRScheduler(0.5, 0.25)
    scheduler.on_iteration_end(1)
    assert scheduler.learning_rate == 0.5 + 0.25


def test_many_steps_accumulate():
    scheduler = LinearLRScheduler(0.2, -0.000005)
    for iteration in range(1, 101):
        scheduler.on_iteration_end(iteration)
    assert scheduler.learning_rate == pytest.approx(0.2 - 100 * 0.000005)


def test_iteration_number_is_ignored():
    a = LinearLRScheduler(1.0, 0.5)
    b = LinearLRScheduler(1.0, 0.5)
    a.on_iteration_end(1)
    b.on_iteration_end(1000)
    assert a.learning_rate == b.learning_rate


def test_base_class_is_abstract():
    with pytest.raises(TypeError):
        LRScheduler()