"""Learning-rate schedules applied after each training iteration."""

from __future__ import annotations

from abc import ABC, abstractmethod


class LRScheduler(ABC):
    """Holds the current learning rate and updates it per iteration."""

    learning_rate: float

    @abstractmethod
    def on_iteration_end(self, iteration: int) -> None:
        """Update the learning rate once an iteration has finished."""


class LinearLRScheduler(LRScheduler):
    """Changes the learning rate by a fixed step after every iteration."""

    def __init__(self, initial_learning_rate: float, step: float) -> None:
        self.learning_rate = initial_learning_rate
        self.step = step

    def on_iteration_end(self, iteration: int) -> None:
        self.learning_rate += self.step