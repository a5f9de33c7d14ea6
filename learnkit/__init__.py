"""Readable learners: a layered CNN toolkit with an MNIST loader, a single-kernel CNN and a Gini decision tree."""

__version__ = "0.1.0"