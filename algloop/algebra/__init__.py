"""Linear algebra backend abstractions."""

from algloop.algebra.protocols import LinearAlgebraBackend
from algloop.algebra.dense import DenseBackend

__all__ = [
    "LinearAlgebraBackend",
    "DenseBackend",
]
