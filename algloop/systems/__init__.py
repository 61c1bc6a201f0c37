"""Ready-made equation systems."""

from algloop.systems.residual import ResidualSystem
from algloop.systems.linear import LinearSystem, LinearTearingSystem

__all__ = [
    "ResidualSystem",
    "LinearSystem",
    "LinearTearingSystem",
]
