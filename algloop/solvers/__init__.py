"""Algebraic loop solvers."""

from algloop.solvers.base import AlgLoopSolver, NewtonBuffers, SolveStatistics
from algloop.solvers.jacobian import JacobianBuilder
from algloop.solvers.line_search import StepDamper, DampedStep
from algloop.solvers.newton import Newton
from algloop.solvers.factory import create_solver

__all__ = [
    "AlgLoopSolver",
    "NewtonBuffers",
    "SolveStatistics",
    "JacobianBuilder",
    "StepDamper",
    "DampedStep",
    "Newton",
    "create_solver",
]
