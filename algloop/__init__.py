"""
Algloop: damped Newton solver for algebraic loops in time-domain simulation.

The solver finds the steady-state solution of a small dense system of
equations once per simulation step, with support for:
- Analytic or forward finite difference Jacobians
- Nominal scaling of unknowns and residuals
- Direct solution of linear and linear tearing-form loops
- Backtracking line search with a quadratic merit model and bounds
"""

__version__ = "0.1.0"

from algloop.core.errors import (
    AlgLoopSolverError,
    EvaluationError,
    InfeasibleEvaluation,
    InsufficientDecrease,
    IterationLimitExceeded,
    SingularLinearSystem,
)
from algloop.core.settings import NewtonSettings
from algloop.core.status import IterationStatus
from algloop.core.system import EquationSystem, Evaluated, Infeasible
from algloop.solvers.newton import Newton
from algloop.solvers.factory import create_solver
from algloop.systems import ResidualSystem, LinearSystem, LinearTearingSystem
from algloop.utils.diagnostics import Diagnostics

__all__ = [
    "AlgLoopSolverError",
    "EvaluationError",
    "InfeasibleEvaluation",
    "InsufficientDecrease",
    "IterationLimitExceeded",
    "SingularLinearSystem",
    "NewtonSettings",
    "IterationStatus",
    "EquationSystem",
    "Evaluated",
    "Infeasible",
    "Newton",
    "create_solver",
    "ResidualSystem",
    "LinearSystem",
    "LinearTearingSystem",
    "Diagnostics",
]
