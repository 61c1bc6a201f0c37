"""Solver factory."""

from typing import Optional

from algloop.algebra.protocols import LinearAlgebraBackend
from algloop.core.settings import NewtonSettings
from algloop.core.system import EquationSystem
from algloop.solvers.base import AlgLoopSolver
from algloop.solvers.newton import Newton
from algloop.utils.diagnostics import Diagnostics


def create_solver(
    system: EquationSystem,
    settings: Optional[NewtonSettings] = None,
    diagnostics: Optional[Diagnostics] = None,
    backend: Optional[LinearAlgebraBackend] = None,
    method: str = "newton",
) -> AlgLoopSolver:
    """
    Create the solver for one algebraic loop.

    Args:
        system: The loop's equation system
        settings: Solver settings (defaults if None)
        diagnostics: Diagnostics sink (a private one if None)
        backend: Dense linear solver (LAPACK gesv if None)
        method: Solver name, currently only "newton"

    Returns:
        Uninitialized solver; initialize() runs on the first solve()
    """
    if method.lower() == "newton":
        return Newton(system, settings, diagnostics, backend)

    raise ValueError(f"Unknown algebraic loop solver: {method!r}")
