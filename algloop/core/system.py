"""Equation system protocol and evaluation results."""

from dataclasses import dataclass
from typing import Optional, Protocol, Union
from numpy.typing import NDArray


@dataclass(frozen=True)
class Evaluated:
    """Residual evaluation succeeded."""

    residual: NDArray


@dataclass(frozen=True)
class Infeasible:
    """System is undefined at the current values."""

    reason: str


EvaluationResult = Union[Evaluated, Infeasible]


class EquationSystem(Protocol):
    """
    An algebraic loop as seen by the solver.

    The system owns its unknowns; the solver reads and writes them only via
    get_values()/set_values() and never keeps references to returned arrays.
    """

    @property
    def dimension(self) -> int:
        """Number of real unknowns N."""
        ...

    def names(self) -> list[str]:
        """Variable names, length N."""
        ...

    def nominal(self) -> NDArray:
        """Nominal magnitudes of the unknowns, shape (N,)."""
        ...

    def lower_bounds(self) -> NDArray:
        """Lower bounds of the unknowns, shape (N,)."""
        ...

    def upper_bounds(self) -> NDArray:
        """Upper bounds of the unknowns, shape (N,)."""
        ...

    def get_values(self) -> NDArray:
        """Current unknowns, shape (N,)."""
        ...

    def set_values(self, y: NDArray) -> None:
        """Overwrite the unknowns. Does not evaluate."""
        ...

    def evaluate(self) -> EvaluationResult:
        """Recompute internal state and residual from the current values."""
        ...

    def residual(self) -> NDArray:
        """
        Residual of the last evaluation, shape (N,).

        For an untorn linear loop A·y = b this is the right-hand side b.
        """
        ...

    def is_linear(self) -> bool:
        """True if the loop equations are linear in the unknowns."""
        ...

    def is_linear_tearing_form(self) -> bool:
        """True if the loop solves for a correction about the zero vector."""
        ...

    def analytic_system_matrix(self) -> Optional[NDArray]:
        """Analytic Jacobian (N, N), or None if the system has none."""
        ...

    def simulation_time(self) -> float:
        """Simulation time of the current evaluation (diagnostics only)."""
        ...

    def equation_index(self) -> int:
        """Index of the loop within the model (diagnostics only)."""
        ...
