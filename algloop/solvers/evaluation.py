"""Residual evaluation at trial points."""

import numpy as np
from numpy.typing import NDArray

from algloop.core.errors import InfeasibleEvaluation
from algloop.core.system import EquationSystem, Evaluated, EvaluationResult
from algloop.solvers.base import SolveStatistics


class ResidualEvaluator:
    """
    Sets values on the system, evaluates, and reports the outcome.

    Remembers the point of the last evaluation so the solver can tell
    whether the system state already matches an iterate.
    """

    def __init__(self, system: EquationSystem, statistics: SolveStatistics):
        self.system = system
        self.statistics = statistics
        self._last_point: NDArray | None = None

    def __call__(self, y: NDArray, out: NDArray) -> EvaluationResult:
        """
        Evaluate the residual at y.

        Args:
            y: Point to evaluate
            out: Receives the residual if the evaluation succeeds

        Returns:
            The system's evaluation result
        """
        self.system.set_values(y.copy())
        return self._evaluate_current(y, out)

    def current(self, y: NDArray, out: NDArray) -> EvaluationResult:
        """Evaluate at the system's values, which the caller holds in y."""
        return self._evaluate_current(y, out)

    def require(self, y: NDArray, out: NDArray, **context) -> NDArray:
        """Evaluate at y; an infeasible point is fatal."""
        result = self(y, out)
        if not isinstance(result, Evaluated):
            raise InfeasibleEvaluation(result.reason, **context)
        return out

    def restore(self, y: NDArray) -> None:
        """Put y back into the system without evaluating."""
        self.system.set_values(y.copy())
        self._last_point = None

    def is_current(self, y: NDArray) -> bool:
        """True if the system was last evaluated exactly at y."""
        return self._last_point is not None and np.array_equal(self._last_point, y)

    def forget(self) -> None:
        self._last_point = None

    def _evaluate_current(self, y: NDArray, out: NDArray) -> EvaluationResult:
        self.statistics.residual_evaluations += 1
        result = self.system.evaluate()
        if isinstance(result, Evaluated):
            out[:] = result.residual
            self._last_point = y.copy()
        else:
            self._last_point = None
        return result
