"""Scaled Jacobian of the algebraic loop."""

from typing import Optional
import numpy as np
from numpy.typing import NDArray

from algloop.core.errors import EvaluationError
from algloop.core.settings import NewtonSettings
from algloop.core.status import LogCategory
from algloop.core.system import EquationSystem
from algloop.solvers.base import NewtonBuffers
from algloop.solvers.evaluation import ResidualEvaluator
from algloop.utils.diagnostics import Diagnostics


class JacobianBuilder:
    """
    Builds the scaled Jacobian and the residual scales each iteration.

    The analytic system matrix is used when the system provides one of the
    right shape, otherwise forward differences. Rows are divided by the
    residual scale fNominal and columns multiplied by yNominal, so that the
    Newton step is solved for in dimensionless form.
    """

    def __init__(
        self,
        system: EquationSystem,
        buffers: NewtonBuffers,
        settings: NewtonSettings,
        evaluate: ResidualEvaluator,
        diagnostics: Diagnostics,
        category: LogCategory,
    ):
        self.system = system
        self.buffers = buffers
        self.settings = settings
        self.evaluate = evaluate
        self.diagnostics = diagnostics
        self.category = category

    def build(self, y: NDArray, f: NDArray) -> tuple[NDArray, NDArray]:
        """
        Compute jac and fNominal at y.

        Args:
            y: Current iterate
            f: Unscaled residual at y

        Returns:
            jac: Scaled Jacobian (n, n), the buffer owned by the solver
            f_nominal: Residual scales (n,)
        """
        buf = self.buffers
        jac, f_nominal = buf.jac, buf.f_nominal
        stats = self.evaluate.statistics
        stats.jacobian_builds += 1

        f_nominal.fill(1e2 * self.settings.atol)

        # the system must hold y before it is asked for its matrix
        if not self.evaluate.is_current(y):
            self.evaluate.require(y, buf.f_help, **self._context())

        A = self._analytic_matrix()
        if A is not None:
            jac[:, :] = A
            stats.analytic_jacobians += 1
        else:
            self._finite_differences(y, f)
            stats.finite_difference_jacobians += 1

        np.maximum(
            f_nominal,
            np.max(np.abs(jac) * buf.y_nominal, axis=1),
            out=f_nominal,
        )
        self.diagnostics.vector("fNominal", f_nominal, self.category)

        jac *= buf.y_nominal[np.newaxis, :]
        jac /= f_nominal[:, np.newaxis]
        return jac, f_nominal

    def _analytic_matrix(self) -> Optional[NDArray]:
        n = self.buffers.dimension
        try:
            A = self.system.analytic_system_matrix()
        except EvaluationError as exc:
            self.diagnostics.warning(
                f"Analytic Jacobian failed for eq{self.system.equation_index()}"
                f" at time {self.system.simulation_time()}: {exc}",
                self.category,
            )
            return None
        if A is None:
            return None
        A = np.asarray(A, dtype=float)
        if A.shape != (n, n):
            self.diagnostics.debug(
                f"Analytic Jacobian has shape {A.shape}, expected {(n, n)}",
                self.category,
            )
            return None
        return A

    def _finite_differences(self, y: NDArray, f: NDArray) -> None:
        """First-order forward differences, one residual evaluation per column."""
        buf = self.buffers
        jac, y_help, f_help = buf.jac, buf.y_help, buf.f_help
        context = self._context()

        y_help[:] = y
        try:
            for j in range(buf.dimension):
                step = 1e2 * self.settings.rtol * buf.y_nominal[j]
                y_help[j] += step
                self.evaluate.require(y_help, f_help, **context)
                jac[:, j] = (f_help - f) / step
                y_help[j] = y[j]
        finally:
            self.evaluate.restore(y)

    def _context(self) -> dict:
        return dict(
            equation_index=self.system.equation_index(),
            time=self.system.simulation_time(),
        )
