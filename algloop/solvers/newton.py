"""Damped Newton solver for algebraic loops."""

import logging
from typing import Optional
import numpy as np
from numpy.typing import NDArray

from algloop.algebra.dense import DenseBackend
from algloop.algebra.protocols import LinearAlgebraBackend
from algloop.core.errors import (
    InfeasibleEvaluation,
    IterationLimitExceeded,
    SingularLinearSystem,
)
from algloop.core.settings import NewtonSettings
from algloop.core.status import IterationStatus, LogCategory
from algloop.core.system import EquationSystem, Evaluated
from algloop.solvers.base import AlgLoopSolver, NewtonBuffers, SolveStatistics
from algloop.solvers.evaluation import ResidualEvaluator
from algloop.solvers.jacobian import JacobianBuilder
from algloop.solvers.line_search import StepDamper
from algloop.utils.diagnostics import Diagnostics
from algloop.utils.scaling import is_converged

logger = logging.getLogger(__name__)


class Newton(AlgLoopSolver):
    """
    Newton-Raphson solver with scaling and a globalizing line search.

    Linear loops are solved with a single linear solve, either directly for
    the unknowns or, in tearing form, for a correction about the zero
    vector. Nonlinear loops iterate damped Newton steps until the residual
    test passes.
    """

    def __init__(
        self,
        system: EquationSystem,
        settings: Optional[NewtonSettings] = None,
        diagnostics: Optional[Diagnostics] = None,
        backend: Optional[LinearAlgebraBackend] = None,
    ):
        """
        Args:
            system: The algebraic loop to solve
            settings: Tolerances and iteration limit
            diagnostics: Sink for trace records, one per solver by default
            backend: Dense linear solver, LAPACK gesv by default
        """
        self.system = system
        self.settings = settings if settings is not None else NewtonSettings()
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)
        self.backend = backend if backend is not None else DenseBackend()
        self.category = LogCategory.LS if system.is_linear() else LogCategory.NLS

        self._buffers: Optional[NewtonBuffers] = None
        self._statistics = SolveStatistics()
        self._evaluate = ResidualEvaluator(system, self._statistics)
        self._jacobian: Optional[JacobianBuilder] = None
        self._damper: Optional[StepDamper] = None
        self._first_call = True
        self._iteration_status = IterationStatus.CONTINUE

    def initialize(self) -> None:
        """
        Pull dimension, names, nominals and bounds from the system.

        Raises:
            ValueError: nominal values are not positive and finite, or a
                lower bound exceeds its upper bound. The solver is left
                uninitialized and the next solve() checks again.
        """
        system = self.system
        n = system.dimension

        if n <= 0:
            self._first_call = False
            self._buffers = None
            self._jacobian = None
            self._damper = None
            self._iteration_status = IterationStatus.SOLVERERROR
            self.diagnostics.debug(
                f"Newton: eq{system.equation_index()} has dimension {n}",
                self.category,
            )
            return

        nominal = np.broadcast_to(np.asarray(system.nominal(), dtype=float), (n,))
        lower = np.broadcast_to(np.asarray(system.lower_bounds(), dtype=float), (n,))
        upper = np.broadcast_to(np.asarray(system.upper_bounds(), dtype=float), (n,))
        if not np.all(np.isfinite(nominal) & (nominal > 0)):
            self._first_call = True
            raise ValueError(
                f"Nominal values of eq{system.equation_index()} must be "
                f"positive and finite, got {nominal}"
            )
        if np.any(lower > upper):
            self._first_call = True
            raise ValueError(
                f"Lower bounds of eq{system.equation_index()} exceed upper bounds"
            )

        self._first_call = False
        if self._buffers is None or self._buffers.dimension != n:
            self._buffers = None
            self._allocate(n)

        buf = self._buffers
        buf.names = [str(name) for name in system.names()]
        buf.y_nominal[:] = nominal
        buf.y_min[:] = lower
        buf.y_max[:] = upper
        if self._iteration_status == IterationStatus.SOLVERERROR:
            self._iteration_status = IterationStatus.CONTINUE

        self.diagnostics.debug(
            f"Newton: eq{system.equation_index()} initialized", self.category
        )
        self.diagnostics.vector("names", buf.names, self.category)

    def solve(self) -> None:
        """
        Solve the loop from the system's current values.

        Raises:
            IterationLimitExceeded: nonlinear iteration did not converge
            SingularLinearSystem: a dense solve reported a nonzero status
            InfeasibleEvaluation: the residual could not be evaluated
            InsufficientDecrease: the line search stalled
        """
        if self._first_call:
            self.initialize()
        if self._buffers is None:
            self._iteration_status = IterationStatus.SOLVERERROR
            return

        system = self.system
        buf = self._buffers
        settings = self.settings
        self._reset_statistics()
        tearing = system.is_linear_tearing_form()
        context = self._context()

        buf.y[:] = system.get_values()
        if not tearing:
            result = self._evaluate.current(buf.y, buf.f)
            if not isinstance(result, Evaluated):
                raise InfeasibleEvaluation(result.reason, **context)

        self._iteration_status = IterationStatus.CONTINUE
        self.diagnostics.debug(
            f"Newton: eq{system.equation_index()} at time "
            f"{system.simulation_time()}:",
            self.category,
        )

        while self._iteration_status == IterationStatus.CONTINUE:
            if self._statistics.iterations >= settings.max_iterations:
                raise IterationLimitExceeded(self._statistics.iterations, **context)

            if system.is_linear() and not tearing:
                self._solve_linear()
            elif tearing:
                self._solve_linear_tearing()
            else:
                self._newton_step()

        self._commit()
        self.diagnostics.vector("y*", buf.y, self.category)

    def get_iteration_status(self) -> IterationStatus:
        return self._iteration_status

    @property
    def values(self) -> NDArray:
        """Current iterate."""
        return np.array([]) if self._buffers is None else self._buffers.y.copy()

    @property
    def residual(self) -> NDArray:
        """Unscaled residual at the current iterate."""
        return np.array([]) if self._buffers is None else self._buffers.f.copy()

    @property
    def statistics(self) -> SolveStatistics:
        return self._statistics

    def _allocate(self, n: int) -> None:
        buf = NewtonBuffers.allocate(n)
        self._buffers = buf
        self._jacobian = JacobianBuilder(
            self.system, buf, self.settings, self._evaluate,
            self.diagnostics, self.category,
        )
        self._damper = StepDamper(
            self.system, buf, self.settings, self._evaluate, self.backend,
            self.diagnostics, self.category,
        )

    def _reset_statistics(self) -> None:
        self._statistics = SolveStatistics()
        self._evaluate.statistics = self._statistics
        self._evaluate.forget()

    def _linear_solve(self, context: str) -> NDArray:
        """Solve jac x = f in place of f, f already scaled."""
        buf = self._buffers
        x, info = self.backend.solve(buf.jac, buf.f)
        self._statistics.linear_solves += 1
        if info != 0:
            raise SingularLinearSystem(info, context, **self._context())
        buf.f[:] = x
        return buf.f

    def _solve_linear(self) -> None:
        """A y = b: one solve for the scaled unknowns."""
        buf = self._buffers
        jac, f_nominal = self._jacobian.build(buf.y, buf.f)
        buf.f /= f_nominal
        x = self._linear_solve("linear system")
        np.multiply(x, buf.y_nominal, out=buf.y)
        self._iteration_status = IterationStatus.DONE

    def _solve_linear_tearing(self) -> None:
        """Residual is A y - b: solve for the correction about zero."""
        buf = self._buffers
        context = self._context()
        self._evaluate.require(buf.zero, buf.f, **context)
        buf.y[:] = buf.zero
        jac, f_nominal = self._jacobian.build(buf.y, buf.f)
        buf.f /= f_nominal
        x = self._linear_solve("linear tearing system")
        np.multiply(x, buf.y_nominal, out=buf.y)
        np.negative(buf.y, out=buf.y)
        self._evaluate.require(buf.y, buf.f, **context)
        self._iteration_status = IterationStatus.DONE

    def _newton_step(self) -> None:
        buf = self._buffers
        settings = self.settings
        stats = self._statistics
        k = stats.iterations

        self.diagnostics.vector(f"y{k}", buf.y, self.category)
        self.diagnostics.vector(f"f{k}", buf.f, self.category)

        jac, f_nominal = self._jacobian.build(buf.y, buf.f)
        if is_converged(buf.f, f_nominal, settings.atol, settings.rtol):
            self._iteration_status = IterationStatus.DONE
            return

        buf.f /= f_nominal
        phi = float(buf.f @ buf.f)

        x, info = self.backend.solve(jac, buf.f)
        stats.linear_solves += 1
        if info != 0:
            raise SingularLinearSystem(
                info, f"nonlinear system (iteration: {k})", **self._context()
            )
        stats.iterations += 1
        step = x * buf.y_nominal

        damped = self._damper.damp(buf.y, step, phi)
        stats.merit_history.append((phi, damped.phi, damped.lam))

        buf.y[:] = buf.y_help
        np.multiply(buf.f_help, f_nominal, out=buf.f)
        if damped.converged:
            self._iteration_status = IterationStatus.DONE

    def _commit(self) -> None:
        """Leave the system holding the solution, evaluated there."""
        buf = self._buffers
        if not self._evaluate.is_current(buf.y):
            self._evaluate.require(buf.y, buf.f, **self._context())

    def _context(self) -> dict:
        return dict(
            equation_index=self.system.equation_index(),
            time=self.system.simulation_time(),
        )
