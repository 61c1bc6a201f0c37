"""
Damping of the Newton step by backtracking with a quadratic merit model.

C.T. Kelley: Solving Nonlinear Equations with Newton's Method, Fundamentals
of Algorithms 1, SIAM 2003.
"""

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray

from algloop.algebra.protocols import LinearAlgebraBackend
from algloop.core.errors import (
    InfeasibleEvaluation,
    InsufficientDecrease,
    SingularLinearSystem,
)
from algloop.core.settings import NewtonSettings
from algloop.core.status import LogCategory
from algloop.core.system import EquationSystem, Evaluated
from algloop.solvers.base import NewtonBuffers
from algloop.solvers.evaluation import ResidualEvaluator
from algloop.utils.diagnostics import Diagnostics
from algloop.utils.scaling import clip_step, is_converged, scaled_merit

ALPHA = 1e-4        # sufficient decrease guard
LAMBDA_MIN = 1e-10  # smallest admissible step length


@dataclass
class DampedStep:
    """Accepted trial point of one damping episode."""

    lam: float
    phi: float          # scaled merit at the trial point
    converged: bool     # residual test passed at the trial point


class StepDamper:
    """
    Finds an acceptable point along y - lam * step.

    The trial point is left in buffers.y_help and its scaled residual in
    buffers.f_help.
    """

    def __init__(
        self,
        system: EquationSystem,
        buffers: NewtonBuffers,
        settings: NewtonSettings,
        evaluate: ResidualEvaluator,
        backend: LinearAlgebraBackend,
        diagnostics: Diagnostics,
        category: LogCategory,
    ):
        self.system = system
        self.buffers = buffers
        self.settings = settings
        self.evaluate = evaluate
        self.backend = backend
        self.diagnostics = diagnostics
        self.category = category

    def damp(self, y: NDArray, step: NDArray, phi: float) -> DampedStep:
        """
        Run one damping episode.

        Args:
            y: Current iterate
            step: Unscaled Newton step, the trial point is y - lam * step
            phi: Scaled merit at y

        Returns:
            Accepted step length, merit and convergence flag
        """
        buf = self.buffers
        settings = self.settings
        y_help, f_help = buf.y_help, buf.f_help
        y_test, f_test = buf.y_test, buf.f_test
        f_nominal = buf.f_nominal

        lam = self._feasible_step(y, step)

        converged = is_converged(f_help, f_nominal, settings.atol, settings.rtol)
        phi_help = scaled_merit(f_help, f_nominal, out=f_help)
        if converged:
            return DampedStep(lam=lam, phi=phi_help, converged=True)

        while True:
            # half step, also the upper bound of a step reduction
            lam_test = 0.5 * lam
            clip_step(y, step, lam_test, buf.y_min, buf.y_max, out=y_test)
            self.evaluate.require(y_test, f_test, **self._context())
            phi_test = scaled_merit(f_test, f_nominal, out=f_test)

            guard = 1.0 - ALPHA * lam
            if phi_help > guard * phi or phi_test < guard * phi_help:
                lam = self._minimize_quadratic(lam, phi, phi_test, phi_help)
                if lam >= lam_test:
                    lam = lam_test
                    y_help[:] = y_test
                    f_help[:] = f_test
                    phi_help = phi_test
                else:
                    clip_step(y, step, lam, buf.y_min, buf.y_max, out=y_help)
                    self.evaluate.require(y_help, f_help, **self._context())
                    phi_help = scaled_merit(f_help, f_nominal, out=f_help)
                self.diagnostics.debug(
                    f"lambda = {lam}, phi = {phi} --> {phi_help}",
                    self.category,
                    lam=lam,
                    phi=phi,
                    phi_help=phi_help,
                )

            if phi_help <= (1.0 - ALPHA * lam) * phi:
                return DampedStep(lam=lam, phi=phi_help, converged=False)

    def _feasible_step(self, y: NDArray, step: NDArray) -> float:
        """Halve lam from 1 until the residual can be evaluated."""
        buf = self.buffers
        lam = 1.0
        while True:
            clip_step(y, step, lam, buf.y_min, buf.y_max, out=buf.y_help)
            result = self.evaluate(buf.y_help, buf.f_help)
            if isinstance(result, Evaluated):
                return lam
            if lam < LAMBDA_MIN:
                raise InfeasibleEvaluation(result.reason, **self._context())
            self.diagnostics.debug(
                f"infeasible trial point ({result.reason}), lambda = {lam}",
                self.category,
            )
            lam *= 0.5

    def _minimize_quadratic(
        self, lam: float, phi: float, phi_test: float, phi_help: float
    ) -> float:
        """
        Vertex of the parabola through (0, phi), (lam/2, phi_test), (lam, phi_help).

        Bounded below by 0.1 * lam.
        """
        lam_test = 0.5 * lam
        A = np.array([
            [1.0, 0.0, 0.0],
            [1.0, lam_test, lam_test * lam_test],
            [1.0, lam, lam * lam],
        ])
        bx, info = self.backend.solve(A, np.array([phi, phi_test, phi_help]))
        self.evaluate.statistics.linear_solves += 1
        if info != 0:
            raise SingularLinearSystem(
                info, "quadratic line-search model", **self._context()
            )

        with np.errstate(divide="ignore", invalid="ignore"):
            vertex = -0.5 * bx[1] / bx[2]
        lam_new = 0.1 * lam
        if vertex > lam_new:
            lam_new = float(vertex)

        if not lam_new >= LAMBDA_MIN:
            raise InsufficientDecrease(lam_new, **self._context())
        return lam_new

    def _context(self) -> dict:
        return dict(
            equation_index=self.system.equation_index(),
            time=self.system.simulation_time(),
        )
