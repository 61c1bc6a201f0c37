"""Base algebraic loop solver interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import numpy as np
from numpy.typing import NDArray

from algloop.core.status import IterationStatus


@dataclass
class NewtonBuffers:
    """Per-dimension working arrays, owned by one solver instance."""

    names: list[str]
    y_nominal: NDArray  # (n,)
    y_min: NDArray      # (n,)
    y_max: NDArray      # (n,)
    y: NDArray          # (n,) current iterate
    f: NDArray          # (n,) residual at y
    f_nominal: NDArray  # (n,) residual scales
    y_help: NDArray     # (n,) trial point
    f_help: NDArray     # (n,) residual at trial point
    y_test: NDArray     # (n,) half-step point
    f_test: NDArray     # (n,) residual at half-step point
    jac: NDArray        # (n, n) scaled Jacobian
    zero: NDArray       # (n,) reference point of tearing form

    @classmethod
    def allocate(cls, n: int) -> "NewtonBuffers":
        """Fresh zero-filled buffers for an n-dimensional loop."""
        return cls(
            names=[""] * n,
            y_nominal=np.ones(n),
            y_min=np.full(n, -np.inf),
            y_max=np.full(n, np.inf),
            y=np.zeros(n),
            f=np.zeros(n),
            f_nominal=np.ones(n),
            y_help=np.zeros(n),
            f_help=np.zeros(n),
            y_test=np.zeros(n),
            f_test=np.zeros(n),
            jac=np.zeros((n, n)),
            zero=np.zeros(n),
        )

    @property
    def dimension(self) -> int:
        return self.y.shape[0]


@dataclass
class SolveStatistics:
    """Work counters of the last solve() call."""

    iterations: int = 0
    residual_evaluations: int = 0
    jacobian_builds: int = 0
    analytic_jacobians: int = 0
    finite_difference_jacobians: int = 0
    linear_solves: int = 0
    # (phi before step, phi accepted, lambda) per damped step
    merit_history: list[tuple[float, float, float]] = field(default_factory=list)


class AlgLoopSolver(ABC):
    """Solves one algebraic loop each time the integrator asks for it."""

    @abstractmethod
    def initialize(self) -> None:
        """Pull dimension, nominals and bounds; (re)allocate storage."""
        ...

    @abstractmethod
    def solve(self) -> None:
        """
        Solve the loop starting from the system's current values.

        Raises:
            AlgLoopSolverError: if no solution could be found
        """
        ...

    @abstractmethod
    def get_iteration_status(self) -> IterationStatus:
        """Status of the last solve()."""
        ...

    def step_completed(self, time: float) -> None:
        """Integrator accepted a step at the given time."""

    def restore_old_values(self) -> None:
        """Integrator rolled back to the previous step."""

    def restore_new_values(self) -> None:
        """Integrator returned to the rejected step's values."""
