"""Equation system backed by plain residual callbacks."""

from typing import Callable, Optional, Sequence
import numpy as np
from numpy.typing import ArrayLike, NDArray

from algloop.core.system import Evaluated, EvaluationResult, Infeasible


class ResidualSystem:
    """
    Algebraic loop defined by a residual function r(y).

    The residual function may raise EvaluationError (or any ArithmeticError)
    where it is undefined; such points, and points with a non-finite
    residual, evaluate as Infeasible.
    """

    def __init__(
        self,
        residual_fn: Callable[[NDArray], ArrayLike],
        y0: ArrayLike,
        nominal: Optional[ArrayLike] = None,
        lower: Optional[ArrayLike] = None,
        upper: Optional[ArrayLike] = None,
        jacobian_fn: Optional[Callable[[NDArray], Optional[ArrayLike]]] = None,
        names: Optional[Sequence[str]] = None,
        linear: bool = False,
        tearing: bool = False,
        equation_index: int = 0,
        time: float = 0.0,
    ):
        """
        Args:
            residual_fn: Residual r(y), shape (n,)
            y0: Initial values, shape (n,)
            nominal: Nominal magnitudes (default ones)
            lower: Lower bounds (default -inf)
            upper: Upper bounds (default +inf)
            jacobian_fn: Analytic ∂r/∂y, shape (n, n); may return None
            names: Variable names (default y[0], y[1], ...)
            linear: Loop is linear in y
            tearing: Loop is in linear tearing form
            equation_index: Index reported in diagnostics
            time: Simulation time reported in diagnostics
        """
        self._y = np.array(y0, dtype=float).ravel()
        n = self._y.shape[0]
        self._residual_fn = residual_fn
        self._jacobian_fn = jacobian_fn
        self._nominal = _vector(nominal, n, 1.0)
        self._lower = _vector(lower, n, -np.inf)
        self._upper = _vector(upper, n, np.inf)
        self._names = list(names) if names is not None else [f"y[{i}]" for i in range(n)]
        self._linear = linear
        self._tearing = tearing
        self._equation_index = equation_index
        self.time = time
        self._f = np.zeros(n)

    @property
    def dimension(self) -> int:
        return self._y.shape[0]

    def names(self) -> list[str]:
        return list(self._names)

    def nominal(self) -> NDArray:
        return self._nominal.copy()

    def lower_bounds(self) -> NDArray:
        return self._lower.copy()

    def upper_bounds(self) -> NDArray:
        return self._upper.copy()

    def get_values(self) -> NDArray:
        return self._y.copy()

    def set_values(self, y: NDArray) -> None:
        self._y[:] = y

    def evaluate(self) -> EvaluationResult:
        try:
            f = np.asarray(self._residual_fn(self._y.copy()), dtype=float).ravel()
        except ArithmeticError as exc:
            return Infeasible(str(exc) or type(exc).__name__)
        if not np.all(np.isfinite(f)):
            return Infeasible(f"non-finite residual {f}")
        self._f[:] = f
        return Evaluated(self._f.copy())

    def residual(self) -> NDArray:
        return self._f.copy()

    def is_linear(self) -> bool:
        return self._linear

    def is_linear_tearing_form(self) -> bool:
        return self._tearing

    def analytic_system_matrix(self) -> Optional[NDArray]:
        if self._jacobian_fn is None:
            return None
        J = self._jacobian_fn(self._y.copy())
        return None if J is None else np.atleast_2d(np.asarray(J, dtype=float))

    def simulation_time(self) -> float:
        return self.time

    def equation_index(self) -> int:
        return self._equation_index


def _vector(values: Optional[ArrayLike], n: int, default: float) -> NDArray:
    if values is None:
        return np.full(n, default)
    return np.broadcast_to(np.asarray(values, dtype=float), (n,)).copy()
