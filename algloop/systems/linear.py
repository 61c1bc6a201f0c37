"""Linear algebraic loops A y = b."""

from typing import Optional, Sequence
import numpy as np
from numpy.typing import ArrayLike, NDArray

from algloop.systems.residual import ResidualSystem


class LinearSystem(ResidualSystem):
    """
    Untorn linear loop A y = b.

    The residual reported to the solver is the right-hand side b and the
    system matrix is A, so a single solve yields y directly.
    """

    def __init__(
        self,
        A: ArrayLike,
        b: ArrayLike,
        y0: Optional[ArrayLike] = None,
        nominal: Optional[ArrayLike] = None,
        names: Optional[Sequence[str]] = None,
        equation_index: int = 0,
        time: float = 0.0,
    ):
        self.A = np.atleast_2d(np.asarray(A, dtype=float))
        self.b = np.asarray(b, dtype=float).ravel()
        n = self.b.shape[0]
        super().__init__(
            residual_fn=lambda y: self.b,
            y0=np.zeros(n) if y0 is None else y0,
            nominal=nominal,
            jacobian_fn=lambda y: self.A,
            names=names,
            linear=True,
            tearing=False,
            equation_index=equation_index,
            time=time,
        )


class LinearTearingSystem(ResidualSystem):
    """
    Linear loop in tearing form with residual A y - b.

    Solved for the correction about the zero vector.
    """

    def __init__(
        self,
        A: ArrayLike,
        b: ArrayLike,
        y0: Optional[ArrayLike] = None,
        nominal: Optional[ArrayLike] = None,
        names: Optional[Sequence[str]] = None,
        analytic: bool = True,
        equation_index: int = 0,
        time: float = 0.0,
    ):
        self.A = np.atleast_2d(np.asarray(A, dtype=float))
        self.b = np.asarray(b, dtype=float).ravel()
        n = self.b.shape[0]
        super().__init__(
            residual_fn=self._residual,
            y0=np.zeros(n) if y0 is None else y0,
            nominal=nominal,
            jacobian_fn=(lambda y: self.A) if analytic else None,
            names=names,
            linear=True,
            tearing=True,
            equation_index=equation_index,
            time=time,
        )

    def _residual(self, y: NDArray) -> NDArray:
        return self.A @ y - self.b
