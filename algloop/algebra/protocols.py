"""Linear algebra backend protocol."""

from typing import Protocol, Tuple
from numpy.typing import NDArray


class LinearAlgebraBackend(Protocol):
    """
    Protocol for the dense linear solve used by the Newton solver.
    Allows swapping the LAPACK kernel, e.g. for instrumentation.
    """

    def solve(self, A: NDArray, b: NDArray) -> Tuple[NDArray, int]:
        """
        Solve linear system Ax = b with partial pivoting.

        Args:
            A: System matrix (n, n)
            b: Right-hand side (n,) or (n, k)

        Returns:
            x: Solution with the shape of b
            info: 0 on success, > 0 if U(info, info) is exactly zero,
                < 0 if an argument was illegal
        """
        ...
