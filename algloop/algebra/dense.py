"""Dense linear algebra backend using NumPy/SciPy."""

from typing import Tuple
import numpy as np
import scipy.linalg
from numpy.typing import NDArray


class DenseBackend:
    """LAPACK gesv through scipy.linalg.lapack."""

    def solve(self, A: NDArray, b: NDArray) -> Tuple[NDArray, int]:
        """
        Solve linear system Ax = b via LU with partial pivoting.

        The LAPACK status is passed through instead of raising, so the
        caller decides how a singular system is reported.

        Args:
            A: System matrix (n, n), left untouched
            b: Right-hand side (n,) or (n, k), left untouched

        Returns:
            x: Solution with the shape of b
            info: gesv status code
        """
        A = np.asarray(A, dtype=float)
        b = np.asarray(b, dtype=float)
        rhs = b.reshape(b.shape[0], -1)

        (gesv,) = scipy.linalg.lapack.get_lapack_funcs(("gesv",), (A, rhs))
        _, _, x, info = gesv(A, rhs)

        return x.reshape(b.shape), int(info)
