"""Scaling helpers shared by the Jacobian builder and the line search."""

import numpy as np
from numpy.typing import NDArray


def is_converged(
    f: NDArray, f_nominal: NDArray, atol: float, rtol: float
) -> bool:
    """
    Elementwise residual test |f_i| <= atol + rtol * fNominal_i.

    Args:
        f: Unscaled residual
        f_nominal: Residual scales from the latest Jacobian build
        atol: Absolute tolerance
        rtol: Relative tolerance

    Returns:
        True if every component passes (a NaN component never does)
    """
    return bool(np.all(np.abs(f) <= atol + rtol * f_nominal))


def scaled_merit(f: NDArray, f_nominal: NDArray, out: NDArray) -> float:
    """Write f / fNominal into out and return its sum of squares."""
    np.divide(f, f_nominal, out=out)
    return float(out @ out)


def clip_step(
    y: NDArray,
    step: NDArray,
    lam: float,
    y_min: NDArray,
    y_max: NDArray,
    out: NDArray,
) -> NDArray:
    """Trial point clip(y - lam * step, y_min, y_max), written into out."""
    np.subtract(y, lam * step, out=out)
    np.clip(out, y_min, y_max, out=out)
    return out
