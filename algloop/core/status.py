"""Solver status and log category enumerations."""

from enum import Enum, auto


class IterationStatus(Enum):
    """State of the Newton iteration."""
    CONTINUE = auto()     # working state inside solve()
    DONE = auto()         # converged
    SOLVERERROR = auto()  # structurally empty loop


class LogCategory(Enum):
    """Diagnostics category of an algebraic loop."""
    LS = "LS"    # linear system
    NLS = "NLS"  # nonlinear system
