"""Core abstractions for algebraic loop solving."""

from algloop.core.errors import (
    AlgLoopSolverError,
    EvaluationError,
    InfeasibleEvaluation,
    InsufficientDecrease,
    IterationLimitExceeded,
    SingularLinearSystem,
)
from algloop.core.settings import NewtonSettings
from algloop.core.status import IterationStatus, LogCategory
from algloop.core.system import (
    EquationSystem,
    Evaluated,
    EvaluationResult,
    Infeasible,
)

__all__ = [
    "AlgLoopSolverError",
    "EvaluationError",
    "InfeasibleEvaluation",
    "InsufficientDecrease",
    "IterationLimitExceeded",
    "SingularLinearSystem",
    "NewtonSettings",
    "IterationStatus",
    "LogCategory",
    "EquationSystem",
    "Evaluated",
    "EvaluationResult",
    "Infeasible",
]
