"""Exception hierarchy for algebraic loop solver failures."""

from typing import Optional


class EvaluationError(ArithmeticError):
    """
    Raised by user callbacks when the system is undefined at a point.

    Equation systems convert it into an ``Infeasible`` evaluation result.
    """


class AlgLoopSolverError(RuntimeError):
    """Base class for all algebraic loop solver failures."""

    def __init__(
        self,
        message: str,
        equation_index: Optional[int] = None,
        time: Optional[float] = None,
    ):
        self.equation_index = equation_index
        self.time = time
        if equation_index is not None:
            location = f"eq{equation_index}"
            if time is not None:
                location += f" at time {time:g}"
            message = f"{location}: {message}"
        super().__init__(message)


class IterationLimitExceeded(AlgLoopSolverError):
    """Nonlinear iteration exceeded the configured step count."""

    def __init__(self, iterations: int, **kwargs):
        self.iterations = iterations
        super().__init__(
            f"error solving nonlinear system (iteration limit: {iterations})",
            **kwargs,
        )


class SingularLinearSystem(AlgLoopSolverError):
    """Dense solve reported a singular or inconsistent system."""

    def __init__(self, info: int, context: str = "linear system", **kwargs):
        self.info = info
        self.context = context
        super().__init__(
            f"error solving {context} (gesv info: {info})", **kwargs
        )


class InfeasibleEvaluation(AlgLoopSolverError):
    """Residual evaluation failed where no smaller step was available."""

    def __init__(self, reason: str, **kwargs):
        self.reason = reason
        super().__init__(f"residual evaluation failed: {reason}", **kwargs)


class InsufficientDecrease(AlgLoopSolverError):
    """Line search could not find a step with enough merit decrease."""

    def __init__(self, lam: float, **kwargs):
        self.lam = lam
        super().__init__(
            f"can't get sufficient decrease of solution (lambda = {lam:g})",
            **kwargs,
        )
