"""Tests for the scaled Jacobian builder."""

import logging

import numpy as np
import pytest

from algloop.core.errors import EvaluationError, InfeasibleEvaluation
from algloop.core.settings import NewtonSettings
from algloop.core.status import LogCategory
from algloop.solvers.base import NewtonBuffers, SolveStatistics
from algloop.solvers.evaluation import ResidualEvaluator
from algloop.solvers.jacobian import JacobianBuilder
from algloop.systems.residual import ResidualSystem
from algloop.utils.diagnostics import Diagnostics


def residual(y):
    return np.array([y[0]**2 + y[1], np.sin(y[0]) + 3.0 * y[1]**2])


def jacobian(y):
    return np.array([[2.0 * y[0], 1.0], [np.cos(y[0]), 6.0 * y[1]]])


def make_builder(system, settings=None):
    """Builder wired to fresh buffers, as the solver does it."""
    settings = settings or NewtonSettings()
    buf = NewtonBuffers.allocate(system.dimension)
    buf.y_nominal[:] = system.nominal()
    stats = SolveStatistics()
    evaluate = ResidualEvaluator(system, stats)
    diagnostics = Diagnostics()
    builder = JacobianBuilder(
        system, buf, settings, evaluate, diagnostics, LogCategory.NLS
    )

    y = system.get_values()
    f = np.zeros(system.dimension)
    evaluate.current(y, f)
    return builder, y, f, stats, diagnostics


def test_analytic_jacobian_scaling():
    """Rows are divided by fNominal, columns multiplied by yNominal."""
    system = ResidualSystem(residual, y0=[1.0, 2.0], jacobian_fn=jacobian)
    builder, y, f, stats, _ = make_builder(system)

    jac, f_nominal = builder.build(y, f)

    J = jacobian(y)
    assert np.allclose(f_nominal, [2.0, 12.0])
    assert np.allclose(jac, J / f_nominal[:, None])
    assert stats.analytic_jacobians == 1
    assert stats.finite_difference_jacobians == 0
    assert stats.residual_evaluations == 1


def test_f_nominal_uses_y_nominal():
    """Test fNominal_i = max_j |J_ij| * yNominal_j."""
    system = ResidualSystem(
        residual, y0=[1.0, 2.0], nominal=[10.0, 0.5], jacobian_fn=jacobian
    )
    builder, y, f, _, _ = make_builder(system)

    jac, f_nominal = builder.build(y, f)

    J = jacobian(y)
    expected = np.array([20.0, max(abs(np.cos(1.0)) * 10.0, 6.0)])
    assert np.allclose(f_nominal, expected)
    assert np.allclose(jac, J * np.array([10.0, 0.5]) / expected[:, None])


def test_f_nominal_floor():
    """A zero Jacobian row keeps the 100*atol floor."""
    system = ResidualSystem(
        lambda y: np.array([y[0] - 1.0, 0.0 * y[1]]),
        y0=[0.0, 0.0],
        jacobian_fn=lambda y: np.array([[1.0, 0.0], [0.0, 0.0]]),
    )
    builder, y, f, _, _ = make_builder(system, NewtonSettings(atol=1e-6))

    _, f_nominal = builder.build(y, f)

    assert f_nominal[1] == pytest.approx(1e-4)


def test_finite_difference_matches_analytic():
    """Forward differences agree with the analytic Jacobian to O(step)."""
    analytic = ResidualSystem(residual, y0=[1.0, 2.0], jacobian_fn=jacobian)
    numeric = ResidualSystem(residual, y0=[1.0, 2.0])

    builder_a, y_a, f_a, _, _ = make_builder(analytic)
    builder_n, y_n, f_n, stats, _ = make_builder(numeric)

    jac_a, fn_a = builder_a.build(y_a, f_a)
    jac_a, fn_a = jac_a.copy(), fn_a.copy()
    jac_n, fn_n = builder_n.build(y_n, f_n)

    assert stats.finite_difference_jacobians == 1
    assert np.allclose(fn_n, fn_a, rtol=1e-3)
    assert np.allclose(jac_n, jac_a, atol=1e-3)


def test_finite_difference_evaluation_count_and_restore():
    """N extra evaluations; the system is left at the unperturbed point."""
    system = ResidualSystem(residual, y0=[1.0, 2.0])
    builder, y, f, stats, _ = make_builder(system)

    builder.build(y, f)

    assert stats.residual_evaluations == 1 + system.dimension
    assert np.array_equal(system.get_values(), [1.0, 2.0])
    assert np.array_equal(y, [1.0, 2.0])


def test_failing_analytic_jacobian_falls_back():
    """A domain error in the analytic Jacobian is a warning, not a failure."""

    def broken(y):
        raise EvaluationError("matrix undefined")

    system = ResidualSystem(residual, y0=[1.0, 2.0], jacobian_fn=broken)
    builder, y, f, stats, diagnostics = make_builder(system)

    jac, _ = builder.build(y, f)

    assert stats.finite_difference_jacobians == 1
    warnings = list(diagnostics.messages(logging.WARNING))
    assert len(warnings) == 1
    assert "Analytic Jacobian failed for eq0" in warnings[0]
    assert "matrix undefined" in warnings[0]
    assert np.all(np.isfinite(jac))


def test_wrong_shape_analytic_jacobian_falls_back():
    """A matrix that is not N x N is ignored."""
    system = ResidualSystem(
        residual, y0=[1.0, 2.0], jacobian_fn=lambda y: np.eye(3)
    )
    builder, y, f, stats, _ = make_builder(system)

    builder.build(y, f)

    assert stats.analytic_jacobians == 0
    assert stats.finite_difference_jacobians == 1


def test_infeasible_difference_column_restores_point():
    """An undefined perturbed column is fatal; the system is put back at y."""

    def residual_bounded(y):
        if y[1] > 2.00001:
            raise EvaluationError("y[1] out of domain")
        return residual(y)

    system = ResidualSystem(residual_bounded, y0=[1.0, 2.0])
    builder, y, f, _, _ = make_builder(system)

    with pytest.raises(InfeasibleEvaluation, match="out of domain"):
        builder.build(y, f)

    assert np.array_equal(system.get_values(), [1.0, 2.0])
    assert not builder.evaluate.is_current(y)


def test_analytic_matrix_taken_at_y():
    """The system is moved back to y before its matrix is requested."""
    points = []

    def recorded(y):
        points.append(y.copy())
        return jacobian(y)

    system = ResidualSystem(residual, y0=[1.0, 2.0], jacobian_fn=recorded)
    builder, y, f, stats, _ = make_builder(system)
    builder.evaluate(np.array([1.5, 2.5]), np.zeros(2))

    jac, f_nominal = builder.build(y, f)

    assert np.array_equal(points[-1], [1.0, 2.0])
    assert np.array_equal(system.get_values(), [1.0, 2.0])
    assert np.allclose(jac, jacobian(y) / f_nominal[:, None])
    assert stats.residual_evaluations == 3
