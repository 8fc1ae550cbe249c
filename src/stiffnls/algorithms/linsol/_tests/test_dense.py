import logging

import numpy as np
import pytest

from stiffnls.algorithms.corrector.memory import IntegratorMemory
from stiffnls.algorithms.corrector.types import CallbackStatus, ConvFailure
from stiffnls.algorithms.linsol import (DenseLinearSolver,
                                        DenseLinearSolverConfig)


def _rhs(t, y):
    return np.array([-y[0] + y[1] ** 2, -2.0 * y[1]]), CallbackStatus.SUCCESS


def _jac(t, y, fy):
    return np.array([[-1.0, 2.0 * y[1]], [0.0, -2.0]]), CallbackStatus.SUCCESS


@pytest.fixture
def records():
    return []


@pytest.fixture
def mem(records):
    def handler(severity, component, operation, message):
        records.append((severity, component, operation, message))

    m = IntegratorMemory.from_initial_state(_rhs, np.array([1.0, 2.0]), error_handler=handler)
    m.h = m.gamma = m.gammap = 0.05
    m.tn = 0.05
    m.ftemp[:] = _rhs(m.tn, m.y)[0]
    return m


def _setup(solver, mem, convfail=ConvFailure.NO_FAILURES):
    return solver.setup(mem, convfail, mem.y, mem.ftemp, mem.vtemp1, mem.vtemp2, mem.vtemp3)


def _newton_matrix(mem):
    return np.eye(2) - mem.gamma * _jac(mem.tn, mem.y, None)[0]


def test_attach_installs_callbacks(mem):
    solver = DenseLinearSolver(jac=_jac).attach(mem)
    assert mem.lsetup == solver.setup
    assert mem.lsolve == solver.solve


def test_difference_quotient_matches_analytic_jacobian(mem):
    solver = DenseLinearSolver()
    y_before = mem.y.copy()

    status, jcur = _setup(solver, mem)

    assert status is CallbackStatus.SUCCESS
    assert jcur is True
    assert solver.nfe_dq == 2
    np.testing.assert_allclose(solver._saved_j, _jac(mem.tn, mem.y, None)[0], rtol=1e-6, atol=1e-6)
    np.testing.assert_array_equal(mem.y, y_before)


def test_solve_applies_inverse_newton_matrix(mem):
    solver = DenseLinearSolver(jac=_jac)
    _setup(solver, mem)
    b = np.array([0.3, -1.7])
    expected = np.linalg.solve(_newton_matrix(mem), b)

    status = solver.solve(mem, b, mem.ewt, mem.y, mem.ftemp)

    assert status is CallbackStatus.SUCCESS
    np.testing.assert_allclose(b, expected, rtol=1e-12)


def test_jacobian_reused_until_stale(mem):
    solver = DenseLinearSolver(jac=_jac, config=DenseLinearSolverConfig(msbj=10))
    _setup(solver, mem)
    assert solver.nje == 1

    mem.nst = 5
    mem.gamma = 0.04
    status, jcur = _setup(solver, mem)
    assert status is CallbackStatus.SUCCESS
    assert jcur is False
    assert solver.nje == 1

    b = np.array([1.0, 1.0])
    expected = np.linalg.solve(_newton_matrix(mem), b)
    solver.solve(mem, b, mem.ewt, mem.y, mem.ftemp)
    np.testing.assert_allclose(b, expected, rtol=1e-12)

    mem.nst = 10
    status, jcur = _setup(solver, mem)
    assert jcur is True
    assert solver.nje == 2
    assert solver.nstlj == 10


def test_previous_failure_forces_new_jacobian(mem):
    solver = DenseLinearSolver(jac=_jac)
    _setup(solver, mem)
    mem.nst = 3

    _, jcur = _setup(solver, mem, ConvFailure.OTHER)
    assert jcur is True
    assert solver.nje == 2


@pytest.mark.parametrize("gamma, reevaluate", [(0.055, True), (0.1, False)])
def test_bad_jacobian_reevaluated_only_for_small_gamma_change(mem, gamma, reevaluate):
    solver = DenseLinearSolver(jac=_jac)
    _setup(solver, mem)
    mem.nst = 3
    mem.gamma = gamma

    _, jcur = _setup(solver, mem, ConvFailure.BAD_J)

    assert jcur is reevaluate


def test_singular_matrix_is_recoverable(mem, records):
    mem.gamma = 0.5

    def singular(t, y, fy):
        return np.eye(2) / mem.gamma, CallbackStatus.SUCCESS

    solver = DenseLinearSolver(jac=singular)
    status, jcur = _setup(solver, mem)

    assert status is CallbackStatus.RECOVERABLE
    assert jcur is True

    assert solver.solve(mem, np.ones(2), mem.ewt, mem.y, mem.ftemp) is CallbackStatus.FATAL
    assert records[-1][0] == logging.ERROR
    assert records[-1][2] == "solve"


@pytest.mark.parametrize(
    "jac_status, expected",
    [(CallbackStatus.RECOVERABLE, CallbackStatus.RECOVERABLE), (-1, CallbackStatus.FATAL)],
)
def test_jacobian_failure_is_propagated(mem, records, jac_status, expected):
    solver = DenseLinearSolver(jac=lambda t, y, fy: (np.zeros((2, 2)), jac_status))

    status, jcur = _setup(solver, mem)

    assert status is expected
    assert jcur is False
    assert solver.nje == 0
    assert records[-1][2] == "setup"


@pytest.mark.parametrize("lmm, factor", [("bdf", 2.0 / 1.5), ("adams", 1.0)])
def test_stale_gamma_correction(mem, lmm, factor):
    solver = DenseLinearSolver(jac=_jac, config=DenseLinearSolverConfig(lmm=lmm))
    _setup(solver, mem)
    b = np.array([0.5, 2.0])
    expected = np.linalg.solve(_newton_matrix(mem), b) * factor

    mem.gamrat = 0.5
    solver.solve(mem, b, mem.ewt, mem.y, mem.ftemp)

    np.testing.assert_allclose(b, expected, rtol=1e-12)


def test_config_validation():
    with pytest.raises(ValueError):
        DenseLinearSolverConfig(msbj=0)
    with pytest.raises(ValueError):
        DenseLinearSolverConfig(lmm="rk4")
    assert DenseLinearSolverConfig().merge(msbj=5).msbj == 5
