import numpy as np
import pytest

from stiffnls.algorithms.corrector.backends import (FixedPointSolver,
                                                    NewtonSolver)
from stiffnls.algorithms.corrector.binding import (nls_init,
                                                   set_nonlinear_solver)
from stiffnls.algorithms.corrector.driver import solve_corrector
from stiffnls.algorithms.corrector.types import (CallbackStatus, ConvFailure,
                                                 NLSStatus,
                                                 NonlinearSolverType,
                                                 StepAttempt)
from stiffnls.algorithms.linsol import DenseLinearSolver


class _RecordingSolver:
    def __init__(self, status=NLSStatus.SUCCESS, correction=0.5):
        self.status = status
        self.correction = correction
        self.solves = []

    def get_type(self):
        return NonlinearSolverType.ROOTFIND

    def initialize(self):
        return NLSStatus.SUCCESS

    def solve(self, ycor, tol, weights, ctx, call_lsetup=False):
        self.solves.append((ycor.copy(), tol, ctx, call_lsetup))
        ycor[:] = self.correction
        return self.status

    def free(self):
        pass

    def set_sys_fn(self, fn):
        return NLSStatus.SUCCESS

    def set_conv_test_fn(self, fn):
        return NLSStatus.SUCCESS

    def set_lsetup_fn(self, fn):
        return NLSStatus.SUCCESS

    def set_lsolve_fn(self, fn):
        return NLSStatus.SUCCESS

    def set_max_iters(self, maxiters):
        return NLSStatus.SUCCESS

    def get_cur_iter(self):
        return 0


def _setup(mem, convfail, y, fy, tmp1, tmp2, tmp3):
    return CallbackStatus.SUCCESS, True


@pytest.fixture
def scheduled_memory(make_memory):
    def _make(**attrs):
        mem = make_memory(lsetup=_setup, **attrs)
        set_nonlinear_solver(mem, _RecordingSolver())
        return mem
    return _make


@pytest.mark.parametrize(
    "attrs, nflag, expected",
    [
        ({"nst": 0}, StepAttempt.FIRST_CALL, True),
        ({"nst": 5, "nstlp": 0}, StepAttempt.FIRST_CALL, False),
        ({"nst": 20, "nstlp": 0}, StepAttempt.FIRST_CALL, True),
        ({"nst": 25, "nstlp": 10}, StepAttempt.FIRST_CALL, False),
        ({"nst": 5, "gamrat": 1.2}, StepAttempt.FIRST_CALL, False),
        ({"nst": 5, "gamrat": 1.5}, StepAttempt.FIRST_CALL, True),
        ({"nst": 5, "gamrat": 0.6}, StepAttempt.FIRST_CALL, True),
        ({"nst": 5}, StepAttempt.PREV_CONV_FAIL, True),
        ({"nst": 5}, StepAttempt.PREV_ERR_FAIL, True),
    ],
)
def test_setup_schedule(scheduled_memory, attrs, nflag, expected):
    mem = scheduled_memory(**attrs)
    solve_corrector(mem, 1.0, nflag)
    assert mem.nls.solves[-1][3] is expected


@pytest.mark.parametrize(
    "nflag, expected",
    [
        (StepAttempt.FIRST_CALL, ConvFailure.NO_FAILURES),
        (StepAttempt.PREV_ERR_FAIL, ConvFailure.NO_FAILURES),
        (StepAttempt.PREV_CONV_FAIL, ConvFailure.OTHER),
    ],
)
def test_failure_reason_follows_previous_attempt(scheduled_memory, nflag, expected):
    mem = scheduled_memory(nst=5, convfail=ConvFailure.BAD_J)
    solve_corrector(mem, 1.0, nflag)
    assert mem.convfail is expected


def test_functional_iteration_never_requests_setup(make_memory):
    mem = make_memory(nst=0, crate=0.05)
    set_nonlinear_solver(mem, _RecordingSolver())

    solve_corrector(mem, 1.0)

    assert mem.nls.solves[-1][3] is False
    assert mem.crate == 1.0


def test_correction_starts_from_zero_and_updates_solution(scheduled_memory):
    mem = scheduled_memory()
    mem.acor[:] = 7.0
    mem.zn[0][:] = [1.0, 2.0, 3.0]

    status = solve_corrector(mem, 0.25)

    ycor, tol, ctx, _ = mem.nls.solves[-1]
    np.testing.assert_array_equal(ycor, 0.0)
    assert tol == 0.25
    assert ctx.mem is mem and ctx.delp == 0.0
    assert status is NLSStatus.SUCCESS
    np.testing.assert_array_equal(mem.y, [1.5, 2.5, 3.5])


def test_solution_updated_after_failure(scheduled_memory):
    mem = scheduled_memory()
    mem.nls.status = NLSStatus.CONV_RECVR
    mem.nls.correction = -1.0

    assert solve_corrector(mem, 1.0) is NLSStatus.CONV_RECVR
    np.testing.assert_array_equal(mem.y, mem.zn[0] - 1.0)


def test_invalid_input(make_memory, sink):
    assert solve_corrector(None, 1.0) is NLSStatus.MEM_NULL

    mem = make_memory()
    assert solve_corrector(mem, 1.0) is NLSStatus.ILL_INPUT

    set_nonlinear_solver(mem, _RecordingSolver())
    assert solve_corrector(mem, 0.0) is NLSStatus.ILL_INPUT
    assert mem.nls.solves == []
    assert sink.operations[-1] == "solve_corrector"


def test_newton_with_dense_solver_takes_backward_euler_step(backward_euler_memory):
    mem = backward_euler_memory()
    linsol = DenseLinearSolver(jac=lambda t, y, fy: (np.array([[-1.0]]), CallbackStatus.SUCCESS)).attach(mem)
    set_nonlinear_solver(mem, NewtonSolver())
    nls_init(mem)

    status = solve_corrector(mem, 1.0)

    assert status is NLSStatus.SUCCESS
    assert mem.y[0] == pytest.approx(1.0 / 1.1)
    assert mem.acor[0] == pytest.approx(0.01 / 1.1)
    assert mem.acnrm == pytest.approx(1.0e3 / 11.0)
    assert mem.nfe == 2
    assert mem.nsetups == 1
    assert mem.nls.get_cur_iter() == 1
    assert linsol.nje == 1
    assert mem.gammap == mem.gamma


def test_fixed_point_takes_backward_euler_step(backward_euler_memory):
    mem = backward_euler_memory()
    set_nonlinear_solver(mem, FixedPointSolver())
    nls_init(mem)

    status = solve_corrector(mem, 1.0)

    assert status is NLSStatus.SUCCESS
    assert mem.y[0] == pytest.approx(0.9091)
    assert mem.nfe == 3
    assert mem.nsetups == 0


def test_stiff_problem_needs_newton(backward_euler_memory):
    mem = backward_euler_memory(lam=50.0)
    set_nonlinear_solver(mem, FixedPointSolver())
    nls_init(mem)
    assert solve_corrector(mem, 1.0) is NLSStatus.CONV_RECVR

    DenseLinearSolver().attach(mem)
    set_nonlinear_solver(mem, NewtonSolver())
    nls_init(mem)

    status = solve_corrector(mem, 1.0, StepAttempt.PREV_CONV_FAIL)

    assert status is NLSStatus.SUCCESS
    assert mem.y[0] == pytest.approx(1.0 / 6.0, rel=1e-6)
