"""
Types for the corrector module.

This module provides the status enumerations, the solver-type tag and the
callback signatures shared by the corrector components.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Callable, Tuple, Union

import numpy as np

if TYPE_CHECKING:
    from stiffnls.algorithms.corrector.memory import (CorrectorAttempt,
                                                      IntegratorMemory)


class CallbackStatus(IntEnum):
    """Tri-state result of a user or linear-solver callback.

    Parameters
    ----------
    SUCCESS : int
        The callback completed.
    RECOVERABLE : int
        The callback failed, but the step may be retried with different
        parameters (smaller step, fresh Jacobian).
    FATAL : int
        The callback failed and integration cannot continue.
    """
    FATAL = -1
    SUCCESS = 0
    RECOVERABLE = 1

    @classmethod
    def coerce(cls, value: Union["CallbackStatus", int, None]) -> "CallbackStatus":
        """Map a returned value onto a status; integers are read by sign."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.SUCCESS
        value = int(value)
        if value < 0:
            return cls.FATAL
        if value > 0:
            return cls.RECOVERABLE
        return cls.SUCCESS


class NLSStatus(Enum):
    """Status returned by the corrector callbacks and the nonlinear solvers.

    Parameters
    ----------
    SUCCESS : str
        The operation succeeded; for the convergence test, the iterate
        converged.
    CONTINUE : str
        The iterate has not converged yet; iterate again.
    CONV_RECVR : str
        Recoverable convergence failure: divergence, iteration cap reached,
        or a recoverable linear setup/solve failure.
    RHSFUNC_RECVR : str
        The right-hand side failed recoverably.
    RHSFUNC_FAIL : str
        The right-hand side failed unrecoverably.
    LSETUP_FAIL : str
        The linear setup failed unrecoverably.
    LSOLVE_FAIL : str
        The linear solve failed unrecoverably.
    MEM_NULL : str
        No integrator memory was available to the callback.
    ILL_INPUT : str
        Invalid input to a solver operation.
    NLS_INIT_FAIL : str
        The nonlinear solver initialization failed.
    """
    SUCCESS = "success"
    CONTINUE = "continue"
    CONV_RECVR = "conv_recvr"
    RHSFUNC_RECVR = "rhsfunc_recvr"
    RHSFUNC_FAIL = "rhsfunc_fail"
    LSETUP_FAIL = "lsetup_fail"
    LSOLVE_FAIL = "lsolve_fail"
    MEM_NULL = "mem_null"
    ILL_INPUT = "ill_input"
    NLS_INIT_FAIL = "nls_init_fail"

    @property
    def is_recoverable(self) -> bool:
        return self in (NLSStatus.CONV_RECVR, NLSStatus.RHSFUNC_RECVR)

    @property
    def is_fatal(self) -> bool:
        return self not in (NLSStatus.SUCCESS, NLSStatus.CONTINUE) and not self.is_recoverable

    def __str__(self) -> str:
        return self.name


class NonlinearSolverType(Enum):
    """Declared kind of a pluggable nonlinear solver.

    Parameters
    ----------
    ROOTFIND : int
        Newton-type solver for ``F(ycor) = 0``; needs linear solves.
    FIXEDPOINT : int
        Direct iteration ``ycor = G(ycor)``; no linear solves.
    """
    ROOTFIND = 0
    FIXEDPOINT = 1


class ConvFailure(Enum):
    """Reason passed to the linear setup for its Jacobian reuse decision.

    Parameters
    ----------
    NO_FAILURES : int
        First attempt of the step, or a retry after an error test failure.
    BAD_J : int
        The nonlinear solver judged the Jacobian data stale.
    OTHER : int
        Retry after a convergence failure with current Jacobian data.
    """
    NO_FAILURES = 0
    BAD_J = 1
    OTHER = 2


class StepAttempt(Enum):
    """History of the current step, used to schedule linear setups.

    Parameters
    ----------
    FIRST_CALL : int
        First corrector attempt of this step.
    PREV_CONV_FAIL : int
        The previous attempt failed to converge.
    PREV_ERR_FAIL : int
        The previous attempt converged but failed the error test.
    """
    FIRST_CALL = 0
    PREV_CONV_FAIL = 1
    PREV_ERR_FAIL = 2


class ConvergenceOutcome(Enum):
    """Classification of one corrector iterate."""
    CONVERGED = "converged"
    DIVERGED = "diverged"
    NEEDS_MORE_ITERATIONS = "needs_more_iterations"


@dataclass(frozen=True)
class ConvergenceCheck:
    """Result of classifying a single corrector iterate.

    Attributes
    ----------
    outcome : ConvergenceOutcome
        Converged, diverged, or needs more iterations.
    crate : float
        Updated contraction-rate estimate.
    dcon : float
        Scaled convergence measure ``del*min(1, crate)/tol``.
    """
    outcome: ConvergenceOutcome
    crate: float
    dcon: float


#: Right-hand side ``f(t, y) -> (ydot, status)``.
RhsFn = Callable[[float, np.ndarray], Tuple[np.ndarray, Union[CallbackStatus, int]]]

#: Linear setup ``lsetup(mem, convfail, y, fy, tmp1, tmp2, tmp3) -> (status, jcur)``.
LSetupFn = Callable[
    ["IntegratorMemory", ConvFailure, np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray],
    Tuple[Union[CallbackStatus, int], bool],
]

#: Linear solve ``lsolve(mem, b, weight, ycur, fcur) -> status``; ``b`` is overwritten.
LSolveFn = Callable[
    ["IntegratorMemory", np.ndarray, np.ndarray, np.ndarray, np.ndarray],
    Union[CallbackStatus, int],
]

#: Nonlinear system function ``sys(ycor, out, ctx) -> status``.
SysFn = Callable[[np.ndarray, np.ndarray, "CorrectorAttempt"], NLSStatus]

#: Linear setup wrapper seen by the nonlinear solver.
NLSLSetupFn = Callable[[np.ndarray, np.ndarray, bool, "CorrectorAttempt"], Tuple[NLSStatus, bool]]

#: Linear solve wrapper seen by the nonlinear solver.
NLSLSolveFn = Callable[[np.ndarray, np.ndarray, "CorrectorAttempt"], NLSStatus]

#: Convergence test ``ctest(nls, ycor, delta, tol, ewt, ctx) -> status``.
ConvTestFn = Callable[[Any, np.ndarray, np.ndarray, float, np.ndarray, "CorrectorAttempt"], NLSStatus]

#: Error sink ``handler(severity, component, operation, message)``.
ErrorHandler = Callable[[int, str, str, str], None]
