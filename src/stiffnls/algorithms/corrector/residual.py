"""Corrector equations in root-finding and fixed-point form.

With ``y = zn[0] + ycor`` the corrector equation of an implicit multistep
formula reads

.. math::

    F(y_{cor}) = r_{l1} z_{n,1} + y_{cor} - \\gamma f(t_n, y) = 0

for Newton-type solvers, or

.. math::

    y_{cor} = G(y_{cor}) = r_{l1} (h f(t_n, y) - z_{n,1})

for fixed-point iteration. Both functions use the nonlinear-solver system
function signature ``sys(ycor, out, ctx) -> NLSStatus``.
"""

import logging

import numpy as np

from stiffnls.algorithms.corrector.memory import (CorrectorAttempt,
                                                  IntegratorMemory,
                                                  process_error)
from stiffnls.algorithms.corrector.types import CallbackStatus, NLSStatus

_COMPONENT = "CORRECTOR"


def _evaluate_rhs(mem: IntegratorMemory, out: np.ndarray, operation: str) -> NLSStatus:
    """Evaluate ``f(tn, y)`` into *out* and count the call."""
    ydot, status = mem.f(mem.tn, mem.y)
    mem.nfe += 1
    status = CallbackStatus.coerce(status)

    if status is CallbackStatus.FATAL:
        process_error(mem, logging.ERROR, _COMPONENT, operation,
                      f"At t = {mem.tn:g}, the right-hand side routine failed in an unrecoverable manner.")
        return NLSStatus.RHSFUNC_FAIL
    if status is CallbackStatus.RECOVERABLE:
        process_error(mem, logging.WARNING, _COMPONENT, operation,
                      f"At t = {mem.tn:g}, the right-hand side routine failed in a recoverable manner.")
        return NLSStatus.RHSFUNC_RECVR

    out[:] = ydot
    return NLSStatus.SUCCESS


def nls_residual(ycor: np.ndarray, res: np.ndarray, ctx: CorrectorAttempt) -> NLSStatus:
    """Evaluate the Newton residual of the corrector equation into *res*.

    Parameters
    ----------
    ycor : numpy.ndarray
        Current correction iterate.
    res : numpy.ndarray
        Output buffer for ``rl1*zn[1] + ycor - gamma*f(tn, zn[0] + ycor)``.
    ctx : CorrectorAttempt
        Per-solve context.

    Returns
    -------
    NLSStatus
        ``SUCCESS``, ``RHSFUNC_RECVR``, ``RHSFUNC_FAIL`` or ``MEM_NULL``.
    """
    if ctx is None:
        process_error(None, logging.ERROR, _COMPONENT, "nls_residual", "Integrator memory is None.")
        return NLSStatus.MEM_NULL
    mem = ctx.mem

    np.add(mem.zn[0], ycor, out=mem.y)

    status = _evaluate_rhs(mem, mem.ftemp, "nls_residual")
    if status is not NLSStatus.SUCCESS:
        return status

    res[:] = mem.rl1 * mem.zn[1] + ycor - mem.gamma * mem.ftemp
    return NLSStatus.SUCCESS


def nls_fp_function(ycor: np.ndarray, res: np.ndarray, ctx: CorrectorAttempt) -> NLSStatus:
    """Evaluate the fixed-point map of the corrector equation into *res*.

    The right-hand side is written straight into *res*, which is then
    overwritten with ``rl1*(h*f(tn, zn[0] + ycor) - zn[1])``.
    """
    if ctx is None:
        process_error(None, logging.ERROR, _COMPONENT, "nls_fp_function", "Integrator memory is None.")
        return NLSStatus.MEM_NULL
    mem = ctx.mem

    np.add(mem.zn[0], ycor, out=mem.y)

    status = _evaluate_rhs(mem, res, "nls_fp_function")
    if status is not NLSStatus.SUCCESS:
        return status

    res *= mem.h
    res -= mem.zn[1]
    res *= mem.rl1
    return NLSStatus.SUCCESS
