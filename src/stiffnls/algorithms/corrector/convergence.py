"""Convergence test of the corrector iteration.

After every iterate the increment norm ``del`` is compared with the
tolerance, scaled by an estimate of the contraction rate of the iteration:

.. math::

    c_m = \\max(c_{down}\\,c_{m-1},\\ \\delta_m/\\delta_{m-1}), \\qquad
    d_{con} = \\delta_m \\min(1, c_m) / tol

The iterate converged when ``dcon <= 1`` and diverged when the increment
more than ``rdiv``-folds between two iterations.
"""

import logging
from typing import Any

import numpy as np

from stiffnls.algorithms.corrector.memory import (CorrectorAttempt,
                                                  process_error)
from stiffnls.algorithms.corrector.types import (ConvergenceCheck,
                                                 ConvergenceOutcome,
                                                 NLSStatus)
from stiffnls.algorithms.utils.config import CRDOWN, RDIV
from stiffnls.algorithms.utils.norms import wrms_norm

_COMPONENT = "CORRECTOR"


def classify_correction(
    m: int,
    del_: float,
    delp: float,
    crate: float,
    tol: float,
    *,
    crdown: float = CRDOWN,
    rdiv: float = RDIV,
) -> ConvergenceCheck:
    """Classify one iterate from its increment norm.

    Parameters
    ----------
    m : int
        Zero-based iteration index.
    del_ : float
        Weighted norm of the latest increment.
    delp : float
        Increment norm of the previous iteration; ignored when ``m == 0``.
    crate : float
        Contraction-rate estimate before this iteration.
    tol : float
        Convergence tolerance, strictly positive.
    crdown : float, default 0.3
        Decay factor of the rate estimate.
    rdiv : float, default 2.0
        Divergence ratio.

    Returns
    -------
    ConvergenceCheck
        The outcome together with the updated ``crate`` and ``dcon``.
    """
    if m > 0:
        if delp > 0.0:
            ratio = del_ / delp
        else:
            ratio = 0.0 if del_ == 0.0 else np.inf
        crate = max(crdown * crate, ratio)
    dcon = del_ * min(1.0, crate) / tol

    if dcon <= 1.0:
        outcome = ConvergenceOutcome.CONVERGED
    elif m >= 1 and del_ > rdiv * delp:
        outcome = ConvergenceOutcome.DIVERGED
    else:
        outcome = ConvergenceOutcome.NEEDS_MORE_ITERATIONS
    return ConvergenceCheck(outcome=outcome, crate=crate, dcon=dcon)


def nls_conv_test(
    nls: Any,
    ycor: np.ndarray,
    delta: np.ndarray,
    tol: float,
    ewt: np.ndarray,
    ctx: CorrectorAttempt,
) -> NLSStatus:
    """Convergence test installed on the bound nonlinear solver.

    Updates ``crate`` on the integrator memory and ``delp`` on the per-solve
    context. On convergence, ``acnrm`` receives the increment norm on the
    first iteration and the norm of the full correction afterwards.

    Returns
    -------
    NLSStatus
        ``SUCCESS`` (converged), ``CONTINUE``, ``CONV_RECVR`` (diverged) or
        ``MEM_NULL``.
    """
    if ctx is None:
        process_error(None, logging.ERROR, _COMPONENT, "nls_conv_test", "Integrator memory is None.")
        return NLSStatus.MEM_NULL
    mem = ctx.mem
    config = mem.config

    del_ = wrms_norm(delta, ewt)
    m = nls.get_cur_iter()

    check = classify_correction(m, del_, ctx.delp, mem.crate, tol,
                                crdown=config.crdown, rdiv=config.rdiv)
    mem.crate = check.crate

    if check.outcome is ConvergenceOutcome.CONVERGED:
        mem.acnrm = del_ if m == 0 else wrms_norm(ycor, mem.ewt)
        return NLSStatus.SUCCESS

    if check.outcome is ConvergenceOutcome.DIVERGED:
        process_error(mem, logging.INFO, _COMPONENT, "nls_conv_test",
                      f"At t = {mem.tn:g}, iteration {m} diverged (del = {del_:.3e}, delp = {ctx.delp:.3e}).")
        return NLSStatus.CONV_RECVR

    ctx.delp = del_
    return NLSStatus.CONTINUE
