"""Wrappers exposing the integrator's linear solver to a nonlinear solver.

The integrator's ``lsetup``/``lsolve`` callbacks know nothing of the
nonlinear solver. These wrappers adapt their signatures, keep the setup
bookkeeping on the integrator memory and translate the tri-state callback
results into :class:`~stiffnls.algorithms.corrector.types.NLSStatus`.
"""

import logging
from typing import Tuple

import numpy as np

from stiffnls.algorithms.corrector.memory import (CorrectorAttempt,
                                                  process_error)
from stiffnls.algorithms.corrector.types import (CallbackStatus, ConvFailure,
                                                 NLSStatus)
from stiffnls.utils.log_config import logger

_COMPONENT = "CORRECTOR"


def nls_lsetup(ycor: np.ndarray, res: np.ndarray, jbad: bool, ctx: CorrectorAttempt) -> Tuple[NLSStatus, bool]:
    """Run the integrator's linear setup for the current iterate.

    Parameters
    ----------
    ycor : numpy.ndarray
        Current correction iterate (unused; the setup reads ``mem.y``).
    res : numpy.ndarray
        Current residual (unused; the setup reads ``mem.ftemp``).
    jbad : bool
        The nonlinear solver considers the Jacobian data stale.
    ctx : CorrectorAttempt
        Per-solve context.

    Returns
    -------
    status : NLSStatus
        ``SUCCESS``, ``CONV_RECVR`` (retry with a fresh setup),
        ``LSETUP_FAIL`` or ``MEM_NULL``.
    jcur : bool
        Whether the Jacobian data is now current.

    Notes
    -----
    The setup counter, ``gamrat``, ``crate``, ``gammap`` and ``nstlp`` are
    updated whatever the callback returns.
    """
    if ctx is None:
        process_error(None, logging.ERROR, _COMPONENT, "nls_lsetup", "Integrator memory is None.")
        return NLSStatus.MEM_NULL, False
    mem = ctx.mem

    if jbad:
        mem.convfail = ConvFailure.BAD_J

    retval, jcur = mem.lsetup(mem, mem.convfail, mem.y, mem.ftemp,
                              mem.vtemp1, mem.vtemp2, mem.vtemp3)
    mem.nsetups += 1

    mem.jcur = bool(jcur)

    mem.gamrat = mem.crate = 1.0
    mem.gammap = mem.gamma
    mem.nstlp = mem.nst

    logger.debug("Linear setup #%d at step %d (convfail=%s, jcur=%s)",
                 mem.nsetups, mem.nst, mem.convfail.name, mem.jcur)

    status = CallbackStatus.coerce(retval)
    if status is CallbackStatus.FATAL:
        process_error(mem, logging.ERROR, _COMPONENT, "nls_lsetup",
                      f"At t = {mem.tn:g}, the setup routine failed in an unrecoverable manner.")
        return NLSStatus.LSETUP_FAIL, mem.jcur
    if status is CallbackStatus.RECOVERABLE:
        process_error(mem, logging.WARNING, _COMPONENT, "nls_lsetup",
                      f"At t = {mem.tn:g}, the setup routine failed in a recoverable manner.")
        return NLSStatus.CONV_RECVR, mem.jcur
    return NLSStatus.SUCCESS, mem.jcur


def nls_lsolve(ycor: np.ndarray, delta: np.ndarray, ctx: CorrectorAttempt) -> NLSStatus:
    """Solve the linear system in place of *delta*.

    Returns ``SUCCESS``, ``CONV_RECVR``, ``LSOLVE_FAIL`` or ``MEM_NULL``.
    """
    if ctx is None:
        process_error(None, logging.ERROR, _COMPONENT, "nls_lsolve", "Integrator memory is None.")
        return NLSStatus.MEM_NULL
    mem = ctx.mem

    status = CallbackStatus.coerce(mem.lsolve(mem, delta, mem.ewt, mem.y, mem.ftemp))

    if status is CallbackStatus.FATAL:
        process_error(mem, logging.ERROR, _COMPONENT, "nls_lsolve",
                      f"At t = {mem.tn:g}, the solve routine failed in an unrecoverable manner.")
        return NLSStatus.LSOLVE_FAIL
    if status is CallbackStatus.RECOVERABLE:
        process_error(mem, logging.WARNING, _COMPONENT, "nls_lsolve",
                      f"At t = {mem.tn:g}, the solve routine failed in a recoverable manner.")
        return NLSStatus.CONV_RECVR
    return NLSStatus.SUCCESS
