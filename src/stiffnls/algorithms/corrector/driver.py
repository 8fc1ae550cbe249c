"""Run one corrector attempt for the step being taken.

The integrator calls :func:`solve_corrector` after predicting ``zn`` and
setting ``gamma``, ``rl1``, ``h``, ``ewt`` and ``tn`` for the attempted step.
Retry decisions (shrinking the step, refreshing the Jacobian) stay with the
integrator; this function only decides whether the linear setup is due and
hands the problem to the bound solver.
"""

import logging

from stiffnls.algorithms.corrector.memory import (IntegratorMemory,
                                                  process_error)
from stiffnls.algorithms.corrector.types import (ConvFailure, NLSStatus,
                                                 StepAttempt)
from stiffnls.utils.log_config import logger


def _setup_is_due(mem: IntegratorMemory, nflag: StepAttempt) -> bool:
    config = mem.config
    return (
        nflag in (StepAttempt.PREV_CONV_FAIL, StepAttempt.PREV_ERR_FAIL)
        or mem.nst == 0
        or mem.nst >= mem.nstlp + config.msbp
        or abs(mem.gamrat - 1.0) > config.dgmax
    )


def solve_corrector(mem: IntegratorMemory, tol: float, nflag: StepAttempt = StepAttempt.FIRST_CALL) -> NLSStatus:
    """Solve the corrector equation for the current step attempt.

    Parameters
    ----------
    mem : IntegratorMemory
        Integrator state with a bound, initialized nonlinear solver.
    tol : float
        Tolerance for the convergence test.
    nflag : StepAttempt, default FIRST_CALL
        What happened to the previous attempt of this step.

    Returns
    -------
    NLSStatus
        The solver's status. ``mem.acor`` holds the correction and ``mem.y``
        the corrected solution ``zn[0] + acor`` whatever the outcome.
    """
    if mem is None:
        process_error(None, logging.ERROR, "CORRECTOR", "solve_corrector", "Integrator memory is None.")
        return NLSStatus.MEM_NULL
    if mem.nls is None:
        process_error(mem, logging.ERROR, "CORRECTOR", "solve_corrector", "No nonlinear solver is bound.")
        return NLSStatus.ILL_INPUT
    if tol <= 0.0:
        process_error(mem, logging.ERROR, "CORRECTOR", "solve_corrector", f"tol must be positive, got {tol}.")
        return NLSStatus.ILL_INPUT

    if mem.lsetup is not None:
        if nflag in (StepAttempt.FIRST_CALL, StepAttempt.PREV_ERR_FAIL):
            mem.convfail = ConvFailure.NO_FAILURES
        else:
            mem.convfail = ConvFailure.OTHER
        call_setup = _setup_is_due(mem, nflag)
    else:
        mem.crate = 1.0
        call_setup = False

    mem.acor[:] = 0.0
    ctx = mem.new_attempt()

    status = mem.nls.solve(mem.acor, tol, mem.ewt, ctx, call_setup)

    mem.y[:] = mem.zn[0] + mem.acor

    logger.debug("Corrector at t=%g (step %d): %s, crate=%.3e, acnrm=%.3e",
                 mem.tn, mem.nst, status, mem.crate, mem.acnrm)
    return status
