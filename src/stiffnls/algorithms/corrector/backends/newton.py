"""Provide a modified Newton iteration for the corrector equation.

Each iteration solves ``M delta = -F(ycor)`` with the linear system set up
by the integrator (``M`` approximates ``I - gamma*J``) and updates
``ycor += delta``. The linear system is only refreshed when the caller
requests it, or when a recoverable failure occurs with stale Jacobian data,
in which case the attempt restarts from the initial guess with
``jbad=True``.
"""

import logging

import numpy as np

from stiffnls.algorithms.corrector.backends.base import \
    _NonlinearSolverBackend
from stiffnls.algorithms.corrector.memory import (CorrectorAttempt,
                                                  process_error)
from stiffnls.algorithms.corrector.types import NLSStatus, NonlinearSolverType
from stiffnls.utils.log_config import logger


class NewtonSolver(_NonlinearSolverBackend):
    """Modified Newton solver of type ``ROOTFIND``.

    Parameters
    ----------
    maxiters : int, default 3
        Iteration cap; overwritten by the binding with the integrator's
        configured value.

    Attributes
    ----------
    jcur : bool
        Whether the Jacobian data used by the last setup is current.
    """

    def __init__(self, maxiters: int = 3) -> None:
        super().__init__(maxiters)
        self.jcur = False

    def get_type(self) -> NonlinearSolverType:
        return NonlinearSolverType.ROOTFIND

    def initialize(self) -> NLSStatus:
        if self._lsolve_fn is None:
            logger.error("NewtonSolver requires a linear solve function")
            return NLSStatus.ILL_INPUT
        self.jcur = False
        return super().initialize()

    def solve(
        self,
        ycor: np.ndarray,
        tol: float,
        weights: np.ndarray,
        ctx: CorrectorAttempt,
        call_lsetup: bool = False,
    ) -> NLSStatus:
        """Run the Newton iteration on *ycor* in place.

        Returns ``SUCCESS`` on convergence; otherwise the first non-success
        status of a callback, or ``CONV_RECVR`` when the iteration cap is
        reached.
        """
        if self._sys_fn is None or self._lsolve_fn is None or self._ctest_fn is None:
            process_error(ctx.mem if ctx is not None else None, logging.ERROR,
                          "NEWTON", "solve", "System, linear solve and test functions must be set.")
            return NLSStatus.ILL_INPUT

        y0 = ycor.copy()
        delta = np.zeros_like(ycor)
        jbad = False

        while True:
            self._curiter = 0

            status = self._sys_fn(ycor, delta, ctx)
            if status is not NLSStatus.SUCCESS:
                break

            if call_lsetup and self._lsetup_fn is not None:
                status, self.jcur = self._lsetup_fn(ycor, delta, jbad, ctx)
                if status is not NLSStatus.SUCCESS:
                    break

            status = self._iterate(ycor, delta, tol, weights, ctx)
            if status is NLSStatus.SUCCESS:
                self.jcur = False
                return status

            # Recoverable failure with stale Jacobian data: refresh and retry
            if status.is_recoverable and not self.jcur and self._lsetup_fn is not None:
                self.nconvfails += 1
                call_lsetup = True
                jbad = True
                ycor[:] = y0
                logger.debug("Newton retry with fresh Jacobian after %s", status)
                continue
            break

        self.nconvfails += 1
        return status

    def _iterate(self, ycor, delta, tol, weights, ctx) -> NLSStatus:
        """Newton iterations from a freshly evaluated residual in *delta*."""
        while True:
            self.niters += 1

            np.negative(delta, out=delta)
            status = self._lsolve_fn(ycor, delta, ctx)
            if status is not NLSStatus.SUCCESS:
                return status

            ycor += delta

            status = self._ctest_fn(self, ycor, delta, tol, weights, ctx)
            if status is not NLSStatus.CONTINUE:
                return status

            self._curiter += 1
            if self._curiter >= self._maxiters:
                return NLSStatus.CONV_RECVR

            status = self._sys_fn(ycor, delta, ctx)
            if status is not NLSStatus.SUCCESS:
                return status
