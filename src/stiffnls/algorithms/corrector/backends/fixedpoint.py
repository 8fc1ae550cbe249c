"""Provide plain fixed-point iteration for the corrector equation."""

import logging

import numpy as np

from stiffnls.algorithms.corrector.backends.base import \
    _NonlinearSolverBackend
from stiffnls.algorithms.corrector.memory import (CorrectorAttempt,
                                                  process_error)
from stiffnls.algorithms.corrector.types import NLSStatus, NonlinearSolverType


class FixedPointSolver(_NonlinearSolverBackend):
    """Functional iteration ``ycor <- G(ycor)`` of type ``FIXEDPOINT``.

    No linear solver is used; any linear setup/solve functions installed on
    the solver are ignored. Suitable for non-stiff problems, typically
    with Adams-Moulton formulas.
    """

    def get_type(self) -> NonlinearSolverType:
        return NonlinearSolverType.FIXEDPOINT

    def solve(
        self,
        ycor: np.ndarray,
        tol: float,
        weights: np.ndarray,
        ctx: CorrectorAttempt,
        call_lsetup: bool = False,
    ) -> NLSStatus:
        """Iterate on *ycor* in place until the convergence test accepts it.

        Returns ``SUCCESS``, a callback failure status, or ``CONV_RECVR``
        on divergence or when the iteration cap is reached.
        """
        if self._sys_fn is None or self._ctest_fn is None:
            process_error(ctx.mem if ctx is not None else None, logging.ERROR,
                          "FIXEDPOINT", "solve", "System and test functions must be set.")
            return NLSStatus.ILL_INPUT

        yprev = np.empty_like(ycor)
        delta = np.empty_like(ycor)
        status = NLSStatus.CONV_RECVR

        for curiter in range(self._maxiters):
            self._curiter = curiter
            self.niters += 1

            yprev[:] = ycor
            status = self._sys_fn(yprev, ycor, ctx)
            if status is not NLSStatus.SUCCESS:
                break

            np.subtract(ycor, yprev, out=delta)

            status = self._ctest_fn(self, ycor, delta, tol, weights, ctx)
            if status is NLSStatus.SUCCESS:
                return status
            if status is not NLSStatus.CONTINUE:
                break
        else:
            status = NLSStatus.CONV_RECVR

        self.nconvfails += 1
        return status
