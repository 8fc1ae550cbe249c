"""Provide a dense direct linear solver for the Newton corrector.

The solver factors the Newton matrix

.. math::

    M = I - \\gamma J, \\qquad J = \\partial f / \\partial y

with an LU decomposition and reuses the saved Jacobian across steps until
it is judged stale.
"""

import logging
import warnings
from typing import Callable, Optional, Tuple, Union

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

from stiffnls.algorithms.corrector.memory import (IntegratorMemory,
                                                  process_error)
from stiffnls.algorithms.corrector.types import CallbackStatus, ConvFailure
from stiffnls.algorithms.linsol.config import DenseLinearSolverConfig
from stiffnls.algorithms.utils.norms import wrms_norm
from stiffnls.utils.log_config import logger

#: Jacobian ``jac(t, y, fy) -> (J, status)`` with ``J`` of shape ``(n, n)``.
JacobianFn = Callable[[float, np.ndarray, np.ndarray], Tuple[np.ndarray, Union[CallbackStatus, int]]]

_MIN_INC_MULT = 1000.0


class DenseLinearSolver:
    """Dense LU solver providing the integrator's ``lsetup``/``lsolve``.

    Parameters
    ----------
    jac : JacobianFn, optional
        Analytic Jacobian. A difference-quotient approximation built from
        the integrator's right-hand side is used when omitted.
    config : DenseLinearSolverConfig, optional
        Jacobian reuse settings.

    Attributes
    ----------
    nje : int
        Number of Jacobian evaluations.
    nfe_dq : int
        Right-hand side calls spent on difference-quotient Jacobians.
    nstlj : int
        Step index at the last Jacobian evaluation.

    Examples
    --------
    >>> DenseLinearSolver(jac=my_jac).attach(mem)
    """

    def __init__(self, jac: Optional[JacobianFn] = None, config: Optional[DenseLinearSolverConfig] = None) -> None:
        self._jac = jac
        self.config = config if config is not None else DenseLinearSolverConfig()
        self._saved_j: Optional[np.ndarray] = None
        self._lu = None
        self.nje = 0
        self.nfe_dq = 0
        self.nstlj = 0

    def attach(self, mem: IntegratorMemory) -> "DenseLinearSolver":
        """Install this solver's callbacks on *mem*."""
        mem.lsetup = self.setup
        mem.lsolve = self.solve
        return self

    def _jacobian_is_stale(self, mem: IntegratorMemory, convfail: ConvFailure) -> bool:
        if self._saved_j is None or mem.nst == 0:
            return True
        if mem.nst >= self.nstlj + self.config.msbj:
            return True
        if convfail is ConvFailure.OTHER:
            return True
        if convfail is ConvFailure.BAD_J:
            dgamma = abs(mem.gamma / mem.gammap - 1.0) if mem.gammap != 0.0 else np.inf
            return dgamma < self.config.dgmax_jbad
        return False

    def _dq_jacobian(self, mem: IntegratorMemory, y: np.ndarray, fy: np.ndarray, ytmp: np.ndarray):
        """Column-wise forward difference approximation of ``df/dy``."""
        n = y.shape[0]
        uround = np.finfo(np.float64).eps
        srur = np.sqrt(uround)
        fnorm = wrms_norm(fy, mem.ewt)
        min_inc = _MIN_INC_MULT * abs(mem.h) * uround * n * fnorm if fnorm != 0.0 else 1.0

        J = np.empty((n, n))
        ytmp[:] = y
        for j in range(n):
            inc = max(srur * abs(y[j]), min_inc / mem.ewt[j])
            ytmp[j] = y[j] + inc
            ftmp, status = mem.f(mem.tn, ytmp)
            self.nfe_dq += 1
            status = CallbackStatus.coerce(status)
            ytmp[j] = y[j]
            if status is not CallbackStatus.SUCCESS:
                return status, None
            J[:, j] = (np.asarray(ftmp) - fy) / inc
        return CallbackStatus.SUCCESS, J

    def setup(
        self,
        mem: IntegratorMemory,
        convfail: ConvFailure,
        ypred: np.ndarray,
        fpred: np.ndarray,
        tmp1: np.ndarray,
        tmp2: np.ndarray,
        tmp3: np.ndarray,
    ) -> Tuple[CallbackStatus, bool]:
        """Evaluate or reuse the Jacobian and factor ``I - gamma*J``.

        Returns
        -------
        status : CallbackStatus
            ``RECOVERABLE`` for a singular matrix or a recoverable Jacobian
            failure, ``FATAL`` for an unrecoverable one.
        jcur : bool
            Whether the Jacobian was re-evaluated.
        """
        jcur = False
        if self._jacobian_is_stale(mem, convfail):
            if self._jac is not None:
                J, status = self._jac(mem.tn, ypred, fpred)
                status = CallbackStatus.coerce(status)
            else:
                status, J = self._dq_jacobian(mem, ypred, fpred, tmp1)
            if status is not CallbackStatus.SUCCESS:
                process_error(mem, logging.ERROR if status is CallbackStatus.FATAL else logging.WARNING,
                              "DENSE", "setup", f"At t = {mem.tn:g}, the Jacobian routine failed.")
                return status, False
            self._saved_j = np.array(J, dtype=np.float64, copy=True)
            self.nje += 1
            self.nstlj = mem.nst
            jcur = True

        M = np.eye(mem.n) - mem.gamma * self._saved_j
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", LinAlgWarning)
            lu, piv = lu_factor(M)
        if np.any(np.diag(lu) == 0.0):
            self._lu = None
            logger.debug("Singular Newton matrix at t=%g (gamma=%g)", mem.tn, mem.gamma)
            return CallbackStatus.RECOVERABLE, jcur

        self._lu = (lu, piv)
        return CallbackStatus.SUCCESS, jcur

    def solve(
        self,
        mem: IntegratorMemory,
        b: np.ndarray,
        weight: np.ndarray,
        ycur: np.ndarray,
        fcur: np.ndarray,
    ) -> CallbackStatus:
        """Overwrite *b* with ``M^{-1} b``."""
        if self._lu is None:
            process_error(mem, logging.ERROR, "DENSE", "solve", "The linear system has not been factored.")
            return CallbackStatus.FATAL

        b[:] = lu_solve(self._lu, b)

        if self.config.lmm == "bdf" and mem.gamrat != 1.0:
            b *= 2.0 / (1.0 + mem.gamrat)
        return CallbackStatus.SUCCESS
