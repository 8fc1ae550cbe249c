"""Shared plumbing for the reference nonlinear solvers."""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from stiffnls.algorithms.corrector.memory import CorrectorAttempt
from stiffnls.algorithms.corrector.types import (ConvTestFn, NLSLSetupFn,
                                                 NLSLSolveFn, NLSStatus,
                                                 NonlinearSolverType, SysFn)
from stiffnls.algorithms.utils.config import NLS_MAXCOR


class _NonlinearSolverBackend(ABC):
    """Provide an abstract base class for nonlinear solvers.

    Stores the callbacks installed by the integrator, the iteration cap and
    the iteration counters. Subclasses implement :meth:`get_type` and
    :meth:`solve`.

    Attributes
    ----------
    niters : int
        Total nonlinear iterations over the solver's lifetime.
    nconvfails : int
        Total failed solves.
    """

    def __init__(self, maxiters: int = NLS_MAXCOR) -> None:
        self._sys_fn: Optional[SysFn] = None
        self._ctest_fn: Optional[ConvTestFn] = None
        self._lsetup_fn: Optional[NLSLSetupFn] = None
        self._lsolve_fn: Optional[NLSLSolveFn] = None
        self._maxiters = maxiters
        self._curiter = 0
        self.niters = 0
        self.nconvfails = 0
        self.freed = False

    @abstractmethod
    def get_type(self) -> NonlinearSolverType:
        ...

    @abstractmethod
    def solve(
        self,
        ycor: np.ndarray,
        tol: float,
        weights: np.ndarray,
        ctx: CorrectorAttempt,
        call_lsetup: bool = False,
    ) -> NLSStatus:
        ...

    def initialize(self) -> NLSStatus:
        """Reset the counters; requires the system and test functions."""
        if self._sys_fn is None or self._ctest_fn is None:
            return NLSStatus.ILL_INPUT
        self._curiter = 0
        self.niters = 0
        self.nconvfails = 0
        return NLSStatus.SUCCESS

    def free(self) -> None:
        self._sys_fn = self._ctest_fn = None
        self._lsetup_fn = self._lsolve_fn = None
        self.freed = True

    def set_sys_fn(self, fn: SysFn) -> NLSStatus:
        if fn is None:
            return NLSStatus.ILL_INPUT
        self._sys_fn = fn
        return NLSStatus.SUCCESS

    def set_conv_test_fn(self, fn: ConvTestFn) -> NLSStatus:
        if fn is None:
            return NLSStatus.ILL_INPUT
        self._ctest_fn = fn
        return NLSStatus.SUCCESS

    def set_lsetup_fn(self, fn: Optional[NLSLSetupFn]) -> NLSStatus:
        self._lsetup_fn = fn
        return NLSStatus.SUCCESS

    def set_lsolve_fn(self, fn: Optional[NLSLSolveFn]) -> NLSStatus:
        self._lsolve_fn = fn
        return NLSStatus.SUCCESS

    def set_max_iters(self, maxiters: int) -> NLSStatus:
        if maxiters < 1:
            return NLSStatus.ILL_INPUT
        self._maxiters = int(maxiters)
        return NLSStatus.SUCCESS

    def get_cur_iter(self) -> int:
        return self._curiter

    @property
    def max_iters(self) -> int:
        return self._maxiters

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(maxiters={self._maxiters})"
