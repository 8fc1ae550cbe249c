from typing import Optional, Protocol, runtime_checkable

import numpy as np

from stiffnls.algorithms.corrector.memory import CorrectorAttempt
from stiffnls.algorithms.corrector.types import (ConvTestFn, NLSLSetupFn,
                                                 NLSLSolveFn, NLSStatus,
                                                 NonlinearSolverType, SysFn)

#: Operations a nonlinear solver must provide to be bound to an integrator.
REQUIRED_OPERATIONS = ("get_type", "initialize", "solve", "free", "set_sys_fn")


@runtime_checkable
class NonlinearSolverProtocol(Protocol):
    """Protocol for pluggable nonlinear solvers driving the corrector.

    A solver iterates on the correction vector, calling back into the
    system function installed with :meth:`set_sys_fn`, the optional linear
    setup/solve wrappers, and the convergence test after every iterate.
    Only :data:`REQUIRED_OPERATIONS` are checked at binding time; the
    remaining setters are needed by the wiring that follows.
    """

    def get_type(self) -> NonlinearSolverType:
        """Return the declared solver kind."""
        ...

    def initialize(self) -> NLSStatus:
        """Prepare the solver for a new integration."""
        ...

    def solve(
        self,
        ycor: np.ndarray,
        tol: float,
        weights: np.ndarray,
        ctx: CorrectorAttempt,
        call_lsetup: bool = False,
    ) -> NLSStatus:
        """Solve for the correction in place of *ycor*.

        Parameters
        ----------
        ycor : np.ndarray
            Initial guess on entry, final iterate on exit.
        tol : float
            Tolerance handed to the convergence test.
        weights : np.ndarray
            Error weights handed to the convergence test.
        ctx : CorrectorAttempt
            Per-solve context forwarded to every callback.
        call_lsetup : bool, default False
            Whether the linear setup must run before the first linear solve.

        Returns
        -------
        NLSStatus
            ``SUCCESS`` on convergence, a recoverable status to request a
            retry of the step, or a fatal status.
        """
        ...

    def free(self) -> None:
        """Release the solver's resources."""
        ...

    def set_sys_fn(self, fn: SysFn) -> NLSStatus:
        ...

    def set_conv_test_fn(self, fn: ConvTestFn) -> NLSStatus:
        ...

    def set_lsetup_fn(self, fn: Optional[NLSLSetupFn]) -> NLSStatus:
        ...

    def set_lsolve_fn(self, fn: Optional[NLSLSolveFn]) -> NLSStatus:
        ...

    def set_max_iters(self, maxiters: int) -> NLSStatus:
        ...

    def get_cur_iter(self) -> int:
        """Return the zero-based index of the current iteration."""
        ...


def missing_operations(candidate: object) -> tuple[str, ...]:
    """Return the required operations *candidate* does not provide as callables."""
    return tuple(
        name for name in REQUIRED_OPERATIONS
        if not callable(getattr(candidate, name, None))
    )
