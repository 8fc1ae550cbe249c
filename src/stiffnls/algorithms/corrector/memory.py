"""Integrator state read and written by the corrector components.

:class:`IntegratorMemory` holds the slice of an implicit multistep
integrator that the corrector needs: the history array, weights, scratch
vectors, method coefficients, counters and the bound nonlinear solver.
Predictor management and step-size control live with the integrator that
owns the memory; this module only describes the data they share.

:class:`CorrectorAttempt` is the per-solve context handed to every callback
of one corrector attempt.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import numpy as np

from stiffnls.algorithms.corrector.config import CorrectorConfig
from stiffnls.algorithms.corrector.types import (ConvFailure, ErrorHandler,
                                                 LSetupFn, LSolveFn, RhsFn)
from stiffnls.utils.log_config import logger

if TYPE_CHECKING:
    from stiffnls.algorithms.corrector.protocols import \
        NonlinearSolverProtocol


def _default_error_handler(severity: int, component: str, operation: str, message: str) -> None:
    """Forward an error report to the package logger."""
    logger.log(severity, "[%s] %s: %s", component, operation, message)


@dataclass(eq=False)
class IntegratorMemory:
    """Numerical state shared between an integrator and its corrector.

    Attributes
    ----------
    f : RhsFn
        Right-hand side ``f(t, y) -> (ydot, status)``.
    zn : list of numpy.ndarray
        History array; ``zn[0]`` is the predicted solution and ``zn[1]``
        the scaled predicted derivative.
    y : numpy.ndarray
        Current solution, rewritten as ``zn[0] + ycor`` on every evaluation.
    ewt : numpy.ndarray
        Error weights used by the weighted RMS norm.
    ftemp : numpy.ndarray
        Scratch vector holding the last right-hand side value.
    vtemp1, vtemp2, vtemp3 : numpy.ndarray
        General scratch vectors handed to the linear setup.
    acor : numpy.ndarray
        Correction vector solved for in each attempt.
    tn : float
        Current time.
    h : float
        Current step size.
    gamma : float
        Implicit method coefficient ``h*rl1``.
    gammap : float
        Value of ``gamma`` at the last linear setup.
    gamrat : float
        ``gamma/gammap``.
    rl1 : float
        Reciprocal of the leading method coefficient ``1/l[1]``.
    crate : float
        Contraction-rate estimate of the corrector iteration.
    acnrm : float
        Weighted norm of the accepted correction.
    nfe, nsetups, nstlp, nst : int
        Right-hand side evaluations, linear setups, step index at the last
        setup, and steps taken.
    jcur : bool
        Whether the Jacobian data used by the linear solver is current.
    convfail : ConvFailure
        Failure reason handed to the linear setup.
    lsetup, lsolve : callable or None
        Linear solver callbacks; both ``None`` for functional iteration.
    nls : NonlinearSolverProtocol or None
        The bound nonlinear solver.
    config : CorrectorConfig
        Convergence test constants and iteration cap.
    error_handler : ErrorHandler
        Sink receiving ``(severity, component, operation, message)``.
    """
    f: RhsFn
    zn: List[np.ndarray]
    y: np.ndarray
    ewt: np.ndarray
    ftemp: np.ndarray
    vtemp1: np.ndarray
    vtemp2: np.ndarray
    vtemp3: np.ndarray
    acor: np.ndarray
    tn: float = 0.0
    h: float = 0.0
    gamma: float = 0.0
    gammap: float = 0.0
    gamrat: float = 1.0
    rl1: float = 1.0
    crate: float = 1.0
    acnrm: float = 0.0
    nfe: int = 0
    nsetups: int = 0
    nstlp: int = 0
    nst: int = 0
    jcur: bool = False
    convfail: ConvFailure = ConvFailure.NO_FAILURES
    lsetup: Optional[LSetupFn] = None
    lsolve: Optional[LSolveFn] = None
    nls: Optional["NonlinearSolverProtocol"] = None
    config: CorrectorConfig = field(default_factory=CorrectorConfig)
    error_handler: ErrorHandler = _default_error_handler

    @classmethod
    def from_initial_state(
        cls,
        f: RhsFn,
        y0: np.ndarray,
        t0: float = 0.0,
        *,
        q_max: int = 5,
        config: Optional[CorrectorConfig] = None,
        error_handler: Optional[ErrorHandler] = None,
    ) -> "IntegratorMemory":
        """Allocate the history, weight and scratch vectors for *y0*.

        Parameters
        ----------
        f : RhsFn
            Right-hand side function.
        y0 : numpy.ndarray
            Initial state, shape ``(n,)``.
        t0 : float, default 0.0
            Initial time.
        q_max : int, default 5
            Maximum method order; ``q_max + 1`` history vectors are allocated.
        config : CorrectorConfig, optional
            Corrector configuration; defaults to :class:`CorrectorConfig`.
        error_handler : ErrorHandler, optional
            Error sink; defaults to logging through the package logger.
        """
        y0 = np.array(y0, dtype=np.float64)
        if y0.ndim != 1:
            raise ValueError(f"y0 must be one-dimensional, got shape {y0.shape}")
        if q_max < 1:
            raise ValueError(f"q_max must be at least 1, got {q_max}")

        zn = [np.zeros_like(y0) for _ in range(q_max + 1)]
        zn[0][:] = y0
        mem = cls(
            f=f,
            zn=zn,
            y=y0.copy(),
            ewt=np.ones_like(y0),
            ftemp=np.zeros_like(y0),
            vtemp1=np.zeros_like(y0),
            vtemp2=np.zeros_like(y0),
            vtemp3=np.zeros_like(y0),
            acor=np.zeros_like(y0),
            tn=float(t0),
            config=config if config is not None else CorrectorConfig(),
        )
        if error_handler is not None:
            mem.error_handler = error_handler
        return mem

    @property
    def n(self) -> int:
        """Problem dimension."""
        return self.y.shape[0]

    def new_attempt(self) -> "CorrectorAttempt":
        """Open the per-solve context for one corrector attempt."""
        return CorrectorAttempt(mem=self)


@dataclass(eq=False)
class CorrectorAttempt:
    """Context scoped to a single corrector solve.

    Passed as the user-data argument of every callback the nonlinear solver
    invokes during one attempt.

    Attributes
    ----------
    mem : IntegratorMemory
        The integrator state being corrected.
    delp : float
        Norm of the previous correction increment within this attempt.
    """
    mem: IntegratorMemory
    delp: float = 0.0


def process_error(mem: Optional[IntegratorMemory], severity: int, component: str, operation: str, message: str) -> None:
    """Report an error through the sink of *mem*, or the logger when absent."""
    handler = mem.error_handler if mem is not None else _default_error_handler
    handler(severity, component, operation, message)
