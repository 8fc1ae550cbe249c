"""Provide the corrector iteration of implicit multistep ODE integrators.

The :mod:`~stiffnls.algorithms.corrector` package connects a pluggable
nonlinear solver to the integrator state held in
:class:`~stiffnls.algorithms.corrector.memory.IntegratorMemory`:

- :mod:`~stiffnls.algorithms.corrector.residual` evaluates the corrector
  equation as a Newton residual or as a fixed-point map;
- :mod:`~stiffnls.algorithms.corrector.linsys` wraps the integrator's
  linear solver callbacks;
- :mod:`~stiffnls.algorithms.corrector.convergence` decides whether an
  iterate converged, diverged, or needs another iteration;
- :mod:`~stiffnls.algorithms.corrector.binding` validates a solver and
  wires the three pieces above into it.

Examples
--------
>>> mem = IntegratorMemory.from_initial_state(rhs, y0)
>>> set_nonlinear_solver(mem, FixedPointSolver())
>>> nls_init(mem)
>>> # the integrator sets zn, gamma, rl1, h, ewt and tn, then
>>> status = solve_corrector(mem, tol=0.1)
"""

from .backends import FixedPointSolver, NewtonSolver
from .binding import nls_init, set_nonlinear_solver
from .config import CorrectorConfig
from .convergence import classify_correction, nls_conv_test
from .driver import solve_corrector
from .linsys import nls_lsetup, nls_lsolve
from .memory import CorrectorAttempt, IntegratorMemory, process_error
from .protocols import NonlinearSolverProtocol
from .residual import nls_fp_function, nls_residual
from .types import (CallbackStatus, ConvergenceCheck, ConvergenceOutcome,
                    ConvFailure, NLSStatus, NonlinearSolverType, StepAttempt)

__all__ = [
    "IntegratorMemory",
    "CorrectorAttempt",
    "CorrectorConfig",
    "process_error",

    "CallbackStatus",
    "NLSStatus",
    "NonlinearSolverType",
    "ConvFailure",
    "StepAttempt",
    "ConvergenceOutcome",
    "ConvergenceCheck",

    "NonlinearSolverProtocol",
    "NewtonSolver",
    "FixedPointSolver",

    "nls_residual",
    "nls_fp_function",
    "nls_lsetup",
    "nls_lsolve",
    "nls_conv_test",
    "classify_correction",
    "set_nonlinear_solver",
    "nls_init",
    "solve_corrector",
]
