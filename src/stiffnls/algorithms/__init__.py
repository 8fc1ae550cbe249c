""" Public API for the :mod:`~stiffnls.algorithms` package.
"""

from .corrector import (CorrectorAttempt, CorrectorConfig, FixedPointSolver,
                        IntegratorMemory, NewtonSolver, NLSStatus,
                        NonlinearSolverType, nls_init, set_nonlinear_solver,
                        solve_corrector)
from .linsol import DenseLinearSolver, DenseLinearSolverConfig

__all__ = [
    "CorrectorAttempt",
    "CorrectorConfig",
    "IntegratorMemory",
    "NLSStatus",
    "NonlinearSolverType",
    "NewtonSolver",
    "FixedPointSolver",
    "DenseLinearSolver",
    "DenseLinearSolverConfig",
    "set_nonlinear_solver",
    "nls_init",
    "solve_corrector",
]
