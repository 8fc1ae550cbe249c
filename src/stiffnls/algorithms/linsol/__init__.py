"""Linear solvers that plug into :class:`~stiffnls.algorithms.corrector.memory.IntegratorMemory`."""

from .config import DenseLinearSolverConfig
from .dense import DenseLinearSolver

__all__ = [
    "DenseLinearSolver",
    "DenseLinearSolverConfig",
]
