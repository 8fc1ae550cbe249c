from .base import _NonlinearSolverBackend
from .fixedpoint import FixedPointSolver
from .newton import NewtonSolver

__all__ = [
    "_NonlinearSolverBackend",
    "NewtonSolver",
    "FixedPointSolver",
]
