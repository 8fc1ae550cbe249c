"""Configuration for the dense direct linear solver."""

from dataclasses import dataclass
from typing import Literal

from stiffnls.algorithms.types.configs import _NLSBaseConfig
from stiffnls.algorithms.utils.config import DGMAX_JBAD, MSBJ


@dataclass(frozen=True)
class DenseLinearSolverConfig(_NLSBaseConfig):
    """Configuration for :class:`~stiffnls.algorithms.linsol.dense.DenseLinearSolver`.

    Parameters
    ----------
    msbj : int, default=51
        Maximum number of steps between Jacobian evaluations.
    dgmax_jbad : float, default=0.2
        When the nonlinear solver reports bad Jacobian data, the Jacobian is
        only re-evaluated if ``|gamma/gammap - 1|`` is below this value;
        otherwise refactoring with the new ``gamma`` is tried first.
    lmm : {'bdf', 'adams'}, default='bdf'
        Linear multistep family. For BDF the solution is scaled by
        ``2/(1 + gamrat)`` to compensate for a stale ``gamma`` in ``M``.
    """
    msbj: int = MSBJ
    dgmax_jbad: float = DGMAX_JBAD
    lmm: Literal["bdf", "adams"] = "bdf"

    def _validate(self) -> None:
        """Validate the configuration."""
        if not isinstance(self.msbj, int) or self.msbj < 1:
            raise ValueError(f"msbj must be a positive integer, got {self.msbj}")
        if self.dgmax_jbad <= 0.0:
            raise ValueError(f"dgmax_jbad must be positive, got {self.dgmax_jbad}")
        if self.lmm not in ("bdf", "adams"):
            raise ValueError(f"Invalid lmm: {self.lmm}. Must be 'bdf' or 'adams'.")
