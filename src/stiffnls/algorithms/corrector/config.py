"""Provide the configuration class for the corrector iteration.

The constants of the convergence test and of the linear-setup schedule
default to the values in :mod:`stiffnls.algorithms.utils.config`.
"""

from dataclasses import dataclass

from stiffnls.algorithms.types.configs import _NLSBaseConfig
from stiffnls.algorithms.utils.config import (CRDOWN, DGMAX, MSBP,
                                              NLS_MAXCOR, RDIV)


@dataclass(frozen=True)
class CorrectorConfig(_NLSBaseConfig):
    """Configuration for the corrector iteration.

    Parameters
    ----------
    max_iters : int, default=3
        Maximum number of nonlinear iterations per corrector attempt.
        Installed on the bound solver at binding time.
    crdown : float, default=0.3
        Decay factor of the contraction-rate estimate. On iteration
        ``m > 0`` the estimate becomes ``max(crdown*crate, del/delp)``.
    rdiv : float, default=2.0
        The iteration is declared divergent when ``del > rdiv*delp``.
    msbp : int, default=20
        Maximum number of steps between linear setups.
    dgmax : float, default=0.3
        A linear setup is forced when ``|gamma/gammap - 1| > dgmax``.

    Examples
    --------
    >>> config = CorrectorConfig()
    >>> tighter = config.merge(max_iters=5)
    """
    max_iters: int = NLS_MAXCOR
    crdown: float = CRDOWN
    rdiv: float = RDIV
    msbp: int = MSBP
    dgmax: float = DGMAX

    def _validate(self) -> None:
        """Validate the configuration."""
        if not isinstance(self.max_iters, int) or self.max_iters < 1:
            raise ValueError(f"max_iters must be a positive integer, got {self.max_iters}")
        if not (0.0 < self.crdown < 1.0):
            raise ValueError(f"crdown must lie in (0, 1), got {self.crdown}")
        if self.rdiv <= 1.0:
            raise ValueError(f"rdiv must exceed 1, got {self.rdiv}")
        if not isinstance(self.msbp, int) or self.msbp < 1:
            raise ValueError(f"msbp must be a positive integer, got {self.msbp}")
        if self.dgmax <= 0.0:
            raise ValueError(f"dgmax must be positive, got {self.dgmax}")
