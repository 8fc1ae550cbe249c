"""Corrector iteration for implicit multistep ODE integrators.

The :mod:`stiffnls` package solves the nonlinear corrector equation that an
implicit multistep formula (BDF or Adams-Moulton) produces at every
attempted time step, and decides whether the correction has converged,
diverged or needs more iterations.

See :mod:`stiffnls.algorithms.corrector` for the public API.
"""

__version__ = "0.1.0"
