"""Attach a pluggable nonlinear solver to an integrator memory.

:func:`set_nonlinear_solver` validates a candidate solver, releases the
previously bound one and wires the corrector equation, convergence test
and iteration cap into it. :func:`nls_init` runs at every integration
setup and wires the linear-system wrappers when the integrator has a
linear solver attached.
"""

import logging
from typing import Any, Optional

from stiffnls.algorithms.corrector.convergence import nls_conv_test
from stiffnls.algorithms.corrector.linsys import nls_lsetup, nls_lsolve
from stiffnls.algorithms.corrector.memory import (IntegratorMemory,
                                                  process_error)
from stiffnls.algorithms.corrector.protocols import (NonlinearSolverProtocol,
                                                     missing_operations)
from stiffnls.algorithms.corrector.residual import (nls_fp_function,
                                                    nls_residual)
from stiffnls.algorithms.corrector.types import NLSStatus, NonlinearSolverType
from stiffnls.algorithms.utils.exceptions import (ConfigurationError,
                                                  NLSInitError)
from stiffnls.utils.log_config import logger

_COMPONENT = "CORRECTOR"

_SYSTEM_FUNCTIONS = {
    NonlinearSolverType.ROOTFIND: nls_residual,
    NonlinearSolverType.FIXEDPOINT: nls_fp_function,
}


def _fail(mem: Optional[IntegratorMemory], operation: str, message: str, exc_type=ConfigurationError):
    process_error(mem, logging.ERROR, _COMPONENT, operation, message)
    return exc_type(message)


def _wire(mem: IntegratorMemory, nls: Any, setter: str, value: Any, operation: str, message: str,
          exc_type=ConfigurationError) -> None:
    """Call ``nls.<setter>(value)`` and raise *exc_type* unless it succeeds."""
    fn = getattr(nls, setter, None)
    if not callable(fn):
        raise _fail(mem, operation, f"{message}: solver has no '{setter}' operation.", exc_type)
    status = fn(value)
    if status is not NLSStatus.SUCCESS:
        raise _fail(mem, operation, f"{message} (status {status}).", exc_type)


def set_nonlinear_solver(mem: IntegratorMemory, nls: NonlinearSolverProtocol) -> None:
    """Bind *nls* to *mem* as its corrector solver.

    Parameters
    ----------
    mem : IntegratorMemory
        Integrator memory receiving the solver.
    nls : NonlinearSolverProtocol
        Candidate solver. Must provide ``get_type``, ``initialize``,
        ``solve``, ``free`` and ``set_sys_fn``.

    Raises
    ------
    ConfigurationError
        If *mem* or *nls* is ``None``, an operation is missing, the declared
        type is neither ``ROOTFIND`` nor ``FIXEDPOINT``, or one of the
        wiring calls fails. The first three leave *mem* untouched; a
        wiring failure leaves *nls* bound but unusable.

    Notes
    -----
    The candidate's type is checked before the previous solver is
    released, so a rejected candidate never leaves *mem* without a solver.
    """
    if mem is None:
        raise _fail(None, "set_nonlinear_solver", "Integrator memory is None.")

    if nls is None:
        raise _fail(mem, "set_nonlinear_solver", "The nonlinear solver must not be None.")

    missing = missing_operations(nls)
    if missing:
        raise _fail(mem, "set_nonlinear_solver",
                    f"The nonlinear solver does not support required operations: {', '.join(missing)}.")

    nls_type = nls.get_type()
    sys_fn = _SYSTEM_FUNCTIONS.get(nls_type)
    if sys_fn is None:
        raise _fail(mem, "set_nonlinear_solver", f"Invalid nonlinear solver type: {nls_type!r}.")

    if mem.nls is not None and mem.nls is not nls:
        logger.debug("Releasing previously bound nonlinear solver %r", mem.nls)
        mem.nls.free()
    mem.nls = nls

    _wire(mem, nls, "set_sys_fn", sys_fn, "set_nonlinear_solver",
          "Setting nonlinear system function failed")
    _wire(mem, nls, "set_conv_test_fn", nls_conv_test, "set_nonlinear_solver",
          "Setting convergence test function failed")
    _wire(mem, nls, "set_max_iters", mem.config.max_iters, "set_nonlinear_solver",
          "Setting maximum number of nonlinear iterations failed")

    logger.debug("Bound %s nonlinear solver %r (max_iters=%d)",
                 nls_type.name, nls, mem.config.max_iters)


def nls_init(mem: IntegratorMemory) -> None:
    """Initialize the bound solver for a new integration.

    Wires :func:`~stiffnls.algorithms.corrector.linsys.nls_lsetup` and
    :func:`~stiffnls.algorithms.corrector.linsys.nls_lsolve` when *mem*
    carries the corresponding linear solver callback, ``None`` otherwise,
    then calls the solver's own ``initialize``.

    Raises
    ------
    NLSInitError
        If no solver is bound, a wiring call fails, or ``initialize`` does
        not return ``SUCCESS``.
    """
    if mem is None:
        raise _fail(None, "nls_init", "Integrator memory is None.", NLSInitError)
    if mem.nls is None:
        raise _fail(mem, "nls_init", "No nonlinear solver is bound.", NLSInitError)

    _wire(mem, mem.nls, "set_lsetup_fn", nls_lsetup if mem.lsetup is not None else None,
          "nls_init", "Setting the linear solver setup function failed", NLSInitError)
    _wire(mem, mem.nls, "set_lsolve_fn", nls_lsolve if mem.lsolve is not None else None,
          "nls_init", "Setting linear solver solve function failed", NLSInitError)

    status = mem.nls.initialize()
    if status is not NLSStatus.SUCCESS:
        raise _fail(mem, "nls_init", f"The nonlinear solver's init routine failed (status {status}).",
                    NLSInitError)

    logger.debug("Initialized nonlinear solver %r (linear solver attached: %s)",
                 mem.nls, mem.lsetup is not None)
