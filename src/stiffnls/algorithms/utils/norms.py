"""Weighted norms used by the corrector convergence test."""

import numpy as np
from numba import njit

from stiffnls.algorithms.utils.config import FASTMATH


@njit(fastmath=FASTMATH, cache=False)
def _wrms_kernel(x: np.ndarray, w: np.ndarray) -> float:
    n = x.shape[0]
    acc = 0.0
    for i in range(n):
        prod = x[i] * w[i]
        acc += prod * prod
    return np.sqrt(acc / n)


def wrms_norm(x: np.ndarray, w: np.ndarray) -> float:
    """Return the weighted root-mean-square norm of *x*.

    .. math::

        \\|x\\|_{w} = \\sqrt{\\frac{1}{n}\\sum_i (x_i w_i)^2}

    Parameters
    ----------
    x : numpy.ndarray
        Vector to measure, shape ``(n,)``.
    w : numpy.ndarray
        Positive error weights, shape ``(n,)``.

    Returns
    -------
    float
        The weighted RMS norm. Zero for an empty vector.
    """
    x = np.ascontiguousarray(x, dtype=np.float64)
    w = np.ascontiguousarray(w, dtype=np.float64)
    if x.shape != w.shape:
        raise ValueError(f"Shape mismatch: vector {x.shape} vs weights {w.shape}")
    if x.size == 0:
        return 0.0
    return float(_wrms_kernel(x, w))
