import numpy as np
import pytest

from stiffnls.algorithms.corrector.memory import IntegratorMemory
from stiffnls.algorithms.corrector.types import CallbackStatus


class ErrorSink:
    """Collects error reports instead of logging them."""

    def __init__(self):
        self.records = []

    def __call__(self, severity, component, operation, message):
        self.records.append((severity, component, operation, message))

    @property
    def operations(self):
        return [r[2] for r in self.records]


def _linear_decay(t, y):
    return -y, CallbackStatus.SUCCESS


@pytest.fixture
def sink():
    return ErrorSink()


@pytest.fixture
def make_memory(sink):
    def _make(f=_linear_decay, y0=(1.0, 2.0, 3.0), **attrs):
        mem = IntegratorMemory.from_initial_state(f, np.asarray(y0, dtype=float), error_handler=sink)
        for name, value in attrs.items():
            setattr(mem, name, value)
        return mem
    return _make


@pytest.fixture
def backward_euler_memory(sink):
    """One backward Euler step of y' = -y from y = 1 with h = 0.1."""
    def _make(lam=1.0, h=0.1, y_n=1.0):
        def rhs(t, y):
            return -lam * y, CallbackStatus.SUCCESS

        mem = IntegratorMemory.from_initial_state(rhs, np.array([y_n]), error_handler=sink)
        mem.h = h
        mem.rl1 = 1.0
        mem.gamma = h
        mem.gammap = h
        mem.tn = h
        mem.zn[1][:] = h * (-lam * y_n)
        mem.zn[0][:] = y_n + mem.zn[1]
        mem.ewt[:] = 1.0e4
        return mem
    return _make
