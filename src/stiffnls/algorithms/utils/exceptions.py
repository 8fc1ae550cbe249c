"""
Custom exceptions for the algorithms package.
"""

class StiffNLSError(Exception):
    """Base exception for stiffnls errors.
    
    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ConfigurationError(StiffNLSError):
    """Raised when a nonlinear solver cannot be bound or wired.

    Covers a missing integrator memory or solver handle, a solver lacking
    one of the required operations, an unknown solver type and any failed
    wiring call. Never retried.
    
    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)


class NLSInitError(ConfigurationError):
    """Raised when the per-setup nonlinear solver initialization fails.
    
    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)
