"""
Custom exceptions for keplerkit.

This module defines domain-specific exceptions used throughout the library
to provide clear error context and enable precise error handling.
"""


class KeplerKitError(Exception):
    """Base exception for all keplerkit-specific errors."""
    pass


class InvalidBodyError(KeplerKitError):
    """Raised when a gravitating body has non-positive mass, radius or G."""
    pass


class InvalidElementsError(KeplerKitError):
    """Raised when orbital elements are inconsistent with the requested orbit class."""
    pass


class NumericalInstabilityError(KeplerKitError):
    """Raised when numerical computations hit a degenerate denominator."""
    pass


class AnomalyOutOfRangeError(NumericalInstabilityError):
    """Raised when a true anomaly lies outside the reachable arc of an unbound orbit."""
    pass


class InvalidAnomalyError(KeplerKitError):
    """Raised when an anomaly record carries a negative time."""
    pass


class PropagationError(KeplerKitError):
    """Base exception for anomaly propagation failures."""
    pass


class DidNotConvergeError(PropagationError):
    """
    Raised when Newton-Raphson iteration exceeds its iteration bound.

    The last iterate and its residual are kept for diagnostics.
    """

    def __init__(self, message: str, last_iterate: float, residual: float, iterations: int):
        super().__init__(message)
        self.last_iterate = last_iterate
        self.residual = residual
        self.iterations = iterations


class NegativeTimeDeltaError(PropagationError):
    """Raised when a negative time step is requested; reverse propagation is unsupported."""

    def __init__(self, time_delta_ms: int):
        super().__init__(f"Time delta must be non-negative, got {time_delta_ms} ms")
        self.time_delta_ms = time_delta_ms


__all__ = [
    'KeplerKitError',
    'InvalidBodyError',
    'InvalidElementsError',
    'NumericalInstabilityError',
    'AnomalyOutOfRangeError',
    'InvalidAnomalyError',
    'PropagationError',
    'DidNotConvergeError',
    'NegativeTimeDeltaError'
]
