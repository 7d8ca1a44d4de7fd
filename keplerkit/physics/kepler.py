"""
Keplerian anomaly calculations for every conic class.

This module implements numerical solutions to Kepler's equation (elliptic and
hyperbolic), the closed-form solution of Barker's equation (parabolic), and
the closed-form conversions between true, eccentric and mean anomaly.

Functions:
    solve_kepler: Solves M = E - e*sin(E) using Newton-Raphson
    solve_hyperbolic_kepler: Solves M = e*sinh(F) - F using Newton-Raphson
    solve_barker: Solves M = D + D^3/3 in closed form
    *_from_true / true_from_*: Anomaly conversions for each conic

Dependencies:
    numpy: Vectorized numerical operations
    logging: Convergence information and warnings
"""

import logging
import numpy as np
from typing import Union, Optional

from ..config import (
    TWO_PI,
    DEFAULT_KEPLER_TOLERANCE,
    DEFAULT_KEPLER_MAX_ITERATIONS,
    HIGH_ECCENTRICITY_THRESHOLD,
    HIGH_E_COEFFICIENT,
    HYPERBOLIC_SEED_OFFSET,
    DANGEROUS_ECCENTRICITY_WARNING,
    KEPLER_LOGGING_PRECISION
)
from ..exceptions import (
    InvalidElementsError,
    DidNotConvergeError,
    AnomalyOutOfRangeError
)

# Configure scientific logging
logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]


def _finish(result: np.ndarray, input_is_scalar: bool) -> ArrayLike:
    # Return scalar if input was scalar (consistent API)
    if input_is_scalar:
        return float(np.asarray(result).item())
    return result


def wrap_to_pi(angle_rad: ArrayLike) -> ArrayLike:
    """
    Wrap angle to [-π, π).

    Angles already in range are returned bit for bit: near e = 1 the
    eccentric anomaly amplifies any rounding of a small mean anomaly.
    """
    input_is_scalar = np.isscalar(angle_rad)
    angle = np.asarray(angle_rad, dtype=float)
    wrapped = angle % TWO_PI
    wrapped = np.where(wrapped >= np.pi, wrapped - TWO_PI, wrapped)
    wrapped = np.where((angle >= -np.pi) & (angle < np.pi), angle, wrapped)
    return _finish(wrapped, input_is_scalar)


def _newton(residual, derivative, x: np.ndarray, target: np.ndarray,
            tol: float, max_iter: int, label: str, e: float) -> np.ndarray:
    """
    Masked Newton-Raphson iteration shared by the elliptic and hyperbolic solvers.

    Raises:
        DidNotConvergeError: If any element is still moving after max_iter steps.
    """
    converged = np.zeros(x.shape, dtype=bool)
    iterations = 0

    for _ in range(max_iter):
        mask = ~converged

        if not np.any(mask):
            break
        iterations += 1

        f_x = residual(x[mask], target[mask])
        f_prime_x = derivative(x[mask])

        # The correction step
        delta = f_x / f_prime_x

        x[mask] -= delta

        # Check for convergence: if the correction step is smaller than the tolerance.
        converged[mask] = np.abs(delta) < tol

    if not np.all(converged):
        worst = int(np.argmax(np.where(converged, 0.0, np.abs(residual(x, target)))))
        last_iterate = float(x[worst])
        last_residual = float(residual(x[worst:worst + 1], target[worst:worst + 1])[0])
        logger.error(
            f"{label} solver did not converge after {max_iter} iterations "
            f"(e={e:.{KEPLER_LOGGING_PRECISION}f}, last iterate={last_iterate:.12g}, "
            f"residual={last_residual:.3e})"
        )
        raise DidNotConvergeError(
            f"{label} solver did not converge within {max_iter} iterations",
            last_iterate=last_iterate,
            residual=last_residual,
            iterations=max_iter
        )

    logger.debug(f"{label} solver converged in {iterations} iterations (e={e:.{KEPLER_LOGGING_PRECISION}f})")
    return x


def solve_kepler(M_rad: ArrayLike,
                 e: float,
                 tol: Optional[float] = None,
                 max_iter: Optional[int] = None,
                 e_threshold: Optional[float] = None,
                 coeff_high_e: Optional[float] = None) -> ArrayLike:
    """
    Solves Kepler's equation (M = E - e*sin(E)) for Eccentric Anomaly (E)
    using the Newton-Raphson method with a hybrid initial guess strategy.

    Operates vectorized on arrays. Uses centralized configuration from
    config.py when optional arguments are omitted.

    Args:
        M_rad: Mean anomaly in radians. Can be a scalar or numpy array.
        e: Eccentricity of the orbit (0 <= e < 1).
        tol: Newton step tolerance. Uses DEFAULT_KEPLER_TOLERANCE if None.
        max_iter: Maximum number of iterations. Uses DEFAULT_KEPLER_MAX_ITERATIONS if None.
        e_threshold: Eccentricity above which the high-e starter is used.
        coeff_high_e: Coefficient for the high-eccentricity starter.

    Returns:
        The Eccentric Anomaly (E) in radians, in [-π, π). Same shape as input M_rad.

    Raises:
        InvalidElementsError: If eccentricity is outside [0, 1).
        DidNotConvergeError: If the iteration bound is exceeded.

    Notes:
        - Below e_threshold the starter is E0 = M + e*sin(M)*(1 + e*cos(M))
        - Above it, Danby's starter E0 = M + 0.85*e*sign(sin M) keeps the
          iteration monotone near periapsis for e -> 1
    """
    tol = tol if tol is not None else DEFAULT_KEPLER_TOLERANCE
    max_iter = max_iter if max_iter is not None else DEFAULT_KEPLER_MAX_ITERATIONS
    e_threshold = e_threshold if e_threshold is not None else HIGH_ECCENTRICITY_THRESHOLD
    coeff_high_e = coeff_high_e if coeff_high_e is not None else HIGH_E_COEFFICIENT

    if not (0.0 <= e < 1.0):
        raise InvalidElementsError(f"Eccentricity {e:.{KEPLER_LOGGING_PRECISION}f} outside elliptic range [0, 1)")

    if e > DANGEROUS_ECCENTRICITY_WARNING:
        logger.warning(f"High eccentricity {e:.{KEPLER_LOGGING_PRECISION}f} may slow convergence")

    input_is_scalar = np.isscalar(M_rad)

    M_rad = np.asarray(M_rad, dtype=float)
    original_shape = M_rad.shape
    M_norm = np.atleast_1d(wrap_to_pi(M_rad.flatten()))

    # Initial guess strategy based on eccentricity
    if e < e_threshold:
        E = M_norm + e * np.sin(M_norm) * (1.0 + e * np.cos(M_norm))
    else:
        E = M_norm + coeff_high_e * e * np.sign(np.sin(M_norm))

    E = _newton(
        lambda x, m: x - e * np.sin(x) - m,
        lambda x: 1.0 - e * np.cos(x),
        E, M_norm, tol, max_iter, "Elliptic Kepler", e
    )

    return _finish(E.reshape(original_shape), input_is_scalar)


def solve_hyperbolic_kepler(M: ArrayLike,
                            e: float,
                            tol: Optional[float] = None,
                            max_iter: Optional[int] = None) -> ArrayLike:
    """
    Solves the hyperbolic Kepler equation (M = e*sinh(F) - F) for the
    hyperbolic anomaly F using Newton-Raphson.

    Args:
        M: Hyperbolic mean anomaly (unbounded). Scalar or numpy array.
        e: Eccentricity (e > 1).
        tol: Newton step tolerance. Uses DEFAULT_KEPLER_TOLERANCE if None.
        max_iter: Maximum number of iterations. Uses DEFAULT_KEPLER_MAX_ITERATIONS if None.

    Returns:
        Hyperbolic anomaly F with the sign of M.

    Raises:
        InvalidElementsError: If e <= 1.
        DidNotConvergeError: If the iteration bound is exceeded.
    """
    tol = tol if tol is not None else DEFAULT_KEPLER_TOLERANCE
    max_iter = max_iter if max_iter is not None else DEFAULT_KEPLER_MAX_ITERATIONS

    if not e > 1.0:
        raise InvalidElementsError(f"Eccentricity {e:.{KEPLER_LOGGING_PRECISION}f} outside hyperbolic range (1, inf)")

    input_is_scalar = np.isscalar(M)

    M = np.asarray(M, dtype=float)
    original_shape = M.shape
    M_flat = np.atleast_1d(M.flatten())

    # Standard hyperbolic starter
    F = np.sign(M_flat) * np.log(2.0 * np.abs(M_flat) / e + HYPERBOLIC_SEED_OFFSET)

    F = _newton(
        lambda x, m: e * np.sinh(x) - x - m,
        lambda x: e * np.cosh(x) - 1.0,
        F, M_flat, tol, max_iter, "Hyperbolic Kepler", e
    )

    return _finish(F.reshape(original_shape), input_is_scalar)


def solve_barker(M: ArrayLike) -> ArrayLike:
    """
    Solves Barker's equation M = D + D^3/3 for the parabolic parameter D.

    The cubic has a single real root, D = 2*sinh(asinh(3M/2)/3), which is
    exact, odd in M and free of the cancellation in the Cardano form.
    """
    input_is_scalar = np.isscalar(M)
    D = 2.0 * np.sinh(np.arcsinh(1.5 * np.asarray(M, dtype=float)) / 3.0)
    return _finish(D, input_is_scalar)


# --- Elliptic conversions ---

def eccentric_from_true(nu_rad: ArrayLike, e: float) -> ArrayLike:
    """Eccentric anomaly from true anomaly; quadrant follows nu, result in (-π, π]."""
    input_is_scalar = np.isscalar(nu_rad)
    half = np.asarray(nu_rad, dtype=float) / 2.0
    E = 2.0 * np.arctan2(np.sqrt(1.0 - e) * np.sin(half), np.sqrt(1.0 + e) * np.cos(half))
    return _finish(E, input_is_scalar)


def true_from_eccentric(E_rad: ArrayLike, e: float) -> ArrayLike:
    """True anomaly from eccentric anomaly; quadrant follows E, result in (-π, π]."""
    input_is_scalar = np.isscalar(E_rad)
    half = np.asarray(E_rad, dtype=float) / 2.0
    nu = 2.0 * np.arctan2(np.sqrt(1.0 + e) * np.sin(half), np.sqrt(1.0 - e) * np.cos(half))
    return _finish(nu, input_is_scalar)


def mean_from_eccentric(E_rad: ArrayLike, e: float) -> ArrayLike:
    """Kepler's equation, forward direction."""
    return E_rad - e * np.sin(E_rad)


# --- Hyperbolic conversions ---

def asymptote_true_anomaly(e: float) -> float:
    """Limiting true anomaly of a hyperbola, acos(-1/e)."""
    return float(np.arccos(-1.0 / e))


def hyperbolic_from_true(nu_rad: ArrayLike, e: float) -> ArrayLike:
    """
    Hyperbolic anomaly F from true anomaly.

    Raises:
        AnomalyOutOfRangeError: If |nu| is at or beyond the asymptote.
    """
    input_is_scalar = np.isscalar(nu_rad)
    nu = np.asarray(nu_rad, dtype=float)
    nu_inf = asymptote_true_anomaly(e)
    if np.any(np.abs(nu) >= nu_inf):
        raise AnomalyOutOfRangeError(
            f"True anomaly outside hyperbolic range (-{nu_inf:.6f}, {nu_inf:.6f}) for e={e}"
        )
    F = 2.0 * np.arctanh(np.sqrt((e - 1.0) / (e + 1.0)) * np.tan(nu / 2.0))
    return _finish(F, input_is_scalar)


def true_from_hyperbolic(F: ArrayLike, e: float) -> ArrayLike:
    """True anomaly from hyperbolic anomaly, in (-acos(-1/e), acos(-1/e))."""
    input_is_scalar = np.isscalar(F)
    nu = 2.0 * np.arctan(np.sqrt((e + 1.0) / (e - 1.0)) * np.tanh(np.asarray(F, dtype=float) / 2.0))
    return _finish(nu, input_is_scalar)


def mean_from_hyperbolic(F: ArrayLike, e: float) -> ArrayLike:
    """Hyperbolic Kepler equation, forward direction."""
    return e * np.sinh(F) - F


# --- Parabolic conversions ---

def barker_from_true(nu_rad: ArrayLike) -> ArrayLike:
    """
    Barker parameter D = tan(nu/2).

    Raises:
        AnomalyOutOfRangeError: If |nu| >= π (the parabola's asymptotic direction).
    """
    input_is_scalar = np.isscalar(nu_rad)
    nu = np.asarray(nu_rad, dtype=float)
    if np.any(np.abs(nu) >= np.pi):
        raise AnomalyOutOfRangeError("True anomaly outside parabolic range (-π, π)")
    return _finish(np.tan(nu / 2.0), input_is_scalar)


def true_from_barker(D: ArrayLike) -> ArrayLike:
    input_is_scalar = np.isscalar(D)
    return _finish(2.0 * np.arctan(np.asarray(D, dtype=float)), input_is_scalar)


def mean_from_barker(D: ArrayLike) -> ArrayLike:
    return D + D ** 3 / 3.0
