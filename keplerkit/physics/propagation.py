"""
Two-body anomaly propagation.

Advances a body along its orbit by elapsed time: the mean anomaly grows
linearly at the orbit's mean motion, and the class-specific transcendental
equation is inverted to recover the eccentric and true anomaly.

    Circular:   nu = E = M
    Elliptical: M = E - e*sin(E)          (Newton-Raphson)
    Parabolic:  M = D + D³/3              (closed form)
    Hyperbolic: M = e*sinh(F) - F         (Newton-Raphson)

The solver holds only its numerical settings; every call is a pure function
of its arguments and safe to use from any number of threads.
"""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Optional

from ..config import (
    TWO_PI,
    MILLISECONDS_PER_SECOND,
    DEFAULT_KEPLER_TOLERANCE,
    DEFAULT_KEPLER_MAX_ITERATIONS
)
from ..exceptions import NegativeTimeDeltaError, NumericalInstabilityError
from .anomaly import Anomaly
from .body import GravitatingBody
from .elements import OrbitClass
from .orbit import Orbit
from . import kepler

logger = logging.getLogger(__name__)


def split_revolutions(mean_anomaly: float) -> tuple:
    """
    Split an unwrapped mean anomaly into (revolutions, angle in [-π, π)).

    revolutions counts periapsis passages, so the angle is measured from the
    nearest one. A mean anomaly already in [-π, π) is returned untouched.
    """
    if -math.pi <= mean_anomaly < math.pi:
        return 0, mean_anomaly
    revolutions = math.floor(mean_anomaly / TWO_PI + 0.5)
    remainder = mean_anomaly - revolutions * TWO_PI
    if remainder >= math.pi:
        revolutions += 1
        remainder -= TWO_PI
    elif remainder < -math.pi:
        revolutions -= 1
        remainder += TWO_PI
    return revolutions, remainder


@dataclass(frozen=True)
class AnomalySolver:
    """
    Propagation engine for Keplerian anomalies.

    Args:
        tolerance: Newton step tolerance (rad). Uses DEFAULT_KEPLER_TOLERANCE if None.
        max_iterations: Newton iteration cap. Uses DEFAULT_KEPLER_MAX_ITERATIONS if None.
    """
    tolerance: Optional[float] = None
    max_iterations: Optional[int] = None

    def __post_init__(self):
        if self.tolerance is not None and not self.tolerance > 0:
            raise ValueError(f"Tolerance must be positive. Got: {self.tolerance}")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValueError(f"Maximum iterations must be at least 1. Got: {self.max_iterations}")

    @property
    def tol(self) -> float:
        return self.tolerance if self.tolerance is not None else DEFAULT_KEPLER_TOLERANCE

    @property
    def max_iter(self) -> int:
        return self.max_iterations if self.max_iterations is not None else DEFAULT_KEPLER_MAX_ITERATIONS

    @staticmethod
    def at_periapsis(time_ms: int = 0) -> Anomaly:
        """Anomaly of a body passing periapsis at time_ms."""
        return Anomaly(time=time_ms)

    @staticmethod
    def from_true_anomaly(orbit: Orbit, true_anomaly: float, time_ms: int = 0) -> Anomaly:
        """
        Build a self-consistent Anomaly from a true anomaly.

        Angles are signed, negative before periapsis passage; bound orbits
        keep them in [-π, π).

        Raises:
            AnomalyOutOfRangeError: If the true anomaly is unreachable on an unbound orbit.
        """
        nu = kepler.wrap_to_pi(true_anomaly)
        E = orbit.eccentric_anomaly(nu)
        M = orbit.mean_anomaly(nu)
        if orbit.is_bound:
            E = kepler.wrap_to_pi(E)
            M = kepler.wrap_to_pi(M)
        return Anomaly(
            time=time_ms,
            true_anomaly=nu,
            eccentric_anomaly=float(E),
            mean_anomaly=float(M)
        )

    def anomaly_at_mean(self, orbit: Orbit, mean_anomaly: float, time_ms: int = 0) -> Anomaly:
        """
        Invert the orbit's governing equation at a given (unwrapped) mean anomaly.

        Raises:
            DidNotConvergeError: If Newton-Raphson exceeds the iteration bound.
            NumericalInstabilityError: If the result is not finite.
        """
        kind = orbit.kind
        e = orbit.eccentricity()
        revolutions = 0

        if kind is OrbitClass.CIRCULAR:
            revolutions, M = split_revolutions(mean_anomaly)
            E = M
            nu = M
        elif kind is OrbitClass.ELLIPTICAL:
            revolutions, M = split_revolutions(mean_anomaly)
            E = kepler.wrap_to_pi(kepler.solve_kepler(M, e, tol=self.tol, max_iter=self.max_iter))
            nu = kepler.wrap_to_pi(kepler.true_from_eccentric(E, e))
        elif kind is OrbitClass.PARABOLIC:
            M = mean_anomaly
            E = kepler.solve_barker(M)
            nu = kepler.true_from_barker(E)
        elif kind is OrbitClass.HYPERBOLIC:
            M = mean_anomaly
            E = kepler.solve_hyperbolic_kepler(M, e, tol=self.tol, max_iter=self.max_iter)
            nu = kepler.true_from_hyperbolic(E, e)
        else:
            raise TypeError(f"Unsupported orbit class: {kind}")

        if not all(math.isfinite(value) for value in (M, E, nu)):
            raise NumericalInstabilityError(
                f"Non-finite anomaly for {kind.value} orbit at M={mean_anomaly!r}"
            )

        return Anomaly(
            time=time_ms,
            true_anomaly=nu,
            eccentric_anomaly=E,
            mean_anomaly=M,
            revolutions=revolutions
        )

    def advance(self,
                body: GravitatingBody,
                orbit: Orbit,
                anomaly: Optional[Anomaly],
                time_delta_ms: int) -> Anomaly:
        """
        Propagate an anomaly forward by time_delta_ms milliseconds.

        Args:
            body: Central body supplying the gravitational parameter.
            orbit: Orbit being followed.
            anomaly: Starting anomaly, or None to start at periapsis at t = 0.
            time_delta_ms: Non-negative elapsed time in milliseconds.

        Returns:
            New Anomaly at anomaly.time + time_delta_ms.

        Raises:
            NegativeTimeDeltaError: If time_delta_ms < 0.
            DidNotConvergeError: If Newton-Raphson exceeds the iteration bound.
        """
        if not isinstance(time_delta_ms, numbers.Integral):
            raise TypeError(f"Time delta must be an integer number of milliseconds. Got: {time_delta_ms!r}")
        if time_delta_ms < 0:
            raise NegativeTimeDeltaError(time_delta_ms)

        start = anomaly if anomaly is not None else self.at_periapsis()
        n = orbit.mean_motion(body)
        M = start.unwrapped_mean_anomaly + n * (time_delta_ms / MILLISECONDS_PER_SECOND)

        logger.debug(
            f"Advancing {orbit.kind.value} orbit by {time_delta_ms} ms "
            f"(n={n:.6e}, M {start.unwrapped_mean_anomaly:.9f} -> {M:.9f})"
        )

        return self.anomaly_at_mean(orbit, M, start.time + int(time_delta_ms))

    def true_anomaly_at(self, body: GravitatingBody, orbit: Orbit, time_ms: int) -> float:
        """True anomaly time_ms after periapsis passage."""
        return self.advance(body, orbit, None, time_ms).true_anomaly


DEFAULT_SOLVER = AnomalySolver()


def advance(body: GravitatingBody, orbit: Orbit, anomaly: Optional[Anomaly], time_delta_ms: int) -> Anomaly:
    """Propagate with the default solver settings."""
    return DEFAULT_SOLVER.advance(body, orbit, anomaly, time_delta_ms)
