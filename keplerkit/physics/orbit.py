"""
Keplerian orbits as a closed family of four conic classes.

Provides:
- Orbit: common interface and the shared vis-viva / angular-momentum algebra
- CircularOrbit, EllipticalOrbit, ParabolicOrbit, HyperbolicOrbit: the variants
- Closed-form conversions from true anomaly to eccentric and mean anomaly

Every query is a pure function of the stored elements and, where dynamics
are involved, a GravitatingBody. Quantities that do not exist for a class
(semimajor axis of a parabola, period of an unbound orbit) are returned as
None rather than raised.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import ClassVar, Optional

from ..config import (
    TWO_PI,
    CIRCULAR_ECCENTRICITY,
    PARABOLIC_ECCENTRICITY,
    NEAR_PARABOLIC_TOLERANCE,
    MIN_CONIC_DENOMINATOR,
    VIS_VIVA_ROUNDING_TOLERANCE,
    KEPLER_LOGGING_PRECISION
)
from ..exceptions import InvalidElementsError, NumericalInstabilityError
from .anomaly import Anomaly
from .body import GravitatingBody
from .elements import OrbitalElements, OrbitClass
from . import kepler

logger = logging.getLogger(__name__)


def conic_radius(p: float, e: float, true_anomaly: float) -> float:
    """
    Orbit equation r = p / (1 + e*cos(nu)).

    Raises:
        NumericalInstabilityError: If nu is at or beyond the asymptote of an unbound conic.
    """
    denominator = 1.0 + e * math.cos(true_anomaly)
    if denominator < MIN_CONIC_DENOMINATOR:
        raise NumericalInstabilityError(
            f"True anomaly {true_anomaly:.6f} rad is unreachable for e={e:.{KEPLER_LOGGING_PRECISION}f} "
            f"(1 + e*cos(nu) = {denominator:.3e})"
        )
    return p / denominator


def vis_viva_speed(k: float, r: float, a: Optional[float]) -> float:
    """
    v = sqrt(k*(2/r - 1/a)); a=None is the parabolic limit sqrt(2k/r).

    Raises:
        NumericalInstabilityError: If r lies beyond 2a, where no real speed exists.
    """
    inverse_a = 0.0 if a is None else 1.0 / a
    v_squared = k * (2.0 / r - inverse_a)
    if v_squared < 0.0:
        if -v_squared > VIS_VIVA_ROUNDING_TOLERANCE * k * 2.0 / r:
            raise NumericalInstabilityError(
                f"Vis-viva gives negative v² = {v_squared:.3e} at r={r:.6e} m, a={a:.6e} m"
            )
        # rounding at the edge of the bound region
        v_squared = 0.0
    return math.sqrt(v_squared)


def angular_momentum(k: float, p: float) -> float:
    """Specific angular momentum L = sqrt(k*p)."""
    return math.sqrt(k * p)


def flight_path_angle(e: float, true_anomaly: float) -> float:
    """Angle between velocity and the local horizontal."""
    return math.atan2(e * math.sin(true_anomaly), 1.0 + e * math.cos(true_anomaly))


def _check_agreement(name: str, given: Optional[float], expected: float) -> None:
    if given is not None and not math.isclose(given, expected, rel_tol=1e-9):
        raise InvalidElementsError(f"{name} {given} is inconsistent with the other elements (expected {expected})")


@dataclass(frozen=True)
class Orbit(ABC):
    """
    Base of the four orbit variants. Construct through the classmethods
    (circular, elliptical, parabolic, hyperbolic, from_elements) or the
    variant classes directly; validation happens at construction.
    """
    elements: OrbitalElements

    kind: ClassVar[OrbitClass]

    @classmethod
    def circular(cls, elements: OrbitalElements) -> "CircularOrbit":
        return CircularOrbit(elements)

    @classmethod
    def elliptical(cls, elements: OrbitalElements) -> "EllipticalOrbit":
        return EllipticalOrbit(elements)

    @classmethod
    def parabolic(cls, elements: OrbitalElements) -> "ParabolicOrbit":
        return ParabolicOrbit(elements)

    @classmethod
    def hyperbolic(cls, elements: OrbitalElements) -> "HyperbolicOrbit":
        return HyperbolicOrbit(elements)

    @classmethod
    def from_elements(cls, elements: OrbitalElements) -> "Orbit":
        """Classify elements once by eccentricity and build the matching variant."""
        return _VARIANTS[elements.classify()](elements)

    # --- Core elements ---

    def eccentricity(self) -> float:
        return self.elements.eccentricity

    @abstractmethod
    def semimajor_axis(self) -> Optional[float]:
        pass

    @abstractmethod
    def periapsis(self) -> float:
        """q"""
        pass

    @abstractmethod
    def parameter(self) -> float:
        """p (semi-latus rectum)"""
        pass

    def inclination(self) -> float:
        return self.elements.inclination

    def ascending_node(self) -> float:
        return self.elements.ascending_node

    def angle_of_periapsis(self) -> float:
        return self.elements.angle_of_periapsis

    def apoapsis(self) -> Optional[float]:
        """Q = a(1 + e) for bound orbits, None for unbound ones."""
        return None

    def asymptote_true_anomaly(self) -> Optional[float]:
        """Limiting true anomaly of an unbound orbit, None for bound ones."""
        return None

    @property
    def is_bound(self) -> bool:
        return self.kind.is_bound

    # --- Dynamics ---

    def distance_from_parent(self, body: GravitatingBody, anomaly: Anomaly) -> float:
        """r (m)"""
        return conic_radius(self.parameter(), self.eccentricity(), anomaly.true_anomaly)

    def velocity(self, body: GravitatingBody, anomaly: Anomaly) -> float:
        """Speed from the vis-viva law (m/s)."""
        r = self.distance_from_parent(body, anomaly)
        return vis_viva_speed(body.k, r, self.semimajor_axis())

    def angle_of_velocity(self, anomaly: Anomaly) -> float:
        """Flight-path angle (rad)."""
        return flight_path_angle(self.eccentricity(), anomaly.true_anomaly)

    def total_energy(self, body: GravitatingBody) -> float:
        """Specific orbital energy E = -k/(2a) (J/kg); exactly 0 for parabolic orbits."""
        a = self.semimajor_axis()
        if a is None:
            return 0.0
        return -body.k / (2.0 * a)

    def orbital_period(self, body: GravitatingBody) -> Optional[float]:
        """P = 2π*sqrt(a³/k) (s) for bound orbits, None for aperiodic ones."""
        if not self.is_bound:
            return None
        return TWO_PI * math.sqrt(self.semimajor_axis() ** 3 / body.k)

    def mean_motion(self, body: GravitatingBody) -> float:
        """Rate of mean anomaly (rad/s, or 1/s for unbound orbits)."""
        return math.sqrt(body.k / abs(self.semimajor_axis()) ** 3)

    def specific_angular_momentum(self, body: GravitatingBody) -> float:
        """L = r²*dν/dt = sqrt(k*p) (m²/s)."""
        return angular_momentum(body.k, self.parameter())

    def velocity_at_periapsis(self, body: GravitatingBody) -> float:
        """Vq = L/q (m/s)."""
        return self.specific_angular_momentum(body) / self.periapsis()

    def areal_velocity(self, body: GravitatingBody) -> float:
        """dA/dt = L/2 (m²/s), the rate of area swept by the radius vector."""
        return self.specific_angular_momentum(body) / 2.0

    # --- Anomaly conversions ---

    @abstractmethod
    def eccentric_anomaly(self, true_anomaly: float) -> float:
        """E (circular, elliptical), F (hyperbolic) or D (parabolic) for a true anomaly."""
        pass

    @abstractmethod
    def mean_anomaly(self, true_anomaly: float) -> float:
        pass

    @abstractmethod
    def true_anomaly(self, eccentric_anomaly: float) -> float:
        """Inverse of eccentric_anomaly."""
        pass


@dataclass(frozen=True)
class CircularOrbit(Orbit):
    kind: ClassVar[OrbitClass] = OrbitClass.CIRCULAR

    def __post_init__(self):
        elements = self.elements
        if elements.eccentricity != CIRCULAR_ECCENTRICITY:
            raise InvalidElementsError(f"Circular orbit requires e = 0. Got: {elements.eccentricity}")
        if elements.semimajor_axis is None or elements.semimajor_axis <= 0:
            raise InvalidElementsError(f"Circular orbit requires a positive radius. Got: {elements.semimajor_axis}")
        _check_agreement("Periapsis", elements.periapsis, elements.semimajor_axis)

    def eccentricity(self) -> float:
        return CIRCULAR_ECCENTRICITY

    def semimajor_axis(self) -> Optional[float]:
        return self.elements.semimajor_axis

    def periapsis(self) -> float:
        return self.elements.semimajor_axis

    def apoapsis(self) -> Optional[float]:
        return self.elements.semimajor_axis

    def parameter(self) -> float:
        return self.elements.semimajor_axis

    def distance_from_parent(self, body: GravitatingBody, anomaly: Anomaly) -> float:
        return self.elements.semimajor_axis

    def velocity(self, body: GravitatingBody, anomaly: Anomaly) -> float:
        return math.sqrt(body.k / self.elements.semimajor_axis)

    def angle_of_velocity(self, anomaly: Anomaly) -> float:
        return 0.0

    def eccentric_anomaly(self, true_anomaly: float) -> float:
        return true_anomaly

    def mean_anomaly(self, true_anomaly: float) -> float:
        return true_anomaly

    def true_anomaly(self, eccentric_anomaly: float) -> float:
        return eccentric_anomaly


@dataclass(frozen=True)
class EllipticalOrbit(Orbit):
    kind: ClassVar[OrbitClass] = OrbitClass.ELLIPTICAL

    def __post_init__(self):
        elements = self.elements
        e = elements.eccentricity
        if not (0.0 <= e < PARABOLIC_ECCENTRICITY):
            raise InvalidElementsError(f"Elliptical orbit requires 0 <= e < 1. Got: {e}")
        if elements.semimajor_axis is None or elements.semimajor_axis <= 0:
            raise InvalidElementsError(
                f"Elliptical orbit requires a positive semimajor axis. Got: {elements.semimajor_axis}"
            )
        _check_agreement("Periapsis", elements.periapsis, elements.semimajor_axis * (1.0 - e))
        if PARABOLIC_ECCENTRICITY - e < NEAR_PARABOLIC_TOLERANCE:
            logger.warning(f"Near-parabolic elliptical orbit (e={e:.{KEPLER_LOGGING_PRECISION + 3}f})")

    def semimajor_axis(self) -> Optional[float]:
        return self.elements.semimajor_axis

    def periapsis(self) -> float:
        return self.elements.semimajor_axis * (1.0 - self.elements.eccentricity)

    def apoapsis(self) -> Optional[float]:
        return self.elements.semimajor_axis * (1.0 + self.elements.eccentricity)

    def parameter(self) -> float:
        return self.elements.semimajor_axis * (1.0 - self.elements.eccentricity ** 2)

    def eccentric_anomaly(self, true_anomaly: float) -> float:
        return kepler.eccentric_from_true(true_anomaly, self.elements.eccentricity)

    def mean_anomaly(self, true_anomaly: float) -> float:
        E = self.eccentric_anomaly(true_anomaly)
        return float(kepler.mean_from_eccentric(E, self.elements.eccentricity))

    def true_anomaly(self, eccentric_anomaly: float) -> float:
        return kepler.true_from_eccentric(eccentric_anomaly, self.elements.eccentricity)


@dataclass(frozen=True)
class ParabolicOrbit(Orbit):
    kind: ClassVar[OrbitClass] = OrbitClass.PARABOLIC

    def __post_init__(self):
        elements = self.elements
        if elements.eccentricity != PARABOLIC_ECCENTRICITY:
            raise InvalidElementsError(f"Parabolic orbit requires e = 1. Got: {elements.eccentricity}")
        if elements.periapsis is None:
            raise InvalidElementsError("Parabolic orbit requires the periapsis distance.")
        if elements.semimajor_axis is not None:
            raise InvalidElementsError("Parabolic orbit has no finite semimajor axis.")

    def eccentricity(self) -> float:
        return PARABOLIC_ECCENTRICITY

    def semimajor_axis(self) -> Optional[float]:
        return None

    def periapsis(self) -> float:
        return self.elements.periapsis

    def parameter(self) -> float:
        return 2.0 * self.elements.periapsis

    def asymptote_true_anomaly(self) -> Optional[float]:
        return math.pi

    def mean_motion(self, body: GravitatingBody) -> float:
        """Barker rate sqrt(k/(2q³)) such that D + D³/3 = n*t."""
        return math.sqrt(body.k / (2.0 * self.elements.periapsis ** 3))

    def eccentric_anomaly(self, true_anomaly: float) -> float:
        return kepler.barker_from_true(true_anomaly)

    def mean_anomaly(self, true_anomaly: float) -> float:
        return kepler.mean_from_barker(self.eccentric_anomaly(true_anomaly))

    def true_anomaly(self, eccentric_anomaly: float) -> float:
        return kepler.true_from_barker(eccentric_anomaly)


@dataclass(frozen=True)
class HyperbolicOrbit(Orbit):
    """
    Hyperbolic orbit. The periapsis distance is stored; elements given with
    the negative semimajor axis convention are normalized at construction.
    """
    kind: ClassVar[OrbitClass] = OrbitClass.HYPERBOLIC

    def __post_init__(self):
        elements = self.elements
        e = elements.eccentricity
        if not e > PARABOLIC_ECCENTRICITY:
            raise InvalidElementsError(f"Hyperbolic orbit requires e > 1. Got: {e}")
        a = elements.semimajor_axis
        if a is not None and a >= 0:
            raise InvalidElementsError(f"Hyperbolic orbit requires a negative semimajor axis. Got: {a}")
        if elements.periapsis is None:
            # frozen dataclass: normalize once, here
            object.__setattr__(self, 'elements', replace(elements, semimajor_axis=None, periapsis=a * (1.0 - e)))
        else:
            if a is not None:
                _check_agreement("Semimajor axis", a, elements.periapsis / (1.0 - e))
            object.__setattr__(self, 'elements', replace(elements, semimajor_axis=None))
        if e - PARABOLIC_ECCENTRICITY < NEAR_PARABOLIC_TOLERANCE:
            logger.warning(f"Near-parabolic hyperbolic orbit (e={e:.{KEPLER_LOGGING_PRECISION + 3}f})")

    def semimajor_axis(self) -> Optional[float]:
        """Negative by convention: a = q / (1 - e)."""
        return self.elements.periapsis / (1.0 - self.elements.eccentricity)

    def periapsis(self) -> float:
        return self.elements.periapsis

    def parameter(self) -> float:
        return self.elements.periapsis * (1.0 + self.elements.eccentricity)

    def asymptote_true_anomaly(self) -> Optional[float]:
        return kepler.asymptote_true_anomaly(self.elements.eccentricity)

    def eccentric_anomaly(self, true_anomaly: float) -> float:
        return kepler.hyperbolic_from_true(true_anomaly, self.elements.eccentricity)

    def mean_anomaly(self, true_anomaly: float) -> float:
        F = self.eccentric_anomaly(true_anomaly)
        return float(kepler.mean_from_hyperbolic(F, self.elements.eccentricity))

    def true_anomaly(self, eccentric_anomaly: float) -> float:
        return kepler.true_from_hyperbolic(eccentric_anomaly, self.elements.eccentricity)


_VARIANTS = {
    OrbitClass.CIRCULAR: CircularOrbit,
    OrbitClass.ELLIPTICAL: EllipticalOrbit,
    OrbitClass.PARABOLIC: ParabolicOrbit,
    OrbitClass.HYPERBOLIC: HyperbolicOrbit,
}
