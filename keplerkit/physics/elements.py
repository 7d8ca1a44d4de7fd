"""
Classical orbital elements and the four conic classes they describe.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import CIRCULAR_ECCENTRICITY, PARABOLIC_ECCENTRICITY
from ..exceptions import InvalidElementsError


class OrbitClass(Enum):
    """Geometric class of a Keplerian orbit."""
    CIRCULAR = "circular"
    ELLIPTICAL = "elliptical"
    PARABOLIC = "parabolic"
    HYPERBOLIC = "hyperbolic"

    @property
    def is_bound(self) -> bool:
        return self in (OrbitClass.CIRCULAR, OrbitClass.ELLIPTICAL)


@dataclass(frozen=True)
class OrbitalElements:
    """
    Classical orbital elements.

    The size of the conic is given either by the semimajor axis (circular,
    elliptical, and hyperbolic with the negative-axis convention) or by the
    periapsis distance (parabolic, hyperbolic). Orbit constructors decide
    which one they need.

    Units:
        semimajor_axis: meters
        periapsis: meters
        eccentricity: dimensionless (e >= 0)
        inclination: radians
        ascending_node: longitude of the ascending node, radians
        angle_of_periapsis: argument of periapsis, radians
    """
    semimajor_axis: Optional[float] = None
    periapsis: Optional[float] = None
    eccentricity: float = CIRCULAR_ECCENTRICITY
    inclination: float = 0.0
    ascending_node: float = 0.0
    angle_of_periapsis: float = 0.0

    def __post_init__(self):
        if self.semimajor_axis is None and self.periapsis is None:
            raise InvalidElementsError("Either semimajor axis or periapsis distance must be given.")
        if self.semimajor_axis is not None and not math.isfinite(self.semimajor_axis):
            raise InvalidElementsError(f"Semimajor axis must be finite. Got: {self.semimajor_axis}")
        if self.periapsis is not None and not (math.isfinite(self.periapsis) and self.periapsis > 0):
            raise InvalidElementsError(f"Periapsis distance must be positive and finite. Got: {self.periapsis}")
        if not math.isfinite(self.eccentricity) or self.eccentricity < 0:
            raise InvalidElementsError(f"Eccentricity must be non-negative and finite. Got: {self.eccentricity}")
        for name in ('inclination', 'ascending_node', 'angle_of_periapsis'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidElementsError(f"{name.replace('_', ' ').capitalize()} must be finite. Got: {value}")

    def classify(self) -> OrbitClass:
        """Orbit class implied by the eccentricity alone."""
        e = self.eccentricity
        if e == CIRCULAR_ECCENTRICITY:
            return OrbitClass.CIRCULAR
        if e < PARABOLIC_ECCENTRICITY:
            return OrbitClass.ELLIPTICAL
        if e == PARABOLIC_ECCENTRICITY:
            return OrbitClass.PARABOLIC
        return OrbitClass.HYPERBOLIC
