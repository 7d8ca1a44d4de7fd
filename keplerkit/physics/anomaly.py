"""
Snapshot of a body's angular position along its orbit.
"""

import numbers
from dataclasses import dataclass

from ..config import TWO_PI
from ..exceptions import InvalidAnomalyError


@dataclass(frozen=True)
class Anomaly:
    """
    Immutable anomaly record produced by the propagation engine.

    Units:
        time: milliseconds since the reference epoch (periapsis passage at 0)
        true_anomaly: radians
        eccentric_anomaly: radians (circular, elliptical), hyperbolic anomaly F
                           (hyperbolic), Barker parameter D = tan(nu/2) (parabolic)
        mean_anomaly: radians for bound orbits, dimensionless for unbound ones
        revolutions: periapsis passages folded out of mean_anomaly
                     (always 0 for unbound orbits)

    Angles are signed and negative before periapsis; for bound orbits the
    solver keeps them in [-π, π).
    """
    time: int = 0
    true_anomaly: float = 0.0
    eccentric_anomaly: float = 0.0
    mean_anomaly: float = 0.0
    revolutions: int = 0

    def __post_init__(self):
        if not isinstance(self.time, numbers.Integral):
            raise TypeError(f"Anomaly time must be an integer number of milliseconds. Got: {self.time!r}")
        if self.time < 0:
            raise InvalidAnomalyError(f"Anomaly time must be non-negative. Got: {self.time} ms")
        if not isinstance(self.revolutions, numbers.Integral):
            raise TypeError(f"Revolutions must be an integer. Got: {self.revolutions!r}")

    @property
    def unwrapped_mean_anomaly(self) -> float:
        """Mean anomaly including completed revolutions; monotonic in time."""
        return self.mean_anomaly + TWO_PI * self.revolutions
