"""
Reference frames for placing a propagated anomaly in 3D space.

The propagation core never builds frames itself; callers hand its output to
a FrameProvider. PerifocalFrameProvider is the bundled implementation.
"""

import numpy as np
from typing import Protocol

from .anomaly import Anomaly
from .body import GravitatingBody
from .orbit import Orbit


class FrameProvider(Protocol):
    """Anything that can produce a 4x4 homogeneous transform for an orbit position."""

    def frame_at(self, orbit: Orbit, anomaly: Anomaly) -> np.ndarray:
        ...


def rotation_z(angle_rad: float) -> np.ndarray:
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    return np.array([[c, -s, 0.0],
                     [s, c, 0.0],
                     [0.0, 0.0, 1.0]])


def rotation_x(angle_rad: float) -> np.ndarray:
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    return np.array([[1.0, 0.0, 0.0],
                     [0.0, c, -s],
                     [0.0, s, c]])


class PerifocalFrameProvider:
    """
    Orbit-local frame in the parent body's inertial axes.

    Columns of the rotation block are the radial direction, the in-plane
    along-track direction and the orbit normal; the translation column is
    the position vector. Rotation sequence: Rz(Ω) · Rx(i) · Rz(ω + ν).
    """

    def __init__(self, body: GravitatingBody):
        self.body = body

    def rotation_at(self, orbit: Orbit, anomaly: Anomaly) -> np.ndarray:
        return (rotation_z(orbit.ascending_node())
                @ rotation_x(orbit.inclination())
                @ rotation_z(orbit.angle_of_periapsis() + anomaly.true_anomaly))

    def position_at(self, orbit: Orbit, anomaly: Anomaly) -> np.ndarray:
        """Position vector (m) relative to the parent body."""
        radial = self.rotation_at(orbit, anomaly)[:, 0]
        return orbit.distance_from_parent(self.body, anomaly) * radial

    def frame_at(self, orbit: Orbit, anomaly: Anomaly) -> np.ndarray:
        transform = np.eye(4)
        rotation = self.rotation_at(orbit, anomaly)
        transform[:3, :3] = rotation
        transform[:3, 3] = orbit.distance_from_parent(self.body, anomaly) * rotation[:, 0]
        return transform
