"""
Description of the central mass that generates the gravitational field.

The gravitational parameter k is derived on every access from mass and G,
so it can never fall out of step with the mass it describes.
"""

import math
from dataclasses import dataclass

from ..config import (
    GRAVITATIONAL_CONSTANT,
    DEFAULT_BODY_MASS_KG,
    DEFAULT_BODY_RADIUS_M
)
from ..exceptions import InvalidBodyError


@dataclass(frozen=True)
class GravitatingBody:
    """
    Immutable gravitating body.

    Units:
        mass: kilograms
        radius: meters
        G: m³ kg⁻¹ s⁻²
    """
    mass: float = DEFAULT_BODY_MASS_KG
    radius: float = DEFAULT_BODY_RADIUS_M
    G: float = GRAVITATIONAL_CONSTANT

    def __post_init__(self):
        if not math.isfinite(self.mass) or self.mass <= 0:
            raise InvalidBodyError(f"Mass must be positive and finite. Got: {self.mass}")
        if not math.isfinite(self.radius) or self.radius <= 0:
            raise InvalidBodyError(f"Radius must be positive and finite. Got: {self.radius}")
        if not math.isfinite(self.G) or self.G <= 0:
            raise InvalidBodyError(f"Gravitational constant must be positive and finite. Got: {self.G}")

    @property
    def k(self) -> float:
        """Gravitational parameter mass * G (m³/s²)."""
        return self.mass * self.G
