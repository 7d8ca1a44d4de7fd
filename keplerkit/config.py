"""
Configuration constants for keplerkit.

This module centralizes all configuration parameters used throughout the library,
making them easily configurable and maintainable.
"""

import math

# === PHYSICS Configuration - Constants ===

GRAVITATIONAL_CONSTANT = 6.67408e-11        # G in SI units (m³ kg⁻¹ s⁻²)
TWO_PI = 2.0 * math.pi
MILLISECONDS_PER_SECOND = 1000.0

# Default gravitating body (unit mass and radius)
DEFAULT_BODY_MASS_KG = 1.0
DEFAULT_BODY_RADIUS_M = 1.0

# === PHYSICS Configuration - Orbit Classification ===

CIRCULAR_ECCENTRICITY = 0.0
PARABOLIC_ECCENTRICITY = 1.0
NEAR_PARABOLIC_TOLERANCE = 1e-6             # |e - 1| below this is logged as near-parabolic
MIN_CONIC_DENOMINATOR = 1e-12               # Smallest admissible 1 + e*cos(nu)
VIS_VIVA_ROUNDING_TOLERANCE = 1e-12         # Negative v² below this fraction of 2k/r is rounding

# === PHYSICS Configuration - Kepler Solver ===

# Kepler's Equation Solver Parameters
DEFAULT_KEPLER_TOLERANCE = 1e-12             # Convergence tolerance on the Newton step
DEFAULT_KEPLER_MAX_ITERATIONS = 50           # Maximum iterations for convergence
HIGH_ECCENTRICITY_THRESHOLD = 0.7           # Threshold for high-e initial guess
HIGH_E_COEFFICIENT = 0.85                   # Danby starter: E0 = M + 0.85*e*sign(sin M)
DANGEROUS_ECCENTRICITY_WARNING = 0.99       # Issue warnings above this eccentricity

# Hyperbolic Kepler equation starter: F0 = sign(M) * ln(2|M|/e + 1.8)
HYPERBOLIC_SEED_OFFSET = 1.8

# Kepler Solver Quality Control
KEPLER_LOGGING_PRECISION = 6                # Decimal places for logging
