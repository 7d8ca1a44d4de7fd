# tests/test_physics_kepler.py
import pytest
import math
import numpy as np
from keplerkit.physics.kepler import (
    solve_kepler,
    solve_hyperbolic_kepler,
    solve_barker,
    wrap_to_pi,
    eccentric_from_true,
    true_from_eccentric,
    mean_from_eccentric,
    hyperbolic_from_true,
    true_from_hyperbolic,
    mean_from_hyperbolic,
    barker_from_true,
    true_from_barker,
    mean_from_barker,
    asymptote_true_anomaly
)
from keplerkit.exceptions import (
    InvalidElementsError,
    DidNotConvergeError,
    AnomalyOutOfRangeError
)

# Basic existing tests
def test_solve_kepler_circular_orbit():
    """Verifies that for a circular orbit (e=0), E equals M."""
    mean_anomaly_rad = np.radians(45.0)  # M in radians
    eccentricity = 0.0
    eccentric_anomaly_rad = solve_kepler(mean_anomaly_rad, eccentricity)
    assert np.isclose(eccentric_anomaly_rad, mean_anomaly_rad, atol=1e-9)

def test_solve_kepler_known_case():
    """
    Verifies the solution of solve_kepler for a standard case (M=0.5 rad, e=0.2).
    """
    mean_anomaly_rad = 0.5
    eccentricity = 0.2

    expected_E_rad = 0.6154681694899653

    eccentric_anomaly_rad = solve_kepler(mean_anomaly_rad, eccentricity, tol=1e-12)

    assert np.isclose(eccentric_anomaly_rad, expected_E_rad, atol=1e-9)

def test_solve_kepler_vectorized_consistency():
    """Test that vectorized and scalar calls give consistent results."""
    M_values = np.array([0.1, 0.5, 1.0, 2.0, 3.0])
    e = 0.3

    E_vector = solve_kepler(M_values, e)
    E_scalars = np.array([solve_kepler(float(M), e) for M in M_values])

    assert np.allclose(E_vector, E_scalars, atol=1e-12)

def test_solve_kepler_high_eccentricity():
    """Test solver stability for high eccentricity orbits."""
    M = 1.0
    e_high = 0.9

    E = solve_kepler(M, e_high)

    residual = E - e_high * np.sin(E) - M
    assert abs(residual) < 1e-10

@pytest.mark.parametrize("e", [0.95, 0.999, 0.999999])
def test_solve_kepler_near_parabolic(e):
    """Kepler's equation is satisfied across the whole circle as e -> 1."""
    M = np.linspace(-np.pi + 1e-6, np.pi - 1e-6, 41)

    E = solve_kepler(M, e)

    residual = E - e * np.sin(E) - M
    assert np.all(np.abs(residual) < 1e-10)

def test_solve_kepler_normalizes_mean_anomaly():
    """Mean anomalies a full turn apart give the same eccentric anomaly."""
    e = 0.4
    assert np.isclose(solve_kepler(1.0, e), solve_kepler(1.0 + 4 * np.pi, e), atol=1e-12)
    assert -np.pi <= solve_kepler(5.0, e) < np.pi

def test_solve_kepler_invalid_eccentricity():
    """Test that invalid eccentricity values raise appropriate errors."""
    M = 1.0

    with pytest.raises(InvalidElementsError, match="outside elliptic range"):
        solve_kepler(M, 1.0)

    with pytest.raises(InvalidElementsError, match="outside elliptic range"):
        solve_kepler(M, -0.1)

def test_solve_kepler_scalar_return_type():
    """Test that scalar input returns scalar output."""
    E_result = solve_kepler(1.0, 0.3)

    assert isinstance(E_result, float)
    assert not isinstance(E_result, np.ndarray)

def test_solve_kepler_array_return_type():
    """Test that array input returns array output."""
    M_array = np.array([1.0, 2.0])

    E_result = solve_kepler(M_array, 0.3)

    assert isinstance(E_result, np.ndarray)
    assert E_result.shape == M_array.shape

def test_solve_kepler_reports_non_convergence(caplog):
    """Exceeding the iteration cap raises with diagnostics instead of returning a guess."""
    with pytest.raises(DidNotConvergeError) as excinfo:
        solve_kepler(0.1, 0.9, max_iter=1)

    error = excinfo.value
    assert error.iterations == 1
    assert math.isfinite(error.last_iterate)
    assert error.residual != 0.0
    assert "did not converge" in caplog.text

def test_configuration_usage():
    """Test that centralized configuration is being used."""
    from keplerkit.config import DEFAULT_KEPLER_TOLERANCE

    E1 = solve_kepler(1.0, 0.3)
    E2 = solve_kepler(1.0, 0.3, tol=DEFAULT_KEPLER_TOLERANCE)

    assert E1 == E2

def test_high_eccentricity_warning(caplog):
    """Eccentricities above the warning threshold are logged."""
    solve_kepler(1.0, 0.995)
    assert "High eccentricity" in caplog.text


# --- Hyperbolic solver ---

@pytest.mark.parametrize("e", [1.000001, 1.1, 2.0, 10.0])
def test_solve_hyperbolic_residual(e):
    """F satisfies e*sinh(F) - F = M over a wide range of mean anomalies."""
    M = np.array([-500.0, -10.0, -0.5, -1e-6, 0.0, 1e-6, 0.5, 10.0, 500.0])

    F = solve_hyperbolic_kepler(M, e)

    residual = e * np.sinh(F) - F - M
    assert np.all(np.abs(residual) <= 1e-9 * np.maximum(1.0, np.abs(M)))

def test_solve_hyperbolic_is_odd():
    e = 1.7
    assert np.isclose(solve_hyperbolic_kepler(-3.0, e), -solve_hyperbolic_kepler(3.0, e), atol=1e-12)
    assert solve_hyperbolic_kepler(0.0, e) == 0.0

def test_solve_hyperbolic_invalid_eccentricity():
    with pytest.raises(InvalidElementsError, match="outside hyperbolic range"):
        solve_hyperbolic_kepler(1.0, 1.0)

def test_solve_hyperbolic_scalar_return_type():
    assert isinstance(solve_hyperbolic_kepler(2.0, 1.5), float)


# --- Barker's equation ---

def test_solve_barker_residual():
    """The closed form satisfies D + D^3/3 = M."""
    M = np.array([-1e6, -20.0, -1.0, -1e-9, 0.0, 1e-9, 0.3, 1.0, 20.0, 1e6])

    D = solve_barker(M)

    assert np.allclose(D + D ** 3 / 3.0, M, rtol=1e-12, atol=1e-15)

def test_solve_barker_known_values():
    # D = 1 gives M = 4/3; D = sqrt(3) gives M = 2*sqrt(3)
    assert np.isclose(solve_barker(4.0 / 3.0), 1.0, atol=1e-14)
    assert np.isclose(solve_barker(2.0 * math.sqrt(3.0)), math.sqrt(3.0), atol=1e-14)
    assert solve_barker(0.0) == 0.0

def test_solve_barker_is_odd():
    assert np.isclose(solve_barker(-2.5), -solve_barker(2.5), atol=1e-15)


# --- Conversions ---

class TestAnomalyConversions:
    """Closed-form conversions between true, eccentric and mean anomaly."""

    @pytest.mark.parametrize("e", [0.0, 0.3, 0.9, 0.999])
    def test_elliptic_round_trip(self, e):
        nu = np.linspace(-3.1, 3.1, 25)
        E = eccentric_from_true(nu, e)
        assert np.allclose(true_from_eccentric(E, e), nu, atol=1e-12)

    def test_elliptic_quadrants_agree(self):
        """E and nu share a half-plane: both positive before apoapsis, negative after."""
        e = 0.6
        assert eccentric_from_true(2.0, e) > 0
        assert eccentric_from_true(-2.0, e) < 0
        assert np.isclose(eccentric_from_true(np.pi, e), np.pi)

    def test_elliptic_mean_anomaly(self):
        E = 0.6154681694899653
        assert np.isclose(mean_from_eccentric(E, 0.2), 0.5, atol=1e-12)

    @pytest.mark.parametrize("e", [1.01, 1.5, 4.0])
    def test_hyperbolic_round_trip(self, e):
        nu_inf = asymptote_true_anomaly(e)
        nu = np.linspace(-0.99 * nu_inf, 0.99 * nu_inf, 21)
        F = hyperbolic_from_true(nu, e)
        assert np.allclose(true_from_hyperbolic(F, e), nu, atol=1e-10)

    def test_hyperbolic_beyond_asymptote(self):
        e = 2.0
        with pytest.raises(AnomalyOutOfRangeError, match="outside hyperbolic range"):
            hyperbolic_from_true(asymptote_true_anomaly(e), e)

    def test_hyperbolic_mean_anomaly(self):
        assert np.isclose(mean_from_hyperbolic(1.0, 2.0), 2.0 * math.sinh(1.0) - 1.0)

    def test_asymptote(self):
        assert np.isclose(asymptote_true_anomaly(2.0), 2.0 * np.pi / 3.0)

    def test_parabolic_round_trip(self):
        nu = np.linspace(-3.0, 3.0, 13)
        D = barker_from_true(nu)
        assert np.allclose(true_from_barker(D), nu, atol=1e-12)
        assert np.allclose(mean_from_barker(D), D + D ** 3 / 3.0)

    def test_parabolic_asymptote(self):
        with pytest.raises(AnomalyOutOfRangeError, match="outside parabolic range"):
            barker_from_true(np.pi)


def test_wrap_to_pi():
    assert np.isclose(wrap_to_pi(1.5 * np.pi), -0.5 * np.pi)
    assert np.isclose(wrap_to_pi(0.25), 0.25)
    wrapped = wrap_to_pi(np.array([3 * np.pi, -3.5 * np.pi]))
    assert np.all((wrapped >= -np.pi) & (wrapped < np.pi))

def test_wrap_to_pi_keeps_in_range_values_exact():
    """Small angles of either sign pass through without rounding."""
    for angle in (1.174435263e-10, -1.174435263e-10, 5e-300, -np.pi, np.pi - 1e-15):
        assert wrap_to_pi(angle) == angle
    assert wrap_to_pi(np.pi) == -np.pi
    assert wrap_to_pi(2 * np.pi + 1e-3) == pytest.approx(1e-3, abs=1e-15)


@pytest.mark.parametrize("E", [1.1717538878975254e-4, -1.1717538878975254e-4, 2e-3, -0.3])
def test_solve_kepler_near_parabolic_periapsis(E):
    """Tiny mean anomalies at e = 0.999999 recover the true anomaly to 1e-9 rad."""
    e = 0.999999
    M = mean_from_eccentric(E, e)

    E_solved = solve_kepler(M, e)

    assert abs(true_from_eccentric(E_solved, e) - true_from_eccentric(E, e)) < 1e-9
