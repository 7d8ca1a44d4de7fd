"""
Tests for keplerkit.physics.body module.
"""

import dataclasses
import math

import pytest

from keplerkit.physics.body import GravitatingBody
from keplerkit.exceptions import InvalidBodyError, KeplerKitError
from keplerkit.config import GRAVITATIONAL_CONSTANT


class TestGravitatingBody:

    def test_defaults(self):
        """Default body is a unit sphere of unit mass."""
        body = GravitatingBody()
        assert body.mass == 1.0
        assert body.radius == 1.0
        assert body.G == GRAVITATIONAL_CONSTANT
        assert body.k == GRAVITATIONAL_CONSTANT

    def test_gravitational_parameter(self):
        earth = GravitatingBody(mass=5.972e24, radius=6.371e6, G=6.67408e-11)
        assert earth.k == pytest.approx(3.986e14, rel=1e-3)
        assert earth.k == earth.mass * earth.G

    def test_k_follows_mass(self):
        body = GravitatingBody(mass=2.0, radius=1.0)
        heavier = dataclasses.replace(body, mass=4.0)
        assert heavier.k == pytest.approx(2.0 * body.k)
        assert heavier.radius == body.radius

    def test_is_frozen(self):
        body = GravitatingBody()
        with pytest.raises(dataclasses.FrozenInstanceError):
            body.mass = 10.0

    @pytest.mark.parametrize("field, value, message", [
        ("mass", 0.0, "Mass must be positive"),
        ("mass", -1.0, "Mass must be positive"),
        ("mass", math.inf, "Mass must be positive"),
        ("radius", 0.0, "Radius must be positive"),
        ("radius", math.nan, "Radius must be positive"),
        ("G", -6.67e-11, "Gravitational constant must be positive"),
    ])
    def test_invalid_values(self, field, value, message):
        with pytest.raises(InvalidBodyError, match=message):
            GravitatingBody(**{field: value})

    def test_error_is_library_error(self):
        with pytest.raises(KeplerKitError):
            GravitatingBody(mass=-5.0)
