"""Tests for the simple rotation model and the elementary rotations."""

import math

import jax.numpy as jnp
import numpy as np
import pytest

from conftest import assert_matrix_close_fraction
from gravjax.attitude_representations import Rx, Rz, dRx, dRz
from gravjax.frames import SimpleRotationModel

TIME = 1.0e6
RATE = 2.0 * math.pi / 86400.0


@pytest.fixture
def model():
    return SimpleRotationModel(0.3, 1.4, 0.2, RATE, 1.0e7)


def _central(function, value, step):
    return (np.asarray(function(value + step)) - np.asarray(function(value - step))) / (2.0 * step)


class TestElementaryRotations:
    @pytest.mark.parametrize("rotation,derivative", [(Rx, dRx), (Rz, dRz)])
    def test_derivative(self, rotation, derivative):
        numerical = _central(rotation, 0.7, 1e-6)
        np.testing.assert_allclose(derivative(0.7), numerical, atol=1e-9)

    def test_degrees(self):
        np.testing.assert_allclose(Rz(90.0, use_degrees=True), Rz(math.pi / 2.0), atol=1e-15)


class TestSimpleRotationModel:
    def test_orthonormal(self, model):
        R = model.rotation_to_body_fixed(TIME)
        np.testing.assert_allclose(R @ R.T, jnp.eye(3), atol=1e-14)
        assert float(jnp.linalg.det(R)) == pytest.approx(1.0)

    def test_inverse(self, model):
        np.testing.assert_allclose(
            model.rotation_to_inertial(TIME), model.rotation_to_body_fixed(TIME).T
        )

    def test_pole_maps_to_body_z_axis(self, model):
        ra, dec = 0.3, 1.4
        pole = jnp.array([math.cos(dec) * math.cos(ra), math.cos(dec) * math.sin(ra), math.sin(dec)])
        np.testing.assert_allclose(model.rotation_to_body_fixed(TIME) @ pole, [0.0, 0.0, 1.0], atol=1e-14)

    def test_rotation_angle(self, model):
        assert float(model.rotation_angle(1.0e7)) == pytest.approx(0.2)
        assert float(model.rotation_angle(TIME)) == pytest.approx(0.2 + RATE * (TIME - 1.0e7))

    def test_time_derivative(self, model):
        numerical = _central(model.rotation_to_body_fixed, TIME, 1.0)
        assert_matrix_close_fraction(model.derivative_of_rotation_to_body_fixed(TIME), numerical, 1e-8)

    def test_rotation_rate_derivative(self, model):
        def rotation(rate):
            model.rotation_rate = rate
            return model.rotation_to_body_fixed(TIME)

        numerical = _central(rotation, RATE, 1e-12)
        model.rotation_rate = RATE
        assert_matrix_close_fraction(model.derivative_wrt_rotation_rate(TIME), numerical, 1e-6)

    @pytest.mark.parametrize("index", [0, 1])
    def test_pole_derivative(self, model, index):
        nominal = np.asarray(model.pole_position())

        def rotation(angle):
            pole = nominal.copy()
            pole[index] = angle
            model.set_pole_position(pole)
            return model.rotation_to_body_fixed(TIME)

        numerical = _central(rotation, nominal[index], 1e-6)
        model.set_pole_position(nominal)
        analytic = model.derivative_wrt_pole_position(TIME)[index]
        assert_matrix_close_fraction(analytic, numerical, 1e-8)

    def test_pole_position_degrees(self, model):
        np.testing.assert_allclose(model.pole_position(use_degrees=True), np.rad2deg([0.3, 1.4]))
        model.set_pole_position([10.0, 80.0], use_degrees=True)
        np.testing.assert_allclose(model.pole_position(), np.deg2rad([10.0, 80.0]))

    def test_invalid_pole_shape(self, model):
        with pytest.raises(ValueError, match="shape"):
            model.set_pole_position([0.1, 0.2, 0.3])
