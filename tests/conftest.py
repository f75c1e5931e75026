from typing import NamedTuple

import jax.numpy as jnp
import numpy as np
import pytest

from gravjax.config import set_dtype
from gravjax.constants import GM_MOON
from gravjax.environment import Body, Environment
from gravjax.estimation import SphericalHarmonicsGravityPartial
from gravjax.frames import SimpleRotationModel
from gravjax.orbit_dynamics import (
    GravityModel,
    SolidBodyTideModel,
    SphericalHarmonicAccelerationModel,
    SphericalHarmonicAccelerationSettings,
)

MU = 3.986004418e14
RADIUS = 6378137.0
POSITION = np.array([7.0e6, 8.0e6, 9.0e6])

COSINE = np.array([
    [0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
    [0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
    [-4.841651437908150e-4, -2.066155090741760e-10, 2.439383573283130e-6, 0.0, 0.0, 0.0],
    [9.571612070934730e-7, 2.030462010478640e-6, 9.047878948095281e-7, 7.213217571215680e-7, 0.0, 0.0],
    [5.399658666389910e-7, -5.361573893888670e-7, 3.505016239626490e-7, 9.908567666723210e-7,
     -1.885196330230330e-7, 0.0],
    [6.867029137366810e-8, -6.292119230425290e-8, 6.520780431761640e-7, -4.518471523288430e-7,
     -2.953287611756290e-7, 1.748117954960020e-7],
])

SINE = np.array([
    [0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
    [0.0, 0.0, 0.0, 0.0, 0.0, 0.0],
    [0.0, 1.384413891379790e-9, -1.400273703859340e-6, 0.0, 0.0, 0.0],
    [0.0, 2.482004158568720e-7, -6.190054751776180e-7, 1.414349261929410e-6, 0.0, 0.0],
    [0.0, -4.735673465180860e-7, 6.624800262758290e-7, -2.009567235674520e-7,
     3.088038821491940e-7, 0.0],
    [0.0, -9.436980733957690e-8, -3.233531925405220e-7, -2.149554083060460e-7,
     4.980705501023510e-8, -6.693799351801650e-7],
])

ROTATION_RATE = 2.0 * np.pi / 86400.0
REFERENCE_EPOCH = 1.0e7
TEST_TIME = 1.0e6

VEHICLE_STATE = np.array([-4.2e6, 5.1e6, 3.6e6, -3.1e3, -4.4e3, 2.9e3])
EARTH_STATE = np.array([1.0e5, -2.0e5, 3.0e5, 10.0, -20.0, 5.0])
MOON_STATE = np.array([2.1e8, 3.0e8, 1.1e8, -800.0, 600.0, 100.0])


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    Individual tests may switch the dtype (e.g. test_config.py); this
    fixture restores the default for the next test.
    """
    set_dtype(jnp.float64)


def assert_matrix_close_fraction(actual, expected, tolerance):
    """Compare matrices entry-wise, relative to the largest expected entry."""
    actual = np.asarray(actual)
    expected = np.asarray(expected)
    scale = np.max(np.abs(expected))
    np.testing.assert_allclose(actual, expected, rtol=tolerance, atol=tolerance * scale)


@pytest.fixture
def gravity_model():
    """Degree 5 field without tides."""
    return GravityModel("scenario", MU, RADIUS, COSINE, SINE)


class Scenario(NamedTuple):
    environment: Environment
    acceleration_model: SphericalHarmonicAccelerationModel
    partial: SphericalHarmonicsGravityPartial
    tide_model: SolidBodyTideModel


@pytest.fixture
def scenario():
    """Vehicle orbiting a rotating, tidally deformed Earth with the Moon as perturber."""
    tide = SolidBodyTideModel(
        "Earth", ["Moon"], {2: 0.29525 - 0.00087j, 3: 0.093}, RADIUS, MU,
    )
    earth_gravity = GravityModel("scenario", MU, RADIUS, COSINE, SINE, tide_models=[tide])
    rotation = SimpleRotationModel(
        right_ascension=0.3,
        declination=1.4,
        prime_meridian=0.2,
        rotation_rate=ROTATION_RATE,
        reference_epoch=REFERENCE_EPOCH,
    )
    environment = Environment(
        [
            Body("Earth", EARTH_STATE, gravity_model=earth_gravity, rotation_model=rotation),
            Body("Moon", MOON_STATE, gm=GM_MOON),
            Body("Vehicle", VEHICLE_STATE),
        ],
        time=TEST_TIME,
    )
    environment.update_gravity_field_variations()

    model = SphericalHarmonicAccelerationModel(
        "Vehicle", "Earth", SphericalHarmonicAccelerationSettings(5, 5)
    )
    partial = SphericalHarmonicsGravityPartial(model)
    partial.update(environment)
    return Scenario(environment, model, partial, tide)
