"""Tests for estimable parameters, their validation and the parameter catalog."""

import logging

import numpy as np
import pytest

from conftest import COSINE, MU, RADIUS, ROTATION_RATE, SINE
from gravjax.errors import (
    ConfigurationError,
    DegreeMismatchError,
    OrderSubsetMismatchError,
    UnknownBodyError,
    UnknownDeformingBodyError,
)
from gravjax.estimation import (
    ConstantRotationRateSettings,
    FullDegreeLoveNumberSettings,
    GravitationalParameterSettings,
    ParameterKind,
    RotationPolePositionSettings,
    SingleDegreeLoveNumberSettings,
    SphericalHarmonicsCosineBlockSettings,
    SphericalHarmonicsSineBlockSettings,
    check_parameter_settings,
    coefficient_block_indices,
    create_parameters_to_estimate,
)
from gravjax.orbit_dynamics import SolidBodyTideModel


class TestCoefficientBlockIndices:
    def test_cosine_block(self):
        indices = coefficient_block_indices(2, 0, 5, 4)
        assert len(indices) == 17
        assert indices[:4] == [(2, 0), (2, 1), (2, 2), (3, 0)]
        assert indices[-1] == (5, 4)
        assert (5, 5) not in indices

    def test_sine_block_skips_order_zero(self):
        indices = coefficient_block_indices(2, 1, 5, 4, skip_zero_order=True)
        assert len(indices) == 13
        assert all(m > 0 for _, m in indices)
        assert coefficient_block_indices(2, 0, 2, 2, skip_zero_order=True) == [(2, 1), (2, 2)]


class TestSettings:
    def test_kinds(self):
        assert GravitationalParameterSettings("Earth").kind is ParameterKind.GRAVITATIONAL_PARAMETER
        assert (
            SingleDegreeLoveNumberSettings("Earth", 2, (0,)).kind
            is ParameterKind.SINGLE_DEGREE_VARIABLE_LOVE_NUMBER
        )

    def test_defaults(self):
        settings = FullDegreeLoveNumberSettings("Earth", 2)
        assert settings.deforming_bodies == ()
        assert settings.use_complex is False

    def test_hashable(self):
        assert len({RotationPolePositionSettings("Earth"), RotationPolePositionSettings("Earth")}) == 1


class TestValidation:
    @pytest.mark.parametrize(
        "settings",
        [
            SingleDegreeLoveNumberSettings("Earth", 2, (2, 0, 1), ("Sun",)),
            SingleDegreeLoveNumberSettings("Earth", 2, (2, 0, 1), ("Moon", "Sun")),
            FullDegreeLoveNumberSettings("Earth", 2, ("Moon", "Sun"), use_complex=True),
            FullDegreeLoveNumberSettings("Earth", 3, ("Sun",)),
        ],
    )
    def test_unknown_deforming_bodies(self, scenario, settings):
        with pytest.raises(UnknownDeformingBodyError) as info:
            create_parameters_to_estimate([settings], scenario.environment)
        assert info.value.body == "Earth"
        assert info.value.deforming_bodies == settings.deforming_bodies

    def test_check_returns_error_instead_of_raising(self, scenario):
        error = check_parameter_settings(
            FullDegreeLoveNumberSettings("Earth", 3, ("Sun",)), scenario.environment
        )
        assert isinstance(error, UnknownDeformingBodyError)
        assert isinstance(error, ConfigurationError)

    def test_degree_mismatch(self, scenario):
        with pytest.raises(DegreeMismatchError) as info:
            create_parameters_to_estimate(
                [FullDegreeLoveNumberSettings("Earth", 4, ("Moon",))], scenario.environment
            )
        assert info.value.degree == 4

    @pytest.mark.parametrize("orders", [(3,), (0, 0), ()])
    def test_order_subset_mismatch(self, scenario, orders):
        with pytest.raises(OrderSubsetMismatchError) as info:
            create_parameters_to_estimate(
                [SingleDegreeLoveNumberSettings("Earth", 2, orders)], scenario.environment
            )
        assert info.value.orders == orders

    def test_unknown_body(self, scenario):
        with pytest.raises(UnknownBodyError):
            create_parameters_to_estimate([GravitationalParameterSettings("Mars")], scenario.environment)

    def test_missing_models(self, scenario):
        assert isinstance(
            check_parameter_settings(ConstantRotationRateSettings("Moon"), scenario.environment),
            UnknownBodyError,
        )
        assert isinstance(
            check_parameter_settings(GravitationalParameterSettings("Vehicle"), scenario.environment),
            UnknownBodyError,
        )

    def test_block_outside_model(self, scenario):
        error = check_parameter_settings(
            SphericalHarmonicsCosineBlockSettings("Earth", 2, 0, 7, 7), scenario.environment
        )
        assert isinstance(error, ConfigurationError)

    def test_ambiguous_tide_model(self, scenario):
        gravity = scenario.environment.get_gravity_model("Earth")
        gravity.tide_models.append(SolidBodyTideModel("Earth", ["Sun"], {2: 0.3}, RADIUS, MU))
        error = check_parameter_settings(FullDegreeLoveNumberSettings("Earth", 2), scenario.environment)
        assert isinstance(error, UnknownDeformingBodyError)
        assert check_parameter_settings(
            FullDegreeLoveNumberSettings("Earth", 2, ("Sun",)), scenario.environment
        ) is None

    @pytest.mark.parametrize(
        "settings",
        [
            GravitationalParameterSettings("Earth"),
            ConstantRotationRateSettings("Earth"),
            RotationPolePositionSettings("Earth"),
            SphericalHarmonicsCosineBlockSettings("Earth", 2, 0, 5, 4),
            SphericalHarmonicsSineBlockSettings("Earth", 2, 1, 5, 4),
            FullDegreeLoveNumberSettings("Earth", 2, ("Moon",), use_complex=True),
            FullDegreeLoveNumberSettings("Earth", 3),
            SingleDegreeLoveNumberSettings("Earth", 2, (2, 0, 1)),
            SingleDegreeLoveNumberSettings("Earth", 3, (0, 3), ("Moon",), use_complex=True),
        ],
    )
    def test_valid(self, scenario, settings):
        assert check_parameter_settings(settings, scenario.environment) is None


class TestParameterSet:
    @pytest.fixture
    def parameters(self, scenario):
        return create_parameters_to_estimate(
            [
                GravitationalParameterSettings("Earth"),
                RotationPolePositionSettings("Earth"),
                SphericalHarmonicsCosineBlockSettings("Earth", 2, 0, 5, 4),
                SphericalHarmonicsSineBlockSettings("Earth", 2, 1, 5, 4),
                FullDegreeLoveNumberSettings("Earth", 2, ("Moon",), use_complex=True),
                SingleDegreeLoveNumberSettings("Earth", 3, (0, 3)),
            ],
            scenario.environment,
        )

    def test_sizes_and_indices(self, parameters):
        assert [p.size for p in parameters] == [1, 2, 17, 13, 2, 2]
        assert parameters.size == 37
        assert parameters.indices() == [(0, 1), (1, 2), (3, 17), (20, 13), (33, 2), (35, 2)]
        assert len(parameters.component_names()) == 37

    def test_values(self, parameters):
        values = parameters.get_values()
        assert values[0] == MU
        np.testing.assert_allclose(values[1:3], [0.3, 1.4])
        assert values[3] == COSINE[2, 0]
        assert values[20] == SINE[2, 1]
        np.testing.assert_allclose(values[33:35], [0.29525, -0.00087])
        np.testing.assert_allclose(values[35:], [0.093, 0.093])

    def test_set_values(self, parameters, scenario):
        values = parameters.get_values()
        values[0] = 2.0 * MU
        values[34] = 0.001
        parameters.set_values(values)
        assert scenario.environment.get_gravity_model("Earth").gm == 2.0 * MU
        assert scenario.tide_model.get_love_number(2, 2) == pytest.approx(0.29525 + 0.001j)
        np.testing.assert_allclose(parameters.get_values(), values)

    def test_set_values_wrong_size(self, parameters):
        with pytest.raises(ValueError, match="parameter values"):
            parameters.set_values(np.zeros(3))

    def test_real_love_number_keeps_imaginary_part(self, scenario):
        (parameter,) = create_parameters_to_estimate(
            [SingleDegreeLoveNumberSettings("Earth", 2, (1,))], scenario.environment
        )
        parameter.set_value([0.4])
        assert scenario.tide_model.get_love_number(2, 1) == pytest.approx(0.4 - 0.00087j)
        assert scenario.tide_model.get_love_number(2, 0) == pytest.approx(0.29525 - 0.00087j)

    def test_full_degree_love_number_shifts_all_orders(self, scenario):
        scenario.tide_model.set_love_numbers(2, [0.30 - 0.001j, 0.31, 0.32 + 0.002j])
        (parameter,) = create_parameters_to_estimate(
            [FullDegreeLoveNumberSettings("Earth", 2, use_complex=True)], scenario.environment
        )
        np.testing.assert_allclose(parameter.get_value(), [0.30, -0.001])

        parameter.set_value([0.40, 0.0])
        np.testing.assert_allclose(
            scenario.tide_model.get_love_numbers(2), [0.40, 0.41 + 0.001j, 0.42 + 0.003j]
        )

        parameter.set_value(parameter.get_value())
        np.testing.assert_allclose(
            scenario.tide_model.get_love_numbers(2), [0.40, 0.41 + 0.001j, 0.42 + 0.003j]
        )

    def test_rotation_rate_value(self, scenario):
        (parameter,) = create_parameters_to_estimate(
            [ConstantRotationRateSettings("Earth")], scenario.environment
        )
        assert parameter.get_value()[0] == pytest.approx(ROTATION_RATE)
        assert parameter.component_names() == ["Earth.rotation_rate"]

    def test_logs_catalog(self, scenario, caplog):
        with caplog.at_level(logging.INFO, logger="gravjax.estimation.parameters"):
            create_parameters_to_estimate([GravitationalParameterSettings("Earth")], scenario.environment)
        assert "1 estimable parameters" in caplog.text
