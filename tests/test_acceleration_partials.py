"""Analytic acceleration partials against central differences."""

import logging

import jax.numpy as jnp
import numpy as np
import pytest

from conftest import MU, assert_matrix_close_fraction
from gravjax.errors import PreconditionError
from gravjax.estimation import (
    ConstantRotationRateSettings,
    FullDegreeLoveNumberSettings,
    GravitationalParameter,
    GravitationalParameterSettings,
    RotationPolePositionSettings,
    SingleDegreeLoveNumberSettings,
    SphericalHarmonicsCosineBlockSettings,
    SphericalHarmonicsGravityPartial,
    SphericalHarmonicsSineBlockSettings,
    create_parameters_to_estimate,
    numerical_parameter_partial,
    numerical_state_partial,
)
from gravjax.orbit_dynamics import (
    SphericalHarmonicAccelerationModel,
    SphericalHarmonicAccelerationSettings,
)


def _state_partial(scenario, body, start_index, perturbation):
    env = scenario.environment
    return numerical_state_partial(
        lambda: env.get_state(body),
        lambda state: env.set_state(body, state),
        lambda: scenario.acceleration_model.evaluate(env),
        perturbation,
        start_index=start_index,
    )


def _parameter(scenario, settings):
    (parameter,) = create_parameters_to_estimate([settings], scenario.environment)
    return parameter


class TestStatePartials:
    def test_position_of_accelerated_body(self, scenario):
        analytic = scenario.partial.wrt_position_of_accelerated_body()
        numerical = _state_partial(scenario, "Vehicle", 0, 10.0)
        assert_matrix_close_fraction(analytic, numerical, 1e-6)

    def test_position_of_accelerating_body(self, scenario):
        analytic = scenario.partial.wrt_position_of_accelerating_body()
        numerical = _state_partial(scenario, "Earth", 0, 10.0)
        assert_matrix_close_fraction(analytic, numerical, 1e-6)
        np.testing.assert_allclose(analytic, -scenario.partial.wrt_position_of_accelerated_body())

    def test_velocities_are_zero(self, scenario):
        np.testing.assert_array_equal(scenario.partial.wrt_velocity_of_accelerated_body(), np.zeros((3, 3)))
        np.testing.assert_array_equal(scenario.partial.wrt_velocity_of_accelerating_body(), np.zeros((3, 3)))
        np.testing.assert_array_equal(_state_partial(scenario, "Vehicle", 3, 1.0e-3), np.zeros((3, 3)))
        np.testing.assert_array_equal(_state_partial(scenario, "Earth", 3, 1.0e-3), np.zeros((3, 3)))

    def test_position_partial_is_symmetric(self, scenario):
        block = scenario.partial.wrt_position_of_accelerated_body()
        assert_matrix_close_fraction(block, block.T, 1e-12)

    def test_block_placement(self, scenario):
        block = scenario.partial.wrt_position_of_accelerated_body()
        matrix = jnp.ones((6, 9))
        result = scenario.partial.wrt_position_of_accelerated_body(
            matrix, add_contribution=False, start_row=3, start_column=6
        )
        np.testing.assert_allclose(result[3:, 6:], 1.0 - block)
        np.testing.assert_array_equal(result[:3], np.ones((3, 9)))
        np.testing.assert_array_equal(result[3:, :6], np.ones((3, 6)))

    def test_state_restored(self, scenario):
        before = scenario.environment.get_state("Vehicle")
        _state_partial(scenario, "Vehicle", 0, 10.0)
        np.testing.assert_array_equal(scenario.environment.get_state("Vehicle"), before)


class TestParameterPartials:
    def test_gravitational_parameter(self, scenario):
        parameter = _parameter(scenario, GravitationalParameterSettings("Earth"))
        analytic = scenario.partial.wrt_parameter(parameter)
        np.testing.assert_allclose(analytic[:, 0], scenario.partial.acceleration / MU, rtol=1e-14)

        numerical = numerical_parameter_partial(
            parameter, lambda: scenario.acceleration_model.evaluate(scenario.environment), 1.0e12
        )
        assert_matrix_close_fraction(analytic, numerical, 1e-8)

    def test_rotation_rate(self, scenario):
        parameter = _parameter(scenario, ConstantRotationRateSettings("Earth"))
        analytic = scenario.partial.wrt_parameter(parameter)
        numerical = numerical_parameter_partial(
            parameter, lambda: scenario.acceleration_model.evaluate(scenario.environment), 1.0e-12
        )
        assert analytic.shape == (3, 1)
        assert_matrix_close_fraction(analytic, numerical, 1e-6)

    def test_pole_position(self, scenario):
        parameter = _parameter(scenario, RotationPolePositionSettings("Earth"))
        analytic = scenario.partial.wrt_parameter(parameter)
        numerical = numerical_parameter_partial(
            parameter, lambda: scenario.acceleration_model.evaluate(scenario.environment), 1.0e-6
        )
        assert analytic.shape == (3, 2)
        assert_matrix_close_fraction(analytic, numerical, 1e-6)

    @pytest.mark.parametrize(
        "settings,size",
        [
            (SphericalHarmonicsCosineBlockSettings("Earth", 2, 0, 5, 4), 17),
            (SphericalHarmonicsSineBlockSettings("Earth", 2, 1, 5, 4), 13),
        ],
    )
    def test_coefficient_blocks(self, scenario, settings, size):
        parameter = _parameter(scenario, settings)
        analytic = scenario.partial.wrt_parameter(parameter)
        numerical = numerical_parameter_partial(
            parameter, lambda: scenario.acceleration_model.evaluate(scenario.environment), 1.0e-3
        )
        assert analytic.shape == (3, size)
        assert_matrix_close_fraction(analytic, numerical, 1e-8)

    @pytest.mark.parametrize(
        "settings,step",
        [
            (SingleDegreeLoveNumberSettings("Earth", 2, (2, 0, 1)), 1.0),
            (FullDegreeLoveNumberSettings("Earth", 2, ("Moon",), use_complex=True), 1.0),
            (FullDegreeLoveNumberSettings("Earth", 3), 10.0),
            (SingleDegreeLoveNumberSettings("Earth", 3, (0, 3), use_complex=True), 10.0),
        ],
    )
    def test_love_numbers(self, scenario, settings, step):
        parameter = _parameter(scenario, settings)
        analytic = scenario.partial.wrt_parameter(parameter)
        numerical = numerical_parameter_partial(
            parameter,
            lambda: scenario.acceleration_model.evaluate(scenario.environment),
            step,
            update_fn=scenario.environment.update_gravity_field_variations,
        )
        assert analytic.shape == (3, parameter.size)
        assert_matrix_close_fraction(analytic, numerical, 1e-6)

    def test_love_number_restored(self, scenario):
        parameter = _parameter(scenario, FullDegreeLoveNumberSettings("Earth", 2, use_complex=True))
        gravity = scenario.environment.get_gravity_model("Earth")
        before = gravity.cosine_coefficients
        numerical_parameter_partial(
            parameter,
            lambda: scenario.acceleration_model.evaluate(scenario.environment),
            1.0,
            update_fn=scenario.environment.update_gravity_field_variations,
        )
        np.testing.assert_allclose(parameter.get_value(), [0.29525, -0.00087])
        np.testing.assert_allclose(gravity.cosine_coefficients, before, rtol=1e-14)

    def test_parameter_set(self, scenario):
        parameters = create_parameters_to_estimate(
            [
                GravitationalParameterSettings("Earth"),
                RotationPolePositionSettings("Earth"),
                FullDegreeLoveNumberSettings("Earth", 2, use_complex=True),
            ],
            scenario.environment,
        )
        columns = scenario.partial.wrt_parameter_set(parameters)
        assert columns.shape == (3, 5)
        np.testing.assert_allclose(columns[:, 1:3], scenario.partial.wrt_parameter(parameters[1]))

    def test_parameter_of_other_body_is_zero(self, scenario, gravity_model):
        parameter = GravitationalParameter("Moon", gravity_model)
        function, size = scenario.partial.get_parameter_partial_function(parameter)
        assert size == 1
        np.testing.assert_array_equal(function(), np.zeros((3, 1)))


class TestSnapshot:
    """Partials describe the state of the last update, not of later evaluations."""

    def test_evaluation_elsewhere_leaves_partials_unchanged(self, scenario):
        env = scenario.environment
        parameters = create_parameters_to_estimate(
            [
                SphericalHarmonicsCosineBlockSettings("Earth", 2, 0, 5, 4),
                SphericalHarmonicsSineBlockSettings("Earth", 2, 1, 5, 4),
                FullDegreeLoveNumberSettings("Earth", 2, use_complex=True),
                SingleDegreeLoveNumberSettings("Earth", 3, (0, 3)),
            ],
            env,
        )
        position_block = scenario.partial.wrt_position_of_accelerated_body()
        columns = scenario.partial.wrt_parameter_set(parameters)

        nominal = env.get_state("Vehicle")
        env.set_state("Vehicle", nominal.at[0].add(1.0e6))
        env.set_state("Moon", 2.0 * env.get_state("Moon"))
        scenario.acceleration_model.evaluate(env)
        env.set_state("Vehicle", nominal)

        np.testing.assert_array_equal(scenario.partial.wrt_position_of_accelerated_body(), position_block)
        np.testing.assert_array_equal(scenario.partial.wrt_parameter_set(parameters), columns)

    def test_update_refreshes_columns(self, scenario):
        env = scenario.environment
        parameter = _parameter(scenario, SphericalHarmonicsCosineBlockSettings("Earth", 2, 0, 3, 3))
        before = scenario.partial.wrt_parameter(parameter)
        env.set_state("Vehicle", env.get_state("Vehicle").at[0].add(1.0e6))
        scenario.partial.update(env)
        assert not np.allclose(scenario.partial.wrt_parameter(parameter), before)

    def test_full_degree_love_number_keeps_per_order_values(self, scenario):
        scenario.tide_model.set_love_numbers(2, [0.30, 0.31, 0.32])
        env = scenario.environment
        env.update_gravity_field_variations()
        scenario.partial.update(env)
        parameter = _parameter(scenario, FullDegreeLoveNumberSettings("Earth", 2))

        analytic = scenario.partial.wrt_parameter(parameter)
        numerical = numerical_parameter_partial(
            parameter,
            lambda: scenario.acceleration_model.evaluate(env),
            1.0,
            update_fn=env.update_gravity_field_variations,
        )
        assert_matrix_close_fraction(analytic, numerical, 1e-6)
        np.testing.assert_allclose(scenario.tide_model.get_love_numbers(2).real, [0.30, 0.31, 0.32])


class TestTruncation:
    def test_coefficients_outside_truncation(self, scenario, caplog):
        model = SphericalHarmonicAccelerationModel(
            "Vehicle", "Earth", SphericalHarmonicAccelerationSettings(4, 3)
        )
        partial = SphericalHarmonicsGravityPartial(model)
        partial.update(scenario.environment)
        parameter = _parameter(scenario, SphericalHarmonicsCosineBlockSettings("Earth", 2, 0, 5, 4))

        with caplog.at_level(logging.WARNING, logger="gravjax.estimation.acceleration_partials"):
            function, _ = partial.get_parameter_partial_function(parameter)
        assert "outside the acceleration truncation" in caplog.text

        columns = function()
        for column, (n, m) in zip(np.asarray(columns).T, parameter.indices):
            if n > 4 or m > 3:
                np.testing.assert_array_equal(column, np.zeros(3))
            else:
                assert np.any(column != 0.0)

        numerical = numerical_parameter_partial(
            parameter, lambda: model.evaluate(scenario.environment), 1.0e-3
        )
        assert_matrix_close_fraction(columns, numerical, 1e-8)


class TestPreconditions:
    def test_read_before_update(self, scenario):
        partial = SphericalHarmonicsGravityPartial(scenario.acceleration_model)
        with pytest.raises(PreconditionError):
            partial.wrt_position_of_accelerated_body()
        with pytest.raises(PreconditionError):
            partial.acceleration
        parameter = _parameter(scenario, GravitationalParameterSettings("Earth"))
        function, _ = partial.get_parameter_partial_function(parameter)
        with pytest.raises(PreconditionError):
            function()
