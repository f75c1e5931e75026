"""Estimable parameters and acceleration partials for orbit determination.

Available components:

- :class:`ParameterKind` and the parameter settings types
- :func:`create_parameters_to_estimate` -- validated parameter catalog
- :func:`check_parameter_settings` -- result-style validation of one setting
- :class:`ParameterSet` and the parameter classes
- :class:`SphericalHarmonicsGravityPartial` -- analytic acceleration partials
- :func:`numerical_state_partial`, :func:`numerical_parameter_partial` --
  central-difference counterparts
"""

from gravjax.estimation._types import (
    ConstantRotationRateSettings,
    FullDegreeLoveNumberSettings,
    GravitationalParameterSettings,
    ParameterKind,
    ParameterSettings,
    RotationPolePositionSettings,
    SingleDegreeLoveNumberSettings,
    SphericalHarmonicsCosineBlockSettings,
    SphericalHarmonicsSineBlockSettings,
)
from gravjax.estimation.acceleration_partials import SphericalHarmonicsGravityPartial
from gravjax.estimation.numerical_partials import (
    numerical_parameter_partial,
    numerical_state_partial,
)
from gravjax.estimation.parameters import (
    ConstantRotationRate,
    EstimatableParameter,
    FullDegreeLoveNumber,
    GravitationalParameter,
    ParameterSet,
    RotationPolePosition,
    SingleDegreeLoveNumber,
    SphericalHarmonicsCosineBlock,
    SphericalHarmonicsSineBlock,
    check_parameter_settings,
    coefficient_block_indices,
    create_parameters_to_estimate,
)

__all__ = [
    # Settings
    "ParameterKind",
    "ParameterSettings",
    "GravitationalParameterSettings",
    "ConstantRotationRateSettings",
    "RotationPolePositionSettings",
    "SphericalHarmonicsCosineBlockSettings",
    "SphericalHarmonicsSineBlockSettings",
    "FullDegreeLoveNumberSettings",
    "SingleDegreeLoveNumberSettings",
    # Parameters
    "EstimatableParameter",
    "GravitationalParameter",
    "ConstantRotationRate",
    "RotationPolePosition",
    "SphericalHarmonicsCosineBlock",
    "SphericalHarmonicsSineBlock",
    "FullDegreeLoveNumber",
    "SingleDegreeLoveNumber",
    "ParameterSet",
    "coefficient_block_indices",
    "check_parameter_settings",
    "create_parameters_to_estimate",
    # Partials
    "SphericalHarmonicsGravityPartial",
    "numerical_state_partial",
    "numerical_parameter_partial",
]
