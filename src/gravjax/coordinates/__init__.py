"""Coordinate transformations.

This sub-module provides the conversion between Cartesian positions and
spherical coordinates ``[r, lat, lon]``, together with the first and second
derivatives of the spherical coordinates that carry potential gradients and
Hessians into Cartesian accelerations and acceleration partials.
"""

from .spherical import (
    cartesian_acceleration_position_partial,
    position_cartesian_to_spherical,
    position_spherical_to_cartesian,
    spherical_coordinate_hessians,
    spherical_to_cartesian_gradient_matrix,
    spherical_to_cartesian_gradient_matrix_derivative,
)

__all__ = [
    "position_cartesian_to_spherical",
    "position_spherical_to_cartesian",
    "spherical_to_cartesian_gradient_matrix",
    "spherical_to_cartesian_gradient_matrix_derivative",
    "spherical_coordinate_hessians",
    "cartesian_acceleration_position_partial",
]
