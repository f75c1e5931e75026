"""Spherical harmonic expansion of a gravitational potential.

- :class:`LegendreCache`: geodesy-normalized associated Legendre functions
  and their first and second derivatives.
- :class:`SphericalHarmonicsCache`: radius powers and multiple-longitude
  trigonometry around an owned Legendre cache.
- Per-term and summed potential gradients and Hessians, and the body-fixed
  Cartesian acceleration with its position partial.
"""

from .cache import SphericalHarmonicsCache
from .legendre import LegendreCache, legendre_normalization_factor
from .potential import (
    accel_spherical_harmonics_body_fixed,
    compute_cumulative_spherical_hessian,
    compute_partial_of_body_fixed_acceleration,
    compute_potential_gradient,
    compute_potential_spherical_hessian,
    compute_spherical_gradient_sum,
    spherical_hessian_normalization,
)

__all__ = [
    # Caches
    "LegendreCache",
    "SphericalHarmonicsCache",
    "legendre_normalization_factor",
    # Single terms
    "compute_potential_gradient",
    "compute_potential_spherical_hessian",
    "spherical_hessian_normalization",
    # Sums
    "compute_spherical_gradient_sum",
    "compute_cumulative_spherical_hessian",
    # Body-fixed acceleration
    "accel_spherical_harmonics_body_fixed",
    "compute_partial_of_body_fixed_acceleration",
]
