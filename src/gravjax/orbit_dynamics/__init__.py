"""Gravitational force models.

- **Gravity**: spherical harmonic field models, the V/W acceleration and
  the inertial spherical harmonic acceleration model
- **Tides**: solid-body tidal corrections to the field coefficients
"""

from .gravity import (
    GravityModel,
    SphericalHarmonicAccelerationModel,
    SphericalHarmonicAccelerationSettings,
    accel_spherical_harmonics,
)
from .tides import SolidBodyTideModel

__all__ = [
    # Gravity
    "GravityModel",
    "accel_spherical_harmonics",
    "SphericalHarmonicAccelerationSettings",
    "SphericalHarmonicAccelerationModel",
    # Tides
    "SolidBodyTideModel",
]
