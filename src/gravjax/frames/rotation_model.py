"""Inertial to body-fixed rotation of a uniformly rotating body.

Provides :class:`SimpleRotationModel`, an IAU-style orientation model with a
fixed pole and a constant rotation rate.  The rotation from the inertial
frame into the body-fixed frame is

.. math::

    R(t) = R_z(W(t)) \\, R_x(\\pi/2 - \\delta) \\, R_z(\\alpha + \\pi/2),
    \\qquad W(t) = W_0 + \\omega (t - t_0)

where ``alpha`` and ``delta`` are the right ascension and declination of
the pole, ``W0`` the prime meridian angle at the reference epoch ``t0`` and
``omega`` the rotation rate.  The model also provides the analytic
derivatives of ``R`` with respect to time, the rotation rate and the pole
angles, which the gravity partials need.

Times are seconds since an arbitrary reference (e.g. seconds past J2000);
angles are radians unless ``use_degrees=True``.

References:
    1. B. A. Archinal et al., *Report of the IAU Working Group on
       Cartographic Coordinates and Rotational Elements: 2015*, Celestial
       Mechanics and Dynamical Astronomy 130, 2018.
"""

from __future__ import annotations

import math

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from gravjax.attitude_representations import Rx, Rz, dRx, dRz
from gravjax.config import get_dtype
from gravjax.utils import from_radians, to_radians


class SimpleRotationModel:
    """Constant-rate rotation about a fixed pole.

    The rotation rate and the pole position are estimable: they can be read
    and replaced through :attr:`rotation_rate` and :meth:`set_pole_position`.

    Args:
        right_ascension: Right ascension of the pole.
        declination: Declination of the pole.
        prime_meridian: Prime meridian angle ``W0`` at the reference epoch.
        rotation_rate: Rotation rate [rad/s].
        reference_epoch: Epoch ``t0`` at which ``W = W0`` [s].
        use_degrees: Interpret the three angles as degrees.

    Examples:
        ```python
        from gravjax.frames import SimpleRotationModel
        model = SimpleRotationModel(0.0, 90.0, 0.0, 7.2921e-5, 0.0, use_degrees=True)
        R = model.rotation_to_body_fixed(3600.0)
        ```
    """

    def __init__(
        self,
        right_ascension: float,
        declination: float,
        prime_meridian: float,
        rotation_rate: float,
        reference_epoch: float = 0.0,
        use_degrees: bool = False,
    ):
        self._right_ascension = float(to_radians(right_ascension, use_degrees))
        self._declination = float(to_radians(declination, use_degrees))
        self._prime_meridian = float(to_radians(prime_meridian, use_degrees))
        self._rotation_rate = float(rotation_rate)
        self.reference_epoch = float(reference_epoch)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    @property
    def rotation_rate(self) -> float:
        """Rotation rate [rad/s]."""
        return self._rotation_rate

    @rotation_rate.setter
    def rotation_rate(self, value: float) -> None:
        self._rotation_rate = float(value)

    @property
    def prime_meridian(self) -> float:
        """Prime meridian angle at the reference epoch [rad]."""
        return self._prime_meridian

    def pole_position(self, use_degrees: bool = False) -> Array:
        """Return the pole position ``[right_ascension, declination]``."""
        pole = jnp.array([self._right_ascension, self._declination], dtype=get_dtype())
        return from_radians(pole, use_degrees)

    def set_pole_position(self, pole: ArrayLike, use_degrees: bool = False) -> None:
        """Replace the pole position ``[right_ascension, declination]``."""
        pole = to_radians(jnp.asarray(pole, dtype=get_dtype()), use_degrees)
        if pole.shape != (2,):
            raise ValueError(f"Pole position must have shape (2,), got {pole.shape}.")
        self._right_ascension = float(pole[0])
        self._declination = float(pole[1])

    def rotation_angle(self, t: float) -> Array:
        """Prime meridian angle ``W(t)`` [rad]."""
        return jnp.asarray(
            self._prime_meridian + self._rotation_rate * (t - self.reference_epoch),
            dtype=get_dtype(),
        )

    # ------------------------------------------------------------------
    # Rotation and its derivatives
    # ------------------------------------------------------------------

    def _pole_angles(self):
        return (
            math.pi / 2.0 - self._declination,
            self._right_ascension + math.pi / 2.0,
        )

    def rotation_to_body_fixed(self, t: float) -> Array:
        """Rotation matrix from the inertial frame to the body-fixed frame.

        Args:
            t: Time [s].

        Returns:
            jax.Array: ``(3, 3)`` rotation matrix.
        """
        tilt, node = self._pole_angles()
        return Rz(self.rotation_angle(t)) @ Rx(tilt) @ Rz(node)

    def rotation_to_inertial(self, t: float) -> Array:
        """Rotation matrix from the body-fixed frame to the inertial frame."""
        return self.rotation_to_body_fixed(t).T

    def derivative_of_rotation_to_body_fixed(self, t: float) -> Array:
        """Time derivative of :meth:`rotation_to_body_fixed` [1/s]."""
        tilt, node = self._pole_angles()
        return self._rotation_rate * dRz(self.rotation_angle(t)) @ Rx(tilt) @ Rz(node)

    def derivative_wrt_rotation_rate(self, t: float) -> Array:
        """Derivative of :meth:`rotation_to_body_fixed` with respect to the rotation rate [s]."""
        tilt, node = self._pole_angles()
        return (t - self.reference_epoch) * dRz(self.rotation_angle(t)) @ Rx(tilt) @ Rz(node)

    def derivative_wrt_pole_position(self, t: float) -> Array:
        """Derivatives of :meth:`rotation_to_body_fixed` with respect to the pole angles.

        Args:
            t: Time [s].

        Returns:
            jax.Array: ``(2, 3, 3)`` array holding ``dR/d(right_ascension)``
                and ``dR/d(declination)``.
        """
        tilt, node = self._pole_angles()
        R_w = Rz(self.rotation_angle(t))
        d_ra = R_w @ Rx(tilt) @ dRz(node)
        # d(tilt)/d(declination) = -1
        d_dec = -(R_w @ dRx(tilt) @ Rz(node))
        return jnp.stack([d_ra, d_dec])

    def __repr__(self) -> str:
        return (
            f"SimpleRotationModel(right_ascension={self._right_ascension:.6f}, "
            f"declination={self._declination:.6f}, "
            f"rotation_rate={self._rotation_rate:.6e})"
        )
