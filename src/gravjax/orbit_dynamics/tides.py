"""Solid-body tidal deformation of a gravity field.

A body deformed by the tidal field of one or more perturbing bodies
acquires additive corrections to its normalized Stokes coefficients.
Following the IERS Conventions, for degree ``n`` and order ``m``

.. math::

    \\Delta\\bar{C}_{nm} - i\\Delta\\bar{S}_{nm} = \\frac{k_{nm}}{2n+1}
        \\sum_j \\frac{GM_j}{GM} \\left(\\frac{R}{r_j}\\right)^{n+1}
        \\bar{P}_{nm}(\\sin\\phi_j) \\, e^{-i m \\lambda_j}

where ``(r_j, phi_j, lambda_j)`` is the body-fixed spherical position of
perturber ``j`` and ``k_nm`` a (possibly complex) Love number.  Writing the
real and imaginary parts of the sum as ``X_c`` and ``X_s`` gives

.. math::

    \\Delta C = k_r X_c + k_i X_s, \\qquad \\Delta S = k_r X_s - k_i X_c

which is linear in the Love number components.

References:
    1. G. Petit and B. Luzum, *IERS Conventions (2010)*, IERS Technical
       Note 36, Sec. 6.2.1.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import jax.numpy as jnp
import numpy as np

from gravjax.coordinates.spherical import position_cartesian_to_spherical
from gravjax.harmonics.cache import SphericalHarmonicsCache

if TYPE_CHECKING:
    from gravjax.environment import Environment


class SolidBodyTideModel:
    """Degree- and order-dependent solid-body tide of one deformed body.

    Args:
        deformed_body: Name of the body whose field is corrected.
        deforming_bodies: Names of the bodies raising the tide.
        love_numbers: Mapping of degree to Love numbers.  Each value is a
            single (real or complex) number applied to all orders
            ``0..n``, or a sequence of ``n + 1`` per-order numbers.
        reference_radius: Reference radius of the deformed body [m].
        reference_gm: Gravitational parameter of the deformed body used to
            scale the perturber masses [m^3/s^2].  Held fixed so that the
            corrections do not change when the field's own gravitational
            parameter is estimated.

    Examples:
        ```python
        from gravjax.orbit_dynamics import SolidBodyTideModel
        tide = SolidBodyTideModel(
            "Earth", ["Moon"], {2: 0.29525 - 0.00087j, 3: 0.093},
            6378137.0, 3.986004418e14,
        )
        tide.get_love_numbers(2)
        ```
    """

    def __init__(
        self,
        deformed_body: str,
        deforming_bodies: list[str] | tuple[str, ...],
        love_numbers: dict[int, complex | list[complex]],
        reference_radius: float,
        reference_gm: float,
    ):
        if not deforming_bodies:
            raise ValueError("At least one deforming body is required.")
        if not love_numbers:
            raise ValueError("At least one Love number degree is required.")
        self.deformed_body = deformed_body
        self.deforming_bodies = tuple(deforming_bodies)
        self.reference_radius = float(reference_radius)
        self.reference_gm = float(reference_gm)

        self._love_numbers: dict[int, np.ndarray] = {}
        for degree in sorted(love_numbers):
            if degree < 2:
                raise ValueError(f"Tidal Love numbers start at degree 2, got {degree}.")
            self._love_numbers[degree] = self._expand(degree, love_numbers[degree])

        self.max_degree = max(self._love_numbers)
        self._cache = SphericalHarmonicsCache(self.max_degree)

    @staticmethod
    def _expand(degree: int, values) -> np.ndarray:
        values = np.atleast_1d(np.asarray(values, dtype=np.complex128))
        if values.shape == (1,):
            return np.full(degree + 1, values[0], dtype=np.complex128)
        if values.shape != (degree + 1,):
            raise ValueError(
                f"Degree {degree} needs one Love number or {degree + 1} per-order "
                f"values, got {values.shape[0]}."
            )
        return values.copy()

    @property
    def degrees(self) -> tuple[int, ...]:
        """Degrees with Love numbers, ascending."""
        return tuple(self._love_numbers)

    # ------------------------------------------------------------------
    # Love number access
    # ------------------------------------------------------------------

    def _check_degree(self, degree: int) -> None:
        if degree not in self._love_numbers:
            raise ValueError(
                f"Tide model of {self.deformed_body!r} has no Love numbers at "
                f"degree {degree}; available: {self.degrees}."
            )

    def get_love_numbers(self, degree: int) -> np.ndarray:
        """Per-order Love numbers of *degree*, shape ``(degree + 1,)``."""
        self._check_degree(degree)
        return self._love_numbers[degree].copy()

    def set_love_numbers(self, degree: int, values) -> None:
        """Replace the Love numbers of *degree* (single value or per order)."""
        self._check_degree(degree)
        self._love_numbers[degree] = self._expand(degree, values)

    def get_love_number(self, degree: int, order: int) -> complex:
        self._check_degree(degree)
        return complex(self._love_numbers[degree][order])

    def set_love_number(self, degree: int, order: int, value: complex) -> None:
        self._check_degree(degree)
        self._love_numbers[degree][order] = value

    # ------------------------------------------------------------------
    # Coefficient corrections
    # ------------------------------------------------------------------

    def love_number_basis(self, environment: Environment) -> dict[int, tuple[np.ndarray, np.ndarray]]:
        """Coefficient corrections per unit Love number.

        Returns:
            dict: For each degree ``n``, the arrays ``(X_c, X_s)`` of shape
                ``(n + 1,)`` such that ``dC = k_r X_c + k_i X_s`` and
                ``dS = k_r X_s - k_i X_c``.
        """
        basis = {n: (np.zeros(n + 1), np.zeros(n + 1)) for n in self.degrees}
        legendre = self._cache.legendre_cache
        for name in self.deforming_bodies:
            position = environment.body_fixed_position(
                environment.get_position(name), self.deformed_body
            )
            spherical = position_cartesian_to_spherical(position)
            self._cache.update(
                spherical[0], jnp.sin(spherical[1]), spherical[2], self.reference_radius
            )
            mass_ratio = environment.get_body(name).gm / self.reference_gm
            for n, (X_c, X_s) in basis.items():
                scale = mass_ratio * float(self._cache.get_radius_power(n + 1)) / (2.0 * n + 1.0)
                for m in range(n + 1):
                    X = scale * float(legendre.get(n, m))
                    X_c[m] += X * float(self._cache.get_cosine_of_multiple_longitude(m))
                    X_s[m] += X * float(self._cache.get_sine_of_multiple_longitude(m))
        return basis

    def coefficient_corrections(self, environment: Environment) -> tuple[np.ndarray, np.ndarray]:
        """Current additive corrections ``(dC, dS)``.

        Order-zero sine corrections are zero, like the nominal field.

        Returns:
            tuple: Two arrays of shape ``(max_degree + 1, max_degree + 1)``.
        """
        size = self.max_degree + 1
        delta_C = np.zeros((size, size))
        delta_S = np.zeros((size, size))
        for n, (X_c, X_s) in self.love_number_basis(environment).items():
            k = self._love_numbers[n]
            delta_C[n, : n + 1] = k.real * X_c + k.imag * X_s
            delta_S[n, : n + 1] = k.real * X_s - k.imag * X_c
            delta_S[n, 0] = 0.0
        return delta_C, delta_S

    def __repr__(self) -> str:
        return (
            f"SolidBodyTideModel({self.deformed_body!r}, "
            f"deforming_bodies={self.deforming_bodies}, degrees={self.degrees})"
        )
