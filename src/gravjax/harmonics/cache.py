"""Position-dependent quantities shared by all terms of a harmonic expansion.

Every term ``(n, m)`` of the potential needs the radius ratio power
``(R/r)^n``, the trigonometric functions ``cos(m*lambda)`` and
``sin(m*lambda)`` and the Legendre function of ``sin(phi)``.
:class:`SphericalHarmonicsCache` evaluates all of them once per position so
the per-term gradient and Hessian evaluations are pure table lookups.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from gravjax.config import get_dtype
from gravjax.errors import PreconditionError
from gravjax.harmonics.legendre import LegendreCache


class SphericalHarmonicsCache:
    """Cache of radius powers, multiple-longitude trigonometry and Legendre functions.

    The cache exclusively owns one :class:`LegendreCache` of the same
    degree and order.  All tables are recomputed wholesale on every
    :meth:`update`; nothing is reused between positions.

    Args:
        max_degree: Maximum degree of the expansion.
        max_order: Maximum order of the expansion.  Defaults to *max_degree*.
        compute_second_derivatives: Whether the owned Legendre cache
            computes second derivatives.

    Examples:
        ```python
        from gravjax.harmonics import SphericalHarmonicsCache
        cache = SphericalHarmonicsCache(5)
        cache.update(7.0e6, 0.3, 1.2, 6378137.0)
        ratio = cache.get_radius_power(3)
        ```
    """

    def __init__(
        self,
        max_degree: int,
        max_order: int | None = None,
        compute_second_derivatives: bool = False,
    ):
        if max_order is None:
            max_order = max_degree
        self._legendre = LegendreCache(
            max_degree,
            max_order,
            compute_first_derivatives=True,
            compute_second_derivatives=compute_second_derivatives,
        )
        self.max_degree = self._legendre.max_degree
        self.max_order = self._legendre.max_order

        self._radius: Array | None = None
        self._longitude: Array | None = None
        self._reference_radius: Array | None = None
        self._radius_powers: Array | None = None
        self._cosines: Array | None = None
        self._sines: Array | None = None

    def update(
        self,
        radius: ArrayLike,
        polynomial_argument: ArrayLike,
        longitude: ArrayLike,
        reference_radius: ArrayLike,
    ) -> None:
        """Recompute every table for a new position.

        Args:
            radius: Distance from the body centre [m], ``> 0``.
            polynomial_argument: Sine of the geocentric latitude.
            longitude: Body-fixed longitude [rad].
            reference_radius: Reference radius of the expansion [m].

        Raises:
            PreconditionError: If the polynomial argument lies outside
                ``[-1, 1]``.
        """
        _float = get_dtype()
        r = jnp.asarray(radius, dtype=_float)
        lon = jnp.asarray(longitude, dtype=_float)
        r_ref = jnp.asarray(reference_radius, dtype=_float)

        self._legendre.update(polynomial_argument)

        ratio = r_ref / r
        powers = jnp.ones(self.max_degree + 2, dtype=_float)
        for n in range(1, self.max_degree + 2):
            powers = powers.at[n].set(powers[n - 1] * ratio)

        cosines = jnp.zeros(self.max_order + 1, dtype=_float)
        sines = jnp.zeros(self.max_order + 1, dtype=_float)
        for m in range(self.max_order + 1):
            cosines = cosines.at[m].set(jnp.cos(m * lon))
            sines = sines.at[m].set(jnp.sin(m * lon))

        self._radius = r
        self._longitude = lon
        self._reference_radius = r_ref
        self._radius_powers = powers
        self._cosines = cosines
        self._sines = sines

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def _require_update(self) -> None:
        if self._radius is None:
            raise PreconditionError(
                "Spherical harmonics cache was read before update() was called."
            )

    @property
    def legendre_cache(self) -> LegendreCache:
        """The owned Legendre cache."""
        return self._legendre

    @property
    def current_radius(self) -> Array:
        self._require_update()
        return self._radius

    @property
    def current_longitude(self) -> Array:
        self._require_update()
        return self._longitude

    @property
    def current_polynomial_argument(self) -> Array:
        self._require_update()
        return self._legendre.current_polynomial_argument

    @property
    def reference_radius(self) -> Array:
        self._require_update()
        return self._reference_radius

    def get_radius_power(self, n: int) -> Array:
        """Return ``(R/r)^n`` for ``0 <= n <= max_degree + 1``."""
        self._require_update()
        if n < 0 or n > self.max_degree + 1:
            raise PreconditionError(
                f"Radius power {n} is outside [0, {self.max_degree + 1}]."
            )
        return self._radius_powers[n]

    def get_cosine_of_multiple_longitude(self, m: int) -> Array:
        """Return ``cos(m * lambda)`` for ``0 <= m <= max_order``."""
        self._require_update()
        if m < 0 or m > self.max_order:
            raise PreconditionError(f"Order {m} is outside [0, {self.max_order}].")
        return self._cosines[m]

    def get_sine_of_multiple_longitude(self, m: int) -> Array:
        """Return ``sin(m * lambda)`` for ``0 <= m <= max_order``."""
        self._require_update()
        if m < 0 or m > self.max_order:
            raise PreconditionError(f"Order {m} is outside [0, {self.max_order}].")
        return self._sines[m]

    def __repr__(self) -> str:
        return (
            f"SphericalHarmonicsCache(max_degree={self.max_degree}, "
            f"max_order={self.max_order})"
        )
