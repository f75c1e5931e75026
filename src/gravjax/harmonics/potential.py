"""Gradient and Hessian of a spherical harmonic gravity potential.

The potential of a body with gravitational parameter ``mu`` and reference
radius ``R`` is expanded as

.. math::

    U = \\frac{\\mu}{R} \\sum_{n,m} \\left(\\frac{R}{r}\\right)^{n+1}
        \\bar{P}_{nm}(\\sin\\phi)
        \\left(\\bar{C}_{nm}\\cos m\\lambda + \\bar{S}_{nm}\\sin m\\lambda\\right)

Gradients and Hessians are taken with respect to the spherical coordinates
``q = [r, phi, lambda]``.  Because ``r`` carries units of length and the
angles are dimensionless the entries of the Hessian have different units;
:func:`spherical_hessian_normalization` scales them to a common unit before
comparison.

Per-term functions read all position-dependent quantities through a
:class:`~gravjax.harmonics.cache.SphericalHarmonicsCache`, which must have
been updated for the position being evaluated.  The summing functions
exclude degrees below ``min_degree`` (2 by default): the point-mass and
centre-of-mass terms are modelled elsewhere.
"""

from __future__ import annotations

import logging

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from gravjax.config import get_dtype
from gravjax.coordinates.spherical import (
    cartesian_acceleration_position_partial,
    position_cartesian_to_spherical,
    spherical_to_cartesian_gradient_matrix,
)
from gravjax.harmonics.cache import SphericalHarmonicsCache

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Single terms
# ---------------------------------------------------------------------------


def _term_factors(pre_multiplier, n, m, C, S, cache):
    r = cache.current_radius
    sin_lat = cache.current_polynomial_argument
    cos_lat = jnp.sqrt(1.0 - sin_lat * sin_lat)
    A = pre_multiplier * cache.get_radius_power(n + 1)
    cos_ml = cache.get_cosine_of_multiple_longitude(m)
    sin_ml = cache.get_sine_of_multiple_longitude(m)
    Tc = C * cos_ml + S * sin_ml
    Ts = S * cos_ml - C * sin_ml
    return r, cos_lat, sin_lat, A, Tc, Ts


def compute_potential_gradient(
    spherical_position: ArrayLike,
    pre_multiplier: float,
    n: int,
    m: int,
    C: float,
    S: float,
    P: ArrayLike,
    dP: ArrayLike,
    cache: SphericalHarmonicsCache,
) -> Array:
    """Spherical gradient of a single ``(n, m)`` potential term.

    Radius, latitude and longitude factors are read from *cache*;
    *spherical_position* only identifies the point it was updated for.

    Args:
        spherical_position: ``[r, lat, lon]`` the cache was updated for.
        pre_multiplier: ``mu / R`` [m^2/s^2].
        n: Degree.
        m: Order.
        C: Cosine coefficient of the term.
        S: Sine coefficient of the term.
        P: Legendre function ``P(n, m)`` at ``sin(lat)``.
        dP: Derivative ``dP(n, m)/du`` at ``sin(lat)``.
        cache: Updated spherical harmonics cache.

    Returns:
        jax.Array: ``[dU/dr, dU/dlat, dU/dlon]``.
    """
    r, cos_lat, _, A, Tc, Ts = _term_factors(pre_multiplier, n, m, C, S, cache)
    return jnp.array([
        -(n + 1.0) / r * A * P * Tc,
        A * dP * cos_lat * Tc,
        m * A * P * Ts,
    ])


def compute_potential_spherical_hessian(
    spherical_position: ArrayLike,
    pre_multiplier: float,
    n: int,
    m: int,
    C: float,
    S: float,
    cache: SphericalHarmonicsCache,
) -> Array:
    """Spherical Hessian of a single ``(n, m)`` potential term.

    Requires the Legendre cache of *cache* to hold second derivatives.  All
    position-dependent factors are read from *cache*.

    Args:
        spherical_position: ``[r, lat, lon]`` the cache was updated for.
        pre_multiplier: ``mu / R`` [m^2/s^2].
        n: Degree.
        m: Order.
        C: Cosine coefficient of the term.
        S: Sine coefficient of the term.
        cache: Updated spherical harmonics cache.

    Returns:
        jax.Array: Symmetric ``(3, 3)`` matrix of second derivatives with
            respect to ``(r, lat, lon)``.

    Raises:
        PreconditionError: If second derivatives were not computed.
    """
    legendre = cache.legendre_cache
    P = legendre.get(n, m)
    dP = legendre.get_derivative(n, m)
    d2P = legendre.get_second_derivative(n, m)

    r, cos_lat, sin_lat, A, Tc, Ts = _term_factors(pre_multiplier, n, m, C, S, cache)

    h_rr = (n + 1.0) * (n + 2.0) / (r * r) * A * P * Tc
    h_rp = -(n + 1.0) / r * A * dP * cos_lat * Tc
    h_rl = -(n + 1.0) / r * m * A * P * Ts
    h_pp = A * Tc * (cos_lat * cos_lat * d2P - sin_lat * dP)
    h_pl = m * A * Ts * dP * cos_lat
    h_ll = -m * m * A * P * Tc

    return jnp.array([
        [h_rr, h_rp, h_rl],
        [h_rp, h_pp, h_pl],
        [h_rl, h_pl, h_ll],
    ])


def spherical_hessian_normalization(radius: ArrayLike) -> Array:
    """Element-wise scaling that brings a spherical Hessian to common units.

    Multiplying a Hessian in ``(r, lat, lon)`` element-wise by this matrix
    expresses every entry in units of acceleration per length.

    Args:
        radius: Radius of the evaluation point [m].

    Returns:
        jax.Array: ``[[r^2, r, r], [r, 1, 1], [r, 1, 1]]``.
    """
    r = jnp.asarray(radius, dtype=get_dtype())
    return jnp.array([
        [r * r, r, r],
        [r, 1.0, 1.0],
        [r, 1.0, 1.0],
    ])


# ---------------------------------------------------------------------------
# Sums over the expansion
# ---------------------------------------------------------------------------


def _summation_limits(C, S, cache, max_degree, max_order):
    if max_degree is None:
        max_degree = min(C.shape[0] - 1, cache.max_degree)
    if max_order is None:
        max_order = min(C.shape[1] - 1, S.shape[1] - 1, cache.max_order)
    return max_degree, max_order


def compute_spherical_gradient_sum(
    spherical_position: ArrayLike,
    radius: float,
    gm: float,
    C: ArrayLike,
    S: ArrayLike,
    cache: SphericalHarmonicsCache,
    min_degree: int = 2,
    max_degree: int | None = None,
    max_order: int | None = None,
) -> Array:
    """Total spherical gradient of the potential.

    Sums :func:`compute_potential_gradient` over
    ``min_degree <= n <= max_degree`` and ``0 <= m <= min(n, max_order)``.

    Args:
        spherical_position: ``[r, lat, lon]`` the cache was updated for.
        radius: Reference radius of the expansion [m].
        gm: Gravitational parameter [m^3/s^2].
        C: Cosine coefficients, indexed ``[n, m]``.
        S: Sine coefficients, indexed ``[n, m]``.
        cache: Updated spherical harmonics cache.
        min_degree: Lowest degree included.
        max_degree: Highest degree included.  Defaults to the smaller of
            the coefficient and cache sizes.
        max_order: Highest order included.  Defaults likewise.

    Returns:
        jax.Array: ``[dU/dr, dU/dlat, dU/dlon]``.
    """
    _float = get_dtype()
    spherical_position = jnp.asarray(spherical_position, dtype=_float)
    C = jnp.asarray(C, dtype=_float)
    S = jnp.asarray(S, dtype=_float)
    max_degree, max_order = _summation_limits(C, S, cache, max_degree, max_order)

    legendre = cache.legendre_cache
    pre_multiplier = gm / radius
    gradient = jnp.zeros(3, dtype=_float)
    for n in range(min_degree, max_degree + 1):
        for m in range(0, min(n, max_order) + 1):
            gradient = gradient + compute_potential_gradient(
                spherical_position, pre_multiplier, n, m, C[n, m], S[n, m],
                legendre.get(n, m), legendre.get_derivative(n, m), cache,
            )
    return gradient


def compute_cumulative_spherical_hessian(
    spherical_position: ArrayLike,
    radius: float,
    gm: float,
    C: ArrayLike,
    S: ArrayLike,
    cache: SphericalHarmonicsCache,
    min_degree: int = 2,
    max_degree: int | None = None,
    max_order: int | None = None,
) -> Array:
    """Total spherical Hessian of the potential.

    Sums :func:`compute_potential_spherical_hessian` over the same range as
    :func:`compute_spherical_gradient_sum`.

    Returns:
        jax.Array: ``(3, 3)`` Hessian with respect to ``(r, lat, lon)``.

    Raises:
        PreconditionError: If second derivatives were not computed.
    """
    _float = get_dtype()
    spherical_position = jnp.asarray(spherical_position, dtype=_float)
    C = jnp.asarray(C, dtype=_float)
    S = jnp.asarray(S, dtype=_float)
    max_degree, max_order = _summation_limits(C, S, cache, max_degree, max_order)

    pre_multiplier = gm / radius
    hessian = jnp.zeros((3, 3), dtype=_float)
    for n in range(min_degree, max_degree + 1):
        for m in range(0, min(n, max_order) + 1):
            hessian = hessian + compute_potential_spherical_hessian(
                spherical_position, pre_multiplier, n, m, C[n, m], S[n, m], cache
            )
    return hessian


# ---------------------------------------------------------------------------
# Body-fixed Cartesian acceleration and its position partial
# ---------------------------------------------------------------------------


def _update_cache(position, radius, cache, second_derivatives):
    spherical = position_cartesian_to_spherical(position)
    legendre = cache.legendre_cache
    if second_derivatives and not legendre.compute_second_derivatives:
        logger.debug("Enabling Legendre second derivatives for %r", cache)
        legendre.set_compute_second_derivatives(True)
    cache.update(spherical[0], jnp.sin(spherical[1]), spherical[2], radius)
    return spherical


def accel_spherical_harmonics_body_fixed(
    position: ArrayLike,
    gm: float,
    radius: float,
    C: ArrayLike,
    S: ArrayLike,
    cache: SphericalHarmonicsCache,
    min_degree: int = 2,
    max_degree: int | None = None,
    max_order: int | None = None,
) -> Array:
    """Body-fixed Cartesian acceleration of the harmonic expansion.

    Updates *cache* for *position* and maps the total spherical gradient
    to Cartesian components.

    Args:
        position: Body-fixed position ``[x, y, z]`` [m], off the polar axis.
        gm: Gravitational parameter [m^3/s^2].
        radius: Reference radius [m].
        C: Cosine coefficients, indexed ``[n, m]``.
        S: Sine coefficients, indexed ``[n, m]``.
        cache: Spherical harmonics cache, updated in place.
        min_degree: Lowest degree included.
        max_degree: Highest degree included.
        max_order: Highest order included.

    Returns:
        jax.Array: Acceleration [m/s^2], shape ``(3,)``.

    Examples:
        ```python
        import numpy as np
        from gravjax.harmonics import (
            SphericalHarmonicsCache, accel_spherical_harmonics_body_fixed,
        )
        C = np.zeros((3, 3)); S = np.zeros((3, 3))
        C[2, 0] = -4.84165e-4
        cache = SphericalHarmonicsCache(2)
        a = accel_spherical_harmonics_body_fixed(
            [7.0e6, 8.0e6, 9.0e6], 3.986004418e14, 6378137.0, C, S, cache,
        )
        ```
    """
    position = jnp.asarray(position, dtype=get_dtype())[:3]
    spherical = _update_cache(position, radius, cache, second_derivatives=False)
    gradient = compute_spherical_gradient_sum(
        spherical, radius, gm, C, S, cache, min_degree, max_degree, max_order
    )
    return spherical_to_cartesian_gradient_matrix(position) @ gradient


def compute_partial_of_body_fixed_acceleration(
    position: ArrayLike,
    radius: float,
    gm: float,
    C: ArrayLike,
    S: ArrayLike,
    cache: SphericalHarmonicsCache,
    min_degree: int = 2,
    max_degree: int | None = None,
    max_order: int | None = None,
) -> Array:
    """Partial of the body-fixed acceleration with respect to body-fixed position.

    Updates *cache* for *position*, enabling second Legendre derivatives if
    needed, and returns the full partial including the position dependence
    of the spherical-to-Cartesian Jacobian.

    Returns:
        jax.Array: ``(3, 3)`` matrix ``d a_bf / d x_bf`` [1/s^2].
    """
    position = jnp.asarray(position, dtype=get_dtype())[:3]
    spherical = _update_cache(position, radius, cache, second_derivatives=True)
    gradient = compute_spherical_gradient_sum(
        spherical, radius, gm, C, S, cache, min_degree, max_degree, max_order
    )
    hessian = compute_cumulative_spherical_hessian(
        spherical, radius, gm, C, S, cache, min_degree, max_degree, max_order
    )
    return cartesian_acceleration_position_partial(position, gradient, hessian)
