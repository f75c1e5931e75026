"""Spherical coordinates and their Cartesian derivatives.

The gravity potential is naturally a function of the spherical coordinates
``q = [r, phi, lambda]`` (radius, geocentric latitude, longitude) while
accelerations and their partials are needed in Cartesian coordinates
``x = [x, y, z]``.  This module provides the conversions between the two
and the first and second derivatives of ``q`` with respect to ``x`` that
the chain rule needs:

.. math::

    a = J \\, g, \\qquad
    \\frac{\\partial a}{\\partial x} = J H J^T + \\sum_k g_k \\nabla^2 q_k

with ``J[i, k] = dq_k / dx_i``, ``g`` the spherical gradient and ``H`` the
spherical Hessian of the potential.

All derivatives contain ``1 / rho`` with ``rho = sqrt(x^2 + y^2)`` and are
undefined on the polar axis.  Positions there must not be evaluated.

All inputs and outputs use SI base units (metres, radians).

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, Springer, 2012, Sec. 3.2 and 7.2.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from gravjax.config import get_dtype


def position_cartesian_to_spherical(
    x_cart: ArrayLike,
    use_degrees: bool = False,
) -> Array:
    """Convert a Cartesian position to spherical coordinates.

    Args:
        x_cart: Cartesian position ``[x, y, z]`` in *m*.
        use_degrees: If ``True``, return latitude and longitude in degrees.

    Returns:
        jax.Array: Spherical position ``[r, lat, lon]``.  Radius in *m*,
            latitude in ``[-pi/2, pi/2]`` and longitude in ``(-pi, pi]``.

    Example:
        >>> import jax.numpy as jnp
        >>> from gravjax.coordinates import position_cartesian_to_spherical
        >>> q = position_cartesian_to_spherical(jnp.array([0.0, 2.0, 0.0]))
        >>> float(q[0])
        2.0
    """
    x_cart = jnp.asarray(x_cart, dtype=get_dtype())

    x = x_cart[0]
    y = x_cart[1]
    z = x_cart[2]

    rho = jnp.sqrt(x * x + y * y)
    r = jnp.sqrt(rho * rho + z * z)
    lat = jnp.arctan2(z, rho)
    lon = jnp.arctan2(y, x)

    if use_degrees:
        lat = jnp.rad2deg(lat)
        lon = jnp.rad2deg(lon)

    return jnp.array([r, lat, lon])


def position_spherical_to_cartesian(
    x_sph: ArrayLike,
    use_degrees: bool = False,
) -> Array:
    """Convert a spherical position to Cartesian coordinates.

    Args:
        x_sph: Spherical position ``[r, lat, lon]``.  Radius in *m*,
            angles in *rad* (or *deg* if ``use_degrees=True``).
        use_degrees: If ``True``, interpret latitude and longitude as degrees.

    Returns:
        jax.Array: Cartesian position ``[x, y, z]`` in *m*.
    """
    x_sph = jnp.asarray(x_sph, dtype=get_dtype())

    r = x_sph[0]
    lat = x_sph[1]
    lon = x_sph[2]

    if use_degrees:
        lat = jnp.deg2rad(lat)
        lon = jnp.deg2rad(lon)

    return jnp.array([
        r * jnp.cos(lat) * jnp.cos(lon),
        r * jnp.cos(lat) * jnp.sin(lon),
        r * jnp.sin(lat),
    ])


def spherical_to_cartesian_gradient_matrix(x_cart: ArrayLike) -> Array:
    """Jacobian of the spherical coordinates with respect to Cartesian position.

    The returned matrix maps a spherical gradient
    ``[dU/dr, dU/dphi, dU/dlambda]`` to the Cartesian gradient:
    ``grad_x U = J @ grad_q U``.

    Args:
        x_cart: Cartesian position ``[x, y, z]`` in *m*, off the polar axis.

    Returns:
        jax.Array: ``(3, 3)`` matrix with ``J[i, k] = dq_k / dx_i``.
    """
    x_cart = jnp.asarray(x_cart, dtype=get_dtype())
    x, y, z = x_cart[0], x_cart[1], x_cart[2]

    rho_sqr = x * x + y * y
    rho = jnp.sqrt(rho_sqr)
    r_sqr = rho_sqr + z * z
    r = jnp.sqrt(r_sqr)

    return jnp.array([
        [x / r, -x * z / (r_sqr * rho), -y / rho_sqr],
        [y / r, -y * z / (r_sqr * rho), x / rho_sqr],
        [z / r, rho / r_sqr, 0.0],
    ])


def spherical_coordinate_hessians(x_cart: ArrayLike) -> Array:
    """Cartesian Hessians of the radius, latitude and longitude.

    Args:
        x_cart: Cartesian position ``[x, y, z]`` in *m*, off the polar axis.

    Returns:
        jax.Array: ``(3, 3, 3)`` array; entry ``[k]`` is the symmetric
            Hessian ``d2 q_k / dx_i dx_j`` of coordinate ``q_k``.
    """
    x_cart = jnp.asarray(x_cart, dtype=get_dtype())
    x, y, z = x_cart[0], x_cart[1], x_cart[2]

    rho_sqr = x * x + y * y
    rho = jnp.sqrt(rho_sqr)
    r_sqr = rho_sqr + z * z
    r = jnp.sqrt(r_sqr)
    r_fourth = r_sqr * r_sqr

    # Radius
    hess_r = (r_sqr * jnp.eye(3, dtype=x_cart.dtype) - jnp.outer(x_cart, x_cart)) / (r_sqr * r)

    # Latitude
    common = z * (2.0 * rho_sqr + r_sqr) / (r_fourth * rho_sqr * rho)
    diagonal = -z / (r_sqr * rho)
    lat_xx = diagonal + x * x * common
    lat_xy = x * y * common
    lat_yy = diagonal + y * y * common
    lat_xz = x * (r_sqr - 2.0 * rho_sqr) / (r_fourth * rho)
    lat_yz = y * (r_sqr - 2.0 * rho_sqr) / (r_fourth * rho)
    lat_zz = -2.0 * z * rho / r_fourth
    hess_lat = jnp.array([
        [lat_xx, lat_xy, lat_xz],
        [lat_xy, lat_yy, lat_yz],
        [lat_xz, lat_yz, lat_zz],
    ])

    # Longitude
    rho_fourth = rho_sqr * rho_sqr
    lon_xx = 2.0 * x * y / rho_fourth
    lon_xy = (y * y - x * x) / rho_fourth
    hess_lon = jnp.array([
        [lon_xx, lon_xy, 0.0],
        [lon_xy, -lon_xx, 0.0],
        [0.0, 0.0, 0.0],
    ])

    return jnp.stack([hess_r, hess_lat, hess_lon])


def spherical_to_cartesian_gradient_matrix_derivative(x_cart: ArrayLike) -> Array:
    """Derivative of :func:`spherical_to_cartesian_gradient_matrix` per Cartesian axis.

    Args:
        x_cart: Cartesian position ``[x, y, z]`` in *m*, off the polar axis.

    Returns:
        jax.Array: ``(3, 3, 3)`` array; entry ``[j]`` is ``dJ / dx_j``.
    """
    hessians = spherical_coordinate_hessians(x_cart)
    # dJ[i, k]/dx_j = d2 q_k / dx_i dx_j
    return jnp.transpose(hessians, (2, 1, 0))


def cartesian_acceleration_position_partial(
    x_cart: ArrayLike,
    spherical_gradient: ArrayLike,
    spherical_hessian: ArrayLike,
) -> Array:
    """Cartesian position partial of an acceleration given in spherical form.

    Args:
        x_cart: Cartesian position ``[x, y, z]`` in *m*.
        spherical_gradient: Potential gradient ``[dU/dr, dU/dphi, dU/dlambda]``.
        spherical_hessian: ``(3, 3)`` potential Hessian in ``(r, phi, lambda)``.

    Returns:
        jax.Array: ``(3, 3)`` matrix ``d a / d x``.
    """
    _float = get_dtype()
    x_cart = jnp.asarray(x_cart, dtype=_float)
    g = jnp.asarray(spherical_gradient, dtype=_float)
    H = jnp.asarray(spherical_hessian, dtype=_float)

    J = spherical_to_cartesian_gradient_matrix(x_cart)
    hessians = spherical_coordinate_hessians(x_cart)

    return J @ H @ J.T + jnp.einsum("k,kij->ij", g, hessians)
