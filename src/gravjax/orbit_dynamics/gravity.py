"""Spherical harmonic gravity field models and accelerations.

Provides the coefficient container :class:`GravityModel`, an independent
V/W (Cunningham) evaluation of the spherical harmonic acceleration, and the
inertial-frame :class:`SphericalHarmonicAccelerationModel` that evaluates the
field of one body on another through a
:class:`~gravjax.harmonics.SphericalHarmonicsCache`.

All inputs and outputs use SI base units (metres, metres/second squared).

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, p. 56-68.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from gravjax.config import get_dtype
from gravjax.coordinates.spherical import (
    position_cartesian_to_spherical,
    spherical_to_cartesian_gradient_matrix,
)
from gravjax.harmonics.cache import SphericalHarmonicsCache
from gravjax.harmonics.legendre import legendre_normalization_factor
from gravjax.harmonics.potential import (
    accel_spherical_harmonics_body_fixed,
    compute_partial_of_body_fixed_acceleration,
    compute_spherical_gradient_sum,
)

if TYPE_CHECKING:
    from gravjax.environment import Environment
    from gravjax.orbit_dynamics.tides import SolidBodyTideModel

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Gravity model data types
# ---------------------------------------------------------------------------


class GravityModel:
    """Spherical harmonic gravity field model.

    Stores fully normalized Stokes coefficients as two lower-triangular
    matrices indexed ``[n, m]``.  Entries with ``m > n`` and the sine
    entries of order zero are structurally zero.

    Besides the nominal coefficients the model holds additive corrections,
    typically produced by its solid-body tide models (see
    :meth:`gravjax.environment.Environment.update_gravity_field_variations`).
    :attr:`cosine_coefficients` and :attr:`sine_coefficients` return the sum.

    This is a plain Python class (not a JAX pytree) since it holds
    configuration data that does not participate in differentiation.

    Args:
        model_name: Human-readable name of the gravity model.
        gm: Gravitational parameter [m^3/s^2].
        radius: Reference radius [m].
        cosine_coefficients: ``C[n, m]``, shape ``(n_max+1, n_max+1)``.
        sine_coefficients: ``S[n, m]``, same shape.
        tide_models: Solid-body tide models deforming this body.
        normalization: Coefficient convention.  Only ``"fully_normalized"``
            is supported; every evaluation path assumes it.

    Examples:
        ```python
        import numpy as np
        from gravjax.orbit_dynamics import GravityModel
        C = np.zeros((3, 3)); S = np.zeros((3, 3))
        C[0, 0] = 1.0; C[2, 0] = -4.84165e-4
        model = GravityModel("J2", 3.986004418e14, 6378137.0, C, S)
        c20, s20 = model.get(2, 0)
        ```
    """

    def __init__(
        self,
        model_name: str,
        gm: float,
        radius: float,
        cosine_coefficients: ArrayLike,
        sine_coefficients: ArrayLike,
        tide_models: list[SolidBodyTideModel] | None = None,
        normalization: str = "fully_normalized",
    ):
        C = np.array(cosine_coefficients, dtype=np.float64)
        S = np.array(sine_coefficients, dtype=np.float64)
        if C.ndim != 2 or C.shape[0] != C.shape[1] or C.shape != S.shape:
            raise ValueError(
                f"Coefficient matrices must be square and of equal shape, "
                f"got {C.shape} and {S.shape}."
            )
        if np.any(np.triu(C, k=1)) or np.any(np.triu(S, k=1)):
            raise ValueError("Coefficients with order greater than degree must be zero.")
        if np.any(S[:, 0]):
            raise ValueError("Sine coefficients of order zero must be zero.")
        if normalization != "fully_normalized":
            raise ValueError(
                f"Only fully normalized coefficients are supported, got {normalization!r}."
            )
        if gm <= 0.0 or radius <= 0.0:
            raise ValueError(
                f"Gravitational parameter and radius must be positive, got "
                f"gm={gm}, radius={radius}."
            )

        self.model_name = model_name
        self.gm = float(gm)
        self.radius = float(radius)
        self.n_max = C.shape[0] - 1
        self.m_max = C.shape[0] - 1
        self.normalization = normalization
        self.tide_models = list(tide_models) if tide_models is not None else []

        self._nominal_cosine = C
        self._nominal_sine = S
        self._cosine_corrections = np.zeros_like(C)
        self._sine_corrections = np.zeros_like(S)

    # ------------------------------------------------------------------
    # Coefficient access
    # ------------------------------------------------------------------

    @property
    def nominal_cosine_coefficients(self) -> np.ndarray:
        """Cosine coefficients without corrections (read-only copy)."""
        return self._nominal_cosine.copy()

    @property
    def nominal_sine_coefficients(self) -> np.ndarray:
        """Sine coefficients without corrections (read-only copy)."""
        return self._nominal_sine.copy()

    @property
    def cosine_coefficients(self) -> np.ndarray:
        """Current cosine coefficients: nominal plus corrections."""
        return self._nominal_cosine + self._cosine_corrections

    @property
    def sine_coefficients(self) -> np.ndarray:
        """Current sine coefficients: nominal plus corrections."""
        return self._nominal_sine + self._sine_corrections

    def get(self, n: int, m: int) -> tuple[float, float]:
        """Retrieve the current (C_nm, S_nm) coefficients for degree *n*, order *m*.

        Args:
            n: Degree of the harmonic.
            m: Order of the harmonic.

        Returns:
            tuple[float, float]: (C_nm, S_nm) coefficient pair.

        Raises:
            ValueError: If (n, m) exceeds the model bounds.
        """
        self._check_bounds(n, m)
        C = self._nominal_cosine[n, m] + self._cosine_corrections[n, m]
        S = self._nominal_sine[n, m] + self._sine_corrections[n, m]
        return float(C), float(S)

    def _check_bounds(self, n: int, m: int) -> None:
        if n < 0 or m < 0 or m > n or n > self.n_max or m > self.m_max:
            raise ValueError(
                f"Requested (n={n}, m={m}) exceeds model bounds "
                f"(n_max={self.n_max}, m_max={self.m_max}, m <= n)."
            )

    def get_cosine_block(self, indices: list[tuple[int, int]]) -> np.ndarray:
        """Nominal cosine coefficients at the given ``(n, m)`` pairs."""
        for n, m in indices:
            self._check_bounds(n, m)
        return np.array([self._nominal_cosine[n, m] for n, m in indices])

    def set_cosine_block(self, indices: list[tuple[int, int]], values: ArrayLike) -> None:
        """Replace nominal cosine coefficients at the given ``(n, m)`` pairs."""
        values = np.asarray(values, dtype=np.float64)
        for (n, m), value in zip(indices, values, strict=True):
            self._check_bounds(n, m)
            self._nominal_cosine[n, m] = value

    def get_sine_block(self, indices: list[tuple[int, int]]) -> np.ndarray:
        """Nominal sine coefficients at the given ``(n, m)`` pairs."""
        for n, m in indices:
            self._check_bounds(n, m)
        return np.array([self._nominal_sine[n, m] for n, m in indices])

    def set_sine_block(self, indices: list[tuple[int, int]], values: ArrayLike) -> None:
        """Replace nominal sine coefficients at the given ``(n, m > 0)`` pairs."""
        values = np.asarray(values, dtype=np.float64)
        for (n, m), value in zip(indices, values, strict=True):
            self._check_bounds(n, m)
            if m == 0:
                raise ValueError("Sine coefficients of order zero cannot be set.")
            self._nominal_sine[n, m] = value

    def set_coefficient_corrections(self, delta_C: ArrayLike, delta_S: ArrayLike) -> None:
        """Replace the additive coefficient corrections.

        Smaller correction matrices are zero-padded to the model size.

        Raises:
            ValueError: If a correction matrix exceeds the model degree.
        """
        size = self.n_max + 1
        corrections = []
        for delta in (delta_C, delta_S):
            delta = np.asarray(delta, dtype=np.float64)
            if delta.shape[0] > size or delta.shape[1] > size:
                raise ValueError(
                    f"Correction of shape {delta.shape} exceeds the model "
                    f"degree n_max={self.n_max}."
                )
            padded = np.zeros((size, size))
            padded[: delta.shape[0], : delta.shape[1]] = delta
            corrections.append(padded)
        self._cosine_corrections, self._sine_corrections = corrections

    def __repr__(self) -> str:
        return (
            f"GravityModel(name={self.model_name!r}, "
            f"n_max={self.n_max}, m_max={self.m_max}, "
            f"gm={self.gm:.6e}, radius={self.radius:.1f})"
        )


# ---------------------------------------------------------------------------
# V/W spherical harmonic acceleration
# ---------------------------------------------------------------------------


def accel_spherical_harmonics(
    r_inertial: ArrayLike,
    R_to_body_fixed: ArrayLike,
    gravity_model: GravityModel,
    n_max: int,
    m_max: int,
    min_degree: int = 0,
) -> Array:
    """Acceleration from the spherical harmonic expansion (V/W recursion).

    Evaluates the field with the Cunningham V/W recursion, which is free of
    the polar singularity of the Legendre formulation and fully traceable
    by JAX.  The position is rotated to the body-fixed frame, the
    acceleration is computed there, and rotated back.

    Args:
        r_inertial: Position relative to the body centre, inertial axes [m].
            Shape ``(3,)`` or ``(6,)`` (only first 3 elements used).
        R_to_body_fixed: Rotation matrix inertial to body-fixed, ``(3, 3)``.
        gravity_model: Gravity model; its current (corrected) coefficients
            are used.
        n_max: Maximum degree (must be <= model's n_max).
        m_max: Maximum order (must be <= n_max and <= model's m_max).
        min_degree: Lowest degree included.  ``0`` gives the full field
            including the central term, ``2`` the perturbation only.

    Returns:
        Acceleration in inertial axes [m/s^2], shape ``(3,)``.

    Examples:
        ```python
        import jax.numpy as jnp
        a = accel_spherical_harmonics(jnp.array([7.0e6, 0.0, 0.0]), jnp.eye(3), model, 5, 5)
        ```
    """
    if n_max > gravity_model.n_max or m_max > min(n_max, gravity_model.m_max):
        raise ValueError(
            f"Requested (n_max={n_max}, m_max={m_max}) exceeds model bounds "
            f"(n_max={gravity_model.n_max}, m_max={gravity_model.m_max})."
        )
    _float = get_dtype()
    r = jnp.asarray(r_inertial, dtype=_float)[:3]
    R = jnp.asarray(R_to_body_fixed, dtype=_float)

    r_bf = R @ r
    C = jnp.asarray(gravity_model.cosine_coefficients, dtype=_float)
    S = jnp.asarray(gravity_model.sine_coefficients, dtype=_float)

    a_bf = _compute_spherical_harmonics(
        r_bf, C, S, n_max, m_max, min_degree,
        gravity_model.radius, gravity_model.gm,
    )
    return R.T @ a_bf


def _compute_spherical_harmonics(
    r_bf: Array,
    C_nm: Array,
    S_nm: Array,
    n_max: int,
    m_max: int,
    min_degree: int,
    r_ref: float,
    gm: float,
) -> Array:
    """Core V/W recursion.

    Uses Python loops (traced by JAX) rather than ``jax.lax.fori_loop``;
    ``n_max``, ``m_max`` and ``min_degree`` are static Python ints.
    """
    r_sqr = jnp.dot(r_bf, r_bf)
    rho = r_ref * r_ref / r_sqr

    x0 = r_ref * r_bf[0] / r_sqr
    y0 = r_ref * r_bf[1] / r_sqr
    z0 = r_ref * r_bf[2] / r_sqr

    size = n_max + 2
    V = jnp.zeros((size, size), dtype=r_bf.dtype)
    W = jnp.zeros((size, size), dtype=r_bf.dtype)

    # Zonal terms V(n,0); W(n,0) = 0
    V = V.at[0, 0].set(r_ref / jnp.sqrt(r_sqr))
    V = V.at[1, 0].set(z0 * V[0, 0])
    for n in range(2, n_max + 2):
        V = V.at[n, 0].set(
            ((2.0 * n - 1.0) * z0 * V[n - 1, 0] - (n - 1.0) * rho * V[n - 2, 0]) / n
        )

    # Tesseral and sectorial terms
    for m in range(1, m_max + 2):
        V = V.at[m, m].set((2.0 * m - 1.0) * (x0 * V[m - 1, m - 1] - y0 * W[m - 1, m - 1]))
        W = W.at[m, m].set((2.0 * m - 1.0) * (x0 * W[m - 1, m - 1] + y0 * V[m - 1, m - 1]))
        if m <= n_max:
            V = V.at[m + 1, m].set((2.0 * m + 1.0) * z0 * V[m, m])
            W = W.at[m + 1, m].set((2.0 * m + 1.0) * z0 * W[m, m])
        for n in range(m + 2, n_max + 2):
            V = V.at[n, m].set(
                ((2.0 * n - 1.0) * z0 * V[n - 1, m] - (n + m - 1.0) * rho * V[n - 2, m]) / (n - m)
            )
            W = W.at[n, m].set(
                ((2.0 * n - 1.0) * z0 * W[n - 1, m] - (n + m - 1.0) * rho * W[n - 2, m]) / (n - m)
            )

    ax = jnp.zeros((), dtype=r_bf.dtype)
    ay = ax
    az = ax
    for m in range(m_max + 1):
        for n in range(max(m, min_degree), n_max + 1):
            N = legendre_normalization_factor(n, m)
            C = N * C_nm[n, m]
            if m == 0:
                ax = ax - C * V[n + 1, 1]
                ay = ay - C * W[n + 1, 1]
                az = az - (n + 1.0) * C * V[n + 1, 0]
            else:
                S = N * S_nm[n, m]
                fac = 0.5 * (n - m + 1.0) * (n - m + 2.0)
                ax = ax + (
                    0.5 * (-C * V[n + 1, m + 1] - S * W[n + 1, m + 1])
                    + fac * (C * V[n + 1, m - 1] + S * W[n + 1, m - 1])
                )
                ay = ay + (
                    0.5 * (-C * W[n + 1, m + 1] + S * V[n + 1, m + 1])
                    + fac * (-C * W[n + 1, m - 1] + S * V[n + 1, m - 1])
                )
                az = az + (n - m + 1.0) * (-C * V[n + 1, m] - S * W[n + 1, m])

    scale = gm / (r_ref * r_ref)
    return scale * jnp.array([ax, ay, az])


# ---------------------------------------------------------------------------
# Inertial acceleration model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SphericalHarmonicAccelerationSettings:
    """Truncation of a spherical harmonic acceleration.

    Args:
        max_degree: Highest degree evaluated.
        max_order: Highest order evaluated.
        min_degree: Lowest degree evaluated.  The default of 2 leaves the
            central term to a point-mass model.

    Examples:
        ```python
        settings = SphericalHarmonicAccelerationSettings(5, 5)
        settings.min_degree
        ```
    """

    max_degree: int
    max_order: int
    min_degree: int = 2

    def __post_init__(self) -> None:
        if self.max_degree < 0:
            raise ValueError(f"max_degree must be non-negative, got {self.max_degree}")
        if not 0 <= self.max_order <= self.max_degree:
            raise ValueError(
                f"max_order must be between 0 and max_degree ({self.max_degree}), "
                f"got {self.max_order}"
            )
        if not 0 <= self.min_degree <= self.max_degree:
            raise ValueError(
                f"min_degree must be between 0 and max_degree ({self.max_degree}), "
                f"got {self.min_degree}"
            )


class SphericalHarmonicAccelerationModel:
    """Acceleration of one body due to the gravity field of another.

    The model reads the accelerating body's gravity model, rotation model
    and both states from an :class:`~gravjax.environment.Environment`
    passed to :meth:`evaluate`.  It owns the spherical harmonics cache used
    for its evaluations.

    After :meth:`evaluate` the intermediate quantities of the last
    evaluation are available as attributes: ``rotation_to_body_fixed``,
    ``relative_position``, ``body_fixed_position``,
    ``spherical_position``, ``body_fixed_acceleration`` and
    ``acceleration``.

    Args:
        accelerated_body: Name of the body being accelerated.
        accelerating_body: Name of the body exerting the field.
        settings: Truncation of the expansion.
    """

    def __init__(
        self,
        accelerated_body: str,
        accelerating_body: str,
        settings: SphericalHarmonicAccelerationSettings,
    ):
        self.accelerated_body = accelerated_body
        self.accelerating_body = accelerating_body
        self.settings = settings
        self.cache = SphericalHarmonicsCache(
            settings.max_degree, settings.max_order, compute_second_derivatives=True
        )

        self.rotation_to_body_fixed: Array | None = None
        self.relative_position: Array | None = None
        self.body_fixed_position: Array | None = None
        self.spherical_position: Array | None = None
        self.body_fixed_acceleration: Array | None = None
        self.acceleration: Array | None = None

    def gravity_model(self, environment: Environment) -> GravityModel:
        """The accelerating body's gravity model, checked against the truncation."""
        model = environment.get_gravity_model(self.accelerating_body)
        if self.settings.max_degree > model.n_max or self.settings.max_order > model.m_max:
            raise ValueError(
                f"Acceleration truncation ({self.settings.max_degree}, "
                f"{self.settings.max_order}) exceeds the gravity model of "
                f"{self.accelerating_body!r} ({model.n_max}, {model.m_max})."
            )
        return model

    def _truncation(self):
        s = self.settings
        return s.min_degree, s.max_degree, s.max_order

    def evaluate(self, environment: Environment) -> Array:
        """Evaluate the inertial acceleration for the environment's current state.

        Returns:
            jax.Array: Acceleration [m/s^2] in inertial axes, shape ``(3,)``.
        """
        model = self.gravity_model(environment)
        R = environment.rotation_to_body_fixed(self.accelerating_body)
        d = (
            environment.get_position(self.accelerated_body)
            - environment.get_position(self.accelerating_body)
        )
        x_bf = R @ d
        a_bf = accel_spherical_harmonics_body_fixed(
            x_bf, model.gm, model.radius,
            model.cosine_coefficients, model.sine_coefficients,
            self.cache, *self._truncation(),
        )

        self.rotation_to_body_fixed = R
        self.relative_position = d
        self.body_fixed_position = x_bf
        self.spherical_position = position_cartesian_to_spherical(x_bf)
        self.body_fixed_acceleration = a_bf
        self.acceleration = R.T @ a_bf
        return self.acceleration

    def evaluate_with_partial(self, environment: Environment) -> tuple[Array, Array]:
        """Evaluate the acceleration and its body-fixed position partial.

        Returns:
            tuple: Inertial acceleration ``(3,)`` and
                ``d a_bf / d x_bf`` ``(3, 3)``.
        """
        model = self.gravity_model(environment)
        R = environment.rotation_to_body_fixed(self.accelerating_body)
        d = (
            environment.get_position(self.accelerated_body)
            - environment.get_position(self.accelerating_body)
        )
        x_bf = R @ d
        C = model.cosine_coefficients
        S = model.sine_coefficients

        partial = compute_partial_of_body_fixed_acceleration(
            x_bf, model.radius, model.gm, C, S, self.cache, *self._truncation(),
        )
        spherical = position_cartesian_to_spherical(x_bf)
        gradient = compute_spherical_gradient_sum(
            spherical, model.radius, model.gm, C, S, self.cache, *self._truncation(),
        )
        a_bf = spherical_to_cartesian_gradient_matrix(x_bf) @ gradient

        self.rotation_to_body_fixed = R
        self.relative_position = d
        self.body_fixed_position = x_bf
        self.spherical_position = spherical
        self.body_fixed_acceleration = a_bf
        self.acceleration = R.T @ a_bf
        logger.debug(
            "Evaluated %s acceleration on %s at t=%s",
            self.accelerating_body, self.accelerated_body, environment.time,
        )
        return self.acceleration, partial

    def __repr__(self) -> str:
        return (
            f"SphericalHarmonicAccelerationModel({self.accelerated_body!r} <- "
            f"{self.accelerating_body!r}, {self.settings})"
        )
