"""Analytic partials of a spherical harmonic acceleration.

:class:`SphericalHarmonicsGravityPartial` differentiates the inertial
acceleration of a :class:`~gravjax.orbit_dynamics.SphericalHarmonicAccelerationModel`

.. math::

    a = R^T a_{bf}(R \\, d), \\qquad d = r_{accelerated} - r_{accelerating}

with respect to the states of both bodies and to estimable parameters.
After :meth:`SphericalHarmonicsGravityPartial.update` all partials are
closed-form expressions of the cached rotation ``R``, the body-fixed
acceleration ``a_bf`` and its position partial ``H_bf``:

- positions: ``+/- R^T H_bf R``; velocities: zero;
- gravitational parameter: ``a / mu``;
- rotation parameter ``p``: ``(dR/dp)^T a_bf + R^T H_bf (dR/dp) d``;
- coefficient ``C_nm`` or ``S_nm``: ``R^T J g_nm`` with the single-term
  gradient of a unit coefficient;
- Love numbers: the coefficient partials weighted by the tide's
  coefficient corrections per unit Love number.

Tidal coefficient corrections are held at their current snapshot: they do
not vary with the states, the rotation or the gravitational parameter.

Examples:
    ```python
    partial = SphericalHarmonicsGravityPartial(model)
    partial.update(env)
    block = partial.wrt_position_of_accelerated_body()
    columns = partial.wrt_parameter_set(parameters)
    ```
"""

from __future__ import annotations

import logging
from typing import Callable

import jax.numpy as jnp
import numpy as np
from jax import Array

from gravjax.config import get_dtype
from gravjax.coordinates.spherical import spherical_to_cartesian_gradient_matrix
from gravjax.environment import Environment
from gravjax.errors import PreconditionError
from gravjax.estimation._types import ParameterKind
from gravjax.estimation.parameters import EstimatableParameter, ParameterSet
from gravjax.harmonics.potential import compute_potential_gradient
from gravjax.orbit_dynamics.gravity import SphericalHarmonicAccelerationModel

logger = logging.getLogger(__name__)


def _place_block(
    block: Array,
    partial_matrix: Array | None,
    add_contribution: bool,
    start_row: int,
    start_column: int,
) -> Array:
    signed = block if add_contribution else -block
    if partial_matrix is None:
        return signed
    rows, columns = block.shape
    return jnp.asarray(partial_matrix).at[
        start_row:start_row + rows, start_column:start_column + columns
    ].add(signed)


class SphericalHarmonicsGravityPartial:
    """Partials of a spherical harmonic acceleration.

    Call :meth:`update` with the environment whenever the states, time or
    models change; all accessors read the quantities cached there.

    Args:
        acceleration_model: The acceleration being differentiated.  Its
            spherical harmonics cache is read only during :meth:`update`,
            so later evaluations of the model do not change the partials.
    """

    def __init__(self, acceleration_model: SphericalHarmonicAccelerationModel):
        self.acceleration_model = acceleration_model
        self._position_partial: Array | None = None
        logger.info("Created spherical harmonic gravity partial for %r", acceleration_model)

    @property
    def accelerated_body(self) -> str:
        return self.acceleration_model.accelerated_body

    @property
    def accelerating_body(self) -> str:
        return self.acceleration_model.accelerating_body

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, environment: Environment) -> None:
        """Evaluate the acceleration and its position partial for *environment*."""
        model = self.acceleration_model
        _, H_bf = model.evaluate_with_partial(environment)
        R = model.rotation_to_body_fixed

        self._time = environment.time
        self._rotation = R
        self._relative_position = model.relative_position
        self._body_fixed_acceleration = model.body_fixed_acceleration
        self._acceleration = model.acceleration
        self._body_fixed_partial = H_bf
        self._position_partial = R.T @ H_bf @ R

        gravity_model = model.gravity_model(environment)
        self._gm = gravity_model.gm
        self._coefficient_columns = self._unit_coefficient_columns(gravity_model)
        self._love_number_bases = [
            (tide, tide.love_number_basis(environment)) for tide in gravity_model.tide_models
        ]

    def _unit_coefficient_columns(self, gravity_model) -> dict[tuple[int, int], tuple[Array, Array]]:
        # Inertial acceleration per unit C_nm and per unit S_nm, read from
        # the cache while it still holds the update position.
        model = self.acceleration_model
        cache = model.cache
        legendre = cache.legendre_cache
        settings = model.settings
        to_inertial = self._rotation.T @ spherical_to_cartesian_gradient_matrix(
            model.body_fixed_position
        )
        pre_multiplier = gravity_model.gm / gravity_model.radius

        columns = {}
        for n in range(settings.min_degree, settings.max_degree + 1):
            for m in range(min(n, settings.max_order) + 1):
                P = legendre.get(n, m)
                dP = legendre.get_derivative(n, m)
                columns[(n, m)] = tuple(
                    to_inertial @ compute_potential_gradient(
                        model.spherical_position, pre_multiplier, n, m, C, S, P, dP, cache
                    )
                    for C, S in ((1.0, 0.0), (0.0, 1.0))
                )
        return columns

    def _require_update(self) -> None:
        if self._position_partial is None:
            raise PreconditionError("Gravity partial was read before update() was called.")

    @property
    def acceleration(self) -> Array:
        """Inertial acceleration at the last update [m/s^2]."""
        self._require_update()
        return self._acceleration

    @property
    def body_fixed_position_partial(self) -> Array:
        """``d a_bf / d x_bf`` at the last update [1/s^2]."""
        self._require_update()
        return self._body_fixed_partial

    # ------------------------------------------------------------------
    # State partials
    # ------------------------------------------------------------------

    def wrt_position_of_accelerated_body(
        self,
        partial_matrix: Array | None = None,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 0,
    ) -> Array:
        """Partial w.r.t. the accelerated body's inertial position.

        Args:
            partial_matrix: Optional matrix to add the block into.
            add_contribution: Add (``True``) or subtract the block.
            start_row: Row of *partial_matrix* where the block starts.
            start_column: Column of *partial_matrix* where the block starts.

        Returns:
            jax.Array: The signed ``(3, 3)`` block, or *partial_matrix*
                with the block added.
        """
        self._require_update()
        return _place_block(
            self._position_partial, partial_matrix, add_contribution, start_row, start_column
        )

    def wrt_position_of_accelerating_body(
        self,
        partial_matrix: Array | None = None,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 0,
    ) -> Array:
        """Partial w.r.t. the accelerating body's position: the negative of the accelerated one."""
        self._require_update()
        return _place_block(
            -self._position_partial, partial_matrix, add_contribution, start_row, start_column
        )

    def wrt_velocity_of_accelerated_body(
        self,
        partial_matrix: Array | None = None,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 0,
    ) -> Array:
        """Partial w.r.t. the accelerated body's velocity.

        The rotation depends on time only, so the acceleration does not
        depend on either velocity and the block is zero.
        """
        self._require_update()
        return _place_block(
            jnp.zeros((3, 3), dtype=get_dtype()), partial_matrix, add_contribution,
            start_row, start_column,
        )

    def wrt_velocity_of_accelerating_body(
        self,
        partial_matrix: Array | None = None,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 0,
    ) -> Array:
        """Partial w.r.t. the accelerating body's velocity (zero)."""
        self._require_update()
        return _place_block(
            jnp.zeros((3, 3), dtype=get_dtype()), partial_matrix, add_contribution,
            start_row, start_column,
        )

    # ------------------------------------------------------------------
    # Parameter partials
    # ------------------------------------------------------------------

    def _wrt_gravitational_parameter(self, parameter) -> Array:
        return (self._acceleration / self._gm)[:, None]

    def _wrt_rotation_matrix(self, dR: Array) -> Array:
        R = self._rotation
        return dR.T @ self._body_fixed_acceleration + R.T @ self._body_fixed_partial @ dR @ self._relative_position

    def _wrt_rotation_rate(self, parameter) -> Array:
        dR = parameter.rotation_model.derivative_wrt_rotation_rate(self._time)
        return self._wrt_rotation_matrix(dR)[:, None]

    def _wrt_pole_position(self, parameter) -> Array:
        dR = parameter.rotation_model.derivative_wrt_pole_position(self._time)
        return jnp.stack([self._wrt_rotation_matrix(dR[i]) for i in range(2)], axis=1)

    def _coefficient_column(self, n: int, m: int, C: float, S: float) -> Array:
        # Zero outside the truncation; C and S select the unit column.
        unit = self._coefficient_columns.get((n, m))
        if unit is None:
            return jnp.zeros(3, dtype=get_dtype())
        return C * unit[0] + S * unit[1]

    def _wrt_cosine_block(self, parameter) -> Array:
        return jnp.stack(
            [self._coefficient_column(n, m, 1.0, 0.0) for n, m in parameter.indices], axis=1
        )

    def _wrt_sine_block(self, parameter) -> Array:
        return jnp.stack(
            [self._coefficient_column(n, m, 0.0, 1.0) for n, m in parameter.indices], axis=1
        )

    def _love_number_basis(self, parameter) -> tuple[np.ndarray, np.ndarray]:
        for tide, basis in self._love_number_bases:
            if tide is parameter.tide_model:
                return basis[parameter.degree]
        raise PreconditionError(
            f"Tide model of {parameter.body!r} was not attached to the gravity model "
            f"at the last update()."
        )

    def _love_number_columns(self, parameter, m: int, X_c: np.ndarray, X_s: np.ndarray):
        n = parameter.degree
        a_C = self._coefficient_column(n, m, 1.0, 0.0)
        a_S = self._coefficient_column(n, m, 0.0, 1.0)
        real = a_C * X_c[m] + a_S * X_s[m]
        imaginary = a_C * X_s[m] - a_S * X_c[m]
        return real, imaginary

    def _wrt_full_degree_love_number(self, parameter) -> Array:
        X_c, X_s = self._love_number_basis(parameter)
        real = jnp.zeros(3, dtype=get_dtype())
        imaginary = jnp.zeros(3, dtype=get_dtype())
        for m in parameter.orders:
            column_r, column_i = self._love_number_columns(parameter, m, X_c, X_s)
            real = real + column_r
            imaginary = imaginary + column_i
        if parameter.use_complex:
            return jnp.stack([real, imaginary], axis=1)
        return real[:, None]

    def _wrt_single_degree_love_number(self, parameter) -> Array:
        X_c, X_s = self._love_number_basis(parameter)
        columns = []
        for m in parameter.orders:
            column_r, column_i = self._love_number_columns(parameter, m, X_c, X_s)
            columns.append(column_r)
            if parameter.use_complex:
                columns.append(column_i)
        return jnp.stack(columns, axis=1)

    def _affects_acceleration(self, parameter: EstimatableParameter) -> bool:
        return parameter.body == self.accelerating_body

    def get_parameter_partial_function(
        self, parameter: EstimatableParameter
    ) -> tuple[Callable[[], Array], int]:
        """Return the partial function of *parameter* and its column count.

        Parameters of other bodies yield a function returning zeros.

        Returns:
            tuple: ``(function, size)``; ``function()`` returns the
                ``(3, size)`` partial at the last update.
        """
        size = parameter.size
        if not self._affects_acceleration(parameter):
            return (lambda: jnp.zeros((3, size), dtype=get_dtype())), size
        method = getattr(self, _PARTIAL_FUNCTIONS[parameter.kind])

        settings = self.acceleration_model.settings
        outside = [
            (n, m) for n, m in getattr(parameter, "indices", [])
            if n < settings.min_degree or n > settings.max_degree or m > settings.max_order
        ]
        if outside:
            logger.warning(
                "Coefficients %s of %s lie outside the acceleration truncation; "
                "their partials are zero", outside, parameter.body,
            )

        def partial_function() -> Array:
            self._require_update()
            return method(parameter)

        return partial_function, size

    def wrt_parameter(self, parameter: EstimatableParameter) -> Array:
        """Partial of the acceleration w.r.t. *parameter*, shape ``(3, size)``."""
        function, _ = self.get_parameter_partial_function(parameter)
        return function()

    def wrt_parameter_set(self, parameters: ParameterSet) -> Array:
        """Partials w.r.t. all parameters of *parameters*, shape ``(3, size)``."""
        blocks = [self.wrt_parameter(p) for p in parameters]
        if not blocks:
            return jnp.zeros((3, 0), dtype=get_dtype())
        return jnp.concatenate(blocks, axis=1)


_PARTIAL_FUNCTIONS: dict[ParameterKind, str] = {
    ParameterKind.GRAVITATIONAL_PARAMETER: "_wrt_gravitational_parameter",
    ParameterKind.CONSTANT_ROTATION_RATE: "_wrt_rotation_rate",
    ParameterKind.ROTATION_POLE_POSITION: "_wrt_pole_position",
    ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK: "_wrt_cosine_block",
    ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK: "_wrt_sine_block",
    ParameterKind.FULL_DEGREE_LOVE_NUMBER: "_wrt_full_degree_love_number",
    ParameterKind.SINGLE_DEGREE_VARIABLE_LOVE_NUMBER: "_wrt_single_degree_love_number",
}

_missing = set(ParameterKind) - set(_PARTIAL_FUNCTIONS)
if _missing:
    raise RuntimeError(f"No partial function for parameter kinds {sorted(k.name for k in _missing)}")
