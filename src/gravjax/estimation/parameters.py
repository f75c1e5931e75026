"""Estimable parameters and the parameter catalog.

:func:`create_parameters_to_estimate` turns a list of parameter settings
into a :class:`ParameterSet` bound to the models of an
:class:`~gravjax.environment.Environment`.  Every setting is first checked
by :func:`check_parameter_settings`, which returns the specific
:class:`~gravjax.errors.ConfigurationError` describing what is wrong
instead of raising it, so a whole catalog can be validated before anything
is evaluated.

Each parameter exposes its values as a flat float array whose component
order fixes the column order of the acceleration partials.
"""

from __future__ import annotations

import logging

import numpy as np
from jax.typing import ArrayLike

from gravjax.environment import Environment
from gravjax.errors import (
    ConfigurationError,
    DegreeMismatchError,
    OrderSubsetMismatchError,
    UnknownBodyError,
    UnknownDeformingBodyError,
)
from gravjax.estimation._types import (
    FullDegreeLoveNumberSettings,
    ParameterKind,
    ParameterSettings,
    SingleDegreeLoveNumberSettings,
)
from gravjax.frames.rotation_model import SimpleRotationModel
from gravjax.orbit_dynamics.gravity import GravityModel
from gravjax.orbit_dynamics.tides import SolidBodyTideModel

logger = logging.getLogger(__name__)


def coefficient_block_indices(
    min_degree: int,
    min_order: int,
    max_degree: int,
    max_order: int,
    skip_zero_order: bool = False,
) -> list[tuple[int, int]]:
    """Enumerate the ``(n, m)`` pairs of a coefficient block.

    Pairs are ordered degree-major, then order-minor, and restricted to
    ``m <= n``.

    Args:
        min_degree: Lowest degree.
        min_order: Lowest order.
        max_degree: Highest degree.
        max_order: Highest order.
        skip_zero_order: Leave out ``m = 0`` (sine blocks).

    Returns:
        list[tuple[int, int]]: The block's ``(n, m)`` pairs.

    Examples:
        ```python
        len(coefficient_block_indices(2, 0, 5, 4))  # 17
        len(coefficient_block_indices(2, 1, 5, 4, skip_zero_order=True))  # 13
        ```
    """
    first_order = max(min_order, 1) if skip_zero_order else min_order
    return [
        (n, m)
        for n in range(min_degree, max_degree + 1)
        for m in range(first_order, min(n, max_order) + 1)
    ]


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class EstimatableParameter:
    """Base class of all estimable parameters.

    Attributes:
        kind: The parameter's :class:`ParameterKind`.
        body: Name of the body the parameter belongs to.
    """

    kind: ParameterKind

    def __init__(self, body: str):
        self.body = body

    @property
    def size(self) -> int:
        return len(self.component_names())

    def component_names(self) -> list[str]:
        raise NotImplementedError

    def get_value(self) -> np.ndarray:
        raise NotImplementedError

    def set_value(self, values: ArrayLike) -> None:
        raise NotImplementedError

    def _as_values(self, values: ArrayLike) -> np.ndarray:
        values = np.atleast_1d(np.asarray(values, dtype=np.float64))
        if values.shape != (self.size,):
            raise ValueError(
                f"{type(self).__name__} of {self.body!r} takes {self.size} "
                f"values, got shape {values.shape}."
            )
        return values

    def __repr__(self) -> str:
        return f"{type(self).__name__}(body={self.body!r}, size={self.size})"


class GravitationalParameter(EstimatableParameter):
    """Gravitational parameter of a gravity model [m^3/s^2]."""

    kind = ParameterKind.GRAVITATIONAL_PARAMETER

    def __init__(self, body: str, gravity_model: GravityModel):
        super().__init__(body)
        self.gravity_model = gravity_model

    def component_names(self) -> list[str]:
        return [f"{self.body}.gravitational_parameter"]

    def get_value(self) -> np.ndarray:
        return np.array([self.gravity_model.gm])

    def set_value(self, values: ArrayLike) -> None:
        self.gravity_model.gm = float(self._as_values(values)[0])


class ConstantRotationRate(EstimatableParameter):
    """Rotation rate of a rotation model [rad/s]."""

    kind = ParameterKind.CONSTANT_ROTATION_RATE

    def __init__(self, body: str, rotation_model: SimpleRotationModel):
        super().__init__(body)
        self.rotation_model = rotation_model

    def component_names(self) -> list[str]:
        return [f"{self.body}.rotation_rate"]

    def get_value(self) -> np.ndarray:
        return np.array([self.rotation_model.rotation_rate])

    def set_value(self, values: ArrayLike) -> None:
        self.rotation_model.rotation_rate = float(self._as_values(values)[0])


class RotationPolePosition(EstimatableParameter):
    """Pole right ascension and declination of a rotation model [rad]."""

    kind = ParameterKind.ROTATION_POLE_POSITION

    def __init__(self, body: str, rotation_model: SimpleRotationModel):
        super().__init__(body)
        self.rotation_model = rotation_model

    def component_names(self) -> list[str]:
        return [f"{self.body}.pole_right_ascension", f"{self.body}.pole_declination"]

    def get_value(self) -> np.ndarray:
        return np.asarray(self.rotation_model.pole_position(), dtype=np.float64)

    def set_value(self, values: ArrayLike) -> None:
        self.rotation_model.set_pole_position(self._as_values(values))


class SphericalHarmonicsCosineBlock(EstimatableParameter):
    """Nominal cosine coefficients at a fixed list of ``(n, m)`` pairs."""

    kind = ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK

    def __init__(self, body: str, gravity_model: GravityModel, indices: list[tuple[int, int]]):
        super().__init__(body)
        self.gravity_model = gravity_model
        self.indices = list(indices)

    def component_names(self) -> list[str]:
        return [f"{self.body}.C({n},{m})" for n, m in self.indices]

    def get_value(self) -> np.ndarray:
        return self.gravity_model.get_cosine_block(self.indices)

    def set_value(self, values: ArrayLike) -> None:
        self.gravity_model.set_cosine_block(self.indices, self._as_values(values))


class SphericalHarmonicsSineBlock(EstimatableParameter):
    """Nominal sine coefficients at a fixed list of ``(n, m > 0)`` pairs."""

    kind = ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK

    def __init__(self, body: str, gravity_model: GravityModel, indices: list[tuple[int, int]]):
        super().__init__(body)
        self.gravity_model = gravity_model
        self.indices = list(indices)

    def component_names(self) -> list[str]:
        return [f"{self.body}.S({n},{m})" for n, m in self.indices]

    def get_value(self) -> np.ndarray:
        return self.gravity_model.get_sine_block(self.indices)

    def set_value(self, values: ArrayLike) -> None:
        self.gravity_model.set_sine_block(self.indices, self._as_values(values))


class FullDegreeLoveNumber(EstimatableParameter):
    """A single Love number shared by all orders of one degree.

    The value is ``[k_r]`` or, for complex parameters, ``[k_r, k_i]`` of the
    order-zero Love number.  Setting it shifts the Love numbers of every
    order by the same offset, so per-order differences held by the tide
    model survive a get/set round trip.  A real parameter leaves the
    imaginary parts unchanged.
    """

    kind = ParameterKind.FULL_DEGREE_LOVE_NUMBER

    def __init__(self, body: str, tide_model: SolidBodyTideModel, degree: int, use_complex: bool):
        super().__init__(body)
        self.tide_model = tide_model
        self.degree = degree
        self.use_complex = use_complex

    @property
    def orders(self) -> tuple[int, ...]:
        return tuple(range(self.degree + 1))

    def component_names(self) -> list[str]:
        prefix = f"{self.body}.k{self.degree}"
        if self.use_complex:
            return [f"{prefix}.real", f"{prefix}.imag"]
        return [f"{prefix}.real"]

    def get_value(self) -> np.ndarray:
        k = self.tide_model.get_love_number(self.degree, 0)
        if self.use_complex:
            return np.array([k.real, k.imag])
        return np.array([k.real])

    def set_value(self, values: ArrayLike) -> None:
        values = self._as_values(values)
        current = self.tide_model.get_love_numbers(self.degree)
        offset = values[0] - current[0].real
        if self.use_complex:
            offset = offset + 1j * (values[1] - current[0].imag)
        self.tide_model.set_love_numbers(self.degree, current + offset)


class SingleDegreeLoveNumber(EstimatableParameter):
    """Separate Love numbers for an explicit subset of orders of one degree.

    The value lists ``k_r`` per order, or ``k_r, k_i`` pairs per order for
    complex parameters, in the order of :attr:`orders`.
    """

    kind = ParameterKind.SINGLE_DEGREE_VARIABLE_LOVE_NUMBER

    def __init__(
        self,
        body: str,
        tide_model: SolidBodyTideModel,
        degree: int,
        orders: tuple[int, ...],
        use_complex: bool,
    ):
        super().__init__(body)
        self.tide_model = tide_model
        self.degree = degree
        self.orders = tuple(orders)
        self.use_complex = use_complex

    def component_names(self) -> list[str]:
        names = []
        for m in self.orders:
            prefix = f"{self.body}.k{self.degree}{m}"
            names.append(f"{prefix}.real")
            if self.use_complex:
                names.append(f"{prefix}.imag")
        return names

    def get_value(self) -> np.ndarray:
        values = []
        for m in self.orders:
            k = self.tide_model.get_love_number(self.degree, m)
            values.append(k.real)
            if self.use_complex:
                values.append(k.imag)
        return np.array(values)

    def set_value(self, values: ArrayLike) -> None:
        values = self._as_values(values)
        step = 2 if self.use_complex else 1
        for i, m in enumerate(self.orders):
            real = values[step * i]
            if self.use_complex:
                imaginary = values[step * i + 1]
            else:
                imaginary = self.tide_model.get_love_number(self.degree, m).imag
            self.tide_model.set_love_number(self.degree, m, real + 1j * imaginary)


# ---------------------------------------------------------------------------
# Parameter set
# ---------------------------------------------------------------------------


class ParameterSet:
    """Ordered collection of estimable parameters.

    The concatenated values of all parameters form the parameter vector;
    :meth:`indices` gives the ``(start, size)`` slice of each parameter.

    Args:
        parameters: Parameters in vector order.
    """

    def __init__(self, parameters: list[EstimatableParameter]):
        self._parameters = list(parameters)

    def __iter__(self):
        return iter(self._parameters)

    def __len__(self) -> int:
        return len(self._parameters)

    def __getitem__(self, index: int) -> EstimatableParameter:
        return self._parameters[index]

    @property
    def size(self) -> int:
        """Total number of scalar components."""
        return sum(p.size for p in self._parameters)

    def indices(self) -> list[tuple[int, int]]:
        """``(start, size)`` of each parameter in the parameter vector."""
        result = []
        start = 0
        for p in self._parameters:
            result.append((start, p.size))
            start += p.size
        return result

    def component_names(self) -> list[str]:
        return [name for p in self._parameters for name in p.component_names()]

    def get_values(self) -> np.ndarray:
        if not self._parameters:
            return np.zeros(0)
        return np.concatenate([p.get_value() for p in self._parameters])

    def set_values(self, values: ArrayLike) -> None:
        """Distribute a full parameter vector over the parameters.

        Raises:
            ValueError: If *values* does not have :attr:`size` entries.
        """
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (self.size,):
            raise ValueError(f"Expected {self.size} parameter values, got shape {values.shape}.")
        for p, (start, size) in zip(self._parameters, self.indices()):
            p.set_value(values[start:start + size])

    def __repr__(self) -> str:
        return f"ParameterSet({len(self._parameters)} parameters, size={self.size})"


# ---------------------------------------------------------------------------
# Validation and construction
# ---------------------------------------------------------------------------


def _resolve_tide_model(
    settings: FullDegreeLoveNumberSettings | SingleDegreeLoveNumberSettings,
    environment: Environment,
) -> SolidBodyTideModel | ConfigurationError:
    body = settings.body
    try:
        tide_models = environment.get_gravity_model(body).tide_models
    except UnknownBodyError as error:
        return error
    if not tide_models:
        return ConfigurationError(f"Body {body!r} has no solid-body tide model.")

    requested = tuple(settings.deforming_bodies)
    if not requested:
        if len(tide_models) > 1:
            return UnknownDeformingBodyError(
                body, requested,
                f"Body {body!r} has {len(tide_models)} tide models; name the "
                f"deforming bodies of the Love number to select one.",
            )
        tide = tide_models[0]
    else:
        matches = [t for t in tide_models if set(t.deforming_bodies) == set(requested)]
        if not matches:
            available = [t.deforming_bodies for t in tide_models]
            return UnknownDeformingBodyError(
                body, requested,
                f"No tide model of {body!r} is raised by exactly {list(requested)}; "
                f"available deforming bodies: {available}.",
            )
        tide = matches[0]

    if settings.degree not in tide.degrees:
        return DegreeMismatchError(
            body, settings.degree,
            f"Tide model of {body!r} raised by {list(tide.deforming_bodies)} has no "
            f"degree {settings.degree} Love numbers; available: {list(tide.degrees)}.",
        )
    return tide


def _check_orders(settings: SingleDegreeLoveNumberSettings) -> ConfigurationError | None:
    orders = tuple(settings.orders)
    if (
        not orders
        or len(set(orders)) != len(orders)
        or any(m < 0 or m > settings.degree for m in orders)
    ):
        return OrderSubsetMismatchError(
            settings.body, settings.degree, orders,
            f"Orders {list(orders)} are not a non-empty set of distinct orders of "
            f"degree {settings.degree} for body {settings.body!r}.",
        )
    return None


def check_parameter_settings(
    settings: ParameterSettings,
    environment: Environment,
) -> ConfigurationError | None:
    """Check one parameter setting against the environment.

    Args:
        settings: The parameter settings.
        environment: Environment holding the referenced bodies and models.

    Returns:
        The :class:`~gravjax.errors.ConfigurationError` describing the
        problem, or ``None`` if the settings are valid.
    """
    kind = settings.kind
    body = settings.body
    if body not in environment:
        return UnknownBodyError(body)

    if kind in (ParameterKind.CONSTANT_ROTATION_RATE, ParameterKind.ROTATION_POLE_POSITION):
        if environment.get_body(body).rotation_model is None:
            return UnknownBodyError(body, f"Body {body!r} has no rotation model.")
        return None

    model = environment.get_body(body).gravity_model
    if model is None:
        return UnknownBodyError(body, f"Body {body!r} has no gravity model.")

    if kind in (
        ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK,
        ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK,
    ):
        if settings.min_degree < 0 or settings.min_order < 0 or settings.max_degree > model.n_max:
            return ConfigurationError(
                f"Coefficient block ({settings.min_degree}, {settings.min_order})-"
                f"({settings.max_degree}, {settings.max_order}) lies outside the "
                f"gravity model of {body!r} (n_max={model.n_max})."
            )
        skip = kind is ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK
        if not coefficient_block_indices(*settings[1:], skip_zero_order=skip):
            return ConfigurationError(
                f"Coefficient block ({settings.min_degree}, {settings.min_order})-"
                f"({settings.max_degree}, {settings.max_order}) of {body!r} is empty."
            )
        return None

    if kind in (
        ParameterKind.FULL_DEGREE_LOVE_NUMBER,
        ParameterKind.SINGLE_DEGREE_VARIABLE_LOVE_NUMBER,
    ):
        tide = _resolve_tide_model(settings, environment)
        if isinstance(tide, ConfigurationError):
            return tide
        if kind is ParameterKind.SINGLE_DEGREE_VARIABLE_LOVE_NUMBER:
            return _check_orders(settings)
        return None

    return None


def _create_parameter(settings: ParameterSettings, environment: Environment) -> EstimatableParameter:
    kind = settings.kind
    body = settings.body
    if kind is ParameterKind.GRAVITATIONAL_PARAMETER:
        return GravitationalParameter(body, environment.get_gravity_model(body))
    if kind is ParameterKind.CONSTANT_ROTATION_RATE:
        return ConstantRotationRate(body, environment.get_rotation_model(body))
    if kind is ParameterKind.ROTATION_POLE_POSITION:
        return RotationPolePosition(body, environment.get_rotation_model(body))
    if kind is ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK:
        indices = coefficient_block_indices(*settings[1:])
        return SphericalHarmonicsCosineBlock(body, environment.get_gravity_model(body), indices)
    if kind is ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK:
        indices = coefficient_block_indices(*settings[1:], skip_zero_order=True)
        return SphericalHarmonicsSineBlock(body, environment.get_gravity_model(body), indices)
    if kind is ParameterKind.FULL_DEGREE_LOVE_NUMBER:
        tide = _resolve_tide_model(settings, environment)
        return FullDegreeLoveNumber(body, tide, settings.degree, settings.use_complex)
    if kind is ParameterKind.SINGLE_DEGREE_VARIABLE_LOVE_NUMBER:
        tide = _resolve_tide_model(settings, environment)
        return SingleDegreeLoveNumber(
            body, tide, settings.degree, tuple(settings.orders), settings.use_complex
        )
    raise ValueError(f"Unsupported parameter kind {kind}.")


def create_parameters_to_estimate(
    parameter_settings: list[ParameterSettings],
    environment: Environment,
) -> ParameterSet:
    """Build the parameter catalog for a list of settings.

    All settings are validated before any parameter is created.

    Args:
        parameter_settings: Settings in parameter-vector order.
        environment: Environment holding the referenced models.

    Returns:
        ParameterSet: The parameters, in the order of *parameter_settings*.

    Raises:
        ConfigurationError: The first invalid setting's specific error.
    """
    for settings in parameter_settings:
        error = check_parameter_settings(settings, environment)
        if error is not None:
            raise error

    parameters = ParameterSet(
        [_create_parameter(settings, environment) for settings in parameter_settings]
    )
    logger.info(
        "Created %d estimable parameters with %d components",
        len(parameters), parameters.size,
    )
    return parameters
