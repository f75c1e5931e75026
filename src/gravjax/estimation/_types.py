"""Type definitions for estimable parameters.

Provides the closed set of parameter kinds and the settings types that
request them:

- :class:`ParameterKind`: Tag identifying each kind of estimable parameter.
- :class:`GravitationalParameterSettings`,
  :class:`ConstantRotationRateSettings`,
  :class:`RotationPolePositionSettings`: Scalar and pole parameters of a body.
- :class:`SphericalHarmonicsCosineBlockSettings`,
  :class:`SphericalHarmonicsSineBlockSettings`: A degree/order rectangle of
  field coefficients.
- :class:`FullDegreeLoveNumberSettings`,
  :class:`SingleDegreeLoveNumberSettings`: Love numbers of a solid-body
  tide, for all orders of a degree or for an explicit subset of orders.

All settings are :class:`~typing.NamedTuple` instances: immutable,
hashable and comparable by value.
"""

from __future__ import annotations

import enum
from typing import NamedTuple, Union


class ParameterKind(enum.Enum):
    """Kinds of estimable parameters."""

    GRAVITATIONAL_PARAMETER = "gravitational_parameter"
    CONSTANT_ROTATION_RATE = "constant_rotation_rate"
    ROTATION_POLE_POSITION = "rotation_pole_position"
    SPHERICAL_HARMONICS_COSINE_BLOCK = "spherical_harmonics_cosine_block"
    SPHERICAL_HARMONICS_SINE_BLOCK = "spherical_harmonics_sine_block"
    FULL_DEGREE_LOVE_NUMBER = "full_degree_love_number"
    SINGLE_DEGREE_VARIABLE_LOVE_NUMBER = "single_degree_variable_love_number"


class GravitationalParameterSettings(NamedTuple):
    """Gravitational parameter of *body*'s gravity model.

    Attributes:
        body: Name of the body.
    """

    body: str

    @property
    def kind(self) -> ParameterKind:
        return ParameterKind.GRAVITATIONAL_PARAMETER


class ConstantRotationRateSettings(NamedTuple):
    """Rotation rate of *body*'s rotation model."""

    body: str

    @property
    def kind(self) -> ParameterKind:
        return ParameterKind.CONSTANT_ROTATION_RATE


class RotationPolePositionSettings(NamedTuple):
    """Pole right ascension and declination of *body*'s rotation model."""

    body: str

    @property
    def kind(self) -> ParameterKind:
        return ParameterKind.ROTATION_POLE_POSITION


class SphericalHarmonicsCosineBlockSettings(NamedTuple):
    """Cosine coefficients ``C[n, m]`` inside a degree/order rectangle.

    Components are ordered degree-major, then order-minor, and restricted
    to ``m <= n``.

    Attributes:
        body: Name of the body.
        min_degree: Lowest degree of the block.
        min_order: Lowest order of the block.
        max_degree: Highest degree of the block.
        max_order: Highest order of the block.
    """

    body: str
    min_degree: int
    min_order: int
    max_degree: int
    max_order: int

    @property
    def kind(self) -> ParameterKind:
        return ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK


class SphericalHarmonicsSineBlockSettings(NamedTuple):
    """Sine coefficients ``S[n, m]`` inside a degree/order rectangle.

    Same layout as :class:`SphericalHarmonicsCosineBlockSettings`, with the
    structurally zero order-zero entries left out.
    """

    body: str
    min_degree: int
    min_order: int
    max_degree: int
    max_order: int

    @property
    def kind(self) -> ParameterKind:
        return ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK


class FullDegreeLoveNumberSettings(NamedTuple):
    """One Love number applied to all orders of a degree.

    Attributes:
        body: Name of the deformed body.
        degree: Degree of the Love number.
        deforming_bodies: Deforming bodies identifying the tide model.
            Empty selects the body's only tide model.
        use_complex: Estimate real and imaginary parts; otherwise only the
            real part.
    """

    body: str
    degree: int
    deforming_bodies: tuple[str, ...] = ()
    use_complex: bool = False

    @property
    def kind(self) -> ParameterKind:
        return ParameterKind.FULL_DEGREE_LOVE_NUMBER


class SingleDegreeLoveNumberSettings(NamedTuple):
    """Separate Love numbers for an explicit subset of orders of a degree.

    Attributes:
        body: Name of the deformed body.
        degree: Degree of the Love numbers.
        orders: Orders estimated, in component order.
        deforming_bodies: Deforming bodies identifying the tide model.
            Empty selects the body's only tide model.
        use_complex: Estimate real and imaginary parts per order.
    """

    body: str
    degree: int
    orders: tuple[int, ...]
    deforming_bodies: tuple[str, ...] = ()
    use_complex: bool = False

    @property
    def kind(self) -> ParameterKind:
        return ParameterKind.SINGLE_DEGREE_VARIABLE_LOVE_NUMBER


ParameterSettings = Union[
    GravitationalParameterSettings,
    ConstantRotationRateSettings,
    RotationPolePositionSettings,
    SphericalHarmonicsCosineBlockSettings,
    SphericalHarmonicsSineBlockSettings,
    FullDegreeLoveNumberSettings,
    SingleDegreeLoveNumberSettings,
]
