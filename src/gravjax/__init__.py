"""
gravjax computes spherical harmonic gravity accelerations and their analytic partial derivatives in JAX.
"""

from .constants import (
    DEG2RAD,
    RAD2DEG,
    SIDEREAL_DAY,
    R_EARTH,
    GM_EARTH,
    OMEGA_EARTH,
    GM_SUN,
    GM_MOON,
    K2_EARTH,
    K3_EARTH,
)

from .config import set_dtype, get_dtype

from .errors import (
    PreconditionError,
    ConfigurationError,
    UnknownBodyError,
    UnknownDeformingBodyError,
    DegreeMismatchError,
    OrderSubsetMismatchError,
)

from .attitude_representations import (
    Rx,
    Rz,
)

from .coordinates import (
    position_cartesian_to_spherical,
    position_spherical_to_cartesian,
    spherical_to_cartesian_gradient_matrix,
)

from .harmonics import (
    LegendreCache,
    SphericalHarmonicsCache,
    compute_cumulative_spherical_hessian,
    compute_partial_of_body_fixed_acceleration,
)

from .frames import SimpleRotationModel

from .orbit_dynamics import (
    GravityModel,
    SolidBodyTideModel,
    SphericalHarmonicAccelerationModel,
    SphericalHarmonicAccelerationSettings,
    accel_spherical_harmonics,
)

from .environment import Body, Environment

from .estimation import (
    ParameterKind,
    ParameterSet,
    SphericalHarmonicsGravityPartial,
    create_parameters_to_estimate,
)
