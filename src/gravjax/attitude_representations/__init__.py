"""Elementary rotations for 3D frame transformations.

Re-exports the elementary rotation functions :func:`Rx` and :func:`Rz`
together with their angle derivatives :func:`dRx` and :func:`dRz`, which
the rotation model uses to differentiate the inertial to body-fixed
rotation with respect to time and orientation parameters.
"""

from .rotation_matrices import (
    Rx,
    Rz,
    dRx,
    dRz,
)

__all__ = [
    # Elementary rotations
    "Rx",
    "Rz",
    # Angle derivatives
    "dRx",
    "dRz",
]
