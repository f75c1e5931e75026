"""Reference frame transformations.

Provides the rotation between an inertial frame and the body-fixed frame
of a rotating body, together with its derivatives with respect to time and
the estimable rotation parameters.
"""

from .rotation_model import SimpleRotationModel

__all__ = [
    "SimpleRotationModel",
]
