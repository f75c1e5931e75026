"""Explicit context of bodies, states and time.

The :class:`Environment` holds every body taking part in an evaluation,
together with the current time.  Acceleration models, partials and
estimable parameters receive it explicitly; nothing is looked up through
module-level state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from gravjax.config import get_dtype
from gravjax.errors import UnknownBodyError
from gravjax.frames.rotation_model import SimpleRotationModel
from gravjax.orbit_dynamics.gravity import GravityModel

logger = logging.getLogger(__name__)


@dataclass
class Body:
    """A body of the environment.

    Args:
        name: Unique body name.
        state: Inertial state ``[x, y, z, vx, vy, vz]`` [m, m/s].
        gm: Gravitational parameter [m^3/s^2], used when the body raises
            tides.  Defaults to the gravity model's value when one is set.
        gravity_model: Spherical harmonic field of the body.
        rotation_model: Orientation of the body-fixed frame.
    """

    name: str
    state: ArrayLike = field(default_factory=lambda: np.zeros(6))
    gm: float | None = None
    gravity_model: GravityModel | None = None
    rotation_model: SimpleRotationModel | None = None

    def __post_init__(self) -> None:
        self.state = jnp.asarray(self.state, dtype=get_dtype())
        if self.state.shape != (6,):
            raise ValueError(f"Body state must have shape (6,), got {self.state.shape}.")
        if self.gm is None and self.gravity_model is not None:
            self.gm = self.gravity_model.gm


class Environment:
    """Bodies and current time shared by all models of an evaluation.

    Args:
        bodies: Initial bodies.
        time: Current time [s].

    Examples:
        ```python
        from gravjax.environment import Body, Environment
        env = Environment([Body("Earth", gm=3.986004418e14)], time=0.0)
        env.get_position("Earth")
        ```
    """

    def __init__(self, bodies: list[Body] | None = None, time: float = 0.0):
        self._bodies: dict[str, Body] = {}
        self.time = float(time)
        for body in bodies or []:
            self.add_body(body)

    def add_body(self, body: Body) -> None:
        if body.name in self._bodies:
            raise ValueError(f"Body {body.name!r} is already defined.")
        self._bodies[body.name] = body

    @property
    def body_names(self) -> tuple[str, ...]:
        return tuple(self._bodies)

    def __contains__(self, name: str) -> bool:
        return name in self._bodies

    def get_body(self, name: str) -> Body:
        """Return the body called *name*.

        Raises:
            UnknownBodyError: If no such body exists.
        """
        try:
            return self._bodies[name]
        except KeyError:
            raise UnknownBodyError(name) from None

    def get_gravity_model(self, name: str) -> GravityModel:
        """Return the gravity model of *name*.

        Raises:
            UnknownBodyError: If the body does not exist or has no gravity model.
        """
        model = self.get_body(name).gravity_model
        if model is None:
            raise UnknownBodyError(name, f"Body {name!r} has no gravity model.")
        return model

    def get_rotation_model(self, name: str) -> SimpleRotationModel:
        """Return the rotation model of *name*.

        Raises:
            UnknownBodyError: If the body does not exist or has no rotation model.
        """
        model = self.get_body(name).rotation_model
        if model is None:
            raise UnknownBodyError(name, f"Body {name!r} has no rotation model.")
        return model

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def get_state(self, name: str) -> Array:
        return self.get_body(name).state

    def set_state(self, name: str, state: ArrayLike) -> None:
        state = jnp.asarray(state, dtype=get_dtype())
        if state.shape != (6,):
            raise ValueError(f"Body state must have shape (6,), got {state.shape}.")
        self.get_body(name).state = state

    def get_position(self, name: str) -> Array:
        return self.get_body(name).state[:3]

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def rotation_to_body_fixed(self, name: str) -> Array:
        """Rotation from inertial axes to the body-fixed frame of *name* at the current time."""
        return self.get_rotation_model(name).rotation_to_body_fixed(self.time)

    def body_fixed_position(self, position: ArrayLike, name: str) -> Array:
        """Express an inertial *position* relative to *name* in its body-fixed frame."""
        position = jnp.asarray(position, dtype=get_dtype())[:3]
        return self.rotation_to_body_fixed(name) @ (position - self.get_position(name))

    # ------------------------------------------------------------------
    # Gravity field variations
    # ------------------------------------------------------------------

    def update_gravity_field_variations(self) -> None:
        """Refresh the tidal coefficient corrections of every gravity model.

        Corrections are a snapshot: call this after changing perturber
        states, the time or Love numbers.
        """
        for body in self._bodies.values():
            model = body.gravity_model
            if model is None or not model.tide_models:
                continue
            size = model.n_max + 1
            delta_C = np.zeros((size, size))
            delta_S = np.zeros((size, size))
            for tide in model.tide_models:
                tide_C, tide_S = tide.coefficient_corrections(self)
                if tide_C.shape[0] > size:
                    raise ValueError(
                        f"Tide model of degree {tide.max_degree} exceeds the gravity "
                        f"model of {body.name!r} (n_max={model.n_max})."
                    )
                n = tide_C.shape[0]
                delta_C[:n, :n] += tide_C
                delta_S[:n, :n] += tide_S
            model.set_coefficient_corrections(delta_C, delta_S)
            logger.debug("Updated tidal corrections of %s at t=%s", body.name, self.time)

    def __repr__(self) -> str:
        return f"Environment(bodies={list(self._bodies)}, time={self.time})"
