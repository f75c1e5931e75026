"""Central-difference partials of an acceleration.

These helpers are decoupled from any body or model representation: the
state is read and written through a get/set function pair, parameters
through their ``get_value``/``set_value`` methods, and the acceleration is
a zero-argument function.  Every perturbed value is restored before
returning, also when the acceleration function raises.
"""

from __future__ import annotations

from typing import Callable

import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from gravjax.config import get_dtype
from gravjax.estimation.parameters import EstimatableParameter


def numerical_state_partial(
    get_state: Callable[[], ArrayLike],
    set_state: Callable[[ArrayLike], None],
    acceleration_fn: Callable[[], ArrayLike],
    perturbation: float | ArrayLike,
    start_index: int = 0,
    size: int = 3,
) -> Array:
    """Central-difference partial of an acceleration w.r.t. a state slice.

    Args:
        get_state: Returns the current state vector.
        set_state: Replaces the state vector.
        acceleration_fn: Evaluates the acceleration for the current state.
        perturbation: Step per component (scalar or one per component).
        start_index: First perturbed state component.
        size: Number of perturbed components.

    Returns:
        jax.Array: ``(3, size)`` partial.

    Examples:
        ```python
        partial = numerical_state_partial(
            lambda: env.get_state("Vehicle"),
            lambda x: env.set_state("Vehicle", x),
            lambda: model.evaluate(env),
            10.0,
        )
        ```
    """
    steps = np.broadcast_to(np.asarray(perturbation, dtype=np.float64), (size,))
    nominal = jnp.asarray(get_state(), dtype=get_dtype())
    columns = []
    try:
        for i in range(size):
            index = start_index + i
            set_state(nominal.at[index].add(steps[i]))
            upper = jnp.asarray(acceleration_fn())
            set_state(nominal.at[index].add(-steps[i]))
            lower = jnp.asarray(acceleration_fn())
            columns.append((upper - lower) / (2.0 * steps[i]))
    finally:
        set_state(nominal)
    return jnp.stack(columns, axis=1)


def numerical_parameter_partial(
    parameter: EstimatableParameter,
    acceleration_fn: Callable[[], ArrayLike],
    perturbation: float | ArrayLike,
    update_fn: Callable[[], None] | None = None,
) -> Array:
    """Central-difference partial of an acceleration w.r.t. a parameter.

    Args:
        parameter: The perturbed parameter.
        acceleration_fn: Evaluates the acceleration for the current values.
        perturbation: Step per component (scalar or one per component).
        update_fn: Called after every change of the parameter value, e.g.
            to refresh tidal corrections.

    Returns:
        jax.Array: ``(3, parameter.size)`` partial.
    """
    size = parameter.size
    steps = np.broadcast_to(np.asarray(perturbation, dtype=np.float64), (size,))
    nominal = parameter.get_value()

    def _apply(values):
        parameter.set_value(values)
        if update_fn is not None:
            update_fn()

    columns = []
    try:
        for i in range(size):
            values = nominal.copy()
            values[i] += steps[i]
            _apply(values)
            upper = jnp.asarray(acceleration_fn())
            values[i] = nominal[i] - steps[i]
            _apply(values)
            lower = jnp.asarray(acceleration_fn())
            columns.append((upper - lower) / (2.0 * steps[i]))
    finally:
        _apply(nominal)
    return jnp.stack(columns, axis=1)
