"""Exception types raised by gravjax.

Two families of errors are distinguished:

- :class:`PreconditionError` -- a call was made in a state where its result
  would be undefined: reading a cache before it was updated, requesting a
  derivative that was not computed, or addressing a degree/order outside
  the configured range.  These are programming errors in the caller.
- :class:`ConfigurationError` -- a requested setup is inconsistent with the
  environment it refers to.  These are raised while the parameter catalog
  is built, before any partial derivative is evaluated.

Both derive from :class:`ValueError`, so existing ``except ValueError``
handlers keep working.
"""

from __future__ import annotations


class PreconditionError(ValueError):
    """A cache or model was used outside of its valid state."""


class ConfigurationError(ValueError):
    """A model or parameter setup is inconsistent with the environment."""


class UnknownBodyError(ConfigurationError):
    """A referenced body does not exist or lacks the required model."""

    def __init__(self, body: str, message: str | None = None):
        self.body = body
        super().__init__(message or f"Body {body!r} is not defined in the environment.")


class UnknownDeformingBodyError(ConfigurationError):
    """A Love number names deforming bodies no tidal model of the body uses."""

    def __init__(self, body: str, deforming_bodies: tuple[str, ...], message: str):
        self.body = body
        self.deforming_bodies = deforming_bodies
        super().__init__(message)


class DegreeMismatchError(ConfigurationError):
    """A Love number degree is not part of the selected tidal model."""

    def __init__(self, body: str, degree: int, message: str):
        self.body = body
        self.degree = degree
        super().__init__(message)


class OrderSubsetMismatchError(ConfigurationError):
    """A per-order Love number lists orders the tidal model does not have."""

    def __init__(self, body: str, degree: int, orders: tuple[int, ...], message: str):
        self.body = body
        self.degree = degree
        self.orders = orders
        super().__init__(message)
