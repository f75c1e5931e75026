"""Shared utility functions for gravjax.

Provides angle conversion helpers.
"""

from gravjax.utils._angle import from_radians, to_radians

__all__ = [
    "from_radians",
    "to_radians",
]
