"""Tests for the gravjax.config module."""

import jax.numpy as jnp
import numpy as np
import pytest

from gravjax.config import get_dtype, set_dtype
from gravjax.coordinates import position_cartesian_to_spherical


@pytest.fixture(autouse=True)
def reset_dtype():
    """Restore the default float64 after each test."""
    yield
    set_dtype(jnp.float64)


class TestGetSetDtype:
    def test_default_dtype(self):
        assert get_dtype() == jnp.float64

    def test_set_float32(self):
        set_dtype(jnp.float32)
        assert get_dtype() == jnp.float32

    def test_roundtrip(self):
        for dtype in (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_invalid_dtype_string_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype("float64")


class TestDtypePropagation:
    def test_float64_output(self):
        q = position_cartesian_to_spherical(np.array([7.0e6, 8.0e6, 9.0e6]))
        assert q.dtype == jnp.float64

    def test_float32_output(self):
        set_dtype(jnp.float32)
        q = position_cartesian_to_spherical(np.array([7.0e6, 8.0e6, 9.0e6]))
        assert q.dtype == jnp.float32
