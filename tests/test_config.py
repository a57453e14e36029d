"""Tests for the torquejax.config module."""

import jax
import jax.numpy as jnp
import pytest

from torquejax.config import get_dtype, set_dtype
from torquejax.estimation import gravitational_parameter
from torquejax.linear_algebra import cross_product_matrix
from torquejax.partials import InertialTorquePartial, RotationalJacobianAssembler
from torquejax.rotational_dynamics import inertial_torque

pytestmark = pytest.mark.order("first")


@pytest.fixture(autouse=True)
def reset_dtype():
    """Reset dtype to float32 before and after each test."""
    set_dtype(jnp.float32)
    yield
    set_dtype(jnp.float32)


class TestGetSetDtype:
    def test_default_dtype(self):
        assert get_dtype() == jnp.float32

    def test_set_float64(self):
        set_dtype(jnp.float64)
        assert get_dtype() == jnp.float64

    def test_set_float16(self):
        set_dtype(jnp.float16)
        assert get_dtype() == jnp.float16

    def test_set_bfloat16(self):
        set_dtype(jnp.bfloat16)
        assert get_dtype() == jnp.bfloat16

    def test_roundtrip(self):
        for dtype in (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_invalid_dtype_string_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype("float32")

    def test_float64_enables_x64(self):
        set_dtype(jnp.float64)
        assert jax.config.jax_enable_x64 is True


class TestDtypeSwitchingOutputs:
    """Verify that output dtypes match the configured dtype."""

    def test_cross_product_matrix_dtype_float64(self):
        set_dtype(jnp.float64)
        S = cross_product_matrix(jnp.array([1.0, 2.0, 3.0]))
        assert S.dtype == jnp.float64

    def test_cross_product_matrix_dtype_float32(self):
        S = cross_product_matrix(jnp.array([1.0, 2.0, 3.0]))
        assert S.dtype == jnp.float32

    def test_inertial_torque_dtype_float64(self):
        set_dtype(jnp.float64)
        tau = inertial_torque(jnp.array([0.1, 0.2, 0.3]), jnp.eye(3))
        assert tau.dtype == jnp.float64

    def test_partial_cache_follows_dtype(self):
        """A partial refreshed after set_dtype caches in the new precision."""
        partial = InertialTorquePartial(
            lambda: jnp.array([0.1, 0.0, 0.2]),
            lambda: jnp.diag(jnp.array([100.0, 120.0, 110.0])),
            lambda: 1.0,
            lambda: 398600.0,
            "Vehicle",
        )
        partial.update(0.0)
        assert partial.cache.partial_wrt_angular_velocity.dtype == jnp.float32

        set_dtype(jnp.float64)
        partial.update(1.0)
        assert partial.cache.partial_wrt_angular_velocity.dtype == jnp.float64

    def test_initial_cache_uses_construction_dtype(self):
        set_dtype(jnp.float64)
        partial = InertialTorquePartial(
            lambda: jnp.zeros(3), lambda: jnp.eye(3), lambda: 1.0, lambda: 1.0, "Vehicle"
        )
        assert partial.cache.partial_wrt_angular_velocity.dtype == jnp.float64

    def test_assembler_blocks_follow_dtype(self):
        partial = InertialTorquePartial(
            lambda: jnp.array([0.1, 0.0, 0.2]),
            lambda: jnp.diag(jnp.array([100.0, 120.0, 110.0])),
            lambda: 1.0,
            lambda: 398600.0,
            "Vehicle",
        )
        assembler = RotationalJacobianAssembler(
            [partial], [gravitational_parameter("Vehicle")]
        )
        jacobian = assembler.evaluate(0.0)
        assert jacobian.state.dtype == jnp.float32
        assert jacobian.parameters.dtype == jnp.float32

        set_dtype(jnp.float64)
        jacobian = assembler.evaluate(1.0)
        assert jacobian.state.dtype == jnp.float64
        assert jacobian.parameters.dtype == jnp.float64


class TestJITRetrace:
    """Verify JIT retraces when dtype changes."""

    def test_jit_retrace_on_dtype_change(self):
        """JIT should retrace when input dtypes change."""

        @jax.jit
        def compute_torque(omega):
            return inertial_torque(omega, jnp.eye(3))

        set_dtype(jnp.float32)
        result_f32 = compute_torque(jnp.array([0.1, 0.2, 0.3], dtype=jnp.float32))
        assert result_f32.dtype == jnp.float32

        set_dtype(jnp.float64)
        result_f64 = compute_torque(jnp.array([0.1, 0.2, 0.3], dtype=jnp.float64))
        assert result_f64.dtype == jnp.float64
