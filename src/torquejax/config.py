"""Module-wide floating-point precision configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
throughout torquejax.  The default is ``jnp.float32`` for GPU/TPU
compatibility.  Switching to ``jnp.float64`` automatically enables
JAX's 64-bit mode (``jax_enable_x64``).

Where the dtype is applied:

- Torque partials cast every upstream provider value to the active dtype
  when their cache is refreshed by ``update(time)``, so the cached
  quantities, written Jacobian blocks and parameter columns all follow
  the dtype in force at the last refresh.
- The NaN-filled cache a partial holds before its first update is built
  in the dtype active at construction.
- The Jacobian assembler allocates its state and parameter blocks in
  the active dtype on every call.
- Inertia tensors, raw torque laws and random variable draws cast their
  inputs and outputs the same way.

Analytic partials are compared against autodiff or finite-difference
references at relative tolerances far below float32 resolution, so
estimation runs normally call ``set_dtype(jnp.float64)`` once at start-up,
before any partial object is updated.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

_dtype = jnp.float32


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for torquejax.

    Must be called **before** any ``jax.jit`` compilation.  In eager mode
    the change takes effect immediately, including for partial objects
    that already exist: their next refresh uses the new dtype.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is automatically
    enabled via ``jax.config.update("jax_enable_x64", True)``.

    Args:
        dtype: One of ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32``,
            or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float32``).
    """
    return _dtype
