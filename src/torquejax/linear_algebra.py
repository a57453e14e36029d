"""Cross-product matrix algebra used to build torque Jacobian blocks.

Every analytic torque partial in torquejax is written in terms of the
skew-symmetric cross-product matrix :math:`[a\\times]`, for which
:math:`[a\\times] b = a \\times b`.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from torquejax.config import get_dtype


def cross_product_matrix(vector: ArrayLike) -> Array:
    """Return the cross-product (skew-symmetric) matrix of a 3-vector.

    The matrix is::

            [  0   -vz   vy ]
        S = [  vz   0   -vx ]
            [ -vy   vx   0  ]

    so that ``S @ b == jnp.cross(vector, b)`` for any 3-vector ``b``.

    Args:
        vector: Vector ``[vx, vy, vz]`` of shape ``(3,)``.

    Returns:
        Cross-product matrix of shape ``(3, 3)``.

    Examples:
        ```python
        import jax.numpy as jnp
        S = cross_product_matrix(jnp.array([1.0, 2.0, 3.0]))
        S @ jnp.array([0.0, 0.0, 1.0])
        ```
    """
    _float = get_dtype()
    v = jnp.asarray(vector, dtype=_float)

    vx, vy, vz = v[0], v[1], v[2]
    zero = jnp.zeros((), dtype=_float)

    return jnp.array([
        [zero, -vz, vy],
        [vz, zero, -vx],
        [-vy, vx, zero],
    ], dtype=_float)
