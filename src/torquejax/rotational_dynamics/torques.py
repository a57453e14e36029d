"""Torque laws whose analytic partials are provided by :mod:`torquejax.partials`.

- :func:`inertial_torque` -- the inertial (torque-free) term
  ``-omega x (I omega)`` of Euler's rotational equation.
- :func:`torque_gravity_gradient` -- second-degree gravitational torque
  exerted by a point-mass central body on an extended body.

Both are pure JAX functions, so they can be differentiated with
``jax.jacfwd`` to cross-check the analytic partials.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from torquejax.config import get_dtype
from torquejax.constants import GM_EARTH


def inertial_torque(omega: ArrayLike, I: ArrayLike) -> Array:  # noqa: E741
    """Compute the inertial torque of a rotating rigid body.

    Euler's rotational equation reads::

        I @ omega_dot = -omega x (I @ omega) + tau_ext

    The first right-hand-side term is the inertial torque.

    Args:
        omega: Angular velocity in the body frame ``[wx, wy, wz]``
            of shape ``(3,)`` [rad/s].
        I: Inertia tensor of shape ``(3, 3)`` [kg m^2].

    Returns:
        Inertial torque in the body frame of shape ``(3,)`` [N m].

    Examples:
        ```python
        import jax.numpy as jnp
        omega = jnp.array([1.0, 1.0, 0.0])
        I = jnp.diag(jnp.array([10.0, 20.0, 30.0]))
        inertial_torque(omega, I)
        ```
    """
    _float = get_dtype()
    omega = jnp.asarray(omega, dtype=_float)
    I = jnp.asarray(I, dtype=_float)  # noqa: E741

    return -jnp.cross(omega, I @ omega)


def torque_gravity_gradient(
    r_eci: ArrayLike,
    R_eci_to_body: ArrayLike,
    I: ArrayLike,  # noqa: E741
    mu: float = GM_EARTH,
) -> Array:
    """Compute the gravity gradient torque in the body frame.

    .. math::

        \\tau_{gg} = \\frac{3\\mu}{r^5} \\left( r_b \\times (I \\, r_b) \\right)

    where :math:`r_b = R \\, r` is the position of the body relative to the
    central body, expressed in the body frame.

    Args:
        r_eci: Position of the body relative to the central body in the
            inertial frame, shape ``(3,)`` [m].
        R_eci_to_body: Inertial-to-body rotation matrix of shape ``(3, 3)``.
        I: Inertia tensor of shape ``(3, 3)`` [kg m^2].
        mu: Gravitational parameter of the central body [m^3/s^2].

    Returns:
        Gravity gradient torque in the body frame of shape ``(3,)`` [N m].

    Examples:
        ```python
        import jax.numpy as jnp
        r_eci = jnp.array([7000e3, 0.0, 0.0])
        I = jnp.diag(jnp.array([10.0, 20.0, 30.0]))
        tau = torque_gravity_gradient(r_eci, jnp.eye(3), I)
        tau.shape
        ```
    """
    _float = get_dtype()
    r_eci = jnp.asarray(r_eci, dtype=_float)
    R_eci_to_body = jnp.asarray(R_eci_to_body, dtype=_float)
    I = jnp.asarray(I, dtype=_float)  # noqa: E741

    r_body = R_eci_to_body @ r_eci
    r_norm = jnp.linalg.norm(r_eci)

    return (3.0 * mu / r_norm**5) * jnp.cross(r_body, I @ r_body)
