"""Partials of the inertia tensor w.r.t. estimated parameters.

The inertia tensor depends on the dimensionless mean moment of inertia,
the gravitational parameter (through ``M = gm / G``) and the degree-two
gravity field coefficients, see
:func:`~torquejax.rotational_dynamics.inertia.inertia_tensor_from_degree_two_coefficients`.
Each torque partial turns these inertia tensor partials into torque
partials through its own ``dI -> dtau`` map; the dispatch of coefficient
blocks is shared through :func:`coefficient_block_partial_function`.
"""

from __future__ import annotations

from collections.abc import Callable

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from torquejax.config import get_dtype
from torquejax.estimation.parameters import (
    ParameterKind,
    SphericalHarmonicsCoefficientBlock,
)
from torquejax.partials._types import NO_DEPENDENCY, ParameterPartial
from torquejax.rotational_dynamics.inertia import legendre_normalization_factor


def inertia_tensor_partial_wrt_mean_moment_of_inertia(
    normalization_factor: ArrayLike,
) -> Array:
    """Partial of the inertia tensor w.r.t. the mean moment of inertia.

    Args:
        normalization_factor: Inertia normalization factor ``M R^2``.

    Returns:
        ``M R^2 * I3``, shape ``(3, 3)``.
    """
    _float = get_dtype()
    return jnp.asarray(normalization_factor, dtype=_float) * jnp.eye(3, dtype=_float)


def inertia_tensor_partial_wrt_gravitational_parameter(
    inertia_tensor: ArrayLike,
    gm: ArrayLike,
) -> Array:
    """Partial of the inertia tensor w.r.t. the body's gravitational parameter.

    The inertia tensor scales linearly with the body mass ``gm / G`` at
    fixed coefficients and mean moment of inertia.

    Args:
        inertia_tensor: Inertia tensor of shape ``(3, 3)``.
        gm: Gravitational parameter of the body.

    Returns:
        ``I / gm``, shape ``(3, 3)``.
    """
    _float = get_dtype()
    return jnp.asarray(inertia_tensor, dtype=_float) / jnp.asarray(gm, dtype=_float)


def inertia_tensor_partials_wrt_cosine_coefficients(
    normalization_factor: ArrayLike,
    normalized: bool = True,
) -> Array:
    """Partials of the inertia tensor w.r.t. C20, C21 and C22.

    Args:
        normalization_factor: Inertia normalization factor ``M R^2``.
        normalized: Whether the coefficients are fully normalized.

    Returns:
        Stacked partials of shape ``(3, 3, 3)``, ordered C20, C21, C22.
    """
    _float = get_dtype()
    if normalized:
        n20, n21, n22 = (legendre_normalization_factor(2, m) for m in range(3))
    else:
        n20 = n21 = n22 = 1.0

    d_c20 = n20 * jnp.diag(jnp.array([1.0 / 3.0, 1.0 / 3.0, -2.0 / 3.0], dtype=_float))
    d_c21 = n21 * jnp.array([
        [0.0, 0.0, -1.0],
        [0.0, 0.0, 0.0],
        [-1.0, 0.0, 0.0],
    ], dtype=_float)
    d_c22 = n22 * jnp.diag(jnp.array([-2.0, 2.0, 0.0], dtype=_float))

    k = jnp.asarray(normalization_factor, dtype=_float)
    return k * jnp.stack([d_c20, d_c21, d_c22])


def inertia_tensor_partials_wrt_sine_coefficients(
    normalization_factor: ArrayLike,
    normalized: bool = True,
) -> Array:
    """Partials of the inertia tensor w.r.t. S21 and S22.

    Args:
        normalization_factor: Inertia normalization factor ``M R^2``.
        normalized: Whether the coefficients are fully normalized.

    Returns:
        Stacked partials of shape ``(2, 3, 3)``, ordered S21, S22.
    """
    _float = get_dtype()
    if normalized:
        n21 = legendre_normalization_factor(2, 1)
        n22 = legendre_normalization_factor(2, 2)
    else:
        n21 = n22 = 1.0

    d_s21 = n21 * jnp.array([
        [0.0, 0.0, 0.0],
        [0.0, 0.0, -1.0],
        [0.0, -1.0, 0.0],
    ], dtype=_float)
    d_s22 = n22 * jnp.array([
        [0.0, -2.0, 0.0],
        [-2.0, 0.0, 0.0],
        [0.0, 0.0, 0.0],
    ], dtype=_float)

    k = jnp.asarray(normalization_factor, dtype=_float)
    return k * jnp.stack([d_s21, d_s22])


def degree_two_cosine_indices(
    parameter: SphericalHarmonicsCoefficientBlock,
) -> tuple[int | None, int | None, int | None]:
    """Positions of C20, C21 and C22 in a cosine coefficient block."""
    return (
        parameter.index_of(2, 0),
        parameter.index_of(2, 1),
        parameter.index_of(2, 2),
    )


def degree_two_sine_indices(
    parameter: SphericalHarmonicsCoefficientBlock,
) -> tuple[int | None, int | None]:
    """Positions of S21 and S22 in a sine coefficient block."""
    return parameter.index_of(2, 1), parameter.index_of(2, 2)


def coefficient_block_partial_function(
    parameter: SphericalHarmonicsCoefficientBlock,
    inertia_tensor_partials: Callable[[], Array],
    torque_wrt_inertia: Callable[[Array], Array],
) -> ParameterPartial:
    """Bind the torque partial w.r.t. a spherical harmonic coefficient block.

    Only the degree-two coefficients affect the inertia tensor; all other
    columns of the block are left at zero.

    Args:
        parameter: Cosine or sine coefficient block.
        inertia_tensor_partials: Callable returning the stacked inertia
            tensor partials (``(3, 3, 3)`` for cosine, ``(2, 3, 3)`` for
            sine blocks), evaluated at invocation time.
        torque_wrt_inertia: Linear map from an inertia tensor perturbation
            ``dI`` to the resulting torque perturbation.

    Returns:
        ParameterPartial: Binding with ``parameter.size`` columns, or
            ``NO_DEPENDENCY`` if the block holds no degree-two coefficient.
    """
    if parameter.kind == ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK:
        indices = degree_two_cosine_indices(parameter)
    elif parameter.kind == ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK:
        indices = degree_two_sine_indices(parameter)
    else:
        return NO_DEPENDENCY

    if all(index is None for index in indices):
        return NO_DEPENDENCY

    def write(partial: Array) -> Array:
        d_inertia = inertia_tensor_partials()
        for index, d_I in zip(indices, d_inertia):
            if index is not None:
                partial = partial.at[:, index].set(torque_wrt_inertia(d_I))
        return partial

    return ParameterPartial(function=write, n_columns=parameter.size)
