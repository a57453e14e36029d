"""Partials of the second-degree gravitational (gravity gradient) torque.

A point-mass central body exerts on an extended body the torque::

    tau = k * r_b x (I r_b),    k = 3 mu_c / |r|^5,    r_b = R r

where ``r`` is the inertial position of the body relative to the central
body and ``R`` the inertial-to-body rotation.  With
``G = [r_b x] I - [(I r_b) x]`` the partials are:

- orientation error ``dtheta``, defined by ``R_true = (I3 - [dtheta x]) R``::

      d tau / d dtheta = k G [r_b x]

- inertial relative position::

      d tau / d r = k G R - 5 tau r^T / |r|^2

  entering with ``+`` for the translational state of the body and ``-``
  for that of the central body; velocities do not contribute.

- any inertia tensor perturbation ``dI``: ``k r_b x (dI r_b)``; the
  central-body gravitational parameter: ``tau / mu_c``.

The torque does not depend on angular velocity.

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, p. 240-244.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from torquejax.config import get_dtype
from torquejax.estimation.parameters import EstimatableParameter, ParameterKind
from torquejax.linear_algebra import cross_product_matrix
from torquejax.partials._types import (
    NO_DEPENDENCY,
    IntegratedStateType,
    ParameterPartial,
    StateReferencePoint,
    TorqueModelType,
)
from torquejax.partials.inertia_tensor_partial import (
    coefficient_block_partial_function,
    inertia_tensor_partial_wrt_gravitational_parameter,
    inertia_tensor_partial_wrt_mean_moment_of_inertia,
    inertia_tensor_partials_wrt_cosine_coefficients,
    inertia_tensor_partials_wrt_sine_coefficients,
)
from torquejax.partials.torque_partial import (
    TorquePartial,
    add_partial_block,
    single_column_partial_function,
)


class GravityGradientCache(NamedTuple):
    """Quantities cached by :class:`SecondDegreeGravitationalTorquePartial`.

    Attributes:
        relative_position: Inertial position w.r.t. the central body [m].
        rotation_to_body_frame: Inertial-to-body rotation, ``(3, 3)``.
        body_fixed_position: ``R r`` [m].
        body_fixed_position_cross_product_matrix: ``[r_b x]``.
        inertia_tensor: Inertia tensor of the body [kg m^2].
        inertia_normalization_factor: ``M R^2`` of the body [kg m^2].
        gravitational_parameter: Gravitational parameter of the body.
        central_gravitational_parameter: Gravitational parameter of the
            central body.
        torque_scaling: ``3 mu_c / |r|^5``.
        torque: Gravity gradient torque in the body frame [N m].
        partial_wrt_orientation: ``d tau / d dtheta``, ``(3, 3)``.
        partial_wrt_relative_position: ``d tau / d r``, ``(3, 3)``.
    """

    relative_position: Array
    rotation_to_body_frame: Array
    body_fixed_position: Array
    body_fixed_position_cross_product_matrix: Array
    inertia_tensor: Array
    inertia_normalization_factor: Array
    gravitational_parameter: Array
    central_gravitational_parameter: Array
    torque_scaling: Array
    torque: Array
    partial_wrt_orientation: Array
    partial_wrt_relative_position: Array


def _nan_cache() -> GravityGradientCache:
    _float = get_dtype()
    vector = jnp.full((3,), jnp.nan, dtype=_float)
    matrix = jnp.full((3, 3), jnp.nan, dtype=_float)
    scalar = jnp.array(jnp.nan, dtype=_float)
    return GravityGradientCache(
        vector, matrix, vector, matrix, matrix, scalar, scalar, scalar,
        scalar, vector, matrix, matrix,
    )


class SecondDegreeGravitationalTorquePartial(TorquePartial):
    """Partial of the gravity gradient torque of a central body.

    Args:
        relative_position_function: Returns the inertial position of the
            accelerated body w.r.t. the central body ``(3,)`` [m].
        rotation_to_body_frame_function: Returns the inertial-to-body
            rotation matrix ``(3, 3)``.
        inertia_tensor_function: Returns the inertia tensor of the
            accelerated body ``(3, 3)`` [kg m^2].
        inertia_normalization_function: Returns ``M R^2`` of the
            accelerated body [kg m^2].
        gravitational_parameter_function: Returns the gravitational
            parameter of the accelerated body [m^3/s^2].
        central_gravitational_parameter_function: Returns the gravitational
            parameter of the central body [m^3/s^2].
        accelerated_body: Name of the body undergoing the torque.
        accelerating_body: Name of the central body.
        normalized_coefficients: Whether estimated gravity field
            coefficients are fully normalized.

    Raises:
        ValueError: If both bodies are the same.
    """

    def __init__(
        self,
        relative_position_function: Callable[[], Array],
        rotation_to_body_frame_function: Callable[[], Array],
        inertia_tensor_function: Callable[[], Array],
        inertia_normalization_function: Callable[[], float],
        gravitational_parameter_function: Callable[[], float],
        central_gravitational_parameter_function: Callable[[], float],
        accelerated_body: str,
        accelerating_body: str,
        normalized_coefficients: bool = True,
    ):
        if accelerated_body == accelerating_body:
            raise ValueError(
                f"Gravity gradient torque requires distinct bodies, got "
                f"'{accelerated_body}' for both"
            )
        super().__init__(
            accelerated_body,
            accelerating_body,
            TorqueModelType.SECOND_DEGREE_GRAVITATIONAL,
        )
        self._relative_position_function = relative_position_function
        self._rotation_to_body_frame_function = rotation_to_body_frame_function
        self._inertia_tensor_function = inertia_tensor_function
        self._inertia_normalization_function = inertia_normalization_function
        self._gravitational_parameter_function = gravitational_parameter_function
        self._central_gravitational_parameter_function = (
            central_gravitational_parameter_function
        )
        self._normalized_coefficients = normalized_coefficients
        self._cache = _nan_cache()

    @property
    def cache(self) -> GravityGradientCache:
        """Quantities cached at :attr:`current_time`."""
        return self._cache

    def _refresh_cache(self) -> None:
        _float = get_dtype()
        r = jnp.asarray(self._relative_position_function(), dtype=_float)
        R = jnp.asarray(self._rotation_to_body_frame_function(), dtype=_float)
        I = jnp.asarray(self._inertia_tensor_function(), dtype=_float)  # noqa: E741
        normalization = jnp.asarray(self._inertia_normalization_function(), dtype=_float)
        gm = jnp.asarray(self._gravitational_parameter_function(), dtype=_float)
        gm_central = jnp.asarray(
            self._central_gravitational_parameter_function(), dtype=_float
        )

        r_body = R @ r
        r_body_cross = cross_product_matrix(r_body)
        r_norm = jnp.linalg.norm(r)

        k = 3.0 * gm_central / r_norm**5
        torque = k * r_body_cross @ (I @ r_body)
        G = r_body_cross @ I - cross_product_matrix(I @ r_body)

        self._cache = GravityGradientCache(
            relative_position=r,
            rotation_to_body_frame=R,
            body_fixed_position=r_body,
            body_fixed_position_cross_product_matrix=r_body_cross,
            inertia_tensor=I,
            inertia_normalization_factor=normalization,
            gravitational_parameter=gm,
            central_gravitational_parameter=gm_central,
            torque_scaling=k,
            torque=torque,
            partial_wrt_orientation=k * G @ r_body_cross,
            partial_wrt_relative_position=(
                k * G @ R - 5.0 * jnp.outer(torque, r) / r_norm**2
            ),
        )

    # ------------------------------------------------------------------
    # State partials
    # ------------------------------------------------------------------

    def write_state_orientation_partial(
        self,
        partial_matrix: Array,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 0,
    ) -> Array:
        return add_partial_block(
            partial_matrix,
            self._cache.partial_wrt_orientation,
            add_contribution,
            start_row,
            start_column,
        )

    def write_state_angular_velocity_partial(
        self,
        partial_matrix: Array,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 3,
    ) -> Array:
        # The gravity gradient torque is independent of angular velocity.
        return partial_matrix

    def depends_on_non_rotational_state(
        self,
        state_reference_point: StateReferencePoint,
        state_type: IntegratedStateType,
    ) -> bool:
        return state_type == IntegratedStateType.TRANSLATIONAL and (
            state_reference_point[0] in (self._accelerated_body, self._accelerating_body)
        )

    def write_non_rotational_state_partial(
        self,
        partial_matrix: Array,
        state_reference_point: StateReferencePoint,
        state_type: IntegratedStateType,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 0,
    ) -> Array:
        """Write the 3x6 partial w.r.t. a translational state ``[r, v]``."""
        if not self.depends_on_non_rotational_state(state_reference_point, state_type):
            return partial_matrix

        # r is the accelerated body relative to the central body.
        if state_reference_point[0] != self._accelerated_body:
            add_contribution = not add_contribution

        _float = get_dtype()
        block = jnp.concatenate(
            [self._cache.partial_wrt_relative_position, jnp.zeros((3, 3), dtype=_float)],
            axis=1,
        )
        return add_partial_block(
            partial_matrix, block, add_contribution, start_row, start_column
        )

    # ------------------------------------------------------------------
    # Parameter partials
    # ------------------------------------------------------------------

    def torque_wrt_inertia(self, d_inertia: Array) -> Array:
        """Torque perturbation ``k r_b x (dI r_b)`` for an inertia perturbation.

        Args:
            d_inertia: Inertia tensor perturbation of shape ``(3, 3)``.

        Returns:
            Torque perturbation of shape ``(3,)``.
        """
        cache = self._cache
        return cache.torque_scaling * cache.body_fixed_position_cross_product_matrix @ (
            d_inertia @ cache.body_fixed_position
        )

    def wrt_central_gravitational_parameter(self) -> Array:
        """Partial w.r.t. the central body's gravitational parameter."""
        cache = self._cache
        return cache.torque / cache.central_gravitational_parameter

    def wrt_gravitational_parameter(self) -> Array:
        """Partial w.r.t. the accelerated body's gravitational parameter."""
        cache = self._cache
        return self.torque_wrt_inertia(
            inertia_tensor_partial_wrt_gravitational_parameter(
                cache.inertia_tensor, cache.gravitational_parameter
            )
        )

    def wrt_mean_moment_of_inertia(self) -> Array:
        """Partial w.r.t. the accelerated body's mean moment of inertia."""
        return self.torque_wrt_inertia(
            inertia_tensor_partial_wrt_mean_moment_of_inertia(
                self._cache.inertia_normalization_factor
            )
        )

    def _cosine_inertia_partials(self) -> Array:
        return inertia_tensor_partials_wrt_cosine_coefficients(
            self._cache.inertia_normalization_factor, self._normalized_coefficients
        )

    def _sine_inertia_partials(self) -> Array:
        return inertia_tensor_partials_wrt_sine_coefficients(
            self._cache.inertia_normalization_factor, self._normalized_coefficients
        )

    def _scalar_parameter_partial_function(
        self,
        parameter: EstimatableParameter,
    ) -> ParameterPartial:
        if parameter.kind == ParameterKind.GRAVITATIONAL_PARAMETER:
            if parameter.body == self._accelerating_body:
                return single_column_partial_function(
                    self.wrt_central_gravitational_parameter
                )
            if parameter.body == self._accelerated_body:
                return single_column_partial_function(self.wrt_gravitational_parameter)
            return NO_DEPENDENCY

        if (
            parameter.kind == ParameterKind.MEAN_MOMENT_OF_INERTIA
            and parameter.body == self._accelerated_body
        ):
            return single_column_partial_function(self.wrt_mean_moment_of_inertia)
        return NO_DEPENDENCY

    def _vector_parameter_partial_function(
        self,
        parameter: EstimatableParameter,
    ) -> ParameterPartial:
        if parameter.body != self._accelerated_body:
            return NO_DEPENDENCY

        if parameter.kind == ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK:
            return coefficient_block_partial_function(
                parameter, self._cosine_inertia_partials, self.torque_wrt_inertia
            )
        if parameter.kind == ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK:
            return coefficient_block_partial_function(
                parameter, self._sine_inertia_partials, self.torque_wrt_inertia
            )
        return NO_DEPENDENCY
