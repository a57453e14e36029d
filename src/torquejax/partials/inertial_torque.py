"""Partials of the inertial torque of a rotating rigid body.

The inertial torque ``tau = -omega x (I omega)`` depends on the angular
velocity and, through the inertia tensor, on the mean moment of inertia,
the gravitational parameter and the degree-two gravity field coefficients
of the body itself.  Its partial w.r.t. angular velocity is::

    d tau / d omega = -[omega x] I + [(I omega) x]

and it has no orientation dependency.  For any inertia tensor perturbation
``dI`` the torque perturbation is ``-omega x (dI omega)``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from torquejax.config import get_dtype
from torquejax.estimation.parameters import EstimatableParameter, ParameterKind
from torquejax.linear_algebra import cross_product_matrix
from torquejax.partials._types import NO_DEPENDENCY, ParameterPartial, TorqueModelType
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


class InertialTorqueCache(NamedTuple):
    """Quantities cached by :class:`InertialTorquePartial` at one time.

    Attributes:
        angular_velocity: Body angular velocity, shape ``(3,)`` [rad/s].
        angular_velocity_cross_product_matrix: ``[omega x]``, shape ``(3, 3)``.
        inertia_tensor: Inertia tensor, shape ``(3, 3)`` [kg m^2].
        inverse_inertia_tensor: Inverse inertia tensor, shape ``(3, 3)``.
        inertia_normalization_factor: ``M R^2`` [kg m^2].
        gravitational_parameter: Gravitational parameter of the body
            [m^3/s^2].
        partial_wrt_angular_velocity: ``d tau / d omega``, shape ``(3, 3)``.
    """

    angular_velocity: Array
    angular_velocity_cross_product_matrix: Array
    inertia_tensor: Array
    inverse_inertia_tensor: Array
    inertia_normalization_factor: Array
    gravitational_parameter: Array
    partial_wrt_angular_velocity: Array


def _nan_cache() -> InertialTorqueCache:
    _float = get_dtype()
    vector = jnp.full((3,), jnp.nan, dtype=_float)
    matrix = jnp.full((3, 3), jnp.nan, dtype=_float)
    scalar = jnp.array(jnp.nan, dtype=_float)
    return InertialTorqueCache(vector, matrix, matrix, matrix, scalar, scalar, matrix)


class InertialTorquePartial(TorquePartial):
    """Partial of the inertial torque acting on a rigid body.

    The state providers are zero-argument callables evaluated once per
    :meth:`update` at a new time; they are owned by the caller and must
    remain valid for as long as this partial is updated.

    Args:
        angular_velocity_function: Returns the body-frame angular velocity
            ``(3,)`` [rad/s].
        inertia_tensor_function: Returns the inertia tensor ``(3, 3)``
            [kg m^2].
        inertia_normalization_function: Returns ``M R^2`` [kg m^2].
        gravitational_parameter_function: Returns the gravitational
            parameter of the body [m^3/s^2].
        accelerated_body: Name of the rotating body.
        normalized_coefficients: Whether estimated gravity field
            coefficients are fully normalized.

    Examples:
        ```python
        import jax.numpy as jnp
        partial = InertialTorquePartial(
            lambda: jnp.array([0.1, 0.0, 0.2]),
            lambda: jnp.diag(jnp.array([100.0, 120.0, 110.0])),
            lambda: 1.0,
            lambda: 398600.0,
            "Vehicle",
        )
        partial.update(0.0)
        jac = partial.write_state_angular_velocity_partial(jnp.zeros((3, 6)))
        ```
    """

    def __init__(
        self,
        angular_velocity_function: Callable[[], Array],
        inertia_tensor_function: Callable[[], Array],
        inertia_normalization_function: Callable[[], float],
        gravitational_parameter_function: Callable[[], float],
        accelerated_body: str,
        normalized_coefficients: bool = True,
    ):
        super().__init__(accelerated_body, accelerated_body, TorqueModelType.INERTIAL)
        self._angular_velocity_function = angular_velocity_function
        self._inertia_tensor_function = inertia_tensor_function
        self._inertia_normalization_function = inertia_normalization_function
        self._gravitational_parameter_function = gravitational_parameter_function
        self._normalized_coefficients = normalized_coefficients
        self._cache = _nan_cache()

    @property
    def cache(self) -> InertialTorqueCache:
        """Quantities cached at :attr:`current_time`."""
        return self._cache

    def _refresh_cache(self) -> None:
        _float = get_dtype()
        omega = jnp.asarray(self._angular_velocity_function(), dtype=_float)
        I = jnp.asarray(self._inertia_tensor_function(), dtype=_float)  # noqa: E741
        normalization = jnp.asarray(self._inertia_normalization_function(), dtype=_float)
        gm = jnp.asarray(self._gravitational_parameter_function(), dtype=_float)

        omega_cross = cross_product_matrix(omega)

        self._cache = InertialTorqueCache(
            angular_velocity=omega,
            angular_velocity_cross_product_matrix=omega_cross,
            inertia_tensor=I,
            inverse_inertia_tensor=jnp.linalg.inv(I),
            inertia_normalization_factor=normalization,
            gravitational_parameter=gm,
            partial_wrt_angular_velocity=(
                -omega_cross @ I + cross_product_matrix(I @ omega)
            ),
        )

    def write_state_orientation_partial(
        self,
        partial_matrix: Array,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 0,
    ) -> Array:
        # The inertial torque is independent of orientation.
        return partial_matrix

    def write_state_angular_velocity_partial(
        self,
        partial_matrix: Array,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 3,
    ) -> Array:
        return add_partial_block(
            partial_matrix,
            self._cache.partial_wrt_angular_velocity,
            add_contribution,
            start_row,
            start_column,
        )

    # ------------------------------------------------------------------
    # Parameter partials
    # ------------------------------------------------------------------

    def torque_wrt_inertia(self, d_inertia: Array) -> Array:
        """Torque perturbation ``-omega x (dI omega)`` for an inertia perturbation.

        Args:
            d_inertia: Inertia tensor perturbation of shape ``(3, 3)``.

        Returns:
            Torque perturbation of shape ``(3,)``.
        """
        cache = self._cache
        return -cache.angular_velocity_cross_product_matrix @ (
            d_inertia @ cache.angular_velocity
        )

    def wrt_mean_moment_of_inertia(self) -> Array:
        """Partial w.r.t. the mean moment of inertia, shape ``(3,)``."""
        return self.torque_wrt_inertia(
            inertia_tensor_partial_wrt_mean_moment_of_inertia(
                self._cache.inertia_normalization_factor
            )
        )

    def wrt_gravitational_parameter(self) -> Array:
        """Partial w.r.t. the body's gravitational parameter, shape ``(3,)``."""
        cache = self._cache
        return self.torque_wrt_inertia(
            inertia_tensor_partial_wrt_gravitational_parameter(
                cache.inertia_tensor, cache.gravitational_parameter
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
        if parameter.body != self._accelerated_body:
            return NO_DEPENDENCY

        if parameter.kind == ParameterKind.MEAN_MOMENT_OF_INERTIA:
            return single_column_partial_function(self.wrt_mean_moment_of_inertia)
        if parameter.kind == ParameterKind.GRAVITATIONAL_PARAMETER:
            return single_column_partial_function(self.wrt_gravitational_parameter)
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
