"""Assembly of torque partials into Jacobian blocks.

:class:`RotationalJacobianAssembler` drives a set of torque partials acting
on one body through the partial contract:

1. At construction, every torque partial is asked once per estimated
   parameter for its :class:`~torquejax.partials._types.ParameterPartial`
   binding; bindings read the partial's cache when invoked, so they stay
   valid for the whole run.
2. Per evaluation epoch, ``update(time)`` is called on every partial,
   after which the state and parameter blocks of all torques are
   accumulated into shared matrices.

The rotational state of the body is ordered ``[dtheta, omega]``
(orientation error, angular velocity), giving a ``(3, 6)`` state block.
Parameter columns follow the order of the parameter list, each parameter
taking ``parameter.size`` columns.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array

from torquejax.config import get_dtype
from torquejax.estimation.parameters import EstimatableParameter
from torquejax.partials._types import (
    IntegratedStateType,
    ParameterPartial,
    StateReferencePoint,
)
from torquejax.partials.torque_partial import TorquePartial

logger = logging.getLogger(__name__)

ROTATIONAL_STATE_SIZE = 6
TRANSLATIONAL_STATE_SIZE = 6


class TorqueJacobian(NamedTuple):
    """Torque Jacobian blocks of one body at one epoch.

    Attributes:
        state: Partial w.r.t. ``[dtheta, omega]``, shape ``(3, 6)``.
        parameters: Partial w.r.t. all estimated parameters, shape
            ``(3, n_parameter_columns)``.
    """

    state: Array
    parameters: Array


class _Binding(NamedTuple):
    column: int
    partial: ParameterPartial


class RotationalJacobianAssembler:
    """Accumulates the torque partials of one body into Jacobian blocks.

    Args:
        torque_partials: Partials of all torques acting on the body.
        parameters: Estimated parameters, in Jacobian column order.

    Raises:
        ValueError: If *torque_partials* is empty, the partials act on
            different bodies, or a binding's width differs from its
            parameter's size.

    Examples:
        ```python
        assembler = RotationalJacobianAssembler(
            [inertial_partial], [gravitational_parameter("Vehicle")]
        )
        jacobian = assembler.evaluate(0.0)
        jacobian.state.shape, jacobian.parameters.shape
        ```
    """

    def __init__(
        self,
        torque_partials: Sequence[TorquePartial],
        parameters: Sequence[EstimatableParameter] = (),
    ):
        if not torque_partials:
            raise ValueError("At least one torque partial is required")
        bodies = {partial.accelerated_body for partial in torque_partials}
        if len(bodies) != 1:
            raise ValueError(
                f"All torque partials must act on the same body, got {sorted(bodies)}"
            )

        self._body = bodies.pop()
        self._torque_partials = tuple(torque_partials)
        self._parameters = tuple(parameters)

        self._parameter_columns: list[int] = []
        self._bindings: list[_Binding] = []
        column = 0
        for parameter in self._parameters:
            self._parameter_columns.append(column)
            for torque_partial in self._torque_partials:
                binding = torque_partial.get_parameter_partial_function(parameter)
                if binding.n_columns == 0:
                    logger.debug(
                        "No dependency of %s torque on %s of %s",
                        torque_partial.torque_type.value,
                        parameter.kind.value,
                        parameter.body,
                    )
                    continue
                if binding.n_columns != parameter.size:
                    raise ValueError(
                        f"{type(torque_partial).__name__} returned {binding.n_columns} "
                        f"columns for {parameter.kind.value} of size {parameter.size}"
                    )
                self._bindings.append(_Binding(column, binding))
            column += parameter.size
        self._n_parameter_columns = column

        logger.info(
            "Assembling %d torque partial(s) on %s with %d parameter column(s)",
            len(self._torque_partials),
            self._body,
            self._n_parameter_columns,
        )

    @property
    def body(self) -> str:
        """Name of the body the torques act on."""
        return self._body

    @property
    def torque_partials(self) -> tuple[TorquePartial, ...]:
        """Partials driven by this assembler."""
        return self._torque_partials

    @property
    def n_parameter_columns(self) -> int:
        """Total number of parameter columns."""
        return self._n_parameter_columns

    def parameter_column(self, index: int) -> int:
        """First Jacobian column of the parameter at position *index*."""
        return self._parameter_columns[index]

    def update(self, current_time: float) -> None:
        """Update every torque partial to *current_time*."""
        for torque_partial in self._torque_partials:
            torque_partial.update(current_time)

    def state_partials(self) -> Array:
        """Summed torque partial w.r.t. ``[dtheta, omega]``, shape ``(3, 6)``."""
        jacobian = jnp.zeros((3, ROTATIONAL_STATE_SIZE), dtype=get_dtype())
        for torque_partial in self._torque_partials:
            jacobian = torque_partial.write_state_orientation_partial(
                jacobian, True, 0, 0
            )
            jacobian = torque_partial.write_state_angular_velocity_partial(
                jacobian, True, 0, 3
            )
        return jacobian

    def non_rotational_state_partials(
        self,
        state_reference_point: StateReferencePoint,
        state_type: IntegratedStateType = IntegratedStateType.TRANSLATIONAL,
    ) -> Array:
        """Summed torque partial w.r.t. a translational state, shape ``(3, 6)``.

        Args:
            state_reference_point: ``(body, reference point)`` of the state.
            state_type: Type of the propagated state.

        Returns:
            Partial block; zero if no torque depends on the state.
        """
        jacobian = jnp.zeros((3, TRANSLATIONAL_STATE_SIZE), dtype=get_dtype())
        for torque_partial in self._torque_partials:
            if torque_partial.depends_on_non_rotational_state(
                state_reference_point, state_type
            ):
                jacobian = torque_partial.write_non_rotational_state_partial(
                    jacobian, state_reference_point, state_type, True, 0, 0
                )
        return jacobian

    def parameter_partials(self) -> Array:
        """Summed torque partial w.r.t. all parameters.

        Returns:
            Partial block of shape ``(3, n_parameter_columns)``.
        """
        _float = get_dtype()
        jacobian = jnp.zeros((3, self._n_parameter_columns), dtype=_float)
        for column, binding in self._bindings:
            block = binding.function(jnp.zeros((3, binding.n_columns), dtype=_float))
            jacobian = jacobian.at[:, column:column + binding.n_columns].add(block)
        return jacobian

    def evaluate(self, current_time: float) -> TorqueJacobian:
        """Update all partials and assemble the Jacobian blocks at *current_time*."""
        self.update(current_time)
        return TorqueJacobian(
            state=self.state_partials(),
            parameters=self.parameter_partials(),
        )
