"""Base contract shared by every torque partial.

A torque partial computes the sensitivity of one torque's contribution to
the rotational equations of motion with respect to the propagated state
and to estimated parameters.  Its lifecycle is:

1. ``update(time)`` -- evaluate the upstream state providers and cache
   every quantity needed by the partials at *time*.  Repeated calls at
   the same time are no-ops; any other time refreshes the whole cache.
2. ``write_state_*_partial(matrix, ...)`` -- add (or subtract) the state
   partial blocks into a Jacobian.
3. ``get_parameter_partial_function(parameter)`` -- obtain a
   :class:`~torquejax.partials._types.ParameterPartial` binding that
   writes the parameter partial when invoked.

JAX arrays are immutable, so every write operation returns the updated
matrix.  A model without a given dependency returns the input matrix
object itself.

Writing partials before the first ``update`` is a caller error that is
not guarded against; concrete partials start from a NaN-filled cache so
such use surfaces as non-finite output.
"""

from __future__ import annotations

import abc
from collections.abc import Callable

from jax import Array

from torquejax.estimation.parameters import EstimatableParameter
from torquejax.partials._types import (
    IntegratedStateType,
    ParameterPartial,
    StateReferencePoint,
    TorqueModelType,
)


def add_partial_block(
    partial_matrix: Array,
    block: Array,
    add_contribution: bool,
    start_row: int,
    start_column: int,
) -> Array:
    """Add or subtract *block* into *partial_matrix* at the given offset.

    Args:
        partial_matrix: Matrix receiving the contribution.
        block: Partial block of shape ``(rows, columns)``.
        add_contribution: Add the block if ``True``, subtract it otherwise.
        start_row: Row of *partial_matrix* receiving ``block[0, 0]``.
        start_column: Column of *partial_matrix* receiving ``block[0, 0]``.

    Returns:
        Updated matrix.
    """
    rows, columns = block.shape
    target = (
        slice(start_row, start_row + rows),
        slice(start_column, start_column + columns),
    )
    if add_contribution:
        return partial_matrix.at[target].add(block)
    return partial_matrix.at[target].add(-block)


def single_column_partial_function(column: Callable[[], Array]) -> ParameterPartial:
    """Bind a one-column parameter partial.

    Args:
        column: Callable returning the ``(3,)`` torque partial, evaluated
            from the cache at invocation time.

    Returns:
        ParameterPartial: Binding writing *column* into column 0.
    """

    def write(partial: Array) -> Array:
        return partial.at[:, 0].set(column())

    return ParameterPartial(function=write, n_columns=1)


class TorquePartial(abc.ABC):
    """Abstract torque partial.

    Args:
        accelerated_body: Name of the body undergoing the torque.
        accelerating_body: Name of the body exerting the torque.
        torque_type: Torque law of the partial.
    """

    def __init__(
        self,
        accelerated_body: str,
        accelerating_body: str,
        torque_type: TorqueModelType,
    ):
        self._accelerated_body = accelerated_body
        self._accelerating_body = accelerating_body
        self._torque_type = torque_type
        self._current_time: float | None = None

    @property
    def accelerated_body(self) -> str:
        """Name of the body undergoing the torque."""
        return self._accelerated_body

    @property
    def accelerating_body(self) -> str:
        """Name of the body exerting the torque."""
        return self._accelerating_body

    @property
    def torque_type(self) -> TorqueModelType:
        """Torque law of the partial."""
        return self._torque_type

    @property
    def current_time(self) -> float | None:
        """Time of the cached quantities, ``None`` before the first update."""
        return self._current_time

    # ------------------------------------------------------------------
    # Cache lifecycle
    # ------------------------------------------------------------------

    def needs_update(self, current_time: float) -> bool:
        """Whether the cache must be refreshed for *current_time*.

        Args:
            current_time: Requested evaluation time [s].

        Returns:
            ``True`` if the partial was never updated or was last updated
            at a different time.
        """
        return self._current_time is None or self._current_time != current_time

    def update(self, current_time: float) -> None:
        """Refresh all cached quantities for *current_time*.

        Args:
            current_time: Evaluation time [s].
        """
        if self.needs_update(current_time):
            self._refresh_cache()
            self._current_time = current_time

    def reset_current_time(self) -> None:
        """Forget the cache time so that the next ``update`` recomputes."""
        self._current_time = None

    @abc.abstractmethod
    def _refresh_cache(self) -> None:
        """Evaluate the state providers and replace the cache in one step."""

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
        """Write the 3x3 partial w.r.t. the orientation error of the body.

        The default implementation models no orientation dependency.

        Args:
            partial_matrix: Jacobian receiving the block.
            add_contribution: Add the block if ``True``, subtract otherwise.
            start_row: First row of the block.
            start_column: First column of the block.

        Returns:
            Updated Jacobian.
        """
        return partial_matrix

    def write_state_angular_velocity_partial(
        self,
        partial_matrix: Array,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 3,
    ) -> Array:
        """Write the 3x3 partial w.r.t. the angular velocity of the body.

        The default implementation models no angular velocity dependency.

        Args:
            partial_matrix: Jacobian receiving the block.
            add_contribution: Add the block if ``True``, subtract otherwise.
            start_row: First row of the block.
            start_column: First column of the block.

        Returns:
            Updated Jacobian.
        """
        return partial_matrix

    def write_non_rotational_state_partial(
        self,
        partial_matrix: Array,
        state_reference_point: StateReferencePoint,
        state_type: IntegratedStateType,
        add_contribution: bool = True,
        start_row: int = 0,
        start_column: int = 0,
    ) -> Array:
        """Write the partial w.r.t. a non-rotational propagated state.

        Only meaningful when :meth:`depends_on_non_rotational_state` is
        ``True`` for the same arguments.

        Args:
            partial_matrix: Jacobian receiving the block.
            state_reference_point: ``(body, reference point)`` of the state.
            state_type: Type of the propagated state.
            add_contribution: Add the block if ``True``, subtract otherwise.
            start_row: First row of the block.
            start_column: First column of the block.

        Returns:
            Updated Jacobian.
        """
        return partial_matrix

    def depends_on_non_rotational_state(
        self,
        state_reference_point: StateReferencePoint,
        state_type: IntegratedStateType,
    ) -> bool:
        """Whether the torque depends on a non-rotational propagated state."""
        return False

    def depends_on_additional_state_types(
        self,
        state_reference_point: StateReferencePoint,
        state_type: IntegratedStateType,
    ) -> bool:
        """Whether the torque depends on an auxiliary propagated state."""
        return False

    # ------------------------------------------------------------------
    # Parameter partials
    # ------------------------------------------------------------------

    def get_parameter_partial_function(
        self,
        parameter: EstimatableParameter,
    ) -> ParameterPartial:
        """Return the partial binding for a scalar or vector parameter.

        Args:
            parameter: Parameter descriptor.

        Returns:
            ParameterPartial: Binding, ``NO_DEPENDENCY`` if the torque does
                not depend on *parameter*.
        """
        if parameter.is_vector:
            return self.get_vector_parameter_partial_function(parameter)
        return self.get_scalar_parameter_partial_function(parameter)

    def get_scalar_parameter_partial_function(
        self,
        parameter: EstimatableParameter,
    ) -> ParameterPartial:
        """Return the partial binding for a scalar parameter.

        Args:
            parameter: Scalar parameter descriptor.

        Returns:
            ParameterPartial: Binding with 0 or 1 columns.

        Raises:
            ValueError: If *parameter* is vector-valued.
        """
        if parameter.is_vector:
            raise ValueError(
                f"Expected a scalar parameter, got vector parameter {parameter.kind}"
            )
        return self._scalar_parameter_partial_function(parameter)

    def get_vector_parameter_partial_function(
        self,
        parameter: EstimatableParameter,
    ) -> ParameterPartial:
        """Return the partial binding for a vector parameter.

        Args:
            parameter: Vector parameter descriptor.

        Returns:
            ParameterPartial: Binding with 0 or ``parameter.size`` columns.

        Raises:
            ValueError: If *parameter* is scalar.
        """
        if not parameter.is_vector:
            raise ValueError(
                f"Expected a vector parameter, got scalar parameter {parameter.kind}"
            )
        return self._vector_parameter_partial_function(parameter)

    @abc.abstractmethod
    def _scalar_parameter_partial_function(
        self,
        parameter: EstimatableParameter,
    ) -> ParameterPartial:
        """Dispatch a scalar parameter to its partial binding."""

    @abc.abstractmethod
    def _vector_parameter_partial_function(
        self,
        parameter: EstimatableParameter,
    ) -> ParameterPartial:
        """Dispatch a vector parameter to its partial binding."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(accelerated_body={self._accelerated_body!r}, "
            f"accelerating_body={self._accelerating_body!r}, "
            f"current_time={self._current_time!r})"
        )
