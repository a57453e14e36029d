"""Type definitions shared by all torque partials.

- :class:`TorqueModelType`: Tag identifying the torque law of a partial.
- :class:`IntegratedStateType`: Kind of propagated state a partial may
  depend on.
- :class:`ParameterPartial`: Binding returned by the parameter-partial
  factory methods, a ``(function, n_columns)`` pair.
- :data:`NO_DEPENDENCY`: The binding signalling that a torque does not
  depend on a parameter.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from typing import NamedTuple

from jax import Array

StateReferencePoint = tuple[str, str]
"""Identifier of a propagated state: ``(body, reference point)``."""


class TorqueModelType(enum.Enum):
    """Torque law modelled by a partial."""

    INERTIAL = "inertial"
    SECOND_DEGREE_GRAVITATIONAL = "second_degree_gravitational"


class IntegratedStateType(enum.Enum):
    """Kind of a propagated state."""

    ROTATIONAL = "rotational"
    TRANSLATIONAL = "translational"
    BODY_MASS = "body_mass"
    CUSTOM = "custom"


class ParameterPartial(NamedTuple):
    """Partial derivative binding for one estimated parameter.

    Attributes:
        function: Callable taking a zeroed ``(3, n_columns)`` array and
            returning it with the torque partial written into its columns.
            ``None`` when ``n_columns`` is 0; it must then never be called.
        n_columns: Number of Jacobian columns written by *function*; 0
            signals that the torque does not depend on the parameter.
    """

    function: Callable[[Array], Array] | None
    n_columns: int


NO_DEPENDENCY = ParameterPartial(function=None, n_columns=0)
