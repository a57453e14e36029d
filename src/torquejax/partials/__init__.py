"""Analytic partial derivatives of rotational-dynamics torque models.

Provides one partial object per torque law, all implementing the
:class:`TorquePartial` contract, and a driver assembling them into
Jacobian blocks:

- **Base contract**: Cache lifecycle, state-partial writes and
  parameter-partial dispatch (:class:`TorquePartial`)
- **Inertial torque**: :class:`InertialTorquePartial`
- **Gravity gradient torque**: :class:`SecondDegreeGravitationalTorquePartial`
- **Inertia tensor partials**: Shared parameter algebra
- **Assembly**: :class:`RotationalJacobianAssembler`
"""

from .assembly import RotationalJacobianAssembler, TorqueJacobian
from ._types import (
    NO_DEPENDENCY,
    IntegratedStateType,
    ParameterPartial,
    StateReferencePoint,
    TorqueModelType,
)
from .gravity_gradient import GravityGradientCache, SecondDegreeGravitationalTorquePartial
from .inertial_torque import InertialTorqueCache, InertialTorquePartial
from .torque_partial import TorquePartial, add_partial_block

__all__ = [
    # Types
    "TorqueModelType",
    "IntegratedStateType",
    "ParameterPartial",
    "StateReferencePoint",
    "NO_DEPENDENCY",
    # Base contract
    "TorquePartial",
    "add_partial_block",
    # Torque partials
    "InertialTorquePartial",
    "InertialTorqueCache",
    "SecondDegreeGravitationalTorquePartial",
    "GravityGradientCache",
    # Assembly
    "RotationalJacobianAssembler",
    "TorqueJacobian",
]
