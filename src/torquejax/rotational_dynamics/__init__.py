"""Rigid-body rotational dynamics providers.

Provides the torque laws differentiated by :mod:`torquejax.partials` and
the inertia model from which inertia tensors and their normalization
factors are evaluated:

- **Torques**: Inertial torque and gravity gradient torque
- **Inertia**: Inertia tensor from degree-two gravity field coefficients
"""

from .inertia import (
    DegreeTwoInertiaModel,
    inertia_normalization_factor,
    inertia_tensor_from_degree_two_coefficients,
    legendre_normalization_factor,
)
from .torques import inertial_torque, torque_gravity_gradient

__all__ = [
    # Inertia
    "DegreeTwoInertiaModel",
    "inertia_normalization_factor",
    "inertia_tensor_from_degree_two_coefficients",
    "legendre_normalization_factor",
    # Torque models
    "inertial_torque",
    "torque_gravity_gradient",
]
