"""Estimated-parameter descriptors for torque partial dispatch.

Available components:

- :class:`ParameterKind` -- Enumerated parameter kinds
- :class:`EstimatableParameter` -- Scalar parameter descriptor
- :class:`SphericalHarmonicsCoefficientBlock` -- Cosine/sine coefficient block
- Constructors for the common descriptors
"""

from torquejax.estimation.parameters import (
    VECTOR_PARAMETER_KINDS,
    EstimatableParameter,
    ParameterKind,
    SphericalHarmonicsCoefficientBlock,
    gravitational_parameter,
    mean_moment_of_inertia,
    spherical_harmonic_block_indices,
    spherical_harmonics_cosine_block,
    spherical_harmonics_sine_block,
)

__all__ = [
    "ParameterKind",
    "VECTOR_PARAMETER_KINDS",
    "EstimatableParameter",
    "SphericalHarmonicsCoefficientBlock",
    "gravitational_parameter",
    "mean_moment_of_inertia",
    "spherical_harmonic_block_indices",
    "spherical_harmonics_cosine_block",
    "spherical_harmonics_sine_block",
]
