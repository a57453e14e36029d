"""
torquejax provides analytic partial derivatives of rotational-dynamics torque models, implemented in JAX.
"""

from .constants import (
    GRAVITATIONAL_CONSTANT,
    R_EARTH,
    GM_EARTH,
    MEAN_MOMENT_OF_INERTIA_EARTH,
    GM_MOON,
    R_MOON,
    MEAN_MOMENT_OF_INERTIA_MOON,
)

from .config import set_dtype, get_dtype

from .linear_algebra import cross_product_matrix

from .rotational_dynamics import (
    DegreeTwoInertiaModel,
    inertia_normalization_factor,
    inertia_tensor_from_degree_two_coefficients,
    inertial_torque,
    torque_gravity_gradient,
)

from .estimation import (
    ParameterKind,
    EstimatableParameter,
    SphericalHarmonicsCoefficientBlock,
    gravitational_parameter,
    mean_moment_of_inertia,
    spherical_harmonic_block_indices,
    spherical_harmonics_cosine_block,
    spherical_harmonics_sine_block,
)

from .partials import (
    NO_DEPENDENCY,
    IntegratedStateType,
    ParameterPartial,
    TorqueModelType,
    TorquePartial,
    InertialTorquePartial,
    SecondDegreeGravitationalTorquePartial,
    RotationalJacobianAssembler,
    TorqueJacobian,
)
