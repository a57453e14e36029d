"""Inertia tensor of an extended body from its degree-two gravity field.

The inertia tensor of a body is fully determined by its mass, reference
radius, dimensionless mean moment of inertia and its degree-two
spherical harmonic gravity coefficients (MacCullagh's relations)::

    I = M R^2 * ( Ibar * I3 + [[ C20/3 - 2 C22,   -2 S22,        -C21     ],
                               [   -2 S22,      C20/3 + 2 C22,   -S21     ],
                               [    -C21,           -S21,     -2 C20 / 3  ]] )

with unnormalized coefficients.  ``M R^2`` is the *inertia normalization
factor*.  These helpers are the reference providers of inertia tensors and
normalization factors consumed by the torque partials; they are also the
relations differentiated by
:mod:`torquejax.partials.inertia_tensor_partial`.

References:
    1. W. M. Kaula, *Theory of Satellite Geodesy*, 1966, p. 8.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from torquejax.config import get_dtype
from torquejax.constants import GRAVITATIONAL_CONSTANT


def _factorial_product(n: int, m: int) -> float:
    """Compute (n-m)!/(n+m)! efficiently without full factorials.

    Args:
        n: Degree.
        m: Order.

    Returns:
        float: The factorial ratio.
    """
    p = 1.0
    for i in range(n - m + 1, n + m + 1):
        p /= i
    return p


def legendre_normalization_factor(n: int, m: int) -> float:
    """Geodesy normalization factor of the associated Legendre functions.

    Unnormalized coefficients follow from fully normalized ones as
    ``C_nm = N_nm * Cbar_nm`` with::

        N_nm = sqrt((2 - delta_0m) (2n + 1) (n - m)! / (n + m)!)

    Args:
        n: Degree.
        m: Order, ``0 <= m <= n``.

    Returns:
        float: Normalization factor ``N_nm``.

    Raises:
        ValueError: If the order is negative or exceeds the degree.
    """
    if m < 0 or m > n:
        raise ValueError(f"Order must satisfy 0 <= m <= n, got (n={n}, m={m}).")
    delta = 1.0 if m == 0 else 0.0
    return math.sqrt((2.0 - delta) * (2.0 * n + 1.0) * _factorial_product(n, m))


def inertia_normalization_factor(gm: float, reference_radius: float) -> float:
    """Return the inertia normalization factor ``M R^2`` [kg m^2].

    Args:
        gm: Gravitational parameter of the body [m^3/s^2].
        reference_radius: Reference radius of the gravity field [m].

    Returns:
        float: ``gm / G * R^2``.
    """
    return gm / GRAVITATIONAL_CONSTANT * reference_radius**2


def _unnormalization_factors(normalized: bool) -> tuple[float, float, float]:
    if not normalized:
        return 1.0, 1.0, 1.0
    return (
        legendre_normalization_factor(2, 0),
        legendre_normalization_factor(2, 1),
        legendre_normalization_factor(2, 2),
    )


def inertia_tensor_from_degree_two_coefficients(
    c20: ArrayLike,
    c21: ArrayLike,
    c22: ArrayLike,
    s21: ArrayLike,
    s22: ArrayLike,
    mean_moment_of_inertia: ArrayLike,
    normalization_factor: ArrayLike,
    normalized: bool = True,
) -> Array:
    """Compute the inertia tensor from degree-two gravity coefficients.

    Args:
        c20: Cosine coefficient of degree 2, order 0.
        c21: Cosine coefficient of degree 2, order 1.
        c22: Cosine coefficient of degree 2, order 2.
        s21: Sine coefficient of degree 2, order 1.
        s22: Sine coefficient of degree 2, order 2.
        mean_moment_of_inertia: Dimensionless mean moment of inertia
            ``trace(I) / (3 M R^2)``.
        normalization_factor: Inertia normalization factor ``M R^2``
            [kg m^2].
        normalized: Whether the coefficients are fully normalized.

    Returns:
        Inertia tensor of shape ``(3, 3)`` [kg m^2].

    Examples:
        ```python
        I = inertia_tensor_from_degree_two_coefficients(
            -4.84e-4, 0.0, 2.4e-6, 0.0, -1.4e-6, 0.3307, 8.0e37
        )
        I.shape
        ```
    """
    _float = get_dtype()
    n20, n21, n22 = _unnormalization_factors(normalized)

    c20 = jnp.asarray(c20, dtype=_float) * n20
    c21 = jnp.asarray(c21, dtype=_float) * n21
    c22 = jnp.asarray(c22, dtype=_float) * n22
    s21 = jnp.asarray(s21, dtype=_float) * n21
    s22 = jnp.asarray(s22, dtype=_float) * n22
    mean_moment = jnp.asarray(mean_moment_of_inertia, dtype=_float)

    deviation = jnp.array([
        [c20 / 3.0 - 2.0 * c22, -2.0 * s22, -c21],
        [-2.0 * s22, c20 / 3.0 + 2.0 * c22, -s21],
        [-c21, -s21, -2.0 * c20 / 3.0],
    ], dtype=_float)

    scaled = mean_moment * jnp.eye(3, dtype=_float) + deviation
    return jnp.asarray(normalization_factor, dtype=_float) * scaled


@dataclass(frozen=True)
class DegreeTwoInertiaModel:
    """Inertia properties of a body expressed through its gravity field.

    Holds the gravitational parameter, reference radius, degree-two
    spherical harmonic coefficients and dimensionless mean moment of
    inertia, from which the inertia tensor follows.  Instances are the
    natural source of the ``inertia_tensor_function`` and
    ``inertia_normalization_function`` callables consumed by the torque
    partials.

    Args:
        gm: Gravitational parameter [m^3/s^2].
        reference_radius: Reference radius of the gravity field [m].
        c20: Cosine coefficient (2, 0).
        c21: Cosine coefficient (2, 1).
        c22: Cosine coefficient (2, 2).
        s21: Sine coefficient (2, 1).
        s22: Sine coefficient (2, 2).
        mean_moment_of_inertia: Dimensionless mean moment of inertia.
        normalized: Whether the coefficients are fully normalized.

    Examples:
        ```python
        from torquejax.constants import GM_EARTH, R_EARTH
        model = DegreeTwoInertiaModel(GM_EARTH, R_EARTH, c20=-4.84165e-4)
        model.inertia_tensor.shape
        ```
    """

    gm: float
    reference_radius: float
    c20: float = 0.0
    c21: float = 0.0
    c22: float = 0.0
    s21: float = 0.0
    s22: float = 0.0
    mean_moment_of_inertia: float = 0.4
    normalized: bool = True

    def __post_init__(self) -> None:
        if self.gm <= 0.0:
            raise ValueError(f"gm must be positive, got {self.gm}")
        if self.reference_radius <= 0.0:
            raise ValueError(
                f"reference_radius must be positive, got {self.reference_radius}"
            )

    @property
    def normalization_factor(self) -> float:
        """Inertia normalization factor ``M R^2`` [kg m^2]."""
        return inertia_normalization_factor(self.gm, self.reference_radius)

    @property
    def inertia_tensor(self) -> Array:
        """Inertia tensor of shape ``(3, 3)`` [kg m^2]."""
        return inertia_tensor_from_degree_two_coefficients(
            self.c20,
            self.c21,
            self.c22,
            self.s21,
            self.s22,
            self.mean_moment_of_inertia,
            self.normalization_factor,
            normalized=self.normalized,
        )

    @staticmethod
    def from_inertia_tensor(
        inertia_tensor: ArrayLike,
        gm: float,
        reference_radius: float,
        normalized: bool = True,
    ) -> DegreeTwoInertiaModel:
        """Recover the degree-two coefficients of a given inertia tensor.

        Args:
            inertia_tensor: Symmetric inertia tensor of shape ``(3, 3)``
                [kg m^2].
            gm: Gravitational parameter [m^3/s^2].
            reference_radius: Reference radius [m].
            normalized: Return fully normalized coefficients.

        Returns:
            DegreeTwoInertiaModel: Model reproducing *inertia_tensor*.

        Raises:
            ValueError: If the tensor is not a symmetric 3x3 matrix.
        """
        _float = get_dtype()
        I = jnp.asarray(inertia_tensor, dtype=_float)  # noqa: E741
        if I.shape != (3, 3):
            raise ValueError(f"Inertia tensor must have shape (3, 3), got {I.shape}")
        if not bool(jnp.allclose(I, I.T, rtol=1e-12, atol=0.0)):
            raise ValueError("Inertia tensor must be symmetric.")

        J = I / inertia_normalization_factor(gm, reference_radius)
        mean_moment = float(jnp.trace(J)) / 3.0

        n20, n21, n22 = _unnormalization_factors(normalized)
        return DegreeTwoInertiaModel(
            gm=gm,
            reference_radius=reference_radius,
            c20=1.5 * (mean_moment - float(J[2, 2])) / n20,
            c21=-float(J[0, 2]) / n21,
            c22=0.25 * float(J[1, 1] - J[0, 0]) / n22,
            s21=-float(J[1, 2]) / n21,
            s22=-0.5 * float(J[0, 1]) / n22,
            mean_moment_of_inertia=mean_moment,
            normalized=normalized,
        )

    @staticmethod
    def from_principal(
        Ixx: float,
        Iyy: float,
        Izz: float,
        gm: float,
        reference_radius: float,
        normalized: bool = True,
    ) -> DegreeTwoInertiaModel:
        """Create a model from principal moments of inertia.

        Args:
            Ixx: Moment of inertia about the body x-axis [kg m^2].
            Iyy: Moment of inertia about the body y-axis [kg m^2].
            Izz: Moment of inertia about the body z-axis [kg m^2].
            gm: Gravitational parameter [m^3/s^2].
            reference_radius: Reference radius [m].
            normalized: Return fully normalized coefficients.

        Returns:
            DegreeTwoInertiaModel: Model with a diagonal inertia tensor.
        """
        I = jnp.diag(jnp.array([Ixx, Iyy, Izz], dtype=get_dtype()))  # noqa: E741
        return DegreeTwoInertiaModel.from_inertia_tensor(
            I, gm, reference_radius, normalized=normalized
        )
