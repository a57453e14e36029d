"""Descriptors of estimated physical parameters.

A parameter descriptor identifies *what* is being estimated (its
:class:`ParameterKind`), *whose* property it is (the body name) and, for
vector parameters, which components it holds.  Descriptors carry no
values: torque partials only inspect them to decide whether, and in which
columns, a torque depends on the parameter.

- :class:`EstimatableParameter` -- scalar parameter (size 1).
- :class:`SphericalHarmonicsCoefficientBlock` -- vector parameter holding
  an ordered block of cosine or sine gravity field coefficients.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ParameterKind(enum.Enum):
    """Kind of an estimated parameter."""

    GRAVITATIONAL_PARAMETER = "gravitational_parameter"
    MEAN_MOMENT_OF_INERTIA = "mean_moment_of_inertia"
    SPHERICAL_HARMONICS_COSINE_BLOCK = "spherical_harmonics_cosine_block"
    SPHERICAL_HARMONICS_SINE_BLOCK = "spherical_harmonics_sine_block"
    CONSTANT_ROTATION_RATE = "constant_rotation_rate"
    ROTATION_POLE_POSITION = "rotation_pole_position"
    RADIATION_PRESSURE_COEFFICIENT = "radiation_pressure_coefficient"
    CONSTANT_DRAG_COEFFICIENT = "constant_drag_coefficient"


VECTOR_PARAMETER_KINDS = frozenset({
    ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK,
    ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK,
    ParameterKind.ROTATION_POLE_POSITION,
})

_HARMONIC_BLOCK_KINDS = frozenset({
    ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK,
    ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK,
})


@dataclass(frozen=True)
class EstimatableParameter:
    """Descriptor of an estimated parameter.

    Args:
        kind: Kind of the parameter.
        body: Name of the body the parameter belongs to.
        secondary_identifier: Optional further qualifier (e.g. a
            ground-station name), empty when unused.

    Raises:
        ValueError: If *kind* is a spherical harmonic coefficient block;
            those are described by :class:`SphericalHarmonicsCoefficientBlock`.

    Examples:
        ```python
        p = EstimatableParameter(ParameterKind.GRAVITATIONAL_PARAMETER, "Earth")
        p.is_vector, p.size
        ```
    """

    kind: ParameterKind
    body: str
    secondary_identifier: str = ""

    def __post_init__(self) -> None:
        if self.kind in _HARMONIC_BLOCK_KINDS:
            raise ValueError(
                f"{self.kind} requires block indices, use "
                f"SphericalHarmonicsCoefficientBlock"
            )

    @property
    def is_vector(self) -> bool:
        """Whether the parameter is vector-valued."""
        return self.kind in VECTOR_PARAMETER_KINDS

    @property
    def size(self) -> int:
        """Number of scalar components (Jacobian columns) of the parameter."""
        if self.kind == ParameterKind.ROTATION_POLE_POSITION:
            return 2
        return 1


@dataclass(frozen=True)
class SphericalHarmonicsCoefficientBlock(EstimatableParameter):
    """Block of cosine or sine spherical harmonic coefficients.

    Component ``i`` of the parameter is the coefficient of degree/order
    ``block_indices[i]``.

    Args:
        kind: ``SPHERICAL_HARMONICS_COSINE_BLOCK`` or
            ``SPHERICAL_HARMONICS_SINE_BLOCK``.
        body: Name of the body whose gravity field holds the coefficients.
        block_indices: Ordered ``(degree, order)`` pairs.

    Raises:
        ValueError: If the kind is not a harmonic block, the block is empty,
            contains duplicates or invalid ``(degree, order)`` pairs, or a
            sine block contains an order-zero term.
    """

    block_indices: tuple[tuple[int, int], ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in _HARMONIC_BLOCK_KINDS:
            raise ValueError(
                f"kind must be a spherical harmonic coefficient block, got {self.kind}"
            )
        indices = tuple((int(n), int(m)) for n, m in self.block_indices)
        if not indices:
            raise ValueError("block_indices must contain at least one (degree, order)")
        if len(set(indices)) != len(indices):
            raise ValueError(f"block_indices contains duplicates: {indices}")
        for n, m in indices:
            if m < 0 or m > n:
                raise ValueError(f"Invalid (degree, order) pair ({n}, {m})")
            if m == 0 and self.kind == ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK:
                raise ValueError(f"Sine coefficient block cannot contain order 0: ({n}, {m})")
        object.__setattr__(self, "block_indices", indices)

    @property
    def size(self) -> int:
        return len(self.block_indices)

    def index_of(self, degree: int, order: int) -> int | None:
        """Return the component index of coefficient (*degree*, *order*).

        Args:
            degree: Degree of the coefficient.
            order: Order of the coefficient.

        Returns:
            Component index, or ``None`` if the block does not hold it.
        """
        try:
            return self.block_indices.index((degree, order))
        except ValueError:
            return None


def gravitational_parameter(body: str) -> EstimatableParameter:
    """Descriptor of the gravitational parameter of *body*."""
    return EstimatableParameter(ParameterKind.GRAVITATIONAL_PARAMETER, body)


def mean_moment_of_inertia(body: str) -> EstimatableParameter:
    """Descriptor of the dimensionless mean moment of inertia of *body*."""
    return EstimatableParameter(ParameterKind.MEAN_MOMENT_OF_INERTIA, body)


def spherical_harmonic_block_indices(
    min_degree: int,
    max_degree: int,
    min_order: int,
    max_order: int,
) -> tuple[tuple[int, int], ...]:
    """List all ``(degree, order)`` pairs of a rectangular coefficient block.

    Degrees run from *min_degree* to *max_degree*; for each degree ``n``
    the orders run from *min_order* to ``min(n, max_order)``.

    Args:
        min_degree: Minimum degree (inclusive).
        max_degree: Maximum degree (inclusive).
        min_order: Minimum order (inclusive).
        max_order: Maximum order (inclusive).

    Returns:
        Ordered ``(degree, order)`` pairs.

    Examples:
        ```python
        spherical_harmonic_block_indices(2, 2, 0, 2)
        # ((2, 0), (2, 1), (2, 2))
        ```
    """
    return tuple(
        (n, m)
        for n in range(min_degree, max_degree + 1)
        for m in range(min_order, min(n, max_order) + 1)
    )


def spherical_harmonics_cosine_block(
    body: str,
    block_indices: tuple[tuple[int, int], ...],
) -> SphericalHarmonicsCoefficientBlock:
    """Descriptor of a block of cosine coefficients of *body*."""
    return SphericalHarmonicsCoefficientBlock(
        ParameterKind.SPHERICAL_HARMONICS_COSINE_BLOCK,
        body,
        block_indices=tuple(block_indices),
    )


def spherical_harmonics_sine_block(
    body: str,
    block_indices: tuple[tuple[int, int], ...],
) -> SphericalHarmonicsCoefficientBlock:
    """Descriptor of a block of sine coefficients of *body*."""
    return SphericalHarmonicsCoefficientBlock(
        ParameterKind.SPHERICAL_HARMONICS_SINE_BLOCK,
        body,
        block_indices=tuple(block_indices),
    )
