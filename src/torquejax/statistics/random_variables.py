"""Random variable generation by inverse transform sampling.

A :class:`ContinuousRandomVariableGenerator` draws uniform samples on
``(0, 1)`` from a JAX PRNG key and maps them through the inverse
cumulative distribution function of the target distribution.  The key is
split on every draw, so a generator seeded identically always produces
the same sequence.
"""

from __future__ import annotations

import abc
from collections.abc import Callable

import jax
import jax.numpy as jnp
from jax import Array
from jax.scipy.stats import norm

from torquejax.config import get_dtype


class RandomVariableGenerator(abc.ABC):
    """Base class of seeded random variable generators.

    Args:
        seed: Seed of the underlying PRNG key.
    """

    def __init__(self, seed: int = 0):
        self._key = jax.random.PRNGKey(seed)

    def _uniform(self, shape: tuple[int, ...]) -> Array:
        """Draw uniform samples on the open interval ``(0, 1)``."""
        _float = get_dtype()
        self._key, subkey = jax.random.split(self._key)
        return jax.random.uniform(
            subkey, shape, dtype=_float, minval=jnp.finfo(_float).tiny, maxval=1.0
        )

    @abc.abstractmethod
    def get_random_variable_value(self) -> float:
        """Draw a single value from the distribution."""


class ContinuousRandomVariableGenerator(RandomVariableGenerator):
    """Generator of a continuous random variable from its inverse CDF.

    Args:
        inverse_cdf: Inverse cumulative distribution function, mapping
            probabilities in ``(0, 1)`` to values.  Must accept arrays.
        seed: Seed of the underlying PRNG key.

    Examples:
        ```python
        from jax.scipy.stats import norm
        generator = ContinuousRandomVariableGenerator(norm.ppf, seed=42)
        generator.get_random_variable_value()
        ```
    """

    def __init__(self, inverse_cdf: Callable[[Array], Array], seed: int = 0):
        super().__init__(seed)
        self._inverse_cdf = inverse_cdf

    def get_random_variable_value(self) -> float:
        return float(self._inverse_cdf(self._uniform(())))

    def get_random_variable_values(self, n: int) -> Array:
        """Draw *n* independent values from the distribution.

        Args:
            n: Number of samples.

        Returns:
            Samples of shape ``(n,)``.
        """
        return self._inverse_cdf(self._uniform((n,)))


def create_normal_random_variable_generator(
    mean: float = 0.0,
    standard_deviation: float = 1.0,
    seed: int = 0,
) -> ContinuousRandomVariableGenerator:
    """Create a generator of normally distributed values.

    Args:
        mean: Mean of the distribution.
        standard_deviation: Standard deviation of the distribution.
        seed: Seed of the underlying PRNG key.

    Returns:
        ContinuousRandomVariableGenerator: Normal generator.

    Raises:
        ValueError: If *standard_deviation* is not positive.
    """
    if standard_deviation <= 0.0:
        raise ValueError(
            f"standard_deviation must be positive, got {standard_deviation}"
        )
    return ContinuousRandomVariableGenerator(
        lambda p: mean + standard_deviation * norm.ppf(p), seed=seed
    )


def create_uniform_random_variable_generator(
    lower: float = 0.0,
    upper: float = 1.0,
    seed: int = 0,
) -> ContinuousRandomVariableGenerator:
    """Create a generator of uniformly distributed values on ``(lower, upper)``.

    Args:
        lower: Lower bound.
        upper: Upper bound.
        seed: Seed of the underlying PRNG key.

    Returns:
        ContinuousRandomVariableGenerator: Uniform generator.

    Raises:
        ValueError: If *upper* is not greater than *lower*.
    """
    if upper <= lower:
        raise ValueError(f"upper must exceed lower, got lower={lower}, upper={upper}")
    return ContinuousRandomVariableGenerator(
        lambda p: lower + (upper - lower) * p, seed=seed
    )


def create_random_variable_generator_function(
    inverse_cdf: Callable[[Array], Array],
    seed: int = 0,
) -> Callable[[], float]:
    """Create a zero-argument function drawing from a continuous distribution.

    Suited to upstream providers that must take no arguments, such as
    a perturbed coefficient fed into an inertia model per Monte Carlo run.

    Args:
        inverse_cdf: Inverse cumulative distribution function of the
            distribution.
        seed: Seed of the underlying PRNG key.

    Returns:
        Callable returning a new draw on every call.

    Examples:
        ```python
        from jax.scipy.stats import norm
        draw = create_random_variable_generator_function(norm.ppf, seed=1)
        draw(), draw()
        ```
    """
    return ContinuousRandomVariableGenerator(inverse_cdf, seed=seed).get_random_variable_value
