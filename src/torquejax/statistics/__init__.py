"""Random variable generation for Monte Carlo analyses.

- :class:`ContinuousRandomVariableGenerator` -- inverse-CDF sampling
- Presets for normal and uniform distributions
- :func:`create_random_variable_generator_function` -- zero-argument draw function
"""

from torquejax.statistics.random_variables import (
    ContinuousRandomVariableGenerator,
    RandomVariableGenerator,
    create_normal_random_variable_generator,
    create_random_variable_generator_function,
    create_uniform_random_variable_generator,
)

__all__ = [
    "RandomVariableGenerator",
    "ContinuousRandomVariableGenerator",
    "create_normal_random_variable_generator",
    "create_random_variable_generator_function",
    "create_uniform_random_variable_generator",
]
