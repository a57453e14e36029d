"""
The `constants` module defines the physical constants used by the torque models and their partials.
"""

# Physical Constants
"""
Newtonian constant of gravitation. Units: *m^3/(kg s^2)*

References:

1. CODATA 2018 recommended values of the fundamental physical constants.
"""
GRAVITATIONAL_CONSTANT = 6.67430e-11  # [m^3/(kg s^2)] CODATA 2018

# Earth Constants
"""
Earth's equatorial radius. [m]

References:

1. GGM05s Gravity Model
"""
R_EARTH = 6.378136300e6  # [m] GGM05s Value

"""
Earth's Gravitational constant [m^3/s^2]

References:

1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
Applications*, 2012.
"""
GM_EARTH = 3.986004415e14  # [m^3/s^2] GGM05s Value

"""
Earth's dimensionless mean moment of inertia, I / (M R^2). [dimensionless]

References:

1. F. Chambat, Y. Ricard and B. Valette, *Flattening of the Earth: further
from hydrostaticity than previously estimated*, Geophys. J. Int., 2010.
"""
MEAN_MOMENT_OF_INERTIA_EARTH = 0.3307  # []

# Moon Constants
"""
Gravitational constant of the Moon. [m^3/s^2]

References:

1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
Applications*, 2012.
"""
GM_MOON = 4.9028e12  # [m^3/s^2]

"""
Moon's reference radius of the GRAIL gravity field models. [m]

References:

1. GRGM1200A lunar gravity field model.
"""
R_MOON = 1.7380e6  # [m]

"""
Moon's dimensionless mean moment of inertia, I / (M R^2). [dimensionless]

References:

1. J. G. Williams et al., *Lunar interior properties from the GRAIL
mission*, J. Geophys. Res. Planets, 2014.
"""
MEAN_MOMENT_OF_INERTIA_MOON = 0.3929  # []
