"""
The `constants` module defines the mathematical and physical constants used by the gravity field and partial derivative models.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

# Time Constants

"""
Length of a sidereal day. Units: *s*

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, 2010
"""
SIDEREAL_DAY = 86164.0905  # [s]

# Earth Constants
"""
Earth's equatorial reference radius of the EGM96/EGM2008 family of gravity
field models. [m]

References:

1. N. Pavlis et al., *The development and evaluation of the Earth
   Gravitational Model 2008 (EGM2008)*, 2012.
"""
R_EARTH = 6378137.0  # [m]

"""
Earth's Gravitational constant [m^3/s^2]

References:

1. N. Pavlis et al., *The development and evaluation of the Earth
   Gravitational Model 2008 (EGM2008)*, 2012.
"""
GM_EARTH = 3.986004418e14  # [m^3/s^2]

"""
Earth axial rotation rate. [rad/s]

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, p. 222, 2010
"""
OMEGA_EARTH = 7.292115146706979e-5  # [rad/s] Taken from Vallado 4th Ed page 222

# Sun Constants
"""
Gravitational constant of the Sun. [m^3/s^2]

References:

1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
Applications*, 2012.
"""
GM_SUN = 132712440041.939400 * 1e9  # Gravitational constant of the Sun

# Celestial Constants - from JPL DE430 Ephemerides
"""
Gravitational constant of the Moon. [m^3/s^2]

References:

1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
Applications*, 2012.
"""
GM_MOON = 4902.800066 * 1e9

# Tidal Constants
"""
Nominal degree-2 elastic Love number of the Earth, used for all orders of
the anelastic-free solid-body tide model. [dimensionless]

References:

1. G. Petit and B. Luzum, *IERS Conventions (2010)*, IERS Technical Note 36,
   Table 6.3.
"""
K2_EARTH = 0.30190

"""
Nominal degree-3 Love number of the Earth. [dimensionless]

References:

1. G. Petit and B. Luzum, *IERS Conventions (2010)*, IERS Technical Note 36,
   Table 6.3.
"""
K3_EARTH = 0.093
