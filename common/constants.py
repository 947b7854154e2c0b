"""
Geodetic Constants and Numerical Tolerances.

This module provides the defining constants of the reference ellipsoids
with their uncertainty bounds and sources, plus the tolerances shared by
the iterative algorithms of the library.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- GRS80: Moritz, H. (2000). Geodetic Reference System 1980. J. Geodesy 74.
- CGCS2000: China Geodetic Coordinate System 2000 (GB/T 33415-2016)
- PZ-90.11: Parametry Zemli 1990, Reference Document (2014)
"""

from dataclasses import dataclass
from typing import Final
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A physical constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The SI unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


# =========================================================================
# Angle conversion factors
# =========================================================================

DEGREE_TO_RADIAN: Final[float] = np.pi / 180.0
RADIAN_TO_DEGREE: Final[float] = 180.0 / np.pi
SECOND_TO_RADIAN: Final[float] = np.pi / 180.0 / 3600.0
RADIAN_TO_SECOND: Final[float] = 180.0 * 3600.0 / np.pi

# =========================================================================
# Tolerances
# =========================================================================

# EPSILON_k = 10^-(k+1) arcsecond, expressed in radians
EPSILON3: Final[float] = 1e-4 * SECOND_TO_RADIAN
EPSILON4: Final[float] = 1e-5 * SECOND_TO_RADIAN
EPSILON5: Final[float] = 1e-6 * SECOND_TO_RADIAN

# Angle equality threshold, in degrees
ANGLE_EPSILON: Final[float] = 1e-12

# Seconds within this distance of 60 are carried into the next minute
DMS_CARRY_EPSILON: Final[float] = 1e-6

# Upper bound for fixed-point iterations that have no documented cap
MAX_ITERATIONS: Final[int] = 100


class GeodeticConstants:
    """Registry of the defining constants of the reference ellipsoids.

    Each ellipsoid is defined by four constants: the semi-major axis a,
    either the inverse flattening 1/f or the dynamic form factor J2, the
    angular velocity ω and the geocentric gravitational constant GM.
    Derived values (b, e², normal gravity) are computed from these by
    :mod:`geospatial.ellipsoid`.
    """

    # =========================================================================
    # WGS84 Ellipsoid Parameters
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    WGS84_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    WGS84_INVERSE_FLATTENING: Final[Constant] = Constant(
        value=298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Inverse flattening 1/f of WGS84 ellipsoid"
    )

    WGS84_ANGULAR_VELOCITY: Final[Constant] = Constant(
        value=7.292115e-5,
        uncertainty=0.0,
        unit="rad/s",
        source="WGS84, NIMA TR8350.2",
        description="Nominal mean angular velocity of the Earth"
    )

    WGS84_GM: Final[Constant] = Constant(
        value=3.986004418e14,
        uncertainty=8e5,
        unit="m³/s²",
        source="WGS84, NIMA TR8350.2",
        description="Geocentric gravitational constant (with atmosphere)"
    )

    # =========================================================================
    # GRS80 (defined through J2 rather than flattening)
    # =========================================================================

    GRS80_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,
        unit="m",
        source="Moritz (2000), GRS80",
        description="Semi-major axis of GRS80 ellipsoid"
    )

    GRS80_J2: Final[Constant] = Constant(
        value=1.08263e-3,
        uncertainty=0.0,
        unit="dimensionless",
        source="Moritz (2000), GRS80",
        description="Dynamic form factor J2 of GRS80"
    )

    GRS80_ANGULAR_VELOCITY: Final[Constant] = Constant(
        value=7.292115e-5,
        uncertainty=0.0,
        unit="rad/s",
        source="Moritz (2000), GRS80",
        description="Angular velocity of GRS80"
    )

    GRS80_GM: Final[Constant] = Constant(
        value=3.986005e14,
        uncertainty=0.0,
        unit="m³/s²",
        source="Moritz (2000), GRS80",
        description="Geocentric gravitational constant of GRS80"
    )

    # =========================================================================
    # CGCS2000
    # =========================================================================

    CGCS2000_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,
        unit="m",
        source="GB/T 33415-2016",
        description="Semi-major axis of CGCS2000 ellipsoid"
    )

    CGCS2000_INVERSE_FLATTENING: Final[Constant] = Constant(
        value=298.257222101,
        uncertainty=0.0,
        unit="dimensionless",
        source="GB/T 33415-2016",
        description="Inverse flattening of CGCS2000 ellipsoid"
    )

    # =========================================================================
    # WGS72 and PZ-90
    # =========================================================================

    WGS72_ANGULAR_VELOCITY: Final[Constant] = Constant(
        value=7.292115147e-5,
        uncertainty=0.0,
        unit="rad/s",
        source="DMA TR 8350.2 (WGS72)",
        description="Angular velocity of WGS72"
    )

    WGS72_GM: Final[Constant] = Constant(
        value=3.986005e14,
        uncertainty=0.0,
        unit="m³/s²",
        source="DMA TR 8350.2 (WGS72)",
        description="Geocentric gravitational constant of WGS72"
    )

    PZ90_GM: Final[Constant] = Constant(
        value=3.986004418e14,
        uncertainty=0.0,
        unit="m³/s²",
        source="PZ-90.11 Reference Document",
        description="Geocentric gravitational constant of PZ-90"
    )

    # =========================================================================
    # Gravity
    # =========================================================================

    FREE_AIR_GRADIENT: Final[Constant] = Constant(
        value=0.3083e-5,
        uncertainty=1e-9,
        unit="1/s²",
        source="Heiskanen & Moritz (1967), Physical Geodesy",
        description="Decrease of normal gravity per meter of height (0.3083 mGal/m)"
    )
