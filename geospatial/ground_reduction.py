"""
Reduction of Ground Observations to the Ellipsoid.

Directions and distances measured on the ground refer to the local plumb
line and to the instrument height. Before they can enter computations on the
ellipsoid they are corrected for the deflection of the vertical, the height
of the target, the difference between normal section and geodesic, and the
height of the line above the ellipsoid.

Deflection components ξ (north-south) and η (east-west) are given in
arcseconds. Angle arguments accept :class:`Angle` values or decimal degrees.

References
----------
- Kong, X. (2005). Foundation of Geodesy (2nd ed.), sec. 5.4-5.6.
"""

import math

from common.constants import SECOND_TO_RADIAN
from common.errors import InvalidInputError
from geospatial.angles import Angle
from geospatial.ellipsoid import Ellipsoid
from geospatial.projections.base import AngleLike


# Empirical coefficient of the curvature-of-line term in distance reduction
LINE_CURVATURE_COEFFICIENT = 1.25e-16


def _radians(value: AngleLike) -> float:
    return value.radians if isinstance(value, Angle) else math.radians(value)


def _angle(value: AngleLike) -> Angle:
    return value if isinstance(value, Angle) else Angle(value)


def vertical_deflection_correction(
    xi: float,
    eta: float,
    azimuth: AngleLike,
    vertical_angle: AngleLike
) -> Angle:
    """Direction correction for the deflection of the vertical.

    δ1 = -(ξ sinA - η cosA)·tan(α)

    Parameters
    ----------
    xi, eta : float
        Deflection components in arcseconds.
    azimuth : Angle or float
        Azimuth of the observed direction.
    vertical_angle : Angle or float
        Vertical angle of the line of sight.
    """
    A = _radians(azimuth)
    delta = -(xi * math.sin(A) - eta * math.cos(A)) * SECOND_TO_RADIAN * math.tan(_radians(vertical_angle))
    return Angle.from_radians(delta)


def elevation_difference_correction(
    ellipsoid: Ellipsoid,
    lat2: AngleLike,
    azimuth: AngleLike,
    h2: float
) -> Angle:
    """Direction correction for the height of the target point.

    δ2 = e²·H2·cos²B2·sin2A / (2M2)
    """
    B2 = _radians(lat2)
    M = float(ellipsoid.meridian_radius(B2))
    delta = ellipsoid.e2 * h2 * math.cos(B2) ** 2 * math.sin(2 * _radians(azimuth)) / (2 * M)
    return Angle.from_radians(delta)


def normal_section_to_geodesic(
    ellipsoid: Ellipsoid,
    lat1: AngleLike,
    azimuth: AngleLike,
    distance: float
) -> Angle:
    """Direction correction from the normal section to the geodesic.

    δ3 = -e²·S²·cos²B1·sin2A / (12N1²)
    """
    B1 = _radians(lat1)
    N = float(ellipsoid.prime_vertical_radius(B1))
    delta = -ellipsoid.e2 * distance ** 2 * math.cos(B1) ** 2 * math.sin(2 * _radians(azimuth)) / (12 * N * N)
    return Angle.from_radians(delta)


def zenith_to_surface(
    zenith: AngleLike,
    xi: float,
    eta: float,
    azimuth: AngleLike
) -> Angle:
    """Reduce an observed zenith distance to the ellipsoid normal.

    Z = z + ξ cosA + η sinA
    """
    A = _radians(azimuth)
    correction = (xi * math.cos(A) + eta * math.sin(A)) * SECOND_TO_RADIAN
    return _angle(zenith) + Angle.from_radians(correction)


def distance_to_surface(
    ellipsoid: Ellipsoid,
    lat: AngleLike,
    azimuth: AngleLike,
    slope_distance: float,
    h1: float,
    h2: float
) -> float:
    """Reduce a measured slope distance to the ellipsoid surface.

    Parameters
    ----------
    ellipsoid : Ellipsoid
    lat : Angle or float
        Latitude of the line's start.
    azimuth : Angle or float
        Azimuth of the line.
    slope_distance : float
        Measured distance d in meters.
    h1, h2 : float
        Ellipsoidal heights of both ends in meters.

    Returns
    -------
    float
        Length on the ellipsoid in meters.

    Raises
    ------
    InvalidInputError
        If the height difference exceeds the slope distance.

    Notes
    -----
    S = D·Ra/(Ra + Hm) + d³/(24Ra²) + 1.25e-16·Hm·d²·sin2B·cosA

    with D = √(d² - Δh²), Hm the mean height and Ra the radius of curvature
    of the normal section along the line.
    """
    dh = h2 - h1
    if abs(dh) > slope_distance:
        raise InvalidInputError(
            f"Height difference {dh} m exceeds slope distance {slope_distance} m"
        )
    B = _radians(lat)
    A = _radians(azimuth)
    D = math.sqrt(slope_distance ** 2 - dh ** 2)
    Hm = (h1 + h2) / 2
    Ra = float(ellipsoid.curvature_radius(B, A))

    return (
        D * Ra / (Ra + Hm)
        + slope_distance ** 3 / (24 * Ra * Ra)
        + LINE_CURVATURE_COEFFICIENT * Hm * slope_distance ** 2 * math.sin(2 * B) * math.cos(A)
    )


def azimuth_from_astronomic(
    astro_azimuth: AngleLike,
    astro_lat: AngleLike,
    astro_lon: AngleLike,
    geo_lon: AngleLike
) -> Angle:
    """Laplace equation: geodetic azimuth from an astronomic one.

    A = α - (λ - L)·sinφ
    """
    dlon = _radians(astro_lon) - _radians(geo_lon)
    return _angle(astro_azimuth) - Angle.from_radians(dlon * math.sin(_radians(astro_lat)))


def azimuth_from_deflection(
    astro_azimuth: AngleLike,
    eta: float,
    lat: AngleLike
) -> Angle:
    """Laplace equation with the east-west deflection η (arcseconds).

    A = α - η·tanφ
    """
    correction = eta * SECOND_TO_RADIAN * math.tan(_radians(lat))
    return _angle(astro_azimuth) - Angle.from_radians(correction)
