"""
Coordinate Conversions on the Reference Ellipsoid.

This module converts between the geodetic (latitude, longitude, height),
geocentric space-rectangular (X, Y, Z) and local topocentric
(East, North, Up) representations of a point.

The low-level functions work on floats in radians and meters and accept
numpy arrays where noted; the ``to_*`` helpers wrap them for the
coordinate value types of :mod:`geospatial.coordinates`.

Scientific Context
------------------
Domain: Geodesy, Earth geometry
Model: Oblate ellipsoid of revolution

References
----------
- Torge, W. (2001). Geodesy (3rd ed.). de Gruyter.
- Hofmann-Wellenhof, B. et al. (2008). GNSS: GPS, GLONASS, Galileo.
- Bowring, B.R. (1976). Transformation from spatial to geographical
  coordinates. Survey Review, 23(181), 323-327.
"""

from typing import Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from common.errors import ConvergenceError
from common.logging_config import get_logger
from geospatial.angles import Latitude, Longitude
from geospatial.coordinates import (
    GeodeticCoord,
    GeographicCoord,
    SpaceRectangularCoord,
    TopocentricRectCoord,
)
from geospatial.ellipsoid import Ellipsoid
from geospatial.settings import default_ellipsoid

logger = get_logger(__name__)


def geodetic_to_ecef(
    latitude_rad: float,
    longitude_rad: float,
    altitude_m: float = 0.0,
    ellipsoid: Optional[Ellipsoid] = None
) -> Tuple[float, float, float]:
    """Convert geodetic coordinates to Earth-Centered Earth-Fixed (ECEF).

    Parameters
    ----------
    latitude_rad : float
        Geodetic latitude in radians.
    longitude_rad : float
        Geodetic longitude in radians.
    altitude_m : float
        Height above ellipsoid in meters.
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid (default: process-wide default).

    Returns
    -------
    Tuple[float, float, float]
        (X, Y, Z) coordinates in meters in ECEF frame.

    Notes
    -----
    The ECEF frame has:
    - Origin at the ellipsoid center
    - X-axis through the prime meridian (0° longitude) at equator
    - Y-axis through 90°E at equator
    - Z-axis through the North Pole
    """
    ellipsoid = ellipsoid or default_ellipsoid()

    sin_lat = np.sin(latitude_rad)
    cos_lat = np.cos(latitude_rad)
    sin_lon = np.sin(longitude_rad)
    cos_lon = np.cos(longitude_rad)

    N = ellipsoid.prime_vertical_radius(latitude_rad)

    X = (N + altitude_m) * cos_lat * cos_lon
    Y = (N + altitude_m) * cos_lat * sin_lon
    Z = (N * (1 - ellipsoid.e2) + altitude_m) * sin_lat

    return float(X), float(Y), float(Z)


def ecef_to_geodetic(
    X: float,
    Y: float,
    Z: float,
    ellipsoid: Optional[Ellipsoid] = None,
    max_iterations: int = 20,
    tolerance: float = 1e-12
) -> Tuple[float, float, float]:
    """Convert ECEF coordinates to geodetic (latitude, longitude, altitude).

    Uses Bowring's iterative method for numerical stability.

    Parameters
    ----------
    X, Y, Z : float
        ECEF coordinates in meters.
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid (default: process-wide default).
    max_iterations : int
        Maximum iterations for convergence.
    tolerance : float
        Convergence tolerance in radians.

    Returns
    -------
    Tuple[float, float, float]
        (latitude_rad, longitude_rad, altitude_m)

    Raises
    ------
    ConvergenceError
        If the latitude has not settled after `max_iterations`.

    Notes
    -----
    Bowring's method typically converges in 2-3 iterations for
    points on or near Earth's surface.
    """
    ellipsoid = ellipsoid or default_ellipsoid()

    # Longitude is straightforward
    longitude_rad = float(np.arctan2(Y, X))

    # Distance from Z-axis
    p = np.sqrt(X**2 + Y**2)

    # Handle polar singularity
    if p < 1e-10:
        latitude_rad = float(np.sign(Z) * np.pi / 2) if Z != 0 else 0.0
        altitude_m = float(np.abs(Z) - ellipsoid.b)
        return latitude_rad, longitude_rad, altitude_m

    latitude_rad = np.arctan2(Z, p * (1 - ellipsoid.e2))

    for _ in range(max_iterations):
        sin_lat = np.sin(latitude_rad)
        N = ellipsoid.prime_vertical_radius(latitude_rad)

        latitude_new = np.arctan2(Z + ellipsoid.e2 * N * sin_lat, p)

        if np.abs(latitude_new - latitude_rad) < tolerance:
            latitude_rad = latitude_new
            break

        latitude_rad = latitude_new
    else:
        logger.error(f"ECEF to geodetic did not converge for ({X}, {Y}, {Z})")
        raise ConvergenceError(
            f"ECEF to geodetic conversion did not converge in {max_iterations} iterations",
            iterations=max_iterations,
            context={"X": X, "Y": Y, "Z": Z}
        )

    sin_lat = np.sin(latitude_rad)
    cos_lat = np.cos(latitude_rad)
    N = ellipsoid.prime_vertical_radius(latitude_rad)

    if np.abs(cos_lat) > 1e-10:
        altitude_m = p / cos_lat - N
    else:
        altitude_m = np.abs(Z) / np.abs(sin_lat) - N * (1 - ellipsoid.e2)

    return float(latitude_rad), longitude_rad, float(altitude_m)


def _enu_rotation(origin_lat_rad: float, origin_lon_rad: float) -> NDArray[np.float64]:
    """Rotation matrix taking ECEF difference vectors to (E, N, U)."""
    sin_lat = np.sin(origin_lat_rad)
    cos_lat = np.cos(origin_lat_rad)
    sin_lon = np.sin(origin_lon_rad)
    cos_lon = np.cos(origin_lon_rad)

    return np.array([
        [-sin_lon, cos_lon, 0.0],
        [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
        [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat],
    ])


def geodetic_to_enu(
    target_lat_rad: float,
    target_lon_rad: float,
    target_alt_m: float,
    origin_lat_rad: float,
    origin_lon_rad: float,
    origin_alt_m: float = 0.0,
    ellipsoid: Optional[Ellipsoid] = None
) -> Tuple[float, float, float]:
    """Convert geodetic coordinates to the local East-North-Up frame of an origin.

    Parameters
    ----------
    target_lat_rad, target_lon_rad, target_alt_m : float
        Target point in geodetic coordinates.
    origin_lat_rad, origin_lon_rad, origin_alt_m : float
        Origin point of the ENU frame.
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid.

    Returns
    -------
    Tuple[float, float, float]
        (East, North, Up) coordinates in meters relative to origin.
    """
    target = geodetic_to_ecef(target_lat_rad, target_lon_rad, target_alt_m, ellipsoid)
    origin = geodetic_to_ecef(origin_lat_rad, origin_lon_rad, origin_alt_m, ellipsoid)

    delta = np.subtract(target, origin)
    east, north, up = _enu_rotation(origin_lat_rad, origin_lon_rad) @ delta
    return float(east), float(north), float(up)


def enu_to_geodetic(
    east_m: float,
    north_m: float,
    up_m: float,
    origin_lat_rad: float,
    origin_lon_rad: float,
    origin_alt_m: float = 0.0,
    ellipsoid: Optional[Ellipsoid] = None
) -> Tuple[float, float, float]:
    """Convert local ENU coordinates back to geodetic.

    Returns
    -------
    Tuple[float, float, float]
        (latitude_rad, longitude_rad, altitude_m)
    """
    origin = geodetic_to_ecef(origin_lat_rad, origin_lon_rad, origin_alt_m, ellipsoid)

    # The rotation is orthogonal, its transpose is the inverse
    delta = _enu_rotation(origin_lat_rad, origin_lon_rad).T @ np.array([east_m, north_m, up_m])
    X, Y, Z = np.add(origin, delta)

    return ecef_to_geodetic(X, Y, Z, ellipsoid)


def geodetic_to_ecef_batch(
    latitudes_rad: NDArray[np.float64],
    longitudes_rad: NDArray[np.float64],
    altitudes_m: NDArray[np.float64],
    ellipsoid: Optional[Ellipsoid] = None
) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Vectorized geodetic to ECEF conversion.

    Parameters
    ----------
    latitudes_rad : ndarray
        Array of latitudes in radians.
    longitudes_rad : ndarray
        Array of longitudes in radians.
    altitudes_m : ndarray
        Array of altitudes in meters.
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid.

    Returns
    -------
    Tuple[ndarray, ndarray, ndarray]
        (X, Y, Z) arrays in meters.
    """
    ellipsoid = ellipsoid or default_ellipsoid()

    latitudes_rad = np.asarray(latitudes_rad, dtype=np.float64)
    longitudes_rad = np.asarray(longitudes_rad, dtype=np.float64)
    altitudes_m = np.asarray(altitudes_m, dtype=np.float64)

    sin_lat = np.sin(latitudes_rad)
    cos_lat = np.cos(latitudes_rad)
    sin_lon = np.sin(longitudes_rad)
    cos_lon = np.cos(longitudes_rad)

    N = ellipsoid.prime_vertical_radius(latitudes_rad)

    X = (N + altitudes_m) * cos_lat * cos_lon
    Y = (N + altitudes_m) * cos_lat * sin_lon
    Z = (N * (1 - ellipsoid.e2) + altitudes_m) * sin_lat

    return X, Y, Z


# =========================================================================
# Coordinate value type wrappers
# =========================================================================

def to_space_rectangular(
    coord: Union[GeodeticCoord, GeographicCoord],
    ellipsoid: Optional[Ellipsoid] = None
) -> SpaceRectangularCoord:
    """Geocentric (X, Y, Z) of a geodetic or geographic coordinate, in meters."""
    height = getattr(coord, "height", 0.0)
    X, Y, Z = geodetic_to_ecef(coord.latitude.radians, coord.longitude.radians, height, ellipsoid)
    return SpaceRectangularCoord(X, Y, Z, unit="meter")


def to_geodetic(
    coord: SpaceRectangularCoord,
    ellipsoid: Optional[Ellipsoid] = None
) -> GeodeticCoord:
    """Geodetic coordinate of a geocentric (X, Y, Z) point."""
    X, Y, Z = coord.in_unit("meter")
    lat, lon, h = ecef_to_geodetic(X, Y, Z, ellipsoid)
    return GeodeticCoord(Latitude.from_radians(lat), Longitude.from_radians(lon), h)


def to_topocentric(
    target: SpaceRectangularCoord,
    origin: GeodeticCoord,
    ellipsoid: Optional[Ellipsoid] = None
) -> TopocentricRectCoord:
    """Express a geocentric point in the ENU frame of `origin`."""
    origin_xyz = to_space_rectangular(origin, ellipsoid)
    delta = np.subtract(target.in_unit("meter"), origin_xyz.values)
    east, north, up = _enu_rotation(origin.latitude.radians, origin.longitude.radians) @ delta
    return TopocentricRectCoord(float(east), float(north), float(up), unit="meter")


def from_topocentric(
    local: TopocentricRectCoord,
    origin: GeodeticCoord,
    ellipsoid: Optional[Ellipsoid] = None
) -> SpaceRectangularCoord:
    """Geocentric coordinate of an ENU vector taken at `origin`."""
    origin_xyz = to_space_rectangular(origin, ellipsoid)
    rotation = _enu_rotation(origin.latitude.radians, origin.longitude.radians)
    delta = rotation.T @ np.array(local.in_unit("meter"))
    X, Y, Z = np.add(origin_xyz.values, delta)
    return SpaceRectangularCoord(float(X), float(Y), float(Z), unit="meter")
