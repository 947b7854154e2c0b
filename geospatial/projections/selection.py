"""
Region-driven choice of a map projection.

Selection logic:

1. Regions poleward of the UTM limits: UPS of that hemisphere
2. Regions inside a single UTM zone: that UTM zone
3. Regions touching or crossing the equator: Mercator
4. Taller than wide: Transverse Mercator on the central longitude
5. Otherwise: Lambert Conformal Conic with parallels at 1/4 and 3/4
"""

from typing import Optional

import numpy as np

from common.errors import InvalidInputError
from common.logging_config import get_logger
from geospatial.angles import Longitude
from geospatial.ellipsoid import Ellipsoid
from geospatial.projections.base import MapProjection, ProjectionParameters
from geospatial.projections.lambert import LambertConformalConic2SP
from geospatial.projections.mercator import Mercator
from geospatial.projections.polar_stereographic import UPS
from geospatial.projections.transverse_mercator import TransverseMercator
from geospatial.projections.utm import (
    MAX_LATITUDE,
    MIN_LATITUDE,
    UTM,
    utm_latitude_band,
    utm_longitude_zone,
)

logger = get_logger(__name__)

# Latitudes beyond which UPS replaces UTM
UPS_NORTH_LIMIT = 84.0
UPS_SOUTH_LIMIT = -80.0


def select_projection(
    min_lat_deg: float,
    max_lat_deg: float,
    min_lon_deg: float,
    max_lon_deg: float,
    ellipsoid: Optional[Ellipsoid] = None
) -> MapProjection:
    """Select a conformal projection suited to a geographic extent.

    Parameters
    ----------
    min_lat_deg, max_lat_deg : float
        Latitude range in degrees.
    min_lon_deg, max_lon_deg : float
        Longitude range in degrees. ``max_lon_deg < min_lon_deg`` denotes
        a region crossing the antimeridian.
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid (default: process-wide default).

    Returns
    -------
    MapProjection
        UTM, UPS, Mercator, Transverse Mercator or Lambert Conformal Conic.

    Raises
    ------
    InvalidInputError
        If the latitude range is inverted or outside [-90, 90].

    Examples
    --------
    >>> select_projection(30.0, 32.0, 114.5, 116.5).name
    'Universal Transverse Mercator'
    """
    if not -90.0 <= min_lat_deg <= max_lat_deg <= 90.0:
        raise InvalidInputError(
            f"Invalid latitude range [{min_lat_deg}, {max_lat_deg}]"
        )

    lat_extent = max_lat_deg - min_lat_deg
    lon_extent = max_lon_deg - min_lon_deg
    if lon_extent < 0.0:
        lon_extent += 360.0
    center_lat = (min_lat_deg + max_lat_deg) / 2
    center_lon = Longitude(min_lon_deg + lon_extent / 2).degrees

    if min_lat_deg >= UPS_NORTH_LIMIT:
        logger.debug("Polar region (north): UPS")
        return UPS("N", ellipsoid)
    if max_lat_deg <= UPS_SOUTH_LIMIT:
        logger.debug("Polar region (south): UPS")
        return UPS("S", ellipsoid)

    if min_lat_deg >= MIN_LATITUDE and max_lat_deg <= MAX_LATITUDE and lon_extent <= 6.0:
        zones = {
            utm_longitude_zone(lon, utm_latitude_band(lat))
            for lat in (min_lat_deg, max_lat_deg)
            for lon in (min_lon_deg, max_lon_deg)
        }
        if len(zones) == 1 and (min_lat_deg >= 0.0 or max_lat_deg <= 0.0):
            zone = zones.pop()
            logger.debug(f"Region fits UTM zone {zone}")
            return UTM(zone, "N" if center_lat >= 0.0 else "S", ellipsoid)

    if min_lat_deg <= 0.0 <= max_lat_deg:
        logger.debug("Equatorial region: Mercator")
        return Mercator(
            ProjectionParameters(central_meridian=center_lon, standard_parallel_1=0.0),
            ellipsoid
        )

    if lat_extent > lon_extent * np.cos(np.radians(center_lat)):
        logger.debug("Tall region: Transverse Mercator")
        return TransverseMercator(
            ProjectionParameters(
                latitude_of_origin=0.0,
                central_meridian=center_lon,
                scale_factor=0.9996,
                false_easting=500_000.0,
            ),
            ellipsoid
        )

    logger.debug("Wide region: Lambert Conformal Conic")
    return LambertConformalConic2SP(
        ProjectionParameters(
            standard_parallel_1=min_lat_deg + lat_extent * 0.25,
            standard_parallel_2=max_lat_deg - lat_extent * 0.25,
            latitude_of_origin=center_lat,
            central_meridian=center_lon,
        ),
        ellipsoid
    )
