"""
Transverse Mercator Projection.

Conformal cylindrical projection tangent (or secant, via the scale factor)
along a central meridian. The forward and reverse transforms use the
8th-order series in the longitude offset (forward) and in the easting
(reverse), which stays below the millimeter level within 9° of the
central meridian.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 60-64.
- DMA Technical Manual 8358.2 (1989). The Universal Grids.
"""

import math
from typing import Optional, Tuple

from common.errors import InvalidInputError
from common.logging_config import get_logger
from geospatial.angles import Latitude, Longitude
from geospatial.ellipsoid import Ellipsoid
from geospatial.projections.base import (
    AngleLike,
    MapProjection,
    ProjectionOrientation,
    ProjectionParameter,
    ProjectionParameters,
    ProjectionProperty,
    ProjectionSurface,
    as_latitude,
    as_longitude,
    longitude_offset,
)

logger = get_logger(__name__)

MAX_LATITUDE = math.radians(89.99)
MAX_DELTA_LONGITUDE = math.radians(9.0)
MIN_EASTING, MAX_EASTING = -40_000_000.0, 40_000_000.0
MIN_NORTHING, MAX_NORTHING = -20_000_000.0, 20_000_000.0
MIN_SCALE, MAX_SCALE = 0.3, 3.0

# Offsets below this are treated as exactly on the central meridian
_ZERO_DELTA = 2e-10


def tm_forward_series(
    ellipsoid: Ellipsoid,
    latitude_rad: float,
    delta_lon_rad: float,
    scale: float,
    origin_latitude_rad: float = 0.0
) -> Tuple[float, float]:
    """Transverse Mercator series without false origin.

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Reference ellipsoid.
    latitude_rad : float
        Geodetic latitude.
    delta_lon_rad : float
        Longitude offset from the central meridian.
    scale : float
        Scale factor on the central meridian.
    origin_latitude_rad : float
        Latitude at which the northing is zero.

    Returns
    -------
    Tuple[float, float]
        (northing, easting) in meters.
    """
    dl = 0.0 if abs(delta_lon_rad) < _ZERO_DELTA else delta_lon_rad

    c = math.cos(latitude_rad)
    c3 = c ** 3
    c5 = c ** 5
    c7 = c ** 7
    sin = math.sin(latitude_rad)
    tan2 = math.tan(latitude_rad) ** 2
    tan4 = tan2 ** 2
    tan6 = tan4 * tan2

    eta = ellipsoid.ep2 * c * c
    eta2 = eta ** 2
    eta3 = eta ** 3
    eta4 = eta ** 4

    sn = float(ellipsoid.prime_vertical_radius(latitude_rad))
    tmd = float(ellipsoid.meridian_arc_length(latitude_rad))
    tmdo = float(ellipsoid.meridian_arc_length(origin_latitude_rad))

    t1 = (tmd - tmdo) * scale
    t2 = sn * sin * c * scale / 2.0
    t3 = sn * sin * c3 * scale * (5.0 - tan2 + 9.0 * eta + 4.0 * eta2) / 24.0
    t4 = sn * sin * c5 * scale * (
        61.0 - 58.0 * tan2 + tan4 + 270.0 * eta - 330.0 * tan2 * eta
        + 445.0 * eta2 + 324.0 * eta3 - 680.0 * tan2 * eta2 + 88.0 * eta4
        - 600.0 * tan2 * eta3 - 192.0 * tan2 * eta4
    ) / 720.0
    t5 = sn * sin * c7 * scale * (1385.0 - 3111.0 * tan2 + 543.0 * tan4 - tan6) / 40320.0

    northing = t1 + dl ** 2 * t2 + dl ** 4 * t3 + dl ** 6 * t4 + dl ** 8 * t5

    t6 = sn * c * scale
    t7 = sn * c3 * scale * (1.0 - tan2 + eta) / 6.0
    t8 = sn * c5 * scale * (
        5.0 - 18.0 * tan2 + tan4 + 14.0 * eta - 58.0 * tan2 * eta
        + 13.0 * eta2 + 4.0 * eta3 - 64.0 * tan2 * eta2 - 24.0 * tan2 * eta3
    ) / 120.0
    t9 = sn * c7 * scale * (61.0 - 479.0 * tan2 + 179.0 * tan4 - tan6) / 5040.0

    easting = dl * t6 + dl ** 3 * t7 + dl ** 5 * t8 + dl ** 7 * t9

    return northing, easting


def tm_reverse_series(
    ellipsoid: Ellipsoid,
    northing: float,
    easting: float,
    scale: float,
    origin_latitude_rad: float = 0.0
) -> Tuple[float, float]:
    """Inverse Transverse Mercator series without false origin.

    Returns
    -------
    Tuple[float, float]
        (latitude_rad, delta_lon_rad) relative to the central meridian.

    Raises
    ------
    ConvergenceError
        If the footpoint latitude iteration does not settle.
    """
    tmdo = float(ellipsoid.meridian_arc_length(origin_latitude_rad))
    footpoint = ellipsoid.latitude_from_meridian_arc(tmdo + northing / scale)

    tan = math.tan(footpoint)
    tan2 = tan * tan
    tan4 = tan2 * tan2
    tan6 = tan4 * tan2
    c = math.cos(footpoint)

    sr = float(ellipsoid.meridian_radius(footpoint))
    sn = float(ellipsoid.prime_vertical_radius(footpoint))

    eta = ellipsoid.ep2 * c * c
    eta2 = eta ** 2
    eta3 = eta ** 3
    eta4 = eta ** 4

    de = easting

    t10 = tan / (2.0 * sr * sn * scale ** 2)
    t11 = tan * (5.0 + 3.0 * tan2 + eta - 4.0 * eta2 - 9.0 * tan2 * eta) / (
        24.0 * sr * sn ** 3 * scale ** 4
    )
    t12 = tan * (
        61.0 + 90.0 * tan2 + 46.0 * eta + 45.0 * tan4 - 252.0 * tan2 * eta - 3.0 * eta2
        + 100.0 * eta3 - 66.0 * tan2 * eta2 - 90.0 * tan4 * eta + 88.0 * eta4
        + 225.0 * tan4 * eta2 + 84.0 * tan2 * eta3 - 192.0 * tan2 * eta4
    ) / (720.0 * sr * sn ** 5 * scale ** 6)
    t13 = tan * (1385.0 + 3633.0 * tan2 + 4095.0 * tan4 + 1575.0 * tan6) / (
        40320.0 * sr * sn ** 7 * scale ** 8
    )

    latitude = footpoint - de ** 2 * t10 + de ** 4 * t11 - de ** 6 * t12 + de ** 8 * t13

    t14 = 1.0 / (sn * c * scale)
    t15 = (1.0 + 2.0 * tan2 + eta) / (6.0 * sn ** 3 * c * scale ** 3)
    t16 = (
        5.0 + 6.0 * eta + 28.0 * tan2 - 3.0 * eta2 + 8.0 * tan2 * eta + 24.0 * tan4
        - 4.0 * eta3 + 4.0 * tan2 * eta2 + 24.0 * tan2 * eta3
    ) / (120.0 * sn ** 5 * c * scale ** 5)
    t17 = (61.0 + 662.0 * tan2 + 1320.0 * tan4 + 720.0 * tan6) / (
        5040.0 * sn ** 7 * c * scale ** 7
    )

    delta_lon = de * t14 - de ** 3 * t15 + de ** 5 * t16 - de ** 7 * t17

    return latitude, delta_lon


class TransverseMercator(MapProjection):
    """Transverse Mercator (EPSG method 9807).

    Required parameters are ``latitude_of_origin`` and ``scale_factor``.
    The central meridian and the false origin default to zero.

    Raises
    ------
    InvalidInputError
        If the scale factor lies outside [0.3, 3.0].

    Examples
    --------
    >>> tm = TransverseMercator(ProjectionParameters(
    ...     latitude_of_origin=0.0, scale_factor=0.9996, central_meridian=117.0))
    >>> northing, easting = tm.forward(30.0, 118.0)
    """

    name = "Transverse Mercator"
    epsg_method = 9807
    surface = ProjectionSurface.CYLINDRICAL
    projection_property = ProjectionProperty.CONFORMAL
    orientation = ProjectionOrientation.TRANSVERSE

    required = (ProjectionParameter.LATITUDE_OF_ORIGIN, ProjectionParameter.SCALE_FACTOR)
    defaults = {"central_meridian": 0.0, "false_easting": 0.0, "false_northing": 0.0}

    def __init__(
        self,
        parameters: Optional[ProjectionParameters] = None,
        ellipsoid: Optional[Ellipsoid] = None
    ):
        super().__init__(parameters, ellipsoid)
        if not MIN_SCALE <= self.scale_factor <= MAX_SCALE:
            raise InvalidInputError(
                f"Projection parameter 'scale_factor' must be within "
                f"[{MIN_SCALE}, {MAX_SCALE}], got {self.scale_factor}"
            )

    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        lat = as_latitude(latitude)
        lat_rad = lat.radians
        if abs(lat_rad) > MAX_LATITUDE:
            raise InvalidInputError(f"Latitude {lat.degrees}° is too close to a pole")

        dl = longitude_offset(as_longitude(longitude), self.central_meridian)
        if abs(dl) > math.pi / 2:
            raise InvalidInputError("Longitude is more than 90° from the central meridian")
        if abs(dl) > MAX_DELTA_LONGITUDE:
            raise InvalidInputError(
                f"Longitude offset {math.degrees(dl):.6f}° exceeds 9° from the central meridian"
            )

        northing, easting = tm_forward_series(
            self.ellipsoid, lat_rad, dl, self.scale_factor, self.latitude_of_origin.radians
        )
        return northing + self.false_northing, easting + self.false_easting

    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        if not MIN_EASTING <= easting <= MAX_EASTING:
            raise InvalidInputError(f"Easting {easting} is out of range")
        if not MIN_NORTHING <= northing <= MAX_NORTHING:
            raise InvalidInputError(f"Northing {northing} is out of range")

        lat_rad, dl = tm_reverse_series(
            self.ellipsoid,
            northing - self.false_northing,
            easting - self.false_easting,
            self.scale_factor,
            self.latitude_of_origin.radians
        )
        if abs(dl) > MAX_DELTA_LONGITUDE:
            raise InvalidInputError("The point is too far from the central meridian")

        return (
            Latitude.from_radians(lat_rad),
            Longitude(self.central_meridian.degrees + math.degrees(dl)),
        )

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=tmerc +lat_0={self.latitude_of_origin.degrees!r} "
            f"+lon_0={self.central_meridian.degrees!r} +k={self.scale_factor!r} "
            f"+x_0={self.false_easting!r} +y_0={self.false_northing!r} "
            f"{self._ellps_proj4()}"
        )
