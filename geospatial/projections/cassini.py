"""
Cassini-Soldner (EPSG method 9806).

Transverse aspect of the equirectangular projection: distances along the
central meridian and perpendicular to it are true. Neither conformal nor
equal-area; still used for some cadastral grids.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 92-95.
"""

import math
from typing import Optional, Tuple

from common.logging_config import get_logger
from geospatial.angles import Latitude, Longitude
from geospatial.ellipsoid import Ellipsoid
from geospatial.projections.base import (
    AngleLike,
    MapProjection,
    ProjectionOrientation,
    ProjectionParameters,
    ProjectionProperty,
    ProjectionSurface,
    as_latitude,
    as_longitude,
    longitude_offset,
)

logger = get_logger(__name__)


class CassiniSoldner(MapProjection):
    """Cassini-Soldner with the Snyder series (closed form on a sphere).

    All parameters are optional: origin latitude, central meridian and the
    false origin default to zero.

    Examples
    --------
    >>> cass = CassiniSoldner(ProjectionParameters(central_meridian=-61.0))
    >>> northing, easting = cass.forward(10.0, -61.0)
    >>> round(easting, 6)
    0.0
    """

    name = "Cassini-Soldner"
    epsg_method = 9806
    surface = ProjectionSurface.CYLINDRICAL
    projection_property = ProjectionProperty.APHYLACTIC
    orientation = ProjectionOrientation.TRANSVERSE

    defaults = {
        "latitude_of_origin": 0.0,
        "central_meridian": 0.0,
        "false_easting": 0.0,
        "false_northing": 0.0,
    }

    def __init__(
        self,
        parameters: Optional[ProjectionParameters] = None,
        ellipsoid: Optional[Ellipsoid] = None
    ):
        super().__init__(parameters, ellipsoid)
        self._m0 = self.meridional_distance(self.latitude_of_origin.radians)

    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        phi = as_latitude(latitude).radians
        dl = longitude_offset(as_longitude(longitude), self.central_meridian)

        a = self.semi_major
        es = self.es
        sin, cos, tan = math.sin(phi), math.cos(phi), math.tan(phi)

        if es == 0.0:
            easting = a * math.asin(cos * math.sin(dl)) + self.false_easting
            northing = a * math.atan2(tan, math.cos(dl)) - self._m0 + self.false_northing
            return northing, easting

        N = a / math.sqrt(1 - es * sin * sin)
        T = tan * tan
        A = dl * cos
        A2 = A * A
        C = es * cos * cos / (1 - es)

        easting = N * (A - T * A * A2 / 6 - (8 - T + 8 * C) * T * A * A2 * A2 / 120)
        northing = (
            self.meridional_distance(phi) - self._m0
            + N * tan * (A2 / 2 + (5 - T + 6 * C) * A2 * A2 / 24)
        )
        return northing + self.false_northing, easting + self.false_easting

    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        a = self.semi_major
        es = self.es
        arc = northing - self.false_northing + self._m0
        d = (easting - self.false_easting) / a

        if es == 0.0:
            arc /= a
            phi = math.asin(math.sin(arc) * math.cos(d))
            dl = math.atan2(math.tan(d), math.cos(arc))
            return (
                Latitude.from_radians(phi),
                Longitude(self.central_meridian.degrees + math.degrees(dl)),
            )

        phi1 = self.meridional_latitude(arc)
        if abs(abs(phi1) - math.pi / 2) < 1e-12:
            return Latitude.from_radians(phi1), self.central_meridian

        sin, cos, tan = math.sin(phi1), math.cos(phi1), math.tan(phi1)
        T = tan * tan
        # N and R in units of a
        N = 1 / math.sqrt(1 - es * sin * sin)
        R = (1 - es) * N ** 3
        D = d / N
        D2 = D * D

        phi = phi1 - N * tan / R * (D2 / 2 - (1 + 3 * T) * D2 * D2 / 24)
        dl = (D - T * D * D2 / 3 + (1 + 3 * T) * T * D * D2 * D2 / 15) / cos
        return (
            Latitude.from_radians(phi),
            Longitude(self.central_meridian.degrees + math.degrees(dl)),
        )

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=cass +lat_0={self.latitude_of_origin.degrees!r} "
            f"+lon_0={self.central_meridian.degrees!r} "
            f"+x_0={self.false_easting!r} +y_0={self.false_northing!r} {self._ellps_proj4()}"
        )
