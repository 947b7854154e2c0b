"""
Mercator and Web Mercator.

The normal-aspect Mercator maps meridians to equally spaced vertical lines
and is conformal. With a ``scale_factor`` it is the one-standard-parallel
variant (EPSG 9804, scale given on the equator); without one it is the
two-standard-parallel variant (EPSG 9805), whose equatorial scale follows
from the latitude of true scale.

Web Mercator (EPSG:3857) applies the spherical formulas to a sphere whose
radius is the ellipsoid's semi-major axis.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 38-47.
- IOGP Guidance Note 7-2, section 3.5.1.
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
    ProjectionParameters,
    ProjectionProperty,
    ProjectionSurface,
    as_latitude,
    as_longitude,
    latitude_from_conformal,
    longitude_offset,
)
from geospatial.settings import default_ellipsoid

logger = get_logger(__name__)


class Mercator(MapProjection):
    """Ellipsoidal Mercator (1SP or 2SP).

    Parameters
    ----------
    parameters : ProjectionParameters, optional
        ``scale_factor`` selects the 1SP variant. Otherwise the scale is
        derived from ``standard_parallel_1`` (or ``latitude_of_origin``).
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid (default: process-wide default).
    """

    name = "Mercator"
    epsg_method = 9804
    surface = ProjectionSurface.CYLINDRICAL
    projection_property = ProjectionProperty.CONFORMAL
    orientation = ProjectionOrientation.TANGENT

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

        if self._parameters.scale_factor is not None:
            self.variant = "1SP"
            self._k0 = self._parameters.scale_factor
        else:
            self.variant = "2SP"
            self.epsg_method = 9805
            parallel = self._parameters.standard_parallel_1
            if parallel is None:
                parallel = self._parameters.latitude_of_origin
            phi = math.radians(parallel)
            self._k0 = math.cos(phi) / math.sqrt(1.0 - self.es * math.sin(phi) ** 2)

    @property
    def k0(self) -> float:
        """Scale factor on the equator."""
        return self._k0

    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        lat = as_latitude(latitude)
        if abs(abs(lat.degrees) - 90.0) < 1e-10:
            raise InvalidInputError("Mercator cannot be computed at the poles")

        a = self.semi_major
        e = self.e
        phi = lat.radians
        esin = e * math.sin(phi)

        dl = longitude_offset(as_longitude(longitude), self.central_meridian)
        easting = a * self._k0 * dl + self.false_easting
        northing = a * self._k0 * math.log(
            math.tan(math.pi / 4 + phi / 2) * ((1 - esin) / (1 + esin)) ** (e / 2)
        ) + self.false_northing
        return northing, easting

    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        scale = self.semi_major * self._k0
        t = math.exp(-(northing - self.false_northing) / scale)
        chi = math.pi / 2 - 2 * math.atan(t)

        lat = Latitude.from_radians(latitude_from_conformal(chi, self.es))
        lon = Longitude(
            self.central_meridian.degrees + math.degrees((easting - self.false_easting) / scale)
        )
        return lat, lon

    @property
    def proj4_string(self) -> str:
        if self.variant == "1SP":
            scale = f"+k_0={self._k0!r}"
        else:
            parallel = self._parameters.standard_parallel_1
            if parallel is None:
                parallel = self._parameters.latitude_of_origin
            scale = f"+lat_ts={parallel!r}"
        return (
            f"+proj=merc +lon_0={self.central_meridian.degrees!r} {scale} "
            f"+x_0={self.false_easting!r} +y_0={self.false_northing!r} {self._ellps_proj4()}"
        )


class WebMercator(Mercator):
    """Pseudo-Mercator on a sphere of the ellipsoid's semi-major axis.

    Examples
    --------
    >>> northing, easting = WebMercator().forward(0.0, 180.0)
    >>> round(easting, 3)
    20037508.343
    """

    name = "Web Mercator"

    def __init__(
        self,
        ellipsoid: Optional[Ellipsoid] = None,
        central_meridian: float = 0.0,
        false_easting: float = 0.0,
        false_northing: float = 0.0
    ):
        ellipsoid = ellipsoid or default_ellipsoid()
        super().__init__(ProjectionParameters(
            semi_major=ellipsoid.a,
            inverse_flattening=math.inf,
            scale_factor=1.0,
            central_meridian=central_meridian,
            false_easting=false_easting,
            false_northing=false_northing,
        ))

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=merc +a={self.semi_major!r} +b={self.semi_major!r} +lat_ts=0 "
            f"+lon_0={self.central_meridian.degrees!r} +x_0={self.false_easting!r} "
            f"+y_0={self.false_northing!r} +k=1 +units=m +nadgrids=@null +wktext +no_defs"
        )
