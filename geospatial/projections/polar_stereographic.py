"""
Polar Stereographic and Universal Polar Stereographic (UPS).

Conformal azimuthal projection centred on a pole. The hemisphere is taken
from the sign of the latitude of origin (default +90°). Scale is set either
directly by ``scale_factor`` at the pole or by ``true_scale_latitude``, the
parallel along which the scale is exact.

UPS is the polar stereographic grid that complements UTM poleward of
84°N and 80°S: scale 0.994 at the pole and a false origin of 2000 km in
both directions. Its four latitude bands are Y and Z in the north and A
and B in the south, split at the prime meridian.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 154-163.
- DMA Technical Manual 8358.2 (1989). The Universal Grids, section 3.
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
    check_hemisphere,
    latitude_from_conformal,
    longitude_offset,
)
from geospatial.settings import default_ellipsoid

logger = get_logger(__name__)

UPS_SCALE_FACTOR = 0.994
UPS_FALSE_ORIGIN = 2_000_000.0
UPS_MIN_COORDINATE, UPS_MAX_COORDINATE = 0.0, 4_000_000.0


class PolarStereographic(MapProjection):
    """Polar Stereographic (EPSG methods 9810 and 9829).

    Parameters
    ----------
    parameters : ProjectionParameters, optional
        ``latitude_of_origin`` (±90, default 90) selects the hemisphere.
        ``true_scale_latitude`` when given replaces ``scale_factor``
        (default 1). The central meridian and false origin default to zero.
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid (default: process-wide default).
    """

    name = "Polar Stereographic"
    epsg_method = 9810
    surface = ProjectionSurface.AZIMUTHAL
    projection_property = ProjectionProperty.CONFORMAL
    orientation = ProjectionOrientation.TANGENT

    defaults = {
        "latitude_of_origin": 90.0,
        "central_meridian": 0.0,
        "scale_factor": 1.0,
        "false_easting": 0.0,
        "false_northing": 0.0,
    }

    def __init__(
        self,
        parameters: Optional[ProjectionParameters] = None,
        ellipsoid: Optional[Ellipsoid] = None
    ):
        super().__init__(parameters, ellipsoid)

        origin = self._parameters.latitude_of_origin
        true_scale = self._parameters.true_scale_latitude
        reference = origin if true_scale is None else true_scale
        self._sign = -1.0 if reference < 0 else 1.0

        e = self.e
        self._pole_factor = math.sqrt((1 + e) ** (1 + e) * (1 - e) ** (1 - e))

        # ρ = scale · t(φ)
        if true_scale is not None and abs(abs(true_scale) - 90.0) > 1e-10:
            phi_c = math.radians(abs(true_scale))
            m_c = math.cos(phi_c) / math.sqrt(1 - self.es * math.sin(phi_c) ** 2)
            self._rho_scale = self.semi_major * m_c / self._t(phi_c)
        else:
            self._rho_scale = 2 * self.semi_major * self.scale_factor / self._pole_factor

    @property
    def hemisphere(self) -> str:
        return "N" if self._sign > 0 else "S"

    def _t(self, phi: float) -> float:
        """Isometric quantity t for a latitude in the projection's own hemisphere."""
        e = self.e
        sin = math.sin(phi)
        return math.tan(math.pi / 4 - phi / 2) / ((1 - e * sin) / (1 + e * sin)) ** (e / 2)

    @property
    def pole_scale_factor(self) -> float:
        """Scale factor at the pole."""
        return self._rho_scale * self._pole_factor / (2 * self.semi_major)

    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        lat = as_latitude(latitude)
        phi = self._sign * lat.radians
        if phi <= -math.pi / 2 + 1e-10:
            raise InvalidInputError(
                f"Latitude {lat.degrees}° is the pole opposite the projection centre"
            )

        rho = self._rho_scale * self._t(phi)
        dl = longitude_offset(as_longitude(longitude), self.central_meridian)

        easting = self.false_easting + rho * math.sin(dl)
        northing = self.false_northing - self._sign * rho * math.cos(dl)
        return northing, easting

    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        x = easting - self.false_easting
        y = northing - self.false_northing

        rho = math.hypot(x, y)
        if rho == 0.0:
            return Latitude(90.0 * self._sign), self.central_meridian

        t = rho / self._rho_scale
        chi = math.pi / 2 - 2 * math.atan(t)
        phi = latitude_from_conformal(chi, self.es)

        dl = math.atan2(x, -self._sign * y)
        return (
            Latitude.from_radians(self._sign * phi),
            Longitude(self.central_meridian.degrees + math.degrees(dl)),
        )

    @property
    def proj4_string(self) -> str:
        lat_0 = 90.0 * self._sign
        true_scale = self._parameters.true_scale_latitude
        scale = (
            f"+lat_ts={true_scale!r}" if true_scale is not None
            else f"+k_0={self.scale_factor!r}"
        )
        return (
            f"+proj=stere +lat_0={lat_0!r} +lon_0={self.central_meridian.degrees!r} {scale} "
            f"+x_0={self.false_easting!r} +y_0={self.false_northing!r} {self._ellps_proj4()}"
        )


def ups_band(latitude: AngleLike, longitude: AngleLike) -> str:
    """UPS latitude band: Z/Y in the north, B/A in the south, split at 0° longitude."""
    lat = as_latitude(latitude).degrees
    east = as_longitude(longitude).degrees >= 0.0
    if lat >= 0.0:
        return "Z" if east or lat == 90.0 else "Y"
    return "B" if east or lat == -90.0 else "A"


class UPS(MapProjection):
    """Universal Polar Stereographic grid of one hemisphere.

    Parameters
    ----------
    hemisphere : str
        'N' or 'S'.
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid (default: process-wide default).
    """

    name = "Universal Polar Stereographic"
    surface = ProjectionSurface.AZIMUTHAL
    projection_property = ProjectionProperty.CONFORMAL
    orientation = ProjectionOrientation.TANGENT

    def __init__(self, hemisphere: str, ellipsoid: Optional[Ellipsoid] = None):
        self.hemisphere = check_hemisphere(hemisphere)
        ellipsoid = ellipsoid or default_ellipsoid()

        parameters = ProjectionParameters.from_ellipsoid(
            ellipsoid,
            latitude_of_origin=90.0 if self.hemisphere == "N" else -90.0,
            central_meridian=0.0,
            scale_factor=UPS_SCALE_FACTOR,
            false_easting=UPS_FALSE_ORIGIN,
            false_northing=UPS_FALSE_ORIGIN,
        )
        super().__init__(parameters)
        self._stereographic = PolarStereographic(parameters)

    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        return self._stereographic.forward(latitude, longitude)

    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        for label, value in (("easting", easting), ("northing", northing)):
            if not UPS_MIN_COORDINATE <= value <= UPS_MAX_COORDINATE:
                raise InvalidInputError(
                    f"UPS {label} {value} is outside [{UPS_MIN_COORDINATE}, {UPS_MAX_COORDINATE}]"
                )
        return self._stereographic.reverse(northing, easting)

    @property
    def proj4_string(self) -> str:
        south = " +south" if self.hemisphere == "S" else ""
        return f"+proj=ups{south} {self._ellps_proj4()}"

    def __repr__(self) -> str:
        return f"UPS(hemisphere={self.hemisphere!r}, ellipsoid={self.ellipsoid})"
