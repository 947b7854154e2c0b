"""
Closed-form Arcs and Areas on the Ellipsoid.

Meridian arcs and parallel arcs have exact (series) lengths and constant
azimuths, so they need no iterative geodesic solution. The area of an
ellipsoidal trapezoid bounded by two meridians and two parallels also
follows from a series in e².

References
----------
- Kong, X. (2005). Foundation of Geodesy (2nd ed.), eq. 5-47.
- Torge, W. (2001). Geodesy (3rd ed.), sec. 4.2.
"""

from dataclasses import dataclass
import math
from typing import Optional

from common.logging_config import get_logger
from geospatial.angles import Angle, Latitude, Longitude
from geospatial.ellipsoid import Ellipsoid
from geospatial.geo_point import GeoPoint
from geospatial.projections.base import AngleLike, as_latitude, as_longitude
from geospatial.settings import default_ellipsoid

logger = get_logger(__name__)


@dataclass(frozen=True)
class GeoArc:
    """An arc between two points of one ellipsoid.

    Attributes
    ----------
    start, end : GeoPoint
    length : float
        Arc length in meters.
    azimuth : Angle
        Azimuth at the start point.
    inverse_azimuth : Angle
        Azimuth at the end point pointing back to the start.
    """
    start: GeoPoint
    end: GeoPoint
    length: float
    azimuth: Angle
    inverse_azimuth: Angle

    @property
    def ellipsoid(self) -> Ellipsoid:
        return self.start.ellipsoid


class Meridian(GeoArc):
    """Arc of a meridian between two latitudes.

    Without latitudes the arc runs from the south pole to the north pole.

    Examples
    --------
    >>> arc = Meridian(0.0, 0.0, 90.0)
    >>> round(arc.length)
    10001966
    """

    def __init__(
        self,
        longitude: AngleLike,
        lat0: Optional[AngleLike] = None,
        lat1: Optional[AngleLike] = None,
        ellipsoid: Optional[Ellipsoid] = None
    ):
        ellipsoid = ellipsoid or default_ellipsoid()
        lon = as_longitude(longitude)
        lat0 = Latitude.SOUTH_POLE if lat0 is None else as_latitude(lat0)
        lat1 = Latitude.NORTH_POLE if lat1 is None else as_latitude(lat1)

        length = abs(
            meridian_length(ellipsoid, lat1) - meridian_length(ellipsoid, lat0)
        )
        northward = lat1.degrees > lat0.degrees
        super().__init__(
            start=GeoPoint(lat0, lon, ellipsoid),
            end=GeoPoint(lat1, lon, ellipsoid),
            length=length,
            azimuth=Angle.ZERO if northward else Angle.PI,
            inverse_azimuth=Angle.PI if northward else Angle.ZERO,
        )

    @property
    def longitude(self) -> Longitude:
        return self.start.longitude

    def get_length(self, latitude: AngleLike) -> float:
        """Meridian distance from the equator to `latitude`."""
        return meridian_length(self.ellipsoid, as_latitude(latitude))

    def get_latitude(self, length: float) -> Latitude:
        """Latitude at meridian distance `length` from the equator."""
        return Latitude.from_radians(self.ellipsoid.latitude_from_meridian_arc(length))


class Parallel(GeoArc):
    """Arc of a parallel between two longitudes.

    Without longitudes the arc is the full parallel circle.
    """

    def __init__(
        self,
        latitude: AngleLike,
        lon0: Optional[AngleLike] = None,
        lon1: Optional[AngleLike] = None,
        ellipsoid: Optional[Ellipsoid] = None
    ):
        ellipsoid = ellipsoid or default_ellipsoid()
        lat = as_latitude(latitude)
        radius = float(ellipsoid.parallel_radius(lat.radians))

        if lon0 is None and lon1 is None:
            lon0, lon1 = Longitude(-180.0), Longitude(180.0)
            length = 2 * math.pi * radius
            eastward = True
        else:
            lon0, lon1 = as_longitude(lon0), as_longitude(lon1)
            length = radius * abs(lon1.radians - lon0.radians)
            eastward = lon0.degrees < lon1.degrees

        super().__init__(
            start=GeoPoint(lat, lon0, ellipsoid),
            end=GeoPoint(lat, lon1, ellipsoid),
            length=length,
            azimuth=Angle(90.0) if eastward else Angle(270.0),
            inverse_azimuth=Angle(270.0) if eastward else Angle(90.0),
        )

    @property
    def latitude(self) -> Latitude:
        return self.start.latitude

    def get_length(self, lon0: AngleLike, lon1: AngleLike) -> float:
        """Length of this parallel between two longitudes."""
        radius = float(self.ellipsoid.parallel_radius(self.latitude.radians))
        return radius * abs(as_longitude(lon1).radians - as_longitude(lon0).radians)


def meridian_length(ellipsoid: Ellipsoid, latitude: Latitude) -> float:
    """Meridian distance from the equator, in meters."""
    return float(ellipsoid.meridian_arc_length(latitude.radians))


def _degrees(value: AngleLike) -> float:
    return value.degrees if isinstance(value, Angle) else float(value)


def trapezoid_area(
    ellipsoid: Ellipsoid,
    lat0: AngleLike,
    lon0: AngleLike,
    lat1: AngleLike,
    lon1: AngleLike
) -> float:
    """Area of the ellipsoidal trapezoid between two parallels and two meridians.

    Parameters
    ----------
    ellipsoid : Ellipsoid
    lat0, lon0 : Angle or float
        South-west corner (floats are decimal degrees).
    lat1, lon1 : Angle or float
        North-east corner.

    Returns
    -------
    float
        Area in square meters (non-negative).

    Notes
    -----
    S = 2b²ΔL·(A sin(ΔB/2)cosBm - B sin(3ΔB/2)cos3Bm + C sin(5ΔB/2)cos5Bm
               - D sin(7ΔB/2)cos7Bm + E sin(9ΔB/2)cos9Bm)

    with Bm the mean latitude and the coefficients A..E series in e² to e⁸.
    Longitudes are not wrapped, so (-180, 180) spans the whole ellipsoid.
    """
    e2 = ellipsoid.e2
    e4 = e2 * e2
    e6 = e4 * e2
    e8 = e4 * e4

    cA = 1 + e2 / 2 + 3 * e4 / 8 + 5 * e6 / 16 + 35 * e8 / 128
    cB = e2 / 6 + 3 * e4 / 16 + 3 * e6 / 16 + 35 * e8 / 192
    cC = 3 * e4 / 80 + e6 / 16 + 5 * e8 / 64
    cD = e6 / 112 + 5 * e8 / 256
    cE = 5 * e8 / 2304

    b0 = math.radians(_degrees(lat0))
    b1 = math.radians(_degrees(lat1))
    Bm = (b0 + b1) / 2
    half = (b1 - b0) / 2
    dL = math.radians(_degrees(lon1) - _degrees(lon0))

    area = 2 * ellipsoid.b ** 2 * dL * (
        cA * math.sin(half) * math.cos(Bm)
        - cB * math.sin(3 * half) * math.cos(3 * Bm)
        + cC * math.sin(5 * half) * math.cos(5 * Bm)
        - cD * math.sin(7 * half) * math.cos(7 * Bm)
        + cE * math.sin(9 * half) * math.cos(9 * Bm)
    )
    return abs(area)
