"""
Point on a Reference Ellipsoid.

A :class:`GeoPoint` binds a latitude/longitude to the ellipsoid it refers
to and exposes the local curvature quantities used by the geodesic solvers
and the reductions: radii of curvature, Gauss-Krüger meridian convergence
and the Gauss-Krüger length scale.

References
----------
- Kong, X. (2005). Foundation of Geodesy (2nd ed.), ch. 4 and 6.
"""

from dataclasses import dataclass, field
import math
from typing import Any, Dict, Union

from geospatial.angles import Angle, Latitude, Longitude, wrap_longitude_difference
from geospatial.coordinates import GeodeticCoord, GeographicCoord
from geospatial.ellipsoid import ELLIPSOIDS, Ellipsoid, get_ellipsoid
from geospatial.projections.base import AngleLike, as_latitude, as_longitude
from geospatial.projections.gauss_krueger import gk_central_meridian, gk_zone_number
from geospatial.settings import default_ellipsoid


@dataclass(frozen=True)
class GeoPoint:
    """A geodetic position on a given ellipsoid.

    Attributes
    ----------
    latitude : Latitude
    longitude : Longitude
    ellipsoid : Ellipsoid
        Reference ellipsoid (default: process-wide default).

    Examples
    --------
    >>> p = GeoPoint.from_degrees(30.0, 114.0)
    >>> round(p.latitude.degrees, 1)
    30.0
    """
    latitude: Latitude
    longitude: Longitude
    ellipsoid: Ellipsoid = field(default_factory=default_ellipsoid)

    def __post_init__(self):
        object.__setattr__(self, 'latitude', as_latitude(self.latitude))
        object.__setattr__(self, 'longitude', as_longitude(self.longitude))

    @classmethod
    def from_degrees(cls, lat_deg: float, lon_deg: float, ellipsoid: Ellipsoid = None) -> 'GeoPoint':
        return cls(Latitude(lat_deg), Longitude(lon_deg), ellipsoid or default_ellipsoid())

    @classmethod
    def from_coord(
        cls,
        coord: Union[GeographicCoord, GeodeticCoord],
        ellipsoid: Ellipsoid = None
    ) -> 'GeoPoint':
        return cls(coord.latitude, coord.longitude, ellipsoid or default_ellipsoid())

    def with_ellipsoid(self, ellipsoid: Ellipsoid) -> 'GeoPoint':
        return GeoPoint(self.latitude, self.longitude, ellipsoid)

    def to_geographic(self) -> GeographicCoord:
        return GeographicCoord(self.latitude, self.longitude)

    # ------------------------------------------------------------------
    # Curvature
    # ------------------------------------------------------------------

    @property
    def prime_vertical_radius(self) -> float:
        """N, radius of curvature in the prime vertical."""
        return float(self.ellipsoid.prime_vertical_radius(self.latitude.radians))

    @property
    def meridian_radius(self) -> float:
        """M, radius of curvature in the meridian."""
        return float(self.ellipsoid.meridian_radius(self.latitude.radians))

    @property
    def mean_radius(self) -> float:
        """Gaussian mean radius √(MN)."""
        return float(self.ellipsoid.mean_curvature_radius(self.latitude.radians))

    def curvature_radius(self, azimuth: AngleLike) -> float:
        """Radius of curvature of the normal section at `azimuth`."""
        azimuth = azimuth.radians if isinstance(azimuth, Angle) else math.radians(azimuth)
        return float(self.ellipsoid.curvature_radius(self.latitude.radians, azimuth))

    # ------------------------------------------------------------------
    # Gauss-Krüger grid quantities
    # ------------------------------------------------------------------

    def _zone_offset(self, zone_width: float) -> float:
        number = gk_zone_number(self.longitude, zone_width)
        cm = gk_central_meridian(number, zone_width)
        return wrap_longitude_difference(self.longitude, cm).radians

    def _gk_terms(self, zone_width: float):
        l = self._zone_offset(zone_width)
        B = self.latitude.radians
        cos2 = math.cos(B) ** 2
        eta2 = self.ellipsoid.ep2 * cos2
        return l, B, cos2, eta2, math.tan(B) ** 2

    def convergence_angle(self, zone_width: float = 6.0) -> Angle:
        """Meridian convergence of the Gauss-Krüger grid at this point.

        Positive east of the zone's central meridian in the northern
        hemisphere.

        Notes
        -----
        γ = l·sinB·(1 + l²cos²B(1 + 3η² + 2η⁴)/3 + l⁴cos⁴B(2 - tan²B)/15)
        """
        l, B, cos2, eta2, t2 = self._gk_terms(zone_width)
        gamma = l * math.sin(B) * (
            1
            + l * l * cos2 * (1 + 3 * eta2 + 2 * eta2 * eta2) / 3
            + l ** 4 * cos2 * cos2 * (2 - t2) / 15
        )
        return Angle.from_radians(gamma)

    def length_scale(self, zone_width: float = 6.0) -> float:
        """Gauss-Krüger point scale factor (unit scale on the central meridian).

        Notes
        -----
        m = 1 + l²cos²B(1 + η²)/2 + l⁴cos⁴B(5 - 4tan²B)/24
        """
        l, _, cos2, eta2, t2 = self._gk_terms(zone_width)
        return (
            1
            + l * l * cos2 * (1 + eta2) / 2
            + l ** 4 * cos2 * cos2 * (5 - 4 * t2) / 24
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"B:{self.latitude}, L:{self.longitude}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude.to_dict(),
            "longitude": self.longitude.to_dict(),
            "ellipsoid": {"name": self.ellipsoid.name, "a": self.ellipsoid.a, "ivf": self.ellipsoid.ivf},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeoPoint':
        stored = data.get("ellipsoid")
        if not stored:
            ellipsoid = default_ellipsoid()
        elif stored.get("name", "").lower() in ELLIPSOIDS:
            ellipsoid = get_ellipsoid(stored["name"])
        elif math.isinf(stored["ivf"]):
            ellipsoid = Ellipsoid.sphere(stored["a"])
        else:
            ellipsoid = Ellipsoid.from_axis_flattening(stored["a"], stored["ivf"], name=stored.get("name", ""))
        return cls(
            Latitude.from_dict(data["latitude"]),
            Longitude.from_dict(data["longitude"]),
            ellipsoid,
        )
