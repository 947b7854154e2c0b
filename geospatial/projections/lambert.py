"""
Lambert Conformal Conic with two standard parallels (EPSG method 9802).

Good choice for mid-latitude regions with greater east-west extent.
The cone is secant to the ellipsoid along the two standard parallels,
where the scale is exact.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 104-110.
"""

import math
from typing import Optional, Tuple

from common.constants import EPSILON3
from common.errors import ConvergenceError, InvalidInputError
from common.logging_config import ConvergenceLog, get_logger
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

PHI2Z_MAX_ITERATIONS = 16
PHI2Z_TOLERANCE = 1e-10


class LambertConformalConic2SP(MapProjection):
    """Lambert Conformal Conic (2SP).

    Required parameters are ``standard_parallel_1`` and
    ``standard_parallel_2``; the origin and false origin default to zero.

    Raises
    ------
    InvalidInputError
        If the standard parallels are symmetric about the equator.

    Examples
    --------
    >>> lcc = LambertConformalConic2SP(ProjectionParameters(
    ...     standard_parallel_1=25.0, standard_parallel_2=47.0, central_meridian=105.0))
    >>> northing, easting = lcc.forward(35.0, 110.0)
    """

    name = "Lambert Conformal Conic (2SP)"
    epsg_method = 9802
    surface = ProjectionSurface.CONICAL
    projection_property = ProjectionProperty.CONFORMAL
    orientation = ProjectionOrientation.SECANT

    required = (ProjectionParameter.STANDARD_PARALLEL_1, ProjectionParameter.STANDARD_PARALLEL_2)
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
        self._compute_constants()

    def _t(self, phi: float) -> float:
        e = self.e
        sin = math.sin(phi)
        return math.tan(math.pi / 4 - phi / 2) / ((1 - e * sin) / (1 + e * sin)) ** (e / 2)

    def _m(self, phi: float) -> float:
        sin = math.sin(phi)
        return math.cos(phi) / math.sqrt(1 - self.es * sin * sin)

    def _compute_constants(self):
        lat1 = self.standard_parallel_1.radians
        lat2 = self.standard_parallel_2.radians

        if abs(lat1 + lat2) < EPSILON3:
            raise InvalidInputError(
                "Standard parallels are symmetric about the equator",
                context={"standard_parallel_1": lat1, "standard_parallel_2": lat2}
            )

        m1, m2 = self._m(lat1), self._m(lat2)
        t1, t2 = self._t(lat1), self._t(lat2)

        if abs(lat1 - lat2) > EPSILON3:
            self._n = math.log(m1 / m2) / math.log(t1 / t2)
        else:
            self._n = math.sin(lat1)

        self._F = m1 / (self._n * t1 ** self._n)
        self._rho0 = self._rho(self.latitude_of_origin.radians)

    def _rho(self, phi: float) -> float:
        if abs(abs(phi) - math.pi / 2) > 1e-10:
            return self.semi_major * self._F * self._t(phi) ** self._n
        if phi * self._n <= 0:
            raise InvalidInputError(
                "The pole opposite the cone apex cannot be projected",
                context={"latitude": math.degrees(phi)}
            )
        return 0.0

    @property
    def n(self) -> float:
        """Cone constant."""
        return self._n

    def _phi2z(self, t: float) -> float:
        """Latitude from the isometric quantity t (Snyder 7-9)."""
        e = self.e
        half_e = e / 2
        phi = math.pi / 2 - 2 * math.atan(t)

        for _ in range(PHI2Z_MAX_ITERATIONS):
            sin = math.sin(phi)
            updated = math.pi / 2 - 2 * math.atan(t * ((1 - e * sin) / (1 + e * sin)) ** half_e)
            residual = abs(updated - phi)
            phi = updated
            if residual <= PHI2Z_TOLERANCE:
                return phi

        logger.error(f"Lambert inverse latitude did not converge for t={t}")
        ConvergenceLog().record("lambert.phi2z", PHI2Z_MAX_ITERATIONS, residual, False, {"t": t})
        raise ConvergenceError(
            "Lambert conformal conic reverse did not converge",
            iterations=PHI2Z_MAX_ITERATIONS,
            context={"t": t}
        )

    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        rho = self._rho(as_latitude(latitude).radians)
        gamma = self._n * longitude_offset(as_longitude(longitude), self.central_meridian)

        easting = rho * math.sin(gamma) + self.false_easting
        northing = self._rho0 - rho * math.cos(gamma) + self.false_northing
        return northing, easting

    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        dx = easting - self.false_easting
        dy = self._rho0 - (northing - self.false_northing)

        sign = 1.0 if self._n > 0 else -1.0
        rho = sign * math.hypot(dx, dy)

        gamma = math.atan2(sign * dx, sign * dy) if rho != 0 else 0.0

        if rho != 0:
            t = (rho / (self.semi_major * self._F)) ** (1 / self._n)
            lat = Latitude.from_radians(self._phi2z(t))
        else:
            lat = Latitude(90.0 * sign)

        lon = Longitude(self.central_meridian.degrees + math.degrees(gamma / self._n))
        return lat, lon

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=lcc +lat_1={self.standard_parallel_1.degrees!r} "
            f"+lat_2={self.standard_parallel_2.degrees!r} "
            f"+lat_0={self.latitude_of_origin.degrees!r} +lon_0={self.central_meridian.degrees!r} "
            f"+x_0={self.false_easting!r} +y_0={self.false_northing!r} {self._ellps_proj4()}"
        )
