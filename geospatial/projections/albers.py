"""
Albers Equal-Area Conic (EPSG method 9822).

Preserves area everywhere; shapes are true only along the two standard
parallels. Common for thematic maps of mid-latitude countries.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual, pp. 98-103.
"""

import math
from typing import Optional, Tuple

from common.constants import EPSILON3, EPSILON5
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

MAX_ITERATIONS = 25


class AlbersEqualArea(MapProjection):
    """Albers Equal-Area Conic.

    Required parameters are ``standard_parallel_1`` and
    ``standard_parallel_2``; the origin and false origin default to zero.

    Raises
    ------
    InvalidInputError
        If the standard parallels are symmetric about the equator.
    """

    name = "Albers Equal Area"
    epsg_method = 9822
    surface = ProjectionSurface.CONICAL
    projection_property = ProjectionProperty.EQUAL_AREA
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

    def _q(self, phi: float) -> float:
        """Authalic quantity q(φ) (Snyder 3-12)."""
        sin = math.sin(phi)
        es = self.es
        if es == 0.0:
            return 2.0 * sin
        e = self.e
        return (1 - es) * (
            sin / (1 - es * sin * sin)
            - math.log((1 - e * sin) / (1 + e * sin)) / (2 * e)
        )

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
        q1, q2 = self._q(lat1), self._q(lat2)

        if abs(lat1 - lat2) > EPSILON3:
            self._n = (m1 * m1 - m2 * m2) / (q2 - q1)
        else:
            self._n = math.sin(lat1)

        self._C = m1 * m1 + self._n * q1
        self._rho0 = self._rho(self.latitude_of_origin.radians)
        self._q_pole = self._q(math.pi / 2)

    def _rho(self, phi: float) -> float:
        return self.semi_major * math.sqrt(max(self._C - self._n * self._q(phi), 0.0)) / self._n

    @property
    def n(self) -> float:
        """Cone constant."""
        return self._n

    def _latitude_from_q(self, q: float) -> float:
        if abs(abs(q) - self._q_pole) < 1e-12:
            return math.copysign(math.pi / 2, q)

        phi = math.asin(max(-1.0, min(1.0, q / 2)))
        if self.es == 0.0:
            return phi

        es = self.es
        e = self.e
        for _ in range(MAX_ITERATIONS):
            sin = math.sin(phi)
            es_sin2 = es * sin * sin
            delta = (1 - es_sin2) ** 2 / (2 * math.cos(phi)) * (
                q / (1 - es)
                - sin / (1 - es_sin2)
                + math.log((1 - e * sin) / (1 + e * sin)) / (2 * e)
            )
            phi += delta
            if abs(delta) <= EPSILON5:
                return phi

        logger.error(f"Albers inverse latitude did not converge for q={q}")
        ConvergenceLog().record("albers.reverse", MAX_ITERATIONS, abs(delta), False, {"q": q})
        raise ConvergenceError(
            "Albers equal-area reverse did not converge",
            iterations=MAX_ITERATIONS,
            context={"q": q}
        )

    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        rho = self._rho(as_latitude(latitude).radians)
        theta = self._n * longitude_offset(as_longitude(longitude), self.central_meridian)

        easting = self.false_easting + rho * math.sin(theta)
        northing = self.false_northing + self._rho0 - rho * math.cos(theta)
        return northing, easting

    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        dx = easting - self.false_easting
        dy = self._rho0 - (northing - self.false_northing)

        sign = 1.0 if self._n > 0 else -1.0
        rho = math.hypot(dx, dy)
        theta = math.atan2(sign * dx, sign * dy)

        q = (self._C - (rho * self._n / self.semi_major) ** 2) / self._n
        lat = Latitude.from_radians(self._latitude_from_q(q))
        lon = Longitude(self.central_meridian.degrees + math.degrees(theta / self._n))
        return lat, lon

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=aea +lat_1={self.standard_parallel_1.degrees!r} "
            f"+lat_2={self.standard_parallel_2.degrees!r} "
            f"+lat_0={self.latitude_of_origin.degrees!r} +lon_0={self.central_meridian.degrees!r} "
            f"+x_0={self.false_easting!r} +y_0={self.false_northing!r} {self._ellps_proj4()}"
        )
