"""
Gauss-Krüger Projection.

Transverse Mercator with unit scale on the central meridian of standard
6° or 3° zones. When no central meridian is fixed, the zone number is
carried in the easting: ``easting = natural + false_easting + zone × 10⁶``,
so coordinates from several zones can live in one dataset.

Zone numbering (longitude λ taken in [0°, 360°)):

- 6° zones: ``n = ⌈λ/6⌉`` (at least 1), central meridian ``6n - 3``
- 3° zones: ``n = ⌊(λ + 1.5)/3⌋`` (0 becomes 120), central meridian ``3n``

Examples
--------
>>> gk = GaussKrueger()
>>> northing, easting = gk.forward(30.0, 117.0)
>>> gk.zone_number(easting)
20
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
    longitude_offset,
)
from geospatial.projections.transverse_mercator import (
    MAX_DELTA_LONGITUDE,
    MAX_LATITUDE,
    tm_forward_series,
    tm_reverse_series,
)

logger = get_logger(__name__)

ZONE_PREFIX = 1_000_000.0
_ZONE_COUNTS = {6.0: 60, 3.0: 120}


def _check_width(width: float) -> float:
    if width not in _ZONE_COUNTS:
        raise InvalidInputError(f"Gauss-Krüger zone width must be 6 or 3 degrees, got {width}")
    return float(width)


def gk_zone_number(longitude: AngleLike, width: float = 6.0) -> int:
    """Zone number of a longitude for 6° or 3° zones."""
    width = _check_width(width)
    lon360 = as_longitude(longitude).degrees % 360.0

    if width == 6.0:
        return max(math.ceil(lon360 / 6.0), 1)

    number = math.floor((lon360 + 1.5) / 3.0)
    return 120 if number == 0 else number


def gk_central_meridian(number: int, width: float = 6.0) -> Longitude:
    """Central meridian of a zone."""
    width = _check_width(width)
    if not 1 <= number <= _ZONE_COUNTS[width]:
        raise InvalidInputError(
            f"Zone {number} does not exist for {width:g}° zones"
        )
    return Longitude(6.0 * number - 3.0 if width == 6.0 else 3.0 * number)


class GaussKrueger(MapProjection):
    """Gauss-Krüger zoned Transverse Mercator.

    Parameters
    ----------
    parameters : ProjectionParameters, optional
        ``zone_width`` (6 or 3), ``scale_factor`` (default 1),
        ``false_easting`` (default 500 000), ``false_northing`` (default 0).
        A given ``central_meridian`` disables zone numbering.
    ellipsoid : Ellipsoid, optional
        Reference ellipsoid (default: process-wide default).

    Raises
    ------
    InvalidInputError
        If the zone width is neither 6 nor 3.
    """

    name = "Gauss-Krueger"
    surface = ProjectionSurface.CYLINDRICAL
    projection_property = ProjectionProperty.CONFORMAL
    orientation = ProjectionOrientation.TRANSVERSE

    defaults = {
        "zone_width": 6.0,
        "scale_factor": 1.0,
        "false_easting": 500_000.0,
        "false_northing": 0.0,
        "latitude_of_origin": 0.0,
    }

    def __init__(
        self,
        parameters: Optional[ProjectionParameters] = None,
        ellipsoid: Optional[Ellipsoid] = None
    ):
        super().__init__(parameters, ellipsoid)
        _check_width(self.zone_width)

    @classmethod
    def for_zone_width(cls, width: float, ellipsoid: Optional[Ellipsoid] = None) -> 'GaussKrueger':
        """Zoned projection with the default false origin."""
        return cls(ProjectionParameters(zone_width=width), ellipsoid)

    @property
    def is_zoned(self) -> bool:
        """Whether the zone number is carried in the easting."""
        return self._parameters.central_meridian is None

    # ------------------------------------------------------------------
    # Zone bookkeeping
    # ------------------------------------------------------------------

    def zone_of(self, longitude: AngleLike) -> int:
        return gk_zone_number(longitude, self.zone_width)

    @staticmethod
    def zone_number(easting: float) -> int:
        """Zone number encoded in an easting (0 for a natural coordinate)."""
        return int(math.floor(easting / ZONE_PREFIX))

    def natural_coordinate(self, easting: float) -> float:
        """Easting with the zone prefix and false easting removed."""
        number = self.zone_number(easting)
        if number > 0:
            return easting - number * ZONE_PREFIX - self.false_easting
        return easting

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def _project(self, lat: Latitude, dl: float) -> Tuple[float, float]:
        if abs(lat.radians) > MAX_LATITUDE:
            raise InvalidInputError(f"Latitude {lat.degrees}° is too close to a pole")
        if abs(dl) > MAX_DELTA_LONGITUDE:
            raise InvalidInputError(
                f"Longitude offset {math.degrees(dl):.6f}° exceeds 9° from the central meridian"
            )
        northing, easting = tm_forward_series(
            self.ellipsoid, lat.radians, dl, self.scale_factor, self.latitude_of_origin.radians
        )
        return northing + self.false_northing, easting + self.false_easting

    def _unproject(self, northing: float, natural_easting: float) -> Tuple[float, float]:
        return tm_reverse_series(
            self.ellipsoid,
            northing - self.false_northing,
            natural_easting,
            self.scale_factor,
            self.latitude_of_origin.radians
        )

    def _forward_in_zone(
        self,
        latitude: AngleLike,
        longitude: AngleLike,
        number: int,
        width: float
    ) -> Tuple[float, float]:
        lon = as_longitude(longitude)
        dl = longitude_offset(lon, gk_central_meridian(number, width))
        northing, easting = self._project(as_latitude(latitude), dl)
        if not 0.0 <= easting < ZONE_PREFIX:
            # The zone prefix could not be read back from such an easting
            raise InvalidInputError(
                f"Easting {easting - self.false_easting:.3f} m is too far from the "
                f"central meridian of zone {number} to carry a zone prefix"
            )
        return northing, easting + number * ZONE_PREFIX

    def _reverse_zoned(self, northing: float, easting: float, width: float) -> Tuple[Latitude, Longitude]:
        number = self.zone_number(easting)
        central_meridian = gk_central_meridian(number, width)
        lat_rad, dl = self._unproject(northing, easting - number * ZONE_PREFIX - self.false_easting)
        return Latitude.from_radians(lat_rad), Longitude(central_meridian.degrees + math.degrees(dl))

    def forward(self, latitude: AngleLike, longitude: AngleLike) -> Tuple[float, float]:
        if not self.is_zoned:
            dl = longitude_offset(as_longitude(longitude), self.central_meridian)
            return self._project(as_latitude(latitude), dl)

        number = self.zone_of(longitude)
        return self._forward_in_zone(latitude, longitude, number, self.zone_width)

    def reverse(self, northing: float, easting: float) -> Tuple[Latitude, Longitude]:
        if not self.is_zoned:
            lat_rad, dl = self._unproject(northing, easting - self.false_easting)
            return (
                Latitude.from_radians(lat_rad),
                Longitude(self.central_meridian.degrees + math.degrees(dl)),
            )
        return self._reverse_zoned(northing, easting, self.zone_width)

    # ------------------------------------------------------------------
    # Zone conversions
    # ------------------------------------------------------------------

    def _require_zoned(self):
        if not self.is_zoned:
            raise InvalidInputError("Zone conversions need zone numbers in the easting")

    def to_neighbor_zone(self, northing: float, easting: float, direction: str) -> Tuple[float, float]:
        """Re-project a zoned coordinate into the adjacent zone.

        Parameters
        ----------
        northing, easting : float
            Coordinate with the zone prefix in the easting.
        direction : str
            'west' or 'east'.

        Returns
        -------
        Tuple[float, float]
            (northing, easting) in the neighbor zone, zone prefix included.
        """
        self._require_zoned()
        step = {"west": -1, "east": 1}.get(direction.lower() if isinstance(direction, str) else None)
        if step is None:
            raise InvalidInputError(f"Direction must be 'west' or 'east', got {direction!r}")

        count = _ZONE_COUNTS[self.zone_width]
        target = (self.zone_number(easting) - 1 + step) % count + 1

        lat, lon = self._reverse_zoned(northing, easting, self.zone_width)
        return self._forward_in_zone(lat, lon, target, self.zone_width)

    def six_to_three_zone(self, northing: float, easting: float) -> Tuple[float, float]:
        """Re-project a 6° zone coordinate into the 3° zone holding it."""
        self._require_zoned()
        lat, lon = self._reverse_zoned(northing, easting, 6.0)
        return self._forward_in_zone(lat, lon, gk_zone_number(lon, 3.0), 3.0)

    def three_to_six_zone(self, northing: float, easting: float) -> Tuple[float, float]:
        """Re-project a 3° zone coordinate into the 6° zone holding it."""
        self._require_zoned()
        lat, lon = self._reverse_zoned(northing, easting, 3.0)
        return self._forward_in_zone(lat, lon, gk_zone_number(lon, 6.0), 6.0)

    @property
    def proj4_string(self) -> str:
        if self.is_zoned:
            # Zone-prefixed eastings have no single-CRS equivalent; describe zone 1
            return self.zone_crs_string(1)
        return (
            f"+proj=tmerc +lat_0={self.latitude_of_origin.degrees!r} "
            f"+lon_0={self.central_meridian.degrees!r} +k={self.scale_factor!r} "
            f"+x_0={self.false_easting!r} +y_0={self.false_northing!r} {self._ellps_proj4()}"
        )

    def zone_crs_string(self, number: int) -> str:
        """PROJ.4 definition of one zone, zone prefix included in the false easting."""
        central_meridian = gk_central_meridian(number, self.zone_width).degrees
        return (
            f"+proj=tmerc +lat_0={self.latitude_of_origin.degrees!r} +lon_0={central_meridian!r} "
            f"+k={self.scale_factor!r} +x_0={self.false_easting + number * ZONE_PREFIX!r} "
            f"+y_0={self.false_northing!r} {self._ellps_proj4()}"
        )
